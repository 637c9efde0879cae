"""
===============================================================================
LOW-THRUST SHAPING - Numerics Module
===============================================================================
Numerical services used by the shaping legs.

Submodules:
    quadrature     -- Fixed-order Gauss-Legendre integration
    root_finding   -- Bracketed / secant scalar root search
    interpolation  -- B-spline interpolation with strict domain checks
===============================================================================
"""

from lowthrust_shaping.numerics.interpolation import (
    InterpolatorSettings,
    OneDimensionalInterpolator,
)
from lowthrust_shaping.numerics.quadrature import GaussianQuadrature, QuadratureSettings
from lowthrust_shaping.numerics.root_finding import RootFinderSettings, find_root

__all__ = [
    'GaussianQuadrature',
    'QuadratureSettings',
    'RootFinderSettings',
    'find_root',
    'InterpolatorSettings',
    'OneDimensionalInterpolator',
]
