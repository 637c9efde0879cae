"""
===============================================================================
LOW-THRUST SHAPING - Shaping Module
===============================================================================
Shape-based design of single low-thrust legs.

Submodules:
    composite_functions  -- Radial / elevation basis combinations
    boundary_conditions  -- Boundary states and the 10x10 coefficient solve
    kinematics           -- Velocity, thrust and quadrature kernels of a shape
    time_of_flight       -- Free-coefficient search on the time of flight
    time_azimuth_map     -- Time -> azimuth lookup of a converged shape
    spherical_shaping    -- SphericalShaping leg
    exposin              -- Planar exponential-sinusoid leg
===============================================================================
"""

from lowthrust_shaping.shaping.composite_functions import (
    CompositeCoefficients,
    CompositeElevationFunction,
    CompositeRadialFunction,
)
from lowthrust_shaping.shaping.exposin import ExposinShaping
from lowthrust_shaping.shaping.spherical_shaping import ShapeParameters, SphericalShaping

__all__ = [
    'CompositeCoefficients',
    'CompositeRadialFunction',
    'CompositeElevationFunction',
    'ShapeParameters',
    'SphericalShaping',
    'ExposinShaping',
]
