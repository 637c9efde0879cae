"""
===============================================================================
LOW-THRUST SHAPING
===============================================================================
Shape-based preliminary design of low-thrust trajectories: spherical shaping
with composite radial / elevation functions tuned to a required time of
flight, plus a planar exponential-sinusoid leg for comparison.

Subpackages:
    core           -- Constants, units, frames, errors
    numerics       -- Quadrature, root finding, interpolation
    shaping        -- Shaping functions, boundary solve, legs
    dynamics       -- Central-body gravity and re-propagation
    visualization  -- Plots
===============================================================================
"""

__version__ = "0.1.0"
