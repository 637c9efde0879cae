"""
===============================================================================
LOW-THRUST SHAPING - Core Module
===============================================================================
Shared building blocks for the shaping engine.

Submodules:
    constants -- Physical constants, reference scales, shaping defaults
    units     -- Normalization to AU / Julian-year units and back
    frames    -- Spherical <-> Cartesian state conversions
    errors    -- ShapingError hierarchy
===============================================================================
"""
