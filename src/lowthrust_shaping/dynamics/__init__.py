"""
===============================================================================
LOW-THRUST SHAPING - Dynamics Module
===============================================================================
Central-body dynamics used to set up and check shaped legs.

Submodules:
    environment  -- Point-mass gravity and the body -> mu lookup
    propagation  -- Forward/backward re-propagation from the leg midpoint
===============================================================================
"""
