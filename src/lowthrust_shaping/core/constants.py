"""
===============================================================================
LOW-THRUST SHAPING - Physical and Astronomical Constants
===============================================================================
Central repository for the constants used by the shaping engine.  SI units
throughout (meters, seconds, radians) unless a name says otherwise.

The reference length and time used to non-dimensionalize every shaping
computation are the astronomical unit and the Julian year.  Gravitational
parameters follow the IAU 2015 / DE430 values.
===============================================================================
"""

import numpy as np


# =============================================================================
# MATHEMATICAL CONSTANTS
# =============================================================================
PI = np.pi
TWO_PI = 2.0 * np.pi
DEG2RAD = PI / 180.0

# =============================================================================
# REFERENCE SCALES (non-dimensionalization)
# =============================================================================
AU = 1.495978707e11                    # Astronomical Unit (m)
JULIAN_DAY = 86400.0                   # s
JULIAN_YEAR = 365.25 * JULIAN_DAY      # s

# =============================================================================
# GRAVITATIONAL PARAMETERS (m^3/s^2)
# =============================================================================
SUN_MU = 1.32712440018e20
MERCURY_MU = 2.2031780e13
VENUS_MU = 3.24858592e14
EARTH_MU = 3.986004418e14
MOON_MU = 4.9048695e12
MARS_MU = 4.282837e13
JUPITER_MU = 1.26686534e17
SATURN_MU = 3.7931187e16
URANUS_MU = 5.793939e15
NEPTUNE_MU = 6.836529e15

# =============================================================================
# SHAPING DEFAULTS
# =============================================================================
# Number of terms in the radial and elevation composite functions.
RADIAL_FUNCTION_TERMS = 7
ELEVATION_FUNCTION_TERMS = 4

# Index of the radial coefficient left free by the boundary conditions.
FREE_COEFFICIENT_INDEX = 2

# Gauss-Legendre nodes used for the TOF and deltaV integrals.
DEFAULT_QUADRATURE_ORDER = 16

# Nominal step (s) used to sample the time-azimuth map.
DEFAULT_TIME_MAP_STEP = JULIAN_DAY
