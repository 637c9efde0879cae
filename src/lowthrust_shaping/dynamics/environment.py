"""
===============================================================================
LOW-THRUST SHAPING - Central-Body Gravity
===============================================================================
Point-mass gravity of the central body of a shaped leg, and the name ->
gravitational-parameter lookup used when a leg is constructed from a body
name.

    - GravityField : point-mass gravity of one body, with factories for the
                     Sun and the planets

SI units throughout (m, s).
===============================================================================
"""

import numpy as np
from numpy.typing import NDArray

from lowthrust_shaping.core.constants import (
    EARTH_MU, JUPITER_MU, MARS_MU, MERCURY_MU, MOON_MU, NEPTUNE_MU,
    SATURN_MU, SUN_MU, URANUS_MU, VENUS_MU,
)

# Gravitational parameters (m^3/s^2) by body name (case-insensitive lookup).
GRAVITATIONAL_PARAMETERS = {
    'sun': SUN_MU,
    'mercury': MERCURY_MU,
    'venus': VENUS_MU,
    'earth': EARTH_MU,
    'moon': MOON_MU,
    'mars': MARS_MU,
    'jupiter': JUPITER_MU,
    'saturn': SATURN_MU,
    'uranus': URANUS_MU,
    'neptune': NEPTUNE_MU,
}


# ============================================================================
#  GRAVITY FIELD (central body, point mass)
# ============================================================================

class GravityField:
    """
    Point-mass gravitational acceleration of a central body.

    Parameters
    ----------
    mu : float
        Gravitational parameter of the central body (m^3/s^2).
    name : str, optional
        Body name, for logging and plot labels.
    """

    def __init__(self, mu: float, name: str = "body") -> None:
        if mu <= 0.0:
            raise ValueError(f"Gravitational parameter must be positive, got {mu}")
        self.mu = mu
        self.name = name

    # ------------------------------------------------------------------ #
    #  Factory class-methods for specific bodies
    # ------------------------------------------------------------------ #
    @classmethod
    def from_name(cls, name: str) -> "GravityField":
        """Return a GravityField for a named body (see GRAVITATIONAL_PARAMETERS)."""
        return cls(mu=cls.gravitational_parameter(name), name=name)

    @classmethod
    def sun(cls) -> "GravityField":
        """Return a GravityField configured for the Sun."""
        return cls(mu=SUN_MU, name="Sun")

    @classmethod
    def earth(cls) -> "GravityField":
        """Return a GravityField configured for Earth."""
        return cls(mu=EARTH_MU, name="Earth")

    @staticmethod
    def gravitational_parameter(name: str) -> float:
        """
        Gravitational parameter of a named body.

        Raises
        ------
        KeyError
            If the body is not tabulated.
        """
        try:
            return GRAVITATIONAL_PARAMETERS[name.strip().lower()]
        except KeyError:
            raise KeyError(
                f"Unknown central body '{name}'. "
                f"Known bodies: {sorted(GRAVITATIONAL_PARAMETERS)}") from None

    # ------------------------------------------------------------------ #
    def acceleration(self, position: NDArray) -> NDArray:
        """
        Gravitational acceleration at *position*.

        Parameters
        ----------
        position : ndarray, shape (3,)
            Position relative to the body centre, in the same length unit as
            ``mu``.

        Returns
        -------
        ndarray, shape (3,)
            a = -mu / r^3 * r_vec
        """
        position = np.asarray(position, dtype=np.float64)
        r = np.linalg.norm(position)
        if r == 0.0:
            raise ValueError("Position is at the origin; gravity is undefined.")
        return -self.mu / r ** 3 * position

    def circular_orbit_state(self, radius: float, azimuth: float = 0.0,
                             inclination: float = 0.0) -> NDArray:
        """
        Cartesian state on a prograde circular orbit.

        The orbit plane is the x-y plane rotated about +x by *inclination*;
        *azimuth* is the argument of latitude measured from +x.

        Parameters
        ----------
        radius : float
            Orbit radius (m).
        azimuth : float, optional
            Argument of latitude (rad).
        inclination : float, optional
            Inclination about the x axis (rad).

        Returns
        -------
        ndarray, shape (6,)
            Position (m) and velocity (m/s).
        """
        if radius <= 0.0:
            raise ValueError(f"Orbit radius must be positive, got {radius}")
        speed = np.sqrt(self.mu / radius)
        cu, su = np.cos(azimuth), np.sin(azimuth)
        ci, si = np.cos(inclination), np.sin(inclination)
        position = radius * np.array([cu, su * ci, su * si])
        velocity = speed * np.array([-su, cu * ci, cu * si])
        return np.concatenate([position, velocity])
