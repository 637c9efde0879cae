"""
===============================================================================
LOW-THRUST SHAPING - Exponential Sinusoid (Exposin) Leg
===============================================================================
Planar shaping with the exponential sinusoid of Petropoulos & Longuski,

    r(theta) = k0 exp(k1 sin(k2 theta + phi))

tuned through the initial flight-path angle gamma_1 so that the transfer
between two radii over a given swept angle psi takes a required time.

With L = ln(r1 / r2), w = k2 psi and gamma_1 fixed:

    k1   = sign(L + tan(g1) sin(w) / k2)
           * sqrt(((L + tan(g1) sin(w) / k2) / (1 - cos(w)))^2 + tan^2(g1) / k2^2)
    phi  = acos(tan(g1) / (k1 k2))
    k0   = r1 / exp(k1 sin(phi))

Admissible gamma_1 values lie strictly inside

    tan(g1) = k2/2 * (-L cot(w/2) -/+ sqrt(2 (1 - cos w) / k2^4 - L^2))

Along the path, with s = sin(k2 theta + phi):

    tan(gamma)  = k1 k2 cos(k2 theta + phi)
    C           = tan^2(gamma) + k1 k2^2 s + 1
    dt/dtheta   = sqrt(r^3 C / mu)
    |a_thrust|  = mu / r^2 * tan(gamma) / (2 cos(gamma))
                  * (1 / C - k2^2 (1 - 2 k1 s) / C^2)

References
----------
    [1] Izzo, "Lambert's Problem for Exponential Sinusoids", JGCD 29(5), 2006.
    [2] Petropoulos & Longuski, "Shape-Based Algorithm for Automated Design of
        Low-Thrust, Gravity-Assist Trajectories", JSR 41(5), 2004.
===============================================================================
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import pandas as pd

from lowthrust_shaping.core.constants import AU, JULIAN_DAY, TWO_PI
from lowthrust_shaping.core.errors import InfeasibleShapeError
from lowthrust_shaping.core.units import (
    dimensionalize_acceleration,
    dimensionalize_time,
    dimensionalize_velocity,
    normalize_gravitational_parameter,
    normalize_time,
)
from lowthrust_shaping.dynamics.environment import GravityField
from lowthrust_shaping.numerics.quadrature import GaussianQuadrature, QuadratureSettings
from lowthrust_shaping.numerics.root_finding import RootFinderSettings, find_root

logger = logging.getLogger(__name__)

DEFAULT_WINDING_PARAMETER = 1.0 / 12.0


def flight_path_angle_bounds(initial_radius: float, final_radius: float,
                             transfer_angle: float,
                             winding_parameter: float) -> Tuple[float, float]:
    """
    Range of initial flight-path angles admitting an exposin (rad).

    Raises
    ------
    InfeasibleShapeError
        If the geometry admits no exposin for this winding parameter.
    """
    k2 = winding_parameter
    w = k2 * transfer_angle
    log_ratio = np.log(initial_radius / final_radius)

    one_minus_cos = 1.0 - np.cos(w)
    if np.isclose(one_minus_cos, 0.0, atol=1.0e-14):
        raise InfeasibleShapeError(
            f"Winding parameter {k2} times transfer angle {transfer_angle:.6f} is a "
            f"multiple of 2*pi; no exposin exists.")

    discriminant = 2.0 * one_minus_cos / k2 ** 4 - log_ratio ** 2
    if discriminant < 0.0:
        raise InfeasibleShapeError(
            f"Radius ratio {final_radius / initial_radius:.6f} is unreachable over "
            f"{transfer_angle:.6f} rad with winding parameter {k2} "
            f"(discriminant {discriminant:.6e}).")

    centre = -log_ratio / np.tan(w / 2.0)
    root = np.sqrt(discriminant)
    return (float(np.arctan(k2 / 2.0 * (centre - root))),
            float(np.arctan(k2 / 2.0 * (centre + root))))


@dataclass(frozen=True)
class ExposinGeometry:
    """
    One member of the exposin family through two radii, in normalized units.

    Attributes:
        initial_radius, final_radius: Boundary radii (AU).
        transfer_angle: Swept angle psi (rad), revolutions included.
        winding_parameter: k2.
        flight_path_angle: Initial flight-path angle gamma_1 (rad).
        gravitational_parameter: Normalized mu.
    """
    initial_radius: float
    final_radius: float
    transfer_angle: float
    winding_parameter: float
    flight_path_angle: float
    gravitational_parameter: float

    @property
    def dynamic_range(self) -> float:
        """k1."""
        k2 = self.winding_parameter
        w = k2 * self.transfer_angle
        tan_gamma = np.tan(self.flight_path_angle)
        bracket = np.log(self.initial_radius / self.final_radius) + tan_gamma * np.sin(w) / k2
        magnitude = np.sqrt((bracket / (1.0 - np.cos(w))) ** 2 + tan_gamma ** 2 / k2 ** 2)
        return float(np.sign(bracket) * magnitude)

    @property
    def phase(self) -> float:
        """phi."""
        k1 = self.dynamic_range
        if k1 == 0.0:
            return 0.0
        ratio = np.tan(self.flight_path_angle) / (k1 * self.winding_parameter)
        return float(np.arccos(np.clip(ratio, -1.0, 1.0)))

    @property
    def scaling_factor(self) -> float:
        """k0 (AU)."""
        return float(self.initial_radius / np.exp(self.dynamic_range * np.sin(self.phase)))

    def _argument(self, theta):
        return self.winding_parameter * np.asarray(theta, dtype=np.float64) + self.phase

    def radius(self, theta):
        return self.scaling_factor * np.exp(self.dynamic_range * np.sin(self._argument(theta)))

    def tan_flight_path_angle(self, theta):
        return self.dynamic_range * self.winding_parameter * np.cos(self._argument(theta))

    def _time_equation_scalar(self, theta):
        k1, k2 = self.dynamic_range, self.winding_parameter
        scalar = (self.tan_flight_path_angle(theta) ** 2
                  + k1 * k2 ** 2 * np.sin(self._argument(theta)) + 1.0)
        if np.any(scalar <= 0.0):
            raise InfeasibleShapeError(
                f"Exposin time equation is non-positive (min {float(np.min(scalar)):.6e}).")
        return scalar

    def time_rate(self, theta):
        """dt/dtheta."""
        scalar = self._time_equation_scalar(theta)
        return np.sqrt(self.radius(theta) ** 3 * scalar / self.gravitational_parameter)

    def azimuth_rate(self, theta):
        return 1.0 / self.time_rate(theta)

    def thrust_acceleration_magnitude(self, theta):
        """Tangential-direction thrust acceleration (signed, normalized)."""
        k1, k2 = self.dynamic_range, self.winding_parameter
        scalar = self._time_equation_scalar(theta)
        tan_gamma = self.tan_flight_path_angle(theta)
        cos_gamma = np.cos(np.arctan(tan_gamma))
        s = np.sin(self._argument(theta))
        r = self.radius(theta)
        return (self.gravitational_parameter / r ** 2 * tan_gamma / (2.0 * cos_gamma)
                * (1.0 / scalar - k2 ** 2 * (1.0 - 2.0 * k1 * s) / scalar ** 2))

    def delta_v_rate(self, theta):
        return np.abs(self.thrust_acceleration_magnitude(theta)) * self.time_rate(theta)


class ExposinShaping:
    """
    Exposin leg matching a required time of flight.

    Parameters
    ----------
    initial_radius, final_radius : float
        Boundary radii (m).
    transfer_angle : float
        Swept angle psi (rad), revolutions included.
    required_time_of_flight : float
        Required time of flight (s).
    winding_parameter : float, optional
        k2 (default 1/12).
    gravitational_parameter : float, optional
        mu of the central body (m^3/s^2, default Sun).
    root_finder_settings, quadrature_settings : optional
        Numerics settings.
    bound_margin : float, optional
        Fraction of the admissible gamma range excluded at each end of the
        search interval.
    """

    def __init__(self, initial_radius: float, final_radius: float, transfer_angle: float,
                 required_time_of_flight: float,
                 winding_parameter: float = DEFAULT_WINDING_PARAMETER,
                 gravitational_parameter: Optional[float] = None,
                 root_finder_settings: Optional[RootFinderSettings] = None,
                 quadrature_settings: Optional[QuadratureSettings] = None,
                 bound_margin: float = 1.0e-6):
        if initial_radius <= 0.0 or final_radius <= 0.0:
            raise ValueError("Boundary radii must be positive.")
        if transfer_angle <= 0.0:
            raise ValueError(f"Transfer angle must be positive, got {transfer_angle}")
        if required_time_of_flight <= 0.0:
            raise ValueError(
                f"Required time of flight must be positive, got {required_time_of_flight}")
        if winding_parameter <= 0.0:
            raise ValueError(f"Winding parameter must be positive, got {winding_parameter}")
        if not 0.0 <= bound_margin < 0.5:
            raise ValueError("bound_margin must be in [0, 0.5).")

        self.gravitational_parameter = (GravityField.sun().mu if gravitational_parameter is None
                                        else float(gravitational_parameter))
        self.initial_radius = float(initial_radius) / AU
        self.final_radius = float(final_radius) / AU
        self.transfer_angle = float(transfer_angle)
        self.winding_parameter = float(winding_parameter)
        self.required_time_of_flight = float(required_time_of_flight)
        self.normalized_gravitational_parameter = normalize_gravitational_parameter(
            self.gravitational_parameter)
        self.quadrature = GaussianQuadrature(0.0, quadrature_settings)
        self.root_finder_settings = root_finder_settings or RootFinderSettings()

        self.lower_bound_flight_path_angle, self.upper_bound_flight_path_angle = \
            flight_path_angle_bounds(self.initial_radius, self.final_radius,
                                     self.transfer_angle, self.winding_parameter)
        span = self.upper_bound_flight_path_angle - self.lower_bound_flight_path_angle
        lower = self.lower_bound_flight_path_angle + bound_margin * span
        upper = self.upper_bound_flight_path_angle - bound_margin * span

        normalized_tof = normalize_time(required_time_of_flight)

        def residual(gamma):
            return normalized_tof - self.quadrature.integrate(
                self.geometry_for(gamma).time_rate, self.transfer_angle)

        gamma = find_root(residual, lower, upper, 0.5 * (lower + upper),
                          self.root_finder_settings)
        self.geometry = self.geometry_for(gamma)

        logger.info("Exposin leg: psi = %.4f rad, k2 = %.5f, gamma_1 = %.6f rad "
                    "(bounds %.6f .. %.6f)", self.transfer_angle, self.winding_parameter,
                    gamma, self.lower_bound_flight_path_angle,
                    self.upper_bound_flight_path_angle)

    @classmethod
    def from_boundary_states(cls, initial_state: np.ndarray, final_state: np.ndarray,
                             required_time_of_flight: float, number_of_revolutions: int = 0,
                             **kwargs) -> "ExposinShaping":
        """
        Build a leg from Cartesian states [m, m/s].

        Only the radii and the swept angle in the departure orbit plane are
        used; the boundary velocities are not matched.
        """
        if number_of_revolutions < 0:
            raise ValueError(f"Number of revolutions must be >= 0, got {number_of_revolutions}")
        r1 = np.asarray(initial_state, dtype=np.float64)[:3]
        v1 = np.asarray(initial_state, dtype=np.float64)[3:]
        r2 = np.asarray(final_state, dtype=np.float64)[:3]

        normal = np.cross(r1, v1)
        normal = normal / np.linalg.norm(normal)
        swept = np.arctan2(np.dot(normal, np.cross(r1, r2)), np.dot(r1, r2)) % TWO_PI
        transfer_angle = swept + TWO_PI * number_of_revolutions

        return cls(float(np.linalg.norm(r1)), float(np.linalg.norm(r2)), transfer_angle,
                   required_time_of_flight, **kwargs)

    def geometry_for(self, flight_path_angle: float) -> ExposinGeometry:
        return ExposinGeometry(self.initial_radius, self.final_radius, self.transfer_angle,
                               self.winding_parameter, float(flight_path_angle),
                               self.normalized_gravitational_parameter)

    @property
    def flight_path_angle(self) -> float:
        return self.geometry.flight_path_angle

    def compute_time_of_flight(self) -> float:
        return dimensionalize_time(
            self.quadrature.integrate(self.geometry.time_rate, self.transfer_angle))

    def compute_delta_v(self) -> float:
        return float(dimensionalize_velocity(
            self.quadrature.integrate(self.geometry.delta_v_rate, self.transfer_angle)))

    def compute_radius_at_azimuth(self, azimuth: float) -> float:
        return float(self.geometry.radius(azimuth) * AU)

    def compute_thrust_acceleration_magnitude_at_azimuth(self, azimuth: float) -> float:
        return float(dimensionalize_acceleration(
            abs(self.geometry.thrust_acceleration_magnitude(azimuth))))

    def trajectory_table(self, number_of_points: int = 200) -> pd.DataFrame:
        """Sampled leg in its own plane (x along the departure radius)."""
        if number_of_points < 2:
            raise ValueError("Need at least two sample points.")
        azimuths = np.linspace(0.0, self.transfer_angle, number_of_points)
        radii = self.geometry.radius(azimuths) * AU
        times = np.array([dimensionalize_time(
            self.quadrature.integrate(self.geometry.time_rate, azimuth))
            for azimuth in azimuths])
        return pd.DataFrame({
            'azimuth': azimuths,
            'time': times,
            'time_days': times / JULIAN_DAY,
            'radius': radii,
            'x': radii * np.cos(azimuths),
            'y': radii * np.sin(azimuths),
            'thrust_acceleration': dimensionalize_acceleration(
                np.abs(self.geometry.thrust_acceleration_magnitude(azimuths))),
        })
