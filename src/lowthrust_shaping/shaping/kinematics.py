"""
===============================================================================
LOW-THRUST SHAPING - Shape Kinematics
===============================================================================
Everything that follows from one set of shaping coefficients and mu:
position, azimuth rate, velocity, thrust acceleration and the quadrature
kernels for time of flight and deltaV.

Notation (primes are d/dtheta):

    F1 = phi'^2 + cos^2(phi)
    S  = -r'' + 2 r'^2 / r + r' phi' (phi'' - sin(phi) cos(phi)) / F1 + r F1

    theta_dot  = sqrt(mu / (S r^2))
    theta_ddot = -theta_dot^2 (S' / (2 S) + r' / r)
    dt/dtheta  = sqrt(S r^2 / mu)

A physically realizable shape needs S >= 0 everywhere along the leg.

Velocities and accelerations are in the local (e_r, e_theta, e_phi) frame
unless a method name says Cartesian.  All per-theta methods accept arrays;
the leading axis of a vector result holds the three components.
===============================================================================
"""

import logging

import numpy as np

from lowthrust_shaping.core.errors import InfeasibleShapeError
from lowthrust_shaping.core.frames import spherical_to_cartesian_state
from lowthrust_shaping.shaping.composite_functions import (
    CompositeCoefficients,
    CompositeElevationFunction,
    CompositeRadialFunction,
)

logger = logging.getLogger(__name__)


class ShapeKinematics:
    """
    Kinematic evaluator bound to one coefficient snapshot.

    Parameters
    ----------
    coefficients : CompositeCoefficients
        Shaping coefficients (not copied; the snapshot is immutable).
    gravitational_parameter : float
        Normalized mu of the central body.
    """

    def __init__(self, coefficients: CompositeCoefficients, gravitational_parameter: float):
        self.coefficients = coefficients
        self.gravitational_parameter = float(gravitational_parameter)
        self.radial_function = CompositeRadialFunction(coefficients.radial)
        self.elevation_function = CompositeElevationFunction(coefficients.elevation)

    # ------------------------------------------------------------------ #
    #  Shape and its derivatives
    # ------------------------------------------------------------------ #
    def _radial_terms(self, theta):
        f = self.radial_function
        return (f.evaluate(theta), f.first_derivative(theta),
                f.second_derivative(theta), f.third_derivative(theta))

    def _elevation_terms(self, theta):
        f = self.elevation_function
        return (f.evaluate(theta), f.first_derivative(theta),
                f.second_derivative(theta), f.third_derivative(theta))

    def position_spherical(self, theta) -> np.ndarray:
        """(r, theta, phi)."""
        theta = np.asarray(theta, dtype=np.float64)
        return np.array([self.radial_function.evaluate(theta), theta,
                         self.elevation_function.evaluate(theta)])

    # ------------------------------------------------------------------ #
    #  Time equation
    # ------------------------------------------------------------------ #
    def feasibility_scalar(self, theta):
        """S(theta); negative values mean the shape is not realizable."""
        r, dr, ddr, _ = self._radial_terms(theta)
        phi, dphi, ddphi, _ = self._elevation_terms(theta)
        f1 = dphi ** 2 + np.cos(phi) ** 2
        return (-ddr + 2.0 * dr ** 2 / r
                + dr * dphi * (ddphi - np.sin(phi) * np.cos(phi)) / f1
                + r * f1)

    def feasibility_scalar_derivative(self, theta):
        """dS/dtheta."""
        r, dr, ddr, dddr = self._radial_terms(theta)
        phi, dphi, ddphi, dddphi = self._elevation_terms(theta)

        f1 = dphi ** 2 + np.cos(phi) ** 2
        f2 = ddphi - np.sin(2.0 * phi) / 2.0
        f3 = np.cos(2.0 * phi) + 2.0 * dphi ** 2 + 1.0
        f4 = 2.0 * ddphi - np.sin(2.0 * phi)

        return (f1 * dr - dddr - 2.0 * dr ** 3 / r ** 2 + 4.0 * dr * ddr / r
                + f4 * dphi * r
                + 2.0 * dphi * dr * (dddphi - dphi * np.cos(2.0 * phi)) / f3
                + f2 * dphi * ddr / f1
                + f2 * dr * ddphi / f1
                - 4.0 * f4 * f2 * dphi ** 2 * dr / f3 ** 2)

    def _checked_feasibility_scalar(self, theta, strict: bool):
        scalar = self.feasibility_scalar(theta)
        bad = ~(scalar > 0.0) if strict else ~(scalar >= 0.0)
        if np.any(bad):
            location = float(np.asarray(theta, dtype=np.float64)[bad].flat[0]) \
                if np.ndim(theta) else float(theta)
            logger.debug("Infeasible shape: S = %.6e at theta = %.6f",
                         float(np.min(scalar)), location)
            raise InfeasibleShapeError(
                f"Shape is not curved toward the central body at theta = {location:.6f} "
                f"(S = {float(np.min(scalar)):.6e}).",
                azimuth_angle=location)
        return scalar

    def azimuth_rate(self, theta):
        """d(theta)/dt."""
        scalar = self._checked_feasibility_scalar(theta, strict=True)
        r = self.radial_function.evaluate(theta)
        return np.sqrt(self.gravitational_parameter / (scalar * r ** 2))

    def azimuth_acceleration(self, theta):
        """d^2(theta)/dt^2."""
        scalar = self._checked_feasibility_scalar(theta, strict=True)
        r = self.radial_function.evaluate(theta)
        dr = self.radial_function.first_derivative(theta)
        rate_sq = self.gravitational_parameter / (scalar * r ** 2)
        return -rate_sq * (self.feasibility_scalar_derivative(theta) / (2.0 * scalar) + dr / r)

    # ------------------------------------------------------------------ #
    #  Velocity and acceleration
    # ------------------------------------------------------------------ #
    def velocity_parametrized(self, theta) -> np.ndarray:
        """d(position)/dtheta in the local frame: (r', r cos(phi), r phi')."""
        r = self.radial_function.evaluate(theta)
        dr = self.radial_function.first_derivative(theta)
        phi = self.elevation_function.evaluate(theta)
        dphi = self.elevation_function.first_derivative(theta)
        return np.array([dr, r * np.cos(phi), r * dphi])

    def acceleration_parametrized(self, theta) -> np.ndarray:
        """Local-frame acceleration per unit theta_dot^2."""
        r, dr, ddr, _ = self._radial_terms(theta)
        phi, dphi, ddphi, _ = self._elevation_terms(theta)
        sin_phi, cos_phi = np.sin(phi), np.cos(phi)
        f1 = dphi ** 2 + cos_phi ** 2
        return np.array([
            ddr - r * f1,
            2.0 * dr * cos_phi - 2.0 * r * dphi * sin_phi,
            2.0 * dr * dphi + r * (ddphi + sin_phi * cos_phi),
        ])

    def velocity_spherical(self, theta) -> np.ndarray:
        return self.azimuth_rate(theta) * self.velocity_parametrized(theta)

    def state_spherical(self, theta: float) -> np.ndarray:
        """(r, theta, phi, v_r, v_theta, v_phi) at a single azimuth."""
        return np.concatenate([self.position_spherical(theta),
                               self.velocity_spherical(theta)])

    def normalized_state(self, theta: float) -> np.ndarray:
        """Normalized Cartesian state at a single azimuth."""
        return spherical_to_cartesian_state(self.state_spherical(theta))

    # ------------------------------------------------------------------ #
    #  Thrust
    # ------------------------------------------------------------------ #
    def thrust_acceleration_spherical(self, theta) -> np.ndarray:
        """
        Thrust acceleration in the local frame.

        Total acceleration of the shaped path minus the point-mass gravity
        of the central body.
        """
        rate = self.azimuth_rate(theta)
        rate_dot = self.azimuth_acceleration(theta)
        r = self.radial_function.evaluate(theta)

        thrust = (rate ** 2 * self.acceleration_parametrized(theta)
                  + rate_dot * self.velocity_parametrized(theta))
        thrust[0] = thrust[0] + self.gravitational_parameter / r ** 2
        return thrust

    def normalized_thrust_acceleration(self, theta: float) -> np.ndarray:
        """Thrust acceleration in inertial axes at a single azimuth."""
        local = np.concatenate([self.position_spherical(theta),
                                self.thrust_acceleration_spherical(theta)])
        return spherical_to_cartesian_state(local)[3:]

    def thrust_acceleration_magnitude(self, theta):
        return np.linalg.norm(self.thrust_acceleration_spherical(theta), axis=0)

    def thrust_acceleration_direction(self, theta: float) -> np.ndarray:
        """Unit thrust direction in inertial axes (zero vector for zero thrust)."""
        acceleration = self.normalized_thrust_acceleration(theta)
        magnitude = np.linalg.norm(acceleration)
        if magnitude == 0.0:
            return np.zeros(3)
        return acceleration / magnitude

    # ------------------------------------------------------------------ #
    #  Quadrature kernels
    # ------------------------------------------------------------------ #
    def time_rate(self, theta):
        """dt/dtheta = sqrt(S r^2 / mu)."""
        scalar = self._checked_feasibility_scalar(theta, strict=False)
        r = self.radial_function.evaluate(theta)
        return np.sqrt(scalar * r ** 2 / self.gravitational_parameter)

    def delta_v_rate(self, theta):
        """|a_thrust| dt/dtheta."""
        return self.thrust_acceleration_magnitude(theta) * self.time_rate(theta)
