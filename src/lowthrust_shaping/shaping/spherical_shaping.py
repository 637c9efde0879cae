"""
===============================================================================
LOW-THRUST SHAPING - Spherical Shaping Leg
===============================================================================
A single low-thrust leg between two fixed Cartesian states, shaped with the
composite radial (inverse-radius) and elevation functions of the azimuth
angle, and tuned to a required time of flight.

Construction runs the whole design:

    1. normalize the boundary states (AU, Julian years)
    2. spherical + azimuth-parametrized boundary states, unwrapped azimuths
    3. boundary-condition system assembled, solved at the initial guess
    4. root search on the free coefficient to match the time of flight
    5. time -> azimuth map on the converged shape

Afterwards the leg is read-only.  Every public query takes and returns SI
units (m, s, m/s, m/s^2) unless its name says "normalized".

Usage:
    leg = SphericalShaping(departure_state, arrival_state,
                           ShapeParameters(required_time_of_flight=tof_s))
    dv = leg.compute_delta_v()
===============================================================================
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple

import numpy as np
import pandas as pd

from lowthrust_shaping.core.constants import DEFAULT_TIME_MAP_STEP, JULIAN_DAY
from lowthrust_shaping.core.errors import InfeasibleShapeError
from lowthrust_shaping.core.units import (
    dimensionalize_acceleration,
    dimensionalize_state,
    dimensionalize_time,
    dimensionalize_velocity,
    normalize_gravitational_parameter,
    normalize_state,
    normalize_time,
)
from lowthrust_shaping.dynamics.environment import GravityField
from lowthrust_shaping.numerics.interpolation import InterpolatorSettings
from lowthrust_shaping.numerics.quadrature import GaussianQuadrature, QuadratureSettings
from lowthrust_shaping.numerics.root_finding import RootFinderSettings
from lowthrust_shaping.shaping.boundary_conditions import (
    BoundaryConditionSolver,
    boundary_states_for_leg,
)
from lowthrust_shaping.shaping.composite_functions import CompositeCoefficients
from lowthrust_shaping.shaping.kinematics import ShapeKinematics
from lowthrust_shaping.shaping.time_azimuth_map import TimeAzimuthMap
from lowthrust_shaping.shaping.time_of_flight import TimeOfFlightIterator

logger = logging.getLogger(__name__)

GravitationalParameterLookup = Callable[[str], float]


@dataclass(frozen=True)
class ShapeParameters:
    """
    Design parameters of a spherical-shaping leg.

    Attributes:
        required_time_of_flight: Required time of flight (s).
        number_of_revolutions: Complete revolutions about the central body.
        initial_value_free_coefficient: Starting guess for the search.
        lower_bound_free_coefficient: Lower end of the search interval.
        upper_bound_free_coefficient: Upper end of the search interval.
        root_finder: Root-finder settings.
        quadrature: Quadrature settings.
        time_map_step: Nominal time spacing (s) of the time-azimuth samples.
        interpolator: Time-azimuth spline settings.
    """
    required_time_of_flight: float
    number_of_revolutions: int = 0
    initial_value_free_coefficient: float = 0.0
    lower_bound_free_coefficient: float = -1.0e-2
    upper_bound_free_coefficient: float = 1.0e-2
    root_finder: RootFinderSettings = field(default_factory=RootFinderSettings)
    quadrature: QuadratureSettings = field(default_factory=QuadratureSettings)
    time_map_step: float = DEFAULT_TIME_MAP_STEP
    interpolator: InterpolatorSettings = field(default_factory=InterpolatorSettings)

    def __post_init__(self):
        if self.required_time_of_flight <= 0.0:
            raise ValueError(
                f"Required time of flight must be positive, got {self.required_time_of_flight}")
        if self.number_of_revolutions < 0:
            raise ValueError(
                f"Number of revolutions must be >= 0, got {self.number_of_revolutions}")
        if not self.lower_bound_free_coefficient < self.upper_bound_free_coefficient:
            raise ValueError("Lower free-coefficient bound must be below the upper bound.")
        if self.time_map_step <= 0.0:
            raise ValueError(f"Time-map step must be positive, got {self.time_map_step}")


class SphericalShaping:
    """
    Spherically shaped low-thrust leg.

    Parameters
    ----------
    initial_state : np.ndarray
        (6,) departure Cartesian state [m, m/s] relative to the central body.
    final_state : np.ndarray
        (6,) arrival Cartesian state [m, m/s].
    parameters : ShapeParameters
        Time of flight, revolutions, search and numerics settings.
    central_body : str, optional
        Central body name passed to ``gravitational_parameter_lookup``.
    gravitational_parameter_lookup : callable, optional
        name -> mu [m^3/s^2].  Defaults to the GravityField table.

    Raises
    ------
    SingularBoundarySystemError, InfeasibleShapeError,
    RootFindingNonconvergenceError, FreeCoefficientBoundsError
        Propagated from the design steps.
    """

    def __init__(self, initial_state: np.ndarray, final_state: np.ndarray,
                 parameters: ShapeParameters, central_body: str = "Sun",
                 gravitational_parameter_lookup: Optional[GravitationalParameterLookup] = None):
        lookup = gravitational_parameter_lookup or GravityField.gravitational_parameter

        self.parameters = parameters
        self.central_body = central_body
        self.gravitational_parameter = float(lookup(central_body))
        self.normalized_gravitational_parameter = normalize_gravitational_parameter(
            self.gravitational_parameter)
        self.normalized_required_time_of_flight = normalize_time(
            parameters.required_time_of_flight)

        self.initial_boundary_state, self.final_boundary_state = boundary_states_for_leg(
            normalize_state(initial_state), normalize_state(final_state),
            parameters.number_of_revolutions)

        logger.info("Spherical shaping about %s: theta %.4f -> %.4f rad, %d revolution(s), "
                    "TOF %.2f days", central_body, self.initial_azimuth, self.final_azimuth,
                    parameters.number_of_revolutions,
                    parameters.required_time_of_flight / JULIAN_DAY)

        self.boundary_solver = BoundaryConditionSolver(
            self.initial_boundary_state, self.final_boundary_state,
            self.normalized_gravitational_parameter)

        self.quadrature = GaussianQuadrature(self.initial_azimuth, parameters.quadrature)
        self._log_initial_guess(
            self.boundary_solver.solve(parameters.initial_value_free_coefficient))

        self.iterator = TimeOfFlightIterator(
            self.boundary_solver, self.normalized_required_time_of_flight, self.quadrature,
            parameters.lower_bound_free_coefficient, parameters.upper_bound_free_coefficient,
            parameters.root_finder)
        self.coefficients = self.iterator.iterate(parameters.initial_value_free_coefficient)
        self.kinematics = ShapeKinematics(self.coefficients,
                                          self.normalized_gravitational_parameter)

        self.time_map = TimeAzimuthMap(
            self.kinematics, self.quadrature, self.initial_azimuth, self.final_azimuth,
            self.compute_normalized_time_of_flight(),
            normalize_time(parameters.time_map_step), parameters.interpolator)

    def _log_initial_guess(self, coefficients: CompositeCoefficients) -> None:
        kinematics = ShapeKinematics(coefficients, self.normalized_gravitational_parameter)
        try:
            time_of_flight = self.quadrature.integrate(kinematics.time_rate, self.final_azimuth)
        except InfeasibleShapeError as exc:
            logger.warning("Initial guess c2 = %.6e gives an infeasible shape (theta = %s)",
                           coefficients.free_coefficient, exc.azimuth_angle)
            return
        logger.info("Initial guess c2 = %.6e: TOF %.3f days (required %.3f days)",
                    coefficients.free_coefficient,
                    dimensionalize_time(time_of_flight) / JULIAN_DAY,
                    self.parameters.required_time_of_flight / JULIAN_DAY)

    # ------------------------------------------------------------------ #
    #  Geometry and coefficients
    # ------------------------------------------------------------------ #
    @property
    def initial_azimuth(self) -> float:
        return self.initial_boundary_state.azimuth

    @property
    def final_azimuth(self) -> float:
        return self.final_boundary_state.azimuth

    @property
    def travelled_azimuth(self) -> float:
        return self.final_azimuth - self.initial_azimuth

    @property
    def radial_coefficients(self) -> np.ndarray:
        return self.coefficients.radial

    @property
    def elevation_coefficients(self) -> np.ndarray:
        return self.coefficients.elevation

    @property
    def free_coefficient(self) -> float:
        return self.coefficients.free_coefficient

    # ------------------------------------------------------------------ #
    #  Integrated quantities
    # ------------------------------------------------------------------ #
    def compute_normalized_time_of_flight(self) -> float:
        return self.quadrature.integrate(self.kinematics.time_rate, self.final_azimuth)

    def compute_time_of_flight(self) -> float:
        """Time of flight of the shape (s)."""
        return dimensionalize_time(self.compute_normalized_time_of_flight())

    def compute_delta_v(self) -> float:
        """Integral of the thrust-acceleration magnitude over time (m/s)."""
        normalized = self.quadrature.integrate(self.kinematics.delta_v_rate, self.final_azimuth)
        return float(dimensionalize_velocity(normalized))

    # ------------------------------------------------------------------ #
    #  Time <-> azimuth
    # ------------------------------------------------------------------ #
    def convert_time_to_azimuth(self, time: float) -> float:
        """Azimuth (rad) reached *time* seconds after departure."""
        return self.time_map.angle_at_time(normalize_time(time))

    def convert_azimuth_to_time(self, azimuth: float) -> float:
        """Seconds after departure at which *azimuth* is reached."""
        return dimensionalize_time(self.time_map.time_at_angle(azimuth))

    # ------------------------------------------------------------------ #
    #  State and thrust queries
    # ------------------------------------------------------------------ #
    def compute_state_at_azimuth(self, azimuth: float) -> np.ndarray:
        """Cartesian state [m, m/s] at *azimuth*."""
        return dimensionalize_state(self.kinematics.normalized_state(azimuth))

    def compute_state_at_time(self, time: float) -> np.ndarray:
        return self.compute_state_at_azimuth(self.convert_time_to_azimuth(time))

    def compute_thrust_acceleration_at_azimuth(self, azimuth: float) -> np.ndarray:
        """Cartesian thrust acceleration [m/s^2] at *azimuth*."""
        return dimensionalize_acceleration(
            self.kinematics.normalized_thrust_acceleration(azimuth))

    def compute_thrust_acceleration_at_time(self, time: float) -> np.ndarray:
        return self.compute_thrust_acceleration_at_azimuth(self.convert_time_to_azimuth(time))

    def compute_thrust_acceleration_magnitude_at_azimuth(self, azimuth: float) -> float:
        return float(dimensionalize_acceleration(
            self.kinematics.thrust_acceleration_magnitude(azimuth)))

    def compute_thrust_acceleration_magnitude_at_time(self, time: float) -> float:
        return self.compute_thrust_acceleration_magnitude_at_azimuth(
            self.convert_time_to_azimuth(time))

    def compute_thrust_acceleration_direction_at_azimuth(self, azimuth: float) -> np.ndarray:
        return self.kinematics.thrust_acceleration_direction(azimuth)

    def compute_thrust_acceleration_direction_at_time(self, time: float) -> np.ndarray:
        return self.compute_thrust_acceleration_direction_at_azimuth(
            self.convert_time_to_azimuth(time))

    def compute_midpoint_state(self) -> Tuple[float, np.ndarray]:
        """(time [s], Cartesian state [m, m/s]) at half the time of flight."""
        half_time = 0.5 * self.compute_time_of_flight()
        return half_time, self.compute_state_at_time(half_time)

    # ------------------------------------------------------------------ #
    #  Tabulation
    # ------------------------------------------------------------------ #
    def trajectory_table(self, number_of_points: int = 200) -> pd.DataFrame:
        """
        Sample the leg uniformly in azimuth.

        Returns
        -------
        pd.DataFrame
            Columns: azimuth, time [s], time_days, x, y, z [m], vx, vy, vz [m/s],
            ax, ay, az, thrust_acceleration [m/s^2].
        """
        if number_of_points < 2:
            raise ValueError("Need at least two sample points.")

        azimuths = np.linspace(self.initial_azimuth, self.final_azimuth, number_of_points)
        rows = []
        for azimuth in azimuths:
            state = self.compute_state_at_azimuth(azimuth)
            thrust = self.compute_thrust_acceleration_at_azimuth(azimuth)
            time = self.convert_azimuth_to_time(azimuth)
            rows.append({
                'azimuth': azimuth,
                'time': time,
                'time_days': time / JULIAN_DAY,
                'x': state[0], 'y': state[1], 'z': state[2],
                'vx': state[3], 'vy': state[4], 'vz': state[5],
                'ax': thrust[0], 'ay': thrust[1], 'az': thrust[2],
                'thrust_acceleration': float(np.linalg.norm(thrust)),
            })
        return pd.DataFrame(rows)

    def summary(self) -> dict:
        return {
            'central_body': self.central_body,
            'number_of_revolutions': self.parameters.number_of_revolutions,
            'initial_azimuth': self.initial_azimuth,
            'final_azimuth': self.final_azimuth,
            'free_coefficient': self.free_coefficient,
            'time_of_flight_days': self.compute_time_of_flight() / JULIAN_DAY,
            'delta_v': self.compute_delta_v(),
        }
