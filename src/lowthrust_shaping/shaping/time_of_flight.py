"""
===============================================================================
LOW-THRUST SHAPING - Time-of-Flight Iteration
===============================================================================
Tunes the free radial coefficient until the quadrature time of flight of the
shape equals the required one.

Each trial value gets its own coefficient snapshot and kinematic evaluator;
nothing is shared between trials except the (immutable) boundary solver and
quadrature rule.
===============================================================================
"""

import logging
from enum import Enum
from typing import Optional

from lowthrust_shaping.core.errors import (
    FreeCoefficientBoundsError,
    InfeasibleShapeError,
    RootFindingNonconvergenceError,
)
from lowthrust_shaping.numerics.quadrature import GaussianQuadrature
from lowthrust_shaping.numerics.root_finding import RootFinderSettings, find_root
from lowthrust_shaping.shaping.boundary_conditions import BoundaryConditionSolver
from lowthrust_shaping.shaping.composite_functions import CompositeCoefficients
from lowthrust_shaping.shaping.kinematics import ShapeKinematics

logger = logging.getLogger(__name__)

MAX_BRACKET_CONTRACTIONS = 40


class SearchState(Enum):
    SEARCHING = "searching"
    CONVERGED = "converged"


class TimeOfFlightIterator:
    """
    Root search on  required_tof - tof(c2) = 0.

    Parameters
    ----------
    boundary_solver : BoundaryConditionSolver
        Gives the coefficients for any trial c2.
    required_time_of_flight : float
        Normalized required time of flight.
    quadrature : GaussianQuadrature
        Rule bound to the initial azimuth.
    lower_bound, upper_bound : float
        Admissible range of the free coefficient.
    root_finder_settings : RootFinderSettings, optional
        Method and tolerances.
    """

    def __init__(self, boundary_solver: BoundaryConditionSolver,
                 required_time_of_flight: float,
                 quadrature: GaussianQuadrature,
                 lower_bound: float, upper_bound: float,
                 root_finder_settings: Optional[RootFinderSettings] = None):
        if required_time_of_flight <= 0.0:
            raise ValueError(
                f"Required time of flight must be positive, got {required_time_of_flight}")
        if not lower_bound < upper_bound:
            raise ValueError(
                f"Free-coefficient bounds [{lower_bound}, {upper_bound}] are empty.")

        self.boundary_solver = boundary_solver
        self.required_time_of_flight = float(required_time_of_flight)
        self.quadrature = quadrature.with_lower_limit(boundary_solver.initial_state.azimuth)
        self.lower_bound = float(lower_bound)
        self.upper_bound = float(upper_bound)
        self.root_finder_settings = root_finder_settings or RootFinderSettings()

        self.state = SearchState.SEARCHING
        self.number_of_evaluations = 0
        self.converged_free_coefficient: Optional[float] = None
        self.converged_coefficients: Optional[CompositeCoefficients] = None

    @property
    def final_azimuth(self) -> float:
        return self.boundary_solver.final_state.azimuth

    def kinematics_for(self, free_coefficient: float) -> ShapeKinematics:
        coefficients = self.boundary_solver.solve(free_coefficient)
        return ShapeKinematics(coefficients, self.boundary_solver.gravitational_parameter)

    def time_of_flight(self, free_coefficient: float) -> float:
        """Normalized quadrature time of flight for a trial c2."""
        kinematics = self.kinematics_for(free_coefficient)
        return self.quadrature.integrate(kinematics.time_rate, self.final_azimuth)

    def objective(self, free_coefficient: float) -> float:
        """required - computed time of flight."""
        if not self.lower_bound <= free_coefficient <= self.upper_bound:
            logger.warning("Trial free coefficient %.6e outside [%.6e, %.6e]",
                           free_coefficient, self.lower_bound, self.upper_bound)
            raise FreeCoefficientBoundsError(
                f"Free coefficient {free_coefficient!r} outside bounds "
                f"[{self.lower_bound!r}, {self.upper_bound!r}].")

        self.number_of_evaluations += 1
        residual = self.required_time_of_flight - self.time_of_flight(free_coefficient)
        logger.debug("Trial %d: c2 = %.12e, TOF residual = %.6e",
                     self.number_of_evaluations, free_coefficient, residual)
        return residual

    def feasible_bracket_end(self, end: float, anchor: float) -> float:
        """
        Move a bracket end toward ``anchor`` by halving until its trial shape
        is feasible.

        Raises
        ------
        RootFindingNonconvergenceError
            No feasible trial was found within MAX_BRACKET_CONTRACTIONS
            halvings (the anchor itself included).
        """
        for _ in range(MAX_BRACKET_CONTRACTIONS):
            try:
                self.time_of_flight(end)
                return end
            except InfeasibleShapeError as exc:
                logger.warning("Bracket end c2 = %.6e is infeasible (theta = %s); "
                               "contracting toward %.6e", end, exc.azimuth_angle, anchor)
                if end == anchor:
                    break
                end = 0.5 * (end + anchor)
        raise RootFindingNonconvergenceError(
            f"No feasible free coefficient between {end!r} and {anchor!r}.")

    def iterate(self, initial_guess: float) -> CompositeCoefficients:
        """
        Run the search and return the converged coefficient snapshot.

        With a bracketed method, an infeasible bracket end is contracted toward
        the initial guess (clipped to the bounds) before the search starts.
        An infeasible trial inside the bracket still ends the search.

        Raises
        ------
        RootFindingNonconvergenceError
            The requirement is not bracketed, no feasible bracket exists or
            the tolerance was not met.
        InfeasibleShapeError
            A trial shape inside the bracket was not realizable.
        """
        self.state = SearchState.SEARCHING
        self.number_of_evaluations = 0

        lower, upper = self.lower_bound, self.upper_bound
        if self.root_finder_settings.is_bracketed:
            anchor = min(max(initial_guess, lower), upper)
            lower = self.feasible_bracket_end(lower, anchor)
            upper = self.feasible_bracket_end(upper, anchor)
            if not lower < upper:
                raise RootFindingNonconvergenceError(
                    f"Feasible bracket collapsed to c2 = {lower!r}.", best_estimate=lower)
            if (lower, upper) != (self.lower_bound, self.upper_bound):
                logger.info("Feasible bracket for the free coefficient: [%.6e, %.6e]",
                            lower, upper)

        root = find_root(self.objective, lower, upper,
                         initial_guess, self.root_finder_settings)
        if not self.lower_bound <= root <= self.upper_bound:
            raise FreeCoefficientBoundsError(
                f"Converged free coefficient {root!r} outside bounds "
                f"[{self.lower_bound!r}, {self.upper_bound!r}].")

        self.converged_free_coefficient = root
        self.converged_coefficients = self.boundary_solver.solve(root)
        self.state = SearchState.CONVERGED
        logger.info("Time-of-flight search converged: c2 = %.12e after %d evaluations",
                    root, self.number_of_evaluations)
        return self.converged_coefficients
