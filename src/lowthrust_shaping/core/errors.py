"""
===============================================================================
LOW-THRUST SHAPING - Error Types
===============================================================================
Every failure the shaping engine can detect is raised as a subclass of
ShapingError at the point of detection.  Nothing here is retried or
replaced by a default numeric value; the caller decides what to do.

    InfeasibleShapeError            -- shape curves away from the central body
    SingularBoundarySystemError     -- degenerate boundary geometry
    RootFindingNonconvergenceError  -- TOF search failed or was not bracketed
    InterpolationDomainError        -- time query outside the sampled table
    FreeCoefficientBoundsError      -- trial value outside the search bounds
    PropagationFailureError         -- re-propagation integrator failed
===============================================================================
"""

from typing import Optional


class ShapingError(Exception):
    """Base class for all shaping-engine failures."""


class InfeasibleShapeError(ShapingError, ArithmeticError):
    """
    The trajectory shape is not physically realizable.

    For the spherical shape this means the time-equation scalar S(theta) is
    negative somewhere in the evaluated range, i.e. the path is not curved
    toward the central body.  For the exposin shape it means the requested
    geometry admits no exponential sinusoid.
    """

    def __init__(self, message: str, azimuth_angle: Optional[float] = None):
        super().__init__(message)
        self.azimuth_angle = azimuth_angle


class SingularBoundarySystemError(ShapingError, ArithmeticError):
    """The boundary-condition matrix cannot be inverted."""

    def __init__(self, message: str, condition_number: float = float('inf')):
        super().__init__(message)
        self.condition_number = condition_number


class RootFindingNonconvergenceError(ShapingError, RuntimeError):
    """
    The one-dimensional search did not satisfy its tolerance.

    Attributes
    ----------
    best_estimate : float or None
        Last iterate produced by the solver (None when the search could not
        start, e.g. an un-bracketed requirement).
    residual : float or None
        Objective value at ``best_estimate`` when it could be evaluated.
    iterations : int
        Iterations spent before giving up.
    """

    def __init__(self, message: str, best_estimate: Optional[float] = None,
                 residual: Optional[float] = None, iterations: int = 0):
        super().__init__(message)
        self.best_estimate = best_estimate
        self.residual = residual
        self.iterations = iterations


class InterpolationDomainError(ShapingError, ValueError):
    """A query fell outside the range of the interpolation table."""

    def __init__(self, message: str, value: float, lower: float, upper: float):
        super().__init__(message)
        self.value = value
        self.lower = lower
        self.upper = upper


class FreeCoefficientBoundsError(ShapingError, ValueError):
    """A trial free-coefficient value lies outside the supplied search bounds."""


class PropagationFailureError(ShapingError, RuntimeError):
    """The integrator stopped before reaching the end of a re-propagated arc."""
