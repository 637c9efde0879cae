"""
===============================================================================
LOW-THRUST SHAPING - One-Dimensional Root Finding
===============================================================================
Thin, strict wrapper around scipy.optimize.root_scalar used to tune the free
shaping parameter until the time of flight matches its requirement.

Supported methods:
    brentq, brenth, bisect, ridder  -- bracketed; need a sign change between
                                       the lower and upper bound
    secant                          -- open; starts from the initial guess

Unlike the scipy default, a search that exhausts its iteration budget is an
error (RootFindingNonconvergenceError), never a silently returned iterate.
===============================================================================
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np
from scipy.optimize import root_scalar

from lowthrust_shaping.core.errors import RootFindingNonconvergenceError, ShapingError

logger = logging.getLogger(__name__)

ScalarObjective = Callable[[float], float]

BRACKETED_METHODS = ('brentq', 'brenth', 'bisect', 'ridder')
OPEN_METHODS = ('secant',)


@dataclass(frozen=True)
class RootFinderSettings:
    """
    Root-finder configuration.

    Attributes:
        method: scipy root_scalar method name.
        xtol: Absolute tolerance on the root location.
        rtol: Relative tolerance on the root location (None -> scipy default).
        max_iterations: Iteration budget.
    """
    method: str = 'brentq'
    xtol: float = 1.0e-12
    rtol: Optional[float] = None
    max_iterations: int = 100

    def __post_init__(self):
        if self.method not in BRACKETED_METHODS + OPEN_METHODS:
            raise ValueError(
                f"Unknown root-finder method '{self.method}'. "
                f"Use one of {BRACKETED_METHODS + OPEN_METHODS}.")
        if self.xtol <= 0.0:
            raise ValueError("xtol must be positive.")
        if self.max_iterations < 1:
            raise ValueError("max_iterations must be >= 1.")

    @property
    def is_bracketed(self) -> bool:
        return self.method in BRACKETED_METHODS

    @classmethod
    def from_dict(cls, config: dict) -> "RootFinderSettings":
        rtol = config.get('rtol')
        return cls(
            method=config.get('method', 'brentq'),
            xtol=float(config.get('xtol', 1.0e-12)),
            rtol=None if rtol is None else float(rtol),
            max_iterations=int(config.get('max_iterations', 100)),
        )


def find_root(objective: ScalarObjective,
              lower_bound: Optional[float],
              upper_bound: Optional[float],
              initial_guess: Optional[float],
              settings: RootFinderSettings) -> float:
    """
    Find x such that objective(x) == 0.

    Args:
        objective: Scalar function of one variable.
        lower_bound: Lower end of the search interval (required for
            bracketed methods).
        upper_bound: Upper end of the search interval (required for
            bracketed methods).
        initial_guess: Starting point (required for open methods).
        settings: Method, tolerances and iteration budget.

    Returns:
        Root location.

    Raises:
        RootFindingNonconvergenceError: The root is not bracketed, or the
            iteration budget was exhausted.
        ValueError: Required bounds / guess are missing.
    """
    options = {'xtol': settings.xtol, 'maxiter': settings.max_iterations}
    if settings.rtol is not None:
        options['rtol'] = settings.rtol

    if settings.is_bracketed:
        if lower_bound is None or upper_bound is None:
            raise ValueError(f"Method '{settings.method}' needs both bounds.")
        if not lower_bound < upper_bound:
            raise ValueError(
                f"Lower bound {lower_bound} must be smaller than upper bound {upper_bound}.")

        f_lower = objective(lower_bound)
        f_upper = objective(upper_bound)
        logger.debug("Bracket [%.6e, %.6e] -> residuals [%.6e, %.6e]",
                     lower_bound, upper_bound, f_lower, f_upper)
        if f_lower == 0.0:
            return float(lower_bound)
        if f_upper == 0.0:
            return float(upper_bound)
        if np.sign(f_lower) == np.sign(f_upper):
            best, residual = ((lower_bound, f_lower) if abs(f_lower) < abs(f_upper)
                              else (upper_bound, f_upper))
            raise RootFindingNonconvergenceError(
                f"Root not bracketed by [{lower_bound}, {upper_bound}]: "
                f"residuals {f_lower:.6e} and {f_upper:.6e} share a sign.",
                best_estimate=float(best), residual=float(residual))

        result = root_scalar(objective, method=settings.method,
                             bracket=[lower_bound, upper_bound], **options)
    else:
        if initial_guess is None:
            raise ValueError(f"Method '{settings.method}' needs an initial guess.")
        if lower_bound is not None and upper_bound is not None:
            second_guess = initial_guess + 1.0e-3 * (upper_bound - lower_bound)
        else:
            second_guess = initial_guess * (1.0 + 1.0e-4) + 1.0e-4
        result = root_scalar(objective, method=settings.method,
                             x0=initial_guess, x1=second_guess, **options)

    if not result.converged:
        try:
            residual = float(objective(result.root))
        except ShapingError as exc:
            logger.warning("Residual at the last iterate %.6e unavailable: %s", result.root, exc)
            residual = None
        logger.error("Root finder '%s' failed after %d iterations (%s): "
                     "best estimate %.6e, residual %s",
                     settings.method, result.iterations, result.flag,
                     result.root, residual)
        raise RootFindingNonconvergenceError(
            f"Root finder '{settings.method}' did not converge: {result.flag}",
            best_estimate=float(result.root), residual=residual,
            iterations=int(result.iterations))

    logger.debug("Root finder '%s' converged to %.12e in %d iterations",
                 settings.method, result.root, result.iterations)
    return float(result.root)
