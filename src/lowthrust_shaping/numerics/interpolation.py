"""
===============================================================================
LOW-THRUST SHAPING - One-Dimensional Interpolation
===============================================================================
Fixed-degree B-spline interpolation of a tabulated scalar function, built on
scipy.interpolate.make_interp_spline.

Queries are checked against the table range.  A query that overshoots an
end of the table by no more than ``domain_tolerance`` is clamped to that end
(quadrature round-off routinely produces such overshoots at the last
sample); anything further out raises InterpolationDomainError.  There is no
extrapolation.
===============================================================================
"""

import logging
from dataclasses import dataclass

import numpy as np
from scipy.interpolate import make_interp_spline

from lowthrust_shaping.core.errors import InterpolationDomainError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InterpolatorSettings:
    """
    Attributes:
        order: B-spline degree (5 -> quintic, 1 -> linear).
        domain_tolerance: Relative overshoot of the table range that is
            clamped instead of rejected (fraction of the table span).
    """
    order: int = 5
    domain_tolerance: float = 1.0e-9

    def __post_init__(self):
        if self.order < 1:
            raise ValueError(f"Interpolation order must be >= 1, got {self.order}")
        if self.domain_tolerance < 0.0:
            raise ValueError("domain_tolerance must be non-negative.")

    @classmethod
    def from_dict(cls, config: dict) -> "InterpolatorSettings":
        return cls(
            order=int(config.get('order', 5)),
            domain_tolerance=float(config.get('domain_tolerance', 1.0e-9)),
        )


class OneDimensionalInterpolator:
    """
    Spline through the points (x_i, y_i).

    Parameters
    ----------
    independent_values : array_like
        Strictly increasing abscissae.
    dependent_values : array_like
        Ordinates, same length.
    settings : InterpolatorSettings, optional
        Degree and domain tolerance.
    """

    def __init__(self, independent_values, dependent_values,
                 settings: InterpolatorSettings = None):
        self.settings = settings or InterpolatorSettings()
        x = np.asarray(independent_values, dtype=np.float64)
        y = np.asarray(dependent_values, dtype=np.float64)

        if x.ndim != 1 or x.shape != y.shape:
            raise ValueError(
                f"Table arrays must be 1-D and equally long, got {x.shape} and {y.shape}")
        if x.size < self.settings.order + 1:
            raise ValueError(
                f"Degree-{self.settings.order} spline needs at least "
                f"{self.settings.order + 1} samples, got {x.size}")
        if np.any(np.diff(x) <= 0.0):
            raise ValueError("Independent values must be strictly increasing.")

        self.independent_values = x
        self.dependent_values = y
        self.lower = float(x[0])
        self.upper = float(x[-1])
        self._tolerance = self.settings.domain_tolerance * (self.upper - self.lower)
        self._spline = make_interp_spline(x, y, k=self.settings.order)

        logger.debug("Built degree-%d spline over [%.6e, %.6e] from %d samples",
                     self.settings.order, self.lower, self.upper, x.size)

    def _checked(self, value: float) -> float:
        if value < self.lower - self._tolerance or value > self.upper + self._tolerance:
            logger.warning("Interpolation query %.9e outside table [%.9e, %.9e]",
                           value, self.lower, self.upper)
            raise InterpolationDomainError(
                f"Query {value!r} outside interpolation range "
                f"[{self.lower!r}, {self.upper!r}]",
                value=value, lower=self.lower, upper=self.upper)
        return min(max(value, self.lower), self.upper)

    def interpolate(self, value: float) -> float:
        """Interpolated ordinate at *value*."""
        return float(self._spline(self._checked(float(value))))

    def __call__(self, value: float) -> float:
        return self.interpolate(value)
