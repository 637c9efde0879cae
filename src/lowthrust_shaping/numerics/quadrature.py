"""
===============================================================================
LOW-THRUST SHAPING - Fixed-Order Gaussian Quadrature
===============================================================================
Definite integrals over the azimuth angle are evaluated with a fixed-order
Gauss-Legendre rule (scipy.integrate.fixed_quad).  The same rule is reused
for the time-of-flight and deltaV integrals; a quadrature object is bound to
a lower limit and re-created only when that limit changes.

Integrands must accept a NumPy array of abscissae and return an array of the
same shape.  Any exception raised by the integrand (e.g. an infeasible
shape) propagates unchanged.
===============================================================================
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable

import numpy as np
from scipy.integrate import fixed_quad

from lowthrust_shaping.core.constants import DEFAULT_QUADRATURE_ORDER

logger = logging.getLogger(__name__)

ScalarIntegrand = Callable[[np.ndarray], np.ndarray]


@dataclass(frozen=True)
class QuadratureSettings:
    """
    Attributes:
        order: Number of Gauss-Legendre nodes.
    """
    order: int = DEFAULT_QUADRATURE_ORDER

    def __post_init__(self):
        if self.order < 1:
            raise ValueError(f"Quadrature order must be >= 1, got {self.order}")

    @classmethod
    def from_dict(cls, config: dict) -> "QuadratureSettings":
        return cls(order=int(config.get('order', DEFAULT_QUADRATURE_ORDER)))


class GaussianQuadrature:
    """
    Gauss-Legendre rule over [lower_limit, upper_limit].

    Parameters
    ----------
    lower_limit : float
        Fixed lower integration limit.
    settings : QuadratureSettings, optional
        Rule order.
    """

    def __init__(self, lower_limit: float, settings: QuadratureSettings = None):
        self.lower_limit = float(lower_limit)
        self.settings = settings or QuadratureSettings()

    @property
    def order(self) -> int:
        return self.settings.order

    def integrate(self, integrand: ScalarIntegrand, upper_limit: float) -> float:
        """
        Integrate *integrand* from the fixed lower limit to *upper_limit*.

        Parameters
        ----------
        integrand : callable
            Vectorized scalar function of the integration variable.
        upper_limit : float
            Upper integration limit.

        Returns
        -------
        float
            Value of the definite integral.
        """
        if upper_limit == self.lower_limit:
            return 0.0
        value, _ = fixed_quad(integrand, self.lower_limit, upper_limit, n=self.order)
        return float(value)

    def integrate_cumulative(self, integrand: ScalarIntegrand,
                             upper_limits: Iterable[float]) -> np.ndarray:
        """Integral from the lower limit to each entry of *upper_limits*."""
        return np.array([self.integrate(integrand, upper) for upper in upper_limits])

    def with_lower_limit(self, lower_limit: float) -> "GaussianQuadrature":
        """Return a rule of the same order bound to a new lower limit."""
        if lower_limit == self.lower_limit:
            return self
        logger.debug("Re-instantiating %d-node quadrature with lower limit %.6f",
                     self.order, lower_limit)
        return GaussianQuadrature(lower_limit, self.settings)
