"""
===============================================================================
LOW-THRUST SHAPING - Composite Shaping Functions
===============================================================================
Linear combinations of fixed basis functions of the azimuth angle theta that
describe the trajectory shape.

Radial shape (inverse radial distance):

    u(theta) = c0 + c1*theta + c2*theta^2
             + (c3 + c4*theta) cos(theta) + (c5 + c6*theta) sin(theta)
    r(theta) = 1 / u(theta)

Elevation shape:

    phi(theta) = (b0 + b1*theta) cos(theta) + (b2 + b3*theta) sin(theta)

Every function is vectorized: theta may be a scalar or a NumPy array, and
the result has the same shape.  Coefficients are never mutated in place;
``reset_coefficients`` swaps in a new read-only array.

References
----------
    [1] Novak & Vasile, "Improved Shaping Approach to the Preliminary Design
        of Low-Thrust Trajectories", JGCD 34(1), 2011.
===============================================================================
"""

from dataclasses import dataclass, field

import numpy as np

from lowthrust_shaping.core.constants import (
    ELEVATION_FUNCTION_TERMS,
    FREE_COEFFICIENT_INDEX,
    RADIAL_FUNCTION_TERMS,
)

MAX_DERIVATIVE_ORDER = 3

# Radial basis terms that the boundary conditions determine.
CONSTRAINED_RADIAL_INDICES = (0, 1, 3, 4, 5, 6)


# =============================================================================
# BASIS TERMS
# =============================================================================

def _trigonometric_terms(theta: np.ndarray, order: int) -> list:
    """
    d^order/dtheta^order of [cos, theta*cos, sin, theta*sin].
    """
    c, s = np.cos(theta), np.sin(theta)
    if order == 0:
        return [c, theta * c, s, theta * s]
    if order == 1:
        return [-s, c - theta * s, c, s + theta * c]
    if order == 2:
        return [-c, -2.0 * s - theta * c, -s, 2.0 * c - theta * s]
    return [s, -3.0 * c + theta * s, -c, -3.0 * s - theta * c]


def _polynomial_terms(theta: np.ndarray, order: int) -> list:
    """d^order/dtheta^order of [1, theta, theta^2]."""
    one = np.ones_like(theta)
    zero = np.zeros_like(theta)
    if order == 0:
        return [one, theta, theta ** 2]
    if order == 1:
        return [zero, one, 2.0 * theta]
    if order == 2:
        return [zero, zero, 2.0 * one]
    return [zero, zero, zero]


def _check_order(order: int) -> None:
    if order not in range(MAX_DERIVATIVE_ORDER + 1):
        raise ValueError(
            f"Derivative order must be 0..{MAX_DERIVATIVE_ORDER}, got {order}")


def radial_basis(theta, order: int = 0) -> np.ndarray:
    """
    Radial basis terms (of the inverse radius) or their derivatives.

    Returns
    -------
    np.ndarray
        Shape (7,) + shape(theta).
    """
    _check_order(order)
    theta = np.asarray(theta, dtype=np.float64)
    return np.array(_polynomial_terms(theta, order) + _trigonometric_terms(theta, order))


def elevation_basis(theta, order: int = 0) -> np.ndarray:
    """
    Elevation basis terms or their derivatives.

    Returns
    -------
    np.ndarray
        Shape (4,) + shape(theta).
    """
    _check_order(order)
    theta = np.asarray(theta, dtype=np.float64)
    return np.array(_trigonometric_terms(theta, order))


# =============================================================================
# COEFFICIENT SNAPSHOT
# =============================================================================

def _frozen_vector(values, size: int, name: str) -> np.ndarray:
    vector = np.array(values, dtype=np.float64).reshape(-1)
    if vector.shape != (size,):
        raise ValueError(f"{name} coefficients must have {size} entries, got {vector.size}")
    vector.flags.writeable = False
    return vector


@dataclass(frozen=True, eq=False)
class CompositeCoefficients:
    """
    Immutable snapshot of all shaping coefficients.

    Attributes:
        radial: 7 coefficients of the inverse-radius function; entry 2 is
            the free coefficient.
        elevation: 4 coefficients of the elevation function.
    """
    radial: np.ndarray = field(default_factory=lambda: np.ones(RADIAL_FUNCTION_TERMS))
    elevation: np.ndarray = field(default_factory=lambda: np.ones(ELEVATION_FUNCTION_TERMS))

    def __post_init__(self):
        object.__setattr__(self, 'radial',
                           _frozen_vector(self.radial, RADIAL_FUNCTION_TERMS, "Radial"))
        object.__setattr__(self, 'elevation',
                           _frozen_vector(self.elevation, ELEVATION_FUNCTION_TERMS, "Elevation"))

    @property
    def free_coefficient(self) -> float:
        return float(self.radial[FREE_COEFFICIENT_INDEX])


# =============================================================================
# COMPOSITE FUNCTIONS
# =============================================================================

class CompositeFunction:
    """
    Weighted sum of basis terms, f(theta) = sum_i c_i g_i(theta).

    Subclasses choose the basis and how the sum maps to the shaped quantity.
    """

    number_of_terms = 0

    def __init__(self, coefficients):
        self.reset_coefficients(coefficients)

    def basis(self, theta, order: int = 0) -> np.ndarray:
        raise NotImplementedError

    @property
    def coefficients(self) -> np.ndarray:
        return self._coefficients

    def reset_coefficients(self, coefficients) -> None:
        """Replace the whole coefficient vector."""
        self._coefficients = _frozen_vector(coefficients, self.number_of_terms,
                                            type(self).__name__)

    def component(self, index: int, theta, order: int = 0):
        """Single basis term (unweighted) or one of its derivatives."""
        if not 0 <= index < self.number_of_terms:
            raise IndexError(f"Component index {index} out of range 0..{self.number_of_terms - 1}")
        return self.basis(theta, order)[index]

    def combination(self, theta, order: int = 0):
        """sum_i c_i d^order g_i / dtheta^order."""
        return np.tensordot(self._coefficients, self.basis(theta, order), axes=1)

    def evaluate(self, theta):
        return self.combination(theta, 0)

    def first_derivative(self, theta):
        return self.combination(theta, 1)

    def second_derivative(self, theta):
        return self.combination(theta, 2)

    def third_derivative(self, theta):
        return self.combination(theta, 3)


class CompositeRadialFunction(CompositeFunction):
    """
    Radial distance r(theta) = 1 / u(theta), u the 7-term composite.

    ``evaluate`` and the derivative methods return r and its derivatives;
    ``combination`` and ``component`` work on u and its basis, which is
    what the boundary-condition system is linear in.
    """

    number_of_terms = RADIAL_FUNCTION_TERMS

    def basis(self, theta, order: int = 0) -> np.ndarray:
        return radial_basis(theta, order)

    def evaluate(self, theta):
        return 1.0 / self.combination(theta, 0)

    def first_derivative(self, theta):
        u = self.combination(theta, 0)
        du = self.combination(theta, 1)
        return -du / u ** 2

    def second_derivative(self, theta):
        u = self.combination(theta, 0)
        du = self.combination(theta, 1)
        ddu = self.combination(theta, 2)
        return 2.0 * du ** 2 / u ** 3 - ddu / u ** 2

    def third_derivative(self, theta):
        u = self.combination(theta, 0)
        du = self.combination(theta, 1)
        ddu = self.combination(theta, 2)
        dddu = self.combination(theta, 3)
        return (-6.0 * du ** 3 / u ** 4
                + 6.0 * du * ddu / u ** 3
                - dddu / u ** 2)


class CompositeElevationFunction(CompositeFunction):
    """Elevation angle phi(theta), the 4-term trigonometric composite."""

    number_of_terms = ELEVATION_FUNCTION_TERMS

    def basis(self, theta, order: int = 0) -> np.ndarray:
        return elevation_basis(theta, order)
