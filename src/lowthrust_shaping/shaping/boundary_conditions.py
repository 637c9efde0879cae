"""
===============================================================================
LOW-THRUST SHAPING - Boundary Conditions
===============================================================================
Turns the departure / arrival states into the ten linear conditions that fix
every shaping coefficient except the free one (radial index 2).

Unknowns (column order):

    0..5   radial coefficients c0, c1, c3, c4, c5, c6
    6..9   elevation coefficients b0, b1, b2, b3

Conditions (row order), each at theta_0 then theta_f:

    0, 1   u         = 1 / r
    2, 3   u'        = -r' / r^2
    4, 5   -r^2 u'' + alpha phi''  = -mu t'^2 / r^2 + r F1 - r' phi' sin(phi) cos(phi) / F1
    6, 7   phi       = phi_b
    8, 9   phi'      = phi'_b

with primes denoting d/dtheta, t' = dt/dtheta = r cos(phi) / v_theta,
F1 = phi'^2 + cos^2(phi) and alpha = -r' phi' / F1.  Rows 4 and 5 are the
time equation evaluated at the boundary, so the shape reproduces the
boundary azimuth rate and hence the full velocity.

The free coefficient enters linearly:  M a = b - c2 * m_free.
===============================================================================
"""

import logging
from dataclasses import dataclass

import numpy as np

from lowthrust_shaping.core.constants import FREE_COEFFICIENT_INDEX, TWO_PI
from lowthrust_shaping.core.errors import InfeasibleShapeError, SingularBoundarySystemError
from lowthrust_shaping.core.frames import cartesian_to_spherical_state, wrap_to_two_pi
from lowthrust_shaping.shaping.composite_functions import (
    CONSTRAINED_RADIAL_INDICES,
    CompositeCoefficients,
    elevation_basis,
    radial_basis,
)

logger = logging.getLogger(__name__)

SYSTEM_SIZE = 10


# =============================================================================
# BOUNDARY STATES
# =============================================================================

@dataclass(frozen=True, eq=False)
class BoundaryState:
    """
    One end of a shaped leg, in normalized units.

    Attributes:
        cartesian: (6,) position and velocity in inertial axes.
        spherical: (6,) (r, theta, phi, v_r, v_theta, v_phi) with the azimuth
            already unwrapped for the leg.
        azimuth_parametrized: (6,) (r, theta, phi, v_r, v_theta, v_phi) / theta_dot
            for the velocity part, i.e. (r, theta, phi, r', r cos(phi), r phi').
    """
    cartesian: np.ndarray
    spherical: np.ndarray
    azimuth_parametrized: np.ndarray

    @classmethod
    def from_cartesian(cls, cartesian_state: np.ndarray,
                       azimuth: float = None) -> "BoundaryState":
        """
        Build a boundary state from a normalized Cartesian state.

        Parameters
        ----------
        cartesian_state : np.ndarray
            (6,) normalized state.
        azimuth : float, optional
            Unwrapped azimuth to store instead of the arctan2 value.

        Raises
        ------
        InfeasibleShapeError
            If the azimuthal velocity is not positive.  The shape sweeps the
            azimuth forward, so a boundary with v_theta <= 0 cannot be met.
        """
        cartesian = np.array(cartesian_state, dtype=np.float64)
        spherical = cartesian_to_spherical_state(cartesian)
        if azimuth is not None:
            spherical[1] = azimuth

        radius, _, elevation, _, azimuthal_velocity, _ = spherical
        if azimuthal_velocity <= 0.0:
            raise InfeasibleShapeError(
                f"Azimuthal velocity {azimuthal_velocity:.6e} at boundary is not "
                f"positive; the shape requires a prograde sweep.",
                azimuth_angle=float(spherical[1]))

        azimuth_rate = azimuthal_velocity / (radius * np.cos(elevation))
        parametrized = spherical.copy()
        parametrized[3:] = spherical[3:] / azimuth_rate

        return cls(cartesian=cartesian, spherical=spherical,
                   azimuth_parametrized=parametrized)

    @property
    def radius(self) -> float:
        return float(self.spherical[0])

    @property
    def azimuth(self) -> float:
        return float(self.spherical[1])

    @property
    def elevation(self) -> float:
        return float(self.spherical[2])

    @property
    def azimuth_rate(self) -> float:
        """d(theta)/dt at the boundary."""
        return float(self.spherical[4] / (self.spherical[0] * np.cos(self.spherical[2])))


def unwrap_boundary_azimuths(initial_azimuth: float, final_azimuth: float,
                             number_of_revolutions: int):
    """
    Place both azimuths on the swept interval of the leg.

    The initial azimuth is wrapped into [0, 2pi).  The final azimuth is
    wrapped the same way and then advanced by 2pi*N when it is not behind
    the initial one, 2pi*(N + 1) otherwise.

    Returns
    -------
    tuple of float
        (theta_0, theta_f)
    """
    if number_of_revolutions < 0:
        raise ValueError(f"Number of revolutions must be >= 0, got {number_of_revolutions}")

    theta_0 = wrap_to_two_pi(initial_azimuth)
    theta_f = wrap_to_two_pi(final_azimuth)
    if theta_f < theta_0:
        theta_f += TWO_PI * (number_of_revolutions + 1)
    else:
        theta_f += TWO_PI * number_of_revolutions
    return theta_0, theta_f


def boundary_states_for_leg(initial_cartesian: np.ndarray, final_cartesian: np.ndarray,
                            number_of_revolutions: int):
    """
    Departure and arrival BoundaryState objects with unwrapped azimuths.

    Both Cartesian states must already be normalized.
    """
    initial_azimuth = cartesian_to_spherical_state(initial_cartesian)[1]
    final_azimuth = cartesian_to_spherical_state(final_cartesian)[1]
    theta_0, theta_f = unwrap_boundary_azimuths(initial_azimuth, final_azimuth,
                                                number_of_revolutions)
    return (BoundaryState.from_cartesian(initial_cartesian, azimuth=theta_0),
            BoundaryState.from_cartesian(final_cartesian, azimuth=theta_f))


# =============================================================================
# LINEAR SYSTEM
# =============================================================================

def _time_equation_terms(state: BoundaryState, mu: float):
    """
    alpha and right-hand side of the time-equation row at one boundary.
    """
    r, _, phi, dr, r_cos_phi, r_dphi = state.azimuth_parametrized
    dphi = r_dphi / r
    sin_cos = np.sin(phi) * np.cos(phi)
    f1 = dphi ** 2 + np.cos(phi) ** 2
    # (dt/dtheta)^2 = 1 / theta_dot^2
    dt_dtheta_sq = (r_cos_phi / state.spherical[4]) ** 2

    alpha = -dr * dphi / f1
    rhs = -mu * dt_dtheta_sq / r ** 2 + r * f1 - dr * dphi * sin_cos / f1
    return alpha, rhs


class BoundaryConditionSolver:
    """
    Solves the 10x10 boundary-condition system for any free coefficient.

    The matrix depends only on the boundary states, so it is assembled and
    inverted once at construction.

    Parameters
    ----------
    initial_state, final_state : BoundaryState
        Normalized boundary states with unwrapped azimuths.
    gravitational_parameter : float
        Normalized mu of the central body.

    Raises
    ------
    SingularBoundarySystemError
        If the matrix is singular or its condition number exceeds 1/eps.
    """

    def __init__(self, initial_state: BoundaryState, final_state: BoundaryState,
                 gravitational_parameter: float):
        self.initial_state = initial_state
        self.final_state = final_state
        self.gravitational_parameter = float(gravitational_parameter)

        self.matrix, self.free_column, self.boundary_vector = self._assemble()
        self.condition_number = float(np.linalg.cond(self.matrix))

        limit = 1.0 / np.finfo(np.float64).eps
        if not np.isfinite(self.condition_number) or self.condition_number > limit:
            logger.error("Boundary system is singular (condition number %.3e)",
                         self.condition_number)
            raise SingularBoundarySystemError(
                f"Boundary-condition matrix is singular or ill-conditioned "
                f"(condition number {self.condition_number:.3e}).",
                condition_number=self.condition_number)
        try:
            self.inverse_matrix = np.linalg.inv(self.matrix)
        except np.linalg.LinAlgError as exc:
            raise SingularBoundarySystemError(
                f"Boundary-condition matrix could not be inverted: {exc}",
                condition_number=self.condition_number) from exc

        logger.debug("Boundary system assembled for theta in [%.6f, %.6f], cond = %.3e",
                     initial_state.azimuth, final_state.azimuth, self.condition_number)

    def _assemble(self):
        matrix = np.zeros((SYSTEM_SIZE, SYSTEM_SIZE))
        free_column = np.zeros(SYSTEM_SIZE)
        rhs = np.zeros(SYSTEM_SIZE)
        radial_columns = list(CONSTRAINED_RADIAL_INDICES)

        for side, state in enumerate((self.initial_state, self.final_state)):
            theta = state.azimuth
            r, _, phi, dr, _, r_dphi = state.azimuth_parametrized
            dphi = r_dphi / r
            alpha, time_rhs = _time_equation_terms(state, self.gravitational_parameter)

            u0 = radial_basis(theta, 0)
            u1 = radial_basis(theta, 1)
            u2 = radial_basis(theta, 2)
            p0 = elevation_basis(theta, 0)
            p1 = elevation_basis(theta, 1)
            p2 = elevation_basis(theta, 2)

            matrix[0 + side, :6] = u0[radial_columns]
            matrix[2 + side, :6] = u1[radial_columns]
            matrix[4 + side, :6] = -r ** 2 * u2[radial_columns]
            matrix[4 + side, 6:] = alpha * p2
            matrix[6 + side, 6:] = p0
            matrix[8 + side, 6:] = p1

            free_column[0 + side] = u0[FREE_COEFFICIENT_INDEX]
            free_column[2 + side] = u1[FREE_COEFFICIENT_INDEX]
            free_column[4 + side] = -r ** 2 * u2[FREE_COEFFICIENT_INDEX]

            rhs[0 + side] = 1.0 / r
            rhs[2 + side] = -dr / r ** 2
            rhs[4 + side] = time_rhs
            rhs[6 + side] = phi
            rhs[8 + side] = dphi

        return matrix, free_column, rhs

    def solve(self, free_coefficient: float) -> CompositeCoefficients:
        """
        Coefficients satisfying every boundary condition for the given c2.

        No bounds are enforced on *free_coefficient*.
        """
        solution = self.inverse_matrix @ (self.boundary_vector
                                          - free_coefficient * self.free_column)
        radial = np.empty(7)
        radial[list(CONSTRAINED_RADIAL_INDICES)] = solution[:6]
        radial[FREE_COEFFICIENT_INDEX] = free_coefficient
        return CompositeCoefficients(radial=radial, elevation=solution[6:])
