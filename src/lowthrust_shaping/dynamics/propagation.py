"""
===============================================================================
LOW-THRUST SHAPING - Midpoint Re-Propagation
===============================================================================
Checks a shaped leg against the equations of motion.  The state at half the
time of flight is taken from the shape and integrated forward to arrival and
backward to departure under

    r_ddot = -mu r / |r|^3 + a_thrust(t)

with a_thrust(t) the shaped thrust acceleration at the azimuth reached at t.
Both arcs are compared with the shaped states at the same epochs.

Integration runs in normalized units (AU, Julian years) with
scipy.integrate.solve_ivp.  Spacecraft mass is not propagated.
===============================================================================
"""

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
from scipy.integrate import solve_ivp

from lowthrust_shaping.core.constants import JULIAN_DAY
from lowthrust_shaping.core.errors import PropagationFailureError
from lowthrust_shaping.core.units import dimensionalize_state, dimensionalize_time
from lowthrust_shaping.dynamics.environment import GravityField

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PropagationSettings:
    """
    Attributes:
        method: solve_ivp integrator name.
        rtol, atol: Integrator tolerances (normalized units).
        number_of_outputs: Output epochs per arc.
    """
    method: str = 'DOP853'
    rtol: float = 1.0e-10
    atol: float = 1.0e-12
    number_of_outputs: int = 100

    def __post_init__(self):
        if self.number_of_outputs < 2:
            raise ValueError("number_of_outputs must be >= 2.")

    @classmethod
    def from_dict(cls, config: dict) -> "PropagationSettings":
        return cls(
            method=config.get('method', 'DOP853'),
            rtol=float(config.get('rtol', 1.0e-10)),
            atol=float(config.get('atol', 1.0e-12)),
            number_of_outputs=int(config.get('number_of_outputs', 100)),
        )


@dataclass
class PropagationResult:
    """
    Propagated and shaped histories, SI units, sorted by time.

    Attributes:
        times: (N,) seconds since departure.
        propagated_states: (N, 6) integrated Cartesian states.
        shaped_states: (N, 6) Cartesian states of the shape.
    """
    times: np.ndarray
    propagated_states: np.ndarray
    shaped_states: np.ndarray

    @property
    def position_errors(self) -> np.ndarray:
        return np.linalg.norm(self.propagated_states[:, :3] - self.shaped_states[:, :3], axis=1)

    @property
    def velocity_errors(self) -> np.ndarray:
        return np.linalg.norm(self.propagated_states[:, 3:] - self.shaped_states[:, 3:], axis=1)

    def to_dataframe(self) -> pd.DataFrame:
        labels = ['x', 'y', 'z', 'vx', 'vy', 'vz']
        data = {'time': self.times, 'time_days': self.times / JULIAN_DAY}
        for i, label in enumerate(labels):
            data[f'{label}_propagated'] = self.propagated_states[:, i]
            data[f'{label}_shaped'] = self.shaped_states[:, i]
        data['position_error'] = self.position_errors
        data['velocity_error'] = self.velocity_errors
        return pd.DataFrame(data)


def propagate_from_midpoint(leg, settings: PropagationSettings = None) -> PropagationResult:
    """
    Integrate a shaped leg forward and backward from its midpoint.

    Parameters
    ----------
    leg : SphericalShaping
        Converged leg.
    settings : PropagationSettings, optional
        Integrator settings.

    Returns
    -------
    PropagationResult

    Raises
    ------
    PropagationFailureError
        The integrator stopped before the end of either arc.
    """
    settings = settings or PropagationSettings()
    gravity = GravityField(leg.normalized_gravitational_parameter, name=leg.central_body)
    kinematics = leg.kinematics
    time_map = leg.time_map

    def dynamics(t, x):
        thrust = kinematics.normalized_thrust_acceleration(time_map.angle_at_time(t))
        return np.concatenate([x[3:], gravity.acceleration(x[:3]) + thrust])

    time_of_flight = leg.compute_normalized_time_of_flight()
    half_time = 0.5 * time_of_flight
    midpoint_state = kinematics.normalized_state(time_map.angle_at_time(half_time))

    arcs = []
    for end_time in (time_of_flight, 0.0):
        t_eval = np.linspace(half_time, end_time, settings.number_of_outputs)
        solution = solve_ivp(dynamics, (half_time, end_time), midpoint_state,
                             method=settings.method, t_eval=t_eval,
                             rtol=settings.rtol, atol=settings.atol)
        if not solution.success:
            logger.error("Midpoint propagation to t = %.6f failed: %s", end_time, solution.message)
            raise PropagationFailureError(f"Midpoint propagation failed: {solution.message}")
        arcs.append((solution.t, solution.y.T))

    times = np.concatenate([arcs[1][0][::-1], arcs[0][0][1:]])
    states = np.vstack([arcs[1][1][::-1], arcs[0][1][1:]])
    shaped = np.array([kinematics.normalized_state(time_map.angle_at_time(t)) for t in times])

    result = PropagationResult(
        times=np.array([dimensionalize_time(t) for t in times]),
        propagated_states=np.array([dimensionalize_state(s) for s in states]),
        shaped_states=np.array([dimensionalize_state(s) for s in shaped]),
    )
    logger.info("Midpoint propagation: max position error %.3e m, max velocity error %.3e m/s",
                float(np.max(result.position_errors)), float(np.max(result.velocity_errors)))
    return result
