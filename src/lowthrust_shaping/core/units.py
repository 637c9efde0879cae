"""
===============================================================================
LOW-THRUST SHAPING - Non-dimensionalization
===============================================================================
All shaping computations run in normalized units:

    length        / AU
    time          / Julian year
    velocity      * JULIAN_YEAR / AU
    acceleration  * JULIAN_YEAR^2 / AU
    mu            * JULIAN_YEAR^2 / AU^3

Values are re-dimensionalized only at the public boundary of a shape object.
===============================================================================
"""

import numpy as np

from lowthrust_shaping.core.constants import AU, JULIAN_YEAR


VELOCITY_UNIT = AU / JULIAN_YEAR
ACCELERATION_UNIT = AU / JULIAN_YEAR ** 2
GRAVITATIONAL_PARAMETER_UNIT = AU ** 3 / JULIAN_YEAR ** 2


def normalize_state(state: np.ndarray) -> np.ndarray:
    """Cartesian state [m, m/s] -> normalized [AU, AU/yr]."""
    state = np.asarray(state, dtype=np.float64)
    if state.shape != (6,):
        raise ValueError(f"Cartesian state must have 6 elements, got shape {state.shape}")
    normalized = np.empty(6)
    normalized[:3] = state[:3] / AU
    normalized[3:] = state[3:] / VELOCITY_UNIT
    return normalized


def dimensionalize_state(state: np.ndarray) -> np.ndarray:
    """Normalized Cartesian state [AU, AU/yr] -> [m, m/s]."""
    state = np.asarray(state, dtype=np.float64)
    dimensional = np.empty(6)
    dimensional[:3] = state[:3] * AU
    dimensional[3:] = state[3:] * VELOCITY_UNIT
    return dimensional


def normalize_time(time_s: float) -> float:
    return time_s / JULIAN_YEAR


def dimensionalize_time(time: float) -> float:
    return time * JULIAN_YEAR


def normalize_gravitational_parameter(mu: float) -> float:
    return mu / GRAVITATIONAL_PARAMETER_UNIT


def dimensionalize_velocity(velocity):
    return velocity * VELOCITY_UNIT


def dimensionalize_acceleration(acceleration):
    return acceleration * ACCELERATION_UNIT
