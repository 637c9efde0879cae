"""
===============================================================================
LOW-THRUST SHAPING - Configuration
===============================================================================
Loads the YAML design configuration and turns its sections into the settings
objects used by the shaping legs.  See config/shaping_config.yaml for the
full layout.

Boundary states may be given explicitly in SI units,

    departure:
      state: [x, y, z, vx, vy, vz]

or as a point on a circular orbit about the central body,

    departure:
      circular_orbit: {radius_au: 1.0, azimuth_deg: 0.0, inclination_deg: 0.0}
===============================================================================
"""

import logging
from pathlib import Path
from typing import Tuple

import numpy as np
import yaml

from lowthrust_shaping.core.constants import AU, DEG2RAD, JULIAN_DAY
from lowthrust_shaping.dynamics.environment import GravityField
from lowthrust_shaping.dynamics.propagation import PropagationSettings
from lowthrust_shaping.numerics.interpolation import InterpolatorSettings
from lowthrust_shaping.numerics.quadrature import QuadratureSettings
from lowthrust_shaping.numerics.root_finding import RootFinderSettings
from lowthrust_shaping.shaping.spherical_shaping import ShapeParameters

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_PATH = PROJECT_ROOT / 'config' / 'shaping_config.yaml'


def load_config(config_path: str = None) -> dict:
    """
    Load the shaping configuration from a YAML file.

    Args:
        config_path: Path to YAML config. Defaults to config/shaping_config.yaml

    Returns:
        Dictionary of configuration parameters
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    logger.info(f"Loading configuration from: {config_path}")
    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)
    if not isinstance(config, dict) or 'leg' not in config:
        raise ValueError(f"Configuration {config_path} has no 'leg' section.")
    logger.info(f"Leg: {config['leg'].get('name', 'unnamed')}")
    return config


def central_body_field(config: dict) -> GravityField:
    return GravityField.from_name(config['leg'].get('central_body', 'Sun'))


def _boundary_state(section: dict, gravity: GravityField) -> np.ndarray:
    if 'state' in section:
        state = np.asarray(section['state'], dtype=np.float64)
        if state.shape != (6,):
            raise ValueError(f"Boundary state must have 6 entries, got {state.size}")
        return state
    if 'circular_orbit' in section:
        orbit = section['circular_orbit']
        return gravity.circular_orbit_state(
            float(orbit['radius_au']) * AU,
            azimuth=float(orbit.get('azimuth_deg', 0.0)) * DEG2RAD,
            inclination=float(orbit.get('inclination_deg', 0.0)) * DEG2RAD)
    raise ValueError("Boundary section needs either 'state' or 'circular_orbit'.")


def build_boundary_states(config: dict) -> Tuple[np.ndarray, np.ndarray]:
    """Departure and arrival Cartesian states [m, m/s]."""
    gravity = central_body_field(config)
    leg = config['leg']
    return (_boundary_state(leg['departure'], gravity),
            _boundary_state(leg['arrival'], gravity))


def build_shape_parameters(config: dict) -> ShapeParameters:
    """ShapeParameters from the leg, free_coefficient and numerics sections."""
    leg = config['leg']
    free = config.get('free_coefficient', {})
    time_map = config.get('time_map', {})
    return ShapeParameters(
        required_time_of_flight=float(leg['time_of_flight_days']) * JULIAN_DAY,
        number_of_revolutions=int(leg.get('number_of_revolutions', 0)),
        initial_value_free_coefficient=float(free.get('initial_guess', 0.0)),
        lower_bound_free_coefficient=float(free.get('lower_bound', -1.0e-2)),
        upper_bound_free_coefficient=float(free.get('upper_bound', 1.0e-2)),
        root_finder=RootFinderSettings.from_dict(config.get('root_finder', {})),
        quadrature=QuadratureSettings.from_dict(config.get('quadrature', {})),
        time_map_step=float(time_map.get('step_days', 1.0)) * JULIAN_DAY,
        interpolator=InterpolatorSettings.from_dict(time_map),
    )


def build_propagation_settings(config: dict) -> PropagationSettings:
    return PropagationSettings.from_dict(config.get('propagation', {}))


def build_exposin_options(config: dict) -> dict:
    """Keyword arguments for ExposinShaping.from_boundary_states."""
    section = config.get('exposin', {})
    options = {
        'root_finder_settings': RootFinderSettings.from_dict(config.get('root_finder', {})),
        'quadrature_settings': QuadratureSettings.from_dict(config.get('quadrature', {})),
        'gravitational_parameter': central_body_field(config).mu,
    }
    if 'winding_parameter' in section:
        options['winding_parameter'] = float(section['winding_parameter'])
    if 'bound_margin' in section:
        options['bound_margin'] = float(section['bound_margin'])
    return options
