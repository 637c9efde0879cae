#!/usr/bin/env python3
"""
===============================================================================
LOW-THRUST SHAPING - MAIN ENTRY POINT
===============================================================================
Designs the low-thrust leg described by the YAML configuration with
spherical shaping, reports time of flight and deltaV, and optionally
re-propagates the leg, adds an exposin comparison and writes plots.

USAGE:
    python -m lowthrust_shaping.main                  # Spherical shaping only
    python -m lowthrust_shaping.main --plots          # ... plus figures
    python -m lowthrust_shaping.main --propagate      # ... plus midpoint check
    python -m lowthrust_shaping.main --exposin        # ... plus exposin leg
    lowthrust-shaping --config my_leg.yaml            # Installed console script

OUTPUTS:
    <output>/data/   - CSV trajectory tables and propagation comparison
    <output>/plots/  - Trajectory, thrust profile and time-map figures
    <output>/shaping.log

===============================================================================
"""

import argparse
import logging
import os
import sys
import time
from pathlib import Path

import numpy as np

from lowthrust_shaping.config import (
    build_boundary_states,
    build_exposin_options,
    build_propagation_settings,
    build_shape_parameters,
    load_config,
)
from lowthrust_shaping.core.constants import JULIAN_DAY
from lowthrust_shaping.core.errors import ShapingError
from lowthrust_shaping.dynamics.propagation import propagate_from_midpoint
from lowthrust_shaping.shaping.exposin import ExposinShaping
from lowthrust_shaping.shaping.spherical_shaping import SphericalShaping
from lowthrust_shaping.visualization.trajectory_plots import (
    plot_propagation_errors,
    plot_thrust_profile,
    plot_time_azimuth_map,
    plot_trajectory_3d,
)

logger = logging.getLogger('SHAPING_MAIN')


def setup_logging(output_dir: str, verbose: bool = False, log_file: str = 'shaping.log'):
    """Console plus log-file handlers with the project format."""
    os.makedirs(output_dir, exist_ok=True)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(os.path.join(output_dir, log_file), mode='w')
        ],
        force=True,
    )


def setup_output_directories(output_dir: str) -> str:
    """Create the data and plot directories."""
    base = Path(output_dir)
    for d in ('data', 'plots'):
        (base / d).mkdir(parents=True, exist_ok=True)
    logger.info("Output directories ready")
    return str(base)


def run_spherical_shaping(config: dict, output_dir: str, make_plots: bool = False):
    """Design the configured leg and write its trajectory table."""
    departure, arrival = build_boundary_states(config)
    parameters = build_shape_parameters(config)
    samples = int(config.get('output', {}).get('samples', 200))

    start = time.time()
    leg = SphericalShaping(departure, arrival, parameters,
                           central_body=config['leg'].get('central_body', 'Sun'))
    logger.info(f"Spherical shaping converged in {time.time() - start:.2f} s")

    summary = leg.summary()
    print("\n--- Spherical shaping ---")
    print(f"  Free coefficient : {summary['free_coefficient']:.6e}")
    print(f"  Swept azimuth    : {np.degrees(leg.travelled_azimuth):.2f} deg")
    print(f"  Time of flight   : {summary['time_of_flight_days']:.3f} days")
    print(f"  Delta-V          : {summary['delta_v'] / 1.0e3:.4f} km/s")

    table = leg.trajectory_table(samples)
    csv_path = os.path.join(output_dir, 'data', 'spherical_shaping_trajectory.csv')
    table.to_csv(csv_path, index=False)
    logger.info(f"Trajectory table written to {csv_path}")

    if make_plots:
        plot_dir = os.path.join(output_dir, 'plots')
        plot_trajectory_3d(table, 'Spherically Shaped Leg',
                           os.path.join(plot_dir, 'spherical_trajectory_3d.png'))
        plot_thrust_profile(table, 'Thrust Acceleration Profile',
                            os.path.join(plot_dir, 'spherical_thrust_profile.png'))
        times = np.linspace(0.0, leg.compute_time_of_flight(), samples)
        azimuths = [leg.convert_time_to_azimuth(t) for t in times]
        plot_time_azimuth_map(times / JULIAN_DAY, azimuths, 'Time-Azimuth Map',
                              os.path.join(plot_dir, 'spherical_time_azimuth_map.png'))
    return leg


def run_propagation(leg: SphericalShaping, config: dict, output_dir: str,
                    make_plots: bool = False):
    """Re-propagate the leg from its midpoint and store the comparison."""
    result = propagate_from_midpoint(leg, build_propagation_settings(config))
    comparison = result.to_dataframe()
    csv_path = os.path.join(output_dir, 'data', 'midpoint_propagation.csv')
    comparison.to_csv(csv_path, index=False)

    print("\n--- Midpoint re-propagation ---")
    print(f"  Max position error : {result.position_errors.max() / 1.0e3:.3f} km")
    print(f"  Max velocity error : {result.velocity_errors.max():.4f} m/s")

    if make_plots:
        plot_propagation_errors(comparison, 'Propagated vs Shaped State',
                                os.path.join(output_dir, 'plots', 'propagation_errors.png'))
    return result


def run_exposin(config: dict, output_dir: str, make_plots: bool = False):
    """Planar exposin leg between the same radii and swept angle."""
    departure, arrival = build_boundary_states(config)
    parameters = build_shape_parameters(config)
    leg = ExposinShaping.from_boundary_states(
        departure, arrival, parameters.required_time_of_flight,
        parameters.number_of_revolutions, **build_exposin_options(config))

    print("\n--- Exposin ---")
    print(f"  Flight-path angle : {np.degrees(leg.flight_path_angle):.4f} deg")
    print(f"  Time of flight    : {leg.compute_time_of_flight() / JULIAN_DAY:.3f} days")
    print(f"  Delta-V           : {leg.compute_delta_v() / 1.0e3:.4f} km/s")

    table = leg.trajectory_table(int(config.get('output', {}).get('samples', 200)))
    table.to_csv(os.path.join(output_dir, 'data', 'exposin_trajectory.csv'), index=False)
    if make_plots:
        plot_thrust_profile(table, 'Exposin Thrust Acceleration Profile',
                            os.path.join(output_dir, 'plots', 'exposin_thrust_profile.png'))
    return leg


def main(argv=None) -> int:
    """
    Main entry point. Parses command line arguments and runs the requested
    design steps. Returns the process exit code.
    """
    parser = argparse.ArgumentParser(
        description='Low-thrust trajectory design by spherical shaping',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m lowthrust_shaping.main                    Spherical shaping
  python -m lowthrust_shaping.main --plots            With figures
  python -m lowthrust_shaping.main --propagate        With midpoint check
  python -m lowthrust_shaping.main --exposin          With exposin leg
        """
    )

    parser.add_argument('--config', type=str, default=None,
                        help='Path to shaping config YAML')
    parser.add_argument('--output-dir', type=str, default=None,
                        help='Output directory (default: from config)')
    parser.add_argument('--plots', action='store_true',
                        help='Write figures')
    parser.add_argument('--propagate', action='store_true',
                        help='Re-propagate the leg from its midpoint')
    parser.add_argument('--exposin', action='store_true',
                        help='Also design an exposin leg')
    parser.add_argument('--verbose', action='store_true',
                        help='Debug logging')

    args = parser.parse_args(argv)

    config = load_config(args.config)
    output_section = config.get('output', {})
    output_dir = args.output_dir or output_section.get('directory', 'output')
    setup_logging(output_dir, args.verbose, output_section.get('log_file', 'shaping.log'))
    output_dir = setup_output_directories(output_dir)

    print("=" * 70)
    print(f"  LOW-THRUST SHAPING: {config['leg'].get('name', 'unnamed leg')}")
    print("=" * 70)

    try:
        leg = run_spherical_shaping(config, output_dir, args.plots)
        if args.propagate:
            run_propagation(leg, config, output_dir, args.plots)
        if args.exposin:
            run_exposin(config, output_dir, args.plots)
    except ShapingError as exc:
        logger.error(f"Design failed: {type(exc).__name__}: {exc}")
        return 1

    print("=" * 70)
    print(f"  Outputs saved to: {output_dir}")
    print("=" * 70)
    return 0


if __name__ == '__main__':
    sys.exit(main())
