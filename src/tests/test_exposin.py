"""
===============================================================================
LOW-THRUST SHAPING - Exposin Test Suite
===============================================================================
Flight-path-angle bounds, geometry of the exponential sinusoid and the
time-of-flight search on the initial flight-path angle.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest
from numpy.testing import assert_allclose

from lowthrust_shaping.core.constants import AU, JULIAN_DAY, SUN_MU, TWO_PI
from lowthrust_shaping.core.errors import InfeasibleShapeError, RootFindingNonconvergenceError
from lowthrust_shaping.core.units import dimensionalize_time, normalize_gravitational_parameter
from lowthrust_shaping.dynamics.environment import GravityField
from lowthrust_shaping.numerics.quadrature import GaussianQuadrature
from lowthrust_shaping.shaping.exposin import (
    ExposinGeometry,
    ExposinShaping,
    flight_path_angle_bounds,
)


MU = normalize_gravitational_parameter(SUN_MU)
WINDING = 1.0 / 12.0
TRANSFER_ANGLE = 0.5 * np.pi + 2.0 * TWO_PI


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(scope="module")
def bounds():
    return flight_path_angle_bounds(1.0, 1.5, TRANSFER_ANGLE, WINDING)


@pytest.fixture(scope="module")
def mid_geometry(bounds):
    return ExposinGeometry(1.0, 1.5, TRANSFER_ANGLE, WINDING, 0.5 * sum(bounds), MU)


@pytest.fixture(scope="module")
def mid_time_of_flight(mid_geometry):
    normalized = GaussianQuadrature(0.0).integrate(mid_geometry.time_rate, TRANSFER_ANGLE)
    return dimensionalize_time(normalized)


# =============================================================================
# Test: Bounds and geometry
# =============================================================================

class TestGeometry:

    def test_bounds_are_ordered(self, bounds):
        lower, upper = bounds
        assert -0.5 * np.pi < lower < upper < 0.5 * np.pi

    def test_shape_meets_both_radii(self, mid_geometry):
        assert mid_geometry.radius(0.0) == pytest.approx(1.0, rel=1e-12)
        assert mid_geometry.radius(TRANSFER_ANGLE) == pytest.approx(1.5, rel=1e-10)

    def test_initial_flight_path_angle(self, mid_geometry):
        assert np.arctan(mid_geometry.tan_flight_path_angle(0.0)) == pytest.approx(
            mid_geometry.flight_path_angle, abs=1e-12)

    def test_dynamic_range_bound(self, mid_geometry):
        assert abs(mid_geometry.dynamic_range * WINDING ** 2) < 1.0

    def test_time_rate_is_inverse_azimuth_rate(self, mid_geometry):
        theta = np.linspace(0.0, TRANSFER_ANGLE, 7)
        assert_allclose(mid_geometry.time_rate(theta) * mid_geometry.azimuth_rate(theta),
                        np.ones(7), rtol=1e-14)

    def test_unit_circle_is_thrust_free(self):
        # r1 = r2 and gamma = 0 gives k1 = 0: a circle
        geometry = ExposinGeometry(1.0, 1.0, 1.0, WINDING, 0.0, MU)
        assert geometry.dynamic_range == 0.0
        assert geometry.phase == 0.0
        assert geometry.thrust_acceleration_magnitude(0.5) == pytest.approx(0.0, abs=1e-14)
        assert geometry.time_rate(0.5) == pytest.approx(1.0 / np.sqrt(MU))

    def test_whole_winding_period_is_infeasible(self):
        with pytest.raises(InfeasibleShapeError):
            flight_path_angle_bounds(1.0, 1.5, 2.0 * np.pi / WINDING, WINDING)

    def test_negative_discriminant_is_infeasible(self):
        with pytest.raises(InfeasibleShapeError):
            flight_path_angle_bounds(1.0, 1.5, 0.1, 1.0)


# =============================================================================
# Test: Time-of-flight search
# =============================================================================

class TestExposinShaping:

    def test_recovers_flight_path_angle(self, mid_geometry, mid_time_of_flight):
        leg = ExposinShaping(AU, 1.5 * AU, TRANSFER_ANGLE, mid_time_of_flight,
                             winding_parameter=WINDING, gravitational_parameter=SUN_MU)
        assert leg.flight_path_angle == pytest.approx(mid_geometry.flight_path_angle,
                                                      abs=1e-8)
        assert leg.compute_time_of_flight() == pytest.approx(mid_time_of_flight, rel=1e-9)

    def test_outputs(self, mid_time_of_flight):
        leg = ExposinShaping(AU, 1.5 * AU, TRANSFER_ANGLE, mid_time_of_flight,
                             winding_parameter=WINDING)
        assert leg.compute_delta_v() > 0.0
        assert leg.compute_radius_at_azimuth(0.0) == pytest.approx(AU, rel=1e-12)
        assert leg.compute_thrust_acceleration_magnitude_at_azimuth(1.0) >= 0.0

        table = leg.trajectory_table(30)
        assert len(table) == 30
        assert table['radius'].iloc[-1] == pytest.approx(1.5 * AU, rel=1e-9)
        assert table['time'].iloc[-1] == pytest.approx(mid_time_of_flight, rel=1e-9)

    def test_from_boundary_states(self, mid_time_of_flight):
        sun = GravityField.sun()
        departure = sun.circular_orbit_state(AU)
        arrival = sun.circular_orbit_state(1.5 * AU, azimuth=0.5 * np.pi)
        leg = ExposinShaping.from_boundary_states(departure, arrival, mid_time_of_flight,
                                                  number_of_revolutions=2,
                                                  winding_parameter=WINDING)
        assert leg.transfer_angle == pytest.approx(TRANSFER_ANGLE)
        assert leg.initial_radius == pytest.approx(1.0)

    def test_unreachable_time_of_flight_raises(self):
        with pytest.raises(RootFindingNonconvergenceError):
            ExposinShaping(AU, 1.5 * AU, TRANSFER_ANGLE, JULIAN_DAY,
                           winding_parameter=WINDING)

    @pytest.mark.parametrize("kwargs", [
        {'initial_radius': -AU},
        {'transfer_angle': 0.0},
        {'required_time_of_flight': -1.0},
        {'winding_parameter': 0.0},
    ])
    def test_invalid_inputs(self, kwargs):
        arguments = {'initial_radius': AU, 'final_radius': 1.5 * AU,
                     'transfer_angle': TRANSFER_ANGLE,
                     'required_time_of_flight': 500.0 * JULIAN_DAY}
        arguments.update(kwargs)
        with pytest.raises(ValueError):
            ExposinShaping(**arguments)
