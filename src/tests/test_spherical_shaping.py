"""
===============================================================================
LOW-THRUST SHAPING - Spherical Shaping Leg Test Suite
===============================================================================
End-to-end tests of SphericalShaping.  A circular orbit at 1 AU with
departure and arrival at the same point after one revolution must collapse
to the Kepler circle: zero free coefficient, zero thrust, one orbital period.
An inclined one-revolution transfer from 1 AU to 1.524 AU checks the same
laws on a thrusting shape: time of flight, boundary states and the
time-azimuth map.
===============================================================================
"""

import sys
import os
import logging

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest
from numpy.testing import assert_allclose

from lowthrust_shaping.core.constants import AU, DEG2RAD, JULIAN_DAY, SUN_MU, TWO_PI
from lowthrust_shaping.core.errors import (
    FreeCoefficientBoundsError,
    RootFindingNonconvergenceError,
    SingularBoundarySystemError,
)
from lowthrust_shaping.core.units import (
    normalize_gravitational_parameter,
    normalize_state,
    normalize_time,
)
from lowthrust_shaping.dynamics.environment import GravityField
from lowthrust_shaping.numerics.quadrature import GaussianQuadrature
from lowthrust_shaping.numerics.root_finding import RootFinderSettings
from lowthrust_shaping.shaping.boundary_conditions import (
    BoundaryConditionSolver,
    boundary_states_for_leg,
)
from lowthrust_shaping.shaping.kinematics import ShapeKinematics
from lowthrust_shaping.shaping.spherical_shaping import ShapeParameters, SphericalShaping
from lowthrust_shaping.shaping.time_of_flight import SearchState, TimeOfFlightIterator


PERIOD = TWO_PI * np.sqrt(AU ** 3 / SUN_MU)
MU = normalize_gravitational_parameter(SUN_MU)
TRANSFER_TIME_OF_FLIGHT = 700.0 * JULIAN_DAY


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(scope="module")
def circular_state():
    return GravityField.sun().circular_orbit_state(AU)


@pytest.fixture(scope="module")
def circular_leg(circular_state):
    parameters = ShapeParameters(
        required_time_of_flight=PERIOD,
        number_of_revolutions=1,
        initial_value_free_coefficient=0.005,
        lower_bound_free_coefficient=-0.01,
        upper_bound_free_coefficient=0.01,
    )
    return SphericalShaping(circular_state, circular_state, parameters)


def circular_iterator(circular_state, required_time_of_flight, revolutions=1):
    state = normalize_state(circular_state)
    initial, final = boundary_states_for_leg(state, state, revolutions)
    solver = BoundaryConditionSolver(initial, final, MU)
    return TimeOfFlightIterator(solver, required_time_of_flight,
                                GaussianQuadrature(initial.azimuth), -0.01, 0.01)


@pytest.fixture(scope="module")
def transfer_states():
    """Departure on the 1 AU circle, arrival on an inclined 1.524 AU circle."""
    sun = GravityField.sun()
    departure = sun.circular_orbit_state(AU)
    arrival = sun.circular_orbit_state(1.524 * AU, azimuth=135.0 * DEG2RAD,
                                       inclination=1.85 * DEG2RAD)
    return departure, arrival


def transfer_parameters(lower_bound=-0.04, upper_bound=0.02):
    return ShapeParameters(
        required_time_of_flight=TRANSFER_TIME_OF_FLIGHT,
        number_of_revolutions=1,
        lower_bound_free_coefficient=lower_bound,
        upper_bound_free_coefficient=upper_bound,
    )


@pytest.fixture(scope="module")
def transfer_leg(transfer_states):
    departure, arrival = transfer_states
    return SphericalShaping(departure, arrival, transfer_parameters())


def transfer_iterator(transfer_states, lower_bound, upper_bound):
    departure, arrival = (normalize_state(s) for s in transfer_states)
    initial, final = boundary_states_for_leg(departure, arrival, 1)
    solver = BoundaryConditionSolver(initial, final, MU)
    return TimeOfFlightIterator(solver, normalize_time(TRANSFER_TIME_OF_FLIGHT),
                                GaussianQuadrature(initial.azimuth), lower_bound, upper_bound)


# =============================================================================
# Test: Circular leg
# =============================================================================

class TestCircularLeg:

    def test_free_coefficient_converges_to_zero(self, circular_leg):
        assert circular_leg.free_coefficient == pytest.approx(0.0, abs=1e-9)

    def test_coefficients_describe_unit_circle(self, circular_leg):
        assert_allclose(circular_leg.radial_coefficients, [1.0, 0, 0, 0, 0, 0, 0], atol=1e-7)
        assert_allclose(circular_leg.elevation_coefficients, np.zeros(4), atol=1e-10)

    def test_time_of_flight_matches_requirement(self, circular_leg):
        assert circular_leg.compute_time_of_flight() == pytest.approx(PERIOD, rel=1e-9)

    def test_delta_v_is_zero(self, circular_leg):
        assert circular_leg.compute_delta_v() == pytest.approx(0.0, abs=1e-3)

    def test_azimuth_span_is_one_revolution(self, circular_leg):
        assert circular_leg.initial_azimuth == pytest.approx(0.0)
        assert circular_leg.final_azimuth == pytest.approx(TWO_PI)
        assert circular_leg.travelled_azimuth == pytest.approx(TWO_PI)

    def test_boundary_states_are_reproduced(self, circular_leg, circular_state):
        assert_allclose(circular_leg.compute_state_at_azimuth(0.0), circular_state,
                        rtol=1e-9, atol=1e-3)
        assert_allclose(circular_leg.compute_state_at_azimuth(TWO_PI), circular_state,
                        rtol=1e-9, atol=1e2)

    def test_state_at_half_period_is_opposite_point(self, circular_leg, circular_state):
        state = circular_leg.compute_state_at_time(0.5 * PERIOD)
        assert_allclose(state[:3], [-AU, 0.0, 0.0], atol=1e-6 * AU)
        assert_allclose(state[3:], -circular_state[3:], atol=1e-3 * np.linalg.norm(
            circular_state[3:]))

    def test_midpoint_state(self, circular_leg):
        time, state = circular_leg.compute_midpoint_state()
        assert time == pytest.approx(0.5 * PERIOD, rel=1e-9)
        assert np.linalg.norm(state[:3]) == pytest.approx(AU, rel=1e-6)

    def test_thrust_queries_vanish(self, circular_leg):
        assert circular_leg.compute_thrust_acceleration_magnitude_at_azimuth(1.0) == \
            pytest.approx(0.0, abs=1e-9)
        assert_allclose(circular_leg.compute_thrust_acceleration_at_time(0.3 * PERIOD),
                        np.zeros(3), atol=1e-9)

    def test_time_azimuth_conversions(self, circular_leg):
        assert circular_leg.convert_azimuth_to_time(np.pi) == pytest.approx(0.5 * PERIOD,
                                                                           rel=1e-9)
        assert circular_leg.convert_time_to_azimuth(0.25 * PERIOD) == pytest.approx(
            0.5 * np.pi, abs=1e-6)

    def test_trajectory_table(self, circular_leg):
        table = circular_leg.trajectory_table(25)
        assert len(table) == 25
        for column in ['azimuth', 'time', 'x', 'vz', 'thrust_acceleration']:
            assert column in table.columns
        assert_allclose(np.hypot(table['x'], table['y']), np.full(25, AU), rtol=1e-6)
        assert table['time'].iloc[-1] == pytest.approx(PERIOD, rel=1e-9)
        assert table['thrust_acceleration'].max() < 1e-9

    def test_summary(self, circular_leg):
        summary = circular_leg.summary()
        assert summary['central_body'] == 'Sun'
        assert summary['time_of_flight_days'] == pytest.approx(PERIOD / JULIAN_DAY, rel=1e-9)

    def test_secant_search(self, circular_state):
        parameters = ShapeParameters(
            required_time_of_flight=PERIOD, number_of_revolutions=1,
            initial_value_free_coefficient=0.005,
            root_finder=RootFinderSettings(method='secant'))
        leg = SphericalShaping(circular_state, circular_state, parameters)
        assert leg.free_coefficient == pytest.approx(0.0, abs=1e-9)


# =============================================================================
# Test: Revolutions
# =============================================================================

class TestRevolutions:

    @pytest.mark.parametrize("revolutions", [1, 2, 3])
    def test_span_and_time_of_flight_grow_per_revolution(self, circular_state, revolutions):
        state = normalize_state(circular_state)
        initial, final = boundary_states_for_leg(state, state, revolutions)
        assert final.azimuth - initial.azimuth == pytest.approx(TWO_PI * revolutions)

        kinematics = ShapeKinematics(
            BoundaryConditionSolver(initial, final, MU).solve(0.0), MU)
        tof = GaussianQuadrature(initial.azimuth).integrate(kinematics.time_rate,
                                                            final.azimuth)
        assert tof == pytest.approx(revolutions * TWO_PI / np.sqrt(MU), rel=1e-9)


# =============================================================================
# Test: Time-of-flight iterator
# =============================================================================

class TestTimeOfFlightIterator:

    def test_states(self, circular_state):
        iterator = circular_iterator(circular_state, TWO_PI / np.sqrt(MU))
        assert iterator.state is SearchState.SEARCHING
        iterator.iterate(0.0)
        assert iterator.state is SearchState.CONVERGED
        assert iterator.converged_free_coefficient == pytest.approx(0.0, abs=1e-9)
        assert iterator.number_of_evaluations > 0

    def test_trial_outside_bounds_rejected(self, circular_state):
        iterator = circular_iterator(circular_state, TWO_PI / np.sqrt(MU))
        with pytest.raises(FreeCoefficientBoundsError):
            iterator.objective(0.5)
        assert iterator.number_of_evaluations == 0

    def test_time_of_flight_depends_on_free_coefficient(self, circular_state):
        iterator = circular_iterator(circular_state, TWO_PI / np.sqrt(MU))
        assert iterator.time_of_flight(0.005) != pytest.approx(iterator.time_of_flight(-0.005))

    def test_unreachable_requirement_raises(self, circular_state):
        iterator = circular_iterator(circular_state, 0.5 * TWO_PI / np.sqrt(MU))
        with pytest.raises(RootFindingNonconvergenceError) as info:
            iterator.iterate(0.0)
        assert info.value.best_estimate is not None
        assert iterator.state is SearchState.SEARCHING

    def test_non_positive_requirement_rejected(self, circular_state):
        with pytest.raises(ValueError):
            circular_iterator(circular_state, 0.0)


# =============================================================================
# Test: Construction errors
# =============================================================================

class TestConstruction:

    def test_zero_revolution_coincident_boundaries_are_singular(self, circular_state):
        parameters = ShapeParameters(required_time_of_flight=PERIOD)
        with pytest.raises(SingularBoundarySystemError):
            SphericalShaping(circular_state, circular_state, parameters)

    def test_unknown_central_body(self, circular_state):
        parameters = ShapeParameters(required_time_of_flight=PERIOD, number_of_revolutions=1)
        with pytest.raises(KeyError):
            SphericalShaping(circular_state, circular_state, parameters, central_body='Vulcan')

    def test_injected_gravitational_parameter_lookup(self, circular_state):
        requested = []

        def lookup(name):
            requested.append(name)
            return SUN_MU

        parameters = ShapeParameters(required_time_of_flight=PERIOD, number_of_revolutions=1)
        leg = SphericalShaping(circular_state, circular_state, parameters,
                               central_body='Star', gravitational_parameter_lookup=lookup)
        assert requested == ['Star']
        assert leg.gravitational_parameter == SUN_MU

    def test_initial_guess_is_solved_and_reported(self, circular_state, caplog):
        parameters = ShapeParameters(required_time_of_flight=PERIOD, number_of_revolutions=1,
                                     initial_value_free_coefficient=0.004)
        with caplog.at_level(logging.INFO, logger='lowthrust_shaping.shaping.spherical_shaping'):
            leg = SphericalShaping(circular_state, circular_state, parameters)
        assert 'Initial guess c2 = 4.000000e-03' in caplog.text
        assert leg.coefficients is leg.iterator.converged_coefficients

    @pytest.mark.parametrize("kwargs", [
        {'required_time_of_flight': 0.0},
        {'required_time_of_flight': PERIOD, 'number_of_revolutions': -1},
        {'required_time_of_flight': PERIOD, 'lower_bound_free_coefficient': 0.1,
         'upper_bound_free_coefficient': -0.1},
        {'required_time_of_flight': PERIOD, 'time_map_step': 0.0},
    ])
    def test_invalid_parameters(self, kwargs):
        with pytest.raises(ValueError):
            ShapeParameters(**kwargs)


# =============================================================================
# Test: Inclined transfer
# =============================================================================

class TestInclinedTransfer:

    def test_time_of_flight_matches_requirement(self, transfer_leg):
        assert transfer_leg.compute_time_of_flight() == pytest.approx(
            TRANSFER_TIME_OF_FLIGHT, rel=1e-9)
        assert -0.04 <= transfer_leg.free_coefficient <= 0.02

    def test_boundary_states_are_reproduced(self, transfer_leg, transfer_states):
        departure, arrival = transfer_states
        for azimuth, expected in ((transfer_leg.initial_azimuth, departure),
                                  (transfer_leg.final_azimuth, arrival)):
            state = transfer_leg.compute_state_at_azimuth(azimuth)
            assert_allclose(state[:3], expected[:3], atol=1.0e3)
            assert_allclose(state[3:], expected[3:], atol=1.0e-3)

    def test_shape_is_thrusting(self, transfer_leg):
        midpoint = 0.5 * transfer_leg.compute_time_of_flight()
        assert transfer_leg.compute_thrust_acceleration_magnitude_at_time(midpoint) > 0.0
        assert transfer_leg.compute_delta_v() == pytest.approx(5799.6, rel=1e-3)

    @pytest.mark.parametrize("fraction", [0.1, 0.37, 0.5, 0.83])
    def test_time_azimuth_round_trip(self, transfer_leg, fraction):
        time = fraction * transfer_leg.compute_time_of_flight()
        azimuth = transfer_leg.convert_time_to_azimuth(time)
        assert transfer_leg.convert_azimuth_to_time(azimuth) == pytest.approx(time, abs=1e-3)

    def test_azimuth_is_not_linear_in_time(self, transfer_leg):
        midpoint = 0.5 * transfer_leg.compute_time_of_flight()
        linear = transfer_leg.initial_azimuth + 0.5 * transfer_leg.travelled_azimuth
        assert abs(transfer_leg.convert_time_to_azimuth(midpoint) - linear) > 1e-3


# =============================================================================
# Test: Feasible bracket
# =============================================================================

class TestFeasibleBracket:

    def test_feasible_end_is_kept(self, circular_state):
        iterator = circular_iterator(circular_state, TWO_PI / np.sqrt(MU))
        assert iterator.feasible_bracket_end(0.01, 0.0) == 0.01

    def test_infeasible_upper_bound_is_contracted(self, transfer_states, transfer_leg, caplog):
        departure, arrival = transfer_states
        leg = SphericalShaping(departure, arrival, transfer_parameters(upper_bound=0.1))
        assert leg.free_coefficient == pytest.approx(transfer_leg.free_coefficient, abs=1e-9)
        assert leg.compute_time_of_flight() == pytest.approx(TRANSFER_TIME_OF_FLIGHT, rel=1e-9)
        assert 'contracting' in caplog.text

    def test_no_feasible_bracket_raises(self, transfer_states):
        iterator = transfer_iterator(transfer_states, 0.05, 0.1)
        with pytest.raises(RootFindingNonconvergenceError):
            iterator.iterate(0.05)
        assert iterator.state is SearchState.SEARCHING
