"""
===============================================================================
LOW-THRUST SHAPING - Composite Function Test Suite
===============================================================================
Tests for the radial (inverse-radius) and elevation composite functions:
basis derivatives against finite differences, chain rule on r = 1/u,
vectorized evaluation and coefficient immutability.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import dataclasses

import numpy as np
import pytest
from numpy.testing import assert_allclose

from lowthrust_shaping.shaping.composite_functions import (
    CompositeCoefficients,
    CompositeElevationFunction,
    CompositeRadialFunction,
    elevation_basis,
    radial_basis,
)


RADIAL = np.array([1.0, 0.05, -0.01, 0.02, 0.01, -0.03, 0.005])
ELEVATION = np.array([0.02, -0.01, 0.03, 0.005])
STEP = 1.0e-5


def central_difference(f, theta, h=STEP):
    return (f(theta + h) - f(theta - h)) / (2.0 * h)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def radial_function():
    return CompositeRadialFunction(RADIAL)


@pytest.fixture
def elevation_function():
    return CompositeElevationFunction(ELEVATION)


# =============================================================================
# Test: Basis terms
# =============================================================================

class TestBasisTerms:

    def test_radial_basis_values(self):
        theta = 0.7
        expected = [1.0, theta, theta ** 2, np.cos(theta), theta * np.cos(theta),
                    np.sin(theta), theta * np.sin(theta)]
        assert_allclose(radial_basis(theta), expected, rtol=1e-14)

    def test_elevation_basis_matches_trigonometric_radial_terms(self):
        theta = np.linspace(0.0, 6.0, 11)
        for order in range(4):
            assert_allclose(elevation_basis(theta, order), radial_basis(theta, order)[3:])

    @pytest.mark.parametrize("order", [0, 1, 2])
    @pytest.mark.parametrize("theta", [0.0, 1.3, 4.0, 9.5])
    def test_radial_basis_derivatives_match_finite_differences(self, order, theta):
        numerical = central_difference(lambda t: radial_basis(t, order), theta)
        assert_allclose(radial_basis(theta, order + 1), numerical, rtol=1e-7, atol=1e-7)

    def test_invalid_order_raises(self):
        with pytest.raises(ValueError):
            radial_basis(1.0, 4)

    def test_vectorized_shape(self):
        theta = np.linspace(0.0, 2.0, 5)
        assert radial_basis(theta, 2).shape == (7, 5)
        assert elevation_basis(theta, 3).shape == (4, 5)


# =============================================================================
# Test: Radial function
# =============================================================================

class TestRadialFunction:

    def test_evaluate_is_inverse_of_combination(self, radial_function):
        theta = np.linspace(0.0, 10.0, 7)
        assert_allclose(radial_function.evaluate(theta) * radial_function.combination(theta),
                        np.ones_like(theta), rtol=1e-14)

    @pytest.mark.parametrize("theta", [0.2, 2.5, 7.0])
    def test_first_derivative(self, radial_function, theta):
        assert_allclose(radial_function.first_derivative(theta),
                        central_difference(radial_function.evaluate, theta),
                        rtol=1e-7, atol=1e-9)

    @pytest.mark.parametrize("theta", [0.2, 2.5, 7.0])
    def test_second_derivative(self, radial_function, theta):
        assert_allclose(radial_function.second_derivative(theta),
                        central_difference(radial_function.first_derivative, theta),
                        rtol=1e-7, atol=1e-9)

    @pytest.mark.parametrize("theta", [0.2, 2.5, 7.0])
    def test_third_derivative(self, radial_function, theta):
        assert_allclose(radial_function.third_derivative(theta),
                        central_difference(radial_function.second_derivative, theta),
                        rtol=1e-7, atol=1e-9)

    def test_component_returns_unweighted_basis_term(self, radial_function):
        theta = 1.1
        assert radial_function.component(2, theta) == pytest.approx(theta ** 2)
        assert radial_function.component(4, theta, order=1) == pytest.approx(
            np.cos(theta) - theta * np.sin(theta))

    def test_component_index_out_of_range(self, radial_function):
        with pytest.raises(IndexError):
            radial_function.component(7, 0.0)

    def test_reset_coefficients_replaces_vector(self, radial_function):
        radial_function.reset_coefficients([2.0, 0, 0, 0, 0, 0, 0])
        assert radial_function.evaluate(3.0) == pytest.approx(0.5)

    def test_reset_with_wrong_size_raises(self, radial_function):
        with pytest.raises(ValueError):
            radial_function.reset_coefficients([1.0, 2.0])


# =============================================================================
# Test: Elevation function
# =============================================================================

class TestElevationFunction:

    def test_evaluate(self, elevation_function):
        theta = 0.9
        b0, b1, b2, b3 = ELEVATION
        expected = (b0 + b1 * theta) * np.cos(theta) + (b2 + b3 * theta) * np.sin(theta)
        assert elevation_function.evaluate(theta) == pytest.approx(expected, rel=1e-14)

    @pytest.mark.parametrize("theta", [0.0, 3.0, 8.0])
    def test_derivative_chain(self, elevation_function, theta):
        f = elevation_function
        assert_allclose(f.first_derivative(theta), central_difference(f.evaluate, theta),
                        rtol=1e-7, atol=1e-10)
        assert_allclose(f.third_derivative(theta),
                        central_difference(f.second_derivative, theta),
                        rtol=1e-7, atol=1e-10)


# =============================================================================
# Test: Coefficient snapshot
# =============================================================================

class TestCompositeCoefficients:

    def test_defaults_are_ones(self):
        coefficients = CompositeCoefficients()
        assert_allclose(coefficients.radial, np.ones(7))
        assert_allclose(coefficients.elevation, np.ones(4))

    def test_free_coefficient_is_radial_index_two(self):
        coefficients = CompositeCoefficients(RADIAL, ELEVATION)
        assert coefficients.free_coefficient == pytest.approx(-0.01)

    def test_fields_cannot_be_reassigned(self):
        coefficients = CompositeCoefficients(RADIAL, ELEVATION)
        with pytest.raises(dataclasses.FrozenInstanceError):
            coefficients.radial = np.zeros(7)

    def test_arrays_are_read_only(self):
        coefficients = CompositeCoefficients(RADIAL, ELEVATION)
        with pytest.raises(ValueError):
            coefficients.radial[0] = 5.0

    def test_input_array_is_copied(self):
        radial = RADIAL.copy()
        coefficients = CompositeCoefficients(radial, ELEVATION)
        radial[0] = 99.0
        assert coefficients.radial[0] == pytest.approx(1.0)

    @pytest.mark.parametrize("radial,elevation", [
        (np.ones(6), np.ones(4)),
        (np.ones(7), np.ones(5)),
    ])
    def test_wrong_sizes_raise(self, radial, elevation):
        with pytest.raises(ValueError):
            CompositeCoefficients(radial, elevation)
