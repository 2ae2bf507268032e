"""Tests for heightfield normalization."""

import pytest
import numpy as np
from py_heightfield.core.errors import ConfigurationError
from py_heightfield.core.normalizer import NormalizeMode, normalize


class TestClamp:
    """Test the default clamping mode."""

    def test_in_range_values_unchanged(self):
        field = np.array([[0.0, 0.25], [0.5, 1.0]])
        np.testing.assert_array_equal(normalize(field), field)

    def test_out_of_range_values_clamped(self):
        field = np.array([[-0.5, 0.3], [1.7, 42.0]])
        np.testing.assert_array_equal(normalize(field), [[0.0, 0.3], [1.0, 1.0]])

    def test_non_finite_values_clamped(self):
        field = np.array([np.nan, np.inf, -np.inf, 0.5])
        np.testing.assert_array_equal(normalize(field), [0.0, 1.0, 0.0, 0.5])

    def test_custom_range(self):
        field = np.array([-3.0, -0.5, 0.0, 2.0])
        np.testing.assert_array_equal(normalize(field, (-1.0, 1.0)), [-1.0, -0.5, 0.0, 1.0])

    def test_input_untouched(self):
        field = np.array([2.0, -1.0])
        normalize(field)
        np.testing.assert_array_equal(field, [2.0, -1.0])


class TestRescale:
    """Test min-max rescaling."""

    def test_spans_output_range(self):
        field = np.array([[2.0, 3.0], [4.0, 6.0]])
        result = normalize(field, mode=NormalizeMode.RESCALE)

        assert result.min() == 0.0
        assert result.max() == 1.0
        np.testing.assert_allclose(result, [[0.0, 0.25], [0.5, 1.0]])

    def test_flat_field_maps_to_low(self):
        result = normalize(np.full((3, 3), 7.0), (0.2, 0.8), mode="rescale")
        np.testing.assert_array_equal(result, np.full((3, 3), 0.2))

    def test_custom_range(self):
        result = normalize(np.array([0.0, 10.0]), (-1.0, 1.0), mode="rescale")
        np.testing.assert_allclose(result, [-1.0, 1.0])


class TestValidation:
    """Test rejected configurations."""

    @pytest.mark.parametrize("output_range", [(1.0, 0.0), (0.5, 0.5), (0.0, np.inf), (0.0,), None])
    def test_bad_output_range(self, output_range):
        with pytest.raises(ConfigurationError):
            normalize(np.zeros(3), output_range)

    def test_unknown_mode(self):
        with pytest.raises(ConfigurationError, match="normalize mode"):
            normalize(np.zeros(3), mode="squash")
