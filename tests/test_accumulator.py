"""Tests for slope-damped octave accumulation."""

import math

import pytest
import numpy as np
from py_heightfield.core.accumulator import (
    DoubleBuffer, HeightFieldAccumulator, damped_contribution, surface_slope,
)
from py_heightfield.core.errors import ConfigurationError
from py_heightfield.core.octaves import OctaveSpec
from py_heightfield.core.simplex_noise import GradientNoise2D


@pytest.fixture
def noise():
    return GradientNoise2D(123)


def raw_samples(noise, octave, size):
    """Noise samples of one octave on the grid, mapped to [0, 1]."""
    fx = np.arange(size) * octave.scale + octave.x_offset
    fy = np.arange(size) * octave.scale + octave.y_offset
    gx, gy = np.meshgrid(fx, fy)
    return (noise.evaluate_grid(gx, gy) + 1) / 2


class TestDoubleBuffer:
    """Test the ping-pong buffer pair."""

    def test_buffers_are_distinct(self):
        buffers = DoubleBuffer(4)

        assert buffers.front is not buffers.back
        assert not np.shares_memory(buffers.front, buffers.back)
        assert np.all(buffers.front == 0)

    def test_swap(self):
        buffers = DoubleBuffer(3)
        front, back = buffers.front, buffers.back

        buffers.swap()
        assert buffers.front is back
        assert buffers.back is front

        buffers.swap()
        assert buffers.front is front


class TestSurfaceSlope:
    """Test backward differences and the border policy."""

    @pytest.fixture
    def field(self):
        rng = np.random.default_rng(3)
        return rng.uniform(-5.0, 5.0, size=(6, 7))

    def test_border_slopes_are_zero(self, field):
        """Test that column 0 and row 0 ignore out-of-grid neighbours."""
        dx, dy = surface_slope(field)

        assert np.all(dx[:, 0] == 0.0)
        assert np.all(dy[0, :] == 0.0)

    def test_no_wraparound(self):
        """Test that a large value on the far edge does not leak into the border."""
        field = np.zeros((4, 4))
        field[:, -1] = 1000.0
        field[-1, :] = 1000.0
        dx, dy = surface_slope(field)

        assert np.all(dx[:, 0] == 0.0)
        assert np.all(dy[0, :] == 0.0)

    def test_interior_differences(self, field):
        dx, dy = surface_slope(field)

        np.testing.assert_array_equal(dx[:, 1:], field[:, 1:] - field[:, :-1])
        np.testing.assert_array_equal(dy[1:, :], field[1:, :] - field[:-1, :])

    def test_row_band_matches_full_grid(self, field):
        """Test that a band starting mid-grid reads the row above it."""
        full_dx, full_dy = surface_slope(field)
        dx, dy = surface_slope(field, 2, 5)

        np.testing.assert_array_equal(dx, full_dx[2:5])
        np.testing.assert_array_equal(dy, full_dy[2:5])


class TestDampedContribution:
    """Test the slope damping term."""

    def test_strictly_decreasing_in_magnitude(self):
        magnitudes = np.linspace(0.0, 10.0, 101)
        values = damped_contribution(0.7, magnitudes, 2.5)

        assert np.all(np.diff(values) < 0)

    def test_disabled_damping(self):
        magnitudes = np.array([0.0, 0.5, 100.0])
        np.testing.assert_array_equal(damped_contribution(0.7, magnitudes, 0.0), [0.7, 0.7, 0.7])

    def test_flat_surface_keeps_sample(self):
        assert damped_contribution(0.25, 0.0, 50.0) == 0.25


class TestHeightFieldAccumulator:
    """Test full accumulation runs."""

    def test_single_octave_without_damping_is_raw_noise(self, noise):
        """seed=123, N=8, one octave of scale 1/4, damping off."""
        accumulator = HeightFieldAccumulator(noise, gradient_factor=0.0)
        result = accumulator.accumulate([OctaveSpec(scale=0.25, weight=1.0)], 8)

        expected = np.array([
            [(noise.evaluate(x / 4, y / 4) + 1) / 2 for x in range(8)]
            for y in range(8)
        ])
        assert result.shape == (8, 8)
        np.testing.assert_allclose(result, expected, rtol=0, atol=1e-12)

    def test_two_equal_octaves_average_without_damping(self, noise):
        """Two octaves of weight 0.5 reduce to the mean of their samples."""
        octaves = [OctaveSpec(0.25, 0.5), OctaveSpec(0.5, 0.5, 3.0, 7.0)]
        result = HeightFieldAccumulator(noise, 0.0).accumulate(octaves, 8)

        expected = (raw_samples(noise, octaves[0], 8) + raw_samples(noise, octaves[1], 8)) / 2
        np.testing.assert_allclose(result, expected, rtol=0, atol=1e-12)

    def test_first_octave_reads_zero_surface(self, noise):
        """Test that the first pass is damped only by the noise slope."""
        octave = OctaveSpec(0.2, 0.8, 1.5, 2.5)
        gradient_factor = 3.0
        result = HeightFieldAccumulator(noise, gradient_factor).accumulate([octave], 6)

        fx = np.arange(6) * octave.scale + octave.x_offset
        fy = np.arange(6) * octave.scale + octave.y_offset
        gx, gy = np.meshgrid(fx, fy)
        n = noise.evaluate_grid(gx, gy)
        dx = octave.weight * (n - noise.evaluate_grid(gx - octave.scale, gy))
        dy = octave.weight * (n - noise.evaluate_grid(gx, gy - octave.scale))
        magnitude = np.sqrt(dx * dx + dy * dy)
        expected = (n + 1) / 2 / (1 + gradient_factor * magnitude) * octave.weight

        np.testing.assert_allclose(result, expected, rtol=0, atol=1e-12)

    def test_damping_lowers_deposition(self, noise):
        octaves = [OctaveSpec(0.1, 0.5), OctaveSpec(0.3, 0.5, 11.0, 5.0)]
        undamped = HeightFieldAccumulator(noise, 0.0).accumulate(octaves, 16)
        damped = HeightFieldAccumulator(noise, 20.0).accumulate(octaves, 16)

        assert np.all(damped <= undamped + 1e-12)
        assert damped.sum() < undamped.sum()

    def test_octave_order_matters_with_damping(self, noise):
        """Test that accumulation reads the previous pass, so order is significant."""
        a = OctaveSpec(0.05, 0.7)
        b = OctaveSpec(0.4, 0.3, 17.0, 4.0)
        forward = HeightFieldAccumulator(noise, 10.0).accumulate([a, b], 16)
        backward = HeightFieldAccumulator(noise, 10.0).accumulate([b, a], 16)

        assert not np.allclose(forward, backward)

    def test_deterministic(self, noise):
        octaves = [OctaveSpec(0.1, 0.6, 2.0, 9.0), OctaveSpec(0.35, 0.4, 40.0, 1.0)]
        a = HeightFieldAccumulator(noise, 5.0).accumulate(octaves, 20)
        b = HeightFieldAccumulator(GradientNoise2D(123), 5.0).accumulate(octaves, 20)

        np.testing.assert_array_equal(a, b)

    @pytest.mark.parametrize("workers", [2, 3, 8, 64])
    def test_row_workers_match_sequential(self, noise, workers):
        """Test that banded passes give exactly the single-worker result."""
        octaves = [OctaveSpec(0.07, 0.5), OctaveSpec(0.2, 0.3, 5.0, 6.0), OctaveSpec(0.6, 0.2, 9.0, 1.0)]
        sequential = HeightFieldAccumulator(noise, 6.0).accumulate(octaves, 17)
        banded = HeightFieldAccumulator(noise, 6.0, workers=workers).accumulate(octaves, 17)

        np.testing.assert_array_equal(banded, sequential)

    def test_result_is_independent_copy(self, noise):
        accumulator = HeightFieldAccumulator(noise, 1.0)
        a = accumulator.accumulate([OctaveSpec(0.25, 1.0)], 4)
        a[:] = -1.0
        b = accumulator.accumulate([OctaveSpec(0.25, 1.0)], 4)

        assert np.all(b >= 0.0)

    @pytest.mark.parametrize("grid_size", [0, -3, 2.5, None, True])
    def test_rejects_bad_grid_size(self, noise, grid_size):
        with pytest.raises(ConfigurationError):
            HeightFieldAccumulator(noise, 1.0).accumulate([OctaveSpec(0.25, 1.0)], grid_size)

    def test_rejects_empty_octaves(self, noise):
        with pytest.raises(ConfigurationError):
            HeightFieldAccumulator(noise, 1.0).accumulate([], 8)

    def test_rejects_non_finite_octave(self, noise):
        with pytest.raises(ConfigurationError):
            HeightFieldAccumulator(noise, 1.0).accumulate([OctaveSpec(math.inf, 1.0)], 8)

    @pytest.mark.parametrize("gradient_factor", [-0.1, math.nan, math.inf])
    def test_rejects_bad_gradient_factor(self, noise, gradient_factor):
        with pytest.raises(ConfigurationError):
            HeightFieldAccumulator(noise, gradient_factor)

    def test_rejects_zero_workers(self, noise):
        with pytest.raises(ConfigurationError):
            HeightFieldAccumulator(noise, 1.0, workers=0)

    @pytest.mark.parametrize("workers", [2.5, True, "2", None])
    def test_rejects_non_integer_workers(self, noise, workers):
        with pytest.raises(ConfigurationError, match="workers"):
            HeightFieldAccumulator(noise, 1.0, workers=workers)

    @pytest.mark.parametrize("octave", [OctaveSpec(1e308, 1.0), OctaveSpec(0.25, 1.0, 1.7e308, 1.7e308)])
    def test_rejects_octaves_beyond_noise_domain(self, noise, octave):
        with pytest.raises(ConfigurationError, match="noise domain"):
            HeightFieldAccumulator(noise, 1.0).accumulate([octave], 8)
