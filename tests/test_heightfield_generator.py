"""
Tests for the heightfield generation entry point.
"""

import math

import pytest
import numpy as np
from py_heightfield.core import (
    Basis, ConfigurationError, HeightfieldConfig, HeightfieldGenerator,
    NormalizeMode, OctaveSpec, OffsetMode, generate_heightfield,
)
from py_heightfield.core.heightfield_generator import normalize_seed
from py_heightfield.core.simplex_noise import GradientNoise2D


class TestHeightfieldGenerator:
    """Test heightfield generation end to end."""

    @pytest.fixture
    def small_config(self):
        """Create a small test configuration."""
        return HeightfieldConfig(grid_size=32, gradient_factor=8.0)

    def test_shape_and_dtype(self, small_config):
        heights = HeightfieldGenerator(small_config).generate(seed=1)

        assert heights.shape == (32, 32)
        assert heights.dtype == np.float64

    def test_deterministic(self, small_config):
        """Test that the same seed and configuration give identical output."""
        a = generate_heightfield(123, small_config)
        b = generate_heightfield(123, small_config)

        np.testing.assert_array_equal(a, b)

    def test_different_seeds_differ(self, small_config):
        a = generate_heightfield(1, small_config)
        b = generate_heightfield(2, small_config)

        assert not np.array_equal(a, b)

    def test_seed_reduced_to_32_bits(self, small_config):
        a = generate_heightfield(-1, small_config)
        b = generate_heightfield(2**32 - 1, small_config)

        np.testing.assert_array_equal(a, b)

    @pytest.mark.parametrize("config", [
        HeightfieldConfig(grid_size=24),
        HeightfieldConfig(grid_size=24, preset="rugged", gradient_factor=0.0),
        HeightfieldConfig(grid_size=24, preset="rolling", gradient_factor=1000.0),
        HeightfieldConfig(grid_size=24, octaves=[OctaveSpec(0.3, 5.0), OctaveSpec(0.9, 3.0)]),
        HeightfieldConfig(grid_size=24, normalize_mode=NormalizeMode.RESCALE),
        HeightfieldConfig(grid_size=24, basis=Basis.SINE),
        HeightfieldConfig(grid_size=24, slice_z=3.5),
    ])
    def test_output_within_unit_range(self, config):
        """Test every cell lies in [0, 1] for a variety of configurations."""
        heights = HeightfieldGenerator(config).generate(seed=77)

        assert np.all(heights >= 0.0)
        assert np.all(heights <= 1.0)

    def test_custom_output_range(self):
        config = HeightfieldConfig(grid_size=16, output_range=(-1.0, 1.0), normalize_mode="rescale")
        heights = generate_heightfield(5, config)

        assert heights.min() == -1.0
        assert heights.max() == pytest.approx(1.0)

    def test_single_octave_without_damping_matches_noise(self):
        """seed=123, N=8, one octave of scale 1/4, damping off."""
        config = HeightfieldConfig(
            grid_size=8, octaves=[OctaveSpec(0.25, 1.0)], gradient_factor=0.0
        )
        heights = generate_heightfield(123, config)

        noise = GradientNoise2D(123)
        expected = np.array([
            [(noise.evaluate(x / 4, y / 4) + 1) / 2 for x in range(8)]
            for y in range(8)
        ])
        np.testing.assert_allclose(heights, expected, rtol=0, atol=1e-12)

    def test_explicit_octaves_override_preset(self):
        octaves = [OctaveSpec(0.25, 1.0)]
        generator = HeightfieldGenerator(HeightfieldConfig(grid_size=8, octaves=octaves, preset="rugged"))

        assert generator.resolve_octaves(seed=3) == octaves

    def test_preset_octaves_follow_offset_mode(self):
        zero = HeightfieldGenerator(HeightfieldConfig(grid_size=64, offset_mode=OffsetMode.ZERO))
        random = HeightfieldGenerator(HeightfieldConfig(grid_size=64, offset_mode="random"))

        assert all(o.x_offset == 0.0 and o.y_offset == 0.0 for o in zero.resolve_octaves(9))
        assert any(o.x_offset != 0.0 for o in random.resolve_octaves(9))
        assert zero.resolve_octaves(9)[0].scale == 4.0 / 64

    def test_offset_modes_give_different_fields(self):
        a = generate_heightfield(10, HeightfieldConfig(grid_size=16, offset_mode="zero"))
        b = generate_heightfield(10, HeightfieldConfig(grid_size=16, offset_mode="random"))

        assert not np.array_equal(a, b)

    def test_slice_differs_from_2d(self):
        flat = generate_heightfield(4, HeightfieldConfig(grid_size=16))
        sliced = generate_heightfield(4, HeightfieldConfig(grid_size=16, slice_z=0.5))
        other_slice = generate_heightfield(4, HeightfieldConfig(grid_size=16, slice_z=7.25))

        assert not np.array_equal(flat, sliced)
        assert not np.array_equal(sliced, other_slice)

    def test_large_finite_offsets_stay_in_range(self):
        octaves = [OctaveSpec(0.5, 1.0, 1.0e9, -1.0e9)]
        heights = generate_heightfield(3, HeightfieldConfig(grid_size=16, octaves=octaves))

        assert np.all(np.isfinite(heights))
        assert np.all((heights >= 0.0) & (heights <= 1.0))

    def test_workers_do_not_change_output(self):
        a = generate_heightfield(8, HeightfieldConfig(grid_size=20, workers=1))
        b = generate_heightfield(8, HeightfieldConfig(grid_size=20, workers=4))

        np.testing.assert_array_equal(a, b)


class TestConfigValidation:
    """Test that bad configurations are rejected up front."""

    @pytest.mark.parametrize("overrides", [
        {"grid_size": 0},
        {"grid_size": -8},
        {"octaves": []},
        {"octaves": [OctaveSpec(math.nan, 1.0)]},
        {"octaves": [OctaveSpec(0.1, 1.0, math.inf, 0.0)]},
        {"gradient_factor": -1.0},
        {"output_range": (1.0, 0.0)},
        {"normalize_mode": "squash"},
        {"offset_mode": "sometimes"},
        {"basis": "voronoi"},
        {"preset": "volcano"},
        {"slice_z": math.nan},
        {"workers": 0},
        {"workers": 2.5},
        {"octaves": [OctaveSpec(1e308, 1.0)]},
        {"octaves": [OctaveSpec(0.25, 1.0, 1.7e308, 1.7e308)]},
        {"slice_z": 1e300},
    ])
    def test_rejected(self, overrides):
        with pytest.raises(ConfigurationError):
            HeightfieldGenerator(HeightfieldConfig(**overrides))

    def test_unknown_preset_message(self):
        with pytest.raises(ConfigurationError, match="volcano"):
            HeightfieldGenerator(HeightfieldConfig(preset="volcano"))

    @pytest.mark.parametrize("seed", [1.5, "12", True, None])
    def test_rejects_non_integer_seed(self, seed):
        with pytest.raises(ConfigurationError):
            normalize_seed(seed)

    def test_normalize_seed(self):
        assert normalize_seed(-1) == 2**32 - 1
        assert normalize_seed(2**32 + 5) == 5
        assert normalize_seed(np.int64(9)) == 9
