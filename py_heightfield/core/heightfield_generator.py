"""
Heightfield generation entry point.

Ties the pieces together for one generation request:

    seed -> GradientNoise2D -> HeightFieldAccumulator (driven by octaves) -> normalize

The whole configuration is validated before anything is allocated, so a
request either fails up front or produces a complete field.
"""

import math
import numbers
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np
import structlog

from ..config.octave_presets import get_preset
from .accumulator import (
    HeightFieldAccumulator, validate_gradient_factor, validate_grid_size, validate_workers,
)
from .errors import ConfigurationError
from .normalizer import NormalizeMode, normalize, parse_normalize_mode, validate_output_range
from .octaves import (
    NOISE_DOMAIN_LIMIT, OctaveSpec, OffsetMode, build_octaves, parse_offset_mode, validate_octaves,
)
from .simplex_noise import SlicedNoise3D, get_gradient_noise, get_gradient_noise_3d
from .sine_terrain import generate_sine_heightfield

logger = structlog.get_logger()


class Basis(str, Enum):
    """Source of the heightfield."""

    SIMPLEX = "simplex"  # slope-damped gradient noise octaves
    SINE = "sine"        # seeded sine products


def normalize_seed(seed: int) -> int:
    """Reduce any integer seed to 32 bits."""
    if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)):
        raise ConfigurationError(f"seed must be an integer, got {seed!r}")
    return int(seed) & 0xFFFFFFFF


@dataclass
class HeightfieldConfig:
    """Configuration for heightfield generation.

    Attributes:
        grid_size: Resolution N of the square output
        octaves: Explicit octaves; when None they are built from ``preset``
        preset: Octave preset name used when ``octaves`` is None
        offset_mode: Offset policy for preset-built octaves
        gradient_factor: Slope damping strength, 0 disables damping
        output_range: Bounds of the normalized output
        normalize_mode: CLAMP or RESCALE
        basis: SIMPLEX or SINE
        slice_z: When set, sample a z-slice of 3D noise instead of 2D noise
        workers: Row bands processed in parallel within one octave pass
    """

    grid_size: int = 256
    octaves: Optional[List[OctaveSpec]] = None
    preset: str = "default"
    offset_mode: OffsetMode = OffsetMode.RANDOM
    gradient_factor: float = 8.0
    output_range: Tuple[float, float] = field(default=(0.0, 1.0))
    normalize_mode: NormalizeMode = NormalizeMode.CLAMP
    basis: Basis = Basis.SIMPLEX
    slice_z: Optional[float] = None
    workers: int = 1


def validate_config(config: HeightfieldConfig) -> None:
    """
    Check every field of a configuration.

    Raises:
        ConfigurationError: Describing the first problem found
    """
    validate_grid_size(config.grid_size)
    validate_gradient_factor(config.gradient_factor)
    validate_output_range(config.output_range)
    parse_normalize_mode(config.normalize_mode)
    parse_offset_mode(config.offset_mode)

    try:
        Basis(config.basis)
    except ValueError:
        raise ConfigurationError(f"Unknown basis {config.basis!r}") from None

    validate_workers(config.workers)

    if config.slice_z is not None and (
        not isinstance(config.slice_z, numbers.Real) or not math.isfinite(config.slice_z)
    ):
        raise ConfigurationError(f"slice_z must be a finite number, got {config.slice_z!r}")
    if config.slice_z is not None and abs(config.slice_z) > NOISE_DOMAIN_LIMIT:
        raise ConfigurationError(f"slice_z must be within the noise domain limit of {NOISE_DOMAIN_LIMIT:g}")

    if config.octaves is None:
        try:
            get_preset(config.preset)
        except KeyError as e:
            raise ConfigurationError(str(e.args[0])) from None
    else:
        validate_octaves(config.octaves, config.grid_size)


class HeightfieldGenerator:
    """
    Generates normalized heightfields for a fixed configuration.

    Example:
        >>> generator = HeightfieldGenerator(HeightfieldConfig(grid_size=128))
        >>> heights = generator.generate(seed=42)
        >>> heights.shape
        (128, 128)
    """

    def __init__(self, config: Optional[HeightfieldConfig] = None):
        self.config = config or HeightfieldConfig()
        validate_config(self.config)

    def resolve_octaves(self, seed: int) -> List[OctaveSpec]:
        """Octaves used for ``seed``: the explicit list or the preset's layers."""
        config = self.config
        if config.octaves is not None:
            return list(config.octaves)
        return build_octaves(
            config.grid_size,
            get_preset(config.preset),
            offset_mode=parse_offset_mode(config.offset_mode),
            seed=seed,
        )

    def noise_for(self, seed: int):
        if self.config.slice_z is None:
            return get_gradient_noise(seed)
        return SlicedNoise3D(get_gradient_noise_3d(seed), self.config.slice_z)

    def generate(self, seed: int) -> np.ndarray:
        """
        Generate the heightfield for a seed.

        Args:
            seed: Any integer, reduced to 32 bits

        Returns:
            (N, N) float64 array within ``output_range``, row-major with
            (0, 0) at the top-left
        """
        seed = normalize_seed(seed)
        config = self.config
        start = time.perf_counter()

        logger.info(
            "Generating heightfield",
            seed=seed,
            grid_size=config.grid_size,
            basis=Basis(config.basis).value,
            gradient_factor=config.gradient_factor,
        )

        if Basis(config.basis) == Basis.SINE:
            raw = generate_sine_heightfield(config.grid_size, seed)
        else:
            octaves = self.resolve_octaves(seed)
            accumulator = HeightFieldAccumulator(
                self.noise_for(seed), config.gradient_factor, workers=config.workers
            )
            raw = accumulator.accumulate(octaves, config.grid_size)

        heights = normalize(raw, config.output_range, config.normalize_mode)

        logger.info(
            "Heightfield generated",
            seed=seed,
            seconds=round(time.perf_counter() - start, 3),
            min=float(heights.min()),
            max=float(heights.max()),
        )
        return heights


def generate_heightfield(seed: int, config: Optional[HeightfieldConfig] = None) -> np.ndarray:
    """Generate one heightfield; see HeightfieldGenerator.generate."""
    return HeightfieldGenerator(config).generate(seed)
