"""Octave configuration for heightfield accumulation."""

import math
import numbers
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from .alea_prng import AleaPRNG
from .errors import ConfigurationError

# Offsets are drawn within one period of the permutation table
OFFSET_RANGE = 256.0

# Largest noise coordinate magnitude; keeps lattice cells exact in int64
NOISE_DOMAIN_LIMIT = 2.0 ** 31


@dataclass(frozen=True)
class OctaveSpec:
    """One accumulation pass.

    Attributes:
        scale: Noise units per grid cell (spatial frequency multiplier)
        weight: Amplitude of the pass
        x_offset: Domain offset along x, decorrelates octaves
        y_offset: Domain offset along y
    """

    scale: float
    weight: float
    x_offset: float = 0.0
    y_offset: float = 0.0


class OffsetMode(str, Enum):
    """How per-octave domain offsets are chosen."""

    RANDOM = "random"  # drawn from the generation seed
    ZERO = "zero"      # all octaves share the origin


def parse_offset_mode(value) -> OffsetMode:
    try:
        return OffsetMode(value)
    except ValueError:
        raise ConfigurationError(
            f"Unknown offset mode {value!r}, expected one of {[m.value for m in OffsetMode]}"
        ) from None


def validate_octaves(octaves: Sequence[OctaveSpec], grid_size: Optional[int] = None) -> None:
    """
    Reject octave lists that cannot be accumulated.

    With ``grid_size`` given, every noise coordinate an octave samples,
    ``offset + i * scale`` for ``0 <= i <= grid_size``, must stay within
    ``NOISE_DOMAIN_LIMIT`` of the origin.

    Raises:
        ConfigurationError: On an empty list, non-finite values,
            non-positive scale/weight or coordinates beyond the noise domain
    """
    if not octaves:
        raise ConfigurationError("At least one octave is required")

    for i, octave in enumerate(octaves):
        for name in ("scale", "weight", "x_offset", "y_offset"):
            value = getattr(octave, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real) or not math.isfinite(value):
                raise ConfigurationError(f"Octave {i}: {name} must be a finite number, got {value!r}")
        if octave.scale <= 0:
            raise ConfigurationError(f"Octave {i}: scale must be positive, got {octave.scale}")
        if octave.weight <= 0:
            raise ConfigurationError(f"Octave {i}: weight must be positive, got {octave.weight}")
        if grid_size is not None:
            extent = grid_size * octave.scale
            for name in ("x_offset", "y_offset"):
                if abs(getattr(octave, name)) + extent > NOISE_DOMAIN_LIMIT:
                    raise ConfigurationError(
                        f"Octave {i}: {name} + grid_size * scale exceeds the noise domain "
                        f"limit of {NOISE_DOMAIN_LIMIT:g}"
                    )


def octave_offsets(count: int, mode: OffsetMode, seed: int) -> List[Tuple[float, float]]:
    """Per-octave (x, y) offsets for the given mode."""
    if mode == OffsetMode.ZERO:
        return [(0.0, 0.0)] * count

    prng = AleaPRNG(f"octaves:{seed}")
    return [
        (prng.uniform(0.0, OFFSET_RANGE), prng.uniform(0.0, OFFSET_RANGE))
        for _ in range(count)
    ]


def build_octaves(
    grid_size: int,
    layers: Iterable[Tuple[float, float]],
    offset_mode: OffsetMode = OffsetMode.RANDOM,
    seed: int = 0,
) -> List[OctaveSpec]:
    """
    Turn (frequency, weight) layers into octave specs for a grid.

    Frequency counts noise features across the whole grid, so the same
    layers give the same look at any resolution.

    Args:
        grid_size: Grid resolution N
        layers: (frequency, weight) pairs in accumulation order
        offset_mode: Offset policy
        seed: Seed for random offsets

    Returns:
        Ordered list of OctaveSpec
    """
    if grid_size <= 0:
        raise ConfigurationError(f"grid_size must be positive, got {grid_size}")

    layers = list(layers)
    offsets = octave_offsets(len(layers), offset_mode, seed)
    return [
        OctaveSpec(scale=frequency / grid_size, weight=weight, x_offset=ox, y_offset=oy)
        for (frequency, weight), (ox, oy) in zip(layers, offsets)
    ]
