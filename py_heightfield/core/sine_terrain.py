"""
Sine-product terrain basis.

A quick smooth placeholder surface: a weighted sum of products of sines along
x and y with seeded frequencies and phases. Frequencies are drawn in [0, 10)
and sorted so that lower frequencies carry the earlier weights.
"""

from typing import Sequence

import numpy as np
import structlog

from .accumulator import validate_grid_size
from .alea_prng import AleaPRNG
from .errors import ConfigurationError

logger = structlog.get_logger()

SINE_WEIGHTS = (0.3, 0.2, 0.25, 0.15, 0.1)
MAX_FREQUENCY = 10.0


def generate_sine_heightfield(
    grid_size: int, seed: int, weights: Sequence[float] = SINE_WEIGHTS
) -> np.ndarray:
    """
    Generate a [0, 1] heightfield from seeded sine products.

    Args:
        grid_size: Grid resolution N
        seed: Seed for frequencies and phases
        weights: Amplitude per term

    Returns:
        (N, N) float64 array
    """
    validate_grid_size(grid_size)
    if not weights:
        raise ConfigurationError("At least one sine weight is required")

    count = len(weights)
    prng = AleaPRNG(f"sine:{seed}")
    x_frequencies = sorted(prng.uniform(0.0, MAX_FREQUENCY) for _ in range(count))
    y_frequencies = sorted(prng.uniform(0.0, MAX_FREQUENCY) for _ in range(count))
    x_phases = prng.angles(count)
    y_phases = prng.angles(count)

    coords = np.arange(grid_size, dtype=np.float64) / grid_size
    field = np.zeros((grid_size, grid_size), dtype=np.float64)
    for weight, fx, fy, px, py in zip(weights, x_frequencies, y_frequencies, x_phases, y_phases):
        column = np.sin(fx * np.pi * coords + px)
        row = np.sin(fy * np.pi * coords + py)
        field += weight * np.outer(row, column)

    logger.debug("Sine basis generated", seed=seed, grid_size=grid_size, terms=count)
    return np.clip(field * 0.5 + 0.5, 0.0, 1.0)
