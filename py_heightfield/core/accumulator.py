"""
Slope-damped octave accumulation.

Unlike a plain fractal sum, every octave reads the height accumulated by the
octaves before it. New noise is deposited less where the existing surface or
the noise itself is steep:

    contribution = n01 / (1 + gradient_factor * |slope|)
    back[y, x]   = front[y, x] + contribution * weight

Each pass reads only the settled ``front`` buffer and writes ``back``; the
buffers are swapped once the whole pass is done.
"""

import math
import numbers
import time
from concurrent.futures import ThreadPoolExecutor
from typing import List, Sequence, Tuple

import numpy as np
import structlog

from .errors import ConfigurationError
from .octaves import OctaveSpec, validate_octaves

logger = structlog.get_logger()


class DoubleBuffer:
    """Two distinct N×N buffers with a flag marking which one is current."""

    def __init__(self, size: int, dtype=np.float64):
        self._buffers = (np.zeros((size, size), dtype=dtype), np.zeros((size, size), dtype=dtype))
        self._current = 0

    @property
    def front(self) -> np.ndarray:
        """Settled buffer, read during a pass."""
        return self._buffers[self._current]

    @property
    def back(self) -> np.ndarray:
        """Buffer written during a pass."""
        return self._buffers[1 - self._current]

    def swap(self) -> None:
        self._current = 1 - self._current


def surface_slope(front: np.ndarray, row_start: int = 0, row_end: int = None) -> Tuple[np.ndarray, np.ndarray]:
    """
    Backward differences of the accumulated surface for rows [row_start, row_end).

    Column 0 and row 0 of the grid get a slope of exactly zero; there is no
    wraparound.
    """
    if row_end is None:
        row_end = front.shape[0]
    rows = front[row_start:row_end]

    dx = np.zeros_like(rows)
    dx[:, 1:] = rows[:, 1:] - rows[:, :-1]

    dy = np.zeros_like(rows)
    if row_start > 0:
        dy[:] = rows - front[row_start - 1:row_end - 1]
    else:
        dy[1:] = rows[1:] - rows[:-1]
    return dx, dy


def damped_contribution(n01, magnitude, gradient_factor: float):
    """Deposit for a [0, 1] noise sample on a slope of the given magnitude.

    The denominator is at least 1 for non-negative factor and magnitude.
    """
    return n01 / (1 + gradient_factor * magnitude)


def validate_gradient_factor(gradient_factor: float) -> None:
    if not isinstance(gradient_factor, numbers.Real) or not math.isfinite(gradient_factor):
        raise ConfigurationError(f"gradient_factor must be a finite number, got {gradient_factor!r}")
    if gradient_factor < 0:
        raise ConfigurationError(f"gradient_factor must be non-negative, got {gradient_factor}")


def validate_grid_size(grid_size: int) -> None:
    if isinstance(grid_size, bool) or not isinstance(grid_size, (int, np.integer)):
        raise ConfigurationError(f"grid_size must be an integer, got {grid_size!r}")
    if grid_size <= 0:
        raise ConfigurationError(f"grid_size must be positive, got {grid_size}")


def validate_workers(workers: int) -> None:
    if isinstance(workers, bool) or not isinstance(workers, (int, np.integer)) or workers < 1:
        raise ConfigurationError(f"workers must be a positive integer, got {workers!r}")


def _row_bands(size: int, workers: int) -> List[Tuple[int, int]]:
    """Split [0, size) into at most ``workers`` contiguous bands."""
    bounds = np.linspace(0, size, min(workers, size) + 1).astype(int)
    return [(int(a), int(b)) for a, b in zip(bounds[:-1], bounds[1:]) if b > a]


class HeightFieldAccumulator:
    """
    Builds a heightfield from a noise source and an ordered list of octaves.

    The noise source must provide ``evaluate_grid(x, y)`` over numpy arrays
    (GradientNoise2D, SlicedNoise3D).
    """

    def __init__(self, noise, gradient_factor: float, workers: int = 1):
        validate_gradient_factor(gradient_factor)
        validate_workers(workers)
        self.noise = noise
        self.gradient_factor = float(gradient_factor)
        self.workers = int(workers)

    def accumulate(self, octaves: Sequence[OctaveSpec], grid_size: int) -> np.ndarray:
        """
        Run every octave pass in order.

        Args:
            octaves: Octaves in accumulation order
            grid_size: Grid resolution N

        Returns:
            New (N, N) float64 array of accumulated heights

        Raises:
            ConfigurationError: Before any allocation if the inputs are invalid
        """
        validate_grid_size(grid_size)
        validate_octaves(octaves, grid_size)

        buffers = DoubleBuffer(grid_size)
        bands = _row_bands(grid_size, self.workers)

        executor = ThreadPoolExecutor(max_workers=len(bands)) if len(bands) > 1 else None
        try:
            for index, octave in enumerate(octaves):
                start = time.perf_counter()
                front, back = buffers.front, buffers.back
                if executor is None:
                    self._pass_rows(front, back, octave, 0, grid_size)
                else:
                    futures = [
                        executor.submit(self._pass_rows, front, back, octave, row_start, row_end)
                        for row_start, row_end in bands
                    ]
                    # All bands must land before the swap
                    for future in futures:
                        future.result()
                buffers.swap()
                logger.debug(
                    "Octave pass complete",
                    octave=index,
                    scale=octave.scale,
                    weight=octave.weight,
                    bands=len(bands),
                    seconds=round(time.perf_counter() - start, 4),
                )
        finally:
            if executor is not None:
                executor.shutdown(wait=True)

        return buffers.front.copy()

    def _pass_rows(
        self, front: np.ndarray, back: np.ndarray, octave: OctaveSpec, row_start: int, row_end: int
    ) -> None:
        """Write rows [row_start, row_end) of ``back`` for one octave."""
        size = front.shape[1]
        fx = np.arange(size, dtype=np.float64) * octave.scale + octave.x_offset
        fy = np.arange(row_start, row_end, dtype=np.float64) * octave.scale + octave.y_offset
        gx, gy = np.meshgrid(fx, fy)

        n = self.noise.evaluate_grid(gx, gy)
        nx = self.noise.evaluate_grid(gx - octave.scale, gy)
        ny = self.noise.evaluate_grid(gx, gy - octave.scale)

        dx_surface, dy_surface = surface_slope(front, row_start, row_end)
        dx = dx_surface + octave.weight * (n - nx)
        dy = dy_surface + octave.weight * (n - ny)
        magnitude = np.sqrt(dx * dx + dy * dy)

        n01 = (n + 1) / 2
        contribution = damped_contribution(n01, magnitude, self.gradient_factor)
        np.add(front[row_start:row_end], contribution * octave.weight, out=back[row_start:row_end])
