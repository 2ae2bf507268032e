"""Maps accumulated heights into a bounded output range."""

import math
from enum import Enum
from typing import Tuple

import numpy as np

from .errors import ConfigurationError


class NormalizeMode(str, Enum):
    CLAMP = "clamp"      # clip each cell into the range
    RESCALE = "rescale"  # min-max stretch onto the range, then clip


def parse_normalize_mode(value) -> NormalizeMode:
    try:
        return NormalizeMode(value)
    except ValueError:
        raise ConfigurationError(
            f"Unknown normalize mode {value!r}, expected one of {[m.value for m in NormalizeMode]}"
        ) from None


def validate_output_range(output_range: Tuple[float, float]) -> None:
    try:
        low, high = (float(v) for v in output_range)
    except (TypeError, ValueError):
        raise ConfigurationError(f"output_range must be a (low, high) pair, got {output_range!r}") from None
    if not (math.isfinite(low) and math.isfinite(high)) or low >= high:
        raise ConfigurationError(f"output_range must be finite with low < high, got {output_range!r}")


def normalize(
    field: np.ndarray,
    output_range: Tuple[float, float] = (0.0, 1.0),
    mode: NormalizeMode = NormalizeMode.CLAMP,
) -> np.ndarray:
    """
    Bound a heightfield to ``output_range``.

    Never fails on out-of-range values: NaN and -inf go to the low end,
    +inf to the high end. The input array is left untouched.

    Args:
        field: Accumulated heights
        output_range: (low, high) bounds
        mode: CLAMP or RESCALE

    Returns:
        New float64 array within [low, high]
    """
    mode = parse_normalize_mode(mode)
    validate_output_range(output_range)
    low, high = float(output_range[0]), float(output_range[1])

    values = np.nan_to_num(np.asarray(field, dtype=np.float64), nan=low, posinf=high, neginf=low)

    if mode == NormalizeMode.RESCALE:
        lo, hi = float(values.min(initial=np.inf)), float(values.max(initial=-np.inf))
        if values.size == 0 or hi <= lo:
            return np.full(values.shape, low)
        values = low + (values - lo) * ((high - low) / (hi - lo))

    return np.clip(values, low, high)
