"""
Image export for heightfields.

Renders a heightfield as a grayscale picture, the same view the terrain
renderer shows before any simulation runs.
"""

import base64
import io
from pathlib import Path
from typing import Tuple, Union

import matplotlib

matplotlib.use("Agg")

from matplotlib import image as mpimg  # noqa: E402
import numpy as np  # noqa: E402


def heightfield_to_png(
    heights: np.ndarray, cmap: str = "gray", value_range: Tuple[float, float] = (0.0, 1.0)
) -> bytes:
    """Encode a 2D heightfield as PNG bytes; row 0 is the top of the image."""
    if heights.ndim != 2:
        raise ValueError(f"Expected a 2D heightfield, got shape {heights.shape}")
    buffer = io.BytesIO()
    mpimg.imsave(buffer, heights, cmap=cmap, vmin=value_range[0], vmax=value_range[1], format="png")
    return buffer.getvalue()


def heightfield_to_base64(heights: np.ndarray, cmap: str = "gray") -> str:
    """PNG as a data URL."""
    encoded = base64.b64encode(heightfield_to_png(heights, cmap=cmap)).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def save_heightfield_png(heights: np.ndarray, path: Union[str, Path], cmap: str = "gray") -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(heightfield_to_png(heights, cmap=cmap))
    return path
