#!/usr/bin/env python3
"""
Visualize generated heightfields.

Renders the normalized heightfield as a terrain-colored image with contour
lines next to a histogram of heights, and writes a plain grayscale PNG of the
raw field.
"""

import argparse

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402

from py_heightfield.config import configure_logging, list_presets, settings  # noqa: E402
from py_heightfield.core import HeightfieldConfig, HeightfieldGenerator  # noqa: E402
from py_heightfield.utils.image import save_heightfield_png  # noqa: E402


def visualize_heightfield(
    seed=123, grid_size=512, preset="default", gradient_factor=8.0, offset_mode="random", slice_z=None
):
    """
    Generate a heightfield and save a figure of it.

    Args:
        seed: Generation seed
        grid_size: Grid resolution
        preset: Octave preset name
        gradient_factor: Slope damping strength
        offset_mode: random or zero
        slice_z: Optional z of a 3D noise slice
    """
    config = HeightfieldConfig(
        grid_size=grid_size,
        preset=preset,
        gradient_factor=gradient_factor,
        offset_mode=offset_mode,
        slice_z=slice_z,
        workers=settings.row_workers,
    )
    print(f"Generating {grid_size}x{grid_size} heightfield ({preset}, seed {seed})...")
    heights = HeightfieldGenerator(config).generate(seed)

    print("\nHeightfield statistics:")
    print(f"  Min height: {heights.min():.4f}")
    print(f"  Max height: {heights.max():.4f}")
    print(f"  Mean height: {heights.mean():.4f}")
    print(f"  Std dev: {heights.std():.4f}")

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(16, 8))

    im = ax1.imshow(heights, cmap="terrain", vmin=0, vmax=1, origin="upper")
    ax1.contour(heights, levels=10, colors="black", linewidths=0.3, alpha=0.4)
    plt.colorbar(im, ax=ax1, label="Height", shrink=0.8)
    ax1.set_title(f"{preset} preset, gradient factor {gradient_factor}")
    ax1.set_xlabel("X")
    ax1.set_ylabel("Y")

    ax2.hist(heights.ravel(), bins=100, range=(0, 1), color="#996633")
    ax2.set_title("Height distribution")
    ax2.set_xlabel("Height")
    ax2.set_ylabel("Cells")

    fig.suptitle(f"Heightfield Visualization - Seed: {seed}", fontsize=16)
    plt.tight_layout()

    output_file = f"heightfield_{preset}_{seed}.png"
    plt.savefig(output_file, dpi=150, bbox_inches="tight")
    plt.close(fig)
    print(f"\nVisualization saved to: {output_file}")

    raw_file = save_heightfield_png(heights, f"heightfield_{preset}_{seed}_gray.png")
    print(f"Grayscale heightfield saved to: {raw_file}")
    return heights


def main():
    parser = argparse.ArgumentParser(description="Generate and visualize a heightfield")
    parser.add_argument("--seed", type=int, default=123, help="Generation seed")
    parser.add_argument("--size", type=int, default=512, help="Grid resolution")
    parser.add_argument("--preset", default=settings.default_preset, choices=list_presets())
    parser.add_argument("--gradient-factor", type=float, default=settings.default_gradient_factor)
    parser.add_argument("--offsets", default=settings.offset_mode, choices=["random", "zero"])
    parser.add_argument("--slice-z", type=float, default=None, help="Sample a z-slice of 3D noise")
    args = parser.parse_args()

    configure_logging(settings.log_level, "plain")
    heights = visualize_heightfield(
        seed=args.seed,
        grid_size=args.size,
        preset=args.preset,
        gradient_factor=args.gradient_factor,
        offset_mode=args.offsets,
        slice_z=args.slice_z,
    )
    np.save(f"heightfield_{args.preset}_{args.seed}.npy", heights)


if __name__ == "__main__":
    main()
