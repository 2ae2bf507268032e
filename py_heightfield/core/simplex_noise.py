"""
OpenSimplex gradient noise in two and three dimensions.

Each evaluator owns a PermutationTable built from its seed. Every input
coordinate is skewed onto a simplex lattice, the originating cell and the
sub-cell region are located, and a precomputed chain of lattice points whose
falloff radius can reach the sample is walked. Each reachable point adds
``attn**4 * dot(gradient, displacement)`` with ``attn = 2 - |displacement|**2``.

Two entry points are provided per dimension:

* ``evaluate`` works on plain floats, one sample at a time.
* ``evaluate_grid`` works on numpy arrays and performs the same floating
  point operations in the same order, so both agree exactly.
"""

import math
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Sequence, Tuple

import numpy as np
import structlog

from .permutation import TABLE_MASK, PermutationTable

logger = structlog.get_logger()

NORM_2D = 1.0 / 47.0
SQUISH_2D = (math.sqrt(2 + 1) - 1) / 2
STRETCH_2D = (1 / math.sqrt(2 + 1) - 1) / 2

NORM_3D = 1.0 / 103.0
SQUISH_3D = (math.sqrt(3 + 1) - 1) / 3
STRETCH_3D = (1 / math.sqrt(3 + 1) - 1) / 3

# Flat (x, y) pairs
GRADIENTS_2D = (
    5.0, 2.0, 2.0, 5.0,
    -2.0, 5.0, -5.0, 2.0,
    2.0, -5.0, -5.0, -2.0,
    -2.0, -5.0, 5.0, -2.0,
)

# Flat (x, y, z) triples
GRADIENTS_3D = (
    -11.0, 4.0, 4.0, -4.0, 11.0, 4.0, -4.0, 4.0, 11.0, 11.0, 4.0, 4.0,
    4.0, 11.0, 4.0, 4.0, 4.0, 11.0, -11.0, -4.0, 4.0, -4.0, -11.0, 4.0,
    -4.0, -4.0, 11.0, 11.0, -4.0, 4.0, 4.0, -11.0, 4.0, 4.0, -4.0, 11.0,
    -11.0, 4.0, -4.0, -4.0, 11.0, -4.0, -4.0, 4.0, -11.0, 11.0, 4.0, -4.0,
    4.0, 11.0, -4.0, 4.0, 4.0, -11.0, -11.0, -4.0, -4.0, -4.0, -11.0, -4.0,
    -4.0, -4.0, -11.0, 11.0, -4.0, -4.0, 4.0, -11.0, -4.0, 4.0, -4.0, -11.0,
)

# Base point sets, flattened as (multiplier, lattice offsets...)
_BASE_2D = (
    (1, 1, 0, 1, 0, 1, 0, 0, 0),
    (1, 1, 0, 1, 0, 1, 2, 1, 1),
)

_BASE_3D = (
    (0, 0, 0, 0, 1, 1, 0, 0, 1, 0, 1, 0, 1, 0, 0, 1),
    (2, 1, 1, 0, 2, 1, 0, 1, 2, 0, 1, 1, 3, 1, 1, 1),
    (1, 1, 0, 0, 1, 0, 1, 0, 1, 0, 0, 1, 2, 1, 1, 0, 2, 1, 0, 1, 2, 0, 1, 1),
)

# Per region: base set index followed by the extra points of that region
_REGIONS_2D = (
    0, 0, 1, -1,
    0, 0, -1, 1,
    0, 2, 1, 1,
    1, 2, 2, 0,
    1, 2, 0, 2,
    1, 0, 0, 0,
)

_REGIONS_3D = (
    0, 0, 1, -1, 0, 0, 1, 0, -1,
    0, 0, -1, 1, 0, 0, 0, 1, -1,
    0, 0, -1, 0, 1, 0, 0, -1, 1,
    0, 2, 1, 1, 0, 1, 1, 1, -1,
    0, 2, 1, 0, 1, 1, 1, -1, 1,
    0, 2, 0, 1, 1, 1, -1, 1, 1,
    1, 3, 2, 1, 0, 3, 1, 2, 0,
    1, 3, 2, 0, 1, 3, 1, 0, 2,
    1, 3, 0, 2, 1, 3, 0, 1, 2,
    1, 1, 1, 0, 0, 2, 2, 0, 0,
    1, 1, 0, 1, 0, 2, 0, 2, 0,
    1, 1, 0, 0, 1, 2, 0, 0, 2,
    2, 0, 0, 0, 0, 1, 1, -1, 1,
    2, 0, 0, 0, 0, 1, -1, 1, 1,
    2, 0, 0, 0, 0, 1, 1, 1, -1,
    2, 3, 1, 1, 1, 2, 0, 0, 2,
    2, 3, 1, 1, 1, 2, 2, 0, 0,
    2, 3, 1, 1, 1, 2, 0, 2, 0,
    2, 1, 1, -1, 1, 2, 0, 0, 2,
    2, 1, 1, -1, 1, 2, 2, 0, 0,
    2, 1, -1, 1, 1, 2, 0, 0, 2,
    2, 1, -1, 1, 1, 2, 0, 2, 0,
    2, 1, 1, 1, -1, 2, 2, 0, 0,
    2, 1, 1, 1, -1, 2, 0, 2, 0,
)

# (sub-cell hash, region) pairs
_LOOKUP_PAIRS_2D = (0, 1, 1, 0, 4, 1, 17, 0, 20, 2, 21, 2, 22, 5, 23, 5, 26, 4, 39, 3, 42, 4, 43, 3)

_LOOKUP_PAIRS_3D = (
    0, 2, 1, 1, 2, 2, 5, 1, 6, 0, 7, 0, 32, 2, 34, 2,
    129, 1, 133, 1, 160, 5, 161, 5, 518, 0, 519, 0, 546, 4, 550, 4,
    645, 3, 647, 3, 672, 5, 673, 5, 674, 4, 677, 3, 678, 4, 679, 3,
    680, 13, 681, 13, 682, 12, 685, 14, 686, 12, 687, 14, 712, 20, 714, 18,
    809, 21, 813, 23, 840, 20, 841, 21, 1198, 19, 1199, 22, 1226, 18, 1230, 19,
    1325, 23, 1327, 22, 1352, 15, 1353, 17, 1354, 15, 1357, 17, 1358, 16, 1359, 16,
    1360, 11, 1361, 10, 1362, 11, 1365, 10, 1366, 9, 1367, 9, 1392, 11, 1394, 11,
    1489, 10, 1493, 10, 1520, 8, 1521, 8, 1878, 9, 1879, 9, 1906, 7, 1910, 7,
    2005, 6, 2007, 6, 2032, 8, 2033, 8, 2034, 7, 2037, 6, 2038, 7, 2039, 6,
)

Contribution = Tuple[Tuple[float, ...], Tuple[int, ...]]


def _contribution(multiplier: int, lattice: Sequence[int], squish: float) -> Contribution:
    """Displacement from the cell base to a lattice point, and the point itself."""
    displacement = tuple(-offset - multiplier * squish for offset in lattice)
    return displacement, tuple(lattice)


def _build_chains(
    base_sets: Sequence[Sequence[int]], regions: Sequence[int], dims: int, extras: int, squish: float
) -> List[List[Contribution]]:
    """Expand the region table into one list of contributing points per region."""
    step = dims + 1
    stride = 1 + extras * step
    chains = []
    for i in range(0, len(regions), stride):
        base = base_sets[regions[i]]
        chain = [
            _contribution(base[k], base[k + 1:k + step], squish)
            for k in range(0, len(base), step)
        ]
        for j in range(i + 1, i + stride, step):
            chain.append(_contribution(regions[j], regions[j + 1:j + step], squish))
        chains.append(chain)
    return chains


def _build_lookup(pairs: Sequence[int]) -> dict:
    return {pairs[i]: pairs[i + 1] for i in range(0, len(pairs), 2)}


@dataclass(frozen=True)
class _PackedChains:
    """Chains padded to a common length for vectorized evaluation."""

    lookup: np.ndarray        # sub-cell hash -> region, -1 for unused hashes
    displacement: np.ndarray  # (regions, length, dims)
    lattice: np.ndarray       # (regions, length, dims)
    valid: np.ndarray         # (regions, length), False for padding
    length: int


def _pack_chains(chains: List[List[Contribution]], lookup: dict, dims: int) -> _PackedChains:
    length = max(len(chain) for chain in chains)
    displacement = np.zeros((len(chains), length, dims), dtype=np.float64)
    lattice = np.zeros((len(chains), length, dims), dtype=np.int64)
    valid = np.zeros((len(chains), length), dtype=bool)
    for r, chain in enumerate(chains):
        for k, (delta, point) in enumerate(chain):
            displacement[r, k] = delta
            lattice[r, k] = point
            valid[r, k] = True

    dense = np.full(max(lookup) + 1, -1, dtype=np.int64)
    for key, region in lookup.items():
        dense[key] = region

    return _PackedChains(dense, displacement, lattice, valid, length)


_CHAINS_2D = _build_chains(_BASE_2D, _REGIONS_2D, dims=2, extras=1, squish=SQUISH_2D)
_CHAINS_3D = _build_chains(_BASE_3D, _REGIONS_3D, dims=3, extras=2, squish=SQUISH_3D)
_LOOKUP_2D = _build_lookup(_LOOKUP_PAIRS_2D)
_LOOKUP_3D = _build_lookup(_LOOKUP_PAIRS_3D)
_PACKED_2D = _pack_chains(_CHAINS_2D, _LOOKUP_2D, 2)
_PACKED_3D = _pack_chains(_CHAINS_3D, _LOOKUP_3D, 3)

_GRADIENTS_2D_ARRAY = np.array(GRADIENTS_2D, dtype=np.float64)
_GRADIENTS_3D_ARRAY = np.array(GRADIENTS_3D, dtype=np.float64)


class GradientNoise2D:
    """
    Seeded, continuous 2D gradient noise with output roughly in [-1, 1].

    Evaluation is pure: the same (x, y) always yields the same value no matter
    how many times or in which order the field is sampled.
    """

    dimensions = 2

    def __init__(self, seed: int):
        self.seed = seed
        self.table = PermutationTable.build(seed, len(GRADIENTS_2D) // 2, 2)
        self._perm = self.table.perm.tolist()
        self._grad_index = self.table.grad_index.tolist()
        self._perm_array = self.table.perm.astype(np.int64)

    def evaluate(self, x: float, y: float) -> float:
        """Sample the field at a single point."""
        stretch_offset = (x + y) * STRETCH_2D
        xs = x + stretch_offset
        ys = y + stretch_offset
        xsb = math.floor(xs)
        ysb = math.floor(ys)
        squish_offset = (xsb + ysb) * SQUISH_2D
        dx0 = x - (xsb + squish_offset)
        dy0 = y - (ysb + squish_offset)

        xins = xs - xsb
        yins = ys - ysb
        in_sum = xins + yins
        key = (
            int(xins - yins + 1)
            | (int(in_sum) << 1)
            | (int(in_sum + yins) << 2)
            | (int(in_sum + xins) << 4)
        )

        value = 0.0
        for (cdx, cdy), (cx, cy) in _CHAINS_2D[_LOOKUP_2D[key]]:
            dx = dx0 + cdx
            dy = dy0 + cdy
            attn = 2 - dx * dx - dy * dy
            if attn > 0:
                px = xsb + cx
                py = ysb + cy
                index = self._grad_index[(self._perm[px & TABLE_MASK] + py) & TABLE_MASK]
                value_part = GRADIENTS_2D[index] * dx + GRADIENTS_2D[index + 1] * dy
                value += attn * attn * attn * attn * value_part
        return value * NORM_2D

    def evaluate_grid(self, x, y) -> np.ndarray:
        """Sample the field at every point of two broadcastable coordinate arrays."""
        x, y = np.broadcast_arrays(np.asarray(x, dtype=np.float64), np.asarray(y, dtype=np.float64))

        stretch_offset = (x + y) * STRETCH_2D
        xs = x + stretch_offset
        ys = y + stretch_offset
        xsb = np.floor(xs)
        ysb = np.floor(ys)
        squish_offset = (xsb + ysb) * SQUISH_2D
        dx0 = x - (xsb + squish_offset)
        dy0 = y - (ysb + squish_offset)

        xins = xs - xsb
        yins = ys - ysb
        in_sum = xins + yins
        key = (
            (xins - yins + 1).astype(np.int64)
            | (in_sum.astype(np.int64) << 1)
            | ((in_sum + yins).astype(np.int64) << 2)
            | ((in_sum + xins).astype(np.int64) << 4)
        )
        region = _PACKED_2D.lookup[key]
        xsb_i = xsb.astype(np.int64)
        ysb_i = ysb.astype(np.int64)

        perm = self._perm_array
        grad_index = self.table.grad_index
        value = np.zeros(x.shape, dtype=np.float64)
        for k in range(_PACKED_2D.length):
            dx = dx0 + _PACKED_2D.displacement[region, k, 0]
            dy = dy0 + _PACKED_2D.displacement[region, k, 1]
            attn = 2 - dx * dx - dy * dy
            px = xsb_i + _PACKED_2D.lattice[region, k, 0]
            py = ysb_i + _PACKED_2D.lattice[region, k, 1]
            index = grad_index[(perm[px & TABLE_MASK] + py) & TABLE_MASK]
            value_part = _GRADIENTS_2D_ARRAY[index] * dx + _GRADIENTS_2D_ARRAY[index + 1] * dy
            active = (attn > 0) & _PACKED_2D.valid[region, k]
            value += np.where(active, attn * attn * attn * attn * value_part, 0.0)
        return value * NORM_2D


class GradientNoise3D:
    """Seeded 3D gradient noise, 24 gradient directions, output roughly in [-1, 1]."""

    dimensions = 3

    def __init__(self, seed: int):
        self.seed = seed
        self.table = PermutationTable.build(seed, len(GRADIENTS_3D) // 3, 3)
        self._perm = self.table.perm.tolist()
        self._grad_index = self.table.grad_index.tolist()
        self._perm_array = self.table.perm.astype(np.int64)

    def evaluate(self, x: float, y: float, z: float) -> float:
        stretch_offset = (x + y + z) * STRETCH_3D
        xs = x + stretch_offset
        ys = y + stretch_offset
        zs = z + stretch_offset
        xsb = math.floor(xs)
        ysb = math.floor(ys)
        zsb = math.floor(zs)
        squish_offset = (xsb + ysb + zsb) * SQUISH_3D
        dx0 = x - (xsb + squish_offset)
        dy0 = y - (ysb + squish_offset)
        dz0 = z - (zsb + squish_offset)

        xins = xs - xsb
        yins = ys - ysb
        zins = zs - zsb
        in_sum = xins + yins + zins
        key = (
            int(yins - zins + 1)
            | (int(xins - yins + 1) << 1)
            | (int(xins - zins + 1) << 2)
            | (int(in_sum) << 3)
            | (int(in_sum + zins) << 5)
            | (int(in_sum + yins) << 7)
            | (int(in_sum + xins) << 9)
        )

        perm = self._perm
        value = 0.0
        for (cdx, cdy, cdz), (cx, cy, cz) in _CHAINS_3D[_LOOKUP_3D[key]]:
            dx = dx0 + cdx
            dy = dy0 + cdy
            dz = dz0 + cdz
            attn = 2 - dx * dx - dy * dy - dz * dz
            if attn > 0:
                px = xsb + cx
                py = ysb + cy
                pz = zsb + cz
                part_a = perm[px & TABLE_MASK]
                part_b = perm[(part_a + py) & TABLE_MASK]
                index = self._grad_index[(part_b + pz) & TABLE_MASK]
                value_part = (
                    GRADIENTS_3D[index] * dx
                    + GRADIENTS_3D[index + 1] * dy
                    + GRADIENTS_3D[index + 2] * dz
                )
                value += attn * attn * attn * attn * value_part
        return value * NORM_3D

    def evaluate_grid(self, x, y, z) -> np.ndarray:
        x, y, z = np.broadcast_arrays(
            np.asarray(x, dtype=np.float64),
            np.asarray(y, dtype=np.float64),
            np.asarray(z, dtype=np.float64),
        )

        stretch_offset = (x + y + z) * STRETCH_3D
        xs = x + stretch_offset
        ys = y + stretch_offset
        zs = z + stretch_offset
        xsb = np.floor(xs)
        ysb = np.floor(ys)
        zsb = np.floor(zs)
        squish_offset = (xsb + ysb + zsb) * SQUISH_3D
        dx0 = x - (xsb + squish_offset)
        dy0 = y - (ysb + squish_offset)
        dz0 = z - (zsb + squish_offset)

        xins = xs - xsb
        yins = ys - ysb
        zins = zs - zsb
        in_sum = xins + yins + zins
        key = (
            (yins - zins + 1).astype(np.int64)
            | ((xins - yins + 1).astype(np.int64) << 1)
            | ((xins - zins + 1).astype(np.int64) << 2)
            | (in_sum.astype(np.int64) << 3)
            | ((in_sum + zins).astype(np.int64) << 5)
            | ((in_sum + yins).astype(np.int64) << 7)
            | ((in_sum + xins).astype(np.int64) << 9)
        )
        region = _PACKED_3D.lookup[key]
        xsb_i = xsb.astype(np.int64)
        ysb_i = ysb.astype(np.int64)
        zsb_i = zsb.astype(np.int64)

        perm = self._perm_array
        grad_index = self.table.grad_index
        gradients = _GRADIENTS_3D_ARRAY
        value = np.zeros(x.shape, dtype=np.float64)
        for k in range(_PACKED_3D.length):
            dx = dx0 + _PACKED_3D.displacement[region, k, 0]
            dy = dy0 + _PACKED_3D.displacement[region, k, 1]
            dz = dz0 + _PACKED_3D.displacement[region, k, 2]
            attn = 2 - dx * dx - dy * dy - dz * dz
            px = xsb_i + _PACKED_3D.lattice[region, k, 0]
            py = ysb_i + _PACKED_3D.lattice[region, k, 1]
            pz = zsb_i + _PACKED_3D.lattice[region, k, 2]
            part_a = perm[px & TABLE_MASK]
            part_b = perm[(part_a + py) & TABLE_MASK]
            index = grad_index[(part_b + pz) & TABLE_MASK]
            value_part = gradients[index] * dx + gradients[index + 1] * dy + gradients[index + 2] * dz
            active = (attn > 0) & _PACKED_3D.valid[region, k]
            value += np.where(active, attn * attn * attn * attn * value_part, 0.0)
        return value * NORM_3D


class SlicedNoise3D:
    """A fixed-z slice of 3D noise, usable wherever 2D noise is expected."""

    dimensions = 2

    def __init__(self, noise: GradientNoise3D, z: float):
        self.noise = noise
        self.z = float(z)

    @property
    def seed(self) -> int:
        return self.noise.seed

    def evaluate(self, x: float, y: float) -> float:
        return self.noise.evaluate(x, y, self.z)

    def evaluate_grid(self, x, y) -> np.ndarray:
        return self.noise.evaluate_grid(x, y, self.z)


@lru_cache(maxsize=16)
def get_gradient_noise(seed: int) -> GradientNoise2D:
    """Per-seed cached 2D evaluator."""
    logger.debug("Building gradient noise", seed=seed, dimensions=2)
    return GradientNoise2D(seed)


@lru_cache(maxsize=16)
def get_gradient_noise_3d(seed: int) -> GradientNoise3D:
    """Per-seed cached 3D evaluator."""
    logger.debug("Building gradient noise", seed=seed, dimensions=3)
    return GradientNoise3D(seed)
