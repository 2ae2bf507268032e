"""
Seeded permutation tables for gradient noise.

The shuffle uses a fixed linear congruential state advance instead of a
general purpose RNG, so a given seed always yields the same table on every
platform:

    state' = (state * 1664525 + 1013904223) mod 2**32

The state is mixed three times before the shuffle starts and advanced once
more for every slot.
"""

from dataclasses import dataclass

import numpy as np

TABLE_SIZE = 256
TABLE_MASK = 0xFF

_LCG_MULTIPLIER = 1664525
_LCG_INCREMENT = 1013904223
_INDEX_OFFSET = 31


def _uint32(n: int) -> int:
    """Wrap to an unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


def shuffle_seed(state: int) -> int:
    """Advance the shuffle state by one step."""
    return _uint32(state * _LCG_MULTIPLIER + _LCG_INCREMENT)


@dataclass(frozen=True)
class PermutationTable:
    """A permutation of 0..255 plus the derived gradient index table.

    Attributes:
        perm: Permutation of 0..255 (read-only uint8 array)
        grad_index: ``(perm[i] % gradient_count) * dimensions`` for each slot,
            i.e. the offset of the selected vector in a flat gradient table
        gradient_count: Number of gradient vectors the index table addresses
        dimensions: Components per gradient vector
    """

    perm: np.ndarray
    grad_index: np.ndarray
    gradient_count: int
    dimensions: int

    @classmethod
    def build(cls, seed: int, gradient_count: int, dimensions: int) -> "PermutationTable":
        """
        Build the table for a seed.

        Any integer is accepted; it is reduced modulo 2**32 first.

        Args:
            seed: Noise seed
            gradient_count: Size of the gradient vector set
            dimensions: Components per gradient vector

        Returns:
            Immutable PermutationTable
        """
        source = list(range(TABLE_SIZE))
        perm = np.zeros(TABLE_SIZE, dtype=np.uint8)
        grad_index = np.zeros(TABLE_SIZE, dtype=np.int64)

        state = _uint32(seed)
        state = shuffle_seed(shuffle_seed(shuffle_seed(state)))

        for i in range(TABLE_SIZE - 1, -1, -1):
            state = shuffle_seed(state)
            r = (state + _INDEX_OFFSET) % (i + 1)
            perm[i] = source[r]
            grad_index[i] = (int(perm[i]) % gradient_count) * dimensions
            source[r] = source[i]

        perm.flags.writeable = False
        grad_index.flags.writeable = False
        return cls(
            perm=perm,
            grad_index=grad_index,
            gradient_count=gradient_count,
            dimensions=dimensions,
        )

    def is_valid(self) -> bool:
        """Check that ``perm`` holds every value 0..255 exactly once."""
        return bool(np.array_equal(np.sort(self.perm), np.arange(TABLE_SIZE)))
