"""
Alea pseudo-random number generator.

Based on Johannes Baagøe's Alea algorithm. Used wherever generation needs
random draws beyond the permutation table itself (per-octave domain offsets,
the sine basis), so those draws follow the generation seed instead of the
process-wide ``random`` state.
"""

import math
from typing import List


def _uint32(n):
    """Convert to unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


def _mash_factory():
    """Return Baagøe's Mash hash; each call keeps folding into the same state."""
    mash_n = 0xEFC8249D

    def mash(data) -> float:
        nonlocal mash_n
        for char in str(data):
            mash_n = mash_n + ord(char)
            h = 0.02519603282416938 * mash_n
            mash_n = _uint32(h)
            h -= mash_n
            h *= mash_n
            mash_n = _uint32(h)
            h -= mash_n
            mash_n += h * 0x100000000  # 2^32
        return _uint32(mash_n) * 2.3283064365386963e-10  # 2^-32

    return mash


class AleaPRNG:
    """
    Seedable generator of floats in [0, 1).

    Seeds may be strings, numbers or iterables of either; the same seed
    always replays the same sequence.
    """

    def __init__(self, seed):
        self.call_count = 0

        if hasattr(seed, "__iter__") and not isinstance(seed, str):
            args = list(seed)
        else:
            args = [seed]

        mash = _mash_factory()
        self.s0 = mash(" ")
        self.s1 = mash(" ")
        self.s2 = mash(" ")
        self.c = 1

        for arg in args:
            self.s0 -= mash(arg)
            if self.s0 < 0:
                self.s0 += 1
            self.s1 -= mash(arg)
            if self.s1 < 0:
                self.s1 += 1
            self.s2 -= mash(arg)
            if self.s2 < 0:
                self.s2 += 1

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        self.call_count += 1
        t = 2091639 * self.s0 + self.c * 2.3283064365386963e-10  # 2^-32
        self.s0 = self.s1
        self.s1 = self.s2
        self.c = int(t)
        self.s2 = t - self.c
        return self.s2

    def uniform(self, low: float, high: float) -> float:
        """Draw a float in [low, high)."""
        return low + (high - low) * self.random()

    def angles(self, count: int) -> List[float]:
        """Draw ``count`` phase angles in [0, 2π)."""
        return [self.uniform(0.0, 2 * math.pi) for _ in range(count)]
