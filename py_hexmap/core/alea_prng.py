"""
Seeded random number generator for map generation.

Uses Johannes Baagøe's Alea algorithm: a small, fast generator that accepts
arbitrary seed strings and produces the same sequence on every platform.
One instance is created per generated map and handed to every stage, so
runs never share random state.
"""

from typing import MutableSequence, Sequence, TypeVar

T = TypeVar("T")


def _uint32(n):
    """Convert to unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


class AleaPRNG:
    """Alea PRNG with the integer helpers the map stages need."""

    def __init__(self, seed):
        """Initialize with seed string or number."""
        self.seed = str(seed)
        self.call_count = 0

        if hasattr(seed, "__iter__") and not isinstance(seed, str):
            args = list(seed)
        else:
            args = [seed]

        mash_n = 0xEFC8249D

        def mash(data):
            nonlocal mash_n
            data = str(data)
            for char in data:
                mash_n = mash_n + ord(char)
                h = 0.02519603282416938 * mash_n
                mash_n = _uint32(h)
                h -= mash_n
                h *= mash_n
                mash_n = _uint32(h)
                h -= mash_n
                mash_n += h * 0x100000000  # 2^32
            return _uint32(mash_n) * 2.3283064365386963e-10  # 2^-32

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

    def randint(self, min_val: int, max_val: int) -> int:
        """Random integer in the closed range [min_val, max_val]."""
        if max_val < min_val:
            raise ValueError(f"Empty range [{min_val}, {max_val}]")
        return min_val + int(self.random() * (max_val - min_val + 1))

    def choice(self, seq: Sequence[T]) -> T:
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[int(self.random() * len(seq))]

    def shuffle(self, seq: MutableSequence[T]) -> None:
        """Fisher-Yates shuffle in place."""
        for i in range(len(seq) - 1, 0, -1):
            j = self.randint(0, i)
            seq[i], seq[j] = seq[j], seq[i]

    def chance(self, percent: int) -> bool:
        """True with the given probability in percent (0-100)."""
        return self.random() * 100 < percent

    def noise_seed(self) -> int:
        """Derive an integer seed for auxiliary generators (noise fields)."""
        return self.randint(0, 0x7FFFFFFF)

