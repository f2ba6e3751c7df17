"""
Multimap on top of a flat sorted list.

Insertions are appended and only sorted (and deduplicated) on the next read,
so the cheapest usage is to insert everything first and query afterward.
Unlike a plain multimap, a key never holds the same value twice.
"""

from bisect import bisect_left, bisect_right
from typing import Dict, Generic, Iterator, List, Tuple, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class FlatMultimap(Generic[K, V]):
    """Sorted (key, value) pairs with range lookups by key."""

    def __init__(self) -> None:
        self._keys: List[K] = []
        self._values: List[V] = []
        self._pairs: List[Tuple[K, V]] = []
        self._dirty = False

    def insert(self, key: K, value: V) -> None:
        """Add a key-value pair; duplicates are dropped at the next read."""
        self._pairs.append((key, value))
        self._dirty = True

    def find(self, key: K) -> List[V]:
        """Return every value stored under ``key`` in sorted order."""
        self._sort_and_prune()
        lo = bisect_left(self._keys, key)
        hi = bisect_right(self._keys, key, lo)
        return self._values[lo:hi]

    def contains(self, key: K, value: V) -> bool:
        return value in self.find(key)

    def keys(self) -> List[K]:
        """Distinct keys in sorted order."""
        self._sort_and_prune()
        distinct: List[K] = []
        for k in self._keys:
            if not distinct or distinct[-1] != k:
                distinct.append(k)
        return distinct

    def to_dict(self) -> Dict[K, List[V]]:
        return {k: self.find(k) for k in self.keys()}

    def __len__(self) -> int:
        self._sort_and_prune()
        return len(self._pairs)

    def __iter__(self) -> Iterator[Tuple[K, V]]:
        self._sort_and_prune()
        return iter(list(self._pairs))

    def _sort_and_prune(self) -> None:
        if not self._dirty:
            return
        self._pairs = sorted(set(self._pairs))
        self._keys = [k for k, _ in self._pairs]
        self._values = [v for _, v in self._pairs]
        self._dirty = False
