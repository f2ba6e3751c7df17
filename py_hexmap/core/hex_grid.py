"""Hex grid coordinates, directions and distances.

The map uses offset coordinates with staggered columns: odd columns sit half
a hex lower than even columns. ``x`` is the column, ``y`` the row.
"""

import sys
from enum import IntEnum
from typing import List, NamedTuple, Sequence

_INVALID_COORD = -sys.maxsize - 1


class HexDir(IntEnum):
    """Six neighbor directions, clockwise from north."""

    N = 0
    NE = 1
    SE = 2
    S = 3
    SW = 4
    NW = 5


class Hex(NamedTuple):
    """A hex grid location."""

    x: int
    y: int

    @staticmethod
    def invalid() -> "Hex":
        """Sentinel for off-grid or undefined locations."""
        return _INVALID

    def is_valid(self) -> bool:
        return self != _INVALID

    def __add__(self, other: "Hex") -> "Hex":
        # Math on invalid hexes stays invalid
        if not self.is_valid() or not other.is_valid():
            return _INVALID
        return Hex(self.x + other.x, self.y + other.y)

    def __floordiv__(self, divisor: int) -> "Hex":
        if not self.is_valid() or divisor == 0:
            return _INVALID
        # Truncate toward zero like integer division of coordinate sums
        return Hex(int(self.x / divisor), int(self.y / divisor))

    def neighbor(self, direction: HexDir) -> "Hex":
        """Return the adjacent hex in the given direction, no bounds checking."""
        if not self.is_valid():
            return _INVALID
        even_col = self.x % 2 == 0
        dx, dy = (_EVEN_OFFSETS if even_col else _ODD_OFFSETS)[direction]
        return Hex(self.x + dx, self.y + dy)

    def all_neighbors(self) -> List["Hex"]:
        """Return all six neighbors in HexDir order."""
        return [self.neighbor(d) for d in HexDir]


_INVALID = Hex(_INVALID_COORD, _INVALID_COORD)

_EVEN_OFFSETS = {
    HexDir.N: (0, -1),
    HexDir.NE: (1, -1),
    HexDir.SE: (1, 0),
    HexDir.S: (0, 1),
    HexDir.SW: (-1, 0),
    HexDir.NW: (-1, -1),
}

_ODD_OFFSETS = {
    HexDir.N: (0, -1),
    HexDir.NE: (1, 0),
    HexDir.SE: (1, 1),
    HexDir.S: (0, 1),
    HexDir.SW: (-1, 1),
    HexDir.NW: (-1, 0),
}


def hex_distance(h1: Hex, h2: Hex) -> int:
    """
    Number of steps between two hexes.

    Columns are staggered, so moving diagonally between an even and an odd
    column costs an extra vertical step in one direction.

    Returns:
        Step count, or ``sys.maxsize`` if either hex is invalid
    """
    if not h1.is_valid() or not h2.is_valid():
        return sys.maxsize

    dx = abs(h1.x - h2.x)
    dy = abs(h1.y - h2.y)

    v_penalty = 0
    if (h1.y < h2.y and h1.x % 2 == 0 and h2.x % 2 == 1) or (
        h1.y > h2.y and h1.x % 2 == 1 and h2.x % 2 == 0
    ):
        v_penalty = 1

    return max(dx, dy + v_penalty + dx // 2)


def hex_closest_idx(src: Hex, hexes: Sequence[Hex]) -> int:
    """
    Index of the hex nearest to ``src``.

    Ties go to the earliest hex in the sequence. Returns -1 for an empty
    sequence.
    """
    best_idx = -1
    best_dist = sys.maxsize
    for i, h in enumerate(hexes):
        dist = hex_distance(src, h)
        if best_idx == -1 or dist < best_dist:
            best_idx = i
            best_dist = dist
    return best_idx


def hex_disk(center: Hex, radius: int) -> List[Hex]:
    """All hexes within ``radius`` steps of ``center``, center first.

    No bounds checking; callers filter off-grid hexes.
    """
    if not center.is_valid():
        return []
    disk = [center]
    seen = {center}
    frontier = [center]
    for _ in range(radius):
        next_frontier = []
        for h in frontier:
            for nbr in h.all_neighbors():
                if nbr not in seen:
                    seen.add(nbr)
                    disk.append(nbr)
                    next_frontier.append(nbr)
        frontier = next_frontier
    return disk
