"""
Error types and placement results for map generation.

Fatal problems (no castle site, no repair path, disconnected region graph)
surface as MapGenerationError. Placement helpers report their outcome as a
Placed or Failed value so the pipeline decides whether to abort or retry.
"""

from dataclasses import dataclass
from typing import Union


class MapGenerationError(RuntimeError):
    """Generation hit an invariant violation and produced no map."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class OffGridError(IndexError):
    """A tile index or hex outside the map was passed to an accessor."""


class SnapshotError(ValueError):
    """A snapshot document is missing fields or has inconsistent sizes."""


@dataclass(frozen=True)
class Placed:
    """Successful placement at a tile index."""

    tile: int


@dataclass(frozen=True)
class Failed:
    """Placement could not be satisfied."""

    reason: str


PlacementResult = Union[Placed, Failed]


def expect_placed(result: PlacementResult) -> int:
    """Return the placed tile or raise MapGenerationError."""
    if isinstance(result, Failed):
        raise MapGenerationError(result.reason)
    return result.tile
