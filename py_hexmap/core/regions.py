"""
Region partitioning with a relaxed Voronoi diagram over hex tiles.

Random center hexes are scattered over the map, every tile joins the region
of its nearest center, and the centers are moved to the average position of
their members. Repeating this (Lloyd's relaxation) gives more regular
regions. Repeated runs can absorb small regions into their neighbors, so
empty regions are dropped and the region count shrinks as needed.
"""

from typing import List, Optional, Tuple

import numpy as np
import structlog
from pydantic import BaseModel, Field

from .alea_prng import AleaPRNG
from .hex_grid import Hex, hex_closest_idx

logger = structlog.get_logger()


class RegionOptions(BaseModel):
    """Region partitioning parameters."""

    region_size: int = Field(default=64, description="Target tiles per region")
    relax_iterations: int = Field(default=4, description="Lloyd relaxation rounds")
    min_regions: int = Field(
        default=1, description="Minimum number of initial centers for tiny maps"
    )


def tile_hexes(width: int) -> List[Hex]:
    """Hex for each tile index of a ``width`` x ``width`` map."""
    return [Hex(i % width, i // width) for i in range(width * width)]


class RegionPartitioner:
    """Partitions the tiles of a square map into regions."""

    def __init__(self, width: int, prng: AleaPRNG, options: Optional[RegionOptions] = None):
        """
        Args:
            width: Map width in tiles (the map has width * width tiles)
            prng: Generator shared by the whole run
            options: Partitioning parameters
        """
        if width <= 0:
            raise ValueError(f"Map width must be positive, got {width}")
        self.width = width
        self.size = width * width
        self.prng = prng
        self.options = options or RegionOptions()
        self.hexes = tile_hexes(width)

    def initial_num_regions(self) -> int:
        return max(self.options.min_regions, self.size // self.options.region_size)

    def random_centers(self, count: int) -> List[Hex]:
        """Random hexes on the map. Duplicates are allowed; they empty out later."""
        return [
            Hex(self.prng.randint(0, self.width - 1), self.prng.randint(0, self.width - 1))
            for _ in range(count)
        ]

    def assign_regions(self, centers: List[Hex]) -> np.ndarray:
        """Assign each tile to the region of its nearest center."""
        tile_regions = np.empty(self.size, dtype=np.int32)
        for i, h in enumerate(self.hexes):
            tile_regions[i] = hex_closest_idx(h, centers)
        return tile_regions

    def voronoi(self, tile_regions: np.ndarray, num_centers: int) -> List[Hex]:
        """
        Compute the average hex of each region and drop regions with no tiles.

        Args:
            tile_regions: Current region of each tile
            num_centers: Number of centers used for the assignment

        Returns:
            New center list, shorter than before if regions emptied out
        """
        sums = [Hex(0, 0)] * num_centers
        counts = [0] * num_centers
        for i, h in enumerate(self.hexes):
            reg = int(tile_regions[i])
            sums[reg] = sums[reg] + h
            counts[reg] += 1

        # Dividing by a count of zero yields an invalid hex
        centers = [sums[r] // counts[r] for r in range(num_centers)]
        return [c for c in centers if c.is_valid()]

    def partition(self) -> Tuple[np.ndarray, int]:
        """
        Run the relaxation and freeze the final assignment.

        Returns:
            Tuple of (tile region array, number of regions)
        """
        centers = self.random_centers(self.initial_num_regions())
        logger.info(
            "Partitioning regions",
            width=self.width,
            initial_regions=len(centers),
            iterations=self.options.relax_iterations,
        )

        for _ in range(self.options.relax_iterations):
            tile_regions = self.assign_regions(centers)
            centers = self.voronoi(tile_regions, len(centers))

        tile_regions = self.assign_regions(centers)
        tile_regions, num_regions = compact_regions(tile_regions, len(centers))

        logger.info("Regions partitioned", regions=num_regions)
        return tile_regions, num_regions


def compact_regions(tile_regions: np.ndarray, num_centers: int) -> Tuple[np.ndarray, int]:
    """
    Renumber regions so that ids are contiguous and every region has tiles.

    A center that ended up owning no tiles (e.g. a duplicate of an earlier
    center) is dropped; the relative order of the remaining ids is kept.
    """
    counts = np.bincount(tile_regions, minlength=num_centers)
    used = np.flatnonzero(counts)
    if len(used) == num_centers:
        return tile_regions, num_centers

    remap = np.full(num_centers, -1, dtype=np.int32)
    remap[used] = np.arange(len(used), dtype=np.int32)
    logger.info("Dropped empty regions", dropped=num_centers - len(used))
    return remap[tile_regions], int(len(used))
