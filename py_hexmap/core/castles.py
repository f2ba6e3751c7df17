"""
Castle placement and castle distance.

One castle goes in each quadrant of the map. A castle covers a disk of
radius 2 that must fit inside a single region, and no two castle regions may
touch. Afterwards every region learns how many region hops it is from the
nearest castle.
"""

from collections import deque
from typing import List, Optional, Set

import numpy as np
import structlog
from pydantic import BaseModel, Field

from .alea_prng import AleaPRNG
from .errors import Failed, MapGenerationError, Placed, PlacementResult, expect_placed
from .hex_grid import Hex, HexDir, hex_disk
from .hex_map import HexMap

logger = structlog.get_logger()

# Quadrant corners as (column half, row half)
QUADRANTS = [(0, 0), (1, 0), (0, 1), (1, 1)]


class CastleOptions(BaseModel):
    """Castle placement parameters."""

    num_castles: int = Field(default=4, ge=1, le=4, description="One castle per quadrant")
    footprint_radius: int = Field(default=2, description="Radius of the castle footprint")


class CastlePlacer:
    """Sites castles and computes region distances to them."""

    def __init__(self, hex_map: HexMap, prng: AleaPRNG, options: Optional[CastleOptions] = None):
        self.hex_map = hex_map
        self.prng = prng
        self.options = options or CastleOptions()
        self.castle_regions: Set[int] = set()

    def place_castles(self) -> List[int]:
        """
        Place one castle per quadrant.

        Returns:
            Center tile of each castle

        Raises:
            MapGenerationError: if a quadrant has no valid spot
        """
        hex_map = self.hex_map
        half = max(1, hex_map.width // 2)

        for qx, qy in QUADRANTS[: self.options.num_castles]:
            x = min(hex_map.width - 1, qx * half + self.prng.randint(0, half - 1))
            y = min(hex_map.width - 1, qy * half + self.prng.randint(0, half - 1))
            start = hex_map.int_from_hex(Hex(x, y))

            tile = expect_placed(self.find_castle_spot(start))
            self._build_castle(tile)

        logger.info("Castles placed", castles=len(hex_map.castles))
        return list(hex_map.castles)

    def footprint(self, tile: int) -> List[Hex]:
        return hex_disk(self.hex_map.hex_from_int(tile), self.options.footprint_radius)

    def is_valid_spot(self, tile: int) -> bool:
        """True if a castle centered on ``tile`` fits the placement rules."""
        hex_map = self.hex_map
        region = int(hex_map.tile_regions[tile])
        if region in self.castle_regions:
            return False
        if any(nbr in self.castle_regions for nbr in hex_map.region_neighbors.find(region)):
            return False

        for h in self.footprint(tile):
            index = hex_map.int_from_hex(h)
            if index < 0:
                return False
            if hex_map.tile_regions[index] != region or hex_map.tile_occupied[index]:
                return False
        return True

    def find_castle_spot(self, start: int) -> PlacementResult:
        """Breadth-first search from ``start`` for the nearest valid castle center."""
        hex_map = self.hex_map
        visited = np.zeros(hex_map.size, dtype=bool)
        visited[start] = True
        queue = deque([start])
        rejected_regions: Set[int] = set()

        while queue:
            tile = queue.popleft()
            region = int(hex_map.tile_regions[tile])
            if region not in rejected_regions:
                if self.is_valid_spot(tile):
                    return Placed(tile)
                if self._region_blocked(region):
                    rejected_regions.add(region)

            for nbr in hex_map.tile_neighbors.find(tile):
                if not visited[nbr]:
                    visited[nbr] = True
                    queue.append(nbr)

        return Failed(f"No valid castle site reachable from tile {start}")

    def _region_blocked(self, region: int) -> bool:
        """Region hosts or borders a castle, so none of its tiles can qualify."""
        if region in self.castle_regions:
            return True
        return any(n in self.castle_regions for n in self.hex_map.region_neighbors.find(region))

    def _build_castle(self, tile: int) -> None:
        hex_map = self.hex_map
        for h in self.footprint(tile):
            hex_map.tile_occupied[hex_map.int_from_hex(h)] = True

        # Interior walls; the entrance faces south
        center = hex_map.hex_from_int(tile)
        for direction in HexDir:
            if direction == HexDir.S:
                continue
            hex_map.tile_walkable[hex_map.int_from_hex(center.neighbor(direction))] = False

        region = int(hex_map.tile_regions[tile])
        hex_map.castles.append(tile)
        hex_map.castle_regions.append(region)
        self.castle_regions.add(region)

    def compute_castle_distances(self) -> np.ndarray:
        """
        Region hops from each region to the nearest castle region.

        Raises:
            MapGenerationError: if some region cannot reach any castle
        """
        hex_map = self.hex_map
        distance = np.full(hex_map.num_regions, -1, dtype=np.int32)
        queue = deque()
        for region in hex_map.castle_regions:
            if distance[region] != 0:
                distance[region] = 0
                queue.append(region)

        while queue:
            region = queue.popleft()
            for nbr in hex_map.region_neighbors.find(region):
                if distance[nbr] == -1:
                    distance[nbr] = distance[region] + 1
                    queue.append(nbr)

        unreachable = int((distance < 0).sum())
        if unreachable:
            raise MapGenerationError(f"{unreachable} regions cannot reach a castle")

        hex_map.region_castle_distance = distance
        logger.info("Castle distances computed", max_distance=int(distance.max(initial=0)))
        return distance
