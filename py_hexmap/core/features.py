"""
Landmass and coastline detection.

This module handles:
- Grouping regions into landmasses (connected runs of water or of land)
- Collecting the tiles on each side of every landmass boundary
"""

from collections import deque
from typing import Dict, Optional, Tuple

import numpy as np
import structlog

from .alea_prng import AleaPRNG
from .hex_map import Coastline, HexMap
from .terrain import Terrain

logger = structlog.get_logger()

UNMARKED = -1


class Features:
    """Marks landmasses and builds coastline records on a terrain-assigned map."""

    def __init__(self, hex_map: HexMap, prng: Optional[AleaPRNG] = None):
        """
        Args:
            hex_map: Map with region terrain and neighbor graphs
            prng: If given, coastline tile lists are shuffled
        """
        self.hex_map = hex_map
        self.prng = prng

    def markup(self) -> None:
        self.assign_landmasses()
        self.build_coastlines()

    def assign_landmasses(self) -> np.ndarray:
        """
        Flood fill the region graph. Adjacent regions that are both water or
        both land share a landmass id.
        """
        hex_map = self.hex_map
        landmass = np.full(hex_map.num_regions, UNMARKED, dtype=np.int32)
        next_id = 0

        for first in range(hex_map.num_regions):
            if landmass[first] != UNMARKED:
                continue
            water = hex_map.is_water(first)
            landmass[first] = next_id
            queue = deque([first])
            while queue:
                region = queue.popleft()
                for nbr in hex_map.region_neighbors.find(region):
                    if landmass[nbr] == UNMARKED and hex_map.is_water(nbr) == water:
                        landmass[nbr] = next_id
                        queue.append(nbr)
            next_id += 1

        hex_map.region_landmass = landmass
        logger.info("Landmasses marked", landmasses=next_id)
        return landmass

    def build_coastlines(self) -> Dict[Tuple[int, int], Coastline]:
        """Collect land-side and water-side tiles of each landmass boundary."""
        hex_map = self.hex_map
        landmass = hex_map.region_landmass
        coastlines: Dict[Tuple[int, int], Coastline] = {}

        for tile, nbr in hex_map.border_tiles:
            r1 = int(hex_map.tile_regions[tile])
            r2 = int(hex_map.tile_regions[nbr])
            l1 = int(landmass[r1])
            l2 = int(landmass[r2])
            if l1 == l2:
                continue

            key = (l1, l2) if l1 < l2 else (l2, l1)
            coast = coastlines.get(key)
            if coast is None:
                coast = Coastline(landmasses=key)
                coastlines[key] = coast

            # Different landmasses always differ in water/land, so one side is land
            if hex_map.is_water(r1):
                land_tile, land_region, water_tile = nbr, r2, tile
            else:
                land_tile, land_region, water_tile = tile, r1, nbr
            coast.tiles.append(land_tile)
            coast.water_tiles.append(water_tile)
            coast.terrains.add(Terrain(int(hex_map.region_terrain[land_region])))

        for coast in coastlines.values():
            coast.tiles = sorted(set(coast.tiles))
            coast.water_tiles = sorted(set(coast.water_tiles))
            if self.prng is not None:
                self.prng.shuffle(coast.tiles)
                self.prng.shuffle(coast.water_tiles)

        hex_map.coastlines = coastlines
        logger.info("Coastlines built", coastlines=len(coastlines))
        return coastlines

