"""
Terrain types and per-region terrain assignment.

Altitudes are spread across the region graph with a random walk, then each
region draws its terrain from the pool for its altitude band.
"""

from enum import IntEnum
from typing import TYPE_CHECKING, List, Optional

import structlog
from pydantic import BaseModel, Field

from .alea_prng import AleaPRNG
from .errors import MapGenerationError

if TYPE_CHECKING:
    from .hex_map import HexMap

logger = structlog.get_logger()


class Terrain(IntEnum):
    """Region terrain. Values are stored in snapshots; do not reorder."""

    WATER = 0
    DESERT = 1
    SWAMP = 2
    GRASS = 3
    DIRT = 4
    SNOW = 5


TERRAIN_NAMES = {
    Terrain.WATER: "water",
    Terrain.DESERT: "desert",
    Terrain.SWAMP: "swamp",
    Terrain.GRASS: "grass",
    Terrain.DIRT: "dirt",
    Terrain.SNOW: "snow",
}


def terrain_from_name(name: str) -> Optional[Terrain]:
    """Case-insensitive lookup, None if unknown."""
    name_lower = name.strip().lower()
    for terrain, terrain_name in TERRAIN_NAMES.items():
        if terrain_name == name_lower:
            return terrain
    return None


# Terrain pools by altitude band
LOWLAND_TERRAIN = (Terrain.WATER, Terrain.DESERT, Terrain.SWAMP)
HIGHLAND_TERRAIN = (Terrain.SNOW, Terrain.DIRT)
MIDLAND_TERRAIN = (Terrain.GRASS, Terrain.DIRT)


class TerrainOptions(BaseModel):
    """Altitude and terrain pool parameters."""

    max_altitude: int = Field(default=3, description="Highest altitude band")
    start_altitude: int = Field(default=1, description="Altitude of region 0")


class TerrainAssigner:
    """Assigns one terrain to every region of a partitioned map."""

    def __init__(
        self,
        hex_map: "HexMap",
        prng: AleaPRNG,
        options: Optional[TerrainOptions] = None,
    ):
        self.hex_map = hex_map
        self.prng = prng
        self.options = options or TerrainOptions()

        self._max_alt = self.options.max_altitude

    def random_altitudes(self) -> List[int]:
        """
        Walk the region graph from region 0, varying altitude by at most one
        step between neighbors.

        Raises:
            MapGenerationError: if some region is unreachable from region 0
        """
        num_regions = self.hex_map.num_regions
        altitude = [-1] * num_regions
        if num_regions == 0:
            return altitude

        altitude[0] = max(0, min(self._max_alt, self.options.start_altitude))
        stack = [0]
        while stack:
            region = stack.pop()
            for nbr in self.hex_map.region_neighbors.find(region):
                if altitude[nbr] != -1:
                    continue
                step = self.prng.randint(-1, 1)
                altitude[nbr] = max(0, min(self._max_alt, altitude[region] + step))
                stack.append(nbr)

        missing = [r for r, alt in enumerate(altitude) if alt == -1]
        if missing:
            raise MapGenerationError(
                f"Region graph is disconnected: {len(missing)} regions unreachable from region 0"
            )
        return altitude

    def terrain_for_altitude(self, altitude: int) -> Terrain:
        if altitude == 0:
            pool = LOWLAND_TERRAIN
        elif altitude == self._max_alt:
            pool = HIGHLAND_TERRAIN
        else:
            pool = MIDLAND_TERRAIN
        return self.prng.choice(pool)

    def assign(self) -> None:
        """Fill ``hex_map.region_terrain``."""
        altitudes = self.random_altitudes()
        for region, alt in enumerate(altitudes):
            self.hex_map.region_terrain[region] = self.terrain_for_altitude(alt)

        logger.info(
            "Terrain assigned",
            regions=self.hex_map.num_regions,
            water=int((self.hex_map.region_terrain == Terrain.WATER).sum()),
        )
