"""
Object and neutral army placement.

Process:
1. place_objects() - Each region rolls for every catalog entry its terrain
   allows and drops the instances on free tiles near a random starting tile
2. place_coastline_objects() - Same rolls per coastline
3. ArmyPlacer.place_armies() - One neutral army per ordered pair of
   neighboring land regions, keeping zones of control apart
"""

from collections import deque
from typing import Iterable, List, Optional, Set, Tuple

import numpy as np
import structlog
from pydantic import BaseModel, Field

from .alea_prng import AleaPRNG
from .errors import Failed, Placed, PlacementResult
from .hex_grid import hex_disk
from .hex_map import HexMap
from .objects import SPECIAL_OBJECTS, MapObject, ObjectManager, ObjectType, obj_name_from_type
from .terrain import Terrain

logger = structlog.get_logger()


class ArmyOptions(BaseModel):
    """Neutral army placement parameters."""

    zone_of_control: int = Field(default=2, description="Radius of an army's claimed zone")


class ObjectPlacer:
    """Places catalog objects on a map that already has castles."""

    def __init__(self, hex_map: HexMap, catalog: ObjectManager, prng: AleaPRNG):
        self.hex_map = hex_map
        self.catalog = catalog
        self.prng = prng
        # Tiles where a new village would touch an existing one
        self.village_excluded = np.zeros(hex_map.size, dtype=bool)

    def placeable_objects(self) -> List[MapObject]:
        return [obj for obj in self.catalog if obj.type not in SPECIAL_OBJECTS]

    def num_to_place(self, obj: MapObject, max_count: int, terrains: Iterable[Terrain]) -> int:
        """Roll once per allowed instance; zero if no terrain matches the mask."""
        if not any(obj.allows(t) for t in terrains):
            return 0
        return sum(1 for _ in range(max_count) if self.prng.chance(obj.probability))

    def place_objects(self) -> int:
        """
        Place every generic catalog object in every region.

        Returns:
            Number of objects placed
        """
        hex_map = self.hex_map
        castle_regions = set(hex_map.castle_regions)
        placed = 0

        for region in range(hex_map.num_regions):
            terrain = Terrain(int(hex_map.region_terrain[region]))
            for obj in self.placeable_objects():
                max_count = obj.per_castle if region in castle_regions else obj.per_region
                for _ in range(self.num_to_place(obj, max_count, [terrain])):
                    result = self.find_object_spot(region, obj.type)
                    if isinstance(result, Failed):
                        logger.debug("Region full", region=region, object=obj.type_name)
                        break
                    self._place(obj.type, result.tile)
                    placed += 1

        logger.info("Objects placed", objects=placed)
        return placed

    def place_coastline_objects(self) -> int:
        """Place objects configured per coastline on free coastline tiles."""
        hex_map = self.hex_map
        placed = 0

        for key in sorted(hex_map.coastlines):
            coast = hex_map.coastlines[key]
            terrains = set(coast.terrains) | {Terrain.WATER}
            for obj in self.placeable_objects():
                if obj.per_coastline <= 0:
                    continue
                for _ in range(self.num_to_place(obj, obj.per_coastline, terrains)):
                    tile = self._free_coastline_tile(obj, coast.tiles + coast.water_tiles)
                    if tile < 0:
                        break
                    self._place(obj.type, tile)
                    placed += 1

        logger.info("Coastline objects placed", objects=placed)
        return placed

    def is_eligible(self, tile: int, obj_type: ObjectType) -> bool:
        if self.hex_map.tile_occupied[tile]:
            return False
        if obj_type == ObjectType.VILLAGE and self.village_excluded[tile]:
            return False
        return True

    def find_object_spot(self, region: int, obj_type: ObjectType) -> PlacementResult:
        """Breadth-first search from a random region tile for a free tile."""
        hex_map = self.hex_map
        start = self.prng.choice(hex_map.region_tiles[region])
        visited = {start}
        queue = deque([start])

        while queue:
            tile = queue.popleft()
            if self.is_eligible(tile, obj_type):
                return Placed(tile)
            for nbr in hex_map.tile_neighbors.find(tile):
                if nbr in visited or hex_map.tile_regions[nbr] != region:
                    continue
                visited.add(nbr)
                queue.append(nbr)

        return Failed(f"No free tile left in region {region}")

    def _free_coastline_tile(self, obj: MapObject, candidates: List[int]) -> int:
        for tile in candidates:
            if obj.allows(self.hex_map.get_terrain(tile)) and self.is_eligible(tile, obj.type):
                return tile
        return -1

    def _place(self, obj_type: ObjectType, tile: int) -> None:
        hex_map = self.hex_map
        hex_map.place_object(obj_name_from_type(obj_type), tile)
        if obj_type != ObjectType.VILLAGE:
            return
        self.village_excluded[tile] = True
        for nbr in hex_map.tile_neighbors.find(tile):
            self.village_excluded[nbr] = True


class ArmyPlacer:
    """Places neutral armies on region boundaries."""

    def __init__(self, hex_map: HexMap, options: Optional[ArmyOptions] = None):
        self.hex_map = hex_map
        self.options = options or ArmyOptions()
        self.claimed = np.zeros(hex_map.size, dtype=bool)
        self.guarded_pairs: Set[Tuple[int, int]] = set()

    def zone_of_control(self, tile: int) -> List[int]:
        hex_map = self.hex_map
        zone = hex_disk(hex_map.hex_from_int(tile), self.options.zone_of_control)
        return [t for t in (hex_map.int_from_hex(h) for h in zone) if t >= 0]

    def is_eligible(self, tile: int, nbr: int) -> bool:
        hex_map = self.hex_map
        region = int(hex_map.tile_regions[tile])
        nbr_region = int(hex_map.tile_regions[nbr])
        castle_regions = hex_map.castle_regions

        if (region, nbr_region) in self.guarded_pairs:
            return False
        if hex_map.is_water(region) or hex_map.is_water(nbr_region):
            return False
        if region in castle_regions or nbr_region in castle_regions:
            return False
        for t in (tile, nbr):
            if hex_map.tile_occupied[t] or not hex_map.tile_walkable[t]:
                return False
        return not any(self.claimed[t] for t in self.zone_of_control(tile))

    def place_armies(self) -> int:
        """
        Scan the border tiles once and place an army wherever allowed.

        Returns:
            Number of armies placed
        """
        hex_map = self.hex_map
        name = obj_name_from_type(ObjectType.ARMY)
        placed = 0

        for tile, nbr in hex_map.border_tiles:
            if not self.is_eligible(tile, nbr):
                continue
            hex_map.place_object(name, tile)
            for t in self.zone_of_control(tile):
                self.claimed[t] = True
            self.guarded_pairs.add(
                (int(hex_map.tile_regions[tile]), int(hex_map.tile_regions[nbr]))
            )
            placed += 1

        logger.info("Armies placed", armies=placed)
        return placed
