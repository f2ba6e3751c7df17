"""Map data structure shared by every generation stage."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple, Union

import numpy as np

from .errors import OffGridError
from .hex_grid import Hex
from .multimap import FlatMultimap
from .terrain import Terrain

TileRef = Union[int, Hex]


@dataclass
class Coastline:
    """Tiles along the boundary between two landmasses."""

    landmasses: Tuple[int, int]
    tiles: List[int] = field(default_factory=list)  # land side
    water_tiles: List[int] = field(default_factory=list)
    terrains: Set[Terrain] = field(default_factory=set)


@dataclass
class HexMap:
    """Generated map state.

    Tiles and regions live in dense parallel arrays indexed by tile id and
    region id. Stages fill these in pipeline order; once generation is done
    the map is treated as read-only by consumers, apart from the
    ``tile_occupied`` bookkeeping used while objects are placed.
    """

    width: int
    tile_regions: np.ndarray                      # region id of each tile
    num_regions: int
    tile_obstacles: Optional[np.ndarray] = None
    tile_occupied: Optional[np.ndarray] = None
    tile_walkable: Optional[np.ndarray] = None

    region_tiles: List[List[int]] = field(default_factory=list)
    region_terrain: Optional[np.ndarray] = None   # Terrain value per region
    region_landmass: Optional[np.ndarray] = None
    region_castle_distance: Optional[np.ndarray] = None

    tile_neighbors: FlatMultimap = field(default_factory=FlatMultimap)
    region_neighbors: FlatMultimap = field(default_factory=FlatMultimap)
    border_tiles: List[Tuple[int, int]] = field(default_factory=list)

    castles: List[int] = field(default_factory=list)  # center tile of each castle
    castle_regions: List[int] = field(default_factory=list)
    coastlines: Dict[Tuple[int, int], Coastline] = field(default_factory=dict)
    objects: FlatMultimap = field(default_factory=FlatMultimap)
    seed: str = ""

    def __post_init__(self):
        size = self.size
        if self.tile_obstacles is None:
            self.tile_obstacles = np.zeros(size, dtype=bool)
        if self.tile_occupied is None:
            self.tile_occupied = np.zeros(size, dtype=bool)
        if self.tile_walkable is None:
            self.tile_walkable = np.ones(size, dtype=bool)
        if self.region_terrain is None:
            self.region_terrain = np.zeros(self.num_regions, dtype=np.int8)
        if self.region_castle_distance is None:
            self.region_castle_distance = np.full(self.num_regions, -1, dtype=np.int32)

    @classmethod
    def empty(cls) -> "HexMap":
        """A zero-sized map, used when a snapshot cannot be loaded."""
        return cls(width=0, tile_regions=np.zeros(0, dtype=np.int32), num_regions=0)

    @property
    def size(self) -> int:
        return self.width * self.width

    # Addressing

    def hex_from_int(self, index: int) -> Hex:
        """Convert a tile index to a hex, or Hex.invalid() if off-grid."""
        if self.off_grid(index):
            return Hex.invalid()
        return Hex(index % self.width, index // self.width)

    def int_from_hex(self, hex_: Hex) -> int:
        """Convert a hex to a tile index, or -1 if off-grid."""
        if self.off_grid(hex_):
            return -1
        return hex_.y * self.width + hex_.x

    def off_grid(self, tile: TileRef) -> bool:
        if isinstance(tile, Hex):
            return (
                not tile.is_valid()
                or tile.x < 0
                or tile.y < 0
                or tile.x >= self.width
                or tile.y >= self.width
            )
        return tile < 0 or tile >= self.size

    def _index(self, tile: TileRef) -> int:
        if self.off_grid(tile):
            raise OffGridError(f"Tile {tile} is outside a {self.width}x{self.width} map")
        if isinstance(tile, Hex):
            return tile.y * self.width + tile.x
        return int(tile)

    # Per-tile lookups

    def get_region(self, tile: TileRef) -> int:
        return int(self.tile_regions[self._index(tile)])

    def get_terrain(self, tile: TileRef) -> Terrain:
        return Terrain(int(self.region_terrain[self.get_region(tile)]))

    def get_obstacle(self, tile: TileRef) -> bool:
        return bool(self.tile_obstacles[self._index(tile)])

    def get_walkable(self, tile: TileRef) -> bool:
        return bool(self.tile_walkable[self._index(tile)])

    def get_occupied(self, tile: TileRef) -> bool:
        return bool(self.tile_occupied[self._index(tile)])

    def get_tile_neighbors(self, tile: TileRef) -> List[int]:
        return self.tile_neighbors.find(self._index(tile))

    # Per-region lookups

    def _check_region(self, region: int) -> None:
        if region < 0 or region >= self.num_regions:
            raise OffGridError(f"Region {region} does not exist ({self.num_regions} regions)")

    def get_region_terrain(self, region: int) -> Terrain:
        self._check_region(region)
        return Terrain(int(self.region_terrain[region]))

    def get_region_neighbors(self, region: int) -> List[int]:
        self._check_region(region)
        return self.region_neighbors.find(region)

    def get_castle_distance(self, region: int) -> int:
        self._check_region(region)
        return int(self.region_castle_distance[region])

    # Objects

    def get_castle_tiles(self) -> List[Hex]:
        """Center hex of each castle."""
        return [self.hex_from_int(t) for t in self.castles]

    def get_object_tiles(self, name: str) -> List[int]:
        return self.objects.find(name)

    def get_coastlines(self) -> List[Coastline]:
        return [self.coastlines[k] for k in sorted(self.coastlines)]

    # Mutation helpers used during generation

    def set_obstacle(self, index: int) -> None:
        self.tile_obstacles[index] = True
        self.tile_occupied[index] = True
        self.tile_walkable[index] = False

    def clear_obstacle(self, index: int) -> None:
        self.tile_obstacles[index] = False
        self.tile_occupied[index] = False
        self.tile_walkable[index] = True

    def place_object(self, name: str, index: int) -> None:
        self.tile_occupied[index] = True
        self.objects.insert(name, index)

    def is_water(self, region: int) -> bool:
        return int(self.region_terrain[region]) == Terrain.WATER
