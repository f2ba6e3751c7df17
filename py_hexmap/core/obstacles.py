"""
Obstacle scatter and walkable connectivity repair.

Process:
1. scatter_obstacles() - Noise field decides which tiles become obstacles
2. avoid_isolated_regions() - Each pair of adjacent regions gets a walkable crossing
3. avoid_isolated_tiles() - Every walkable tile can reach every other walkable
   tile of its region
"""

from collections import deque
from typing import Dict, List, Optional, Set, Tuple

import numpy as np
import structlog
from opensimplex import OpenSimplex
from pydantic import BaseModel, Field

from .alea_prng import AleaPRNG
from .errors import Failed, MapGenerationError, Placed, PlacementResult
from .hex_map import HexMap

logger = structlog.get_logger()


class RepairOptions(BaseModel):
    """Obstacle density and repair behavior."""

    feature_size: float = Field(default=4.0, description="Noise smoothing in tiles")
    threshold: float = Field(
        default=0.4, description="Noise value above which a tile is an obstacle"
    )
    clear_partial_crossings: bool = Field(
        default=True,
        description=(
            "Clear the obstacle side of a blocked region crossing even when the "
            "other side is open. When False only crossings blocked on both sides "
            "are cleared, which can leave region pairs without a crossing."
        ),
    )


class ConnectivityRepairer:
    """Scatters obstacles and clears enough of them to keep the map connected."""

    def __init__(self, hex_map: HexMap, prng: AleaPRNG, options: Optional[RepairOptions] = None):
        self.hex_map = hex_map
        self.prng = prng
        self.options = options or RepairOptions()

    def run(self) -> None:
        """
        Run all three phases.

        Raises:
            MapGenerationError: if an isolated tile cannot be reconnected
        """
        self.scatter_obstacles()
        self.avoid_isolated_regions()
        self.avoid_isolated_tiles()

    def noise_field(self) -> np.ndarray:
        """One OpenSimplex sample per tile, in tile index order."""
        noise = OpenSimplex(seed=self.prng.noise_seed())
        size = self.options.feature_size
        field = np.empty(self.hex_map.size, dtype=np.float64)
        for tile in range(self.hex_map.size):
            h = self.hex_map.hex_from_int(tile)
            field[tile] = noise.noise2(h.x / size, h.y / size)
        return field

    def scatter_obstacles(self) -> int:
        """Turn tiles above the noise threshold into obstacles."""
        field = self.noise_field()
        count = 0
        for tile in range(self.hex_map.size):
            if field[tile] > self.options.threshold and not self.hex_map.tile_occupied[tile]:
                self.hex_map.set_obstacle(tile)
                count += 1

        logger.info("Obstacles scattered", obstacles=count, tiles=self.hex_map.size)
        return count

    def avoid_isolated_regions(self) -> int:
        """
        Make sure each pair of adjacent regions has a walkable crossing.

        Walks the shuffled border tile list. The first pair of tiles found for
        a region pair decides: if both are walkable the regions are already
        linked; otherwise obstacles on the pair are cleared.

        Returns:
            Number of region pairs left without a walkable crossing
        """
        hex_map = self.hex_map
        walkable = hex_map.tile_walkable
        obstacles = hex_map.tile_obstacles
        connected: Set[Tuple[int, int]] = set()
        cleared = 0

        for tile, nbr in hex_map.border_tiles:
            key = _region_pair(hex_map, tile, nbr)
            if key in connected:
                continue

            if walkable[tile] and walkable[nbr]:
                connected.add(key)
                continue

            both_obstacles = obstacles[tile] and obstacles[nbr]
            fixable = self.options.clear_partial_crossings and all(
                walkable[t] or obstacles[t] for t in (tile, nbr)
            )
            if both_obstacles or fixable:
                for t in (tile, nbr):
                    if obstacles[t]:
                        hex_map.clear_obstacle(t)
                        cleared += 1
                connected.add(key)

        all_pairs = {
            _region_pair(hex_map, tile, nbr) for tile, nbr in hex_map.border_tiles
        }
        unlinked = len(all_pairs - connected)
        if unlinked:
            logger.warning("Region pairs left without a walkable crossing", pairs=unlinked)

        logger.info("Region crossings repaired", cleared=cleared, linked=len(connected))
        return unlinked

    def avoid_isolated_tiles(self) -> int:
        """
        Connect every walkable tile to the rest of its region.

        The first walkable tile seen in each region seeds an exploration of
        that region. A walkable tile found later that the exploration never
        reached is isolated: obstacles are cleared along the shortest path
        from it to the explored part of its region.

        Returns:
            Number of isolated tiles that were reconnected

        Raises:
            MapGenerationError: if no path exists for an isolated tile
        """
        hex_map = self.hex_map
        visited = np.zeros(hex_map.size, dtype=bool)
        region_explored = np.zeros(hex_map.num_regions, dtype=bool)
        reconnected = 0

        for tile in range(hex_map.size):
            if not hex_map.tile_walkable[tile] or visited[tile]:
                continue
            region = int(hex_map.tile_regions[tile])
            if region_explored[region]:
                result = self.connect_isolated_tile(tile, visited)
                if isinstance(result, Failed):
                    raise MapGenerationError(result.reason)
                reconnected += 1
            self.explore_walkable_tiles(tile, visited)
            region_explored[region] = True

        logger.info("Isolated tiles reconnected", tiles=reconnected)
        return reconnected

    def explore_walkable_tiles(self, start: int, visited: np.ndarray) -> None:
        """Mark every walkable tile reachable from ``start`` inside its region."""
        hex_map = self.hex_map
        region = hex_map.tile_regions[start]
        visited[start] = True
        queue = deque([start])
        while queue:
            tile = queue.popleft()
            for nbr in hex_map.tile_neighbors.find(tile):
                if (
                    visited[nbr]
                    or hex_map.tile_regions[nbr] != region
                    or not hex_map.tile_walkable[nbr]
                ):
                    continue
                visited[nbr] = True
                queue.append(nbr)

    def connect_isolated_tile(self, start: int, visited: np.ndarray) -> PlacementResult:
        """
        Clear obstacles on the shortest path from ``start`` to any visited tile
        of the same region.

        The search may cross obstacles but never other occupied tiles.

        Returns:
            Placed with the visited tile that was reached, or Failed
        """
        hex_map = self.hex_map
        region = hex_map.tile_regions[start]
        came_from: Dict[int, int] = {start: -1}
        queue = deque([start])
        target = -1

        while queue and target < 0:
            tile = queue.popleft()
            for nbr in hex_map.tile_neighbors.find(tile):
                if nbr in came_from or hex_map.tile_regions[nbr] != region:
                    continue
                passable = hex_map.tile_obstacles[nbr] or (
                    hex_map.tile_walkable[nbr] and not hex_map.tile_occupied[nbr]
                )
                if not passable:
                    continue
                came_from[nbr] = tile
                if visited[nbr]:
                    target = nbr
                    break
                queue.append(nbr)

        if target < 0:
            return Failed(f"No path from isolated tile {start} within region {int(region)}")

        path: List[int] = []
        tile = target
        while tile != -1:
            path.append(tile)
            tile = came_from[tile]
        for t in path:
            if hex_map.tile_obstacles[t]:
                hex_map.clear_obstacle(t)

        return Placed(target)


def _region_pair(hex_map: HexMap, tile: int, nbr: int) -> Tuple[int, int]:
    r1 = int(hex_map.tile_regions[tile])
    r2 = int(hex_map.tile_regions[nbr])
    return (r1, r2) if r1 < r2 else (r2, r1)
