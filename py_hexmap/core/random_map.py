"""
Random map generation pipeline.

Stages run in a fixed order, each refining the map built by the previous
ones:

1. Partition tiles into regions
2. Build tile/region adjacency and the border tile list
3. Assign terrain per region
4. Scatter obstacles and repair connectivity
5. Place castles and compute castle distances
6. Mark landmasses and coastlines
7. Place objects and neutral armies
"""

import secrets
from typing import Any, Dict, Optional

import numpy as np
import structlog
from pydantic import BaseModel, Field

from .alea_prng import AleaPRNG
from .castles import CastleOptions, CastlePlacer
from .errors import MapGenerationError
from .features import Features
from .hex_map import HexMap
from .neighbor_graph import build_neighbor_graphs
from .objects import ObjectManager
from .obstacles import ConnectivityRepairer, RepairOptions
from .placement import ArmyOptions, ArmyPlacer, ObjectPlacer
from .regions import RegionOptions, RegionPartitioner
from .terrain import TERRAIN_NAMES, Terrain, TerrainAssigner, TerrainOptions

logger = structlog.get_logger()


class MapOptions(BaseModel):
    """Options for every stage of the pipeline."""

    regions: RegionOptions = Field(default_factory=RegionOptions)
    terrain: TerrainOptions = Field(default_factory=TerrainOptions)
    repair: RepairOptions = Field(default_factory=RepairOptions)
    castles: CastleOptions = Field(default_factory=CastleOptions)
    armies: ArmyOptions = Field(default_factory=ArmyOptions)


def new_seed() -> str:
    """Fresh random seed for runs that do not ask for one."""
    return str(secrets.randbelow(10**9))


def generate_random_map(
    width: int,
    seed: Optional[str] = None,
    catalog: Optional[ObjectManager] = None,
    options: Optional[MapOptions] = None,
    max_attempts: int = 1,
) -> HexMap:
    """
    Generate a complete map.

    Args:
        width: Map width in tiles
        seed: Seed string; a random one is drawn if omitted
        catalog: Object catalog; no objects besides castles and armies if omitted
        options: Stage options
        max_attempts: Attempts before giving up. Attempt ``n > 0`` uses the
            seed ``"<seed>:<n>"``.

    Returns:
        The generated map

    Raises:
        MapGenerationError: if every attempt failed
    """
    seed = seed if seed is not None else new_seed()
    options = options or MapOptions()
    catalog = catalog if catalog is not None else ObjectManager()

    last_error: Optional[MapGenerationError] = None
    for attempt in range(max(1, max_attempts)):
        run_seed = seed if attempt == 0 else f"{seed}:{attempt}"
        try:
            return _generate(width, run_seed, catalog, options)
        except MapGenerationError as e:
            logger.warning(
                "Map generation attempt failed", seed=run_seed, attempt=attempt + 1, reason=e.reason
            )
            last_error = e

    raise last_error


def _generate(width: int, seed: str, catalog: ObjectManager, options: MapOptions) -> HexMap:
    logger.info("Generating random map", width=width, seed=seed)
    prng = AleaPRNG(seed)

    tile_regions, num_regions = RegionPartitioner(width, prng, options.regions).partition()
    hex_map = HexMap(width=width, tile_regions=tile_regions, num_regions=num_regions, seed=seed)
    build_neighbor_graphs(hex_map, prng)

    TerrainAssigner(hex_map, prng, options.terrain).assign()
    ConnectivityRepairer(hex_map, prng, options.repair).run()

    castles = CastlePlacer(hex_map, prng, options.castles)
    castles.place_castles()
    castles.compute_castle_distances()

    Features(hex_map, prng).markup()

    objects = ObjectPlacer(hex_map, catalog, prng)
    objects.place_objects()
    objects.place_coastline_objects()
    ArmyPlacer(hex_map, options.armies).place_armies()

    logger.info("Random map generated", **summarize_map(hex_map)["counts"])
    return hex_map


def summarize_map(hex_map: HexMap) -> Dict[str, Any]:
    """Counts and terrain breakdown for logs, the CLI and the API."""
    terrain_regions = {
        TERRAIN_NAMES[t]: int((hex_map.region_terrain == t).sum()) for t in Terrain
    }
    landmasses = (
        int(np.unique(hex_map.region_landmass).size) if hex_map.region_landmass is not None else 0
    )
    return {
        "width": hex_map.width,
        "seed": hex_map.seed,
        "counts": {
            "regions": hex_map.num_regions,
            "castles": len(hex_map.castles),
            "landmasses": landmasses,
            "coastlines": len(hex_map.coastlines),
            "obstacles": int(hex_map.tile_obstacles.sum()),
        },
        "terrain_regions": terrain_regions,
        "objects": {name: len(tiles) for name, tiles in hex_map.objects.to_dict().items()},
    }
