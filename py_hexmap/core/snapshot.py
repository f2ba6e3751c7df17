"""
Map snapshots.

A snapshot is a JSON document with one array per tile or region attribute
plus the castle list and the object registry. Loading rebuilds the derived
structures (adjacency, region membership, landmasses, coastlines) from the
stored arrays instead of running the generator again.
"""

import json
import math
from pathlib import Path
from typing import Any, Dict, List, Union

import numpy as np
import structlog

from .errors import SnapshotError
from .features import Features
from .hex_map import HexMap
from .neighbor_graph import build_neighbor_graphs
from .terrain import Terrain

logger = structlog.get_logger()

TILE_ARRAYS = ("tile-obstacles", "tile-occupied", "tile-walkable")
REQUIRED_FIELDS = (
    "tile-regions",
    "region-terrain",
    *TILE_ARRAYS,
    "castles",
    "region-castle-distance",
    "objects",
)


def map_to_document(hex_map: HexMap) -> Dict[str, Any]:
    """Serialize the persistent parts of a map to a JSON-friendly dict."""
    return {
        "tile-regions": [int(r) for r in hex_map.tile_regions],
        "region-terrain": [int(t) for t in hex_map.region_terrain],
        "tile-obstacles": [int(v) for v in hex_map.tile_obstacles],
        "tile-occupied": [int(v) for v in hex_map.tile_occupied],
        "tile-walkable": [int(v) for v in hex_map.tile_walkable],
        "castles": [int(t) for t in hex_map.castles],
        "region-castle-distance": [int(d) for d in hex_map.region_castle_distance],
        "objects": {name: [int(t) for t in tiles] for name, tiles in hex_map.objects.to_dict().items()},
    }


def map_from_document(doc: Dict[str, Any]) -> HexMap:
    """
    Rebuild a map from a snapshot document.

    Raises:
        SnapshotError: if fields are missing, have the wrong type or array sizes disagree
    """
    if not isinstance(doc, dict):
        raise SnapshotError("Snapshot must be a JSON object")
    missing = [f for f in REQUIRED_FIELDS if f not in doc]
    if missing:
        raise SnapshotError(f"Snapshot is missing fields: {', '.join(missing)}")

    tile_regions = _int_array(doc, "tile-regions", np.int32)
    size = len(tile_regions)
    width = math.isqrt(size)
    if width * width != size:
        raise SnapshotError(f"tile-regions has {size} entries, not a square number")

    region_terrain = _int_array(doc, "region-terrain", np.int8)
    num_regions = len(region_terrain)
    if size and (tile_regions.min() < 0 or tile_regions.max() >= num_regions):
        raise SnapshotError("tile-regions refers to regions outside region-terrain")
    if num_regions and (region_terrain.min() < 0 or region_terrain.max() >= len(Terrain)):
        raise SnapshotError("region-terrain has unknown terrain values")

    tile_arrays = {}
    for name in TILE_ARRAYS:
        values = _int_array(doc, name, np.int8)
        if len(values) != size:
            raise SnapshotError(f"{name} has {len(values)} entries, expected {size}")
        tile_arrays[name] = values.astype(bool)

    castle_distance = _int_array(doc, "region-castle-distance", np.int32)
    if len(castle_distance) != num_regions:
        raise SnapshotError("region-castle-distance does not match region-terrain")

    hex_map = HexMap(
        width=width,
        tile_regions=tile_regions,
        num_regions=num_regions,
        tile_obstacles=tile_arrays["tile-obstacles"],
        tile_occupied=tile_arrays["tile-occupied"],
        tile_walkable=tile_arrays["tile-walkable"],
        region_terrain=region_terrain,
        region_castle_distance=castle_distance,
    )

    for tile in _int_list(doc["castles"], "castles"):
        if hex_map.off_grid(tile):
            raise SnapshotError(f"Castle tile {tile} is off the map")
        hex_map.castles.append(int(tile))
        hex_map.castle_regions.append(int(tile_regions[tile]))

    objects = doc["objects"]
    if not isinstance(objects, dict):
        raise SnapshotError("objects must map object names to tile lists")
    for name, tiles in objects.items():
        for tile in _int_list(tiles, f"objects.{name}"):
            if hex_map.off_grid(tile):
                raise SnapshotError(f"Object {name} at tile {tile} is off the map")
            hex_map.objects.insert(name, int(tile))

    build_neighbor_graphs(hex_map)
    Features(hex_map).markup()
    return hex_map


def write_snapshot(hex_map: HexMap, filename: Union[str, Path]) -> None:
    """Write a map snapshot as JSON."""
    path = Path(filename)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(map_to_document(hex_map), f)
    logger.info("Snapshot written", path=str(path), width=hex_map.width)


def read_snapshot(filename: Union[str, Path]) -> HexMap:
    """
    Load a map snapshot.

    Raises:
        OSError: if the file cannot be read
        json.JSONDecodeError: if the file is not JSON
        SnapshotError: if the document is not a valid snapshot
    """
    path = Path(filename)
    with open(path, encoding="utf-8") as f:
        doc = json.load(f)
    hex_map = map_from_document(doc)
    logger.info("Snapshot loaded", path=str(path), width=hex_map.width, regions=hex_map.num_regions)
    return hex_map


def load_map(filename: Union[str, Path]) -> HexMap:
    """Load a snapshot, falling back to an empty map if it cannot be read."""
    try:
        return read_snapshot(filename)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, SnapshotError) as e:
        logger.error("Could not load map snapshot", path=str(filename), error=str(e))
        return HexMap.empty()


def _int_list(values: Any, name: str) -> List[int]:
    """Validate a JSON array of integers."""
    if not isinstance(values, list):
        raise SnapshotError(f"{name} must be an array")
    # bool is a subclass of int, so reject it explicitly
    if not all(isinstance(v, int) and not isinstance(v, bool) for v in values):
        raise SnapshotError(f"{name} must contain only integers")
    return values


def _int_array(doc: Dict[str, Any], name: str, dtype) -> np.ndarray:
    values = _int_list(doc[name], name)
    try:
        return np.asarray(values, dtype=dtype)
    except OverflowError as e:
        raise SnapshotError(f"{name} has out-of-range values: {e}") from e
