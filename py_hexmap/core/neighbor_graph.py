"""Tile and region adjacency for a partitioned hex map."""

from typing import List, Optional

import structlog

from .alea_prng import AleaPRNG
from .hex_map import HexMap

logger = structlog.get_logger()


def build_region_tiles(hex_map: HexMap) -> List[List[int]]:
    """List the member tiles of each region in index order."""
    region_tiles: List[List[int]] = [[] for _ in range(hex_map.num_regions)]
    for tile, region in enumerate(hex_map.tile_regions):
        region_tiles[int(region)].append(tile)
    return region_tiles


def build_neighbor_graphs(hex_map: HexMap, prng: Optional[AleaPRNG] = None) -> None:
    """
    Populate tile adjacency, region adjacency and the border tile list.

    Every on-grid neighbor of every tile is recorded, so adjacency is
    symmetric. Where two neighbors sit in different regions the region edge
    is recorded and the tile pair is added to ``hex_map.border_tiles``.

    Args:
        hex_map: Map with ``tile_regions`` assigned
        prng: If given, the border list is shuffled so later stages do not
            always work on the same side of each region first
    """
    tile_neighbors = hex_map.tile_neighbors
    region_neighbors = hex_map.region_neighbors
    border_tiles = []

    for tile in range(hex_map.size):
        region = int(hex_map.tile_regions[tile])
        for nbr_hex in hex_map.hex_from_int(tile).all_neighbors():
            nbr = hex_map.int_from_hex(nbr_hex)
            if nbr < 0:
                continue
            tile_neighbors.insert(tile, nbr)

            nbr_region = int(hex_map.tile_regions[nbr])
            if region == nbr_region:
                continue
            region_neighbors.insert(region, nbr_region)
            border_tiles.append((tile, nbr))

    if prng is not None:
        prng.shuffle(border_tiles)

    hex_map.border_tiles = border_tiles
    hex_map.region_tiles = build_region_tiles(hex_map)

    logger.info(
        "Neighbor graphs built",
        tile_edges=len(tile_neighbors),
        region_edges=len(region_neighbors),
        border_pairs=len(border_tiles),
    )
