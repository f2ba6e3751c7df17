"""Tests for tile and region adjacency."""

import numpy as np

from py_hexmap.core.alea_prng import AleaPRNG
from py_hexmap.core.hex_map import HexMap
from py_hexmap.core.neighbor_graph import build_neighbor_graphs, build_region_tiles
from py_hexmap.core.regions import RegionPartitioner


def make_split_map(width=6):
    """Map with columns < width/2 in region 0 and the rest in region 1."""
    tile_regions = np.array(
        [0 if (i % width) < width // 2 else 1 for i in range(width * width)], dtype=np.int32
    )
    return HexMap(width=width, tile_regions=tile_regions, num_regions=2)


class TestNeighborGraphs:
    """Test adjacency on a hand-built two-region map."""

    def setup_method(self):
        """Setup test fixtures."""
        self.hex_map = make_split_map()
        build_neighbor_graphs(self.hex_map)

    def test_corner_and_interior_neighbor_counts(self):
        assert len(self.hex_map.get_tile_neighbors(0)) == 2
        assert len(self.hex_map.get_tile_neighbors(14)) == 6

    def test_tile_adjacency_symmetric(self):
        for tile in range(self.hex_map.size):
            for nbr in self.hex_map.get_tile_neighbors(tile):
                assert tile in self.hex_map.get_tile_neighbors(nbr)

    def test_region_adjacency(self):
        assert self.hex_map.get_region_neighbors(0) == [1]
        assert self.hex_map.get_region_neighbors(1) == [0]

    def test_border_tiles_straddle_regions(self):
        assert self.hex_map.border_tiles
        for tile, nbr in self.hex_map.border_tiles:
            assert self.hex_map.get_region(tile) != self.hex_map.get_region(nbr)
            assert nbr in self.hex_map.get_tile_neighbors(tile)

    def test_border_pairs_recorded_both_ways(self):
        pairs = set(self.hex_map.border_tiles)
        for tile, nbr in pairs:
            assert (nbr, tile) in pairs

    def test_region_tiles(self):
        assert len(self.hex_map.region_tiles[0]) == 18
        assert len(self.hex_map.region_tiles[1]) == 18
        assert self.hex_map.region_tiles == build_region_tiles(self.hex_map)


class TestShuffledBorders:
    """Test border list shuffling on a partitioned map."""

    def test_shuffle_keeps_pairs(self):
        width = 16
        tile_regions, num_regions = RegionPartitioner(width, AleaPRNG("graph")).partition()

        plain = HexMap(width=width, tile_regions=tile_regions, num_regions=num_regions)
        build_neighbor_graphs(plain)
        shuffled = HexMap(width=width, tile_regions=tile_regions.copy(), num_regions=num_regions)
        build_neighbor_graphs(shuffled, AleaPRNG("shuffle"))

        assert sorted(plain.border_tiles) == sorted(shuffled.border_tiles)
        assert plain.region_neighbors.to_dict() == shuffled.region_neighbors.to_dict()

    def test_region_adjacency_matches_tiles(self):
        width = 16
        tile_regions, num_regions = RegionPartitioner(width, AleaPRNG("graph")).partition()
        hex_map = HexMap(width=width, tile_regions=tile_regions, num_regions=num_regions)
        build_neighbor_graphs(hex_map, AleaPRNG("graph"))

        expected = set()
        for tile in range(hex_map.size):
            for nbr in hex_map.get_tile_neighbors(tile):
                r1, r2 = hex_map.get_region(tile), hex_map.get_region(nbr)
                if r1 != r2:
                    expected.add((r1, r2))
        actual = {(r, n) for r in range(num_regions) for n in hex_map.get_region_neighbors(r)}
        assert actual == expected
