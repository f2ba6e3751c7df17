"""Tests for castle placement and castle distances."""

import numpy as np
import pytest

from py_hexmap.core.alea_prng import AleaPRNG
from py_hexmap.core.castles import CastleOptions, CastlePlacer
from py_hexmap.core.errors import Failed, MapGenerationError, Placed
from py_hexmap.core.hex_grid import HexDir
from py_hexmap.core.hex_map import HexMap
from py_hexmap.core.neighbor_graph import build_neighbor_graphs
from py_hexmap.core.random_map import generate_random_map


def single_region_map(width=10):
    hex_map = HexMap(width=width, tile_regions=np.zeros(width * width, dtype=np.int32), num_regions=1)
    build_neighbor_graphs(hex_map)
    return hex_map


def strip_map(width=12, strips=3):
    """Vertical strips of equal width; strip i is region i."""
    strip = width // strips
    tile_regions = np.array([(i % width) // strip for i in range(width * width)], dtype=np.int32)
    hex_map = HexMap(width=width, tile_regions=tile_regions, num_regions=strips)
    build_neighbor_graphs(hex_map)
    return hex_map


class TestCastleOptions:
    """Test castle option validation."""

    def test_default_options(self):
        options = CastleOptions()
        assert options.num_castles == 4
        assert options.footprint_radius == 2

    def test_castle_count_bounds(self):
        with pytest.raises(ValueError):
            CastleOptions(num_castles=5)
        with pytest.raises(ValueError):
            CastleOptions(num_castles=0)


class TestCastleFootprint:
    """Test a single castle on an open map."""

    def setup_method(self):
        """Setup test fixtures."""
        self.hex_map = single_region_map()
        self.placer = CastlePlacer(self.hex_map, AleaPRNG("castle"), CastleOptions(num_castles=1))
        self.castles = self.placer.place_castles()

    def test_one_castle(self):
        assert len(self.castles) == 1
        assert self.hex_map.castle_regions == [0]

    def test_footprint_occupied(self):
        footprint = self.placer.footprint(self.castles[0])
        assert len(footprint) == 19
        for h in footprint:
            assert self.hex_map.get_occupied(h)

    def test_entrance_faces_south(self):
        center = self.hex_map.hex_from_int(self.castles[0])
        assert self.hex_map.get_walkable(center)
        assert self.hex_map.get_walkable(center.neighbor(HexDir.S))
        for direction in HexDir:
            if direction != HexDir.S:
                assert not self.hex_map.get_walkable(center.neighbor(direction))

    def test_same_region_rejected(self):
        """A second castle cannot share the region."""
        for tile in range(self.hex_map.size):
            assert not self.placer.is_valid_spot(tile)

    def test_second_castle_fails(self):
        hex_map = single_region_map()
        placer = CastlePlacer(hex_map, AleaPRNG("castle"), CastleOptions(num_castles=2))
        with pytest.raises(MapGenerationError):
            placer.place_castles()


class TestCastleSpot:
    """Test the castle site search."""

    def test_edge_tiles_invalid(self):
        hex_map = single_region_map()
        placer = CastlePlacer(hex_map, AleaPRNG("spot"))
        assert not placer.is_valid_spot(0)
        assert not placer.is_valid_spot(1)

    def test_search_moves_off_edge(self):
        hex_map = single_region_map()
        placer = CastlePlacer(hex_map, AleaPRNG("spot"))
        result = placer.find_castle_spot(0)
        assert isinstance(result, Placed)
        assert placer.is_valid_spot(result.tile)

    def test_occupied_tiles_block(self):
        hex_map = single_region_map(5)
        hex_map.tile_occupied[12] = True
        result = CastlePlacer(hex_map, AleaPRNG("spot")).find_castle_spot(0)
        assert isinstance(result, Failed)

    def test_adjacent_regions_excluded(self):
        """With a castle in the left strip, only the right strip can host another."""
        hex_map = strip_map(width=15, strips=3)
        placer = CastlePlacer(hex_map, AleaPRNG("strips"))
        placer.castle_regions.add(0)
        valid = [t for t in range(hex_map.size) if placer.is_valid_spot(t)]
        assert valid
        assert all(hex_map.get_region(t) == 2 for t in valid)


class TestCastleDistance:
    """Test region hops to the nearest castle."""

    def test_strip_distances(self):
        hex_map = strip_map(width=12, strips=4)
        hex_map.castle_regions.append(0)
        distance = CastlePlacer(hex_map, AleaPRNG("dist")).compute_castle_distances()
        assert list(distance) == [0, 1, 2, 3]
        assert hex_map.get_castle_distance(3) == 3

    def test_nearest_castle_wins(self):
        hex_map = strip_map(width=12, strips=4)
        hex_map.castle_regions.extend([0, 3])
        CastlePlacer(hex_map, AleaPRNG("dist")).compute_castle_distances()
        assert list(hex_map.region_castle_distance) == [0, 1, 1, 0]

    def test_unreachable_region_raises(self):
        hex_map = HexMap(width=4, tile_regions=np.array([0] * 8 + [1] * 8), num_regions=2)
        hex_map.castle_regions.append(0)
        with pytest.raises(MapGenerationError):
            CastlePlacer(hex_map, AleaPRNG("dist")).compute_castle_distances()


class TestSmallMaps:
    """Test maps too small for four castles."""

    def test_width_16_cannot_fit_four_castles(self):
        """
        256 tiles give at most four regions, and four connected regions can
        never be pairwise non-adjacent.
        """
        with pytest.raises(MapGenerationError):
            generate_random_map(16, seed="small")
