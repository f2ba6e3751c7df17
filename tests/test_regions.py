"""Tests for relaxed Voronoi region partitioning."""

import numpy as np
import pytest

from py_hexmap.core.alea_prng import AleaPRNG
from py_hexmap.core.hex_grid import Hex, hex_distance
from py_hexmap.core.regions import RegionOptions, RegionPartitioner, compact_regions, tile_hexes


class TestRegionOptions:
    """Test partitioning option defaults."""

    def test_default_options(self):
        options = RegionOptions()
        assert options.region_size == 64
        assert options.relax_iterations == 4
        assert options.min_regions == 1


class TestRegionPartitioner:
    """Test the partition of a small map."""

    def setup_method(self):
        """Setup test fixtures."""
        self.partitioner = RegionPartitioner(16, AleaPRNG("regions"))
        self.tile_regions, self.num_regions = self.partitioner.partition()

    def test_region_count_for_width_16(self):
        """256 tiles start with four centers; some may be pruned."""
        assert self.partitioner.initial_num_regions() == 4
        assert 1 <= self.num_regions <= 4

    def test_partition_complete(self):
        assert len(self.tile_regions) == 256
        assert self.tile_regions.min() >= 0
        assert self.tile_regions.max() < self.num_regions

    def test_every_region_has_tiles(self):
        counts = np.bincount(self.tile_regions, minlength=self.num_regions)
        assert np.all(counts > 0)
        assert counts.sum() == 256

    def test_deterministic(self):
        again, num = RegionPartitioner(16, AleaPRNG("regions")).partition()
        assert num == self.num_regions
        np.testing.assert_array_equal(again, self.tile_regions)

    def test_larger_map(self):
        tile_regions, num_regions = RegionPartitioner(36, AleaPRNG("big")).partition()
        assert 1 <= num_regions <= 1296 // 64
        assert np.all(np.bincount(tile_regions, minlength=num_regions) > 0)

    def test_tiny_map_gets_minimum_regions(self):
        """Fewer than 64 tiles would round down to zero regions."""
        partitioner = RegionPartitioner(5, AleaPRNG("tiny"))
        assert partitioner.initial_num_regions() == 1
        tile_regions, num_regions = partitioner.partition()
        assert num_regions == 1
        assert np.all(tile_regions == 0)

    def test_invalid_width(self):
        with pytest.raises(ValueError):
            RegionPartitioner(0, AleaPRNG("zero"))


class TestVoronoiSteps:
    """Test the individual relaxation steps."""

    def setup_method(self):
        """Setup test fixtures."""
        self.partitioner = RegionPartitioner(8, AleaPRNG("steps"))

    def test_assign_to_nearest_center(self):
        centers = [Hex(1, 1), Hex(6, 6)]
        tile_regions = self.partitioner.assign_regions(centers)
        for i, h in enumerate(tile_hexes(8)):
            chosen = centers[tile_regions[i]]
            assert hex_distance(h, chosen) == min(hex_distance(h, c) for c in centers)

    def test_duplicate_center_empties_out(self):
        """The second copy of a center never wins a tie, so its region is dropped."""
        centers = [Hex(2, 2), Hex(2, 2), Hex(6, 6)]
        tile_regions = self.partitioner.assign_regions(centers)
        new_centers = self.partitioner.voronoi(tile_regions, len(centers))
        assert len(new_centers) == 2

    def test_voronoi_averages_members(self):
        tile_regions = np.zeros(64, dtype=np.int32)
        centers = self.partitioner.voronoi(tile_regions, 1)
        # Average of 0..7 truncates to 3 on both axes
        assert centers == [Hex(3, 3)]


class TestCompactRegions:
    """Test renumbering after empty regions are dropped."""

    def test_no_gaps(self):
        tile_regions = np.array([0, 1, 1, 2], dtype=np.int32)
        result, num = compact_regions(tile_regions, 3)
        assert num == 3
        np.testing.assert_array_equal(result, tile_regions)

    def test_gap_removed(self):
        tile_regions = np.array([0, 2, 2, 3], dtype=np.int32)
        result, num = compact_regions(tile_regions, 4)
        assert num == 3
        np.testing.assert_array_equal(result, [0, 1, 1, 2])
