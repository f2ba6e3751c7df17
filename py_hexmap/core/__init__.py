"""
Core map generation functionality.
"""

from .alea_prng import AleaPRNG
from .errors import Failed, MapGenerationError, OffGridError, Placed, SnapshotError
from .hex_grid import Hex, HexDir, hex_closest_idx, hex_disk, hex_distance
from .hex_map import Coastline, HexMap
from .objects import MapObject, ObjectAction, ObjectManager, ObjectType
from .random_map import MapOptions, generate_random_map, summarize_map
from .snapshot import load_map, read_snapshot, write_snapshot
from .terrain import Terrain

__all__ = ['AleaPRNG', 'Failed', 'MapGenerationError', 'OffGridError', 'Placed', 'SnapshotError',
           'Hex', 'HexDir', 'hex_closest_idx', 'hex_disk', 'hex_distance',
           'Coastline', 'HexMap', 'MapObject', 'ObjectAction', 'ObjectManager', 'ObjectType',
           'MapOptions', 'generate_random_map', 'summarize_map',
           'load_map', 'read_snapshot', 'write_snapshot', 'Terrain']
