"""
Map object catalog.

The catalog is a JSON document keyed by object type name. Each entry sets
how many instances may appear per region, per castle region and per
coastline, the chance of each instance, the terrains it may sit on and what
happens when a champion reaches it. Unknown types and fields are reported
and skipped rather than aborting the load.
"""

import json
from enum import Enum, IntEnum
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Union

import structlog
from pydantic import BaseModel, Field

from .terrain import Terrain, terrain_from_name

logger = structlog.get_logger()


class ObjectType(IntEnum):
    """Object types, in alphabetical order of their names."""

    ARMY = 0
    CAMP = 1
    CASTLE = 2
    CHAMPION = 3
    CHEST = 4
    OASIS = 5
    RESOURCE = 6
    SHIPWRECK = 7
    VILLAGE = 8
    WINDMILL = 9
    INVALID = 10


class ObjectAction(Enum):
    NONE = "none"
    BATTLE = "battle"
    VISIT = "visit"
    PICKUP = "pickup"


# Sited by their own placers or by gameplay, never by the generic placer
SPECIAL_OBJECTS = {ObjectType.ARMY, ObjectType.CASTLE, ObjectType.CHAMPION}

ALL_TERRAIN_MASK = (1 << len(Terrain)) - 1


def obj_name_from_type(obj_type: ObjectType) -> str:
    """Lower-cased type name, empty for INVALID."""
    if obj_type == ObjectType.INVALID:
        return ""
    return obj_type.name.lower()


def obj_type_from_name(name: str) -> ObjectType:
    """Type for a lower-case name, INVALID if unknown."""
    try:
        obj_type = ObjectType[name.upper()]
    except KeyError:
        return ObjectType.INVALID
    if obj_name_from_type(obj_type) != name:
        return ObjectType.INVALID
    return obj_type


def terrain_mask(terrains: Iterable[Terrain]) -> int:
    mask = 0
    for t in terrains:
        mask |= 1 << int(t)
    return mask


class MapObject(BaseModel):
    """Catalog entry for one object type."""

    name: str = Field(default="", description="Display name")
    img_name: str = Field(default="", description="Image asset name")
    terrain_mask: int = Field(
        default=ALL_TERRAIN_MASK, description="Bit per Terrain value the object may sit on"
    )
    per_region: int = Field(default=1, description="Max instances per ordinary region")
    per_castle: int = Field(default=0, description="Max instances per castle region")
    per_coastline: int = Field(default=0, description="Max instances per coastline")
    probability: int = Field(default=100, ge=0, le=100, description="Chance per instance (%)")
    type: ObjectType = Field(default=ObjectType.INVALID, description="Object type")
    action: ObjectAction = Field(default=ObjectAction.NONE, description="Champion interaction")
    flaggable: bool = Field(default=False, description="Can be claimed by a player")

    def allows(self, terrain: Terrain) -> bool:
        return bool(self.terrain_mask & (1 << int(terrain)))

    @property
    def type_name(self) -> str:
        return obj_name_from_type(self.type)


class ObjectManager:
    """Read-only collection of catalog entries, sorted by object type."""

    def __init__(self, objects: Optional[Iterable[MapObject]] = None):
        self._objs: List[MapObject] = sorted(objects or [], key=lambda o: o.type)

    @classmethod
    def from_file(cls, config_file: Union[str, Path]) -> "ObjectManager":
        """
        Load a catalog file.

        A missing or unreadable file yields an empty catalog with a warning.
        """
        path = Path(config_file)
        if not path.exists():
            logger.warning("Object config file not found", path=str(path))
            return cls()
        try:
            with open(path, encoding="utf-8") as f:
                doc = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error("Could not read object config file", path=str(path), error=str(e))
            return cls()
        return cls.from_dict(doc)

    @classmethod
    def from_dict(cls, doc: dict) -> "ObjectManager":
        manager = cls()
        if not isinstance(doc, dict):
            logger.warning("Object config must be a JSON object", got=type(doc).__name__)
            return manager
        for name, fields in doc.items():
            obj_type = obj_type_from_name(name)
            if obj_type == ObjectType.INVALID:
                logger.warning("Unrecognized object type", object=name)
                continue
            if not isinstance(fields, dict):
                logger.warning("Object entry must be a JSON object", object=name)
                continue
            manager.insert(_parse_object(obj_type, name, fields))
        return manager

    def __iter__(self) -> Iterator[MapObject]:
        return iter(self._objs)

    def __len__(self) -> int:
        return len(self._objs)

    def find(self, obj_type: ObjectType) -> Optional[MapObject]:
        for obj in self._objs:
            if obj.type == obj_type:
                return obj
        return None

    def get_action(self, obj_type: ObjectType) -> ObjectAction:
        """Action for the type, NONE if the type is not configured."""
        obj = self.find(obj_type)
        return obj.action if obj is not None else ObjectAction.NONE

    def insert(self, obj: MapObject) -> None:
        """Add or replace the entry for ``obj.type``."""
        self._objs = [o for o in self._objs if o.type != obj.type]
        self._objs.append(obj)
        self._objs.sort(key=lambda o: o.type)


def _warn_unexpected(data_type: str, obj_name: str, field_name: str) -> None:
    logger.warning(
        "Unrecognized object field", data_type=data_type, object=obj_name, field=field_name
    )


def _parse_terrain_list(obj_name: str, values: list) -> int:
    terrains = []
    for v in values:
        if isinstance(v, bool):
            terrain = None
        elif isinstance(v, int):
            terrain = Terrain(v) if 0 <= v < len(Terrain) else None
        elif isinstance(v, str):
            terrain = terrain_from_name(v)
        else:
            terrain = None
        if terrain is None:
            logger.warning("Unrecognized terrain", object=obj_name, value=v)
            continue
        terrains.append(terrain)
    return terrain_mask(terrains)


def _parse_object(obj_type: ObjectType, obj_name: str, fields: dict) -> MapObject:
    values = {
        "type": obj_type,
        "action": ObjectAction.BATTLE if obj_type == ObjectType.ARMY else ObjectAction.NONE,
    }
    int_fields = {
        "per-region": "per_region",
        "per-castle": "per_castle",
        "per-coastline": "per_coastline",
        "probability": "probability",
    }

    for field_name, value in fields.items():
        # bool is a subclass of int, so test it first
        if isinstance(value, bool):
            if field_name == "visit":
                values["action"] = ObjectAction.VISIT if value else ObjectAction.PICKUP
            elif field_name == "flag":
                values["flaggable"] = value
            else:
                _warn_unexpected("boolean", obj_name, field_name)
        elif isinstance(value, str):
            if field_name == "name":
                values["name"] = value
            elif field_name == "img":
                values["img_name"] = value
            else:
                _warn_unexpected("string", obj_name, field_name)
        elif isinstance(value, int):
            if field_name not in int_fields:
                _warn_unexpected("int", obj_name, field_name)
            elif field_name == "probability" and not 0 <= value <= 100:
                logger.warning("Probability out of range", object=obj_name, value=value)
            else:
                values[int_fields[field_name]] = value
        elif isinstance(value, list):
            if field_name != "terrain":
                _warn_unexpected("array", obj_name, field_name)
                continue
            values["terrain_mask"] = _parse_terrain_list(obj_name, value)
        else:
            _warn_unexpected("unknown type", obj_name, field_name)

    return MapObject(**values)
