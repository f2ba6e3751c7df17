"""FastAPI main application."""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

import structlog
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .. import __version__
from ..config import settings
from ..core.errors import MapGenerationError, OffGridError
from ..core.hex_map import HexMap
from ..core.objects import ObjectManager
from ..core.random_map import generate_random_map, summarize_map
from ..core.snapshot import map_to_document
from ..core.terrain import TERRAIN_NAMES
from ..utils.logging import configure_logging

configure_logging(settings.log_level, settings.log_format)

logger = structlog.get_logger()

# Initialize FastAPI app
app = FastAPI(
    title="Hex Map Generator API",
    description="Procedural hex-grid strategy map generation",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@dataclass
class StoredMap:
    """A generated map kept by the in-process store."""

    id: str
    hex_map: HexMap
    created_at: datetime
    generation_time_seconds: float


_maps: Dict[str, StoredMap] = {}
_catalog: Optional[ObjectManager] = None


def get_catalog() -> ObjectManager:
    """Object catalog, loaded from settings on first use."""
    global _catalog
    if _catalog is None:
        _catalog = ObjectManager.from_file(settings.object_config_file)
    return _catalog


def evict_old_maps() -> None:
    """Drop the oldest maps once the store exceeds its limit."""
    excess = len(_maps) - settings.max_stored_maps
    if excess <= 0:
        return
    oldest = sorted(_maps.values(), key=lambda m: m.created_at)[:excess]
    for stored in oldest:
        del _maps[stored.id]
    logger.info("Evicted old maps", evicted=len(oldest), kept=len(_maps))


def get_stored_map(map_id: str) -> StoredMap:
    stored = _maps.get(map_id)
    if stored is None:
        raise HTTPException(status_code=404, detail="Map not found")
    return stored


# Request/Response models
class MapGenerationRequest(BaseModel):
    """Request to generate a new map."""

    width: int = Field(
        default=settings.default_map_width,
        ge=1,
        le=settings.max_map_width,
        description="Map width in tiles (maps are square)",
    )
    seed: Optional[str] = Field(None, description="Random seed for reproducible generation")


class MapSummary(BaseModel):
    """Summary information about a generated map."""

    id: str
    width: int
    seed: str
    counts: Dict[str, int]
    terrain_regions: Dict[str, int]
    objects: Dict[str, int]
    created_at: datetime
    generation_time_seconds: float


class RegionInfo(BaseModel):
    """Details of one region."""

    region: int
    terrain: str
    tile_count: int
    landmass: Optional[int]
    castle_distance: int
    neighbors: List[int]
    has_castle: bool


class TileInfo(BaseModel):
    """Details of one tile."""

    tile: int
    x: int
    y: int
    region: int
    terrain: str
    obstacle: bool
    walkable: bool
    occupied: bool
    objects: List[str]
    neighbors: List[int]


def to_summary(stored: StoredMap) -> MapSummary:
    return MapSummary(
        id=stored.id,
        created_at=stored.created_at,
        generation_time_seconds=stored.generation_time_seconds,
        **summarize_map(stored.hex_map),
    )


@app.on_event("startup")
async def startup_event():
    """Load the object catalog on startup."""
    logger.info("Starting Hex Map Generator API")
    catalog = get_catalog()
    logger.info("API startup complete", catalog_entries=len(catalog))


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    logger.info("Shutting down Hex Map Generator API", maps=len(_maps))


# API endpoints
@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Hex Map Generator API",
        "version": __version__,
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "maps": len(_maps), "catalog_entries": len(get_catalog())}


@app.post("/maps/generate", response_model=MapSummary)
def generate_map(request: MapGenerationRequest):
    """
    Generate a map synchronously and keep it in the store.

    Generation failures (for example a map too small to fit the castles)
    are reported as 422.
    """
    logger.info("Map generation requested", request=request.model_dump())

    start_time = datetime.now()
    try:
        hex_map = generate_random_map(
            request.width,
            seed=request.seed,
            catalog=get_catalog(),
            max_attempts=settings.generation_attempts,
        )
    except MapGenerationError as e:
        logger.error("Map generation failed", width=request.width, seed=request.seed, error=e.reason)
        raise HTTPException(status_code=422, detail=f"Map generation failed: {e.reason}")

    map_id = str(uuid.uuid4())
    stored = StoredMap(
        id=map_id,
        hex_map=hex_map,
        created_at=start_time,
        generation_time_seconds=(datetime.now() - start_time).total_seconds(),
    )
    _maps[map_id] = stored
    logger.info("Map stored", map_id=map_id, seed=hex_map.seed)
    evict_old_maps()
    return to_summary(stored)


@app.get("/maps", response_model=List[MapSummary])
async def list_maps():
    """List all generated maps, newest first."""
    stored = sorted(_maps.values(), key=lambda m: m.created_at, reverse=True)
    return [to_summary(m) for m in stored]


@app.get("/maps/{map_id}", response_model=MapSummary)
async def get_map(map_id: str):
    """Get map details."""
    return to_summary(get_stored_map(map_id))


@app.delete("/maps/{map_id}")
async def delete_map(map_id: str):
    """Remove a map from the store."""
    get_stored_map(map_id)
    del _maps[map_id]
    logger.info("Map deleted", map_id=map_id)
    return {"id": map_id, "deleted": True}


@app.get("/maps/{map_id}/snapshot")
async def get_map_snapshot(map_id: str):
    """Full snapshot document, loadable with read_snapshot()."""
    return map_to_document(get_stored_map(map_id).hex_map)


@app.get("/maps/{map_id}/regions/{region}", response_model=RegionInfo)
async def get_region(map_id: str, region: int):
    """Terrain, adjacency and castle distance of a region."""
    hex_map = get_stored_map(map_id).hex_map
    try:
        terrain = hex_map.get_region_terrain(region)
        neighbors = hex_map.get_region_neighbors(region)
        castle_distance = hex_map.get_castle_distance(region)
    except OffGridError:
        raise HTTPException(status_code=400, detail="Invalid region")

    landmass = None
    if hex_map.region_landmass is not None:
        landmass = int(hex_map.region_landmass[region])

    return RegionInfo(
        region=region,
        terrain=TERRAIN_NAMES[terrain],
        tile_count=len(hex_map.region_tiles[region]),
        landmass=landmass,
        castle_distance=castle_distance,
        neighbors=neighbors,
        has_castle=region in hex_map.castle_regions,
    )


@app.get("/maps/{map_id}/tiles/{tile}", response_model=TileInfo)
async def get_tile(map_id: str, tile: int):
    """State of a single tile."""
    hex_map = get_stored_map(map_id).hex_map
    if hex_map.off_grid(tile):
        raise HTTPException(status_code=400, detail="Invalid tile index")

    hex_ = hex_map.hex_from_int(tile)
    objects = [name for name, tiles in hex_map.objects.to_dict().items() if tile in tiles]
    return TileInfo(
        tile=tile,
        x=hex_.x,
        y=hex_.y,
        region=hex_map.get_region(tile),
        terrain=TERRAIN_NAMES[hex_map.get_terrain(tile)],
        obstacle=hex_map.get_obstacle(tile),
        walkable=hex_map.get_walkable(tile),
        occupied=hex_map.get_occupied(tile),
        objects=objects,
        neighbors=hex_map.get_tile_neighbors(tile),
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
