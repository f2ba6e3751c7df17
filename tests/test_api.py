"""Tests for the HTTP API."""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from py_hexmap.api.main import StoredMap, _maps, app, evict_old_maps
from py_hexmap.config import settings
from py_hexmap.core.hex_map import HexMap
from py_hexmap.core.snapshot import map_from_document


@pytest.fixture(scope="module")
def client():
    """Test client with startup and shutdown events."""
    with TestClient(app) as client:
        yield client


@pytest.fixture(scope="module")
def map_id(client):
    """Generate one map for the read-only endpoint tests."""
    attempts = settings.generation_attempts
    settings.generation_attempts = 10
    try:
        response = client.post("/maps/generate", json={"width": 36, "seed": "api-map"})
    finally:
        settings.generation_attempts = attempts
    assert response.status_code == 200
    return response.json()["id"]


class TestServiceEndpoints:
    """Test root and health endpoints."""

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["catalog_entries"] > 0


class TestMapEndpoints:
    """Test generation and inspection of maps."""

    def test_get_map(self, client, map_id):
        response = client.get(f"/maps/{map_id}")
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == map_id
        assert data["width"] == 36
        assert data["counts"]["castles"] == 4
        assert data["seed"].startswith("api-map")

    def test_list_maps(self, client, map_id):
        response = client.get("/maps")
        assert response.status_code == 200
        assert map_id in [m["id"] for m in response.json()]

    def test_snapshot(self, client, map_id):
        response = client.get(f"/maps/{map_id}/snapshot")
        assert response.status_code == 200
        hex_map = map_from_document(response.json())
        assert hex_map.width == 36
        assert len(hex_map.castles) == 4

    def test_region(self, client, map_id):
        response = client.get(f"/maps/{map_id}/regions/0")
        assert response.status_code == 200
        data = response.json()
        assert data["region"] == 0
        assert data["tile_count"] > 0
        assert data["castle_distance"] >= 0
        assert data["neighbors"]

    def test_tile(self, client, map_id):
        response = client.get(f"/maps/{map_id}/tiles/37")
        assert response.status_code == 200
        data = response.json()
        assert (data["x"], data["y"]) == (1, 1)
        assert len(data["neighbors"]) == 6

    def test_castle_tile_lists_castle(self, client, map_id):
        snapshot = client.get(f"/maps/{map_id}/snapshot").json()
        castle = snapshot["castles"][0]
        data = client.get(f"/maps/{map_id}/tiles/{castle}").json()
        assert data["occupied"]
        assert data["walkable"]

    def test_unknown_map(self, client):
        assert client.get("/maps/missing").status_code == 404
        assert client.get("/maps/missing/tiles/0").status_code == 404

    def test_off_grid_tile(self, client, map_id):
        assert client.get(f"/maps/{map_id}/tiles/{36 * 36}").status_code == 400
        assert client.get(f"/maps/{map_id}/tiles/-1").status_code == 400

    def test_bad_region(self, client, map_id):
        assert client.get(f"/maps/{map_id}/regions/9999").status_code == 400


class TestMapStore:
    """Test deleting and evicting stored maps."""

    def store(self, map_id, minutes):
        _maps[map_id] = StoredMap(
            id=map_id,
            hex_map=HexMap.empty(),
            created_at=datetime(2024, 1, 1, 12, minutes),
            generation_time_seconds=0.0,
        )

    def test_delete_map(self, client):
        self.store("to-delete", 0)
        response = client.delete("/maps/to-delete")
        assert response.status_code == 200
        assert response.json()["deleted"]
        assert client.get("/maps/to-delete").status_code == 404

    def test_delete_unknown_map(self, client):
        assert client.delete("/maps/missing").status_code == 404

    def test_oldest_maps_evicted(self, monkeypatch):
        monkeypatch.setattr(settings, "max_stored_maps", len(_maps) + 2)
        for minute in (3, 1, 2, 0):
            self.store(f"evict-{minute}", minute)
        evict_old_maps()
        assert "evict-0" not in _maps
        assert "evict-1" not in _maps
        assert "evict-2" in _maps
        assert "evict-3" in _maps
        del _maps["evict-2"], _maps["evict-3"]


class TestGenerationErrors:
    """Test rejected generation requests."""

    def test_map_too_small(self, client):
        response = client.post("/maps/generate", json={"width": 8, "seed": "tiny"})
        assert response.status_code == 422
        assert "Map generation failed" in response.json()["detail"]

    def test_width_out_of_range(self, client):
        response = client.post("/maps/generate", json={"width": settings.max_map_width + 1})
        assert response.status_code == 422

    def test_zero_width(self, client):
        assert client.post("/maps/generate", json={"width": 0}).status_code == 422
