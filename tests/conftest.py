"""Shared fixtures for map generation tests."""

from pathlib import Path

import pytest

from py_hexmap.core.objects import ObjectManager
from py_hexmap.core.random_map import generate_random_map

CATALOG_FILE = Path(__file__).resolve().parent.parent / "data" / "objects.json"


@pytest.fixture(scope="session")
def catalog():
    """Default object catalog shipped with the project."""
    return ObjectManager.from_file(CATALOG_FILE)


@pytest.fixture(scope="session")
def generated_map(catalog):
    """A full 36x36 map. Retries a few seeds so one unlucky layout cannot fail the suite."""
    return generate_random_map(36, seed="pytest-map", catalog=catalog, max_attempts=10)
