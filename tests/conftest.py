"""Shared fixtures for the navigation tests."""

import numpy as np
import pytest

import config
from store_map import build_store_map, store_map_from_dict
from tests.helpers import make_store


@pytest.fixture
def store_map():
    return build_store_map()


@pytest.fixture
def open_store(store_map):
    """The default store's zones and access points on a 10x10 grid with no walls or shelves."""
    grid = np.full((config.GRID_SIZE, config.GRID_SIZE), config.CELL_TYPE_PATH)
    return make_store(grid, store_map.geofences, store_map.access_points, store_map.products)


@pytest.fixture
def enclosed_store():
    """5x5 open floor with a ring of shelves sealing off the centre cell (2, 2)."""
    grid = np.zeros((5, 5), dtype=int)
    for x, y in [(1, 1), (2, 1), (3, 1), (1, 2), (3, 2), (1, 3), (2, 3), (3, 3)]:
        grid[y, x] = config.CELL_TYPE_SHELF
    return store_map_from_dict({'grid': grid.tolist()})
