# store_map.py
import json
import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import numpy as np

import config

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]  # (x, y)

# up, right, down, left
NEIGHBOR_OFFSETS = ((0, -1), (1, 0), (0, 1), (-1, 0))


class ConfigurationError(ValueError):
    """Static store configuration is malformed."""


@dataclass(frozen=True)
class AccessPoint:
    bssid: str
    cell: Cell


@dataclass(frozen=True)
class Geofence:
    label: str
    min_x: int
    max_x: int
    min_y: int
    max_y: int

    def contains(self, cell: Cell) -> bool:
        x, y = cell
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y


@dataclass(frozen=True)
class Product:
    name: str
    zone: str
    cell: Cell


class StoreMap:
    """Read-only occupancy grid of the store plus its zones, access points and products.

    The grid is indexed ``grid[y, x]``; every cell is either
    ``config.CELL_TYPE_PATH`` or ``config.CELL_TYPE_SHELF``.
    """

    def __init__(self, grid, geofences=(), access_points=(), products=()):
        grid = np.array(grid, dtype=np.int8)
        grid.setflags(write=False)
        self._grid = grid
        self.size = grid.shape[0]
        self.geofences = tuple(geofences)
        self.access_points = tuple(access_points)
        self.products = tuple(products)
        self._products_by_name = {p.name.lower(): p for p in self.products}

    @property
    def grid(self) -> np.ndarray:
        return self._grid

    def is_in_bounds(self, cell: Cell) -> bool:
        x, y = cell
        return 0 <= x < self.size and 0 <= y < self.size

    def is_passable(self, cell: Cell) -> bool:
        if not self.is_in_bounds(cell):
            return False
        x, y = cell
        return bool(self._grid[y, x] == config.CELL_TYPE_PATH)

    def geofence_containing(self, cell: Cell) -> Optional[Geofence]:
        """First geofence, in declaration order, whose rectangle holds ``cell``."""
        for fence in self.geofences:
            if fence.contains(cell):
                return fence
        return None

    def neighbors4(self, cell: Cell) -> Iterator[Cell]:
        x, y = cell
        for dx, dy in NEIGHBOR_OFFSETS:
            neighbor = (x + dx, y + dy)
            if self.is_in_bounds(neighbor):
                yield neighbor

    def find_product(self, name: str) -> Optional[Product]:
        return self._products_by_name.get(name.strip().lower())

    def __repr__(self):
        return (f"StoreMap(size={self.size}, geofences={len(self.geofences)}, "
                f"access_points={len(self.access_points)}, products={len(self.products)})")


def create_base_map(size=config.GRID_SIZE):
    """Square grid with every cell walkable."""
    return np.full((size, size), config.CELL_TYPE_PATH, dtype=np.int8)


def add_outer_wall(grid_map, entrance=config.ENTRANCE_CELL):
    """Block the outer ring of cells, leaving a single entrance gap."""
    grid_map[0, :] = config.CELL_TYPE_SHELF
    grid_map[-1, :] = config.CELL_TYPE_SHELF
    grid_map[:, 0] = config.CELL_TYPE_SHELF
    grid_map[:, -1] = config.CELL_TYPE_SHELF
    if entrance is not None:
        x, y = entrance
        grid_map[y, x] = config.CELL_TYPE_PATH
    return grid_map


def add_aisles(grid_map, columns=config.AISLE_COLUMNS, rows=config.AISLE_ROWS,
               central_row=config.CENTRAL_AISLE_ROW, central_columns=config.CENTRAL_AISLE_COLUMNS):
    """Open the vertical aisle columns and the horizontal central corridor."""
    first_row, last_row = rows
    for x in columns:
        grid_map[first_row:last_row + 1, x] = config.CELL_TYPE_PATH
    first_col, last_col = central_columns
    grid_map[central_row, first_col:last_col + 1] = config.CELL_TYPE_PATH
    return grid_map


def add_shelf(grid_map, x_start, y_start, width, height):
    """Add a rectangular shelf block to the map."""
    max_y, max_x = grid_map.shape
    end_x = min(x_start + width, max_x)
    end_y = min(y_start + height, max_y)
    grid_map[y_start:end_y, x_start:end_x] = config.CELL_TYPE_SHELF
    return grid_map


def build_store_grid(size=config.GRID_SIZE, entrance=config.ENTRANCE_CELL, shelves=config.SHELVES):
    grid_map = create_base_map(size)
    add_outer_wall(grid_map, entrance)
    add_aisles(grid_map)
    for x, y, width, height in shelves:
        add_shelf(grid_map, x, y, width, height)
    return grid_map


def default_store_config():
    """Default store description in the JSON configuration schema."""
    return {
        'grid': build_store_grid().tolist(),
        'geofences': [dict(g) for g in config.GEOFENCES],
        'access_points': [dict(ap) for ap in config.ACCESS_POINTS],
        'products': [dict(p) for p in config.PRODUCTS],
    }


def build_store_map():
    return store_map_from_dict(default_store_config())


def _require(entry, keys, kind):
    if not isinstance(entry, dict):
        raise ConfigurationError(f"{kind} entry must be an object, got {entry!r}")
    missing = [k for k in keys if k not in entry]
    if missing:
        raise ConfigurationError(f"{kind} entry {entry!r} is missing {', '.join(missing)}")


def _as_int(value, what):
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{what} must be an integer, got {value!r}")
    return value


def _parse_grid(raw_grid):
    if not isinstance(raw_grid, list) or not raw_grid:
        raise ConfigurationError("grid must be a non-empty list of rows")
    size = len(raw_grid)
    for row in raw_grid:
        if not isinstance(row, list) or len(row) != size:
            raise ConfigurationError(f"grid must be square ({size}x{size})")
        for value in row:
            if (isinstance(value, bool) or not isinstance(value, int)
                    or value not in (config.CELL_TYPE_PATH, config.CELL_TYPE_SHELF)):
                raise ConfigurationError(f"grid cells must be 0 or 1, got {value!r}")
    return np.array(raw_grid, dtype=np.int8)


def store_map_from_dict(data) -> StoreMap:
    """Validate a store configuration and build the StoreMap it describes.

    Raises ConfigurationError for anything malformed; a bad configuration is
    never partially accepted.
    """
    if not isinstance(data, dict):
        raise ConfigurationError("store configuration must be an object")
    _require(data, ('grid',), 'store configuration')
    grid = _parse_grid(data['grid'])
    size = grid.shape[0]

    def cell_of(entry, kind):
        cell = (_as_int(entry['x'], f"{kind} x"), _as_int(entry['y'], f"{kind} y"))
        if not (0 <= cell[0] < size and 0 <= cell[1] < size):
            raise ConfigurationError(f"{kind} {entry!r} lies outside the {size}x{size} grid")
        return cell

    geofences = []
    for entry in data.get('geofences', []):
        _require(entry, ('label', 'minX', 'maxX', 'minY', 'maxY'), 'geofence')
        bounds = [_as_int(entry[k], f"geofence {k}") for k in ('minX', 'maxX', 'minY', 'maxY')]
        min_x, max_x, min_y, max_y = bounds
        if min_x > max_x or min_y > max_y:
            raise ConfigurationError(f"geofence {entry['label']!r} has inverted bounds")
        if min(bounds) < 0 or max(bounds) >= size:
            raise ConfigurationError(f"geofence {entry['label']!r} extends outside the grid")
        label = str(entry['label'])
        if any(g.label == label for g in geofences):
            raise ConfigurationError(f"duplicate geofence label {label!r}")
        geofences.append(Geofence(label, min_x, max_x, min_y, max_y))

    access_points = []
    for entry in data.get('access_points', []):
        _require(entry, ('identifier', 'x', 'y'), 'access point')
        bssid = str(entry['identifier']).lower()
        if any(ap.bssid == bssid for ap in access_points):
            raise ConfigurationError(f"duplicate access point {bssid!r}")
        access_points.append(AccessPoint(bssid, cell_of(entry, 'access point')))

    products = []
    for entry in data.get('products', []):
        _require(entry, ('name', 'zone', 'x', 'y'), 'product')
        if any(p.name.lower() == str(entry['name']).lower() for p in products):
            raise ConfigurationError(f"duplicate product {entry['name']!r}")
        products.append(Product(str(entry['name']), str(entry['zone']), cell_of(entry, 'product')))

    store_map = StoreMap(grid, geofences, access_points, products)
    logger.debug("Loaded %r", store_map)
    return store_map


def load_store_map(path) -> StoreMap:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"cannot read store configuration {path}: {e}") from e
    return store_map_from_dict(data)


def store_map_to_dict(store_map: StoreMap):
    return {
        'grid': store_map.grid.tolist(),
        'geofences': [
            {'label': g.label, 'minX': g.min_x, 'maxX': g.max_x, 'minY': g.min_y, 'maxY': g.max_y}
            for g in store_map.geofences
        ],
        'access_points': [
            {'identifier': ap.bssid, 'x': ap.cell[0], 'y': ap.cell[1]} for ap in store_map.access_points
        ],
        'products': [
            {'name': p.name, 'zone': p.zone, 'x': p.cell[0], 'y': p.cell[1]} for p in store_map.products
        ],
    }
