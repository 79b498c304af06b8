# path_service.py
"""Transport-agnostic handling of ``{start, end}`` path requests.

Requests are validated in a fixed order (integer coordinates, bounds,
walkability) before any search runs; each failure maps to its own
``PathStatus`` so callers can tell a bad request from an unreachable goal.
"""
import enum
import logging
from dataclasses import dataclass, field
from typing import List, Optional

import config
from path_planning import SearchLimitExceeded, find_path
from store_map import Cell, StoreMap

logger = logging.getLogger(__name__)


class PathStatus(enum.Enum):
    OK = ('ok', 200, None)
    INVALID_COORDINATES = ('invalid_coordinates', 400, 'Invalid coordinates')
    OUT_OF_BOUNDS = ('out_of_bounds', 400, 'Coordinates out of bounds')
    NOT_WALKABLE = ('not_walkable', 400, 'Start or end position is not walkable')
    NO_PATH_FOUND = ('no_path_found', 404, 'No path found')
    SEARCH_LIMIT = ('search_limit', 503, 'Path search took too long')

    def __init__(self, code, http_status, message):
        self.code = code
        self.http_status = http_status
        self.message = message


@dataclass(frozen=True)
class PathResult:
    status: PathStatus
    path: List[Cell] = field(default_factory=list)

    @property
    def ok(self):
        return self.status is PathStatus.OK

    def to_dict(self):
        if self.ok:
            return {'path': [[x, y] for x, y in self.path]}
        return {'error': self.status.message, 'code': self.status.code}


def _as_coordinate(value) -> Optional[int]:
    # JSON numbers like 3.0 still name a cell; booleans never do
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def parse_point(point) -> Optional[Cell]:
    if not isinstance(point, dict):
        return None
    x = _as_coordinate(point.get('x'))
    y = _as_coordinate(point.get('y'))
    if x is None or y is None:
        return None
    return x, y


def handle_path_request(payload, store_map: StoreMap, max_time_sec=config.MAX_SEARCH_TIME_S) -> PathResult:
    payload = payload if isinstance(payload, dict) else {}
    logger.info("Received pathfinding request start=%s end=%s", payload.get('start'), payload.get('end'))

    start = parse_point(payload.get('start'))
    end = parse_point(payload.get('end'))
    if start is None or end is None:
        logger.warning("Invalid input coordinates start=%r end=%r", payload.get('start'), payload.get('end'))
        return PathResult(PathStatus.INVALID_COORDINATES)

    if not (store_map.is_in_bounds(start) and store_map.is_in_bounds(end)):
        logger.warning("Coordinates out of bounds start=%s end=%s", start, end)
        return PathResult(PathStatus.OUT_OF_BOUNDS)

    if not (store_map.is_passable(start) and store_map.is_passable(end)):
        logger.warning("Start or end position is not walkable start=%s end=%s", start, end)
        return PathResult(PathStatus.NOT_WALKABLE)

    try:
        path = find_path(start, end, store_map, max_time_sec=max_time_sec)
    except SearchLimitExceeded as e:
        logger.warning("Path search aborted %s -> %s: %s", start, end, e)
        return PathResult(PathStatus.SEARCH_LIMIT)

    if path is None:
        logger.warning("No path found start=%s end=%s", start, end)
        return PathResult(PathStatus.NO_PATH_FOUND)

    logger.info("Path found %s -> %s (%d cells)", start, end, len(path))
    return PathResult(PathStatus.OK, path)


def path_to_product(start: Cell, product_name, store_map: StoreMap) -> PathResult:
    """Path request from ``start`` to the named product's cell."""
    product = store_map.find_product(product_name)
    if product is None:
        raise KeyError(f"unknown product {product_name!r}")
    return handle_path_request(
        {'start': {'x': start[0], 'y': start[1]}, 'end': {'x': product.cell[0], 'y': product.cell[1]}},
        store_map,
    )
