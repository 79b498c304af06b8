# path_planning.py
import heapq
import logging
import time
from typing import List, Optional

from store_map import Cell, StoreMap

logger = logging.getLogger(__name__)


class PathRequestError(Exception):
    """Base class for path requests that could not be searched to completion."""


class InvalidEndpointError(PathRequestError):
    """Start or goal is off the grid or not walkable."""

    def __init__(self, which, cell, reason):
        super().__init__(f"{which} {cell} is {reason}")
        self.which = which
        self.cell = cell
        self.reason = reason


class SearchLimitExceeded(PathRequestError):
    """The search hit its expansion or time budget before finishing."""


def manhattan(a: Cell, b: Cell) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def reconstruct(parent, goal):
    path = []
    v = goal
    while v is not None:
        path.append(v)
        v = parent.get(v)
    path.reverse()
    return path


def _check_endpoint(which, cell, store_map: StoreMap):
    if not store_map.is_in_bounds(cell):
        raise InvalidEndpointError(which, cell, 'out of bounds')
    if not store_map.is_passable(cell):
        raise InvalidEndpointError(which, cell, 'not walkable')


def find_path(
    start: Cell,
    goal: Cell,
    store_map: StoreMap,
    *,
    max_expansions: Optional[int] = None,
    max_time_sec: Optional[float] = None,
) -> Optional[List[Cell]]:
    """Shortest 4-connected walkable path from ``start`` to ``goal``, both inclusive.

    A* with the Manhattan heuristic; every step costs 1 and only orthogonal
    moves exist, so no corner can be cut. Returns None when the goal can't be
    reached. Raises InvalidEndpointError, without searching, when either end
    is off the grid or blocked, and SearchLimitExceeded when a budget runs out.

    Ties are broken deterministically: among open cells with equal f the one
    with the smaller heuristic wins, then the one pushed first. Neighbours are
    pushed in the order up, right, down, left.
    """
    start, goal = tuple(start), tuple(goal)
    _check_endpoint('start', start, store_map)
    _check_endpoint('goal', goal, store_map)

    if start == goal:
        return [start]

    t0 = time.monotonic()
    counter = 0
    h0 = manhattan(start, goal)
    openh = [(h0, h0, counter, start)]
    g = {start: 0}
    parent = {start: None}
    closed = set()
    expansions = 0

    while openh:
        if max_time_sec is not None and (time.monotonic() - t0) > max_time_sec:
            raise SearchLimitExceeded(f"search exceeded {max_time_sec}s after {expansions} expansions")

        _, _, _, u = heapq.heappop(openh)
        if u in closed:
            continue
        if u == goal:
            path = reconstruct(parent, u)
            logger.debug("Path %s -> %s: %d cells, %d expansions", start, goal, len(path), expansions)
            return path

        closed.add(u)
        expansions += 1
        if max_expansions is not None and expansions > max_expansions:
            raise SearchLimitExceeded(f"search exceeded {max_expansions} expansions")

        alt = g[u] + 1
        for v in store_map.neighbors4(u):
            if v in closed or not store_map.is_passable(v):
                continue
            old = g.get(v)
            if old is None or alt < old:
                g[v] = alt
                parent[v] = u
                hv = manhattan(v, goal)
                counter += 1
                heapq.heappush(openh, (alt + hv, hv, counter, v))

    logger.debug("No path %s -> %s after %d expansions", start, goal, expansions)
    return None


def is_valid_path(path, store_map: StoreMap) -> bool:
    """Every cell walkable and every step a single orthogonal move."""
    if not path:
        return False
    if not all(store_map.is_passable(c) for c in path):
        return False
    return all(manhattan(a, b) == 1 for a, b in zip(path, path[1:]))
