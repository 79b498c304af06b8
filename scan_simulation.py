# scan_simulation.py
import logging
import math

import numpy as np

import config
from localization import WifiSample

logger = logging.getLogger(__name__)


def euclidean_distance_cells(p1, p2):
    """Euclidean distance between two cells, in cells."""
    return math.sqrt((p1[0] - p2[0]) ** 2 + (p1[1] - p2[1]) ** 2)


def get_line_cells(x1, y1, x2, y2):
    """Cells on the straight line between two cells (Bresenham)."""
    points = []
    dx = abs(x2 - x1)
    dy = abs(y2 - y1)
    sx = 1 if x1 < x2 else -1
    sy = 1 if y1 < y2 else -1
    err = dx - dy
    while True:
        points.append((x1, y1))
        if x1 == x2 and y1 == y2:
            break
        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x1 += sx
        if e2 < dx:
            err += dx
            y1 += sy
    return points


def count_shelf_intersections(ap_cell, cell, store_map):
    """Number of blocked cells strictly between an access point and a cell."""
    line_cells = get_line_cells(ap_cell[0], ap_cell[1], cell[0], cell[1])
    return sum(1 for c in line_cells[1:-1] if store_map.is_in_bounds(c) and not store_map.is_passable(c))


def calculate_single_rssi(ap_cell, cell, store_map, rng, noise_std_db=config.NOISE_STD_DEV_DB):
    """Simulated RSSI at ``cell`` from one access point.

    Inverse of the localization path loss model, plus shelf attenuation and
    Gaussian shadowing.
    """
    distance = max(euclidean_distance_cells(ap_cell, cell), 1.0)
    path_loss_db = config.PATH_LOSS_SCALE * math.log10(distance)
    shelf_loss_db = count_shelf_intersections(ap_cell, cell, store_map) * config.SHELF_ATTENUATION_DB
    noise_db = rng.normal(0, noise_std_db) if noise_std_db > 0 else 0.0
    rssi = config.REFERENCE_POWER_DBM - path_loss_db - shelf_loss_db + noise_db
    return max(rssi, config.MIN_RSSI_THRESHOLD)


def simulate_scan(cell, store_map, rng=None, noise_std_db=config.NOISE_STD_DEV_DB, extra_networks=()):
    """One scan as seen from ``cell``: a sample per known AP plus any extra (unknown) networks."""
    rng = rng if rng is not None else np.random.default_rng()
    samples = [
        WifiSample(ap.bssid, float(calculate_single_rssi(ap.cell, cell, store_map, rng, noise_std_db)))
        for ap in store_map.access_points
    ]
    samples.extend(WifiSample(bssid, float(rssi)) for bssid, rssi in extra_networks)
    return samples


class SimulatedScanner:
    """Scanner stand-in that walks a shopper along a route, one cell per scan.

    After the last cell the shopper stays put.
    """

    def __init__(self, store_map, route, seed=None, noise_std_db=config.NOISE_STD_DEV_DB):
        if not route:
            raise ValueError("route must contain at least one cell")
        self.store_map = store_map
        self.route = list(route)
        self.noise_std_db = noise_std_db
        self.rng = np.random.default_rng(seed)
        self.step = 0

    @property
    def true_position(self):
        return self.route[min(self.step, len(self.route) - 1)]

    @property
    def finished(self):
        return self.step >= len(self.route) - 1

    def __call__(self):
        cell = self.true_position
        samples = simulate_scan(cell, self.store_map, self.rng, self.noise_std_db)
        logger.debug("Simulated scan at %s: %s", cell, [(s.bssid, round(s.rssi, 1)) for s in samples])
        if self.step < len(self.route) - 1:
            self.step += 1
        return samples
