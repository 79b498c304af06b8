# localization.py
import logging
import math
from dataclasses import dataclass
from typing import Iterable, Optional

import config
from store_map import Cell, StoreMap

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WifiSample:
    bssid: str
    rssi: float  # dBm


def samples_from_scan(scan_results) -> list:
    """Convert raw scan entries into WifiSamples.

    Accepts ``{'identifier', 'signal_strength'}`` entries as well as the
    ``{'BSSID', 'RSSI'}`` and ``{'bssid', 'level'}`` shapes scanners report.
    Entries without an identifier or a numeric strength are dropped.
    """
    samples = []
    for entry in scan_results:
        bssid = entry.get('identifier', entry.get('BSSID', entry.get('bssid')))
        rssi = entry.get('signal_strength', entry.get('RSSI', entry.get('level')))
        if bssid is None or isinstance(rssi, bool) or not isinstance(rssi, (int, float)):
            logger.debug("Dropping malformed scan entry %r", entry)
            continue
        samples.append(WifiSample(str(bssid), float(rssi)))
    return samples


def rssi_to_distance(rssi_dbm, reference_power=config.REFERENCE_POWER_DBM, scale=config.PATH_LOSS_SCALE):
    """Distance (in cells) implied by a signal strength under the log-distance model."""
    return 10 ** ((reference_power - rssi_dbm) / scale)


def round_half_away_from_zero(value: float) -> int:
    """Round to the nearest integer; .5 goes away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def weighted_centroid(weighted_points):
    """Weighted mean of ``((x, y), weight)`` pairs, or None if there are none."""
    weighted_sum_x, weighted_sum_y, sum_weights = 0.0, 0.0, 0.0
    for (x, y), weight in weighted_points:
        weighted_sum_x += x * weight
        weighted_sum_y += y * weight
        sum_weights += weight
    if sum_weights <= 0:
        return None
    return weighted_sum_x / sum_weights, weighted_sum_y / sum_weights


def estimate_position(samples: Iterable[WifiSample], access_points, store_map: StoreMap) -> Optional[Cell]:
    """Estimate the shopper's cell from one scan by inverse-square weighted multilateration.

    Each sample from a known access point pulls the estimate towards that
    access point with weight 1/d^2, d being the distance implied by its RSSI.
    Returns None when no sample matches a known access point or when the
    rounded centroid is off the grid or on a shelf. Invalid estimates are
    discarded, never snapped to a nearby cell.
    """
    known = {ap.bssid.lower(): ap.cell for ap in access_points}

    weighted_points = []
    for sample in samples:
        ap_cell = known.get(sample.bssid.lower())
        if ap_cell is None:
            logger.debug("Unknown AP %s (RSSI %s)", sample.bssid, sample.rssi)
            continue
        if not math.isfinite(sample.rssi):
            logger.debug("Ignoring non-finite RSSI from %s", sample.bssid)
            continue
        try:
            distance = rssi_to_distance(sample.rssi)
            weight = 1.0 / (distance * distance)
        except (OverflowError, ZeroDivisionError):
            weight = 0.0
        if weight == 0.0 or not math.isfinite(weight):
            logger.debug("Ignoring degenerate weight from %s (RSSI %s)", sample.bssid, sample.rssi)
            continue
        logger.debug("AP %s RSSI %.1f distance %.2f weight %.4g", sample.bssid, sample.rssi, distance, weight)
        weighted_points.append((ap_cell, weight))

    centroid = weighted_centroid(weighted_points)
    if centroid is None:
        logger.debug("No matching access points in scan")
        return None
    if not (math.isfinite(centroid[0]) and math.isfinite(centroid[1])):
        logger.debug("Centroid %s is not finite", centroid)
        return None

    cell = (round_half_away_from_zero(centroid[0]), round_half_away_from_zero(centroid[1]))
    if not store_map.is_in_bounds(cell):
        logger.debug("Estimate %s (raw %.2f, %.2f) is out of bounds", cell, *centroid)
        return None
    if not store_map.is_passable(cell):
        logger.debug("Estimate %s (raw %.2f, %.2f) is not walkable", cell, *centroid)
        return None
    return cell
