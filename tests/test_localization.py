"""Tests for weighted multilateration."""

import numpy as np
import pytest

from localization import (
    WifiSample,
    estimate_position,
    round_half_away_from_zero,
    rssi_to_distance,
    samples_from_scan,
)
from store_map import AccessPoint

AP1, AP2, AP3 = '22:08:aa:e2:be:e2', '92:1c:65:cb:92:be', 'e2:c2:64:65:bc:51'


def test_rssi_to_distance():
    assert rssi_to_distance(-50) == pytest.approx(1.0)
    assert rssi_to_distance(-70) == pytest.approx(10.0)
    assert rssi_to_distance(-30) == pytest.approx(0.1)
    assert rssi_to_distance(-200) > 0


def test_round_half_away_from_zero():
    assert round_half_away_from_zero(2.5) == 3
    assert round_half_away_from_zero(3.5) == 4
    assert round_half_away_from_zero(-2.5) == -3
    assert round_half_away_from_zero(2.49) == 2
    assert round_half_away_from_zero(0.0) == 0


def test_only_unknown_access_points(store_map):
    samples = [WifiSample('00:11:22:33:44:55', -40), WifiSample('aa:bb:cc:dd:ee:ff', -60)]
    assert estimate_position(samples, store_map.access_points, store_map) is None


def test_no_samples(store_map):
    assert estimate_position([], store_map.access_points, store_map) is None


def test_single_access_point(store_map):
    assert estimate_position([WifiSample(AP1, -45)], store_map.access_points, store_map) == (1, 1)


def test_identifier_match_ignores_case(store_map):
    assert estimate_position([WifiSample(AP2.upper(), -45)], store_map.access_points, store_map) == (8, 1)


def test_unknown_samples_do_not_shift_estimate(store_map):
    samples = [WifiSample(AP1, -45), WifiSample('00:11:22:33:44:55', -20)]
    assert estimate_position(samples, store_map.access_points, store_map) == (1, 1)


def test_stronger_signal_dominates(store_map):
    samples = [WifiSample(AP1, -80), WifiSample(AP2, -40), WifiSample(AP3, -80)]
    assert estimate_position(samples, store_map.access_points, store_map) == (8, 1)


def test_equal_strength_lands_inside_triangle(open_store):
    """Equal strengths give the plain centroid (13/3, 10/3) -> (4, 3)."""
    samples = [WifiSample(AP1, -30), WifiSample(AP2, -30), WifiSample(AP3, -30)]
    cell = estimate_position(samples, open_store.access_points, open_store)
    assert cell == (4, 3)
    assert open_store.is_passable(cell)


def test_equal_strength_on_shelf_is_discarded(store_map):
    """(4, 3) is a shelf in the default store; the estimate is dropped, not snapped."""
    samples = [WifiSample(AP1, -30), WifiSample(AP2, -30), WifiSample(AP3, -30)]
    assert estimate_position(samples, store_map.access_points, store_map) is None


def test_half_cell_rounds_away_from_zero(open_store):
    aps = [AccessPoint('a', (2, 5)), AccessPoint('b', (3, 5))]
    samples = [WifiSample('a', -50), WifiSample('b', -50)]
    assert estimate_position(samples, aps, open_store) == (3, 5)


def test_out_of_bounds_estimate_is_discarded(open_store):
    aps = [AccessPoint('far', (20, 20))]
    assert estimate_position([WifiSample('far', -50)], aps, open_store) is None


def test_extreme_and_non_finite_rssi_are_ignored(store_map):
    samples = [WifiSample(AP1, -45), WifiSample(AP2, float('nan')), WifiSample(AP3, -10000)]
    assert estimate_position(samples, store_map.access_points, store_map) == (1, 1)
    assert estimate_position([WifiSample(AP2, float('-inf'))], store_map.access_points, store_map) is None


def test_overflowing_centroid_is_discarded(store_map):
    # finite weights (~3e307) whose products with the AP coordinates overflow
    assert estimate_position([WifiSample(AP2, 3025.0)], store_map.access_points, store_map) is None
    samples = [WifiSample(AP1, 3025.0), WifiSample(AP3, 3025.0)]
    assert estimate_position(samples, store_map.access_points, store_map) is None


def test_never_returns_blocked_or_out_of_bounds(store_map):
    rng = np.random.default_rng(7)
    for _ in range(500):
        strengths = rng.uniform(-95, -30, size=3)
        present = rng.random(3) < 0.8
        samples = [WifiSample(bssid, float(s)) for bssid, s, p in zip((AP1, AP2, AP3), strengths, present) if p]
        cell = estimate_position(samples, store_map.access_points, store_map)
        assert cell is None or store_map.is_passable(cell)


def test_samples_from_scan_shapes():
    samples = samples_from_scan([
        {'identifier': AP1, 'signal_strength': -55},
        {'BSSID': AP2, 'RSSI': -60},
        {'bssid': AP3, 'level': -65.5},
        {'BSSID': 'no-strength'},
        {'RSSI': -40},
        {'identifier': AP1, 'signal_strength': True},
    ])
    assert samples == [WifiSample(AP1, -55.0), WifiSample(AP2, -60.0), WifiSample(AP3, -65.5)]
