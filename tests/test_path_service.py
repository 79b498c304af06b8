"""Tests for path request validation and result mapping."""

import pytest

import path_service
from path_planning import SearchLimitExceeded
from path_service import PathStatus, handle_path_request, path_to_product


def request(sx, sy, ex, ey):
    return {'start': {'x': sx, 'y': sy}, 'end': {'x': ex, 'y': ey}}


def test_successful_request(store_map):
    result = handle_path_request(request(1, 0, 2, 3), store_map)
    assert result.ok
    assert result.to_dict() == {'path': [[x, y] for x, y in result.path]}
    assert result.path[0] == (1, 0) and result.path[-1] == (2, 3)


@pytest.mark.parametrize("payload", [
    None,
    {},
    {'start': {'x': 1, 'y': 0}},
    request('1', 0, 2, 3),
    request(1, 0, 2.5, 3),
    request(True, 0, 2, 3),
    {'start': [1, 0], 'end': {'x': 2, 'y': 3}},
])
def test_invalid_coordinates(payload, store_map):
    result = handle_path_request(payload, store_map)
    assert result.status is PathStatus.INVALID_COORDINATES
    assert result.to_dict() == {'error': 'Invalid coordinates', 'code': 'invalid_coordinates'}
    assert result.status.http_status == 400


def test_integral_floats_are_accepted(store_map):
    assert handle_path_request(request(1.0, 0.0, 2, 3), store_map).ok


def test_out_of_bounds(store_map):
    assert handle_path_request(request(1, 0, 10, 3), store_map).status is PathStatus.OUT_OF_BOUNDS
    assert handle_path_request(request(-1, 0, 2, 3), store_map).status is PathStatus.OUT_OF_BOUNDS


def test_not_walkable(store_map):
    assert handle_path_request(request(0, 0, 2, 3), store_map).status is PathStatus.NOT_WALKABLE
    assert handle_path_request(request(1, 0, 4, 3), store_map).status is PathStatus.NOT_WALKABLE


def test_validation_order(store_map):
    """A request failing several checks reports the earliest one."""
    assert handle_path_request(request('a', 0, 10, 10), store_map).status is PathStatus.INVALID_COORDINATES
    assert handle_path_request(request(0, 0, 10, 10), store_map).status is PathStatus.OUT_OF_BOUNDS


def test_no_path_found(enclosed_store):
    result = handle_path_request(request(0, 0, 2, 2), enclosed_store)
    assert result.status is PathStatus.NO_PATH_FOUND
    assert result.status.http_status == 404
    assert result.to_dict()['error'] == 'No path found'


def test_rejected_request_never_searches(store_map, monkeypatch):
    calls = []
    monkeypatch.setattr(path_service, 'find_path', lambda *a, **kw: calls.append(a))
    handle_path_request(request(4, 3, 2, 3), store_map)
    handle_path_request(request(1, 0, 11, 3), store_map)
    assert calls == []


def test_search_limit(store_map, monkeypatch):
    def too_slow(*args, **kwargs):
        raise SearchLimitExceeded("too slow")
    monkeypatch.setattr(path_service, 'find_path', too_slow)
    result = handle_path_request(request(1, 0, 2, 3), store_map)
    assert result.status is PathStatus.SEARCH_LIMIT
    assert result.status.http_status == 503


def test_path_to_product(store_map):
    result = path_to_product((1, 0), 'Cheese', store_map)
    assert result.ok and result.path[-1] == (4, 5)
    with pytest.raises(KeyError):
        path_to_product((1, 0), 'Caviar', store_map)
