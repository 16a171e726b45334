import math
import random

import pytest

from signalroute.models.dto import GeoPoint
from signalroute.services.signal_estimator import estimate_signals, estimated_signal_count
from signalroute.utils.geometry import route_length_m

def constant_vendors(signal_id):
    return 3

def north_route(points, step_deg=0.0027):
    return [GeoPoint(lng=0.0, lat=i * step_deg) for i in range(points)]

def test_count_follows_spacing():
    assert estimated_signal_count(1000.75, 250.0) == 4
    assert estimated_signal_count(3002.2, 250.0) == 12

def test_count_has_floor_of_two():
    assert estimated_signal_count(0.0, 250.0) == 2
    assert estimated_signal_count(111.0, 250.0) == 2

def test_count_rejects_non_positive_spacing():
    with pytest.raises(ValueError):
        estimated_signal_count(1000.0, 0.0)

def test_degenerate_routes_give_nothing(rng):
    assert estimate_signals([], 250.0, rng, constant_vendors) == []
    assert estimate_signals([GeoPoint(lng=0.0, lat=0.0)], 250.0, rng, constant_vendors) == []

def test_two_point_route_of_one_kilometer(straight_route, rng):
    signals = estimate_signals(straight_route, 250.0, rng, constant_vendors)

    assert [s.id for s in signals] == ["estimated-1", "estimated-2", "estimated-3", "estimated-4"]
    assert [s.name for s in signals] == [f"Traffic Signal #{n}" for n in range(1, 5)]
    assert all(s.estimated for s in signals)
    assert all(s.coordinates in straight_route for s in signals)

def test_signals_sit_on_route_vertices(rng):
    route = north_route(11)
    signals = estimate_signals(route, 250.0, rng, constant_vendors)

    assert len(signals) == 12
    for signal in signals:
        assert signal.coordinates in route

def test_placement_follows_route_order(rng):
    route = north_route(40)
    signals = estimate_signals(route, 250.0, rng, constant_vendors)
    lats = [s.coordinates.lat for s in signals]
    assert lats == sorted(lats)

def test_placement_is_deterministic():
    route = north_route(25)
    first = estimate_signals(route, 250.0, random.Random(1), constant_vendors)
    second = estimate_signals(route, 250.0, random.Random(2), constant_vendors)
    assert [s.coordinates for s in first] == [s.coordinates for s in second]

@pytest.mark.parametrize("points,step", [(2, 0.0001), (2, 0.009), (5, 0.004), (30, 0.0013), (60, 0.002)])
def test_density_matches_route_length(rng, points, step):
    route = north_route(points, step)
    expected = max(2, math.floor(route_length_m(route) / 250.0))
    assert len(estimate_signals(route, 250.0, rng, constant_vendors)) == expected

def test_random_attributes_stay_in_range(rng):
    route = north_route(60, 0.002)
    signals = estimate_signals(route, 250.0, rng, constant_vendors)
    assert all(60 <= s.wait_duration_seconds <= 180 for s in signals)
    assert all(s.vendor_count == 3 for s in signals)
