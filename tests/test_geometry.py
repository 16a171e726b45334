import pytest

from signalroute.models.dto import GeoPoint
from signalroute.utils.geometry import (
    along_route_position_m,
    bounding_box,
    distance_to_route_m,
    haversine_m,
    point_to_segment_distance_m,
    project_onto_segment,
    route_length_m,
)

A = GeoPoint(lng=0.0, lat=0.0)
B = GeoPoint(lng=0.0, lat=0.009)

def test_haversine_one_degree_of_latitude():
    assert haversine_m(0.0, 0.0, 1.0, 0.0) == pytest.approx(111194.9, rel=1e-4)

def test_haversine_same_point_is_zero():
    assert haversine_m(12.97, 77.59, 12.97, 77.59) == 0.0

def test_route_length_of_straight_route():
    assert route_length_m([A, B]) == pytest.approx(1000.75, abs=0.1)

def test_route_length_degenerate():
    assert route_length_m([]) == 0.0
    assert route_length_m([A]) == 0.0

def test_point_on_segment_has_zero_distance():
    midpoint = GeoPoint(lng=0.0, lat=0.0045)
    distance, t = project_onto_segment(midpoint, A, B)
    assert distance == pytest.approx(0.0, abs=1e-6)
    assert t == pytest.approx(0.5)

def test_perpendicular_offset_of_fifty_meters():
    # 0.00045 deg of longitude at the equator is ~50 m
    offset = GeoPoint(lng=0.00045, lat=0.0045)
    assert point_to_segment_distance_m(offset, A, B) == pytest.approx(50.04, abs=0.1)

def test_projection_is_clamped_to_segment_end():
    beyond = GeoPoint(lng=0.0, lat=0.010)
    distance, t = project_onto_segment(beyond, A, B)
    assert t == 1.0
    # Distance to B, not to the infinite line (which would be 0)
    assert distance == pytest.approx(111.19, abs=0.1)

def test_projection_is_clamped_to_segment_start():
    before = GeoPoint(lng=0.0, lat=-0.001)
    distance, t = project_onto_segment(before, A, B)
    assert t == 0.0
    assert distance == pytest.approx(111.19, abs=0.1)

def test_zero_length_segment_uses_point_distance():
    p = GeoPoint(lng=0.0, lat=0.001)
    assert point_to_segment_distance_m(p, A, A) == pytest.approx(111.19, abs=0.1)

def test_longitude_is_scaled_by_latitude():
    # At 60N a degree of longitude is half as long as at the equator
    a = GeoPoint(lng=0.0, lat=60.0)
    b = GeoPoint(lng=0.0, lat=60.01)
    p = GeoPoint(lng=0.001, lat=60.005)
    assert point_to_segment_distance_m(p, a, b) == pytest.approx(55.6, abs=0.2)

def test_distance_is_deterministic():
    p = GeoPoint(lng=0.0003, lat=0.002)
    first = point_to_segment_distance_m(p, A, B)
    point_to_segment_distance_m(GeoPoint(lng=1.0, lat=1.0), A, B)
    assert point_to_segment_distance_m(p, A, B) == first

def test_distance_to_route_picks_nearest_segment():
    route = [A, B, GeoPoint(lng=0.009, lat=0.009)]
    # Close to the second (east-bound) segment, far from the first
    p = GeoPoint(lng=0.006, lat=0.00905)
    assert distance_to_route_m(p, route) == pytest.approx(5.56, abs=0.1)

def test_distance_to_empty_route_is_infinite():
    assert distance_to_route_m(A, []) == float("inf")

def test_along_route_position():
    route = [A, B, GeoPoint(lng=0.009, lat=0.009)]
    assert along_route_position_m(GeoPoint(lng=0.0, lat=0.0045), route) == pytest.approx(500.4, abs=0.5)
    assert along_route_position_m(GeoPoint(lng=0.0045, lat=0.009), route) == pytest.approx(1501.1, abs=1.0)

def test_bounding_box_with_padding():
    route = [GeoPoint(lng=77.59, lat=12.97), GeoPoint(lng=77.62, lat=12.91), GeoPoint(lng=77.60, lat=13.00)]
    bbox = bounding_box(route, 0.0002)
    assert bbox.min_lat == pytest.approx(12.9098)
    assert bbox.max_lat == pytest.approx(13.0002)
    assert bbox.min_lng == pytest.approx(77.5898)
    assert bbox.max_lng == pytest.approx(77.6202)

def test_bounding_box_of_empty_route_raises():
    with pytest.raises(ValueError):
        bounding_box([])
