from math import radians, sin, cos, sqrt, asin, hypot
from typing import Sequence, Tuple

from signalroute.models.dto import BoundingBox, GeoPoint

# Earth's mean radius in meters
R = 6371000.0

def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the great-circle distance between two points
    on the Earth (specified in decimal degrees) using the Haversine formula.

    Args:
        lat1: Latitude of point 1.
        lon1: Longitude of point 1.
        lat2: Latitude of point 2.
        lon2: Longitude of point 2.

    Returns:
        Distance between the two points in meters.
    """
    lat1, lon1, lat2, lon2 = map(radians, [lat1, lon1, lat2, lon2])

    dlon = lon2 - lon1
    dlat = lat2 - lat1

    a = sin(dlat / 2)**2 + cos(lat1) * cos(lat2) * sin(dlon / 2)**2
    c = 2 * asin(sqrt(a))

    return R * c


def route_length_m(route: Sequence[GeoPoint]) -> float:
    """Sum of haversine distances over consecutive route points."""
    return sum(
        haversine_m(a.lat, a.lng, b.lat, b.lng)
        for a, b in zip(route, route[1:])
    )


def _to_local_xy(p: GeoPoint, ref_lat_rad: float) -> Tuple[float, float]:
    # Equirectangular projection around the reference latitude
    return R * radians(p.lng) * cos(ref_lat_rad), R * radians(p.lat)


def project_onto_segment(point: GeoPoint, a: GeoPoint, b: GeoPoint) -> Tuple[float, float]:
    """
    Project `point` onto the segment a-b.

    Coordinates are mapped to a local plane (longitude scaled by the cosine of
    the point's latitude, then by the Earth radius) and the scalar projection
    is clamped to [0, 1] so the result stays on the finite segment.

    Returns:
        (distance in meters to the closest point of the segment, clamped t)
    """
    ref = radians(point.lat)
    px, py = _to_local_xy(point, ref)
    ax, ay = _to_local_xy(a, ref)
    bx, by = _to_local_xy(b, ref)

    dx, dy = bx - ax, by - ay
    seg_len_sq = dx * dx + dy * dy
    if seg_len_sq == 0.0:
        return hypot(px - ax, py - ay), 0.0

    t = ((px - ax) * dx + (py - ay) * dy) / seg_len_sq
    t = max(0.0, min(1.0, t))
    return hypot(px - (ax + t * dx), py - (ay + t * dy)), t


def point_to_segment_distance_m(point: GeoPoint, a: GeoPoint, b: GeoPoint) -> float:
    return project_onto_segment(point, a, b)[0]


def distance_to_route_m(point: GeoPoint, route: Sequence[GeoPoint]) -> float:
    """Minimum distance from `point` to any segment of the route polyline."""
    if not route:
        return float("inf")
    if len(route) == 1:
        return point_to_segment_distance_m(point, route[0], route[0])
    return min(
        point_to_segment_distance_m(point, a, b)
        for a, b in zip(route, route[1:])
    )


def along_route_position_m(point: GeoPoint, route: Sequence[GeoPoint]) -> float:
    """Distance from the route origin to the projection of `point` on its nearest segment."""
    best_distance = float("inf")
    best_position = 0.0
    travelled = 0.0
    for a, b in zip(route, route[1:]):
        segment_m = haversine_m(a.lat, a.lng, b.lat, b.lng)
        distance, t = project_onto_segment(point, a, b)
        if distance < best_distance:
            best_distance = distance
            best_position = travelled + t * segment_m
        travelled += segment_m
    return best_position


def bounding_box(route: Sequence[GeoPoint], padding_deg: float = 0.0) -> BoundingBox:
    """Axis-aligned box around every route point, grown by `padding_deg` on each side."""
    if not route:
        raise ValueError("Cannot compute a bounding box for an empty route")

    min_lat = max_lat = route[0].lat
    min_lng = max_lng = route[0].lng
    for p in route[1:]:
        min_lat = min(min_lat, p.lat)
        max_lat = max(max_lat, p.lat)
        min_lng = min(min_lng, p.lng)
        max_lng = max(max_lng, p.lng)

    return BoundingBox(
        min_lat=min_lat - padding_deg,
        min_lng=min_lng - padding_deg,
        max_lat=max_lat + padding_deg,
        max_lng=max_lng + padding_deg,
    )
