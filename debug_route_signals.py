import asyncio
import sys
import os

# Add the current directory to sys.path
sys.path.append(os.getcwd())

from signalroute.core.config import settings
from signalroute.models.dto import GeoPoint
from signalroute.services.overpass import OverpassClient
from signalroute.services.signal_matcher import SignalMatcher
from signalroute.utils.geometry import bounding_box, distance_to_route_m, route_length_m

# MG Road -> Silk Board, Bangalore (hand-picked vertices, not a provider route)
ROUTE = [
    GeoPoint(lng=77.5946, lat=12.9716),
    GeoPoint(lng=77.6050, lat=12.9700),
    GeoPoint(lng=77.6150, lat=12.9500),
    GeoPoint(lng=77.6227, lat=12.9170),
]

async def check_route():
    print(f"--- Route ---")
    print(f"Points: {len(ROUTE)}, length: {route_length_m(ROUTE):.0f} m")
    bbox = bounding_box(ROUTE, settings.BBOX_PADDING_DEG)
    print(f"BBox: {bbox.to_overpass()}")

    print(f"\n--- Overpass ({settings.OVERPASS_API_URL}) ---")
    client = OverpassClient()
    candidates = await client.fetch_traffic_signals(bbox)
    print(f"{len(candidates)} traffic_signals nodes in bbox")
    for c in candidates[:10]:
        print(f"  {c.id}: {distance_to_route_m(c.point, ROUTE):.1f} m from route ({c.tags.name or '-'})")

    print(f"\n--- Matcher ---")
    signals = await SignalMatcher.from_settings(client).find_signals_on_route(ROUTE)
    for s in signals:
        tag = "estimated" if s.estimated else "real"
        print(f"  [{tag}] {s.id} {s.name} @ {s.coordinates.lat:.5f},{s.coordinates.lng:.5f}")

if __name__ == "__main__":
    asyncio.run(check_route())
