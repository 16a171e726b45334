# signalroute/services/signal_matcher.py
"""Matches real traffic signals to a driving route, with an estimation fallback."""

import random
from typing import Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

import structlog

from signalroute.core.config import Settings, settings
from signalroute.core.exceptions import GeodataUnavailable
from signalroute.models.dto import BoundingBox, GeoPoint, OverpassElement, TrafficSignal
from signalroute.services.signal_estimator import estimate_signals
from signalroute.utils.geometry import along_route_position_m, bounding_box, distance_to_route_m

logger = structlog.get_logger(__name__)

MATCHED_WAIT_RANGE = (40, 180)

class SignalSource(Protocol):
    """Anything that can list raw traffic-signal points inside a bbox."""
    async def fetch_traffic_signals(self, bbox: BoundingBox) -> List[OverpassElement]: ...


def random_vendor_count(rng: random.Random, low: int = settings.VENDOR_COUNT_MIN, high: int = settings.VENDOR_COUNT_MAX) -> int:
    """Fallback vendor count for signals missing from the vendor table."""
    return rng.randint(low, high)


class SignalMatcher:
    """Service layer for finding traffic signals along a route.

    - Queries the signal source for nodes inside the route's padded bbox.
    - Keeps nodes within `max_distance_m` of any route segment.
    - Falls back to estimated signals on source failure or zero matches.

    Holds no per-call state, so one instance can serve concurrent requests.
    """

    def __init__(
        self,
        source: SignalSource,
        vendor_counts: Optional[Mapping[str, int]] = None,
        max_distance_m: float = settings.MAX_SIGNAL_DISTANCE_M,
        bbox_padding_deg: float = settings.BBOX_PADDING_DEG,
        estimation_spacing_m: float = settings.ESTIMATION_SPACING_M,
        sort_along_route: bool = settings.SORT_ALONG_ROUTE,
        vendor_count_range: Tuple[int, int] = (settings.VENDOR_COUNT_MIN, settings.VENDOR_COUNT_MAX),
        rng: Optional[random.Random] = None,
    ):
        self.source = source
        self.vendor_counts: Dict[str, int] = dict(vendor_counts or {})
        self.max_distance_m = max_distance_m
        self.bbox_padding_deg = bbox_padding_deg
        self.estimation_spacing_m = estimation_spacing_m
        self.sort_along_route = sort_along_route
        self.vendor_count_range = vendor_count_range
        self.rng = rng or random.Random()

    @classmethod
    def from_settings(cls, source: SignalSource, config: Settings = settings) -> "SignalMatcher":
        return cls(
            source,
            vendor_counts=config.VENDOR_COUNTS,
            max_distance_m=config.MAX_SIGNAL_DISTANCE_M,
            bbox_padding_deg=config.BBOX_PADDING_DEG,
            estimation_spacing_m=config.ESTIMATION_SPACING_M,
            sort_along_route=config.SORT_ALONG_ROUTE,
            vendor_count_range=(config.VENDOR_COUNT_MIN, config.VENDOR_COUNT_MAX),
        )

    def vendor_count_for(self, signal_id: str) -> int:
        if signal_id in self.vendor_counts:
            return self.vendor_counts[signal_id]
        return random_vendor_count(self.rng, *self.vendor_count_range)

    async def find_signals_on_route(self, route: Sequence[GeoPoint]) -> List[TrafficSignal]:
        """Return the signals on `route`, real where possible, estimated otherwise.

        Routes with fewer than two points yield an empty list without any
        network call. Source failures never propagate.
        """
        if len(route) < 2:
            return []

        bbox = bounding_box(route, self.bbox_padding_deg)
        try:
            candidates = await self.source.fetch_traffic_signals(bbox)
        except GeodataUnavailable as e:
            logger.warning("signal_source_failed", reason=e.reason, detail=e.detail)
            return self._estimate(route, "source_failed")

        signals = self.match_candidates(route, candidates)
        if not signals:
            return self._estimate(route, "no_matches")

        logger.info("signals_matched", candidates=len(candidates), matched=len(signals))
        return signals

    def match_candidates(self, route: Sequence[GeoPoint], candidates: Sequence[OverpassElement]) -> List[TrafficSignal]:
        """Keep candidates close enough to the route, deduplicated by id."""
        seen = set()
        accepted: List[Tuple[float, OverpassElement]] = []
        for element in candidates:
            if element.id in seen:
                continue
            seen.add(element.id)
            point = element.point
            if distance_to_route_m(point, route) > self.max_distance_m:
                continue
            position = along_route_position_m(point, route) if self.sort_along_route else 0.0
            accepted.append((position, element))

        if self.sort_along_route:
            # sorted() is stable, equal positions keep response order
            accepted = sorted(accepted, key=lambda x: x[0])

        return [self._to_signal(element) for _, element in accepted]

    def _to_signal(self, element: OverpassElement) -> TrafficSignal:
        signal_id = str(element.id)
        tags = element.tags
        return TrafficSignal(
            id=signal_id,
            name=tags.name or f"Traffic Signal {signal_id[-4:]}",
            location=tags.road or tags.description or f"Intersection at {element.lat:.5f}, {element.lon:.5f}",
            coordinates=element.point,
            wait_duration_seconds=self.rng.randint(*MATCHED_WAIT_RANGE),
            vendor_count=self.vendor_count_for(signal_id),
        )

    def _estimate(self, route: Sequence[GeoPoint], cause: str) -> List[TrafficSignal]:
        logger.info("signal_estimation_fallback", cause=cause)
        return estimate_signals(route, self.estimation_spacing_m, self.rng, self.vendor_count_for)
