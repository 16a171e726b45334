# signalroute/services/signal_estimator.py
"""Synthetic traffic signals for routes without usable geodata."""

import math
import random
from typing import Callable, List, Sequence

import structlog

from signalroute.models.dto import ESTIMATED_ID_PREFIX, GeoPoint, TrafficSignal
from signalroute.utils.geometry import route_length_m

logger = structlog.get_logger(__name__)

MIN_ESTIMATED_SIGNALS = 2
ESTIMATED_WAIT_RANGE = (60, 180)

def estimated_signal_count(length_m: float, spacing_m: float) -> int:
    """One signal per `spacing_m` of route, never fewer than two."""
    if spacing_m <= 0:
        raise ValueError("spacing_m must be positive")
    return max(MIN_ESTIMATED_SIGNALS, math.floor(length_m / spacing_m))


def estimate_signals(
    route: Sequence[GeoPoint],
    spacing_m: float,
    rng: random.Random,
    vendor_count_for: Callable[[str], int],
) -> List[TrafficSignal]:
    """
    Place synthetic signals on route vertices at evenly spaced indices.

    Every signal sits exactly on a route point. Placement is deterministic;
    wait duration and vendor count are drawn per call.
    """
    n = len(route)
    if n < 2:
        return []

    length_m = route_length_m(route)
    count = estimated_signal_count(length_m, spacing_m)

    signals: List[TrafficSignal] = []
    for i in range(count):
        # Interior positions; int(x + 0.5) rounds half up
        index = int((i + 1) * (n - 1) / (count + 1) + 0.5)
        vertex = route[index]
        number = i + 1
        signal_id = f"{ESTIMATED_ID_PREFIX}{number}"
        signals.append(
            TrafficSignal(
                id=signal_id,
                name=f"Traffic Signal #{number}",
                location="Estimated intersection along route",
                coordinates=vertex,
                wait_duration_seconds=rng.randint(*ESTIMATED_WAIT_RANGE),
                vendor_count=vendor_count_for(signal_id),
            )
        )

    logger.info("signals_estimated", count=count, route_points=n, route_length_m=round(length_m, 1))
    return signals
