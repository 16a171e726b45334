import random

import pytest

from signalroute.core.exceptions import GeodataUnavailable
from signalroute.models.dto import GeoPoint
from signal_stubs import StubSource

@pytest.fixture
def straight_route():
    # ~1000.75 m due north along the prime meridian
    return [GeoPoint(lng=0.0, lat=0.0), GeoPoint(lng=0.0, lat=0.009)]


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def failing_source():
    return StubSource(error=GeodataUnavailable("OVERPASS_UNREACHABLE", "connection refused"))
