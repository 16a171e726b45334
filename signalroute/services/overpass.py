# signalroute/services/overpass.py
"""Traffic-signal lookups against an Overpass-API-compatible interpreter."""

import asyncio
import random
from typing import Any, List, Optional

import httpx
import structlog

from signalroute.core.config import settings
from signalroute.core.exceptions import GeodataUnavailable
from signalroute.models.dto import BoundingBox, OverpassElement

logger = structlog.get_logger(__name__)

def build_traffic_signal_query(bbox: BoundingBox, timeout_s: int = settings.OVERPASS_QUERY_TIMEOUT) -> str:
    """Overpass QL for every `highway=traffic_signals` node inside the bbox."""
    return (
        f"[out:json][timeout:{timeout_s}];\n"
        f'node["highway"="traffic_signals"]{bbox.to_overpass()};\n'
        "out body;"
    )


def parse_elements(payload: Any) -> List[OverpassElement]:
    """
    Turn a decoded Overpass response into validated elements.

    Raises:
        GeodataUnavailable: If the payload has no `elements` list.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("elements"), list):
        raise GeodataUnavailable("MALFORMED_RESPONSE", "response has no elements list")

    elements: List[OverpassElement] = []
    skipped = 0
    for raw in payload["elements"]:
        element = OverpassElement.parse(raw)
        if element is None:
            skipped += 1
            continue
        elements.append(element)

    if skipped:
        logger.warning("overpass_elements_skipped", skipped=skipped, kept=len(elements))
    return elements


class OverpassClient:
    """
    Async Overpass client.

    The `httpx.AsyncClient` may be shared across concurrent calls; when none is
    given a short-lived client is opened per request.
    """

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        url: str = settings.OVERPASS_API_URL,
        timeout: float = settings.OVERPASS_TIMEOUT,
        max_retries: int = settings.OVERPASS_MAX_RETRIES,
        initial_backoff: float = settings.OVERPASS_INITIAL_BACKOFF,
        query_timeout: int = settings.OVERPASS_QUERY_TIMEOUT,
    ):
        self.http_client = http_client
        self.url = url
        self.timeout = timeout
        self.max_retries = max_retries
        self.initial_backoff = initial_backoff
        self.query_timeout = query_timeout

    async def _post(self, query: str) -> httpx.Response:
        # httpx form-encodes `data`, giving `data=<urlencoded query>`
        if self.http_client is not None:
            return await self.http_client.post(self.url, data={"data": query}, timeout=self.timeout)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(self.url, data={"data": query})

    async def fetch_traffic_signals(self, bbox: BoundingBox) -> List[OverpassElement]:
        """
        Fetch traffic-signal nodes inside `bbox`.

        Raises:
            GeodataUnavailable: On any network, status or payload failure.
        """
        query = build_traffic_signal_query(bbox, self.query_timeout)
        backoff_time = self.initial_backoff

        for attempt in range(self.max_retries + 1):
            try:
                response = await self._post(query)
                response.raise_for_status()
                payload = response.json()
                elements = parse_elements(payload)
                logger.info("overpass_query_ok", elements=len(elements), attempt=attempt + 1)
                return elements

            except (httpx.TimeoutException, httpx.TransportError) as e:
                logger.warning("overpass_attempt_failed", attempt=attempt + 1, error=repr(e))
                if attempt < self.max_retries:
                    wait_time = max(0.0, backoff_time * (2 ** attempt) + random.uniform(-0.2, 0.2))
                    logger.info("overpass_retry_scheduled", wait_s=round(wait_time, 2))
                    await asyncio.sleep(wait_time)
                else:
                    raise GeodataUnavailable("OVERPASS_UNREACHABLE", repr(e)) from e
            except httpx.HTTPStatusError as e:
                logger.error("overpass_status_error", status_code=e.response.status_code)
                raise GeodataUnavailable("OVERPASS_STATUS", str(e.response.status_code)) from e
            except ValueError as e:
                # response.json() on a non-JSON body
                logger.error("overpass_invalid_json", error=str(e))
                raise GeodataUnavailable("MALFORMED_RESPONSE", "response body is not JSON") from e
            except httpx.HTTPError as e:
                # Remaining httpx failures, e.g. DecodingError on a corrupt gzip body
                logger.error("overpass_http_error", error=repr(e))
                raise GeodataUnavailable("OVERPASS_UNREACHABLE", repr(e)) from e

        # Loop always returns or raises
        raise GeodataUnavailable("OVERPASS_UNREACHABLE")
