# signalroute/api/routes.py

from fastapi import APIRouter, Request, HTTPException, status
from fastapi.responses import Response
import logging

# Local imports
from signalroute.models.dto import (
    ErrorResponse,
    RouteSignalsRequest,
    RouteSignalsResponse,
)
from signalroute.services.kmz_service import generate_kmz
from signalroute.services.signal_matcher import SignalMatcher
from signalroute.utils.geometry import route_length_m

router = APIRouter()
logger = logging.getLogger(__name__)

def get_signal_matcher(request: Request) -> SignalMatcher:
    matcher = getattr(request.app.state, "signal_matcher", None)
    if matcher is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=ErrorResponse(
                error="MATCHER_UNAVAILABLE",
                detail="Signal matching is not initialised yet.",
            ).model_dump(),
        )
    return matcher

# ----------------------------------------------------------------------
# Route Signals Endpoint
# ----------------------------------------------------------------------
@router.post(
    "/route-signals",
    response_model=RouteSignalsResponse,
    responses={503: {"model": ErrorResponse}},
)
async def route_signals(request: Request, data: RouteSignalsRequest):
    """Return the traffic signals along the submitted route geometry."""
    matcher = get_signal_matcher(request)
    route = data.geometry.to_route()

    signals = await matcher.find_signals_on_route(route)
    logger.info(f"Route with {len(route)} points resolved to {len(signals)} signals.")

    return RouteSignalsResponse(
        signals=signals,
        estimated=any(s.estimated for s in signals),
        route_length_m=round(route_length_m(route), 1),
        distance=data.distance,
        duration=data.duration,
    )

# ----------------------------------------------------------------------
# KMZ Download Endpoint
# ----------------------------------------------------------------------
@router.post(
    "/route-signals/kmz",
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def route_signals_kmz(request: Request, data: RouteSignalsRequest):
    """Generate a KMZ of the signals along the submitted route."""
    matcher = get_signal_matcher(request)
    signals = await matcher.find_signals_on_route(data.geometry.to_route())

    try:
        kmz_content = generate_kmz(signals)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"KMZ generation failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=ErrorResponse(
                error="KMZ_DOWNLOAD_UNAVAILABLE",
                detail="Download temporarily unavailable due to generation error.",
            ).model_dump(),
        )

    return Response(
        content=kmz_content,
        media_type="application/vnd.google-earth.kmz",
        headers={
            "Content-Disposition": "attachment; filename=route_signals.kmz",
        },
    )
