import io
import zipfile
import logging
from typing import List, Sequence
from fastkml import kml
from fastkml.containers import Document
from fastkml.features import Placemark
from pygeoif.geometry import Point
from fastapi import HTTPException, status
from signalroute.models.dto import ErrorResponse, TrafficSignal

logger = logging.getLogger(__name__)

def _describe(signal: TrafficSignal) -> str:
    kind = "Estimated position" if signal.estimated else "Mapped signal"
    return (
        f"{signal.location}. {kind}. "
        f"Typical wait: {signal.wait_duration_seconds} s. "
        f"Vendors nearby: {signal.vendor_count}."
    )

def generate_kmz(signals: Sequence[TrafficSignal], title: str = "Traffic signals on route") -> bytes:
    """
    Generates a KMZ file with one placemark per traffic signal.
    """
    if not signals:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=ErrorResponse(
                error="NO_SIGNALS",
                detail="Cannot generate KMZ without signals."
            ).model_dump()
        )

    placemarks: List[Placemark] = [
        Placemark(
            id=f"signal-{signal.id}",
            name=signal.name,
            description=_describe(signal),
            # KML uses (lon, lat)
            geometry=Point(signal.coordinates.lng, signal.coordinates.lat),
        )
        for signal in signals
    ]

    document = Document(
        name=title,
        description=f"{len(placemarks)} traffic signals along the planned route.",
        features=placemarks,
    )
    k = kml.KML(features=[document])
    kml_string = k.to_string(prettyprint=True)

    kmz_buffer = io.BytesIO()
    with zipfile.ZipFile(kmz_buffer, 'w', zipfile.ZIP_DEFLATED) as kmz_file:
        # The main KML file must be named doc.kml
        kmz_file.writestr('doc.kml', kml_string.encode('utf-8'))

    logger.info(f"KMZ generated with {len(placemarks)} placemarks ({kmz_buffer.tell()} bytes).")
    kmz_buffer.seek(0)
    return kmz_buffer.read()
