from pydantic import BaseModel, ConfigDict, Field, ValidationError, computed_field
from typing import Annotated, Any, List, Literal, Optional, Sequence, Tuple, Union

ESTIMATED_ID_PREFIX = "estimated-"

# Finite, in-range WGS84 degrees; NaN and Infinity are rejected
Longitude = Annotated[float, Field(ge=-180, le=180, allow_inf_nan=False)]
Latitude = Annotated[float, Field(ge=-90, le=90, allow_inf_nan=False)]

# --- Geometry ---

class GeoPoint(BaseModel):
    """A WGS84 (longitude, latitude) pair in degrees."""
    model_config = ConfigDict(frozen=True)

    lng: Longitude = Field(..., description="Longitude in degrees.")
    lat: Latitude = Field(..., description="Latitude in degrees.")

    @classmethod
    def from_position(cls, position: Sequence[float]) -> "GeoPoint":
        """Build from a GeoJSON `[lng, lat]` position (a trailing altitude is ignored)."""
        return cls(lng=position[0], lat=position[1])


class BoundingBox(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_lat: float
    min_lng: float
    max_lat: float
    max_lng: float

    def to_overpass(self) -> str:
        """Overpass bbox filter order: (south,west,north,east)."""
        return f"({self.min_lat},{self.min_lng},{self.max_lat},{self.max_lng})"


class LineStringGeometry(BaseModel):
    """GeoJSON LineString as returned by directions providers."""
    type: Literal["LineString"] = "LineString"
    coordinates: List[Union[Tuple[Longitude, Latitude], Tuple[Longitude, Latitude, float]]] = Field(
        default_factory=list,
        description="[lng, lat] or [lng, lat, alt] positions, origin first."
    )

    def to_route(self) -> List[GeoPoint]:
        return [GeoPoint.from_position(position) for position in self.coordinates]

# --- Traffic signals ---

class TrafficSignal(BaseModel):
    """A traffic-signal intersection on (or estimated on) a route."""
    id: str = Field(..., description="Source node id, or 'estimated-<n>' for synthetic signals.")
    name: str = Field(..., description="Display label.")
    location: str = Field(..., description="Free-text intersection description.")
    coordinates: GeoPoint
    wait_duration_seconds: int = Field(..., description="Typical wait at the light (presentation value, not measured).")
    vendor_count: int = Field(..., description="Placeholder count of vendors near the light.")

    @computed_field
    @property
    def estimated(self) -> bool:
        return self.id.startswith(ESTIMATED_ID_PREFIX)

# --- Overpass wire models ---

class OverpassTags(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    road: Optional[str] = None
    description: Optional[str] = None


class OverpassElement(BaseModel):
    """One node from an Overpass `elements` array."""
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    id: int
    lat: Latitude
    lon: Longitude
    tags: OverpassTags = Field(default_factory=OverpassTags)

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(lng=self.lon, lat=self.lat)

    @classmethod
    def parse(cls, raw: Any) -> Optional["OverpassElement"]:
        """Validate a raw element, returning None when it is unusable."""
        try:
            return cls.model_validate(raw)
        except ValidationError:
            return None

# --- Public API DTOs ---

class RouteSignalsRequest(BaseModel):
    """A route object as handed over by the directions provider."""
    geometry: LineStringGeometry
    distance: Optional[float] = Field(None, description="Provider route length in meters.")
    duration: Optional[float] = Field(None, description="Provider travel time in seconds.")


class RouteSignalsResponse(BaseModel):
    signals: List[TrafficSignal] = Field(..., description="Signals in result order.")
    estimated: bool = Field(..., description="True when signals come from the estimation fallback.")
    route_length_m: float = Field(..., description="Haversine length of the submitted geometry.")
    distance: Optional[float] = Field(None, description="Provider route length in meters (echoed).")
    duration: Optional[float] = Field(None, description="Provider travel time in seconds (echoed).")

# --- Error Response Model ---

class ErrorResponse(BaseModel):
    """Standardized error response model."""
    error: str = Field(..., description="A machine-readable error code.")
    detail: str = Field(..., description="A human-readable explanation.")
