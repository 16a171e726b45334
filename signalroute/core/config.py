from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Dict

class Settings(BaseSettings):
    PROJECT_NAME: str = "DriveBy signal matcher"
    VERSION: str = "0.1.0"
    BRIEF_DESCRIPTION: str = "Finds the traffic signals along a driving route so roadside vendors can meet drivers at red lights."

    ENV: str = Field("development", description="Application environment (e.g., production, development)")
    LOG_LEVEL: str = Field("INFO", description="Root log level")

    # --- Overpass geodata service ---
    OVERPASS_API_URL: str = Field(
        "https://overpass-api.de/api/interpreter",
        description="Overpass-API-compatible interpreter endpoint"
    )
    # Client-side timeout for one Overpass POST (seconds)
    OVERPASS_TIMEOUT: float = 8.0
    # Server-side [timeout:N] put into the Overpass QL query (seconds)
    OVERPASS_QUERY_TIMEOUT: int = 25
    # Retry only on timeouts / transport errors, then fall back to estimation
    OVERPASS_MAX_RETRIES: int = 1
    OVERPASS_INITIAL_BACKOFF: float = 1.0 # seconds

    # --- Matching policy ---
    # ~20m at the equator, tolerates coordinate noise at the query boundary
    BBOX_PADDING_DEG: float = 0.0002
    MAX_SIGNAL_DISTANCE_M: float = 10.0
    # One estimated signal per this many meters of route
    ESTIMATION_SPACING_M: float = 250.0
    SORT_ALONG_ROUTE: bool = Field(False, description="Order matched signals by position along the route instead of response order")

    # --- Vendor placeholders ---
    VENDOR_COUNTS: Dict[str, int] = Field(
        default_factory=dict,
        description="Known vendor counts keyed by signal id"
    )
    VENDOR_COUNT_MIN: int = 1
    VENDOR_COUNT_MAX: int = 10

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

settings = Settings()
