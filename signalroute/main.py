from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
import uuid

import httpx

# Local imports
from signalroute.core.config import settings
from signalroute.api.routes import router as api_router
from signalroute.logging import configure_logging
from signalroute.middleware.logging import LoggingMiddleware
from signalroute.services.overpass import OverpassClient
from signalroute.services.signal_matcher import SignalMatcher

configure_logging()
logger = logging.getLogger(__name__)

# --- Application Lifecycle Management ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Application startup: v{settings.VERSION}")
    # One pooled HTTP client shared by every matching request
    app.state.http_client = httpx.AsyncClient(timeout=settings.OVERPASS_TIMEOUT)
    app.state.signal_matcher = SignalMatcher.from_settings(
        OverpassClient(http_client=app.state.http_client)
    )
    logger.info(f"Signal matcher ready (Overpass: {settings.OVERPASS_API_URL}).")

    yield

    logger.info("Application shutdown: Cleaning up resources.")
    await app.state.http_client.aclose()

# --- FastAPI Application Initialization ---
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=settings.BRIEF_DESCRIPTION,
    lifespan=lifespan,
    docs_url=None,
    redoc_url=None,
)

app.add_middleware(LoggingMiddleware)

# --- API Routes ---
app.include_router(api_router, prefix="/api")

# --- Health Check Endpoint ---
@app.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    return {
        "status": "ok",
        "overpass_url": settings.OVERPASS_API_URL,
    }

# --- Request Validation Handler ---
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Inputs are left out: a NaN or Infinity coordinate cannot be rendered as JSON
    errors = [
        {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": errors},
    )

# --- Global Exception Handler (for unhandled errors) ---
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    error_id = str(uuid.uuid4())
    logger.error(f"Unhandled exception (ID: {error_id}): {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": {
                "error": "INTERNAL_SERVER_ERROR",
                "detail": "An unexpected error occurred. Please report this error ID.",
                "error_id": error_id
            }
        }
    )
