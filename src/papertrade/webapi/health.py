"""Health check endpoints for the Papertrade API."""

import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from .. import __version__
from ..config.logging import get_logger
from .models.responses import HealthResponse, HealthStatus

logger = get_logger(__name__)
router = APIRouter()

# Track application start time for uptime calculation
_app_start_time = time.time()


@router.get("/health", response_model=HealthResponse, summary="Basic Health Check")
def basic_health_check(request: Request):
    """
    Report ledger store connectivity.

    Returns 503 when the store cannot be reached.
    """
    database = request.app.state.store.check_health()
    status = "healthy" if database.get("status") == "healthy" else "unhealthy"

    response = HealthResponse(
        health=HealthStatus(
            status=status,
            services={"database": database},
            uptime_seconds=time.time() - _app_start_time,
            version=__version__,
        ),
        request_id=getattr(request.state, "request_id", None),
    )

    if status != "healthy":
        logger.warning("Health check failed", database=database)
        return JSONResponse(status_code=503, content=response.model_dump())

    return response


@router.get("/health/live", summary="Liveness Probe")
def liveness_probe():
    """Liveness probe: the process is up and serving requests."""
    return {"status": "alive"}
