"""
TraceNotes Backend - Health Check Route
========================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Asks the configured storage backend for a lightweight connectivity
       probe (SELECT 1 / PING) and reports the aggregate status.
Who:   Called by Docker health checks, load balancers, and monitoring systems.

Status levels:
    - healthy:   storage reachable (HTTP 200)
    - unhealthy: storage unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from tracenotes import __version__
from tracenotes.schemas.note import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Initialized once when the module loads
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Storage unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request):
    store = request.app.state.note_store
    is_connected = await store.health_check()

    health = HealthResponse(
        status="healthy" if is_connected else "unhealthy",
        version=__version__,
        storage_backend=store.db_system,
        storage="connected" if is_connected else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if not is_connected:
        logger.warning("Health check: storage backend %s unreachable", store.db_system)
        return JSONResponse(status_code=503, content=health.model_dump())
    return health
