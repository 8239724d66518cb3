"""
Swagger Manager Backend - Health Check Route
==============================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Checks the database (SELECT 1) and the artifact directory (exists and
       writable) and folds both into one status.

Status levels:
    - healthy:   database connected, storage writable (HTTP 200)
    - degraded:  storage unavailable; reads of stored files may still work (HTTP 200)
    - unhealthy: database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request, Response

from swagger_manager import __version__
from swagger_manager.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description=(
        "Returns the health status of the backend service and its dependencies: "
        "the database and the Swagger file storage."
    ),
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    db_status = "connected"
    storage_status = "writable"
    overall = "healthy"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        await request.app.state.database.ping()
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    # ── Check Artifact Storage ────────────────────────────────────────────
    try:
        if not await request.app.state.artifact_storage.health_check():
            storage_status = "unavailable"
    except Exception as e:
        storage_status = "unavailable"
        logger.warning("Health check: artifact storage failed: %s", str(e))
    if storage_status != "writable" and overall == "healthy":
        overall = "degraded"

    if overall == "unhealthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        artifact_storage=storage_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
