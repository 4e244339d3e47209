"""
Pelayanan Backend — Health Check Route
========================================

What:  GET /health for container probes and load balancers.
How:   Runs SELECT 1 through the startup-created database handle.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from pelayanan import __version__
from pelayanan.database import Database, get_database
from pelayanan.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(database: Database = Depends(get_database)):
    db_status = "connected"
    overall = "healthy"

    try:
        await database.ping()
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    return JSONResponse(
        status_code=200 if overall == "healthy" else 503,
        content=body.model_dump(),
    )
