"""
Portfolio API — Health Check Route
===================================

What:  GET /health for container health checks and load balancers.
How:   Pings MongoDB; the service is only healthy if the database answers.

    healthy:   database reachable (HTTP 200)
    unhealthy: database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from portfolio_api import __version__
from portfolio_api.database import Database, get_database
from portfolio_api.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
    summary="Service health check",
)
async def health_check(db: Database = Depends(get_database)):
    db_status = "connected"
    overall = "healthy"
    details = None

    try:
        await db.ping()
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        details = {"database_error": str(e)}
        logger.warning("Health check: database unreachable: %s", str(e))

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
        details=details,
    )
    if overall != "healthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
