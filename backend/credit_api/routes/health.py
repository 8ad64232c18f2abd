"""
Credit API - Health Check & Greeting Routes
============================================

What:  GET /health for monitoring and load balancer probes, GET /hello as a
       trivial liveness greeting.
Who:   Docker health checks, load balancers, smoke tests.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 503, stop routing traffic)

The database is the only dependency; without it no endpoint except these
two can answer.
"""

import logging
import time

from fastapi import APIRouter, Response
from fastapi.responses import PlainTextResponse
from sqlalchemy import text

from credit_api import __version__
from credit_api.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Set once when the module is imported, i.e. at process start
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(response: Response) -> HealthResponse:
    """
    Probe the database with SELECT 1 and report aggregate status.

    The engine is imported lazily so tests that swap the engine module-level
    attribute are probed, not the one bound at import time.
    """
    db_status = "connected"
    overall = "healthy"

    try:
        from credit_api.database import engine
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        response.status_code = 503
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )


@router.get("/hello", response_class=PlainTextResponse, summary="Greeting")
async def hello() -> str:
    return "Hello World!"
