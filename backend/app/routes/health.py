"""
CampFinder Backend — Health Check Route
=========================================

What:  GET /health for container probes and load balancers.
How:   Runs `SELECT 1` against the pool and asks the geocoder whether it is
       configured. No provider request is made; probes run every few seconds.

Status levels:
    healthy:   database reachable, geocoder configured          (200)
    degraded:  database reachable, geocoder not configured      (200)
    unhealthy: database unreachable                              (503)
"""

import logging
import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app import __version__
from app.database import engine
from app.schemas.bootcamp import HealthResponse
from app.services.geocoder_service import geocoder

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
)
async def health_check():
    db_status = "connected"
    geocoder_status = "configured"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    if not await geocoder.health_check():
        geocoder_status = "not_configured"
        if overall == "healthy":
            overall = "degraded"

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        geocoder=geocoder_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall == "unhealthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
