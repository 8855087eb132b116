"""
NoteBrief Backend: Health Check Route
=======================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Checks the database (SELECT 1) and the Gemini API (model discovery).
Who:   Docker health checks, load balancers, monitoring.

Status levels:
    - healthy:   database and Gemini both fine
    - degraded:  database fine, Gemini unreachable or no usable model
    - unhealthy: database unreachable
"""

import logging
import time

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from notebrief import __version__
from notebrief.database import engine
from notebrief.schemas.summary import HealthResponse
from notebrief.services.summarization_service import summarizer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    db_status = "connected"
    gemini_status = "available"
    overall = "healthy"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", e)

    # ── Check Gemini API ──────────────────────────────────────────────────
    # A resolved model is cached, so this only hits the API until the first success
    if not await summarizer.health_check():
        gemini_status = "unavailable"
        if overall != "unhealthy":
            overall = "degraded"

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        gemini=gemini_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
