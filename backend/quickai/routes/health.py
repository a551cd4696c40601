"""
QuickAI Backend - Liveness & Health Routes
===========================================

GET /        → plain-text liveness string, no dependencies touched
GET /health  → database and Gemini connectivity

Status levels:
    healthy    both dependencies reachable
    degraded   Gemini unreachable (text actions will fail, images still work)
    unhealthy  database unreachable (no action can record its creation)
"""

import logging
import time

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
from sqlalchemy import text

from quickai import __version__
from quickai.database import engine
from quickai.schemas.action import HealthResponse
from quickai.services.gemini_service import gemini_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/", response_class=PlainTextResponse, summary="Liveness check")
async def root() -> str:
    return "Server is LIVE..."


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Reports database and Gemini connectivity for uptime checks and monitoring.",
)
async def health_check() -> HealthResponse:
    """
    Check the database with SELECT 1 and Gemini with list_models.

    Always answers 200; `status` carries the verdict.
    """
    db_status = "connected"
    gemini_status = "available"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    try:
        if not await gemini_service.health_check():
            gemini_status = "unavailable"
    except Exception as e:
        gemini_status = "unavailable"
        logger.warning("Health check: Gemini unreachable: %s", str(e))

    if gemini_status != "available" and overall == "healthy":
        overall = "degraded"

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        gemini=gemini_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
