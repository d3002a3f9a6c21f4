"""
Health Check Router
===================

Provides health, readiness, and liveness endpoints.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import get_db
from app.config import settings
from app.schemas import HealthResponse, ReadyResponse
from app import services

router = APIRouter(tags=["Health"])

logger = logging.getLogger(__name__)


@router.get("/health", response_model=HealthResponse)
async def health_check(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """
    Health check endpoint.

    Reports database status; the service is degraded without it.
    """
    db_status = "healthy"

    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning(f"Health check database probe failed: {e}")
        db_status = "unhealthy"

    overall_status = "healthy" if db_status == "healthy" else "degraded"

    return HealthResponse(
        status=overall_status,
        version=settings.api_version,
        timestamp=datetime.now(timezone.utc),
        database=db_status,
        environment=settings.environment
    )


@router.get("/ready", response_model=ReadyResponse)
async def readiness_check(db: AsyncSession = Depends(get_db)) -> ReadyResponse:
    """
    Kubernetes readiness probe.

    Ready when the database answers. An active season is reported but
    not required.
    """
    checks = {}

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = True
    except Exception:
        checks["database"] = False

    ready = all(checks.values())

    if checks["database"]:
        checks["active_season"] = await services.get_active_season(db) is not None

    return ReadyResponse(ready=ready, checks=checks)


@router.get("/live")
async def liveness_check() -> dict:
    """
    Kubernetes liveness probe.

    Simple check that the service is responding.
    """
    return {"alive": True}
