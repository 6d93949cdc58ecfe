"""Liveness, readiness and database ping routes."""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.database import get_db
from ..core.observability import SERVICE_NAME, SERVICE_VERSION
from ..schemas.health import HealthResponse, HealthStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/health", tags=["health"])

# Unversioned probes for orchestrators
probes = APIRouter(tags=["Health"])


async def database_answers(db: AsyncSession) -> bool:
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("Database health check failed", extra={"error": str(e)})
        return False
    return True


@router.post("/ping", response_model=HealthResponse)
async def health_ping(db: AsyncSession = Depends(get_db)) -> JSONResponse:
    """Service status; degraded when the tour store does not answer."""
    reachable = await database_answers(db)

    response_data = HealthResponse(
        status=HealthStatus.HEALTHY if reachable else HealthStatus.DEGRADED,
        service=SERVICE_NAME,
        timestamp=datetime.utcnow(),
        version=SERVICE_VERSION,
        database="ok" if reachable else "unavailable",
    )
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@probes.get("/health", summary="Liveness Check")
async def liveness() -> dict:
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "environment": settings.environment,
    }


@probes.get("/ready", summary="Readiness Check")
async def readiness(db: AsyncSession = Depends(get_db)) -> JSONResponse:
    """Ready once the tour store accepts queries."""
    if not await database_answers(db):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "service": SERVICE_NAME},
        )
    return JSONResponse(status_code=200, content={"status": "ready", "service": SERVICE_NAME})
