"""
Health check and activity feed endpoints.
"""

import time

from fastapi import APIRouter, Depends, Query

from fulfillment.api.dependencies import get_engine
from fulfillment.application.dto.responses import ActivityResponse, HealthResponse
from fulfillment.application.services import FulfillmentEngine
from fulfillment.config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["health"])

# Track startup time
_start_time = time.time()


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check.

    Returns service status and uptime.
    """
    return HealthResponse(
        status="healthy",
        uptime_seconds=time.time() - _start_time,
    )


@router.get("/health/database", response_model=HealthResponse)
async def database_health() -> HealthResponse:
    """Migration status of the configured database."""
    from fulfillment.infrastructure.storage.sqlite.migrations.migrator import (
        get_migration_status,
    )

    try:
        migration_status = await get_migration_status()
    except Exception as e:
        logger.warning("database_health_failed", error=str(e))
        return HealthResponse(
            status="unhealthy",
            uptime_seconds=time.time() - _start_time,
            database={"error": str(e)},
        )

    healthy = migration_status["exists"] and not migration_status["pending_migrations"]
    return HealthResponse(
        status="healthy" if healthy else "degraded",
        uptime_seconds=time.time() - _start_time,
        database=migration_status,
    )


@router.get("/activity", response_model=list[ActivityResponse])
async def recent_activity(
    limit: int = Query(default=50, ge=1, le=500),
    engine: FulfillmentEngine = Depends(get_engine),
) -> list[ActivityResponse]:
    """Most recent committed domain events, newest first."""
    if engine.sink is None:
        return []
    events = await engine.sink.recent(limit)
    return [ActivityResponse.model_validate(e) for e in events]
