"""Liveness and database readiness endpoints."""

import time

from fastapi import APIRouter

from stockmaster import __version__
from stockmaster.application.dto.responses import ComponentHealthResponse, HealthResponse
from stockmaster.config import get_logger

router = APIRouter(prefix="/api/health", tags=["health"])
logger = get_logger(__name__)

_started = time.monotonic()


def _uptime() -> float:
    return time.monotonic() - _started


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Process is up."""
    return HealthResponse(status="healthy", version=__version__, uptime_seconds=_uptime())


@router.get("/db", response_model=HealthResponse)
async def db_health() -> HealthResponse:
    """Pool can reach the database; reports the applied schema version."""
    from stockmaster.infrastructure.storage.sqlite import get_pool
    from stockmaster.infrastructure.storage.sqlite.migrations import get_current_version

    try:
        pool = await get_pool()
        latency = await pool.ping()
        async with pool.acquire() as conn:
            schema_version = await get_current_version(conn)
        database = ComponentHealthResponse(
            available=True,
            latency_ms=round(latency, 2),
            details={"engine": "sqlite", "schema_version": schema_version},
        )
    except Exception as e:
        logger.warning("database_health_failed", error=str(e))
        database = ComponentHealthResponse(
            available=False, error=str(e), details={"engine": "sqlite"}
        )

    return HealthResponse(
        status="healthy" if database.available else "unhealthy",
        version=__version__,
        uptime_seconds=_uptime(),
        database=database,
    )
