"""
API endpoints for health checks and readiness probes.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Response

from bulletin.api.v1.models import HealthResponse
from bulletin.db.session import db_manager
from bulletin.db.redis import redis_manager
from bulletin.core.observability import health_monitor, get_logger


logger = get_logger(__name__)
router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Basic health check endpoint.

    Runs every registered health check and reports the aggregate status.
    """
    try:
        health_status = await health_monitor.check_health()
        return HealthResponse(**health_status)

    except Exception as e:
        logger.error("Health check failed", error=str(e))
        return HealthResponse(
            status="unhealthy",
            timestamp=datetime.now(timezone.utc),
            checks={
                "error": {
                    "status": "unhealthy",
                    "error": str(e)
                }
            }
        )


@router.get("/ready")
async def readiness_check(response: Response):
    """
    Readiness probe endpoint.

    The service is ready when the database answers. Redis is reported
    but optional, since caching and rate limiting degrade without it.
    """
    db_healthy = await db_manager.health_check()
    redis_healthy = await redis_manager.health_check()

    checks = {
        "database": {
            "status": "healthy" if db_healthy else "unhealthy",
            "connected": db_healthy
        },
        "redis": {
            "status": "healthy" if redis_healthy else "degraded",
            "connected": redis_healthy
        },
    }

    if not db_healthy:
        response.status_code = 503

    return {
        "ready": db_healthy,
        "timestamp": _now(),
        "checks": checks
    }


@router.get("/live")
async def liveness_check():
    """
    Simple liveness check endpoint.

    Does not check external dependencies.
    """
    return {"status": "alive", "timestamp": _now()}
