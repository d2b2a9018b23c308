"""Health check endpoints."""

from typing import Any

from fastapi import APIRouter, status
from pydantic import BaseModel
from sqlalchemy import text

from pipeline_dashboard.api.deps import PublisherDep, SessionDep
from pipeline_dashboard.config import settings
from pipeline_dashboard.logging import get_logger
from pipeline_dashboard.services.automation_settings import (
    LAST_DAILY_TRIGGER_KEY,
    get_json_setting,
    get_system_status,
)

router = APIRouter(tags=["Health"])
logger = get_logger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    components: dict[str, str] | None = None


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool
    database: bool
    redis: bool
    components: dict[str, bool] | None = None
    automation: dict[str, Any] | None = None


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Basic health check endpoint that verifies the API is running.",
)
async def health_check() -> HealthResponse:
    """Basic health check - is the API up?

    Returns which providers are configured (not a full health check).
    """
    from pipeline_dashboard import __version__

    return HealthResponse(
        status="healthy",
        version=__version__,
        components={
            "publisher": settings.publisher_provider,
            "schedule_timezone": settings.schedule_timezone,
        },
    )


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Comprehensive readiness check that verifies all dependencies.",
)
async def readiness_check(session: SessionDep, publisher: PublisherDep) -> ReadinessResponse:
    """Readiness of the database, broker and publisher.

    Also reports the automation state (paused or active, last daily run). That
    part is informational and does not affect ``ready``.
    """
    database_ok = False
    automation = None
    try:
        session.execute(text("SELECT 1"))
        database_ok = True
        last_trigger = get_json_setting(session, LAST_DAILY_TRIGGER_KEY) or {}
        automation = {
            "system_status": get_system_status(session).value,
            "last_daily_run": last_trigger.get("run_date"),
            "last_triggered_at": last_trigger.get("triggered_at"),
        }
    except Exception as e:
        logger.error("database_health_check_failed", error=str(e))

    # Check Redis (Celery broker)
    redis_ok = False
    try:
        import redis

        r = redis.from_url(settings.redis_url)
        r.ping()
        redis_ok = True
    except Exception as e:
        logger.error("redis_health_check_failed", error=str(e))

    components = {"publisher": await publisher.health_check()}

    ready = database_ok and redis_ok and all(components.values())

    return ReadinessResponse(
        ready=ready,
        database=database_ok,
        redis=redis_ok,
        components=components,
        automation=automation,
    )


@router.get(
    "/health/live",
    status_code=status.HTTP_200_OK,
    summary="Liveness probe",
    description="Simple liveness probe for Kubernetes.",
)
async def liveness_check() -> dict[str, str]:
    """Kubernetes liveness probe - is the process alive?"""
    return {"status": "alive"}
