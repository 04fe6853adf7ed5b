from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from jobrelay.config.logging import get_logger
from jobrelay.infra.container import Services, get_services
from jobrelay.v1.core.exceptions import create_success_response
from jobrelay.v1.infra.jobs.models import JobStatus

logger = get_logger(__name__)
router = APIRouter()


class DatabaseHealth(BaseModel):
    """Database health status."""

    connected: bool
    response_time_ms: float | None = None
    error: str | None = None


class QueueHealth(BaseModel):
    """Job queue status as seen from the job store."""

    by_status: dict[str, int]
    in_flight: int = 0
    publishing_configured: bool
    signing_configured: bool


@router.get("/healthz", response_model=dict)
async def health_check(services: Services = Depends(get_services)):
    """Health check with database connectivity and job counts."""
    settings = services.settings
    timestamp = datetime.now(UTC).isoformat()

    db_health = await _check_database_health(services)

    queue_health = None
    if db_health.connected:
        try:
            by_status = await services.store.count_by_status()
            queue_health = QueueHealth(
                by_status=by_status,
                in_flight=by_status[JobStatus.QUEUED.value]
                + by_status[JobStatus.PROCESSING.value],
                publishing_configured=bool(
                    settings.queue_token and settings.callback_url
                ),
                signing_configured=bool(settings.signing_keys),
            )
        except Exception as e:
            # Queue stats are informational; connectivity decides overall health
            logger.warning("Job stats unavailable", error=str(e))

    health_data = {
        "ok": db_health.connected,
        "version": settings.version,
        "environment": settings.environment,
        "timestamp": timestamp,
        "database": db_health.model_dump(),
        "queue": queue_health.model_dump() if queue_health else None,
    }

    return create_success_response(data=health_data)


async def _check_database_health(services: Services) -> DatabaseHealth:
    """Check database connectivity and response time."""
    start_time = datetime.now(UTC)

    try:
        await services.database.ping()

        end_time = datetime.now(UTC)
        response_time_ms = (end_time - start_time).total_seconds() * 1000

        return DatabaseHealth(
            connected=True, response_time_ms=round(response_time_ms, 2)
        )

    except Exception as e:
        return DatabaseHealth(connected=False, error=str(e))
