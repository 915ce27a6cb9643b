from datetime import UTC, datetime

from fastapi import APIRouter
from pydantic import BaseModel

from vocab_jobs.config.settings import Settings, SettingsDep
from vocab_jobs.v1.core.exceptions import create_success_response
from vocab_jobs.v1.infra.jobs.routes import JobQueueDep
from vocab_jobs.v1.infra.jobs.worker import JobQueue

router = APIRouter()


class WorkerHealth(BaseModel):
    """Job queue health status."""

    running: bool
    active_jobs: int
    queue_depth: int = 0
    failed_jobs: int = 0


@router.get("/healthz", response_model=dict)
async def health_check(
    settings: Settings = SettingsDep, queue: JobQueue = JobQueueDep
):
    """Health check endpoint with job queue status."""
    stats = queue.get_stats()

    worker_health = WorkerHealth(
        running=stats["running"],
        active_jobs=stats["in_flight_count"],
        queue_depth=stats["pending"] + stats["processing"] + stats["retrying"],
        failed_jobs=stats["failed"],
    )

    health_data = {
        "ok": True,
        "version": settings.version,
        "environment": settings.environment,
        "timestamp": datetime.now(UTC).isoformat(),
        "worker": worker_health.model_dump(),
    }

    return create_success_response(data=health_data)
