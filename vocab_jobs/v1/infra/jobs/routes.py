"""
Job management API endpoints.

Provides admin endpoints for job enqueueing, monitoring, and cleanup.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query, Request

from vocab_jobs.config.logging import get_logger
from vocab_jobs.v1.core.exceptions import NotFoundError, create_success_response
from vocab_jobs.v1.infra.jobs.models import JobStatus
from vocab_jobs.v1.infra.jobs.scheduler import JobScheduler
from vocab_jobs.v1.infra.jobs.schemas import (
    ClearCompletedResponse,
    JobEnqueueRequest,
    JobEnqueueResponse,
    JobListResponse,
    JobResponse,
    JobStatsResponse,
    ScheduleListResponse,
)
from vocab_jobs.v1.infra.jobs.worker import JobQueue

logger = get_logger(__name__)
router = APIRouter(prefix="/jobs", tags=["jobs"])


def get_job_queue(request: Request) -> JobQueue:
    """Dependency returning the application's job queue."""
    return request.app.state.job_queue


def get_job_scheduler(request: Request) -> JobScheduler:
    """Dependency returning the application's recurring job scheduler."""
    return request.app.state.job_scheduler


JobQueueDep = Depends(get_job_queue)
JobSchedulerDep = Depends(get_job_scheduler)


@router.post("", response_model=dict)
async def enqueue_job(
    job_request: JobEnqueueRequest, queue: JobQueue = JobQueueDep
) -> dict[str, Any]:
    """Enqueue a new background job."""
    job_id = queue.add(
        job_request.type,
        job_request.data,
        priority=job_request.priority,
        max_attempts=job_request.max_attempts,
    )
    job = queue.get_job(job_id)

    logger.info(
        "Job enqueued via API",
        job_id=job_id,
        job_type=job_request.type,
        priority=job_request.priority.value,
    )

    response = JobEnqueueResponse(job_id=job_id, status=job.status)
    return create_success_response(data=response.model_dump(mode="json"))


@router.get("", response_model=dict)
async def list_jobs(
    status: JobStatus | None = Query(default=None, description="Filter by status"),
    type: str | None = Query(default=None, description="Filter by job type"),
    queue: JobQueue = JobQueueDep,
) -> dict[str, Any]:
    """List jobs in submission order, optionally filtered."""
    jobs = queue.get_jobs_by_status(status) if status else queue.get_all_jobs()
    if type:
        jobs = [job for job in jobs if job.type == type]

    response = JobListResponse(
        jobs=[JobResponse.model_validate(job) for job in jobs], total=len(jobs)
    )
    return create_success_response(data=response.model_dump(mode="json"))


@router.get("/stats", response_model=dict)
async def get_job_stats(queue: JobQueue = JobQueueDep) -> dict[str, Any]:
    """Get job statistics."""
    stats = JobStatsResponse(**queue.get_stats())
    return create_success_response(data=stats.model_dump(mode="json"))


@router.get("/schedules", response_model=dict)
async def list_schedules(
    scheduler: JobScheduler = JobSchedulerDep,
) -> dict[str, Any]:
    """List registered recurring schedules."""
    response = ScheduleListResponse(schedules=scheduler.get_schedules())
    return create_success_response(data=response.model_dump())


@router.delete("/completed", response_model=dict)
async def clear_completed_jobs(queue: JobQueue = JobQueueDep) -> dict[str, Any]:
    """Remove completed jobs from the queue."""
    response = ClearCompletedResponse(removed=queue.clear_completed())
    return create_success_response(data=response.model_dump())


@router.get("/{job_id}", response_model=dict)
async def get_job(job_id: str, queue: JobQueue = JobQueueDep) -> dict[str, Any]:
    """Get job details by ID."""
    job = queue.get_job(job_id)
    if job is None:
        raise NotFoundError(f"Job not found: {job_id}", details={"job_id": job_id})

    response = JobResponse.model_validate(job)
    return create_success_response(data=response.model_dump(mode="json"))
