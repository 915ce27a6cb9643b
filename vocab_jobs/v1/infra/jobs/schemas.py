"""
Job system Pydantic schemas.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from vocab_jobs.v1.infra.jobs.models import JobPriority, JobStatus


class JobEnqueueRequest(BaseModel):
    """Schema for enqueueing jobs via API."""

    type: str = Field(..., min_length=1, description="Job type")
    data: Any = Field(default=None, description="Job payload")
    priority: JobPriority = Field(
        default=JobPriority.NORMAL, description="Job priority tier"
    )
    max_attempts: int | None = Field(
        default=None, ge=1, description="Attempt ceiling, defaults to settings"
    )


class JobEnqueueResponse(BaseModel):
    """Schema for job enqueue response."""

    job_id: str
    status: JobStatus


class JobResponse(BaseModel):
    """Schema for job API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    type: str
    data: Any = None
    priority: JobPriority
    status: JobStatus
    attempts: int
    max_attempts: int

    # Results
    result: Any = None
    error: str | None = None
    error_code: str | None = None

    # Timestamps
    created_at: datetime
    started_at: datetime | None = None
    completed_at: datetime | None = None
    failed_at: datetime | None = None


class JobListResponse(BaseModel):
    """Schema for job list API response."""

    jobs: list[JobResponse]
    total: int


class JobStatsResponse(BaseModel):
    """Schema for job statistics."""

    total: int
    pending: int
    processing: int
    completed: int
    failed: int
    retrying: int
    in_flight_count: int
    running: bool
    by_type: dict[str, int] = Field(default_factory=dict)


class ClearCompletedResponse(BaseModel):
    removed: int


class ScheduleListResponse(BaseModel):
    schedules: list[str]


class SendEmailJobData(BaseModel):
    """Payload of a send_email job."""

    to: str = Field(..., min_length=3, description="Recipient address")
    subject: str = Field(..., description="Email subject")
    body: str = Field(..., description="Email body")
    template: str | None = Field(default=None, description="Template name")


class SendNotificationJobData(BaseModel):
    """Payload of a send_notification job."""

    user_id: str = Field(..., description="Recipient user")
    type: str = Field(..., description="Notification category")
    title: str
    message: str
    data: dict[str, Any] | None = None


class CleanupDataJobData(BaseModel):
    """Payload of a cleanup_data job."""

    dry_run: bool = False
    scheduled_at: datetime | None = None


class ScheduledJobData(BaseModel):
    """Payload of a recurring job produced by the scheduler."""

    scheduled_at: datetime | None = None
