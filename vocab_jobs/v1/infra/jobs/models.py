"""
Job record and lifecycle state machine for in-process background processing.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from vocab_jobs.v1.core.exceptions import InvalidTransitionError


class JobStatus(str, Enum):
    """Job status enumeration."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    RETRYING = "retrying"


class JobPriority(str, Enum):
    """Job priority tiers, highest first."""

    CRITICAL = "critical"
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Selection rank, 0 is picked first."""
        return PRIORITY_ORDER.index(self)


PRIORITY_ORDER: list[JobPriority] = [
    JobPriority.CRITICAL,
    JobPriority.HIGH,
    JobPriority.NORMAL,
    JobPriority.LOW,
]

# Allowed status edges; completed and failed are terminal
TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.PROCESSING}),
    JobStatus.PROCESSING: frozenset(
        {JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.RETRYING}
    ),
    JobStatus.RETRYING: frozenset({JobStatus.PENDING}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
}


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass
class Job:
    """
    A unit of asynchronous work.

    Status changes go through the ``mark_*`` methods, which enforce the
    lifecycle edges in ``TRANSITIONS``:

    - pending -> processing (attempt counted, first start time recorded)
    - processing -> completed | failed | retrying
    - retrying -> pending

    Lifecycle timestamps are written once and never overwritten.
    """

    type: str
    data: Any = None
    priority: JobPriority = JobPriority.NORMAL
    max_attempts: int = 3
    id: str = field(default_factory=lambda: str(uuid4()))
    status: JobStatus = JobStatus.PENDING
    attempts: int = 0
    created_at: datetime = field(default_factory=_now)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    failed_at: datetime | None = None
    error: str | None = None
    error_code: str | None = None
    result: Any = None

    def __post_init__(self) -> None:
        self.priority = JobPriority(self.priority)
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got: {self.max_attempts}")

    def _transition(self, target: JobStatus) -> None:
        if target not in TRANSITIONS[self.status]:
            raise InvalidTransitionError(self.id, self.status.value, target.value)
        self.status = target

    def mark_processing(self) -> None:
        """Claim the job for one execution attempt."""
        if self.attempts >= self.max_attempts:
            raise InvalidTransitionError(
                self.id, self.status.value, JobStatus.PROCESSING.value
            )
        self._transition(JobStatus.PROCESSING)
        self.attempts += 1
        if self.started_at is None:
            self.started_at = _now()

    def mark_completed(self, result: Any) -> None:
        self._transition(JobStatus.COMPLETED)
        self.result = result
        self.completed_at = _now()

    def mark_retrying(self, error: str, error_code: str | None = None) -> None:
        if not self.can_retry():
            raise InvalidTransitionError(
                self.id, self.status.value, JobStatus.RETRYING.value
            )
        self._transition(JobStatus.RETRYING)
        self.error = error
        self.error_code = error_code

    def mark_failed(self, error: str, error_code: str | None = None) -> None:
        self._transition(JobStatus.FAILED)
        self.error = error
        self.error_code = error_code
        if self.failed_at is None:
            self.failed_at = _now()

    def mark_pending(self) -> None:
        """Return a retrying job to the eligible pool."""
        self._transition(JobStatus.PENDING)

    def can_retry(self) -> bool:
        """Check if the attempt budget allows another attempt."""
        return self.attempts < self.max_attempts

    def is_terminal(self) -> bool:
        return self.status in (JobStatus.COMPLETED, JobStatus.FAILED)

    def is_active(self) -> bool:
        """Check if job is in an active state (pending, processing, retrying)."""
        return not self.is_terminal()
