"""
In-memory job registry, queryable by id and by status.
"""

from collections import Counter
from typing import Any

from vocab_jobs.v1.infra.jobs.models import Job, JobPriority, JobStatus


class JobStore:
    """
    Holds every known job for the lifetime of its engine.

    Jobs are kept in submission order. Removal never reorders the jobs that
    remain, so enumeration order within one priority is FIFO by submission.
    """

    def __init__(self):
        self._jobs: dict[str, Job] = {}

    def create(
        self,
        job_type: str,
        data: Any = None,
        priority: JobPriority | str = JobPriority.NORMAL,
        max_attempts: int = 3,
    ) -> Job:
        """Create a pending job and register it."""
        job = Job(
            type=job_type,
            data=data,
            priority=JobPriority(priority),
            max_attempts=max_attempts,
        )
        self._jobs[job.id] = job
        return job

    def get(self, job_id: str) -> Job | None:
        return self._jobs.get(job_id)

    def all(self) -> list[Job]:
        return list(self._jobs.values())

    def by_status(self, status: JobStatus | str) -> list[Job]:
        status = JobStatus(status)
        return [job for job in self._jobs.values() if job.status == status]

    def next_pending(self) -> Job | None:
        """
        Return the pending job to run next.

        Highest priority wins; ties go to the earliest submitted job.
        """
        best: Job | None = None
        for job in self._jobs.values():
            if job.status != JobStatus.PENDING:
                continue
            if job.priority == JobPriority.CRITICAL:
                return job
            if best is None or job.priority.rank < best.priority.rank:
                best = job
        return best

    def clear_completed(self) -> int:
        """Remove completed jobs and return how many were removed."""
        completed = [
            job_id
            for job_id, job in self._jobs.items()
            if job.status == JobStatus.COMPLETED
        ]
        for job_id in completed:
            del self._jobs[job_id]
        return len(completed)

    def counts(self) -> dict[str, int]:
        """Number of jobs per status, every status present."""
        counter = Counter(job.status for job in self._jobs.values())
        return {status.value: counter.get(status, 0) for status in JobStatus}

    def counts_by_type(self) -> dict[str, int]:
        return dict(Counter(job.type for job in self._jobs.values()))

    def __len__(self) -> int:
        return len(self._jobs)

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._jobs
