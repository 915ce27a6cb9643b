"""
Retry policy deciding what happens to a job after a failed attempt.
"""

from dataclasses import dataclass

from vocab_jobs.v1.core.exceptions import JobError
from vocab_jobs.v1.infra.jobs.models import Job


@dataclass(frozen=True)
class RetryDecision:
    """Outcome of evaluating a failed attempt."""

    retry: bool
    delay_ms: int = 0
    error: str = ""
    error_code: str = JobError.error_code


class RetryPolicy:
    """
    Linear retry policy.

    A failed attempt is retried while the job has attempts left, after
    ``base_delay_ms * attempts``. Errors flagged as not retryable (a missing
    handler) fail the job straight away.
    """

    def __init__(self, base_delay_ms: int):
        if base_delay_ms < 0:
            raise ValueError(f"base_delay_ms must be >= 0, got: {base_delay_ms}")
        self.base_delay_ms = base_delay_ms

    def delay_ms(self, attempts: int) -> int:
        """Delay before a job that has made ``attempts`` attempts runs again."""
        return self.base_delay_ms * attempts

    def is_retryable(self, exc: BaseException) -> bool:
        return getattr(exc, "retryable", True)

    def evaluate(self, job: Job, exc: BaseException) -> RetryDecision:
        error = str(exc) or exc.__class__.__name__
        error_code = getattr(exc, "error_code", JobError.error_code)

        if not self.is_retryable(exc) or not job.can_retry():
            return RetryDecision(retry=False, error=error, error_code=error_code)

        return RetryDecision(
            retry=True,
            delay_ms=self.delay_ms(job.attempts),
            error=error,
            error_code=error_code,
        )
