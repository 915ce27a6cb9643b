"""
In-process job queue: priority dispatch, bounded concurrency, timeouts and retries.
"""

import asyncio
import inspect
from typing import Any

from vocab_jobs.config.logging import get_logger, job_context
from vocab_jobs.config.settings import Settings
from vocab_jobs.v1.core.exceptions import JobTimeoutError
from vocab_jobs.v1.core.registries import HandlerFunc, JobHandler, JobRegistry
from vocab_jobs.v1.infra.jobs.models import Job, JobPriority, JobStatus
from vocab_jobs.v1.infra.jobs.retry import RetryPolicy
from vocab_jobs.v1.infra.jobs.store import JobStore

logger = get_logger(__name__)


async def invoke_handler(handler: JobHandler | HandlerFunc, payload: Any) -> Any:
    """
    Call a handler with the job payload.

    Coroutine handlers are awaited on the event loop and can be cancelled.
    Plain functions run in a worker thread; a thread cannot be interrupted, so
    on timeout it keeps running in the background after the queue has given up
    waiting for it.
    """
    func = getattr(handler, "handle", handler)
    if inspect.iscoroutinefunction(func):
        return await func(payload)

    result = await asyncio.to_thread(func, payload)
    if inspect.isawaitable(result):
        result = await result
    return result


def _loop_is_running() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


class JobQueue:
    """
    In-memory background job queue.

    Features:
    - Strict priority selection (critical > high > normal > low), FIFO within a tier
    - Concurrency ceiling on executing jobs
    - Per-attempt timeout with cancellation of coroutine handlers
    - Linear retry delay, permanent failure once attempts are exhausted
    - Event-driven dispatch, no idle polling
    """

    def __init__(
        self,
        settings: Settings,
        registry: JobRegistry | None = None,
        store: JobStore | None = None,
        retry_policy: RetryPolicy | None = None,
    ):
        self.settings = settings
        self.registry = registry if registry is not None else JobRegistry()
        self.store = store if store is not None else JobStore()
        self.retry_policy = (
            retry_policy
            if retry_policy is not None
            else RetryPolicy(settings.job_retry_delay_ms)
        )
        self.running = False
        self.active_jobs: set[str] = set()
        self._tasks: dict[str, asyncio.Task] = {}
        self._retry_timers: dict[str, asyncio.TimerHandle] = {}
        self._wakeup = asyncio.Event()
        self._loop_task: asyncio.Task | None = None

    def register_handler(
        self, job_type: str, handler: JobHandler | HandlerFunc, replace: bool = False
    ) -> None:
        """Register the handler that executes jobs of ``job_type``."""
        self.registry.register(job_type, handler, replace=replace)
        logger.debug("Job handler registered", job_type=job_type, replace=replace)

    def add(
        self,
        job_type: str,
        data: Any = None,
        priority: JobPriority | str | None = None,
        max_attempts: int | None = None,
    ) -> str:
        """
        Submit a job and return its id without waiting for it to run.

        A missing or non-positive ``max_attempts`` falls back to
        ``settings.job_max_attempts``. Starts the dispatch loop if it is not
        running and auto start is enabled. Outside an event loop the job is
        only queued.
        """
        if not max_attempts or max_attempts < 1:
            max_attempts = self.settings.job_max_attempts

        job = self.store.create(
            job_type,
            data,
            priority=priority if priority is not None else JobPriority.NORMAL,
            max_attempts=max_attempts,
        )

        logger.debug(
            "Job enqueued",
            job_id=job.id,
            job_type=job.type,
            priority=job.priority.value,
            max_attempts=job.max_attempts,
        )

        self._wakeup.set()
        if self.settings.job_auto_start and not self.running and _loop_is_running():
            self.start()

        return job.id

    def start(self) -> None:
        """Start the dispatch loop on the running event loop."""
        loop = asyncio.get_running_loop()
        if self.running:
            return

        self.running = True
        logger.info(
            "Starting job queue",
            concurrency=self.settings.job_concurrency,
            timeout_ms=self.settings.job_timeout_ms,
            retry_delay_ms=self.settings.job_retry_delay_ms,
        )

        # A loop stopped but not yet woken keeps going instead of a second one
        if self._loop_task is None or self._loop_task.done():
            self._loop_task = loop.create_task(
                self._dispatch_loop(), name="job-queue-dispatch"
            )
        self._wakeup.set()

    def stop(self) -> None:
        """
        Stop dispatching new jobs.

        Executing jobs and scheduled retries still finish their transitions.
        """
        if not self.running:
            return

        self.running = False
        self._wakeup.set()
        logger.info("Stopping job queue", active_jobs=len(self.active_jobs))

    async def drain(self, timeout: float | None = None) -> bool:
        """Wait for executing jobs. Returns False if some were still running."""
        tasks = list(self._tasks.values())
        if not tasks:
            return True

        _, still_running = await asyncio.wait(tasks, timeout=timeout)
        if still_running:
            logger.warning(
                "Job queue drained with active jobs", active_jobs=len(still_running)
            )
        return not still_running

    async def shutdown(self, timeout: float | None = 30) -> None:
        """Stop, wait for executing jobs and drop pending retry timers."""
        self.stop()
        await self.drain(timeout)

        for handle in self._retry_timers.values():
            handle.cancel()
        self._retry_timers.clear()

        if self._loop_task is not None and not self._loop_task.done():
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
        self._loop_task = None

    async def _dispatch_loop(self) -> None:
        """Select and dispatch jobs until stopped."""
        while self.running:
            try:
                job = None
                if len(self.active_jobs) < self.settings.job_concurrency:
                    job = self.store.next_pending()

                if job is None:
                    # Saturated or idle: sleep until something changes
                    self._wakeup.clear()
                    await self._wakeup.wait()
                    continue

                self._dispatch(job)

            except Exception:
                logger.exception("Error in dispatch loop")
                self._wakeup.clear()
                await self._wakeup.wait()

    def _dispatch(self, job: Job) -> None:
        job.mark_processing()
        self.active_jobs.add(job.id)
        self._tasks[job.id] = asyncio.create_task(
            self._process_job(job), name=f"job-{job.id}"
        )

    async def _process_job(self, job: Job) -> None:
        """Run one attempt of a job and record the outcome."""
        with job_context(job.id, job.type, job.attempts):
            job_logger = logger.bind(max_attempts=job.max_attempts)

            try:
                handler = self.registry.get(job.type)
                result = await self._run_handler(handler, job)

            except Exception as e:
                self._handle_failure(job, e, job_logger)

            else:
                job.mark_completed(result)
                job_logger.info("Job completed successfully")

            finally:
                self.active_jobs.discard(job.id)
                self._tasks.pop(job.id, None)
                self._wakeup.set()

    async def _run_handler(self, handler: JobHandler | HandlerFunc, job: Job) -> Any:
        timeout_ms = self.settings.job_timeout_ms
        try:
            return await asyncio.wait_for(
                invoke_handler(handler, job.data), timeout=timeout_ms / 1000
            )
        except TimeoutError:
            raise JobTimeoutError(timeout_ms) from None

    def _handle_failure(self, job: Job, exc: Exception, job_logger: Any) -> None:
        decision = self.retry_policy.evaluate(job, exc)

        if decision.retry:
            job.mark_retrying(decision.error, decision.error_code)
            self._schedule_retry(job.id, decision.delay_ms)
            job_logger.warning(
                "Job failed, retry scheduled",
                error=decision.error,
                error_code=decision.error_code,
                delay_ms=decision.delay_ms,
            )
        else:
            job.mark_failed(decision.error, decision.error_code)
            job_logger.error(
                "Job failed permanently",
                error=decision.error,
                error_code=decision.error_code,
                exc_info=exc,
            )

    def _schedule_retry(self, job_id: str, delay_ms: int) -> None:
        loop = asyncio.get_running_loop()
        self._retry_timers[job_id] = loop.call_later(
            delay_ms / 1000, self._release_retry, job_id
        )

    def _release_retry(self, job_id: str) -> None:
        """Make a retrying job eligible again, if it is still in the store."""
        self._retry_timers.pop(job_id, None)
        job = self.store.get(job_id)
        if job is None or job.status != JobStatus.RETRYING:
            return

        job.mark_pending()
        self._wakeup.set()

    def get_job(self, job_id: str) -> Job | None:
        return self.store.get(job_id)

    def get_all_jobs(self) -> list[Job]:
        return self.store.all()

    def get_jobs_by_status(self, status: JobStatus | str) -> list[Job]:
        return self.store.by_status(status)

    def clear_completed(self) -> int:
        """Remove completed jobs from the store."""
        removed = self.store.clear_completed()
        if removed > 0:
            logger.info("Cleared completed jobs", removed_count=removed)
        return removed

    def get_stats(self) -> dict[str, Any]:
        """Job counts per status plus dispatcher state."""
        return {
            "total": len(self.store),
            **self.store.counts(),
            "in_flight_count": len(self.active_jobs),
            "running": self.running,
            "by_type": self.store.counts_by_type(),
        }
