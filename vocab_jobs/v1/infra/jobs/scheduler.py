"""
Recurring job scheduler feeding the job queue on fixed intervals.
"""

import asyncio
import inspect
from collections.abc import Callable
from typing import Any

from vocab_jobs.config.logging import get_logger
from vocab_jobs.v1.infra.jobs.models import JobPriority
from vocab_jobs.v1.infra.jobs.worker import JobQueue

logger = get_logger(__name__)

DataProducer = Callable[[], Any]


class JobScheduler:
    """
    Named timers that periodically enqueue jobs.

    Each tick calls the schedule's data producer (sync or async) and submits
    the produced data to the queue. A producer that raises is logged and
    skips that tick only.
    """

    def __init__(self, queue: JobQueue):
        self.queue = queue
        self._schedules: dict[str, asyncio.Task] = {}

    def schedule(
        self,
        name: str,
        job_type: str,
        data_producer: DataProducer,
        interval_ms: int,
        priority: JobPriority | str | None = None,
        run_immediately: bool = False,
    ) -> None:
        """
        Register a recurring job, replacing any schedule with the same name.

        Must be called from a running event loop.
        """
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got: {interval_ms}")

        loop = asyncio.get_running_loop()
        self.unschedule(name)

        self._schedules[name] = loop.create_task(
            self._run_schedule(
                name, job_type, data_producer, interval_ms, priority, run_immediately
            ),
            name=f"schedule-{name}",
        )

        logger.info(
            "Recurring job scheduled",
            schedule=name,
            job_type=job_type,
            interval_ms=interval_ms,
            run_immediately=run_immediately,
        )

    def unschedule(self, name: str) -> bool:
        """Cancel a schedule. Returns False if no schedule had that name."""
        task = self._schedules.pop(name, None)
        if task is None:
            return False

        task.cancel()
        logger.info("Recurring job unscheduled", schedule=name)
        return True

    def unschedule_all(self) -> None:
        for name in list(self._schedules):
            self.unschedule(name)

    def get_schedules(self) -> list[str]:
        return list(self._schedules.keys())

    async def _run_schedule(
        self,
        name: str,
        job_type: str,
        data_producer: DataProducer,
        interval_ms: int,
        priority: JobPriority | str | None,
        run_immediately: bool,
    ) -> None:
        loop = asyncio.get_running_loop()
        interval_s = interval_ms / 1000

        if run_immediately:
            await self._run_scheduled_job(name, job_type, data_producer, priority)

        # Fixed cadence from registration, independent of producer run time
        next_tick = loop.time() + interval_s
        while True:
            await asyncio.sleep(max(0.0, next_tick - loop.time()))
            next_tick += interval_s
            await self._run_scheduled_job(name, job_type, data_producer, priority)

    async def _run_scheduled_job(
        self,
        name: str,
        job_type: str,
        data_producer: DataProducer,
        priority: JobPriority | str | None,
    ) -> None:
        try:
            data = data_producer()
            if inspect.isawaitable(data):
                data = await data
            job_id = self.queue.add(job_type, data, priority=priority)

        except Exception:
            logger.exception(
                "Scheduled job failed to queue", schedule=name, job_type=job_type
            )
            return

        logger.debug(
            "Scheduled job queued", schedule=name, job_type=job_type, job_id=job_id
        )
