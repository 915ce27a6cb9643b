"""
Background job bootstrap.

Registers the built-in job handlers and recurring schedules on an engine
instance and starts it.
"""

from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from vocab_jobs.config.logging import get_logger
from vocab_jobs.config.settings import Settings
from vocab_jobs.v1.infra.jobs.handlers import (
    CleanupDataHandler,
    DailyRemindersHandler,
    JobTypes,
    SendEmailHandler,
    SendNotificationHandler,
    UpdateStreaksHandler,
)
from vocab_jobs.v1.infra.jobs.models import JobPriority, JobStatus
from vocab_jobs.v1.infra.jobs.scheduler import JobScheduler
from vocab_jobs.v1.infra.jobs.worker import JobQueue

logger = get_logger(__name__)

CLEANUP_SCHEDULE = "cleanup-completed-jobs"
REMINDERS_SCHEDULE = "daily-reminders"
STREAKS_SCHEDULE = "update-streaks"


def _scheduled_payload() -> dict[str, str]:
    return {"scheduled_at": datetime.now(UTC).isoformat()}


def register_job_handlers(
    queue: JobQueue,
    reminder_recipients: Callable[[], Iterable[str]] | None = None,
    streak_updater: Callable[[datetime | None], int] | None = None,
) -> None:
    """Register all built-in job handlers with the queue."""

    logger.info("Registering job handlers")

    # Delivery handlers
    queue.register_handler(JobTypes.SEND_EMAIL.value, SendEmailHandler())
    queue.register_handler(
        JobTypes.SEND_NOTIFICATION.value, SendNotificationHandler()
    )

    # Learner engagement handlers
    queue.register_handler(
        JobTypes.DAILY_REMINDERS.value,
        DailyRemindersHandler(enqueue=queue.add, recipients=reminder_recipients),
    )
    queue.register_handler(
        JobTypes.UPDATE_STREAKS.value, UpdateStreaksHandler(streak_updater)
    )

    # Maintenance handlers
    queue.register_handler(
        JobTypes.CLEANUP_DATA.value,
        CleanupDataHandler(
            clear_completed=queue.clear_completed,
            count_completed=lambda: len(queue.get_jobs_by_status(JobStatus.COMPLETED)),
        ),
    )

    logger.info("Job handlers registered", registered_handlers=queue.registry.list())


def register_recurring_jobs(scheduler: JobScheduler, settings: Settings) -> None:
    """Register built-in recurring schedules."""
    scheduler.schedule(
        REMINDERS_SCHEDULE,
        JobTypes.DAILY_REMINDERS.value,
        _scheduled_payload,
        settings.job_reminders_interval_ms,
        priority=JobPriority.HIGH,
    )
    scheduler.schedule(
        STREAKS_SCHEDULE,
        JobTypes.UPDATE_STREAKS.value,
        _scheduled_payload,
        settings.job_streaks_interval_ms,
        priority=JobPriority.NORMAL,
    )
    scheduler.schedule(
        CLEANUP_SCHEDULE,
        JobTypes.CLEANUP_DATA.value,
        _scheduled_payload,
        settings.job_cleanup_interval_ms,
        priority=JobPriority.LOW,
    )


def initialize_background_jobs(
    queue: JobQueue,
    scheduler: JobScheduler,
    settings: Settings,
    reminder_recipients: Callable[[], Iterable[str]] | None = None,
    streak_updater: Callable[[datetime | None], int] | None = None,
) -> None:
    """Register handlers and schedules, then start processing."""
    register_job_handlers(queue, reminder_recipients, streak_updater)

    if settings.job_recurring_enabled:
        register_recurring_jobs(scheduler, settings)

    queue.start()

    logger.info(
        "Background jobs initialized",
        handlers=queue.registry.list(),
        schedules=scheduler.get_schedules(),
    )
