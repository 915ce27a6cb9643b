"""
Built-in job handlers.

Each handler implements the JobHandler protocol and is registered on the job
queue by ``registry_init.initialize_background_jobs``. Delivery of emails and
notifications belongs to the application; these handlers validate the payload,
log the dispatch and report what was sent.
"""

from collections.abc import Callable, Iterable
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from vocab_jobs.config.logging import get_logger
from vocab_jobs.v1.core.exceptions import ValidationError
from vocab_jobs.v1.infra.jobs.models import JobPriority
from vocab_jobs.v1.infra.jobs.schemas import (
    CleanupDataJobData,
    ScheduledJobData,
    SendEmailJobData,
    SendNotificationJobData,
)

logger = get_logger(__name__)


class JobTypes(str, Enum):
    """Common job type tags."""

    SEND_EMAIL = "send_email"
    SEND_NOTIFICATION = "send_notification"
    UPDATE_STREAKS = "update_streaks"
    DAILY_REMINDERS = "daily_reminders"
    CLEANUP_DATA = "cleanup_data"


def _parse(model, payload: Any):
    try:
        return model.model_validate(payload or {})
    except PydanticValidationError as e:
        raise ValidationError(
            f"Invalid {model.__name__} payload", details={"errors": e.errors()}
        ) from e


class SendEmailHandler:
    """
    Job handler for outgoing emails.

    Payload expected:
    {
        "to": "learner@example.com",
        "subject": "Your weekly progress",
        "body": "...",
        "template": "weekly_progress"  # optional
    }
    """

    async def handle(self, payload: Any) -> dict[str, Any]:
        email = _parse(SendEmailJobData, payload)

        logger.info(
            "Sending email",
            to=email.to,
            subject=email.subject,
            template=email.template,
        )

        return {"sent": True, "to": email.to}


class SendNotificationHandler:
    """
    Job handler for in-app notifications.

    Payload expected:
    {
        "user_id": "user-123",
        "type": "streak",
        "title": "Keep it up!",
        "message": "...",
        "data": {}  # optional
    }
    """

    async def handle(self, payload: Any) -> dict[str, Any]:
        notification = _parse(SendNotificationJobData, payload)

        logger.info(
            "Sending notification",
            user_id=notification.user_id,
            notification_type=notification.type,
            title=notification.title,
        )

        return {"sent": True, "user_id": notification.user_id}


class CleanupDataHandler:
    """
    Job handler for maintenance cleanup of finished jobs.

    Payload expected:
    {
        "dry_run": false  # optional
    }
    """

    def __init__(
        self,
        clear_completed: Callable[[], int],
        count_completed: Callable[[], int] | None = None,
    ):
        self.clear_completed = clear_completed
        self.count_completed = count_completed

    async def handle(self, payload: Any) -> dict[str, Any]:
        params = _parse(CleanupDataJobData, payload)

        if params.dry_run:
            would_remove = self.count_completed() if self.count_completed else None
            logger.info("Cleanup dry run", would_remove=would_remove)
            return {"status": "dry_run", "would_remove": would_remove}

        removed = self.clear_completed()
        logger.info("Cleanup completed", removed_count=removed)
        return {"status": "completed", "removed_count": removed}


class DailyRemindersHandler:
    """
    Job handler that fans out one notification job per learner due a reminder.

    Payload expected:
    {
        "scheduled_at": "2026-01-01T08:00:00+00:00"  # optional
    }
    """

    def __init__(
        self,
        enqueue: Callable[..., str],
        recipients: Callable[[], Iterable[str]] | None = None,
    ):
        self.enqueue = enqueue
        self.recipients = recipients

    async def handle(self, payload: Any) -> dict[str, Any]:
        params = _parse(ScheduledJobData, payload)
        user_ids = list(self.recipients()) if self.recipients else []

        job_ids = [
            self.enqueue(
                JobTypes.SEND_NOTIFICATION.value,
                {
                    "user_id": user_id,
                    "type": "daily_reminder",
                    "title": "Time for your daily review",
                    "message": "Your vocabulary cards are waiting.",
                },
                priority=JobPriority.HIGH,
            )
            for user_id in user_ids
        ]

        logger.info(
            "Daily reminders queued",
            reminders_queued=len(job_ids),
            scheduled_at=params.scheduled_at.isoformat() if params.scheduled_at else None,
        )
        return {"status": "completed", "reminders_queued": len(job_ids)}


class UpdateStreaksHandler:
    """
    Job handler that recomputes learner streaks.

    The streak calculation is supplied by the application and returns how many
    learners it updated.
    """

    def __init__(self, update_streaks: Callable[[datetime | None], int] | None = None):
        self.update_streaks = update_streaks

    async def handle(self, payload: Any) -> dict[str, Any]:
        params = _parse(ScheduledJobData, payload)
        if self.update_streaks is None:
            updated = 0
        else:
            updated = self.update_streaks(params.scheduled_at)

        logger.info("Streaks updated", updated_count=updated)
        return {"status": "completed", "updated_count": updated}
