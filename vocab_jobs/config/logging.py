import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

from .settings import Settings, settings


def service_context(app_settings: Settings) -> Processor:
    """Build a processor stamping every event with the service identity."""

    def add_service_context(
        logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        event_dict.setdefault("service", app_settings.app_name)
        event_dict.setdefault("environment", app_settings.environment)
        return event_dict

    return add_service_context


def setup_logging(app_settings: Settings | None = None) -> None:
    """Configure structured logging with structlog."""
    app_settings = app_settings or settings
    level = getattr(logging, app_settings.log_level)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    processors: list[Processor] = [
        # Request and job context bound through contextvars
        structlog.contextvars.merge_contextvars,
        service_context(app_settings),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
    ]

    if app_settings.debug:
        processors += [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.CallsiteParameterAdder(
                parameters=[structlog.processors.CallsiteParameter.FUNC_NAME]
            ),
            structlog.dev.ConsoleRenderer(),
        ]
    else:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.WriteLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = __name__) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def add_request_context(request_id: str, **context: Any) -> None:
    """Add request-specific context to all log messages."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id, **context)


@contextmanager
def job_context(job_id: str, job_type: str, attempt: int) -> Iterator[None]:
    """
    Bind job identity for the duration of one execution attempt.

    Everything logged inside, including by the handler, carries ``job_id``,
    ``job_type`` and ``attempt``. The previous context is restored on exit.
    """
    with structlog.contextvars.bound_contextvars(
        job_id=job_id, job_type=job_type, attempt=attempt
    ):
        yield
