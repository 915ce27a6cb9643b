import asyncio
from collections.abc import AsyncGenerator, Generator

import pytest
from fastapi.testclient import TestClient

from vocab_jobs.config.settings import Settings
from vocab_jobs.main import create_app
from vocab_jobs.v1.infra.jobs.scheduler import JobScheduler
from vocab_jobs.v1.infra.jobs.worker import JobQueue


@pytest.fixture
def test_settings() -> Settings:
    """Engine settings with short delays for fast tests."""
    return Settings(
        job_concurrency=2,
        job_max_attempts=3,
        job_retry_delay_ms=10,
        job_timeout_ms=500,
        job_recurring_enabled=False,
    )


@pytest.fixture
async def queue(test_settings: Settings) -> AsyncGenerator[JobQueue, None]:
    """A job queue that starts on first submission."""
    job_queue = JobQueue(test_settings)
    yield job_queue
    await job_queue.shutdown(timeout=1)


@pytest.fixture
async def idle_queue(test_settings: Settings) -> AsyncGenerator[JobQueue, None]:
    """A job queue that only dispatches after an explicit start()."""
    job_queue = JobQueue(test_settings.model_copy(update={"job_auto_start": False}))
    yield job_queue
    await job_queue.shutdown(timeout=1)


@pytest.fixture
async def scheduler(idle_queue: JobQueue) -> AsyncGenerator[JobScheduler, None]:
    job_scheduler = JobScheduler(idle_queue)
    yield job_scheduler
    job_scheduler.unschedule_all()


@pytest.fixture
def wait_for_status():
    """Poll a queue until a job reaches one of the given statuses."""

    async def _wait(queue: JobQueue, job_id: str, *statuses, timeout: float = 2.0):
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while True:
            job = queue.get_job(job_id)
            if job is not None and job.status in statuses:
                return job
            if loop.time() > deadline:
                current = job.status if job else None
                raise AssertionError(
                    f"Job {job_id} did not reach {statuses}, last status: {current}"
                )
            await asyncio.sleep(0.005)

    return _wait


@pytest.fixture
def app_settings() -> Settings:
    return Settings(
        job_concurrency=2,
        job_retry_delay_ms=10,
        job_timeout_ms=1000,
        job_recurring_enabled=False,
    )


@pytest.fixture
def app(app_settings: Settings):
    """Create a test FastAPI application with its own job engine."""
    return create_app(app_settings)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client; the job engine runs for the client's lifetime."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def idle_queue_sync(test_settings: Settings) -> JobQueue:
    """A job queue for tests that run outside an event loop."""
    return JobQueue(test_settings.model_copy(update={"job_auto_start": False}))
