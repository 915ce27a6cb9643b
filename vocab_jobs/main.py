from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from vocab_jobs.config.logging import get_logger, setup_logging
from vocab_jobs.config.settings import Settings, get_settings, settings
from vocab_jobs.v1.core.exceptions import (
    RequestContextMiddleware,
    VocabJobsException,
    general_exception_handler,
    http_exception_handler,
    vocab_jobs_exception_handler,
)
from vocab_jobs.v1.healthz import router as health_router
from vocab_jobs.v1.infra.jobs.registry_init import initialize_background_jobs
from vocab_jobs.v1.infra.jobs.routes import router as jobs_router
from vocab_jobs.v1.infra.jobs.scheduler import JobScheduler
from vocab_jobs.v1.infra.jobs.worker import JobQueue

logger = get_logger(__name__)


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    app_settings = app_settings or settings

    # Initialize structured logging
    setup_logging(app_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # One engine per application, reachable through app.state
        queue = JobQueue(app_settings)
        scheduler = JobScheduler(queue)
        app.state.job_queue = queue
        app.state.job_scheduler = scheduler

        initialize_background_jobs(queue, scheduler, app_settings)

        # Freeze the handler registry outside development
        if app_settings.environment != "development":
            queue.registry.freeze()

        try:
            yield
        finally:
            scheduler.unschedule_all()
            await queue.shutdown()
            logger.info("Background jobs shut down")

    # Create FastAPI app with API versioning from day 1
    app = FastAPI(
        title=app_settings.app_name,
        description="In-process background job engine",
        version=app_settings.version,
        debug=app_settings.debug,
        lifespan=lifespan,
        # All endpoints will be under /v1/ prefix
        openapi_url="/v1/openapi.json" if app_settings.debug else None,
        docs_url="/v1/docs" if app_settings.debug else None,
        redoc_url="/v1/redoc" if app_settings.debug else None,
    )

    if app_settings is not settings:
        app.dependency_overrides[get_settings] = lambda: app_settings

    # Add middleware
    app.add_middleware(RequestContextMiddleware)

    # Add CORS middleware for development
    if app_settings.debug:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Add exception handlers
    app.add_exception_handler(VocabJobsException, vocab_jobs_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # Include routers with /v1 prefix
    app.include_router(health_router, prefix="/v1", tags=["health"])
    app.include_router(jobs_router, prefix="/v1")

    return app


# Create the app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "vocab_jobs.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
