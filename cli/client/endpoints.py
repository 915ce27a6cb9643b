"""API Endpoint Wrappers - Type-safe API calls"""

import os
from typing import Any

from .base import APIClient

DEFAULT_API_URL = "http://localhost:8000"


def default_api_url() -> str:
    return os.getenv("VOCAB_JOBS_API_URL", DEFAULT_API_URL)


class VocabJobsClient:
    """High-level client with typed endpoint methods"""

    def __init__(self, base_url: str | None = None, timeout: int = 30):
        self.api = APIClient(base_url=base_url or default_api_url(), timeout=timeout)

    def __enter__(self):
        self.api.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.api.__exit__(exc_type, exc_val, exc_tb)

    # Health Check
    def health_check(self) -> dict[str, Any]:
        """Check API health status"""
        return self.api.get("/healthz")

    # Jobs Endpoints
    def enqueue_job(
        self,
        job_type: str,
        data: Any = None,
        priority: str = "normal",
        max_attempts: int | None = None,
    ) -> dict[str, Any]:
        """Submit a job"""
        body: dict[str, Any] = {"type": job_type, "data": data, "priority": priority}
        if max_attempts is not None:
            body["max_attempts"] = max_attempts
        return self.api.post("/jobs", json=body)

    def list_jobs(
        self, status: str | None = None, job_type: str | None = None
    ) -> dict[str, Any]:
        """List jobs with optional filters"""
        params = {}
        if status:
            params["status"] = status
        if job_type:
            params["type"] = job_type
        return self.api.get("/jobs", params)

    def get_job(self, job_id: str) -> dict[str, Any]:
        """Get a job by ID"""
        return self.api.get(f"/jobs/{job_id}")

    def get_stats(self) -> dict[str, Any]:
        """Get queue statistics"""
        return self.api.get("/jobs/stats")

    def list_schedules(self) -> dict[str, Any]:
        """List recurring schedules"""
        return self.api.get("/jobs/schedules")

    def clear_completed(self) -> dict[str, Any]:
        """Remove completed jobs"""
        return self.api.delete("/jobs/completed")
