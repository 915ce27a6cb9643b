"""Tests for the job admin API."""

import time

from fastapi.testclient import TestClient

from vocab_jobs.config.settings import Settings
from vocab_jobs.main import create_app


def _wait_for_status(client: TestClient, job_id: str, status: str, timeout=3.0):
    deadline = time.monotonic() + timeout
    while True:
        job = client.get(f"/v1/jobs/{job_id}").json()["data"]
        if job["status"] == status:
            return job
        if time.monotonic() > deadline:
            raise AssertionError(f"Job {job_id} stuck in {job['status']}")
        time.sleep(0.01)


def _email_payload():
    return {
        "to": "learner@example.com",
        "subject": "Your daily words",
        "body": "serendipity, ephemeral, ubiquitous",
    }


def test_enqueue_and_complete_job(client: TestClient):
    response = client.post(
        "/v1/jobs",
        json={"type": "send_email", "data": _email_payload(), "priority": "high"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    job_id = body["data"]["job_id"]

    job = _wait_for_status(client, job_id, "completed")
    assert job["type"] == "send_email"
    assert job["priority"] == "high"
    assert job["attempts"] == 1
    assert job["result"] == {"sent": True, "to": "learner@example.com"}
    assert job["completed_at"] is not None


def test_custom_handler_scenario(client: TestClient):
    async def noop(data):
        return {"ok": True}

    client.app.state.job_queue.register_handler("noop", noop)
    response = client.post(
        "/v1/jobs",
        json={"type": "noop", "data": {}, "priority": "critical", "max_attempts": 1},
    )
    job_id = response.json()["data"]["job_id"]

    job = _wait_for_status(client, job_id, "completed")
    assert job["result"] == {"ok": True}


def test_unknown_job_type_fails_without_retry(client: TestClient):
    response = client.post("/v1/jobs", json={"type": "ghost", "max_attempts": 3})
    job_id = response.json()["data"]["job_id"]

    job = _wait_for_status(client, job_id, "failed")
    assert job["attempts"] == 1
    assert job["error_code"] == "NO_HANDLER"


def test_invalid_payload_exhausts_attempts(client: TestClient):
    response = client.post(
        "/v1/jobs",
        json={"type": "send_email", "data": {"subject": "no recipient"}, "max_attempts": 2},
    )
    job_id = response.json()["data"]["job_id"]

    job = _wait_for_status(client, job_id, "failed")
    assert job["attempts"] == 2
    assert "Invalid SendEmailJobData payload" in job["error"]


def test_enqueue_rejects_invalid_priority(client: TestClient):
    response = client.post("/v1/jobs", json={"type": "send_email", "priority": "urgent"})
    assert response.status_code == 422


def test_get_missing_job_returns_404(client: TestClient):
    response = client.get("/v1/jobs/does-not-exist")

    assert response.status_code == 404
    body = response.json()
    assert body["ok"] is False
    assert body["error"]["details"] == {"job_id": "does-not-exist"}


def test_list_jobs_with_filters(client: TestClient):
    ok_id = client.post(
        "/v1/jobs", json={"type": "send_email", "data": _email_payload()}
    ).json()["data"]["job_id"]
    bad_id = client.post("/v1/jobs", json={"type": "ghost"}).json()["data"]["job_id"]
    _wait_for_status(client, ok_id, "completed")
    _wait_for_status(client, bad_id, "failed")

    all_jobs = client.get("/v1/jobs").json()["data"]
    assert all_jobs["total"] == 2
    assert [job["id"] for job in all_jobs["jobs"]] == [ok_id, bad_id]

    failed = client.get("/v1/jobs", params={"status": "failed"}).json()["data"]
    assert [job["id"] for job in failed["jobs"]] == [bad_id]

    emails = client.get("/v1/jobs", params={"type": "send_email"}).json()["data"]
    assert [job["id"] for job in emails["jobs"]] == [ok_id]


def test_stats(client: TestClient):
    job_id = client.post(
        "/v1/jobs", json={"type": "send_email", "data": _email_payload()}
    ).json()["data"]["job_id"]
    _wait_for_status(client, job_id, "completed")

    stats = client.get("/v1/jobs/stats").json()["data"]
    assert stats["total"] == 1
    assert stats["completed"] == 1
    assert stats["in_flight_count"] == 0
    assert stats["running"] is True
    assert stats["by_type"] == {"send_email": 1}


def test_clear_completed(client: TestClient):
    job_id = client.post(
        "/v1/jobs", json={"type": "send_email", "data": _email_payload()}
    ).json()["data"]["job_id"]
    _wait_for_status(client, job_id, "completed")

    response = client.delete("/v1/jobs/completed")
    assert response.json()["data"] == {"removed": 1}
    assert client.get(f"/v1/jobs/{job_id}").status_code == 404


def test_schedules_listed_when_recurring_enabled():
    app = create_app(Settings(job_recurring_enabled=True))

    with TestClient(app) as client:
        data = client.get("/v1/jobs/schedules").json()["data"]

    assert data == {
        "schedules": ["daily-reminders", "update-streaks", "cleanup-completed-jobs"]
    }


def test_schedules_empty_when_recurring_disabled(client: TestClient):
    data = client.get("/v1/jobs/schedules").json()["data"]
    assert data == {"schedules": []}
