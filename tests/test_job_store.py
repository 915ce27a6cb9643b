"""Tests for the in-memory job store."""

from vocab_jobs.v1.infra.jobs.models import JobPriority, JobStatus
from vocab_jobs.v1.infra.jobs.store import JobStore


def _complete(job):
    job.mark_processing()
    job.mark_completed(None)


def test_create_registers_pending_job():
    store = JobStore()
    job = store.create("send_email", {"to": "a@b.c"}, priority="high", max_attempts=5)

    assert store.get(job.id) is job
    assert job.id in store
    assert len(store) == 1
    assert job.status == JobStatus.PENDING
    assert job.priority == JobPriority.HIGH
    assert job.max_attempts == 5


def test_get_unknown_returns_none():
    assert JobStore().get("missing") is None


def test_all_preserves_submission_order():
    store = JobStore()
    jobs = [store.create("noop", i) for i in range(5)]
    assert store.all() == jobs


def test_by_status():
    store = JobStore()
    first = store.create("noop")
    second = store.create("noop")
    _complete(first)

    assert store.by_status(JobStatus.COMPLETED) == [first]
    assert store.by_status("pending") == [second]


def test_next_pending_prefers_higher_priority():
    store = JobStore()
    low = store.create("noop", priority=JobPriority.LOW)
    normal = store.create("noop", priority=JobPriority.NORMAL)
    critical = store.create("noop", priority=JobPriority.CRITICAL)

    assert store.next_pending() is critical
    critical.mark_processing()
    assert store.next_pending() is normal
    normal.mark_processing()
    assert store.next_pending() is low


def test_next_pending_is_fifo_within_priority():
    store = JobStore()
    first = store.create("noop", priority=JobPriority.HIGH)
    store.create("noop", priority=JobPriority.HIGH)

    assert store.next_pending() is first


def test_next_pending_skips_non_pending():
    store = JobStore()
    job = store.create("noop")
    job.mark_processing()

    assert store.next_pending() is None


def test_retried_job_keeps_its_place():
    store = JobStore()
    first = store.create("noop", max_attempts=2)
    second = store.create("noop")

    first.mark_processing()
    first.mark_retrying("boom")
    assert store.next_pending() is second

    first.mark_pending()
    assert store.next_pending() is first


def test_clear_completed_removes_only_completed():
    store = JobStore()
    done = [store.create("noop") for _ in range(3)]
    for job in done:
        _complete(job)
    failed = store.create("noop", max_attempts=1)
    failed.mark_processing()
    failed.mark_failed("boom")
    pending = store.create("noop")

    assert store.clear_completed() == 3
    assert store.all() == [failed, pending]
    assert store.clear_completed() == 0


def test_counts_include_every_status():
    store = JobStore()
    store.create("send_email")
    _complete(store.create("send_email"))
    store.create("cleanup_data")

    assert store.counts() == {
        "pending": 2,
        "processing": 0,
        "completed": 1,
        "failed": 0,
        "retrying": 0,
    }
    assert store.counts_by_type() == {"send_email": 2, "cleanup_data": 1}
