"""
In-process background jobs.

This package provides the job engine used by the application:
- In-memory store with a strict job lifecycle state machine
- Registry-based pluggable handlers
- Priority dispatch with a concurrency ceiling and per-attempt timeouts
- Linear retry policy and recurring job schedules
"""
