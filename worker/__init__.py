"""Citable readiness scanner - Worker Package."""

# Lazy imports to avoid requiring Redis at import time
# Use explicit imports when these are needed:
# from worker.queue import JobQueue, get_job_queue, JobInfo, JobStatus
# from worker.redis import get_redis_connection, QUEUE_SCANS
# from worker.tasks.scan import ScanOrchestrator, run_scan_job

__all__ = [
    "JobQueue",
    "JobInfo",
    "JobStatus",
    "get_job_queue",
    "get_redis_connection",
    "get_redis_connection_bytes",
    "QUEUE_SCANS",
]


from typing import Any


def __getattr__(name: str) -> Any:
    """Lazy import for worker submodules."""
    if name in ("JobQueue", "JobInfo", "JobStatus", "get_job_queue"):
        from worker.queue import JobInfo, JobQueue, JobStatus, get_job_queue

        return locals()[name]
    elif name in (
        "get_redis_connection",
        "get_redis_connection_bytes",
        "QUEUE_SCANS",
    ):
        from worker.redis import (
            QUEUE_SCANS,
            get_redis_connection,
            get_redis_connection_bytes,
        )

        return locals()[name]
    raise AttributeError(f"module 'worker' has no attribute '{name}'")
