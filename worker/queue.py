"""Job queue service for background scans."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from functools import lru_cache
from typing import Any

from rq import Queue
from rq.exceptions import NoSuchJobError
from rq.job import Job

from worker.redis import (
    JOB_RESULT_TTL,
    QUEUE_SCANS,
    SCAN_JOB_TIMEOUT,
    get_redis_connection_bytes,
)


class JobStatus(str, Enum):
    """RQ job status values."""

    QUEUED = "queued"
    STARTED = "started"
    DEFERRED = "deferred"
    FINISHED = "finished"
    STOPPED = "stopped"
    SCHEDULED = "scheduled"
    FAILED = "failed"
    CANCELED = "canceled"


@dataclass
class JobInfo:
    """Job information wrapper."""

    id: str
    status: JobStatus
    created_at: datetime | None
    started_at: datetime | None
    ended_at: datetime | None
    error: str | None
    meta: dict[str, Any]


class JobQueue:
    """Service for enqueuing scan jobs on RQ."""

    def __init__(self, connection=None) -> None:
        self._conn = connection or get_redis_connection_bytes()
        self._queue = Queue(QUEUE_SCANS, connection=self._conn)

    def enqueue_scan(self, scan_token: str, domain: str | None = None) -> Job:
        """
        Enqueue a scan for background processing.

        The job id is the scan token, so a token is never queued twice.

        Args:
            scan_token: Token of a queued ScanRecord
            domain: Domain, stored in job meta for visibility

        Returns:
            The enqueued RQ Job
        """
        return self._queue.enqueue(
            "worker.tasks.scan.run_scan_job",
            scan_token,
            job_id=scan_token,
            job_timeout=SCAN_JOB_TIMEOUT,
            result_ttl=JOB_RESULT_TTL,
            meta={"domain": domain} if domain else {},
        )

    def get_job(self, job_id: str) -> Job | None:
        """Get a job by ID."""
        try:
            return Job.fetch(job_id, connection=self._conn)
        except NoSuchJobError:
            return None

    def get_job_info(self, job_id: str) -> JobInfo | None:
        """Get job information by ID."""
        job = self.get_job(job_id)
        if not job:
            return None

        status = JobStatus(job.get_status() or "queued")
        error = None

        if status == JobStatus.FAILED and job.exc_info:
            error = str(job.exc_info)

        return JobInfo(
            id=job.id,
            status=status,
            created_at=job.created_at,
            started_at=job.started_at,
            ended_at=job.ended_at,
            error=error,
            meta=job.meta or {},
        )


@lru_cache
def get_job_queue() -> JobQueue:
    """Get the shared job queue (connects lazily on first use)."""
    return JobQueue()
