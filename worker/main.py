"""RQ Worker entrypoint."""

import logging
import os
import platform
import sys

from rq import SimpleWorker, Worker

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from api.config import get_settings  # noqa: E402
from api.logging import setup_logging  # noqa: E402
from api.sentry import init_sentry  # noqa: E402
from worker.redis import QUEUE_SCANS, get_redis_connection_bytes  # noqa: E402


def run_worker() -> None:
    """Start the RQ worker."""
    settings = get_settings()
    setup_logging("worker")
    init_sentry(settings)

    if settings.scan_store_backend != "redis":
        # Jobs read records written by the API; a process-local store cannot be shared
        logging.warning("SCAN_STORE_BACKEND is not 'redis'; the worker will not see API scans")

    logging.info(
        "Starting worker",
        extra={"env": settings.env, "queues": [QUEUE_SCANS]},
    )

    redis_conn = get_redis_connection_bytes()

    # Use SimpleWorker on Windows (no os.fork() support)
    WorkerClass = SimpleWorker if platform.system() == "Windows" else Worker

    worker = WorkerClass(
        [QUEUE_SCANS],
        connection=redis_conn,
        name=f"citable-worker-{os.getpid()}",
    )

    worker.work(logging_level=settings.log_level)


if __name__ == "__main__":
    run_worker()
