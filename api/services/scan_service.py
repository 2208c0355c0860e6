"""Scan service: the API's bridge to the scan orchestrator."""

import ipaddress
import socket

import structlog
from fastapi import BackgroundTasks

from api.config import Settings, get_settings
from api.exceptions import (
    NotFoundError,
    ScanFailedError,
    ScanNotReadyError,
    ServiceUnavailableError,
    ValidationError,
)
from api.schemas.scan import ScanRequestBody
from worker.store.records import ScanRecord, ScanRequest, ScanStatus, ScanStep
from worker.tasks.scan import INTERNAL_ERROR_MESSAGE, ScanOrchestrator

logger = structlog.get_logger(__name__)

# Remaining-time estimate reported while a scan is still in flight
IN_FLIGHT_REMAINING_SECONDS = 5

DANGEROUS_HOSTS = {
    "localhost",
    "metadata.google.internal",
    "metadata.internal",
}


def _is_blocked_address(addr: ipaddress.IPv4Address | ipaddress.IPv6Address) -> bool:
    return addr.is_private or addr.is_loopback or addr.is_reserved or addr.is_link_local


def is_private_or_reserved(hostname: str) -> bool:
    """Check if a hostname is, or resolves to, a private, loopback or reserved IP.

    Unresolvable names are allowed through; the crawler reports them as
    unreachable.
    """
    try:
        return _is_blocked_address(ipaddress.ip_address(hostname))
    except ValueError:
        pass

    if hostname.lower() in DANGEROUS_HOSTS:
        return True

    try:
        results = socket.getaddrinfo(hostname, None, socket.AF_UNSPEC, socket.SOCK_STREAM)
    except (socket.gaierror, UnicodeError):
        return False

    for _family, _type, _proto, _canonname, sockaddr in results:
        try:
            if _is_blocked_address(ipaddress.ip_address(sockaddr[0])):
                return True
        except ValueError:
            continue
    return False


class ScanService:
    """Create, run and look up scans on behalf of the HTTP layer."""

    def __init__(self, orchestrator: ScanOrchestrator, settings: Settings | None = None):
        self.orchestrator = orchestrator
        self.settings = settings or get_settings()

    @property
    def repository(self):
        return self.orchestrator.repository

    def build_request(self, body: ScanRequestBody) -> ScanRequest:
        """Turn a validated body into a ScanRequest, applying the address guard."""
        host = body.domain.split(":", 1)[0]
        if self.settings.block_private_addresses and is_private_or_reserved(host):
            logger.warning("scan_rejected_private_address", domain=body.domain)
            raise ValidationError("Cannot scan local or private addresses", field="domain")

        return ScanRequest(
            domain=body.domain,
            scope=body.scope.value,
            audience=body.audience.value,
            city=body.city,
            session_id=body.session_id,
        )

    async def run(self, body: ScanRequestBody) -> dict:
        """Run a scan to completion and return the public result."""
        record = await self.orchestrator.run_sync(self.build_request(body))
        if record.status != ScanStatus.COMPLETE:
            raise ScanFailedError(record.error)
        return record.to_public_dict()

    def submit(self, body: ScanRequestBody, background_tasks: BackgroundTasks) -> ScanRecord:
        """
        Queue a scan and dispatch it.

        The memory backend runs the scan as a FastAPI background task in
        this process; the redis backend hands it to the RQ worker.
        """
        record = self.orchestrator.start(self.build_request(body))

        if self.settings.scan_store_backend == "redis":
            self._enqueue(record)
        else:
            background_tasks.add_task(self.orchestrator.execute, record.scan_token)

        return record

    def _enqueue(self, record: ScanRecord) -> None:
        from worker.queue import get_job_queue

        try:
            get_job_queue().enqueue_scan(record.scan_token, record.domain)
        except Exception as e:
            logger.error("scan_enqueue_failed", scan_token=record.scan_token, error=str(e))
            self.repository.update(
                record.scan_token,
                status=ScanStatus.FAILED,
                error="Could not queue the scan. Please try again.",
            )
            raise ServiceUnavailableError("queue", "Scan queue is unavailable") from e

    def get_record(self, scan_token: str) -> ScanRecord:
        record = self.repository.get(scan_token)
        if record is None:
            raise NotFoundError("Scan", scan_token)
        if self.settings.scan_store_backend == "redis" and not record.is_terminal:
            record = self._reconcile_job(record)
        return record

    def _reconcile_job(self, record: ScanRecord) -> ScanRecord:
        """Fail a record whose RQ job died (worker crash, job timeout)."""
        from worker.queue import JobStatus, get_job_queue

        try:
            job_info = get_job_queue().get_job_info(record.scan_token)
        except Exception as e:
            logger.warning("job_lookup_failed", scan_token=record.scan_token, error=str(e))
            return record

        if job_info is None or job_info.status not in (JobStatus.FAILED, JobStatus.STOPPED):
            return record

        logger.warning(
            "scan_job_lost",
            scan_token=record.scan_token,
            job_status=job_info.status.value,
            job_error=job_info.error,
        )
        updated = self.repository.update(
            record.scan_token,
            status=ScanStatus.FAILED,
            error=INTERNAL_ERROR_MESSAGE,
        )
        return updated or record

    def get_status(self, scan_token: str) -> dict:
        """Progress view of a scan."""
        record = self.get_record(scan_token)
        return {
            "request_id": record.request_id,
            "status": record.status.value,
            "error": record.error,
            "progress": [
                {"step": step.value, "status": record.progress.get(step.value, "pending")}
                for step in ScanStep
            ],
            "estimated_remaining_seconds": (
                0 if record.status == ScanStatus.COMPLETE else IN_FLIGHT_REMAINING_SECONDS
            ),
        }

    def get_result(self, scan_token: str) -> dict:
        """Public result of a finished scan."""
        record = self.get_record(scan_token)
        if record.status == ScanStatus.FAILED:
            raise ScanFailedError(record.error)
        if record.status != ScanStatus.COMPLETE:
            raise ScanNotReadyError(record.status.value)
        return record.to_public_dict()
