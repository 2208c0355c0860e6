"""Scan record storage package."""

# Use explicit imports when needed:
# from worker.store.records import ScanRecord, ScanRequest, ScanStatus
# from worker.store.repository import get_repository, InMemoryScanRepository

__all__ = [
    # Records
    "ScanRecord",
    "ScanRequest",
    "ScanStatus",
    "ScanStep",
    "StepStatus",
    # Repositories
    "ScanRepository",
    "InMemoryScanRepository",
    "RedisScanRepository",
    "get_repository",
]
