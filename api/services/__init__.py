"""Business logic services package."""

from api.services.scan_service import ScanService, is_private_or_reserved

__all__ = [
    "ScanService",
    "is_private_or_reserved",
]
