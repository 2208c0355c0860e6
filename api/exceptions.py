"""Custom exceptions and error handling."""

from typing import Any

from fastapi import status


class CitableError(Exception):
    """Base exception for the Citable application."""

    def __init__(
        self,
        message: str,
        code: str = "error",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class NotFoundError(CitableError):
    """Resource not found."""

    def __init__(self, resource: str, identifier: str | None = None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} with id '{identifier}' not found"
        super().__init__(
            message=message,
            code="not_found",
            status_code=status.HTTP_404_NOT_FOUND,
        )


class ValidationError(CitableError):
    """Validation error."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            code="validation_error",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details,
        )


class ScanNotReadyError(CitableError):
    """Scan has not reached a terminal state yet."""

    def __init__(self, scan_status: str):
        super().__init__(
            message="Scan not complete yet",
            code="scan_not_ready",
            status_code=status.HTTP_202_ACCEPTED,
            details={"status": scan_status},
        )


class ScanFailedError(CitableError):
    """Scan finished in the failed state."""

    def __init__(self, message: str | None = None):
        super().__init__(
            message=message or "Scan failed",
            code="scan_failed",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )


class ServiceUnavailableError(CitableError):
    """A backing service (queue, store) is unavailable."""

    def __init__(self, service: str, message: str):
        super().__init__(
            message=f"{service}: {message}",
            code="service_unavailable",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details={"service": service},
        )
