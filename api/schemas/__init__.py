"""Pydantic schemas package."""

from api.schemas.responses import ErrorDetail, ErrorResponse
from api.schemas.scan import (
    PersonaResponse,
    QueryResult,
    ScanQueuedResponse,
    ScanRequestBody,
    ScanResultResponse,
    ScanStatusResponse,
    StepProgress,
)

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "PersonaResponse",
    "QueryResult",
    "ScanQueuedResponse",
    "ScanRequestBody",
    "ScanResultResponse",
    "ScanStatusResponse",
    "StepProgress",
]
