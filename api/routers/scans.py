"""Scan endpoints: sync scan, queued scan, status and result polling."""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Query

from api.deps import ScanServiceDep
from api.schemas.responses import ErrorResponse
from api.schemas.scan import (
    ScanQueuedResponse,
    ScanRequestBody,
    ScanResultResponse,
    ScanStatusResponse,
)

router = APIRouter(prefix="/scan", tags=["scans"])

ScanToken = Annotated[str, Query(min_length=1, max_length=64, description="Token from /scan/request")]


@router.post(
    "",
    response_model=ScanResultResponse,
    responses={422: {"model": ErrorResponse}},
    summary="Run a scan and wait for the result",
)
async def run_scan(body: ScanRequestBody, service: ScanServiceDep) -> dict:
    """
    Scan a domain synchronously.

    Returns the readiness result, or a 422 error carrying the failure
    message when the scan fails.
    """
    return await service.run(body)


@router.post(
    "/request",
    response_model=ScanQueuedResponse,
    summary="Queue a scan",
)
async def request_scan(
    body: ScanRequestBody,
    background_tasks: BackgroundTasks,
    service: ScanServiceDep,
) -> ScanQueuedResponse:
    """Queue a scan and return its token for status/result polling."""
    record = service.submit(body, background_tasks)
    return ScanQueuedResponse(
        request_id=record.request_id,
        scan_token=record.scan_token,
        status=record.status.value,
        estimated_time_seconds=service.settings.scan_estimated_seconds,
    )


@router.get(
    "/status",
    response_model=ScanStatusResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get scan progress",
)
async def get_scan_status(scan_token: ScanToken, service: ScanServiceDep) -> dict:
    return service.get_status(scan_token)


@router.get(
    "/result",
    response_model=ScanResultResponse,
    responses={
        202: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
    summary="Get scan result",
)
async def get_scan_result(scan_token: ScanToken, service: ScanServiceDep) -> dict:
    """
    Get the public result of a scan.

    202 while the scan is still queued or running, 422 with the failure
    message when it failed.
    """
    return service.get_result(scan_token)
