"""Health check endpoints."""

import time
from datetime import UTC, datetime

import structlog
from fastapi import APIRouter
from pydantic import BaseModel, Field
from redis import Redis

from api.config import get_settings

router = APIRouter(tags=["Health"])
logger = structlog.get_logger(__name__)

VERSION = "0.1.0"

# Track server start time for uptime calculation
_server_start_time = time.time()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Health status: healthy, degraded, unhealthy")
    timestamp: str = Field(..., description="ISO 8601 timestamp")
    version: str = Field(..., description="API version")
    uptime_seconds: int = Field(..., description="Server uptime in seconds")


class DependencyCheck(BaseModel):
    """Individual dependency check result."""

    status: str = Field(..., description="Status: healthy, unhealthy")
    latency_ms: float | None = Field(None, description="Check latency in milliseconds")
    error: str | None = Field(None, description="Error message if unhealthy")


class ReadyResponse(BaseModel):
    """Readiness check response with dependency status."""

    status: str = Field(..., description="Overall status")
    timestamp: str = Field(..., description="ISO 8601 timestamp")
    version: str = Field(..., description="API version")
    uptime_seconds: int = Field(..., description="Server uptime in seconds")
    checks: dict[str, DependencyCheck] = Field(..., description="Individual dependency checks")


class ApiInfoResponse(BaseModel):
    """API information response."""

    name: str
    version: str
    env: str
    store_backend: str
    classifier: str
    docs: str | None


def _check_redis(redis_url: str) -> DependencyCheck:
    try:
        start = time.perf_counter()
        redis = Redis.from_url(redis_url, socket_timeout=2)
        try:
            redis.ping()
        finally:
            redis.close()
        latency_ms = (time.perf_counter() - start) * 1000
        return DependencyCheck(status="healthy", latency_ms=round(latency_ms, 2))
    except Exception as e:
        logger.warning("redis_health_check_failed", error=str(e))
        return DependencyCheck(status="unhealthy", error=str(e))


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns healthy if the API is running. Does not check dependencies.
    Use /ready for full dependency checks.
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC).isoformat(),
        version=VERSION,
        uptime_seconds=int(time.time() - _server_start_time),
    )


@router.get("/ready", response_model=ReadyResponse)
async def readiness_check() -> ReadyResponse:
    """
    Readiness check with dependency verification.

    Redis is only checked when configured; the in-memory store has no
    external dependencies.
    """
    settings = get_settings()
    checks: dict[str, DependencyCheck] = {}

    if settings.redis_url is not None:
        checks["redis"] = _check_redis(str(settings.redis_url))
    elif settings.scan_store_backend == "redis":
        checks["redis"] = DependencyCheck(status="unhealthy", error="REDIS_URL is not configured")

    unhealthy = any(check.status == "unhealthy" for check in checks.values())

    return ReadyResponse(
        status="unhealthy" if unhealthy else "healthy",
        timestamp=datetime.now(UTC).isoformat(),
        version=VERSION,
        uptime_seconds=int(time.time() - _server_start_time),
        checks=checks,
    )


@router.get("/", response_model=ApiInfoResponse)
async def root() -> ApiInfoResponse:
    """Root endpoint with API information."""
    settings = get_settings()
    return ApiInfoResponse(
        name="Citable Readiness Scanner API",
        version=VERSION,
        env=settings.env,
        store_backend=settings.scan_store_backend,
        classifier="model" if settings.classifier_enabled else "rules",
        docs="/docs" if settings.debug else None,
    )
