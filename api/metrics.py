"""Prometheus metrics for monitoring and observability."""

from __future__ import annotations

import re
import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware

# Request metrics
REQUEST_COUNT = Counter(
    "citable_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

REQUEST_LATENCY = Histogram(
    "citable_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

REQUEST_IN_PROGRESS = Gauge(
    "citable_http_requests_in_progress",
    "HTTP requests currently being processed",
    ["method", "endpoint"],
)

# Error metrics
ERROR_COUNT = Counter(
    "citable_errors_total",
    "Total application errors",
    ["error_type", "endpoint"],
)

# Scan metrics
SCANS_TOTAL = Counter(
    "citable_scans_total",
    "Scans by lifecycle outcome",
    ["status"],
)

SCANS_IN_PROGRESS = Gauge(
    "citable_scans_in_progress",
    "Scans currently running",
)

SCAN_DURATION = Histogram(
    "citable_scan_duration_seconds",
    "End-to-end scan pipeline duration in seconds",
    ["mode"],
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 15.0, 25.0, 60.0],
)

PAGE_FETCHES_TOTAL = Counter(
    "citable_page_fetches_total",
    "Page fetch outcomes",
    ["outcome"],
)

CLASSIFICATIONS_TOTAL = Counter(
    "citable_classifications_total",
    "Category classifications by source",
    ["source"],
)

DEMO_FALLBACKS_TOTAL = Counter(
    "citable_demo_fallbacks_total",
    "Scans that used synthetic content for an unreachable domain",
)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    metrics: bytes = generate_latest()
    return metrics


def get_metrics_content_type() -> str:
    """Get the content type for Prometheus metrics."""
    content_type: str = CONTENT_TYPE_LATEST
    return content_type


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to collect request metrics."""

    # Paths to exclude from metrics
    EXCLUDE_PATHS = {"/metrics", "/api/health", "/api/ready", "/favicon.ico"}

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        # Skip metrics for excluded paths
        if request.url.path in self.EXCLUDE_PATHS:
            return await call_next(request)

        method = request.method
        endpoint = self._normalize_path(request.url.path)

        REQUEST_IN_PROGRESS.labels(method=method, endpoint=endpoint).inc()

        start_time = time.perf_counter()

        try:
            response = await call_next(request)

            REQUEST_COUNT.labels(
                method=method,
                endpoint=endpoint,
                status_code=str(response.status_code),
            ).inc()

            duration = time.perf_counter() - start_time
            REQUEST_LATENCY.labels(method=method, endpoint=endpoint).observe(duration)

            return response

        except Exception as e:
            ERROR_COUNT.labels(
                error_type=type(e).__name__,
                endpoint=endpoint,
            ).inc()
            raise

        finally:
            REQUEST_IN_PROGRESS.labels(method=method, endpoint=endpoint).dec()

    def _normalize_path(self, path: str) -> str:
        """Normalize path by replacing UUIDs and IDs with placeholders."""
        path = re.sub(
            r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
            "{id}",
            path,
            flags=re.IGNORECASE,
        )
        path = re.sub(r"/\d+(/|$)", r"/{id}\1", path)
        return path


# Helper functions for recording scan metrics


def record_scan_started() -> None:
    """Record a scan entering the running state."""
    SCANS_TOTAL.labels(status="started").inc()
    SCANS_IN_PROGRESS.inc()


def record_scan_finished(status: str, mode: str, duration: float) -> None:
    """Record a scan reaching a terminal state."""
    SCANS_TOTAL.labels(status=status).inc()
    SCANS_IN_PROGRESS.dec()
    SCAN_DURATION.labels(mode=mode).observe(duration)


def record_page_fetch(error_code: str | None) -> None:
    """Record one page fetch outcome ("ok" or its error code)."""
    PAGE_FETCHES_TOTAL.labels(outcome=error_code or "ok").inc()


def record_classification(source: str) -> None:
    """Record which classifier produced a category."""
    CLASSIFICATIONS_TOTAL.labels(source=source).inc()


def record_demo_fallback() -> None:
    """Record a scan that substituted synthetic content."""
    DEMO_FALLBACKS_TOTAL.inc()
