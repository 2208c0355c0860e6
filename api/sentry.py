"""Sentry error tracking integration."""

from __future__ import annotations

import sentry_sdk
import structlog
from sentry_sdk.integrations.asyncio import AsyncioIntegration
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.httpx import HttpxIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.rq import RqIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from api.config import Settings, get_settings
from api.exceptions import CitableError

logger = structlog.get_logger(__name__)

RELEASE = "citable@0.1.0"

# Transactions that only add noise
IGNORED_TRANSACTIONS = {"/api/health", "/api/ready", "/metrics"}

_sentry_initialized = False


def init_sentry(settings: Settings | None = None) -> bool:
    """Initialize Sentry SDK if configured.

    Returns True if Sentry was initialized, False otherwise.
    """
    global _sentry_initialized

    settings = settings or get_settings()

    if not settings.sentry_dsn:
        logger.info("sentry_disabled", reason="SENTRY_DSN not configured")
        return False

    if _sentry_initialized:
        return True

    try:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.env,
            release=RELEASE,
            sample_rate=1.0,
            traces_sample_rate=0.1 if settings.is_production else 1.0,
            # Scanned domains and page text are user data
            send_default_pii=False,
            integrations=[
                FastApiIntegration(transaction_style="endpoint"),
                StarletteIntegration(transaction_style="endpoint"),
                HttpxIntegration(),
                AsyncioIntegration(),
                RqIntegration(),
                LoggingIntegration(level=None, event_level=None),
            ],
            before_send=_before_send,
            before_send_transaction=_before_send_transaction,
        )
    except Exception as e:
        logger.error("sentry_init_failed", error=str(e))
        return False

    _sentry_initialized = True
    logger.info("sentry_initialized", environment=settings.env)
    return True


def _before_send(event: dict, hint: dict) -> dict | None:
    """Drop client errors and scrub sensitive headers."""
    if "exc_info" in hint:
        _, exc_value, _ = hint["exc_info"]
        if isinstance(exc_value, CitableError) and exc_value.status_code < 500:
            return None

    headers = event.get("request", {}).get("headers")
    if headers:
        for header in ("authorization", "cookie", "x-api-key"):
            if header in headers:
                headers[header] = "[Filtered]"

    return event


def _before_send_transaction(event: dict, hint: dict) -> dict | None:  # noqa: ARG001
    if event.get("transaction") in IGNORED_TRANSACTIONS:
        return None
    return event


def set_scan_context(scan_token: str, domain: str) -> None:
    """Tag subsequent Sentry events with the scan being processed."""
    if not _sentry_initialized:
        return
    sentry_sdk.set_tag("scan_token", scan_token)
    sentry_sdk.set_context("scan", {"scan_token": scan_token, "domain": domain})
