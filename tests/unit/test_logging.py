"""Tests for logging configuration."""

import logging

import structlog

from api.logging import (
    MAX_FIELD_CHARS,
    add_app_context,
    build_processors,
    clip_long_values,
    setup_logging,
)


class TestProcessors:
    """Tests for the custom structlog processors."""

    def test_app_context_added(self):
        event = add_app_context("worker")(None, "info", {"event": "scan_started"})

        assert event == {"event": "scan_started", "app": "citable", "component": "worker"}

    def test_app_context_keeps_explicit_component(self):
        event = add_app_context("api")(None, "info", {"event": "x", "component": "crawler"})

        assert event["component"] == "crawler"

    def test_long_values_clipped(self):
        body = "a" * (MAX_FIELD_CHARS + 100)
        event = clip_long_values(None, "info", {"event": "page_parsed", "body": body, "count": 3})

        assert event["body"].startswith("a" * MAX_FIELD_CHARS)
        assert event["body"].endswith(f"... [{len(body)} chars]")
        assert event["count"] == 3

    def test_event_and_exception_untouched(self):
        long_text = "x" * (MAX_FIELD_CHARS * 2)
        event = clip_long_values(
            None, "error", {"event": long_text, "exception": long_text, "short": "ok"}
        )

        assert event["event"] == long_text
        assert event["exception"] == long_text
        assert event["short"] == "ok"


class TestBuildProcessors:
    """Tests for renderer selection."""

    def test_production_renders_json(self):
        processors = build_processors("api", production=True, colors=False)

        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert structlog.processors.format_exc_info in processors
        assert clip_long_values in processors

    def test_development_renders_console(self):
        processors = build_processors("api", production=False, colors=False)

        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)


class TestSetupLogging:
    """Tests for per-component stdlib logger levels."""

    def test_worker_loggers(self):
        setup_logging("worker")

        assert logging.getLogger("rq.worker").level == logging.INFO
        assert logging.getLogger("rq.queue").level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_api_quiets_http_clients(self):
        setup_logging("api")

        assert logging.getLogger("httpcore").level == logging.WARNING
        assert logging.getLogger("uvicorn.access").level == logging.WARNING
