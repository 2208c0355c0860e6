"""Structured logging for the API process and the scan worker."""

import logging
import sys
from typing import Any

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

from api.config import get_settings

APP_NAME = "citable"

# Page bodies and model replies can be kilobytes long
MAX_FIELD_CHARS = 500

# Keys never clipped
UNCLIPPED_KEYS = frozenset({"event", "exception", "stack"})

QUIET_LOGGERS = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "uvicorn.access": logging.WARNING,
}

WORKER_LOGGERS = {
    "rq.worker": logging.INFO,
    "rq.queue": logging.WARNING,
}


def add_app_context(component: str) -> Processor:
    """Tag every event with the app name and the process component."""

    def processor(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("app", APP_NAME)
        event_dict.setdefault("component", component)
        return event_dict

    return processor


def clip_long_values(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Shorten oversized string fields so one scan cannot flood the log."""
    for key, value in event_dict.items():
        if key in UNCLIPPED_KEYS or not isinstance(value, str):
            continue
        if len(value) > MAX_FIELD_CHARS:
            event_dict[key] = f"{value[:MAX_FIELD_CHARS]}... [{len(value)} chars]"
    return event_dict


def build_processors(component: str, production: bool, colors: bool) -> list[Any]:
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        add_app_context(component),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
        clip_long_values,
    ]

    if production:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=colors,
                exception_formatter=structlog.dev.plain_traceback,
            )
        )
    return processors


def setup_logging(component: str = "api") -> None:
    """Configure structlog and stdlib logging for one process.

    Args:
        component: "api" for the web process, "worker" for the RQ worker
    """
    settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    structlog.configure(
        processors=build_processors(
            component,
            production=settings.is_production,
            colors=not settings.is_test,
        ),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    levels = dict(QUIET_LOGGERS)
    if component == "worker":
        levels.update(WORKER_LOGGERS)
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)
