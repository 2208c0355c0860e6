"""Shared test fixtures and helpers."""

from tests.fixtures.sites import (
    SiteMap,
    failing_transport,
    html_page,
    site_transport,
    unreachable_transport,
)

__all__ = [
    "SiteMap",
    "failing_transport",
    "html_page",
    "site_transport",
    "unreachable_transport",
]
