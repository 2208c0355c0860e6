"""Pytest configuration and fixtures."""

import os
from collections.abc import AsyncGenerator

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

# Set test environment before any app code runs
os.environ["ENV"] = "test"
os.environ["SCAN_STORE_BACKEND"] = "memory"
os.environ["BLOCK_PRIVATE_ADDRESSES"] = "false"
for _name in ("REDIS_URL", "ANTHROPIC_API_KEY", "OPENROUTER_API_KEY", "OPENAI_API_KEY", "SENTRY_DSN"):
    os.environ.pop(_name, None)

from tests.fixtures.sites import SiteMap, html_page, site_transport  # noqa: E402


@pytest.fixture(autouse=True)
def clean_state():
    """Fresh settings and repository for every test."""
    from api.config import get_settings
    from worker.store.repository import reset_repository

    get_settings.cache_clear()
    reset_repository()
    yield
    get_settings.cache_clear()
    reset_repository()


@pytest.fixture
def settings():
    from api.config import get_settings

    return get_settings()


@pytest.fixture
def example_site() -> SiteMap:
    """A small reachable bakery site with an FAQ page."""
    return {
        "https://example.com": (
            200,
            "text/html; charset=utf-8",
            html_page(
                title="Example Bakery - Fresh Bread in Austin",
                h1="Fresh bread baked daily",
                headings=["Our breads", "Visit us in Austin"],
                body="We bake sourdough bread and pastry every morning for Austin neighbors.",
                links=["/faq", "/menu"],
            ),
        ),
        "https://example.com/faq": (
            200,
            "text/html",
            html_page(
                title="FAQ - Example Bakery",
                h1="Frequently asked questions",
                headings=["What bread do you bake?", "How early do you open?"],
                body="We bake bread daily. Our bakery opens at 7am in Austin.",
                json_ld_type="FAQPage",
            ),
        ),
    }


@pytest.fixture
def app_factory():
    """Build the app with an orchestrator that crawls through a transport."""
    from api.config import get_settings
    from api.deps import get_orchestrator
    from api.main import app
    from worker.classification.classifier import RuleBasedClassifier
    from worker.crawler.crawler import build_crawler
    from worker.store.repository import get_repository
    from worker.tasks.scan import ScanOrchestrator

    def factory(transport: httpx.AsyncBaseTransport):
        def override() -> ScanOrchestrator:
            settings = get_settings()
            return ScanOrchestrator(
                get_repository(settings),
                crawler=build_crawler(settings, transport=transport),
                classifier=RuleBasedClassifier(),
                settings=settings,
            )

        app.dependency_overrides[get_orchestrator] = override
        return app

    yield factory

    app.dependency_overrides.clear()


@pytest.fixture
async def client(app_factory, example_site) -> AsyncGenerator[AsyncClient, None]:
    """Async test client whose scans crawl the example site."""
    app = app_factory(site_transport(example_site))

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
