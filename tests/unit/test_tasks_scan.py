"""Tests for the scan pipeline and orchestrator."""

import asyncio

import httpx
import pytest

from tests.fixtures.sites import SiteMap, html_page, site_transport, unreachable_transport
from worker.classification.classifier import RuleBasedClassifier, SiteClassifier
from worker.crawler.crawler import CrawlResult, SiteCrawler
from worker.store.records import ScanRequest, ScanStatus, ScanStep, StepStatus
from worker.store.repository import InMemoryScanRepository, get_repository
from worker.tasks.scan import (
    INTERNAL_ERROR_MESSAGE,
    NO_CONTENT_MESSAGE,
    ROBOTS_BLOCKED_MESSAGE,
    TIMEOUT_MESSAGE,
    PipelineOutcome,
    ScanOrchestrator,
    build_example_query,
    run_pipeline,
    run_scan_job,
)


def _request(**overrides) -> ScanRequest:
    data = {"domain": "example.com", "scope": "local", "audience": "consumers", "city": "Austin"}
    data.update(overrides)
    return ScanRequest(**data)


def _crawler(pages: SiteMap | httpx.MockTransport) -> SiteCrawler:
    transport = pages if isinstance(pages, httpx.MockTransport) else site_transport(pages)
    return SiteCrawler(transport=transport)


class ExplodingClassifier(SiteClassifier):
    async def classify(self, pages, domain, audience):
        raise RuntimeError("classifier bug")


class SlowCrawler(SiteCrawler):
    async def crawl(self, domain: str) -> CrawlResult:
        await asyncio.sleep(5)
        return CrawlResult(base_url=f"https://{domain}")


class FlakyRepository(InMemoryScanRepository):
    """Raises on updates that set one of the given statuses."""

    def __init__(self, failing_statuses: set[ScanStatus]):
        super().__init__()
        self.failing_statuses = failing_statuses

    def update(self, scan_token, **fields):
        if fields.get("status") in self.failing_statuses:
            raise ConnectionError("redis down")
        return super().update(scan_token, **fields)


class TestBuildExampleQuery:
    """Tests for the example query fallback."""

    def test_generic_with_and_without_city(self) -> None:
        assert build_example_query([], "bakery", "Austin, TX") == "Best bakery in Austin"
        assert build_example_query([], "bakery", None) == "Best bakery near me"


class TestRunPipeline:
    """Tests for run_pipeline."""

    async def test_complete_scan(self, example_site) -> None:
        steps: list[tuple[str, str]] = []

        outcome = await run_pipeline(
            _request(),
            _crawler(example_site),
            RuleBasedClassifier(),
            on_progress=lambda step, status: steps.append((step.value, status.value)),
        )

        assert outcome.succeeded
        assert outcome.category is not None
        assert outcome.category.category == "bakery"
        assert len(outcome.queries) == 5
        assert outcome.example_query == "Best bakery in Austin"
        assert outcome.breakdown is not None
        assert 0 <= outcome.breakdown.readiness_score <= 100
        assert outcome.used_demo_content is False
        assert steps == [
            ("fetching", "running"),
            ("fetching", "complete"),
            ("analysis", "running"),
            ("analysis", "complete"),
            ("scoring", "running"),
            ("scoring", "complete"),
        ]

    async def test_robots_blocked(self, example_site) -> None:
        example_site["https://example.com/robots.txt"] = (
            200,
            "text/plain",
            "User-agent: *\nDisallow: /\n",
        )
        steps: list[tuple[ScanStep, StepStatus]] = []

        outcome = await run_pipeline(
            _request(),
            _crawler(example_site),
            RuleBasedClassifier(),
            on_progress=lambda step, status: steps.append((step, status)),
        )

        assert outcome.status == ScanStatus.FAILED
        assert outcome.error == ROBOTS_BLOCKED_MESSAGE
        assert steps[-1] == (ScanStep.FETCHING, StepStatus.FAILED)

    async def test_unreachable_uses_demo_content(self) -> None:
        outcome = await run_pipeline(
            _request(domain="nowhere-bakery-zzz.com"),
            _crawler(unreachable_transport()),
            RuleBasedClassifier(),
        )

        assert outcome.succeeded
        assert outcome.used_demo_content is True
        assert outcome.analysis is not None
        assert [page.url for page in outcome.analysis.pages] == [
            "https://nowhere-bakery-zzz.com",
            "https://nowhere-bakery-zzz.com/services",
        ]

    async def test_non_html_site(self) -> None:
        site = {"https://example.com": (200, "application/json", '{"ok": true}')}

        outcome = await run_pipeline(_request(), _crawler(site), RuleBasedClassifier())

        assert outcome.status == ScanStatus.FAILED
        assert outcome.error == NO_CONTENT_MESSAGE

    async def test_unexpected_error_is_contained(self, example_site) -> None:
        steps: list[tuple[ScanStep, StepStatus]] = []

        outcome = await run_pipeline(
            _request(),
            _crawler(example_site),
            ExplodingClassifier(),
            on_progress=lambda step, status: steps.append((step, status)),
        )

        assert outcome.status == ScanStatus.FAILED
        assert outcome.error == INTERNAL_ERROR_MESSAGE
        assert steps[-1] == (ScanStep.ANALYSIS, StepStatus.FAILED)

    async def test_deterministic(self, example_site) -> None:
        first = await run_pipeline(_request(), _crawler(example_site), RuleBasedClassifier())
        second = await run_pipeline(_request(), _crawler(example_site), RuleBasedClassifier())

        assert first.breakdown == second.breakdown
        assert [q.to_dict() for q in first.queries] == [q.to_dict() for q in second.queries]
        assert first.gaps == second.gaps

    def test_failure_record_fields(self) -> None:
        fields = PipelineOutcome.failure("nope").record_fields()
        assert fields["status"] == ScanStatus.FAILED
        assert fields["error"] == "nope"
        assert "readiness_score" not in fields

    def test_complete_without_score_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="missing its category or score"):
            PipelineOutcome(status=ScanStatus.COMPLETE).record_fields()


class TestScanOrchestrator:
    """Tests for record lifecycle transitions."""

    def _orchestrator(self, settings, crawler: SiteCrawler) -> ScanOrchestrator:
        return ScanOrchestrator(
            InMemoryScanRepository(),
            crawler=crawler,
            classifier=RuleBasedClassifier(),
            settings=settings,
        )

    def test_start_creates_queued_record(self, settings, example_site) -> None:
        orchestrator = self._orchestrator(settings, _crawler(example_site))

        record = orchestrator.start(_request())

        stored = orchestrator.repository.get(record.scan_token)
        assert stored is not None
        assert stored.status == ScanStatus.QUEUED
        assert record.scan_token != record.request_id

    async def test_execute_persists_progress(self, settings, example_site) -> None:
        orchestrator = self._orchestrator(settings, _crawler(example_site))
        record = orchestrator.start(_request())

        result = await orchestrator.execute(record.scan_token)

        assert result is not None
        assert result.status == ScanStatus.COMPLETE
        assert result.progress == {
            "fetching": "complete",
            "analysis": "complete",
            "scoring": "complete",
        }
        assert result.category == "bakery"
        assert result.persona is not None
        assert len(result.queries) == 5
        assert result.score_breakdown is not None
        assert result.completed_at is not None

    async def test_execute_is_idempotent(self, settings, example_site) -> None:
        transport = site_transport(example_site)
        orchestrator = self._orchestrator(settings, _crawler(transport))
        record = orchestrator.start(_request())

        first = await orchestrator.execute(record.scan_token)
        requests_after_first = len(transport.seen)
        second = await orchestrator.execute(record.scan_token)

        assert first == second
        assert len(transport.seen) == requests_after_first

    async def test_execute_unknown_token(self, settings, example_site) -> None:
        orchestrator = self._orchestrator(settings, _crawler(example_site))
        assert await orchestrator.execute("missing") is None

    async def test_run_sync_failure(self, settings) -> None:
        site = {"https://example.com": (200, "application/pdf", "%PDF-1.4")}
        orchestrator = self._orchestrator(settings, _crawler(site))

        record = await orchestrator.run_sync(_request())

        assert record.status == ScanStatus.FAILED
        assert record.error == NO_CONTENT_MESSAGE

    async def test_run_sync_timeout(self, settings) -> None:
        settings.scan_sync_timeout_seconds = 0.05
        orchestrator = self._orchestrator(settings, SlowCrawler())

        record = await orchestrator.run_sync(_request())

        assert record.status == ScanStatus.FAILED
        assert record.error == TIMEOUT_MESSAGE


class TestPersistenceFailures:
    """Tests for repository errors around the pipeline."""

    def _orchestrator(self, settings, repository, transport) -> ScanOrchestrator:
        return ScanOrchestrator(
            repository,
            crawler=_crawler(transport),
            classifier=RuleBasedClassifier(),
            settings=settings,
        )

    async def test_failed_terminal_write_falls_back_to_failed(
        self, settings, example_site
    ) -> None:
        repository = FlakyRepository({ScanStatus.COMPLETE})
        orchestrator = self._orchestrator(settings, repository, site_transport(example_site))
        record = orchestrator.start(_request())

        result = await orchestrator.execute(record.scan_token)

        assert result is not None
        assert result.status == ScanStatus.FAILED
        assert result.error == INTERNAL_ERROR_MESSAGE
        stored = repository.get(record.scan_token)
        assert stored is not None
        assert stored.status == ScanStatus.FAILED
        assert stored.completed_at is not None

    async def test_failed_running_write_skips_pipeline(self, settings, example_site) -> None:
        repository = FlakyRepository({ScanStatus.RUNNING})
        transport = site_transport(example_site)
        orchestrator = self._orchestrator(settings, repository, transport)
        record = orchestrator.start(_request())

        result = await orchestrator.execute(record.scan_token)

        assert result is not None
        assert result.status == ScanStatus.FAILED
        assert transport.seen == []
        stored = repository.get(record.scan_token)
        assert stored is not None
        assert stored.status == ScanStatus.FAILED

    async def test_every_write_failing_still_returns_failed(self, settings, example_site) -> None:
        repository = FlakyRepository(set(ScanStatus))
        orchestrator = self._orchestrator(settings, repository, site_transport(example_site))

        record = await orchestrator.run_sync(_request())

        assert record.status == ScanStatus.FAILED
        assert record.error == INTERNAL_ERROR_MESSAGE


class TestRunScanJob:
    """Tests for the RQ entry point."""

    def test_runs_queued_record(
        self, settings, example_site, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(
            "worker.tasks.scan.build_crawler",
            lambda settings: _crawler(example_site),
        )
        monkeypatch.setattr(
            "worker.tasks.scan.build_classifier",
            lambda settings: RuleBasedClassifier(),
        )
        repository = get_repository(settings)
        record = ScanOrchestrator(repository, settings=settings).start(
            _request(scope="national", audience="businesses", city=None)
        )

        result = run_scan_job(record.scan_token)

        assert result == {"scan_token": record.scan_token, "status": "complete"}
        stored = repository.get(record.scan_token)
        assert stored is not None
        assert stored.queries[0]["text"] == "Best bakery for enterprise teams"

    def test_unknown_token(self, settings) -> None:
        assert run_scan_job("missing") == {"scan_token": "missing", "status": None}
