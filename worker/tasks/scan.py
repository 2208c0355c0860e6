"""Scan pipeline and its lifecycle adapters.

One pipeline function runs crawl, structural parse, classification, query
synthesis, coverage matching and scoring. Two adapters drive it: a
synchronous one that returns the finished record, and a job adapter that
persists progress as it goes.
"""

import asyncio
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any

import structlog

from api.metrics import (
    record_classification,
    record_demo_fallback,
    record_scan_finished,
    record_scan_started,
)
from api.sentry import set_scan_context
from worker.classification.classifier import SiteClassifier, build_classifier
from worker.classification.models import CategoryInfo
from worker.crawler.crawler import NO_CONTENT, UNREACHABLE, SiteCrawler, build_crawler
from worker.crawler.demo import build_demo_pages
from worker.extraction.summary import StructuralAnalysis, analyze_structure, city_token
from worker.questions.generator import Query, generate_queries
from worker.retrieval.coverage import DEFAULT_MATCH_THRESHOLD, match_query_coverage
from worker.scoring.calculator import (
    Confidence,
    ScoreBreakdown,
    compute_confidence,
    compute_score,
)
from worker.scoring.gaps import detect_gaps
from worker.store.records import ScanRecord, ScanRequest, ScanStatus, ScanStep, StepStatus
from worker.store.repository import ScanRepository, get_repository

logger = structlog.get_logger(__name__)

# User-facing failure messages
ROBOTS_BLOCKED_MESSAGE = "This site blocked crawlers via robots.txt. We cannot analyze it."
NO_CONTENT_MESSAGE = "Could not parse any content from this site."
INTERNAL_ERROR_MESSAGE = "An internal error occurred. Please try again."
TIMEOUT_MESSAGE = "The scan took too long to complete. Please try again."

ProgressCallback = Callable[[ScanStep, StepStatus], None]


@dataclass
class PipelineOutcome:
    """Terminal result of one pipeline run."""

    status: ScanStatus
    error: str | None = None
    category: CategoryInfo | None = None
    queries: list[Query] = field(default_factory=list)
    breakdown: ScoreBreakdown | None = None
    gaps: list[str] = field(default_factory=list)
    confidence: Confidence | None = None
    example_query: str = ""
    analysis: StructuralAnalysis | None = None
    used_demo_content: bool = False

    @property
    def succeeded(self) -> bool:
        return self.status == ScanStatus.COMPLETE

    @classmethod
    def failure(cls, message: str) -> "PipelineOutcome":
        return cls(status=ScanStatus.FAILED, error=message)

    def record_fields(self) -> dict[str, Any]:
        """Fields to merge into the ScanRecord."""
        fields: dict[str, Any] = {
            "status": self.status,
            "error": self.error,
            "completed_at": datetime.now(UTC),
        }
        if not self.succeeded:
            return fields

        if self.category is None or self.breakdown is None:
            raise ValueError("Completed outcome is missing its category or score")
        fields.update(
            category=self.category.category,
            persona=self.category.persona,
            readiness_score=self.breakdown.readiness_score,
            status_label=self.breakdown.status_label,
            confidence=self.confidence.value if self.confidence else None,
            example_query=self.example_query,
            queries=[query.to_dict() for query in self.queries],
            structural_gaps=list(self.gaps),
            score_breakdown=self.breakdown.to_dict(),
            structural_analysis=self.analysis.to_dict() if self.analysis else None,
        )
        return fields


def build_example_query(queries: list[Query], category: str, city: str | None) -> str:
    """First query text, else a generic "Best <category> ..." query."""
    if queries:
        return queries[0].text
    token = city_token(city)
    return f"Best {category} in {token}" if token else f"Best {category} near me"


async def run_pipeline(
    request: ScanRequest,
    crawler: SiteCrawler,
    classifier: SiteClassifier,
    match_threshold: float = DEFAULT_MATCH_THRESHOLD,
    on_progress: ProgressCallback | None = None,
) -> PipelineOutcome:
    """
    Run the full scan pipeline for one request.

    Never raises: policy blocks, empty sites and unexpected errors all
    come back as failed outcomes with a user-safe message.

    Args:
        request: Validated scan request
        crawler: Site crawler
        classifier: Category/persona classifier
        match_threshold: Minimum combined score for a supported query
        on_progress: Called as each step starts, completes or fails

    Returns:
        PipelineOutcome
    """

    def report(step: ScanStep, status: StepStatus) -> None:
        if on_progress is not None:
            on_progress(step, status)

    step = ScanStep.FETCHING
    try:
        report(step, StepStatus.RUNNING)
        crawl = await crawler.crawl(request.domain)

        if crawl.blocked_by_robots:
            report(step, StepStatus.FAILED)
            return PipelineOutcome.failure(ROBOTS_BLOCKED_MESSAGE)

        used_demo_content = False
        homepage, candidates = crawl.homepage, crawl.pages
        if crawl.error == UNREACHABLE:
            logger.info(
                "using_demo_content",
                domain=request.domain,
                homepage_error=crawl.homepage_error,
            )
            record_demo_fallback()
            demo_pages = build_demo_pages(request.domain)
            homepage, candidates = demo_pages[0], demo_pages[1:]
            used_demo_content = True
        elif crawl.error == NO_CONTENT:
            report(step, StepStatus.FAILED)
            return PipelineOutcome.failure(NO_CONTENT_MESSAGE)

        report(step, StepStatus.COMPLETE)
        step = ScanStep.ANALYSIS
        report(step, StepStatus.RUNNING)

        analysis = analyze_structure(homepage, candidates, request.city)
        if not analysis.pages or analysis.site_summary is None:
            report(step, StepStatus.FAILED)
            return PipelineOutcome.failure(NO_CONTENT_MESSAGE)

        category = await classifier.classify(analysis.pages, request.domain, request.audience)
        record_classification(category.source.value)

        queries = generate_queries(
            category.category,
            request.scope,
            request.audience,
            city=request.city,
            pain_point=category.primary_pain_point,
        )
        queries = match_query_coverage(queries, analysis.pages, match_threshold)

        report(step, StepStatus.COMPLETE)
        step = ScanStep.SCORING
        report(step, StepStatus.RUNNING)

        summary = analysis.site_summary
        breakdown = compute_score(summary, analysis.pages, queries, request.scope)
        gaps = detect_gaps(summary, analysis.pages, request.scope)
        confidence = compute_confidence(summary)

        report(step, StepStatus.COMPLETE)

        return PipelineOutcome(
            status=ScanStatus.COMPLETE,
            category=category,
            queries=queries,
            breakdown=breakdown,
            gaps=gaps,
            confidence=confidence,
            example_query=build_example_query(queries, category.category, request.city),
            analysis=analysis,
            used_demo_content=used_demo_content,
        )

    except Exception as e:
        logger.exception("scan_pipeline_error", domain=request.domain, step=step.value, error=str(e))
        report(step, StepStatus.FAILED)
        return PipelineOutcome.failure(INTERNAL_ERROR_MESSAGE)


class ScanOrchestrator:
    """Owns ScanRecord lifecycle transitions."""

    def __init__(
        self,
        repository: ScanRepository,
        crawler: SiteCrawler | None = None,
        classifier: SiteClassifier | None = None,
        settings=None,
    ):
        if settings is None:
            from api.config import get_settings

            settings = get_settings()

        self.repository = repository
        self.settings = settings
        self.crawler = crawler or build_crawler(settings)
        self.classifier = classifier or build_classifier(settings)

    def start(self, request: ScanRequest) -> ScanRecord:
        """Create a queued record and return it immediately."""
        record = ScanRecord.for_request(
            request,
            request_id=str(uuid.uuid4()),
            scan_token=str(uuid.uuid4()),
        )
        self.repository.create(record.scan_token, record)
        logger.info("scan_queued", scan_token=record.scan_token, domain=request.domain)
        return record

    async def execute(self, scan_token: str) -> ScanRecord | None:
        """
        Run the pipeline for a queued record, persisting progress.

        Returns the terminal record, or None when the token is unknown.
        A record that is already terminal is returned unchanged.
        """
        record = self.repository.get(scan_token)
        if record is None:
            logger.warning("scan_not_found", scan_token=scan_token)
            return None
        if record.is_terminal:
            logger.info("scan_already_finished", scan_token=scan_token, status=record.status)
            return record

        progress = dict(record.progress)

        def on_progress(step: ScanStep, status: StepStatus) -> None:
            progress[step.value] = status.value
            self.repository.update(scan_token, progress=dict(progress))

        return await self._run(record, mode="async", on_progress=on_progress)

    async def run_sync(self, request: ScanRequest) -> ScanRecord:
        """Create a record and run the pipeline to completion within the time limit."""
        record = self.start(request)
        result = await self._run(
            record,
            mode="sync",
            timeout=self.settings.scan_sync_timeout_seconds,
        )
        return result if result is not None else record

    async def _run(
        self,
        record: ScanRecord,
        mode: str,
        on_progress: ProgressCallback | None = None,
        timeout: float | None = None,
    ) -> ScanRecord | None:
        scan_token = record.scan_token
        started = time.perf_counter()

        with structlog.contextvars.bound_contextvars(scan_token=scan_token, domain=record.domain):
            set_scan_context(scan_token, record.domain)
            record_scan_started()
            logger.info("scan_started", mode=mode, scope=record.scope, audience=record.audience)

            try:
                self.repository.update(scan_token, status=ScanStatus.RUNNING)
                pipeline = run_pipeline(
                    record.to_request(),
                    self.crawler,
                    self.classifier,
                    match_threshold=self.settings.coverage_match_threshold,
                    on_progress=on_progress,
                )
                if timeout is None:
                    outcome = await pipeline
                else:
                    outcome = await asyncio.wait_for(pipeline, timeout=timeout)
            except TimeoutError:
                logger.warning("scan_timed_out", timeout_seconds=timeout)
                outcome = PipelineOutcome.failure(TIMEOUT_MESSAGE)
            except Exception as e:
                logger.exception("scan_record_update_failed", stage="running", error=str(e))
                outcome = PipelineOutcome.failure(INTERNAL_ERROR_MESSAGE)

            updated, outcome = self._persist_outcome(record, outcome)
            duration = time.perf_counter() - started
            record_scan_finished(outcome.status.value, mode, duration)

            if outcome.succeeded:
                logger.info(
                    "scan_completed",
                    readiness_score=outcome.breakdown.readiness_score if outcome.breakdown else None,
                    supported_queries=sum(1 for q in outcome.queries if q.supported),
                    demo_content=outcome.used_demo_content,
                    duration_seconds=round(duration, 2),
                )
            else:
                logger.info("scan_failed", error=outcome.error, duration_seconds=round(duration, 2))

        return updated

    def _persist_outcome(
        self, record: ScanRecord, outcome: PipelineOutcome
    ) -> tuple[ScanRecord | None, PipelineOutcome]:
        """
        Write the terminal state.

        When the write fails, a plain failed state is attempted so the
        record never stays in running. If that fails too, the failed
        record is returned without being stored.
        """
        scan_token = record.scan_token
        try:
            return self.repository.update(scan_token, **outcome.record_fields()), outcome
        except Exception as e:
            logger.exception(
                "scan_record_update_failed", stage="terminal", status=outcome.status, error=str(e)
            )

        failed = PipelineOutcome.failure(INTERNAL_ERROR_MESSAGE)
        fields = failed.record_fields()
        try:
            return self.repository.update(scan_token, **fields), failed
        except Exception as e:
            logger.exception(
                "scan_record_update_failed", stage="fallback", status=failed.status, error=str(e)
            )
            return replace(record, **fields), failed


def run_scan_job(scan_token: str) -> dict:
    """
    Synchronous wrapper for the scan job.

    This is the entry point for RQ which requires sync functions.
    """
    orchestrator = ScanOrchestrator(get_repository())
    record = asyncio.run(orchestrator.execute(scan_token))
    return {
        "scan_token": scan_token,
        "status": record.status.value if record else None,
    }
