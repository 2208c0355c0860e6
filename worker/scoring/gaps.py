"""Structural gap detection."""

from worker.extraction.parser import PageRecord
from worker.extraction.summary import SiteSummary
from worker.questions.templates import Scope

MAX_GAPS = 5
MIN_CONTENT_WORDS = 800

GAP_NO_ANSWER_PAGES = "No decision-stage answer pages detected"
GAP_NO_FAQ = "No FAQ section or structured Q&A content found"
GAP_NO_SCHEMA = "No JSON-LD structured data (schema.org) detected"
GAP_NO_LOCAL_ALIGNMENT = (
    "No localized intent alignment (city or region not mentioned in service pages)"
)
GAP_THIN_CONTENT = "Limited content depth: site has under 800 words total"
GAP_NO_SERVICE_PAGES = "No dedicated service, solution, or pricing pages detected"

SERVICE_PATH_MARKERS = ("/service", "/solution", "/product", "/pricing")


def detect_gaps(summary: SiteSummary, pages: list[PageRecord], scope: str) -> list[str]:
    """
    List structural gaps in fixed check order, capped at five.

    Args:
        summary: Site summary
        pages: Parsed page records
        scope: "local" or "national"

    Returns:
        Human-readable gap descriptions
    """
    gaps: list[str] = []

    if sum(page.question_heading_count for page in pages) == 0:
        gaps.append(GAP_NO_ANSWER_PAGES)

    if not summary.faq_detected:
        gaps.append(GAP_NO_FAQ)

    if not summary.schema_detected:
        gaps.append(GAP_NO_SCHEMA)

    if scope == Scope.LOCAL and not summary.has_local_signals:
        gaps.append(GAP_NO_LOCAL_ALIGNMENT)

    if summary.total_word_count < MIN_CONTENT_WORDS:
        gaps.append(GAP_THIN_CONTENT)

    if not any(marker in page.url for page in pages for marker in SERVICE_PATH_MARKERS):
        gaps.append(GAP_NO_SERVICE_PAGES)

    return gaps[:MAX_GAPS]
