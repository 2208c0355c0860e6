"""Query coverage matching against parsed pages."""

from dataclasses import replace

import structlog

from worker.extraction.parser import PageRecord
from worker.questions.generator import Query, QueryScores
from worker.retrieval.similarity import overlap_ratio, round_half_up, text_similarity, tokenize

logger = structlog.get_logger(__name__)

DEFAULT_MATCH_THRESHOLD = 0.35
BODY_SAMPLE_CHARS = 3000

TITLE_WEIGHT = 0.4
HEADING_WEIGHT = 0.4
BODY_WEIGHT = 0.2
BODY_OVERLAP_WEIGHT = 0.4


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, value))


def score_query_against_page(query_text: str, page: PageRecord) -> QueryScores:
    """
    Score one query against one page.

    Body text only counts when the page has at least one question-like
    heading. The combined score is never below the best of the title and
    heading scores.
    """
    query_tokens = tokenize(query_text)

    title = text_similarity(query_tokens, page.title)
    heading = max((text_similarity(query_tokens, h) for h in page.headings), default=0.0)
    body = 0.0
    if page.has_question_headings:
        body = BODY_OVERLAP_WEIGHT * overlap_ratio(
            query_tokens, tokenize(page.body_text_sample[:BODY_SAMPLE_CHARS])
        )

    weighted = TITLE_WEIGHT * title + HEADING_WEIGHT * heading + BODY_WEIGHT * body
    combined = max(weighted, title, heading)

    return QueryScores(
        title=round_half_up(_clamp(title), 2),
        heading=round_half_up(_clamp(heading), 2),
        body=round_half_up(_clamp(body), 2),
        combined=round_half_up(_clamp(combined), 2),
    )


def match_query(
    query: Query,
    pages: list[PageRecord],
    threshold: float = DEFAULT_MATCH_THRESHOLD,
) -> Query:
    """Return a copy of the query scored against its best page."""
    best_scores = QueryScores()
    best_page: PageRecord | None = None

    for page in pages:
        scores = score_query_against_page(query.text, page)
        # Strictly greater: the first page wins ties
        if best_page is None or scores.combined > best_scores.combined:
            best_scores = scores
            best_page = page

    supported = best_page is not None and best_scores.combined >= threshold
    return replace(
        query,
        tokens=dict(query.tokens),
        supported=supported,
        best_page_url=best_page.url if supported and best_page else None,
        scores=best_scores,
    )


def match_query_coverage(
    queries: list[Query],
    pages: list[PageRecord],
    threshold: float = DEFAULT_MATCH_THRESHOLD,
) -> list[Query]:
    """
    Score every query against every page.

    Args:
        queries: Unscored queries
        pages: Parsed page records
        threshold: Minimum combined score for a supported query

    Returns:
        New Query objects with scores, verdict and best page
    """
    scored = [match_query(query, pages, threshold) for query in queries]
    logger.debug(
        "coverage_matched",
        queries=len(scored),
        supported=sum(1 for q in scored if q.supported),
        threshold=threshold,
    )
    return scored
