"""Readiness score calculator.

Structure sub-scores (0-100 combined) are blended with the share of
supported buyer queries into a single 0-100 readiness score.
"""

from dataclasses import asdict, dataclass
from enum import StrEnum

import structlog

from worker.extraction.parser import PageRecord
from worker.extraction.summary import SiteSummary
from worker.questions.generator import Query
from worker.questions.templates import Scope
from worker.retrieval.similarity import round_half_up

logger = structlog.get_logger(__name__)

# Structure sub-score weights
H1_POINTS = 10
QUESTION_HEADING_POINTS = 8
QUESTION_HEADING_CAP = 25
SCHEMA_POINTS = 20
WORD_COUNT_CAP = 20
WORD_COUNT_TARGET = 3000
LOCAL_SIGNAL_POINTS = 15
CITY_MENTION_POINTS = 10
KEYWORD_POINTS = 2
KEYWORD_CAP = 25

STRUCTURE_WEIGHT = 0.4
INTENT_WEIGHT = 0.6

READY_THRESHOLD = 70
LIMITED_THRESHOLD = 40


class StatusLabel(StrEnum):
    """Readiness status labels."""

    PREPARED = "Structurally Prepared but Expandable"
    LIMITED = "Limited Inclusion Readiness"
    NOT_PREPARED = "Not Structurally Prepared"


class Confidence(StrEnum):
    """Reliability tier of an analysis, driven by content volume."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


@dataclass
class ScoreBreakdown:
    """Component sub-scores and the final readiness score."""

    h1_score: int
    question_heading_score: int
    schema_score: int
    word_count_score: int
    localized_score: int
    structure_score: int
    intent_support_pct: int
    readiness_score: int
    status_label: str

    def to_dict(self) -> dict:
        return asdict(self)


def _round(value: float) -> int:
    return int(round_half_up(value))


def status_label_for(readiness_score: int) -> StatusLabel:
    """Map a readiness score to its label."""
    if readiness_score >= READY_THRESHOLD:
        return StatusLabel.PREPARED
    if readiness_score >= LIMITED_THRESHOLD:
        return StatusLabel.LIMITED
    return StatusLabel.NOT_PREPARED


def compute_score(
    summary: SiteSummary,
    pages: list[PageRecord],
    queries: list[Query],
    scope: str,
) -> ScoreBreakdown:
    """
    Compute the readiness score breakdown.

    Args:
        summary: Site summary
        pages: Parsed page records
        queries: Scored queries
        scope: "local" or "national"

    Returns:
        ScoreBreakdown with every sub-score
    """
    h1_score = H1_POINTS if summary.h1_page_count > 0 else 0

    total_question_headings = sum(page.question_heading_count for page in pages)
    question_heading_score = min(
        QUESTION_HEADING_CAP, total_question_headings * QUESTION_HEADING_POINTS
    )

    schema_score = SCHEMA_POINTS if summary.schema_detected else 0

    word_count_score = min(
        WORD_COUNT_CAP,
        _round(summary.total_word_count / WORD_COUNT_TARGET * WORD_COUNT_CAP),
    )

    if scope == Scope.LOCAL:
        localized_score = 0
        if summary.has_local_signals:
            localized_score += LOCAL_SIGNAL_POINTS
        if summary.city_mentions:
            localized_score += CITY_MENTION_POINTS
    else:
        total_keywords = sum(len(page.service_keyword_hits) for page in pages)
        localized_score = min(KEYWORD_CAP, total_keywords * KEYWORD_POINTS)

    structure_score = min(
        100,
        h1_score + question_heading_score + schema_score + word_count_score + localized_score,
    )

    supported = sum(1 for query in queries if query.supported)
    intent_support_pct = supported / len(queries) * 100 if queries else 0.0

    readiness_score = _round(STRUCTURE_WEIGHT * structure_score + INTENT_WEIGHT * intent_support_pct)
    readiness_score = max(0, min(100, readiness_score))

    return ScoreBreakdown(
        h1_score=h1_score,
        question_heading_score=question_heading_score,
        schema_score=schema_score,
        word_count_score=word_count_score,
        localized_score=localized_score,
        structure_score=structure_score,
        intent_support_pct=_round(intent_support_pct),
        readiness_score=readiness_score,
        status_label=status_label_for(readiness_score).value,
    )


def compute_confidence(summary: SiteSummary) -> Confidence:
    """Confidence tier from total word count."""
    if summary.total_word_count < 300:
        return Confidence.LOW
    if summary.total_word_count < 1000:
        return Confidence.MEDIUM
    return Confidence.HIGH
