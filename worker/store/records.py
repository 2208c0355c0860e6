"""Scan request and record models."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from worker.classification.models import Persona


class ScanStatus(StrEnum):
    """Lifecycle states of a scan."""

    QUEUED = "queued"
    RUNNING = "running"
    COMPLETE = "complete"
    FAILED = "failed"


TERMINAL_STATUSES = frozenset([ScanStatus.COMPLETE, ScanStatus.FAILED])


class ScanStep(StrEnum):
    """Pipeline stages reported as progress."""

    FETCHING = "fetching"
    ANALYSIS = "analysis"
    SCORING = "scoring"


class StepStatus(StrEnum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETE = "complete"
    FAILED = "failed"


def initial_progress() -> dict[str, str]:
    return {step.value: StepStatus.PENDING.value for step in ScanStep}


@dataclass(frozen=True)
class ScanRequest:
    """Validated scan input."""

    domain: str
    scope: str
    audience: str
    city: str | None = None
    session_id: str | None = None


@dataclass
class ScanRecord:
    """
    Long-lived record of one scan.

    Created queued, moved to running, then to complete or failed. Only the
    orchestrator writes records, through a ScanRepository.
    """

    request_id: str
    scan_token: str
    domain: str
    scope: str
    audience: str
    city: str | None = None
    session_id: str | None = None
    status: ScanStatus = ScanStatus.QUEUED
    error: str | None = None
    progress: dict[str, str] = field(default_factory=initial_progress)

    # Populated on completion
    category: str = ""
    persona: Persona | None = None
    readiness_score: int = 0
    status_label: str = ""
    confidence: str | None = None
    example_query: str = ""
    queries: list[dict[str, Any]] = field(default_factory=list)
    structural_gaps: list[str] = field(default_factory=list)

    # Internal only, never exposed in results
    score_breakdown: dict[str, Any] | None = None
    structural_analysis: dict[str, Any] | None = None

    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @classmethod
    def for_request(cls, request: ScanRequest, request_id: str, scan_token: str) -> "ScanRecord":
        return cls(
            request_id=request_id,
            scan_token=scan_token,
            domain=request.domain,
            scope=request.scope,
            audience=request.audience,
            city=request.city,
            session_id=request.session_id,
        )

    def to_request(self) -> ScanRequest:
        return ScanRequest(
            domain=self.domain,
            scope=self.scope,
            audience=self.audience,
            city=self.city,
            session_id=self.session_id,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "request_id": self.request_id,
            "scan_token": self.scan_token,
            "domain": self.domain,
            "scope": self.scope,
            "audience": self.audience,
            "city": self.city,
            "session_id": self.session_id,
            "status": self.status.value,
            "error": self.error,
            "progress": dict(self.progress),
            "category": self.category,
            "persona": self.persona.to_dict() if self.persona else None,
            "readiness_score": self.readiness_score,
            "status_label": self.status_label,
            "confidence": self.confidence,
            "example_query": self.example_query,
            "queries": [dict(q) for q in self.queries],
            "structural_gaps": list(self.structural_gaps),
            "score_breakdown": self.score_breakdown,
            "structural_analysis": self.structural_analysis,
            "created_at": self.created_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScanRecord":
        """Rebuild a record from to_dict() output."""
        persona = data.get("persona")
        completed_at = data.get("completed_at")
        return cls(
            request_id=data["request_id"],
            scan_token=data["scan_token"],
            domain=data["domain"],
            scope=data["scope"],
            audience=data["audience"],
            city=data.get("city"),
            session_id=data.get("session_id"),
            status=ScanStatus(data.get("status", ScanStatus.QUEUED)),
            error=data.get("error"),
            progress=dict(data.get("progress") or initial_progress()),
            category=data.get("category", ""),
            persona=Persona.from_dict(persona) if persona else None,
            readiness_score=data.get("readiness_score", 0),
            status_label=data.get("status_label", ""),
            confidence=data.get("confidence"),
            example_query=data.get("example_query", ""),
            queries=list(data.get("queries", [])),
            structural_gaps=list(data.get("structural_gaps", [])),
            score_breakdown=data.get("score_breakdown"),
            structural_analysis=data.get("structural_analysis"),
            created_at=datetime.fromisoformat(data["created_at"]),
            completed_at=datetime.fromisoformat(completed_at) if completed_at else None,
        )

    def to_public_dict(self) -> dict[str, Any]:
        """The externally visible result: no scores, no raw analysis."""
        return {
            "request_id": self.request_id,
            "domain": self.domain,
            "status": self.status.value,
            "category": self.category,
            "persona": self.persona.to_dict() if self.persona else None,
            "readiness_score": self.readiness_score,
            "status_label": self.status_label,
            "confidence": self.confidence,
            "example_query": self.example_query,
            "queries": [
                {"id": q["id"], "text": q["text"], "supported": q["supported"]}
                for q in self.queries
            ],
            "structural_gaps": list(self.structural_gaps),
        }
