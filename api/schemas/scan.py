"""Scan request and response schemas."""

from pydantic import BaseModel, Field, field_validator, model_validator

from worker.crawler.url import clean_domain
from worker.questions.templates import Audience, Scope


class ScanRequestBody(BaseModel):
    """Input for both the sync and the queued scan endpoints."""

    domain: str = Field(..., max_length=255, description="Domain or URL to scan")
    scope: Scope = Field(..., description="Where the business competes")
    audience: Audience = Field(..., description="Who the business sells to")
    city: str | None = Field(None, max_length=100, description="Required for local scope")
    session_id: str | None = Field(None, max_length=100)

    @field_validator("domain")
    @classmethod
    def normalize_domain(cls, v: str) -> str:
        """Strip scheme, path and trailing slash."""
        domain = clean_domain(v)
        if not domain:
            raise ValueError("Domain is required")
        if " " in domain or "." not in domain:
            raise ValueError("Invalid domain")
        return domain

    @field_validator("city")
    @classmethod
    def blank_city_is_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None

    @model_validator(mode="after")
    def require_city_for_local(self) -> "ScanRequestBody":
        if self.scope == Scope.LOCAL and not self.city:
            raise ValueError("City is required for local scope")
        return self


class ScanQueuedResponse(BaseModel):
    """Returned when a scan is queued for background processing."""

    request_id: str
    scan_token: str
    status: str = "queued"
    estimated_time_seconds: int


class StepProgress(BaseModel):
    step: str
    status: str


class ScanStatusResponse(BaseModel):
    """Progress of a scan."""

    request_id: str
    status: str
    error: str | None = None
    progress: list[StepProgress]
    estimated_remaining_seconds: int


class PersonaResponse(BaseModel):
    title: str
    goal: str
    pain_points: list[str]


class QueryResult(BaseModel):
    id: str
    text: str
    supported: bool


class ScanResultResponse(BaseModel):
    """Public result of a completed scan."""

    request_id: str
    domain: str
    status: str
    category: str
    persona: PersonaResponse | None
    readiness_score: int = Field(..., ge=0, le=100)
    status_label: str
    confidence: str | None
    example_query: str
    queries: list[QueryResult]
    structural_gaps: list[str]
