"""Data models for category/persona classification."""

from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from uuid import UUID, uuid4


class ProviderType(StrEnum):
    """Supported completion providers."""

    ANTHROPIC = "anthropic"
    OPENROUTER = "openrouter"
    OPENAI = "openai"
    MOCK = "mock"


class ClassificationSource(StrEnum):
    """Which classifier produced a CategoryInfo."""

    MODEL = "model"
    RULES = "rules"


@dataclass
class Persona:
    """Primary buyer persona for a category."""

    title: str
    goal: str
    pain_points: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Persona":
        return cls(
            title=data.get("title", ""),
            goal=data.get("goal", ""),
            pain_points=list(data.get("pain_points", [])),
        )


@dataclass
class CategoryInfo:
    """Inferred business category, description and persona."""

    category: str
    short_description: str
    persona: Persona
    source: ClassificationSource = ClassificationSource.RULES

    @property
    def primary_pain_point(self) -> str | None:
        return self.persona.pain_points[0] if self.persona.pain_points else None

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "short_description": self.short_description,
            "persona": self.persona.to_dict(),
            "source": self.source.value,
        }


@dataclass
class ProviderError:
    """Error from a completion provider."""

    provider: ProviderType
    error_type: str
    message: str
    retryable: bool = True
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "provider": self.provider.value,
            "error_type": self.error_type,
            "message": self.message,
            "retryable": self.retryable,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class CompletionRequest:
    """A single completion request."""

    prompt: str
    id: UUID = field(default_factory=uuid4)
    system: str = ""
    model: str = ""
    temperature: float = 0.1
    max_tokens: int = 400


@dataclass
class CompletionResponse:
    """Response from a completion provider."""

    request_id: UUID
    provider: ProviderType
    model: str
    content: str
    success: bool = True
    latency_ms: float = 0.0
    error: ProviderError | None = None
