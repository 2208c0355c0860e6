"""Deterministic buyer-intent query synthesis."""

from dataclasses import dataclass, field

from worker.questions.templates import AUDIENCE_LABELS, Audience, get_templates

DEFAULT_CITY = "your area"
DEFAULT_PAIN_POINT = "efficiency challenges"


@dataclass
class QueryScores:
    """Per-signal coverage scores for the best matching page."""

    title: float = 0.0
    heading: float = 0.0
    body: float = 0.0
    combined: float = 0.0

    def to_dict(self) -> dict:
        return {"title": self.title, "heading": self.heading, "body": self.body}


@dataclass
class Query:
    """A synthesized buyer query and its coverage verdict."""

    id: str
    text: str
    template_used: str
    tokens: dict[str, str] = field(default_factory=dict)
    supported: bool = False
    best_page_url: str | None = None
    scores: QueryScores = field(default_factory=QueryScores)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "text": self.text,
            "template_used": self.template_used,
            "tokens": dict(self.tokens),
            "supported": self.supported,
            "best_page_url": self.best_page_url,
            "scores": self.scores.to_dict(),
        }

    def to_public_dict(self) -> dict:
        return {"id": self.id, "text": self.text, "supported": self.supported}


def generate_queries(
    category: str,
    scope: str,
    audience: str,
    city: str | None = None,
    pain_point: str | None = None,
) -> list[Query]:
    """
    Generate the five buyer-intent queries for a scan.

    Args:
        category: Business category label
        scope: "local" or "national"
        audience: "consumers", "businesses" or "niche"
        city: Optional city; only the part before the first comma is used
        pain_point: Optional persona pain point

    Returns:
        Unscored queries in template order
    """
    city_name = city.split(",")[0].strip() if city else ""
    tokens = {
        "category": category,
        "city": city_name or DEFAULT_CITY,
        "audience": AUDIENCE_LABELS[Audience(audience)],
        "pain_point": pain_point or DEFAULT_PAIN_POINT,
    }

    return [
        Query(
            id=template.id,
            text=template.render(tokens),
            template_used=template.template,
            tokens=dict(tokens),
        )
        for template in get_templates(scope, audience)
    ]
