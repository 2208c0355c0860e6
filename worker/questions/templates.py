"""Buyer-intent query templates.

Four fixed sets of five templates each. The set used for a scan is a
single lookup on (scope, audience).
"""

from dataclasses import dataclass
from enum import StrEnum


class Scope(StrEnum):
    """Where the business competes."""

    LOCAL = "local"
    NATIONAL = "national"


class Audience(StrEnum):
    """Who the business sells to."""

    CONSUMERS = "consumers"
    BUSINESSES = "businesses"
    NICHE = "niche"


class TemplateSet(StrEnum):
    """Named template sets."""

    LOCAL = "local"
    NATIONAL = "national"
    B2B = "b2b"
    CONSUMER = "consumer"


@dataclass(frozen=True)
class QueryTemplate:
    """A query template with literal {placeholder} tokens."""

    id: str
    template: str

    def render(self, tokens: dict[str, str]) -> str:
        text = self.template
        for name, value in tokens.items():
            text = text.replace("{" + name + "}", value)
        return text


TEMPLATE_SETS: dict[TemplateSet, list[QueryTemplate]] = {
    TemplateSet.LOCAL: [
        QueryTemplate("local_best", "Best {category} in {city}"),
        QueryTemplate("local_near", "{category} near me"),
        QueryTemplate("local_affordable", "Affordable {category} in {city}"),
        QueryTemplate("local_top", "Top {category} for {audience}"),
        QueryTemplate("local_compare", "Compare {category} options in {city}"),
    ],
    TemplateSet.NATIONAL: [
        QueryTemplate("nat_best", "Best {category} for small businesses"),
        QueryTemplate("nat_startup", "{category} for growing teams"),
        QueryTemplate("nat_compare", "Compare {category} tools"),
        QueryTemplate("nat_pricing", "{category} pricing and plans"),
        QueryTemplate("nat_how", "How does {category} help with {pain_point}"),
    ],
    TemplateSet.B2B: [
        QueryTemplate("b2b_best", "Best {category} for enterprise teams"),
        QueryTemplate("b2b_top", "Top {category} platforms for businesses"),
        QueryTemplate("b2b_compare", "Compare {category} solutions for B2B"),
        QueryTemplate("b2b_roi", "ROI of {category} for companies"),
        QueryTemplate("b2b_how", "How {category} improves team productivity"),
    ],
    TemplateSet.CONSUMER: [
        QueryTemplate("con_best", "Best {category} near me"),
        QueryTemplate("con_top", "Top-rated {category}"),
        QueryTemplate("con_affordable", "Affordable {category} options"),
        QueryTemplate("con_review", "{category} reviews and recommendations"),
        QueryTemplate("con_how", "How to choose the best {category}"),
    ],
}

# (scope, audience) -> template set
TEMPLATE_SET_LOOKUP: dict[tuple[Scope, Audience], TemplateSet] = {
    (Scope.LOCAL, Audience.CONSUMERS): TemplateSet.LOCAL,
    (Scope.LOCAL, Audience.BUSINESSES): TemplateSet.LOCAL,
    (Scope.LOCAL, Audience.NICHE): TemplateSet.LOCAL,
    (Scope.NATIONAL, Audience.BUSINESSES): TemplateSet.B2B,
    (Scope.NATIONAL, Audience.CONSUMERS): TemplateSet.CONSUMER,
    (Scope.NATIONAL, Audience.NICHE): TemplateSet.NATIONAL,
}

AUDIENCE_LABELS: dict[Audience, str] = {
    Audience.CONSUMERS: "consumers",
    Audience.BUSINESSES: "businesses",
    Audience.NICHE: "specialized users",
}


def select_template_set(scope: str, audience: str) -> TemplateSet:
    """Look up the template set for a scope/audience pair."""
    return TEMPLATE_SET_LOOKUP[(Scope(scope), Audience(audience))]


def get_templates(scope: str, audience: str) -> list[QueryTemplate]:
    return TEMPLATE_SETS[select_template_set(scope, audience)]
