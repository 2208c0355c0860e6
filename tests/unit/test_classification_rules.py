"""Tests for category rule tables and persona lookup."""

import pytest

from worker.classification.personas import (
    GENERIC_PAIN_POINTS,
    GENERIC_TITLES,
    PERSONAS,
    persona_for,
)
from worker.classification.rules import (
    CONTENT_RULES,
    FALLBACK_CATEGORY,
    category_from_content,
    category_from_domain,
    domain_local_part,
    resolve_category,
)


class TestDomainRules:
    """Tests for domain-based categories."""

    def test_local_part_strips_tld(self) -> None:
        assert domain_local_part("SunriseBakery.com") == "sunrisebakery"
        assert domain_local_part("acme.co.uk") == "acme"
        assert domain_local_part("example.dev") == "example.dev"

    @pytest.mark.parametrize(
        ("domain", "expected"),
        [
            ("sunrisebakery.com", "bakery"),
            ("joespizza.net", "restaurant / food service"),
            ("smiledental.com", "dental / medical practice"),
            ("cityplumbing.com", "home services"),
            ("bestrecruiters.io", "recruitment / HR"),
        ],
    )
    def test_domain_matches(self, domain: str, expected: str) -> None:
        assert category_from_domain(domain) == expected

    def test_no_domain_match(self) -> None:
        assert category_from_domain("example.com") is None


class TestContentRules:
    """Tests for content-based categories."""

    def test_first_match_wins(self) -> None:
        # "menu" (restaurant) appears before "software" (SaaS) in the table
        assert category_from_content("Our menu software") == "restaurant / food service"

    def test_bakery_needs_whole_word(self) -> None:
        assert category_from_content("Fresh cupcakes daily") != "bakery"
        assert category_from_content("Fresh cupcake daily") == "bakery"

    def test_catch_all(self) -> None:
        assert category_from_content("zzz qqq") == FALLBACK_CATEGORY
        assert CONTENT_RULES[-1].category == FALLBACK_CATEGORY

    def test_ai_tools(self) -> None:
        assert category_from_content("Machine learning for decisions") == "AI/ML tools"


class TestResolveCategory:
    """Tests for domain/content precedence."""

    def test_domain_wins(self) -> None:
        assert resolve_category("sunrisebakery.com", "Our software platform") == "bakery"

    def test_content_when_domain_silent(self) -> None:
        assert resolve_category("example.com", "Attorney and legal advice") == "legal services"


class TestPersonas:
    """Tests for persona lookup."""

    def test_known_category(self) -> None:
        persona = persona_for("SaaS", "businesses")
        assert persona.title == PERSONAS["SaaS"].title
        assert 1 <= len(persona.pain_points) <= 3

    def test_returns_copies(self) -> None:
        persona = persona_for("SaaS", "businesses")
        persona.pain_points.append("mutated")
        assert "mutated" not in PERSONAS["SaaS"].pain_points

    @pytest.mark.parametrize("audience", ["businesses", "consumers", "niche"])
    def test_generic_by_audience(self, audience: str) -> None:
        persona = persona_for("professional services", audience)
        assert persona.title == GENERIC_TITLES[audience]
        assert persona.pain_points == GENERIC_PAIN_POINTS

    def test_every_persona_has_bounded_pain_points(self) -> None:
        for persona in PERSONAS.values():
            assert 1 <= len(persona.pain_points) <= 3
