"""Tests for rule-based and model-backed classification."""

import json

import httpx
import pytest

from worker.classification.classifier import (
    ModelBackedClassifier,
    RuleBasedClassifier,
    build_classifier,
    build_text_sample,
    extract_json_object,
)
from worker.classification.models import ClassificationSource
from worker.classification.providers import (
    AnthropicProvider,
    MockProvider,
    OpenAIProvider,
    OpenRouterProvider,
)
from worker.extraction.parser import PageRecord


@pytest.fixture
def pages() -> list[PageRecord]:
    return [
        PageRecord(
            url="https://example.com",
            title="Example Bakery",
            h1="Fresh bread",
            body_text_sample="We bake bread daily. " * 200,
        ),
        PageRecord(url="https://example.com/faq", title="FAQ", h1="Questions"),
        PageRecord(url="https://example.com/contact", title="Contact", h1="Reach us"),
    ]


VALID_RESPONSE = json.dumps(
    {
        "category": "artisan bakery",
        "short_description": "A neighborhood bakery.",
        "persona": {
            "title": "Local Food Lover",
            "goal": "Buy fresh bread nearby",
            "pain_points": ["stale bread", "early sellouts", "parking", "prices"],
        },
    }
)


class TestTextSample:
    """Tests for classifier prompt excerpts."""

    def test_first_two_pages_truncated(self, pages) -> None:
        sample = build_text_sample(pages)

        assert "https://example.com/faq" in sample
        assert "https://example.com/contact" not in sample
        assert sample.count("\n\n---\n\n") == 1
        first_block = sample.split("\n\n---\n\n")[0]
        content = first_block.split("Content: ", 1)[1]
        assert len(content) == 1500


class TestExtractJsonObject:
    """Tests for JSON extraction from model output."""

    def test_plain_object(self) -> None:
        assert extract_json_object('{"a": 1}') == {"a": 1}

    def test_embedded_in_prose(self) -> None:
        text = 'Sure! Here you go:\n```json\n{"category": "x"}\n```'
        assert extract_json_object(text) == {"category": "x"}

    def test_skips_broken_braces(self) -> None:
        assert extract_json_object('{oops} then {"ok": true}') == {"ok": True}

    def test_no_object(self) -> None:
        assert extract_json_object("no json here") is None
        assert extract_json_object("") is None


class TestRuleBasedClassifier:
    """Tests for the deterministic classifier."""

    async def test_classifies_from_content(self, pages) -> None:
        info = await RuleBasedClassifier().classify(pages, "example.com", "consumers")

        assert info.category == "bakery"
        assert info.short_description == "example.com provides bakery services."
        assert info.persona.title == "Local Customer"
        assert info.source == ClassificationSource.RULES

    async def test_deterministic(self, pages) -> None:
        classifier = RuleBasedClassifier()
        first = await classifier.classify(pages, "example.com", "niche")
        second = await classifier.classify(pages, "example.com", "niche")
        assert first == second


class TestModelBackedClassifier:
    """Tests for the language-model-backed classifier."""

    async def test_valid_response(self, pages) -> None:
        provider = MockProvider(content=VALID_RESPONSE)
        info = await ModelBackedClassifier(provider).classify(pages, "example.com", "consumers")

        assert info.category == "artisan bakery"
        assert info.short_description == "A neighborhood bakery."
        assert info.persona.title == "Local Food Lover"
        assert info.persona.pain_points == ["stale bread", "early sellouts", "parking"]
        assert info.source == ClassificationSource.MODEL
        assert "example.com" in provider.calls[0].prompt

    async def test_provider_failure_falls_back(self, pages) -> None:
        provider = MockProvider()
        provider.set_failure_mode(True)
        info = await ModelBackedClassifier(provider).classify(pages, "example.com", "consumers")

        assert info.category == "bakery"
        assert info.source == ClassificationSource.RULES

    async def test_exception_falls_back(self, pages) -> None:
        provider = MockProvider()
        provider.should_raise = RuntimeError("network down")
        info = await ModelBackedClassifier(provider).classify(pages, "example.com", "consumers")

        assert info.source == ClassificationSource.RULES

    async def test_non_json_falls_back(self, pages) -> None:
        provider = MockProvider(content="I cannot help with that.")
        info = await ModelBackedClassifier(provider).classify(pages, "example.com", "consumers")

        assert info.source == ClassificationSource.RULES

    async def test_missing_fields_filled_from_rules(self, pages) -> None:
        provider = MockProvider(content=json.dumps({"category": "bread shop", "persona": "oops"}))
        info = await ModelBackedClassifier(provider).classify(pages, "example.com", "consumers")

        assert info.category == "bread shop"
        assert info.short_description == "example.com provides bakery services."
        assert info.persona.title == "Local Customer"
        assert info.source == ClassificationSource.MODEL

    async def test_malformed_field_types(self, pages) -> None:
        payload = {
            "category": 42,
            "short_description": "  ",
            "persona": {"title": "Buyer", "goal": None, "pain_points": "not a list"},
        }
        provider = MockProvider(content=json.dumps(payload))
        info = await ModelBackedClassifier(provider).classify(pages, "example.com", "consumers")

        assert info.category == "bakery"
        assert info.short_description == "example.com provides bakery services."
        assert info.persona.title == "Buyer"
        assert info.persona.goal
        assert 1 <= len(info.persona.pain_points) <= 3


class TestBuildClassifier:
    """Tests for classifier selection from settings."""

    def test_rules_without_credentials(self, settings) -> None:
        assert isinstance(build_classifier(settings), RuleBasedClassifier)

    def test_provider_priority(self, settings) -> None:
        settings.openai_api_key = "sk-openai"
        settings.openrouter_api_key = "sk-router"
        classifier = build_classifier(settings)
        assert isinstance(classifier, ModelBackedClassifier)
        assert isinstance(classifier.provider, OpenRouterProvider)

        settings.anthropic_api_key = "sk-ant"
        assert isinstance(build_classifier(settings).provider, AnthropicProvider)

    def test_openai_only(self, settings) -> None:
        settings.openai_api_key = "sk-openai"
        assert isinstance(build_classifier(settings).provider, OpenAIProvider)

    async def test_end_to_end_with_transport(self, settings, pages) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/v1/messages"
            assert request.headers["x-api-key"] == "sk-ant"
            return httpx.Response(200, json={"content": [{"type": "text", "text": VALID_RESPONSE}]})

        settings.anthropic_api_key = "sk-ant"
        classifier = build_classifier(settings, transport=httpx.MockTransport(handler))
        info = await classifier.classify(pages, "example.com", "consumers")

        assert info.category == "artisan bakery"
        assert info.source == ClassificationSource.MODEL
