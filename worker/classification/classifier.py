"""Category and persona classification.

Two implementations share the SiteClassifier interface: a deterministic
rule-based classifier and a language-model-backed classifier that falls
back to the rules on any failure.
"""

import json
from abc import ABC, abstractmethod
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from worker.classification.models import (
    CategoryInfo,
    ClassificationSource,
    CompletionRequest,
    Persona,
    ProviderType,
)
from worker.classification.personas import persona_for
from worker.classification.providers import CompletionProvider, ProviderConfig, get_provider
from worker.classification.rules import resolve_category
from worker.extraction.parser import PageRecord

logger = structlog.get_logger(__name__)

MAX_CONTEXT_PAGES = 2
EXCERPT_CHARS = 1500
MAX_PAIN_POINTS = 3

PROMPT_TEMPLATE = """Given the following website content from "{domain}", produce a structured analysis.

Website content:
{sample}

Return ONLY valid JSON (no markdown, no explanation) in exactly this format:
{{
  "category": "<business category in 3-5 words>",
  "short_description": "<one sentence describing what this business does>",
  "persona": {{
    "title": "<primary buyer/user role title>",
    "goal": "<their primary goal in 1 sentence>",
    "pain_points": ["<pain point 1>", "<pain point 2>", "<pain point 3>"]
  }}
}}"""


def build_text_sample(pages: list[PageRecord]) -> str:
    """Excerpt the first pages as URL/Title/H1/Content blocks."""
    return "\n\n---\n\n".join(
        f"URL: {page.url}\nTitle: {page.title}\nH1: {page.h1}\n"
        f"Content: {page.body_text_sample[:EXCERPT_CHARS]}"
        for page in pages[:MAX_CONTEXT_PAGES]
    )


def _clean_str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class PersonaPayload(BaseModel):
    """Persona block of a model response. Invalid fields become None."""

    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    goal: str | None = None
    pain_points: list[str] | None = None

    @field_validator("title", "goal", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str | None:
        return _clean_str(v)

    @field_validator("pain_points", mode="before")
    @classmethod
    def coerce_pain_points(cls, v: Any) -> list[str] | None:
        if not isinstance(v, list):
            return None
        points = [text for text in (_clean_str(item) for item in v) if text]
        return points[:MAX_PAIN_POINTS] or None


class ClassifierPayload(BaseModel):
    """Top-level model response. Invalid fields become None."""

    model_config = ConfigDict(extra="ignore")

    category: str | None = None
    short_description: str | None = None
    persona: PersonaPayload | None = None

    @field_validator("category", "short_description", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str | None:
        return _clean_str(v)

    @field_validator("persona", mode="before")
    @classmethod
    def coerce_persona(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else None


def extract_json_object(text: str) -> dict | None:
    """Decode the first JSON object embedded in text."""
    decoder = json.JSONDecoder()
    start = text.find("{")
    while start != -1:
        try:
            value, _ = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            start = text.find("{", start + 1)
            continue
        return value if isinstance(value, dict) else None
    return None


class SiteClassifier(ABC):
    """Infers a business category and buyer persona for a site."""

    @abstractmethod
    async def classify(self, pages: list[PageRecord], domain: str, audience: str) -> CategoryInfo:
        """Classify a site. Implementations never raise."""
        ...


class RuleBasedClassifier(SiteClassifier):
    """Deterministic classifier driven by ordered rule tables."""

    def classify_sync(self, pages: list[PageRecord], domain: str, audience: str) -> CategoryInfo:
        category = resolve_category(domain, build_text_sample(pages))
        return CategoryInfo(
            category=category,
            short_description=f"{domain} provides {category} services.",
            persona=persona_for(category, audience),
            source=ClassificationSource.RULES,
        )

    async def classify(self, pages: list[PageRecord], domain: str, audience: str) -> CategoryInfo:
        return self.classify_sync(pages, domain, audience)


class ModelBackedClassifier(SiteClassifier):
    """Classifier backed by a single completion request."""

    def __init__(
        self,
        provider: CompletionProvider,
        model: str | None = None,
        temperature: float = 0.1,
        max_tokens: int = 400,
        fallback: RuleBasedClassifier | None = None,
    ):
        self.provider = provider
        self.model = model or ""
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.fallback = fallback or RuleBasedClassifier()

    async def classify(self, pages: list[PageRecord], domain: str, audience: str) -> CategoryInfo:
        """
        Classify via the language model.

        Falls back to the rule-based result when the call fails or the
        response is not a JSON object. Missing or malformed fields are
        filled from the rule-based result individually.
        """
        rules_result = self.fallback.classify_sync(pages, domain, audience)

        try:
            request = CompletionRequest(
                prompt=PROMPT_TEMPLATE.format(domain=domain, sample=build_text_sample(pages)),
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
            response = await self.provider.complete(request)

            if not response.success:
                logger.warning(
                    "classifier_fallback",
                    domain=domain,
                    reason="provider_error",
                    error=response.error.message if response.error else None,
                )
                return rules_result

            raw = extract_json_object(response.content)
            if raw is None:
                logger.warning("classifier_fallback", domain=domain, reason="no_json_object")
                return rules_result

            payload = ClassifierPayload.model_validate(raw)

        except (ValidationError, ValueError, TypeError) as e:
            logger.warning("classifier_fallback", domain=domain, reason="invalid_response", error=str(e))
            return rules_result
        except Exception as e:
            logger.warning("classifier_fallback", domain=domain, reason="exception", error=str(e))
            return rules_result

        return self._merge(payload, rules_result)

    @staticmethod
    def _merge(payload: ClassifierPayload, rules_result: CategoryInfo) -> CategoryInfo:
        persona = payload.persona or PersonaPayload()
        defaults = rules_result.persona
        return CategoryInfo(
            category=payload.category or rules_result.category,
            short_description=payload.short_description or rules_result.short_description,
            persona=Persona(
                title=persona.title or defaults.title,
                goal=persona.goal or defaults.goal,
                pain_points=persona.pain_points or list(defaults.pain_points[:MAX_PAIN_POINTS]),
            ),
            source=ClassificationSource.MODEL,
        )


def build_classifier(settings=None, transport=None) -> SiteClassifier:
    """
    Create the classifier configured in settings.

    The first configured credential wins: Anthropic, then OpenRouter,
    then OpenAI. Without one the rule-based classifier is used.
    """
    if settings is None:
        from api.config import get_settings

        settings = get_settings()

    candidates = [
        (ProviderType.ANTHROPIC, settings.anthropic_api_key),
        (ProviderType.OPENROUTER, settings.openrouter_api_key),
        (ProviderType.OPENAI, settings.openai_api_key),
    ]
    for provider_type, api_key in candidates:
        if api_key:
            provider = get_provider(
                provider_type,
                ProviderConfig(api_key=api_key, timeout_seconds=settings.classifier_timeout_seconds),
                transport=transport,
            )
            return ModelBackedClassifier(
                provider,
                model=settings.classifier_model,
                temperature=settings.classifier_temperature,
                max_tokens=settings.classifier_max_tokens,
            )

    return RuleBasedClassifier()
