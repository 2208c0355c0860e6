"""Completion providers - unified interface for language model calls."""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass

import httpx

from worker.classification.models import (
    CompletionRequest,
    CompletionResponse,
    ProviderError,
    ProviderType,
)


@dataclass
class ProviderConfig:
    """Configuration for a completion provider."""

    api_key: str = ""
    base_url: str = ""
    default_model: str = ""
    timeout_seconds: float = 15.0


class CompletionProvider(ABC):
    """Abstract base class for completion providers."""

    provider_type: ProviderType

    def __init__(
        self,
        config: ProviderConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self._transport = transport

    @abstractmethod
    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        """Run a single completion request. Failures are returned, not raised."""
        ...

    def _model(self, request: CompletionRequest) -> str:
        return request.model or self.config.default_model

    def _failure(
        self,
        request: CompletionRequest,
        start_time: float,
        error_type: str,
        message: str,
        retryable: bool = True,
    ) -> CompletionResponse:
        return CompletionResponse(
            request_id=request.id,
            provider=self.provider_type,
            model=self._model(request),
            content="",
            success=False,
            latency_ms=(time.perf_counter() - start_time) * 1000,
            error=ProviderError(
                provider=self.provider_type,
                error_type=error_type,
                message=message,
                retryable=retryable,
            ),
        )

    async def _post(
        self,
        request: CompletionRequest,
        url: str,
        headers: dict[str, str],
        payload: dict,
    ) -> CompletionResponse:
        """POST a payload and extract the completion text."""
        start_time = time.perf_counter()

        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(url, headers=headers, json=payload)

            if response.status_code != 200:
                return self._failure(
                    request,
                    start_time,
                    "api_error",
                    f"HTTP {response.status_code}: {response.text}",
                    retryable=response.status_code >= 500,
                )

            content = self._extract_content(response.json())

        except httpx.TimeoutException:
            return self._failure(
                request,
                start_time,
                "timeout",
                f"Request timed out after {self.config.timeout_seconds}s",
            )
        except Exception as e:
            return self._failure(request, start_time, "exception", str(e))

        return CompletionResponse(
            request_id=request.id,
            provider=self.provider_type,
            model=self._model(request),
            content=content,
            latency_ms=(time.perf_counter() - start_time) * 1000,
            success=True,
        )

    @abstractmethod
    def _extract_content(self, data: dict) -> str:
        """Pull the completion text out of a provider response body."""
        ...


class AnthropicProvider(CompletionProvider):
    """Anthropic Messages API provider."""

    provider_type = ProviderType.ANTHROPIC

    def __init__(self, config: ProviderConfig, transport: httpx.AsyncBaseTransport | None = None):
        super().__init__(config, transport)
        if not config.base_url:
            config.base_url = "https://api.anthropic.com/v1"
        if not config.default_model:
            config.default_model = "claude-3-haiku-20240307"

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        """Run a completion via the Messages API."""
        headers = {
            "x-api-key": self.config.api_key,
            "anthropic-version": "2023-06-01",
            "Content-Type": "application/json",
        }
        payload: dict = {
            "model": self._model(request),
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
            "messages": [{"role": "user", "content": request.prompt}],
        }
        if request.system:
            payload["system"] = request.system

        return await self._post(request, f"{self.config.base_url}/messages", headers, payload)

    def _extract_content(self, data: dict) -> str:
        return "".join(
            block.get("text", "") for block in data["content"] if block.get("type") == "text"
        )


class _ChatCompletionsProvider(CompletionProvider):
    """Shared request shape for OpenAI-compatible chat completion APIs."""

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        messages = []
        if request.system:
            messages.append({"role": "system", "content": request.system})
        messages.append({"role": "user", "content": request.prompt})

        payload = {
            "model": self._model(request),
            "messages": messages,
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
        }
        return await self._post(
            request, f"{self.config.base_url}/chat/completions", self._headers(), payload
        )

    def _extract_content(self, data: dict) -> str:
        content: str = data["choices"][0]["message"]["content"]
        return content


class OpenRouterProvider(_ChatCompletionsProvider):
    """OpenRouter aggregator provider."""

    provider_type = ProviderType.OPENROUTER

    def __init__(self, config: ProviderConfig, transport: httpx.AsyncBaseTransport | None = None):
        super().__init__(config, transport)
        if not config.base_url:
            config.base_url = "https://openrouter.ai/api/v1"
        if not config.default_model:
            config.default_model = "anthropic/claude-3-haiku"

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        headers["HTTP-Referer"] = "https://citable.app"
        headers["X-Title"] = "Citable Readiness Scanner"
        return headers


class OpenAIProvider(_ChatCompletionsProvider):
    """Direct OpenAI provider."""

    provider_type = ProviderType.OPENAI

    def __init__(self, config: ProviderConfig, transport: httpx.AsyncBaseTransport | None = None):
        super().__init__(config, transport)
        if not config.base_url:
            config.base_url = "https://api.openai.com/v1"
        if not config.default_model:
            config.default_model = "gpt-4o-mini"

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        # Map OpenRouter model names to OpenAI
        if request.model.startswith("openai/"):
            request.model = request.model.removeprefix("openai/")
        return await super().complete(request)


class MockProvider(CompletionProvider):
    """Mock provider for testing."""

    provider_type = ProviderType.MOCK

    def __init__(self, config: ProviderConfig | None = None, content: str = "{}"):
        super().__init__(config or ProviderConfig(default_model="mock"))
        self.content = content
        self.should_fail: bool = False
        self.should_raise: Exception | None = None
        self.calls: list[CompletionRequest] = []

    def set_response(self, content: str) -> None:
        """Set the text returned by subsequent calls."""
        self.content = content

    def set_failure_mode(self, should_fail: bool) -> None:
        """Configure failure behavior."""
        self.should_fail = should_fail

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        """Return the configured mock response."""
        self.calls.append(request)

        if self.should_raise is not None:
            raise self.should_raise

        if self.should_fail:
            return self._failure(
                request, time.perf_counter(), "mock_failure", "Simulated failure"
            )

        return CompletionResponse(
            request_id=request.id,
            provider=self.provider_type,
            model=self._model(request),
            content=self.content,
            latency_ms=1.0,
            success=True,
        )

    def _extract_content(self, data: dict) -> str:
        return str(data)


def get_provider(
    provider_type: ProviderType,
    config: ProviderConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> CompletionProvider:
    """Factory function to get a completion provider."""
    if config is None:
        config = ProviderConfig()

    if provider_type == ProviderType.MOCK:
        return MockProvider(config)

    providers: dict[ProviderType, type[CompletionProvider]] = {
        ProviderType.ANTHROPIC: AnthropicProvider,
        ProviderType.OPENROUTER: OpenRouterProvider,
        ProviderType.OPENAI: OpenAIProvider,
    }

    provider_class = providers.get(provider_type)
    if provider_class is None:
        raise ValueError(f"Unknown provider type: {provider_type}")

    return provider_class(config, transport)  # type: ignore[call-arg]
