from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

import httpx

from leadgen.config import Settings, get_settings
from leadgen.types import AIProvider, Citation


class ProviderError(RuntimeError):
    """Upstream model API failure, carrying the HTTP status to report."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class LeadSearchResult:
    markdown: str
    citations: list[Citation] = field(default_factory=list)
    web_search_requests: int = 0
    provider: str = ''
    model: str = ''


class LeadSearchAdapter(Protocol):
    def search(self, prompt: str) -> LeadSearchResult: ...


def error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        error = payload.get('error')
        if isinstance(error, dict) and error.get('message'):
            return str(error['message'])
        if isinstance(error, str) and error.strip():
            return error
    return f'API Error: {response.status_code} {response.reason_phrase}'.strip()


def parse_provider(value: str | AIProvider | None) -> AIProvider:
    token = str(getattr(value, 'value', value) or '').strip().lower()
    if not token:
        return AIProvider(get_settings().default_provider)
    try:
        return AIProvider(token)
    except ValueError as exc:
        raise ValueError(f'Unsupported provider: {value!r}') from exc


def build_search_adapter(
    provider: str | AIProvider | None,
    *,
    api_key: str,
    model: str | None = None,
    settings: Settings | None = None,
    transport: httpx.BaseTransport | None = None,
) -> LeadSearchAdapter:
    from leadgen.adapters.anthropic import AnthropicAdapter, AnthropicConfig
    from leadgen.adapters.gemini import GeminiAdapter, GeminiConfig

    settings = settings or get_settings()
    resolved = parse_provider(provider)
    if resolved is AIProvider.gemini:
        return GeminiAdapter(
            GeminiConfig(
                base_url=settings.gemini_base_url,
                api_key=api_key,
                model=model or settings.gemini_model,
                timeout_seconds=settings.provider_timeout_seconds,
            ),
            transport=transport,
        )
    return AnthropicAdapter(
        AnthropicConfig(
            base_url=settings.anthropic_base_url,
            api_key=api_key,
            model=model or settings.anthropic_model,
            api_version=settings.anthropic_version,
            max_tokens=settings.anthropic_max_tokens,
            web_search_max_uses=settings.anthropic_web_search_max_uses,
            timeout_seconds=settings.provider_timeout_seconds,
        ),
        transport=transport,
    )
