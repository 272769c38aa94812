from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError

from leadgen.adapters.llm import LeadSearchResult, ProviderError, error_message
from leadgen.types import AIProvider, Citation


logger = logging.getLogger(__name__)


@dataclass
class AnthropicConfig:
    base_url: str
    api_key: str
    model: str
    api_version: str
    max_tokens: int
    web_search_max_uses: int
    timeout_seconds: int


class AnthropicAdapter:
    """Claude Messages API with the server-side ``web_search`` tool."""

    def __init__(self, cfg: AnthropicConfig, *, transport: httpx.BaseTransport | None = None):
        self.cfg = cfg
        self._transport = transport

    def _payload(self, prompt: str) -> dict[str, Any]:
        return {
            'model': self.cfg.model,
            'max_tokens': self.cfg.max_tokens,
            'messages': [{'role': 'user', 'content': prompt}],
            'tools': [
                {
                    'type': 'web_search_20250305',
                    'name': 'web_search',
                    'max_uses': self.cfg.web_search_max_uses,
                }
            ],
        }

    def search(self, prompt: str) -> LeadSearchResult:
        url = f"{self.cfg.base_url.rstrip('/')}/v1/messages"
        headers = {
            'Content-Type': 'application/json',
            'x-api-key': self.cfg.api_key,
            'anthropic-version': self.cfg.api_version,
        }

        try:
            with httpx.Client(timeout=max(30, int(self.cfg.timeout_seconds)), transport=self._transport) as client:
                response = client.post(url, headers=headers, json=self._payload(prompt))
        except httpx.HTTPError as exc:
            raise ProviderError(f'Anthropic request failed: {exc}', 502) from exc

        if response.status_code >= 400:
            raise ProviderError(error_message(response), response.status_code)

        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderError('Anthropic returned a non-JSON response', 502) from exc
        return self.parse_response(data)

    def parse_response(self, data: dict[str, Any]) -> LeadSearchResult:
        if not isinstance(data, dict):
            raise ProviderError('Anthropic returned an unexpected payload', 502)
        blocks = data.get('content')
        text_blocks = [
            block
            for block in (blocks if isinstance(blocks, list) else [])
            if isinstance(block, dict) and block.get('type') == 'text'
        ]

        citations: list[Citation] = []
        for block in text_blocks:
            for raw in block.get('citations') or []:
                if not isinstance(raw, dict):
                    continue
                try:
                    citations.append(Citation.model_validate(raw))
                except ValidationError as exc:
                    logger.warning('Skipping malformed Anthropic citation: %s', exc)

        usage = data.get('usage') or {}
        server_tool_use = usage.get('server_tool_use') or {}
        return LeadSearchResult(
            markdown='\n\n'.join(str(block.get('text') or '') for block in text_blocks),
            citations=citations,
            web_search_requests=int(server_tool_use.get('web_search_requests') or 0),
            provider=AIProvider.claude.value,
            model=str(data.get('model') or self.cfg.model),
        )
