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
class GeminiConfig:
    base_url: str
    api_key: str
    model: str
    timeout_seconds: int


def _segment_texts(metadata: dict[str, Any]) -> dict[int, str]:
    # first supported segment per grounding chunk
    texts: dict[int, str] = {}
    for support in metadata.get('groundingSupports') or []:
        if not isinstance(support, dict):
            continue
        segment = str((support.get('segment') or {}).get('text') or '').strip()
        if not segment:
            continue
        for chunk_index in support.get('groundingChunkIndices') or []:
            if isinstance(chunk_index, int):
                texts.setdefault(chunk_index, segment)
    return texts


class GeminiAdapter:
    """Gemini ``generateContent`` with Google Search grounding."""

    def __init__(self, cfg: GeminiConfig, *, transport: httpx.BaseTransport | None = None):
        self.cfg = cfg
        self._transport = transport

    def search(self, prompt: str) -> LeadSearchResult:
        url = f"{self.cfg.base_url.rstrip('/')}/v1beta/models/{self.cfg.model}:generateContent"
        headers = {
            'Content-Type': 'application/json',
            'x-goog-api-key': self.cfg.api_key,
        }
        payload = {
            'contents': [{'role': 'user', 'parts': [{'text': prompt}]}],
            'tools': [{'google_search': {}}],
        }

        try:
            with httpx.Client(timeout=max(30, int(self.cfg.timeout_seconds)), transport=self._transport) as client:
                response = client.post(url, headers=headers, json=payload)
        except httpx.HTTPError as exc:
            raise ProviderError(f'Gemini request failed: {exc}', 502) from exc

        if response.status_code >= 400:
            raise ProviderError(error_message(response), response.status_code)

        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderError('Gemini returned a non-JSON response', 502) from exc
        return self.parse_response(data)

    def parse_response(self, data: dict[str, Any]) -> LeadSearchResult:
        if not isinstance(data, dict):
            raise ProviderError('Gemini returned an unexpected payload', 502)
        candidates = data.get('candidates')
        if not isinstance(candidates, list) or not candidates:
            reason = str((data.get('promptFeedback') or {}).get('blockReason') or '').strip()
            message = f'Gemini returned no candidates ({reason})' if reason else 'Gemini returned no candidates'
            raise ProviderError(message, 502)

        candidate = candidates[0] if isinstance(candidates[0], dict) else {}
        parts = (candidate.get('content') or {}).get('parts') or []
        texts = [str(part.get('text')) for part in parts if isinstance(part, dict) and part.get('text')]

        metadata = candidate.get('groundingMetadata') or {}
        segments = _segment_texts(metadata)
        citations: list[Citation] = []
        for index, chunk in enumerate(metadata.get('groundingChunks') or []):
            web = chunk.get('web') if isinstance(chunk, dict) else None
            if not isinstance(web, dict):
                continue
            try:
                citations.append(
                    Citation(
                        title=web.get('title') or '',
                        url=web.get('uri'),
                        cited_text=segments.get(index),
                    )
                )
            except ValidationError as exc:
                logger.warning('Skipping malformed Gemini grounding chunk: %s', exc)

        return LeadSearchResult(
            markdown=''.join(texts),
            citations=citations,
            web_search_requests=len(metadata.get('webSearchQueries') or []),
            provider=AIProvider.gemini.value,
            model=self.cfg.model,
        )
