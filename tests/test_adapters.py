"""Tests for the provider adapters, with HTTP stubbed by httpx.MockTransport."""

from __future__ import annotations

import json

import httpx
import pytest

from leadgen.adapters.anthropic import AnthropicAdapter
from leadgen.adapters.gemini import GeminiAdapter
from leadgen.adapters.llm import ProviderError, build_search_adapter, parse_provider
from leadgen.config import Settings
from leadgen.types import AIProvider


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        anthropic_base_url='https://anthropic.test',
        gemini_base_url='https://gemini.test',
    )


class _Recorder:
    def __init__(self, status_code=200, payload=None, raise_exc=None):
        self.status_code = status_code
        self.payload = payload if payload is not None else {}
        self.raise_exc = raise_exc
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_exc is not None:
            raise self.raise_exc
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def body(self) -> dict:
        return json.loads(self.requests[-1].content)


ANTHROPIC_PAYLOAD = {
    'model': 'claude-haiku-4-5-20251001',
    'content': [
        {'type': 'server_tool_use', 'id': 'srv_1', 'name': 'web_search', 'input': {'query': 'acme'}},
        {'type': 'web_search_tool_result', 'tool_use_id': 'srv_1', 'content': []},
        {'type': 'text', 'text': '## Lead 1: Acme'},
        {
            'type': 'text',
            'text': '- **Phone:** +49 30 1234',
            'citations': [
                {
                    'type': 'web_search_result_location',
                    'url': 'https://acme.example/contact',
                    'title': 'Contact | Acme',
                    'cited_text': 'Call us at +49 30 1234',
                    'encrypted_index': 'abc',
                }
            ],
        },
    ],
    'usage': {'input_tokens': 10, 'output_tokens': 20, 'server_tool_use': {'web_search_requests': 3}},
}

GEMINI_PAYLOAD = {
    'candidates': [
        {
            'content': {'role': 'model', 'parts': [{'text': '## Lead 1: Beta\n'}, {'text': '- Name: Beta Inc'}]},
            'groundingMetadata': {
                'webSearchQueries': ['beta inc hamburg', 'beta inc contact'],
                'groundingChunks': [
                    {'web': {'uri': 'https://beta.example', 'title': 'beta.example'}},
                    {'web': {'uri': 'https://directory.example/beta', 'title': ''}},
                ],
                'groundingSupports': [
                    {'segment': {'text': 'Name: Beta Inc'}, 'groundingChunkIndices': [0, 1]},
                    {'segment': {'text': 'Later support'}, 'groundingChunkIndices': [1]},
                ],
            },
        }
    ]
}


# ---------------------------------------------------------------------------
# Anthropic
# ---------------------------------------------------------------------------

class TestAnthropicAdapter:
    def _adapter(self, settings, recorder):
        return build_search_adapter(
            'claude',
            api_key='sk-test',
            settings=settings,
            transport=httpx.MockTransport(recorder),
        )

    def test_request_shape(self, settings):
        recorder = _Recorder(payload=ANTHROPIC_PAYLOAD)
        self._adapter(settings, recorder).search('find leads')

        request = recorder.requests[0]
        assert str(request.url) == 'https://anthropic.test/v1/messages'
        assert request.headers['x-api-key'] == 'sk-test'
        assert request.headers['anthropic-version'] == '2023-06-01'
        body = recorder.body
        assert body['model'] == 'claude-haiku-4-5-20251001'
        assert body['max_tokens'] == 4096
        assert body['messages'] == [{'role': 'user', 'content': 'find leads'}]
        assert body['tools'] == [{'type': 'web_search_20250305', 'name': 'web_search', 'max_uses': 100}]

    def test_response_parsing(self, settings):
        result = self._adapter(settings, _Recorder(payload=ANTHROPIC_PAYLOAD)).search('find leads')
        assert result.markdown == '## Lead 1: Acme\n\n- **Phone:** +49 30 1234'
        assert result.web_search_requests == 3
        assert result.provider == 'claude'
        assert len(result.citations) == 1
        citation = result.citations[0]
        assert citation.url == 'https://acme.example/contact'
        assert citation.title == 'Contact | Acme'
        assert citation.cited_text == 'Call us at +49 30 1234'

    def test_missing_usage_counts_zero(self, settings):
        payload = {'content': [{'type': 'text', 'text': 'No leads'}]}
        result = self._adapter(settings, _Recorder(payload=payload)).search('x')
        assert result.web_search_requests == 0
        assert result.citations == []

    def test_upstream_error_message(self, settings):
        payload = {'type': 'error', 'error': {'type': 'authentication_error', 'message': 'invalid x-api-key'}}
        with pytest.raises(ProviderError) as excinfo:
            self._adapter(settings, _Recorder(status_code=401, payload=payload)).search('x')
        assert excinfo.value.status_code == 401
        assert str(excinfo.value) == 'invalid x-api-key'

    def test_error_without_body_uses_status_line(self, settings):
        def handler(request):
            return httpx.Response(503, text='upstream down')

        adapter = build_search_adapter('claude', api_key='k', settings=settings, transport=httpx.MockTransport(handler))
        with pytest.raises(ProviderError) as excinfo:
            adapter.search('x')
        assert excinfo.value.status_code == 503
        assert str(excinfo.value) == 'API Error: 503 Service Unavailable'

    def test_transport_error_maps_to_bad_gateway(self, settings):
        recorder = _Recorder(raise_exc=httpx.ConnectError('connection refused'))
        with pytest.raises(ProviderError) as excinfo:
            self._adapter(settings, recorder).search('x')
        assert excinfo.value.status_code == 502

    def test_non_object_payload_maps_to_bad_gateway(self, settings):
        with pytest.raises(ProviderError) as excinfo:
            self._adapter(settings, _Recorder(payload=['not', 'an', 'object'])).search('x')
        assert excinfo.value.status_code == 502
        assert 'unexpected payload' in str(excinfo.value)


# ---------------------------------------------------------------------------
# Gemini
# ---------------------------------------------------------------------------

class TestGeminiAdapter:
    def _adapter(self, settings, recorder, model=None):
        return build_search_adapter(
            'gemini',
            api_key='g-test',
            model=model,
            settings=settings,
            transport=httpx.MockTransport(recorder),
        )

    def test_request_shape(self, settings):
        recorder = _Recorder(payload=GEMINI_PAYLOAD)
        self._adapter(settings, recorder, model='gemini-2.5-pro').search('find leads')

        request = recorder.requests[0]
        assert str(request.url) == 'https://gemini.test/v1beta/models/gemini-2.5-pro:generateContent'
        assert request.headers['x-goog-api-key'] == 'g-test'
        body = recorder.body
        assert body['contents'] == [{'role': 'user', 'parts': [{'text': 'find leads'}]}]
        assert body['tools'] == [{'google_search': {}}]

    def test_default_model(self, settings):
        recorder = _Recorder(payload=GEMINI_PAYLOAD)
        self._adapter(settings, recorder).search('x')
        assert recorder.requests[0].url.path.endswith('/gemini-2.5-flash:generateContent')

    def test_response_parsing(self, settings):
        result = self._adapter(settings, _Recorder(payload=GEMINI_PAYLOAD)).search('x')
        assert result.markdown == '## Lead 1: Beta\n- Name: Beta Inc'
        assert result.web_search_requests == 2
        assert result.provider == 'gemini'
        assert [c.url for c in result.citations] == ['https://beta.example', 'https://directory.example/beta']
        assert result.citations[0].cited_text == 'Name: Beta Inc'
        assert result.citations[1].cited_text == 'Name: Beta Inc'
        assert result.citations[1].title == 'Source'

    def test_no_candidates(self, settings):
        payload = {'promptFeedback': {'blockReason': 'SAFETY'}}
        with pytest.raises(ProviderError) as excinfo:
            self._adapter(settings, _Recorder(payload=payload)).search('x')
        assert excinfo.value.status_code == 502
        assert 'SAFETY' in str(excinfo.value)

    def test_non_object_payload_maps_to_bad_gateway(self, settings):
        with pytest.raises(ProviderError) as excinfo:
            self._adapter(settings, _Recorder(payload='plain string')).search('x')
        assert excinfo.value.status_code == 502

    def test_upstream_error_message(self, settings):
        payload = {'error': {'code': 400, 'message': 'API key not valid', 'status': 'INVALID_ARGUMENT'}}
        with pytest.raises(ProviderError) as excinfo:
            self._adapter(settings, _Recorder(status_code=400, payload=payload)).search('x')
        assert excinfo.value.status_code == 400
        assert str(excinfo.value) == 'API key not valid'


class TestProviderSelection:
    def test_parse_provider(self):
        assert parse_provider('Gemini') is AIProvider.gemini
        assert parse_provider(AIProvider.claude) is AIProvider.claude

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            parse_provider('openai')

    def test_factory_types(self, settings):
        assert isinstance(build_search_adapter('claude', api_key='k', settings=settings), AnthropicAdapter)
        assert isinstance(build_search_adapter('gemini', api_key='k', settings=settings), GeminiAdapter)
