"""Tests for the generation gateway.

The OpenAI-compatible client is replaced with a MagicMock so no network
calls are made.
"""

import json
import httpx
import pytest
from unittest.mock import MagicMock

from openai import APIError, RateLimitError

from calboard.integrations.cache import InMemoryResponseCache
from calboard.integrations.llm_client import (
    FALLBACK_JSON_RESPONSE,
    FALLBACK_TEXT_RESPONSE,
    MOCK_JSON_RESPONSE,
    MOCK_TEXT_RESPONSE,
    GenerationGateway,
    ResponseSource,
)
from calboard.models.constants import LIVE_CACHE_TTL_SEC, MOCK_CACHE_TTL_SEC


def _completion(content):
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    return response


def _request():
    return httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")


class RecordingCache(InMemoryResponseCache):
    """In-memory cache that remembers the TTL of each put."""

    def __init__(self):
        super().__init__()
        self.ttls = {}

    def put(self, key, value, ttl_seconds):
        self.ttls[key] = ttl_seconds
        super().put(key, value, ttl_seconds)


@pytest.fixture
def client():
    mock = MagicMock()
    mock.chat.completions.create.return_value = _completion('{"tasks": []}')
    return mock


@pytest.fixture
def live_gateway(client):
    return GenerationGateway(api_key="test-key", mock_mode=False, client=client, cache=RecordingCache())


class TestMockMode:
    """Without a credential the gateway never builds a client."""

    def test_no_key_means_mock_mode(self, monkeypatch):
        monkeypatch.delenv("LLM_API_KEY", raising=False)
        monkeypatch.delenv("GROQ_API_KEY", raising=False)
        monkeypatch.setenv("LLM_MOCK", "false")

        gateway = GenerationGateway()

        assert gateway.mock_mode is True
        assert gateway.client is None

    def test_mock_flag_overrides_key(self, monkeypatch):
        monkeypatch.setenv("LLM_MOCK", "true")

        gateway = GenerationGateway(api_key="test-key")

        assert gateway.mock_mode is True
        assert gateway.client is None

    def test_mock_json_response(self, mock_gateway):
        result = mock_gateway.complete("anything", expect_json=True)

        assert result.source == ResponseSource.MOCK
        assert result.text == MOCK_JSON_RESPONSE
        titles = [t["title"] for t in json.loads(result.text)["tasks"]]
        assert titles == ["Prepare slides / notes", "Review agenda", "Send reminder"]

    def test_mock_text_response(self, mock_gateway):
        assert mock_gateway.generate("anything", expect_json=False) == MOCK_TEXT_RESPONSE

    def test_mock_results_cached_with_short_ttl(self):
        cache = RecordingCache()
        gateway = GenerationGateway(mock_mode=True, cache=cache)
        gateway.complete("prompt", expect_json=False)

        assert list(cache.ttls.values()) == [MOCK_CACHE_TTL_SEC]


class TestLiveCalls:
    """Test requests sent to the chat completion API."""

    def test_json_request_shape(self, live_gateway, client):
        live_gateway.complete("plan my day", expect_json=True)

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["temperature"] == 0.7
        assert kwargs["max_tokens"] == 1000
        assert kwargs["messages"][-1] == {"role": "user", "content": "plan my day"}

    def test_text_request_has_no_response_format(self, live_gateway, client):
        client.chat.completions.create.return_value = _completion("Dear team,")

        assert live_gateway.generate("write email", expect_json=False) == "Dear team,"
        assert "response_format" not in client.chat.completions.create.call_args.kwargs

    def test_live_result_is_cached(self, live_gateway, client):
        first = live_gateway.complete("same prompt", expect_json=True)
        second = live_gateway.complete("same prompt", expect_json=True)

        assert first == second
        assert first.source == ResponseSource.LIVE
        assert client.chat.completions.create.call_count == 1
        assert list(live_gateway.cache.ttls.values()) == [LIVE_CACHE_TTL_SEC]

    def test_modes_are_cached_separately(self, live_gateway, client):
        live_gateway.complete("same prompt", expect_json=True)
        live_gateway.complete("same prompt", expect_json=False)

        assert client.chat.completions.create.call_count == 2

    def test_empty_content_becomes_empty_object(self, live_gateway, client):
        client.chat.completions.create.return_value = _completion(None)

        assert live_gateway.generate("p", expect_json=True) == "{}"


class TestFailures:
    """Service failures never raise."""

    def test_api_error_gives_json_fallback(self, live_gateway, client):
        client.chat.completions.create.side_effect = APIError("boom", _request(), body=None)

        result = live_gateway.complete("p", expect_json=True)

        assert result.is_fallback
        assert result.text == FALLBACK_JSON_RESPONSE

    def test_rate_limit_gives_text_fallback(self, live_gateway, client):
        response = httpx.Response(429, request=_request())
        client.chat.completions.create.side_effect = RateLimitError("slow down", response=response, body=None)

        result = live_gateway.complete("p", expect_json=False)

        assert result.is_fallback
        assert result.text == FALLBACK_TEXT_RESPONSE

    def test_unexpected_error_gives_fallback(self, live_gateway, client):
        client.chat.completions.create.side_effect = ConnectionError("network down")

        assert live_gateway.generate("p", expect_json=False) == FALLBACK_TEXT_RESPONSE

    def test_fallback_cached_with_short_ttl(self, live_gateway, client):
        client.chat.completions.create.side_effect = ConnectionError("network down")

        live_gateway.complete("p", expect_json=True)
        live_gateway.complete("p", expect_json=True)

        assert client.chat.completions.create.call_count == 1
        assert list(live_gateway.cache.ttls.values()) == [MOCK_CACHE_TTL_SEC]
