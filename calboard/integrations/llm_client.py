"""Generation gateway for calboard.

This module wraps an OpenAI-compatible chat completion API (Groq by default)
behind a small contract: a prompt goes in, text comes out. It never raises
on service failure:

- No credential (or LLM_MOCK=true): permanent mock mode with fixed
  placeholder content and no network client.
- Service or network error: fixed placeholder fallback, logged.
- Responses are cached by (mode, prompt prefix): 300s for live output,
  60s for mock/fallback output. A cache hit skips the network call.
"""

import os
import json
import logging
from enum import Enum
from typing import Optional
from openai import OpenAI, APIError
from dotenv import load_dotenv
from pydantic import BaseModel

from calboard.integrations.cache import ResponseCache, InMemoryResponseCache, cache_key
from calboard.models.constants import MOCK_CACHE_TTL_SEC, LIVE_CACHE_TTL_SEC

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_MODEL = "llama-3.3-70b-versatile"

JSON_SYSTEM_PROMPT = (
    "You are a helpful assistant that responds ONLY with valid JSON. "
    "No markdown, no explanations, just pure JSON."
)
TEXT_SYSTEM_PROMPT = "You are a helpful productivity assistant."

MOCK_JSON_RESPONSE = json.dumps({
    "tasks": [
        {"title": "Prepare slides / notes", "priority": "high"},
        {"title": "Review agenda", "priority": "medium"},
        {"title": "Send reminder", "priority": "low"},
    ]
})
MOCK_TEXT_RESPONSE = "Mock response: AI disabled."

FALLBACK_JSON_RESPONSE = json.dumps({
    "tasks": [
        {"title": "Prepare task (fallback)", "priority": "medium"},
        {"title": "Review agenda (fallback)", "priority": "high"},
        {"title": "Follow up (fallback)", "priority": "low"},
    ]
})
FALLBACK_TEXT_RESPONSE = "Unable to generate content."


class ResponseSource(str, Enum):
    """Where a generated response came from."""
    LIVE = "live"
    MOCK = "mock"
    FALLBACK = "fallback"


class GenerationResult(BaseModel):
    """Generated text plus its provenance."""
    text: str
    source: ResponseSource

    class Config:
        """Pydantic configuration."""
        frozen = True

    @property
    def is_fallback(self) -> bool:
        return self.source == ResponseSource.FALLBACK


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").strip().lower() == "true"


class GenerationGateway:
    """Client for the external text-generation service."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        cache: Optional[ResponseCache] = None,
        mock_mode: Optional[bool] = None,
        client=None,
    ):
        """Initialize the gateway.

        Args:
            api_key: Service API key. If None, reads LLM_API_KEY (or GROQ_API_KEY).
            model: Model name. If None, reads LLM_MODEL.
            base_url: OpenAI-compatible endpoint. If None, reads LLM_BASE_URL.
            cache: Response cache (defaults to a fresh in-memory cache).
            mock_mode: Force mock mode on/off. If None, mock mode is used when
                LLM_MOCK=true or no API key is configured.
            client: Pre-built OpenAI-compatible client (mainly for tests).
        """
        self.api_key = (api_key or os.getenv("LLM_API_KEY") or os.getenv("GROQ_API_KEY") or "").strip()
        self.model = model or os.getenv("LLM_MODEL", DEFAULT_MODEL)
        self.base_url = base_url or os.getenv("LLM_BASE_URL", DEFAULT_BASE_URL)
        self.cache: ResponseCache = cache if cache is not None else InMemoryResponseCache()

        if mock_mode is None:
            mock_mode = _env_flag("LLM_MOCK") or not self.api_key
        self.mock_mode = mock_mode

        self.client = None
        if self.mock_mode:
            logger.warning("LLM API key not configured (or LLM_MOCK=true). Generation runs in mock mode.")
        elif client is not None:
            self.client = client
        else:
            self.client = OpenAI(api_key=self.api_key, base_url=self.base_url)

    def generate(self, prompt: str, expect_json: bool = True) -> str:
        """Generate text for a prompt (never raises on service failure)."""
        return self.complete(prompt, expect_json).text

    def complete(self, prompt: str, expect_json: bool = True) -> GenerationResult:
        """Generate text for a prompt and report where it came from.

        Args:
            prompt: User prompt
            expect_json: Ask the model for a JSON object instead of free text

        Returns:
            GenerationResult; cached results are returned as originally produced
        """
        key = cache_key(prompt, expect_json)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Using cached generation response")
            return cached

        if self.mock_mode or self.client is None:
            result = GenerationResult(
                text=MOCK_JSON_RESPONSE if expect_json else MOCK_TEXT_RESPONSE,
                source=ResponseSource.MOCK,
            )
            self.cache.put(key, result, MOCK_CACHE_TTL_SEC)
            return result

        try:
            logger.info(f"Calling generation API (model: {self.model})")
            request = {
                "model": self.model,
                "messages": [
                    {"role": "system", "content": JSON_SYSTEM_PROMPT if expect_json else TEXT_SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                "temperature": 0.7,
                "max_tokens": 1000,
            }
            if expect_json:
                request["response_format"] = {"type": "json_object"}

            response = self.client.chat.completions.create(**request)
            content = response.choices[0].message.content if response.choices else None
            text = content if content is not None else "{}"

            result = GenerationResult(text=text, source=ResponseSource.LIVE)
            self.cache.put(key, result, LIVE_CACHE_TTL_SEC)
            logger.debug("Generation API call successful")
            return result

        except APIError as e:
            error_code = getattr(e, 'code', None)
            status_code = getattr(e, 'status_code', None)

            if status_code == 429:
                logger.warning("Generation API rate limit exceeded. Serving fallback content.")
            else:
                logger.error(f"Generation API error: {status_code or 'unknown'} ({error_code or 'unknown'})")
        except Exception as e:
            # Network, SDK or response-shape errors
            logger.error(f"Error calling generation API: {type(e).__name__}")

        result = GenerationResult(
            text=FALLBACK_JSON_RESPONSE if expect_json else FALLBACK_TEXT_RESPONSE,
            source=ResponseSource.FALLBACK,
        )
        self.cache.put(key, result, MOCK_CACHE_TTL_SEC)
        return result


# Process-wide gateway (singleton pattern)
_gateway: Optional[GenerationGateway] = None


def get_gateway() -> GenerationGateway:
    """Get or create the shared gateway instance (FastAPI dependency)."""
    global _gateway
    if _gateway is None:
        _gateway = GenerationGateway()
    return _gateway
