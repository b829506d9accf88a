"""Client for the hosted language model that drafts surveys and images.

The gateway speaks the OpenAI-compatible chat-completions protocol. Every call
is a single attempt: rate-limit and quota responses surface as their own error
kinds so the admin surface can show distinct messages.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError

from pulsevote.core.settings import settings
from pulsevote.schemas.suggestion import (
    SUGGESTION_COUNT,
    SuggestionBatch,
    SuggestionCategory,
    SurveySuggestion,
)

logger = logging.getLogger(__name__)

HTTP_PAYMENT_REQUIRED = 402
HTTP_TOO_MANY_REQUESTS = 429

TOOL_NAME = "generate_surveys"
_CATEGORY_LIST = ", ".join(category.value for category in SuggestionCategory)

SYSTEM_PROMPT = f"""You are a creative survey suggestion generator for a community polling platform called {settings.app_name}.
Generate engaging, thought-provoking survey questions that will spark discussion and get people voting.

Rules:
- Generate exactly {SUGGESTION_COUNT} diverse survey suggestions
- Each survey should have 2-4 answer options
- Mix serious topics with fun/entertaining ones
- Include current events, everyday objects, trending topics, and fun scenarios
- Make questions relevant to the specified country/region when provided
- Keep questions neutral and non-offensive
- Include a brief image description for each survey (for AI image generation)

Return JSON in this exact format:
{{
  "suggestions": [
    {{
      "title": "Survey question here?",
      "description": "Brief context or explanation",
      "options": ["Option A", "Option B", "Option C"],
      "imagePrompt": "Description for generating an image",
      "category": "one of: {_CATEGORY_LIST}"
    }}
  ]
}}"""

IMAGE_PROMPT_TEMPLATE = (
    "Generate a vibrant, engaging image for a survey/poll about: {prompt}. "
    "Make it colorful, modern, and suitable for a social media platform. "
    "The image should be eye-catching and relevant to the topic."
)

_SUGGESTION_TOOL: dict[str, Any] = {
    "type": "function",
    "function": {
        "name": TOOL_NAME,
        "description": "Generate survey suggestions with options and image prompts",
        "parameters": {
            "type": "object",
            "properties": {
                "suggestions": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "title": {"type": "string"},
                            "description": {"type": "string"},
                            "options": {"type": "array", "items": {"type": "string"}},
                            "imagePrompt": {"type": "string"},
                            "category": {
                                "type": "string",
                                "enum": [c.value for c in SuggestionCategory],
                            },
                        },
                        "required": ["title", "description", "options", "imagePrompt", "category"],
                    },
                }
            },
            "required": ["suggestions"],
        },
    },
}

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


class SuggestionError(RuntimeError):
    """Base exception raised when the generation gateway fails."""

    user_message = "Failed to generate suggestions. Please try again."


class GeneratorDisabledError(SuggestionError):
    """Raised when no gateway credentials are configured."""

    user_message = "Survey generation is not configured."


class RateLimitedError(SuggestionError):
    """Raised when the gateway answers 429."""

    user_message = "Rate limits exceeded, please try again later."


class QuotaExceededError(SuggestionError):
    """Raised when the gateway answers 402."""

    user_message = "Payment required, please add funds to the AI workspace."


class MalformedSuggestionError(SuggestionError):
    """Raised when the gateway reply does not validate."""

    user_message = "The generator returned an unusable response. Please try again."


@dataclass(frozen=True)
class GeneratorConfig:
    """Resolved configuration for the generation gateway."""

    url: str
    api_key: str | None
    text_model: str
    image_model: str
    timeout_seconds: float


def load_generator_config() -> GeneratorConfig:
    """Build configuration object from global settings."""
    return GeneratorConfig(
        url=settings.ai_gateway_url,
        api_key=settings.ai_gateway_api_key,
        text_model=settings.ai_text_model,
        image_model=settings.ai_image_model,
        timeout_seconds=float(settings.ai_http_timeout_seconds),
    )


def build_user_prompt(region: str | None, topic: str | None) -> str:
    """Phrase the request for a batch of drafts."""
    if region and region.strip().lower() != "all":
        focus = (
            f"Focus on {topic} topics."
            if topic
            else "Mix different categories including news, everyday items, trends, and fun topics."
        )
        return f"Generate {SUGGESTION_COUNT} survey suggestions relevant to {region}. {focus}"
    focus = (
        f"Focus on {topic} topics."
        if topic
        else "Mix different categories including international news, everyday items like "
        "household objects, trending topics, and fun entertainment scenarios."
    )
    return f"Generate {SUGGESTION_COUNT} global survey suggestions. {focus}"


def parse_suggestions(payload: Mapping[str, Any]) -> list[SurveySuggestion]:
    """Extract and validate the drafts from a chat-completions reply.

    The tool call arguments are preferred; otherwise the first JSON object in
    the message content is used.

    Raises:
        MalformedSuggestionError: If no batch of exactly five valid drafts can
            be recovered.
    """
    try:
        message = payload["choices"][0]["message"]
    except (KeyError, IndexError, TypeError) as exc:
        raise MalformedSuggestionError("Reply has no message") from exc

    raw: str | None = None
    for call in message.get("tool_calls") or []:
        arguments = (call.get("function") or {}).get("arguments")
        if arguments:
            raw = arguments
            break
    if raw is None:
        match = _JSON_OBJECT.search(message.get("content") or "")
        if match is None:
            raise MalformedSuggestionError("Failed to parse AI response")
        raw = match.group(0)

    try:
        batch = SuggestionBatch.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise MalformedSuggestionError(f"Invalid suggestion batch: {exc}") from exc
    return batch.suggestions


def parse_image_url(payload: Mapping[str, Any]) -> str:
    """Return the first generated image reference in a reply."""
    try:
        url = payload["choices"][0]["message"]["images"][0]["image_url"]["url"]
    except (KeyError, IndexError, TypeError) as exc:
        raise MalformedSuggestionError("No image generated") from exc
    if not isinstance(url, str) or not url:
        raise MalformedSuggestionError("No image generated")
    return url


class SuggestionBridge:
    """HTTP client wrapper for the generation gateway."""

    def __init__(
        self,
        config: GeneratorConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or load_generator_config()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        return bool(self.config.api_key and self.config.url)

    async def _ensure_client(self) -> httpx.AsyncClient:
        if not self.enabled:
            raise GeneratorDisabledError("AI gateway is not configured")

        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    timeout=httpx.Timeout(self.config.timeout_seconds),
                    transport=self._transport,
                )
        return self._client

    async def close(self) -> None:
        """Clean up underlying HTTP client resources."""
        async with self._client_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None

    async def _complete(self, body: dict[str, Any]) -> dict[str, Any]:
        client = await self._ensure_client()
        headers = {"Authorization": f"Bearer {self.config.api_key}"}
        try:
            response = await client.post(self.config.url, json=body, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("AI gateway request failed: %s", exc)
            raise SuggestionError(f"AI gateway request failed: {exc}") from exc

        if response.status_code == HTTP_TOO_MANY_REQUESTS:
            logger.warning("AI gateway rate limit exceeded")
            raise RateLimitedError("Rate limit exceeded")
        if response.status_code == HTTP_PAYMENT_REQUIRED:
            logger.warning("AI gateway payment required")
            raise QuotaExceededError("Payment required")
        if response.is_error:
            logger.error("AI gateway error: %s %s", response.status_code, response.text)
            raise SuggestionError(f"AI gateway error: {response.status_code}")

        try:
            return response.json()
        except ValueError as exc:
            raise MalformedSuggestionError("AI gateway returned invalid JSON") from exc

    async def generate_suggestions(
        self, region: str | None = None, topic: str | None = None
    ) -> list[SurveySuggestion]:
        """Request exactly five validated drafts for ``region``."""
        logger.info("Generating survey suggestions for region=%s topic=%s", region, topic)
        payload = await self._complete(
            {
                "model": self.config.text_model,
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_user_prompt(region, topic)},
                ],
                "tools": [_SUGGESTION_TOOL],
                "tool_choice": {"type": "function", "function": {"name": TOOL_NAME}},
            }
        )
        suggestions = parse_suggestions(payload)
        logger.info("Received %d suggestions", len(suggestions))
        return suggestions

    async def generate_image(self, prompt: str) -> str:
        """Illustrate one draft and return the image reference."""
        logger.info("Generating image for prompt: %s", prompt)
        payload = await self._complete(
            {
                "model": self.config.image_model,
                "messages": [
                    {"role": "user", "content": IMAGE_PROMPT_TEMPLATE.format(prompt=prompt)}
                ],
                "modalities": ["image", "text"],
            }
        )
        return parse_image_url(payload)


class _SuggestionBridgeSingleton:
    """Singleton wrapper for SuggestionBridge."""

    _instance: SuggestionBridge | None = None

    @classmethod
    def get_instance(cls) -> SuggestionBridge:
        """Get or create the singleton SuggestionBridge instance."""
        if cls._instance is None:
            cls._instance = SuggestionBridge()
        return cls._instance


def get_suggestion_bridge() -> SuggestionBridge:
    """Return a singleton generation client instance."""
    return _SuggestionBridgeSingleton.get_instance()
