"""
ai_client.py — OpenAI chat-completions wrapper used in live mode
=================================================================
One request/response call: a list of role-tagged messages in, generated
text out.  Model, max tokens and temperature come from ``OpenAIConfig``.

A caller-side sliding window caps usage at ``OPENAI_REQUESTS_PER_HOUR``
completions per rolling hour; the 51st call inside the hour raises
``RateLimitExceeded`` before any network traffic happens.

Raises:
    AIClientError        – no API key configured, or the API call failed.
    RateLimitExceeded    – hourly budget spent.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from openai import OpenAI, OpenAIError

from sentry_academy.config import OpenAIConfig, get_settings
from sentry_academy.rate_limit import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)

_HOUR = 3600.0
_RATE_KEY = "openai"


class AIClientError(RuntimeError):
    """The AI service is unavailable or returned an unusable response."""


class AIClient:
    def __init__(
        self,
        config: Optional[OpenAIConfig] = None,
        client: Optional[Any] = None,
        limiter: Optional[SlidingWindowRateLimiter] = None,
    ) -> None:
        self._cfg = config or get_settings().openai
        self._limiter = limiter or SlidingWindowRateLimiter(window_seconds=_HOUR)
        self._client = client
        if self._client is None and self._cfg.is_configured:
            self._client = OpenAI(api_key=self._cfg.api_key)

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    def complete(
        self,
        messages: list[dict[str, str]],
        *,
        json_mode: bool = False,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        if self._client is None:
            raise AIClientError("OpenAI is not configured. Set OPENAI_API_KEY or use mock mode.")
        self._limiter.acquire(_RATE_KEY, self._cfg.requests_per_hour)

        kwargs: dict[str, Any] = {
            "model":       self._cfg.model,
            "messages":    messages,
            "temperature": self._cfg.temperature if temperature is None else temperature,
            "max_tokens":  max_tokens or self._cfg.max_tokens,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = self._client.chat.completions.create(**kwargs)
        except OpenAIError as exc:
            logger.error("OpenAI completion failed: %s", exc)
            raise AIClientError(f"OpenAI API error: {exc}") from exc

        content = response.choices[0].message.content
        if not content:
            raise AIClientError("OpenAI returned an empty response")
        return content

    def complete_json(self, system_prompt: str, user_prompt: str, **kwargs: Any) -> dict[str, Any]:
        """JSON-mode completion parsed into a dict."""
        raw = self.complete(
            [
                {"role": "system", "content": system_prompt},
                {"role": "user",   "content": user_prompt},
            ],
            json_mode=True,
            **kwargs,
        )
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise AIClientError(f"OpenAI response was not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise AIClientError("OpenAI response was not a JSON object")
        return data

    def remaining_requests(self) -> int:
        return self._limiter.remaining(_RATE_KEY, self._cfg.requests_per_hour)
