"""
Tests for AIClient using a stand-in for the OpenAI SDK client.
No network traffic; the fake records every call it receives.
"""
from types import SimpleNamespace

import pytest
from openai import OpenAIError

from sentry_academy.ai_client import AIClient, AIClientError
from sentry_academy.config import OpenAIConfig
from sentry_academy.rate_limit import RateLimitExceeded


class FakeCompletions:
    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        message = SimpleNamespace(content=reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_openai(*replies):
    completions = FakeCompletions(replies)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


def config(**overrides):
    fields = dict(api_key="sk-test", model="gpt-4o-mini", max_tokens=4000,
                  temperature=0.7, requests_per_hour=50)
    fields.update(overrides)
    return OpenAIConfig(**fields)


class TestComplete:
    def test_passes_model_settings(self):
        client, completions = fake_openai("hello")
        ai = AIClient(config(), client=client)
        assert ai.complete([{"role": "user", "content": "hi"}]) == "hello"
        call = completions.calls[0]
        assert call["model"] == "gpt-4o-mini"
        assert call["max_tokens"] == 4000
        assert call["temperature"] == 0.7
        assert "response_format" not in call

    def test_overrides_and_json_mode(self):
        client, completions = fake_openai("{}")
        AIClient(config(), client=client).complete([], json_mode=True, max_tokens=100, temperature=0.0)
        call = completions.calls[0]
        assert call["response_format"] == {"type": "json_object"}
        assert call["max_tokens"] == 100
        assert call["temperature"] == 0.0

    def test_not_configured(self):
        ai = AIClient(config(api_key="<placeholder>"))
        assert not ai.is_configured
        with pytest.raises(AIClientError):
            ai.complete([])

    def test_api_error_is_wrapped(self):
        client, _ = fake_openai(OpenAIError("service unavailable"))
        with pytest.raises(AIClientError, match="service unavailable"):
            AIClient(config(), client=client).complete([])

    def test_empty_response_raises(self):
        client, _ = fake_openai("")
        with pytest.raises(AIClientError):
            AIClient(config(), client=client).complete([])


class TestRateLimit:
    def test_hourly_budget(self):
        client, completions = fake_openai("a", "b", "c")
        ai = AIClient(config(requests_per_hour=2), client=client)
        ai.complete([])
        ai.complete([])
        assert ai.remaining_requests() == 0
        with pytest.raises(RateLimitExceeded):
            ai.complete([])
        assert len(completions.calls) == 2


class TestCompleteJson:
    def test_parses_object(self):
        client, completions = fake_openai('{"title": "Profiling"}')
        data = AIClient(config(), client=client).complete_json("system", "user")
        assert data == {"title": "Profiling"}
        messages = completions.calls[0]["messages"]
        assert [m["role"] for m in messages] == ["system", "user"]

    @pytest.mark.parametrize("raw", ["not json", "[1, 2]"])
    def test_rejects_non_objects(self, raw):
        client, _ = fake_openai(raw)
        with pytest.raises(AIClientError):
            AIClient(config(), client=client).complete_json("system", "user")
