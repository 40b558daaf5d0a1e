"""Tests for the LLM client."""

from unittest.mock import MagicMock

import httpx
import pytest
from openai import RateLimitError

from sparkskool.llm.client import (
    LLMClient,
    LLMConfig,
    LLMError,
    LLMRateLimitError,
    LLMResponseError,
    Message,
    retry_after_seconds,
)


def _rate_limit_error(message: str = "Rate limit reached") -> RateLimitError:
    request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
    return RateLimitError(message, response=httpx.Response(429, request=request), body=None)


def _completion(content: str) -> MagicMock:
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    response.model = "llama-3.3-70b-versatile"
    response.usage.prompt_tokens = 10
    response.usage.completion_tokens = 5
    response.usage.total_tokens = 15
    return response


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def client(sleeps):
    llm = LLMClient(config=LLMConfig(api_key="test-key"), sleep=sleeps.append)
    llm._client = MagicMock()
    return llm


class TestLLMConfig:
    """Tests for config resolution."""

    def test_defaults_to_groq(self):
        config = LLMConfig.from_app_config()

        assert config.provider == "groq"
        assert config.base_url == "https://api.groq.com/openai/v1"
        assert config.model == "llama-3.3-70b-versatile"
        assert config.api_key is None

    def test_api_key_from_environment(self, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY", "gsk-test")

        config = LLMConfig.from_app_config()

        assert config.api_key == "gsk-test"

    def test_model_override(self):
        config = LLMConfig.from_app_config(model="llama-3.1-8b-instant")
        assert config.model == "llama-3.1-8b-instant"

    def test_has_api_key(self):
        assert LLMClient(config=LLMConfig(api_key="k")).has_api_key
        assert not LLMClient(config=LLMConfig()).has_api_key

    def test_local_provider_needs_no_key(self):
        config = LLMConfig(provider="lmstudio", base_url="http://localhost:1234/v1")
        assert LLMClient(config=config).has_api_key


class TestRetryAfter:
    """Tests for parsing the provider's retry hint."""

    def test_parses_seconds(self):
        assert retry_after_seconds("Please try again in 2.5s.") == 2.5

    def test_integer_seconds(self):
        assert retry_after_seconds("Try again in 7s") == 7.0

    def test_no_hint(self):
        assert retry_after_seconds("Rate limit reached") is None


class TestRateLimitBackoff:
    """Tests for the rate-limit retry policy."""

    def test_success_without_retry(self, client, sleeps):
        client._client.chat.completions.create.return_value = _completion("hi")

        response = client.chat([Message(role="user", content="hello")])

        assert response.content == "hi"
        assert response.total_tokens == 15
        assert sleeps == []

    def test_backoff_grows(self, client, sleeps):
        client._client.chat.completions.create.side_effect = [
            _rate_limit_error(),
            _rate_limit_error(),
            _completion("ok"),
        ]

        response = client.chat([Message(role="user", content="hello")])

        assert response.content == "ok"
        assert sleeps == [3.0, 4.5]

    def test_uses_hinted_wait(self, client, sleeps):
        client._client.chat.completions.create.side_effect = [
            _rate_limit_error("Rate limit reached. Please try again in 1.25s."),
            _completion("ok"),
        ]

        client.chat([Message(role="user", content="hello")])

        assert sleeps == [1.25]

    def test_gives_up_after_three_retries(self, client, sleeps):
        client._client.chat.completions.create.side_effect = _rate_limit_error()

        with pytest.raises(LLMRateLimitError):
            client.chat([Message(role="user", content="hello")])

        assert len(sleeps) == 3
        assert client._client.chat.completions.create.call_count == 4

    def test_other_errors_are_not_retried(self, client, sleeps):
        client._client.chat.completions.create.side_effect = ValueError("bad request")

        with pytest.raises(LLMError):
            client.chat([Message(role="user", content="hello")])

        assert sleeps == []
        assert client._client.chat.completions.create.call_count == 1

    def test_model_override_per_call(self, client):
        client._client.chat.completions.create.return_value = _completion("ok")

        client.chat([Message(role="user", content="x")], model="llama-3.1-8b-instant")

        kwargs = client._client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "llama-3.1-8b-instant"


class TestJsonParsing:
    """Tests for JSON replies."""

    def test_fenced_json(self, client):
        client._client.chat.completions.create.return_value = _completion(
            'Here you go:\n```json\n{"score": 90}\n```'
        )

        assert client.simple_json("sys", "user") == {"score": 90}

    def test_think_block_removed(self, client):
        client._client.chat.completions.create.return_value = _completion(
            '<think>{"draft": true}</think>{"score": 70}'
        )

        assert client.simple_json("sys", "user") == {"score": 70}

    def test_repair_retry(self, client):
        client._client.chat.completions.create.side_effect = [
            _completion("not json"),
            _completion('{"fixed": true}'),
        ]

        assert client.simple_json("sys", "user") == {"fixed": True}

    def test_invalid_after_repair(self, client):
        client._client.chat.completions.create.return_value = _completion("still not json")

        with pytest.raises(LLMResponseError):
            client.simple_json("sys", "user")

    def test_json_array(self, client):
        client._client.chat.completions.create.return_value = _completion(
            'Questions:\n[{"id": 1}, {"id": 2}]\nDone.'
        )

        assert client.simple_json_array("sys", "user") == [{"id": 1}, {"id": 2}]

    def test_json_array_missing(self, client):
        client._client.chat.completions.create.return_value = _completion("no array here")

        with pytest.raises(LLMResponseError):
            client.simple_json_array("sys", "user")
