"""LLM client for Groq and other OpenAI-compatible providers.

Provides a unified interface for LLM interactions. Groq exposes an
OpenAI-compatible chat-completions endpoint, so every provider goes through
the OpenAI SDK with a different base URL.

Supported providers:
- groq: Groq cloud inference (default)
- openai: OpenAI API
- lmstudio: Local LM Studio server

Rate limits are the only transient failure that is retried: the client waits
for the delay the provider asks for ("try again in 2.5s") or an increasing
backoff, up to a fixed number of retries.
"""

from __future__ import annotations

import json
import re
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Literal, TypeVar

import structlog
from openai import OpenAI, RateLimitError

from sparkskool.config.app_config import load_app_config

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# =============================================================================
# CONSTANTS
# =============================================================================

Provider = Literal["groq", "openai", "lmstudio"]

# Provider-specific defaults
PROVIDER_DEFAULTS: dict[str, dict[str, Any]] = {
    "groq": {
        "base_url": "https://api.groq.com/openai/v1",
        "api_key_env": "GROQ_API_KEY",
    },
    "openai": {
        "base_url": "https://api.openai.com/v1",
        "api_key_env": "OPENAI_API_KEY",
    },
    "lmstudio": {
        "base_url": "http://localhost:1234/v1",
        "api_key": "lm-studio",  # LM Studio doesn't need a real API key
    },
}

# Provider capabilities
PROVIDER_CAPABILITIES_DEFAULTS: dict[str, dict[str, bool]] = {
    "groq": {"supports_json_object": True},
    "openai": {"supports_json_object": True},
    "lmstudio": {"supports_json_object": False},
}

DEFAULT_RATE_LIMIT_RETRIES = 3
DEFAULT_RATE_LIMIT_BACKOFF = 3.0
RATE_LIMIT_BACKOFF_FACTOR = 1.5

RETRY_AFTER_PATTERN = re.compile(r"try again in (\d+(?:\.\d+)?)s", re.IGNORECASE)

# JSON repair prompt template
JSON_REPAIR_PROMPT = """Fix the following text and return ONLY valid JSON:
<<<
{invalid_output}
>>>

Reply with the corrected JSON only, no explanations and no markdown."""

# Some models emit <think>...</think> blocks that break JSON parsing
SANITIZE_PATTERNS = [
    re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE),
    re.compile(r"<analysis>.*?</analysis>", re.DOTALL | re.IGNORECASE),
    re.compile(r"<reasoning>.*?</reasoning>", re.DOTALL | re.IGNORECASE),
]


def _sanitize_for_json(text: str) -> str:
    """Remove thinking/reasoning tags before JSON parsing."""
    result = text
    for pattern in SANITIZE_PATTERNS:
        result = pattern.sub("", result)
    return result.strip()


def retry_after_seconds(error_message: str) -> float | None:
    """Extract the wait time a rate-limit error asks for, in seconds."""
    match = RETRY_AFTER_PATTERN.search(error_message)
    if match:
        return float(match.group(1))
    return None


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class LLMConfig:
    """Configuration for LLM client."""

    provider: str = "groq"
    base_url: str = "https://api.groq.com/openai/v1"
    model: str = "llama-3.3-70b-versatile"
    temperature: float = 0.7
    max_tokens: int = 2048
    timeout: int = 60
    api_key: str | None = None
    supports_json_object: bool | None = None
    rate_limit_retries: int = DEFAULT_RATE_LIMIT_RETRIES
    rate_limit_backoff: float = DEFAULT_RATE_LIMIT_BACKOFF

    @classmethod
    def from_app_config(
        cls,
        provider: str | None = None,
        model: str | None = None,
    ) -> LLMConfig:
        """Build configuration from the application config file."""
        app_config = load_app_config()
        provider = provider or app_config.default_provider
        provider_config = app_config.providers.get(provider)
        defaults = PROVIDER_DEFAULTS.get(provider, {})

        if provider_config is None:
            logger.warning("provider_not_configured", provider=provider)
            return cls(provider=provider, model=model or cls.model)

        api_key = provider_config.get_api_key() or defaults.get("api_key")

        return cls(
            provider=provider,
            base_url=provider_config.base_url or defaults.get("base_url", ""),
            model=model or provider_config.default_model,
            api_key=api_key,
        )


@dataclass
class Message:
    """A chat message."""

    role: Literal["system", "user", "assistant"]
    content: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for API call."""
        return {"role": self.role, "content": self.content}


@dataclass
class LLMResponse:
    """Response from LLM."""

    content: str
    model: str
    provider: str
    usage: dict[str, int] = field(default_factory=dict)
    latency_ms: int = 0

    @property
    def prompt_tokens(self) -> int:
        return self.usage.get("prompt_tokens", 0)

    @property
    def completion_tokens(self) -> int:
        return self.usage.get("completion_tokens", 0)

    @property
    def total_tokens(self) -> int:
        return self.usage.get("total_tokens", 0)


class LLMError(Exception):
    """Error during LLM interaction."""

    pass


class LLMConnectionError(LLMError):
    """Error connecting to LLM server."""

    pass


class LLMResponseError(LLMError):
    """Error in LLM response."""

    pass


class LLMRateLimitError(LLMError):
    """Rate limit still hit after all retries."""

    pass


# =============================================================================
# LLM CLIENT
# =============================================================================


class LLMClient:
    """Unified client for LLM interactions.

    Supports Groq, OpenAI and LM Studio via the OpenAI-compatible API.
    """

    def __init__(
        self,
        config: LLMConfig | None = None,
        provider: str | None = None,
        model: str | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize LLM client.

        Args:
            config: LLM configuration (loads from app config if not provided)
            provider: Override provider from config
            model: Override model from config
            sleep: Wait function used between rate-limit retries
        """
        if config is None:
            config = LLMConfig.from_app_config(provider=provider, model=model)
        else:
            if provider is not None and provider != config.provider:
                config.provider = provider
                defaults = PROVIDER_DEFAULTS.get(provider, {})
                if "base_url" in defaults:
                    config.base_url = defaults["base_url"]
            if model is not None:
                config.model = model

        self.config = config
        self._sleep = sleep

        self._client = OpenAI(
            base_url=self.config.base_url,
            api_key=self.config.api_key or "not-needed",
            timeout=self.config.timeout,
            max_retries=0,
        )

        logger.info(
            "llm_client_initialized",
            provider=self.config.provider,
            model=self.config.model,
            base_url=self.config.base_url,
        )

    @property
    def has_api_key(self) -> bool:
        """Whether the client has credentials (local providers never need them)."""
        if "api_key" in PROVIDER_DEFAULTS.get(self.config.provider, {}):
            return True
        return bool(self.config.api_key)

    def _supports_json_object(self) -> bool:
        """Check if current provider supports response_format json_object."""
        if self.config.supports_json_object is not None:
            return self.config.supports_json_object

        caps = PROVIDER_CAPABILITIES_DEFAULTS.get(self.config.provider, {})
        return caps.get("supports_json_object", False)

    def with_rate_limit_retry(self, fn: Callable[[], T]) -> T:
        """Call fn, retrying while the provider reports a rate limit.

        Waits for the delay named in the error message when there is one,
        otherwise for the current backoff, which grows by 1.5x per retry.

        Raises:
            LLMRateLimitError: If still rate limited after all retries
        """
        retries = self.config.rate_limit_retries
        backoff = self.config.rate_limit_backoff

        while True:
            try:
                return fn()
            except RateLimitError as e:
                if retries <= 0:
                    raise LLMRateLimitError(f"Rate limit persisted after retries: {e}") from e

                wait_seconds = retry_after_seconds(str(e)) or backoff
                logger.warning(
                    "rate_limited_retrying",
                    provider=self.config.provider,
                    wait_seconds=wait_seconds,
                    retries_left=retries,
                )
                self._sleep(wait_seconds)
                retries -= 1
                backoff *= RATE_LIMIT_BACKOFF_FACTOR

    def chat(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
        json_mode: bool = False,
        model: str | None = None,
    ) -> LLMResponse:
        """Send chat completion request.

        Args:
            messages: List of messages in conversation
            temperature: Override default temperature
            max_tokens: Override default max tokens
            json_mode: Request JSON response format (only if provider supports it)
            model: Override the configured model for this call

        Returns:
            LLMResponse with content and metadata

        Raises:
            LLMConnectionError: If cannot connect to server
            LLMRateLimitError: If rate limited after all retries
            LLMResponseError: If response is invalid
        """
        if temperature is None:
            temperature = self.config.temperature
        if max_tokens is None:
            max_tokens = self.config.max_tokens

        request_kwargs: dict[str, Any] = {
            "model": model or self.config.model,
            "messages": [m.to_dict() for m in messages],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        if json_mode and self._supports_json_object():
            request_kwargs["response_format"] = {"type": "json_object"}

        start_time = time.time()

        try:
            response = self.with_rate_limit_retry(
                lambda: self._client.chat.completions.create(**request_kwargs)
            )
        except LLMError:
            raise
        except Exception as e:
            error_msg = str(e)
            if "Connection" in error_msg or "connect" in error_msg.lower():
                raise LLMConnectionError(
                    f"Could not connect to {self.config.provider} at {self.config.base_url}: {e}"
                ) from e
            raise LLMError(f"LLM call failed: {e}") from e

        latency_ms = int((time.time() - start_time) * 1000)

        if not response.choices:
            raise LLMResponseError("Empty response from LLM")

        content = response.choices[0].message.content or ""

        usage = {}
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        logger.debug(
            "llm_response",
            provider=self.config.provider,
            model=response.model,
            tokens=usage.get("total_tokens", 0),
            latency_ms=latency_ms,
        )

        return LLMResponse(
            content=content,
            model=response.model,
            provider=self.config.provider,
            usage=usage,
            latency_ms=latency_ms,
        )

    def _try_parse_json(self, content: str) -> dict[str, Any] | None:
        """Try to parse a JSON object from content.

        Tries:
        1. Direct parse
        2. Extract from ```json ... ``` blocks
        3. Extract first {...} object

        Returns parsed dict or None if all strategies fail.
        """
        content = _sanitize_for_json(content)

        try:
            parsed = json.loads(content)
            if isinstance(parsed, dict):
                return parsed
        except json.JSONDecodeError:
            pass

        json_match = re.search(r"```(?:json)?\s*([\s\S]*?)```", content)
        if json_match:
            try:
                parsed = json.loads(json_match.group(1).strip())
                if isinstance(parsed, dict):
                    return parsed
            except json.JSONDecodeError:
                pass

        start = content.find("{")
        end = content.rfind("}") + 1
        if start >= 0 and end > start:
            try:
                parsed = json.loads(content[start:end])
                if isinstance(parsed, dict):
                    return parsed
            except json.JSONDecodeError:
                pass

        return None

    def _try_parse_json_array(self, content: str) -> list[Any] | None:
        """Try to parse the first JSON array in content."""
        content = _sanitize_for_json(content)

        match = re.search(r"\[[\s\S]*\]", content)
        if not match:
            return None
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError:
            return None
        return parsed if isinstance(parsed, list) else None

    def chat_json(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
        max_retries: int = 1,
        model: str | None = None,
    ) -> dict[str, Any]:
        """Send chat request expecting a JSON object response.

        Uses robust parsing with one repair retry on failure.

        Raises:
            LLMResponseError: If response is not valid JSON after retries
        """
        response = self.chat(
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            json_mode=True,
            model=model,
        )

        parsed = self._try_parse_json(response.content)
        if parsed is not None:
            return parsed

        if max_retries > 0:
            logger.warning(
                "json_parse_failed_retrying",
                content=response.content[:100],
                provider=self.config.provider,
            )

            repair_prompt = JSON_REPAIR_PROMPT.format(
                invalid_output=response.content[:1000]
            )
            retry_messages = messages + [Message(role="user", content=repair_prompt)]

            retry_response = self.chat(
                retry_messages,
                temperature=temperature,
                max_tokens=max_tokens,
                json_mode=True,
                model=model,
            )

            parsed = self._try_parse_json(retry_response.content)
            if parsed is not None:
                logger.info("json_parse_recovered_after_retry")
                return parsed

        raise LLMResponseError(f"Could not get valid JSON: {response.content[:200]}...")

    def simple_chat(
        self,
        system_prompt: str,
        user_message: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
        model: str | None = None,
    ) -> str:
        """Single-turn chat with system prompt and user message."""
        messages = [
            Message(role="system", content=system_prompt),
            Message(role="user", content=user_message),
        ]

        response = self.chat(
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            model=model,
        )

        return response.content

    def simple_json(
        self,
        system_prompt: str,
        user_message: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
        model: str | None = None,
    ) -> dict[str, Any]:
        """Single-turn chat expecting a JSON object."""
        messages = [
            Message(role="system", content=system_prompt),
            Message(role="user", content=user_message),
        ]

        return self.chat_json(
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            model=model,
        )

    def simple_json_array(
        self,
        system_prompt: str,
        user_message: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
        model: str | None = None,
    ) -> list[Any]:
        """Single-turn chat expecting a JSON array somewhere in the reply.

        Raises:
            LLMResponseError: If no JSON array can be parsed
        """
        content = self.simple_chat(
            system_prompt=system_prompt,
            user_message=user_message,
            temperature=temperature,
            max_tokens=max_tokens,
            model=model,
        )

        parsed = self._try_parse_json_array(content)
        if parsed is None:
            raise LLMResponseError(f"No JSON array in response: {content[:200]}...")
        return parsed
