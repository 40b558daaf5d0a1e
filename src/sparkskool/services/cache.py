"""Upstash Redis REST cache.

Memoizes generated slide decks and image URLs. Commands are sent to the
Upstash REST endpoint as JSON arrays (["SET", key, value, "EX", ttl]).

When the URL or token is not configured every operation is a no-op: reads
miss and writes report False. Transport and server errors are logged and
treated the same way, so callers never fail because the cache is down.
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import structlog

from sparkskool.config.app_config import load_app_config

logger = structlog.get_logger(__name__)

IMAGE_PREFIX = "img:"
SLIDES_PREFIX = "slides:"
DEFAULT_IMAGE_TTL = 86400  # 24 hours
DEFAULT_SLIDES_TTL = 3600  # 1 hour


class CacheError(Exception):
    """Error returned by the cache server."""

    pass


def slides_cache_key(query: str) -> str:
    """Cache key for a slide deck query."""
    return f"{SLIDES_PREFIX}{query.lower().strip()}"


class UpstashCache:
    """Minimal Upstash Redis REST client."""

    def __init__(
        self,
        url: str | None = None,
        token: str | None = None,
        timeout: float = 10.0,
        http_client: httpx.Client | None = None,
        image_ttl: int = DEFAULT_IMAGE_TTL,
        slides_ttl: int = DEFAULT_SLIDES_TTL,
    ):
        self.url = url.rstrip("/") if url else None
        self.token = token
        self.image_ttl = image_ttl
        self.slides_ttl = slides_ttl
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(timeout=timeout)

        if not self.enabled:
            logger.info("cache_disabled", reason="missing_credentials")

    @classmethod
    def from_config(cls, http_client: httpx.Client | None = None) -> UpstashCache:
        """Create a cache from the app config and environment."""
        cache_config = load_app_config().cache
        return cls(
            url=cache_config.get_url(),
            token=cache_config.get_token(),
            timeout=cache_config.timeout,
            http_client=http_client,
            image_ttl=cache_config.image_ttl,
            slides_ttl=cache_config.slides_ttl,
        )

    def close(self) -> None:
        """Close the HTTP client if this cache created it."""
        if self._owns_http:
            self._http.close()

    @property
    def is_closed(self) -> bool:
        return self._http.is_closed

    def __enter__(self) -> UpstashCache:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def enabled(self) -> bool:
        return bool(self.url and self.token)

    def _command(self, *args: Any) -> Any:
        """Run one Redis command and return its result.

        Raises:
            CacheError: If the server answers with an error
            httpx.HTTPError: On transport failures
        """
        response = self._http.post(
            self.url,
            headers={"Authorization": f"Bearer {self.token}"},
            json=[str(a) for a in args],
        )
        payload = response.json()
        if "error" in payload:
            raise CacheError(payload["error"])
        response.raise_for_status()
        return payload.get("result")

    def get(self, key: str) -> str | None:
        """Get a string value, or None on miss/disabled/error."""
        if not self.enabled:
            return None
        try:
            result = self._command("GET", key)
        except (httpx.HTTPError, CacheError, ValueError) as e:
            logger.error("cache_get_failed", key=key, error=str(e))
            return None
        return result if isinstance(result, str) else None

    def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        """Set a string value with optional expiry in seconds."""
        if not self.enabled:
            return False
        args: list[Any] = ["SET", key, value]
        if ttl:
            args += ["EX", ttl]
        try:
            self._command(*args)
        except (httpx.HTTPError, CacheError, ValueError) as e:
            logger.error("cache_set_failed", key=key, error=str(e))
            return False
        return True

    # -------------------------------------------------------------------------
    # Domain helpers
    # -------------------------------------------------------------------------

    def cache_image_url(self, key: str, image_url: str, ttl: int | None = None) -> bool:
        """Cache an image URL under img:{key} (default expiry: image_ttl)."""
        if not self.enabled:
            logger.warning("cache_not_configured_skipping_image")
            return False
        return self.set(f"{IMAGE_PREFIX}{key}", image_url, ttl=ttl or self.image_ttl)

    def get_cached_image_url(self, key: str) -> str | None:
        return self.get(f"{IMAGE_PREFIX}{key}")

    def cache_slides(self, query: str, slides: list[dict[str, Any]], ttl: int | None = None) -> bool:
        """Cache a generated slide deck for a query (default expiry: slides_ttl)."""
        return self.set(slides_cache_key(query), json.dumps(slides), ttl=ttl or self.slides_ttl)

    def get_cached_slides(self, query: str) -> list[dict[str, Any]] | None:
        """Get a cached slide deck, or None."""
        cached = self.get(slides_cache_key(query))
        if not cached:
            return None
        try:
            slides = json.loads(cached)
        except json.JSONDecodeError as e:
            logger.error("cached_slides_corrupt", query=query, error=str(e))
            return None
        return slides if isinstance(slides, list) else None
