"""Unsplash image URLs for slides and games.

No API key is involved: images come from source.unsplash.com random URLs,
built from a search query and memoized in the cache.
"""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from urllib.parse import quote

import structlog

from sparkskool.services.cache import UpstashCache

logger = structlog.get_logger(__name__)

UNSPLASH_BASE = "https://source.unsplash.com/random/800x600"
FALLBACK_IMAGE_URL = f"{UNSPLASH_BASE}?presentation"

EDUCATION_KEYWORDS = ["education", "learning", "teaching", "school", "classroom"]
BUSINESS_KEYWORDS = ["business", "strategy", "marketing", "finance", "management"]
TECH_KEYWORDS = ["technology", "digital", "computer", "software", "data"]


def unsplash_url(query: str, timestamp_ms: int | None = None) -> str:
    """Build a random-image URL for a query."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{UNSPLASH_BASE}?{quote(query.strip(), safe='')}&t={timestamp_ms}"


class ImageService:
    """Resolves image URLs through the cache."""

    def __init__(self, cache: UpstashCache | None = None):
        self._owns_cache = cache is None
        self.cache = cache or UpstashCache.from_config()

    def close(self) -> None:
        """Close the cache if this service created it."""
        if self._owns_cache:
            self.cache.close()

    def __enter__(self) -> ImageService:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def get_unsplash_image(self, query: str) -> str:
        """Get an image URL for a query, cached per normalized query."""
        try:
            normalized = query.strip().lower()
            cache_key = f"unsplash:{normalized}"

            cached = self.cache.get_cached_image_url(cache_key)
            if cached:
                return cached

            image_url = unsplash_url(normalized)
            self.cache.cache_image_url(cache_key, image_url)
            return image_url
        except Exception as e:
            logger.error("unsplash_image_failed", query=query, error=str(e))
            return FALLBACK_IMAGE_URL

    def get_multiple_unsplash_images(self, queries: list[str]) -> list[str]:
        """Resolve several queries in parallel, keeping input order."""
        if not queries:
            return []
        with ThreadPoolExecutor(max_workers=min(8, len(queries))) as pool:
            return list(pool.map(self.get_unsplash_image, queries))

    def get_slide_image(self, title: str, content: str = "") -> str:
        """Pick an image for a slide, biased by topic keywords."""
        combined = f"{title} {content}".lower()

        image_query = title
        if any(k in combined for k in EDUCATION_KEYWORDS):
            image_query = f"{title} education"
        elif any(k in combined for k in BUSINESS_KEYWORDS):
            image_query = f"{title} business"
        elif any(k in combined for k in TECH_KEYWORDS):
            image_query = f"{title} technology"

        return self.get_unsplash_image(image_query)
