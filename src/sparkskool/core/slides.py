"""Slide deck generation.

Responsibilities:
- Ask the LLM for a 5-7 slide deck in a line-tagged text format
- Parse slides and attach an Unsplash image URL to each one
- Cache successful decks per (prompt, language) for an hour
- Fall back to a fixed five-slide deck when generation fails
"""

from __future__ import annotations

import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

import structlog

from sparkskool.llm.client import LLMClient, LLMError
from sparkskool.services.cache import UpstashCache
from sparkskool.services.images import ImageService

logger = structlog.get_logger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

LAYOUTS = ("title", "content", "two-column", "image-text", "bullets")
DEFAULT_LAYOUT = "content"

FALLBACK_SLIDES: list[dict[str, str]] = [
    {
        "title": "Introduction",
        "content": (
            "This is an automatically generated presentation. "
            "The content will help you get started with your topic."
        ),
        "layout": "title",
    },
    {
        "title": "Key Points",
        "content": "• First important point\n• Second important point\n• Third important point",
        "layout": "bullets",
    },
    {
        "title": "Visual Example",
        "content": "This slide contains a visual representation of the concept.",
        "layout": "image-text",
    },
    {
        "title": "Detailed Information",
        "content": (
            "More detailed information about the topic goes here. "
            "You can expand on the key points mentioned earlier."
        ),
        "layout": "content",
    },
    {
        "title": "Conclusion",
        "content": "Summary of the main points covered in this presentation.",
        "layout": "content",
    },
]

SLIDE_BLOCK = re.compile(r"---SLIDE START---([\s\S]*?)---SLIDE END---")
TITLE_FIELD = re.compile(r"TITLE:(.*)", re.IGNORECASE)
CONTENT_FIELD = re.compile(r"CONTENT:([\s\S]*?)(?=IMAGE:|LAYOUT:|---SLIDE END---|$)", re.IGNORECASE)
IMAGE_FIELD = re.compile(r"IMAGE:([\s\S]*?)(?=LAYOUT:|---SLIDE END---|$)", re.IGNORECASE)
LAYOUT_FIELD = re.compile(r"LAYOUT:(.*)", re.IGNORECASE)

SYSTEM_PROMPT = "You are an expert presentation designer who writes clear, engaging slide decks."

USER_PROMPT = """Create a presentation with the following details:
Topic: {topic}
Context: {context}
Language: {language}

For each slide, provide:
1. A clear title (prefix with "TITLE:")
2. Well-structured content (prefix with "CONTENT:")
3. Image description (prefix with "IMAGE:")
4. Layout type (prefix with "LAYOUT:" - one of: title, content, two-column, image-text, bullets)

Format each slide as:
---SLIDE START---
TITLE: [Slide Title]
CONTENT: [Slide Content]
IMAGE: [Brief image description for Unsplash]
LAYOUT: [layout type]
---SLIDE END---

Create 5-7 slides that are engaging and professional."""


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class Slide:
    """One presentation slide."""

    title: str
    content: str
    image_prompt: str
    layout: str = DEFAULT_LAYOUT
    image_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "title": self.title,
            "content": self.content,
            "image_prompt": self.image_prompt,
            "image_url": self.image_url,
            "layout": self.layout,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Slide:
        title = data.get("title", "")
        return cls(
            title=title,
            content=data.get("content", ""),
            image_prompt=data.get("image_prompt") or title,
            layout=data.get("layout") or DEFAULT_LAYOUT,
            image_url=data.get("image_url"),
        )


@dataclass
class SlideDeck:
    """Result of slide generation."""

    slides: list[Slide] = field(default_factory=list)
    cached: bool = False
    fallback: bool = False
    message: str | None = None
    raw: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"slides": [s.to_dict() for s in self.slides]}
        if self.cached:
            result["cached"] = True
        if self.fallback:
            result["fallback"] = True
        if self.message:
            result["message"] = self.message
        if self.raw is not None:
            result["raw"] = self.raw
        return result


# =============================================================================
# PARSING
# =============================================================================


def _field(pattern: re.Pattern[str], text: str) -> str | None:
    match = pattern.search(text)
    return match.group(1).strip() if match else None


def parse_slides(text: str, topic: str) -> list[Slide]:
    """Parse ---SLIDE START--- ... ---SLIDE END--- blocks.

    Missing fields default to title "Slide about <topic>", empty content,
    image prompt = title and layout "content". Text with no slide blocks
    becomes a single "About <topic>" slide. Images are not resolved here.
    """
    slides = []
    for block in SLIDE_BLOCK.findall(text):
        title = _field(TITLE_FIELD, block) or f"Slide about {topic}"
        slides.append(
            Slide(
                title=title,
                content=_field(CONTENT_FIELD, block) or "",
                image_prompt=_field(IMAGE_FIELD, block) or title,
                layout=_field(LAYOUT_FIELD, block) or DEFAULT_LAYOUT,
            )
        )

    if not slides and text.strip():
        slides.append(
            Slide(
                title=f"About {topic}",
                content=text.strip(),
                image_prompt=topic,
                layout=DEFAULT_LAYOUT,
            )
        )

    return slides


def fallback_slides(topic: str) -> list[Slide]:
    """The fixed five-slide deck, with "Introduction" personalized to the topic."""
    slides = []
    for template in FALLBACK_SLIDES:
        title = template["title"]
        if "Introduction" in title:
            title = f"Introduction to {topic}"
        slides.append(
            Slide(
                title=title,
                content=template["content"],
                image_prompt=title,
                layout=template["layout"],
            )
        )
    return slides


# =============================================================================
# GENERATOR
# =============================================================================


class SlideGenerator:
    """Generates slide decks with images and caching."""

    def __init__(
        self,
        client: LLMClient | None = None,
        cache: UpstashCache | None = None,
        images: ImageService | None = None,
    ):
        self._client = client
        self._owns_cache = cache is None
        self.cache = cache or UpstashCache.from_config()
        self.images = images or ImageService(cache=self.cache)

    def close(self) -> None:
        """Release the cache client if this generator created it."""
        if self._owns_cache:
            self.cache.close()

    def __enter__(self) -> SlideGenerator:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def client(self) -> LLMClient:
        if self._client is None:
            self._client = LLMClient()
        return self._client

    def _attach_images(self, slides: list[Slide]) -> list[Slide]:
        urls = self.images.get_multiple_unsplash_images(
            [s.image_prompt or s.title for s in slides]
        )
        for slide, url in zip(slides, urls):
            slide.image_url = url
        return slides

    def _fallback(self, topic: str, message: str) -> SlideDeck:
        slides = fallback_slides(topic)
        if slides:
            with ThreadPoolExecutor(max_workers=len(slides)) as pool:
                urls = list(pool.map(lambda s: self.images.get_slide_image(s.title, s.content), slides))
            for slide, url in zip(slides, urls):
                slide.image_url = url
        return SlideDeck(slides=slides, fallback=True, message=message)

    def generate(self, prompt: str, context: str = "", language: str = "en") -> SlideDeck:
        """Generate a deck for a prompt.

        Returns:
            SlideDeck; cached=True when served from cache, fallback=True when
            the fixed deck was used
        """
        cache_query = f"{prompt.lower().strip()}-{language}"

        cached = self.cache.get_cached_slides(cache_query)
        if cached:
            logger.info("slides_cache_hit", prompt=prompt)
            return SlideDeck(
                slides=[Slide.from_dict(s) for s in cached if isinstance(s, dict)],
                cached=True,
            )

        try:
            text = self.client.simple_chat(
                system_prompt=SYSTEM_PROMPT,
                user_message=USER_PROMPT.format(
                    topic=prompt,
                    context=context or prompt,
                    language=language,
                ),
                temperature=0.7,
            )
        except LLMError as e:
            logger.error("slides_generation_failed", prompt=prompt, error=str(e))
            return self._fallback(prompt, "Using fallback slides due to content generation issue")

        if not text or not text.strip():
            logger.warning("slides_empty_response", prompt=prompt)
            return self._fallback(prompt, "Using fallback slides due to content generation issue")

        slides = self._attach_images(parse_slides(text, prompt))
        self.cache.cache_slides(cache_query, [s.to_dict() for s in slides])

        logger.info("slides_generated", prompt=prompt, count=len(slides))
        return SlideDeck(slides=slides, raw=text)


def generate_slides(
    prompt: str,
    context: str = "",
    language: str = "en",
    generator: SlideGenerator | None = None,
) -> SlideDeck:
    """Module-level shortcut for SlideGenerator.generate."""
    if generator is not None:
        return generator.generate(prompt, context=context, language=language)
    with SlideGenerator() as owned:
        return owned.generate(prompt, context=context, language=language)
