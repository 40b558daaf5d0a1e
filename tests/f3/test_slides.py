"""Tests for slide generation."""

from unittest.mock import MagicMock

from sparkskool.core.slides import (
    SlideGenerator,
    fallback_slides,
    generate_slides,
    parse_slides,
)
from sparkskool.llm.client import LLMConnectionError
from sparkskool.services.cache import UpstashCache

DECK = """---SLIDE START---
TITLE: What is a volcano?
CONTENT: A rupture in the crust.
IMAGE: erupting volcano
LAYOUT: title
---SLIDE END---
---SLIDE START---
CONTENT: Lava, ash and gas.
---SLIDE END---"""


class TestParseSlides:
    def test_fields(self):
        slides = parse_slides(DECK, "Volcanoes")

        assert len(slides) == 2
        assert slides[0].title == "What is a volcano?"
        assert slides[0].content == "A rupture in the crust."
        assert slides[0].image_prompt == "erupting volcano"
        assert slides[0].layout == "title"

    def test_defaults(self):
        second = parse_slides(DECK, "Volcanoes")[1]

        assert second.title == "Slide about Volcanoes"
        assert second.image_prompt == "Slide about Volcanoes"
        assert second.layout == "content"

    def test_unstructured_text(self):
        slides = parse_slides("Volcanoes are mountains.", "Volcanoes")

        assert len(slides) == 1
        assert slides[0].title == "About Volcanoes"
        assert slides[0].content == "Volcanoes are mountains."

    def test_empty_text(self):
        assert parse_slides("   ", "Volcanoes") == []


class TestFallbackSlides:
    def test_introduction_is_personalized(self):
        slides = fallback_slides("Volcanoes")

        assert len(slides) == 5
        assert slides[0].title == "Introduction to Volcanoes"
        assert slides[-1].title == "Conclusion"


class TestSlideGenerator:
    def test_generates_and_caches(self, mock_llm, fake_upstash):
        mock_llm.simple_chat.return_value = DECK
        generator = SlideGenerator(client=mock_llm, cache=fake_upstash.cache())

        deck = generator.generate("Volcanoes", language="en")

        assert not deck.fallback
        assert not deck.cached
        assert all(s.image_url for s in deck.slides)
        assert "slides:volcanoes-en" in fake_upstash.data

        again = generator.generate("  VOLCANOES ", language="en")

        assert again.cached
        assert [s.title for s in again.slides] == [s.title for s in deck.slides]
        assert mock_llm.simple_chat.call_count == 1

    def test_llm_failure_uses_fallback(self, mock_llm):
        mock_llm.simple_chat.side_effect = LLMConnectionError("down")
        generator = SlideGenerator(client=mock_llm, cache=UpstashCache())

        deck = generator.generate("Volcanoes")

        assert deck.fallback
        assert deck.message == "Using fallback slides due to content generation issue"
        assert deck.slides[0].title == "Introduction to Volcanoes"
        assert all(s.image_url for s in deck.slides)

    def test_empty_reply_uses_fallback(self, mock_llm):
        mock_llm.simple_chat.return_value = "  "
        deck = SlideGenerator(client=mock_llm, cache=UpstashCache()).generate("Volcanoes")

        assert deck.fallback

    def test_fallback_is_not_cached(self, mock_llm, fake_upstash):
        mock_llm.simple_chat.side_effect = LLMConnectionError("down")

        SlideGenerator(client=mock_llm, cache=fake_upstash.cache()).generate("Volcanoes")

        assert not any(k.startswith("slides:") for k in fake_upstash.data)

    def test_module_shortcut(self):
        generator = MagicMock()
        generate_slides("Volcanoes", context="Grade 5", language="ar", generator=generator)

        generator.generate.assert_called_once_with("Volcanoes", context="Grade 5", language="ar")

    def test_shortcut_closes_generator_it_creates(self, mock_llm, monkeypatch, recorded_http_clients):
        mock_llm.simple_chat.side_effect = LLMConnectionError("down")
        monkeypatch.setattr("sparkskool.core.slides.LLMClient", lambda: mock_llm)

        deck = generate_slides("Volcanoes")

        assert deck.fallback
        assert recorded_http_clients
        assert all(http.is_closed for http in recorded_http_clients)


class TestSlideGeneratorClose:
    def test_context_manager_closes_own_cache(self, mock_llm):
        with SlideGenerator(client=mock_llm) as generator:
            assert not generator.cache.is_closed

        assert generator.cache.is_closed

    def test_shared_cache_stays_open(self, mock_llm, fake_upstash):
        cache = fake_upstash.cache()

        SlideGenerator(client=mock_llm, cache=cache).close()

        assert not cache.is_closed
