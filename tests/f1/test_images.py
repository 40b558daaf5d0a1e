"""Tests for image URLs."""

from unittest.mock import MagicMock

from sparkskool.services.cache import UpstashCache
from sparkskool.services.images import (
    FALLBACK_IMAGE_URL,
    ImageService,
    unsplash_url,
)


class TestUnsplashUrl:
    def test_encodes_query(self):
        assert (
            unsplash_url("solar system", timestamp_ms=42)
            == "https://source.unsplash.com/random/800x600?solar%20system&t=42"
        )


class TestImageService:
    def test_caches_by_normalized_query(self, fake_upstash):
        service = ImageService(cache=fake_upstash.cache())

        first = service.get_unsplash_image("  Volcano ")
        second = service.get_unsplash_image("volcano")

        assert first == second
        assert fake_upstash.data["img:unsplash:volcano"] == first

    def test_works_without_cache(self):
        service = ImageService(cache=UpstashCache())
        assert service.get_unsplash_image("cats").startswith("https://source.unsplash.com/random/800x600?cats&t=")

    def test_failure_gives_fallback(self):
        cache = MagicMock()
        cache.get_cached_image_url.side_effect = RuntimeError("boom")

        assert ImageService(cache=cache).get_unsplash_image("cats") == FALLBACK_IMAGE_URL

    def test_multiple_keeps_order(self):
        service = ImageService(cache=UpstashCache())

        urls = service.get_multiple_unsplash_images(["alpha", "beta", "gamma"])

        assert [u.split("?")[1].split("&")[0] for u in urls] == ["alpha", "beta", "gamma"]
        assert service.get_multiple_unsplash_images([]) == []

    def test_slide_keywords(self):
        service = ImageService(cache=UpstashCache())
        service.get_unsplash_image = MagicMock(return_value="url")

        service.get_slide_image("Fractions", "Classroom activities for learning")
        service.get_slide_image("Budgets", "A finance overview")
        service.get_slide_image("Networks", "Software and data")
        service.get_slide_image("Volcanoes", "Lava")

        queries = [c.args[0] for c in service.get_unsplash_image.call_args_list]
        assert queries == [
            "Fractions education",
            "Budgets business",
            "Networks technology",
            "Volcanoes",
        ]


class TestImageServiceClose:
    def test_closes_cache_it_created(self):
        with ImageService() as service:
            service.get_unsplash_image("cats")

        assert service.cache.is_closed

    def test_leaves_shared_cache_open(self):
        cache = UpstashCache()

        ImageService(cache=cache).close()

        assert not cache.is_closed
