import pytest
from django.core.cache import caches

from screening.moderation.domain.results import ContentFormat, ModerationResult
from screening.moderation.infrastructure.cache import DjangoResultCache, fingerprint
from screening.moderation.services.config import CacheConfig


@pytest.mark.unit
class TestFingerprint:
    def test_is_stable_and_hides_content(self):
        key = fingerprint("olá pescadores", "catch_comments")

        assert key == fingerprint("olá pescadores", "catch_comments")
        assert key.startswith("ai_moderation_text_")
        assert "pescadores" not in key

    def test_depends_on_content_type_and_format(self):
        base = fingerprint("foto.jpg", "catch_photos", ContentFormat.IMAGE)

        assert base != fingerprint("foto.jpg", "point_photos", ContentFormat.IMAGE)
        assert base != fingerprint("foto.jpg", "catch_photos", ContentFormat.TEXT)


@pytest.mark.unit
class TestDjangoResultCache:
    def test_round_trip(self):
        cache = DjangoResultCache(CacheConfig())
        result = ModerationResult.reject("spam", categories={"spam"}, confidence=0.95)

        cache.put("key", result)

        assert cache.get("key") == result

    def test_disabled_cache_always_misses(self):
        cache = DjangoResultCache(CacheConfig(enabled=False))

        cache.put("key", ModerationResult.approve("ok"))

        assert cache.get("key") is None
        assert cache.claim("key") is True

    def test_clear_keeps_rate_limit_counters(self):
        caches["default"].set("ai_moderation_rate_limit_chatgpt_bucket", 3)
        cache = DjangoResultCache(CacheConfig())
        cache.put("key", ModerationResult.approve("ok"))

        cache.clear()

        assert cache.get("key") is None
        assert caches["default"].get("ai_moderation_rate_limit_chatgpt_bucket") == 3

    def test_claim_is_exclusive_until_released(self):
        cache = DjangoResultCache(CacheConfig())

        assert cache.claim("key") is True
        assert cache.claim("key") is False

        cache.release("key")

        assert cache.claim("key") is True
