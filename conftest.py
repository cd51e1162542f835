import copy

import pytest
from django.core.cache import caches
from model_bakery import baker
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from screening.accounts.models import User
from screening.moderation.services.config import ModerationConfig

TEST_PROMPT = 'Moderate this text. Respond with JSON: {"approved": true/false, "confidence": 0.0-1.0}'


def make_moderation_settings(provider: str = "local", **overrides) -> dict:
    """AI_MODERATION mínimo para testes: todos os tipos apontam para `provider`."""
    text_types = [
        "catch_comments",
        "point_comments",
        "catch_descriptions",
        "point_descriptions",
        "event_descriptions",
        "event_news",
        "user_bio",
    ]
    image_types = ["catch_photos", "point_photos", "user_avatar"]

    content_types = {name: {"enabled": True, "provider": provider, "prompt": "default"} for name in text_types}
    content_types.update(
        {name: {"enabled": True, "provider": provider, "prompt": "default", "format": "image"} for name in image_types}
    )

    config = {
        "enabled": True,
        "default_provider": provider,
        "providers": {
            "local": {"enabled": True, "model": "dictionary", "timeout": 1},
            "chatgpt": {
                "enabled": True,
                "api_key": "sk-test",
                "endpoint": "https://llm.test/v1/chat/completions",
                "model": "gpt-4",
                "timeout": 5,
            },
            "yandexgpt": {
                "enabled": True,
                "api_key": "yandex-test",
                "folder_id": "b1gfolder",
                "endpoint": "https://yandex.test/completion",
                "model": "yandexgpt",
                "timeout": 5,
            },
            "deepseek": {"enabled": False, "api_key": None},
        },
        "prompts": {"default": TEST_PROMPT},
        "content_types": content_types,
        "thresholds": {"auto_approve_confidence": 0.9, "auto_reject_confidence": 0.8},
        "rate_limiting": {"enabled": True, "max_requests_per_minute": 60, "raise_on_exceeded": False},
        "caching": {"enabled": True, "ttl": 3600, "alias": "moderation", "inflight_wait_s": 0},
        "fallback": {"on_failure": "manual_review"},
    }
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(config.get(key), dict):
            config[key] = {**config[key], **value}
        else:
            config[key] = value
    return config


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def user(db):
    """Fixture que cria um usuário comum (autor de conteúdo)."""
    return baker.make(User, email="test@example.com", name="Test User")


@pytest.fixture
def authenticated_client(user: User) -> APIClient:
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
    return client


@pytest.fixture
def admin_user(db) -> User:
    return baker.make(User, email="admin@example.com", name="Admin User", is_staff=True)


@pytest.fixture
def admin_client(admin_user: User) -> APIClient:
    client = APIClient()
    refresh = RefreshToken.for_user(admin_user)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
    return client


@pytest.fixture(autouse=True)
def locmem_caches(settings):
    """Caches em memória e limpos a cada teste (contadores e resultados)."""
    settings.CACHES = {
        "default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache", "LOCATION": "test-default"},
        "moderation": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache", "LOCATION": "test-moderation"},
    }
    for alias in ("default", "moderation"):
        caches[alias].clear()
    yield
    for alias in ("default", "moderation"):
        caches[alias].clear()


@pytest.fixture(autouse=True)
def moderation_settings(settings):
    """Sobrescreve AI_MODERATION para usar o provedor local em todos os tipos."""
    settings.AI_MODERATION = make_moderation_settings()
    settings.PROFANITY_LIST = ["idiota", "pills"]
    return settings.AI_MODERATION


@pytest.fixture
def override_moderation(settings):
    """Permite a um teste trocar a configuração: override_moderation(provider="chatgpt", ...)."""

    def apply(provider: str = "local", **overrides) -> dict:
        settings.AI_MODERATION = copy.deepcopy(make_moderation_settings(provider, **overrides))
        return settings.AI_MODERATION

    return apply


@pytest.fixture
def make_config():
    """Fábrica de ModerationConfig tipado, sem passar por settings."""

    def build(provider: str = "local", **overrides):
        return ModerationConfig.from_dict(make_moderation_settings(provider, **overrides))

    return build
