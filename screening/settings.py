import os
from datetime import timedelta
from pathlib import Path

import structlog
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / ".env")


def env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value not in (None, "") else default


def env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value not in (None, "") else default


SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "insecure-dev-key-change-me")
DEBUG = env_bool("DJANGO_DEBUG", False)
ALLOWED_HOSTS = [host for host in os.getenv("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if host]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "drf_spectacular",
    "screening.accounts",
    "screening.content",
    "screening.moderation",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "screening.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

ASGI_APPLICATION = "screening.asgi.application"

DATABASES = {
    "default": {
        "ENGINE": os.getenv("DATABASE_ENGINE", "django.db.backends.sqlite3"),
        "NAME": os.getenv("DATABASE_NAME", str(BASE_DIR / "db.sqlite3")),
        "USER": os.getenv("DATABASE_USER", ""),
        "PASSWORD": os.getenv("DATABASE_PASSWORD", ""),
        "HOST": os.getenv("DATABASE_HOST", ""),
        "PORT": os.getenv("DATABASE_PORT", ""),
    }
}

AUTH_USER_MODEL = "accounts.User"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "pt-br"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
MEDIA_ROOT = os.getenv("MEDIA_ROOT", str(BASE_DIR / "media"))
MEDIA_URL = "media/"

REDIS_URL = os.getenv("REDIS_URL")

if REDIS_URL:
    CACHES = {
        "default": {"BACKEND": "django.core.cache.backends.redis.RedisCache", "LOCATION": REDIS_URL},
        "moderation": {
            "BACKEND": "django.core.cache.backends.redis.RedisCache",
            "LOCATION": REDIS_URL,
            "KEY_PREFIX": "moderation",
        },
    }
else:
    CACHES = {
        "default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache", "LOCATION": "default"},
        "moderation": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache", "LOCATION": "moderation"},
    }

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": ("rest_framework_simplejwt.authentication.JWTAuthentication",),
    "DEFAULT_PERMISSION_CLASSES": ("rest_framework.permissions.IsAuthenticated",),
    "DEFAULT_PAGINATION_CLASS": "screening.utils.pagination.CustomPageNumberPagination",
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "EXCEPTION_HANDLER": "screening.utils.exceptions.custom_exception_handler",
}

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=env_int("JWT_ACCESS_MINUTES", 60)),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=env_int("JWT_REFRESH_DAYS", 7)),
}

SPECTACULAR_SETTINGS = {
    "TITLE": "Content Moderation Gateway",
    "VERSION": "1.0.0",
}

CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", REDIS_URL or "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", CELERY_BROKER_URL)
CELERY_TASK_ALWAYS_EAGER = env_bool("CELERY_TASK_ALWAYS_EAGER", False)
CELERY_TASK_ACKS_LATE = True
CELERY_WORKER_CONCURRENCY = env_int("CELERY_WORKER_CONCURRENCY", 4)

PROFANITY_LIST = [word for word in os.getenv("PROFANITY_LIST", "bobo,idiota,estupido").split(",") if word]

_MODERATION_JSON_CONTRACT = (
    'Respond with JSON: {"approved": true/false, "confidence": 0.0-1.0, '
    '"reason": "explanation", "categories": ["category1", "category2"]}'
)

AI_MODERATION = {
    "enabled": env_bool("AI_MODERATION_ENABLED", True),
    "default_provider": os.getenv("AI_DEFAULT_PROVIDER", "yandexgpt"),
    "providers": {
        "yandexgpt": {
            "enabled": env_bool("YANDEX_GPT_ENABLED", False),
            "api_key": os.getenv("YANDEX_GPT_API_KEY"),
            "endpoint": os.getenv(
                "YANDEX_GPT_ENDPOINT", "https://llm.api.cloud.yandex.net/foundationModels/v1/completion"
            ),
            "model": os.getenv("YANDEX_GPT_MODEL", "yandexgpt"),
            "temperature": env_float("YANDEX_GPT_TEMPERATURE", 0.1),
            "max_tokens": env_int("YANDEX_GPT_MAX_TOKENS", 1000),
            "timeout": env_float("YANDEX_GPT_TIMEOUT", 30),
            "folder_id": os.getenv("YANDEX_GPT_FOLDER_ID"),
        },
        "gigachat": {
            "enabled": env_bool("GIGACHAT_ENABLED", False),
            "api_key": os.getenv("GIGACHAT_API_KEY"),
            "endpoint": os.getenv("GIGACHAT_ENDPOINT", "https://gigachat.devices.sberbank.ru/api/v1/chat/completions"),
            "model": os.getenv("GIGACHAT_MODEL", "GigaChat"),
            "temperature": env_float("GIGACHAT_TEMPERATURE", 0.1),
            "max_tokens": env_int("GIGACHAT_MAX_TOKENS", 1000),
            "timeout": env_float("GIGACHAT_TIMEOUT", 30),
        },
        "chatgpt": {
            "enabled": env_bool("CHATGPT_ENABLED", False),
            "api_key": os.getenv("CHATGPT_API_KEY"),
            "endpoint": os.getenv("CHATGPT_ENDPOINT", "https://api.openai.com/v1/chat/completions"),
            "model": os.getenv("CHATGPT_MODEL", "gpt-4"),
            "temperature": env_float("CHATGPT_TEMPERATURE", 0.1),
            "max_tokens": env_int("CHATGPT_MAX_TOKENS", 1000),
            "timeout": env_float("CHATGPT_TIMEOUT", 30),
        },
        "deepseek": {
            "enabled": env_bool("DEEPSEEK_ENABLED", False),
            "api_key": os.getenv("DEEPSEEK_API_KEY"),
            "endpoint": os.getenv("DEEPSEEK_ENDPOINT", "https://api.deepseek.com/v1/chat/completions"),
            "model": os.getenv("DEEPSEEK_MODEL", "deepseek-chat"),
            "temperature": env_float("DEEPSEEK_TEMPERATURE", 0.1),
            "max_tokens": env_int("DEEPSEEK_MAX_TOKENS", 1000),
            "timeout": env_float("DEEPSEEK_TIMEOUT", 30),
        },
        "gemini": {
            "enabled": env_bool("GEMINI_ENABLED", False),
            "api_key": os.getenv("GOOGLE_API_KEY"),
            "model": os.getenv("GEMINI_MODEL", "gemini-2.0-flash"),
            "temperature": env_float("GEMINI_TEMPERATURE", 0.0),
            "max_tokens": env_int("GEMINI_MAX_TOKENS", 1000),
            "timeout": env_float("GEMINI_TIMEOUT", 30),
        },
        "local": {
            "enabled": env_bool("LOCAL_MODERATION_ENABLED", True),
            "model": "dictionary",
            "timeout": 1,
        },
    },
    "prompts": {
        "photo_moderation": (
            "Analyze this image for inappropriate content. Check for: explicit content, violence, hate speech, "
            "spam, or any content that violates community guidelines. " + _MODERATION_JSON_CONTRACT
        ),
        "comment_moderation": (
            "Moderate this text comment for inappropriate content. Check for: hate speech, harassment, spam, "
            "offensive language, adult content, violence, or illegal activities. " + _MODERATION_JSON_CONTRACT
        ),
        "catch_moderation": (
            "Moderate this fishing catch description for inappropriate content. Check for: hate speech, "
            "harassment, spam, offensive language, or any content that violates community guidelines. "
            + _MODERATION_JSON_CONTRACT
        ),
        "point_moderation": (
            "Moderate this fishing point description for inappropriate content. Check for: hate speech, "
            "harassment, spam, offensive language, or any content that violates community guidelines. "
            + _MODERATION_JSON_CONTRACT
        ),
        "event_moderation": (
            "Moderate this fishing event announcement for inappropriate content. Check for: hate speech, "
            "harassment, spam, scams, offensive language, or illegal activities. " + _MODERATION_JSON_CONTRACT
        ),
    },
    "content_types": {
        "catch_photos": {"enabled": True, "provider": "yandexgpt", "prompt": "photo_moderation", "format": "image"},
        "catch_comments": {"enabled": True, "provider": "yandexgpt", "prompt": "comment_moderation"},
        "catch_descriptions": {"enabled": True, "provider": "yandexgpt", "prompt": "catch_moderation"},
        "point_descriptions": {"enabled": True, "provider": "yandexgpt", "prompt": "point_moderation"},
        "point_comments": {"enabled": True, "provider": "yandexgpt", "prompt": "comment_moderation"},
        "point_photos": {"enabled": True, "provider": "yandexgpt", "prompt": "photo_moderation", "format": "image"},
        "event_descriptions": {"enabled": True, "provider": "yandexgpt", "prompt": "event_moderation"},
        "event_news": {"enabled": True, "provider": "yandexgpt", "prompt": "event_moderation"},
        "user_bio": {"enabled": False, "provider": "yandexgpt", "prompt": "comment_moderation"},
        "user_avatar": {"enabled": False, "provider": "yandexgpt", "prompt": "photo_moderation", "format": "image"},
    },
    "thresholds": {
        "auto_approve_confidence": env_float("AI_AUTO_APPROVE_CONFIDENCE", 0.9),
        "auto_reject_confidence": env_float("AI_AUTO_REJECT_CONFIDENCE", 0.8),
    },
    "rate_limiting": {
        "enabled": env_bool("AI_RATE_LIMITING_ENABLED", True),
        "max_requests_per_minute": env_int("AI_MAX_REQUESTS_PER_MINUTE", 60),
        "raise_on_exceeded": env_bool("AI_RATE_LIMIT_RAISE", False),
    },
    "caching": {
        "enabled": env_bool("AI_CACHING_ENABLED", True),
        "ttl": env_int("AI_CACHE_TTL", 3600),
        "alias": "moderation",
        "inflight_wait_s": env_float("AI_CACHE_INFLIGHT_WAIT", 5.0),
    },
    "fallback": {
        "on_failure": os.getenv("AI_FALLBACK_ON_FAILURE", "manual_review"),
    },
}

structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.dev.ConsoleRenderer() if DEBUG else structlog.processors.JSONRenderer(),
    ],
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {"plain": {"format": "%(message)s"}},
    "handlers": {"console": {"class": "logging.StreamHandler", "formatter": "plain"}},
    "root": {"handlers": ["console"], "level": os.getenv("LOG_LEVEL", "INFO")},
}
