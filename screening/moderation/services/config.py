from dataclasses import dataclass, field
from typing import Any, Mapping

from django.conf import settings

from screening.moderation.domain.results import ContentFormat, FallbackPolicy

DEFAULT_PROMPT = "Moderate this content for inappropriate material."
DEFAULT_PROMPT_KEY = "comment_moderation"
REDACTED = "***"

_PROVIDER_KEYS = {"enabled", "api_key", "endpoint", "model", "timeout", "timeout_s", "temperature", "max_tokens"}


@dataclass(frozen=True)
class ProviderConfig:
    name: str
    enabled: bool = False
    api_key: str | None = None
    endpoint: str | None = None
    model: str | None = None
    timeout_s: float = 30.0
    temperature: float = 0.1
    max_tokens: int = 1000
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, name: str, data: Mapping[str, Any]) -> "ProviderConfig":
        timeout = data.get("timeout_s", data.get("timeout", 30))
        return cls(
            name=name,
            enabled=bool(data.get("enabled", False)),
            api_key=data.get("api_key") or None,
            endpoint=data.get("endpoint") or None,
            model=data.get("model") or None,
            timeout_s=float(timeout),
            temperature=float(data.get("temperature", 0.1)),
            max_tokens=int(data.get("max_tokens", 1000)),
            extra={key: value for key, value in data.items() if key not in _PROVIDER_KEYS},
        )

    def redacted(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "api_key": REDACTED if self.api_key else None,
            "endpoint": self.endpoint,
            "model": self.model,
            "timeout_s": self.timeout_s,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            **dict(self.extra),
        }


@dataclass(frozen=True)
class ContentTypeConfig:
    name: str
    enabled: bool
    provider: str | None
    prompt_key: str
    format: ContentFormat = ContentFormat.TEXT

    @classmethod
    def from_dict(cls, name: str, data: Mapping[str, Any]) -> "ContentTypeConfig":
        return cls(
            name=name,
            enabled=bool(data.get("enabled", False)),
            provider=data.get("provider") or None,
            prompt_key=data.get("prompt") or data.get("prompt_key") or DEFAULT_PROMPT_KEY,
            format=ContentFormat(data.get("format", ContentFormat.TEXT.value)),
        )


@dataclass(frozen=True)
class RateLimitConfig:
    enabled: bool = True
    max_requests_per_minute: int = 60
    raise_on_exceeded: bool = False


@dataclass(frozen=True)
class CacheConfig:
    enabled: bool = True
    ttl: int = 3600
    alias: str = "moderation"
    inflight_wait_s: float = 5.0


@dataclass(frozen=True)
class Thresholds:
    auto_approve_confidence: float = 0.9
    auto_reject_confidence: float = 0.8


@dataclass(frozen=True)
class ModerationConfig:
    """Visão tipada de `settings.AI_MODERATION`, carregada uma vez por gateway."""

    enabled: bool = True
    default_provider: str = "yandexgpt"
    providers: Mapping[str, ProviderConfig] = field(default_factory=dict)
    content_types: Mapping[str, ContentTypeConfig] = field(default_factory=dict)
    prompts: Mapping[str, str] = field(default_factory=dict)
    thresholds: Thresholds = field(default_factory=Thresholds)
    rate_limiting: RateLimitConfig = field(default_factory=RateLimitConfig)
    caching: CacheConfig = field(default_factory=CacheConfig)
    fallback: FallbackPolicy = FallbackPolicy.MANUAL_REVIEW

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ModerationConfig":
        thresholds = data.get("thresholds", {})
        rate_limiting = data.get("rate_limiting", {})
        caching = data.get("caching", {})
        return cls(
            enabled=bool(data.get("enabled", True)),
            default_provider=data.get("default_provider", "yandexgpt"),
            providers={
                name: ProviderConfig.from_dict(name, options) for name, options in data.get("providers", {}).items()
            },
            content_types={
                name: ContentTypeConfig.from_dict(name, options)
                for name, options in data.get("content_types", {}).items()
            },
            prompts=dict(data.get("prompts", {})),
            thresholds=Thresholds(
                auto_approve_confidence=float(thresholds.get("auto_approve_confidence", 0.9)),
                auto_reject_confidence=float(thresholds.get("auto_reject_confidence", 0.8)),
            ),
            rate_limiting=RateLimitConfig(
                enabled=bool(rate_limiting.get("enabled", True)),
                max_requests_per_minute=int(rate_limiting.get("max_requests_per_minute", 60)),
                raise_on_exceeded=bool(rate_limiting.get("raise_on_exceeded", False)),
            ),
            caching=CacheConfig(
                enabled=bool(caching.get("enabled", True)),
                ttl=int(caching.get("ttl", 3600)),
                alias=caching.get("alias", "moderation"),
                inflight_wait_s=float(caching.get("inflight_wait_s", 5.0)),
            ),
            fallback=FallbackPolicy.parse(data.get("fallback", {}).get("on_failure")),
        )

    @classmethod
    def from_settings(cls) -> "ModerationConfig":
        return cls.from_dict(getattr(settings, "AI_MODERATION", {}))

    def content_type(self, name: str) -> ContentTypeConfig | None:
        return self.content_types.get(name)

    def is_enabled_for(self, content_type: str) -> bool:
        if not self.enabled:
            return False
        content_config = self.content_type(content_type)
        return bool(content_config and content_config.enabled)

    def provider_for(self, content_type: str) -> str:
        content_config = self.content_type(content_type)
        return (content_config and content_config.provider) or self.default_provider

    def prompt_for(self, content_type: str) -> str:
        content_config = self.content_type(content_type)
        prompt_key = content_config.prompt_key if content_config else DEFAULT_PROMPT_KEY
        return self.prompts.get(prompt_key, DEFAULT_PROMPT)

    def content_types_for(self, content_format: ContentFormat) -> list[str]:
        return [name for name, options in self.content_types.items() if options.format == content_format]

    def as_public_dict(self) -> dict[str, Any]:
        """Configuração para o endpoint administrativo, com as chaves de API mascaradas."""
        return {
            "enabled": self.enabled,
            "default_provider": self.default_provider,
            "providers": {name: provider.redacted() for name, provider in self.providers.items()},
            "content_types": {
                name: {
                    "enabled": options.enabled,
                    "provider": options.provider,
                    "prompt": options.prompt_key,
                    "format": options.format.value,
                }
                for name, options in self.content_types.items()
            },
            "prompts": dict(self.prompts),
            "thresholds": {
                "auto_approve_confidence": self.thresholds.auto_approve_confidence,
                "auto_reject_confidence": self.thresholds.auto_reject_confidence,
            },
            "rate_limiting": {
                "enabled": self.rate_limiting.enabled,
                "max_requests_per_minute": self.rate_limiting.max_requests_per_minute,
                "raise_on_exceeded": self.rate_limiting.raise_on_exceeded,
            },
            "caching": {
                "enabled": self.caching.enabled,
                "ttl": self.caching.ttl,
                "alias": self.caching.alias,
            },
            "fallback": {"on_failure": self.fallback.value},
        }
