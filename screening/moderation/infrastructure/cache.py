import hashlib
from abc import ABC, abstractmethod

import structlog
from django.core.cache import caches

from screening.moderation.domain.results import ContentFormat, ModerationResult
from screening.moderation.services.config import CacheConfig

logger = structlog.get_logger(__name__)

KEY_PREFIX = "ai_moderation"


def fingerprint(content: str, content_type: str, content_format: ContentFormat = ContentFormat.TEXT) -> str:
    """Chave estável do cache: hash de (formato, tipo, conteúdo), nunca o conteúdo em si."""
    digest = hashlib.sha256(f"{content_format.value}\x00{content_type}\x00{content}".encode("utf-8")).hexdigest()
    return f"{KEY_PREFIX}_{content_format.value}_{digest}"


class ModerationCache(ABC):
    """Interface de cache de veredictos injetada no gateway."""

    @abstractmethod
    def get(self, key: str) -> ModerationResult | None: ...

    @abstractmethod
    def put(self, key: str, result: ModerationResult, ttl: int | None = None) -> None: ...

    @abstractmethod
    def clear(self) -> None: ...

    def claim(self, key: str) -> bool:
        """Marca o cálculo de `key` como em andamento. False se outro worker já marcou."""
        return True

    def release(self, key: str) -> None:
        return None


class DjangoResultCache(ModerationCache):
    """
    Cache de veredictos sobre um alias dedicado do cache do Django.

    O alias é separado do `default` (onde ficam os contadores de rate limit),
    então `clear()` nunca zera os limites por provedor.
    """

    INFLIGHT_SUFFIX = ":inflight"

    def __init__(self, config: CacheConfig | None = None):
        self.config = config or CacheConfig()

    @property
    def backend(self):
        return caches[self.config.alias]

    def get(self, key: str) -> ModerationResult | None:
        if not self.config.enabled:
            return None
        data = self.backend.get(key)
        if not data:
            return None
        return ModerationResult.from_dict(data)

    def put(self, key: str, result: ModerationResult, ttl: int | None = None) -> None:
        if not self.config.enabled:
            return
        self.backend.set(key, result.to_dict(), timeout=ttl if ttl is not None else self.config.ttl)

    def clear(self) -> None:
        self.backend.clear()
        logger.info("moderation_cache_cleared", alias=self.config.alias)

    def claim(self, key: str) -> bool:
        if not self.config.enabled:
            return True
        timeout = max(1, int(self.config.inflight_wait_s) + 1)
        return self.backend.add(key + self.INFLIGHT_SUFFIX, 1, timeout=timeout)

    def release(self, key: str) -> None:
        if self.config.enabled:
            self.backend.delete(key + self.INFLIGHT_SUFFIX)
