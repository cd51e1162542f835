from datetime import datetime
from typing import Callable

import structlog
from django.core.cache import caches
from django.utils import timezone

from screening.moderation.domain.exceptions import RateLimitExceeded
from screening.moderation.services.config import RateLimitConfig

logger = structlog.get_logger(__name__)


class RateLimiter:
    """
    Limite de chamadas por provedor em janelas de um minuto.

    O contador vive no cache do Django (`add` + `incr`), então o incremento e a
    comparação são uma única operação atômica no backend (Redis em produção).
    """

    WINDOW_SECONDS = 60
    KEY_TEMPLATE = "ai_moderation_rate_limit_{provider}_{bucket}"

    def __init__(
        self,
        max_requests_per_minute: int = 60,
        enabled: bool = True,
        cache_alias: str = "default",
        clock: Callable[[], datetime] | None = None,
    ):
        self.max_requests_per_minute = max_requests_per_minute
        self.enabled = enabled
        self.cache_alias = cache_alias
        self._clock = clock or timezone.now

    @classmethod
    def from_config(cls, config: RateLimitConfig, **kwargs) -> "RateLimiter":
        return cls(max_requests_per_minute=config.max_requests_per_minute, enabled=config.enabled, **kwargs)

    @property
    def backend(self):
        return caches[self.cache_alias]

    def key_for(self, provider: str) -> str:
        return self.KEY_TEMPLATE.format(provider=provider, bucket=self._clock().strftime("%Y-%m-%d-%H-%M"))

    def check_and_increment(self, provider: str) -> None:
        """
        Consome uma chamada do orçamento do minuto corrente.

        Raises:
            RateLimitExceeded: se o contador já está no limite configurado
        """
        if not self.enabled:
            return

        key = self.key_for(provider)
        backend = self.backend
        backend.add(key, 0, timeout=self.WINDOW_SECONDS)
        try:
            count = backend.incr(key)
        except ValueError:
            # chave expirou entre o add e o incr
            backend.add(key, 0, timeout=self.WINDOW_SECONDS)
            count = backend.incr(key)

        if count > self.max_requests_per_minute:
            backend.decr(key)
            logger.warning("moderation_rate_limit_exceeded", provider=provider, limit=self.max_requests_per_minute)
            raise RateLimitExceeded(provider, self.max_requests_per_minute)

        backend.touch(key, self.WINDOW_SECONDS)

    def current_count(self, provider: str) -> int:
        return int(self.backend.get(self.key_for(provider), 0))
