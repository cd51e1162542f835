import base64
import time
from typing import Callable, Mapping

import structlog
from django.core.exceptions import SuspiciousOperation
from django.core.files.storage import Storage, default_storage

from screening.moderation.domain.exceptions import (
    ContentUnreadable,
    ProviderHTTPError,
    ProviderUnavailable,
    RateLimitExceeded,
)
from screening.moderation.domain.results import (
    MODERATION_FAILURE,
    ContentFormat,
    FallbackPolicy,
    ModerationResult,
)
from screening.moderation.domain.strategies import ProviderAdapter
from screening.moderation.infrastructure.cache import DjangoResultCache, ModerationCache, fingerprint
from screening.moderation.infrastructure.rate_limit import RateLimiter
from screening.moderation.infrastructure.registry import build_adapters
from screening.moderation.services.config import ModerationConfig, ProviderConfig
from screening.moderation.services.parser import ResponseParser
from screening.utils.text import preview

logger = structlog.get_logger(__name__)

DISABLED_REASON = "disabled"
FALLBACK_APPROVE_REASON = "moderation failed, auto-approved"
FALLBACK_REJECT_REASON = "moderation failed, auto-rejected"
FALLBACK_REVIEW_REASON = "moderation failed, pending manual review"
TEST_PROVIDER_TEXT = "This is a test message for AI moderation."

INFLIGHT_POLL_INTERVAL = 0.1

SOURCE_PROVIDER = "provider"
SOURCE_CACHE = "cache"
SOURCE_FALLBACK = "fallback"
SOURCE_DISABLED = "disabled"


class ModerationGateway:
    """
    Orquestra a moderação de um conteúdo: configuração, cache, rate limit,
    chamada ao provedor, parsing e política de fallback.

    Cache, rate limiter e adapters são injetados; `build_gateway()` monta a
    instância de produção a partir de `settings.AI_MODERATION`.

    Falhas transitórias (HTTP, timeout, limite, imagem ilegível) viram um
    ModerationResult pela política de fallback. Erros de configuração
    (ProviderUnavailable) sobem para o chamador.
    """

    def __init__(
        self,
        config: ModerationConfig,
        adapters: Mapping[str, ProviderAdapter],
        cache: ModerationCache,
        rate_limiter: RateLimiter,
        parser: ResponseParser | None = None,
        storage: Storage | None = None,
        sleep: Callable[[float], None] = time.sleep,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self.adapters = dict(adapters)
        self.cache = cache
        self.rate_limiter = rate_limiter
        self.parser = parser or ResponseParser()
        self.storage = storage or default_storage
        self._sleep = sleep
        self._monotonic = monotonic

    def moderate_text(self, text: str, content_type: str) -> ModerationResult:
        return self._moderate(text, content_type, ContentFormat.TEXT)[0]

    def moderate_image(self, image_ref: str, content_type: str) -> ModerationResult:
        return self._moderate(image_ref, content_type, ContentFormat.IMAGE)[0]

    def moderate(self, content: str, content_type: str, content_format: ContentFormat | str) -> ModerationResult:
        return self.moderate_traced(content, content_type, content_format)[0]

    def moderate_traced(
        self, content: str, content_type: str, content_format: ContentFormat | str
    ) -> tuple[ModerationResult, str]:
        """
        Como `moderate`, mas devolve também o caminho que produziu o veredicto:
        `provider`, `cache`, `fallback` ou `disabled`. Só `provider` significa
        uma chamada real ao provedor.
        """
        return self._moderate(content, content_type, ContentFormat(content_format))

    def test_provider(self, provider: str) -> ModerationResult:
        """
        Chamada de diagnóstico direto a um provedor, sem cache e sem fallback.

        Raises:
            ProviderUnavailable: provedor desabilitado, sem credenciais ou sem adapter
            ProviderHTTPError: falha de rede ou resposta sem sucesso
            RateLimitExceeded: orçamento do minuto esgotado
        """
        provider_config, adapter = self._resolve_provider(provider)
        self.rate_limiter.check_and_increment(provider)
        prompt = self._text_prompt(TEST_PROVIDER_TEXT, self.config.prompt_for("catch_comments"))
        result = self.parser.parse(adapter.call(prompt, False, provider_config, content=TEST_PROVIDER_TEXT))
        logger.info("provider_test_completed", provider=provider, approved=result.approved)
        return result

    def clear_cache(self) -> None:
        self.cache.clear()

    def _moderate(
        self, content: str, content_type: str, content_format: ContentFormat
    ) -> tuple[ModerationResult, str]:
        log = logger.bind(content_type=content_type, format=content_format.value, content_preview=preview(content))

        if not self.config.is_enabled_for(content_type):
            return self._finish(log, ModerationResult.approve(DISABLED_REASON), source=SOURCE_DISABLED)

        key = fingerprint(content, content_type, content_format)
        cached = self.cache.get(key)
        if cached is not None:
            return self._finish(log, cached, source=SOURCE_CACHE)

        provider = self.config.provider_for(content_type)
        provider_config, adapter = self._resolve_provider(provider)
        log = log.bind(provider=provider)

        claimed = self.cache.claim(key)
        if not claimed:
            cached = self._await_inflight(key)
            if cached is not None:
                return self._finish(log, cached, source=SOURCE_CACHE)

        try:
            result = self._call_provider(content, content_type, content_format, provider, provider_config, adapter)
        except RateLimitExceeded as exc:
            log.warning("moderation_rate_limited", error=str(exc))
            if self.config.rate_limiting.raise_on_exceeded:
                raise
            return self._finish(log, self._fallback_result(), source=SOURCE_FALLBACK)
        except (ProviderHTTPError, ContentUnreadable) as exc:
            log.error("moderation_failed", error=str(exc), error_type=type(exc).__name__)
            return self._finish(log, self._fallback_result(), source=SOURCE_FALLBACK)
        finally:
            if claimed:
                self.cache.release(key)

        self.cache.put(key, result, self.config.caching.ttl)
        return self._finish(log, result, source=SOURCE_PROVIDER)

    def _resolve_provider(self, provider: str) -> tuple[ProviderConfig, ProviderAdapter]:
        provider_config = self.config.providers.get(provider)
        if provider_config is None or not provider_config.enabled:
            raise ProviderUnavailable(provider)

        adapter = self.adapters.get(provider)
        if adapter is None:
            raise ProviderUnavailable(provider, "not supported")
        if not adapter.is_configured(provider_config):
            raise ProviderUnavailable(provider, "missing credentials")

        return provider_config, adapter

    def _call_provider(
        self,
        content: str,
        content_type: str,
        content_format: ContentFormat,
        provider: str,
        provider_config: ProviderConfig,
        adapter: ProviderAdapter,
    ) -> ModerationResult:
        instruction = self.config.prompt_for(content_type)
        is_image = content_format == ContentFormat.IMAGE
        prompt = self._image_prompt(content, instruction) if is_image else self._text_prompt(content, instruction)

        self.rate_limiter.check_and_increment(provider)
        raw_response = adapter.call(prompt, is_image, provider_config, content=content)
        return self.parser.parse(raw_response)

    @staticmethod
    def _text_prompt(text: str, instruction: str) -> str:
        return f"Text to moderate: {text}. {instruction}"

    def _image_prompt(self, image_ref: str, instruction: str) -> str:
        image_data = base64.b64encode(self._read_image(image_ref)).decode("ascii")
        return f"Analyze this image: data:image/jpeg;base64,{image_data}. {instruction}"

    def _read_image(self, image_ref: str) -> bytes:
        try:
            with self.storage.open(image_ref, "rb") as image_file:
                return image_file.read()
        except (OSError, SuspiciousOperation) as exc:
            raise ContentUnreadable(image_ref, str(exc)) from exc

    def _await_inflight(self, key: str) -> ModerationResult | None:
        deadline = self._monotonic() + self.config.caching.inflight_wait_s
        while self._monotonic() < deadline:
            self._sleep(INFLIGHT_POLL_INTERVAL)
            cached = self.cache.get(key)
            if cached is not None:
                return cached
        return None

    def _fallback_result(self) -> ModerationResult:
        policy = self.config.fallback
        if policy == FallbackPolicy.APPROVE:
            return ModerationResult.approve(FALLBACK_APPROVE_REASON)
        if policy == FallbackPolicy.REJECT:
            return ModerationResult.reject(FALLBACK_REJECT_REASON, categories={MODERATION_FAILURE})
        return ModerationResult.pending_review(FALLBACK_REVIEW_REASON)

    @staticmethod
    def _finish(log, result: ModerationResult, source: str) -> tuple[ModerationResult, str]:
        log.info(
            "moderation_completed",
            source=source,
            approved=result.approved,
            confidence=result.confidence,
            reason=result.reason,
            categories=sorted(result.categories),
        )
        return result, source


def build_gateway(config: ModerationConfig | None = None, http_client=None) -> ModerationGateway:
    """Gateway de produção: adapters registrados, cache e rate limit sobre o cache do Django."""
    config = config or ModerationConfig.from_settings()
    return ModerationGateway(
        config=config,
        adapters=build_adapters(http_client=http_client),
        cache=DjangoResultCache(config.caching),
        rate_limiter=RateLimiter.from_config(config.rate_limiting),
    )
