from abc import abstractmethod
from typing import Any

import httpx
import structlog

from screening.moderation.domain.exceptions import ProviderHTTPError
from screening.moderation.domain.strategies import ProviderAdapter
from screening.moderation.services.config import ProviderConfig

logger = structlog.get_logger(__name__)

ERROR_BODY_LIMIT = 500


class HTTPProviderAdapter(ProviderAdapter):
    """
    Base para provedores expostos como um endpoint POST de "completion".

    Subclasses definem apenas o envelope: headers, corpo e onde está o texto
    na resposta. Timeout, erros HTTP e de transporte são tratados aqui e sempre
    viram ProviderHTTPError.
    """

    default_endpoint: str = ""

    def build_headers(self, config: ProviderConfig) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {config.api_key}",
            "Content-Type": "application/json",
        }

    @abstractmethod
    def build_payload(self, prompt: str, is_image: bool, config: ProviderConfig) -> dict[str, Any]:
        """Corpo JSON da requisição no formato do provedor."""

    @abstractmethod
    def extract_text(self, data: dict[str, Any]) -> str:
        """Texto do modelo dentro do envelope de resposta."""

    def is_configured(self, config: ProviderConfig) -> bool:
        return bool(config.api_key)

    def _post(self, url: str, headers: dict[str, str], payload: dict[str, Any], timeout: float) -> httpx.Response:
        if self.http_client is not None:
            return self.http_client.post(url, json=payload, headers=headers, timeout=timeout)
        with httpx.Client(timeout=timeout) as client:
            return client.post(url, json=payload, headers=headers)

    def call(self, prompt: str, is_image: bool, config: ProviderConfig, content: str | None = None) -> str:
        url = config.endpoint or self.default_endpoint
        log = logger.bind(provider=self.name, endpoint=url, is_image=is_image)

        try:
            response = self._post(
                url, self.build_headers(config), self.build_payload(prompt, is_image, config), config.timeout_s
            )
        except httpx.TimeoutException as exc:
            log.warning("provider_timeout", timeout_s=config.timeout_s)
            raise ProviderHTTPError(self.name, f"timeout after {config.timeout_s}s") from exc
        except httpx.HTTPError as exc:
            log.warning("provider_transport_error", error=str(exc))
            raise ProviderHTTPError(self.name, str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            log.warning("provider_http_error", status_code=response.status_code)
            raise ProviderHTTPError(self.name, response.text[:ERROR_BODY_LIMIT], status_code=response.status_code)

        try:
            text = self.extract_text(response.json())
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            log.warning("provider_malformed_envelope", error=str(exc))
            raise ProviderHTTPError(self.name, "malformed response envelope", status_code=response.status_code) from exc

        if not isinstance(text, str):
            raise ProviderHTTPError(self.name, "response text is not a string", status_code=response.status_code)

        return text
