import structlog
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from screening.moderation.domain.exceptions import ProviderHTTPError
from screening.moderation.domain.strategies import ProviderAdapter
from screening.moderation.infrastructure.registry import register_adapter
from screening.moderation.services.config import ProviderConfig

logger = structlog.get_logger(__name__)


@register_adapter("gemini")
class GeminiAdapter(ProviderAdapter):
    """
    Moderação via Google Gemini (SDK google-genai).

    O SDK cuida do transporte; aqui só montamos a chamada e convertemos
    qualquer falha do SDK em ProviderHTTPError.
    """

    SYSTEM_INSTRUCTION = """
    You are a high-precision content moderation system for a fishing community.
    Follow the instruction in the user message and check for policy violations.

    Return ONLY a JSON object with the format:
    {
        "approved": boolean,
        "confidence": float,
        "reason": "string",
        "categories": ["string"]
    }
    """

    def __init__(self, http_client=None, client_factory=None):
        super().__init__(http_client=http_client)
        self._client_factory = client_factory or self._default_client

    @staticmethod
    def _default_client(config: ProviderConfig) -> genai.Client:
        return genai.Client(
            api_key=config.api_key,
            http_options=types.HttpOptions(timeout=int(config.timeout_s * 1000)),
        )

    def is_configured(self, config: ProviderConfig) -> bool:
        return bool(config.api_key)

    def call(self, prompt: str, is_image: bool, config: ProviderConfig, content: str | None = None) -> str:
        log = logger.bind(provider=self.name, model=config.model, is_image=is_image)

        try:
            client = self._client_factory(config)
            response = client.models.generate_content(
                model=config.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    system_instruction=self.SYSTEM_INSTRUCTION,
                    response_mime_type="application/json",
                    temperature=config.temperature,
                    max_output_tokens=config.max_tokens,
                ),
            )
        except genai_errors.APIError as exc:
            log.warning("gemini_api_error", status_code=exc.code, error=str(exc))
            raise ProviderHTTPError(self.name, str(exc), status_code=exc.code) from exc
        except Exception as exc:
            log.warning("gemini_transport_error", error=str(exc), error_type=type(exc).__name__)
            raise ProviderHTTPError(self.name, str(exc) or type(exc).__name__) from exc

        if not response.text:
            raise ProviderHTTPError(self.name, "empty response")

        return response.text
