from typing import Any

from screening.moderation.infrastructure.providers.base import HTTPProviderAdapter
from screening.moderation.infrastructure.registry import register_adapter
from screening.moderation.services.config import ProviderConfig


@register_adapter("yandexgpt")
class YandexGPTAdapter(HTTPProviderAdapter):
    """
    YandexGPT Foundation Models.

    Autentica com `Api-Key` (não Bearer) e endereça o modelo por
    `gpt://<folder_id>/<model>`; `folder_id` vem de `extra` na configuração.
    """

    default_endpoint = "https://llm.api.cloud.yandex.net/foundationModels/v1/completion"

    def build_headers(self, config: ProviderConfig) -> dict[str, str]:
        return {
            "Authorization": f"Api-Key {config.api_key}",
            "Content-Type": "application/json",
        }

    def build_payload(self, prompt: str, is_image: bool, config: ProviderConfig) -> dict[str, Any]:
        return {
            "modelUri": f"gpt://{config.extra.get('folder_id')}/{config.model or 'yandexgpt'}",
            "completionOptions": {
                "temperature": config.temperature,
                "maxTokens": config.max_tokens,
            },
            "messages": [{"role": "user", "text": prompt}],
        }

    def extract_text(self, data: dict[str, Any]) -> str:
        return data["result"]["alternatives"][0]["message"]["text"]

    def is_configured(self, config: ProviderConfig) -> bool:
        return bool(config.api_key and config.extra.get("folder_id"))
