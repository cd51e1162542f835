from typing import Any

from screening.moderation.infrastructure.providers.base import HTTPProviderAdapter
from screening.moderation.infrastructure.registry import register_adapter
from screening.moderation.services.config import ProviderConfig


class ChatCompletionsAdapter(HTTPProviderAdapter):
    """Envelope no formato OpenAI `/chat/completions` (messages -> choices[0].message.content)."""

    default_model: str = ""

    def build_payload(self, prompt: str, is_image: bool, config: ProviderConfig) -> dict[str, Any]:
        return {
            "model": config.model or self.default_model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": config.temperature,
            "max_tokens": config.max_tokens,
        }

    def extract_text(self, data: dict[str, Any]) -> str:
        return data["choices"][0]["message"]["content"]


@register_adapter("chatgpt")
class ChatGPTAdapter(ChatCompletionsAdapter):
    default_endpoint = "https://api.openai.com/v1/chat/completions"
    default_model = "gpt-4"


@register_adapter("deepseek")
class DeepSeekAdapter(ChatCompletionsAdapter):
    default_endpoint = "https://api.deepseek.com/v1/chat/completions"
    default_model = "deepseek-chat"


@register_adapter("gigachat")
class GigaChatAdapter(ChatCompletionsAdapter):
    default_endpoint = "https://gigachat.devices.sberbank.ru/api/v1/chat/completions"
    default_model = "GigaChat"
