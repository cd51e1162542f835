import json

from django.conf import settings

from screening.moderation.domain.strategies import ProviderAdapter
from screening.moderation.infrastructure.registry import register_adapter
from screening.moderation.services.config import ProviderConfig


@register_adapter("local")
class LocalDictionaryAdapter(ProviderAdapter):
    """
    Provedor offline por dicionário de palavras bloqueadas (`settings.PROFANITY_LIST`).

    Responde no mesmo contrato JSON pedido aos modelos de IA, então passa pelo
    mesmo parser. Não analisa imagens: devolve confiança 0.5, o que leva a
    revisão manual.
    """

    def __init__(self, http_client=None, blocked_words: list[str] | None = None):
        super().__init__(http_client=http_client)
        self._blocked_words = blocked_words

    @property
    def blocked_words(self) -> list[str]:
        if self._blocked_words is not None:
            return self._blocked_words
        return list(getattr(settings, "PROFANITY_LIST", []))

    def call(self, prompt: str, is_image: bool, config: ProviderConfig, content: str | None = None) -> str:
        if is_image:
            return json.dumps(
                {"approved": True, "confidence": 0.5, "reason": "image not analysed by local dictionary"}
            )

        content_lower = (prompt if content is None else content).lower()
        for word in self.blocked_words:
            if word.lower() in content_lower:
                return json.dumps(
                    {
                        "approved": False,
                        "confidence": 1.0,
                        "reason": f"Palavra proibida detectada: {word}",
                        "categories": ["profanity"],
                    }
                )

        return json.dumps({"approved": True, "confidence": 1.0, "reason": "clean_content", "categories": []})
