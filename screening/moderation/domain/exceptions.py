class ModerationError(Exception):
    """Base de todos os erros do gateway de moderação."""


class ProviderUnavailable(ModerationError):
    """Provedor do tipo de conteúdo desabilitado ou mal configurado (erro de operador, sem fallback)."""

    def __init__(self, provider: str, detail: str = "not enabled or configured"):
        self.provider = provider
        super().__init__(f"Provider {provider} is {detail}")


class ProviderHTTPError(ModerationError):
    """Resposta não-2xx, timeout ou falha de transporte ao chamar o provedor."""

    def __init__(self, provider: str, detail: str, status_code: int | None = None):
        self.provider = provider
        self.status_code = status_code
        self.detail = detail
        prefix = f"{provider} API error"
        if status_code is not None:
            prefix = f"{prefix} ({status_code})"
        super().__init__(f"{prefix}: {detail}")


class ParseError(ModerationError):
    """Resposta do provedor não interpretável. Nunca sai do parser."""


class RateLimitExceeded(ModerationError):
    """Orçamento de chamadas do minuto corrente esgotado para o provedor."""

    def __init__(self, provider: str, limit: int):
        self.provider = provider
        self.limit = limit
        super().__init__(f"Rate limit exceeded for provider {provider} ({limit}/min)")


class StaleModerationUpdate(ModerationError):
    """Veredicto automático chegou depois de uma decisão administrativa ou de uma edição do conteúdo."""

    def __init__(self, entity_label: str, entity_id, detail: str):
        self.entity_label = entity_label
        self.entity_id = entity_id
        self.detail = detail
        super().__init__(f"{entity_label} {entity_id} {detail}; automated verdict discarded")


class ContentUnreadable(ModerationError):
    """Conteúdo referenciado (ex.: imagem no storage) não pôde ser lido. Segue o fallback."""

    def __init__(self, reference: str, detail: str):
        self.reference = reference
        super().__init__(f"Could not read {reference}: {detail}")
