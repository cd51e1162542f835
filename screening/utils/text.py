PREVIEW_LENGTH = 100


def preview(content: str | None, length: int = PREVIEW_LENGTH) -> str:
    """Prévia truncada de conteúdo de usuário para logs (nunca o corpo inteiro)."""
    if not content:
        return ""
    if len(content) <= length:
        return content
    return content[:length] + "…"
