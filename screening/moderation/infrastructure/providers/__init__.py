from screening.moderation.infrastructure.providers import (  # noqa: F401
    chat_completions,
    gemini,
    local,
    yandexgpt,
)
