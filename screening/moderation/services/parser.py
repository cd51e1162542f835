import json
import re
from typing import Any

import structlog

from screening.moderation.domain.exceptions import ParseError
from screening.moderation.domain.results import ModerationResult

logger = structlog.get_logger(__name__)

# Valores provisórios, sujeitos a ajuste de produto.
HEURISTIC_APPROVE_CONFIDENCE = 0.7
HEURISTIC_REJECT_CONFIDENCE = 0.8
DEFAULT_STRUCTURED_CONFIDENCE = 0.5

DISALLOWED_TERMS = ("reject", "inappropriate", "violation", "offensive", "spam")
_DISALLOWED_PATTERN = re.compile(r"\b(" + "|".join(DISALLOWED_TERMS) + r")\b", re.IGNORECASE)

_TRUE_STRINGS = {"true", "yes", "1", "approved", "approve"}
_FALSE_STRINGS = {"false", "no", "0", "rejected", "reject", ""}


def _coerce_approved(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUE_STRINGS:
            return True
        if normalized in _FALSE_STRINGS:
            return False
    raise ParseError(f"unrecognised 'approved' value: {value!r}")


def _coerce_confidence(value: Any) -> float:
    if value is None:
        return DEFAULT_STRUCTURED_CONFIDENCE
    if isinstance(value, bool):
        raise ParseError("boolean is not a confidence")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ParseError(f"unrecognised 'confidence' value: {value!r}") from exc


def _coerce_categories(value: Any) -> frozenset[str]:
    if value is None:
        return frozenset()
    if isinstance(value, str):
        return frozenset({value}) if value else frozenset()
    if isinstance(value, (list, tuple, set)):
        return frozenset(str(item) for item in value if item is not None and item != "")
    raise ParseError(f"unrecognised 'categories' value: {value!r}")


def parse_structured(raw_text: str) -> ModerationResult | None:
    """
    Primeira etapa: extrai o objeto JSON entre o primeiro `{` e o último `}`.

    Returns:
        ModerationResult se houver um objeto decodificável com `approved`,
        None caso contrário (a heurística assume).

    Raises:
        ParseError: objeto encontrado mas com campos de tipo inválido
    """
    start = raw_text.find("{")
    end = raw_text.rfind("}")
    if start == -1 or end == -1 or end < start:
        return None

    try:
        data = json.loads(raw_text[start : end + 1])
    except json.JSONDecodeError:
        return None

    if not isinstance(data, dict) or "approved" not in data:
        return None

    return ModerationResult(
        approved=_coerce_approved(data["approved"]),
        confidence=_coerce_confidence(data.get("confidence")),
        reason=str(data.get("reason") or "AI moderation result"),
        categories=_coerce_categories(data.get("categories")),
        raw_response=raw_text,
    )


def parse_keywords(raw_text: str) -> ModerationResult:
    """Segunda etapa: heurística leniente por palavras proibidas no texto livre."""
    rejected = bool(_DISALLOWED_PATTERN.search(raw_text))
    return ModerationResult(
        approved=not rejected,
        confidence=HEURISTIC_REJECT_CONFIDENCE if rejected else HEURISTIC_APPROVE_CONFIDENCE,
        reason="parsed from text response",
        raw_response=raw_text,
    )


class ResponseParser:
    """
    Converte a resposta livre de um provedor em ModerationResult.

    O formato da resposta não é garantido por contrato, então o parser nunca
    levanta exceção: qualquer falha vira um resultado `pending_review`.
    """

    FAILURE_REASON = "failed to parse AI response"

    def parse(self, raw_text: str) -> ModerationResult:
        try:
            if not isinstance(raw_text, str):
                raise ParseError(f"expected text, got {type(raw_text).__name__}")
            return parse_structured(raw_text) or parse_keywords(raw_text)
        except Exception as exc:
            logger.warning(
                "moderation_response_parse_failed",
                error=str(exc),
                error_type=type(exc).__name__,
                response_length=len(raw_text) if isinstance(raw_text, str) else None,
            )
            return ModerationResult.pending_review(self.FAILURE_REASON)
