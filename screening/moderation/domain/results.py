from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping

PENDING_REVIEW = "pending_review"
MODERATION_FAILURE = "moderation_failure"
MODERATION_ERROR = "moderation_error"
ADMIN_REJECTION = "admin_rejection"


class ContentFormat(str, Enum):
    TEXT = "text"
    IMAGE = "image"


class FallbackPolicy(str, Enum):
    """O que fazer quando a moderação automática não produz um veredicto."""

    APPROVE = "approve"
    REJECT = "reject"
    MANUAL_REVIEW = "manual_review"

    @classmethod
    def parse(cls, value: str | None) -> "FallbackPolicy":
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.MANUAL_REVIEW


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


@dataclass(frozen=True)
class ModerationResult:
    """
    Veredicto normalizado, independente do provedor que o produziu.

    `confidence` é sempre limitado a [0, 1] e `categories` é um conjunto
    imutável, então instâncias podem ser cacheadas e comparadas com segurança.
    """

    approved: bool
    confidence: float
    reason: str
    categories: frozenset[str] = field(default_factory=frozenset)
    raw_response: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "approved", bool(self.approved))
        object.__setattr__(self, "confidence", _clamp(self.confidence))
        object.__setattr__(self, "categories", frozenset(str(c) for c in self.categories or ()))

    @property
    def needs_review(self) -> bool:
        return PENDING_REVIEW in self.categories

    def to_dict(self) -> dict[str, Any]:
        return {
            "approved": self.approved,
            "confidence": self.confidence,
            "reason": self.reason,
            "categories": sorted(self.categories),
            "raw_response": self.raw_response,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ModerationResult":
        return cls(
            approved=data.get("approved", False),
            confidence=data.get("confidence", 0.5),
            reason=data.get("reason") or "",
            categories=data.get("categories") or (),
            raw_response=data.get("raw_response"),
        )

    @classmethod
    def approve(cls, reason: str, confidence: float = 1.0) -> "ModerationResult":
        return cls(approved=True, confidence=confidence, reason=reason)

    @classmethod
    def reject(cls, reason: str, categories: Iterable[str] = (), confidence: float = 1.0) -> "ModerationResult":
        return cls(approved=False, confidence=confidence, reason=reason, categories=frozenset(categories))

    @classmethod
    def pending_review(cls, reason: str) -> "ModerationResult":
        return cls(approved=False, confidence=0.5, reason=reason, categories=frozenset({PENDING_REVIEW}))
