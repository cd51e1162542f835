from django.conf import settings
from django.db import models
from django.db.models import Avg, Count, Q

from screening.moderation.domain.results import ContentFormat, ModerationResult
from screening.moderation.infrastructure.cache import fingerprint
from screening.utils.models import BaseModel


def request_key(content_type: str, content: str, content_format: str = ContentFormat.TEXT.value) -> str:
    return fingerprint(content, content_type, ContentFormat(content_format))


class ModerationStatus(models.TextChoices):
    PENDING = "pending", "Pendente"
    APPROVED = "approved", "Aprovado"
    REJECTED = "rejected", "Rejeitado"
    PENDING_REVIEW = "pending_review", "Aguardando revisão"


class ModerableQuerySet(models.QuerySet):
    def publicly_visible(self):
        return self.filter(moderation_status=ModerationStatus.APPROVED)

    def awaiting_review(self):
        return self.filter(moderation_status=ModerationStatus.PENDING_REVIEW)

    def visible_to(self, user):
        """Conteúdo aprovado mais o do próprio autor, em qualquer status."""
        if not getattr(user, "is_authenticated", False):
            return self.publicly_visible()
        return self.filter(Q(moderation_status=ModerationStatus.APPROVED) | Q(author=user))


class ModerableModel(BaseModel):
    """
    Capacidade "moderável" compartilhada por capturas, comentários, pontos,
    eventos e notícias.

    `moderation_version` é incrementado a cada transição e funciona como lock
    otimista: um veredicto automático calculado sobre uma versão antiga é
    descartado em vez de sobrescrever uma decisão administrativa mais nova.
    """

    moderation_status = models.CharField(
        "Status de moderação",
        max_length=20,
        choices=ModerationStatus.choices,
        default=ModerationStatus.PENDING,
        db_index=True,
    )
    moderation_result = models.JSONField("Resultado da moderação", null=True, blank=True)
    moderated_at = models.DateTimeField("Moderado em", null=True, blank=True, db_index=True)
    moderated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        verbose_name="Moderado por",
    )
    moderation_version = models.PositiveIntegerField("Versão de moderação", default=0)
    moderation_verdicts = models.JSONField(
        "Veredictos por campo", default=dict, blank=True, help_text="Status automático de cada item moderado"
    )

    objects = ModerableQuerySet.as_manager()

    moderation_entity: str = ""

    # campos escritos apenas pela moderação; salvar só eles não reabre a entidade
    MODERATION_FIELDS = frozenset(
        {
            "moderation_status",
            "moderation_result",
            "moderation_verdicts",
            "moderated_at",
            "moderated_by",
            "moderation_version",
            "updated_at",
        }
    )

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        # em edições, só o state machine escreve os campos de moderação
        if not self._state.adding and kwargs.get("update_fields") is None and not kwargs.get("force_insert"):
            kwargs["update_fields"] = [
                field.name
                for field in self._meta.concrete_fields
                if not field.primary_key and field.name not in self.MODERATION_FIELDS
            ] + ["updated_at"]
        super().save(*args, **kwargs)

    @classmethod
    def entity_name(cls) -> str:
        return cls.moderation_entity or cls._meta.model_name

    @property
    def verdict(self) -> ModerationResult | None:
        if not self.moderation_result:
            return None
        return ModerationResult.from_dict(self.moderation_result)

    @property
    def is_publicly_visible(self) -> bool:
        return self.moderation_status == ModerationStatus.APPROVED

    def moderation_requests(self) -> list[tuple[str, str, str]]:
        """Itens a moderar: lista de (content_type, conteúdo, formato)."""
        return []

    def moderation_keys(self) -> dict[str, tuple[str, str, str]]:
        """Itens a moderar indexados pela chave estável de cada um."""
        return {request_key(*request): request for request in self.moderation_requests()}


class ModerationLogQuerySet(models.QuerySet):
    def statistics(self) -> dict:
        totals = self.aggregate(
            total_moderated=Count("id"),
            approved_count=Count("id", filter=Q(verdict=ModerationStatus.APPROVED)),
            rejected_count=Count("id", filter=Q(verdict=ModerationStatus.REJECTED)),
            pending_review_count=Count("id", filter=Q(verdict=ModerationStatus.PENDING_REVIEW)),
            average_confidence=Avg("confidence"),
        )

        def breakdown(field: str) -> dict[str, int]:
            rows = self.order_by().values(field).annotate(total=Count("id"))
            return {row[field]: row["total"] for row in rows}

        return {
            **totals,
            "by_provider": breakdown("provider"),
            "by_content_type": breakdown("content_type"),
            "by_source": breakdown("source"),
        }


class ModerationLog(BaseModel):
    """Uma linha por transição aplicada a uma entidade, automática ou manual."""

    class Source(models.TextChoices):
        PROVIDER = "provider", "Provedor de IA"
        ADMIN = "admin", "Administrador"
        SYSTEM = "system", "Sistema"
        CACHE = "cache", "Cache"
        FALLBACK = "fallback", "Fallback"
        DISABLED = "disabled", "Moderação desabilitada"

    content_type = models.CharField("Tipo de conteúdo", max_length=50, help_text="Ex: catch_comments, catch")
    entity = models.CharField("Entidade", max_length=20, blank=True, help_text="Ex: catch, comment, point")
    object_id = models.CharField("ID do conteúdo", max_length=64, db_index=True)
    provider = models.CharField("Provedor", max_length=50, help_text="Ex: yandexgpt, gemini, admin")
    source = models.CharField("Origem", max_length=20, choices=Source.choices, default=Source.PROVIDER)
    verdict = models.CharField("Veredicto", max_length=20, choices=ModerationStatus.choices)
    approved = models.BooleanField("Aprovado", default=False)
    confidence = models.FloatField("Confiança", null=True, blank=True, help_text="0.0 a 1.0")
    reason = models.TextField("Motivo", blank=True)
    categories = models.JSONField("Categorias", default=list, blank=True)
    raw_payload = models.JSONField("Payload Bruto", default=dict, blank=True, help_text="Resultado completo")
    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="moderation_actions",
        verbose_name="Executado por",
    )

    objects = ModerationLogQuerySet.as_manager()

    class Meta:
        verbose_name = "Log de Moderação"
        verbose_name_plural = "Logs de Moderação"
        indexes = [
            models.Index(fields=["entity", "object_id", "created_at"], name="moderation__entity_5c1f0a_idx"),
            models.Index(fields=["provider", "verdict"], name="moderation__provide_9b2e41_idx"),
            models.Index(fields=["content_type", "verdict"], name="moderation__content_3d7a86_idx"),
        ]
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.provider}: {self.verdict} - {self.entity or self.content_type} {self.object_id}"
