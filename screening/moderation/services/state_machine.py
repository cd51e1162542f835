import structlog
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from screening.moderation.domain.exceptions import StaleModerationUpdate
from screening.moderation.domain.results import ADMIN_REJECTION, ContentFormat, ModerationResult
from screening.moderation.models import ModerableModel, ModerationLog, ModerationStatus, request_key
from screening.moderation.services.config import Thresholds

logger = structlog.get_logger(__name__)

ADMIN_APPROVAL_REASON = "Approved by admin"
ADMIN_REJECTION_REASON = "Rejected by admin"
CONTENT_EDITED_REASON = "Content edited, awaiting moderation"

# rejected > pending_review > approved
STATUS_SEVERITY = {
    ModerationStatus.APPROVED: 0,
    ModerationStatus.PENDING_REVIEW: 1,
    ModerationStatus.REJECTED: 2,
}


def combined_status(verdicts: dict, keys) -> str:
    """Status da entidade a partir dos veredictos por campo: o mais severo vence."""
    statuses = [
        verdicts[key]["status"]
        for key in keys
        if key in verdicts and verdicts[key].get("status") in STATUS_SEVERITY
    ]
    if not statuses:
        return ModerationStatus.PENDING
    return max(statuses, key=STATUS_SEVERITY.__getitem__)


class ModerationStateMachine:
    """
    Transições de `moderation_status` de uma entidade moderável.

    pending -> approved | rejected | pending_review  (veredicto automático)
    qualquer estado -> approved | rejected            (ação de administrador)
    approved -> pending                               (edição de conteúdo)

    Entidades com vários itens moderados (descrição e cada foto) guardam um
    veredicto por item em `moderation_verdicts`; o status é o mais severo entre
    eles, então um item aprovado nunca desfaz a rejeição de outro.

    Veredictos automáticos são descartados quando um administrador já decidiu
    ou quando o item moderado não existe mais na entidade (foi editado).
    """

    def __init__(self, thresholds: Thresholds | None = None):
        self.thresholds = thresholds or Thresholds()

    def status_for(self, result: ModerationResult) -> str:
        """Mapeia um veredicto para um status final (nunca `pending`)."""
        if result.needs_review:
            return ModerationStatus.PENDING_REVIEW
        if result.approved and result.confidence >= self.thresholds.auto_approve_confidence:
            return ModerationStatus.APPROVED
        if not result.approved and result.confidence >= self.thresholds.auto_reject_confidence:
            return ModerationStatus.REJECTED
        return ModerationStatus.PENDING_REVIEW

    def apply_verdict(
        self,
        entity: ModerableModel,
        result: ModerationResult,
        *,
        content_type: str,
        content: str,
        provider: str,
        content_format: ContentFormat | str = ContentFormat.TEXT,
        source: str = ModerationLog.Source.PROVIDER,
    ) -> str:
        """
        Aplica o veredicto automático de um item à entidade.

        Args:
            entity: Entidade moderável
            result: Veredicto normalizado do gateway
            content_type: Tipo de conteúdo moderado (ex: catch_comments)
            content: Conteúdo que foi moderado (texto ou caminho da imagem)
            provider: Provedor que produziu o veredicto
            content_format: text ou image

        Returns:
            Novo status da entidade

        Raises:
            StaleModerationUpdate: um administrador decidiu ou o item foi editado
        """
        model = type(entity)
        item_status = self.status_for(result)
        key = request_key(content_type, content, ContentFormat(content_format).value)

        with transaction.atomic():
            locked = model.objects.select_for_update().get(pk=entity.pk)
            if locked.moderated_by_id is not None:
                raise StaleModerationUpdate(model.entity_name(), entity.pk, "was decided by an admin")

            current_keys = locked.moderation_keys()
            if key not in current_keys:
                raise StaleModerationUpdate(model.entity_name(), entity.pk, "was edited after the request")

            verdicts = dict(locked.moderation_verdicts or {})
            verdicts[key] = {"content_type": content_type, "status": item_status, "confidence": result.confidence}
            status = combined_status(verdicts, current_keys)

            if status == item_status or locked.moderation_result is None:
                locked.moderation_result = result.to_dict()
            locked.moderation_verdicts = verdicts
            locked.moderation_status = status
            locked.moderated_at = timezone.now()
            locked.moderation_version = locked.moderation_version + 1
            locked.save(
                update_fields=[
                    "moderation_status",
                    "moderation_result",
                    "moderation_verdicts",
                    "moderated_at",
                    "moderation_version",
                    "updated_at",
                ]
            )
            self._record(locked, result, item_status, content_type=content_type, provider=provider, source=source)

        entity.refresh_from_db(fields=list(ModerableModel.MODERATION_FIELDS - {"updated_at"}))
        logger.info(
            "moderation_status_updated",
            entity=model.entity_name(),
            entity_id=str(entity.pk),
            content_type=content_type,
            item_status=item_status,
            status=status,
            version=entity.moderation_version,
        )
        return status

    def track_requests(self, entity: ModerableModel) -> list[tuple[str, str, str]]:
        """
        Reconcilia os veredictos por item com o conteúdo atual da entidade.

        Itens que sumiram perdem o veredicto; itens novos ganham um marcador
        `pending`. Havendo item novo, a entidade deixa de estar aprovada (volta a
        `pending`), perde a decisão administrativa e aguarda os novos veredictos.
        Rejeição e revisão pendente de itens inalterados continuam valendo.

        Returns:
            Itens (content_type, conteúdo, formato) que precisam ser moderados
        """
        model = type(entity)

        with transaction.atomic():
            locked = model.objects.select_for_update().get(pk=entity.pk)
            current = locked.moderation_keys()
            previous = locked.moderation_verdicts or {}
            verdicts = {key: value for key, value in previous.items() if key in current}
            missing = {key: request for key, request in current.items() if key not in verdicts}
            if not missing and verdicts == previous:
                return []

            for key, (content_type, _, _) in missing.items():
                verdicts[key] = {"content_type": content_type, "status": ModerationStatus.PENDING}
            if not previous:
                # primeiro rastreio (criação): o status inicial fica como está
                model.objects.filter(pk=locked.pk).update(moderation_verdicts=verdicts)
                return list(missing.values())

            admin_decided = locked.moderated_by_id is not None
            status = locked.moderation_status
            if missing or not admin_decided:
                status = combined_status(verdicts, current)
                if missing and status == ModerationStatus.APPROVED:
                    status = ModerationStatus.PENDING

            changes = {"moderation_verdicts": verdicts, "moderation_status": status}
            if missing and admin_decided:
                changes["moderated_by"] = None
            reopened = bool(missing and admin_decided) or status != locked.moderation_status
            if reopened:
                changes["moderation_version"] = F("moderation_version") + 1
            # update() evita disparar post_save de novo
            model.objects.filter(pk=locked.pk).update(**changes, updated_at=timezone.now())

            if reopened:
                locked.moderation_status = status
                self._record(
                    locked,
                    ModerationResult(False, 0.0, CONTENT_EDITED_REASON),
                    status,
                    content_type=model.entity_name(),
                    provider=ModerationLog.Source.SYSTEM,
                    source=ModerationLog.Source.SYSTEM,
                )

        if reopened:
            logger.info(
                "moderation_reopened",
                entity=model.entity_name(),
                entity_id=str(entity.pk),
                status=status,
                new_items=len(missing),
            )
        return list(missing.values())

    def approve(self, entity: ModerableModel, admin) -> ModerableModel:
        result = ModerationResult.approve(ADMIN_APPROVAL_REASON)
        return self._decide(entity, admin, result, ModerationStatus.APPROVED)

    def reject(self, entity: ModerableModel, admin, reason: str | None = None) -> ModerableModel:
        result = ModerationResult.reject(reason or ADMIN_REJECTION_REASON, categories={ADMIN_REJECTION})
        return self._decide(entity, admin, result, ModerationStatus.REJECTED)

    def _decide(self, entity: ModerableModel, admin, result: ModerationResult, status: str) -> ModerableModel:
        model = type(entity)

        with transaction.atomic():
            locked = model.objects.select_for_update().get(pk=entity.pk)
            locked.moderation_status = status
            locked.moderation_result = result.to_dict()
            locked.moderated_by = admin
            locked.moderated_at = timezone.now()
            locked.moderation_version = locked.moderation_version + 1
            if status == ModerationStatus.APPROVED:
                # a aprovação vale para o conteúdo atual inteiro
                locked.moderation_verdicts = {
                    key: {"content_type": content_type, "status": status, "source": ModerationLog.Source.ADMIN}
                    for key, (content_type, _, _) in locked.moderation_keys().items()
                }
            locked.save(
                update_fields=[
                    "moderation_status",
                    "moderation_result",
                    "moderation_verdicts",
                    "moderated_by",
                    "moderated_at",
                    "moderation_version",
                    "updated_at",
                ]
            )
            self._record(
                locked,
                result,
                status,
                content_type=model.entity_name(),
                provider=ModerationLog.Source.ADMIN,
                source=ModerationLog.Source.ADMIN,
                performed_by=admin,
            )

        logger.info(
            "moderation_admin_decision",
            entity=model.entity_name(),
            entity_id=str(locked.pk),
            status=status,
            admin_id=str(admin.pk),
            reason=result.reason,
        )
        return locked

    @staticmethod
    def _record(
        entity,
        result: ModerationResult,
        status: str,
        *,
        content_type: str,
        provider: str,
        source: str,
        performed_by=None,
    ):
        ModerationLog.objects.create(
            content_type=content_type,
            entity=type(entity).entity_name(),
            object_id=str(entity.pk),
            provider=provider,
            source=source,
            verdict=status,
            approved=result.approved,
            confidence=result.confidence,
            reason=result.reason,
            categories=sorted(result.categories),
            raw_payload=result.to_dict(),
            performed_by=performed_by,
        )
