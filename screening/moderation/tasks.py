import structlog
from celery import shared_task
from celery.exceptions import SoftTimeLimitExceeded

from screening.moderation.domain.exceptions import ModerationError, StaleModerationUpdate
from screening.moderation.domain.results import MODERATION_ERROR, ContentFormat, ModerationResult
from screening.moderation.models import ModerationLog
from screening.moderation.services.gateway import build_gateway
from screening.moderation.services.state_machine import ModerationStateMachine

logger = structlog.get_logger(__name__)


@shared_task(
    bind=True,
    task_time_limit=300,
    task_soft_time_limit=290,
    acks_late=True,
)
def process_moderation_request(
    self,
    content_type: str,
    content_id: str,
    content: str,
    content_format: str = ContentFormat.TEXT.value,
    requested_by: str | None = None,
) -> dict:
    """
    Modera um conteúdo e aplica o veredicto à entidade dona dele.

    Sem retry: uma falha vira veredicto de erro (pending_review) e o conteúdo
    segue para revisão manual. O veredicto é descartado se um administrador
    decidir ou se o item for editado enquanto o provedor responde.

    `provider` no log só carrega o nome do provedor quando houve chamada real;
    veredictos de cache, fallback ou tipo desabilitado registram o caminho.
    """
    from screening.content.registry import ENTITYLESS_CONTENT_TYPES, get_instance, model_for_content_type

    log = logger.bind(
        task_id=self.request.id, content_type=content_type, content_id=content_id, requested_by=requested_by
    )

    entity = None
    model = model_for_content_type(content_type)
    if model is not None:
        entity = get_instance(model, content_id)
        if entity is None:
            log.error("moderation_entity_not_found")
            return {"status": "error", "reason": "Content not found", "content_id": content_id}
    elif content_type not in ENTITYLESS_CONTENT_TYPES:
        log.error("moderation_unknown_content_type")
        return {"status": "error", "reason": "Unknown content type", "content_id": content_id}

    gateway = build_gateway()

    try:
        result, source = gateway.moderate_traced(content, content_type, content_format)
    except SoftTimeLimitExceeded:
        log.warning("moderation_timeout_soft")
        result = ModerationResult(False, 0.0, "Moderation failed: timeout", {MODERATION_ERROR})
        source = ModerationLog.Source.SYSTEM
    except ModerationError as exc:
        log.error("moderation_task_failed", error=str(exc), error_type=type(exc).__name__)
        result = ModerationResult(False, 0.0, f"Moderation failed: {exc}", {MODERATION_ERROR})
        source = ModerationLog.Source.SYSTEM

    provider = gateway.config.provider_for(content_type) if source == ModerationLog.Source.PROVIDER else str(source)

    if entity is None:
        log.info(
            "moderation_without_entity",
            approved=result.approved,
            confidence=result.confidence,
            provider=provider,
        )
        return {"status": "success", "verdict": None, "content_id": content_id, "approved": result.approved}

    machine = ModerationStateMachine(gateway.config.thresholds)
    try:
        status = machine.apply_verdict(
            entity,
            result,
            content_type=content_type,
            content=content,
            content_format=content_format,
            provider=provider,
            source=source,
        )
    except StaleModerationUpdate as exc:
        log.warning("moderation_update_stale", error=str(exc))
        return {"status": "skipped", "reason": str(exc), "content_id": content_id}

    return {
        "status": "success",
        "verdict": str(status),
        "content_id": content_id,
        "approved": result.approved,
        "provider": provider,
    }
