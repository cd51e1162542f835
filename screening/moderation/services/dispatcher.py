from functools import partial

import structlog
from django.db import transaction

from screening.moderation.domain.results import ContentFormat
from screening.moderation.models import ModerableModel
from screening.moderation.services.state_machine import ModerationStateMachine
from screening.utils.text import preview

logger = structlog.get_logger(__name__)


class ModerationDispatcher:
    """Enfileira moderação assíncrona após o commit da transação corrente."""

    @staticmethod
    def request_moderation(
        content_type: str,
        content_id,
        content: str,
        content_format: ContentFormat | str = ContentFormat.TEXT,
        requested_by=None,
    ) -> None:
        """
        Agenda `process_moderation_request` e retorna imediatamente.

        Raises:
            ValueError: formato diferente de text/image
        """
        from screening.moderation.tasks import process_moderation_request

        content_format = ContentFormat(content_format)
        requester_id = str(requested_by.pk) if requested_by is not None else None

        transaction.on_commit(
            partial(
                process_moderation_request.delay,
                content_type,
                str(content_id),
                content,
                content_format.value,
                requester_id,
            )
        )
        logger.info(
            "moderation_requested",
            content_type=content_type,
            content_id=str(content_id),
            format=content_format.value,
            content_preview=preview(content),
            requested_by=requester_id,
        )

    @classmethod
    def request_for_entity(cls, entity: ModerableModel, requested_by=None) -> int:
        """
        Um pedido por item moderável da entidade (texto e cada foto) ainda sem
        veredicto. Numa edição, só os itens que mudaram voltam para a fila.
        """
        requests = ModerationStateMachine().track_requests(entity)
        for content_type, content, content_format in requests:
            cls.request_moderation(content_type, entity.pk, content, content_format, requested_by)
        return len(requests)
