import structlog
from django.db.models.signals import post_save
from django.dispatch import receiver

from screening.content.models import Catch, Comment, Event, EventNews, Point
from screening.moderation.models import ModerableModel
from screening.moderation.services.dispatcher import ModerationDispatcher

logger = structlog.get_logger(__name__)


@receiver(post_save, sender=Catch)
@receiver(post_save, sender=Comment)
@receiver(post_save, sender=Point)
@receiver(post_save, sender=Event)
@receiver(post_save, sender=EventNews)
def request_moderation_on_save(sender, instance, created, update_fields=None, raw=False, **kwargs):
    """
    Conteúdo novo nasce `pending` e entra na fila de moderação. Numa edição,
    os itens cujo texto ou foto mudou voltam para a fila.
    """
    if raw:
        return
    if update_fields is not None and set(update_fields) <= ModerableModel.MODERATION_FIELDS:
        return
    requested = ModerationDispatcher.request_for_entity(instance)
    logger.debug(
        "content_created" if created else "content_updated",
        entity=sender.entity_name(),
        entity_id=str(instance.pk),
        requests=requested,
    )
