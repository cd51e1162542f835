import uuid

from screening.content.models import Catch, Comment, Event, EventNews, Point
from screening.moderation.models import ModerableModel

ENTITY_MODELS: dict[str, type[ModerableModel]] = {
    "catch": Catch,
    "comment": Comment,
    "point": Point,
    "event": Event,
    "news": EventNews,
}

CONTENT_TYPE_ENTITIES: dict[str, str] = {
    "catch_descriptions": "catch",
    "catch_photos": "catch",
    "catch_comments": "comment",
    "point_comments": "comment",
    "point_descriptions": "point",
    "point_photos": "point",
    "event_descriptions": "event",
    "event_news": "news",
}

# Tipos moderados sem entidade moderável correspondente.
ENTITYLESS_CONTENT_TYPES = frozenset({"user_bio", "user_avatar"})


def model_for_entity(entity: str) -> type[ModerableModel] | None:
    return ENTITY_MODELS.get(entity)


def model_for_content_type(content_type: str) -> type[ModerableModel] | None:
    entity = CONTENT_TYPE_ENTITIES.get(content_type)
    return ENTITY_MODELS.get(entity) if entity else None


def get_instance(model: type[ModerableModel], object_id) -> ModerableModel | None:
    """Busca a entidade pelo id; None quando o id é inválido ou não existe."""
    try:
        pk = uuid.UUID(str(object_id))
    except (TypeError, ValueError):
        return None
    return model.objects.filter(pk=pk).first()
