from rest_framework import serializers

from screening.accounts.api.serializers import UserSerializer
from screening.moderation.domain.results import ContentFormat
from screening.moderation.infrastructure.registry import available_providers
from screening.moderation.models import ModerableModel, ModerationLog
from screening.moderation.services.config import ModerationConfig
from screening.utils.text import preview

MAX_TEXT_LENGTH = 10000
MAX_REASON_LENGTH = 1000


class _ContentTypeField(serializers.CharField):
    """content_type restrito aos tipos configurados para um formato."""

    def __init__(self, content_format: ContentFormat, **kwargs):
        self.content_format = content_format
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        allowed = ModerationConfig.from_settings().content_types_for(self.content_format)
        if value not in allowed:
            raise serializers.ValidationError(f"Tipo de conteúdo inválido. Opções: {', '.join(sorted(allowed))}.")
        return value


class ModerateTextSerializer(serializers.Serializer):
    text = serializers.CharField(max_length=MAX_TEXT_LENGTH, trim_whitespace=False)
    content_type = _ContentTypeField(ContentFormat.TEXT)


class ModerateImageSerializer(serializers.Serializer):
    image_path = serializers.CharField(max_length=1024)
    content_type = _ContentTypeField(ContentFormat.IMAGE)


class ModerationRequestSerializer(serializers.Serializer):
    content_type = serializers.CharField(max_length=50)
    content_id = serializers.CharField(max_length=64)
    content = serializers.CharField(max_length=MAX_TEXT_LENGTH, trim_whitespace=False)
    format = serializers.ChoiceField(choices=[f.value for f in ContentFormat])


class ContentDecisionSerializer(serializers.Serializer):
    """Entidade alvo de uma decisão administrativa (catch, comment, point, event, news)."""

    content_type = serializers.CharField(max_length=20)
    content_id = serializers.CharField(max_length=64)


class RejectSerializer(ContentDecisionSerializer):
    reason = serializers.CharField(max_length=MAX_REASON_LENGTH, required=False, allow_blank=True, allow_null=True)


class ProviderCheckSerializer(serializers.Serializer):
    provider = serializers.CharField(max_length=50)

    def validate_provider(self, value: str) -> str:
        providers = available_providers()
        if value not in providers:
            raise serializers.ValidationError(f"Provedor inválido. Opções: {', '.join(providers)}.")
        return value


class ModerationResultSerializer(serializers.Serializer):
    approved = serializers.BooleanField()
    confidence = serializers.FloatField()
    reason = serializers.CharField()
    categories = serializers.ListField(child=serializers.CharField())
    raw_response = serializers.CharField(allow_null=True)


class PendingItemSerializer(serializers.Serializer):
    """Entidade aguardando revisão, independente do modelo concreto."""

    id = serializers.UUIDField()
    entity = serializers.SerializerMethodField()
    author = UserSerializer()
    preview = serializers.SerializerMethodField()
    moderation_status = serializers.CharField()
    moderation_result = serializers.JSONField()
    moderated_at = serializers.DateTimeField()
    created_at = serializers.DateTimeField()

    def get_entity(self, obj: ModerableModel) -> str:
        return type(obj).entity_name()

    def get_preview(self, obj: ModerableModel) -> str:
        texts = [content for _, content, content_format in obj.moderation_requests() if content_format == "text"]
        return preview(texts[0]) if texts else ""


class ModerationLogSerializer(serializers.ModelSerializer):
    performed_by = UserSerializer(read_only=True)

    class Meta:
        model = ModerationLog
        fields = [
            "id",
            "content_type",
            "entity",
            "object_id",
            "provider",
            "source",
            "verdict",
            "approved",
            "confidence",
            "reason",
            "categories",
            "performed_by",
            "created_at",
        ]
        read_only_fields = fields
