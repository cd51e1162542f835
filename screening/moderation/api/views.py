import structlog
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from screening.content.registry import ENTITY_MODELS, get_instance, model_for_entity
from screening.moderation.api.permissions import IsModerator
from screening.moderation.api.serializers import (
    ContentDecisionSerializer,
    ModerateImageSerializer,
    ModerateTextSerializer,
    ModerationLogSerializer,
    ModerationRequestSerializer,
    PendingItemSerializer,
    ProviderCheckSerializer,
    RejectSerializer,
)
from screening.moderation.infrastructure.rate_limit import RateLimiter
from screening.moderation.models import ModerationLog, ModerationStatus
from screening.moderation.services.config import ModerationConfig
from screening.moderation.services.dispatcher import ModerationDispatcher
from screening.moderation.services.gateway import build_gateway
from screening.moderation.services.state_machine import ModerationStateMachine
from screening.utils.pagination import ModerationLogPagination

logger = structlog.get_logger(__name__)

PENDING_LIMIT_PER_TYPE = 20


def _not_found() -> Response:
    return Response({"success": False, "message": "Content not found"}, status=status.HTTP_404_NOT_FOUND)


class ModerateTextView(APIView):
    """Moderação síncrona de um texto."""

    permission_classes = [IsAuthenticated]

    @extend_schema(summary="Moderar texto", request=ModerateTextSerializer, tags=["Moderation"])
    def post(self, request: Request) -> Response:
        serializer = ModerateTextSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = build_gateway().moderate_text(**serializer.validated_data)
        return Response({"success": True, "data": result.to_dict()})


class ModerateImageView(APIView):
    """Moderação síncrona de uma imagem já armazenada."""

    permission_classes = [IsAuthenticated]

    @extend_schema(summary="Moderar imagem", request=ModerateImageSerializer, tags=["Moderation"])
    def post(self, request: Request) -> Response:
        serializer = ModerateImageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = build_gateway().moderate_image(
            serializer.validated_data["image_path"], serializer.validated_data["content_type"]
        )
        return Response({"success": True, "data": result.to_dict()})


class RequestModerationView(APIView):
    """Enfileira moderação assíncrona para um conteúdo existente."""

    permission_classes = [IsAuthenticated]

    @extend_schema(summary="Solicitar moderação assíncrona", request=ModerationRequestSerializer, tags=["Moderation"])
    def post(self, request: Request) -> Response:
        serializer = ModerationRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        ModerationDispatcher.request_moderation(
            data["content_type"], data["content_id"], data["content"], data["format"], requested_by=request.user
        )
        return Response({"success": True, "message": "Moderation requested successfully"})


class PendingView(APIView):
    """Entidades aguardando revisão manual, até 20 por tipo."""

    permission_classes = [IsModerator]

    @extend_schema(summary="Listar conteúdo pendente de revisão", tags=["Moderation Admin"])
    def get(self, request: Request) -> Response:
        data = {}
        total = 0
        for entity, model in ENTITY_MODELS.items():
            items = list(
                model.objects.awaiting_review().select_related("author").order_by("-created_at")[
                    :PENDING_LIMIT_PER_TYPE
                ]
            )
            data[entity] = PendingItemSerializer(items, many=True).data
            total += len(items)

        data["total_pending"] = total
        return Response({"success": True, "data": data})


class _DecisionView(APIView):
    permission_classes = [IsModerator]
    serializer_class = ContentDecisionSerializer

    def _load(self, request: Request):
        serializer = self.serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        model = model_for_entity(data["content_type"])
        entity = get_instance(model, data["content_id"]) if model is not None else None
        return entity, data

    @staticmethod
    def _state_machine() -> ModerationStateMachine:
        return ModerationStateMachine(ModerationConfig.from_settings().thresholds)


class ApproveView(_DecisionView):
    @extend_schema(summary="Aprovar conteúdo", request=ContentDecisionSerializer, tags=["Moderation Admin"])
    def post(self, request: Request) -> Response:
        entity, data = self._load(request)
        if entity is None:
            return _not_found()

        self._state_machine().approve(entity, request.user)
        return Response({"success": True, "message": "Content approved successfully"})


class RejectView(_DecisionView):
    serializer_class = RejectSerializer

    @extend_schema(summary="Rejeitar conteúdo", request=RejectSerializer, tags=["Moderation Admin"])
    def post(self, request: Request) -> Response:
        entity, data = self._load(request)
        if entity is None:
            return _not_found()

        self._state_machine().reject(entity, request.user, data.get("reason") or None)
        return Response({"success": True, "message": "Content rejected successfully"})


class StatisticsView(APIView):
    permission_classes = [IsModerator]

    @extend_schema(summary="Estatísticas de moderação", tags=["Moderation Admin"])
    def get(self, request: Request) -> Response:
        config = ModerationConfig.from_settings()
        limiter = RateLimiter.from_config(config.rate_limiting)

        stats = ModerationLog.objects.statistics()
        stats["currently_pending_review"] = {
            entity: model.objects.filter(moderation_status=ModerationStatus.PENDING_REVIEW).count()
            for entity, model in ENTITY_MODELS.items()
        }
        stats["rate_limit_usage"] = {
            name: limiter.current_count(name) for name, provider in config.providers.items() if provider.enabled
        }
        return Response({"success": True, "data": stats})


class ConfigView(APIView):
    permission_classes = [IsModerator]

    @extend_schema(summary="Configuração de moderação (chaves mascaradas)", tags=["Moderation Admin"])
    def get(self, request: Request) -> Response:
        return Response({"success": True, "data": ModerationConfig.from_settings().as_public_dict()})


class ProviderTestView(APIView):
    permission_classes = [IsModerator]

    @extend_schema(summary="Testar provedor de IA", request=ProviderCheckSerializer, tags=["Moderation Admin"])
    def post(self, request: Request) -> Response:
        serializer = ProviderCheckSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        provider = serializer.validated_data["provider"]

        result = build_gateway().test_provider(provider)
        logger.info("provider_test_requested", provider=provider, admin_id=str(request.user.pk))
        return Response({"success": True, "message": "Provider test successful", "data": result.to_dict()})


class ClearCacheView(APIView):
    permission_classes = [IsModerator]

    @extend_schema(summary="Limpar cache de resultados", request=None, tags=["Moderation Admin"])
    def post(self, request: Request) -> Response:
        build_gateway().clear_cache()
        logger.info("moderation_cache_cleared", admin_id=str(request.user.pk))
        return Response({"success": True, "message": "Moderation cache cleared successfully"})


class ModerationLogListView(APIView):
    permission_classes = [IsModerator]

    @extend_schema(
        summary="Histórico de moderação",
        responses={200: ModerationLogSerializer(many=True)},
        tags=["Moderation Admin"],
    )
    def get(self, request: Request) -> Response:
        queryset = ModerationLog.objects.select_related("performed_by").order_by("-created_at")

        for field in ("content_type", "entity", "object_id", "provider", "verdict", "source"):
            value = request.query_params.get(field)
            if value:
                queryset = queryset.filter(**{field: value})

        paginator = ModerationLogPagination()
        page = paginator.paginate_queryset(queryset, request, view=self)
        return paginator.get_paginated_response(ModerationLogSerializer(page, many=True).data)
