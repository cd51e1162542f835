import structlog
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from screening.moderation.domain.exceptions import ModerationError, RateLimitExceeded

logger = structlog.get_logger(__name__)


def _moderation_error_response(exc: ModerationError) -> Response:
    if isinstance(exc, RateLimitExceeded):
        return Response(
            {"success": False, "message": "Limite de requisições de moderação atingido", "error": str(exc)},
            status=status.HTTP_429_TOO_MANY_REQUESTS,
        )
    return Response(
        {"success": False, "message": "Moderation failed", "error": str(exc)},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def custom_exception_handler(exc, context):
    """
    Handler de exceção customizado para DRF.

    - ValidationError vira 422 (Unprocessable Entity).
    - Erros de moderação (provedor indisponível, erro HTTP, limite) viram 500/429
      com o motivo no corpo, já que indicam falha de configuração ou do provedor.
    - Qualquer outra exceção não tratada vira 500 genérico.
    """
    request = context["request"]

    if isinstance(exc, ModerationError):
        response = _moderation_error_response(exc)
        logger.error(
            "api_moderation_error",
            status_code=response.status_code,
            method=request.method,
            path=request.path,
            error_type=type(exc).__name__,
            exc=str(exc),
        )
        return response

    response = exception_handler(exc, context)

    if response is not None:
        if isinstance(exc, ValidationError):
            response.status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

        if response.status_code < 500:
            logger.warning(
                "api_client_error",
                status_code=response.status_code,
                method=request.method,
                path=request.path,
                details=response.data,
            )
        else:
            logger.error(
                "api_server_error",
                status_code=response.status_code,
                method=request.method,
                path=request.path,
                exc=str(exc),
            )
    else:
        logger.exception("api_unhandled_exception", method=request.method, path=request.path, exc=str(exc))
        return Response(
            {"detail": "Ocorreu um erro inesperado no servidor."}, status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    return response
