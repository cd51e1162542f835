from rest_framework.permissions import BasePermission


class IsModerator(BasePermission):
    """Apenas moderadores (`is_staff`) acessam a superfície administrativa."""

    message = "Apenas moderadores podem executar esta ação."

    def has_permission(self, request, view) -> bool:
        user = request.user
        return bool(user and user.is_authenticated and user.is_moderator)
