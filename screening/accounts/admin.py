from django.contrib import admin, messages
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.db.models import Count

from screening.accounts.models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Usuários; `is_staff` marca quem modera conteúdo."""

    ordering = ("email",)
    fieldsets = (
        (None, {"fields": ("email", "password")}),
        ("Perfil", {"fields": ("name",)}),
        ("Moderação", {"fields": ("is_active", "is_staff")}),
        ("Permissões", {"fields": ("is_superuser", "groups", "user_permissions"), "classes": ("collapse",)}),
    )
    add_fieldsets = ((None, {"classes": ("wide",), "fields": ("email", "name", "password1", "password2")}),)
    list_display = ("email", "name", "is_staff", "moderation_actions_count", "created_at")
    list_filter = ("is_staff", "is_active")
    search_fields = ("email", "name")
    actions = ["grant_moderator", "revoke_moderator"]

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(actions_count=Count("moderation_actions"))

    @admin.display(description="Decisões de moderação", ordering="actions_count")
    def moderation_actions_count(self, obj) -> int:
        return obj.actions_count

    @admin.action(description="Tornar moderador")
    def grant_moderator(self, request, queryset):
        updated = queryset.update(is_staff=True)
        self.message_user(request, f"{updated} usuário(s) agora moderam conteúdo.", messages.SUCCESS)

    @admin.action(description="Remover acesso de moderador")
    def revoke_moderator(self, request, queryset):
        updated = queryset.exclude(pk=request.user.pk).update(is_staff=False)
        self.message_user(request, f"{updated} usuário(s) deixaram de moderar.", messages.WARNING)
