from django.contrib import admin

from screening.moderation.models import ModerationLog


@admin.register(ModerationLog)
class ModerationLogAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "entity",
        "object_id",
        "content_type",
        "provider",
        "source",
        "verdict",
        "confidence",
        "created_at",
    ]
    list_filter = ["provider", "source", "verdict", "content_type", "created_at"]
    search_fields = ["object_id", "reason", "performed_by__email"]
    readonly_fields = [field.name for field in ModerationLog._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
