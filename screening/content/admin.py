from django.contrib import admin, messages

from screening.content.models import Catch, Comment, Event, EventNews, Point
from screening.moderation.services.config import ModerationConfig
from screening.moderation.services.state_machine import ModerationStateMachine


class ModerableAdmin(admin.ModelAdmin):
    list_filter = ["moderation_status", "created_at"]
    readonly_fields = [
        "id",
        "moderation_status",
        "moderation_result",
        "moderated_at",
        "moderated_by",
        "moderation_version",
        "moderation_verdicts",
        "created_at",
        "updated_at",
    ]
    actions = ["approve_selected", "reject_selected"]

    def _state_machine(self) -> ModerationStateMachine:
        return ModerationStateMachine(ModerationConfig.from_settings().thresholds)

    @admin.action(description="Aprovar selecionados")
    def approve_selected(self, request, queryset):
        machine = self._state_machine()
        for entity in queryset:
            machine.approve(entity, request.user)
        self.message_user(request, f"{queryset.count()} item(ns) aprovado(s).", messages.SUCCESS)

    @admin.action(description="Rejeitar selecionados")
    def reject_selected(self, request, queryset):
        machine = self._state_machine()
        for entity in queryset:
            machine.reject(entity, request.user)
        self.message_user(request, f"{queryset.count()} item(ns) rejeitado(s).", messages.WARNING)


@admin.register(Catch)
class CatchAdmin(ModerableAdmin):
    list_display = ["id", "author", "species", "moderation_status", "created_at"]
    search_fields = ["description", "species", "author__email"]


@admin.register(Comment)
class CommentAdmin(ModerableAdmin):
    list_display = ["id", "author", "body_preview", "moderation_status", "created_at"]
    search_fields = ["body", "author__email"]

    def body_preview(self, obj):
        return obj.body[:50]

    body_preview.short_description = "Prévia"


@admin.register(Point)
class PointAdmin(ModerableAdmin):
    list_display = ["title", "author", "moderation_status", "created_at"]
    search_fields = ["title", "description", "author__email"]


@admin.register(Event)
class EventAdmin(ModerableAdmin):
    list_display = ["title", "author", "starts_at", "moderation_status", "created_at"]
    search_fields = ["title", "description"]


@admin.register(EventNews)
class EventNewsAdmin(ModerableAdmin):
    list_display = ["title", "event", "moderation_status", "created_at"]
    search_fields = ["title", "content"]
