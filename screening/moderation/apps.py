from django.apps import AppConfig


class ModerationAppConfig(AppConfig):
    name = "screening.moderation"
    label = "moderation"
    verbose_name = "Moderação"
