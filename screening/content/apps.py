from django.apps import AppConfig


class ContentConfig(AppConfig):
    name = "screening.content"
    label = "content"
    verbose_name = "Conteúdo"

    def ready(self):
        from screening.content import signals  # noqa: F401
