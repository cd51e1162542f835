from django.conf import settings
from django.db import models

from screening.moderation.models import ModerableModel


def _photo_requests(content_type: str, photos) -> list[tuple[str, str, str]]:
    return [(content_type, path, "image") for path in photos or [] if path]


class Point(ModerableModel):
    """Ponto de pesca publicado por um usuário."""

    moderation_entity = "point"

    author = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="points", verbose_name="Autor"
    )
    title = models.CharField("Título", max_length=255)
    description = models.TextField("Descrição", blank=True)
    photos = models.JSONField("Fotos", default=list, blank=True, help_text="Caminhos no storage")

    class Meta:
        verbose_name = "Ponto"
        verbose_name_plural = "Pontos"
        indexes = [models.Index(fields=["moderation_status", "created_at"], name="content_poi_status_idx")]
        ordering = ["-created_at"]

    def __str__(self):
        return self.title

    def moderation_requests(self) -> list[tuple[str, str, str]]:
        requests = []
        if self.description:
            requests.append(("point_descriptions", self.description, "text"))
        return requests + _photo_requests("point_photos", self.photos)


class Catch(ModerableModel):
    """Registro de captura (descrição e fotos)."""

    moderation_entity = "catch"

    author = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="catches", verbose_name="Autor"
    )
    point = models.ForeignKey(
        Point, on_delete=models.SET_NULL, null=True, blank=True, related_name="catches", verbose_name="Ponto"
    )
    species = models.CharField("Espécie", max_length=255, blank=True)
    description = models.TextField("Descrição", blank=True)
    photos = models.JSONField("Fotos", default=list, blank=True, help_text="Caminhos no storage")

    class Meta:
        verbose_name = "Captura"
        verbose_name_plural = "Capturas"
        indexes = [models.Index(fields=["moderation_status", "created_at"], name="content_cat_status_idx")]
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.species or 'Captura'} ({self.author})"

    def moderation_requests(self) -> list[tuple[str, str, str]]:
        requests = []
        if self.description:
            requests.append(("catch_descriptions", self.description, "text"))
        return requests + _photo_requests("catch_photos", self.photos)


class Comment(ModerableModel):
    """Comentário em uma captura ou em um ponto."""

    moderation_entity = "comment"

    author = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="comments", verbose_name="Autor"
    )
    catch = models.ForeignKey(
        Catch, on_delete=models.CASCADE, null=True, blank=True, related_name="comments", verbose_name="Captura"
    )
    point = models.ForeignKey(
        Point, on_delete=models.CASCADE, null=True, blank=True, related_name="comments", verbose_name="Ponto"
    )
    body = models.TextField("Texto")

    class Meta:
        verbose_name = "Comentário"
        verbose_name_plural = "Comentários"
        indexes = [models.Index(fields=["moderation_status", "created_at"], name="content_com_status_idx")]
        ordering = ["created_at"]

    def __str__(self):
        return f"{self.author}: {self.body[:50]}"

    @property
    def content_type(self) -> str:
        return "point_comments" if self.point_id and not self.catch_id else "catch_comments"

    def moderation_requests(self) -> list[tuple[str, str, str]]:
        if not self.body:
            return []
        return [(self.content_type, self.body, "text")]


class Event(ModerableModel):
    """Evento (torneio, encontro) anunciado pela comunidade."""

    moderation_entity = "event"

    author = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="events", verbose_name="Organizador"
    )
    title = models.CharField("Título", max_length=255)
    description = models.TextField("Descrição", blank=True)
    starts_at = models.DateTimeField("Início", null=True, blank=True)

    class Meta:
        verbose_name = "Evento"
        verbose_name_plural = "Eventos"
        indexes = [models.Index(fields=["moderation_status", "created_at"], name="content_evt_status_idx")]
        ordering = ["-created_at"]

    def __str__(self):
        return self.title

    def moderation_requests(self) -> list[tuple[str, str, str]]:
        text = "\n".join(part for part in (self.title, self.description) if part)
        return [("event_descriptions", text, "text")] if text else []


class EventNews(ModerableModel):
    """Notícia publicada dentro de um evento."""

    moderation_entity = "news"

    author = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="event_news", verbose_name="Autor"
    )
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="news", verbose_name="Evento")
    title = models.CharField("Título", max_length=255)
    content = models.TextField("Conteúdo")

    class Meta:
        verbose_name = "Notícia de Evento"
        verbose_name_plural = "Notícias de Evento"
        indexes = [models.Index(fields=["moderation_status", "created_at"], name="content_new_status_idx")]
        ordering = ["-created_at"]

    def __str__(self):
        return self.title

    def moderation_requests(self) -> list[tuple[str, str, str]]:
        text = "\n".join(part for part in (self.title, self.content) if part)
        return [("event_news", text, "text")] if text else []

