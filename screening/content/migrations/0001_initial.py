import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

MODERATION_STATUS_CHOICES = [
    ("pending", "Pendente"),
    ("approved", "Aprovado"),
    ("rejected", "Rejeitado"),
    ("pending_review", "Aguardando revisão"),
]


def base_fields():
    return [
        ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
        ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="Criado em")),
        ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Atualizado em")),
        (
            "moderation_status",
            models.CharField(
                choices=MODERATION_STATUS_CHOICES,
                db_index=True,
                default="pending",
                max_length=20,
                verbose_name="Status de moderação",
            ),
        ),
        ("moderation_result", models.JSONField(blank=True, null=True, verbose_name="Resultado da moderação")),
        ("moderated_at", models.DateTimeField(blank=True, db_index=True, null=True, verbose_name="Moderado em")),
        ("moderation_version", models.PositiveIntegerField(default=0, verbose_name="Versão de moderação")),
        (
            "moderation_verdicts",
            models.JSONField(
                blank=True,
                default=dict,
                help_text="Status automático de cada item moderado",
                verbose_name="Veredictos por campo",
            ),
        ),
        (
            "moderated_by",
            models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="+",
                to=settings.AUTH_USER_MODEL,
                verbose_name="Moderado por",
            ),
        ),
    ]


def author_field(related_name, verbose_name="Autor"):
    return (
        "author",
        models.ForeignKey(
            on_delete=django.db.models.deletion.CASCADE,
            related_name=related_name,
            to=settings.AUTH_USER_MODEL,
            verbose_name=verbose_name,
        ),
    )


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Point",
            fields=[
                *base_fields(),
                author_field("points"),
                ("title", models.CharField(max_length=255, verbose_name="Título")),
                ("description", models.TextField(blank=True, verbose_name="Descrição")),
                (
                    "photos",
                    models.JSONField(blank=True, default=list, help_text="Caminhos no storage", verbose_name="Fotos"),
                ),
            ],
            options={
                "verbose_name": "Ponto",
                "verbose_name_plural": "Pontos",
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["moderation_status", "created_at"], name="content_poi_status_idx")],
            },
        ),
        migrations.CreateModel(
            name="Catch",
            fields=[
                *base_fields(),
                author_field("catches"),
                (
                    "point",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="catches",
                        to="content.point",
                        verbose_name="Ponto",
                    ),
                ),
                ("species", models.CharField(blank=True, max_length=255, verbose_name="Espécie")),
                ("description", models.TextField(blank=True, verbose_name="Descrição")),
                (
                    "photos",
                    models.JSONField(blank=True, default=list, help_text="Caminhos no storage", verbose_name="Fotos"),
                ),
            ],
            options={
                "verbose_name": "Captura",
                "verbose_name_plural": "Capturas",
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["moderation_status", "created_at"], name="content_cat_status_idx")],
            },
        ),
        migrations.CreateModel(
            name="Comment",
            fields=[
                *base_fields(),
                author_field("comments"),
                (
                    "catch",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="comments",
                        to="content.catch",
                        verbose_name="Captura",
                    ),
                ),
                (
                    "point",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="comments",
                        to="content.point",
                        verbose_name="Ponto",
                    ),
                ),
                ("body", models.TextField(verbose_name="Texto")),
            ],
            options={
                "verbose_name": "Comentário",
                "verbose_name_plural": "Comentários",
                "ordering": ["created_at"],
                "indexes": [models.Index(fields=["moderation_status", "created_at"], name="content_com_status_idx")],
            },
        ),
        migrations.CreateModel(
            name="Event",
            fields=[
                *base_fields(),
                author_field("events", "Organizador"),
                ("title", models.CharField(max_length=255, verbose_name="Título")),
                ("description", models.TextField(blank=True, verbose_name="Descrição")),
                ("starts_at", models.DateTimeField(blank=True, null=True, verbose_name="Início")),
            ],
            options={
                "verbose_name": "Evento",
                "verbose_name_plural": "Eventos",
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["moderation_status", "created_at"], name="content_evt_status_idx")],
            },
        ),
        migrations.CreateModel(
            name="EventNews",
            fields=[
                *base_fields(),
                author_field("event_news"),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="news",
                        to="content.event",
                        verbose_name="Evento",
                    ),
                ),
                ("title", models.CharField(max_length=255, verbose_name="Título")),
                ("content", models.TextField(verbose_name="Conteúdo")),
            ],
            options={
                "verbose_name": "Notícia de Evento",
                "verbose_name_plural": "Notícias de Evento",
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["moderation_status", "created_at"], name="content_new_status_idx")],
            },
        ),
    ]
