import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ModerationLog",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="Criado em")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Atualizado em")),
                (
                    "content_type",
                    models.CharField(help_text="Ex: catch_comments, catch", max_length=50, verbose_name="Tipo de conteúdo"),
                ),
                (
                    "entity",
                    models.CharField(
                        blank=True, help_text="Ex: catch, comment, point", max_length=20, verbose_name="Entidade"
                    ),
                ),
                ("object_id", models.CharField(db_index=True, max_length=64, verbose_name="ID do conteúdo")),
                (
                    "provider",
                    models.CharField(help_text="Ex: yandexgpt, gemini, admin", max_length=50, verbose_name="Provedor"),
                ),
                (
                    "source",
                    models.CharField(
                        choices=[
                            ("provider", "Provedor de IA"),
                            ("admin", "Administrador"),
                            ("system", "Sistema"),
                            ("cache", "Cache"),
                            ("fallback", "Fallback"),
                            ("disabled", "Moderação desabilitada"),
                        ],
                        default="provider",
                        max_length=20,
                        verbose_name="Origem",
                    ),
                ),
                (
                    "verdict",
                    models.CharField(
                        choices=[
                            ("pending", "Pendente"),
                            ("approved", "Aprovado"),
                            ("rejected", "Rejeitado"),
                            ("pending_review", "Aguardando revisão"),
                        ],
                        max_length=20,
                        verbose_name="Veredicto",
                    ),
                ),
                ("approved", models.BooleanField(default=False, verbose_name="Aprovado")),
                (
                    "confidence",
                    models.FloatField(blank=True, help_text="0.0 a 1.0", null=True, verbose_name="Confiança"),
                ),
                ("reason", models.TextField(blank=True, verbose_name="Motivo")),
                ("categories", models.JSONField(blank=True, default=list, verbose_name="Categorias")),
                (
                    "raw_payload",
                    models.JSONField(
                        blank=True, default=dict, help_text="Resultado completo", verbose_name="Payload Bruto"
                    ),
                ),
                (
                    "performed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="moderation_actions",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Executado por",
                    ),
                ),
            ],
            options={
                "verbose_name": "Log de Moderação",
                "verbose_name_plural": "Logs de Moderação",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["entity", "object_id", "created_at"], name="moderation__entity_5c1f0a_idx"),
                    models.Index(fields=["provider", "verdict"], name="moderation__provide_9b2e41_idx"),
                    models.Index(fields=["content_type", "verdict"], name="moderation__content_3d7a86_idx"),
                ],
            },
        ),
    ]
