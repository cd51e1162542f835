import uuid

from django.db import models


class BaseModel(models.Model):
    """
    Classe base abstrata com ID UUID e timestamps.

    Todas as entidades moderáveis e o log de moderação herdam daqui, então
    `content_id` nas APIs é sempre um UUID.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField("Criado em", auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField("Atualizado em", auto_now=True)

    class Meta:
        abstract = True
