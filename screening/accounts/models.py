from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models

from screening.accounts.managers import CustomUserManager
from screening.utils.models import BaseModel


class User(AbstractBaseUser, PermissionsMixin, BaseModel):
    """
    Usuário do sistema. Autores de conteúdo e moderadores compartilham o modelo;
    `is_staff` define quem pode aprovar ou rejeitar conteúdo manualmente.
    """

    name = models.CharField("Nome", max_length=500)
    email = models.EmailField("Email", unique=True)
    is_active = models.BooleanField("Ativo", default=True)
    is_staff = models.BooleanField("Moderador", default=False)
    is_superuser = models.BooleanField("Super-Usuário", default=False)

    objects = CustomUserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["name"]

    class Meta:
        verbose_name = "Usuário"
        verbose_name_plural = "Usuários"

    def __str__(self):
        return self.name

    @property
    def is_moderator(self) -> bool:
        return self.is_active and self.is_staff
