from django.contrib.auth import get_user_model
from rest_framework import serializers

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Representação resumida de autores e moderadores."""

    class Meta:
        model = User
        fields = ["id", "email", "name"]
        read_only_fields = fields
