"""Serializers for user-related API endpoints."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from django.contrib.auth.password_validation import validate_password  # type: ignore
from rest_framework import serializers  # type: ignore

from .permissions import ROLE_PERMISSIONS

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Back-office user with the permissions granted by the role."""

    permissions = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "username",
            "first_name",
            "last_name",
            "role",
            "permissions",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "role",
            "is_active",
            "created_at",
            "updated_at",
        ]

    def get_permissions(self, obj) -> list[str]:  # type: ignore
        return sorted(ROLE_PERMISSIONS.get(obj.role, ()))


class UserAdminSerializer(UserSerializer):
    """Used by administrators: role and activity are editable, password is write-only."""

    password = serializers.CharField(write_only=True, required=False)

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ["password"]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_password(self, value: str) -> str:
        validate_password(value)
        return value

    def create(self, validated_data):  # type: ignore
        password = validated_data.pop("password", None)
        return User.objects.create_user(password=password, **validated_data)

    def update(self, instance, validated_data):  # type: ignore
        password = validated_data.pop("password", None)
        user = super().update(instance, validated_data)
        if password:
            user.set_password(password)
            user.save(update_fields=["password"])
        return user
