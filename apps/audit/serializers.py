"""Serializers for the audit trail."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import AuditLog, SensitiveDataAccess


class AuditLogSerializer(serializers.ModelSerializer):
    user_email = serializers.ReadOnlyField(source="user.email")

    class Meta:
        model = AuditLog
        fields = ["id", "user", "user_email", "action", "entity_type", "entity_id", "changes", "created_at"]
        read_only_fields = fields


class SensitiveDataAccessSerializer(serializers.ModelSerializer):
    user_email = serializers.ReadOnlyField(source="user.email")

    class Meta:
        model = SensitiveDataAccess
        fields = [
            "id",
            "user",
            "user_email",
            "user_role",
            "action",
            "data_type",
            "property",
            "metadata",
            "created_at",
        ]
        read_only_fields = fields
