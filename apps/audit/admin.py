"""Admin registrations for the audit trail."""

from __future__ import annotations

from django.contrib import admin

from .models import AuditLog, SensitiveDataAccess


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "user", "action", "entity_type", "entity_id")
    list_filter = ("action", "entity_type")
    search_fields = ("entity_id", "user__email")
    readonly_fields = ("user", "action", "entity_type", "entity_id", "changes", "created_at")

    def has_add_permission(self, request):  # type: ignore
        return False


@admin.register(SensitiveDataAccess)
class SensitiveDataAccessAdmin(admin.ModelAdmin):
    list_display = ("created_at", "user", "user_role", "action", "data_type", "property")
    list_filter = ("action", "data_type")
    readonly_fields = ("user", "user_role", "action", "data_type", "property", "metadata", "created_at")

    def has_add_permission(self, request):  # type: ignore
        return False
