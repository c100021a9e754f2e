"""Audit trail models."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class AuditLog(models.Model):
    """A single change made by a user to a domain record."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_logs",
    )
    action = models.CharField(max_length=64)
    entity_type = models.CharField(max_length=64)
    entity_id = models.CharField(max_length=64)
    changes = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Audit log entry")
        verbose_name_plural = _("Audit log")
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["entity_type", "entity_id"]),
            models.Index(fields=["action"]),
            models.Index(fields=["created_at"]),
        ]

    def __str__(self) -> str:
        return f"{self.action} {self.entity_type}#{self.entity_id}"


class SensitiveDataAccess(models.Model):
    """Records reads and exports of financial, owner or contact data."""

    class Action(models.TextChoices):
        VIEW = "VIEW", _("View")
        EDIT = "EDIT", _("Edit")
        EXPORT = "EXPORT", _("Export")

    class DataType(models.TextChoices):
        FINANCIAL_DATA = "FINANCIAL_DATA", _("Financial data")
        OWNER_DATA = "OWNER_DATA", _("Owner data")
        CONTACT_DATA = "CONTACT_DATA", _("Contact data")

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sensitive_data_accesses",
    )
    user_role = models.CharField(max_length=20, blank=True)
    action = models.CharField(max_length=10, choices=Action.choices)
    data_type = models.CharField(max_length=20, choices=DataType.choices)
    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="sensitive_data_accesses",
    )
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Sensitive data access")
        verbose_name_plural = _("Sensitive data accesses")
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return f"{self.action} {self.data_type} by {self.user_id}"
