"""Legal documents and property resources."""

from __future__ import annotations

import builtins

from django.conf import settings  # type: ignore
from django.core.validators import MaxLengthValidator, MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class LegalDocument(models.Model):
    class Category(models.TextChoices):
        PROPERTY_DEED = "PROPERTY_DEED", _("Property deed")
        LEASE_AGREEMENT = "LEASE_AGREEMENT", _("Lease agreement")
        VENDOR_CONTRACT = "VENDOR_CONTRACT", _("Vendor contract")
        INSURANCE_POLICY = "INSURANCE_POLICY", _("Insurance policy")
        PERMIT_LICENSE = "PERMIT_LICENSE", _("Permit or license")
        TAX_DOCUMENT = "TAX_DOCUMENT", _("Tax document")
        COMPLIANCE_CERTIFICATE = "COMPLIANCE_CERTIFICATE", _("Compliance certificate")
        OTHER = "OTHER", _("Other")

    class Status(models.TextChoices):
        ACTIVE = "ACTIVE", _("Active")
        EXPIRED = "EXPIRED", _("Expired")
        PENDING_RENEWAL = "PENDING_RENEWAL", _("Pending renewal")
        ARCHIVED = "ARCHIVED", _("Archived")

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, validators=[MaxLengthValidator(1000)])
    category = models.CharField(max_length=30, choices=Category.choices)
    subcategory = models.CharField(max_length=100, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE, db_index=True)
    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="legal_documents",
    )
    expiry_date = models.DateField(null=True, blank=True, db_index=True)
    reminder_days = models.PositiveIntegerField(
        default=30, validators=[MinValueValidator(0), MaxValueValidator(365)]
    )
    file = models.FileField(upload_to="legal-documents/%Y/%m/")
    file_size = models.PositiveBigIntegerField(default=0)
    mime_type = models.CharField(max_length=100, blank=True)
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="legal_documents",
    )
    tags = models.JSONField(default=list, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    uploaded_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Legal document")
        verbose_name_plural = _("Legal documents")
        ordering = ["-uploaded_at", "-id"]

    def __str__(self) -> str:
        return self.name


class LegalDocumentVersion(models.Model):
    document = models.ForeignKey(LegalDocument, on_delete=models.CASCADE, related_name="versions")
    version_number = models.PositiveIntegerField()
    file = models.FileField(upload_to="legal-documents/%Y/%m/")
    file_size = models.PositiveBigIntegerField(default=0)
    mime_type = models.CharField(max_length=100, blank=True)
    comment = models.CharField(max_length=500, blank=True)
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="legal_document_versions",
    )
    uploaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Legal document version")
        verbose_name_plural = _("Legal document versions")
        ordering = ["-version_number"]
        constraints = [
            models.UniqueConstraint(fields=["document", "version_number"], name="unique_document_version"),
        ]

    def __str__(self) -> str:
        return f"{self.document} v{self.version_number}"


class Resource(models.Model):
    """A file or link attached to a property."""

    class Type(models.TextChoices):
        PHOTO = "PHOTO", _("Photo")
        FLOOR_PLAN = "FLOOR_PLAN", _("Floor plan")
        BROCHURE = "BROCHURE", _("Brochure")
        VIDEO = "VIDEO", _("Video")
        DOCUMENT = "DOCUMENT", _("Document")
        OTHER = "OTHER", _("Other")

    property = models.ForeignKey("properties.Property", on_delete=models.CASCADE, related_name="resources")
    type = models.CharField(max_length=20, choices=Type.choices)
    name = models.CharField(max_length=255)
    file = models.FileField(upload_to="resources/%Y/%m/", blank=True)
    url = models.URLField(max_length=500, blank=True)
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="resources",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Resource")
        verbose_name_plural = _("Resources")
        ordering = ["type", "-created_at"]

    def __str__(self) -> str:
        return f"{self.name} ({self.type})"

    @builtins.property
    def location(self) -> str:
        return self.file.url if self.file else self.url
