"""Contact domain models."""

from __future__ import annotations

from django.core.validators import MaxLengthValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Contact(models.Model):
    class Category(models.TextChoices):
        CLIENT = "CLIENT", _("Client")
        OWNER = "OWNER", _("Owner")
        PROVIDER = "PROVIDER", _("Provider")
        ORGANIZATION = "ORGANIZATION", _("Organization")
        OTHER = "OTHER", _("Other")

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    phone = models.CharField(max_length=50, blank=True)
    email = models.EmailField(max_length=255, blank=True, db_index=True)
    language = models.CharField(max_length=50, default="English")
    category = models.CharField(max_length=20, choices=Category.choices)
    comments = models.TextField(blank=True, validators=[MaxLengthValidator(1000)])
    properties = models.ManyToManyField(
        "properties.Property",
        through="ContactProperty",
        related_name="contacts",
        blank=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Contact")
        verbose_name_plural = _("Contacts")
        ordering = ["last_name", "first_name", "id"]

    def __str__(self) -> str:
        return self.full_name

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class ContactProperty(models.Model):
    """How a contact relates to a property."""

    class Relationship(models.TextChoices):
        OWNER = "OWNER", _("Owner")
        RENTER = "RENTER", _("Renter")
        MANAGER = "MANAGER", _("Manager")
        STAFF = "STAFF", _("Staff")
        EMERGENCY = "EMERGENCY", _("Emergency")
        MAINTENANCE = "MAINTENANCE", _("Maintenance")
        AGENCY = "AGENCY", _("Agency")
        OTHER = "OTHER", _("Other")

    contact = models.ForeignKey(Contact, on_delete=models.CASCADE, related_name="property_links")
    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.CASCADE,
        related_name="contact_links",
    )
    relationship = models.CharField(max_length=20, choices=Relationship.choices, default=Relationship.OTHER)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Contact property link")
        verbose_name_plural = _("Contact property links")
        constraints = [
            models.UniqueConstraint(fields=["contact", "property"], name="unique_contact_property"),
        ]

    def __str__(self) -> str:
        return f"{self.contact} - {self.property} ({self.relationship})"
