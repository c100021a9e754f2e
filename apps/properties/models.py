"""Property domain models.

Every back-office record (bookings, price ranges, contacts links,
documents) hangs off a :class:`Property`. Properties are grouped by
:class:`Destination`, which carries the imagery shown on the website.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.db.models.functions import Lower  # type: ignore
from django.utils.text import slugify  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Destination(models.Model):
    """Region or town grouping properties."""

    name = models.CharField(max_length=255)
    country = models.CharField(max_length=100)
    region = models.CharField(max_length=100, blank=True)
    image = models.ImageField(upload_to="destinations/", blank=True, null=True)
    image_alt_text = models.CharField(max_length=255, blank=True)
    latitude = models.DecimalField(
        max_digits=9,
        decimal_places=6,
        null=True,
        blank=True,
        validators=[MinValueValidator(-90), MaxValueValidator(90)],
    )
    longitude = models.DecimalField(
        max_digits=9,
        decimal_places=6,
        null=True,
        blank=True,
        validators=[MinValueValidator(-180), MaxValueValidator(180)],
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Destination")
        verbose_name_plural = _("Destinations")
        ordering = ["country", "name"]
        constraints = [
            models.UniqueConstraint(fields=["name", "country"], name="unique_destination_per_country"),
        ]

    def __str__(self) -> str:
        return f"{self.name}, {self.country}"


class PropertyQuerySet(models.QuerySet):
    def by_name(self, name: str) -> "Property | None":
        """Case-insensitive exact lookup used by the CSV imports."""
        cleaned = (name or "").strip()
        if not cleaned:
            return None
        return self.filter(name__iexact=cleaned).first()

    def similar_to(self, name: str, limit: int = 3) -> list[str]:
        cleaned = (name or "").strip()
        if not cleaned:
            return []
        return list(
            self.filter(name__icontains=cleaned[:5]).order_by("name").values_list("name", flat=True)[:limit]
        )


class Property(models.Model):
    """A rental property managed by the back office."""

    class Status(models.TextChoices):
        PUBLISHED = "PUBLISHED", _("Published")
        HIDDEN = "HIDDEN", _("Hidden")
        ONBOARDING = "ONBOARDING", _("Onboarding")
        OFFBOARDED = "OFFBOARDED", _("Offboarded")

    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    destination = models.ForeignKey(
        Destination,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="properties",
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ONBOARDING)
    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    max_guests = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    bedrooms = models.PositiveSmallIntegerField(default=0)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_properties",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PropertyQuerySet.as_manager()

    class Meta:
        verbose_name = _("Property")
        verbose_name_plural = _("Properties")
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(Lower("name"), name="unique_property_name_ci"),
        ]
        indexes = [
            models.Index(fields=["status"]),
        ]

    def __str__(self) -> str:
        return self.name

    def save(self, *args, **kwargs):  # type: ignore
        if not self.slug:
            base_slug = slugify(self.name)[:200] or "property"
            candidate = base_slug
            counter = 1
            while self.__class__.objects.filter(slug=candidate).exclude(pk=self.pk).exists():
                counter += 1
                candidate = f"{base_slug}-{counter}"
            self.slug = candidate
        super().save(*args, **kwargs)
