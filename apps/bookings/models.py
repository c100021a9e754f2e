"""Booking domain models.

A :class:`Booking` reserves or blocks a half-open date range
``[start_date, end_date)`` on a property: the end date is the check-out
day, so a stay ending on the 10th never collides with one starting on
the 10th. An :class:`AvailabilityRequest` is a guest enquiry that staff
confirm or reject.
"""

from __future__ import annotations

import builtins
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MaxLengthValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.db.models import F, Q  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import DateRange


class Booking(models.Model):
    """A reserved or blocked period on a property."""

    class Type(models.TextChoices):
        CONFIRMED = "CONFIRMED", _("Confirmed")
        TENTATIVE = "TENTATIVE", _("Tentative")
        BLOCKED = "BLOCKED", _("Blocked")
        MAINTENANCE = "MAINTENANCE", _("Maintenance")
        OWNER = "OWNER", _("Owner")
        OWNER_STAY = "OWNER_STAY", _("Owner stay")
        CONTRACT = "CONTRACT", _("Contract")

    class Status(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        CONFIRMED = "CONFIRMED", _("Confirmed")
        CANCELLED = "CANCELLED", _("Cancelled")
        COMPLETED = "COMPLETED", _("Completed")

    class Source(models.TextChoices):
        MANUAL = "MANUAL", _("Manual")
        IMPORT = "IMPORT", _("Import")

    # Types that represent a paying guest and therefore need contact details.
    GUEST_TYPES = frozenset({Type.CONFIRMED, Type.TENTATIVE, Type.CONTRACT})
    # Periods without a guest: guest details are pointless there.
    NON_GUEST_TYPES = frozenset({Type.BLOCKED, Type.MAINTENANCE, Type.OWNER_STAY})
    OWNER_TYPES = frozenset({Type.OWNER, Type.OWNER_STAY})

    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    type = models.CharField(max_length=20, choices=Type.choices)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.CONFIRMED)
    source = models.CharField(max_length=10, choices=Source.choices, default=Source.MANUAL)
    start_date = models.DateField()
    end_date = models.DateField()
    guest_name = models.CharField(max_length=255, blank=True)
    guest_email = models.EmailField(max_length=254, blank=True)
    guest_phone = models.CharField(max_length=50, blank=True)
    number_of_guests = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0"))],
    )
    notes = models.TextField(blank=True, validators=[MaxLengthValidator(1000)])
    external_id = models.CharField(max_length=255, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_bookings",
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="updated_bookings",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-start_date", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_date__gt=F("start_date")),
                name="booking_end_after_start",
            ),
        ]
        indexes = [
            models.Index(fields=["property", "start_date", "end_date"]),
            models.Index(fields=["property", "status"]),
        ]

    def __str__(self) -> str:
        return f"{self.get_type_display()} {self.property_id} {self.start_date}..{self.end_date}"

    @builtins.property
    def date_range(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    @builtins.property
    def nights(self) -> int:
        return (self.end_date - self.start_date).days

    @builtins.property
    def label(self) -> str:
        return self.guest_name or self.type


class AvailabilityRequest(models.Model):
    """Guest enquiry for a period, awaiting confirmation."""

    class Status(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        CONFIRMED = "CONFIRMED", _("Confirmed")
        REJECTED = "REJECTED", _("Rejected")

    class Urgency(models.TextChoices):
        LOW = "LOW", _("Low")
        MEDIUM = "MEDIUM", _("Medium")
        HIGH = "HIGH", _("High")

    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.CASCADE,
        related_name="availability_requests",
    )
    start_date = models.DateField()
    end_date = models.DateField()
    guest_name = models.CharField(max_length=255)
    guest_email = models.EmailField()
    guest_phone = models.CharField(max_length=50)
    number_of_guests = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    urgency = models.CharField(max_length=10, choices=Urgency.choices, default=Urgency.MEDIUM)
    message = models.TextField(blank=True, validators=[MaxLengthValidator(2000)])
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)
    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="availability_requests",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Availability request")
        verbose_name_plural = _("Availability requests")
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_date__gt=F("start_date")),
                name="availability_request_end_after_start",
            ),
        ]
        indexes = [
            models.Index(fields=["property", "status"]),
        ]

    def __str__(self) -> str:
        return f"{self.guest_name} {self.start_date}..{self.end_date} ({self.status})"
