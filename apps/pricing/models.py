"""Pricing domain models.

Price ranges use an inclusive end date: a range ending on the 30th still
prices the night of the 30th. Public rates are derived from the owner
rates and the commission, see :mod:`apps.pricing.calculations`.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator, RegexValidator  # type: ignore
from django.db import models  # type: ignore
from django.db.models import F, Q  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import SUPPORTED_CURRENCIES

PERCENT_VALIDATORS = [MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))]
POSITIVE_AMOUNT = [MinValueValidator(Decimal("0.01"))]
NON_NEGATIVE_AMOUNT = [MinValueValidator(Decimal("0"))]

payment_schedule_validator = RegexValidator(
    r"^\d+\s*-\s*\d+\s*-\s*\d+$",
    message="Payment schedule must be in format: XX - XX - XX",
)


def _percent_field(default: str) -> models.DecimalField:
    return models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal(default),
        validators=PERCENT_VALIDATORS,
    )


class PropertyPricing(models.Model):
    """General pricing settings, one record per property."""

    property = models.OneToOneField(
        "properties.Property",
        on_delete=models.CASCADE,
        related_name="pricing",
    )
    currency = models.CharField(
        max_length=3,
        choices=[(code, code) for code in SUPPORTED_CURRENCIES],
        default="EUR",
    )
    display_on_website = models.BooleanField(default=False)
    retro_commission = models.BooleanField(default=False)
    last_pricing_update = models.DateTimeField(null=True, blank=True)
    security_deposit = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True, validators=NON_NEGATIVE_AMOUNT
    )
    payment_schedule = models.CharField(max_length=50, blank=True, validators=[payment_schedule_validator])
    min_owner_accepted_price = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True, validators=POSITIVE_AMOUNT
    )
    min_lc_accepted_price = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True, validators=POSITIVE_AMOUNT
    )
    public_minimum_price = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True, validators=POSITIVE_AMOUNT
    )
    net_owner_commission = _percent_field("25")
    public_price_commission = _percent_field("20")
    b2b2c_partner_commission = _percent_field("10")
    public_taxes_commission = _percent_field("0")
    client_fees_commission = _percent_field("2")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Property pricing")
        verbose_name_plural = _("Property pricing")

    def __str__(self) -> str:
        return f"Pricing of {self.property}"


class PriceRange(models.Model):
    """Seasonal owner and public rates."""

    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.CASCADE,
        related_name="price_ranges",
    )
    name = models.CharField(max_length=100)
    start_date = models.DateField()
    end_date = models.DateField()
    owner_nightly_rate = models.DecimalField(max_digits=12, decimal_places=2, validators=POSITIVE_AMOUNT)
    owner_weekly_rate = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True, validators=POSITIVE_AMOUNT
    )
    commission_rate = _percent_field("25")
    public_nightly_rate = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))
    public_weekly_rate = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    is_validated = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Price range")
        verbose_name_plural = _("Price ranges")
        ordering = ["start_date", "id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_date__gt=F("start_date")),
                name="price_range_end_after_start",
            ),
        ]
        indexes = [models.Index(fields=["property", "start_date", "end_date"])]

    def __str__(self) -> str:
        return f"{self.name} ({self.start_date}..{self.end_date})"

    def covers(self, night) -> bool:
        return self.start_date <= night <= self.end_date


class MinimumStayRule(models.Model):
    """Minimum length and turnover day of a stay, optionally limited to a period."""

    class BookingCondition(models.TextChoices):
        PER_NIGHT = "PER_NIGHT", _("Per night")
        WEEKLY_SATURDAY_TO_SATURDAY = "WEEKLY_SATURDAY_TO_SATURDAY", _("Weekly, Saturday to Saturday")
        WEEKLY_SUNDAY_TO_SUNDAY = "WEEKLY_SUNDAY_TO_SUNDAY", _("Weekly, Sunday to Sunday")
        WEEKLY_MONDAY_TO_MONDAY = "WEEKLY_MONDAY_TO_MONDAY", _("Weekly, Monday to Monday")

    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.CASCADE,
        related_name="minimum_stay_rules",
    )
    booking_condition = models.CharField(
        max_length=40,
        choices=BookingCondition.choices,
        default=BookingCondition.PER_NIGHT,
    )
    minimum_nights = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Minimum stay rule")
        verbose_name_plural = _("Minimum stay rules")
        ordering = ["start_date", "id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(start_date__isnull=True) | Q(end_date__isnull=True) | Q(end_date__gt=F("start_date")),
                name="minimum_stay_rule_end_after_start",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.get_booking_condition_display()} min {self.minimum_nights}"


class OperationalCost(models.Model):
    """Housekeeping, linen and similar charges of a stay."""

    class CostType(models.TextChoices):
        HOUSEKEEPING = "HOUSEKEEPING", _("Housekeeping")
        HOUSEKEEPING_AT_CHECKOUT = "HOUSEKEEPING_AT_CHECKOUT", _("Housekeeping at checkout")
        LINEN_CHANGE = "LINEN_CHANGE", _("Linen change")
        OPERATIONAL_PACKAGE = "OPERATIONAL_PACKAGE", _("Operational package")

    class PriceType(models.TextChoices):
        PER_STAY = "PER_STAY", _("Per stay")
        PER_WEEK = "PER_WEEK", _("Per week")
        PER_DAY = "PER_DAY", _("Per day")
        FIXED = "FIXED", _("Fixed")

    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.CASCADE,
        related_name="operational_costs",
    )
    cost_type = models.CharField(max_length=30, choices=CostType.choices)
    price_type = models.CharField(max_length=10, choices=PriceType.choices, default=PriceType.PER_STAY)
    estimated_price = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True, validators=NON_NEGATIVE_AMOUNT
    )
    public_price = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True, validators=NON_NEGATIVE_AMOUNT
    )
    paid_by = models.CharField(max_length=100, blank=True)
    comment = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Operational cost")
        verbose_name_plural = _("Operational costs")
        ordering = ["created_at", "id"]

    def __str__(self) -> str:
        return f"{self.get_cost_type_display()} ({self.get_price_type_display()})"
