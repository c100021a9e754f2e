"""Admin registration for pricing."""

from __future__ import annotations

from django.contrib import admin

from .models import MinimumStayRule, OperationalCost, PriceRange, PropertyPricing


@admin.register(PropertyPricing)
class PropertyPricingAdmin(admin.ModelAdmin):
    list_display = ("property", "currency", "display_on_website", "net_owner_commission", "last_pricing_update")
    list_filter = ("currency", "display_on_website", "retro_commission")
    search_fields = ("property__name",)


@admin.register(PriceRange)
class PriceRangeAdmin(admin.ModelAdmin):
    list_display = (
        "property",
        "name",
        "start_date",
        "end_date",
        "owner_nightly_rate",
        "commission_rate",
        "public_nightly_rate",
        "is_validated",
    )
    list_filter = ("is_validated",)
    search_fields = ("name", "property__name")
    readonly_fields = ("public_nightly_rate", "public_weekly_rate")


@admin.register(MinimumStayRule)
class MinimumStayRuleAdmin(admin.ModelAdmin):
    list_display = ("property", "booking_condition", "minimum_nights", "start_date", "end_date")
    list_filter = ("booking_condition",)


@admin.register(OperationalCost)
class OperationalCostAdmin(admin.ModelAdmin):
    list_display = ("property", "cost_type", "price_type", "estimated_price", "public_price", "paid_by")
    list_filter = ("cost_type", "price_type")
