"""Admin registration for bookings and availability requests."""

from __future__ import annotations

from django.contrib import admin

from .models import AvailabilityRequest, Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "property",
        "type",
        "status",
        "source",
        "start_date",
        "end_date",
        "guest_name",
        "total_amount",
    )
    list_filter = ("type", "status", "source", "start_date")
    search_fields = ("guest_name", "guest_email", "external_id", "property__name")
    readonly_fields = ("created_by", "updated_by", "created_at", "updated_at")
    date_hierarchy = "start_date"


@admin.register(AvailabilityRequest)
class AvailabilityRequestAdmin(admin.ModelAdmin):
    list_display = ("id", "property", "guest_name", "start_date", "end_date", "urgency", "status", "created_at")
    list_filter = ("status", "urgency")
    search_fields = ("guest_name", "guest_email", "property__name")
    readonly_fields = ("requested_by", "created_at", "updated_at")
