"""Admin registrations for properties domain."""

from __future__ import annotations

from django.contrib import admin

from .models import Destination, Property


@admin.register(Destination)
class DestinationAdmin(admin.ModelAdmin):
    list_display = ("name", "country", "region")
    list_filter = ("country",)
    search_fields = ("name", "country", "region")


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = ("name", "destination", "city", "status", "max_guests", "bedrooms")
    list_filter = ("status", "destination")
    search_fields = ("name", "city")
    readonly_fields = ("slug", "created_at", "updated_at")
