"""Helpers for API views nested under ``properties/<property_id>/``."""

from __future__ import annotations

from django.shortcuts import get_object_or_404  # type: ignore

from .models import Property


class PropertyScopedMixin:
    """Resolve the parent property from the URL before the view runs."""

    property_lookup_url_kwarg = "property_id"

    def initial(self, request, *args, **kwargs):  # type: ignore
        super().initial(request, *args, **kwargs)
        property_id = kwargs.get(self.property_lookup_url_kwarg)
        self.property_object = get_object_or_404(Property, pk=property_id)

    def get_property(self) -> Property:
        return self.property_object

    def get_serializer_context(self):  # type: ignore
        context = super().get_serializer_context()
        context["property"] = getattr(self, "property_object", None)
        return context
