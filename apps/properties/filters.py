"""FilterSet definitions for property listing."""

from __future__ import annotations

import django_filters  # type: ignore
from django.db.models import Q  # type: ignore

from .models import Property


class PropertyFilterSet(django_filters.FilterSet):
    """Status accepts ``ALL`` to disable the filter, ``search`` matches name and city."""

    status = django_filters.CharFilter(method="filter_status")
    destination = django_filters.NumberFilter(field_name="destination_id")
    city = django_filters.CharFilter(field_name="city", lookup_expr="icontains")
    search = django_filters.CharFilter(method="filter_search")
    guests = django_filters.NumberFilter(field_name="max_guests", lookup_expr="gte")

    class Meta:
        model = Property
        fields = ["status", "destination", "city"]

    def filter_status(self, queryset, name, value):  # type: ignore
        if not value or value.upper() == "ALL":
            return queryset
        return queryset.filter(status=value.upper())

    def filter_search(self, queryset, name, value):  # type: ignore
        if not value:
            return queryset
        return queryset.filter(Q(name__icontains=value) | Q(city__icontains=value))
