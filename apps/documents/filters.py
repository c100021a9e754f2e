"""FilterSet for the legal document listing."""

from __future__ import annotations

from datetime import timedelta

import django_filters  # type: ignore
from django.db.models import Q  # type: ignore
from django.utils import timezone  # type: ignore

from .models import LegalDocument


class LegalDocumentFilterSet(django_filters.FilterSet):
    search = django_filters.CharFilter(method="filter_search")
    category = django_filters.ChoiceFilter(choices=LegalDocument.Category.choices)
    status = django_filters.ChoiceFilter(choices=LegalDocument.Status.choices)
    property = django_filters.NumberFilter(field_name="property")
    expiring_within = django_filters.NumberFilter(method="filter_expiring_within", min_value=0)

    class Meta:
        model = LegalDocument
        fields = ["category", "status", "property"]

    def filter_search(self, queryset, name, value):  # type: ignore
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(Q(name__icontains=value) | Q(description__icontains=value))

    def filter_expiring_within(self, queryset, name, value):  # type: ignore
        if value is None:
            return queryset
        today = timezone.localdate()
        return queryset.filter(expiry_date__gte=today, expiry_date__lte=today + timedelta(days=int(value)))
