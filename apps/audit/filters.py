"""FilterSet definitions for the audit log."""

from __future__ import annotations

import django_filters  # type: ignore
from django.db.models import Q  # type: ignore

from .models import AuditLog, SensitiveDataAccess


class AuditLogFilterSet(django_filters.FilterSet):
    user = django_filters.NumberFilter(field_name="user_id")
    entity_type = django_filters.CharFilter(field_name="entity_type", lookup_expr="iexact")
    entity_id = django_filters.CharFilter(field_name="entity_id")
    action = django_filters.CharFilter(field_name="action", lookup_expr="iexact")
    start_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    end_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = AuditLog
        fields = ["user", "entity_type", "entity_id", "action"]

    def filter_search(self, queryset, name, value):  # type: ignore
        if not value:
            return queryset
        return queryset.filter(
            Q(entity_type__icontains=value) | Q(action__icontains=value) | Q(entity_id__icontains=value)
        )


class SensitiveDataAccessFilterSet(django_filters.FilterSet):
    user = django_filters.NumberFilter(field_name="user_id")
    property = django_filters.NumberFilter(field_name="property_id")

    class Meta:
        model = SensitiveDataAccess
        fields = ["user", "property", "action", "data_type"]
