"""FilterSet for the contact listing."""

from __future__ import annotations

import django_filters  # type: ignore
from django.db.models import Q  # type: ignore

from .models import Contact

ALL_CATEGORIES = "ALL"


class ContactFilterSet(django_filters.FilterSet):
    search = django_filters.CharFilter(method="filter_search")
    category = django_filters.ChoiceFilter(
        method="filter_category",
        choices=[*Contact.Category.choices, (ALL_CATEGORIES, "All")],
    )
    language = django_filters.CharFilter(field_name="language", lookup_expr="iexact")
    has_linked_properties = django_filters.BooleanFilter(method="filter_has_linked_properties")
    property = django_filters.NumberFilter(field_name="property_links__property")

    class Meta:
        model = Contact
        fields = ["category", "language"]

    def filter_search(self, queryset, name, value):  # type: ignore
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(first_name__icontains=value)
            | Q(last_name__icontains=value)
            | Q(email__icontains=value)
            | Q(phone__icontains=value)
        )

    def filter_category(self, queryset, name, value):  # type: ignore
        if not value or value == ALL_CATEGORIES:
            return queryset
        return queryset.filter(category=value)

    def filter_has_linked_properties(self, queryset, name, value):  # type: ignore
        if value is None:
            return queryset
        return queryset.filter(property_links__isnull=not value).distinct()
