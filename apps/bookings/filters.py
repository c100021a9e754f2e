"""FilterSets for booking and availability request listings."""

from __future__ import annotations

import django_filters  # type: ignore
from django.db.models import Q  # type: ignore

from .models import AvailabilityRequest, Booking


class CommaSeparatedChoiceFilter(django_filters.BaseInFilter, django_filters.CharFilter):
    """``?type=CONFIRMED,BLOCKED`` style multi-value filter."""


class OverlapDateFilterMixin:
    """``start_date``/``end_date`` keep the rows whose range touches the window."""

    def filter_window_start(self, queryset, name, value):  # type: ignore
        return queryset.filter(end_date__gte=value)

    def filter_window_end(self, queryset, name, value):  # type: ignore
        return queryset.filter(start_date__lte=value)


class BookingFilterSet(OverlapDateFilterMixin, django_filters.FilterSet):
    start_date = django_filters.DateFilter(method="filter_window_start")
    end_date = django_filters.DateFilter(method="filter_window_end")
    type = CommaSeparatedChoiceFilter(field_name="type")
    status = CommaSeparatedChoiceFilter(field_name="status")
    search = django_filters.CharFilter(method="filter_search")
    sort = django_filters.ChoiceFilter(
        method="filter_noop",
        choices=[(name, name) for name in ("start_date", "end_date", "created_at", "guest_name")],
    )
    order = django_filters.ChoiceFilter(method="filter_noop", choices=[("asc", "asc"), ("desc", "desc")])

    class Meta:
        model = Booking
        fields = ["start_date", "end_date", "type", "status"]

    def filter_search(self, queryset, name, value):  # type: ignore
        if not value:
            return queryset
        return queryset.filter(
            Q(guest_name__icontains=value)
            | Q(guest_email__icontains=value)
            | Q(guest_phone__icontains=value)
            | Q(notes__icontains=value)
            | Q(external_id__icontains=value)
        )

    def filter_noop(self, queryset, name, value):  # type: ignore
        return queryset

    @property
    def qs(self):  # type: ignore
        queryset = super().qs
        data = self.form.cleaned_data if self.is_bound and self.form.is_valid() else {}
        sort = data.get("sort") or "start_date"
        prefix = "" if data.get("order") == "asc" else "-"
        return queryset.order_by(f"{prefix}{sort}", f"{prefix}id")


class AvailabilityRequestFilterSet(OverlapDateFilterMixin, django_filters.FilterSet):
    property = django_filters.NumberFilter(field_name="property_id")
    status = django_filters.ChoiceFilter(choices=AvailabilityRequest.Status.choices)
    urgency = django_filters.ChoiceFilter(choices=AvailabilityRequest.Urgency.choices)
    start_date = django_filters.DateFilter(method="filter_window_start")
    end_date = django_filters.DateFilter(method="filter_window_end")

    class Meta:
        model = AvailabilityRequest
        fields = ["property", "status", "urgency"]
