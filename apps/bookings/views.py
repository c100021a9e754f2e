"""API views for bookings, availability checks and availability requests."""

from __future__ import annotations

import logging

from django.conf import settings  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import serializers, status, views, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.audit.services import log_action
from apps.properties.mixins import PropertyScopedMixin
from apps.users.permissions import HasPermission, Permission
from shared.infrastructure.pagination import PageLimitPagination

from . import services
from .filters import AvailabilityRequestFilterSet, BookingFilterSet
from .importers import import_availability_csv
from .models import AvailabilityRequest, Booking
from .serializers import (
    AdvancedAvailabilitySerializer,
    AvailabilityAnalysisSerializer,
    AvailabilityImportSerializer,
    AvailabilityRequestSerializer,
    AvailabilityRequestStatusSerializer,
    BookingImportSerializer,
    BookingSerializer,
    BookingStatsSerializer,
    BookingWriteSerializer,
    CalendarDaySerializer,
    CalendarQuerySerializer,
    DateRangeQuerySerializer,
)

logger = logging.getLogger(__name__)


class BookingPagination(PageLimitPagination):
    page_size = 50
    max_page_size = 1000
    results_key = "bookings"


class AvailabilityRequestPagination(PageLimitPagination):
    results_key = "requests"


def _conflict_response(exc: services.BookingConflictError) -> Response:
    return Response(
        {
            "non_field_errors": [exc.message],
            "conflicts": [services.conflict_summary(booking) for booking in exc.conflicts],
        },
        status=status.HTTP_400_BAD_REQUEST,
    )


class BookingViewSet(PropertyScopedMixin, viewsets.ModelViewSet):
    """Bookings and blocked periods of one property."""

    queryset = Booking.objects.select_related("property").all()
    permission_classes = [HasPermission(Permission.PROPERTY_VIEW, Permission.PROPERTY_EDIT)]
    pagination_class = BookingPagination
    filter_backends = [DjangoFilterBackend]
    filterset_class = BookingFilterSet

    def get_queryset(self):  # type: ignore
        return super().get_queryset().filter(property=self.get_property())

    def get_serializer_class(self):  # type: ignore
        if self.action in {"create", "update", "partial_update"}:
            return BookingWriteSerializer
        return BookingSerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            booking = services.create_booking(self.get_property(), serializer.validated_data, request.user)
        except services.BookingConflictError as exc:
            logger.warning("Booking rejected on property %s: %s", self.get_property().pk, exc.message)
            return _conflict_response(exc)
        read_serializer = BookingSerializer(booking, context=self.get_serializer_context())
        return Response(read_serializer.data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):  # type: ignore
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        try:
            booking = services.update_booking(instance, serializer.validated_data, request.user)
        except services.BookingConflictError as exc:
            logger.warning("Booking %s update rejected: %s", instance.pk, exc.message)
            return _conflict_response(exc)
        return Response(BookingSerializer(booking, context=self.get_serializer_context()).data)

    def perform_destroy(self, instance):  # type: ignore
        services.delete_booking(instance, self.request.user)

    @action(detail=True, methods=["post"])
    def cancel(self, request, property_id=None, pk=None):  # type: ignore
        booking = services.cancel_booking(self.get_object(), request.user)
        return Response(BookingSerializer(booking, context=self.get_serializer_context()).data)

    @action(detail=False, methods=["get"])
    def availability(self, request, property_id=None):  # type: ignore
        query = DateRangeQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        data = query.validated_data
        result = services.check_availability(
            self.get_property(),
            data["start_date"],
            data["end_date"],
            exclude_booking_id=data.get("exclude_booking_id"),
        )
        return Response(result)

    @action(detail=False, methods=["post"], url_path="advanced-availability")
    def advanced_availability(self, request, property_id=None):  # type: ignore
        query = AdvancedAvailabilitySerializer(data=request.data)
        query.is_valid(raise_exception=True)
        data = query.validated_data
        analysis = services.check_advanced_availability(
            self.get_property(),
            data["start_date"],
            data["end_date"],
            exclude_booking_id=data.get("exclude_booking_id"),
            include_nearby_dates=data["include_nearby_dates"],
            suggest_alternatives=data["suggest_alternatives"],
            grace_period_hours=data["grace_period_hours"],
        )
        return Response(AvailabilityAnalysisSerializer(analysis).data)

    @action(detail=False, methods=["get"])
    def stats(self, request, property_id=None):  # type: ignore
        query = DateRangeQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        figures = services.booking_stats(
            self.get_property(), query.validated_data["start_date"], query.validated_data["end_date"]
        )
        return Response(BookingStatsSerializer(figures).data)

    @action(detail=False, methods=["get"])
    def calendar(self, request, property_id=None):  # type: ignore
        query = CalendarQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        first, last = services.default_calendar_window()
        first = query.validated_data.get("start", first)
        last = query.validated_data.get("end", last)
        if last < first:
            raise serializers.ValidationError({"end": ["End date must not be before start date"]})
        days = services.calendar_days(self.get_property(), first, last)
        return Response({"start": first, "end": last, "days": CalendarDaySerializer(days, many=True).data})

    @action(detail=False, methods=["post"], url_path="import")
    def import_bookings(self, request, property_id=None):  # type: ignore
        serializer = BookingImportSerializer(
            data=request.data, context={"max_rows": settings.BOOKING_IMPORT_MAX_ROWS}
        )
        serializer.is_valid(raise_exception=True)
        result = services.import_bookings(self.get_property(), serializer.validated_data["bookings"], request.user)
        return Response(result)


class AvailabilityImportView(views.APIView):
    """Upload availability as CSV, across properties."""

    permission_classes = [HasPermission(Permission.PROPERTY_VIEW, Permission.PROPERTY_EDIT)]
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    def post(self, request):  # type: ignore
        serializer = AvailabilityImportSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = import_availability_csv(
            serializer.validated_data["csv"], request.user, mode=serializer.validated_data["mode"]
        )
        return Response(result.as_dict())


class AvailabilityRequestViewSet(viewsets.ModelViewSet):
    """Guest enquiries awaiting confirmation."""

    queryset = AvailabilityRequest.objects.select_related("property", "requested_by").all()
    serializer_class = AvailabilityRequestSerializer
    permission_classes = [HasPermission(Permission.INTERNAL_VIEW, Permission.INTERNAL_EDIT)]
    pagination_class = AvailabilityRequestPagination
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = AvailabilityRequestFilterSet
    ordering_fields = ["created_at", "start_date", "end_date", "urgency"]
    ordering = ["-created_at"]
    http_method_names = ["get", "post", "delete", "head", "options"]

    def perform_create(self, serializer):  # type: ignore
        availability_request = serializer.save(requested_by=self.request.user)
        log_action(self.request.user, "create_availability_request", availability_request, serializer.validated_data)

    def perform_destroy(self, instance):  # type: ignore
        log_action(
            self.request.user,
            "delete_availability_request",
            changes={"guest_name": instance.guest_name, "status": instance.status},
            entity_type="AvailabilityRequest",
            entity_id=instance.pk,
        )
        instance.delete()

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):  # type: ignore
        availability_request = self.get_object()
        serializer = AvailabilityRequestStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.set_request_status(availability_request, serializer.validated_data["status"], request.user)
        return Response(self.get_serializer(availability_request).data)
