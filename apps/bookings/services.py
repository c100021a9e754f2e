"""Domain services for booking workflows."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Iterable, Mapping

from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from django.db.models import Q  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore
from django.utils import timezone  # type: ignore

from apps.audit.services import diff_fields, log_action
from apps.properties.models import Property
from shared.domain.base import DomainError
from shared.domain.value_objects import DateRange

from .domain.availability import (
    SEVERITY_WARNING,
    AvailabilityAnalysis,
    BookedPeriod,
    analyze_availability,
)
from .domain.calendar import CalendarDay, StayFigures, build_calendar_days, compute_occupancy
from .models import AvailabilityRequest, Booking

logger = logging.getLogger(__name__)


class BookingConflictError(DomainError):
    """Raised when a property is busy for the requested dates."""

    def __init__(self, conflicts: Iterable[Booking]):
        self.conflicts = list(conflicts)
        types = ", ".join(booking.type for booking in self.conflicts)
        super().__init__(f"Booking conflicts with existing bookings: {types}")


class InvalidStatusTransition(DomainError):
    default_message = "Only pending requests can be confirmed or rejected"


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def _lock_property(property_obj: Property) -> None:
    # Serialises concurrent writers of the same calendar.
    list(_lock_queryset_if_possible(Property.objects.filter(pk=property_obj.pk)).values_list("pk", flat=True))


def _overlap(start: date, end: date) -> Q:
    return Q(start_date__lt=end) & Q(end_date__gt=start)


def overlapping_bookings(property_obj, start: date, end: date, *, exclude_booking_id=None):
    """Active bookings of the property sharing at least one night with ``[start, end)``."""
    qs = Booking.objects.filter(property=property_obj).exclude(status=Booking.Status.CANCELLED).filter(
        _overlap(start, end)
    )
    if exclude_booking_id is not None:
        qs = qs.exclude(pk=exclude_booking_id)
    return qs.order_by("start_date", "id")


def conflict_summary(booking: Booking) -> dict[str, Any]:
    return {
        "id": booking.id,
        "type": booking.type,
        "start_date": booking.start_date,
        "end_date": booking.end_date,
        "guest_name": booking.guest_name,
    }


def check_availability(property_obj, start: date, end: date, *, exclude_booking_id=None) -> dict[str, Any]:
    conflicts = list(overlapping_bookings(property_obj, start, end, exclude_booking_id=exclude_booking_id))
    return {
        "available": not conflicts,
        "conflicts": [conflict_summary(booking) for booking in conflicts],
    }


def ensure_property_is_available(property_obj, start: date, end: date, *, exclude_booking_id=None) -> None:
    """Raise :class:`BookingConflictError` if the period is taken."""

    conflicts = list(
        _lock_queryset_if_possible(
            overlapping_bookings(property_obj, start, end, exclude_booking_id=exclude_booking_id)
        )
    )
    if conflicts:
        raise BookingConflictError(conflicts)


@transaction.atomic
def create_booking(property_obj, data: Mapping[str, Any], user=None) -> Booking:
    _lock_property(property_obj)
    ensure_property_is_available(property_obj, data["start_date"], data["end_date"])
    booking = Booking.objects.create(
        property=property_obj,
        created_by=user if getattr(user, "is_authenticated", False) else None,
        updated_by=user if getattr(user, "is_authenticated", False) else None,
        **data,
    )
    logger.info("Booking %s created on property %s (%s)", booking.pk, property_obj.pk, booking.type)
    action = "create_owner_booking" if booking.type in Booking.OWNER_TYPES else "create_booking"
    log_action(user, action, booking, dict(data))
    return booking


@transaction.atomic
def update_booking(booking: Booking, data: Mapping[str, Any], user=None) -> Booking:
    start = data.get("start_date", booking.start_date)
    end = data.get("end_date", booking.end_date)
    if start != booking.start_date or end != booking.end_date:
        _lock_property(booking.property)
        ensure_property_is_available(booking.property, start, end, exclude_booking_id=booking.pk)

    changes = diff_fields(booking, data)
    for field, value in data.items():
        setattr(booking, field, value)
    if getattr(user, "is_authenticated", False):
        booking.updated_by = user
    booking.save()
    logger.info("Booking %s updated: %s", booking.pk, ", ".join(changes) or "no changes")
    log_action(user, "update_booking", booking, changes)
    return booking


@transaction.atomic
def cancel_booking(booking: Booking, user=None) -> Booking:
    if booking.status != Booking.Status.CANCELLED:
        previous = booking.status
        booking.status = Booking.Status.CANCELLED
        booking.save(update_fields=["status", "updated_at"])
        log_action(user, "cancel_booking", booking, {"status": {"from": previous, "to": booking.status}})
    return booking


@transaction.atomic
def delete_booking(booking: Booking, user=None) -> None:
    snapshot = conflict_summary(booking)
    booking_id = booking.pk
    booking.delete()
    logger.info("Booking %s deleted", booking_id)
    log_action(user, "delete_booking", changes=snapshot, entity_type="Booking", entity_id=booking_id)


def _periods(bookings: Iterable[Booking]) -> list[BookedPeriod]:
    return [
        BookedPeriod(
            id=booking.id,
            type=booking.type,
            start_date=booking.start_date,
            end_date=booking.end_date,
            guest_name=booking.guest_name,
        )
        for booking in bookings
    ]


def check_advanced_availability(
    property_obj,
    start: date,
    end: date,
    *,
    exclude_booking_id=None,
    include_nearby_dates: bool = True,
    suggest_alternatives: bool = True,
    grace_period_hours: float | None = None,
) -> AvailabilityAnalysis:
    """Conflicts, grace period violations, minimum stay warnings and alternatives."""
    from apps.pricing.services import evaluate_minimum_stay

    if grace_period_hours is None:
        grace_period_hours = settings.AVAILABILITY_GRACE_PERIOD_HOURS
    request = DateRange(start, end)
    search = request.expand(settings.AVAILABILITY_SEARCH_WINDOW_DAYS)

    qs = (
        Booking.objects.filter(property=property_obj)
        .exclude(status=Booking.Status.CANCELLED)
        .filter(start_date__lte=search.end_date, end_date__gte=search.start_date)
        .order_by("start_date", "id")
    )
    if exclude_booking_id is not None:
        qs = qs.exclude(pk=exclude_booking_id)

    analysis = analyze_availability(
        request,
        _periods(qs),
        search=search,
        grace_period_hours=grace_period_hours,
        include_nearby_dates=include_nearby_dates,
        suggest=suggest_alternatives,
        max_suggestions=settings.AVAILABILITY_MAX_SUGGESTIONS,
    )
    for violation in evaluate_minimum_stay(property_obj, start, end):
        analysis.warnings.append({**violation, "severity": SEVERITY_WARNING})
    return analysis


def calendar_days(property_obj, first_day: date, last_day: date) -> list[CalendarDay]:
    bookings = (
        Booking.objects.filter(property=property_obj)
        .exclude(status=Booking.Status.CANCELLED)
        .filter(start_date__lte=last_day, end_date__gte=first_day)
        .order_by("start_date", "id")
    )
    return build_calendar_days(first_day, last_day, _periods(bookings))


def booking_stats(property_obj, start: date, end: date) -> dict[str, Any]:
    window = DateRange(start, end)
    stays = [
        StayFigures(type=b.type, start_date=b.start_date, end_date=b.end_date, total_amount=b.total_amount)
        for b in Booking.objects.filter(property=property_obj, status=Booking.Status.CONFIRMED).filter(
            _overlap(start, end)
        )
    ]
    return compute_occupancy(window, stays)


def import_bookings(property_obj, payloads: list[Mapping[str, Any]], user=None) -> dict[str, Any]:
    """Create bookings for one property from raw payloads, skipping invalid or conflicting rows.

    Each payload is validated like a single create, then checked against
    stored bookings and against rows accepted earlier in the same batch.
    The checks against stored bookings and the writes run under the
    property lock in one transaction.
    """
    from .serializers import BookingWriteSerializer, flatten_errors

    rows: list[tuple[int, Mapping[str, Any]]] = []
    errors: list[tuple[int, str]] = []

    for index, payload in enumerate(payloads, start=1):
        serializer = BookingWriteSerializer(data=payload)
        if not serializer.is_valid():
            errors.append((index, f"Booking {index}: {flatten_errors(serializer.errors)}"))
            continue
        rows.append((index, serializer.validated_data))

    created: list[Booking] = []
    with transaction.atomic():
        _lock_property(property_obj)
        actor = user if getattr(user, "is_authenticated", False) else None
        accepted: list[DateRange] = []
        for index, row in rows:
            request = DateRange(row["start_date"], row["end_date"])
            clashes_stored = overlapping_bookings(property_obj, request.start_date, request.end_date).exists()
            clashes_batch = any(request.overlaps_with(other) for other in accepted)
            if clashes_stored or clashes_batch:
                message = (
                    f"Booking {index}: Conflicts with existing bookings "
                    f"({request.start_date.isoformat()} to {request.end_date.isoformat()})"
                )
                errors.append((index, message))
                continue
            accepted.append(request)
            data = {**row, "source": Booking.Source.IMPORT}
            created.append(Booking.objects.create(property=property_obj, created_by=actor, updated_by=actor, **data))
        if created:
            log_action(
                user,
                "import_bookings",
                property_obj,
                {"imported": len(created), "booking_ids": [b.pk for b in created]},
            )

    if errors:
        logger.warning("Booking import on property %s rejected %d rows", property_obj.pk, len(errors))
    logger.info("Booking import on property %s created %d bookings", property_obj.pk, len(created))
    return {"imported": len(created), "failed": len(errors), "errors": [message for _, message in sorted(errors)]}


@transaction.atomic
def set_request_status(availability_request: AvailabilityRequest, new_status: str, user=None) -> AvailabilityRequest:
    if availability_request.status != AvailabilityRequest.Status.PENDING:
        raise InvalidStatusTransition()
    previous = availability_request.status
    availability_request.status = new_status
    availability_request.save(update_fields=["status", "updated_at"])
    log_action(
        user,
        "update_availability_request_status",
        availability_request,
        {"status": {"from": previous, "to": new_status}},
    )
    return availability_request


def complete_finished_bookings(today: date | None = None) -> int:
    """Mark confirmed bookings whose check-out day has passed as completed."""
    today = today or timezone.localdate()
    return Booking.objects.filter(status=Booking.Status.CONFIRMED, end_date__lt=today).update(
        status=Booking.Status.COMPLETED, updated_at=timezone.now()
    )


def default_calendar_window(today: date | None = None) -> tuple[date, date]:
    today = today or timezone.localdate()
    first = today.replace(day=1)
    last = (first + timedelta(days=32)).replace(day=1) - timedelta(days=1)
    return first, last
