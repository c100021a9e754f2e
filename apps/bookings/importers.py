"""CSV import of bookings and blocked periods.

The file has one booking per row with the columns ``propertyName``,
``bookingType``, ``startDate`` and ``endDate`` plus optional guest
columns. Row numbers in the result count the header as row 1.
"""

from __future__ import annotations

import csv
import io
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from django.db import DatabaseError, transaction  # type: ignore
from django.db.models import Q  # type: ignore

from apps.audit.services import log_action
from apps.properties.models import Property

from .models import Booking

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("propertyName", "bookingType", "startDate", "endDate")
OPTIONAL_COLUMNS = ("guestName", "guestEmail", "guestPhone", "numberOfGuests", "totalAmount", "notes")
EMAIL_RE = re.compile(r"\S+@\S+\.\S+")
DATE_FORMAT = "%Y-%m-%d"

MAX_LENGTHS = {
    "guestName": (255, "Guest name is too long"),
    "guestEmail": (254, "Email is too long"),
    "guestPhone": (50, "Phone number is too long"),
    "notes": (1000, "Notes are too long"),
}
# Booking.total_amount is DecimalField(max_digits=12, decimal_places=2).
AMOUNT_MAX_DIGITS = 12
AMOUNT_DECIMAL_PLACES = 2

MODE_CREATE = "create"
MODE_VALIDATE = "validate"


@dataclass
class ImportIssue:
    row: int
    message: str
    field: str | None = None
    value: Any = None

    def as_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"row": self.row, "message": self.message}
        if self.field is not None:
            data["field"] = self.field
        if self.value is not None:
            data["value"] = self.value
        return data


@dataclass
class AvailabilityImportResult:
    imported: int = 0
    failed: int = 0
    errors: list[ImportIssue] = field(default_factory=list)
    warnings: list[ImportIssue] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.imported > 0

    def as_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "imported": self.imported,
            "failed": self.failed,
            "errors": [issue.as_dict() for issue in self.errors],
            "warnings": [issue.as_dict() for issue in self.warnings],
        }


class RowError(Exception):
    def __init__(self, message: str, field: str | None = None, value: Any = None):
        super().__init__(message)
        self.issue_message = message
        self.field = field
        self.value = value


def parse_csv(text: str) -> list[dict[str, str]]:
    """Read the CSV into dicts keyed by header, with surrounding whitespace removed."""
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    rows = []
    for raw in reader:
        rows.append({(key or "").strip(): (value or "").strip() for key, value in raw.items() if key})
    return rows


def _parse_date(value: str, field_name: str) -> date:
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        raise RowError("Invalid date format. Use YYYY-MM-DD", field_name, value)


def _parse_int(value: str, field_name: str) -> int | None:
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        raise RowError(f"{field_name} must be a whole number", field_name, value)


def _parse_amount(value: str, field_name: str) -> Decimal | None:
    if not value:
        return None
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise RowError(f"{field_name} must be a number", field_name, value)
    if not amount.is_finite():
        raise RowError(f"{field_name} must be a number", field_name, value)
    if amount < 0:
        raise RowError(f"{field_name} must not be negative", field_name, value)
    _sign, digits, exponent = amount.as_tuple()
    decimals = max(-exponent, 0)
    whole_digits = max(len(digits) + exponent, 0)
    if decimals > AMOUNT_DECIMAL_PLACES:
        raise RowError(
            f"{field_name} must have at most {AMOUNT_DECIMAL_PLACES} decimal places", field_name, value
        )
    if whole_digits > AMOUNT_MAX_DIGITS - AMOUNT_DECIMAL_PLACES:
        raise RowError(f"{field_name} is too large", field_name, value)
    return amount


def validate_row(row: dict[str, str], properties: dict[str, Property]) -> tuple[dict[str, Any], list[str]]:
    """Turn a CSV row into booking fields plus non-blocking warnings."""
    for column in REQUIRED_COLUMNS:
        if not row.get(column):
            raise RowError(f"{column} is required", column)

    booking_type = row["bookingType"].upper()
    if booking_type not in Booking.Type.values:
        raise RowError(
            f"Invalid booking type. Must be one of: {', '.join(Booking.Type.values)}",
            "bookingType",
            row["bookingType"],
        )

    for column, (limit, message) in MAX_LENGTHS.items():
        if len(row.get(column, "")) > limit:
            raise RowError(message, column)

    email = row.get("guestEmail", "")
    if email and not EMAIL_RE.fullmatch(email):
        raise RowError("Invalid email format", "guestEmail", email)

    start = _parse_date(row["startDate"], "startDate")
    end = _parse_date(row["endDate"], "endDate")
    if end <= start:
        raise RowError("End date must be after start date", "dates")

    property_obj = properties.get(row["propertyName"].lower())
    if property_obj is None:
        raise RowError(
            f'Property "{row["propertyName"]}" not found. Please import properties first.',
            "propertyName",
            row["propertyName"],
        )

    guests = _parse_int(row.get("numberOfGuests", ""), "numberOfGuests")
    amount = _parse_amount(row.get("totalAmount", ""), "totalAmount")

    warnings = []
    guest_name = row.get("guestName", "")
    has_guest_data = bool(guest_name or email or row.get("guestPhone"))
    if booking_type in (Booking.Type.CONFIRMED, Booking.Type.TENTATIVE) and not guest_name:
        warnings.append("Guest name recommended for confirmed/tentative bookings")
    if booking_type in Booking.NON_GUEST_TYPES and has_guest_data:
        warnings.append("Guest information not needed for blocked/maintenance periods")

    data = {
        "property": property_obj,
        "type": booking_type,
        "start_date": start,
        "end_date": end,
        "guest_name": guest_name,
        "guest_email": email,
        "guest_phone": row.get("guestPhone", ""),
        "number_of_guests": guests if guests and guests > 0 else 1,
        "total_amount": amount,
        "notes": row.get("notes", ""),
    }
    return data, warnings


def _has_overlap(data: dict[str, Any]) -> bool:
    return (
        Booking.objects.filter(property=data["property"])
        .exclude(status=Booking.Status.CANCELLED)
        .filter(Q(start_date__lt=data["end_date"]) & Q(end_date__gt=data["start_date"]))
        .exists()
    )


def import_availability_csv(text: str, user=None, mode: str = MODE_CREATE) -> AvailabilityImportResult:
    """Validate and import availability rows.

    Rows with errors are skipped; an overlap with an existing booking is
    reported as a warning. In validate mode nothing is written.
    """
    rows = parse_csv(text)
    properties = {prop.name.lower(): prop for prop in Property.objects.all()}
    result = AvailabilityImportResult()
    accepted: list[tuple[int, dict[str, Any]]] = []

    for index, row in enumerate(rows):
        row_number = index + 2
        try:
            data, warnings = validate_row(row, properties)
        except RowError as exc:
            result.errors.append(ImportIssue(row_number, exc.issue_message, exc.field, exc.value))
            result.failed += 1
            continue

        for message in warnings:
            result.warnings.append(ImportIssue(row_number, message))
        if _has_overlap(data):
            result.warnings.append(
                ImportIssue(
                    row_number,
                    f'Booking overlaps with existing booking for "{data["property"].name}"',
                    "dates",
                )
            )
        accepted.append((row_number, data))

    if mode == MODE_VALIDATE:
        return result

    actor = user if getattr(user, "is_authenticated", False) else None
    with transaction.atomic():
        for row_number, data in accepted:
            try:
                with transaction.atomic():
                    booking = Booking.objects.create(
                        status=Booking.Status.CONFIRMED,
                        source=Booking.Source.IMPORT,
                        created_by=actor,
                        updated_by=actor,
                        **data,
                    )
                    log_action(user, "imported_from_csv", booking, {**data, "row": row_number})
            except DatabaseError as exc:
                logger.warning("Availability CSV row %d was not imported: %s", row_number, exc)
                result.errors.append(ImportIssue(row_number, f"Failed to import booking: {exc}"))
                result.failed += 1
                continue
            result.imported += 1

    logger.info(
        "Availability CSV import: %d imported, %d failed, %d warnings",
        result.imported,
        result.failed,
        len(result.warnings),
    )
    return result
