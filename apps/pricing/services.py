"""Domain services for pricing.

Every change to a price range, minimum stay rule or operational cost
stamps ``PropertyPricing.last_pricing_update`` and is written to the
audit log.
"""

from __future__ import annotations

import csv
import io
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Mapping

from django.db import DatabaseError, transaction  # type: ignore
from django.db.models import Model  # type: ignore
from django.utils import timezone  # type: ignore

from apps.audit.models import SensitiveDataAccess
from apps.audit.services import diff_fields, log_action, log_sensitive_access
from apps.properties.models import Property
from shared.domain.base import DomainError
from shared.domain.value_objects import DateRange, Money

from .calculations import StayRule, calculate_public_price, check_minimum_stay, units_for_price_type
from .models import MinimumStayRule, OperationalCost, PriceRange, PropertyPricing

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "EUR"

PRICE_RANGE_EXPORT_COLUMNS = (
    "Property ID",
    "Property Name",
    "Period Name",
    "Start Date",
    "End Date",
    "Owner Nightly Rate",
    "Owner Weekly Rate",
    "Commission Rate",
    "Validated",
    "Created At",
)


class PricingConflictError(DomainError):
    default_message = "Date range conflicts with existing price range"


def touch_pricing(property_obj: Property) -> PropertyPricing:
    """Stamp the pricing record of the property, creating it when missing."""
    pricing, _ = PropertyPricing.objects.get_or_create(property=property_obj)
    pricing.last_pricing_update = timezone.now()
    pricing.save(update_fields=["last_pricing_update", "updated_at"])
    return pricing


def upsert_property_pricing(property_obj: Property, data: Mapping[str, Any], user=None) -> PropertyPricing:
    with transaction.atomic():
        pricing, created = PropertyPricing.objects.get_or_create(property=property_obj)
        changes = diff_fields(pricing, data)
        for field, value in data.items():
            setattr(pricing, field, value)
        pricing.last_pricing_update = timezone.now()
        pricing.save()
        log_action(user, "create_property_pricing" if created else "update_property_pricing", pricing, changes)
        log_sensitive_access(
            user,
            SensitiveDataAccess.Action.EDIT,
            SensitiveDataAccess.DataType.FINANCIAL_DATA,
            property_obj,
            {"section": "pricing"},
        )
    return pricing


def get_property_pricing(property_obj: Property, user=None) -> dict[str, Any]:
    """Everything priced on a property. Reading it is recorded as financial data access."""
    overview = {
        "pricing": PropertyPricing.objects.filter(property=property_obj).first(),
        "price_ranges": list(PriceRange.objects.filter(property=property_obj).order_by("start_date", "id")),
        "minimum_stay_rules": list(MinimumStayRule.objects.filter(property=property_obj).order_by("start_date", "id")),
        "operational_costs": list(OperationalCost.objects.filter(property=property_obj).order_by("created_at", "id")),
    }
    log_sensitive_access(
        user,
        SensitiveDataAccess.Action.VIEW,
        SensitiveDataAccess.DataType.FINANCIAL_DATA,
        property_obj,
        {"section": "pricing"},
    )
    return overview


# ---------------------------------------------------------------------------
# Price ranges
# ---------------------------------------------------------------------------


def conflicting_price_ranges(property_obj, start: date, end: date, *, exclude_id=None):
    """Price ranges sharing at least one day with ``[start, end]``, both ends inclusive."""
    qs = PriceRange.objects.filter(property=property_obj, start_date__lte=end, end_date__gte=start)
    if exclude_id is not None:
        qs = qs.exclude(pk=exclude_id)
    return qs.order_by("start_date", "id")


def validate_date_range_overlap(property_obj, start: date, end: date, exclude_id=None) -> bool:
    """True when no other price range of the property touches the period."""
    return not conflicting_price_ranges(property_obj, start, end, exclude_id=exclude_id).exists()


def _derive_public_rates(price_range: PriceRange) -> None:
    price_range.public_nightly_rate = calculate_public_price(
        price_range.owner_nightly_rate, price_range.commission_rate
    )
    price_range.public_weekly_rate = (
        calculate_public_price(price_range.owner_weekly_rate, price_range.commission_rate)
        if price_range.owner_weekly_rate
        else None
    )


@transaction.atomic
def create_price_range(property_obj: Property, data: Mapping[str, Any], user=None) -> PriceRange:
    if not validate_date_range_overlap(property_obj, data["start_date"], data["end_date"]):
        raise PricingConflictError()
    price_range = PriceRange(property=property_obj, **data)
    _derive_public_rates(price_range)
    price_range.save()
    touch_pricing(property_obj)
    log_action(user, "create_price_range", price_range, data)
    logger.info("Price range %s created on property %s", price_range.pk, property_obj.pk)
    return price_range


@transaction.atomic
def update_price_range(price_range: PriceRange, data: Mapping[str, Any], user=None) -> PriceRange:
    start = data.get("start_date", price_range.start_date)
    end = data.get("end_date", price_range.end_date)
    if not validate_date_range_overlap(price_range.property, start, end, exclude_id=price_range.pk):
        raise PricingConflictError()

    changes = diff_fields(price_range, data)
    for field, value in data.items():
        setattr(price_range, field, value)
    if {"owner_nightly_rate", "owner_weekly_rate", "commission_rate"} & set(data):
        _derive_public_rates(price_range)
    price_range.save()
    touch_pricing(price_range.property)
    log_action(user, "update_price_range", price_range, changes)
    return price_range


# ---------------------------------------------------------------------------
# Rules, costs and deletions
# ---------------------------------------------------------------------------


def _entity_action(instance: Model) -> str:
    names = {
        PriceRange: "price_range",
        MinimumStayRule: "minimum_stay_rule",
        OperationalCost: "operational_cost",
    }
    return names[type(instance)]


@transaction.atomic
def save_pricing_item(instance: Model, data: Mapping[str, Any], user=None) -> Model:
    """Create or update a minimum stay rule or an operational cost."""
    created = instance.pk is None
    changes = dict(data) if created else diff_fields(instance, data)
    for field, value in data.items():
        setattr(instance, field, value)
    instance.save()
    touch_pricing(instance.property)
    verb = "create" if created else "update"
    log_action(user, f"{verb}_{_entity_action(instance)}", instance, changes)
    return instance


@transaction.atomic
def delete_pricing_item(instance: Model, user=None) -> None:
    property_obj = instance.property
    entity_id = instance.pk
    instance.delete()
    touch_pricing(property_obj)
    log_action(
        user,
        f"delete_{_entity_action(instance)}",
        changes={"property": property_obj.pk},
        entity_type=type(instance).__name__,
        entity_id=entity_id,
    )


# ---------------------------------------------------------------------------
# Stay evaluation
# ---------------------------------------------------------------------------


def evaluate_minimum_stay(property_obj, start: date, end: date) -> list[dict[str, Any]]:
    """Minimum stay rules broken by a stay from ``start`` to ``end``."""
    stay = DateRange(start, end)
    violations = []
    for rule in MinimumStayRule.objects.filter(property=property_obj).order_by("start_date", "id"):
        stay_rule = StayRule(
            id=rule.pk,
            booking_condition=rule.booking_condition,
            minimum_nights=rule.minimum_nights,
            start_date=rule.start_date,
            end_date=rule.end_date,
        )
        if not stay_rule.applies_to(start):
            continue
        message = check_minimum_stay(stay_rule, stay)
        if message:
            violations.append(
                {
                    "rule_id": rule.pk,
                    "booking_condition": rule.booking_condition,
                    "minimum_nights": rule.minimum_nights,
                    "message": message,
                }
            )
    return violations


def quote_stay(property_obj, start: date, end: date) -> dict[str, Any]:
    """Public price of a stay: nightly rates per night plus operational costs."""
    stay = DateRange(start, end)
    pricing = PropertyPricing.objects.filter(property=property_obj).first()
    currency = pricing.currency if pricing else DEFAULT_CURRENCY
    ranges = list(conflicting_price_ranges(property_obj, start, end))

    accommodation = Money.zero(currency)
    unpriced = []
    for night in stay.nights():
        price_range = next((r for r in ranges if r.covers(night)), None)
        if price_range is None:
            unpriced.append(night)
            continue
        accommodation = accommodation + Money(price_range.public_nightly_rate, currency)

    nights = len(stay)
    costs = []
    total = accommodation
    for cost in OperationalCost.objects.filter(property=property_obj).order_by("created_at", "id"):
        if cost.public_price is None:
            continue
        units = units_for_price_type(cost.price_type, nights)
        amount = Money(cost.public_price, currency) * units
        total = total + amount
        costs.append(
            {
                "id": cost.pk,
                "cost_type": cost.cost_type,
                "price_type": cost.price_type,
                "units": units,
                "amount": amount.quantize().amount,
            }
        )

    return {
        "nights": nights,
        "accommodation": accommodation.quantize().amount,
        "operational_costs": costs,
        "total": total.quantize().amount,
        "currency": currency,
        "unpriced_dates": unpriced,
    }


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------


def import_price_ranges(
    rows: list[Mapping[str, Any]],
    *,
    skip_conflicts: bool = False,
    update_existing: bool = False,
    user=None,
) -> dict[str, Any]:
    """Import price ranges across properties.

    A row overlapping an existing range is skipped with ``skip_conflicts``,
    otherwise updates it with ``update_existing`` and is reported as an
    error when neither is set.
    """
    from apps.bookings.serializers import flatten_errors

    from .serializers import PriceRangeImportRowSerializer

    imported = skipped = updated = 0
    errors: list[dict[str, Any]] = []
    touched: set[int] = set()
    properties: dict[int, Property | None] = {}

    for index, raw in enumerate(rows, start=1):
        serializer = PriceRangeImportRowSerializer(data=raw)
        if not serializer.is_valid():
            errors.append({"row": index, "error": flatten_errors(serializer.errors)})
            continue
        row = serializer.validated_data
        if row["property_id"] not in properties:
            properties[row["property_id"]] = Property.objects.filter(pk=row["property_id"]).first()
        property_obj = properties[row["property_id"]]
        if property_obj is None:
            errors.append({"row": index, "error": f"Property with ID '{row['property_id']}' not found"})
            continue

        data = {
            "name": row["period_name"],
            "start_date": row["start_date"],
            "end_date": row["end_date"],
            "owner_nightly_rate": row["owner_nightly_rate"],
            "owner_weekly_rate": row.get("owner_weekly_rate"),
            "commission_rate": row.get("commission_rate", Decimal("25")),
            "is_validated": row.get("is_validated", False),
        }
        try:
            with transaction.atomic():
                overlapping = conflicting_price_ranges(property_obj, data["start_date"], data["end_date"]).first()
                if overlapping is not None:
                    if skip_conflicts:
                        skipped += 1
                        continue
                    elif update_existing:
                        for field, value in data.items():
                            setattr(overlapping, field, value)
                        _derive_public_rates(overlapping)
                        overlapping.save()
                        updated += 1
                    else:
                        errors.append({"row": index, "error": PricingConflictError.default_message})
                        continue
                else:
                    price_range = PriceRange(property=property_obj, **data)
                    _derive_public_rates(price_range)
                    price_range.save()
                    imported += 1
        except DatabaseError as exc:
            logger.warning("Price range import failed on row %d: %s", index, exc)
            errors.append({"row": index, "error": str(exc)})
            continue
        touched.add(property_obj.pk)

    for property_id in touched:
        touch_pricing(properties[property_id])

    summary = {"imported": imported, "skipped": skipped, "updated": updated, "errors": errors}
    log_action(
        user,
        "import_price_ranges",
        changes={**summary, "errors": len(errors)},
        entity_type="PriceRange",
        entity_id="bulk_import",
    )
    logger.info(
        "Price range import: %d created, %d updated, %d skipped, %d errors",
        imported,
        updated,
        skipped,
        len(errors),
    )
    return summary


def _import_pricing_items(rows, serializer_class, action: str, user=None) -> dict[str, Any]:
    """Create minimum stay rules or operational costs from raw rows, one savepoint per row."""
    from apps.bookings.serializers import flatten_errors

    model = serializer_class.Meta.model
    imported = 0
    errors: list[dict[str, Any]] = []
    properties: dict[int, Property | None] = {}

    for index, raw in enumerate(rows, start=1):
        serializer = serializer_class(data=raw)
        if not serializer.is_valid():
            errors.append({"row": index, "error": flatten_errors(serializer.errors)})
            continue
        data = dict(serializer.validated_data)
        property_id = data.pop("property_id")
        if property_id not in properties:
            properties[property_id] = Property.objects.filter(pk=property_id).first()
        property_obj = properties[property_id]
        if property_obj is None:
            errors.append({"row": index, "error": f"Property with ID '{property_id}' not found"})
            continue
        try:
            with transaction.atomic():
                model.objects.create(property=property_obj, **data)
        except DatabaseError as exc:
            logger.warning("%s import failed on row %d: %s", model.__name__, index, exc)
            errors.append({"row": index, "error": str(exc)})
            continue
        imported += 1

    for property_obj in properties.values():
        if property_obj is not None:
            touch_pricing(property_obj)

    summary = {"imported": imported, "skipped": 0, "updated": 0, "errors": errors}
    log_action(
        user,
        action,
        changes={**summary, "errors": len(errors)},
        entity_type=model.__name__,
        entity_id="bulk_import",
    )
    logger.info("%s import: %d created, %d errors", model.__name__, imported, len(errors))
    return summary


def import_operational_costs(rows: list[Mapping[str, Any]], user=None) -> dict[str, Any]:
    from .serializers import OperationalCostImportRowSerializer

    return _import_pricing_items(rows, OperationalCostImportRowSerializer, "import_operational_costs", user)


def import_minimum_stay_rules(rows: list[Mapping[str, Any]], user=None) -> dict[str, Any]:
    from .serializers import MinimumStayRuleImportRowSerializer

    return _import_pricing_items(rows, MinimumStayRuleImportRowSerializer, "import_minimum_stay_rules", user)


# ---------------------------------------------------------------------------
# CSV export
# ---------------------------------------------------------------------------


def price_ranges_for_export(property_ids=None, start_date: date | None = None, end_date: date | None = None):
    """Price ranges of the given properties touching ``[start_date, end_date]``, both bounds optional."""
    qs = PriceRange.objects.select_related("property")
    if property_ids:
        qs = qs.filter(property_id__in=property_ids)
    if start_date:
        qs = qs.filter(end_date__gte=start_date)
    if end_date:
        qs = qs.filter(start_date__lte=end_date)
    return qs.order_by("property_id", "start_date", "id")


def price_ranges_export_filename(today=None) -> str:
    today = today or timezone.localdate()
    return f"price_ranges_export_{today.isoformat()}.csv"


def export_price_ranges_csv(queryset, user=None) -> str:
    """Render price ranges as CSV with every cell quoted. Exporting is recorded as financial data access."""
    price_ranges = list(queryset)
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(PRICE_RANGE_EXPORT_COLUMNS)
    for price_range in price_ranges:
        writer.writerow(
            [
                price_range.property_id,
                price_range.property.name,
                price_range.name,
                price_range.start_date.isoformat(),
                price_range.end_date.isoformat(),
                price_range.owner_nightly_rate,
                "" if price_range.owner_weekly_rate is None else price_range.owner_weekly_rate,
                price_range.commission_rate,
                "true" if price_range.is_validated else "false",
                timezone.localdate(price_range.created_at).isoformat(),
            ]
        )

    log_action(
        user,
        "export_price_ranges",
        changes={"count": len(price_ranges)},
        entity_type="PriceRange",
        entity_id="bulk_export",
    )
    log_sensitive_access(
        user,
        SensitiveDataAccess.Action.EXPORT,
        SensitiveDataAccess.DataType.FINANCIAL_DATA,
        metadata={"section": "price_ranges", "count": len(price_ranges)},
    )
    logger.info("Exported %d price ranges", len(price_ranges))
    return buffer.getvalue()
