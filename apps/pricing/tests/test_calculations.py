"""Tests for the pure pricing arithmetic."""

from datetime import date
from decimal import Decimal

import pytest

from apps.pricing.calculations import (
    StayRule,
    calculate_commission_amount,
    calculate_public_price,
    check_minimum_stay,
    units_for_price_type,
)
from shared.domain.value_objects import DateRange

SATURDAY = date(2025, 6, 7)


@pytest.mark.parametrize(
    "owner,commission,expected",
    [
        ("100", "20", "125"),
        ("100", "25", "133"),
        ("100", "0", "100"),
        ("250", "10", "278"),
    ],
)
def test_public_price_rounds_to_whole_amount(owner, commission, expected):
    assert calculate_public_price(Decimal(owner), Decimal(commission)) == Decimal(expected)


def test_public_price_rejects_full_commission():
    with pytest.raises(ValueError):
        calculate_public_price(Decimal("100"), Decimal("100"))


def test_commission_amount_is_public_minus_owner():
    assert calculate_commission_amount(Decimal("100"), Decimal("125")) == Decimal("25")


def test_rule_period_limits_by_check_in():
    rule = StayRule(1, "PER_NIGHT", 3, start_date=date(2025, 7, 1), end_date=date(2025, 8, 31))

    assert rule.applies_to(date(2025, 7, 1))
    assert rule.applies_to(date(2025, 8, 31))
    assert not rule.applies_to(date(2025, 6, 30))
    assert StayRule(2, "PER_NIGHT", 3).applies_to(date(2030, 1, 1))


def test_per_night_rule():
    rule = StayRule(1, "PER_NIGHT", 3)

    assert check_minimum_stay(rule, DateRange(date(2025, 6, 1), date(2025, 6, 3))) == "Minimum stay is 3 nights"
    assert check_minimum_stay(rule, DateRange(date(2025, 6, 1), date(2025, 6, 4))) is None


@pytest.mark.parametrize(
    "start,end,minimum,expected",
    [
        (SATURDAY, date(2025, 6, 14), 7, None),
        (SATURDAY, date(2025, 6, 21), 7, None),
        (SATURDAY, date(2025, 6, 15), 7, "Check-in and check-out must be on a Saturday"),
        (date(2025, 6, 8), date(2025, 6, 14), 1, "Check-in and check-out must be on a Saturday"),
        (SATURDAY, date(2025, 6, 14), 14, "Minimum stay is 14 nights"),
    ],
)
def test_weekly_saturday_rule(start, end, minimum, expected):
    rule = StayRule(1, "WEEKLY_SATURDAY_TO_SATURDAY", minimum)

    assert check_minimum_stay(rule, DateRange(start, end)) == expected


def test_weekly_rule_uses_its_own_turnover_day():
    rule = StayRule(1, "WEEKLY_MONDAY_TO_MONDAY", 7)

    assert check_minimum_stay(rule, DateRange(date(2025, 6, 9), date(2025, 6, 16))) is None
    assert check_minimum_stay(rule, DateRange(SATURDAY, date(2025, 6, 14))) == (
        "Check-in and check-out must be on a Monday"
    )


@pytest.mark.parametrize(
    "price_type,nights,units",
    [("PER_STAY", 10, 1), ("FIXED", 10, 1), ("PER_DAY", 10, 10), ("PER_WEEK", 7, 1), ("PER_WEEK", 8, 2)],
)
def test_units_for_price_type(price_type, nights, units):
    assert units_for_price_type(price_type, nights) == units
