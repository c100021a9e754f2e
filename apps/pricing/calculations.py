"""
Pricing arithmetic

Pure functions, free of the ORM:
- calculate_public_price / calculate_commission_amount: owner to public rates
- check_minimum_stay: why a stay breaks a minimum stay rule, if it does
- units_for_price_type: how many times an operational cost is charged
"""

import math
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from shared.domain.value_objects import DateRange

WHOLE_UNITS = Decimal('1')
DAYS_PER_WEEK = 7

PER_NIGHT = 'PER_NIGHT'
WEEKLY_TURNOVER_DAYS = {
    'WEEKLY_SATURDAY_TO_SATURDAY': (5, 'Saturday'),
    'WEEKLY_SUNDAY_TO_SUNDAY': (6, 'Sunday'),
    'WEEKLY_MONDAY_TO_MONDAY': (0, 'Monday'),
}


def calculate_public_price(owner_price: Decimal, commission_rate: Decimal) -> Decimal:
    """
    Public price whose commission share equals ``commission_rate`` percent

    Rounded to a whole amount, half up.
    """
    owner_price = Decimal(owner_price)
    commission_rate = Decimal(commission_rate)
    if commission_rate >= 100:
        raise ValueError("Commission must be below 100%")
    public = owner_price / (1 - commission_rate / Decimal('100'))
    return public.quantize(WHOLE_UNITS, rounding=ROUND_HALF_UP)


def calculate_commission_amount(owner_price: Decimal, public_price: Decimal) -> Decimal:
    return Decimal(public_price) - Decimal(owner_price)


@dataclass(frozen=True)
class StayRule:
    id: int
    booking_condition: str
    minimum_nights: int
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    def applies_to(self, check_in: date) -> bool:
        """Rules without a period apply all year; otherwise the check-in must fall inside it."""
        if self.start_date and check_in < self.start_date:
            return False
        if self.end_date and check_in > self.end_date:
            return False
        return True


def check_minimum_stay(rule: StayRule, stay: DateRange) -> Optional[str]:
    """Return the violation message for ``stay``, or None when the rule is met."""
    nights = len(stay)
    too_short = f"Minimum stay is {rule.minimum_nights} nights"

    if rule.booking_condition == PER_NIGHT:
        return too_short if nights < rule.minimum_nights else None

    weekday, day_name = WEEKLY_TURNOVER_DAYS[rule.booking_condition]
    if stay.start_date.weekday() != weekday or stay.end_date.weekday() != weekday:
        return f"Check-in and check-out must be on a {day_name}"
    if nights % DAYS_PER_WEEK:
        return "Weekly bookings must be a multiple of 7 nights"
    if nights < rule.minimum_nights:
        return too_short
    return None


def units_for_price_type(price_type: str, nights: int) -> int:
    if price_type == 'PER_DAY':
        return nights
    if price_type == 'PER_WEEK':
        return math.ceil(nights / DAYS_PER_WEEK)
    return 1
