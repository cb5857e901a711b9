"""Billable hour arithmetic for time entries.

All results are ``Decimal`` values quantized to two places, so ``str()`` of a
result reads like the figure shown to the user ("8.50", "0.00").
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from ..core.constants import QUARTER_HOUR_MINUTES

TWO_PLACES = Decimal("0.01")


def _minutes_of_day(value) -> int:
    if hasattr(value, "hour") and hasattr(value, "minute"):
        return int(value.hour) * 60 + int(value.minute)
    hours, minutes = str(value).split(":")[:2]
    return int(hours) * 60 + int(minutes)


def elapsed_minutes(start, end) -> int:
    """Minutes between two same-day clock times (``HH:MM`` strings or ``time``)."""
    return _minutes_of_day(end) - _minutes_of_day(start)


def calculate_hours(start, end) -> Decimal:
    if not start or not end:
        return Decimal(0).quantize(TWO_PLACES)
    return (Decimal(elapsed_minutes(start, end)) / Decimal(60)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def round_to_nearest_quarter(total_minutes: int) -> Decimal:
    """Round minutes to the closest quarter hour and return hours."""
    quarters = (Decimal(total_minutes) / Decimal(QUARTER_HOUR_MINUTES)).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return quarters * QUARTER_HOUR_MINUTES / Decimal(60)


def calculate_and_round_hours(start, end) -> Decimal:
    if not start or not end:
        return Decimal(0).quantize(TWO_PLACES)
    return round_to_nearest_quarter(elapsed_minutes(start, end)).quantize(TWO_PLACES)


def format_rounded_time(total_minutes: int) -> str:
    rounded = int(
        (Decimal(total_minutes) / Decimal(QUARTER_HOUR_MINUTES)).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    ) * QUARTER_HOUR_MINUTES
    hours, minutes = divmod(rounded, 60)
    if minutes == 0:
        return f"{hours} hrs"
    return f"{hours} hrs {minutes} min"


def _hours_of(entry) -> Decimal:
    value: Optional[object]
    if isinstance(entry, dict):
        value = entry.get("total_hours")
    else:
        value = getattr(entry, "total_hours", entry)
    return Decimal(str(value or 0))


def get_total_hours(entries: Iterable) -> Decimal:
    """Sum ``total_hours`` over entries (objects, dicts or bare numbers)."""
    total = sum((_hours_of(e) for e in entries), Decimal(0))
    return total.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
