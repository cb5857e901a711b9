from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_optional_date(value: Optional[str], field_name: str) -> Optional[date]:
    v = (value or "").strip()
    if not v:
        return None
    try:
        return parse_iso_date(v)
    except ValueError:
        raise ValidationError(f"{field_name} is not a valid date (YYYY-MM-DD)")


def parse_clock_time(value: Optional[str], field_name: str) -> time:
    v = (value or "").strip()
    if not v:
        raise ValidationError(f"{field_name} is required")
    try:
        return datetime.strptime(v[:5], "%H:%M").time()
    except ValueError:
        raise ValidationError(f"{field_name} is not a valid time (HH:MM)")


def format_clock_time(value: time) -> str:
    return value.strftime("%H:%M")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def today_local() -> date:
    return now_local().date()
