from datetime import time
from decimal import Decimal

import pytest

from src.time_tracker.time_tracker.common.hours import (
    calculate_and_round_hours,
    calculate_hours,
    format_rounded_time,
    get_total_hours,
    round_to_nearest_quarter,
)


def test_calculate_hours_exact_minutes():
    assert calculate_hours("09:00", "17:30") == Decimal("8.50")


def test_calculate_hours_accepts_time_objects():
    assert calculate_hours(time(9, 0), time(9, 20)) == Decimal("0.33")


def test_calculate_hours_missing_input_is_zero():
    assert calculate_hours("", "17:00") == Decimal("0.00")
    assert calculate_hours("09:00", None) == Decimal("0.00")


@pytest.mark.parametrize(
    "end, expected",
    [("09:07", "0.00"), ("09:08", "0.25"), ("09:52", "0.75"), ("09:53", "1.00"), ("17:00", "8.00")],
)
def test_calculate_and_round_hours_rounds_to_quarter(end, expected):
    assert calculate_and_round_hours("09:00", end) == Decimal(expected)


def test_round_to_nearest_quarter_half_goes_up():
    # 7.5 minutes is exactly half a quarter
    assert round_to_nearest_quarter(7) == Decimal(0)
    assert round_to_nearest_quarter(8) == Decimal("0.25")


def test_format_rounded_time():
    assert format_rounded_time(480) == "8 hrs"
    assert format_rounded_time(493) == "8 hrs 15 min"


def test_get_total_hours():
    assert get_total_hours([]) == Decimal("0.00")
    assert str(get_total_hours([]))  == "0.00"
    assert get_total_hours([1.5, 2.25]) == Decimal("3.75")
    assert get_total_hours([{"total_hours": "1.25"}, {"total_hours": None}]) == Decimal("1.25")
