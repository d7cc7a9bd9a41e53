"""Billing period arithmetic"""

from datetime import datetime, timezone

import pytest

from app.utils.billing_period import add_billing_period, add_months, normalize_billing_period

START = datetime(2026, 1, 31, 9, 30, tzinfo=timezone.utc)


@pytest.mark.parametrize("raw,expected", [
    ("monthly", "monthly"),
    ("Month", "monthly"),
    ("annually", "annual"),
    ("yearly", "annual"),
    ("quarterly", "quarterly"),
    ("week", "weekly"),
    (None, "monthly"),
    ("fortnightly", "monthly"),
])
def test_normalize(raw, expected):
    assert normalize_billing_period(raw) == expected


def test_month_end_is_clamped():
    assert add_months(START, 1) == datetime(2026, 2, 28, 9, 30, tzinfo=timezone.utc)


def test_leap_year():
    assert add_months(datetime(2028, 1, 31), 1) == datetime(2028, 2, 29)


@pytest.mark.parametrize("period,expected", [
    ("weekly", datetime(2026, 2, 7, 9, 30, tzinfo=timezone.utc)),
    ("monthly", datetime(2026, 2, 28, 9, 30, tzinfo=timezone.utc)),
    ("quarterly", datetime(2026, 4, 30, 9, 30, tzinfo=timezone.utc)),
    ("annual", datetime(2027, 1, 31, 9, 30, tzinfo=timezone.utc)),
])
def test_add_billing_period(period, expected):
    assert add_billing_period(START, period) == expected


def test_year_rollover():
    assert add_months(datetime(2026, 11, 15), 3) == datetime(2027, 2, 15)
