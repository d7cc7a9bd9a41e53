"""Billing period arithmetic for subscription expiry and renewal dates"""
from datetime import datetime, timedelta
from typing import Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_BILLING_PERIOD = "monthly"

# Aliases seen in package pricing tiers and transaction metadata
_PERIOD_ALIASES = {
    "weekly": "weekly",
    "week": "weekly",
    "monthly": "monthly",
    "month": "monthly",
    "quarterly": "quarterly",
    "quarter": "quarterly",
    "annual": "annual",
    "annually": "annual",
    "yearly": "annual",
    "year": "annual",
}

_PERIOD_MONTHS = {
    "monthly": 1,
    "quarterly": 3,
    "annual": 12,
}


def normalize_billing_period(period: Optional[str]) -> str:
    """
    Map a stored billing period onto weekly / monthly / quarterly / annual.

    Unknown or empty values fall back to monthly.
    """
    if not period:
        return DEFAULT_BILLING_PERIOD

    normalized = _PERIOD_ALIASES.get(period.strip().lower())
    if normalized is None:
        logger.warning(f"Unknown billing period '{period}', falling back to {DEFAULT_BILLING_PERIOD}")
        return DEFAULT_BILLING_PERIOD
    return normalized


def add_months(current_time: datetime, months: int) -> datetime:
    """
    Advance by whole calendar months.

    A day that does not exist in the target month (e.g. 1/31 -> 2/31) is
    clamped to that month's last day.
    """
    month_index = current_time.month - 1 + months
    year = current_time.year + month_index // 12
    month = month_index % 12 + 1

    day = current_time.day
    while True:
        try:
            return current_time.replace(year=year, month=month, day=day)
        except ValueError:
            day -= 1
            if day < 1:
                raise ValueError(f"Failed to add {months} months to {current_time}")


def add_billing_period(current_time: datetime, period: Optional[str]) -> datetime:
    """
    Compute the end of one billing period starting at current_time.

    Args:
        current_time: Start of the period
        period: weekly (+7 days), monthly (+1 month), quarterly (+3 months)
            or annual/annually/yearly (+1 year)

    Returns:
        The period end
    """
    normalized = normalize_billing_period(period)

    if normalized == "weekly":
        return current_time + timedelta(days=7)

    return add_months(current_time, _PERIOD_MONTHS[normalized])
