"""
Temporal Utility Functions.

This module provides calendar helpers used by recurring payment detection
and budget evaluation: month arithmetic with month-end clamping, month
boundaries for ``YYYY-MM`` keys and next-occurrence prediction.
"""

import re
from calendar import monthrange
from datetime import date, timedelta
from typing import Optional, Tuple

from models.recurring_pattern import RecurrenceFrequency

MONTH_ISO_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")

MONTHS_PER_FREQUENCY = {
    RecurrenceFrequency.MONTHLY: 1,
    RecurrenceFrequency.QUARTERLY: 3,
    RecurrenceFrequency.YEARLY: 12,
}

DAYS_PER_FREQUENCY = {
    RecurrenceFrequency.WEEKLY: 7,
    RecurrenceFrequency.BIWEEKLY: 14,
}


def last_day_of_month(year: int, month: int) -> int:
    return monthrange(year, month)[1]


def is_last_day_of_month(d: date) -> bool:
    return d.day == last_day_of_month(d.year, d.month)


def add_months(d: date, months: int) -> date:
    """
    Add calendar months to a date without overflowing into the next month.

    If the source day does not exist in the target month it is clamped to
    the target month's last day. A source date that is itself the last day
    of its month maps to the last day of the target month, so chains stay
    anchored at month end:

        2025-01-31 -> 2025-02-28 -> 2025-03-31

    Args:
        d: Source date
        months: Number of months to add (may be negative)

    Returns:
        The shifted date
    """
    month_index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    target_last_day = last_day_of_month(year, month)
    if is_last_day_of_month(d):
        return date(year, month, target_last_day)
    return date(year, month, min(d.day, target_last_day))


def next_occurrence(
    last_date: date,
    frequency: RecurrenceFrequency,
    custom_interval_days: Optional[float] = None
) -> date:
    """
    Predict the next payment date for a cadence.

    Args:
        last_date: Date of the most recent payment
        frequency: Detected cadence
        custom_interval_days: Observed interval used for CUSTOM cadences

    Returns:
        Predicted date of the next payment (always after ``last_date``)
    """
    if frequency in DAYS_PER_FREQUENCY:
        return last_date + timedelta(days=DAYS_PER_FREQUENCY[frequency])
    if frequency in MONTHS_PER_FREQUENCY:
        return add_months(last_date, MONTHS_PER_FREQUENCY[frequency])

    # Custom cadence falls back to monthly when no interval is known
    if not custom_interval_days:
        return add_months(last_date, 1)
    return last_date + timedelta(days=max(1, int(round(custom_interval_days))))


def parse_month_iso(month_iso: str) -> Tuple[int, int]:
    """
    Parse a ``YYYY-MM`` month key.

    Raises:
        ValueError: If the string is not a valid month key
    """
    match = MONTH_ISO_PATTERN.match(month_iso or "")
    if not match:
        raise ValueError(f"Invalid month '{month_iso}', expected YYYY-MM")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month '{month_iso}', month must be 01-12")
    return year, month


def month_bounds(month_iso: str) -> Tuple[date, date]:
    """Return the inclusive first and last day of a ``YYYY-MM`` month."""
    year, month = parse_month_iso(month_iso)
    return date(year, month, 1), date(year, month, last_day_of_month(year, month))


def month_iso(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def days_between(start: date, end: date) -> int:
    return (end - start).days
