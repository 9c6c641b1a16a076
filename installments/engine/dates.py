"""Date helpers for installment schedules."""

import calendar
from datetime import date, datetime


def as_date(now: date | datetime) -> date:
    """Return the calendar day of an injected ``now``."""
    if isinstance(now, datetime):
        return now.date()
    return now


def add_months(start: date, months: int) -> date:
    """Add calendar months, clamping the day to the end of the target month.

    >>> add_months(date(2024, 1, 31), 1)
    datetime.date(2024, 2, 29)
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def days_between(later: date | datetime, earlier: date | datetime) -> int:
    """Whole days from ``earlier`` to ``later`` (negative if reversed)."""
    return (as_date(later) - as_date(earlier)).days
