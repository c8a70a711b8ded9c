"""
Reminders feature: next-occurrence computation for recurring reminders.
"""

import calendar
from datetime import datetime, timedelta
from enum import Enum


class Recurrence(str, Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


FIXED_STEPS = {
    Recurrence.DAILY: timedelta(days=1),
    Recurrence.WEEKLY: timedelta(days=7),
    Recurrence.BIWEEKLY: timedelta(days=14),
}


def add_months(value: datetime, months: int) -> datetime:
    """Shift by calendar months, clamping the day to the target month's end.

    Jan 31 + 1 month is Feb 28 (or 29), Feb 29 + 12 months is Feb 28.
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def compute_next_occurrence(due: datetime, pattern: str | Recurrence | None) -> datetime | None:
    """Due date of the successor of a reminder due at `due`.

    Returns None for `none` and for anything that is not a known pattern,
    in which case no successor is created.
    """
    try:
        recurrence = Recurrence(pattern)
    except ValueError:
        return None

    if recurrence in FIXED_STEPS:
        return due + FIXED_STEPS[recurrence]
    if recurrence == Recurrence.MONTHLY:
        return add_months(due, 1)
    if recurrence == Recurrence.YEARLY:
        return add_months(due, 12)
    return None
