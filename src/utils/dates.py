"""Calendar helpers for month-based windows."""

import calendar
from datetime import date


def shift_months(value: date, months: int) -> date:
    """Move ``value`` by whole months, clamping the day to the target month's length."""
    month_index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def month_start(value: date) -> date:
    return value.replace(day=1)


def month_end(value: date) -> date:
    return value.replace(day=calendar.monthrange(value.year, value.month)[1])


def month_label(value: date) -> str:
    """Short bucket label such as ``Mar 24``."""
    return value.strftime("%b %y")
