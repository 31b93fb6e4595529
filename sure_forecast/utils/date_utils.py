"""Date manipulation utilities"""

import calendar
from datetime import date, timedelta
from typing import List, TypeVar

D = TypeVar("D", bound=date)


def generate_date_range(start: date, end: date, step_days: int = 1) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days
    if days < 0:
        return []
    return [start + timedelta(days=i) for i in range(0, days + 1, step_days)]


def add_months(dt: D, months: int) -> D:
    """
    Return ``dt`` shifted by a number of calendar months.

    The day of month is clamped to the last valid day (Jan 31 + 1 month is
    Feb 28 or 29). Works for both ``date`` and ``datetime`` values.
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def end_of_month(dt: date) -> date:
    return date(dt.year, dt.month, calendar.monthrange(dt.year, dt.month)[1])


def end_of_quarter(dt: date) -> date:
    last_month = ((dt.month - 1) // 3 + 1) * 3
    return end_of_month(date(dt.year, last_month, 1))


def end_of_year(dt: date) -> date:
    return date(dt.year, 12, 31)


def months_between(start: date, end: date) -> int:
    """Whole calendar months from start to end, ignoring the day of month"""
    return (end.year - start.year) * 12 + (end.month - start.month)
