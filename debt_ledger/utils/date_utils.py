"""Date manipulation utilities"""

import calendar
from datetime import date, datetime, time, timezone
from typing import Tuple


def add_months(from_date: date, months: int) -> date:
    """
    Return the date `months` calendar months after from_date.

    The day of month is clamped to the last day of the target month:
    Jan 31 + 1 month -> Feb 28 (or Feb 29 in leap years).
    """
    year = from_date.year + (from_date.month - 1 + months) // 12
    month = (from_date.month - 1 + months) % 12 + 1
    day = min(from_date.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def same_month(a: date, b: date) -> bool:
    """True when both dates fall in the same calendar month and year"""
    return a.year == b.year and a.month == b.month


def month_bounds(reference: date) -> Tuple[datetime, datetime]:
    """First and last instant of the reference date's month"""
    last_day = calendar.monthrange(reference.year, reference.month)[1]
    start = datetime.combine(date(reference.year, reference.month, 1), time.min)
    end = datetime.combine(date(reference.year, reference.month, last_day), time.max)
    return start, end


def utc_now() -> datetime:
    """Current time as naive UTC, the form timestamps are stored in"""
    return datetime.now(timezone.utc).replace(tzinfo=None)
