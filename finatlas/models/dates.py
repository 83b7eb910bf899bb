"""
Calendar utilities for the projection engine.

All dates cross the engine boundary as ISO 8601 strings (YYYY-MM-DD) and are
handled internally as ``datetime.date`` values, which carry no time of day.
"""

import calendar
from datetime import date
from typing import Union

DateLike = Union[date, str]


def parse_iso(value: DateLike) -> date:
    """Parse an ISO date string (YYYY-MM-DD) into a date.

    Args:
        value: ISO date string, or a date which is returned unchanged

    Returns:
        Parsed date
    """
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def format_iso(value: date) -> str:
    """Format a date as YYYY-MM-DD."""
    return value.isoformat()


def add_months(value: DateLike, months: int) -> date:
    """
    Add calendar months to a date, clamping to the end of shorter months.

    Jan 31 + 1 month is Feb 28 (or Feb 29 in a leap year).

    Args:
        value: Starting date
        months: Number of months to add (may be negative)

    Returns:
        Shifted date
    """
    start = parse_iso(value)
    month_index = start.year * 12 + (start.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(start.day, last_day))


def diff_months(start: DateLike, end: DateLike) -> int:
    """Signed number of calendar months from start to end (day ignored)."""
    a = parse_iso(start)
    b = parse_iso(end)
    return (b.year - a.year) * 12 + (b.month - a.month)


def start_of_month(value: DateLike) -> date:
    """First day of the month containing the date."""
    d = parse_iso(value)
    return d.replace(day=1)


def is_before(a: DateLike, b: DateLike) -> bool:
    return parse_iso(a) < parse_iso(b)


def is_after(a: DateLike, b: DateLike) -> bool:
    return parse_iso(a) > parse_iso(b)


def is_same_month(a: DateLike, b: DateLike) -> bool:
    """Check whether two dates fall in the same calendar month and year."""
    x = parse_iso(a)
    y = parse_iso(b)
    return x.year == y.year and x.month == y.month


def month_key(value: DateLike) -> str:
    """Month key (YYYY-MM) used to index monthly tables."""
    d = parse_iso(value)
    return f"{d.year:04d}-{d.month:02d}"


def parse_month_key(key: str) -> date:
    """Parse a YYYY-MM key into the first day of that month."""
    year, month = key.split("-")[:2]
    return date(int(year), int(month), 1)
