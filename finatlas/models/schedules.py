"""
Frequency normalization and activity schedules.

Amounts are entered at their natural frequency and converted to a monthly
equivalent before they enter the projection loop.
"""

from typing import Dict, List, Optional

from .dates import (
    DateLike,
    add_months,
    is_after,
    is_before,
    is_same_month,
    month_key,
    parse_iso,
    start_of_month,
)
from .numeric import round_money
from .scenario import Frequency

# Occurrences per year; ONE_TIME is handled separately.
OCCURRENCES_PER_YEAR: Dict[Frequency, int] = {
    Frequency.MONTHLY: 12,
    Frequency.BIWEEKLY: 26,
    Frequency.WEEKLY: 52,
    Frequency.ANNUAL: 1,
}


def normalize_to_monthly(amount: float, frequency: Frequency) -> float:
    """
    Convert an amount paid at ``frequency`` into its monthly equivalent.

    ONE_TIME amounts are returned unchanged; they are applied once, in full,
    in their start month.

    Args:
        amount: Amount per occurrence
        frequency: Occurrence frequency

    Returns:
        Monthly equivalent rounded to cents
    """
    if frequency == Frequency.ONE_TIME:
        return amount
    return round_money(amount * OCCURRENCES_PER_YEAR[frequency] / 12)


def monthly_to_frequency(monthly_amount: float, frequency: Frequency) -> float:
    """Convert a monthly amount back into an amount per occurrence."""
    if frequency == Frequency.ONE_TIME:
        return monthly_amount
    return round_money(monthly_amount * 12 / OCCURRENCES_PER_YEAR[frequency])


def is_date_in_period(
    when: DateLike, start: DateLike, end: Optional[DateLike] = None
) -> bool:
    """
    Check whether a date falls inside an active period.

    The start bound is compared at the start of its month, so an item starting
    on the 15th is active for the whole month. The end bound is inclusive and
    the period is open-ended when ``end`` is None.
    """
    if is_before(when, start_of_month(start)):
        return False
    if end is not None and is_after(when, end):
        return False
    return True


def is_active_in_month(
    when: DateLike,
    start: DateLike,
    end: Optional[DateLike],
    frequency: Frequency,
) -> bool:
    """Check whether an item contributes to the month containing ``when``.

    ONE_TIME items are active only in the month they start; every other
    frequency follows ``is_date_in_period``.
    """
    if frequency == Frequency.ONE_TIME:
        return is_same_month(when, start)
    return is_date_in_period(when, start, end)


def generate_month_range(start: DateLike, end: DateLike) -> List[str]:
    """Month keys (YYYY-MM) from start to end, both inclusive."""
    current = start_of_month(start)
    last = start_of_month(end)
    months: List[str] = []
    while not is_after(current, last):
        months.append(month_key(current))
        current = add_months(current, 1)
    return months


def generate_schedule(
    start: DateLike,
    end: Optional[DateLike],
    projection_end: DateLike,
    frequency: Frequency,
) -> List[str]:
    """
    List the month keys in which an item is active within the projection.

    Args:
        start: Item start date
        end: Optional item end date
        projection_end: Last date of the projection
        frequency: Item frequency

    Returns:
        Month keys (YYYY-MM) in chronological order
    """
    start_date = parse_iso(start)
    projection_last = parse_iso(projection_end)
    effective_end = projection_last
    if end is not None and is_before(end, projection_last):
        effective_end = parse_iso(end)

    if frequency == Frequency.ONE_TIME:
        if is_after(start_date, effective_end):
            return []
        return [month_key(start_date)]

    schedule: List[str] = []
    current = start_of_month(start_date)
    while not is_after(current, effective_end):
        schedule.append(month_key(current))
        current = add_months(current, 1)
    return schedule
