"""
Inflation index and growth rules for projection calculations.

This module builds the month-keyed inflation index used by a projection run,
applies per-item growth rules, converts between real (base-month) and nominal
dollars, and formats money for warning messages.
"""

from typing import Dict, Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .dates import DateLike, add_months, diff_months, month_key, parse_iso
from .numeric import round_money
from .scenario import GrowthRule

INDEX_DECIMALS = 6


class InflationIndex(BaseModel):
    """Cumulative inflation multipliers keyed by month (YYYY-MM).

    The first month has a multiplier of 1.0. Months outside the indexed range
    have a factor of 1.0, so lookups never fail.
    """

    model_config = ConfigDict(frozen=True)

    factors: Dict[str, float] = Field(
        default_factory=dict, description="Multiplier per month key, in order"
    )

    @property
    def first_key(self) -> Optional[str]:
        """Month key of the base month, or None for an empty index."""
        return next(iter(self.factors), None)

    def factor(self, when: DateLike) -> float:
        """Get the cumulative multiplier for the month containing ``when``."""
        return self.factors.get(month_key(when), 1.0)

    def contains(self, when: DateLike) -> bool:
        return month_key(when) in self.factors

    def real_to_nominal(self, real_amount: float, when: DateLike) -> float:
        """Convert base-month dollars into dollars of the given month."""
        return round_money(real_amount * self.factor(when))

    def nominal_to_real(self, nominal_amount: float, when: DateLike) -> float:
        """Convert dollars of the given month back into base-month dollars."""
        return round_money(nominal_amount / self.factor(when))

    def keys(self) -> List[str]:
        return list(self.factors)

    def __iter__(self) -> Iterator[str]:  # type: ignore[override]
        return iter(self.factors)

    def __len__(self) -> int:
        return len(self.factors)


def build_inflation_index(
    start: DateLike, end: DateLike, annual_rate: float
) -> InflationIndex:
    """
    Build the inflation index for a projection window.

    The monthly rate is ``annual_rate / 12`` compounded once per month, so
    3% over 11 months gives (1 + 0.0025) ** 11 = 1.027846... at the 12th key.

    Args:
        start: First month of the window
        end: Last month of the window (inclusive)
        annual_rate: Annual inflation rate as a decimal (0.03 for 3%)

    Returns:
        InflationIndex with one entry per month, values rounded to 6 decimals
    """
    start_date = parse_iso(start)
    months = diff_months(start_date, end)
    monthly_rate = annual_rate / 12

    factors: Dict[str, float] = {}
    cumulative = 1.0
    for offset in range(months + 1):
        factors[month_key(add_months(start_date, offset))] = round(
            cumulative, INDEX_DECIMALS
        )
        cumulative *= 1 + monthly_rate

    return InflationIndex(factors=factors)


def apply_growth(
    amount: float,
    rule: GrowthRule,
    custom_rate: Optional[float],
    index: InflationIndex,
    when: DateLike,
) -> float:
    """
    Apply a growth rule to a base amount for the given month.

    Args:
        amount: Base amount (first-month dollars)
        rule: Growth rule to apply
        custom_rate: Annual growth as a decimal, used by CUSTOM_PERCENT
        index: Inflation index of the run
        when: Month the amount is paid in

    Returns:
        Grown amount (unrounded)
    """
    return _GROWTH_RULES[rule](amount, custom_rate, index, when)


def _no_growth(
    amount: float, custom_rate: Optional[float], index: InflationIndex, when: DateLike
) -> float:
    return amount


def _track_inflation(
    amount: float, custom_rate: Optional[float], index: InflationIndex, when: DateLike
) -> float:
    return amount * index.factor(when)


def _custom_percent(
    amount: float, custom_rate: Optional[float], index: InflationIndex, when: DateLike
) -> float:
    first = index.first_key
    if not custom_rate or first is None:
        return amount
    elapsed = diff_months(f"{first}-01", when)
    if elapsed <= 0:
        return amount
    return amount * (1 + custom_rate / 12) ** elapsed


_GROWTH_RULES = {
    GrowthRule.NONE: _no_growth,
    GrowthRule.TRACK_INFLATION: _track_inflation,
    GrowthRule.CUSTOM_PERCENT: _custom_percent,
}


def format_money(amount: float) -> str:
    """Dollar amount for messages, e.g. $1234.50."""
    return f"${round_money(amount):.2f}"


def format_percent(rate: float, decimal_places: int = 1) -> str:
    return f"{rate * 100:.{decimal_places}f}%"
