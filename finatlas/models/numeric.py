"""
Numeric helpers for financial calculations.

All functions are deterministic and operate on plain floats. Money is rounded
to cents with round-half-away-from-zero semantics.
"""

import math
from typing import Iterable


def round_money(value: float, decimals: int = 2) -> float:
    """
    Round a value half away from zero.

    Non-finite inputs (NaN, +/-inf) round to 0 instead of propagating.

    Args:
        value: Value to round
        decimals: Number of decimal places (default 2, i.e. cents)

    Returns:
        Rounded value
    """
    if value is None or not math.isfinite(value):
        return 0.0
    factor = 10.0**decimals
    # Clean up binary representation error (1.005 * 100 == 100.49999...)
    scaled = round(abs(value) * factor, 9)
    rounded = math.floor(scaled + 0.5) / factor
    if rounded == 0:
        return 0.0
    return math.copysign(rounded, value)


def total(values: Iterable[float]) -> float:
    """Sum values; an empty iterable sums to 0."""
    return math.fsum(values)


def compound_growth(principal: float, rate: float, periods: float) -> float:
    """principal * (1 + rate) ** periods."""
    if periods == 0 or rate == 0:
        return principal
    return principal * (1 + rate) ** periods


def present_value(future: float, rate: float, periods: float) -> float:
    """Discount a future amount back ``periods`` periods at ``rate``."""
    if periods == 0 or rate == 0:
        return future
    return future / (1 + rate) ** periods


def future_value(present: float, rate: float, periods: float) -> float:
    """Alias of compound_growth with financial naming."""
    return compound_growth(present, rate, periods)


def calculate_pmt(principal: float, annual_rate: float, term_months: int) -> float:
    """
    Calculate the level monthly payment for an amortizing loan.

    Uses P * r(1+r)^n / ((1+r)^n - 1) with r = annual_rate / 12. A zero rate
    divides the principal evenly over the term.

    Args:
        principal: Loan principal
        annual_rate: Annual interest rate as a decimal (0.05 for 5%)
        term_months: Number of monthly payments

    Returns:
        Monthly payment rounded to cents
    """
    if principal <= 0 or term_months <= 0:
        return 0.0

    if annual_rate == 0:
        return round_money(principal / term_months)

    monthly_rate = annual_rate / 12
    factor = (1 + monthly_rate) ** term_months
    payment = principal * (monthly_rate * factor) / (factor - 1)
    return round_money(payment)


def annual_to_monthly_rate(annual_rate: float) -> float:
    return annual_rate / 12


def monthly_to_annual_rate(monthly_rate: float) -> float:
    return monthly_rate * 12


def clamp(value: float, minimum: float, maximum: float) -> float:
    """Clamp a value into [minimum, maximum]."""
    return min(max(value, minimum), maximum)


def percent_change(original: float, current: float) -> float:
    """Percentage change from original to current; 0 when original is 0."""
    if original == 0:
        return 0.0
    return (current - original) / original * 100
