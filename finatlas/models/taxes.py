"""
Federal, state and payroll tax calculations.

Taxes are computed on annual amounts using the 2024 tables in ``tax_tables``.
Monthly taxes annualize the month's gross income, compute the annual tax and
take one twelfth. This is an approximation: income changes inside a year do
not move the household across brackets for the months already simulated.

An ``index_factor`` greater than 1 scales bracket bounds, the standard
deduction and the additional-Medicare threshold, which models brackets that
are indexed to inflation in later years.
"""

from pydantic import BaseModel, Field

from .numeric import round_money
from .scenario import FilingStatus, TaxProfile
from .tax_tables import (
    FEDERAL_BRACKETS_2024,
    MEDICARE_ADDITIONAL_RATE,
    MEDICARE_ADDITIONAL_THRESHOLDS,
    MEDICARE_RATE,
    SOCIAL_SECURITY_RATE,
    SOCIAL_SECURITY_WAGE_CAP_2024,
    STANDARD_DEDUCTIONS_2024,
    state_rate,
)


class FicaTaxes(BaseModel):
    """Payroll taxes on wages."""

    social_security: float = Field(..., ge=0, description="Social Security tax")
    medicare: float = Field(..., ge=0, description="Medicare tax incl. additional")
    total: float = Field(..., ge=0, description="Total FICA")


class TaxBreakdown(BaseModel):
    """Taxes owed on an amount of gross income."""

    federal: float = Field(default=0.0, description="Federal income tax")
    state: float = Field(default=0.0, description="State income tax")
    fica: float = Field(default=0.0, description="Payroll taxes")
    total: float = Field(default=0.0, description="Sum of all taxes")
    effective_rate: float = Field(
        default=0.0, description="Total tax / gross income (0-1)"
    )


def get_standard_deduction(
    filing_status: FilingStatus, index_factor: float = 1.0
) -> float:
    return STANDARD_DEDUCTIONS_2024[filing_status] * index_factor


def calculate_federal_income_tax(
    taxable_income: float, filing_status: FilingStatus, index_factor: float = 1.0
) -> float:
    """
    Calculate federal income tax with progressive brackets.

    Args:
        taxable_income: Income after deductions
        filing_status: Filing status selecting the bracket table
        index_factor: Multiplier applied to bracket bounds

    Returns:
        Federal tax rounded to cents
    """
    if taxable_income <= 0:
        return 0.0

    tax = 0.0
    for bracket in FEDERAL_BRACKETS_2024[filing_status]:
        bracket = bracket.scaled(index_factor)
        if taxable_income <= bracket.lower:
            break
        tax += (min(taxable_income, bracket.upper) - bracket.lower) * bracket.rate

    return round_money(tax)


def calculate_fica(
    wages: float, filing_status: FilingStatus, index_factor: float = 1.0
) -> FicaTaxes:
    """
    Calculate Social Security and Medicare taxes.

    Social Security is capped at the 2024 wage base. Medicare is uncapped, with
    the additional 0.9% on wages above the filing-status threshold.
    """
    social_security = round_money(
        min(wages, SOCIAL_SECURITY_WAGE_CAP_2024) * SOCIAL_SECURITY_RATE
    )

    medicare = wages * MEDICARE_RATE
    threshold = MEDICARE_ADDITIONAL_THRESHOLDS[filing_status] * index_factor
    if wages > threshold:
        medicare += (wages - threshold) * MEDICARE_ADDITIONAL_RATE
    medicare = round_money(medicare)

    return FicaTaxes(
        social_security=social_security,
        medicare=medicare,
        total=round_money(social_security + medicare),
    )


def calculate_state_tax(taxable_income: float, state_code: str) -> float:
    return round_money(taxable_income * state_rate(state_code))


def calculate_annual_taxes(
    gross_income: float, profile: TaxProfile, index_factor: float = 1.0
) -> TaxBreakdown:
    """
    Calculate a year of taxes on gross income.

    Federal and state taxes apply to income after the standard deduction; FICA
    applies to gross wages when the profile includes payroll taxes.

    Args:
        gross_income: Annual gross income
        profile: Household tax profile
        index_factor: Inflation multiplier for brackets and thresholds

    Returns:
        TaxBreakdown with federal, state, fica, total and effective rate
    """
    deduction = get_standard_deduction(profile.filing_status, index_factor)
    taxable_income = max(0.0, gross_income - deduction)

    federal = calculate_federal_income_tax(
        taxable_income, profile.filing_status, index_factor
    )
    state = calculate_state_tax(taxable_income, profile.state_code)
    fica = (
        calculate_fica(gross_income, profile.filing_status, index_factor).total
        if profile.include_payroll_taxes
        else 0.0
    )

    tax_total = round_money(federal + state + fica)
    effective_rate = (
        round_money(tax_total / gross_income, 4) if gross_income > 0 else 0.0
    )

    return TaxBreakdown(
        federal=federal,
        state=state,
        fica=fica,
        total=tax_total,
        effective_rate=effective_rate,
    )


def calculate_monthly_tax_breakdown(
    monthly_gross_income: float, profile: TaxProfile, index_factor: float = 1.0
) -> TaxBreakdown:
    """Monthly share of the annual taxes on ``monthly_gross_income * 12``.

    The components always add up to ``total``; any rounding cent is carried
    by the FICA component.
    """
    annual = calculate_annual_taxes(monthly_gross_income * 12, profile, index_factor)
    tax_total = round_money(annual.total / 12)
    federal = round_money(annual.federal / 12)
    state = round_money(annual.state / 12)
    return TaxBreakdown(
        federal=federal,
        state=state,
        fica=round_money(tax_total - federal - state),
        total=tax_total,
        effective_rate=annual.effective_rate,
    )


def calculate_monthly_taxes(
    monthly_gross_income: float, profile: TaxProfile, index_factor: float = 1.0
) -> float:
    """Estimated monthly tax withholding on a month of gross income."""
    return calculate_monthly_tax_breakdown(
        monthly_gross_income, profile, index_factor
    ).total


def get_marginal_rate(
    taxable_income: float, filing_status: FilingStatus, state_code: str
) -> float:
    """Combined federal and state marginal rate at ``taxable_income``."""
    federal_marginal = 0.0
    for bracket in FEDERAL_BRACKETS_2024[filing_status]:
        if taxable_income > bracket.lower:
            federal_marginal = bracket.rate
    return round_money(federal_marginal + state_rate(state_code), 4)


def estimate_tax_savings(
    contribution: float, current_income: float, profile: TaxProfile
) -> float:
    """
    Estimate the annual tax saved by a pre-tax contribution.

    Args:
        contribution: Annual pre-tax contribution
        current_income: Annual gross income before the contribution
        profile: Household tax profile

    Returns:
        Tax saved, between 0 and the contribution itself
    """
    without = calculate_annual_taxes(current_income, profile)
    with_contribution = calculate_annual_taxes(current_income - contribution, profile)
    savings = round_money(without.total - with_contribution.total)
    return min(max(savings, 0.0), max(contribution, 0.0))

