"""
Monthly projection loop.

``run_projection`` simulates a normalized scenario month by month. Each run
builds one inflation index, one amortization schedule per loan and one
account ledger, then walks the window chronologically:

1. reset the ledger's per-month counters
2. income and expenses (active items, normalized to monthly, grown)
3. taxes on the month's income
4. loan payments from the schedules
5. contributions, then investment returns
6. net cashflow, assets, liabilities and net worth

Warnings are collected along the way and after the last month.
"""

import datetime
import logging
import math
from datetime import date
from enum import Enum
from itertools import groupby
from typing import Dict, List, Sequence

from pydantic import BaseModel, Field

from .accounts import AccountLedger
from .dates import parse_month_key
from .loan_amortization import AmortizationSchedule, LoanCalculator
from .numeric import round_money, total
from .results import (
    AnnualSummaryRow,
    ProjectionWarning,
    Severity,
    TaxAnnualRow,
    WarningCode,
)
from .scenario import Expense, GrowthRule, Income, ScenarioInput
from .schedules import generate_month_range, is_active_in_month, normalize_to_monthly
from .taxes import TaxBreakdown, calculate_monthly_tax_breakdown
from .time_grid import (
    InflationIndex,
    apply_growth,
    build_inflation_index,
    format_money,
    format_percent,
)

logger = logging.getLogger(__name__)

HIGH_TAX_DRAG_THRESHOLD = 0.35


class TaxAdjustment(str, Enum):
    """How taxes respond to inflation in later projection months.

    DAMPENED scales each month's tax by 1/sqrt(inflation factor).
    INDEXED scales bracket bounds, the standard deduction and the Medicare
    threshold by the inflation factor at January of the month's year.
    """

    DAMPENED = "dampened"
    INDEXED = "indexed"


class MonthState(BaseModel):
    """Financial state at the end of one projected month."""

    date: datetime.date = Field(..., description="First day of the month")
    income: float = Field(default=0.0, description="Gross income")
    expenses: float = Field(default=0.0, description="Living expenses")
    taxes: float = Field(default=0.0, description="Total taxes")
    federal_tax: float = Field(default=0.0, description="Federal income tax")
    state_tax: float = Field(default=0.0, description="State income tax")
    fica_tax: float = Field(default=0.0, description="Payroll taxes")
    loan_payments: float = Field(default=0.0, description="Loan payments")
    contributions: float = Field(default=0.0, description="Account contributions")
    investment_returns: float = Field(default=0.0, description="Investment returns")
    net_cashflow: float = Field(default=0.0, description="Net cashflow")
    total_assets: float = Field(default=0.0, description="Sum of account balances")
    total_liabilities: float = Field(default=0.0, description="Sum of loan balances")
    net_worth: float = Field(default=0.0, description="Assets minus liabilities")
    account_balances: Dict[str, float] = Field(
        default_factory=dict, description="Balance per account id"
    )


class ProjectionRun(BaseModel):
    """Months and warnings produced by one pass of the projection loop."""

    months: List[MonthState] = Field(default_factory=list)
    warnings: List[ProjectionWarning] = Field(default_factory=list)
    inflation_index: InflationIndex = Field(default_factory=InflationIndex)

    @property
    def final_net_worth(self) -> float:
        return self.months[-1].net_worth if self.months else 0.0


def build_scenario_index(scenario: ScenarioInput) -> InflationIndex:
    """Inflation index covering the scenario's projection window."""
    return build_inflation_index(
        scenario.household.start_date,
        scenario.household.end_date,
        scenario.assumptions.inflation_rate_pct / 100,
    )


def goal_target_nominal(
    target_amount_real: float, index: InflationIndex, when: date
) -> float:
    """A goal target in the dollars of the month containing ``when``."""
    return apply_growth(
        target_amount_real, GrowthRule.TRACK_INFLATION, None, index, when
    )


def _monthly_flow(items: Sequence, when: date, index: InflationIndex) -> float:
    flow = 0.0
    for item in items:
        if not is_active_in_month(when, item.start_date, item.end_date, item.frequency):
            continue
        base = normalize_to_monthly(item.amount, item.frequency)
        rate = item.growth_pct / 100 if item.growth_pct is not None else None
        flow += apply_growth(base, item.growth_rule, rate, index, when)
    return round_money(flow)


def calculate_monthly_income(
    incomes: Sequence[Income], when: date, index: InflationIndex
) -> float:
    return _monthly_flow(incomes, when, index)


def calculate_monthly_expenses(
    expenses: Sequence[Expense], when: date, index: InflationIndex
) -> float:
    return _monthly_flow(expenses, when, index)


def calculate_month_taxes(
    income: float,
    scenario: ScenarioInput,
    index: InflationIndex,
    when: date,
    tax_adjustment: TaxAdjustment = TaxAdjustment.DAMPENED,
) -> TaxBreakdown:
    """
    Taxes owed on a month of income under the chosen adjustment mode.

    Args:
        income: Gross income of the month
        scenario: Normalized scenario (for the tax profile)
        index: Inflation index of the run
        when: First day of the month
        tax_adjustment: DAMPENED or INDEXED

    Returns:
        TaxBreakdown whose components add up to ``total``
    """
    profile = scenario.tax_profile
    if tax_adjustment == TaxAdjustment.INDEXED:
        january = date(when.year, 1, 1)
        return calculate_monthly_tax_breakdown(income, profile, index.factor(january))

    breakdown = calculate_monthly_tax_breakdown(income, profile)
    factor = index.factor(when)
    if factor <= 1:
        return breakdown

    adjustment = 1 / math.sqrt(factor)
    tax_total = round_money(breakdown.total * adjustment)
    federal = round_money(breakdown.federal * adjustment)
    state = round_money(breakdown.state * adjustment)
    return TaxBreakdown(
        federal=federal,
        state=state,
        fica=round_money(tax_total - federal - state),
        total=tax_total,
        effective_rate=breakdown.effective_rate,
    )


def initialize_loan_schedules(scenario: ScenarioInput) -> List[AmortizationSchedule]:
    """One amortization schedule per loan, in scenario order."""
    return [
        LoanCalculator.generate_amortization_schedule(
            loan, scenario.household.start_date, scenario.household.end_date
        )
        for loan in scenario.loans
    ]


def run_projection(
    scenario: ScenarioInput,
    tax_adjustment: TaxAdjustment = TaxAdjustment.DAMPENED,
) -> ProjectionRun:
    """
    Simulate a normalized, validated scenario month by month.

    Args:
        scenario: Output of ``prepare_input``
        tax_adjustment: How taxes respond to inflation

    Returns:
        ProjectionRun with one MonthState per month and the run's warnings
    """
    index = build_scenario_index(scenario)
    schedules = initialize_loan_schedules(scenario)
    ledger = AccountLedger(scenario.accounts, scenario.contributions)
    warnings: List[ProjectionWarning] = []

    if not scenario.tax_rules.federal and not scenario.tax_rules.state:
        warnings.append(
            ProjectionWarning(
                code=WarningCode.TAX_RULES_MISSING,
                severity=Severity.INFO,
                message=(
                    "Using simplified tax approximation. "
                    "For accurate results, configure tax rules."
                ),
            )
        )

    months: List[MonthState] = []
    for key in generate_month_range(
        scenario.household.start_date, scenario.household.end_date
    ):
        when = parse_month_key(key)
        ledger.reset_period_counters()

        income = calculate_monthly_income(scenario.incomes, when, index)
        expenses = calculate_monthly_expenses(scenario.expenses, when, index)
        taxes = calculate_month_taxes(income, scenario, index, when, tax_adjustment)
        loan_payments = round_money(
            total(schedule.payment_at(when) for schedule in schedules)
        )

        ledger.process_contributions(when, index)
        contributions = ledger.total_contributions()
        ledger.apply_returns()
        investment_returns = ledger.total_returns()

        net_cashflow = round_money(
            income
            - expenses
            - taxes.total
            - loan_payments
            - contributions
            + investment_returns
        )
        total_assets = ledger.total_balance()
        total_liabilities = round_money(
            total(schedule.balance_at(when) for schedule in schedules)
        )

        if net_cashflow < 0:
            warnings.append(
                ProjectionWarning(
                    code=WarningCode.DEFICIT_MONTH,
                    severity=Severity.WARN,
                    message=(
                        f"Projected deficit of "
                        f"{format_money(abs(net_cashflow))} in {key}"
                    ),
                    at=when,
                )
            )

        months.append(
            MonthState(
                date=when,
                income=income,
                expenses=expenses,
                taxes=taxes.total,
                federal_tax=taxes.federal,
                state_tax=taxes.state,
                fica_tax=taxes.fica,
                loan_payments=loan_payments,
                contributions=contributions,
                investment_returns=investment_returns,
                net_cashflow=net_cashflow,
                total_assets=total_assets,
                total_liabilities=total_liabilities,
                net_worth=round_money(total_assets - total_liabilities),
                account_balances=ledger.snapshot(),
            )
        )

    warnings.extend(_high_tax_drag_warnings(months))
    warnings.extend(_goal_shortfall_warnings(scenario, months, index))

    logger.debug(
        "Projected scenario %s over %d months (%d warnings)",
        scenario.scenario_id,
        len(months),
        len(warnings),
    )
    return ProjectionRun(months=months, warnings=warnings, inflation_index=index)


def _by_year(months: Sequence[MonthState]):
    return groupby(months, key=lambda month: month.date.year)


def _high_tax_drag_warnings(months: Sequence[MonthState]) -> List[ProjectionWarning]:
    warnings = []
    for year, group in _by_year(months):
        rows = list(group)
        income = total(month.income for month in rows)
        taxes = total(month.taxes for month in rows)
        if income > 0 and taxes > income * HIGH_TAX_DRAG_THRESHOLD:
            warnings.append(
                ProjectionWarning(
                    code=WarningCode.HIGH_TAX_DRAG,
                    severity=Severity.WARN,
                    message=(
                        f"Taxes take {format_percent(taxes / income)} "
                        f"of income in {year}"
                    ),
                    at=rows[0].date,
                )
            )
    return warnings


def _goal_shortfall_warnings(
    scenario: ScenarioInput, months: Sequence[MonthState], index: InflationIndex
) -> List[ProjectionWarning]:
    if not months:
        return []

    last = months[-1]
    warnings = []
    for goal in scenario.goals:
        target = goal_target_nominal(goal.target_amount_real, index, last.date)
        if last.net_worth < target:
            shortfall = round_money(target - last.net_worth)
            warnings.append(
                ProjectionWarning(
                    code=WarningCode.GOAL_SHORTFALL,
                    severity=Severity.ERROR if goal.priority == 1 else Severity.WARN,
                    message=(
                        f'Goal "{goal.name}" may fall short by '
                        f"{format_money(shortfall)}"
                    ),
                    at=goal.target_date,
                )
            )
    return warnings


def generate_annual_summary(months: Sequence[MonthState]) -> List[AnnualSummaryRow]:
    """
    Roll monthly states up into calendar years.

    Args:
        months: Month states in chronological order

    Returns:
        One row per calendar year; end net worth is the year's last month
    """
    rows = []
    for year, group in _by_year(months):
        year_months = list(group)
        rows.append(
            AnnualSummaryRow(
                year=year,
                income=round_money(total(m.income for m in year_months)),
                expenses=round_money(total(m.expenses for m in year_months)),
                taxes=round_money(total(m.taxes for m in year_months)),
                net_savings=round_money(total(m.net_cashflow for m in year_months)),
                end_net_worth=year_months[-1].net_worth,
            )
        )
    return rows


def generate_tax_annual(months: Sequence[MonthState]) -> List[TaxAnnualRow]:
    """Per-year federal, state and payroll taxes with the effective rate."""
    rows = []
    for year, group in _by_year(months):
        year_months = list(group)
        gross_income = round_money(total(m.income for m in year_months))
        taxes = round_money(total(m.taxes for m in year_months))
        rows.append(
            TaxAnnualRow(
                year=year,
                gross_income=gross_income,
                federal=round_money(total(m.federal_tax for m in year_months)),
                state=round_money(total(m.state_tax for m in year_months)),
                fica=round_money(total(m.fica_tax for m in year_months)),
                total=taxes,
                effective_rate=(
                    round_money(taxes / gross_income, 4) if gross_income > 0 else 0.0
                ),
            )
        )
    return rows

