"""
Engine entry points.

``run_engine`` turns a scenario into a ``ProjectionResult``;
``validate_input`` and ``get_input_hash`` expose the gate and the cache key on
their own; ``run_monte_carlo`` is re-exported from ``monte_carlo``.
"""

from typing import List, Sequence

from .hashing import hash_input
from .monte_carlo import run_monte_carlo
from .normalize import ScenarioData, coerce_input, normalize_input, prepare_input
from .projection import (
    MonthState,
    TaxAdjustment,
    generate_annual_summary,
    generate_tax_annual,
    run_projection,
)
from .results import (
    GoalProgressSeries,
    MonthlyBreakdownRow,
    ProjectionResult,
    ProjectionSeries,
    SeriesPoint,
)
from .scenario import ScenarioInput
from .time_grid import InflationIndex

ENGINE_VERSION = "0.1.0"

__all__ = [
    "ENGINE_VERSION",
    "get_input_hash",
    "run_engine",
    "run_monte_carlo",
    "validate_input",
]


def build_series(
    months: Sequence[MonthState], scenario: ScenarioInput, index: InflationIndex
) -> ProjectionSeries:
    """Parallel per-month series, including per-account and per-goal series."""
    series = ProjectionSeries(
        account_balances={account.id: [] for account in scenario.accounts},
        goal_progress={goal.id: GoalProgressSeries() for goal in scenario.goals},
    )

    for month in months:
        t = month.date
        series.net_worth.append(SeriesPoint(t=t, v=month.net_worth))
        series.assets_total.append(SeriesPoint(t=t, v=month.total_assets))
        series.liabilities_total.append(SeriesPoint(t=t, v=month.total_liabilities))
        series.income_total.append(SeriesPoint(t=t, v=month.income))
        series.expense_total.append(SeriesPoint(t=t, v=month.expenses))
        series.taxes_total.append(SeriesPoint(t=t, v=month.taxes))
        series.cashflow_net.append(SeriesPoint(t=t, v=month.net_cashflow))

        for account_id, balance in month.account_balances.items():
            if account_id in series.account_balances:
                series.account_balances[account_id].append(SeriesPoint(t=t, v=balance))

        for goal in scenario.goals:
            progress = series.goal_progress[goal.id]
            progress.funded.append(SeriesPoint(t=t, v=month.net_worth))
            progress.target_nominal.append(
                SeriesPoint(t=t, v=index.real_to_nominal(goal.target_amount_real, t))
            )

    return series


def build_monthly_breakdown(months: Sequence[MonthState]) -> List[MonthlyBreakdownRow]:
    return [
        MonthlyBreakdownRow(
            t=month.date,
            income=month.income,
            expenses=month.expenses,
            taxes=month.taxes,
            loan_payments=month.loan_payments,
            contributions=month.contributions,
            investment_returns=month.investment_returns,
            net_cashflow=month.net_cashflow,
            assets_end=month.total_assets,
            liabilities_end=month.total_liabilities,
        )
        for month in months
    ]


def run_engine(
    data: ScenarioData, tax_adjustment: TaxAdjustment = TaxAdjustment.DAMPENED
) -> ProjectionResult:
    """
    Run a deterministic projection of a scenario.

    The scenario is always normalized and validated first; nothing is
    simulated for an invalid scenario.

    Args:
        data: ScenarioInput or camelCase JSON-like mapping
        tax_adjustment: How taxes respond to inflation in later months

    Returns:
        ProjectionResult with series, breakdowns, tax summary and warnings

    Raises:
        ScenarioValidationError: if the scenario is invalid

    Example:
        ```python
        result = run_engine(scenario_json)
        payload = result.model_dump(mode="json", by_alias=True)
        ```
    """
    scenario = prepare_input(data)
    run = run_projection(scenario, tax_adjustment)

    return ProjectionResult(
        engine_version=ENGINE_VERSION,
        input_hash=hash_input(scenario),
        series=build_series(run.months, scenario, run.inflation_index),
        monthly=build_monthly_breakdown(run.months),
        annual=generate_annual_summary(run.months),
        tax_annual=generate_tax_annual(run.months),
        warnings=run.warnings,
    )


def validate_input(data: ScenarioData) -> bool:
    """Return True for a valid scenario; raise ScenarioValidationError otherwise."""
    prepare_input(data)
    return True


def get_input_hash(data: ScenarioData) -> str:
    """
    Cache key of a scenario.

    The hash is taken over the normalized scenario, so it equals the
    ``input_hash`` that ``run_engine`` reports for the same input.
    """
    return hash_input(normalize_input(coerce_input(data)))

