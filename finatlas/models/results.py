"""
Projection and Monte Carlo result models.

Results are returned to the caller as pydantic models. Serialize them with
``model_dump(mode="json", by_alias=True)`` to get the camelCase JSON contract.
"""

from datetime import date
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ResultModel(BaseModel):
    """Base class for result models (camelCase aliases)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WarningCode(str, Enum):
    DEFICIT_MONTH = "DEFICIT_MONTH"
    GOAL_SHORTFALL = "GOAL_SHORTFALL"
    HIGH_TAX_DRAG = "HIGH_TAX_DRAG"
    TAX_RULES_MISSING = "TAX_RULES_MISSING"


class Severity(str, Enum):
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class ProjectionWarning(ResultModel):
    """A non-fatal condition detected during a projection run."""

    code: WarningCode = Field(..., description="Warning code")
    severity: Severity = Field(..., description="Severity level")
    message: str = Field(..., description="Human-readable message")
    at: Optional[date] = Field(default=None, description="Date the warning refers to")


class SeriesPoint(ResultModel):
    t: date = Field(..., description="First day of the month")
    v: float = Field(..., description="Value for the month")


class GoalProgressSeries(ResultModel):
    """Net worth against a goal's inflation-adjusted target."""

    funded: List[SeriesPoint] = Field(default_factory=list, description="Funded amount")
    target_nominal: List[SeriesPoint] = Field(
        default_factory=list, description="Target in nominal dollars"
    )


class ProjectionSeries(ResultModel):
    """Parallel monthly time series, one point per projected month."""

    net_worth: List[SeriesPoint] = Field(default_factory=list)
    assets_total: List[SeriesPoint] = Field(default_factory=list)
    liabilities_total: List[SeriesPoint] = Field(default_factory=list)
    income_total: List[SeriesPoint] = Field(default_factory=list)
    expense_total: List[SeriesPoint] = Field(default_factory=list)
    taxes_total: List[SeriesPoint] = Field(default_factory=list)
    cashflow_net: List[SeriesPoint] = Field(default_factory=list)
    account_balances: Dict[str, List[SeriesPoint]] = Field(
        default_factory=dict, description="Balance series per account id"
    )
    goal_progress: Dict[str, GoalProgressSeries] = Field(
        default_factory=dict, description="Progress series per goal id"
    )


class MonthlyBreakdownRow(ResultModel):
    t: date = Field(..., description="First day of the month")
    income: float
    expenses: float
    taxes: float
    loan_payments: float
    contributions: float
    investment_returns: float
    net_cashflow: float
    assets_end: float
    liabilities_end: float


class AnnualSummaryRow(ResultModel):
    year: int = Field(..., description="Calendar year")
    income: float = Field(..., description="Total income in the year")
    expenses: float = Field(..., description="Total expenses in the year")
    taxes: float = Field(..., description="Total taxes in the year")
    net_savings: float = Field(..., description="Sum of monthly net cashflow")
    end_net_worth: float = Field(..., description="Net worth in the year's last month")


class TaxAnnualRow(ResultModel):
    year: int = Field(..., description="Calendar year")
    gross_income: float = Field(..., description="Income taxed in the year")
    federal: float = Field(..., description="Federal income tax")
    state: float = Field(..., description="State income tax")
    fica: float = Field(..., description="Payroll taxes")
    total: float = Field(..., description="Total taxes")
    effective_rate: float = Field(..., description="Total / gross income (0-1)")


class ProjectionResult(ResultModel):
    """Output of one deterministic projection run."""

    engine_version: str = Field(..., description="Engine version string")
    input_hash: str = Field(..., description="SHA-256 of the normalized input")
    series: ProjectionSeries = Field(..., description="Monthly time series")
    monthly: List[MonthlyBreakdownRow] = Field(
        default_factory=list, description="Monthly breakdown rows"
    )
    annual: List[AnnualSummaryRow] = Field(
        default_factory=list, description="Annual summary rows"
    )
    tax_annual: List[TaxAnnualRow] = Field(
        default_factory=list, description="Annual tax breakdown"
    )
    warnings: List[ProjectionWarning] = Field(
        default_factory=list, description="Warnings raised during the run"
    )

    def warnings_with_code(self, code: WarningCode) -> List[ProjectionWarning]:
        return [warning for warning in self.warnings if warning.code == code]


class PercentileBand(ResultModel):
    """Net worth percentiles across simulations for one month."""

    t: date = Field(..., description="First day of the month")
    p10: float
    p25: float
    p50: float
    p75: float
    p90: float


class MonteCarloResult(ResultModel):
    """Aggregated outcome of a Monte Carlo run."""

    bands: List[PercentileBand] = Field(
        default_factory=list, description="Percentile bands per month"
    )
    success_rate: float = Field(
        ..., ge=0, le=1, description="Fraction of simulations ending above zero"
    )
    goal_success_rates: Dict[str, float] = Field(
        default_factory=dict, description="Fraction of simulations meeting each goal"
    )
    simulations: int = Field(..., description="Number of simulations run")
    volatility_pct: float = Field(..., description="Return volatility used (%)")
    seed: int = Field(..., description="Seed used")
    median_final_net_worth: float = Field(..., description="p50 of final net worth")
    p10_final_net_worth: float = Field(..., description="p10 of final net worth")
    p90_final_net_worth: float = Field(..., description="p90 of final net worth")
