"""
Pydantic models for projection scenarios.

This module defines the scenario input contract accepted by the engine. The
JSON boundary uses camelCase keys (``startDate``, ``expectedReturnPct``); the
Python attributes are snake_case and aliases translate between the two.
Scenario models are frozen: a run never mutates its input.
"""

from datetime import date
from enum import Enum
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Frequency(str, Enum):
    """How often a nominal amount recurs."""

    MONTHLY = "MONTHLY"
    BIWEEKLY = "BIWEEKLY"
    WEEKLY = "WEEKLY"
    ANNUAL = "ANNUAL"
    ONE_TIME = "ONE_TIME"


class GrowthRule(str, Enum):
    """How an amount grows over the projection."""

    NONE = "NONE"
    TRACK_INFLATION = "TRACK_INFLATION"
    CUSTOM_PERCENT = "CUSTOM_PERCENT"


class FilingStatus(str, Enum):
    """Federal tax filing status."""

    SINGLE = "SINGLE"
    MFJ = "MFJ"
    HOH = "HOH"


AccountType = Literal["TAXABLE", "TRADITIONAL", "ROTH"]
LoanType = Literal["AUTO", "STUDENT", "PERSONAL", "OTHER"]
GoalType = Literal["COLLEGE", "HOME_PURCHASE", "RETIREMENT"]


class ScenarioModel(BaseModel):
    """Base class for scenario models (camelCase aliases, frozen)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class Household(ScenarioModel):
    """Household projection window."""

    currency: Literal["USD"] = Field(default="USD", description="Currency code")
    anchor_date: Optional[date] = Field(
        default=None, description="Date the household data was captured"
    )
    start_date: date = Field(..., description="First month of the projection")
    end_date: date = Field(..., description="Last month of the projection")


class ScenarioAssumptions(ScenarioModel):
    """Scalar economic assumptions, all expressed in percent."""

    inflation_rate_pct: float = Field(default=0.0, description="Annual inflation %")
    taxable_interest_yield_pct: float = Field(
        default=0.0, description="Taxable interest yield %"
    )
    taxable_dividend_yield_pct: float = Field(
        default=0.0, description="Taxable dividend yield %"
    )
    realized_st_gain_pct: float = Field(
        default=0.0, description="Realized short-term gain %"
    )
    realized_lt_gain_pct: float = Field(
        default=0.0, description="Realized long-term gain %"
    )


class TaxProfile(ScenarioModel):
    """Household tax profile."""

    state_code: str = Field(..., description="State of residence (2-letter code)")
    filing_status: FilingStatus = Field(..., description="Federal filing status")
    tax_year: int = Field(default=2024, description="Tax year of the rule tables")
    include_payroll_taxes: bool = Field(
        default=True, description="Whether FICA applies to income"
    )
    advanced_overrides_enabled: bool = Field(
        default=False, description="Whether detailed rule overrides are enabled"
    )


class TaxRules(ScenarioModel):
    """Detailed tax rule tables (opaque to the engine)."""

    federal: Optional[Any] = Field(default=None, description="Federal rule table")
    state: Optional[Any] = Field(default=None, description="State rule table")


class Income(ScenarioModel):
    """A recurring or one-time income source."""

    id: str = Field(..., description="Stable identifier")
    name: str = Field(default="", description="Income name")
    member_name: Optional[str] = Field(default=None, description="Household member")
    amount: float = Field(..., description="Nominal amount per occurrence")
    frequency: Frequency = Field(..., description="Occurrence frequency")
    start_date: date = Field(..., description="First active date")
    end_date: Optional[date] = Field(default=None, description="Last active date")
    growth_rule: GrowthRule = Field(default=GrowthRule.NONE, description="Growth rule")
    growth_pct: Optional[float] = Field(
        default=None, description="Annual growth % for CUSTOM_PERCENT"
    )


class Expense(ScenarioModel):
    """A recurring or one-time expense."""

    id: str = Field(..., description="Stable identifier")
    category: str = Field(..., description="Expense category")
    name: Optional[str] = Field(default=None, description="Expense name")
    amount: float = Field(..., description="Nominal amount per occurrence")
    frequency: Frequency = Field(..., description="Occurrence frequency")
    start_date: date = Field(..., description="First active date")
    end_date: Optional[date] = Field(default=None, description="Last active date")
    growth_rule: GrowthRule = Field(default=GrowthRule.NONE, description="Growth rule")
    growth_pct: Optional[float] = Field(
        default=None, description="Annual growth % for CUSTOM_PERCENT"
    )
    is_essential: bool = Field(default=False, description="Essential spending flag")


class Holding(ScenarioModel):
    """A position held in an investment account."""

    ticker: str = Field(..., description="Ticker symbol")
    shares: float = Field(..., description="Number of shares")
    avg_price: float = Field(..., description="Average cost per share")
    last_price: Optional[float] = Field(default=None, description="Last quote")
    as_of_date: Optional[date] = Field(default=None, description="Quote date")


class InvestmentAccount(ScenarioModel):
    """An investment account and its holdings."""

    id: str = Field(..., description="Stable identifier")
    name: str = Field(default="", description="Account name")
    type: AccountType = Field(default="TAXABLE", description="Tax treatment")
    expected_return_pct: float = Field(..., description="Expected annual return %")
    holdings: List[Holding] = Field(default_factory=list, description="Holdings")


class ContributionRule(ScenarioModel):
    """A monthly contribution into an investment account."""

    account_id: str = Field(..., description="Target account identifier")
    amount_monthly: float = Field(..., description="Monthly contribution")
    start_date: date = Field(..., description="First active date")
    end_date: Optional[date] = Field(default=None, description="Last active date")
    escalation_pct: Optional[float] = Field(
        default=None, description="Annual escalation %"
    )


class Loan(ScenarioModel):
    """An amortizing loan."""

    id: str = Field(..., description="Stable identifier")
    type: LoanType = Field(default="OTHER", description="Loan type")
    name: str = Field(default="", description="Loan name")
    principal: float = Field(..., description="Original principal")
    apr_pct: float = Field(..., description="Annual percentage rate")
    term_months: int = Field(..., description="Loan term in months")
    start_date: date = Field(..., description="Date of the first payment month")
    payment_override_monthly: Optional[float] = Field(
        default=None, description="Fixed monthly payment replacing the PMT"
    )
    extra_payment_monthly: Optional[float] = Field(
        default=None, description="Extra principal paid each month"
    )


class Goal(ScenarioModel):
    """A savings goal expressed in base-year dollars."""

    id: str = Field(..., description="Stable identifier")
    type: GoalType = Field(default="RETIREMENT", description="Goal type")
    name: str = Field(default="", description="Goal name")
    target_amount_real: float = Field(..., description="Target in base-year dollars")
    target_date: date = Field(..., description="Date the goal should be met")
    priority: Optional[Literal[1, 2, 3]] = Field(
        default=None, description="1 = highest priority"
    )


class ScenarioInput(ScenarioModel):
    """Complete scenario input for one engine run."""

    scenario_id: str = Field(..., description="Scenario identifier")
    household: Household = Field(..., description="Projection window")
    assumptions: ScenarioAssumptions = Field(
        default_factory=ScenarioAssumptions, description="Economic assumptions"
    )
    tax_profile: TaxProfile = Field(..., description="Tax profile")
    tax_rules: TaxRules = Field(
        default_factory=TaxRules, description="Detailed tax rule tables"
    )
    incomes: List[Income] = Field(default_factory=list, description="Incomes")
    expenses: List[Expense] = Field(default_factory=list, description="Expenses")
    accounts: List[InvestmentAccount] = Field(
        default_factory=list, description="Investment accounts"
    )
    contributions: List[ContributionRule] = Field(
        default_factory=list, description="Contribution rules"
    )
    loans: List[Loan] = Field(default_factory=list, description="Loans")
    goals: List[Goal] = Field(default_factory=list, description="Goals")
