"""Household financial projection engine."""

from .contract import (
    ENGINE_VERSION,
    get_input_hash,
    run_engine,
    run_monte_carlo,
    validate_input,
)
from .monte_carlo import MonteCarloCancelled, MonteCarloConfig
from .normalize import ScenarioValidationError, prepare_input
from .projection import TaxAdjustment
from .results import (
    MonteCarloResult,
    PercentileBand,
    ProjectionResult,
    ProjectionWarning,
    Severity,
    WarningCode,
)
from .scenario import (
    ContributionRule,
    Expense,
    FilingStatus,
    Frequency,
    Goal,
    GrowthRule,
    Holding,
    Household,
    Income,
    InvestmentAccount,
    Loan,
    ScenarioAssumptions,
    ScenarioInput,
    TaxProfile,
    TaxRules,
)

__all__ = [
    "ENGINE_VERSION",
    "run_engine",
    "run_monte_carlo",
    "validate_input",
    "get_input_hash",
    "prepare_input",
    "ScenarioValidationError",
    "MonteCarloCancelled",
    "MonteCarloConfig",
    "TaxAdjustment",
    "ProjectionResult",
    "ProjectionWarning",
    "MonteCarloResult",
    "PercentileBand",
    "Severity",
    "WarningCode",
    "ScenarioInput",
    "Household",
    "ScenarioAssumptions",
    "TaxProfile",
    "TaxRules",
    "Income",
    "Expense",
    "Holding",
    "InvestmentAccount",
    "ContributionRule",
    "Loan",
    "Goal",
    "Frequency",
    "GrowthRule",
    "FilingStatus",
]
