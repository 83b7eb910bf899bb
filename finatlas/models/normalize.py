"""
Scenario input normalization and validation.

``prepare_input`` is the single gate every engine entry point goes through:
it coerces raw JSON into a ``ScenarioInput``, fills defaults and rejects the
first invalid field with a ``ScenarioValidationError``.
"""

import logging
from typing import Any, Mapping, Union

from pydantic import ValidationError

from .scenario import (
    ContributionRule,
    Expense,
    Goal,
    GrowthRule,
    Income,
    InvestmentAccount,
    Loan,
    ScenarioInput,
)

logger = logging.getLogger(__name__)

ScenarioData = Union[ScenarioInput, Mapping[str, Any]]


class ScenarioValidationError(ValueError):
    """Raised when a scenario cannot be projected."""


def coerce_input(data: ScenarioData) -> ScenarioInput:
    """
    Build a ScenarioInput from a model or a JSON-like mapping.

    Raises:
        ScenarioValidationError: naming the first field pydantic rejected
    """
    if isinstance(data, ScenarioInput):
        return data
    try:
        return ScenarioInput.model_validate(data)
    except ValidationError as exc:
        raise ScenarioValidationError(_describe_first_error(exc)) from exc


def _describe_first_error(exc: ValidationError) -> str:
    error = exc.errors()[0]
    path = ""
    for part in error["loc"]:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    if error["type"] == "missing":
        return f"Missing required field: {path}"
    return f"Invalid value for {path}: {error['msg']}"


def _normalize_income(income: Income) -> Income:
    return income.model_copy(
        update={
            "growth_rule": income.growth_rule or GrowthRule.NONE,
            "growth_pct": income.growth_pct if income.growth_pct is not None else 0.0,
            "member_name": income.member_name or "Primary",
        }
    )


def _normalize_expense(expense: Expense) -> Expense:
    return expense.model_copy(
        update={
            "growth_rule": expense.growth_rule or GrowthRule.NONE,
            "growth_pct": expense.growth_pct if expense.growth_pct is not None else 0.0,
            "name": expense.name if expense.name is not None else expense.category,
            "is_essential": bool(expense.is_essential),
        }
    )


def _normalize_account(account: InvestmentAccount) -> InvestmentAccount:
    holdings = [
        holding.model_copy(
            update={
                "last_price": (
                    holding.last_price
                    if holding.last_price is not None
                    else holding.avg_price
                )
            }
        )
        for holding in account.holdings
    ]
    return account.model_copy(update={"holdings": holdings})


def _normalize_contribution(rule: ContributionRule) -> ContributionRule:
    if rule.escalation_pct is not None:
        return rule
    return rule.model_copy(update={"escalation_pct": 0.0})


def _normalize_loan(loan: Loan) -> Loan:
    if loan.extra_payment_monthly is not None:
        return loan
    return loan.model_copy(update={"extra_payment_monthly": 0.0})


def _normalize_goal(goal: Goal) -> Goal:
    if goal.priority is not None:
        return goal
    return goal.model_copy(update={"priority": 2})


def normalize_input(scenario: ScenarioInput) -> ScenarioInput:
    """
    Fill defaults on a copy of the scenario; the argument is never modified.

    Args:
        scenario: Scenario as supplied by the caller

    Returns:
        New ScenarioInput with every optional field resolved
    """
    return scenario.model_copy(
        update={
            "incomes": [_normalize_income(item) for item in scenario.incomes],
            "expenses": [_normalize_expense(item) for item in scenario.expenses],
            "accounts": [_normalize_account(item) for item in scenario.accounts],
            "contributions": [
                _normalize_contribution(item) for item in scenario.contributions
            ],
            "loans": [_normalize_loan(item) for item in scenario.loans],
            "goals": [_normalize_goal(item) for item in scenario.goals],
        }
    )


def validate_input(scenario: ScenarioInput) -> None:
    """
    Check a normalized scenario, failing on the first violation.

    Raises:
        ScenarioValidationError: describing the first invalid field
    """
    household = scenario.household
    if household.start_date is None:
        raise ScenarioValidationError("Missing required field: household.startDate")
    if household.end_date is None:
        raise ScenarioValidationError("Missing required field: household.endDate")
    if household.start_date > household.end_date:
        raise ScenarioValidationError(
            "household.startDate must be before household.endDate"
        )
    if not scenario.scenario_id:
        raise ScenarioValidationError("Missing required field: scenarioId")

    for income in scenario.incomes:
        if not income.id:
            raise ScenarioValidationError("Income entry missing required field: id")
        if income.amount < 0:
            raise ScenarioValidationError(f"Income {income.id} has negative amount")

    for expense in scenario.expenses:
        if not expense.id:
            raise ScenarioValidationError("Expense entry missing required field: id")
        if expense.amount < 0:
            raise ScenarioValidationError(f"Expense {expense.id} has negative amount")

    account_ids = set()
    for account in scenario.accounts:
        if not account.id:
            raise ScenarioValidationError("Account entry missing required field: id")
        if account.expected_return_pct < -100:
            raise ScenarioValidationError(
                f"Account {account.id} has unrealistic expected return"
            )
        for holding in account.holdings:
            if holding.shares < 0:
                raise ScenarioValidationError(
                    f"Account {account.id} holding {holding.ticker} has negative shares"
                )
            if holding.avg_price < 0 or (holding.last_price or 0) < 0:
                raise ScenarioValidationError(
                    f"Account {account.id} holding {holding.ticker} has negative price"
                )
        account_ids.add(account.id)

    for loan in scenario.loans:
        _validate_loan(loan)

    for rule in scenario.contributions:
        if not rule.account_id:
            raise ScenarioValidationError(
                "Contribution rule missing required field: accountId"
            )
        if rule.account_id not in account_ids:
            raise ScenarioValidationError(
                f"Contribution references non-existent account: {rule.account_id}"
            )
        if rule.amount_monthly < 0:
            raise ScenarioValidationError(
                f"Contribution to {rule.account_id} has negative amount"
            )

    for goal in scenario.goals:
        if not goal.id:
            raise ScenarioValidationError("Goal entry missing required field: id")
        if goal.target_amount_real < 0:
            raise ScenarioValidationError(
                f"Goal {goal.id} has negative target amount"
            )


def _validate_loan(loan: Loan) -> None:
    if not loan.id:
        raise ScenarioValidationError("Loan entry missing required field: id")
    if loan.principal < 0:
        raise ScenarioValidationError(f"Loan {loan.id} has negative principal")
    if loan.term_months <= 0:
        raise ScenarioValidationError(f"Loan {loan.id} has invalid term")
    if (loan.extra_payment_monthly or 0) < 0:
        raise ScenarioValidationError(f"Loan {loan.id} has negative extra payment")
    if loan.payment_override_monthly is not None and loan.payment_override_monthly < 0:
        raise ScenarioValidationError(f"Loan {loan.id} has negative payment override")


def prepare_input(data: ScenarioData) -> ScenarioInput:
    """
    Coerce, normalize and validate a scenario.

    Args:
        data: ScenarioInput or camelCase JSON-like mapping

    Returns:
        Normalized, validated ScenarioInput

    Raises:
        ScenarioValidationError: if the scenario is invalid
    """
    scenario = normalize_input(coerce_input(data))
    validate_input(scenario)
    logger.debug(
        "Prepared scenario %s: %d incomes, %d expenses, %d accounts, %d loans",
        scenario.scenario_id,
        len(scenario.incomes),
        len(scenario.expenses),
        len(scenario.accounts),
        len(scenario.loans),
    )
    return scenario
