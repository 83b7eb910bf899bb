"""
Tests for scenario normalization and validation.
"""

import pytest

from finatlas.models.normalize import (
    ScenarioValidationError,
    coerce_input,
    normalize_input,
    prepare_input,
)
from finatlas.models.scenario import GrowthRule, ScenarioInput


class TestCoerceInput:
    """Test building ScenarioInput from JSON."""

    def test_accepts_camel_case(self, scenario_data):
        scenario = coerce_input(scenario_data)

        assert isinstance(scenario, ScenarioInput)
        assert scenario.household.start_date.isoformat() == "2024-01-01"
        assert scenario.accounts[0].expected_return_pct == 1

    def test_model_passes_through(self, scenario):
        assert coerce_input(scenario) is scenario

    def test_missing_nested_field(self, scenario_data):
        del scenario_data["household"]["startDate"]

        with pytest.raises(
            ScenarioValidationError,
            match=r"Missing required field: household\.startDate",
        ):
            coerce_input(scenario_data)

    def test_missing_list_item_field(self, scenario_data):
        del scenario_data["incomes"][0]["id"]

        with pytest.raises(
            ScenarioValidationError, match=r"Missing required field: incomes\[0\]\.id"
        ):
            coerce_input(scenario_data)

    def test_invalid_enum_value(self, scenario_data):
        scenario_data["incomes"][0]["frequency"] = "DAILY"

        with pytest.raises(
            ScenarioValidationError, match=r"Invalid value for incomes\[0\]\.frequency"
        ):
            coerce_input(scenario_data)


class TestNormalizeInput:
    """Test default filling."""

    def test_fills_defaults(self, scenario_factory):
        data = scenario_factory(
            goals=[
                {"id": "g", "targetAmountReal": 1000, "targetDate": "2024-12-01"}
            ],
            expenses=[
                {
                    "id": "e",
                    "category": "Food",
                    "amount": 500,
                    "frequency": "MONTHLY",
                    "startDate": "2024-01-01",
                }
            ],
        )
        data["accounts"][0]["holdings"][0].pop("lastPrice")
        scenario = normalize_input(coerce_input(data))

        assert scenario.incomes[0].growth_pct == 0.0
        assert scenario.incomes[0].member_name == "Primary"
        assert scenario.expenses[0].name == "Food"
        assert scenario.expenses[0].growth_rule == GrowthRule.NONE
        assert scenario.accounts[0].holdings[0].last_price == 10000
        assert scenario.loans[0].extra_payment_monthly == 0.0
        assert scenario.goals[0].priority == 2

    def test_does_not_modify_input(self, scenario_data):
        original = coerce_input(scenario_data)
        normalized = normalize_input(original)

        assert original.incomes[0].growth_pct is None
        assert normalized is not original

    def test_is_idempotent(self, scenario_data):
        once = normalize_input(coerce_input(scenario_data))
        assert normalize_input(once) == once


class TestValidateInput:
    """Test validation rules; the first violation wins."""

    def test_valid_scenario(self, scenario_data):
        scenario = prepare_input(scenario_data)
        assert scenario.scenario_id == "baseline"

    def test_start_after_end(self, scenario_data):
        scenario_data["household"]["startDate"] = "2025-01-01"

        with pytest.raises(ScenarioValidationError, match="must be before"):
            prepare_input(scenario_data)

    def test_empty_scenario_id(self, scenario_data):
        scenario_data["scenarioId"] = ""

        with pytest.raises(
            ScenarioValidationError, match="Missing required field: scenarioId"
        ):
            prepare_input(scenario_data)

    def test_empty_income_id(self, scenario_data):
        scenario_data["incomes"][0]["id"] = ""

        with pytest.raises(
            ScenarioValidationError, match="Income entry missing required field: id"
        ):
            prepare_input(scenario_data)

    def test_negative_income(self, scenario_data):
        scenario_data["incomes"][0]["amount"] = -1

        with pytest.raises(
            ScenarioValidationError, match="Income income1 has negative amount"
        ):
            prepare_input(scenario_data)

    def test_negative_expense(self, scenario_data):
        scenario_data["expenses"][0]["amount"] = -1

        with pytest.raises(ScenarioValidationError, match="Expense expense1"):
            prepare_input(scenario_data)

    def test_unrealistic_return(self, scenario_data):
        scenario_data["accounts"][0]["expectedReturnPct"] = -150

        with pytest.raises(
            ScenarioValidationError,
            match="Account account1 has unrealistic expected return",
        ):
            prepare_input(scenario_data)

    def test_negative_shares(self, scenario_data):
        scenario_data["accounts"][0]["holdings"][0]["shares"] = -1

        with pytest.raises(ScenarioValidationError, match="negative shares"):
            prepare_input(scenario_data)

    def test_unknown_contribution_account(self, scenario_data):
        scenario_data["contributions"] = [
            {"accountId": "nope", "amountMonthly": 100, "startDate": "2024-01-01"}
        ]

        with pytest.raises(
            ScenarioValidationError,
            match="Contribution references non-existent account: nope",
        ):
            prepare_input(scenario_data)

    def test_invalid_loan_term(self, scenario_data):
        scenario_data["loans"][0]["termMonths"] = 0

        with pytest.raises(ScenarioValidationError, match="Loan loan1 has invalid term"):
            prepare_input(scenario_data)

    def test_payment_override_below_interest_is_accepted(self, scenario_data):
        scenario_data["loans"][0]["paymentOverrideMonthly"] = 50

        scenario = prepare_input(scenario_data)
        assert scenario.loans[0].payment_override_monthly == 50

    def test_negative_goal_target(self, scenario_data):
        scenario_data["goals"] = [
            {"id": "g1", "targetAmountReal": -1, "targetDate": "2024-12-01"}
        ]

        with pytest.raises(
            ScenarioValidationError, match="Goal g1 has negative target amount"
        ):
            prepare_input(scenario_data)

    def test_error_is_value_error(self, scenario_data):
        scenario_data["incomes"][0]["amount"] = -1

        with pytest.raises(ValueError):
            prepare_input(scenario_data)
