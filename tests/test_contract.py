"""
Tests for the engine entry points and the JSON result contract.
"""

import pytest

from finatlas.models import (
    ENGINE_VERSION,
    ScenarioValidationError,
    get_input_hash,
    run_engine,
    validate_input,
)
from finatlas.models.projection import TaxAdjustment
from finatlas.models.results import WarningCode


class TestRunEngine:
    """Test run_engine on the baseline scenario."""

    @pytest.fixture
    def result(self, scenario_data):
        return run_engine(scenario_data)

    def test_metadata(self, result, scenario_data):
        assert result.engine_version == ENGINE_VERSION
        assert result.input_hash == get_input_hash(scenario_data)
        assert len(result.input_hash) == 64

    def test_series_have_one_point_per_month(self, result):
        series = result.series
        for points in (
            series.net_worth,
            series.assets_total,
            series.liabilities_total,
            series.income_total,
            series.expense_total,
            series.taxes_total,
            series.cashflow_net,
        ):
            assert len(points) == 12

        assert len(series.account_balances["account1"]) == 12
        assert all(point.v > 0 for point in series.taxes_total)

    def test_monthly_matches_series(self, result):
        assert len(result.monthly) == 12
        for row, point in zip(result.monthly, result.series.net_worth):
            assert row.t == point.t
            assert point.v == round(row.assets_end - row.liabilities_end, 2)

    def test_annual_rollups(self, result):
        assert len(result.annual) == 1
        assert len(result.tax_annual) == 1
        assert result.annual[0].income == 60000.0
        assert result.annual[0].end_net_worth == result.series.net_worth[-1].v
        assert result.tax_annual[0].total == result.annual[0].taxes

    def test_warnings(self, result):
        assert result.warnings_with_code(WarningCode.TAX_RULES_MISSING)
        assert result.warnings_with_code(WarningCode.DEFICIT_MONTH) == []

    def test_goal_progress(self, scenario_data):
        scenario_data["goals"] = [
            {"id": "g1", "targetAmountReal": 20000, "targetDate": "2024-12-01"}
        ]
        result = run_engine(scenario_data)

        progress = result.series.goal_progress["g1"]
        assert len(progress.funded) == 12
        assert progress.target_nominal[0].v == 20000.0
        assert progress.target_nominal[-1].v == pytest.approx(20556.92, abs=0.01)
        assert progress.funded[-1].v == result.series.net_worth[-1].v

    def test_tax_adjustment_mode(self, scenario_data):
        dampened = run_engine(scenario_data)
        indexed = run_engine(scenario_data, tax_adjustment=TaxAdjustment.INDEXED)

        assert dampened.input_hash == indexed.input_hash
        assert dampened.annual[0].taxes < indexed.annual[0].taxes

    def test_invalid_scenario_raises(self, scenario_data):
        scenario_data["loans"][0]["termMonths"] = -1

        with pytest.raises(ScenarioValidationError):
            run_engine(scenario_data)

    def test_deterministic(self, scenario_data):
        assert run_engine(scenario_data) == run_engine(scenario_data)


class TestJsonContract:
    """Test the camelCase JSON rendering of results."""

    def test_top_level_keys(self, scenario_data):
        payload = run_engine(scenario_data).model_dump(mode="json", by_alias=True)

        assert set(payload) == {
            "engineVersion",
            "inputHash",
            "series",
            "monthly",
            "annual",
            "taxAnnual",
            "warnings",
        }

    def test_nested_keys_and_dates(self, scenario_data):
        payload = run_engine(scenario_data).model_dump(mode="json", by_alias=True)

        assert payload["series"]["netWorth"][0]["t"] == "2024-01-01"
        assert "accountBalances" in payload["series"]
        assert "loanPayments" in payload["monthly"][0]
        assert "endNetWorth" in payload["annual"][0]
        assert "effectiveRate" in payload["taxAnnual"][0]

        warning = payload["warnings"][0]
        assert warning["code"] == "TAX_RULES_MISSING"
        assert warning["severity"] == "info"


class TestValidateAndHash:
    """Test validate_input and get_input_hash."""

    def test_validate_input(self, scenario_data):
        assert validate_input(scenario_data) is True

    def test_validate_input_raises(self, scenario_data):
        scenario_data["incomes"][0]["amount"] = -10

        with pytest.raises(ScenarioValidationError, match="negative amount"):
            validate_input(scenario_data)

    def test_hash_stable_under_key_order(self, scenario_data):
        reordered = dict(reversed(list(scenario_data.items())))
        assert get_input_hash(reordered) == get_input_hash(scenario_data)

    def test_hash_changes_with_input(self, scenario_data):
        before = get_input_hash(scenario_data)
        scenario_data["expenses"][0]["amount"] = 2100

        assert get_input_hash(scenario_data) != before
