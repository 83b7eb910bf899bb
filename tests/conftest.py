"""
Pytest configuration and shared fixtures for the projection engine tests.
"""

import copy
import os
from typing import Any, Dict
from unittest.mock import patch

import pytest

from finatlas import create_app
from finatlas.config import reset_global_settings
from finatlas.models.normalize import prepare_input

BASELINE_SCENARIO: Dict[str, Any] = {
    "scenarioId": "baseline",
    "household": {
        "currency": "USD",
        "anchorDate": "2024-01-01",
        "startDate": "2024-01-01",
        "endDate": "2024-12-01",
    },
    "assumptions": {
        "inflationRatePct": 3,
        "taxableInterestYieldPct": 2,
        "taxableDividendYieldPct": 2,
        "realizedStGainPct": 0,
        "realizedLtGainPct": 0,
    },
    "taxProfile": {
        "stateCode": "CA",
        "filingStatus": "SINGLE",
        "taxYear": 2024,
        "includePayrollTaxes": True,
        "advancedOverridesEnabled": False,
    },
    "taxRules": {"federal": None, "state": None},
    "incomes": [
        {
            "id": "income1",
            "name": "Salary",
            "amount": 5000,
            "frequency": "MONTHLY",
            "startDate": "2024-01-01",
            "growthRule": "NONE",
        }
    ],
    "expenses": [
        {
            "id": "expense1",
            "category": "Housing",
            "name": "Rent",
            "amount": 2000,
            "frequency": "MONTHLY",
            "startDate": "2024-01-01",
            "growthRule": "NONE",
            "isEssential": True,
        }
    ],
    "accounts": [
        {
            "id": "account1",
            "name": "Checking",
            "type": "TAXABLE",
            "expectedReturnPct": 1,
            "holdings": [
                {"ticker": "CASH", "shares": 1, "avgPrice": 10000, "lastPrice": 10000}
            ],
        }
    ],
    "contributions": [],
    "loans": [
        {
            "id": "loan1",
            "type": "AUTO",
            "name": "Car Loan",
            "principal": 15000,
            "aprPct": 5,
            "termMonths": 60,
            "startDate": "2024-01-01",
        }
    ],
    "goals": [],
}


def make_scenario(**overrides: Any) -> Dict[str, Any]:
    """Deep copy of the baseline scenario with top-level keys replaced."""
    scenario = copy.deepcopy(BASELINE_SCENARIO)
    scenario.update(copy.deepcopy(overrides))
    return scenario


@pytest.fixture
def scenario_data() -> Dict[str, Any]:
    """Baseline scenario as camelCase JSON."""
    return make_scenario()


@pytest.fixture
def scenario(scenario_data):
    """Baseline scenario normalized and validated."""
    return prepare_input(scenario_data)


@pytest.fixture
def multi_year_data() -> Dict[str, Any]:
    """Three-year scenario with growth, contributions and a goal."""
    return make_scenario(
        scenarioId="multi-year",
        household={
            "currency": "USD",
            "startDate": "2024-01-01",
            "endDate": "2026-12-01",
        },
        incomes=[
            {
                "id": "salary",
                "name": "Salary",
                "amount": 90000,
                "frequency": "ANNUAL",
                "startDate": "2024-01-01",
                "growthRule": "CUSTOM_PERCENT",
                "growthPct": 3,
            }
        ],
        expenses=[
            {
                "id": "rent",
                "category": "Housing",
                "amount": 2200,
                "frequency": "MONTHLY",
                "startDate": "2024-01-01",
                "growthRule": "TRACK_INFLATION",
            }
        ],
        contributions=[
            {
                "accountId": "account1",
                "amountMonthly": 500,
                "startDate": "2024-01-01",
                "escalationPct": 2,
            }
        ],
        goals=[
            {
                "id": "house",
                "type": "HOME_PURCHASE",
                "name": "Down payment",
                "targetAmountReal": 60000,
                "targetDate": "2026-12-01",
                "priority": 1,
            }
        ],
    )


@pytest.fixture
def app_env():
    """Environment with the settings required by create_app."""
    env = {"SECRET_KEY": "test-secret-key-123", "APP_ENV": "testing"}
    with patch.dict(os.environ, env, clear=True):
        reset_global_settings()
        yield env
    reset_global_settings()


@pytest.fixture
def app(app_env):
    """Flask application configured for tests."""
    return create_app("testing")


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def scenario_factory():
    """Builder for baseline variants with top-level keys replaced."""
    return make_scenario
