"""Tests for the projection API endpoints."""

import json
from unittest.mock import patch

from finatlas.models.contract import get_input_hash
from finatlas.models.monte_carlo import MonteCarloCancelled


class TestCreateProjection:
    """Test POST /api/projections."""

    def test_projection_success(self, client, scenario_data):
        response = client.post("/api/projections", json=scenario_data)

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["inputHash"] == get_input_hash(scenario_data)
        assert len(data["series"]["netWorth"]) == 12
        assert data["monthly"][0]["t"] == "2024-01-01"

    def test_invalid_scenario(self, client, scenario_data):
        scenario_data["incomes"][0]["amount"] = -5

        response = client.post("/api/projections", json=scenario_data)

        assert response.status_code == 400
        data = json.loads(response.data)
        assert data["error"] == "Invalid scenario"
        assert data["message"] == "Income income1 has negative amount"

    def test_missing_field(self, client, scenario_data):
        del scenario_data["taxProfile"]

        response = client.post("/api/projections", json=scenario_data)

        assert response.status_code == 400
        assert json.loads(response.data)["message"] == (
            "Missing required field: taxProfile"
        )

    def test_non_object_body(self, client):
        response = client.post("/api/projections", json=[1, 2, 3])
        assert response.status_code == 400

        response = client.post(
            "/api/projections", data="not json", content_type="text/plain"
        )
        assert response.status_code == 400

    def test_internal_error(self, client, scenario_data):
        with patch(
            "finatlas.blueprints.projections.ProjectionService.project",
            side_effect=RuntimeError("boom"),
        ):
            response = client.post("/api/projections", json=scenario_data)

        assert response.status_code == 500
        assert json.loads(response.data) == {"error": "Internal server error"}


class TestMonteCarloEndpoint:
    """Test POST /api/projections/monte-carlo."""

    def test_monte_carlo_success(self, client, scenario_data):
        response = client.post(
            "/api/projections/monte-carlo",
            json={"scenario": scenario_data, "config": {"simulations": 50, "seed": 3}},
        )

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["simulations"] == 50
        assert data["seed"] == 3
        assert len(data["bands"]) == 12
        assert 0 <= data["successRate"] <= 1
        assert set(data["bands"][0]) == {"t", "p10", "p25", "p50", "p75", "p90"}

    def test_missing_scenario(self, client):
        response = client.post("/api/projections/monte-carlo", json={"config": {}})
        assert response.status_code == 400

    def test_invalid_config(self, client, scenario_data):
        response = client.post(
            "/api/projections/monte-carlo",
            json={"scenario": scenario_data, "config": {"maxWorkers": 0}},
        )

        assert response.status_code == 400
        assert json.loads(response.data)["error"] == "Invalid config"

    def test_config_must_be_object(self, client, scenario_data):
        response = client.post(
            "/api/projections/monte-carlo",
            json={"scenario": scenario_data, "config": [50]},
        )
        assert response.status_code == 400

    def test_cancelled_run(self, client, scenario_data):
        with patch(
            "finatlas.blueprints.projections.ProjectionService.simulate",
            side_effect=MonteCarloCancelled("deadline exceeded"),
        ):
            response = client.post(
                "/api/projections/monte-carlo", json={"scenario": scenario_data}
            )

        assert response.status_code == 503


class TestValidateAndHashEndpoints:
    """Test the validate and hash endpoints."""

    def test_validate_success(self, client, scenario_data):
        response = client.post("/api/projections/validate", json=scenario_data)

        assert response.status_code == 200
        assert json.loads(response.data) == {"valid": True}

    def test_validate_failure(self, client, scenario_data):
        scenario_data["household"]["endDate"] = "2023-01-01"

        response = client.post("/api/projections/validate", json=scenario_data)

        assert response.status_code == 400
        assert "must be before" in json.loads(response.data)["message"]

    def test_hash(self, client, scenario_data):
        response = client.post("/api/projections/hash", json=scenario_data)

        assert response.status_code == 200
        assert json.loads(response.data) == {
            "inputHash": get_input_hash(scenario_data)
        }
