"""
Projection blueprint.

JSON endpoints over the engine: deterministic projections, Monte Carlo runs,
validation and input hashing. Request and response bodies use camelCase keys.
"""

from typing import Any

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from finatlas.models.monte_carlo import MonteCarloCancelled
from finatlas.models.normalize import ScenarioValidationError
from finatlas.services.projection_service import ProjectionService

projections_bp = Blueprint("projections", __name__, url_prefix="/api/projections")


def _invalid(message: str) -> Any:
    return jsonify({"error": "Invalid scenario", "message": message}), 400


@projections_bp.route("", methods=["POST"])
def create_projection() -> Any:
    """Run a deterministic projection of the posted scenario.

    Returns:
        JSON ProjectionResult
    """
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return _invalid("Request body must be a JSON object")

        result = ProjectionService().project(data)
        return jsonify(result.model_dump(mode="json", by_alias=True)), 200

    except ScenarioValidationError as e:
        return _invalid(str(e))
    except Exception as e:
        current_app.logger.error(f"Error running projection: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500


@projections_bp.route("/monte-carlo", methods=["POST"])
def create_monte_carlo() -> Any:
    """Run a Monte Carlo simulation.

    Body: ``{"scenario": {...}, "config": {"simulations": 500, ...}}``

    Returns:
        JSON MonteCarloResult
    """
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or not isinstance(data.get("scenario"), dict):
            return _invalid("Request body must contain a scenario object")

        overrides = data.get("config") or {}
        if not isinstance(overrides, dict):
            return jsonify({"error": "config must be an object"}), 400

        result = ProjectionService().simulate(data["scenario"], overrides)
        return jsonify(result.model_dump(mode="json", by_alias=True)), 200

    except ScenarioValidationError as e:
        return _invalid(str(e))
    except ValidationError as e:
        return jsonify({"error": "Invalid config", "message": str(e)}), 400
    except MonteCarloCancelled as e:
        return jsonify({"error": "Simulation cancelled", "message": str(e)}), 503
    except Exception as e:
        current_app.logger.error(f"Error running Monte Carlo: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500


@projections_bp.route("/validate", methods=["POST"])
def validate_scenario() -> Any:
    """Validate the posted scenario without projecting it."""
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return _invalid("Request body must be a JSON object")

        ProjectionService().validate(data)
        return jsonify({"valid": True}), 200

    except ScenarioValidationError as e:
        return _invalid(str(e))
    except Exception as e:
        current_app.logger.error(f"Error validating scenario: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500


@projections_bp.route("/hash", methods=["POST"])
def hash_scenario() -> Any:
    """Return the cache key of the posted scenario."""
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return _invalid("Request body must be a JSON object")

        return jsonify({"inputHash": ProjectionService().input_hash(data)}), 200

    except ScenarioValidationError as e:
        return _invalid(str(e))
    except Exception as e:
        current_app.logger.error(f"Error hashing scenario: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500
