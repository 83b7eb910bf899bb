"""Health check blueprint."""

from flask import Blueprint, Response, jsonify

from finatlas.models.contract import ENGINE_VERSION

health_bp = Blueprint("health", __name__)


@health_bp.route("/healthz")
def health_check() -> Response:
    """Liveness probe reporting the engine version."""
    return jsonify({"status": "ok", "engineVersion": ENGINE_VERSION})
