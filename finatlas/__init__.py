"""FinAtlas projection engine Flask application factory."""

from typing import Optional

from flask import Flask

from finatlas.config import configure_logging, get_global_settings


def create_app(config_name: Optional[str] = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config_name: Configuration name (development, testing, production);
            overrides APP_ENV when given

    Returns:
        Flask: Configured Flask application instance
    """
    app = Flask(__name__)

    # Configuration from Pydantic Settings
    settings = get_global_settings()
    configure_logging(settings)
    app_env = config_name or settings.app_env
    app.config["SECRET_KEY"] = settings.secret_key
    app.config["APP_ENV"] = app_env
    app.config["DEBUG"] = app_env == "development"
    app.config["TESTING"] = app_env == "testing"

    # Register blueprints
    from finatlas.blueprints.health import health_bp
    from finatlas.blueprints.projections import projections_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(projections_bp)

    return app
