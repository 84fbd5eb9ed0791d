"""
Onboarder
Flask Application Factory.

Usage:
    from onboarder import create_app
    app = create_app()           # defaults to "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

from flask import Flask

from onboarder.config import config
from onboarder.integrations.redmine_gateway import RedmineGateway
from onboarder.middleware.logging_config import configure_logging
from onboarder.models import db
from onboarder.services.store import Store

logger = logging.getLogger(__name__)


def create_app(config_name=None, gateway=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     One of: "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.
        gateway: Optional issue tracker gateway (tests pass a fake).

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config[config_name]())

    # ── Logging (must be first) ──────────────────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    db.init_app(app)
    app.extensions["store"] = Store(db)
    app.extensions["redmine_gateway"] = gateway or RedmineGateway(
        app.config["REDMINE_URL"],
        app.config.get("REDMINE_API_KEY"),
        timeout=app.config.get("REDMINE_TIMEOUT", 30),
    )

    # ── Models ───────────────────────────────────────────────────────────
    from onboarder.models import onboarding as _onboarding_models  # noqa: F401

    with app.app_context():
        if app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite:///") and not app.testing:
            os.makedirs(app.instance_path, exist_ok=True)
        db.create_all()

    # ── Blueprints ───────────────────────────────────────────────────────
    from onboarder.blueprints.admin_bp import admin_bp
    from onboarder.blueprints.health_bp import health_bp
    from onboarder.blueprints.onboarding_bp import onboarding_bp

    app.register_blueprint(onboarding_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(health_bp)

    @app.route("/api/v1/health")
    def health():
        return {"status": "ok", "app": "Onboarder"}

    # ── Error handlers ───────────────────────────────────────────────────
    @app.errorhandler(404)
    def not_found(e):
        from flask import request
        return {"error": "Not found", "path": request.path}, 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return {"error": "Method not allowed"}, 405

    @app.errorhandler(413)
    def too_large(e):
        return {"error": "Request body too large"}, 413

    @app.errorhandler(500)
    def server_error(e):
        logger.error("500 error: %s", e, exc_info=True)
        return {"error": "Internal server error"}, 500

    return app
