# backend/app/__init__.py
from flask import Flask, current_app, render_template
from werkzeug.exceptions import HTTPException

from .config import Config
from .errors import InventoryError, StorageError
from .extensions import init_store


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    # Workbook: create file/sheets if needed, then seed clinics
    store = init_store(app)
    store.initialize()

    from .services import clinic_service
    clinic_service.seed_default_clinics(store, app.config["DEFAULT_CLINICS"])

    # Register blueprints
    from .routes.system import system_bp
    from .routes.reports import reports_bp
    from .routes.medicines import medicines_bp
    from .routes.users import users_bp
    from .routes.usage import usage_bp
    from .routes.auth import auth_bp
    from .routes.admin import admin_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(medicines_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(usage_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp)

    register_error_handlers(app)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app


def render_error(message: str, status: int):
    return render_template("error.html", message=message, status=status), status


def register_error_handlers(app: Flask) -> None:
    """
    Failed form submissions render the error view in place.

    Business and validation errors show their own message; anything
    unexpected is logged and answered with a generic page.
    """

    @app.errorhandler(InventoryError)
    def handle_inventory_error(exc: InventoryError):
        return render_error(str(exc), exc.status_code)

    @app.errorhandler(StorageError)
    def handle_storage_error(exc: StorageError):
        current_app.logger.error("Storage failure: %s", exc)
        return render_error(str(exc), exc.status_code)

    @app.errorhandler(404)
    def handle_not_found(exc):
        return render_error("Page not found", 404)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            return render_error(exc.description, exc.code)
        current_app.logger.exception("Unhandled error")
        return render_error("Internal server error", 500)
