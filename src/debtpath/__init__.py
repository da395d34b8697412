"""DebtPath application factory."""

from __future__ import annotations

from importlib import import_module
from typing import Iterable

from flask import Flask, jsonify

from . import cli as _cli
from .config import BaseConfig, DevConfig, TestConfig
from .errors import AppError
from .logging_config import get_logger, setup_logging
from .services.liabilities import LiabilityFeed

_CONFIG_MAP = {
    "development": DevConfig,
    "testing": TestConfig,
    "default": BaseConfig,
}

logger = get_logger("app")


def _resolve_config(name: str | None) -> type[BaseConfig]:
    """Return the config class for the provided environment name."""

    if not name:
        return BaseConfig
    return _CONFIG_MAP.get(name.lower(), BaseConfig)


def _blueprint_paths() -> Iterable[str]:
    """Yield blueprint import paths registered on the app."""

    yield "debtpath.blueprints.debts"


def create_app(
    config_name: str | None = None, *, liability_feed: LiabilityFeed | None = None
) -> Flask:
    """Create and configure the Flask application instance."""

    app = Flask(__name__, instance_relative_config=True)
    config_cls = _resolve_config(config_name or app.config.get("ENV"))
    config_obj = config_cls()
    app.config.from_object(config_obj)
    app.config["DEBTPATH_CONFIG"] = config_obj

    setup_logging(config_obj)
    _register_blueprints(app)
    _register_error_handlers(app)

    # Imported lazily so model classes can be imported without building an engine.
    from .extensions import init_db, init_liability_feed

    init_db(app)
    init_liability_feed(app, liability_feed)
    _cli.init_app(app)

    return app


def _register_blueprints(app: Flask) -> None:
    """Import and register all blueprints declared in `_blueprint_paths`."""

    for dotted_path in _blueprint_paths():
        module = import_module(dotted_path)
        blueprint = getattr(module, "bp")
        app.register_blueprint(blueprint)


def _register_error_handlers(app: Flask) -> None:
    """Render operational errors as JSON; anything else propagates as a 500."""

    @app.errorhandler(AppError)
    def _handle_app_error(exc: AppError):
        logger.warning(
            "Request failed",
            extra={"code": exc.code, "status_code": exc.status_code, "details": exc.details},
        )
        payload = {"success": False, "code": exc.code, "message": exc.message}
        if exc.details:
            payload["details"] = exc.details
        return jsonify(payload), exc.status_code


__all__ = ["BaseConfig", "DevConfig", "TestConfig", "create_app"]
