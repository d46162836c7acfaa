"""Dhan Mantri application factory."""

from __future__ import annotations

from importlib import import_module
from typing import Iterable

from flask import Flask, redirect, url_for

from . import cli as _cli
from .config import BaseConfig, DevConfig, TestConfig

_CONFIG_MAP = {
    "development": DevConfig,
    "testing": TestConfig,
    "default": BaseConfig,
}


def _resolve_config(name: str | None) -> type[BaseConfig]:
    """Return the config class for the provided environment name."""

    if not name:
        return BaseConfig
    return _CONFIG_MAP.get(name.lower(), BaseConfig)


def _blueprint_paths() -> Iterable[str]:
    """Yield blueprint import paths in registration order."""

    yield "dhanmantri.blueprints.auth"
    yield "dhanmantri.blueprints.dashboard"
    yield "dhanmantri.blueprints.transactions"
    yield "dhanmantri.blueprints.subscriptions"
    yield "dhanmantri.blueprints.portfolio"
    yield "dhanmantri.blueprints.assistant"


def create_app(config_name: str | None = None) -> Flask:
    """Create and configure the Flask application instance."""

    app = Flask(__name__, instance_relative_config=True)
    config_cls = _resolve_config(config_name)
    config_obj = config_cls()
    app.config.from_object(config_obj)
    app.config.setdefault("SQLALCHEMY_ENGINE_OPTIONS", config_obj.sqlalchemy_engine_options())
    app.config["DHANMANTRI_CONFIG"] = config_obj

    from .logging_config import setup_logging

    logger = setup_logging(config_obj)

    # Import lazily so model classes can be imported without building mappers
    # for an app that never starts.
    from .extensions import init_db, init_login, init_mutual_funds

    init_db(app)
    init_login(app)
    init_mutual_funds(app)
    _register_blueprints(app)
    _cli.init_app(app)

    @app.get("/")
    def index():
        return redirect(url_for("dashboard.index"))

    @app.context_processor
    def _inject_currency() -> dict[str, str]:
        return {"currency": config_obj.CURRENCY_SYMBOL, "app_name": config_obj.APP_NAME}

    logger.info("Application created", extra={"config": config_cls.__name__})
    return app


def _register_blueprints(app: Flask) -> None:
    """Import and register all blueprints declared in `_blueprint_paths`."""

    for dotted_path in _blueprint_paths():
        module = import_module(dotted_path)
        blueprint = getattr(module, "bp")
        app.register_blueprint(blueprint)


__all__ = ["BaseConfig", "DevConfig", "TestConfig", "create_app"]
