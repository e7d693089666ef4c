"""Application factory for the FX rate refresh service."""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any

from flask import Flask

from config import get_config
from .cli import register_cli
from .database import init_app as init_db
from .logging import setup_logging


def create_app(config_name: str | None = None, overrides: Mapping[str, Any] | None = None) -> Flask:
    """Application factory adhering to the Flask app factory pattern.

    ``overrides`` are applied on top of the environment config before any
    component is built, so tests can point providers at fake endpoints.
    """

    app = Flask(__name__)
    config_class = get_config(config_name)
    app.config.from_object(config_class)
    if overrides:
        app.config.update(overrides)

    setup_logging(app)
    _register_extensions(app)
    register_cli(app)

    if app.config.get("REFRESH_ON_STARTUP", False):
        from .services.scheduler import run_refresh

        run_refresh(app, trigger="startup")
    return app


def _register_extensions(app: Flask) -> None:
    """Build storage, providers, aggregation, refresh and scheduling in dependency order."""

    init_db(app)
    from .providers.registry import init_providers
    from .services import init_aggregator, init_directory, init_refresh_service, init_scheduler

    init_directory(app)
    init_providers(app)
    init_aggregator(app)
    init_refresh_service(app)
    app.extensions["fx_refresh_cancel"] = threading.Event()
    init_scheduler(app)
