"""CLI entry points."""

from __future__ import annotations

from flask import Flask

from .probe import probe_providers_command
from .refresh import refresh_rates
from .seed_currencies import seed_currencies


def register_cli(app: Flask) -> None:
    """Register CLI commands on the given Flask app."""

    app.cli.add_command(refresh_rates)
    app.cli.add_command(seed_currencies)
    app.cli.add_command(probe_providers_command)
