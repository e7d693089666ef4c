"""CLI for running one exchange rate refresh pass."""

from __future__ import annotations

import click
from flask import current_app
from flask.cli import with_appcontext

from app.services.scheduler import run_refresh


@click.command("refresh-rates")
@with_appcontext
def refresh_rates() -> None:
    """Fetch rates for every tracked currency and persist them."""

    click.echo("Starting exchange rate refresh...")
    app = current_app._get_current_object()  # type: ignore[attr-defined]
    summary = run_refresh(app, trigger="manual")
    if summary is None:
        click.echo("Refresh did not complete; see logs for details.", err=True)
        raise SystemExit(1)

    click.echo(
        f"Refreshed {summary.currencies_processed}/{summary.currencies_in_system} currencies: "
        f"{summary.providers_with_data} with data, {summary.rates_saved} rates saved, "
        f"{len(summary.failures)} failures."
    )
    for failure in summary.failures:
        click.echo(f"  - {failure}")
