"""CLI command for adding tracked currencies."""

from __future__ import annotations

import click
from flask import current_app
from flask.cli import with_appcontext

from app.errors import ValidationError
from app.services.currency_directory import SqlCurrencyDirectory


@click.command("seed-currencies")
@click.argument("codes", nargs=-1)
@with_appcontext
def seed_currencies(codes: tuple[str, ...]) -> None:
    """Add CODES to the currency directory (defaults to DEFAULT_CURRENCIES)."""

    directory = current_app.extensions.get("currency_directory") or SqlCurrencyDirectory()
    requested = codes or tuple(current_app.config.get("DEFAULT_CURRENCIES", []))

    added = 0
    for code in requested:
        try:
            if directory.add_currency(code):
                added += 1
        except ValidationError as exc:
            raise click.BadParameter(str(exc), param_hint="codes") from exc

    click.echo(f"Added {added} currencies; directory now tracks {len(directory.list_codes())}.")
