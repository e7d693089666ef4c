"""CLI command for checking provider availability."""

from __future__ import annotations

import click
from flask import current_app
from flask.cli import with_appcontext

from app.services.provider_probe import ProbeStatus, probe_providers


@click.command("probe-providers")
@click.option("--base", default="USD", show_default=True, help="Base currency to request")
@with_appcontext
def probe_providers_command(base: str) -> None:
    """Call each configured provider once and report which ones answer."""

    report = probe_providers(current_app.extensions.get("fx_providers") or {}, base=base.upper())
    for probe in report.probes:
        line = f"{probe.provider_name}: {probe.status.value} ({probe.duration_ms:.0f} ms)"
        if probe.detail:
            line = f"{line} - {probe.detail}"
        click.echo(line)
    click.echo(f"Overall: {report.status.value}")
    if report.status is ProbeStatus.DOWN:
        raise SystemExit(1)
