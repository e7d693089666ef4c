"""Scheduler setup for periodic FX rate refresh."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from time import perf_counter
from typing import Any, cast

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from flask import Flask

from app.services.refresh import RefreshCancelled, RefreshService, RefreshSummary

logger = logging.getLogger(__name__)

SCHEDULER_EXT_KEY = "apscheduler"
REFRESH_STATE_KEY = "fx_refresh_state"


def ensure_refresh_state(app: Flask) -> dict[str, Any]:
    """Ensure refresh state dict exists on app extensions."""
    state = app.extensions.setdefault(REFRESH_STATE_KEY, {})
    if not isinstance(state, dict):
        new_state: dict[str, Any] = {}
        app.extensions[REFRESH_STATE_KEY] = new_state
        return new_state
    return state


def run_refresh(app: Flask, trigger: str = "scheduled") -> RefreshSummary | None:
    """Run one refresh pass, record its outcome on the app and log the summary.

    Returns ``None`` when the run could not start or was cancelled; never raises.
    """

    with app.app_context():
        service = cast(RefreshService | None, app.extensions.get("fx_refresh_service"))
        if service is None:
            logger.warning("No refresh service configured; skipping %s refresh.", trigger)
            return None

        state = ensure_refresh_state(app)
        logger.info("Starting %s exchange rate refresh...", trigger)
        start = perf_counter()
        try:
            summary = service.refresh_all(cancel_event=app.extensions.get("fx_refresh_cancel"))
        except RefreshCancelled as exc:
            logger.warning("%s refresh cancelled: %s", trigger.capitalize(), exc)
            return None
        except Exception as exc:
            elapsed_ms = (perf_counter() - start) * 1000
            state["last_failure"] = datetime.now(UTC)
            logger.exception("%s refresh failed after %.0f ms: %s", trigger.capitalize(), elapsed_ms, exc)
            return None

        elapsed_ms = (perf_counter() - start) * 1000
        state["last_success"] = datetime.now(UTC)
        state["last_summary"] = summary.as_dict()
        logger.info(
            "%s refresh completed in %.0f ms. Summary: %s currencies in system, %s processed, "
            "%s providers with data, %s rates saved, %s failures",
            trigger.capitalize(),
            elapsed_ms,
            summary.currencies_in_system,
            summary.currencies_processed,
            summary.providers_with_data,
            summary.rates_saved,
            len(summary.failures),
        )
        if summary.failures:
            logger.warning("Failures during %s refresh:", trigger)
            for failure in summary.failures:
                logger.warning(failure)
        return summary


def init_scheduler(app) -> BackgroundScheduler | None:
    """Initialise APScheduler with periodic refresh job if enabled."""

    ensure_refresh_state(app)

    if not app.config.get("SCHEDULER_ENABLED", True):
        logger.info("Scheduler disabled via configuration.")
        return None

    if app.extensions.get(SCHEDULER_EXT_KEY):
        return app.extensions[SCHEDULER_EXT_KEY]

    scheduler = BackgroundScheduler(timezone=app.config.get("SCHEDULER_TIMEZONE", "UTC"))
    cron_expr = app.config.get("RATES_REFRESH_CRON", "0 * * * *")
    trigger = CronTrigger.from_crontab(cron_expr)
    scheduler.add_job(
        run_refresh,
        trigger=trigger,
        args=[app],
        id="refresh_rates",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()

    app.extensions[SCHEDULER_EXT_KEY] = scheduler
    logger.info("APScheduler started with cron '%s'", cron_expr)
    return scheduler


def shutdown_scheduler(app, wait: bool = False) -> None:
    """Stop the background scheduler and ask any running refresh to wind down."""

    cancel_event = app.extensions.get("fx_refresh_cancel")
    if cancel_event is not None:
        cancel_event.set()
    scheduler = app.extensions.get(SCHEDULER_EXT_KEY)
    if scheduler and getattr(scheduler, "running", False):
        scheduler.shutdown(wait=wait)
