"""Logging setup, refresh-run context and structured JSON output."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

LOGGING_CONFIG_FLAG = "_logging_configured"
DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

_current_run_id: ContextVar[str | None] = ContextVar("fx_refresh_run_id", default=None)


@contextmanager
def refresh_run_context(run_id: str) -> Iterator[str]:
    """Tag every record logged inside the block with ``run_id``.

    Worker threads only see the tag when they run inside a copied context.
    """

    token = _current_run_id.set(run_id)
    try:
        yield run_id
    finally:
        _current_run_id.reset(token)


def current_run_id() -> str | None:
    return _current_run_id.get()


class RunContextFilter(logging.Filter):
    """Copy the active refresh run id onto records that lack one."""

    def filter(self, record: logging.LogRecord) -> bool:
        run_id = _current_run_id.get()
        if run_id is not None and not hasattr(record, "run_id"):
            record.run_id = run_id
        return True


class JSONLogFormatter(logging.Formatter):
    """Render a record as one compact JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        payload.update(_extract_extras(record.__dict__))

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)

        return json.dumps(payload, separators=(",", ":"))


def setup_logging(app) -> None:
    """Install a single root handler configured from ``LOG_*`` settings."""

    if app.config.get(LOGGING_CONFIG_FLAG):
        return

    level = _resolve_level(app.config.get("LOG_LEVEL", "INFO"))
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.addFilter(RunContextFilter())
    if _to_bool(app.config.get("LOG_JSON_ENABLED", False)):
        handler.setFormatter(JSONLogFormatter())
    else:
        handler.setFormatter(logging.Formatter(app.config.get("LOG_FORMAT") or DEFAULT_LOG_FORMAT))

    root_logger = logging.getLogger()
    _replace_handlers(root_logger, [handler])
    root_logger.setLevel(level)

    # APScheduler logs every job execution at INFO.
    logging.getLogger("apscheduler").setLevel(max(level, logging.WARNING))
    # urllib3 logs each connection at DEBUG; provider logs already cover calls.
    logging.getLogger("urllib3").setLevel(max(level, logging.INFO))
    app.logger.handlers = []
    app.logger.setLevel(level)
    app.logger.propagate = True

    app.config[LOGGING_CONFIG_FLAG] = True


def _extract_extras(record_dict: dict[str, Any]) -> dict[str, Any]:
    return {
        key: _json_safe(value)
        for key, value in record_dict.items()
        if key not in RESERVED_ATTRS and not key.startswith("_")
    }


def _json_safe(value: Any) -> Any:
    if isinstance(value, str | int | float | bool) or value is None:
        return value
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, list | tuple | set | frozenset):
        return [_json_safe(item) for item in value]
    return str(value)


def _resolve_level(level_name: Any) -> int:
    if isinstance(level_name, int):
        return level_name
    resolved = logging.getLevelName(str(level_name or "INFO").strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in {"1", "true", "yes", "on"}


def _replace_handlers(logger: logging.Logger, handlers: Iterable[logging.Handler]) -> None:
    for existing in logger.handlers[:]:
        logger.removeHandler(existing)
    for handler in handlers:
        logger.addHandler(handler)


def provider_log_extra(
    *,
    provider: str,
    base: str,
    event: str,
    status: str,
    duration_ms: float | None,
    attempts: int | None = None,
    error: str | None = None,
) -> dict[str, Any]:
    """Structured fields for one provider attempt inside an aggregation."""

    payload: dict[str, Any] = {
        "event": event,
        "provider": provider,
        "base": base,
        "status": status,
        "duration_ms": round(duration_ms, 3) if duration_ms is not None else None,
        "attempts": attempts,
        "source": provider,
        "error": error or None,
    }
    return {key: value for key, value in payload.items() if value is not None}


def refresh_log_extra(
    *,
    run_id: str,
    event: str,
    status: str,
    duration_ms: float | None = None,
    base: str | None = None,
    **counts: int,
) -> dict[str, Any]:
    """Structured fields for refresh-run milestones; ``counts`` are merged as-is."""

    payload: dict[str, Any] = {
        "event": event,
        "run_id": run_id,
        "status": status,
        "base": base,
        "duration_ms": round(duration_ms, 3) if duration_ms is not None else None,
        "source": "refresh",
        **counts,
    }
    return {key: value for key, value in payload.items() if value is not None}
