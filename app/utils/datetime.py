"""UTC-only datetime helpers used when reading upstream timestamps."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive values and convert aware ones to UTC."""

    return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)


def utc_now() -> datetime:
    return datetime.now(UTC)


def from_epoch_seconds(value: Any) -> datetime:
    """Convert a UNIX timestamp in seconds into an aware UTC datetime.

    Raises:
        ValueError: If ``value`` is not a number or lies outside the
            platform's supported range.
    """

    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValueError(f"Epoch seconds must be numeric, got {value!r}")
    try:
        return datetime.fromtimestamp(value, tz=UTC)
    except (OverflowError, OSError) as exc:
        raise ValueError(f"Epoch seconds out of range: {value!r}") from exc

