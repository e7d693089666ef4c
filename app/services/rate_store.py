"""Storage port and SQLAlchemy adapter for exchange rate records."""

from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from app.database import session_scope
from app.models import ExchangeRate
from app.utils.datetime import ensure_utc

RATE_QUANTUM = Decimal("0.000001")


class RateStore(Protocol):
    """Persists one exchange rate record per call."""

    def save_rate(
        self,
        base: str,
        target: str,
        rate: Decimal,
        timestamp: datetime,
        source: str,
    ) -> None: ...


class SqlRateStore:
    """Upserts exchange rates, committing each record on its own."""

    def save_rate(
        self,
        base: str,
        target: str,
        rate: Decimal,
        timestamp: datetime,
        source: str,
    ) -> None:
        with session_scope() as session:
            _upsert_rate(
                session,
                base=base.upper(),
                target=target.upper(),
                timestamp=ensure_utc(timestamp),
                rate=Decimal(rate).quantize(RATE_QUANTUM, rounding=ROUND_HALF_UP),
                source=source,
            )


def _upsert_rate(
    session,
    base: str,
    target: str,
    timestamp: datetime,
    rate: Decimal,
    source: str,
) -> None:
    existing = (
        session.query(ExchangeRate)
        .filter_by(
            base_currency_code=base,
            target_currency_code=target,
            timestamp=timestamp,
            source=source,
        )
        .one_or_none()
    )
    if existing:
        existing.rate = rate
    else:
        session.add(
            ExchangeRate(
                base_currency_code=base,
                target_currency_code=target,
                timestamp=timestamp,
                rate=rate,
                source=source,
            )
        )
