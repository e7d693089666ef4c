"""SQLAlchemy ORM models backing the currency directory and rate store."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    desc,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Currency(Base):
    """An ISO-4217 currency whose rates are refreshed as a base."""

    __tablename__ = "currencies"
    __table_args__ = (UniqueConstraint("code", name="uq_currencies_code"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    code: Mapped[str] = mapped_column(String(3), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Currency code={self.code}>"


class ExchangeRate(Base):
    """One observed rate from ``base`` to ``target``, tagged with the provider that supplied it."""

    __tablename__ = "exchange_rates"
    __table_args__ = (
        UniqueConstraint(
            "base_currency_code",
            "target_currency_code",
            "timestamp",
            "source",
            name="uq_exchange_rates_observation",
        ),
        CheckConstraint("rate > 0", name="ck_exchange_rates_rate_positive"),
        CheckConstraint(
            "base_currency_code <> target_currency_code",
            name="ck_exchange_rates_distinct_pair",
        ),
        Index(
            "ix_exchange_rates_pair_latest",
            "base_currency_code",
            "target_currency_code",
            desc("timestamp"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    base_currency_code: Mapped[str] = mapped_column(
        ForeignKey("currencies.code", ondelete="RESTRICT"), nullable=False
    )
    target_currency_code: Mapped[str] = mapped_column(
        ForeignKey("currencies.code", ondelete="RESTRICT"), nullable=False
    )
    # Upstream observation time, not the time the row was written.
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    rate: Mapped[Decimal] = mapped_column(Numeric(19, 6), nullable=False)
    source: Mapped[str] = mapped_column(String(64), nullable=False)
    fetched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return (
            f"<ExchangeRate {self.base_currency_code}->{self.target_currency_code} "
            f"{self.timestamp.isoformat()} rate={self.rate} source={self.source}>"
        )
