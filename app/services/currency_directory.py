"""Currency directory backed by the ``currencies`` table."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

from sqlalchemy import select
from app.database import session_scope
from app.errors import ValidationError
from app.models import Currency

logger = logging.getLogger(__name__)

CURRENCY_NAMES = {
    "USD": "US Dollar",
    "EUR": "Euro",
    "GBP": "British Pound",
    "JPY": "Japanese Yen",
    "CHF": "Swiss Franc",
    "CAD": "Canadian Dollar",
    "AUD": "Australian Dollar",
    "CNY": "Chinese Yuan",
    "INR": "Indian Rupee",
    "PLN": "Polish Zloty",
}


class CurrencyDirectory(Protocol):
    """Source of the currency codes the refresh run iterates over."""

    def list_codes(self) -> list[str]: ...


class SqlCurrencyDirectory:
    """Reads and seeds tracked currencies through SQLAlchemy."""

    def list_codes(self) -> list[str]:
        """Return every tracked currency code, uppercase and sorted."""

        with session_scope() as session:
            rows = session.execute(select(Currency.code)).scalars().all()
        return sorted({code.upper() for code in rows})

    def add_currency(self, code: str, name: str | None = None) -> bool:
        """Add ``code`` if missing. Returns ``True`` when a row was created."""

        normalized = (code or "").strip().upper()
        if len(normalized) != 3 or not normalized.isascii() or not normalized.isalpha():
            raise ValidationError("Currency code must be 3 letters", payload={"code": code})

        with session_scope() as session:
            existing = session.execute(
                select(Currency).where(Currency.code == normalized)
            ).scalar_one_or_none()
            if existing is not None:
                return False
            session.add(Currency(code=normalized, name=name or CURRENCY_NAMES.get(normalized, normalized)))
            return True

    def seed_defaults(self, codes: Iterable[str]) -> int:
        """Seed ``codes`` when the directory is empty; returns how many were added."""

        if self.list_codes():
            logger.info("Currencies already present; skipping default initialization")
            return 0

        added = 0
        for code in codes:
            try:
                if self.add_currency(code):
                    added += 1
            except ValidationError as exc:
                logger.warning("Failed to add default currency %r: %s", code, exc)
        logger.info("Initialized %s default currencies", added)
        return added


def init_directory(app) -> SqlCurrencyDirectory:
    """Attach the directory to the Flask app and seed defaults if empty."""

    directory = SqlCurrencyDirectory()
    directory.seed_defaults(app.config.get("DEFAULT_CURRENCIES", []))
    app.extensions["currency_directory"] = directory
    return directory
