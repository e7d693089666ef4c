"""Dataclasses describing normalized FX provider payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from types import MappingProxyType
from typing import Dict, Mapping

from app.utils.datetime import ensure_utc

ONE = Decimal("1")


def normalize_code(code: str) -> str:
    normalized = code.strip().upper()
    if not normalized or not normalized.isascii():
        raise ValueError(f"Currency code must be non-empty ASCII: {code!r}")
    return normalized


def to_decimal(value: Decimal | float | int | str) -> Decimal:
    """Convert a JSON number into a Decimal without binary float artefacts."""

    if isinstance(value, bool):
        raise ValueError(f"Rate must be numeric, got {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Rate must be numeric, got {value!r}") from exc


def _normalize_rates(base: str, rates: Mapping[str, Decimal | float | int | str]) -> Dict[str, Decimal]:
    normalized: Dict[str, Decimal] = {}
    for code, value in rates.items():
        key = normalize_code(code)
        if key in normalized:
            raise ValueError(f"Duplicate rate entry for {key}")
        rate = to_decimal(value)
        if not rate.is_finite() or rate <= 0:
            raise ValueError(f"Rate for {key} must be strictly positive, got {value!r}")
        normalized[key] = rate
    if base in normalized and normalized[base] != ONE:
        raise ValueError(f"Rate for base currency {base} must be exactly 1, got {normalized[base]}")
    return normalized


@dataclass(frozen=True)
class CanonicalRateResponse:
    """Normalized payload representing the latest FX rates for a base currency.

    An empty ``rates`` mapping is a valid value meaning "no data". The stored
    mapping is read-only, so the rate rules hold for the lifetime of the value.
    """

    provider_name: str
    base_currency: str
    observed_at: datetime
    rates: Mapping[str, Decimal] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.provider_name or not self.provider_name.strip():
            raise ValueError("provider_name must be provided for CanonicalRateResponse")
        base = normalize_code(self.base_currency)
        object.__setattr__(self, "base_currency", base)
        object.__setattr__(self, "observed_at", ensure_utc(self.observed_at))
        object.__setattr__(self, "rates", MappingProxyType(_normalize_rates(base, self.rates)))

    @property
    def has_data(self) -> bool:
        return bool(self.rates)
