"""Helper utilities for provider rate transformations."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Mapping

CROSS_RATE_QUANTUM = Decimal("0.000001")


class RebaseError(ValueError):
    """Raised when rebasing rates fails due to missing data."""


def rebase_rates(
    rates: Mapping[str, Decimal],
    new_base: str,
    *,
    pivot: str | None = None,
) -> Dict[str, Decimal]:
    """Rebase a mapping of rates quoted against a pivot currency to a new base.

    Each rate is derived by cross-division, ``rate[target] / rate[new_base]``,
    and quantized to 6 fractional digits with ROUND_HALF_UP. The new base is
    included with value exactly 1. When ``pivot`` is given and absent from
    ``rates`` it is added as ``1 / rate[new_base]``.

    Args:
        rates: Mapping of currency codes to Decimal rates relative to the pivot.
        new_base: ISO code to rebase to.
        pivot: Optional code of the currency the rates are quoted against.

    Raises:
        RebaseError: If the requested base is missing or has a non-positive rate.
    """

    normalized_rates = {code.upper(): Decimal(rate) for code, rate in rates.items()}
    normalized_new_base = new_base.strip().upper()
    if pivot:
        normalized_rates.setdefault(pivot.strip().upper(), Decimal("1"))

    if normalized_new_base not in normalized_rates:
        raise RebaseError(f"Missing rate for {normalized_new_base} when rebasing rates.")

    base_rate = normalized_rates[normalized_new_base]
    if base_rate <= 0:
        raise RebaseError(f"Cannot rebase using {normalized_new_base} with non-positive rate.")

    rebased: Dict[str, Decimal] = {normalized_new_base: Decimal("1")}
    for code, value in normalized_rates.items():
        if code == normalized_new_base:
            continue
        rebased[code] = (value / base_rate).quantize(CROSS_RATE_QUANTUM, rounding=ROUND_HALF_UP)

    return rebased
