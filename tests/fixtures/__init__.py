"""Test fixture helpers."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, cast

from app.providers import BaseRateProvider, CanonicalRateResponse

_FIXTURE_ROOT = Path(__file__).parent

MOCK1_URL = "http://mock-one.test"
MOCK2_URL = "http://mock-two.test"
FIXER_URL = "https://fixer.test/api"
EXCHANGERATESAPI_URL = "https://exchangeratesapi.test/v1"

OBSERVED_AT = datetime(2025, 10, 16, 12, 0, tzinfo=UTC)


def load_json(name: str) -> dict[str, Any]:
    """Load a JSON fixture by filename."""

    data = json.loads((_FIXTURE_ROOT / name).read_text())
    if not isinstance(data, dict):
        raise ValueError(f"Fixture '{name}' does not contain a JSON object.")
    return cast(dict[str, Any], data)


def make_response(provider: str, base: str, **rates: str) -> CanonicalRateResponse:
    return CanonicalRateResponse(
        provider_name=provider,
        base_currency=base,
        observed_at=OBSERVED_AT,
        rates={code: Decimal(value) for code, value in rates.items()},
    )


class ScriptedProvider(BaseRateProvider):
    """Provider replaying pre-programmed answers, one per call.

    Each item is a response, ``None``, an exception instance to raise, or a
    callable taking the base code. The last item repeats once the script
    runs out.
    """

    def __init__(self, name: str, *script: Any) -> None:
        self.name = name
        self._script = list(script) or [None]
        self.calls: list[str] = []

    def fetch_latest_rates(self, base_currency_code: str) -> CanonicalRateResponse | None:
        self.calls.append(base_currency_code)
        item = self._script[min(len(self.calls), len(self._script)) - 1]
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item(base_currency_code)
        return item
