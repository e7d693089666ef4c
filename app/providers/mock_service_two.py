"""Adapter for mock exchange service 2 (``GET /api/rates?from=CODE``)."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from datetime import datetime
from typing import Any

from app.utils.datetime import from_epoch_seconds, utc_now

from .base import BaseRateProvider, ProviderUnavailable
from .http_client import HTTPClient, client_from_config
from .schemas import CanonicalRateResponse


class MockServiceTwoProvider(BaseRateProvider):
    """Provider backed by the second mock service.

    Unlike the first mock, rates arrive as a list of objects and the payload
    carries an explicit ``success`` flag::

        {
          "success": true,
          "source": "USD",
          "lastUpdate": 1735689600,
          "data": [{"currencyCode": "EUR", "exchangeRate": 0.9, "description": "EUR - Euro"}]
        }
    """

    name = "mock-provider-2"

    def __init__(self, client: HTTPClient) -> None:
        self._client = client

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> MockServiceTwoProvider:
        return cls(client_from_config(config, "MOCK_SERVICE2_URL"))

    def fetch_latest_rates(self, base_currency_code: str) -> CanonicalRateResponse | None:
        base = self._normalize_base(base_currency_code)
        payload = self._get(self._client, "/api/rates", {"from": base})

        if payload.get("success") is not True:
            raise ProviderUnavailable(f"Provider {self.name} indicated failure")

        data = payload.get("data")
        if data is not None and not isinstance(data, list):
            raise ProviderUnavailable(f"Provider {self.name} returned malformed 'data' field")
        source = payload.get("source")
        if isinstance(source, str) and source.strip().upper() != base:
            raise ProviderUnavailable(
                f"Provider {self.name} returned rates for {source!r} instead of {base}"
            )

        rates = self._clean_rates(base, self._entries(data or []))
        if not rates:
            return None

        return CanonicalRateResponse(
            provider_name=self.name,
            base_currency=base,
            observed_at=self._observed_at(payload.get("lastUpdate")),
            rates=rates,
        )

    @staticmethod
    def _entries(data: list[Any]) -> Iterator[tuple[Any, Any]]:
        for item in data:
            if isinstance(item, Mapping):
                yield item.get("currencyCode"), item.get("exchangeRate")

    def _observed_at(self, value: Any) -> datetime:
        if value is None:
            return utc_now()
        try:
            return from_epoch_seconds(value)
        except ValueError as exc:
            raise ProviderUnavailable(
                f"Provider {self.name} returned invalid lastUpdate: {value!r}"
            ) from exc
