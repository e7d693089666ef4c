"""Adapter for mock exchange service 1 (``GET /rates?base=CODE``)."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from app.utils.datetime import utc_now

from .base import BaseRateProvider, ProviderUnavailable
from .http_client import HTTPClient, client_from_config
from .schemas import CanonicalRateResponse

logger = logging.getLogger(__name__)


class MockServiceOneProvider(BaseRateProvider):
    """Provider backed by the first mock service.

    Payload shape::

        {"base": "USD", "timestamp": "2025-01-01T12:00:00", "rates": {"EUR": 0.9}}
    """

    name = "mock-provider-1"

    def __init__(self, client: HTTPClient) -> None:
        self._client = client

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> MockServiceOneProvider:
        return cls(client_from_config(config, "MOCK_SERVICE1_URL"))

    def fetch_latest_rates(self, base_currency_code: str) -> CanonicalRateResponse | None:
        base = self._normalize_base(base_currency_code)
        payload = self._get(self._client, "/rates", {"base": base})

        raw_rates = payload.get("rates")
        if raw_rates is not None and not isinstance(raw_rates, Mapping):
            raise ProviderUnavailable(f"Provider {self.name} returned malformed 'rates' field")
        reported_base = payload.get("base")
        if isinstance(reported_base, str) and reported_base.strip().upper() != base:
            raise ProviderUnavailable(
                f"Provider {self.name} returned rates for {reported_base!r} instead of {base}"
            )

        # The upstream stamps local server time, so it is only logged.
        logger.debug(
            "Provider %s reported timestamp %r for %s", self.name, payload.get("timestamp"), base
        )

        rates = self._clean_rates(base, (raw_rates or {}).items())
        if not rates:
            return None

        return CanonicalRateResponse(
            provider_name=self.name,
            base_currency=base,
            observed_at=utc_now(),
            rates=rates,
        )

