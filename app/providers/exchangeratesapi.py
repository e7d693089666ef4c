"""exchangeratesapi.io provider implementation."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .fixer import KeyedLatestRatesProvider
from .http_client import client_from_config
from .schemas import CanonicalRateResponse

logger = logging.getLogger(__name__)


class ExchangeRatesApiProvider(KeyedLatestRatesProvider):
    """Provider that fetches rates from exchangeratesapi.io for any base."""

    name = "exchangeratesapi"

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> ExchangeRatesApiProvider:
        client = client_from_config(
            config, "EXCHANGERATESAPI_BASE_URL", "https://api.exchangeratesapi.io/v1"
        )
        provider = cls(client, access_key=config.get("EXCHANGERATESAPI_ACCESS_KEY"))
        logger.info(
            "Provider %s configured: enabled=%s, baseUrl=%s",
            cls.name,
            provider.enabled,
            client.base_url,
        )
        return provider

    def fetch_latest_rates(self, base_currency_code: str) -> CanonicalRateResponse | None:
        base = self._normalize_base(base_currency_code)
        if not self.enabled:
            return None

        observed_at, raw_rates = self._fetch_latest(base)
        rates = self._clean_rates(base, raw_rates.items())
        if not rates:
            return None

        return CanonicalRateResponse(
            provider_name=self.name,
            base_currency=base,
            observed_at=observed_at,
            rates=rates,
        )
