"""fixer.io provider implementation."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from app.utils.datetime import from_epoch_seconds, utc_now

from .base import BaseRateProvider, ProviderUnavailable
from .http_client import HTTPClient, client_from_config
from .schemas import CanonicalRateResponse
from .utils import RebaseError, rebase_rates

logger = logging.getLogger(__name__)


class KeyedLatestRatesProvider(BaseRateProvider):
    """Shared behaviour for ``/latest?access_key=...`` style APIs.

    Both fixer.io and exchangeratesapi.io answer with::

        {"success": true, "timestamp": 1735689600, "base": "EUR", "rates": {"USD": 1.1}}

    and report failures as ``{"success": false, "error": {"code", "type", "info"}}``.
    """

    def __init__(self, client: HTTPClient, access_key: str | None = None) -> None:
        self._client = client
        self._access_key = (access_key or "").strip()

    @property
    def enabled(self) -> bool:
        return bool(self._access_key)

    def _fetch_latest(self, requested_base: str) -> tuple[datetime, dict[str, Any]]:
        payload = self._get(
            self._client,
            "/latest",
            {"access_key": self._access_key, "base": requested_base},
        )
        self._ensure_success_flag(payload)

        raw_rates = payload.get("rates")
        if raw_rates is not None and not isinstance(raw_rates, Mapping):
            raise ProviderUnavailable(f"Provider {self.name} returned malformed 'rates' field")
        reported_base = payload.get("base")
        if isinstance(reported_base, str) and reported_base.strip().upper() != requested_base:
            raise ProviderUnavailable(
                f"Provider {self.name} quoted {reported_base!r} instead of {requested_base}"
            )
        return self._observed_at(payload.get("timestamp")), dict(raw_rates or {})

    def _observed_at(self, value: Any) -> datetime:
        if value is None:
            return utc_now()
        try:
            return from_epoch_seconds(value)
        except ValueError as exc:
            raise ProviderUnavailable(
                f"Provider {self.name} returned invalid timestamp: {value!r}"
            ) from exc


class FixerProvider(KeyedLatestRatesProvider):
    """Provider that fetches rates from fixer.io.

    The free plan only quotes against EUR, so the adapter always requests the
    EUR pivot and derives the requested base by cross-division.
    """

    name = "fixer-io"
    pivot_currency = "EUR"

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> FixerProvider:
        client = client_from_config(config, "FIXER_BASE_URL", "https://data.fixer.io/api")
        provider = cls(client, access_key=config.get("FIXER_ACCESS_KEY"))
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

        observed_at, raw_rates = self._fetch_latest(self.pivot_currency)
        pivot_rates = self._clean_rates(self.pivot_currency, raw_rates.items())
        if not pivot_rates:
            return None

        if base == self.pivot_currency:
            rates = pivot_rates
        else:
            try:
                rebased = rebase_rates(pivot_rates, base, pivot=self.pivot_currency)
            except RebaseError as exc:
                logger.warning("Provider %s cannot derive base %s: %s", self.name, base, exc)
                return None
            # Quantization can round tiny cross rates down to zero; drop those.
            rates = self._clean_rates(base, rebased.items())
            logger.debug(
                "Provider %s converted %s rates from %s to %s base",
                self.name,
                len(rates),
                self.pivot_currency,
                base,
            )

        if not rates:
            return None

        return CanonicalRateResponse(
            provider_name=self.name,
            base_currency=base,
            observed_at=observed_at,
            rates=rates,
        )
