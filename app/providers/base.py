"""Abstract interface for FX rate providers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

from app.errors import require_currency_code

from .http_client import HTTPClient, HTTPClientError
from .schemas import ONE, CanonicalRateResponse, normalize_code, to_decimal

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """Raised when an upstream provider cannot fulfill a request."""


class ProviderUnavailable(ProviderError):
    """The upstream could not be reached or its payload could not be processed.

    Covers transport failures, timeouts, non-2xx statuses, unparsable bodies
    and upstream-reported failure flags. Eligible for retry.
    """


class BaseRateProvider(ABC):
    """Defines the interface all FX rate providers must implement.

    Implementations return a :class:`CanonicalRateResponse` on success,
    ``None`` when the upstream has no data (or the provider is not
    configured), and raise :class:`ProviderUnavailable` for transport,
    parse or upstream errors.
    """

    name: str

    @abstractmethod
    def fetch_latest_rates(self, base_currency_code: str) -> CanonicalRateResponse | None:
        """Retrieve the most recent rates for the given base currency."""

    @staticmethod
    def _normalize_base(value: Any) -> str:
        return require_currency_code(value)

    def _get(self, client: HTTPClient, path: str, params: Mapping[str, Any]) -> dict[str, Any]:
        try:
            return client.get(path, params=params)
        except HTTPClientError as exc:
            raise ProviderUnavailable(f"Provider {self.name} call failed: {exc}") from exc

    def _ensure_success_flag(self, payload: Mapping[str, Any]) -> None:
        if payload.get("success") is True:
            return
        error_info = payload.get("error")
        if isinstance(error_info, Mapping):
            detail = error_info.get("info") or error_info.get("type") or "unknown error"
        else:
            detail = "unknown error"
        raise ProviderUnavailable(f"Provider {self.name} error: {detail}")

    def _clean_rates(self, base: str, entries: Iterable[tuple[Any, Any]]) -> dict[str, Decimal]:
        """Keep strictly positive numeric entries keyed by uppercase code.

        A self-rate for ``base`` is only kept when it equals 1.
        """

        cleaned: dict[str, Decimal] = {}
        skipped = 0
        for raw_code, raw_rate in entries:
            if not isinstance(raw_code, str) or raw_rate is None:
                skipped += 1
                continue
            try:
                code = normalize_code(raw_code)
                rate = to_decimal(raw_rate)
            except ValueError:
                skipped += 1
                continue
            if not rate.is_finite() or rate <= 0:
                skipped += 1
                continue
            if code == base:
                if rate != ONE:
                    skipped += 1
                    continue
                rate = ONE
            cleaned[code] = rate
        if skipped:
            logger.debug("Provider %s skipped %s unusable rate entries for %s", self.name, skipped, base)
        return cleaned
