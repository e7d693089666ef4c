"""Provider interfaces and data structures for FX rate sources."""

from .base import BaseRateProvider, ProviderError, ProviderUnavailable
from .exchangeratesapi import ExchangeRatesApiProvider
from .fixer import FixerProvider, KeyedLatestRatesProvider
from .http_client import HTTPClient, HTTPClientConfig, HTTPClientError
from .mock_service_one import MockServiceOneProvider
from .mock_service_two import MockServiceTwoProvider
from .schemas import CanonicalRateResponse

__all__ = [
    "BaseRateProvider",
    "CanonicalRateResponse",
    "ExchangeRatesApiProvider",
    "FixerProvider",
    "HTTPClient",
    "HTTPClientConfig",
    "HTTPClientError",
    "KeyedLatestRatesProvider",
    "MockServiceOneProvider",
    "MockServiceTwoProvider",
    "ProviderError",
    "ProviderUnavailable",
]
