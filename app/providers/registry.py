"""Registry and factory for FX rate providers."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Callable, Dict, List

from .base import BaseRateProvider, ProviderError

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[Mapping[str, Any]], BaseRateProvider]

_PROVIDER_FACTORIES: Dict[str, ProviderFactory] = {}


def _default_factories() -> Iterable[tuple[str, ProviderFactory]]:
    from .exchangeratesapi import ExchangeRatesApiProvider
    from .fixer import FixerProvider
    from .mock_service_one import MockServiceOneProvider
    from .mock_service_two import MockServiceTwoProvider

    return [
        (MockServiceOneProvider.name, MockServiceOneProvider.from_config),
        (MockServiceTwoProvider.name, MockServiceTwoProvider.from_config),
        (FixerProvider.name, FixerProvider.from_config),
        (ExchangeRatesApiProvider.name, ExchangeRatesApiProvider.from_config),
    ]


def register_provider(name: str, factory: ProviderFactory) -> None:
    """Register a provider factory under the given name."""

    if not name:
        raise ValueError("Provider name cannot be empty.")
    normalized = name.lower()
    _PROVIDER_FACTORIES[normalized] = factory


def list_providers() -> List[str]:
    """Return the list of registered provider identifiers."""

    return sorted(_PROVIDER_FACTORIES.keys())


def get_provider(name: str, config: Mapping[str, Any]) -> BaseRateProvider:
    """Instantiate the provider registered under ``name``."""

    provider_name = (name or "").lower()
    try:
        factory = _PROVIDER_FACTORIES[provider_name]
    except KeyError as exc:
        available = ", ".join(list_providers()) or "none registered"
        raise ProviderError(
            f"Unknown provider '{provider_name}'. Available providers: {available}"
        ) from exc
    return factory(config)


def build_providers(names: Iterable[str], config: Mapping[str, Any]) -> Dict[str, BaseRateProvider]:
    """Instantiate every named provider, keyed by name.

    Unknown names are logged and left out so that the aggregator can skip
    them; misconfigured known providers raise.
    """

    providers: Dict[str, BaseRateProvider] = {}
    for name in names:
        normalized = name.lower()
        if normalized in providers:
            continue
        try:
            providers[normalized] = get_provider(normalized, config)
        except ProviderError as exc:
            logger.warning("Skipping provider '%s': %s", name, exc)
    return providers


def init_providers(app) -> Dict[str, BaseRateProvider]:
    """Build the configured providers and attach them to the Flask app."""

    providers = build_providers(app.config.get("PROVIDERS_ORDER", []), app.config)
    app.extensions["fx_providers"] = providers
    return providers


def reset_registry(default_factories: Iterable[tuple[str, ProviderFactory]] | None = None) -> None:
    """Reset provider registry; useful for tests."""

    _PROVIDER_FACTORIES.clear()

    factories = default_factories or _default_factories()
    for name, factory in factories:
        register_provider(name, factory)


reset_registry()
