from __future__ import annotations

import pytest

from app.providers import (
    BaseRateProvider,
    ExchangeRatesApiProvider,
    FixerProvider,
    MockServiceOneProvider,
    MockServiceTwoProvider,
    ProviderError,
)
from app.providers.registry import (
    build_providers,
    get_provider,
    list_providers,
    register_provider,
    reset_registry,
)
from tests.fixtures import EXCHANGERATESAPI_URL, FIXER_URL, MOCK1_URL, MOCK2_URL

CONFIG = {
    "MOCK_SERVICE1_URL": MOCK1_URL,
    "MOCK_SERVICE2_URL": MOCK2_URL,
    "FIXER_BASE_URL": FIXER_URL,
    "FIXER_ACCESS_KEY": "key",
    "EXCHANGERATESAPI_BASE_URL": EXCHANGERATESAPI_URL,
    "EXCHANGERATESAPI_ACCESS_KEY": "",
}


@pytest.fixture(autouse=True)
def _reset_providers():
    reset_registry()
    yield
    reset_registry()


def test_default_registry_lists_every_adapter():
    assert list_providers() == ["exchangeratesapi", "fixer-io", "mock-provider-1", "mock-provider-2"]


@pytest.mark.parametrize(
    "name, expected",
    [
        ("mock-provider-1", MockServiceOneProvider),
        ("mock-provider-2", MockServiceTwoProvider),
        ("FIXER-IO", FixerProvider),
        ("exchangeratesapi", ExchangeRatesApiProvider),
    ],
)
def test_get_provider_builds_adapter_from_config(name, expected):
    provider = get_provider(name, CONFIG)
    assert isinstance(provider, expected)


def test_get_provider_unknown_name_raises():
    with pytest.raises(ProviderError):
        get_provider("does-not-exist", CONFIG)


def test_build_providers_skips_unknown_and_duplicate_names():
    providers = build_providers(["mock-provider-2", "nope", "mock-provider-1", "mock-provider-2"], CONFIG)

    assert list(providers) == ["mock-provider-2", "mock-provider-1"]


def test_register_provider_overrides_factory():
    class StaticProvider(BaseRateProvider):
        name = "static"

        def fetch_latest_rates(self, base_currency_code):
            return None

    register_provider("Static", lambda _config: StaticProvider())

    assert isinstance(get_provider("static", {}), StaticProvider)
    with pytest.raises(ValueError):
        register_provider("", lambda _config: StaticProvider())
