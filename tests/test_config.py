from __future__ import annotations

import pytest

import config
from config import DEFAULT_PROVIDER_ORDER, get_config


def test_get_config_returns_testing_config():
    config_cls = get_config("testing")

    assert config_cls is config.TestingConfig
    assert config_cls.SCHEDULER_ENABLED is False
    assert config_cls.PROVIDERS_RETRY_MAX_ATTEMPTS >= 1


def test_get_config_unknown_env_raises():
    with pytest.raises(KeyError):
        get_config("staging")


def test_provider_order_is_normalized_and_deduplicated(monkeypatch):
    monkeypatch.setattr(config.TestingConfig, "PROVIDERS_ORDER", ["Mock2", "mock-provider-1", "mock2", " fixer "])

    config_cls = get_config("testing")

    assert config_cls.PROVIDERS_ORDER == ["mock-provider-2", "mock-provider-1", "fixer-io"]


def test_default_order_lists_every_provider():
    assert DEFAULT_PROVIDER_ORDER.split(",") == [
        "mock-provider-1",
        "mock-provider-2",
        "fixer-io",
        "exchangeratesapi",
    ]


@pytest.mark.parametrize(
    "attribute, value",
    [
        ("PROVIDERS_ORDER", ["mock-provider-1", "unknown"]),
        ("PROVIDERS_RETRY_MAX_ATTEMPTS", 0),
        ("PROVIDERS_RETRY_BACKOFF_SECONDS", -0.5),
        ("REFRESH_MAX_WORKERS", 0),
    ],
)
def test_invalid_provider_settings_raise(monkeypatch, attribute, value):
    monkeypatch.setattr(config.TestingConfig, attribute, value)

    with pytest.raises(ValueError):
        get_config("testing")
