"""Application configuration classes."""

from __future__ import annotations

import os

SUPPORTED_RATE_PROVIDERS = {"mock-provider-1", "mock-provider-2", "fixer-io", "exchangeratesapi"}
PROVIDER_ALIASES = {
    "mock1": "mock-provider-1",
    "mock2": "mock-provider-2",
    "fixer": "fixer-io",
    "exchangerates": "exchangeratesapi",
}
DEFAULT_PROVIDER_ORDER = "mock-provider-1,mock-provider-2,fixer-io,exchangeratesapi"


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None else default


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class BaseConfig:
    """Base configuration shared across environments."""

    SCHEDULER_ENABLED = _get_env("SCHEDULER_ENABLED", "true").lower() == "true"
    RATES_REFRESH_CRON = _get_env("RATES_REFRESH_CRON", "0 * * * *")
    SCHEDULER_TIMEZONE = _get_env("SCHEDULER_TIMEZONE", "UTC")
    REFRESH_ON_STARTUP = _get_env("REFRESH_ON_STARTUP", "false").lower() == "true"
    REFRESH_MAX_WORKERS = int(_get_env("REFRESH_MAX_WORKERS", "1"))

    APP_NAME = "fx-rate-refresh"
    SQLALCHEMY_DATABASE_URI = _get_env("DATABASE_URL", "sqlite:///fx-rate-refresh.db")
    DEFAULT_CURRENCIES = _split_csv(_get_env("DEFAULT_CURRENCIES", "USD,EUR,GBP,JPY,CHF,CAD,AUD"))

    PROVIDERS_ORDER = _split_csv(_get_env("PROVIDERS_ORDER", DEFAULT_PROVIDER_ORDER))
    PROVIDERS_RETRY_MAX_ATTEMPTS = int(_get_env("PROVIDERS_RETRY_MAX_ATTEMPTS", "2"))
    PROVIDERS_RETRY_BACKOFF_SECONDS = float(_get_env("PROVIDERS_RETRY_BACKOFF_SECONDS", "0"))
    PROVIDERS_CONNECT_TIMEOUT_SECONDS = float(_get_env("PROVIDERS_CONNECT_TIMEOUT_SECONDS", "2"))
    PROVIDERS_READ_TIMEOUT_SECONDS = float(_get_env("PROVIDERS_READ_TIMEOUT_SECONDS", "5"))

    MOCK_SERVICE1_URL = _get_env("MOCK_SERVICE1_URL", "http://localhost:8081")
    MOCK_SERVICE2_URL = _get_env("MOCK_SERVICE2_URL", "http://localhost:8082")
    FIXER_BASE_URL = _get_env("FIXER_BASE_URL", "https://data.fixer.io/api")
    FIXER_ACCESS_KEY = _get_env("FIXER_ACCESS_KEY", "")
    EXCHANGERATESAPI_BASE_URL = _get_env(
        "EXCHANGERATESAPI_BASE_URL", "https://api.exchangeratesapi.io/v1"
    )
    EXCHANGERATESAPI_ACCESS_KEY = _get_env("EXCHANGERATESAPI_ACCESS_KEY", "")

    LOG_LEVEL = _get_env("LOG_LEVEL", "INFO")
    LOG_JSON_ENABLED = _get_env("LOG_JSON_ENABLED", "false").lower() == "true"
    LOG_FORMAT = _get_env("LOG_FORMAT", "%(asctime)s %(levelname)s [%(name)s] %(message)s")


class DevelopmentConfig(BaseConfig):
    """Configuration for local development."""

    DEBUG = True
    TESTING = False


class ProductionConfig(BaseConfig):
    """Configuration for production deployments."""

    DEBUG = False
    TESTING = False


class TestingConfig(BaseConfig):
    """Configuration used by the test suite."""

    DEBUG = False
    TESTING = True
    SCHEDULER_ENABLED = False
    REFRESH_ON_STARTUP = False
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"


CONFIG_BY_ENV = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def get_config(config_name: str | None = None) -> type[BaseConfig]:
    """Return the config class for the requested environment.

    Args:
        config_name: Optional explicit config identifier. If omitted, the
            APP_ENV environment variable is consulted.

    Raises:
        KeyError: If the requested configuration is not defined.
        ValueError: If the provider settings are invalid.
    """

    env_candidate = config_name if config_name is not None else os.getenv("APP_ENV", "development")
    env_name = (env_candidate or "development").lower()
    try:
        config_cls = CONFIG_BY_ENV[env_name]
    except KeyError as exc:
        raise KeyError(f"Unknown APP_ENV '{env_name}'") from exc

    _validate_providers(config_cls)
    return config_cls


def _validate_providers(config_cls: type[BaseConfig]) -> None:
    normalized_order: list[str] = []
    for raw_name in config_cls.PROVIDERS_ORDER:
        name = _normalize_provider(raw_name)
        if name not in SUPPORTED_RATE_PROVIDERS:
            raise ValueError(
                f"Unsupported provider '{raw_name}' in PROVIDERS_ORDER. "
                f"Allowed values: {sorted(SUPPORTED_RATE_PROVIDERS)}"
            )
        if name not in normalized_order:
            normalized_order.append(name)
    config_cls.PROVIDERS_ORDER = normalized_order

    if config_cls.PROVIDERS_RETRY_MAX_ATTEMPTS < 1:
        raise ValueError(
            "PROVIDERS_RETRY_MAX_ATTEMPTS must be at least 1, "
            f"got {config_cls.PROVIDERS_RETRY_MAX_ATTEMPTS}"
        )
    if config_cls.PROVIDERS_RETRY_BACKOFF_SECONDS < 0:
        raise ValueError("PROVIDERS_RETRY_BACKOFF_SECONDS must not be negative")
    if config_cls.REFRESH_MAX_WORKERS < 1:
        raise ValueError("REFRESH_MAX_WORKERS must be at least 1")


def _normalize_provider(value: str | None) -> str:
    if not value:
        return ""
    normalized = value.strip().lower()
    return PROVIDER_ALIASES.get(normalized, normalized)
