from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from app.providers.schemas import CanonicalRateResponse, to_decimal


def test_canonical_response_normalizes_codes_and_rates():
    response = CanonicalRateResponse(
        provider_name="test",
        base_currency="usd",
        observed_at=datetime.now(UTC),
        rates={"eur": 0.9, "jpy": "150.123"},
    )
    assert response.base_currency == "USD"
    assert response.rates == {"EUR": Decimal("0.9"), "JPY": Decimal("150.123")}
    assert response.has_data is True


def test_canonical_response_requires_provider_name():
    with pytest.raises(ValueError):
        CanonicalRateResponse(provider_name=" ", base_currency="usd", observed_at=datetime.now(UTC))


def test_empty_rates_mean_no_data():
    response = CanonicalRateResponse(provider_name="test", base_currency="usd", observed_at=datetime.now(UTC))
    assert response.rates == {}
    assert response.has_data is False


def test_canonical_response_coerces_timestamps_to_utc():
    naive = datetime(2025, 1, 1, 12, 30, 15)
    response = CanonicalRateResponse(provider_name="test", base_currency="usd", observed_at=naive)
    assert response.observed_at.tzinfo == UTC
    assert response.observed_at == naive.replace(tzinfo=UTC)

    aware = datetime(2025, 1, 1, 12, 30, tzinfo=ZoneInfo("Europe/Istanbul"))
    response = CanonicalRateResponse(provider_name="test", base_currency="usd", observed_at=aware)
    assert response.observed_at == aware.astimezone(UTC)


@pytest.mark.parametrize("rates", [{"EUR": 0}, {"EUR": "-0.5"}, {"EUR": "abc"}])
def test_canonical_response_rejects_non_positive_or_invalid_rates(rates):
    with pytest.raises(ValueError):
        CanonicalRateResponse(provider_name="test", base_currency="USD", observed_at=datetime.now(UTC), rates=rates)


def test_canonical_response_rejects_duplicate_codes_after_normalization():
    with pytest.raises(ValueError, match="Duplicate"):
        CanonicalRateResponse(
            provider_name="test",
            base_currency="USD",
            observed_at=datetime.now(UTC),
            rates={"eur": 0.9, "EUR": 0.91},
        )


def test_base_self_rate_must_be_one():
    with pytest.raises(ValueError):
        CanonicalRateResponse(
            provider_name="test",
            base_currency="USD",
            observed_at=datetime.now(UTC),
            rates={"USD": "1.01"},
        )


def test_rates_cannot_be_changed_after_construction():
    source = {"EUR": "0.9"}
    response = CanonicalRateResponse(
        provider_name="test",
        base_currency="USD",
        observed_at=datetime.now(UTC),
        rates=source,
    )

    with pytest.raises(TypeError):
        response.rates["EUR"] = Decimal("-5")
    source["EUR"] = "-5"

    assert response.rates == {"EUR": Decimal("0.9")}


def test_to_decimal_preserves_float_text():
    assert to_decimal(0.1) == Decimal("0.1")
    with pytest.raises(ValueError):
        to_decimal(True)
