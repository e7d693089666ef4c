"""Mock service 2 provider unit tests."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

import pytest
import responses
from responses import matchers

from app.providers import HTTPClient, HTTPClientConfig, MockServiceTwoProvider, ProviderUnavailable
from tests.fixtures import MOCK2_URL, load_json

pytestmark = pytest.mark.providers


@pytest.fixture()
def provider() -> MockServiceTwoProvider:
    return MockServiceTwoProvider(HTTPClient(HTTPClientConfig(base_url=MOCK2_URL)))


@responses.activate
def test_fetch_latest_rates_reads_list_payload(provider: MockServiceTwoProvider) -> None:
    responses.add(
        responses.GET,
        f"{MOCK2_URL}/api/rates",
        json=load_json("mock_two_rates_usd.json"),
        match=[matchers.query_param_matcher({"from": "USD"})],
    )

    response = provider.fetch_latest_rates("usd")

    assert response is not None
    assert response.provider_name == "mock-provider-2"
    assert response.base_currency == "USD"
    assert response.observed_at == datetime(2025, 10, 16, 12, 0, tzinfo=UTC)
    # Zero and missing rates are skipped.
    assert response.rates == {"EUR": Decimal("0.9215"), "GBP": Decimal("0.7934")}


@pytest.mark.parametrize("payload", [{"success": False, "data": []}, {"data": []}])
@responses.activate
def test_missing_success_flag_raises(provider: MockServiceTwoProvider, payload: dict) -> None:
    responses.add(responses.GET, f"{MOCK2_URL}/api/rates", json=payload)

    with pytest.raises(ProviderUnavailable, match="indicated failure"):
        provider.fetch_latest_rates("USD")


@responses.activate
def test_empty_data_returns_none(provider: MockServiceTwoProvider) -> None:
    responses.add(responses.GET, f"{MOCK2_URL}/api/rates", json={"success": True, "data": []})

    assert provider.fetch_latest_rates("USD") is None


@responses.activate
def test_malformed_data_field_raises(provider: MockServiceTwoProvider) -> None:
    responses.add(
        responses.GET,
        f"{MOCK2_URL}/api/rates",
        json={"success": True, "data": {"EUR": 0.9}},
    )

    with pytest.raises(ProviderUnavailable):
        provider.fetch_latest_rates("USD")


@responses.activate
def test_invalid_last_update_raises(provider: MockServiceTwoProvider) -> None:
    responses.add(
        responses.GET,
        f"{MOCK2_URL}/api/rates",
        json={
            "success": True,
            "lastUpdate": "not-a-timestamp",
            "data": [{"currencyCode": "EUR", "exchangeRate": 0.9}],
        },
    )

    with pytest.raises(ProviderUnavailable, match="lastUpdate"):
        provider.fetch_latest_rates("USD")


@responses.activate
def test_source_mismatch_raises(provider: MockServiceTwoProvider) -> None:
    responses.add(
        responses.GET,
        f"{MOCK2_URL}/api/rates",
        json={"success": True, "source": "EUR", "data": [{"currencyCode": "USD", "exchangeRate": 1.1}]},
    )

    with pytest.raises(ProviderUnavailable):
        provider.fetch_latest_rates("USD")
