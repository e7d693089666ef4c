from __future__ import annotations

import responses
from responses import matchers

from app.services.refresh import RefreshSummary
from tests.fixtures import MOCK1_URL, MOCK2_URL


class StubRefreshService:
    def __init__(self, summary):
        self.summary = summary

    def refresh_all(self, cancel_event=None):
        return self.summary


def test_refresh_rates_prints_summary(app, runner):
    summary = RefreshSummary(currencies_in_system=3, currencies_processed=3, providers_with_data=2, rates_saved=4)
    summary.failures.append("No provider returned rates for EUR: mock-provider-1=empty_data")
    app.extensions["fx_refresh_service"] = StubRefreshService(summary)

    result = runner.invoke(args=["refresh-rates"])

    assert result.exit_code == 0
    assert "Refreshed 3/3 currencies: 2 with data, 4 rates saved, 1 failures." in result.output
    assert "  - No provider returned rates for EUR" in result.output


def test_refresh_rates_exits_non_zero_when_run_cannot_start(app, runner):
    app.extensions.pop("fx_refresh_service")

    result = runner.invoke(args=["refresh-rates"])

    assert result.exit_code == 1


def test_seed_currencies_adds_codes(app, runner):
    result = runner.invoke(args=["seed-currencies", "jpy", "CHF", "usd"])

    assert result.exit_code == 0
    assert "Added 2 currencies; directory now tracks 5." in result.output


def test_seed_currencies_rejects_invalid_code(app, runner):
    result = runner.invoke(args=["seed-currencies", "J1Y"])

    assert result.exit_code == 2
    assert "3 letters" in result.output


@responses.activate
def test_probe_providers_reports_each_provider(app, runner):
    responses.add(
        responses.GET,
        f"{MOCK1_URL}/rates",
        json={"base": "USD", "rates": {"EUR": 0.92}},
        match=[matchers.query_param_matcher({"base": "USD"})],
    )
    responses.add(responses.GET, f"{MOCK2_URL}/api/rates", status=503)

    result = runner.invoke(args=["probe-providers"])

    assert result.exit_code == 0
    assert "mock-provider-1: UP" in result.output
    assert "mock-provider-2: DOWN" in result.output
    assert "fixer-io: NO_DATA" in result.output
    assert "Overall: DEGRADED" in result.output


@responses.activate
def test_probe_providers_exits_non_zero_when_all_down(app, runner):
    responses.add(responses.GET, f"{MOCK1_URL}/rates", status=500)
    responses.add(responses.GET, f"{MOCK2_URL}/api/rates", status=500)

    result = runner.invoke(args=["probe-providers", "--base", "eur"])

    assert result.exit_code == 1
    assert "Overall: DOWN" in result.output
