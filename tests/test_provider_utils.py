from __future__ import annotations

from decimal import Decimal

import pytest

from app.providers.utils import RebaseError, rebase_rates


def test_rebase_rates_success():
    rates = {
        "USD": Decimal("1"),
        "EUR": Decimal("0.9"),
        "GBP": Decimal("0.8"),
    }
    rebased = rebase_rates(rates, "EUR")
    assert rebased["EUR"] == Decimal("1")
    assert rebased["USD"] == Decimal("1.111111")
    assert rebased["GBP"] == Decimal("0.888889")


def test_rebase_rates_adds_missing_pivot():
    rebased = rebase_rates({"USD": Decimal("1.1")}, "usd", pivot="EUR")
    assert rebased == {"USD": Decimal("1"), "EUR": Decimal("0.909091")}


def test_rebase_rates_rounds_half_up():
    rebased = rebase_rates({"AAA": Decimal("2"), "BBB": Decimal("0.000001")}, "AAA")
    # 0.0000005 rounds up, not to even.
    assert rebased["BBB"] == Decimal("0.000001")


def test_rebase_rates_missing_base():
    rates = {"USD": Decimal("1"), "GBP": Decimal("0.8")}
    with pytest.raises(RebaseError):
        rebase_rates(rates, "EUR")


def test_rebase_rates_zero_rate():
    rates = {"USD": Decimal("1"), "EUR": Decimal("0"), "GBP": Decimal("0.8")}
    with pytest.raises(RebaseError):
        rebase_rates(rates, "EUR")
