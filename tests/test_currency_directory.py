from __future__ import annotations

import pytest

from app.errors import ValidationError
from app.services.currency_directory import SqlCurrencyDirectory


def test_app_seeds_default_currencies(app):
    directory = app.extensions["currency_directory"]

    assert directory.list_codes() == ["EUR", "GBP", "USD"]


def test_add_currency_is_idempotent(app):
    directory = SqlCurrencyDirectory()

    assert directory.add_currency(" jpy ") is True
    assert directory.add_currency("JPY") is False
    assert "JPY" in directory.list_codes()


@pytest.mark.parametrize("code", ["", "US", "USDT", "U$D", None])
def test_add_currency_rejects_invalid_codes(app, code):
    with pytest.raises(ValidationError):
        SqlCurrencyDirectory().add_currency(code)


def test_seed_defaults_skips_non_empty_directory(app):
    assert SqlCurrencyDirectory().seed_defaults(["CHF", "CAD"]) == 0
    assert "CHF" not in SqlCurrencyDirectory().list_codes()
