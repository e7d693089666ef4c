"""Shared pytest fixtures."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from app.database import SessionLocal, reset_engine  # noqa: E402
from app.providers.registry import reset_registry  # noqa: E402
from tests.fixtures import EXCHANGERATESAPI_URL, FIXER_URL, MOCK1_URL, MOCK2_URL  # noqa: E402


TEST_OVERRIDES = {
    "MOCK_SERVICE1_URL": MOCK1_URL,
    "MOCK_SERVICE2_URL": MOCK2_URL,
    "FIXER_BASE_URL": FIXER_URL,
    "FIXER_ACCESS_KEY": "",
    "EXCHANGERATESAPI_BASE_URL": EXCHANGERATESAPI_URL,
    "EXCHANGERATESAPI_ACCESS_KEY": "",
    "DEFAULT_CURRENCIES": ["USD", "EUR", "GBP"],
}


@pytest.fixture()
def app() -> Iterator:
    """Flask application with a fresh in-memory database and scheduler disabled."""

    reset_engine()
    reset_registry()
    flask_app = create_app("testing", overrides=TEST_OVERRIDES)

    yield flask_app

    reset_engine()
    reset_registry()


@pytest.fixture()
def runner(app):
    """Provide a Flask CLI runner."""

    return app.test_cli_runner()


@pytest.fixture()
def db_session(app) -> Iterator:
    """Provide a database session bound to the test engine."""

    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        SessionLocal.remove()
