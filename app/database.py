"""Engine lifecycle and thread-local sessions for the storage adapters."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


# One session per thread; refresh workers never share a session.
SessionLocal = scoped_session(sessionmaker(autoflush=False, expire_on_commit=False))

_engine: Optional[Engine] = None


def init_app(app: Any) -> Engine:
    """Bind sessions to ``SQLALCHEMY_DATABASE_URI`` and create missing tables."""

    global _engine

    if _engine is None:
        _engine = _create_engine(app.config["SQLALCHEMY_DATABASE_URI"])
        SessionLocal.configure(bind=_engine)

    from app import models  # noqa: F401  # register tables on Base.metadata

    Base.metadata.create_all(_engine)

    @app.teardown_appcontext
    def _remove_session(_: Optional[BaseException] = None) -> None:
        SessionLocal.remove()

    app.extensions["sqlalchemy_engine"] = _engine
    return _engine


def _create_engine(database_uri: str) -> Engine:
    if not database_uri.startswith("sqlite"):
        return create_engine(database_uri, pool_pre_ping=True)

    options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in database_uri:
        # A single connection keeps the in-memory database alive across threads.
        options["poolclass"] = StaticPool
    engine = create_engine(database_uri, **options)

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


@contextmanager
def session_scope() -> Iterator[Session]:
    """Yield the thread's session, committing on success and rolling back on error.

    The session is released afterwards so pooled worker threads do not keep
    connections checked out between refresh runs.
    """

    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        SessionLocal.remove()


def reset_engine() -> None:
    """Dispose of the engine so the next ``init_app`` starts fresh; used by tests."""

    global _engine

    SessionLocal.remove()
    if _engine is not None:
        _engine.dispose()
    _engine = None
