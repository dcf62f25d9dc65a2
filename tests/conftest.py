"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# MODSYNC_API_KEY must be set before modsync.api.deps is imported: the key
# is validated at module-load time.
# ---------------------------------------------------------------------------
TEST_API_KEY = "test-api-key-for-pytest-" + "x" * 16
os.environ.setdefault("MODSYNC_API_KEY", TEST_API_KEY)

import pytest  # noqa: E402
from sqlalchemy import Engine, create_engine  # noqa: E402

# ---------------------------------------------------------------------------
# SQLite has no JSONB; render it as TEXT (SQLAlchemy's JSON handling still
# serializes the values) and BigInteger as INTEGER.
# ---------------------------------------------------------------------------
from sqlalchemy.dialects.postgresql import JSONB as PG_JSONB  # noqa: E402

from modsync.database.models import Base  # noqa: E402

_sqlite_compat_registered = False


def _register_sqlite_compat():
    """Register SQLite compilation for PG-only column types (idempotent)."""
    global _sqlite_compat_registered
    if _sqlite_compat_registered:
        return
    from sqlalchemy import BigInteger
    from sqlalchemy.ext.compiler import compiles

    @compiles(PG_JSONB, "sqlite")
    def _compile_jsonb_as_text(type_, compiler, **kw):
        return "TEXT"

    @compiles(BigInteger, "sqlite")
    def _compile_bigint_as_integer(type_, compiler, **kw):
        return "INTEGER"

    _sqlite_compat_registered = True


_register_sqlite_compat()


@pytest.fixture
def db_engine() -> Engine:
    """In-memory SQLite engine with all ModSync tables.

    StaticPool shares one connection across threads, which ``run_db``
    (``asyncio.to_thread``) needs.
    """
    from sqlalchemy.pool import StaticPool

    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def hub():
    """A fresh broadcast hub installed on the app for one test."""
    from modsync.api.main import app
    from modsync.services.broadcast import ConnectionManager

    previous = app.state.hub
    app.state.hub = ConnectionManager()
    yield app.state.hub
    app.state.hub = previous


@pytest.fixture
def client(db_engine, hub):
    """FastAPI TestClient wired to the SQLite engine and a fresh hub."""
    from fastapi.testclient import TestClient

    from modsync.api.deps import get_engine
    from modsync.api.main import app

    app.dependency_overrides[get_engine] = lambda: db_engine
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"x-api-key": os.environ["MODSYNC_API_KEY"]}
