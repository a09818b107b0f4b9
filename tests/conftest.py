"""
Pytest configuration for the subquery demo.

Provides fixtures for:
- Settings isolation (the cached settings object is reset per test)
- In-memory SQLite query interfaces, empty or with the fixture loaded
- PostgreSQL connection parameters for integration tests
"""

from __future__ import annotations

import os
from typing import Generator

import pytest

from subquery_demo import schema
from subquery_demo.config import Settings, get_settings
from subquery_demo.infrastructure.db_factory import SqliteQueryInterface


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """
    Keep tests independent of the developer's environment and of each other.
    """
    for name in ("DEMO_DIALECT", "SQLITE_PATH", "RUN_TIMEOUT_SECONDS", "VERIFY_TOLERANCE"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sqlite_conn() -> Generator[SqliteQueryInterface, None, None]:
    """
    Provide an empty in-memory SQLite query interface.
    """
    conn = SqliteQueryInterface(":memory:")
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def loaded_conn(sqlite_conn: SqliteQueryInterface) -> SqliteQueryInterface:
    """
    In-memory SQLite with the seed fixture loaded.
    """
    schema.load(sqlite_conn)
    return sqlite_conn


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture for integration tests.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        dialect="postgres",
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "subquery_demo"),
        log_level="DEBUG",
    )
