"""
Pytest configuration for Axion.

Provides fixtures for:
- sqlite settings rooted in a per-test temporary directory
- connection management
- users table creation and seeding
"""

from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest

from axion.config import Settings, get_settings
from axion.infrastructure.db_factory import Connection, connect
from scripts.seed_users import _create_users_table, _seed_users

SEEDED_USERS = 25


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Generator[None, None, None]:
    """Keep environment-driven settings from leaking between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sqlite_settings(tmp_path: Path) -> Settings:
    """
    Settings pointing at a fresh sqlite file under tmp_path.
    """
    return Settings(
        DB_CONNECTION="sqlite",
        DB_DATABASE="database/test.sqlite",
        APP_BASE_PATH=tmp_path,
        APP_ENV="testing",
        LOG_LEVEL="DEBUG",
    )


@pytest.fixture
def connection(sqlite_settings: Settings) -> Generator[Connection, None, None]:
    conn = connect(sqlite_settings)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def users_table(connection: Connection) -> Connection:
    """Empty users table."""
    _create_users_table(connection)
    return connection


@pytest.fixture
def seeded_users(users_table: Connection) -> int:
    """
    Seed a small users table (25 rows, ids 1..25).

    Returns the number of rows seeded.
    """
    return _seed_users(users_table, rows=SEEDED_USERS, seed=42)
