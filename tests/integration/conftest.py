"""
Shared fixtures for PostgreSQL-backed tests.

Requires PostgreSQL to be running (DATABASE_URL); tests are skipped
when the database cannot be reached.
"""

from collections.abc import Generator

import psycopg
import pytest
from psycopg_pool import ConnectionPool

from dlibrary.adapters.repository import PostgresAccountRepository, run_migrations
from dlibrary.config.settings import get_settings


@pytest.fixture(scope="module")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for integration tests."""
    settings = get_settings()
    pool = ConnectionPool(conninfo=settings.database_url, min_size=1, max_size=10, open=False)
    try:
        pool.open(wait=True, timeout=3.0)
    except (psycopg.OperationalError, TimeoutError) as e:
        pool.close()
        pytest.skip(f"PostgreSQL not reachable: {e}")
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def pg_repository(pool: ConnectionPool) -> PostgresAccountRepository:
    """Create repository instance for each test."""
    return PostgresAccountRepository(pool)


@pytest.fixture
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Clean accounts table before each test."""
    with pool.connection() as conn:
        conn.execute("DELETE FROM accounts")
        conn.commit()
    yield
