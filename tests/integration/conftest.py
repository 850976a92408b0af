"""
Integration test fixtures.

Tests in this directory run against a real PostgreSQL database configured
through DATABASE_URL. They are skipped when the database is unreachable.
"""

from collections.abc import Iterator

import pytest
from psycopg_pool import ConnectionPool

from tests.support import clean_tables, open_test_pool


@pytest.fixture(scope="session")
def pool() -> Iterator[ConnectionPool]:
    """Create connection pool for integration tests."""
    pool = open_test_pool()
    yield pool
    pool.close()


@pytest.fixture(autouse=True)
def clean_database(pool: ConnectionPool) -> None:
    """Clean registrar tables before each test."""
    clean_tables(pool)
