"""
Shared fixtures for adversarial tests.

Attack simulations run against the in-memory registrar from the top-level
conftest; the cross-process race tests use PostgreSQL and are skipped when
it is unreachable.
"""

from collections.abc import Iterator

import pytest
from psycopg_pool import ConnectionPool

from tests.support import clean_tables, open_test_pool

# Module-level marker for all adversarial tests
pytestmark = pytest.mark.adversarial


@pytest.fixture(scope="module")
def pool() -> Iterator[ConnectionPool]:
    """Create connection pool for adversarial tests that need PostgreSQL."""
    pool = open_test_pool()
    yield pool
    pool.close()


@pytest.fixture
def clean_pool(pool: ConnectionPool) -> ConnectionPool:
    """Pool with empty registrar tables."""
    clean_tables(pool)
    return pool
