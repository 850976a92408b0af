"""
PostgreSQL state adapters - Implement IssuerWhitelist, InviteLedger and RequestLedger.

This module provides the PostgreSQL implementation of the registrar's
whitelist, used-invite ledger and request ledger ports using psycopg3 with raw SQL.

Ledger Atomicity:
-----------------
The registrar serializes calls within one process. Across processes, the
ledger's PRIMARY KEY on invite_id is what guarantees single use:
INSERT ... ON CONFLICT DO NOTHING reports rowcount 0 to every writer except
the first, so two workers racing on one invite cannot both commit it.
used_invites rows are never deleted or updated.
"""

import logging
from pathlib import Path

from psycopg_pool import ConnectionPool

logger = logging.getLogger(__name__)


class PostgresIssuerWhitelist:
    """
    Implements IssuerWhitelist protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize whitelist with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def contains(self, issuer: str) -> bool:
        sql = "SELECT 1 FROM issuers WHERE address = %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (issuer,))
            return cursor.fetchone() is not None

    def add(self, issuer: str) -> None:
        sql = """
            INSERT INTO issuers (address, added_at)
            VALUES (%s, NOW())
            ON CONFLICT (address) DO NOTHING
        """

        with self._pool.connection() as conn:
            conn.execute(sql, (issuer,))
            conn.commit()

    def remove(self, issuer: str) -> None:
        with self._pool.connection() as conn:
            conn.execute("DELETE FROM issuers WHERE address = %s", (issuer,))
            conn.commit()


class PostgresInviteLedger:
    """Implements InviteLedger protocol via psycopg3."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def contains(self, invite_id: bytes) -> bool:
        sql = "SELECT 1 FROM used_invites WHERE invite_id = %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (invite_id,))
            return cursor.fetchone() is not None

    def add(self, invite_id: bytes) -> bool:
        """
        Record an invite identifier.

        Returns:
            True if this call recorded it, False if it was already present
        """
        sql = """
            INSERT INTO used_invites (invite_id, used_at)
            VALUES (%s, NOW())
            ON CONFLICT (invite_id) DO NOTHING
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (invite_id,))
            conn.commit()
            return cursor.rowcount == 1


class PostgresRequestLedger:
    """
    Implements RequestLedger protocol via psycopg3.

    Shared by every worker on the database, so a request accepted by one
    worker is refused by all others. The PRIMARY KEY arbitrates races the
    same way it does for used_invites.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def add(self, caller: str, message_hash: bytes, now: int, expires_at: int) -> bool:
        insert_sql = """
            INSERT INTO used_requests (caller, message_hash, expires_at)
            VALUES (%s, %s, %s)
            ON CONFLICT (caller, message_hash) DO NOTHING
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("DELETE FROM used_requests WHERE expires_at < %s", (now,))
            conn.commit()

            cursor.execute(insert_sql, (caller, message_hash, expires_at))
            recorded = cursor.rowcount == 1
            conn.commit()
            return recorded


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: registrar/adapters/state/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
