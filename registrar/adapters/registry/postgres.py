"""
PostgreSQL name registry adapter - Implements NameRegistry protocol.

Claims rely on the PRIMARY KEY of names.node: INSERT ... ON CONFLICT DO
NOTHING succeeds for exactly one writer per node, whichever process it runs
in. Extra records are written in the same transaction as the claim.
"""

import logging
from collections.abc import Sequence

from psycopg import errors
from psycopg_pool import ConnectionPool

from registrar.domain.exceptions import LabelAlreadyClaimed, NodeNotClaimed
from registrar.domain.ports import AddressRecord

from .nodes import check_label, derive_node, namehash

logger = logging.getLogger(__name__)

_UPSERT_RECORD_SQL = """
    INSERT INTO address_records (node, coin_type, address, updated_at)
    VALUES (%s, %s, %s, NOW())
    ON CONFLICT (node, coin_type) DO UPDATE
    SET address = EXCLUDED.address,
        updated_at = NOW()
"""


class PostgresNameRegistry:
    """
    Implements NameRegistry protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, pool: ConnectionPool, root_name: str) -> None:
        """
        Args:
            pool: psycopg3 ConnectionPool for database connections
            root_name: Name whose namehash is the root node (e.g. "osopit.eth")
        """
        self._pool = pool
        self.root_name = root_name
        self._root = namehash(root_name)

    def root_node(self) -> bytes:
        return self._root

    def derive_node(self, parent: bytes, label: str) -> bytes:
        return derive_node(parent, label)

    def claim(
        self,
        parent: bytes,
        label: str,
        owner: str,
        extra_records: Sequence[AddressRecord] = (),
    ) -> bytes:
        """
        Atomically create the node for label.

        Raises:
            InvalidLabel: If label is empty or contains "."
            LabelAlreadyClaimed: If the node already exists
        """
        check_label(label)
        node = derive_node(parent, label)

        claim_sql = """
            INSERT INTO names (node, parent, label, owner, created_at)
            VALUES (%s, %s, %s, %s, NOW())
            ON CONFLICT (node) DO NOTHING
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(claim_sql, (node, parent, label, owner))
            if cursor.rowcount != 1:
                conn.rollback()
                raise LabelAlreadyClaimed(label)

            for record in extra_records:
                cursor.execute(_UPSERT_RECORD_SQL, (node, record.coin_type, record.address))
            conn.commit()

        logger.info("Claimed %s.%s for %s", label, self.root_name, owner)
        return node

    def set_address_record(self, node: bytes, coin_type: int, address: bytes) -> None:
        try:
            with self._pool.connection() as conn:
                conn.execute(_UPSERT_RECORD_SQL, (node, coin_type, address))
                conn.commit()
        except errors.ForeignKeyViolation:
            raise NodeNotClaimed(node.hex()) from None

    def owner_of(self, node: bytes) -> str:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("SELECT owner FROM names WHERE node = %s", (node,))
            row = cursor.fetchone()

        if row is None:
            raise NodeNotClaimed(node.hex())
        return row[0]

    def address_record(self, node: bytes, coin_type: int) -> bytes | None:
        sql = "SELECT address FROM address_records WHERE node = %s AND coin_type = %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (node, coin_type))
            row = cursor.fetchone()

        return bytes(row[0]) if row is not None else None
