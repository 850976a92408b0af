"""Constants and helpers shared by the test suites."""

import pytest
from eth_utils import to_checksum_address
from psycopg_pool import ConnectionPool, PoolTimeout

from registrar.adapters.state.postgres import run_migrations
from registrar.config.settings import get_settings

REGISTRAR_ADDRESS = to_checksum_address("0x5fbdb2315678afecb367f032d93f642f64180aa3")
OTHER_REGISTRAR_ADDRESS = to_checksum_address("0xe7f1725e7734ce288f8367e1bb143e90bb3f0512")
ROOT_NAME = "osopit.eth"
CHAIN_ID = 8453
NOW = 1_700_000_000
ONE_DAY = 24 * 60 * 60

SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


class FakeClock:
    """Clock whose time is set by the test."""

    def __init__(self, now: int = NOW) -> None:
        self.current = now

    def now(self) -> int:
        return self.current


def malleate(signature: bytes) -> bytes:
    """Return the high-s twin of a 65-byte ECDSA signature (same signer, same digest)."""
    r = signature[:32]
    s = int.from_bytes(signature[32:64], "big")
    v = signature[64]
    return r + (SECP256K1_N - s).to_bytes(32, "big") + bytes([55 - v])


REGISTRAR_TABLES = ("address_records", "names", "used_invites", "issuers", "used_requests")


def open_test_pool() -> ConnectionPool:
    """Open a pool on DATABASE_URL with migrations applied; skip if unreachable."""
    settings = get_settings()
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=10,
        open=False,
    )
    try:
        pool.open(wait=True, timeout=3.0)
    except PoolTimeout:
        pool.close()
        pytest.skip(f"PostgreSQL not reachable at {settings.database_url}")

    run_migrations(pool)
    return pool


def clean_tables(pool: ConnectionPool) -> None:
    with pool.connection() as conn:
        for table in REGISTRAR_TABLES:
            conn.execute(f"DELETE FROM {table}")
        conn.commit()
