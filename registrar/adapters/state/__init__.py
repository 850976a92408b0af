"""State adapters - Issuer whitelist and used-invite ledger implementations."""

from .memory import InMemoryInviteLedger, InMemoryIssuerWhitelist
from .postgres import PostgresInviteLedger, PostgresIssuerWhitelist, run_migrations

__all__ = [
    "InMemoryInviteLedger",
    "InMemoryIssuerWhitelist",
    "PostgresInviteLedger",
    "PostgresIssuerWhitelist",
    "run_migrations",
]
