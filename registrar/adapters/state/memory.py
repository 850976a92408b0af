"""
In-memory state adapters - Implement IssuerWhitelist, InviteLedger and
RequestLedger.

Set-backed implementations for tests, the CLI and single-process use.
The registrar serializes whitelist and ledger mutations, so only the
request ledger, which sits in front of the registrar, takes its own lock.
"""

import threading


class InMemoryIssuerWhitelist:
    """Implements IssuerWhitelist protocol with a set."""

    def __init__(self, issuers: set[str] | None = None) -> None:
        self._issuers: set[str] = set(issuers or ())

    def contains(self, issuer: str) -> bool:
        return issuer in self._issuers

    def add(self, issuer: str) -> None:
        self._issuers.add(issuer)

    def remove(self, issuer: str) -> None:
        self._issuers.discard(issuer)

    def snapshot(self) -> frozenset[str]:
        return frozenset(self._issuers)


class InMemoryInviteLedger:
    """Implements InviteLedger protocol with an append-only set."""

    def __init__(self) -> None:
        self._used: set[bytes] = set()

    def contains(self, invite_id: bytes) -> bool:
        return invite_id in self._used

    def add(self, invite_id: bytes) -> bool:
        if invite_id in self._used:
            return False
        self._used.add(invite_id)
        return True

    def __len__(self) -> int:
        return len(self._used)


class InMemoryRequestLedger:
    """Implements RequestLedger protocol with a dict of expiry times."""

    def __init__(self) -> None:
        self._seen: dict[tuple[str, bytes], int] = {}
        self._lock = threading.Lock()

    def add(self, caller: str, message_hash: bytes, now: int, expires_at: int) -> bool:
        key = (caller, message_hash)
        with self._lock:
            self._seen = {k: exp for k, exp in self._seen.items() if exp >= now}
            if key in self._seen:
                return False
            self._seen[key] = expires_at
            return True

    def __len__(self) -> int:
        return len(self._seen)
