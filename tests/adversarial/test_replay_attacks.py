"""
Adversarial tests for invite replay prevention.

Verifies that a signed invite is consumed at most once, whatever route an
attacker takes to resubmit it:
- Sequential resubmission
- Re-entrant submission from inside the registry call
- Concurrent submissions within one process
- Concurrent submissions from independent workers sharing PostgreSQL
- Submission to a different registrar

Security rationale:
- The invite identifier is committed to the ledger before the registry is
  called, so a re-entrant or concurrent submission finds it already USED
- The ledger's primary key arbitrates between workers that do not share
  the in-process lock
- The registrar address is part of the signed digest
"""

import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

import pytest
from eth_account import Account
from eth_account.signers.local import LocalAccount
from psycopg_pool import ConnectionPool

from registrar.adapters.registry.memory import InMemoryNameRegistry
from registrar.adapters.registry.postgres import PostgresNameRegistry
from registrar.adapters.signature.validator import UniversalSignatureValidator
from registrar.adapters.state.memory import InMemoryInviteLedger, InMemoryIssuerWhitelist
from registrar.adapters.state.postgres import PostgresInviteLedger, PostgresIssuerWhitelist
from registrar.domain.exceptions import (
    InvalidInviter,
    InviteAlreadyUsed,
    LabelAlreadyClaimed,
    RegistrarError,
    Unauthorized,
)
from registrar.domain.invite import OPEN_RECIPIENT, Invite, invite_id_for
from registrar.domain.registrar import InviteRegistrar
from registrar.issuer import InviteIssuer
from tests.support import (
    CHAIN_ID,
    NOW,
    OTHER_REGISTRAR_ADDRESS,
    REGISTRAR_ADDRESS,
    ROOT_NAME,
    FakeClock,
)

# Apply adversarial marker to all tests in this module
pytestmark = pytest.mark.adversarial


class ReentrantRegistry(InMemoryNameRegistry):
    """Registry that calls back into the registrar before completing a claim."""

    def __init__(self, root_name: str) -> None:
        super().__init__(root_name)
        self.on_claim: Callable[[], None] | None = None
        self.reentry_errors: list[Exception] = []

    def claim(self, parent, label, owner, extra_records=()):
        if self.on_claim is not None:
            callback, self.on_claim = self.on_claim, None
            try:
                callback()
            except RegistrarError as e:
                self.reentry_errors.append(e)
        return super().claim(parent, label, owner, extra_records)


def run_concurrently(attempt: Callable[[int], object], num_attackers: int) -> list[object]:
    """Run attempt(i) on num_attackers threads; collect results or raised domain errors."""
    results: list[object] = []
    results_lock = threading.Lock()
    barrier = threading.Barrier(num_attackers)

    def attack(i: int) -> None:
        barrier.wait()
        try:
            outcome: object = attempt(i)
        except RegistrarError as e:
            outcome = e
        with results_lock:
            results.append(outcome)

    with ThreadPoolExecutor(max_workers=num_attackers) as executor:
        for f in [executor.submit(attack, i) for i in range(num_attackers)]:
            f.result()
    return results


class TestReplayAttacks:
    """Adversarial tests simulating invite replay."""

    def test_sequential_replay_rejected(
        self,
        registrar: InviteRegistrar,
        issuer: InviteIssuer,
        recipient_account: LocalAccount,
    ) -> None:
        invite = issuer.issue("bob", recipient_account.address, now=NOW)
        registrar.register_with_invite(recipient_account.address, invite)

        for _ in range(3):
            with pytest.raises(InviteAlreadyUsed):
                registrar.register_with_invite(recipient_account.address, invite)

    def test_reentrant_replay_rejected(
        self,
        owner_account: LocalAccount,
        issuer_account: LocalAccount,
        issuer: InviteIssuer,
        gateway: Mock,
        stranger_account: LocalAccount,
    ) -> None:
        """
        Attack scenario: the registry hands control back to the attacker
        mid-claim, who resubmits the same open invite.

        Expected defense: the invite is already USED when the registry runs.
        """
        registry = ReentrantRegistry(ROOT_NAME)
        registrar = InviteRegistrar(
            registrar_address=REGISTRAR_ADDRESS,
            owner=owner_account.address,
            chain_id=CHAIN_ID,
            registry=registry,
            signature_validator=UniversalSignatureValidator(gateway),
            issuers=InMemoryIssuerWhitelist({issuer_account.address}),
            used_invites=InMemoryInviteLedger(),
            events=Mock(),
            clock=FakeClock(),
        )
        invite = issuer.issue("carol", OPEN_RECIPIENT, now=NOW)
        registry.on_claim = lambda: registrar.register_with_invite(stranger_account.address, invite)

        registrar.register_with_invite(stranger_account.address, invite)

        assert len(registry.reentry_errors) == 1
        assert isinstance(registry.reentry_errors[0], InviteAlreadyUsed)
        assert registry.owner_of(registry.derive_node(registry.root_node(), "carol")) == OPEN_RECIPIENT

    def test_concurrent_submissions_exactly_one_succeeds(
        self,
        registrar: InviteRegistrar,
        issuer: InviteIssuer,
    ) -> None:
        """
        Attack scenario: many callers race to consume one open invite.

        Expected defense: the registrar lock serializes submissions, so one
        claim succeeds and every other caller sees InviteAlreadyUsed.
        """
        invite = issuer.issue("carol", OPEN_RECIPIENT, now=NOW)
        callers = [Account.create().address for _ in range(10)]

        results = run_concurrently(
            lambda i: registrar.register_with_invite(callers[i], invite), len(callers)
        )

        successes = [r for r in results if isinstance(r, bytes)]
        assert len(successes) == 1, f"Replay race: {len(successes)} claims succeeded"
        assert all(isinstance(r, InviteAlreadyUsed) for r in results if not isinstance(r, bytes))

    def test_failed_claim_cannot_be_retried(
        self,
        registrar: InviteRegistrar,
        issuer: InviteIssuer,
        owner_account: LocalAccount,
        recipient_account: LocalAccount,
    ) -> None:
        """An invite burned by a registry failure cannot be submitted again."""
        registrar.register(owner_account.address, "bob", owner_account.address)
        invite = issuer.issue("bob", recipient_account.address, now=NOW)

        with pytest.raises(LabelAlreadyClaimed):
            registrar.register_with_invite(recipient_account.address, invite)
        with pytest.raises(InviteAlreadyUsed):
            registrar.register_with_invite(recipient_account.address, invite)

    def test_cross_registrar_replay_rejected(
        self,
        registrar: InviteRegistrar,
        issuer: InviteIssuer,
        recipient_account: LocalAccount,
    ) -> None:
        """
        Attack scenario: an invite signed for one registrar is submitted to
        another registrar that trusts the same issuer.

        Expected defense: the digest includes the registrar address, so the
        signature does not verify.
        """
        invite = issuer.issue("bob", recipient_account.address, now=NOW)
        registrar.registrar_address = OTHER_REGISTRAR_ADDRESS

        with pytest.raises(Unauthorized):
            registrar.register_with_invite(recipient_account.address, invite)

    def test_revoked_issuer_invite_rejected(
        self,
        registrar: InviteRegistrar,
        issuer: InviteIssuer,
        owner_account: LocalAccount,
        issuer_account: LocalAccount,
        recipient_account: LocalAccount,
    ) -> None:
        invite = issuer.issue("bob", recipient_account.address, now=NOW)
        registrar.remove_issuer(owner_account.address, issuer_account.address)

        with pytest.raises(InvalidInviter):
            registrar.register_with_invite(recipient_account.address, invite)
        assert registrar.is_invite_used(invite_id_for(REGISTRAR_ADDRESS, invite)) is False


class TestCrossWorkerReplay:
    """Replay races between independent registrar instances sharing PostgreSQL."""

    def _worker(
        self, pool: ConnectionPool, owner: str, gateway: Mock
    ) -> InviteRegistrar:
        return InviteRegistrar(
            registrar_address=REGISTRAR_ADDRESS,
            owner=owner,
            chain_id=CHAIN_ID,
            registry=PostgresNameRegistry(pool, ROOT_NAME),
            signature_validator=UniversalSignatureValidator(gateway),
            issuers=PostgresIssuerWhitelist(pool),
            used_invites=PostgresInviteLedger(pool),
            events=Mock(),
            clock=FakeClock(),
        )

    def test_concurrent_workers_exactly_one_succeeds(
        self,
        clean_pool: ConnectionPool,
        gateway: Mock,
        owner_account: LocalAccount,
        issuer_account: LocalAccount,
        issuer: InviteIssuer,
    ) -> None:
        """
        Attack scenario: the same invite is sent to several workers at once.

        Expected defense: each worker has its own lock, so several may pass
        validation; the ledger primary key lets exactly one commit.
        """
        num_workers = 6
        workers = [self._worker(clean_pool, owner_account.address, gateway) for _ in range(num_workers)]
        workers[0].add_issuer(owner_account.address, issuer_account.address)
        invite: Invite = issuer.issue("carol", OPEN_RECIPIENT, now=NOW)
        callers = [Account.create().address for _ in range(num_workers)]

        results = run_concurrently(
            lambda i: workers[i].register_with_invite(callers[i], invite), num_workers
        )

        successes = [r for r in results if isinstance(r, bytes)]
        assert len(successes) == 1, f"Cross-worker replay: {len(successes)} claims succeeded"
        assert all(isinstance(r, InviteAlreadyUsed) for r in results if not isinstance(r, bytes))

        with clean_pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("SELECT COUNT(*) FROM names")
            assert cursor.fetchone()[0] == 1
