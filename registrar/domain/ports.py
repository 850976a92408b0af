"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from collections.abc import Sequence
from typing import NamedTuple, Protocol

from .events import RegistrarEvent


class AddressRecord(NamedTuple):
    """Address record written alongside a claim."""

    coin_type: int
    address: bytes


class NameRegistry(Protocol):
    """
    Port interface for the naming registry.

    The registry owns all claim and record state. The registrar only
    mutates it through claim() and set_address_record().
    """

    def root_node(self) -> bytes:
        """Node under which the registrar claims labels."""
        ...

    def derive_node(self, parent: bytes, label: str) -> bytes:
        """Deterministically derive the node for label under parent."""
        ...

    def claim(
        self,
        parent: bytes,
        label: str,
        owner: str,
        extra_records: Sequence[AddressRecord] = (),
    ) -> bytes:
        """
        Create the node for label under parent, owned by owner.

        Returns:
            The claimed node

        Raises:
            LabelAlreadyClaimed: If the node already has an owner
            InvalidLabel: If the label is malformed
        """
        ...

    def set_address_record(self, node: bytes, coin_type: int, address: bytes) -> None:
        """
        Store an address record for a claimed node.

        Raises:
            NodeNotClaimed: If the node does not exist
        """
        ...

    def owner_of(self, node: bytes) -> str:
        """
        Current owner of a node.

        Raises:
            NodeNotClaimed: If the node does not exist
        """
        ...


class SignatureValidator(Protocol):
    """Port interface for signature verification."""

    def is_valid(self, signer: str, digest: bytes, signature: bytes) -> bool:
        """
        Check that signature authorizes digest on behalf of signer.

        Implementations must accept plain-key signatures as well as
        smart-account signatures (deployed and counterfactual).
        """
        ...


class IssuerWhitelist(Protocol):
    """Port interface for the set of identities allowed to sign invites."""

    def contains(self, issuer: str) -> bool: ...

    def add(self, issuer: str) -> None:
        """Idempotent insert."""
        ...

    def remove(self, issuer: str) -> None:
        """Idempotent delete."""
        ...


class InviteLedger(Protocol):
    """Port interface for the append-only set of consumed invite identifiers."""

    def contains(self, invite_id: bytes) -> bool: ...

    def add(self, invite_id: bytes) -> bool:
        """
        Atomically record an invite identifier.

        Returns:
            True if recorded, False if it was already present
        """
        ...


class EventPublisher(Protocol):
    """Port interface for registrar notifications."""

    def publish(self, event: RegistrarEvent) -> None: ...


class Clock(Protocol):
    """Port interface for the canonical current-time source."""

    def now(self) -> int:
        """Current unix time in seconds."""
        ...


class RequestLedger(Protocol):
    """Port interface for signed API requests already accepted once."""

    def add(self, caller: str, message_hash: bytes, now: int, expires_at: int) -> bool:
        """
        Atomically record a signed request.

        Entries whose expires_at has passed by now may be dropped; their
        timestamps are no longer accepted, so they cannot be replayed.

        Returns:
            True if recorded, False if it was already present
        """
        ...
