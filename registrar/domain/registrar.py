"""
Invite registrar domain service - invite authorization and name claims.

This module contains the engine that turns a signed invite into a claimed
name. It owns the issuer whitelist and the used-invite ledger and drives the
name registry through its port.

Invite Lifecycle (per invite identifier)
========================================

    UNUSED -> USED   (validation passed; terminal even if the claim fails)

Validation pipeline for register_with_invite, in order:

    1. expiration        SignatureExpired   (now > expiration)
    2. digest + EIP-191 wrap
    3. invite identifier (wrapped digest + signature bytes)
    4. replay            InviteAlreadyUsed
    5. whitelist         InvalidInviter
    6. signature         Unauthorized
    7. recipient binding Unauthorized       (unless the open recipient)
    8. commit identifier to the ledger
    9. registry claim    (registry errors propagate unchanged)
   10. address records   (chain coin type + default coin type)
   11. NameRegistered notification

Commit-before-call: step 8 happens strictly before any call into the
registry. The registry is the only collaborator that could re-enter the
registrar, and a re-entrant submission of the same invite must find it
already USED. An invite whose claim then fails stays burned.

Mutating operations are serialized through a single re-entrant lock.
"""

import logging
import threading
from dataclasses import dataclass, field

from .events import (
    IssuerAdded,
    IssuerRemoved,
    NameRegistered,
    OwnershipTransferred,
)
from .exceptions import (
    InvalidInviter,
    InvalidOwner,
    InviteAlreadyUsed,
    NodeNotClaimed,
    NotOwner,
    SignatureExpired,
    Unauthorized,
)
from .invite import (
    DEFAULT_COIN_TYPE,
    MIN_LABEL_LENGTH,
    OPEN_RECIPIENT,
    Invite,
    InviteState,
    address_bytes,
    chain_coin_type,
    derive_invite_id,
    invite_message_hash,
    to_identity,
)
from .ports import (
    Clock,
    EventPublisher,
    InviteLedger,
    IssuerWhitelist,
    NameRegistry,
    SignatureValidator,
)

logger = logging.getLogger(__name__)


@dataclass
class InviteRegistrar:
    """
    Domain service for invite-based name registration.

    registrar_address is the registrar's own identity; it is part of every
    invite digest so invites for one registrar cannot be replayed on another.
    """

    registrar_address: str
    owner: str
    chain_id: int
    registry: NameRegistry
    signature_validator: SignatureValidator
    issuers: IssuerWhitelist
    used_invites: InviteLedger
    events: EventPublisher
    clock: Clock
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)

    def __post_init__(self) -> None:
        self.registrar_address = to_identity(self.registrar_address)
        self.owner = to_identity(self.owner)

    @property
    def coin_type(self) -> int:
        return chain_coin_type(self.chain_id)

    # Ownership

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        """
        Hand the owner capability to another identity.

        Raises:
            NotOwner: If caller is not the current owner
            InvalidOwner: If new_owner is the zero address
        """
        with self._lock:
            self._check_owner(caller)
            new_owner = to_identity(new_owner)
            if new_owner == OPEN_RECIPIENT:
                raise InvalidOwner(new_owner)
            self._set_owner(new_owner)

    def renounce_ownership(self, caller: str) -> None:
        """Give up ownership for good; owner-only operations fail afterwards."""
        with self._lock:
            self._check_owner(caller)
            self._set_owner(OPEN_RECIPIENT)

    # Issuer whitelist

    def add_issuer(self, caller: str, issuer: str) -> None:
        """
        Allow issuer to sign invites.

        Idempotent: adding an issuer twice leaves the whitelist unchanged,
        but both calls are published.

        Raises:
            NotOwner: If caller is not the owner
        """
        with self._lock:
            self._check_owner(caller)
            issuer = to_identity(issuer)
            self.issuers.add(issuer)
            logger.info("Issuer added: %s", issuer)
            self.events.publish(IssuerAdded(issuer=issuer))

    def remove_issuer(self, caller: str, issuer: str) -> None:
        """
        Revoke issuer.

        Invites already signed by issuer become unusable, since whitelist
        membership is checked at consumption time.

        Raises:
            NotOwner: If caller is not the owner
        """
        with self._lock:
            self._check_owner(caller)
            issuer = to_identity(issuer)
            self.issuers.remove(issuer)
            logger.info("Issuer removed: %s", issuer)
            self.events.publish(IssuerRemoved(issuer=issuer))

    def is_issuer(self, issuer: str) -> bool:
        return self.issuers.contains(to_identity(issuer))

    # Invite ledger queries

    def is_invite_used(self, invite_id: bytes) -> bool:
        return self.used_invites.contains(invite_id)

    def invite_state(self, invite_id: bytes) -> InviteState:
        if self.used_invites.contains(invite_id):
            return InviteState.USED
        return InviteState.UNUSED

    # Registration

    def register_with_invite(self, caller: str, invite: Invite) -> bytes:
        """
        Consume an invite and claim its label.

        Args:
            caller: Identity submitting the invite
            invite: Signed invite

        Returns:
            The claimed node

        Raises:
            SignatureExpired: If the invite expiration has passed
            InviteAlreadyUsed: If the invite was consumed before
            InvalidInviter: If the issuer is not whitelisted
            Unauthorized: If the signature is invalid, or caller is not
                the bound recipient
            DelegateFailure: Passed through from the registry; the invite
                remains USED
        """
        with self._lock:
            now = self.clock.now()
            if now > invite.expiration:
                logger.warning("Invite for %r expired at %d (now %d)", invite.label, invite.expiration, now)
                raise SignatureExpired(invite.expiration)

            caller = to_identity(caller)
            issuer = to_identity(invite.issuer)
            recipient = to_identity(invite.recipient)

            message_hash = invite_message_hash(self.registrar_address, invite)
            invite_id = derive_invite_id(message_hash, invite.signature)

            if self.used_invites.contains(invite_id):
                logger.warning("Replayed invite %s", invite_id.hex())
                raise InviteAlreadyUsed(invite_id.hex())

            if not self.issuers.contains(issuer):
                logger.warning("Invite for %r signed by non-issuer %s", invite.label, issuer)
                raise InvalidInviter(issuer)

            if not self.signature_validator.is_valid(issuer, message_hash, invite.signature):
                logger.warning("Invalid invite signature for %r from %s", invite.label, issuer)
                raise Unauthorized("invalid signature")

            if not invite.is_open and caller != recipient:
                logger.warning("Invite for %r bound to %s submitted by %s", invite.label, recipient, caller)
                raise Unauthorized("caller is not the invite recipient")

            if not self.used_invites.add(invite_id):
                raise InviteAlreadyUsed(invite_id.hex())
            logger.info("Invite %s consumed by %s", invite_id.hex(), caller)

            return self._claim(invite.label, recipient)

    def register(self, caller: str, label: str, recipient: str) -> bytes:
        """
        Owner-only registration that bypasses the invite pipeline.

        Raises:
            NotOwner: If caller is not the owner
            DelegateFailure: Passed through from the registry
        """
        with self._lock:
            self._check_owner(caller)
            return self._claim(label, to_identity(recipient))

    def available(self, label: str) -> bool:
        """
        Whether label can still be claimed.

        Unclaimed labels shorter than MIN_LABEL_LENGTH code points are
        reported unavailable. Read-only.
        """
        node = self.registry.derive_node(self.registry.root_node(), label)
        try:
            self.registry.owner_of(node)
        except NodeNotClaimed:
            return len(label) >= MIN_LABEL_LENGTH
        return False

    def _claim(self, label: str, owner: str) -> bytes:
        parent = self.registry.root_node()
        node = self.registry.derive_node(parent, label)
        self.registry.claim(parent, label, owner, ())

        # Records reference the node, so they follow the claim.
        record = address_bytes(owner)
        self.registry.set_address_record(node, self.coin_type, record)
        self.registry.set_address_record(node, DEFAULT_COIN_TYPE, record)

        logger.info("Name registered: %s -> %s", label, owner)
        self.events.publish(NameRegistered(label=label, owner=owner, node=node))
        return node

    def _check_owner(self, caller: str) -> None:
        if to_identity(caller) != self.owner or self.owner == OPEN_RECIPIENT:
            raise NotOwner(caller)

    def _set_owner(self, new_owner: str) -> None:
        previous = self.owner
        self.owner = new_owner
        logger.info("Ownership transferred: %s -> %s", previous, new_owner)
        self.events.publish(OwnershipTransferred(previous_owner=previous, new_owner=new_owner))
