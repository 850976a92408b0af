"""
Invite tokens - value type and hashing rules.

An invite is an off-line capability: an issuer signs the digest of
(registrar, label, recipient, expiration) and hands the result to the
consumer. Nothing about an invite exists on the registrar side until it is
consumed, at which point its identifier is written to the used-invite ledger.

Hashing (must match what issuers sign):

    digest       = keccak256(encodePacked(address registrar, string label,
                                          address recipient, uint256 expiration))
    message_hash = keccak256("\\x19Ethereum Signed Message:\\n32" || digest)
    invite_id    = keccak256(message_hash || signature)

The invite identifier covers the signature bytes, not only the digest, so two
different valid signatures over the same digest are tracked independently.
"""

from dataclasses import dataclass
from enum import Enum

from eth_abi.packed import encode_packed
from eth_account.messages import defunct_hash_message
from eth_utils import keccak, to_canonical_address, to_checksum_address

# Sentinel recipient: anyone may consume the invite, and the name is
# granted to this address rather than to the caller.
OPEN_RECIPIENT = "0x0000000000000000000000000000000000000000"

# ENSIP-19 default EVM coin type, written next to the chain-specific record.
DEFAULT_COIN_TYPE = 0x80000000

# Shorter labels are never reported as available.
MIN_LABEL_LENGTH = 3


class InviteState(str, Enum):
    """
    Lifecycle of an invite identifier.

    UNUSED -> USED is the only transition and USED is terminal. Expiration is
    not a state: it is evaluated from the invite's own timestamp at
    consumption time.
    """

    UNUSED = "UNUSED"
    USED = "USED"


@dataclass(frozen=True)
class Invite:
    """A signed invite as presented by its consumer."""

    label: str
    recipient: str
    expiration: int
    issuer: str
    signature: bytes

    @property
    def is_open(self) -> bool:
        return to_identity(self.recipient) == OPEN_RECIPIENT


def to_identity(address: str) -> str:
    """Normalize an address to its EIP-55 checksum form (ValueError if malformed)."""
    return to_checksum_address(address)


def address_bytes(address: str) -> bytes:
    """20-byte form of an address, as stored in address records."""
    return to_canonical_address(address)


def chain_coin_type(chain_id: int) -> int:
    """ENSIP-11 coin type for an EVM chain."""
    return 0x80000000 | chain_id


def invite_digest(registrar: str, label: str, recipient: str, expiration: int) -> bytes:
    """Domain-separated digest an issuer signs for an invite."""
    packed = encode_packed(
        ["address", "string", "address", "uint256"],
        [to_identity(registrar), label, to_identity(recipient), expiration],
    )
    return keccak(packed)


def signed_message_hash(digest: bytes) -> bytes:
    """EIP-191 personal-message wrapping of a 32-byte digest."""
    return bytes(defunct_hash_message(primitive=digest))


def derive_invite_id(message_hash: bytes, signature: bytes) -> bytes:
    return keccak(message_hash + signature)


def invite_message_hash(registrar: str, invite: Invite) -> bytes:
    """Wrapped digest the issuer's signature must authorize."""
    digest = invite_digest(registrar, invite.label, invite.recipient, invite.expiration)
    return signed_message_hash(digest)


def invite_id_for(registrar: str, invite: Invite) -> bytes:
    """Ledger identifier of an invite presented to the given registrar."""
    return derive_invite_id(invite_message_hash(registrar, invite), invite.signature)
