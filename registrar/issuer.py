"""
Invite issuance - signing and encoding invites off-line.

Issuers sign invites with an ordinary key; the registrar never sees the key.
An invite travels to its consumer as an "invite code": base64 of the JSON
object

    {"label": ..., "recipient": ..., "expiration": ..., "inviter": ..., "signature": "0x..."}

usually embedded in an onboarding URL.
"""

import base64
import binascii
import json
import time
from urllib.parse import urlencode

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from eth_utils import to_bytes, to_hex

from registrar.domain.invite import OPEN_RECIPIENT, Invite, invite_digest, to_identity

SECONDS_PER_DAY = 24 * 60 * 60


class InviteIssuer:
    """Signs invites for one registrar with a local key."""

    def __init__(self, account: LocalAccount, registrar_address: str) -> None:
        self._account = account
        self.registrar_address = to_identity(registrar_address)

    @classmethod
    def from_private_key(cls, private_key: str, registrar_address: str) -> "InviteIssuer":
        return cls(Account.from_key(private_key), registrar_address)

    @property
    def address(self) -> str:
        return self._account.address

    def issue(
        self,
        label: str,
        recipient: str = OPEN_RECIPIENT,
        expires_in_days: int = 7,
        now: int | None = None,
    ) -> Invite:
        """
        Create and sign an invite.

        Args:
            label: Label the invite allows claiming
            recipient: Only caller allowed to consume it; OPEN_RECIPIENT for anyone
            expires_in_days: Validity window
            now: Issue time in unix seconds (defaults to the host clock)
        """
        if now is None:
            now = int(time.time())
        return self.sign(label, recipient, now + expires_in_days * SECONDS_PER_DAY)

    def sign(self, label: str, recipient: str, expiration: int) -> Invite:
        """Sign an invite with an explicit expiration timestamp."""
        recipient = to_identity(recipient)
        digest = invite_digest(self.registrar_address, label, recipient, expiration)
        signed = self._account.sign_message(encode_defunct(primitive=digest))
        return Invite(
            label=label,
            recipient=recipient,
            expiration=expiration,
            issuer=self._account.address,
            signature=bytes(signed.signature),
        )


def encode_invite_code(invite: Invite) -> str:
    data = {
        "label": invite.label,
        "recipient": invite.recipient,
        "expiration": invite.expiration,
        "inviter": invite.issuer,
        "signature": to_hex(invite.signature),
    }
    return base64.b64encode(json.dumps(data, separators=(",", ":")).encode()).decode()


def decode_invite_code(code: str) -> Invite:
    """
    Parse an invite code.

    Raises:
        ValueError: If the code is not a well-formed invite
    """
    try:
        data = json.loads(base64.b64decode(code, validate=True))
        return Invite(
            label=str(data["label"]),
            recipient=to_identity(data["recipient"]),
            expiration=int(data["expiration"]),
            issuer=to_identity(data["inviter"]),
            signature=to_bytes(hexstr=data["signature"]),
        )
    except (binascii.Error, KeyError, TypeError) as e:
        raise ValueError(f"Malformed invite code: {e}") from e


def invite_url(invite: Invite, base_url: str) -> str:
    return f"{base_url}?{urlencode({'invite': encode_invite_code(invite)})}"
