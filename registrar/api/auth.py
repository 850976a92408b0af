"""
Caller authentication - signed request headers.

The HTTP layer has no transaction sender, so callers prove their identity by
signing each request:

    X-Caller-Address:   0x-address of the caller
    X-Caller-Timestamp: unix seconds at signing time
    X-Caller-Signature: EIP-191 personal signature over request_message()

The message binds method, path, timestamp and the keccak256 of the raw body,
so a signature cannot be moved to another request or body. Timestamps outside
the configured window are rejected.
"""

from eth_account.messages import defunct_hash_message, encode_defunct
from eth_account.signers.local import LocalAccount
from eth_utils import keccak, to_hex

CALLER_ADDRESS_HEADER = "X-Caller-Address"
CALLER_TIMESTAMP_HEADER = "X-Caller-Timestamp"
CALLER_SIGNATURE_HEADER = "X-Caller-Signature"


def request_message(method: str, path: str, timestamp: int, body: bytes) -> str:
    return f"{method.upper()} {path}\n{timestamp}\n{to_hex(keccak(body))}"


def request_message_hash(method: str, path: str, timestamp: int, body: bytes) -> bytes:
    return bytes(defunct_hash_message(text=request_message(method, path, timestamp, body)))


def sign_request_headers(
    account: LocalAccount, method: str, path: str, body: bytes, timestamp: int
) -> dict[str, str]:
    """Build the authentication headers for a request (client side)."""
    message = encode_defunct(text=request_message(method, path, timestamp, body))
    signed = account.sign_message(message)
    return {
        CALLER_ADDRESS_HEADER: account.address,
        CALLER_TIMESTAMP_HEADER: str(timestamp),
        CALLER_SIGNATURE_HEADER: to_hex(signed.signature),
    }
