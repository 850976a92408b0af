"""
Universal signature validator adapter - Implements SignatureValidator protocol.

Accepts three kinds of signatures for a signer address:

1. **Counterfactual smart accounts (ERC-6492)**: the signature ends with the
   32-byte magic suffix 0x6492...6492 and wraps
   abi.encode(address factory, bytes factoryCalldata, bytes signature).
   If the account is not deployed yet, or is deployed but rejects the
   signature, the factory call and the ERC-1271 check run together in one
   simulation.

2. **Plain keys (ECDSA secp256k1)**: 65-byte r || s || v with v in {27, 28}.
   Signatures with s in the upper half of the curve order are rejected so a
   second, malleated encoding of the same signature cannot exist.

3. **Deployed smart accounts (ERC-1271)**: isValidSignature(bytes32, bytes)
   must return 0x1626ba7e.

Reverted calls make a signature invalid. Transport failures from the
gateway are not caught here.
"""

import logging
from collections.abc import Sequence
from typing import Protocol

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_keys import keys
from eth_keys.exceptions import BadSignature
from eth_keys.exceptions import ValidationError as KeyValidationError
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

logger = logging.getLogger(__name__)

ERC1271_MAGIC_VALUE = bytes.fromhex("1626ba7e")
ERC1271_SELECTOR = function_signature_to_4byte_selector("isValidSignature(bytes32,bytes)")
ERC6492_MAGIC_SUFFIX = bytes.fromhex("6492" * 16)

SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
SECP256K1_HALF_N = SECP256K1_N // 2


class GatewayError(Exception):
    """Chain access failed (transport or node error)."""

    pass


class CallReverted(GatewayError):
    """The called contract reverted."""

    pass


class AccountGateway(Protocol):
    """Read access to account code and contract calls."""

    def get_code(self, address: str) -> bytes: ...

    def call(self, to: str, data: bytes) -> bytes:
        """
        Execute a read-only call.

        Raises:
            CallReverted: If the call reverts
        """
        ...

    def simulate(self, calls: Sequence[tuple[str, bytes]]) -> bytes:
        """
        Execute calls in order against shared simulated state.

        Returns:
            Return data of the last call

        Raises:
            CallReverted: If any call reverts
        """
        ...


def recover_signer(digest: bytes, signature: bytes) -> str | None:
    """
    Recover the address that produced a 65-byte ECDSA signature over digest.

    Returns None for malformed or malleable signatures.
    """
    if len(signature) != 65:
        return None

    r = int.from_bytes(signature[:32], "big")
    s = int.from_bytes(signature[32:64], "big")
    v = signature[64]
    if v not in (27, 28) or s > SECP256K1_HALF_N:
        return None

    try:
        public_key = keys.Signature(vrs=(v - 27, r, s)).recover_public_key_from_msg_hash(digest)
    except (BadSignature, KeyValidationError):
        return None
    return public_key.to_checksum_address()


def erc1271_calldata(digest: bytes, signature: bytes) -> bytes:
    return ERC1271_SELECTOR + encode(["bytes32", "bytes"], [digest, signature])


class UniversalSignatureValidator:
    """
    Implements SignatureValidator protocol for EOAs and smart accounts.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, gateway: AccountGateway) -> None:
        self._gateway = gateway

    def is_valid(self, signer: str, digest: bytes, signature: bytes) -> bool:
        signer = to_checksum_address(signer)

        if signature.endswith(ERC6492_MAGIC_SUFFIX):
            return self._is_valid_counterfactual(signer, digest, signature)

        if recover_signer(digest, signature) == signer:
            return True

        if self._gateway.get_code(signer):
            return self._is_valid_contract(signer, digest, signature)

        return False

    def _is_valid_contract(self, signer: str, digest: bytes, signature: bytes) -> bool:
        try:
            result = self._gateway.call(signer, erc1271_calldata(digest, signature))
        except CallReverted:
            logger.debug("isValidSignature reverted for %s", signer)
            return False
        return result[:4] == ERC1271_MAGIC_VALUE

    def _is_valid_counterfactual(self, signer: str, digest: bytes, signature: bytes) -> bool:
        try:
            factory, factory_calldata, inner = decode(
                ["address", "bytes", "bytes"], signature[: -len(ERC6492_MAGIC_SUFFIX)]
            )
        except DecodingError:
            logger.debug("Malformed ERC-6492 wrapper for %s", signer)
            return False

        if self._gateway.get_code(signer):
            if self._is_valid_contract(signer, digest, inner):
                return True
            # The account may need the factory call to update its signers.
            logger.debug("Deployed account %s rejected signature, retrying after factory call", signer)

        calls = [
            (to_checksum_address(factory), factory_calldata),
            (signer, erc1271_calldata(digest, inner)),
        ]
        try:
            result = self._gateway.simulate(calls)
        except CallReverted:
            logger.debug("Counterfactual deployment or validation reverted for %s", signer)
            return False
        return result[:4] == ERC1271_MAGIC_VALUE
