"""Signature adapters - Universal validator and chain access."""

from .jsonrpc import JsonRpcAccountGateway
from .validator import (
    AccountGateway,
    CallReverted,
    GatewayError,
    UniversalSignatureValidator,
    recover_signer,
)

__all__ = [
    "AccountGateway",
    "CallReverted",
    "GatewayError",
    "JsonRpcAccountGateway",
    "UniversalSignatureValidator",
    "recover_signer",
]
