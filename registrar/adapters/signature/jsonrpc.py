"""
JSON-RPC account gateway adapter - Implements AccountGateway protocol.

Talks to an Ethereum node over HTTP with httpx:

- eth_getCode      account code (empty for plain-key accounts)
- eth_call         ERC-1271 checks against deployed accounts
- eth_simulateV1   factory deployment followed by an ERC-1271 check, for
                   accounts that do not exist yet (ERC-6492)
"""

import itertools
import logging
from collections.abc import Sequence
from typing import Any

import httpx
from eth_utils import to_bytes, to_hex

from .validator import CallReverted, GatewayError

logger = logging.getLogger(__name__)

# EIP-1474 / geth code for "execution reverted"
_REVERT_ERROR_CODE = 3


class JsonRpcAccountGateway:
    """
    Implements AccountGateway protocol over JSON-RPC.

    Uses structural subtyping - no explicit inheritance from Protocol.
    The httpx client is owned by the caller.
    """

    def __init__(self, client: httpx.Client, rpc_url: str, block: str = "latest") -> None:
        """
        Args:
            client: httpx client used for all requests
            rpc_url: Node endpoint
            block: Block tag calls are executed against
        """
        self._client = client
        self._rpc_url = rpc_url
        self._block = block
        self._ids = itertools.count(1)

    def get_code(self, address: str) -> bytes:
        return _decode_hex("eth_getCode", self._request("eth_getCode", [address, self._block]))

    def call(self, to: str, data: bytes) -> bytes:
        result = self._request("eth_call", [{"to": to, "data": to_hex(data)}, self._block])
        return _decode_hex("eth_call", result)

    def simulate(self, calls: Sequence[tuple[str, bytes]]) -> bytes:
        payload = {
            "blockStateCalls": [
                {"calls": [{"to": to, "data": to_hex(data)} for to, data in calls]},
            ],
        }
        blocks = self._request("eth_simulateV1", [payload, self._block])

        try:
            results = blocks[0]["calls"]
        except (IndexError, KeyError, TypeError) as e:
            raise GatewayError(f"Malformed eth_simulateV1 response: {blocks!r}") from e
        if not isinstance(results, list) or not results or not all(isinstance(r, dict) for r in results):
            raise GatewayError(f"Malformed eth_simulateV1 calls: {results!r}")

        for result in results:
            if result.get("status") != "0x1":
                error = result.get("error")
                message = error.get("message") if isinstance(error, dict) else None
                raise CallReverted(message or "simulated call reverted")
        return _decode_hex("eth_simulateV1", results[-1].get("returnData"))

    def _request(self, method: str, params: list[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}

        try:
            response = self._client.post(self._rpc_url, json=payload)
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"JSON-RPC {method} failed: {e}")
            raise GatewayError(f"JSON-RPC {method} failed") from e

        if not isinstance(body, dict):
            raise GatewayError(f"Malformed JSON-RPC {method} response: {body!r}")

        error = body.get("error")
        if error is not None:
            if not isinstance(error, dict):
                raise GatewayError(f"JSON-RPC {method} error: {error!r}")
            message = str(error.get("message", ""))
            if error.get("code") == _REVERT_ERROR_CODE or "revert" in message.lower():
                raise CallReverted(message)
            raise GatewayError(f"JSON-RPC {method} error: {message}")

        if "result" not in body:
            raise GatewayError(f"JSON-RPC {method} response has no result")
        return body["result"]


def _decode_hex(method: str, value: Any) -> bytes:
    """Decode a hex result, rejecting anything the node should not have sent."""
    if not isinstance(value, str):
        raise GatewayError(f"Malformed {method} result: {value!r}")
    try:
        return to_bytes(hexstr=value)
    except ValueError as e:
        raise GatewayError(f"Malformed {method} result: {value!r}") from e
