"""
ENS-style node derivation.

    labelhash(label)      = keccak256(utf8(label))
    derive_node(p, label) = keccak256(p || labelhash(label))
    namehash("")          = 0x00 * 32
    namehash("a.b")       = derive_node(namehash("b"), "a")
"""

from eth_utils import keccak

from registrar.domain.exceptions import InvalidLabel

EMPTY_NODE = b"\x00" * 32


def labelhash(label: str) -> bytes:
    return keccak(text=label)


def derive_node(parent: bytes, label: str) -> bytes:
    return keccak(parent + labelhash(label))


def namehash(name: str) -> bytes:
    node = EMPTY_NODE
    if not name:
        return node
    for label in reversed(name.split(".")):
        node = derive_node(node, label)
    return node


def check_label(label: str) -> None:
    """Raise InvalidLabel unless label is a single non-empty name segment."""
    if not label or "." in label:
        raise InvalidLabel(label)
