"""
In-memory name registry adapter - Implements NameRegistry protocol.

Dict-backed registry for tests and local use. Ownership and records live
only as long as the instance.
"""

import logging
from collections.abc import Sequence

from registrar.domain.exceptions import LabelAlreadyClaimed, NodeNotClaimed
from registrar.domain.ports import AddressRecord

from .nodes import check_label, derive_node, namehash

logger = logging.getLogger(__name__)


class InMemoryNameRegistry:
    """
    Implements NameRegistry protocol with dictionaries.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, root_name: str) -> None:
        self.root_name = root_name
        self._root = namehash(root_name)
        self._owners: dict[bytes, str] = {}
        self._records: dict[tuple[bytes, int], bytes] = {}

    def root_node(self) -> bytes:
        return self._root

    def derive_node(self, parent: bytes, label: str) -> bytes:
        return derive_node(parent, label)

    def claim(
        self,
        parent: bytes,
        label: str,
        owner: str,
        extra_records: Sequence[AddressRecord] = (),
    ) -> bytes:
        check_label(label)
        node = derive_node(parent, label)
        if node in self._owners:
            raise LabelAlreadyClaimed(label)

        self._owners[node] = owner
        for record in extra_records:
            self._records[(node, record.coin_type)] = record.address

        logger.debug("Claimed %s.%s for %s", label, self.root_name, owner)
        return node

    def set_address_record(self, node: bytes, coin_type: int, address: bytes) -> None:
        if node not in self._owners:
            raise NodeNotClaimed(node.hex())
        self._records[(node, coin_type)] = address

    def owner_of(self, node: bytes) -> str:
        try:
            return self._owners[node]
        except KeyError:
            raise NodeNotClaimed(node.hex()) from None

    def address_record(self, node: bytes, coin_type: int) -> bytes | None:
        return self._records.get((node, coin_type))
