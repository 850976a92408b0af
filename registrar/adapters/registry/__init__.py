"""Name registry adapters - In-memory and database implementations."""

from .memory import InMemoryNameRegistry
from .nodes import derive_node, labelhash, namehash
from .postgres import PostgresNameRegistry

__all__ = [
    "InMemoryNameRegistry",
    "PostgresNameRegistry",
    "derive_node",
    "labelhash",
    "namehash",
]
