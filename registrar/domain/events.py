"""Notifications published by the registrar for off-line observers."""

from dataclasses import dataclass


@dataclass(frozen=True)
class IssuerAdded:
    issuer: str


@dataclass(frozen=True)
class IssuerRemoved:
    issuer: str


@dataclass(frozen=True)
class NameRegistered:
    label: str
    owner: str
    node: bytes


@dataclass(frozen=True)
class OwnershipTransferred:
    previous_owner: str
    new_owner: str


RegistrarEvent = IssuerAdded | IssuerRemoved | NameRegistered | OwnershipTransferred
