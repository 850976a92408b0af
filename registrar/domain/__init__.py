"""
Domain layer - Pure business logic with zero framework imports.

This package contains the invite authorization engine: invite hashing, the
issuer whitelist and used-invite ledger ports, and the registrar service
that orchestrates name claims. It defines its own port interfaces for
infrastructure abstraction.
"""

from .events import IssuerAdded, IssuerRemoved, NameRegistered, OwnershipTransferred
from .exceptions import (
    AuthorizationFailure,
    DelegateFailure,
    InvalidInviter,
    InvalidLabel,
    InvalidOwner,
    InviteAlreadyUsed,
    LabelAlreadyClaimed,
    NodeNotClaimed,
    NotOwner,
    PolicyViolation,
    RegistrarError,
    SignatureExpired,
    Unauthorized,
)
from .invite import OPEN_RECIPIENT, Invite, InviteState
from .ports import (
    AddressRecord,
    Clock,
    EventPublisher,
    InviteLedger,
    IssuerWhitelist,
    NameRegistry,
    SignatureValidator,
)
from .registrar import InviteRegistrar

__all__ = [
    "OPEN_RECIPIENT",
    "AddressRecord",
    "AuthorizationFailure",
    "Clock",
    "DelegateFailure",
    "EventPublisher",
    "InvalidInviter",
    "InvalidLabel",
    "InvalidOwner",
    "Invite",
    "InviteAlreadyUsed",
    "InviteLedger",
    "InviteRegistrar",
    "InviteState",
    "IssuerAdded",
    "IssuerRemoved",
    "IssuerWhitelist",
    "LabelAlreadyClaimed",
    "NameRegistered",
    "NameRegistry",
    "NodeNotClaimed",
    "NotOwner",
    "OwnershipTransferred",
    "PolicyViolation",
    "RegistrarError",
    "SignatureExpired",
    "SignatureValidator",
    "Unauthorized",
]
