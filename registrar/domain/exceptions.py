"""
Domain exceptions - Semantic error types for invite registration.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.

Taxonomy:
- PolicyViolation: the invite or the caller broke a registration rule
- AuthorizationFailure: a non-owner called an owner-only operation
- DelegateFailure: the name registry rejected the request; raised by
  registry adapters and passed through the engine unchanged

None of these are retried by the engine.
"""


class RegistrarError(Exception):
    """Base class for registrar domain errors."""

    pass


class PolicyViolation(RegistrarError):
    """Invite rejected by the validation pipeline."""

    pass


class SignatureExpired(PolicyViolation):
    """Current time is past the invite expiration."""

    pass


class InviteAlreadyUsed(PolicyViolation):
    """Invite identifier is already recorded in the used-invite ledger."""

    pass


class InvalidInviter(PolicyViolation):
    """Invite issuer is not on the whitelist."""

    pass


class Unauthorized(PolicyViolation):
    """Bad signature, or caller is not the bound recipient."""

    pass


class AuthorizationFailure(RegistrarError):
    """Caller lacks the capability for the requested operation."""

    pass


class NotOwner(AuthorizationFailure):
    """Caller is not the registrar owner."""

    pass


class InvalidOwner(RegistrarError):
    """Ownership cannot be transferred to the zero address."""

    pass


class DelegateFailure(RegistrarError):
    """Base class for failures surfaced by the name registry."""

    pass


class LabelAlreadyClaimed(DelegateFailure):
    """Node derived from the label already has an owner."""

    pass


class InvalidLabel(DelegateFailure):
    """Label is empty or contains a separator."""

    pass


class NodeNotClaimed(DelegateFailure):
    """Node has no owner."""

    pass
