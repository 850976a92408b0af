"""invite-registrar: invite-based delegated name registration."""

__version__ = "0.1.0"
