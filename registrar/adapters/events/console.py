"""
Console event publisher adapter - Implements EventPublisher protocol.

This module provides a console-based implementation of the domain's
event publisher port, logging registrar notifications for off-line
observers (log shippers, docker-compose logs).
"""

import logging
from dataclasses import fields

from registrar.domain.events import RegistrarEvent

logger = logging.getLogger(__name__)


class ConsoleEventPublisher:
    """
    Implements EventPublisher protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def publish(self, event: RegistrarEvent) -> None:
        """
        Log an event at INFO level.

        Format: [EVENT] NameRegistered label=alice owner=0x... node=0x...
        Bytes fields are rendered as 0x-prefixed hex.
        """
        parts = []
        for f in fields(event):
            value = getattr(event, f.name)
            if isinstance(value, bytes):
                value = "0x" + value.hex()
            parts.append(f"{f.name}={value}")
        logger.info("[EVENT] %s %s", type(event).__name__, " ".join(parts))
