"""Type definitions for brainlook game sessions."""

from __future__ import annotations

from enum import StrEnum


class ConnectionState(StrEnum):
    """Lifecycle state of a game session connection.

    Sessions move forward only:
    IDLE -> PROVISIONING -> AWAITING_OPEN -> OPEN -> CLOSED
    A failed join returns to IDLE; any state may jump to CLOSED.
    """

    IDLE = "idle"
    PROVISIONING = "provisioning"  # join-room request in flight
    AWAITING_OPEN = "awaiting_open"  # socket constructed, handshake pending
    OPEN = "open"  # socket ready for traffic
    CLOSED = "closed"  # terminal
