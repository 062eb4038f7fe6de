"""Real-time session protocol for brainlook.

This module provides the session websocket, outbound action encoding and
inbound message routing.
"""

from __future__ import annotations

from brainlook.realtime.messages import (
    SETTINGS_BOUNDS,
    ChangeSettings,
    MessageType,
    OutboundAction,
    SubmitGuess,
    encode_action,
)
from brainlook.realtime.router import InboundMessageRouter, Transition
from brainlook.realtime.socket import SessionSocket, build_socket_url

__all__ = [
    "SETTINGS_BOUNDS",
    "ChangeSettings",
    "InboundMessageRouter",
    "MessageType",
    "OutboundAction",
    "SessionSocket",
    "SubmitGuess",
    "Transition",
    "build_socket_url",
    "encode_action",
]
