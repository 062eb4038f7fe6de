"""Brainlook: client synchronization core for a live word-guessing game.

Players share a room identified by a short code. One word is revealed letter
by letter while everyone submits guesses; the server judges guesses, keeps
score and broadcasts updates over a websocket.

Key Components:
    - RoomProvisioningClient: create and join rooms over HTTP
    - SessionSocket: the websocket for one room/participant pair
    - encode_action: user intents to wire messages
    - InboundMessageRouter: wire messages to state updates
    - GameSessionState: immutable snapshots of the local game view
    - GameSession: the connection lifecycle tying all of the above together

Quick Start:
    >>> import asyncio
    >>> from brainlook import GameSession
    >>>
    >>> async def main() -> None:
    ...     async with GameSession("ABCD") as session:
    ...         session.state.subscribe(print)
    ...         await session.join("Ann")
    ...         await session.submit_guess("whale")
    ...         await session.wait_closed()
    >>>
    >>> asyncio.run(main())
"""

from __future__ import annotations

from brainlook.config import ClientConfig
from brainlook.exceptions import (
    BrainlookError,
    MalformedMessageError,
    ProtocolError,
    ProvisioningError,
    SessionStateError,
    TransportError,
    UnknownMessageKind,
)
from brainlook.game import (
    ConnectionState,
    GameSessionState,
    GameSnapshot,
    Guess,
    Player,
    RoomSettings,
    WordClue,
)
from brainlook.realtime import (
    ChangeSettings,
    InboundMessageRouter,
    MessageType,
    SessionSocket,
    SubmitGuess,
    encode_action,
)
from brainlook.services import GameSession, RoomProvisioningClient

__all__ = [
    "BrainlookError",
    "ChangeSettings",
    "ClientConfig",
    "ConnectionState",
    "GameSession",
    "GameSessionState",
    "GameSnapshot",
    "Guess",
    "InboundMessageRouter",
    "MalformedMessageError",
    "MessageType",
    "Player",
    "ProtocolError",
    "ProvisioningError",
    "RoomProvisioningClient",
    "RoomSettings",
    "SessionSocket",
    "SessionStateError",
    "SubmitGuess",
    "TransportError",
    "UnknownMessageKind",
    "WordClue",
    "encode_action",
]

__version__ = "0.1.0"
