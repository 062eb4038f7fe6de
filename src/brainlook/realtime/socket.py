"""Persistent websocket connection to a game room."""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import structlog
import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedError, WebSocketException

from brainlook.exceptions import TransportError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

logger = structlog.get_logger(__name__)


def build_socket_url(ws_base_url: str, room_code: str, participant_name: str) -> str:
    """Build the session socket URL for a room/participant pair.

    Args:
        ws_base_url: Base URL such as ``ws://localhost:8080``.
        room_code: The room to connect to.
        participant_name: The participant's display name.

    Returns:
        The full socket URL, with both path segments percent-encoded.
    """
    return f"{ws_base_url.rstrip('/')}/ws/{quote(room_code, safe='')}/{quote(participant_name, safe='')}"


class SessionSocket:
    """Owns the websocket for one room/participant pair.

    Messages are only sent once the socket reports ready; anything sent before
    that (or after close) is dropped, never buffered. ``close()`` may be called
    any number of times, including before or while ``open()`` runs.

    Example:
        >>> async with SessionSocket("ws://localhost:8080", "ABCD", "Ann") as sock:
        ...     await sock.send({"type": "guess", "guess": "whale"})
        ...     async for frame in sock.receive():
        ...         print(frame)
    """

    def __init__(
        self,
        ws_base_url: str,
        room_code: str,
        participant_name: str,
        *,
        connector: Callable[..., Any] | None = None,
        open_timeout: float = 10.0,
    ) -> None:
        """Initialize the socket without connecting.

        Args:
            ws_base_url: Base websocket URL of the game server.
            room_code: The room to connect to.
            participant_name: The participant's display name.
            connector: Replacement for ``websockets.connect``.
            open_timeout: Seconds allowed for the opening handshake.
        """
        self.room_code = room_code
        self.participant_name = participant_name
        self.url = build_socket_url(ws_base_url, room_code, participant_name)
        self._connector = connector or websockets.connect
        self._open_timeout = open_timeout
        self._connection: Any = None
        self._ready = asyncio.Event()
        self._closed = False

    @property
    def is_ready(self) -> bool:
        """Whether the transport is open and usable for sending."""
        return self._ready.is_set() and not self._closed

    @property
    def is_closed(self) -> bool:
        """Whether ``close()`` has been called."""
        return self._closed

    async def wait_ready(self) -> None:
        """Wait until the socket reports ready."""
        await self._ready.wait()

    async def open(self) -> None:
        """Perform the websocket handshake.

        If ``close()`` is called while the handshake is in flight, the
        transport is closed as soon as it finishes opening and the socket
        never reports ready.

        Raises:
            TransportError: If the socket was already closed or the handshake fails.
        """
        if self._closed:
            raise TransportError("Socket is closed")
        if self._connection is not None:
            return

        logger.debug("Opening session socket", url=self.url)
        try:
            connection = await self._connector(self.url, open_timeout=self._open_timeout)
        except (OSError, TimeoutError, WebSocketException) as e:
            logger.warning("Session socket failed to open", url=self.url, error=str(e))
            raise TransportError(f"Could not connect to {self.url}: {e}") from e

        if self._closed:
            logger.debug("Socket closed during handshake, releasing transport", url=self.url)
            await connection.close()
            return

        self._connection = connection
        self._ready.set()
        logger.info("Session socket open", room_code=self.room_code, participant=self.participant_name)

    async def send(self, message: dict[str, Any]) -> bool:
        """Send a wire message.

        Args:
            message: JSON-serializable wire message.

        Returns:
            True if the message was handed to the transport, False if it was
            dropped because the socket is not ready.

        Raises:
            TransportError: If the connection was lost while sending.
        """
        if not self.is_ready:
            logger.warning("Dropping message, socket not ready", message_type=message.get("type"))
            return False

        try:
            await self._connection.send(json.dumps(message))
        except ConnectionClosed as e:
            raise TransportError("Connection lost while sending") from e
        return True

    async def receive(self) -> AsyncIterator[str | bytes]:
        """Iterate over inbound frames until the connection closes.

        Iteration ends quietly on a clean close or after a local ``close()``.

        Raises:
            TransportError: If the socket is not open or the connection drops.
        """
        connection = self._connection
        if connection is None:
            raise TransportError("Socket is not open")

        try:
            async for frame in connection:
                yield frame
        except ConnectionClosedError as e:
            if not self._closed:
                raise TransportError(f"Connection dropped: {e}") from e

    async def close(self) -> None:
        """Close the socket. Safe to call repeatedly and in any state."""
        if self._closed:
            return
        self._closed = True
        self._ready.clear()

        connection, self._connection = self._connection, None
        if connection is not None:
            await connection.close()
        logger.info("Session socket closed", room_code=self.room_code, participant=self.participant_name)

    async def __aenter__(self) -> SessionSocket:
        await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
