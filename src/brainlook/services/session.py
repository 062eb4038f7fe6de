"""Game session lifecycle: provisioning, socket ownership and the receive loop."""

from __future__ import annotations

import asyncio
import contextlib
from typing import TYPE_CHECKING

import structlog

from brainlook.config import ClientConfig
from brainlook.core.logging import bind_session_context, clear_session_context
from brainlook.exceptions import ProtocolError, ProvisioningError, SessionStateError, TransportError
from brainlook.game.models import RoomSettings
from brainlook.game.state import GameSessionState
from brainlook.game.types import ConnectionState
from brainlook.realtime.messages import ChangeSettings, OutboundAction, SubmitGuess, encode_action
from brainlook.realtime.router import InboundMessageRouter
from brainlook.realtime.socket import SessionSocket
from brainlook.services.provisioning import RoomProvisioningClient

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

logger = structlog.get_logger(__name__)


class GameSession:
    """One participant's live connection to a room.

    Drives the connection lifecycle
    ``IDLE -> PROVISIONING -> AWAITING_OPEN -> OPEN -> CLOSED``:

    - ``join()`` registers with the room over HTTP, then opens the socket.
      A failed join returns to ``IDLE`` without constructing a socket.
    - While open, a background task routes every inbound frame into
      :attr:`state`. Protocol errors are logged and skipped; a transport
      failure closes the session and is kept in :attr:`error`.
    - ``close()`` runs exactly once no matter how often it is called, and the
      async context manager guarantees it on every exit path.

    Example:
        >>> async with GameSession("ABCD") as session:
        ...     await session.join("Ann")
        ...     await session.submit_guess("whale")
        ...     await session.wait_closed()
    """

    def __init__(
        self,
        room_code: str,
        *,
        config: ClientConfig | None = None,
        provisioning: RoomProvisioningClient | None = None,
        state: GameSessionState | None = None,
        socket_factory: Callable[[str, str], SessionSocket] | None = None,
    ) -> None:
        """Initialize the session without touching the network.

        Args:
            room_code: The room to play in.
            config: Client configuration. Read from the environment if None.
            provisioning: Provisioning client. One is created (and closed with
                the session) if None.
            state: State to write into. A fresh one is created if None.
            socket_factory: Builds the socket for ``(room_code, participant_name)``.
        """
        self.room_code = room_code
        self._config = config or ClientConfig()
        self._owns_provisioning = provisioning is None
        self._provisioning = provisioning or RoomProvisioningClient(self._config)
        self.state = state or GameSessionState()
        self.router = InboundMessageRouter(self.state)
        self._socket_factory = socket_factory or self._default_socket
        self._socket: SessionSocket | None = None
        self._connection_state = ConnectionState.IDLE
        self._receive_task: asyncio.Task | None = None
        self._closed = asyncio.Event()
        self._state_listeners: list[Callable[[ConnectionState], None]] = []
        self._disconnect_listeners: list[Callable[[TransportError], None]] = []
        self.participant_name: str | None = None
        self.error: TransportError | None = None

    def _default_socket(self, room_code: str, participant_name: str) -> SessionSocket:
        return SessionSocket(
            self._config.ws_base_url,
            room_code,
            participant_name,
            open_timeout=self._config.timeout,
        )

    @property
    def connection_state(self) -> ConnectionState:
        """Current lifecycle state."""
        return self._connection_state

    @property
    def is_open(self) -> bool:
        """Whether actions can be sent."""
        return self._connection_state is ConnectionState.OPEN

    def on_state_change(self, listener: Callable[[ConnectionState], None]) -> None:
        """Register a callback invoked on every lifecycle transition."""
        self._state_listeners.append(listener)

    def on_disconnect(self, listener: Callable[[TransportError], None]) -> None:
        """Register a callback invoked when the transport fails."""
        self._disconnect_listeners.append(listener)

    async def join(self, participant_name: str) -> None:
        """Join the room and open the session socket.

        Args:
            participant_name: Display name, fixed for the life of the session.

        Raises:
            SessionStateError: If the session is not idle or the name is empty.
            ProvisioningError: If the server refuses the join. The session
                stays idle and ``join`` may be retried.
            TransportError: If the socket fails to open. The session is closed.
                Not raised when the session was already closed by the caller.
        """
        if self._connection_state is not ConnectionState.IDLE:
            raise SessionStateError(f"Cannot join a session that is {self._connection_state.value}")
        if not participant_name:
            raise SessionStateError("Participant name is required")

        self._set_state(ConnectionState.PROVISIONING)
        try:
            await self._provisioning.join_room(self.room_code)
        except ProvisioningError:
            if self._connection_state is ConnectionState.PROVISIONING:
                self._set_state(ConnectionState.IDLE)
            raise

        if self._connection_state is ConnectionState.CLOSED:
            logger.info("Session closed during provisioning, discarding join", room_code=self.room_code)
            return

        self.participant_name = participant_name
        bind_session_context(self.room_code, participant_name)

        socket = self._socket_factory(self.room_code, participant_name)
        self._socket = socket
        self._set_state(ConnectionState.AWAITING_OPEN)
        try:
            await socket.open()
        except TransportError as e:
            if self._connection_state is ConnectionState.CLOSED:
                logger.info("Session closed during socket open, ignoring handshake failure", error=str(e))
                return
            await self._fail(e)
            raise

        if self._connection_state is ConnectionState.CLOSED:
            return

        self._set_state(ConnectionState.OPEN)
        self._receive_task = asyncio.create_task(self._receive_loop(socket))

    async def send_action(self, action: OutboundAction) -> bool:
        """Encode and send a user action.

        Args:
            action: The action to send.

        Returns:
            True if sent, False if dropped because the session is not open.

        Raises:
            TransportError: If the connection was lost while sending. The
                session is closed before this is raised.
        """
        if self._connection_state is not ConnectionState.OPEN or self._socket is None:
            logger.warning(
                "Dropping action, session not open",
                action=type(action).__name__,
                connection_state=self._connection_state.value,
            )
            return False

        try:
            return await self._socket.send(encode_action(action))
        except TransportError as e:
            await self._fail(e)
            raise

    async def submit_guess(self, text: str | None = None) -> bool:
        """Submit a guess and clear the pending guess text.

        Args:
            text: Guess to send. Defaults to the pending guess in :attr:`state`.
        """
        pending = self.state.take_pending_guess()
        return await self.send_action(SubmitGuess(pending if text is None else text))

    async def change_settings(
        self,
        min_length: int | None = None,
        max_length: int | None = None,
        interval_seconds: int | None = None,
    ) -> bool:
        """Request new room settings.

        Values left as None are taken from the settings draft. The draft is
        updated with what was requested; the server echo replaces it later.
        """
        draft = self.state.settings_draft
        action = ChangeSettings(
            min_length=draft.min_length if min_length is None else min_length,
            max_length=draft.max_length if max_length is None else max_length,
            interval_seconds=draft.interval_seconds if interval_seconds is None else interval_seconds,
        )
        self.state.set_settings_draft(
            RoomSettings(
                min_length=action.min_length,
                max_length=action.max_length,
                interval_seconds=action.interval_seconds,
            )
        )
        return await self.send_action(action)

    async def wait_closed(self) -> None:
        """Wait until the session is closed."""
        await self._closed.wait()

    async def close(self) -> None:
        """Close the session and release the socket. Idempotent."""
        if self._connection_state is ConnectionState.CLOSED:
            return
        self._set_state(ConnectionState.CLOSED)

        task, self._receive_task = self._receive_task, None
        if task is not None and task is not asyncio.current_task():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        if self._socket is not None:
            await self._socket.close()
        if self._owns_provisioning:
            await self._provisioning.aclose()

        clear_session_context()
        self._closed.set()
        logger.info("Game session closed", room_code=self.room_code, error=str(self.error) if self.error else None)

    async def _receive_loop(self, socket: SessionSocket) -> None:
        try:
            async for frame in socket.receive():
                try:
                    self.router.route(frame)
                except ProtocolError as e:
                    logger.warning("Ignoring unroutable message", error=str(e), error_type=type(e).__name__)
        except TransportError as e:
            await self._fail(e)
            return

        if self._connection_state is not ConnectionState.CLOSED:
            await self._fail(TransportError("Connection closed by server"))

    async def _fail(self, error: TransportError) -> None:
        if self._connection_state is ConnectionState.CLOSED:
            return
        logger.error("Session transport failed", room_code=self.room_code, error=str(error))
        self.error = error
        await self.close()
        for listener in list(self._disconnect_listeners):
            try:
                listener(error)
            except Exception:
                logger.exception("Disconnect listener failed", listener=repr(listener))

    def _set_state(self, new_state: ConnectionState) -> None:
        old_state, self._connection_state = self._connection_state, new_state
        logger.debug("Connection state changed", old=old_state.value, new=new_state.value)
        for listener in list(self._state_listeners):
            try:
                listener(new_state)
            except Exception:
                logger.exception("State listener failed", listener=repr(listener))

    async def __aenter__(self) -> GameSession:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
