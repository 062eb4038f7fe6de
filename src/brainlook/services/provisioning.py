"""Room provisioning over the HTTP API."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx
import structlog

from brainlook.config import ClientConfig
from brainlook.exceptions import ProvisioningError

if TYPE_CHECKING:
    from types import TracebackType

logger = structlog.get_logger(__name__)


class RoomProvisioningClient:
    """Creates and joins rooms before a session socket is opened.

    Each call is a single request with no retry. Failures surface as
    :class:`ProvisioningError`; nothing is cached on failure.

    Example:
        >>> async with RoomProvisioningClient(ClientConfig()) as client:
        ...     code = await client.create_room()
        ...     await client.join_room(code)
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Client configuration. Read from the environment if None.
            http_client: Optional pre-configured client. When given, request
                paths are resolved against its ``base_url`` and the caller
                remains responsible for closing it.
        """
        self._config = config or ClientConfig()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=self._config.http_base_url,
            timeout=self._config.timeout,
        )

    @property
    def config(self) -> ClientConfig:
        """The client configuration."""
        return self._config

    async def create_room(self) -> str:
        """Ask the server to create a new room.

        Returns:
            The new room code.

        Raises:
            ProvisioningError: If the request fails or the server returns no code.
        """
        response = await self._post("/api/create-room", action="create_room")
        room_code = response.text.strip()
        if not room_code:
            raise ProvisioningError("Server returned an empty room code", status_code=response.status_code)

        logger.info("Room created", room_code=room_code)
        return room_code

    async def join_room(self, room_code: str) -> None:
        """Register the intent to join a room.

        Must succeed before the session socket for ``room_code`` is opened.

        Args:
            room_code: The room to join.

        Raises:
            ProvisioningError: If the room does not exist, is full, or the
                request fails.
        """
        if not room_code:
            raise ProvisioningError("Room code is required")
        await self._post(f"/api/join-room/{quote(room_code, safe='')}", action="join_room", room_code=room_code)
        logger.info("Joined room", room_code=room_code)

    def share_link(self, room_code: str) -> str:
        """Build the frontend link other players can use to join a room."""
        return f"{self._config.frontend_url.rstrip('/')}/game/{room_code}"

    async def _post(self, path: str, *, action: str, room_code: str | None = None) -> httpx.Response:
        try:
            response = await self._client.post(path)
        except httpx.HTTPError as e:
            logger.warning("Provisioning request failed", action=action, room_code=room_code, error=str(e))
            raise ProvisioningError(f"{action} request failed: {e}") from e

        if not response.is_success:
            logger.warning(
                "Provisioning rejected",
                action=action,
                room_code=room_code,
                status=response.status_code,
            )
            raise ProvisioningError(
                f"{action} failed with status {response.status_code}",
                status_code=response.status_code,
            )
        return response

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> RoomProvisioningClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
