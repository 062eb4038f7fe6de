"""Tests for room provisioning over HTTP."""

from __future__ import annotations

import httpx
import pytest

from brainlook.config import ClientConfig
from brainlook.exceptions import ProvisioningError
from brainlook.services.provisioning import RoomProvisioningClient


class TestCreateRoom:
    """Tests for create_room."""

    async def test_returns_room_code(self, provisioning: RoomProvisioningClient, rooms: set[str]) -> None:
        """Test that the plain-text body is the room code."""
        code = await provisioning.create_room()
        assert code.startswith("ROOM")
        assert code in rooms

    async def test_created_room_can_be_joined(self, provisioning: RoomProvisioningClient) -> None:
        """Test create followed by join."""
        code = await provisioning.create_room()
        await provisioning.join_room(code)

    async def test_empty_body_is_an_error(self) -> None:
        """Test that a blank room code is rejected."""
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="  \n"))
        async with httpx.AsyncClient(transport=transport, base_url="http://game.test") as http_client:
            client = RoomProvisioningClient(ClientConfig(), http_client=http_client)
            with pytest.raises(ProvisioningError, match="empty room code"):
                await client.create_room()

    async def test_server_error(self) -> None:
        """Test that a 5xx response raises with its status."""
        transport = httpx.MockTransport(lambda request: httpx.Response(503))
        async with httpx.AsyncClient(transport=transport, base_url="http://game.test") as http_client:
            client = RoomProvisioningClient(ClientConfig(), http_client=http_client)
            with pytest.raises(ProvisioningError) as exc_info:
                await client.create_room()
        assert exc_info.value.status_code == 503


class TestJoinRoom:
    """Tests for join_room."""

    async def test_join_existing_room(self, provisioning: RoomProvisioningClient) -> None:
        """Test joining a known room succeeds."""
        await provisioning.join_room("ABCD")

    async def test_join_missing_room(self, provisioning: RoomProvisioningClient) -> None:
        """Test that a missing room raises with the 404 status."""
        with pytest.raises(ProvisioningError) as exc_info:
            await provisioning.join_room("ZZZZ")
        assert exc_info.value.status_code == 404

    async def test_join_requires_code(self, provisioning: RoomProvisioningClient) -> None:
        """Test that an empty code is rejected without a request."""
        with pytest.raises(ProvisioningError, match="required"):
            await provisioning.join_room("")

    async def test_network_error(self) -> None:
        """Test that transport failures surface as ProvisioningError without a status."""

        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(refuse), base_url="http://game.test") as http_client:
            client = RoomProvisioningClient(ClientConfig(), http_client=http_client)
            with pytest.raises(ProvisioningError) as exc_info:
                await client.join_room("ABCD")
        assert exc_info.value.status_code is None

    async def test_join_path_is_escaped(self) -> None:
        """Test that the room code is a single path segment."""
        seen: list[str] = []

        def record(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.raw_path.decode())
            return httpx.Response(200, text="OK")

        async with httpx.AsyncClient(transport=httpx.MockTransport(record), base_url="http://game.test") as http_client:
            await RoomProvisioningClient(ClientConfig(), http_client=http_client).join_room("AB/CD")
        assert seen == ["/api/join-room/AB%2FCD"]


class TestClientConfig:
    """Tests for configuration and derived URLs."""

    def test_urls_plain(self, config: ClientConfig) -> None:
        """Test http/ws URLs without TLS."""
        assert config.http_base_url == "http://game.test:8080"
        assert config.ws_base_url == "ws://game.test:8080"

    def test_urls_tls(self) -> None:
        """Test https/wss URLs with TLS."""
        config = ClientConfig(backend_host="games.example.com", use_tls=True)
        assert config.http_base_url == "https://games.example.com"
        assert config.ws_base_url == "wss://games.example.com"

    def test_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that defaults come from the environment."""
        monkeypatch.setenv("BRAINLOOK_BACKEND_HOST", "env.test:9000")
        monkeypatch.setenv("BRAINLOOK_USE_TLS", "true")
        monkeypatch.setenv("BRAINLOOK_TIMEOUT", "3.5")
        config = ClientConfig()
        assert config.backend_host == "env.test:9000"
        assert config.use_tls is True
        assert config.timeout == 3.5

    async def test_share_link(self, provisioning: RoomProvisioningClient) -> None:
        """Test the frontend share link."""
        assert provisioning.share_link("ABCD") == "http://front.test/game/ABCD"

    async def test_owned_client_is_closed(self, config: ClientConfig) -> None:
        """Test that a self-built HTTP client is closed on exit."""
        async with RoomProvisioningClient(config) as client:
            http_client = client._client
        assert http_client.is_closed

    async def test_injected_client_left_open(self, config: ClientConfig, http_client: httpx.AsyncClient) -> None:
        """Test that an injected HTTP client is not closed."""
        async with RoomProvisioningClient(config, http_client=http_client):
            pass
        assert not http_client.is_closed
