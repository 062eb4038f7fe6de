"""Pytest configuration and fixtures for brainlook tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from fakes import FakeConnector, create_stub_server
from litestar.testing import AsyncTestClient

from brainlook.config import ClientConfig
from brainlook.game.state import GameSessionState
from brainlook.realtime.router import InboundMessageRouter
from brainlook.realtime.socket import SessionSocket
from brainlook.services.provisioning import RoomProvisioningClient

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable


# Config and state fixtures


@pytest.fixture
def config() -> ClientConfig:
    """Create a config that does not depend on the environment."""
    return ClientConfig(
        backend_host="game.test:8080",
        use_tls=False,
        frontend_url="http://front.test",
        timeout=2.0,
    )


@pytest.fixture
def state() -> GameSessionState:
    """Create a fresh session state."""
    return GameSessionState()


@pytest.fixture
def router(state: GameSessionState) -> InboundMessageRouter:
    """Create a router writing to the state fixture."""
    return InboundMessageRouter(state)


# Provisioning fixtures


@pytest.fixture
def rooms() -> set[str]:
    """Room codes known to the stub server."""
    return {"ABCD"}


@pytest.fixture
async def http_client(rooms: set[str]) -> AsyncIterator[AsyncTestClient]:
    """Create an HTTP client bound to the stub provisioning server."""
    async with AsyncTestClient(app=create_stub_server(rooms)) as client:
        yield client


@pytest.fixture
def provisioning(config: ClientConfig, http_client: AsyncTestClient) -> RoomProvisioningClient:
    """Create a provisioning client talking to the stub server."""
    return RoomProvisioningClient(config, http_client=http_client)


# Socket fixtures


@pytest.fixture
def connector() -> FakeConnector:
    """Create a fake websocket connector."""
    return FakeConnector()


@pytest.fixture
def socket_factory(config: ClientConfig, connector: FakeConnector) -> Callable[[str, str], SessionSocket]:
    """Create a socket factory whose sockets use the fake connector."""

    def factory(room_code: str, participant_name: str) -> SessionSocket:
        return SessionSocket(config.ws_base_url, room_code, participant_name, connector=connector)

    return factory
