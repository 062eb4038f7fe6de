"""Client configuration for brainlook."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class ClientConfig:
    """Configuration for connecting to a brainlook game server.

    Environment variables:
        BRAINLOOK_BACKEND_HOST: Host (and optional port) of the game server.
        BRAINLOOK_USE_TLS: Use https/wss instead of http/ws.
        BRAINLOOK_FRONTEND_URL: Base URL of the web frontend, used for share links.
        BRAINLOOK_TIMEOUT: Timeout in seconds for provisioning requests and the
            socket handshake.

    Example:
        >>> config = ClientConfig(backend_host="games.example.com", use_tls=True)
        >>> config.ws_base_url
        'wss://games.example.com'
    """

    backend_host: str = field(default_factory=lambda: os.getenv("BRAINLOOK_BACKEND_HOST", "localhost:8080"))
    use_tls: bool = field(default_factory=lambda: _env_flag("BRAINLOOK_USE_TLS"))
    frontend_url: str = field(default_factory=lambda: os.getenv("BRAINLOOK_FRONTEND_URL", "http://localhost:3000"))
    timeout: float = field(default_factory=lambda: float(os.getenv("BRAINLOOK_TIMEOUT", "10")))

    @property
    def http_base_url(self) -> str:
        """Base URL for the provisioning API."""
        scheme = "https" if self.use_tls else "http"
        return f"{scheme}://{self.backend_host}"

    @property
    def ws_base_url(self) -> str:
        """Base URL for session sockets."""
        scheme = "wss" if self.use_tls else "ws"
        return f"{scheme}://{self.backend_host}"
