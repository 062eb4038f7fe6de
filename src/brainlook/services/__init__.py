"""Client services for brainlook."""

from brainlook.services.provisioning import RoomProvisioningClient
from brainlook.services.session import GameSession

__all__ = ["GameSession", "RoomProvisioningClient"]
