"""Wire message types and outbound action encoding."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from brainlook.game.models import RoomSettings


class MessageType(str, Enum):
    """Values of the ``type`` field of wire messages.

    ``guess`` and ``settings`` travel in both directions with different payloads.
    """

    # Client -> Server and Server -> Client
    GUESS = "guess"
    SETTINGS = "settings"

    # Server -> Client
    SCOREBOARD = "scoreboard"
    WORD = "word"


# Advisory ranges for settings inputs. The server clamps or rejects; the
# client sends whatever the user entered.
SETTINGS_BOUNDS: dict[str, tuple[int, int]] = {
    "min_length": (3, 21),
    "max_length": (3, 21),
    "interval_seconds": (1, 30),
}


@dataclass(frozen=True)
class SubmitGuess:
    """User intent to submit a guess."""

    text: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "type": MessageType.GUESS.value,
            "guess": self.text,
        }


@dataclass(frozen=True)
class ChangeSettings:
    """User intent to change the room settings."""

    min_length: int
    max_length: int
    interval_seconds: int

    @classmethod
    def from_settings(cls, settings: RoomSettings) -> ChangeSettings:
        """Build the action from a settings draft."""
        return cls(
            min_length=settings.min_length,
            max_length=settings.max_length,
            interval_seconds=settings.interval_seconds,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "type": MessageType.SETTINGS.value,
            "settings": {
                "minLength": self.min_length,
                "maxLength": self.max_length,
                "interval": self.interval_seconds,
            },
        }


OutboundAction = SubmitGuess | ChangeSettings


def encode_action(action: OutboundAction) -> dict[str, Any]:
    """Encode a user action as a wire message.

    Only the shape is checked; values are passed through unvalidated.

    Args:
        action: The action to encode.

    Returns:
        The wire message as a JSON-serializable dictionary.

    Raises:
        TypeError: If ``action`` is not a known outbound action.
    """
    if not isinstance(action, (SubmitGuess, ChangeSettings)):
        raise TypeError(f"Unsupported outbound action: {type(action).__name__}")
    return action.to_dict()


def in_bounds(field_name: str, value: int) -> bool:
    """Check a settings value against its advisory UI range.

    Args:
        field_name: One of the keys of ``SETTINGS_BOUNDS``.
        value: The value entered by the user.

    Returns:
        True if the value lies within the advisory range.
    """
    low, high = SETTINGS_BOUNDS[field_name]
    return low <= value <= high
