"""Game session models and local state for brainlook."""

from __future__ import annotations

__all__ = [
    "ConnectionState",
    "GameSessionState",
    "GameSnapshot",
    "Guess",
    "Player",
    "RoomSettings",
    "WordClue",
]

from brainlook.game.models import GameSnapshot, Guess, Player, RoomSettings, WordClue
from brainlook.game.state import GameSessionState
from brainlook.game.types import ConnectionState
