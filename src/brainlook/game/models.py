"""Game data models for brainlook sessions.

Every model is frozen: the client never edits a value it has already published,
it builds a new one and replaces the old.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DEFAULT_MIN_LENGTH = 3
DEFAULT_MAX_LENGTH = 21
DEFAULT_INTERVAL_SECONDS = 5


@dataclass(frozen=True)
class Player:
    """A scoreboard entry.

    Attributes:
        name: Display name, unique within one scoreboard.
        score: Current total score.
    """

    name: str
    score: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to wire representation."""
        return {"name": self.name, "score": self.score}


@dataclass(frozen=True)
class Guess:
    """A judged guess, as broadcast by the server.

    Attributes:
        player: Name of the player who guessed.
        guess: The raw guess text.
        correct: Whether the server judged the guess correct.
    """

    player: str
    guess: str
    correct: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to wire representation."""
        return {"player": self.player, "guess": self.guess, "correct": self.correct}


@dataclass(frozen=True)
class WordClue:
    """The masked word and its clue.

    Attributes:
        displayed: Server-masked form of the secret word, e.g. ``"w _ _ l e"``.
        clue: Hint text for the word.
    """

    displayed: str = ""
    clue: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to wire representation."""
        return {"displayed": self.displayed, "clue": self.clue}


@dataclass(frozen=True)
class RoomSettings:
    """Room-wide game settings.

    Attributes:
        min_length: Minimum length of chosen words.
        max_length: Maximum length of chosen words.
        interval_seconds: Seconds between letter reveals.
    """

    min_length: int = DEFAULT_MIN_LENGTH
    max_length: int = DEFAULT_MAX_LENGTH
    interval_seconds: int = DEFAULT_INTERVAL_SECONDS

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire ``settings`` object."""
        return {
            "minLength": self.min_length,
            "maxLength": self.max_length,
            "interval": self.interval_seconds,
        }


@dataclass(frozen=True)
class GameSnapshot:
    """Immutable view of a game session at one point in time.

    Attributes:
        players: Latest scoreboard, in server order.
        guesses: Guess log in receipt order.
        word: Current masked word and clue.
        settings: Last settings broadcast by the server.
        pending_guess: Guess text typed but not yet submitted.
        settings_draft: Locally edited settings not yet submitted.
    """

    players: tuple[Player, ...] = ()
    guesses: tuple[Guess, ...] = ()
    word: WordClue = field(default_factory=WordClue)
    settings: RoomSettings = field(default_factory=RoomSettings)
    pending_guess: str = ""
    settings_draft: RoomSettings = field(default_factory=RoomSettings)

    def ranked_players(self) -> list[Player]:
        """Return players sorted by score, highest first."""
        return sorted(self.players, key=lambda p: (-p.score, p.name))
