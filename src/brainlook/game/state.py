"""Local view model for a brainlook game session."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

import structlog

from brainlook.game.models import GameSnapshot, Guess, Player, RoomSettings, WordClue

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

logger = structlog.get_logger(__name__)


class GameSessionState:
    """Holds the current :class:`GameSnapshot` and publishes replacements.

    The four server-driven entry points (``replace_scoreboard``,
    ``append_guess``, ``replace_word``, ``replace_settings``) are called only
    by the inbound message router. The pending guess and settings draft are
    UI-local and are edited by the presentation layer.

    Every change builds a new snapshot and notifies subscribers with it; a
    snapshot handed to a subscriber is never modified afterwards.
    """

    def __init__(self, snapshot: GameSnapshot | None = None) -> None:
        """Initialize the state.

        Args:
            snapshot: Optional starting snapshot. Defaults to an empty game.
        """
        self._snapshot = snapshot or GameSnapshot()
        self._listeners: list[Callable[[GameSnapshot], None]] = []

    @property
    def snapshot(self) -> GameSnapshot:
        """The current snapshot."""
        return self._snapshot

    @property
    def players(self) -> tuple[Player, ...]:
        """The current scoreboard."""
        return self._snapshot.players

    @property
    def guesses(self) -> tuple[Guess, ...]:
        """The guess log in receipt order."""
        return self._snapshot.guesses

    @property
    def word(self) -> WordClue:
        """The current masked word and clue."""
        return self._snapshot.word

    @property
    def settings(self) -> RoomSettings:
        """The last settings broadcast by the server."""
        return self._snapshot.settings

    @property
    def pending_guess(self) -> str:
        """Guess text typed but not yet submitted."""
        return self._snapshot.pending_guess

    @property
    def settings_draft(self) -> RoomSettings:
        """Settings edited locally but not yet submitted."""
        return self._snapshot.settings_draft

    def subscribe(self, listener: Callable[[GameSnapshot], None]) -> Callable[[], None]:
        """Register a callback invoked with every new snapshot.

        Args:
            listener: Callable receiving the replacement snapshot.

        Returns:
            A function that removes the listener when called.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # Router entry points

    def replace_scoreboard(self, players: Iterable[Player]) -> None:
        """Replace the scoreboard wholesale.

        Args:
            players: The complete new scoreboard.
        """
        self._publish(replace(self._snapshot, players=tuple(players)))

    def append_guess(self, guess: Guess) -> None:
        """Append a judged guess to the log.

        Args:
            guess: The guess broadcast by the server.
        """
        self._publish(replace(self._snapshot, guesses=(*self._snapshot.guesses, guess)))

    def replace_word(self, word: WordClue) -> None:
        """Replace the current word and clue.

        Args:
            word: The new masked word and clue.
        """
        self._publish(replace(self._snapshot, word=word))

    def replace_settings(self, settings: RoomSettings) -> None:
        """Replace the room settings with the server's copy.

        The local draft is reset to the same values so the settings form
        reflects what the server actually applied.

        Args:
            settings: Settings echoed by the server.
        """
        self._publish(replace(self._snapshot, settings=settings, settings_draft=settings))

    # Presentation entry points

    def set_pending_guess(self, text: str) -> None:
        """Record guess text that has been typed but not submitted."""
        self._publish(replace(self._snapshot, pending_guess=text))

    def take_pending_guess(self) -> str:
        """Return the pending guess text and clear it."""
        text = self._snapshot.pending_guess
        if text:
            self._publish(replace(self._snapshot, pending_guess=""))
        return text

    def set_settings_draft(self, draft: RoomSettings) -> None:
        """Record locally edited settings."""
        self._publish(replace(self._snapshot, settings_draft=draft))

    def _publish(self, snapshot: GameSnapshot) -> None:
        self._snapshot = snapshot
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Snapshot listener failed", listener=repr(listener))
