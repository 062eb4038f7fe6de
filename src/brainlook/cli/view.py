"""Terminal rendering of a game session."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from brainlook.game.models import GameSnapshot

if TYPE_CHECKING:
    from brainlook.game.models import Guess, Player, RoomSettings, WordClue


def scoreboard_table(players: list[Player]) -> Table:
    """Build the scoreboard table, highest score first."""
    table = Table(title="Scoreboard")
    table.add_column("Player", style="cyan")
    table.add_column("Score", style="green", justify="right")
    for player in players:
        table.add_row(player.name, str(player.score))
    return table


def word_panel(word: WordClue) -> Panel:
    """Build the panel showing the masked word and its clue."""
    return Panel(Text(word.displayed or "...", style="bold"), title=word.clue or "Waiting for a word")


def guess_line(guess: Guess) -> Text:
    """Format one guess log entry."""
    line = Text(guess.player, style="cyan")
    if guess.correct:
        line.append(" correctly", style="bold green")
    else:
        line.append(" incorrectly", style="red")
    line.append(" guessed ")
    line.append(guess.guess, style="italic")
    return line


def settings_line(settings: RoomSettings) -> Text:
    """Format the room settings."""
    return Text(
        f"Settings: words {settings.min_length}-{settings.max_length} letters, "
        f"reveal every {settings.interval_seconds}s",
        style="magenta",
    )


class TerminalView:
    """Prints what changed between consecutive snapshots.

    Intended as a :meth:`GameSessionState.subscribe` listener.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()
        self._last = GameSnapshot()

    def __call__(self, snapshot: GameSnapshot) -> None:
        last, self._last = self._last, snapshot

        for guess in snapshot.guesses[len(last.guesses) :]:
            self.console.print(guess_line(guess))
        if snapshot.players != last.players:
            self.console.print(scoreboard_table(snapshot.ranked_players()))
        if snapshot.word != last.word:
            self.console.print(word_panel(snapshot.word))
        if snapshot.settings != last.settings:
            self.console.print(settings_line(snapshot.settings))
