"""Inbound message routing for game sessions."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import structlog

from brainlook.exceptions import MalformedMessageError, UnknownMessageKind
from brainlook.game.models import Guess, Player, RoomSettings, WordClue
from brainlook.realtime.messages import MessageType

if TYPE_CHECKING:
    from collections.abc import Callable

    from brainlook.game.models import GameSnapshot
    from brainlook.game.state import GameSessionState

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Transition:
    """Result of routing one inbound message.

    Attributes:
        kind: The message type that was applied.
        snapshot: The state snapshot after the message was applied.
        seq: The message sequence number, if the server sent one.
    """

    kind: MessageType
    snapshot: GameSnapshot
    seq: int | None = None


def _require(data: Mapping[str, Any], key: str, expected: type) -> Any:
    """Fetch a typed field from a message, raising on absence or wrong type."""
    if key not in data:
        raise MalformedMessageError(f"Missing field {key!r}")
    value = data[key]
    # bool is an int subclass
    if isinstance(value, bool) and expected is not bool:
        raise MalformedMessageError(f"Field {key!r} has unexpected type bool")
    if not isinstance(value, expected):
        raise MalformedMessageError(f"Field {key!r} has unexpected type {type(value).__name__}")
    return value


def parse_players(data: Mapping[str, Any]) -> list[Player]:
    """Parse the ``players`` array of a scoreboard message.

    Raises:
        MalformedMessageError: If an entry is malformed or a name repeats.
    """
    entries = _require(data, "players", list)
    players: list[Player] = []
    seen: set[str] = set()
    for entry in entries:
        if not isinstance(entry, Mapping):
            raise MalformedMessageError("Scoreboard entry is not an object")
        player = Player(name=_require(entry, "name", str), score=_require(entry, "score", int))
        if player.name in seen:
            raise MalformedMessageError(f"Duplicate player on scoreboard: {player.name!r}")
        seen.add(player.name)
        players.append(player)
    return players


def parse_guess(data: Mapping[str, Any]) -> Guess:
    """Parse a ``guess`` broadcast."""
    return Guess(
        player=_require(data, "player", str),
        guess=_require(data, "guess", str),
        correct=_require(data, "correct", bool),
    )


def parse_word(data: Mapping[str, Any]) -> WordClue:
    """Parse a ``word`` update."""
    return WordClue(
        displayed=_require(data, "displayed", str),
        clue=_require(data, "clue", str),
    )


def parse_settings(data: Mapping[str, Any]) -> RoomSettings:
    """Parse the nested ``settings`` object of a settings echo."""
    settings = _require(data, "settings", Mapping)
    return RoomSettings(
        min_length=_require(settings, "minLength", int),
        max_length=_require(settings, "maxLength", int),
        interval_seconds=_require(settings, "interval", int),
    )


class InboundMessageRouter:
    """Classifies inbound wire messages and applies them to session state.

    The router is the only writer of the server-driven parts of
    :class:`GameSessionState`. Messages are applied one at a time in the order
    they are routed. Unknown tags raise :class:`UnknownMessageKind` and
    malformed payloads raise :class:`MalformedMessageError`; in both cases the
    state is left untouched.

    Messages carrying an integer ``seq`` field are tracked and gaps or
    regressions are logged. The protocol does not require ``seq``.
    """

    def __init__(self, state: GameSessionState) -> None:
        """Initialize the router.

        Args:
            state: The session state this router writes to.
        """
        self._state = state
        self._handlers: dict[str, Callable[[Mapping[str, Any]], None]] = {
            MessageType.SCOREBOARD.value: self._handle_scoreboard,
            MessageType.GUESS.value: self._handle_guess,
            MessageType.WORD.value: self._handle_word,
            MessageType.SETTINGS.value: self._handle_settings,
        }
        self._last_seq: int | None = None
        self.routed = 0
        self.rejected = 0

    @property
    def state(self) -> GameSessionState:
        """The state this router writes to."""
        return self._state

    def route(self, raw: str | bytes | Mapping[str, Any]) -> Transition:
        """Apply one inbound message.

        Args:
            raw: A JSON text/bytes frame or an already decoded mapping.

        Returns:
            The transition that was applied.

        Raises:
            UnknownMessageKind: If the ``type`` tag is missing or not recognized.
            MalformedMessageError: If the frame is not a JSON object or a field
                is missing or has the wrong type.
        """
        try:
            data = self.decode(raw)
            msg_type = data.get("type")
            handler = self._handlers.get(msg_type) if isinstance(msg_type, str) else None
            if handler is None:
                raise UnknownMessageKind(msg_type)
            handler(data)
        except (UnknownMessageKind, MalformedMessageError):
            self.rejected += 1
            raise

        self.routed += 1
        seq = self._track_sequence(data)
        logger.debug("Routed message", message_type=msg_type, seq=seq)
        return Transition(kind=MessageType(msg_type), snapshot=self._state.snapshot, seq=seq)

    @staticmethod
    def decode(raw: str | bytes | Mapping[str, Any]) -> Mapping[str, Any]:
        """Decode a raw frame into a message mapping.

        Raises:
            MalformedMessageError: If the frame is not a JSON object.
        """
        if isinstance(raw, Mapping):
            return raw
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedMessageError(f"Invalid JSON message: {e}") from e
        if not isinstance(data, Mapping):
            raise MalformedMessageError("Message is not a JSON object")
        return data

    def _track_sequence(self, data: Mapping[str, Any]) -> int | None:
        seq = data.get("seq")
        if not isinstance(seq, int) or isinstance(seq, bool):
            return None
        if self._last_seq is not None and seq != self._last_seq + 1:
            logger.warning(
                "Message sequence discontinuity",
                expected=self._last_seq + 1,
                received=seq,
            )
        self._last_seq = seq
        return seq

    # Handlers

    def _handle_scoreboard(self, data: Mapping[str, Any]) -> None:
        self._state.replace_scoreboard(parse_players(data))

    def _handle_guess(self, data: Mapping[str, Any]) -> None:
        self._state.append_guess(parse_guess(data))

    def _handle_word(self, data: Mapping[str, Any]) -> None:
        self._state.replace_word(parse_word(data))

    def _handle_settings(self, data: Mapping[str, Any]) -> None:
        self._state.replace_settings(parse_settings(data))
