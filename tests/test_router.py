"""Tests for inbound message routing."""

from __future__ import annotations

import json

import pytest
from structlog.testing import capture_logs

from brainlook.exceptions import MalformedMessageError, ProtocolError, UnknownMessageKind
from brainlook.game.models import Guess, Player, RoomSettings, WordClue
from brainlook.game.state import GameSessionState
from brainlook.realtime.messages import MessageType
from brainlook.realtime.router import InboundMessageRouter


def scoreboard(*players: tuple[str, int]) -> str:
    return json.dumps({"type": "scoreboard", "players": [{"name": n, "score": s} for n, s in players]})


def guess(player: str, text: str, correct: bool) -> str:
    return json.dumps({"type": "guess", "player": player, "guess": text, "correct": correct})


class TestKnownMessages:
    """Tests for the four known inbound tags."""

    def test_scoreboard_replaces_wholesale(self, router: InboundMessageRouter, state: GameSessionState) -> None:
        """Test that the scoreboard equals the last routed payload."""
        router.route(scoreboard(("Ann", 1), ("Bob", 0)))
        router.route(scoreboard(("Bob", 4)))
        router.route(scoreboard(("Cat", 2), ("Ann", 3)))

        assert state.players == (Player("Cat", 2), Player("Ann", 3))

    def test_empty_scoreboard(self, router: InboundMessageRouter, state: GameSessionState) -> None:
        """Test that an empty scoreboard clears all players."""
        router.route(scoreboard(("Ann", 1)))
        router.route(scoreboard())
        assert state.players == ()

    def test_guesses_append_in_receipt_order(self, router: InboundMessageRouter, state: GameSessionState) -> None:
        """Test that N guess messages produce N entries in order."""
        texts = ["shark", "seal", "orca", "whale"]
        for i, text in enumerate(texts):
            router.route(guess("Ann" if i % 2 else "Bob", text, text == "whale"))

        assert len(state.guesses) == len(texts)
        assert [g.guess for g in state.guesses] == texts
        assert state.guesses[-1] == Guess("Ann", "whale", True)

    def test_word_replaced_wholesale(self, router: InboundMessageRouter, state: GameSessionState) -> None:
        """Test that only the latest word and clue are kept."""
        router.route({"type": "word", "displayed": "w _ _ l e", "clue": "sea mammal"})
        router.route({"type": "word", "displayed": "w h a l e", "clue": "sea mammal"})

        assert state.word == WordClue("w h a l e", "sea mammal")

    def test_settings_echo(self, router: InboundMessageRouter, state: GameSessionState) -> None:
        """Test that a settings echo replaces the settings."""
        router.route({"type": "settings", "settings": {"minLength": 4, "maxLength": 12, "interval": 7}})
        assert state.settings == RoomSettings(min_length=4, max_length=12, interval_seconds=7)

    def test_route_returns_transition(self, router: InboundMessageRouter, state: GameSessionState) -> None:
        """Test the returned transition."""
        transition = router.route(guess("Ann", "whale", True))

        assert transition.kind is MessageType.GUESS
        assert transition.snapshot is state.snapshot
        assert transition.seq is None
        assert router.routed == 1

    def test_accepts_bytes(self, router: InboundMessageRouter, state: GameSessionState) -> None:
        """Test that binary frames are decoded."""
        router.route(scoreboard(("Ann", 2)).encode())
        assert state.players == (Player("Ann", 2),)

    def test_extra_fields_ignored(self, router: InboundMessageRouter, state: GameSessionState) -> None:
        """Test that unknown fields on a known message are tolerated."""
        router.route({"type": "word", "displayed": "_", "clue": "a", "timestamp": "now"})
        assert state.word.displayed == "_"


class TestRejectedMessages:
    """Tests for unknown and malformed messages."""

    def test_unknown_type_leaves_state_unchanged(self, router: InboundMessageRouter, state: GameSessionState) -> None:
        """Test that an unknown tag raises and mutates nothing."""
        router.route(scoreboard(("Ann", 1)))
        router.route(guess("Ann", "seal", False))
        router.route({"type": "word", "displayed": "_ _", "clue": "c"})
        before = state.snapshot

        with pytest.raises(UnknownMessageKind) as exc_info:
            router.route({"type": "chat", "text": "hi"})

        assert exc_info.value.kind == "chat"
        assert state.snapshot is before
        assert router.rejected == 1

    def test_missing_type(self, router: InboundMessageRouter) -> None:
        """Test that a message without a tag is an unknown kind."""
        with pytest.raises(UnknownMessageKind) as exc_info:
            router.route({"players": []})
        assert exc_info.value.kind is None

    def test_non_string_type(self, router: InboundMessageRouter) -> None:
        """Test that a non-string tag is an unknown kind."""
        with pytest.raises(UnknownMessageKind):
            router.route({"type": 3})

    def test_invalid_json(self, router: InboundMessageRouter) -> None:
        """Test that garbage frames are malformed."""
        with pytest.raises(MalformedMessageError):
            router.route("{not json")

    def test_non_object_json(self, router: InboundMessageRouter) -> None:
        """Test that a JSON array is malformed."""
        with pytest.raises(MalformedMessageError):
            router.route("[1, 2]")

    @pytest.mark.parametrize(
        "message",
        [
            {"type": "guess", "player": "Ann", "guess": "whale"},
            {"type": "guess", "player": "Ann", "guess": "whale", "correct": "yes"},
            {"type": "word", "displayed": "_ _"},
            {"type": "scoreboard", "players": [{"name": "Ann", "score": "1"}]},
            {"type": "scoreboard", "players": [{"name": "Ann", "score": True}]},
            {"type": "scoreboard", "players": ["Ann"]},
            {"type": "settings", "minLength": 3, "maxLength": 5, "interval": 2},
            {"type": "settings", "settings": {"minLength": 3, "maxLength": 5}},
        ],
    )
    def test_malformed_payloads(self, router: InboundMessageRouter, state: GameSessionState, message: dict) -> None:
        """Test that missing or ill-typed fields leave state unchanged."""
        before = state.snapshot
        with pytest.raises(MalformedMessageError):
            router.route(message)
        assert state.snapshot is before

    def test_duplicate_scoreboard_names(self, router: InboundMessageRouter, state: GameSessionState) -> None:
        """Test that a scoreboard repeating a name is rejected."""
        with pytest.raises(MalformedMessageError, match="Duplicate"):
            router.route(scoreboard(("Ann", 1), ("Ann", 2)))
        assert state.players == ()

    def test_protocol_errors_share_base(self) -> None:
        """Test the error hierarchy used by the session loop."""
        assert issubclass(UnknownMessageKind, ProtocolError)
        assert issubclass(MalformedMessageError, ProtocolError)

    def test_routing_continues_after_rejection(self, router: InboundMessageRouter, state: GameSessionState) -> None:
        """Test that later messages still apply after a rejected one."""
        with pytest.raises(UnknownMessageKind):
            router.route({"type": "mystery"})
        router.route(guess("Bob", "whale", True))
        assert len(state.guesses) == 1


class TestSequenceTracking:
    """Tests for optional sequence numbers."""

    def test_seq_reported_in_transition(self, router: InboundMessageRouter) -> None:
        """Test that seq is carried through."""
        transition = router.route({"type": "word", "displayed": "_", "clue": "c", "seq": 1})
        assert transition.seq == 1

    def test_gap_is_logged_but_applied(self, router: InboundMessageRouter, state: GameSessionState) -> None:
        """Test that a sequence gap is logged and the message still applies."""
        with capture_logs() as logs:
            router.route({"type": "word", "displayed": "_", "clue": "c", "seq": 1})
            router.route({"type": "word", "displayed": "a", "clue": "c", "seq": 3})

        gaps = [log for log in logs if log["event"] == "Message sequence discontinuity"]
        assert state.word.displayed == "a"
        assert len(gaps) == 1
        assert gaps[0]["expected"] == 2
        assert gaps[0]["received"] == 3

    def test_consecutive_sequence_is_quiet(self, router: InboundMessageRouter) -> None:
        """Test that in-order sequence numbers log no warning."""
        with capture_logs() as logs:
            for seq in range(1, 4):
                router.route({"type": "word", "displayed": "_", "clue": "c", "seq": seq})

        assert [log for log in logs if log["log_level"] == "warning"] == []
