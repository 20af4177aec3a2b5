"""Tests for the JSONL game logger."""

import json
import random

from tongits_server.game.engine import GameEngine
from tongits_server.logging import GameLogger, format_card, format_cards, format_hands
from tongits_server.models.actions import CallDrawAction, DiscardAction
from tongits_server.models.card import Card, Rank, Suit
from tongits_server.models.game_state import GameSession
from tongits_server.models.player import Player


def read_events(path):
    with open(path, encoding="utf-8") as f:
        return [json.loads(line) for line in f]


class TestFormatters:
    """Tests for log formatters."""

    def test_format_card(self):
        """Test short card codes."""
        assert format_card(Card(suit=Suit.SPADES, rank=Rank.ACE)) == "SA"
        assert format_card(Card(suit=Suit.HEARTS, rank=Rank.TEN)) == "H10"
        assert format_card(Card(suit=Suit.CLUBS, rank=Rank.KING)) == "CK"

    def test_format_cards_keeps_order(self):
        """Test that cards are listed in hand order."""
        cards = [
            Card(suit=Suit.DIAMONDS, rank=Rank.EIGHT),
            Card(suit=Suit.SPADES, rank=Rank.TWO),
        ]
        assert format_cards(cards) == "D8,S2"
        assert format_cards([]) == ""

    def test_format_hands(self):
        """Test hands keyed by seat index."""
        players = [
            Player(id="a", hand=[Card(suit=Suit.SPADES, rank=Rank.ACE)]),
            Player(id="b"),
        ]
        assert format_hands(players) == {"0": "SA", "1": ""}


class TestGameLogger:
    """Tests for GameLogger class."""

    def test_disabled(self, tmp_path):
        """Test that no file is written without a path."""
        with GameLogger() as game_logger:
            game_logger.log_session_start(GameSession(id="s1"))
        assert list(tmp_path.iterdir()) == []

    def test_round_events(self, tmp_path):
        """Test the events written during a round."""
        path = tmp_path / "logs" / "game.jsonl"
        players = [Player(id=f"p{i}", name=f"P{i}", seat_number=i + 1) for i in range(3)]
        session = GameSession(id="s1", players=players)

        with GameLogger(path) as game_logger:
            engine = GameEngine(rng=random.Random(3), game_logger=game_logger)
            engine.start_if_full(session)
            engine.apply(session, 0, DiscardAction(card_index=0))
            engine.apply(session, 0, CallDrawAction())  # Rejected, not logged
            engine.apply(session, 1, CallDrawAction())

        events = read_events(path)
        assert [e["type"] for e in events] == [
            "session_start",
            "round_start",
            "action",
            "action",
            "round_end",
        ]

        start = events[1]
        assert start["session"] == "s1"
        assert start["round"] == 1
        assert start["deck_size"] == 15
        assert len(start["hands"]["0"].split(",")) == 13

        discard = events[2]
        assert discard["player"] == 0
        assert discard["action"] == {"type": "discard", "cardIndex": 0}
        assert discard["phase"] == "needs_draw"

        end = events[4]
        assert end["reason"] == "call_draw"
        assert end["winner"] in (0, 1, 2)
        assert set(end["scores"]) == {"0", "1", "2"}

    def test_appends(self, tmp_path):
        """Test that reopening the log appends to it."""
        path = tmp_path / "game.jsonl"
        for _ in range(2):
            with GameLogger(path) as game_logger:
                game_logger.log_session_start(GameSession(id="s1"))

        assert len(read_events(path)) == 2
