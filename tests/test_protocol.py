"""Tests for protocol module."""

import json

import pytest
from pydantic import ValidationError

from tongits_server.models.actions import (
    CallDrawAction,
    DrawAction,
    SapawAction,
    parse_action,
)
from tongits_server.models.game_state import GameSession
from tongits_server.models.player import Player
from tongits_server.network.protocol import (
    JoinGame,
    PlayerAction,
    ProtocolError,
    ServerMessage,
    action_rejected,
    decode_client_message,
    encode_message,
    game_state,
    player_joined,
)


class TestParseAction:
    """Tests for action payloads."""

    def test_camel_case(self):
        """Test wire field names."""
        action = parse_action({"type": "draw", "fromDeck": False, "meldIndices": [1, 2]})

        assert isinstance(action, DrawAction)
        assert not action.from_deck
        assert action.meld_indices == [1, 2]

    def test_snake_case(self):
        """Test attribute names."""
        action = parse_action({"type": "discard", "card_index": 4})
        assert action.card_index == 4

    def test_defaults(self):
        """Test draw defaults to the deck."""
        action = parse_action({"type": "draw"})
        assert action.from_deck
        assert action.meld_indices == []

    def test_sapaw_target_aliases(self):
        """Test both names for the target seat."""
        by_seat = parse_action(
            {"type": "sapaw", "target": {"seat": 2, "meldIndex": 0}, "cardIndices": [3]}
        )
        by_player_index = parse_action(
            {"type": "sapaw", "target": {"playerIndex": 2, "meldIndex": 0}, "cardIndices": [3]}
        )

        assert isinstance(by_seat, SapawAction)
        assert by_seat == by_player_index
        assert by_seat.target.seat == 2

    def test_no_payload(self):
        """Test actions without fields."""
        assert isinstance(parse_action({"type": "callDraw"}), CallDrawAction)

    def test_unknown_type(self):
        """Test that unknown actions are rejected."""
        with pytest.raises(ValidationError):
            parse_action({"type": "fold"})

    def test_missing_field(self):
        """Test that required fields are enforced."""
        with pytest.raises(ValidationError):
            parse_action({"type": "meld"})

    def test_dump_uses_wire_names(self):
        """Test serializing an action."""
        data = DrawAction(from_deck=False).model_dump(by_alias=True)
        assert data == {"type": "draw", "fromDeck": False, "meldIndices": []}


class TestDecodeClientMessage:
    """Tests for decode_client_message."""

    def test_join(self):
        """Test decoding a join request."""
        message = decode_client_message(b'{"event": "join-game", "name": "Alice"}\n')

        assert isinstance(message, JoinGame)
        assert message.name == "Alice"

    def test_player_action(self):
        """Test decoding an action."""
        line = '{"event": "player-action", "action": {"type": "discard", "cardIndex": 0}}'
        message = decode_client_message(line)

        assert isinstance(message, PlayerAction)
        assert message.action.card_index == 0

    def test_invalid_json(self):
        """Test a line that is not JSON."""
        with pytest.raises(ProtocolError):
            decode_client_message(b"not json\n")

    def test_unknown_event(self):
        """Test an unknown event name."""
        with pytest.raises(ProtocolError):
            decode_client_message('{"event": "chat", "text": "hi"}')

    def test_bad_action(self):
        """Test an action payload that does not validate."""
        with pytest.raises(ProtocolError):
            decode_client_message('{"event": "player-action", "action": {"type": "discard"}}')

    def test_empty_name(self):
        """Test that a name is required."""
        with pytest.raises(ProtocolError):
            decode_client_message('{"event": "join-game", "name": ""}')

    def test_empty_line(self):
        """Test a blank line."""
        with pytest.raises(ProtocolError):
            decode_client_message(b"  \n")

    def test_bad_encoding(self):
        """Test bytes that are not UTF-8."""
        with pytest.raises(ProtocolError):
            decode_client_message(b"\xff\xfe\n")


class TestServerMessages:
    """Tests for server message builders and encoding."""

    def test_encode_is_one_line(self):
        """Test that encoded messages end with a single newline."""
        data = encode_message(ServerMessage(event="error", data={"message": "x"}))

        assert data.endswith(b"\n")
        assert data.count(b"\n") == 1
        assert json.loads(data) == {"event": "error", "data": {"message": "x"}}

    def test_game_state_snapshot(self):
        """Test that game state carries the full snapshot."""
        session = GameSession(id="s1", players=[Player(id="a", name="Alice")])
        data = json.loads(encode_message(game_state(session)))

        assert data["event"] == "game-state"
        assert data["data"]["id"] == "s1"
        assert data["data"]["turn_phase"] == "lobby"
        assert data["data"]["game_started"] is False
        assert data["data"]["players"][0]["name"] == "Alice"

    def test_player_joined(self):
        """Test the join broadcast."""
        message = player_joined(Player(id="a", name="Alice", seat_number=2), 2)

        assert message.event == "player-joined"
        assert message.data == {"playerName": "Alice", "playerNumber": 2, "playersCount": 2}

    def test_action_rejected(self):
        """Test the rejection reply."""
        message = action_rejected("draw", "Not your turn")
        assert message.data == {"type": "draw", "reason": "Not your turn"}
