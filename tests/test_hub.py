"""Tests for the session hub."""

import random
import threading

import pytest

from tongits_server.game.engine import GameEngine
from tongits_server.game.sessions import SessionRepository
from tongits_server.models.actions import AutoSortAction, DiscardAction, DrawAction
from tongits_server.models.game_state import TurnPhase
from tongits_server.network.hub import SessionHub


class Outbox:
    """Records messages sent by the hub."""

    def __init__(self):
        self.sent = []
        self._lock = threading.Lock()

    def __call__(self, participant_id, message):
        with self._lock:
            self.sent.append((participant_id, message))

    def events_for(self, participant_id):
        return [m.event for pid, m in self.sent if pid == participant_id]

    def clear(self):
        self.sent.clear()


@pytest.fixture
def outbox():
    return Outbox()


@pytest.fixture
def hub(outbox):
    return SessionHub(SessionRepository(), GameEngine(rng=random.Random(0)), outbox)


@pytest.fixture
def full_hub(hub, outbox):
    for pid in ("a", "b", "c"):
        hub.join(pid, pid.upper())
    outbox.clear()
    return hub


class TestJoin:
    """Tests for SessionHub.join."""

    def test_first_join(self, hub, outbox):
        """Test messages for the first participant."""
        session = hub.join("a", "Alice")

        assert session is not None
        assert outbox.events_for("a") == ["joined", "player-joined", "game-state"]
        assert outbox.sent[0][1].data["playerNumber"] == 1

    def test_broadcast_to_seated(self, hub, outbox):
        """Test that earlier participants hear about newcomers."""
        hub.join("a", "Alice")
        outbox.clear()
        hub.join("b", "Bob")

        assert outbox.events_for("a") == ["player-joined", "game-state"]
        assert outbox.events_for("b") == ["joined", "player-joined", "game-state"]

    def test_third_join_starts(self, hub, outbox):
        """Test that the third participant starts the game."""
        hub.join("a", "Alice")
        hub.join("b", "Bob")
        outbox.clear()
        session = hub.join("c", "Carol")

        assert session.turn_phase == TurnPhase.OPENING
        for pid in ("a", "b"):
            assert outbox.events_for(pid) == ["player-joined", "game-started", "game-state"]

    def test_join_twice(self, hub, outbox):
        """Test that a seated participant cannot join again."""
        hub.join("a", "Alice")
        outbox.clear()

        assert hub.join("a", "Alice") is None
        assert outbox.events_for("a") == ["error"]


class TestHandleAction:
    """Tests for SessionHub.handle_action."""

    def test_applied_action_broadcasts(self, full_hub, outbox):
        """Test that an applied action reaches every seat."""
        result = full_hub.handle_action("a", DiscardAction(card_index=0))

        assert result.applied
        for pid in ("a", "b", "c"):
            assert outbox.events_for(pid) == ["game-state"]
        state = outbox.sent[-1][1].data
        assert state["current_player_index"] == 1
        assert len(state["discard_pile"]) == 1

    def test_rejected_action_to_actor_only(self, full_hub, outbox):
        """Test that a rejection is only sent to the actor."""
        result = full_hub.handle_action("b", DrawAction())

        assert not result.applied
        assert outbox.events_for("b") == ["action-rejected"]
        assert outbox.events_for("a") == []
        assert outbox.sent[0][1].data == {"type": "draw", "reason": "Not your turn"}

    def test_not_seated(self, hub, outbox):
        """Test an action from an unknown participant."""
        assert hub.handle_action("zz", AutoSortAction()) is None
        assert outbox.events_for("zz") == ["error"]

    def test_concurrent_actions(self, full_hub, outbox):
        """Test that racing submissions apply one at a time."""
        session = full_hub.repository.find_by_participant("a")
        barrier = threading.Barrier(8)
        results = []

        def submit():
            barrier.wait()
            results.append(full_hub.handle_action("a", DiscardAction(card_index=0)))

        threads = [threading.Thread(target=submit) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sum(1 for r in results if r.applied) == 1
        assert len(session.discard_pile) == 1
        assert len(session.players[0].hand) == 12


class TestDisconnect:
    """Tests for SessionHub.disconnect."""

    def test_disconnect_notifies_others(self, full_hub, outbox):
        """Test that remaining seats are told about the departure."""
        full_hub.disconnect("b")

        for pid in ("a", "c"):
            assert outbox.events_for(pid) == ["player-disconnected", "game-state"]
        assert outbox.events_for("b") == []
        assert outbox.sent[0][1].data["playersCount"] == 2

    def test_disconnect_abandons_round(self, full_hub):
        """Test that a departure returns the session to the lobby."""
        session = full_hub.repository.find_by_participant("a")
        full_hub.disconnect("c")

        assert session.turn_phase == TurnPhase.LOBBY
        assert [p.seat_number for p in session.players] == [1, 2]

    def test_replacement_restarts(self, full_hub, outbox):
        """Test that a new participant refills the session and starts it."""
        full_hub.disconnect("c")
        session = full_hub.join("d", "Dave")

        assert session.turn_phase == TurnPhase.OPENING
        assert [p.id for p in session.players] == ["a", "b", "d"]

    def test_last_leaves(self, hub, outbox):
        """Test that an empty session is removed."""
        hub.join("a", "Alice")
        outbox.clear()
        hub.disconnect("a")

        assert len(hub.repository) == 0
        assert outbox.sent == []

    def test_disconnect_unknown(self, hub, outbox):
        """Test disconnecting a participant that never joined."""
        hub.disconnect("zz")
        assert outbox.sent == []
