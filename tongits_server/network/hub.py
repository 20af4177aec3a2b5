"""Routes client events to sessions and fans out the results.

Membership changes (join, leave) run under the hub lock. Every change to a
session's game state runs under that session's own lock, so at most one
action is applied to a session at a time.
"""

import logging
import threading
from typing import Callable

from tongits_server.game.engine import ActionResult, GameEngine
from tongits_server.game.sessions import SessionRepository
from tongits_server.models.actions import Action
from tongits_server.models.game_state import GameSession

from . import protocol
from .protocol import ServerMessage

logger = logging.getLogger(__name__)

SendFunc = Callable[[str, ServerMessage], None]


class SessionHub:
    """Connects participants, sessions and the game engine."""

    def __init__(
        self,
        repository: SessionRepository,
        engine: GameEngine,
        send: SendFunc,
    ):
        """Initialize hub.

        Args:
            repository: Session repository
            engine: Game engine applying actions
            send: Delivers a message to one participant
        """
        self.repository = repository
        self.engine = engine
        self._send = send
        self._lock = threading.Lock()
        self._session_locks: dict[str, threading.Lock] = {}

    def _lock_for(self, session: GameSession) -> threading.Lock:
        return self._session_locks.setdefault(session.id, threading.Lock())

    def broadcast(self, session: GameSession, message: ServerMessage) -> None:
        """Send a message to every participant seated in a session."""
        for player in session.players:
            self._send(player.id, message)

    def join(self, participant_id: str, name: str) -> GameSession | None:
        """Seat a participant and start the session if it is now full.

        Args:
            participant_id: Transport-level identity
            name: Display name

        Returns:
            The session joined, or None if the participant was already seated
        """
        with self._lock:
            try:
                session, player = self.repository.join(participant_id, name)
            except ValueError as e:
                logger.warning(str(e))
                self._send(participant_id, protocol.error(str(e)))
                return None

            with self._lock_for(session):
                self._send(participant_id, protocol.joined(session, player))
                self.broadcast(session, protocol.player_joined(player, len(session.players)))

                if self.engine.start_if_full(session):
                    self.broadcast(session, protocol.game_started(session))
                self.broadcast(session, protocol.game_state(session))

        return session

    def handle_action(self, participant_id: str, action: Action) -> ActionResult | None:
        """Apply an action for the participant's seat and broadcast the new state.

        Args:
            participant_id: Transport-level identity
            action: Submitted action

        Returns:
            ActionResult, or None if the participant is not seated
        """
        with self._lock:
            session = self.repository.find_by_participant(participant_id)
            if session is None:
                self._send(participant_id, protocol.error("Not seated in a session"))
                return None
            session_lock = self._lock_for(session)

        with session_lock:
            seat = session.seat_of(participant_id)
            if seat < 0:
                return None

            result = self.engine.apply(session, seat, action)
            if not result.applied:
                self._send(participant_id, protocol.action_rejected(action.type, result.reason))
                return result

            self.broadcast(session, protocol.game_state(session))

        return result

    def disconnect(self, participant_id: str) -> None:
        """Remove a participant and notify whoever is left.

        Args:
            participant_id: Transport-level identity
        """
        with self._lock:
            session = self.repository.find_by_participant(participant_id)
            if session is None:
                return

            with self._lock_for(session):
                remaining, player = self.repository.leave(participant_id)
                if remaining is None:
                    self._session_locks.pop(session.id, None)
                    return

                self.broadcast(
                    remaining,
                    protocol.player_disconnected(player, len(remaining.players)),
                )
                self.broadcast(remaining, protocol.game_state(remaining))
