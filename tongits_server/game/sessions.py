"""In-memory session repository.

Owned by the hosting layer and passed to whoever needs it; there is no
module-level registry.
"""

import logging
import uuid
from collections.abc import Iterator
from typing import Callable

from tongits_server.models.game_state import GameSession
from tongits_server.models.player import Player

logger = logging.getLogger(__name__)


def _new_session_id() -> str:
    return uuid.uuid4().hex


class SessionRepository:
    """Tracks open and running sessions and who sits where."""

    def __init__(
        self,
        players_required: int = 3,
        id_factory: Callable[[], str] = _new_session_id,
    ):
        """Initialize repository.

        Args:
            players_required: Seats per session
            id_factory: Generates session ids
        """
        self.players_required = players_required
        self._id_factory = id_factory
        self._sessions: dict[str, GameSession] = {}

    def get(self, session_id: str) -> GameSession | None:
        """Get a session by id."""
        return self._sessions.get(session_id)

    def find_open(self) -> GameSession | None:
        """Find the first session that is not started and has a free seat."""
        for session in self._sessions.values():
            if not session.game_started and not session.is_full(self.players_required):
                return session
        return None

    def find_by_participant(self, participant_id: str) -> GameSession | None:
        """Find the session a participant is seated in."""
        for session in self._sessions.values():
            if session.seat_of(participant_id) >= 0:
                return session
        return None

    def create(self) -> GameSession:
        """Create and register an empty session."""
        session = GameSession(id=self._id_factory())
        self._sessions[session.id] = session
        logger.info(f"Created session {session.id}")
        return session

    def join(
        self,
        participant_id: str,
        name: str,
        is_bot: bool = False,
    ) -> tuple[GameSession, Player]:
        """Seat a participant in an open session, creating one if needed.

        Args:
            participant_id: Transport-level identity
            name: Display name
            is_bot: Whether the participant is automated

        Returns:
            Tuple of (session, seated player)

        Raises:
            ValueError: If the participant is already seated somewhere
        """
        if self.find_by_participant(participant_id) is not None:
            raise ValueError(f"Participant {participant_id} is already seated")

        session = self.find_open() or self.create()
        player = Player(
            id=participant_id,
            name=name,
            seat_number=len(session.players) + 1,
            is_bot=is_bot,
        )
        session.players.append(player)

        logger.info(
            f"{player} joined session {session.id} "
            f"({len(session.players)}/{self.players_required})"
        )
        return session, player

    def leave(self, participant_id: str) -> tuple[GameSession | None, Player | None]:
        """Remove a participant from their session.

        A started session abandons its round and reopens for a replacement.
        An empty session is removed from the repository.

        Args:
            participant_id: Transport-level identity

        Returns:
            Tuple of (session or None if it was removed, departed player)
        """
        session = self.find_by_participant(participant_id)
        if session is None:
            return None, None

        player = session.players.pop(session.seat_of(participant_id))
        logger.info(f"{player} left session {session.id}")

        if session.is_empty():
            del self._sessions[session.id]
            logger.info(f"Removed empty session {session.id}")
            return None, player

        if session.game_started:
            logger.warning(f"Session {session.id}: round {session.round} abandoned")
            session.clear_table()

        for seat, remaining in enumerate(session.players, start=1):
            remaining.seat_number = seat

        return session, player

    def __iter__(self) -> Iterator[GameSession]:
        return iter(list(self._sessions.values()))

    def __len__(self) -> int:
        return len(self._sessions)
