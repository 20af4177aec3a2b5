"""Game logger for detailed game replay."""

import json
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, TextIO

from tongits_server.models.actions import Action
from tongits_server.models.game_state import GameSession

from .formatters import format_cards, format_hands, format_melds


class GameLogger:
    """Logger for detailed game events in JSONL format.

    Each line in the output file is a JSON object representing one event.
    Events from every session go to the same file and carry the session id.
    """

    def __init__(self, path: Path | str | None = None):
        """Initialize game logger.

        Args:
            path: Output file. If None, logging is disabled.
        """
        self.path = Path(path) if path else None
        self._file: TextIO | None = None
        self._lock = threading.Lock()

    def __enter__(self) -> "GameLogger":
        """Context manager entry."""
        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self.path, "a", encoding="utf-8")
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()

    def close(self) -> None:
        """Close the log file."""
        if self._file:
            self._file.close()
            self._file = None

    def _write(self, event: dict[str, Any]) -> None:
        """Write an event to the log file.

        Args:
            event: Event dictionary to write as JSON.
        """
        with self._lock:
            if self._file:
                self._file.write(json.dumps(event, ensure_ascii=False) + "\n")
                self._file.flush()

    def log_session_start(self, session: GameSession) -> None:
        """Log that a session filled up and started.

        Args:
            session: The started session.
        """
        self._write({
            "type": "session_start",
            "timestamp": datetime.now().isoformat(),
            "session": session.id,
            "players": [
                {"seat": p.seat_number, "id": p.id, "name": p.name}
                for p in session.players
            ],
        })

    def log_round_start(self, session: GameSession) -> None:
        """Log round start with initial hands.

        Args:
            session: Session right after dealing.
        """
        self._write({
            "type": "round_start",
            "session": session.id,
            "round": session.round,
            "hands": format_hands(session.players),
            "deck_size": len(session.deck),
            "first_player": session.current_player_index,
        })

    def log_action(
        self,
        session: GameSession,
        seat_index: int,
        action: Action,
    ) -> None:
        """Log an applied action.

        Args:
            session: Session after the action.
            seat_index: Seat that acted.
            action: The applied action.
        """
        player = session.players[seat_index]
        self._write({
            "type": "action",
            "session": session.id,
            "round": session.round,
            "player": seat_index,
            "action": action.model_dump(mode="json", by_alias=True),
            "hand": format_cards(player.hand),
            "exposed_melds": format_melds(player.exposed_melds),
            "discard_top": format_cards(session.discard_pile[-1:]),
            "deck_size": len(session.deck),
            "phase": session.turn_phase.value,
        })

    def log_round_end(
        self,
        session: GameSession,
        reason: str,
    ) -> None:
        """Log round end with results.

        Args:
            session: Session after scoring.
            reason: "tongits" or "call_draw".
        """
        self._write({
            "type": "round_end",
            "session": session.id,
            "round": session.round,
            "reason": reason,
            "winner": session.seat_of(session.winner) if session.winner else None,
            "scores": {str(i): p.score for i, p in enumerate(session.players)},
            "consecutive_wins": {
                str(i): p.consecutive_wins for i, p in enumerate(session.players)
            },
        })
