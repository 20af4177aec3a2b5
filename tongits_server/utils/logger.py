"""Logging utilities and game state display."""

import logging
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tongits_server.game.engine import RoundEndReason
    from tongits_server.models.game_state import GameSession


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stdout,
    )


class GameDisplay:
    """Display round progress to stdout."""

    def __init__(self, show_hands: bool = False):
        """Initialize display.

        Args:
            show_hands: Whether to show player hands
        """
        self.show_hands = show_hands

    def print_separator(self) -> None:
        """Print a separator line."""
        print("=" * 60)

    def print_round_start(self, session: "GameSession") -> None:
        """Print round start message."""
        self.print_separator()
        print(f"SESSION {session.id[:8]} ROUND {session.round}")
        self.print_separator()
        for player in session.players:
            print(f"  Seat {player.seat_number}: {player.name}")
        self.print_hands(session)

    def print_hands(self, session: "GameSession") -> None:
        """Print hands for all players (if show_hands is enabled)."""
        if not self.show_hands:
            return

        print("\nHands:")
        for player in session.players:
            cards = " ".join(str(c) for c in player.hand)
            print(f"  P{player.seat_number}: {cards}")

    def print_round_end(self, session: "GameSession", reason: "RoundEndReason") -> None:
        """Print round results."""
        winner = session.winner_player()
        print(f"\nSession {session.id[:8]} round {session.round} finished ({reason.value})!")
        if winner:
            print(f"Winner: {winner.name} (streak {winner.consecutive_wins})")
        print("Scores:")
        for player in session.players:
            print(f"  P{player.seat_number} ({player.name}): {player.score} points")
