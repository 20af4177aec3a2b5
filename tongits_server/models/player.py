"""Player model."""

from pydantic import BaseModel, Field

from .card import Card


class Player(BaseModel):
    """Player state within a session."""

    id: str  # Participant identity assigned by the transport
    name: str = "Player"
    seat_number: int = 1  # 1-3, in join order
    is_bot: bool = False

    # Round state
    hand: list[Card] = Field(default_factory=list)
    exposed_melds: list[list[Card]] = Field(default_factory=list)
    secret_melds: list[list[Card]] = Field(default_factory=list)
    score: int = 0
    is_sapawed: bool = False  # One of our exposed melds was extended this round
    turns_played: int = 0

    # Match state
    consecutive_wins: int = 0

    def hand_count(self) -> int:
        """Get number of cards in hand."""
        return len(self.hand)

    def reset_round_state(self) -> None:
        """Reset round-related state (called at the start of every round)."""
        self.hand = []
        self.exposed_melds = []
        self.secret_melds = []
        self.score = 0
        self.is_sapawed = False
        self.turns_played = 0

    def __str__(self) -> str:
        return f"Player{self.seat_number}[{self.name}]"

    def __repr__(self) -> str:
        return (
            f"Player(id={self.id!r}, name={self.name!r}, "
            f"seat={self.seat_number}, cards={len(self.hand)})"
        )
