"""Card model and standard deck."""

from enum import Enum, IntEnum
from typing import Any

from pydantic import BaseModel, field_serializer, field_validator


class Suit(str, Enum):
    """Card suit (values match the wire format)."""

    SPADES = "spades"
    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"


class Rank(IntEnum):
    """Card rank.

    Value is the position in the run order A < 2 < ... < 10 < J < Q < K.
    Ace is low only; there is no wraparound from K to A.
    """

    ACE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13


# Map rank to display string
RANK_NAMES = {
    Rank.ACE: "A",
    Rank.TWO: "2",
    Rank.THREE: "3",
    Rank.FOUR: "4",
    Rank.FIVE: "5",
    Rank.SIX: "6",
    Rank.SEVEN: "7",
    Rank.EIGHT: "8",
    Rank.NINE: "9",
    Rank.TEN: "10",
    Rank.JACK: "J",
    Rank.QUEEN: "Q",
    Rank.KING: "K",
}

RANKS_BY_NAME = {name: rank for rank, name in RANK_NAMES.items()}

SUIT_SYMBOLS = {
    Suit.SPADES: "♠",
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
}

# Display order used by auto-sort
SUIT_ORDER = (Suit.SPADES, Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS)


class Card(BaseModel, frozen=True):
    """Single card. Identity is the (suit, rank) value."""

    suit: Suit
    rank: Rank

    @field_validator("rank", mode="before")
    @classmethod
    def _parse_rank(cls, value: Any) -> Any:
        if isinstance(value, str) and value in RANKS_BY_NAME:
            return RANKS_BY_NAME[value]
        return value

    @field_serializer("rank")
    def _serialize_rank(self, rank: Rank) -> str:
        return RANK_NAMES[rank]

    @property
    def points(self) -> int:
        """Deadwood value: Ace 1, 2-10 face value, J/Q/K 10."""
        return min(int(self.rank), 10)

    def sort_key(self) -> tuple[int, int]:
        """Key for suit-then-rank ordering."""
        return (SUIT_ORDER.index(self.suit), int(self.rank))

    def __str__(self) -> str:
        return f"{SUIT_SYMBOLS[self.suit]}{RANK_NAMES[self.rank]}"

    def __repr__(self) -> str:
        return str(self)


def create_full_deck() -> list[Card]:
    """Create the 52 cards of a standard deck in suit-then-rank order."""
    return [Card(suit=suit, rank=rank) for suit in SUIT_ORDER for rank in Rank]
