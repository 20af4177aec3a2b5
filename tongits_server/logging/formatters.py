"""Formatters for game log output."""

from collections.abc import Sequence

from tongits_server.models.card import RANK_NAMES, Card, Suit
from tongits_server.models.player import Player

# Suit codes for log output
SUIT_CODES: dict[Suit, str] = {
    Suit.SPADES: "S",
    Suit.HEARTS: "H",
    Suit.DIAMONDS: "D",
    Suit.CLUBS: "C",
}


def format_card(card: Card) -> str:
    """Format a single card to string.

    Args:
        card: Card to format.

    Returns:
        Formatted string (e.g., "SA" for Ace of spades, "H10" for ten of hearts).
    """
    return f"{SUIT_CODES[card.suit]}{RANK_NAMES[card.rank]}"


def format_cards(cards: Sequence[Card]) -> str:
    """Format cards to a comma-separated string, keeping their order.

    Args:
        cards: Cards to format.

    Returns:
        Comma-separated card strings (e.g., "S8,H8,D8").
        Empty string if no cards.
    """
    return ",".join(format_card(c) for c in cards)


def format_melds(melds: Sequence[Sequence[Card]]) -> list[str]:
    """Format a list of melds."""
    return [format_cards(m) for m in melds]


def format_hands(players: Sequence[Player]) -> dict[str, str]:
    """Format all players' hands to dict.

    Args:
        players: Seated players.

    Returns:
        Dict mapping seat index (as string) to formatted hand string.
    """
    return {str(i): format_cards(p.hand) for i, p in enumerate(players)}
