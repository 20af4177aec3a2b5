"""Deck construction, dealing and drawing."""

import random
from dataclasses import dataclass

from tongits_server.models.card import Card, create_full_deck


@dataclass
class DealResult:
    """Hands dealt to each seat plus the undealt cards."""

    hands: list[list[Card]]
    remaining: list[Card]


def build_standard_deck(rng: random.Random | None = None) -> list[Card]:
    """Create a uniformly shuffled 52-card deck.

    Args:
        rng: Random source (a fresh unseeded one if not provided)

    Returns:
        Shuffled list of cards; the draw end is the end of the list.
    """
    rng = rng or random.Random()
    cards = create_full_deck()
    rng.shuffle(cards)
    return cards


def deal(deck: list[Card], player_count: int, per_player: int) -> DealResult:
    """Deal cards round-robin from the draw end.

    One card per player per pass, for ``per_player`` passes. If the deck runs
    out the remaining hands are simply shorter.

    Args:
        deck: Cards to deal from (not modified)
        player_count: Number of hands
        per_player: Cards per hand

    Returns:
        DealResult with the hands and the rest of the deck
    """
    remaining = list(deck)
    hands: list[list[Card]] = [[] for _ in range(player_count)]

    for _ in range(per_player):
        for hand in hands:
            card = draw_top(remaining)
            if card is not None:
                hand.append(card)

    return DealResult(hands=hands, remaining=remaining)


def draw_top(deck: list[Card]) -> Card | None:
    """Remove and return the top card, or None if the deck is empty."""
    if not deck:
        return None
    return deck.pop()
