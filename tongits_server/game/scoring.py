"""Round-end hand scoring.

Melds are extracted greedily: the first three-of-a-kind found scanning index
triples in increasing order, otherwise the first three consecutive same-suit
cards in rank order. This is not a search for the lowest possible residual,
so two orderings of the same cards can score differently.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from itertools import combinations

from tongits_server.models.card import Card


@dataclass
class HandScore:
    """Breakdown of a scored hand."""

    points: int
    melds: list[list[Card]] = field(default_factory=list)  # Secret + extracted
    deadwood: list[Card] = field(default_factory=list)


def card_points(card: Card) -> int:
    """Point value of a single card."""
    return card.points


def find_and_remove_meld(cards: list[Card]) -> list[Card] | None:
    """Find one meld in ``cards``, remove it in place and return it.

    Args:
        cards: Working hand (modified)

    Returns:
        The three removed cards, or None if no meld was found
    """
    for i, j, k in combinations(range(len(cards)), 3):
        if cards[i].rank == cards[j].rank == cards[k].rank:
            return _remove_positions(cards, [i, j, k])

    order = sorted(range(len(cards)), key=lambda i: cards[i].rank)
    for n in range(len(order) - 2):
        a, b, c = (cards[p] for p in order[n : n + 3])
        if (
            a.suit == b.suit == c.suit
            and b.rank - a.rank == 1
            and c.rank - b.rank == 1
        ):
            return _remove_positions(cards, order[n : n + 3])

    return None


def _remove_positions(cards: list[Card], positions: list[int]) -> list[Card]:
    meld = [cards[p] for p in positions]
    for p in sorted(positions, reverse=True):
        del cards[p]
    return meld


def score_hand(
    hand: Sequence[Card],
    secret_melds: Sequence[Sequence[Card]] = (),
) -> HandScore:
    """Score a hand at round end (lower is better).

    Args:
        hand: Cards left in hand
        secret_melds: Melds kept hidden; reported with the extracted melds

    Returns:
        HandScore with the points of the cards left after extraction
    """
    working = list(hand)
    melds = [list(m) for m in secret_melds]

    while True:
        meld = find_and_remove_meld(working)
        if meld is None:
            break
        melds.append(meld)

    points = sum(card_points(c) for c in working)
    return HandScore(points=points, melds=melds, deadwood=working)


def hand_points(
    hand: Sequence[Card],
    secret_melds: Sequence[Sequence[Card]] = (),
) -> int:
    """Point total of a hand after greedy meld extraction."""
    return score_hand(hand, secret_melds).points
