"""Meld analysis."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum, IntEnum

from tongits_server.models.card import Card

MIN_MELD_SIZE = 3


class MeldType(str, Enum):
    """Kind of meld formed by a group of cards."""

    NONE = "none"
    THREE_OF_A_KIND = "three_of_a_kind"
    FOUR_OF_A_KIND = "four_of_a_kind"
    RUN = "run"  # Same-suit straight


class AnalysisError(IntEnum):
    """Why a group of cards is not a meld."""

    NONE = 0
    TOO_FEW_CARDS = 1
    TOO_MANY_OF_A_KIND = 2  # Same rank, more than four slots
    MIXED_RANKS_AND_SUITS = 3
    NOT_CONSECUTIVE = 4  # Same suit with a gap or a repeated rank


@dataclass
class MeldAnalysis:
    """Result of analyzing a group of cards."""

    meld_type: MeldType
    count: int
    error: AnalysisError = AnalysisError.NONE

    @property
    def is_valid(self) -> bool:
        """Check if the cards form a meld."""
        return self.error == AnalysisError.NONE


@dataclass
class MeldCandidate:
    """Hand cards that complete a meld with an outside card."""

    can_meld: bool
    indices: list[int] = field(default_factory=list)


def is_three_of_a_kind(cards: Sequence[Card]) -> bool:
    """Exactly three cards of one rank."""
    return len(cards) == 3 and all(c.rank == cards[0].rank for c in cards)


def is_four_of_a_kind(cards: Sequence[Card]) -> bool:
    """Exactly four cards of one rank."""
    return len(cards) == 4 and all(c.rank == cards[0].rank for c in cards)


def is_run(cards: Sequence[Card]) -> bool:
    """Three or more cards of one suit with consecutive ranks."""
    if len(cards) < MIN_MELD_SIZE:
        return False
    if any(c.suit != cards[0].suit for c in cards):
        return False
    ranks = sorted(c.rank for c in cards)
    return all(ranks[i] - ranks[i - 1] == 1 for i in range(1, len(ranks)))


def is_valid_meld(cards: Sequence[Card]) -> bool:
    """Check if the cards form a set or a run."""
    return is_three_of_a_kind(cards) or is_four_of_a_kind(cards) or is_run(cards)


class MeldAnalyzer:
    """Classifies groups of cards as melds."""

    def analyze(self, cards: Sequence[Card]) -> MeldAnalysis:
        """Analyze a group of cards.

        Args:
            cards: Cards to analyze (duplicates count as separate slots)

        Returns:
            MeldAnalysis result
        """
        count = len(cards)
        if count < MIN_MELD_SIZE:
            return MeldAnalysis(MeldType.NONE, count, AnalysisError.TOO_FEW_CARDS)

        if is_three_of_a_kind(cards):
            return MeldAnalysis(MeldType.THREE_OF_A_KIND, count)
        if is_four_of_a_kind(cards):
            return MeldAnalysis(MeldType.FOUR_OF_A_KIND, count)
        if is_run(cards):
            return MeldAnalysis(MeldType.RUN, count)

        if len({c.rank for c in cards}) == 1:
            return MeldAnalysis(MeldType.NONE, count, AnalysisError.TOO_MANY_OF_A_KIND)
        if len({c.suit for c in cards}) > 1:
            return MeldAnalysis(MeldType.NONE, count, AnalysisError.MIXED_RANKS_AND_SUITS)
        return MeldAnalysis(MeldType.NONE, count, AnalysisError.NOT_CONSECUTIVE)

    def can_form_meld_with_card(self, card: Card, hand: Sequence[Card]) -> MeldCandidate:
        """Find two hand cards that make a meld together with ``card``.

        Same-rank matches are searched before same-suit runs.

        Args:
            card: Outside card (normally the top discard)
            hand: Player's hand

        Returns:
            MeldCandidate with the first matching pair of hand indices
        """
        same_rank = [i for i, c in enumerate(hand) if c.rank == card.rank]
        if len(same_rank) >= 2:
            return MeldCandidate(can_meld=True, indices=same_rank[:2])

        same_suit = [i for i, c in enumerate(hand) if c.suit == card.suit]
        for a in range(len(same_suit) - 1):
            for b in range(a + 1, len(same_suit)):
                i, j = same_suit[a], same_suit[b]
                if is_valid_meld([card, hand[i], hand[j]]):
                    return MeldCandidate(can_meld=True, indices=[i, j])

        return MeldCandidate(can_meld=False)
