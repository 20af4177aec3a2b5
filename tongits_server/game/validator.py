"""Legality checks for submitted actions."""

from collections.abc import Sequence
from dataclasses import dataclass

from tongits_server.models.actions import (
    POST_ROUND_ACTIONS,
    Action,
    DiscardAction,
    DrawAction,
    MeldAction,
    SapawAction,
)
from tongits_server.models.card import Card
from tongits_server.models.game_state import GameSession, TurnPhase

from .analyzer import MeldAnalyzer


@dataclass
class ValidationResult:
    """Result of action validation."""

    is_valid: bool
    error_message: str = ""

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def fail(cls, message: str) -> "ValidationResult":
        return cls(is_valid=False, error_message=message)


def valid_indices(indices: Sequence[int], size: int) -> bool:
    """Check that indices are distinct and inside ``range(size)``."""
    return len(set(indices)) == len(indices) and all(0 <= i < size for i in indices)


class ActionValidator:
    """Validates actions against the current session state."""

    def __init__(self, analyzer: MeldAnalyzer | None = None):
        """Initialize validator.

        Args:
            analyzer: MeldAnalyzer instance (creates one if not provided)
        """
        self.analyzer = analyzer or MeldAnalyzer()

    def validate(
        self,
        session: GameSession,
        seat_index: int,
        action: Action,
    ) -> ValidationResult:
        """Validate an action submitted by a seat.

        Args:
            session: Current session
            seat_index: Seat of the acting participant (0-based)
            action: Submitted action

        Returns:
            ValidationResult
        """
        if not session.game_started:
            return ValidationResult.fail("Game has not started")

        if seat_index != session.current_player_index:
            return ValidationResult.fail("Not your turn")

        if session.game_ended and action.type not in POST_ROUND_ACTIONS:
            return ValidationResult.fail("Round is over")

        hand = session.players[seat_index].hand

        if isinstance(action, DrawAction):
            return self._validate_draw(session, hand, action)
        if isinstance(action, DiscardAction):
            return self._validate_discard(session, hand, action)
        if isinstance(action, MeldAction):
            return self._validate_meld(hand, action)
        if isinstance(action, SapawAction):
            return self._validate_sapaw(session, hand, action)

        return ValidationResult.ok()

    def _validate_draw(
        self,
        session: GameSession,
        hand: list[Card],
        action: DrawAction,
    ) -> ValidationResult:
        if session.turn_phase == TurnPhase.OPENING:
            return ValidationResult.fail("First player must discard before drawing")
        if session.turn_phase != TurnPhase.NEEDS_DRAW:
            return ValidationResult.fail("Already drawn this turn")

        if action.from_deck:
            if not session.deck:
                return ValidationResult.fail("Deck is empty")
            return ValidationResult.ok()

        top = session.top_discard
        if top is None:
            return ValidationResult.fail("Discard pile is empty")
        if not valid_indices(action.meld_indices, len(hand)):
            return ValidationResult.fail("Invalid meld indices")
        if not self.analyzer.can_form_meld_with_card(top, hand).can_meld:
            return ValidationResult.fail("Top discard does not complete a meld")
        return ValidationResult.ok()

    def _validate_discard(
        self,
        session: GameSession,
        hand: list[Card],
        action: DiscardAction,
    ) -> ValidationResult:
        if session.turn_phase not in (TurnPhase.CAN_ACT, TurnPhase.OPENING):
            return ValidationResult.fail("Must draw before discarding")
        if not 0 <= action.card_index < len(hand):
            return ValidationResult.fail(f"Invalid card index: {action.card_index}")
        return ValidationResult.ok()

    def _validate_meld(self, hand: list[Card], action: MeldAction) -> ValidationResult:
        if not valid_indices(action.card_indices, len(hand)):
            return ValidationResult.fail("Invalid card indices")

        cards = [hand[i] for i in action.card_indices]
        analysis = self.analyzer.analyze(cards)
        if not analysis.is_valid:
            return ValidationResult.fail(f"Invalid meld: {analysis.error.name}")
        return ValidationResult.ok()

    def _validate_sapaw(
        self,
        session: GameSession,
        hand: list[Card],
        action: SapawAction,
    ) -> ValidationResult:
        target = action.target
        if not 0 <= target.seat < len(session.players):
            return ValidationResult.fail(f"Invalid target seat: {target.seat}")

        melds = session.players[target.seat].exposed_melds
        if not 0 <= target.meld_index < len(melds):
            return ValidationResult.fail(f"Invalid target meld: {target.meld_index}")

        if not action.card_indices or not valid_indices(action.card_indices, len(hand)):
            return ValidationResult.fail("Invalid card indices")

        combined = melds[target.meld_index] + [hand[i] for i in action.card_indices]
        analysis = self.analyzer.analyze(combined)
        if not analysis.is_valid:
            return ValidationResult.fail(f"Lay-off does not form a meld: {analysis.error.name}")
        return ValidationResult.ok()
