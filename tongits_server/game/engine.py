"""Game engine for Tongits.

The engine is a synchronous state machine: ``apply`` takes a session, the
acting seat and one action, and either mutates the session or leaves it
untouched and reports why. Callers must apply at most one action per session
at a time.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from tongits_server.config import Config
from tongits_server.logging import GameLogger
from tongits_server.models.actions import (
    Action,
    AutoSortAction,
    CallDrawAction,
    DiscardAction,
    DrawAction,
    MeldAction,
    NextGameAction,
    ResetGameAction,
    SapawAction,
    ShuffleAction,
    UpdateSelectedIndicesAction,
)
from tongits_server.models.card import Card
from tongits_server.models.game_state import GameSession, TurnPhase
from tongits_server.models.player import Player

from .analyzer import MeldAnalyzer, is_valid_meld
from .deck import build_standard_deck, deal, draw_top
from .scoring import hand_points
from .validator import ActionValidator

logger = logging.getLogger(__name__)


class ActionStatus(str, Enum):
    """Outcome of applying an action."""

    APPLIED = "applied"
    REJECTED = "rejected"


class RoundEndReason(str, Enum):
    """How a round ended."""

    TONGITS = "tongits"  # A hand was emptied by a meld or lay-off
    CALL_DRAW = "call_draw"  # Lowest hand wins


@dataclass
class ActionResult:
    """Result of ``GameEngine.apply``.

    A rejected action never changes the session.
    """

    status: ActionStatus
    reason: str = ""
    round_end: RoundEndReason | None = None

    @property
    def applied(self) -> bool:
        return self.status == ActionStatus.APPLIED

    @classmethod
    def ok(cls, round_end: RoundEndReason | None = None) -> ActionResult:
        return cls(status=ActionStatus.APPLIED, round_end=round_end)

    @classmethod
    def rejected(cls, reason: str) -> ActionResult:
        return cls(status=ActionStatus.REJECTED, reason=reason)


class GameEngine:
    """Applies player actions to game sessions."""

    def __init__(
        self,
        config: Config | None = None,
        rng: random.Random | None = None,
        game_logger: GameLogger | None = None,
    ):
        """Initialize game engine.

        Args:
            config: Configuration (uses defaults if not provided)
            rng: Random source for deck and hand shuffles (seeded from config if not provided)
            game_logger: GameLogger instance for detailed logging
        """
        self.config = config or Config()
        self.rules = self.config.game
        self.rng = rng or random.Random(self.rules.seed)
        self.game_logger = game_logger

        self.analyzer = MeldAnalyzer()
        self.validator = ActionValidator(self.analyzer)

        self._on_round_start: Callable[[GameSession], None] | None = None
        self._on_round_end: Callable[[GameSession, RoundEndReason], None] | None = None

    def set_callbacks(
        self,
        on_round_start: Callable[[GameSession], None] | None = None,
        on_round_end: Callable[[GameSession, RoundEndReason], None] | None = None,
    ) -> None:
        """Set event callbacks.

        Args:
            on_round_start: Called after a round has been dealt
            on_round_end: Called after a round has been scored
        """
        self._on_round_start = on_round_start
        self._on_round_end = on_round_end

    def start_if_full(self, session: GameSession) -> bool:
        """Start the first round once every seat is taken.

        Args:
            session: Session to check

        Returns:
            True if the session was started by this call
        """
        if session.game_started or len(session.players) != self.rules.num_players:
            return False

        logger.info(f"Session {session.id} is full, starting round {session.round}")
        if self.game_logger:
            self.game_logger.log_session_start(session)

        self._start_round(session)
        return True

    def apply(self, session: GameSession, seat_index: int, action: Action) -> ActionResult:
        """Apply one action for a seat.

        Args:
            session: Session to update in place
            seat_index: Seat of the acting participant (0-based)
            action: Submitted action

        Returns:
            ActionResult (rejected actions leave the session unchanged)
        """
        validation = self.validator.validate(session, seat_index, action)
        if not validation.is_valid:
            logger.debug(
                f"Session {session.id}: rejected {action.type} from seat {seat_index}: "
                f"{validation.error_message}"
            )
            return ActionResult.rejected(validation.error_message)

        player = session.players[seat_index]
        round_end: RoundEndReason | None = None

        if isinstance(action, DrawAction):
            round_end = self._draw(session, player, action)
        elif isinstance(action, DiscardAction):
            self._discard(session, player, action)
        elif isinstance(action, MeldAction):
            round_end = self._meld(session, player, action)
        elif isinstance(action, SapawAction):
            round_end = self._sapaw(session, player, action)
        elif isinstance(action, CallDrawAction):
            self._call_draw(session)
            round_end = RoundEndReason.CALL_DRAW
        elif isinstance(action, UpdateSelectedIndicesAction):
            session.selected_card_indices = list(action.indices)
        elif isinstance(action, AutoSortAction):
            player.hand.sort(key=Card.sort_key)
        elif isinstance(action, ShuffleAction):
            self.rng.shuffle(player.hand)
        elif isinstance(action, NextGameAction):
            self.next_game(session)
        elif isinstance(action, ResetGameAction):
            self.reset_game(session)

        if self.game_logger and session.players:
            self.game_logger.log_action(session, seat_index, action)

        if round_end is not None:
            self._finish_round(session, round_end)

        return ActionResult.ok(round_end)

    def next_game(self, session: GameSession) -> None:
        """Deal a new round within the same session."""
        session.round += 1
        self._start_round(session)

    def reset_game(self, session: GameSession) -> None:
        """Restart the match: round counter and win streaks go back to zero."""
        session.round = 0
        for player in session.players:
            player.consecutive_wins = 0
        self.next_game(session)

    def _start_round(self, session: GameSession) -> None:
        """Shuffle, deal and arm seat 0 for its opening turn."""
        deck = build_standard_deck(self.rng)
        result = deal(deck, len(session.players), self.rules.cards_per_player)

        session.deck = result.remaining
        session.discard_pile = []
        session.current_player_index = 0
        session.winner = None
        session.selected_card_indices = []

        for player, hand in zip(session.players, result.hands):
            player.reset_round_state()
            player.hand = hand

        # Seat 0 takes an extra card instead of drawing on its first turn
        bonus = draw_top(session.deck)
        if bonus is not None:
            session.players[0].hand.append(bonus)

        session.turn_phase = TurnPhase.OPENING

        logger.info(
            f"Session {session.id}: round {session.round} dealt, "
            f"{len(session.deck)} cards left in deck"
        )
        if self.game_logger:
            self.game_logger.log_round_start(session)
        if self._on_round_start:
            self._on_round_start(session)

    def _draw(
        self,
        session: GameSession,
        player: Player,
        action: DrawAction,
    ) -> RoundEndReason | None:
        session.turn_phase = TurnPhase.CAN_ACT

        if action.from_deck:
            card = draw_top(session.deck)
            player.hand.append(card)
            logger.debug(f"{player} drew from deck")
            return None

        card = session.discard_pile.pop()
        if action.meld_indices:
            meld = [player.hand[i] for i in action.meld_indices] + [card]
            if is_valid_meld(meld):
                self._remove_from_hand(player, action.meld_indices)
                player.exposed_melds.append(meld)
                session.selected_card_indices = []
                logger.debug(f"{player} took {card} from discards and melded {meld}")
                return self._check_tongits(player)

        player.hand.append(card)
        logger.debug(f"{player} took {card} from discards")
        return None

    def _discard(self, session: GameSession, player: Player, action: DiscardAction) -> None:
        card = player.hand.pop(action.card_index)
        session.discard_pile.append(card)
        player.turns_played += 1

        session.current_player_index = (session.current_player_index + 1) % len(session.players)
        session.turn_phase = TurnPhase.NEEDS_DRAW
        session.selected_card_indices = []

        logger.debug(f"{player} discarded {card}")

    def _meld(
        self,
        session: GameSession,
        player: Player,
        action: MeldAction,
    ) -> RoundEndReason | None:
        meld = [player.hand[i] for i in action.card_indices]
        player.exposed_melds.append(meld)
        self._remove_from_hand(player, action.card_indices)
        session.selected_card_indices = []

        logger.debug(f"{player} melded {meld}")
        return self._check_tongits(player)

    def _sapaw(
        self,
        session: GameSession,
        player: Player,
        action: SapawAction,
    ) -> RoundEndReason | None:
        target = session.players[action.target.seat]
        cards = [player.hand[i] for i in action.card_indices]
        melds = target.exposed_melds
        melds[action.target.meld_index] = melds[action.target.meld_index] + cards

        self._remove_from_hand(player, action.card_indices)
        target.is_sapawed = True
        session.selected_card_indices = []

        logger.debug(f"{player} laid off {cards} on {target}'s meld {action.target.meld_index}")
        return self._check_tongits(player)

    def _call_draw(self, session: GameSession) -> None:
        """Score every hand; the strictly lowest wins, ties go to the earlier seat."""
        scores = [hand_points(p.hand) for p in session.players]
        winner_index = min(range(len(scores)), key=lambda i: scores[i])

        for index, player in enumerate(session.players):
            player.score = scores[index]
            if index == winner_index:
                player.consecutive_wins += 1
            else:
                player.consecutive_wins = 0

        session.winner = session.players[winner_index].id

    def _check_tongits(self, player: Player) -> RoundEndReason | None:
        if player.hand:
            return None
        return RoundEndReason.TONGITS

    def _tongits(self, session: GameSession, winner: Player) -> None:
        winner.score = 0
        winner.consecutive_wins += 1

        for player in session.players:
            if player is winner:
                continue
            player.score = hand_points(player.hand, player.secret_melds)
            player.consecutive_wins = 0

        session.winner = winner.id

    def _finish_round(self, session: GameSession, reason: RoundEndReason) -> None:
        if reason == RoundEndReason.TONGITS:
            self._tongits(session, session.players[session.current_player_index])

        session.turn_phase = TurnPhase.ROUND_OVER

        winner = session.winner_player()
        logger.info(
            f"Session {session.id}: round {session.round} ended by {reason.value}, "
            f"winner {winner}"
        )
        if self.game_logger:
            self.game_logger.log_round_end(session, reason.value)
        if self._on_round_end:
            self._on_round_end(session, reason)

    @staticmethod
    def _remove_from_hand(player: Player, indices: list[int]) -> None:
        for index in sorted(indices, reverse=True):
            del player.hand[index]
