"""Game session models."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, computed_field

from .card import Card
from .player import Player


class TurnPhase(str, Enum):
    """Phase of the current turn."""

    LOBBY = "lobby"  # Waiting for seats to fill
    OPENING = "opening"  # Seat 0's bonus turn: holds 13 cards, may not draw
    NEEDS_DRAW = "needs_draw"  # Current seat must draw first
    CAN_ACT = "can_act"  # Drawn; may meld, lay off or discard
    ROUND_OVER = "round_over"  # Tongits or call draw ended the round
    WAITING = "waiting"  # Seen by every seat that is not the current one


# Phases in which a round is being played
ACTIVE_PHASES = frozenset({TurnPhase.OPENING, TurnPhase.NEEDS_DRAW, TurnPhase.CAN_ACT})


class GameSession(BaseModel):
    """Mutable state of one table.

    The session is owned by a single writer at a time; the engine mutates it
    in place.
    """

    id: str
    players: list[Player] = Field(default_factory=list)
    deck: list[Card] = Field(default_factory=list)  # Draw end is the end of the list
    discard_pile: list[Card] = Field(default_factory=list)  # Top is the end of the list
    current_player_index: int = 0
    round: int = 1
    turn_phase: TurnPhase = TurnPhase.LOBBY
    winner: str | None = None  # Player id
    selected_card_indices: list[int] = Field(default_factory=list)  # UI echo only

    @computed_field
    @property
    def has_drawn_this_turn(self) -> bool:
        return self.turn_phase in (TurnPhase.OPENING, TurnPhase.CAN_ACT)

    @computed_field
    @property
    def game_started(self) -> bool:
        return self.turn_phase != TurnPhase.LOBBY

    @computed_field
    @property
    def game_ended(self) -> bool:
        return self.turn_phase == TurnPhase.ROUND_OVER

    @computed_field
    @property
    def first_player_has_played(self) -> bool:
        return self.turn_phase in (TurnPhase.NEEDS_DRAW, TurnPhase.CAN_ACT)

    @computed_field
    @property
    def winner_name(self) -> str | None:
        player = self.winner_player()
        return player.name if player else None

    @property
    def current_player(self) -> Player | None:
        """Player whose turn it is, if any."""
        if 0 <= self.current_player_index < len(self.players):
            return self.players[self.current_player_index]
        return None

    @property
    def top_discard(self) -> Card | None:
        """Card on top of the discard pile."""
        return self.discard_pile[-1] if self.discard_pile else None

    def is_in_progress(self) -> bool:
        """Check if a round is being played."""
        return self.turn_phase in ACTIVE_PHASES

    def is_empty(self) -> bool:
        """Check if every participant has left."""
        return not self.players

    def is_full(self, capacity: int) -> bool:
        """Check if all seats are taken."""
        return len(self.players) >= capacity

    def phase_of(self, seat_index: int) -> TurnPhase:
        """Turn phase as seen by the given seat."""
        if self.turn_phase in ACTIVE_PHASES and seat_index != self.current_player_index:
            return TurnPhase.WAITING
        return self.turn_phase

    def seat_of(self, player_id: str) -> int:
        """Get the seat index of a participant (-1 if not seated)."""
        for index, player in enumerate(self.players):
            if player.id == player_id:
                return index
        return -1

    def winner_player(self) -> Player | None:
        """Get the round winner."""
        for player in self.players:
            if player.id == self.winner:
                return player
        return None

    def all_cards(self) -> list[Card]:
        """Every card in the session: deck, discards, hands and melds."""
        cards = list(self.deck) + list(self.discard_pile)
        for player in self.players:
            cards.extend(player.hand)
            for meld in player.exposed_melds:
                cards.extend(meld)
            for meld in player.secret_melds:
                cards.extend(meld)
        return cards

    def clear_table(self) -> None:
        """Drop all cards and return to the lobby."""
        self.deck = []
        self.discard_pile = []
        self.current_player_index = 0
        self.turn_phase = TurnPhase.LOBBY
        self.winner = None
        self.selected_card_indices = []
        for player in self.players:
            player.reset_round_state()

    def snapshot(self) -> dict[str, Any]:
        """Full JSON-compatible state for broadcasting."""
        return self.model_dump(mode="json")

    def __str__(self) -> str:
        parts = [f"Session {self.id}, Round {self.round}", f"[{self.turn_phase.value}]"]
        current = self.current_player
        if current and self.is_in_progress():
            parts.append(f"{current}'s turn")
        return " ".join(parts)
