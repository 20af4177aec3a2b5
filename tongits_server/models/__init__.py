"""Game models."""

from .actions import (
    Action,
    AutoSortAction,
    CallDrawAction,
    DiscardAction,
    DrawAction,
    MeldAction,
    NextGameAction,
    ResetGameAction,
    SapawAction,
    SapawTarget,
    ShuffleAction,
    UpdateSelectedIndicesAction,
    parse_action,
)
from .card import Card, Rank, Suit, create_full_deck
from .game_state import GameSession, TurnPhase
from .player import Player

__all__ = [
    "Action",
    "AutoSortAction",
    "CallDrawAction",
    "Card",
    "DiscardAction",
    "DrawAction",
    "GameSession",
    "MeldAction",
    "NextGameAction",
    "Player",
    "Rank",
    "ResetGameAction",
    "SapawAction",
    "SapawTarget",
    "ShuffleAction",
    "Suit",
    "TurnPhase",
    "UpdateSelectedIndicesAction",
    "create_full_deck",
    "parse_action",
]
