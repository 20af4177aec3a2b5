"""Game logging module."""

from .formatters import format_card, format_cards, format_hands, format_melds
from .game_logger import GameLogger

__all__ = [
    "GameLogger",
    "format_card",
    "format_cards",
    "format_hands",
    "format_melds",
]
