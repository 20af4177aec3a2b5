"""Game logic."""

from .analyzer import MeldAnalysis, MeldAnalyzer, MeldCandidate, MeldType, is_valid_meld
from .deck import DealResult, build_standard_deck, deal, draw_top
from .engine import ActionResult, ActionStatus, GameEngine, RoundEndReason
from .scoring import HandScore, hand_points, score_hand
from .sessions import SessionRepository
from .validator import ActionValidator, ValidationResult

__all__ = [
    "ActionResult",
    "ActionStatus",
    "ActionValidator",
    "DealResult",
    "GameEngine",
    "HandScore",
    "MeldAnalysis",
    "MeldAnalyzer",
    "MeldCandidate",
    "MeldType",
    "RoundEndReason",
    "SessionRepository",
    "ValidationResult",
    "build_standard_deck",
    "deal",
    "draw_top",
    "hand_points",
    "is_valid_meld",
    "score_hand",
]
