"""Game models."""

from .card import Board, Card, CardState, InvalidFlipRequest
from .events import EventHandler, EventType, MatchEvent
from .preferences import Difficulty, Preferences
from .session import MatchSession, RoundPhase

__all__ = [
    "Board",
    "Card",
    "CardState",
    "InvalidFlipRequest",
    "EventHandler",
    "EventType",
    "MatchEvent",
    "Difficulty",
    "Preferences",
    "MatchSession",
    "RoundPhase",
]
