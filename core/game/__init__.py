"""Game engine and state management."""

from core.game.events import GameEvent, EventType
from core.game.state import GamePhase, RoundResult, SeatStatus
from core.game.snapshot import RoundState, SeatState, HandView
from core.game.engine import BlackjackGame

__all__ = [
    "GameEvent",
    "EventType",
    "GamePhase",
    "RoundResult",
    "SeatStatus",
    "RoundState",
    "SeatState",
    "HandView",
    "BlackjackGame",
]
