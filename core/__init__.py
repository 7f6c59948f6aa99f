"""Core blackjack engine - 100% UI-agnostic."""

from core.cards import Card, EmptyShoeError, Shoe, Rank, Suit, create_shoe
from core.hand import Hand, HandValue, evaluate
from core.rules import TableRules

__all__ = [
    "Card",
    "EmptyShoeError",
    "Shoe",
    "Rank",
    "Suit",
    "create_shoe",
    "Hand",
    "HandValue",
    "evaluate",
    "TableRules",
]
