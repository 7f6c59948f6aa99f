"""Card and Shoe classes - immutable card representations."""

from dataclasses import dataclass, field, replace
from enum import Enum
from random import Random
from typing import Iterable, Iterator

DECK_SIZE = 52


class EmptyShoeError(IndexError):
    """Raised when drawing from a shoe with no cards left."""


class Suit(Enum):
    """Card suits."""

    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"
    SPADES = "spades"

    def __str__(self) -> str:
        symbols = {
            Suit.HEARTS: "♥",
            Suit.DIAMONDS: "♦",
            Suit.CLUBS: "♣",
            Suit.SPADES: "♠",
        }
        return symbols[self]


class Rank(Enum):
    """Card ranks with blackjack values."""

    ACE = 14
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13

    def __str__(self) -> str:
        if self.value <= 10:
            return str(self.value)
        return {
            Rank.JACK: "J",
            Rank.QUEEN: "Q",
            Rank.KING: "K",
            Rank.ACE: "A",
        }[self]

    @property
    def blackjack_value(self) -> int:
        """Return the blackjack point value (Ace = 11, face cards = 10)."""
        if self.value <= 10:
            return self.value
        if self == Rank.ACE:
            return 11
        return 10  # Face cards

    @property
    def is_ace(self) -> bool:
        """Check if this rank is an Ace."""
        return self == Rank.ACE


@dataclass(frozen=True, slots=True)
class Card:
    """
    Immutable playing card.

    ``hidden`` marks a face-down card. It is a display flag only and does not
    take part in equality, so a hole card and its revealed copy compare equal.
    """

    rank: Rank
    suit: Suit
    hidden: bool = field(default=False, compare=False)

    def __str__(self) -> str:
        if self.hidden:
            return "??"
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        flag = ", hidden" if self.hidden else ""
        return f"Card({self.rank.name}, {self.suit.name}{flag})"

    @property
    def value(self) -> int:
        """Return the blackjack point value."""
        return self.rank.blackjack_value

    @property
    def is_ace(self) -> bool:
        """Check if this card is an Ace."""
        return self.rank.is_ace

    def face_down(self) -> "Card":
        """Return a hidden copy of this card."""
        return replace(self, hidden=True)

    def face_up(self) -> "Card":
        """Return a visible copy of this card."""
        return replace(self, hidden=False)

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Create a card from a string like '2♣', 'AS', '10h'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_str = s[:-1]
        suit_str = s[-1]

        rank_map = {
            "A": Rank.ACE,
            "2": Rank.TWO,
            "3": Rank.THREE,
            "4": Rank.FOUR,
            "5": Rank.FIVE,
            "6": Rank.SIX,
            "7": Rank.SEVEN,
            "8": Rank.EIGHT,
            "9": Rank.NINE,
            "10": Rank.TEN,
            "T": Rank.TEN,
            "J": Rank.JACK,
            "Q": Rank.QUEEN,
            "K": Rank.KING,
        }

        suit_map = {
            "H": Suit.HEARTS,
            "♥": Suit.HEARTS,
            "D": Suit.DIAMONDS,
            "♦": Suit.DIAMONDS,
            "C": Suit.CLUBS,
            "♣": Suit.CLUBS,
            "S": Suit.SPADES,
            "♠": Suit.SPADES,
        }

        if rank_str not in rank_map:
            raise ValueError(f"Invalid rank: {rank_str}")
        if suit_str not in suit_map:
            raise ValueError(f"Invalid suit: {suit_str}")

        return cls(rank_map[rank_str], suit_map[suit_str])


def full_deck() -> list[Card]:
    """Return the 52 cards of a standard deck in suit-major order."""
    return [Card(rank, suit) for suit in Suit for rank in Rank]


class Shoe:
    """
    The undealt cards of a single 52-card deck.

    Cards are drawn from the end of the internal list.
    """

    def __init__(self, rng: Random | None = None) -> None:
        """Initialize a full, unshuffled shoe."""
        self._rng = rng or Random()
        self._cards: list[Card] = []
        self.reset()

    def reset(self) -> None:
        """Reset shoe to all 52 cards in order."""
        self._cards = full_deck()

    def shuffle(self) -> None:
        """Refill the shoe and shuffle it uniformly."""
        self.reset()
        self._rng.shuffle(self._cards)

    def draw(self) -> Card:
        """Draw a card from the top of the shoe."""
        if not self._cards:
            raise EmptyShoeError("Cannot draw from empty shoe")
        return self._cards.pop()

    @classmethod
    def from_cards(cls, cards: Iterable[Card], rng: Random | None = None) -> "Shoe":
        """
        Build a shoe with a fixed order.

        The last card of ``cards`` is the first one drawn.

        Raises:
            ValueError: If the same card appears twice
        """
        cards = [card.face_up() for card in cards]
        if len(set(cards)) != len(cards):
            raise ValueError("Shoe cannot contain duplicate cards")
        shoe = cls(rng=rng)
        shoe._cards = cards
        return shoe

    @property
    def cards_remaining(self) -> int:
        """Return the number of cards remaining."""
        return len(self._cards)

    @property
    def cards_dealt(self) -> int:
        """Return the number of cards dealt."""
        return DECK_SIZE - len(self._cards)

    @property
    def is_empty(self) -> bool:
        """Check if no cards are left."""
        return not self._cards

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)


def create_shoe(rng: Random | None = None) -> Shoe:
    """Create a freshly shuffled 52-card shoe."""
    shoe = Shoe(rng=rng)
    shoe.shuffle()
    return shoe
