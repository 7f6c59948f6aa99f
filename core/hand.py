"""Hand evaluation for blackjack."""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, NamedTuple

from core.cards import Card

BLACKJACK = 21


class HandValue(NamedTuple):
    """Best total of a hand and whether an ace still counts as 11."""

    value: int
    soft: bool


def evaluate(cards: Iterable[Card]) -> HandValue:
    """
    Calculate the best value of a sequence of cards.

    Hidden cards are ignored entirely. Aces count 11 and are demoted to 1,
    one at a time, while the total is over 21.
    """
    total = 0
    aces = 0

    for card in cards:
        if card.hidden:
            continue
        if card.is_ace:
            aces += 1
            total += 11
        else:
            total += card.value

    # Reduce aces from 11 to 1 as needed
    while total > BLACKJACK and aces > 0:
        total -= 10
        aces -= 1

    return HandValue(total, aces > 0)


@dataclass
class Hand:
    """A blackjack hand with value calculation."""

    cards: list[Card] = field(default_factory=list)

    def add_card(self, card: Card) -> None:
        """Add a card to the hand."""
        self.cards.append(card)

    def reveal(self) -> bool:
        """
        Turn every hidden card face up.

        Returns:
            True if any card was hidden
        """
        revealed = False
        for i, card in enumerate(self.cards):
            if card.hidden:
                self.cards[i] = card.face_up()
                revealed = True
        return revealed

    def clear(self) -> None:
        """Remove all cards from the hand."""
        self.cards.clear()

    @property
    def evaluation(self) -> HandValue:
        """Return value and softness of the visible cards."""
        return evaluate(self.cards)

    @property
    def value(self) -> int:
        """Best value of the visible cards."""
        return self.evaluation.value

    @property
    def is_soft(self) -> bool:
        """Check if an ace is counted as 11."""
        return self.evaluation.soft

    @property
    def is_busted(self) -> bool:
        """Check if the hand has busted (value > 21)."""
        return self.value > BLACKJACK

    @property
    def is_blackjack(self) -> bool:
        """Check if the hand is a natural blackjack (21 with 2 cards)."""
        return len(self.cards) == 2 and not self.has_hidden and self.value == BLACKJACK

    @property
    def has_hidden(self) -> bool:
        """Check if any card is face down."""
        return any(card.hidden for card in self.cards)

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __str__(self) -> str:
        cards_str = " ".join(str(card) for card in self.cards)
        value_str = f"({self.value})"
        if self.is_soft:
            value_str = f"(soft {self.value})"
        if self.is_blackjack:
            value_str = "(BLACKJACK)"
        if self.is_busted:
            value_str = "(BUST)"
        return f"{cards_str} {value_str}"

    def __repr__(self) -> str:
        return f"Hand({self.cards!r}, value={self.value})"
