"""Read-only round snapshots handed to the view layer."""

from dataclasses import dataclass
from decimal import Decimal

from core.cards import Card
from core.game.state import GamePhase, RoundResult, SeatStatus
from core.hand import BLACKJACK, Hand, evaluate


@dataclass(frozen=True)
class HandView:
    """Frozen copy of a hand with its visible value."""

    cards: tuple[Card, ...] = ()
    value: int = 0
    soft: bool = False

    @classmethod
    def of(cls, hand: Hand) -> "HandView":
        """Capture the current contents of a hand."""
        cards = tuple(hand.cards)
        value, soft = evaluate(cards)
        return cls(cards=cards, value=value, soft=soft)

    @property
    def is_busted(self) -> bool:
        return self.value > BLACKJACK

    def __len__(self) -> int:
        return len(self.cards)


@dataclass(frozen=True)
class SeatState:
    """A seat as seen at one point of the round."""

    name: str
    hand: HandView
    bet: int
    bankroll: Decimal
    status: SeatStatus
    result: RoundResult = RoundResult.NONE
    payout: Decimal = Decimal("0")


@dataclass(frozen=True)
class RoundState:
    """
    Immutable snapshot of a game.

    A new snapshot is produced after every transition. The single-seat
    accessors (``player_hand``, ``bet``, ``bankroll``, ``result``) read seat 0.
    """

    phase: GamePhase
    dealer_hand: HandView
    seats: tuple[SeatState, ...]
    active_seat: int | None
    message: str
    shoe_remaining: int

    @property
    def seat(self) -> SeatState:
        return self.seats[0]

    @property
    def player_hand(self) -> HandView:
        return self.seat.hand

    @property
    def bet(self) -> int:
        return self.seat.bet

    @property
    def bankroll(self) -> Decimal:
        return self.seat.bankroll

    @property
    def result(self) -> RoundResult:
        return self.seat.result

    @property
    def is_bankrupt(self) -> bool:
        """No seat has money left to bet with."""
        return all(s.bankroll <= 0 for s in self.seats)

    @property
    def can_bet(self) -> bool:
        return self.phase == GamePhase.BETTING

    @property
    def can_hit(self) -> bool:
        return self.phase == GamePhase.PLAYING and self.active_seat is not None

    @property
    def can_stand(self) -> bool:
        return self.can_hit

    @property
    def can_start_new_game(self) -> bool:
        """New game is offered after a round while some seat can still bet."""
        return self.phase == GamePhase.GAME_OVER and not self.is_bankrupt
