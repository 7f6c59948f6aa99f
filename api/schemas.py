"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, Field
from typing import Literal

from core.cards import Card
from core.game import HandView, RoundState, SeatState


class BetRequest(BaseModel):
    """Request to place a bet."""

    amount: int = Field(..., ge=1, strict=True, description="Bet amount")
    seat: int = Field(default=0, ge=0, strict=True, description="Seat index")


class BetSlipRequest(BaseModel):
    """Request to place a bet assembled from chips."""

    chips: list[int] = Field(default_factory=list, description="Chip values in the order clicked")
    all_in: bool = False
    seat: int = Field(default=0, ge=0)


class CardResponse(BaseModel):
    """Card representation. Hidden cards carry no rank or suit."""

    rank: str | None
    suit: str | None
    value: int
    hidden: bool = False

    @classmethod
    def from_card(cls, card: Card) -> "CardResponse":
        if card.hidden:
            return cls(rank=None, suit=None, value=0, hidden=True)
        return cls(rank=str(card.rank), suit=card.suit.value, value=card.value)


class HandResponse(BaseModel):
    """Hand representation."""

    cards: list[CardResponse]
    value: int
    is_soft: bool
    is_busted: bool

    @classmethod
    def from_view(cls, hand: HandView) -> "HandResponse":
        return cls(
            cards=[CardResponse.from_card(c) for c in hand.cards],
            value=hand.value,
            is_soft=hand.soft,
            is_busted=hand.is_busted,
        )


class SeatResponse(BaseModel):
    """Seat representation."""

    name: str
    hand: HandResponse
    bet: int
    bankroll: float
    status: str
    result: Literal["win", "lose", "push", "blackjack", "none"]
    payout: float

    @classmethod
    def from_seat(cls, seat: SeatState) -> "SeatResponse":
        return cls(
            name=seat.name,
            hand=HandResponse.from_view(seat.hand),
            bet=seat.bet,
            bankroll=float(seat.bankroll),
            status=seat.status.value,
            result=seat.result.value,
            payout=float(seat.payout),
        )


class GameStateResponse(BaseModel):
    """Current game state."""

    phase: Literal["betting", "dealing", "playing", "dealer-turn", "game-over"]
    dealer_hand: HandResponse
    seats: list[SeatResponse]
    active_seat: int | None
    message: str
    shoe_remaining: int
    bankroll: float
    bet: int
    result: Literal["win", "lose", "push", "blackjack", "none"]
    can_bet: bool
    can_hit: bool
    can_stand: bool
    can_start_new_game: bool

    @classmethod
    def from_state(cls, state: RoundState) -> "GameStateResponse":
        return cls(
            phase=state.phase.value,
            dealer_hand=HandResponse.from_view(state.dealer_hand),
            seats=[SeatResponse.from_seat(s) for s in state.seats],
            active_seat=state.active_seat,
            message=state.message,
            shoe_remaining=state.shoe_remaining,
            bankroll=float(state.bankroll),
            bet=state.bet,
            result=state.result.value,
            can_bet=state.can_bet,
            can_hit=state.can_hit,
            can_stand=state.can_stand,
            can_start_new_game=state.can_start_new_game,
        )


class NewSessionResponse(BaseModel):
    """A freshly created game session."""

    session_id: str
    chip_values: list[int]


class RejectionResponse(BaseModel):
    """Why an intent was refused."""

    reason: Literal["insufficient_funds", "invalid_action"]
    message: str
