"""Blackjack game engine with state machine."""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from random import Random
from typing import Callable, Iterable

from transitions import Machine

from core.cards import Card, create_shoe
from core.hand import BLACKJACK, Hand, evaluate
from core.rules import TableRules
from core.game.events import EventEmitter, EventType, GameEvent
from core.game.snapshot import HandView, RoundState, SeatState
from core.game.state import DealerMessage, GamePhase, RoundResult, SeatStatus

logger = logging.getLogger(__name__)

OUTCOME_MESSAGES = {
    RoundResult.WIN: DealerMessage.PLAYER_WIN,
    RoundResult.LOSE: DealerMessage.PLAYER_LOSE,
    RoundResult.PUSH: DealerMessage.PUSH,
    RoundResult.BLACKJACK: DealerMessage.BLACKJACK,
}


def resolve_outcome(player_value: int, dealer_value: int) -> RoundResult:
    """
    Compare a standing player total with the dealer's final total.

    The player has not busted; a busted dealer loses to any standing hand.
    """
    if dealer_value > BLACKJACK:
        return RoundResult.WIN
    if dealer_value > player_value:
        return RoundResult.LOSE
    if player_value > dealer_value:
        return RoundResult.WIN
    return RoundResult.PUSH


@dataclass
class Seat:
    """Player position at the table."""

    name: str
    bankroll: Decimal
    hand: Hand = field(default_factory=Hand)
    bet: int = 0
    status: SeatStatus = SeatStatus.WAITING
    result: RoundResult = RoundResult.NONE
    payout: Decimal = Decimal("0")

    @property
    def in_round(self) -> bool:
        """Check if the seat has money riding on this round."""
        return self.bet > 0

    @property
    def is_waiting_to_bet(self) -> bool:
        """Seats with money must bet before cards are dealt."""
        return self.bet == 0 and self.bankroll > 0

    def settle(
        self,
        result: RoundResult,
        payout: Decimal,
        status: SeatStatus = SeatStatus.SETTLED,
    ) -> None:
        """Record the outcome and credit the payout."""
        self.result = result
        self.payout = payout
        self.bankroll += payout
        self.status = status

    def reset(self) -> None:
        """Clear the seat for a new round, keeping the bankroll."""
        self.hand.clear()
        self.bet = 0
        self.status = SeatStatus.WAITING
        self.result = RoundResult.NONE
        self.payout = Decimal("0")

    def snapshot(self) -> SeatState:
        return SeatState(
            name=self.name,
            hand=HandView.of(self.hand),
            bet=self.bet,
            bankroll=self.bankroll,
            status=self.status,
            result=self.result,
            payout=self.payout,
        )


class BlackjackGame:
    """
    Blackjack game engine using a state machine.

    This is the core game logic, completely UI-agnostic.
    Communication happens through events and return values only: every
    intent returns True when accepted, and every state change publishes a
    STATE_CHANGED event carrying a RoundState snapshot.

    With ``auto_advance`` the transient phases are passed through at once
    (betting → dealing → playing, dealer-turn → game-over). Without it the
    caller drives ``deal_initial_cards`` and ``play_dealer_hand`` itself.
    """

    # State machine states
    STATES = [p.machine_state for p in GamePhase]

    # State machine transitions
    TRANSITIONS = [
        {"trigger": "bet_placed", "source": "betting", "dest": "betting"},
        {"trigger": "bets_closed", "source": "betting", "dest": "dealing"},
        {"trigger": "cards_dealt", "source": "dealing", "dest": "playing"},
        {"trigger": "player_action", "source": "playing", "dest": "playing"},
        {"trigger": "player_done", "source": "playing", "dest": "dealer_turn"},
        {"trigger": "round_over", "source": ["playing", "dealer_turn"], "dest": "game_over"},
        {"trigger": "reset_round", "source": "game_over", "dest": "betting"},
    ]

    def __init__(
        self,
        rules: TableRules | None = None,
        seats: Iterable[str] | None = None,
        rng: Random | None = None,
        auto_advance: bool = True,
    ) -> None:
        """
        Initialize a new blackjack game.

        Args:
            rules: Table rules (uses defaults if not provided)
            seats: Seat names in turn order (one "Player" seat by default)
            rng: Random number generator for reproducible games
            auto_advance: Pass through the dealing and dealer phases immediately
        """
        names = list(seats) if seats is not None else ["Player"]
        if not names:
            raise ValueError("A table needs at least one seat")

        self.rules = rules or TableRules()
        self.auto_advance = auto_advance
        self._rng = rng or Random()
        self.shoe = create_shoe(self._rng)

        self.seats = [Seat(name=name, bankroll=self.rules.initial_bankroll) for name in names]
        self.dealer_hand = Hand()
        self.active_seat: int | None = None
        self.message = DealerMessage.WELCOME
        self.last_rejection: GameEvent | None = None
        self.events = EventEmitter()

        # Initialize state machine
        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial=GamePhase.BETTING.machine_state,
            auto_transitions=False,
            model_attribute="_machine_state",
            after_state_change="_publish_snapshot",
        )

    @property
    def phase(self) -> GamePhase:
        """Get current game phase as enum."""
        return GamePhase[self._machine_state.upper()]  # type: ignore

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to game events."""
        self.events.subscribe(handler, event_type)

    def snapshot(self) -> RoundState:
        """Build an immutable view of the current game."""
        return RoundState(
            phase=self.phase,
            dealer_hand=HandView.of(self.dealer_hand),
            seats=tuple(seat.snapshot() for seat in self.seats),
            active_seat=self.active_seat,
            message=self.message,
            shoe_remaining=self.shoe.cards_remaining,
        )

    def _publish_snapshot(self) -> None:
        logger.debug("Phase is now %s", self.phase.value)
        self.events.emit_new(EventType.STATE_CHANGED, state=self.snapshot())

    def _reject(self, event_type: EventType, message: str, **data) -> bool:
        self.last_rejection = self.events.emit_new(event_type, message=message, **data)
        return False

    def _require_phase(self, phase: GamePhase, intent: str) -> bool:
        """Reject an intent made outside the phase that accepts it."""
        if self.phase == phase:
            self.last_rejection = None
            return True
        return self._reject(
            EventType.INVALID_ACTION,
            f"Cannot {intent} during {self.phase.value}",
            intent=intent,
            phase=self.phase.value,
        )

    def place_bet(self, amount: int, seat: int = 0) -> bool:
        """
        Place a bet for a seat.

        The stake leaves the bankroll now and only comes back at settlement.
        Once every seat with money has bet, the round moves to dealing.

        Args:
            amount: Bet amount
            seat: Index of the betting seat

        Returns:
            True if bet was accepted
        """
        if not self._require_phase(GamePhase.BETTING, "bet"):
            return False

        if not 0 <= seat < len(self.seats):
            return self._reject(EventType.INVALID_ACTION, f"No seat {seat} at this table", intent="bet")

        player = self.seats[seat]
        if amount < 1:
            return self._reject(EventType.INVALID_ACTION, "Bet must be a positive amount", intent="bet")
        if player.in_round:
            return self._reject(EventType.INVALID_ACTION, f"{player.name} has already bet", intent="bet")
        if Decimal(amount) > player.bankroll:
            return self._reject(
                EventType.INSUFFICIENT_FUNDS,
                DealerMessage.INSUFFICIENT_FUNDS,
                required=amount,
                available=float(player.bankroll),
            )

        player.bankroll -= amount
        player.bet = amount
        self.events.emit_new(
            EventType.BET_PLACED,
            seat=seat,
            amount=amount,
            bankroll=float(player.bankroll),
        )

        if any(s.is_waiting_to_bet for s in self.seats):
            self.bet_placed()
            return True

        self.message = DealerMessage.DEALING
        self.bets_closed()
        if self.auto_advance:
            self.deal_initial_cards()
        return True

    def deal_initial_cards(self) -> bool:
        """Deal two cards to every betting seat and to the dealer, hole card down."""
        if not self._require_phase(GamePhase.DEALING, "deal"):
            return False

        playing = [s for s in self.seats if s.in_round]
        for seat in playing:
            self._deal_card_to(seat.hand, seat.name)
            self._deal_card_to(seat.hand, seat.name)
            seat.status = SeatStatus.PLAYING

        hole_card = self.shoe.draw()
        self._deal_card_to(self.dealer_hand, "dealer")
        self.dealer_hand.add_card(hole_card.face_down())
        self.events.emit_new(EventType.CARD_DEALT, card="??", hand="dealer", hand_value=None)

        self.active_seat = self._next_seat_to_act()
        self.message = DealerMessage.PLAYER_TURN
        self.events.emit_new(EventType.ROUND_STARTED, seats=len(playing))
        self.cards_dealt()

        self._check_blackjacks()
        return True

    def _deal_card_to(self, hand: Hand, owner: str) -> Card:
        """Deal a face-up card to a hand."""
        card = self.shoe.draw()
        hand.add_card(card)
        self.events.emit_new(
            EventType.CARD_DEALT,
            card=str(card),
            hand=owner,
            hand_value=hand.value,
        )
        return card

    def _check_blackjacks(self) -> None:
        """Settle two-card 21s against the dealer's full first two cards."""
        naturals = [
            s for s in self.seats
            if s.status == SeatStatus.PLAYING and s.hand.value == BLACKJACK
        ]
        if not naturals:
            return

        dealer_value = evaluate(card.face_up() for card in self.dealer_hand).value
        for seat in naturals:
            self.events.emit_new(EventType.PLAYER_BLACKJACK, seat=seat.name)
            if dealer_value == BLACKJACK:
                result = RoundResult.PUSH
                self.events.emit_new(EventType.PUSH, seat=seat.name)
            else:
                result = RoundResult.BLACKJACK
            payout = self.payout_for(result, seat.bet)
            self._settle(seat, result, payout)
            if result == RoundResult.BLACKJACK:
                self.events.emit_new(EventType.PLAYER_WINS, seat=seat.name, amount=float(payout))
            self.message = OUTCOME_MESSAGES[result]

        self._advance_turn()

    def hit(self) -> bool:
        """Active seat takes another card."""
        if not self._require_phase(GamePhase.PLAYING, "hit"):
            return False

        seat = self.seats[self.active_seat]  # type: ignore[index]
        self._deal_card_to(seat.hand, seat.name)
        self.events.emit_new(EventType.PLAYER_HIT, seat=seat.name, hand_value=seat.hand.value)

        if seat.hand.is_busted:
            self._settle(seat, RoundResult.LOSE, Decimal("0"), status=SeatStatus.BUSTED)
            self.message = DealerMessage.BUST
            self.events.emit_new(EventType.PLAYER_BUSTS, seat=seat.name, hand_value=seat.hand.value)
            self._advance_turn()
            return True

        self.player_action()  # Stay in player turn
        return True

    def stand(self) -> bool:
        """Active seat keeps its hand."""
        if not self._require_phase(GamePhase.PLAYING, "stand"):
            return False

        seat = self.seats[self.active_seat]  # type: ignore[index]
        seat.status = SeatStatus.STOOD
        self.events.emit_new(EventType.PLAYER_STAND, seat=seat.name, hand_value=seat.hand.value)
        self._advance_turn()
        return True

    def _next_seat_to_act(self) -> int | None:
        """
        Pick the seat whose turn it is.

        Seats act once each, in index order. This is the hook for other
        rotation policies.
        """
        for index, seat in enumerate(self.seats):
            if seat.status == SeatStatus.PLAYING:
                return index
        return None

    def _advance_turn(self) -> None:
        """Hand the turn to the next seat or end the player phase."""
        next_seat = self._next_seat_to_act()
        if next_seat is not None:
            if self.active_seat is not None and next_seat != self.active_seat:
                self.message = DealerMessage.NEXT_SEAT
            self.active_seat = next_seat
            self.player_action()
            return

        self.active_seat = None
        self._reveal_hole_card()

        if any(s.status == SeatStatus.STOOD for s in self.seats):
            self.message = DealerMessage.DEALER_TURN
            self.player_done()
            if self.auto_advance:
                self.play_dealer_hand()
            return

        # Every seat busted or was settled on a natural
        self._finish_round()

    def _reveal_hole_card(self) -> None:
        if self.dealer_hand.reveal():
            self.events.emit_new(
                EventType.DEALER_REVEALS,
                card=str(self.dealer_hand.cards[1]),
                hand_value=self.dealer_hand.value,
            )

    def play_dealer_hand(self) -> bool:
        """Dealer draws to 17, then every standing seat is settled."""
        if not self._require_phase(GamePhase.DEALER_TURN, "play the dealer hand"):
            return False

        self._reveal_hole_card()

        # Soft 17 counts as 17: the dealer stands
        while self.dealer_hand.value < self.rules.dealer_stands_on:
            self._deal_card_to(self.dealer_hand, "dealer")
            self.events.emit_new(EventType.DEALER_HITS, hand_value=self.dealer_hand.value)

        if self.dealer_hand.is_busted:
            self.events.emit_new(EventType.DEALER_BUSTS, hand_value=self.dealer_hand.value)
        else:
            self.events.emit_new(EventType.DEALER_STANDS, hand_value=self.dealer_hand.value)

        self._settle_standing_seats()
        self._finish_round()
        return True

    def _settle(
        self,
        seat: Seat,
        result: RoundResult,
        payout: Decimal,
        status: SeatStatus = SeatStatus.SETTLED,
    ) -> None:
        seat.settle(result, payout, status=status)
        self.events.emit_new(
            EventType.BET_RESOLVED,
            seat=seat.name,
            bet=seat.bet,
            result=result.value,
            payout=float(payout),
            bankroll=float(seat.bankroll),
        )

    def _settle_standing_seats(self) -> None:
        dealer_value = self.dealer_hand.value

        for seat in self.seats:
            if seat.status != SeatStatus.STOOD:
                continue

            result = resolve_outcome(seat.hand.value, dealer_value)
            payout = self.payout_for(result, seat.bet)
            self._settle(seat, result, payout)

            if result == RoundResult.WIN:
                self.events.emit_new(EventType.PLAYER_WINS, seat=seat.name, amount=float(payout))
            elif result == RoundResult.LOSE:
                self.events.emit_new(EventType.PLAYER_LOSES, seat=seat.name, amount=seat.bet)
            else:
                self.events.emit_new(EventType.PUSH, seat=seat.name)

            if result == RoundResult.WIN and dealer_value > BLACKJACK:
                self.message = DealerMessage.DEALER_BUST
            else:
                self.message = OUTCOME_MESSAGES[result]

    def payout_for(self, result: RoundResult, bet: int) -> Decimal:
        """
        Amount credited back to the bankroll at settlement.

        Includes the returned stake: win 2x, blackjack 2.5x, push 1x, lose 0.
        """
        stake = Decimal(bet)
        if result == RoundResult.WIN:
            return stake * self.rules.win_multiplier
        if result == RoundResult.BLACKJACK:
            return stake * self.rules.blackjack_multiplier
        if result == RoundResult.PUSH:
            return stake
        return Decimal("0")

    def _finish_round(self) -> None:
        """Close the round and flag a broke table."""
        self.events.emit_new(
            EventType.ROUND_ENDED,
            results={s.name: s.result.value for s in self.seats if s.in_round},
            payout=float(sum((s.payout for s in self.seats), Decimal("0"))),
            dealer_value=self.dealer_hand.value,
        )
        logger.info(
            "Round over: %s",
            ", ".join(f"{s.name}={s.result.value}" for s in self.seats if s.in_round),
        )

        self.round_over()

        if all(s.bankroll <= 0 for s in self.seats):
            self.events.emit_new(EventType.GAME_ENDED, reason="bankrupt")

    def new_game(self) -> bool:
        """
        Start the next round with a fresh shoe.

        Bankrolls carry over. Callers should not offer this when the table is
        bankrupt, since no bet could be placed.
        """
        if not self._require_phase(GamePhase.GAME_OVER, "start a new game"):
            return False

        self.shoe = create_shoe(self._rng)
        self.events.emit_new(EventType.SHOE_SHUFFLED)

        self.dealer_hand.clear()
        for seat in self.seats:
            seat.reset()
        self.active_seat = None
        self.message = DealerMessage.WELCOME

        self.reset_round()
        return True

    @property
    def can_bet(self) -> bool:
        """Check if betting is open."""
        return self.phase == GamePhase.BETTING

    @property
    def can_hit(self) -> bool:
        """Check if hitting is allowed."""
        return self.phase == GamePhase.PLAYING and self.active_seat is not None

    @property
    def can_stand(self) -> bool:
        """Check if standing is allowed."""
        return self.can_hit

    @property
    def can_start_new_game(self) -> bool:
        """Check if a new round may be offered."""
        return self.phase == GamePhase.GAME_OVER and any(s.bankroll > 0 for s in self.seats)
