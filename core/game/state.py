"""Game phase and result enumerations."""

from enum import Enum


class GamePhase(Enum):
    """
    Game state machine states.

    Flow: BETTING → DEALING → PLAYING → DEALER_TURN → GAME_OVER → BETTING
    """

    # Waiting for bets
    BETTING = "betting"

    # Cards being dealt (transient)
    DEALING = "dealing"

    # Player actions
    PLAYING = "playing"

    # Dealer plays
    DEALER_TURN = "dealer-turn"

    # Round settled, ready for a new game
    GAME_OVER = "game-over"

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()

    @property
    def machine_state(self) -> str:
        """Name of the state inside the transitions machine."""
        return self.name.lower()


class RoundResult(Enum):
    """Outcome of a seat's round."""

    NONE = "none"
    WIN = "win"
    LOSE = "lose"
    PUSH = "push"
    BLACKJACK = "blackjack"


class SeatStatus(Enum):
    """Where a seat is within the current round."""

    WAITING = "waiting"
    PLAYING = "playing"
    STOOD = "stood"
    BUSTED = "busted"
    SETTLED = "settled"


class DealerMessage:
    """Lines the dealer says at each point of a round."""

    WELCOME = "Welcome to my table! Place your bet to start."
    DEALING = "Dealing the cards..."
    PLAYER_TURN = "Your move. Hit or stand?"
    DEALER_TURN = "Dealer must hit on 16 and stand on 17."
    PLAYER_WIN = "Well played! You win this hand."
    PLAYER_LOSE = "House wins. Better luck next time!"
    PUSH = "It's a push. Your bet is returned."
    BLACKJACK = "Blackjack! Outstanding play!"
    BUST = "Bust! The house always wins."
    DEALER_BUST = "Dealer busts! You win this round."
    NEXT_SEAT = "Next player. Hit or stand?"
    INSUFFICIENT_FUNDS = "You don't have enough money for this bet."
