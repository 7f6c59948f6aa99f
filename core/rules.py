"""Table rules."""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class TableRules:
    """
    Blackjack table rules configuration.

    The dealer always stands on every 17, soft or hard.
    """

    # Starting bankroll for every seat
    initial_bankroll: Decimal = Decimal("1000")

    # Blackjack profit ratio (3:2 = 1.5)
    blackjack_payout: Decimal = Decimal("1.5")

    # Dealer draws while below this total
    dealer_stands_on: int = 17

    def __post_init__(self) -> None:
        """Validate rule combinations."""
        if self.initial_bankroll < 0:
            raise ValueError("initial_bankroll cannot be negative")
        if self.blackjack_payout < 1:
            raise ValueError("blackjack_payout must be at least 1.0")
        if not 2 <= self.dealer_stands_on <= 21:
            raise ValueError("dealer_stands_on must be between 2 and 21")

    @property
    def win_multiplier(self) -> Decimal:
        """Stake returned plus even-money profit."""
        return Decimal("2")

    @property
    def blackjack_multiplier(self) -> Decimal:
        """Stake returned plus blackjack profit."""
        return 1 + self.blackjack_payout
