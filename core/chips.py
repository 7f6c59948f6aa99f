"""Chip-based bet building."""

from decimal import Decimal
from typing import Iterable

CHIP_VALUES: tuple[int, ...] = (5, 10, 25, 50, 100)


def chips_for(amount: int, chip_values: Iterable[int] = CHIP_VALUES) -> list[int]:
    """
    Break an amount into chips, largest denomination first.

    Any remainder smaller than the smallest chip is left out.
    """
    chips: list[int] = []
    remaining = amount
    for value in sorted(chip_values, reverse=True):
        count, remaining = divmod(remaining, value)
        chips.extend([value] * count)
    return chips


class BetSlip:
    """
    A bet assembled from chips before it is placed.

    The slip never exceeds the bankroll it was opened against.
    """

    def __init__(
        self,
        bankroll: Decimal | int,
        chip_values: Iterable[int] = CHIP_VALUES,
    ) -> None:
        self._bankroll = Decimal(bankroll)
        self._chip_values = tuple(sorted(chip_values))
        self._amount = 0

    @property
    def amount(self) -> int:
        """Total of the chips on the slip."""
        return self._amount

    @property
    def chip_values(self) -> tuple[int, ...]:
        return self._chip_values

    def can_add(self, value: int) -> bool:
        """Check if a chip is on offer and still affordable."""
        return value in self._chip_values and self._amount + value <= self._bankroll

    def add_chip(self, value: int) -> bool:
        """
        Add a chip to the slip.

        Returns:
            True if the chip was added
        """
        if not self.can_add(value):
            return False
        self._amount += value
        return True

    def clear(self) -> None:
        """Take every chip back."""
        self._amount = 0

    def all_in(self) -> None:
        """Bet the whole bankroll, rounded down to a whole unit."""
        self._amount = int(self._bankroll)

    def __repr__(self) -> str:
        return f"BetSlip(amount={self._amount}, bankroll={self._bankroll})"
