"""Pytest fixtures for blackjack tests."""

import pytest
from random import Random

from core.cards import Card, Shoe, create_shoe
from core.hand import Hand
from core.rules import TableRules
from core.game import BlackjackGame


def cards(*codes: str) -> list[Card]:
    """Build cards from short strings like 'AS', '10h'."""
    return [Card.from_string(code) for code in codes]


def scripted_shoe(*codes: str) -> Shoe:
    """A shoe that deals the given cards in the order listed."""
    return Shoe.from_cards(reversed(cards(*codes)))


def initial_deal(player: tuple[str, str], dealer_up: str, dealer_hole: str, *rest: str) -> Shoe:
    """
    Script a single-seat round.

    The deal order is player, player, dealer hole card, dealer up card, then
    every later hit in ``rest``.
    """
    return scripted_shoe(player[0], player[1], dealer_hole, dealer_up, *rest)


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def shoe(rng):
    """A shuffled shoe."""
    return create_shoe(rng)


@pytest.fixture
def empty_hand():
    """An empty player hand."""
    return Hand()


@pytest.fixture
def blackjack_hand():
    """A natural blackjack hand."""
    return Hand(cards("AS", "KH"))


@pytest.fixture
def soft_17_hand():
    """A soft 17 hand (A-6)."""
    return Hand(cards("AS", "6H"))


@pytest.fixture
def hard_16_hand():
    """A hard 16 hand (10-6)."""
    return Hand(cards("10S", "6H"))


@pytest.fixture
def bust_hand():
    """A busted hand."""
    return Hand(cards("10S", "6H", "KC"))


@pytest.fixture
def rules():
    """Default table rules."""
    return TableRules()


@pytest.fixture
def game(rng):
    """A new single-seat game instance."""
    return BlackjackGame(rng=rng)


@pytest.fixture
def manual_game(rng):
    """A game that stops in the dealing and dealer-turn phases."""
    return BlackjackGame(rng=rng, auto_advance=False)


@pytest.fixture
def rig():
    """Script a single-seat round: ``rig(("AS", "KH"), "9C", "8D", *hits)``."""
    return initial_deal


@pytest.fixture
def stack():
    """Build a shoe dealing the given card codes in order."""
    return scripted_shoe
