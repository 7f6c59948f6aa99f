"""Tests for table rules and phases."""

from decimal import Decimal

import pytest

from core.game import BlackjackGame, GamePhase
from core.rules import TableRules


class TestTableRules:
    """Tests for TableRules."""

    def test_defaults(self, rules):
        """Test the standard table."""
        assert rules.initial_bankroll == 1000
        assert rules.blackjack_payout == Decimal("1.5")
        assert rules.dealer_stands_on == 17
        assert rules.win_multiplier == 2
        assert rules.blackjack_multiplier == Decimal("2.5")

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"initial_bankroll": Decimal("-1")},
            {"blackjack_payout": Decimal("0.5")},
            {"dealer_stands_on": 22},
        ],
    )
    def test_invalid_rules(self, kwargs):
        """Test impossible rule combinations are refused."""
        with pytest.raises(ValueError):
            TableRules(**kwargs)


class TestGamePhase:
    """Tests for GamePhase."""

    def test_values(self):
        """Test the wire names of each phase."""
        assert [p.value for p in GamePhase] == [
            "betting",
            "dealing",
            "playing",
            "dealer-turn",
            "game-over",
        ]

    def test_str(self):
        """Test the display name."""
        assert str(GamePhase.DEALER_TURN) == "Dealer Turn"

    @pytest.mark.parametrize(
        "phase, triggers",
        [
            (GamePhase.BETTING, {"bet_placed", "bets_closed"}),
            (GamePhase.DEALING, {"cards_dealt"}),
            (GamePhase.PLAYING, {"player_action", "player_done", "round_over"}),
            (GamePhase.DEALER_TURN, {"round_over"}),
            (GamePhase.GAME_OVER, {"reset_round"}),
        ],
    )
    def test_machine_triggers(self, phase, triggers):
        """Test which moves the engine's state machine allows from each phase."""
        machine = BlackjackGame().machine
        assert set(machine.get_triggers(phase.machine_state)) == triggers

    def test_every_phase_is_a_machine_state(self):
        """Test phases and machine states line up one to one."""
        assert set(BlackjackGame().machine.states) == {p.machine_state for p in GamePhase}
