"""
test_report.py - Unit tests for the settlement report builder

Tests:
- Section contents and ordering
- House balance change
- verify_house_balance conservation check
"""

from decimal import Decimal

from betledger import (
    BetLedger, Match, Operation, OperationType, Side, PlayerAccount,
    build_report, calculate_house_balance_change, verify_house_balance,
    SettlementReport,
)


def _account(player_id: str, **kwargs) -> PlayerAccount:
    return PlayerAccount(player_id=player_id, **kwargs)


class TestBuildReport:

    def test_empty(self):
        report = build_report({})
        assert report == SettlementReport((), (), 0)

    def test_sections_split_by_legitimacy(self):
        players = {
            "p1": _account("p1", balance=100),
            "p2": _account("p2", legitimate=False, first_illegal_operation="p2 WITHDRAW null 5 null"),
        }
        report = build_report(players)
        assert [s.player_id for s in report.legitimate] == ["p1"]
        assert report.illegitimate == ("p2 WITHDRAW null 5 null",)

    def test_sorted_by_id_string(self):
        ids = ["f0", "0a", "a0", "09"]
        players = {pid: _account(pid) for pid in ids}
        report = build_report(players)
        assert [s.player_id for s in report.legitimate] == ["09", "0a", "a0", "f0"]

    def test_illegitimate_sorted_by_player_id(self):
        players = {
            "b": _account("b", legitimate=False, first_illegal_operation="b WITHDRAW null 1 null"),
            "a": _account("a", legitimate=False, first_illegal_operation="a WITHDRAW null 9 null"),
        }
        report = build_report(players)
        assert report.illegitimate == ("a WITHDRAW null 9 null", "b WITHDRAW null 1 null")

    def test_summary_fields(self):
        players = {"p1": _account("p1", balance=42, total_bets=3, bets_won=2)}
        summary = build_report(players).legitimate[0]
        assert summary.balance == 42
        assert summary.win_rate == Decimal("0.67")

    def test_no_bets_win_rate_zero(self):
        summary = build_report({"p1": _account("p1", balance=5)}).legitimate[0]
        assert summary.win_rate == 0


class TestHouseBalance:

    def test_winner_and_loser(self):
        """One player nets +50, another nets -30: the house changes by -20."""
        ledger = BetLedger("test", [Match("half", "0.5", "2", Side.A)], verbose=False)
        ledger.replay([
            Operation("winner", OperationType.DEPOSIT, 100),
            Operation("winner", OperationType.BET, 100, "half", Side.A),
            Operation("loser", OperationType.DEPOSIT, 100),
            Operation("loser", OperationType.BET, 30, "half", Side.B),
        ])
        assert ledger.get_player("winner").total_bet_returns == 50
        assert ledger.get_player("loser").total_bet_returns == -30
        assert ledger.build_report().house_balance_change == -20

    def test_house_change_from_accounts(self):
        players = {
            "winner": _account("winner", total_bet_returns=50),
            "loser": _account("loser", total_bet_returns=-30),
        }
        assert calculate_house_balance_change(players) == -20
        assert build_report(players).house_balance_change == -20

    def test_frozen_players_excluded(self):
        players = {
            "p1": _account("p1", total_bet_returns=70),
            "p2": _account("p2", total_bet_returns=-500, legitimate=False,
                           first_illegal_operation="p2 BET m 1 A"),
        }
        assert calculate_house_balance_change(players) == -70

    def test_house_wins(self):
        players = {"p1": _account("p1", total_bet_returns=-45)}
        assert calculate_house_balance_change(players) == 45


class TestVerifyHouseBalance:

    def test_valid(self):
        players = {"p1": _account("p1", total_bet_returns=10)}
        result = verify_house_balance(build_report(players), players)
        assert result == {'valid': True, 'expected': -10, 'actual': -10}

    def test_discrepancy(self):
        players = {"p1": _account("p1", total_bet_returns=10)}
        tampered = SettlementReport((), (), 99)
        result = verify_house_balance(tampered, players)
        assert result['valid'] is False
        assert result['expected'] == -10
        assert result['actual'] == 99
