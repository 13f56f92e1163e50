"""
Conservation Conformance Tests

INVARIANT: Coins only move through deposits, withdrawals and settled bets.

    ∀ legitimate player p:
        balance(p) = Σ deposits(p) - Σ withdrawals(p) + total_bet_returns(p)

The house is the counterparty of every legitimate bet:

    house_balance_change = -Σ_{p legitimate} total_bet_returns(p)
"""

from collections import defaultdict

from hypothesis import given, settings

from betledger import (
    BetLedger, ExecuteResult, OperationType, Side,
    calculate_bet_return, verify_house_balance,
)

from .strategies import MATCHES, operation_log


class TestConservationProperties:
    """Property-based conservation tests."""

    @given(operation_log(unique_bets=True))
    @settings(max_examples=200)
    def test_balance_reconciles_with_operations(self, ops):
        """
        PROPERTY: A legitimate balance is fully explained by its applied
        deposits, withdrawals and bet returns.
        """
        ledger = BetLedger("test", MATCHES, verbose=False)
        deposits = defaultdict(int)
        withdrawals = defaultdict(int)
        returns = defaultdict(int)

        for op in ops:
            outcome = ledger.execute(op)
            assert not outcome.is_fatal
            if outcome.result is not ExecuteResult.APPLIED:
                continue
            if op.operation_type is OperationType.DEPOSIT:
                deposits[op.player_id] += op.coin_amount
            elif op.operation_type is OperationType.WITHDRAW:
                withdrawals[op.player_id] += op.coin_amount
            else:
                returns[op.player_id] += calculate_bet_return(
                    MATCHES[op.match_id], op.bet_side, op.coin_amount
                )

        for player_id, account in ledger.players.items():
            if account.is_frozen:
                continue
            assert account.total_bet_returns == returns[player_id]
            assert account.balance == deposits[player_id] - withdrawals[player_id] + returns[player_id]
            assert account.balance >= 0

    @given(operation_log(unique_bets=True))
    @settings(max_examples=200)
    def test_house_balance_mirrors_players(self, ops):
        """
        PROPERTY: The report's house change is the negated sum of legitimate
        bet returns.
        """
        ledger = BetLedger("test", MATCHES, verbose=False)
        assert ledger.replay(ops).completed
        report = ledger.build_report()

        result = verify_house_balance(report, ledger.players)
        assert result['valid'], f"House balance mismatch: {result}"
        expected = -sum(a.total_bet_returns for a in ledger.players.values() if a.legitimate)
        assert report.house_balance_change == expected

    @given(operation_log(unique_bets=True))
    @settings(max_examples=100)
    def test_every_player_in_exactly_one_section(self, ops):
        """
        PROPERTY: Each player appears once, in the legitimate or the
        illegitimate section.
        """
        ledger = BetLedger("test", MATCHES, verbose=False)
        ledger.replay(ops)
        report = ledger.build_report()

        legitimate = {s.player_id for s in report.legitimate}
        frozen = {pid for pid, a in ledger.players.items() if a.is_frozen}
        assert legitimate.isdisjoint(frozen)
        assert legitimate | frozen == set(ledger.players)
        assert len(report.illegitimate) == len(frozen)


class TestBetReturnExamples:

    def test_winning_bet_floors(self):
        assert calculate_bet_return(MATCHES["m1"], Side.A, 41) == 61
        assert calculate_bet_return(MATCHES["m2"], Side.B, 10) == 31

    def test_losing_bet(self):
        assert calculate_bet_return(MATCHES["m1"], Side.B, 41) == -41

    def test_draw(self):
        assert calculate_bet_return(MATCHES["m3"], Side.A, 41) == 0
        assert calculate_bet_return(MATCHES["m3"], Side.B, 41) == 0
