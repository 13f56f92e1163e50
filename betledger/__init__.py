"""
betledger - Betting Settlement Ledger

Replays a chronological log of player operations (deposits, withdrawals,
bets) against a fixed set of settled matches and produces a settlement
report: balances and win rates of legitimate players, the first offending
operation of disqualified players, and the net change for the house.

Usage:
    from betledger import BetLedger, Match, Operation, OperationType, Side

    matches = [Match("m1", "1.5", "2.5", Side.A)]
    ledger = BetLedger("main", matches, verbose=False)
    ledger.execute(Operation("alice", OperationType.DEPOSIT, 100))
    ledger.execute(Operation("alice", OperationType.BET, 40, "m1", Side.A))
    report = ledger.build_report()
"""

__version__ = '1.0.0'

# Core types
from .core import (
    Match,
    Operation,
    Side,
    OperationType,
    ExecuteResult,
    LedgerError,
    FatalLedgerError,
    MatchNotFound,
    NegativeCoinAmount,
    DuplicateBet,
    PlayerNotFound,
    ParseError,
    InvalidSide,
    format_operation,
)

# Accounts
from .account import (
    PlayerAccount,
    new_account,
    calculate_bet_return,
    calculate_win_rate,
    apply_deposit,
    apply_withdraw,
    apply_bet,
    mark_illegitimate,
)

# Ledger
from .ledger import (
    BetLedger,
    LedgerEntry,
    OperationOutcome,
    ReplayResult,
    SettlementRun,
    settle,
)

# Report
from .report import (
    PlayerSummary,
    SettlementReport,
    build_report,
    calculate_house_balance_change,
    verify_house_balance,
)

# I/O
from .io import (
    parse_match_line,
    parse_operation_line,
    parse_matches,
    parse_operations,
    load_matches,
    load_operations,
    format_report,
    write_report,
)

__all__ = [
    # Core
    'Match', 'Operation', 'Side', 'OperationType', 'ExecuteResult',
    'LedgerError', 'FatalLedgerError', 'MatchNotFound', 'NegativeCoinAmount',
    'DuplicateBet', 'PlayerNotFound', 'ParseError', 'InvalidSide',
    'format_operation',
    # Accounts
    'PlayerAccount', 'new_account', 'calculate_bet_return', 'calculate_win_rate',
    'apply_deposit', 'apply_withdraw', 'apply_bet', 'mark_illegitimate',
    # Ledger
    'BetLedger', 'LedgerEntry', 'OperationOutcome', 'ReplayResult',
    'SettlementRun', 'settle',
    # Report
    'PlayerSummary', 'SettlementReport', 'build_report',
    'calculate_house_balance_change', 'verify_house_balance',
    # I/O
    'parse_match_line', 'parse_operation_line', 'parse_matches', 'parse_operations',
    'load_matches', 'load_operations', 'format_report', 'write_report',
]
