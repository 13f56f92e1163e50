"""
report.py - Settlement Report Builder

Turns the final player map into the three-section settlement report:

1. Legitimate players as (id, balance, win rate), sorted by id string
2. Illegitimate players as their first illegal operation, sorted by id string
3. House balance change = -(sum of legitimate players' bet returns)

Sorting by the id string makes the report byte-for-byte reproducible for
identical input. Serialization lives in io.py.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Mapping, Tuple

from .account import PlayerAccount


@dataclass(frozen=True, slots=True)
class PlayerSummary:
    """Report line of a legitimate player."""
    player_id: str
    balance: int
    win_rate: Decimal


@dataclass(frozen=True, slots=True)
class SettlementReport:
    """
    Immutable settlement report.

    Attributes:
        legitimate: Summaries of never-frozen players, sorted by id
        illegitimate: First illegal operation of each frozen player, sorted by player id
        house_balance_change: Signed coins the house won (positive) or lost (negative)
    """
    legitimate: Tuple[PlayerSummary, ...]
    illegitimate: Tuple[str, ...]
    house_balance_change: int


def build_report(players: Mapping[str, PlayerAccount]) -> SettlementReport:
    """
    Build the settlement report from the final player map.

    Args:
        players: Mapping from player id to final account

    Returns:
        SettlementReport with deterministic ordering
    """
    ordered = [players[player_id] for player_id in sorted(players, key=str)]
    legitimate = [account for account in ordered if account.legitimate]
    illegitimate = [account for account in ordered if not account.legitimate]

    return SettlementReport(
        legitimate=tuple(
            PlayerSummary(account.player_id, account.balance, account.win_rate)
            for account in legitimate
        ),
        illegitimate=tuple(account.first_illegal_operation for account in illegitimate),
        house_balance_change=calculate_house_balance_change(players),
    )


def calculate_house_balance_change(players: Mapping[str, PlayerAccount]) -> int:
    """
    Return the house's net change: the inverse of what legitimate players netted on bets.

    Frozen players are excluded; their bets are treated as void.
    """
    return -sum(
        players[player_id].total_bet_returns
        for player_id in sorted(players, key=str)
        if players[player_id].legitimate
    )


def verify_house_balance(
    report: SettlementReport,
    players: Mapping[str, PlayerAccount],
) -> Dict[str, Any]:
    """
    Verify that the house change in ``report`` mirrors the players' bet returns.

    Conservation law: for legitimate players,

        house_balance_change + sum(total_bet_returns) == 0

    Returns:
        Dict with keys:
        - 'valid': bool - True if the conservation law holds
        - 'expected': int - house change recomputed from the accounts
        - 'actual': int - house change stated in the report

    Example:
        result = verify_house_balance(report, ledger.players)
        assert result['valid'], f"Conservation violated: {result}"
    """
    expected = calculate_house_balance_change(players)
    return {
        'valid': expected == report.house_balance_change,
        'expected': expected,
        'actual': report.house_balance_change,
    }
