"""
account.py - Player Account State Machine

This module models a player's account using a pure function architecture
with explicit inputs.

ARCHITECTURE (Pure Function Pattern):
=====================================

1. FROZEN DATACLASS (explicit state):
   - PlayerAccount: Immutable snapshot of one player's account.
     Each transition creates a NEW instance (value semantics).

2. PURE CALCULATION FUNCTIONS (calculate_*):
   - calculate_bet_return: payout math for a single settled bet
   - calculate_win_rate: bets won / total bets, two places, half-up

3. PURE TRANSITION FUNCTIONS (apply_*):
   - Take (account, operation inputs) and return the next account
   - A frozen account is returned unchanged by every transition
   - Insufficient funds freezes the account and records the operation

States:
    ACTIVE  --(withdraw/bet over balance)-->  FROZEN

The transition is one-directional. A frozen account never changes again.

Key Formulas:
    winning bet:  bet_return = floor(amount * match.payout_multiplier(side))
    losing bet:   bet_return = -amount
    drawn match:  bet_return = 0
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import FrozenSet, Optional
import math

from .core import (
    Match, Operation, Side,
    DuplicateBet,
    WIN_RATE_PLACES, WIN_RATE_ROUNDING,
    format_operation,
)


# ============================================================================
# FROZEN DATACLASS - Explicit Account State
# ============================================================================

@dataclass(frozen=True, slots=True)
class PlayerAccount:
    """
    Immutable snapshot of a player's account.

    Attributes:
        player_id: Unique player identifier.
        balance: Current coin balance.
        total_bets: Number of bets placed.
        bets_won: Number of bets whose side won the match.
        legitimate: True until the first balance violation, then False forever.
        first_illegal_operation: Formatted record of the operation that froze
                                 the account (None while legitimate).
        total_bet_returns: Signed sum of net profit/loss over all settled bets.
        matches_bet: Ids of matches this player has already bet on.
    """
    player_id: str
    balance: int = 0
    total_bets: int = 0
    bets_won: int = 0
    legitimate: bool = True
    first_illegal_operation: Optional[str] = None
    total_bet_returns: int = 0
    matches_bet: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def is_frozen(self) -> bool:
        return not self.legitimate

    @property
    def win_rate(self) -> Decimal:
        return calculate_win_rate(self.bets_won, self.total_bets)

    def has_bet_on(self, match_id: str) -> bool:
        return match_id in self.matches_bet


def new_account(player_id: str) -> PlayerAccount:
    """Create an empty, legitimate account."""
    return PlayerAccount(player_id=player_id)


# ============================================================================
# PURE CALCULATION FUNCTIONS
# ============================================================================

def calculate_bet_return(match: Match, side: Side, amount: int) -> int:
    """
    Calculate the signed net return of a single bet.

    PURE FUNCTION - All inputs explicit, no hidden state.

    Args:
        match: The settled match.
        side: Side the stake was placed on (A or B).
        amount: Coins staked.

    Returns:
        floor(amount * multiplier) if the side won, -amount if the other side
        won, 0 if the match was drawn.
    """
    if side is match.winner:
        # math.floor rounds toward negative infinity, also for negative multipliers
        return math.floor(amount * match.payout_multiplier(side))
    if not match.is_draw:
        return -amount
    return 0


def calculate_win_rate(bets_won: int, total_bets: int) -> Decimal:
    """
    Calculate the win rate as a two-place decimal, rounded half-up.

    PURE FUNCTION - All inputs explicit, no hidden state.

    Returns:
        Decimal("0") when no bets were placed, otherwise bets_won / total_bets
        quantized to WIN_RATE_PLACES.
    """
    if total_bets == 0:
        return Decimal("0")
    quantizer = Decimal(10) ** -WIN_RATE_PLACES
    return (Decimal(bets_won) / Decimal(total_bets)).quantize(quantizer, rounding=WIN_RATE_ROUNDING)


# ============================================================================
# PURE TRANSITION FUNCTIONS
# ============================================================================

def mark_illegitimate(account: PlayerAccount, operation: Operation) -> PlayerAccount:
    """
    Freeze the account and record ``operation`` as its first offense.

    Only the first call has an effect; an already frozen account is
    returned unchanged so the original offense is kept.
    """
    if account.is_frozen:
        return account
    return replace(
        account,
        legitimate=False,
        first_illegal_operation=format_operation(operation),
    )


def apply_deposit(account: PlayerAccount, amount: int) -> PlayerAccount:
    """Add ``amount`` coins to the balance."""
    if account.is_frozen:
        return account
    return replace(account, balance=account.balance + amount)


def apply_withdraw(account: PlayerAccount, operation: Operation) -> PlayerAccount:
    """
    Withdraw ``operation.coin_amount`` coins.

    A withdrawal larger than the balance freezes the account instead; the
    balance is left untouched.
    """
    if account.is_frozen:
        return account
    amount = operation.coin_amount
    if account.balance < amount:
        return mark_illegitimate(account, operation)
    return replace(account, balance=account.balance - amount)


def apply_bet(account: PlayerAccount, match: Match, operation: Operation) -> PlayerAccount:
    """
    Place and immediately settle a bet on ``match``.

    A stake larger than the balance freezes the account; the bet is not
    registered.

    Raises:
        DuplicateBet: If the account has already bet on this match.
        ValueError: If the operation does not reference ``match``.
    """
    if account.is_frozen:
        return account
    if operation.match_id != match.match_id:
        raise ValueError(
            f"Operation match {operation.match_id} does not reference match {match.match_id}"
        )
    amount = operation.coin_amount
    if account.balance < amount:
        return mark_illegitimate(account, operation)
    if account.has_bet_on(match.match_id):
        raise DuplicateBet(
            f"Player {account.player_id} tried to bet multiple times on match {match.match_id}"
        )

    side = operation.bet_side
    bet_return = calculate_bet_return(match, side, amount)
    return replace(
        account,
        balance=account.balance + bet_return,
        total_bets=account.total_bets + 1,
        bets_won=account.bets_won + (1 if side is match.winner else 0),
        total_bet_returns=account.total_bet_returns + bet_return,
        matches_bet=account.matches_bet | {match.match_id},
    )
