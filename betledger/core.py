"""
Core types and pure functions for the betting settlement ledger.

This module provides the foundational data structures for the ledger:
1. Constants: configuration defaults, rounding and formatting tokens
2. Enums: Side, OperationType, ExecuteResult
3. Exceptions: LedgerError and domain-specific error types
4. Immutable data structures: Match, Operation
5. Pure formatting: format_operation for the illegal-operation record

All functions in this module are pure. Nothing here mutates ledger state.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Optional


# ============================================================================
# CONSTANTS
# ============================================================================

# Default input/output locations used by the command-line interface.
DEFAULT_MATCH_DATA_PATH = "resources/match_data.txt"
DEFAULT_PLAYER_DATA_PATH = "resources/player_data.txt"
DEFAULT_RESULT_PATH = "result.txt"

# Win rate is reported with two fractional digits, rounded half-up.
WIN_RATE_PLACES = 2
WIN_RATE_ROUNDING = ROUND_HALF_UP

# A drawn match returns the stake at parity.
DRAW_MULTIPLIER = Decimal("1")

# Placeholder written for empty match id / bet side in the illegal-operation record.
NULL_TOKEN = "null"

# Input record field separator and report decimal separator.
FIELD_SEPARATOR = ","
DECIMAL_SEPARATOR = ","


# ============================================================================
# ENUMS
# ============================================================================

class Side(Enum):
    """
    Side of a match.

    A match winner is any of the three values; a bet can only be placed on A or B.
    """
    A = "A"
    B = "B"
    DRAW = "DRAW"


class OperationType(Enum):
    """Kind of account operation found in the operation log."""
    DEPOSIT = "DEPOSIT"
    WITHDRAW = "WITHDRAW"
    BET = "BET"


class ExecuteResult(Enum):
    """
    Outcome of executing one operation against the ledger.

    APPLIED: The operation was valid and the player's account was updated.
    DISQUALIFIED: Insufficient funds for a withdrawal or bet. The player is
                  frozen and the operation is recorded as its first offense.
    SKIPPED: The player was already frozen; the operation was ignored.
    FATAL: Corrupt input (negative amount, unknown match, duplicate bet).
           The whole run is aborted and no report is produced.
    """
    APPLIED = "applied"
    DISQUALIFIED = "disqualified"
    SKIPPED = "skipped"
    FATAL = "fatal"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    pass


class FatalLedgerError(LedgerError):
    """Raised when corrupt input aborts the whole settlement run."""
    pass


class MatchNotFound(FatalLedgerError):
    """Raised when a bet references a match id that was never loaded."""
    pass


class NegativeCoinAmount(FatalLedgerError):
    """Raised when an operation carries a negative coin amount."""
    pass


class DuplicateBet(FatalLedgerError):
    """Raised when a player bets more than once on the same match."""
    pass


class PlayerNotFound(LedgerError):
    """Raised when querying a player id the ledger has never seen."""
    pass


class ParseError(LedgerError):
    """Raised when an input record cannot be parsed."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class InvalidSide(ValueError):
    """Raised when a payout is requested for a side that is neither A nor B."""
    pass


# ============================================================================
# CORE DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True, slots=True)
class Match:
    """
    A settled match with its payout multipliers.

    Attributes:
        match_id: Unique match identifier (canonical UUID string).
        a_multiplier: Return per unit staked on side A when A wins.
        b_multiplier: Return per unit staked on side B when B wins.
        winner: Side.A, Side.B or Side.DRAW.

    Multipliers are held as Decimal so that payouts are computed on the exact
    decimal value read from input. Floats are converted via str().
    """
    match_id: str
    a_multiplier: Decimal
    b_multiplier: Decimal
    winner: Side

    def __post_init__(self):
        if not self.match_id or not self.match_id.strip():
            raise ValueError("Match id cannot be empty")
        if not isinstance(self.winner, Side):
            object.__setattr__(self, 'winner', Side(self.winner))
        for name in ('a_multiplier', 'b_multiplier'):
            value = getattr(self, name)
            if not isinstance(value, Decimal):
                value = Decimal(str(value))
                object.__setattr__(self, name, value)
            if value.is_nan() or value.is_infinite():
                raise ValueError(f"Match {name} must be finite, got {value}")

    @property
    def is_draw(self) -> bool:
        return self.winner is Side.DRAW

    def payout_multiplier(self, side: Side) -> Decimal:
        """
        Return the multiplier paid on a winning stake placed on ``side``.

        A drawn match returns the stake at parity (1) whatever the side.

        Raises:
            InvalidSide: If side is not Side.A or Side.B.
        """
        if self.is_draw:
            return DRAW_MULTIPLIER
        if side is Side.A:
            return self.a_multiplier
        if side is Side.B:
            return self.b_multiplier
        raise InvalidSide(f"Invalid side: {side}")

    def __repr__(self) -> str:
        return f"Match({self.match_id}: A={self.a_multiplier} B={self.b_multiplier} winner={self.winner.value})"


@dataclass(frozen=True, slots=True)
class Operation:
    """
    A single entry of the operation log, already tokenized.

    Attributes:
        player_id: Player the operation applies to.
        operation_type: DEPOSIT, WITHDRAW or BET.
        coin_amount: Whole number of coins. Negative amounts are accepted here
                     and rejected by the ledger as a fatal error.
        match_id: Match the bet is placed on (BET only).
        bet_side: Side.A or Side.B (BET only).
    """
    player_id: str
    operation_type: OperationType
    coin_amount: int
    match_id: Optional[str] = None
    bet_side: Optional[Side] = None

    def __post_init__(self):
        if not self.player_id or not self.player_id.strip():
            raise ValueError("Operation player_id cannot be empty")
        if not isinstance(self.operation_type, OperationType):
            object.__setattr__(self, 'operation_type', OperationType(self.operation_type))
        if self.bet_side is not None and not isinstance(self.bet_side, Side):
            object.__setattr__(self, 'bet_side', Side(self.bet_side))
        if isinstance(self.coin_amount, bool) or not isinstance(self.coin_amount, int):
            raise ValueError(f"Operation coin_amount must be int, got {type(self.coin_amount)}")
        if self.operation_type is OperationType.BET:
            if not self.match_id:
                raise ValueError("BET operation requires a match_id")
            if self.bet_side not in (Side.A, Side.B):
                raise ValueError(f"BET operation requires side A or B, got {self.bet_side}")

    def __repr__(self) -> str:
        return f"Operation({format_operation(self)})"


# ============================================================================
# FORMATTING
# ============================================================================

def format_operation(operation: Operation) -> str:
    """
    Render an operation as the space-joined record used in the report.

    Empty match id and bet side fields are written as the literal "null":

        "<player_id> <TYPE> <match_id|null> <coin_amount> <side|null>"
    """
    match_id = operation.match_id or NULL_TOKEN
    bet_side = operation.bet_side.value if operation.bet_side is not None else NULL_TOKEN
    return " ".join((
        operation.player_id,
        operation.operation_type.value,
        match_id,
        str(operation.coin_amount),
        bet_side,
    ))
