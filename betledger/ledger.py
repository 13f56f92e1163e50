"""
ledger.py - Stateful Settlement Ledger

The BetLedger class is the Ledger Processor of the settlement engine.
It is the only module that mutates state, ensuring controlled and auditable changes.

Key responsibilities:
    - Owns the match registry (read-only after construction) and the player map
    - Replays operations strictly in input order, creating players lazily
    - Distinguishes per-player disqualification from run-aborting fatal input
    - Logs every state-changing operation (clone, state_at)
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .core import (
    # Types
    Match, Operation, OperationType, ExecuteResult,
    # Exceptions
    LedgerError, FatalLedgerError, MatchNotFound, NegativeCoinAmount,
    DuplicateBet, PlayerNotFound,
    # Helper functions
    format_operation,
)
from .account import (
    PlayerAccount,
    new_account, apply_deposit, apply_withdraw, apply_bet, mark_illegitimate,
)
from .report import SettlementReport, build_report


# Exception type matching each fatal reason code.
_FATAL_ERRORS = {
    'negative_amount': NegativeCoinAmount,
    'match_not_found': MatchNotFound,
    'duplicate_bet': DuplicateBet,
}


@dataclass(frozen=True, slots=True)
class OperationOutcome:
    """
    Result of executing one operation.

    Attributes:
        result: APPLIED, DISQUALIFIED, SKIPPED or FATAL
        player_id: Player the operation referenced
        reason: Human-readable explanation (empty for APPLIED)
        code: Machine-readable reason code for FATAL outcomes
              ('negative_amount', 'match_not_found', 'duplicate_bet')
    """
    result: ExecuteResult
    player_id: str
    reason: str = ""
    code: Optional[str] = None

    @property
    def is_fatal(self) -> bool:
        return self.result is ExecuteResult.FATAL

    def to_exception(self) -> FatalLedgerError:
        """Return the FatalLedgerError subclass matching this outcome."""
        if not self.is_fatal:
            raise ValueError(f"Outcome {self.result.value} is not fatal")
        return _FATAL_ERRORS.get(self.code, FatalLedgerError)(self.reason)


@dataclass(frozen=True, slots=True)
class LedgerEntry:
    """
    Executed, immutable record of an account state change.

    Attributes:
        sequence_number: Monotonic sequence within the ledger (for ordering)
        operation: The operation that was executed
        result: APPLIED or DISQUALIFIED
        old_state: Account before the operation (None for a new player)
        new_state: Account after the operation
    """
    sequence_number: int
    operation: Operation
    result: ExecuteResult
    old_state: Optional[PlayerAccount]
    new_state: PlayerAccount

    def __repr__(self) -> str:
        return f"LedgerEntry(#{self.sequence_number} {self.result.value}: {format_operation(self.operation)})"


@dataclass(frozen=True, slots=True)
class ReplayResult:
    """
    Summary of replaying an operation sequence.

    Attributes:
        processed: Number of operations executed (including the fatal one)
        counts: Number of outcomes per ExecuteResult
        fatal: The outcome that aborted the replay, or None
    """
    processed: int
    counts: Mapping[ExecuteResult, int]
    fatal: Optional[OperationOutcome] = None

    @property
    def completed(self) -> bool:
        return self.fatal is None


class BetLedger:
    """
    Settlement ledger replaying player operations against a fixed match set.

    Design Principles:
        - Explicit state: matches and players are owned by the instance,
          nothing is shared across runs.
        - Explicit results: execute() returns an OperationOutcome instead of
          raising, so callers decide how to react to FATAL input.
        - Latching abort: after a FATAL outcome the ledger refuses all
          further operations and no report can be built.

    Thread Safety:
        Not thread-safe. Each run should use its own BetLedger instance.

    Example:
        ledger = BetLedger("main", matches)
        result = ledger.replay(operations)
        if result.completed:
            report = ledger.build_report()
    """

    def __init__(
        self,
        name: str,
        matches: Union[Mapping[str, Match], Iterable[Match]] = (),
        verbose: bool = True,
    ):
        """
        Create a ledger.

        Args:
            name: Ledger identifier
            matches: Match registry, either keyed by id or as an iterable of Match
            verbose: Print one line per disqualified, skipped or fatal operation
        """
        self.name = name
        self.verbose = verbose
        self.matches: Dict[str, Match] = {}
        self.players: Dict[str, PlayerAccount] = {}
        self.transaction_log: List[LedgerEntry] = []
        self._fatal: Optional[OperationOutcome] = None
        self._next_sequence: int = 0

        items = matches.values() if isinstance(matches, Mapping) else matches
        for match in items:
            self.register_match(match)

    # ========================================================================
    # READ-ONLY QUERIES
    # ========================================================================

    @property
    def aborted(self) -> bool:
        """True once a FATAL operation has been seen."""
        return self._fatal is not None

    @property
    def fatal_outcome(self) -> Optional[OperationOutcome]:
        return self._fatal

    def get_match(self, match_id: str) -> Match:
        if match_id not in self.matches:
            raise MatchNotFound(f"Match {match_id} not found!")
        return self.matches[match_id]

    def get_player(self, player_id: str) -> PlayerAccount:
        """
        Return the account of a player.

        Raises:
            PlayerNotFound: If no operation has referenced this player yet
        """
        if player_id not in self.players:
            raise PlayerNotFound(f"Player {player_id} not found")
        return self.players[player_id]

    def list_players(self) -> List[str]:
        """List all known player ids in report order."""
        return sorted(self.players.keys())

    def players_snapshot(self) -> Mapping[str, PlayerAccount]:
        """Read-only view of the player map."""
        return MappingProxyType(dict(self.players))

    # ========================================================================
    # REGISTRATION (Mutating)
    # ========================================================================

    def register_match(self, match: Match) -> None:
        """
        Add a match to the registry.

        Raises:
            ValueError: If the match id is already registered
            LedgerError: If operations have already been executed
        """
        if self._next_sequence or self.transaction_log or self.players:
            raise LedgerError("Matches must be registered before replay starts")
        if match.match_id in self.matches:
            raise ValueError(f"Match {match.match_id} already registered")
        self.matches[match.match_id] = match

    # ========================================================================
    # OPERATION EXECUTION (Mutating)
    # ========================================================================

    def execute(self, operation: Operation) -> OperationOutcome:
        """
        Execute a single operation against the player's account.

        Checks performed, in order:
        1. Negative coin amount -> FATAL
        2. Player already frozen -> SKIPPED
        3. Withdrawal or bet over balance -> DISQUALIFIED
        4. Bet on unknown match -> FATAL
        5. Second bet on the same match -> FATAL

        Args:
            operation: Operation to execute

        Returns:
            OperationOutcome describing what happened
        """
        if self._fatal is not None:
            return self._fatal

        player_id = operation.player_id
        if operation.coin_amount < 0:
            return self._abort(OperationOutcome(
                ExecuteResult.FATAL, player_id,
                f"Player operation coin amount is lesser than zero in {format_operation(operation)}",
                'negative_amount',
            ))

        old_state = self.players.get(player_id)
        # stored only once the operation is known not to be fatal
        account = old_state if old_state is not None else new_account(player_id)

        if account.is_frozen:
            outcome = OperationOutcome(
                ExecuteResult.SKIPPED, player_id,
                f"player {player_id} is frozen",
            )
            self._print_outcome(outcome)
            return outcome

        op_type = operation.operation_type
        if op_type is OperationType.DEPOSIT:
            new_state = apply_deposit(account, operation.coin_amount)
        elif op_type is OperationType.WITHDRAW:
            new_state = apply_withdraw(account, operation)
        elif account.balance < operation.coin_amount:
            # unaffordable bets freeze the player before the match is looked up
            new_state = mark_illegitimate(account, operation)
        else:
            valid, code, reason = self._validate_bet(account, operation)
            if not valid:
                return self._abort(OperationOutcome(ExecuteResult.FATAL, player_id, reason, code))
            new_state = apply_bet(account, self.matches[operation.match_id], operation)

        if new_state.is_frozen:
            outcome = OperationOutcome(
                ExecuteResult.DISQUALIFIED, player_id,
                f"insufficient funds: balance {account.balance} < {operation.coin_amount}",
            )
        else:
            outcome = OperationOutcome(ExecuteResult.APPLIED, player_id)

        self.players[player_id] = new_state
        self.transaction_log.append(LedgerEntry(
            sequence_number=self._next_sequence,
            operation=operation,
            result=outcome.result,
            old_state=old_state,
            new_state=new_state,
        ))
        self._next_sequence += 1
        self._print_outcome(outcome)
        return outcome

    def _validate_bet(self, account: PlayerAccount, operation: Operation) -> Tuple[bool, Optional[str], str]:
        """
        Validate an affordable bet against the match registry and the player's bet history.

        Returns:
            Tuple of (valid, code, reason). code and reason describe the
            fatal failure when valid is False.
        """
        if operation.match_id not in self.matches:
            return False, 'match_not_found', f"Match {operation.match_id} not found!"
        if account.has_bet_on(operation.match_id):
            return False, 'duplicate_bet', (
                f"Player {account.player_id} tried to bet multiple times "
                f"on match {operation.match_id}"
            )
        return True, None, ""

    def _abort(self, outcome: OperationOutcome) -> OperationOutcome:
        self._fatal = outcome
        self._print_outcome(outcome)
        return outcome

    def _print_outcome(self, outcome: OperationOutcome) -> None:
        if not self.verbose or outcome.result is ExecuteResult.APPLIED:
            return
        if outcome.result is ExecuteResult.SKIPPED:
            print(f"⚠️  SKIPPED: {outcome.reason}")
        else:
            print(f"✗ {outcome.result.name}: {outcome.reason}")

    def replay(self, operations: Iterable[Operation]) -> ReplayResult:
        """
        Execute operations in order, stopping at the first FATAL outcome.

        Args:
            operations: Ordered operation log

        Returns:
            ReplayResult with per-result counts and the fatal outcome, if any
        """
        counts: Counter = Counter()
        processed = 0
        for operation in operations:
            outcome = self.execute(operation)
            processed += 1
            counts[outcome.result] += 1
            if outcome.is_fatal:
                return ReplayResult(processed, dict(counts), outcome)
        return ReplayResult(processed, dict(counts))

    # ========================================================================
    # REPORTING
    # ========================================================================

    def build_report(self) -> SettlementReport:
        """
        Build the settlement report from the current player map.

        Raises:
            FatalLedgerError: If the run was aborted (no partial report)
        """
        if self._fatal is not None:
            raise self._fatal.to_exception()
        return build_report(self.players)

    # ========================================================================
    # LEDGER OPERATIONS
    # ========================================================================

    def clone(self) -> BetLedger:
        """
        Create an independent copy of this ledger.

        Accounts, matches and log entries are immutable, so copying the
        containers is enough for full independence.
        """
        cloned = BetLedger.__new__(BetLedger)
        cloned.name = self.name
        cloned.verbose = self.verbose
        cloned.matches = dict(self.matches)
        cloned.players = dict(self.players)
        cloned.transaction_log = list(self.transaction_log)
        cloned._fatal = self._fatal
        cloned._next_sequence = self._next_sequence
        return cloned

    def state_at(self, sequence_number: int) -> BetLedger:
        """
        Rebuild the ledger as it was after the first ``sequence_number`` log entries.

        The logged operations are re-executed on a fresh ledger with the same
        matches. Skipped operations were never logged and change nothing.

        Raises:
            ValueError: If sequence_number is outside [0, len(transaction_log)]
        """
        if not 0 <= sequence_number <= len(self.transaction_log):
            raise ValueError(
                f"Sequence {sequence_number} outside log of {len(self.transaction_log)} entries"
            )
        rebuilt = BetLedger(f"{self.name}_at_{sequence_number}", self.matches, verbose=self.verbose)
        for entry in self.transaction_log[:sequence_number]:
            outcome = rebuilt.execute(entry.operation)
            if outcome.result is not entry.result:
                raise LedgerError(f"Replay diverged at entry {entry.sequence_number}")
        return rebuilt


# ============================================================================
# ONE-CALL SETTLEMENT
# ============================================================================

@dataclass(frozen=True, slots=True)
class SettlementRun:
    """
    Outcome of a complete settlement run.

    Exactly one of report and fatal is set.
    """
    replay: ReplayResult
    report: Optional[SettlementReport] = None
    fatal: Optional[OperationOutcome] = None

    @property
    def ok(self) -> bool:
        return self.fatal is None

    def raise_for_fatal(self) -> SettlementReport:
        """Return the report, or raise the FatalLedgerError that aborted the run."""
        if self.fatal is not None:
            raise self.fatal.to_exception()
        return self.report


def settle(
    matches: Union[Mapping[str, Match], Iterable[Match]],
    operations: Iterable[Operation],
    name: str = "settlement",
    verbose: bool = False,
) -> SettlementRun:
    """
    Replay ``operations`` against ``matches`` and build the report.

    Args:
        matches: Match registry
        operations: Ordered operation log
        name: Ledger identifier
        verbose: Print diagnostics while replaying

    Returns:
        SettlementRun with either the report or the fatal outcome
    """
    ledger = BetLedger(name, matches, verbose=verbose)
    result = ledger.replay(operations)
    if not result.completed:
        return SettlementRun(replay=result, fatal=result.fatal)
    return SettlementRun(replay=result, report=ledger.build_report())
