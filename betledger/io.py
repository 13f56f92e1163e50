"""
io.py - Input and output adapters

Reads the match file and the operation log, and writes the settlement report.
These adapters only tokenize and serialize; all decisions are made by the ledger.

Match file (one record per line):
    <match_id>,<a_multiplier>,<b_multiplier>,<A|B|DRAW>

Operation log (one record per line, trailing empty fields may be absent):
    <player_id>,<DEPOSIT|WITHDRAW|BET>,<match_id or empty>,<coin_amount>,<A|B or empty>

Report:
    <player_id> <balance> <win_rate>        one line per legitimate player
    <blank>
    <first illegal operation>               one line per illegitimate player
    <blank>
    <house_balance_change>

An empty section is written as a single empty line. Win rates use a comma as
decimal separator ("0,50").
"""

from __future__ import annotations
from decimal import Decimal
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union
import re
import uuid

from .core import (
    Match, Operation, OperationType, Side,
    ParseError,
    FIELD_SEPARATOR, DECIMAL_SEPARATOR,
)
from .report import SettlementReport


PathLike = Union[str, Path]

# ASCII digits with an optional leading minus sign.
_COIN_AMOUNT_RE = re.compile(r"-?[0-9]+")
_MULTIPLIER_RE = re.compile(r"-?[0-9]+(?:\.[0-9]+)?")


# ============================================================================
# PARSING
# ============================================================================

def _parse_uuid(value: str, what: str, line_number: Optional[int]) -> str:
    """Return the canonical lowercase string form of a UUID field."""
    try:
        return str(uuid.UUID(value.strip()))
    except ValueError:
        raise ParseError(f"invalid {what} {value!r}", line_number) from None


def _parse_multiplier(value: str, line_number: Optional[int]) -> Decimal:
    value = value.strip()
    if not _MULTIPLIER_RE.fullmatch(value):
        raise ParseError(f"invalid multiplier {value!r}", line_number)
    return Decimal(value)


def parse_match_line(line: str, line_number: Optional[int] = None) -> Match:
    """
    Parse one match record.

    Raises:
        ParseError: If the record is malformed
    """
    fields = line.strip().split(FIELD_SEPARATOR)
    if len(fields) != 4:
        raise ParseError(f"expected 4 match fields, got {len(fields)}", line_number)

    match_id = _parse_uuid(fields[0], "match id", line_number)
    a_multiplier = _parse_multiplier(fields[1], line_number)
    b_multiplier = _parse_multiplier(fields[2], line_number)
    try:
        winner = Side(fields[3].strip())
    except ValueError:
        raise ParseError(f"invalid winner {fields[3].strip()!r}", line_number) from None

    try:
        return Match(match_id, a_multiplier, b_multiplier, winner)
    except ValueError as e:
        raise ParseError(str(e), line_number) from e


def parse_operation_line(line: str, line_number: Optional[int] = None) -> Operation:
    """
    Parse one operation record.

    A negative coin amount is returned as-is; rejecting it is the ledger's job.

    Raises:
        ParseError: If the record is malformed
    """
    fields = line.strip().split(FIELD_SEPARATOR)
    if not 4 <= len(fields) <= 5:
        raise ParseError(f"expected 4 or 5 operation fields, got {len(fields)}", line_number)

    player_id = _parse_uuid(fields[0], "player id", line_number)
    try:
        operation_type = OperationType(fields[1].strip())
    except ValueError:
        raise ParseError(f"invalid operation type {fields[1].strip()!r}", line_number) from None

    raw_match_id = fields[2].strip()
    match_id = _parse_uuid(raw_match_id, "match id", line_number) if raw_match_id else None

    raw_amount = fields[3].strip()
    if not _COIN_AMOUNT_RE.fullmatch(raw_amount):
        raise ParseError(f"invalid coin amount {raw_amount!r}", line_number)
    coin_amount = int(raw_amount)

    raw_side = fields[4].strip() if len(fields) == 5 else ""
    bet_side = None
    if raw_side:
        if raw_side not in (Side.A.value, Side.B.value):
            raise ParseError(f"invalid bet side {raw_side!r}", line_number)
        bet_side = Side(raw_side)

    try:
        return Operation(player_id, operation_type, coin_amount, match_id, bet_side)
    except ValueError as e:
        raise ParseError(str(e), line_number) from e


def parse_matches(lines: Iterable[str]) -> Dict[str, Match]:
    """
    Parse match records into a registry keyed by match id.

    Raises:
        ParseError: On a malformed record or a repeated match id
    """
    matches: Dict[str, Match] = {}
    for line_number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        match = parse_match_line(line, line_number)
        if match.match_id in matches:
            raise ParseError(f"duplicate match id {match.match_id}", line_number)
        matches[match.match_id] = match
    return matches


def parse_operations(lines: Iterable[str]) -> List[Operation]:
    """Parse operation records, preserving input order."""
    return [
        parse_operation_line(line, line_number)
        for line_number, line in enumerate(lines, start=1)
        if line.strip()
    ]


def _read_lines(path: PathLike) -> List[str]:
    """
    Read a UTF-8 text file as a list of lines.

    Raises:
        OSError: If the file cannot be read
        ParseError: If the file is not valid UTF-8
    """
    try:
        return Path(path).read_text(encoding="utf-8").splitlines()
    except UnicodeDecodeError as e:
        raise ParseError(f"{path} is not valid UTF-8 (byte {e.start})") from None


def load_matches(path: PathLike) -> Dict[str, Match]:
    """Read and parse the match file at ``path``."""
    return parse_matches(_read_lines(path))


def load_operations(path: PathLike) -> List[Operation]:
    """Read and parse the operation log at ``path``."""
    return parse_operations(_read_lines(path))


# ============================================================================
# SERIALIZATION
# ============================================================================

def format_win_rate(win_rate: Decimal) -> str:
    return str(win_rate).replace(".", DECIMAL_SEPARATOR)


def format_report(report: SettlementReport) -> str:
    """Serialize a report to text. Lines are joined by newlines, without a trailing one."""
    lines: List[str] = []

    if report.legitimate:
        for summary in report.legitimate:
            lines.append(f"{summary.player_id} {summary.balance} {format_win_rate(summary.win_rate)}")
    else:
        lines.append("")
    lines.append("")

    if report.illegitimate:
        lines.extend(report.illegitimate)
    else:
        lines.append("")
    lines.append("")

    lines.append(str(report.house_balance_change))
    return "\n".join(lines)


def write_report(report: SettlementReport, path: PathLike) -> Path:
    """
    Write the serialized report to ``path``, creating parent directories.

    Returns:
        The path written
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w", encoding="utf-8", newline="") as f:
        f.write(format_report(report))
    return target
