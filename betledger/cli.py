"""
betledger/cli.py

betledger: command-line settlement runner
=========================================

Usage:
    betledger settle                                   Default resource paths
    betledger settle --matches m.txt --operations p.txt --output result.txt
    betledger settle --verbose                         Print per-operation diagnostics
    betledger check --matches m.txt --operations p.txt Replay only, print counts

Exit codes:
    0  Report written (settle) / replay completed (check)
    1  Fatal ledger error: negative amount, unknown match, duplicate bet.
       No report is written.
    2  Input error (file missing, malformed record)
"""

import sys
from typing import Tuple

import click

from betledger import __version__
from betledger.core import (
    ExecuteResult, ParseError,
    DEFAULT_MATCH_DATA_PATH, DEFAULT_PLAYER_DATA_PATH, DEFAULT_RESULT_PATH,
)
from betledger.io import load_matches, load_operations, write_report
from betledger.ledger import BetLedger


def _load_inputs(matches_path: str, operations_path: str) -> Tuple[dict, list]:
    """Load both input files, exiting with code 2 on any input error."""
    try:
        matches = load_matches(matches_path)
        operations = load_operations(operations_path)
    except OSError as e:
        click.echo(f"❌ Error: cannot read input: {e}", err=True)
        sys.exit(2)
    except ParseError as e:
        click.echo(f"❌ Error: malformed input: {e}", err=True)
        sys.exit(2)
    return matches, operations


def _format_counts(counts) -> str:
    return ", ".join(
        f"{result.value}={counts.get(result, 0)}" for result in ExecuteResult
    )


_matches_option = click.option(
    "--matches", "matches_path",
    default=DEFAULT_MATCH_DATA_PATH, show_default=True,
    type=click.Path(dir_okay=False),
    help="Match data file.",
)
_operations_option = click.option(
    "--operations", "operations_path",
    default=DEFAULT_PLAYER_DATA_PATH, show_default=True,
    type=click.Path(dir_okay=False),
    help="Player operation log.",
)


@click.group()
@click.version_option(version=__version__, prog_name="betledger")
def cli() -> None:
    """
    betledger: batch settlement of a two-sided betting ledger.

    \b
    Commands:
      settle    Replay operations and write the settlement report.
      check     Replay operations and print outcome counts only.
    """
    pass


@cli.command(name="settle")
@_matches_option
@_operations_option
@click.option(
    "--output", "output_path",
    default=DEFAULT_RESULT_PATH, show_default=True,
    type=click.Path(dir_okay=False),
    help="Where to write the report.",
)
@click.option("--verbose", is_flag=True, default=False, help="Print per-operation diagnostics.")
def settle_command(matches_path: str, operations_path: str, output_path: str, verbose: bool) -> None:
    """Replay the operation log and write the settlement report."""
    matches, operations = _load_inputs(matches_path, operations_path)

    ledger = BetLedger("settle", matches, verbose=verbose)
    result = ledger.replay(operations)
    if not result.completed:
        click.echo(f"❌ Fatal: {result.fatal.reason}", err=True)
        sys.exit(1)

    report = ledger.build_report()
    try:
        target = write_report(report, output_path)
    except OSError as e:
        click.echo(f"❌ Error: cannot write report: {e}", err=True)
        sys.exit(2)

    click.echo(
        f"✅ Report written to {target}: "
        f"{len(report.legitimate)} legitimate, {len(report.illegitimate)} illegitimate, "
        f"house {report.house_balance_change:+d}"
    )


@cli.command(name="check")
@_matches_option
@_operations_option
def check_command(matches_path: str, operations_path: str) -> None:
    """Replay the operation log without writing a report."""
    matches, operations = _load_inputs(matches_path, operations_path)

    ledger = BetLedger("check", matches, verbose=False)
    result = ledger.replay(operations)
    click.echo(f"Processed {result.processed} operations: {_format_counts(result.counts)}")
    if not result.completed:
        click.echo(f"❌ Fatal: {result.fatal.reason}", err=True)
        sys.exit(1)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
