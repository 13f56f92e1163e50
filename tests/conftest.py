"""
conftest.py - Shared pytest fixtures for betledger tests

Provides common fixtures used across unit, conformance and functional tests:
- A standard match registry (A wins, B wins, draw)
- Empty and funded ledgers
- Input files written to a temporary directory
"""

import pytest
from decimal import Decimal

from betledger import BetLedger, Match, Side


# =============================================================================
# MATCH FIXTURES
# =============================================================================

@pytest.fixture
def a_wins():
    """Match won by side A."""
    return Match("m-a", Decimal("1.5"), Decimal("2.5"), Side.A)


@pytest.fixture
def b_wins():
    """Match won by side B."""
    return Match("m-b", Decimal("0.2"), Decimal("1.49"), Side.B)


@pytest.fixture
def draw():
    """Drawn match."""
    return Match("m-draw", Decimal("1.1"), Decimal("1.1"), Side.DRAW)


@pytest.fixture
def matches(a_wins, b_wins, draw):
    """Registry with one match of each outcome."""
    return {m.match_id: m for m in (a_wins, b_wins, draw)}


# =============================================================================
# LEDGER FIXTURES
# =============================================================================

@pytest.fixture
def ledger(matches):
    """Fresh ledger over the standard matches."""
    return BetLedger("test", matches, verbose=False)


# =============================================================================
# FILE FIXTURES
# =============================================================================

MATCH_A = "abae2255-4255-4304-8589-737cdff61640"
MATCH_B = "a3815c15-5ea8-4e03-9a5e-2ad0d4b1a9b2"
MATCH_DRAW = "4d7d8a5f-1b2c-4d3e-8f4a-5b6c7d8e9f0a"

PLAYER_1 = "163f23ed-e9a9-4e54-a5b1-4e1fc86f12f4"
PLAYER_2 = "2a2b6f1e-7c3d-4b5a-9e8f-0a1b2c3d4e5f"
PLAYER_3 = "3c4d5e6f-7a8b-4c9d-8e0f-1a2b3c4d5e6f"

MATCH_DATA = "\n".join([
    f"{MATCH_A},1.45,0.75,A",
    f"{MATCH_B},0.2,4.4,B",
    f"{MATCH_DRAW},1.1,1.1,DRAW",
])

PLAYER_DATA = "\n".join([
    f"{PLAYER_1},DEPOSIT,,4000,",
    f"{PLAYER_1},BET,{MATCH_A},500,A",
    f"{PLAYER_1},BET,{MATCH_B},1000,A",
    f"{PLAYER_1},BET,{MATCH_DRAW},200,B",
    f"{PLAYER_1},WITHDRAW,,225,",
    f"{PLAYER_2},DEPOSIT,,100,",
    f"{PLAYER_2},BET,{MATCH_B},50,B",
    f"{PLAYER_2},WITHDRAW,,500,",
    f"{PLAYER_2},DEPOSIT,,1000,",
    f"{PLAYER_3},DEPOSIT,,10",
    f"{PLAYER_3},BET,{MATCH_A},20,B",
])

EXPECTED_RESULT = "\n".join([
    f"{PLAYER_1} 3500 0,33",
    "",
    f"{PLAYER_2} WITHDRAW null 500 null",
    f"{PLAYER_3} BET {MATCH_A} 20 B",
    "",
    "275",
])


@pytest.fixture
def data_files(tmp_path):
    """Match and operation files in a temporary resources directory."""
    resources = tmp_path / "resources"
    resources.mkdir()
    match_file = resources / "match_data.txt"
    player_file = resources / "player_data.txt"
    match_file.write_text(MATCH_DATA, encoding="utf-8")
    player_file.write_text(PLAYER_DATA, encoding="utf-8")
    return match_file, player_file


@pytest.fixture
def expected_result():
    """Report text expected for the data_files scenario."""
    return EXPECTED_RESULT


@pytest.fixture
def scenario_ids():
    """Player and match ids used by the data_files scenario."""
    return {
        "player_1": PLAYER_1, "player_2": PLAYER_2, "player_3": PLAYER_3,
        "match_a": MATCH_A, "match_b": MATCH_B, "match_draw": MATCH_DRAW,
    }
