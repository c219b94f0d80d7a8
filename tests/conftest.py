"""
Pytest configuration and shared fixtures.
"""
import pytest
import sys
from dataclasses import replace
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from powersweep import (
    Cell,
    Difficulty,
    GameSession,
    create_board,
    new_session,
    place_mines_at,
    start_session,
)


# ============================================================================
# Session Fixtures
# ============================================================================

@pytest.fixture
def easy_session() -> GameSession:
    """Fresh easy session with no mines placed yet."""
    return new_session("easy")


@pytest.fixture
def session_factory():
    """
    Build a session with a known mine layout.

    Cells listed in ``revealed`` and ``flagged`` are put in that state
    directly, bypassing flood fill.
    """
    def make(rows, cols, mines, revealed=(), flagged=()) -> GameSession:
        difficulty = Difficulty("Test", rows, cols, len(mines))
        board = place_mines_at(create_board(difficulty), mines)
        for row, col in revealed:
            board.get_cell(row, col).reveal()
        for row, col in flagged:
            board.get_cell(row, col).toggle_flag()
        return replace(
            start_session(difficulty),
            board=board,
            mines_placed=True,
            flagged_count=board.count_flagged(),
        )

    return make


# ============================================================================
# Clock Fixtures
# ============================================================================

class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: int = 0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ============================================================================
# Cell Fixtures
# ============================================================================

@pytest.fixture
def hidden_cell() -> Cell:
    """Create a hidden cell."""
    return Cell()


@pytest.fixture
def mine_cell() -> Cell:
    """Create a cell containing a mine."""
    return Cell(is_mine=True)


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def easy_config() -> Difficulty:
    return Difficulty("Easy", 9, 9, 10)
