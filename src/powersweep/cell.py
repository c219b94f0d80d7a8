"""
Grid cells for the power-up Minesweeper engine.

A cell is addressed by its (row, col) and is only ever mutated on a
board copy that a session transition owns. Published snapshots hold
cells that are no longer touched.
"""
from dataclasses import dataclass
from enum import Enum, auto
from typing import Tuple


# ============================================================================
# Constants
# ============================================================================

class CellState(Enum):
    """What the player currently sees at a grid position."""

    HIDDEN = auto()
    REVEALED = auto()
    FLAGGED = auto()


# Observation codes shared by the text renderer and the environment.
HIDDEN_CODE = -1
FLAGGED_CODE = -2
MINE_CODE = 9


# ============================================================================
# Cell Data Class
# ============================================================================

@dataclass
class Cell:
    """
    One square of a board snapshot.

    Flagged and revealed are values of a single ``state`` field, so a
    cell cannot hold both. ``neighbor_mines`` is filled in once the
    mines have been placed and stays 0 on an unseeded board.

    Attributes:
        row: Grid row, fixed for the life of the cell.
        col: Grid column, fixed for the life of the cell.
        is_mine: Set by mine placement.
        neighbor_mines: Mines among the up to eight surrounding cells.
        state: Hidden, revealed or flagged.
    """

    row: int = 0
    col: int = 0
    is_mine: bool = False
    neighbor_mines: int = 0
    state: CellState = CellState.HIDDEN

    def reveal(self) -> bool:
        """Open a hidden cell; flagged and open cells report False."""
        if not self.is_hidden:
            return False
        self.state = CellState.REVEALED
        return True

    def toggle_flag(self) -> bool:
        """
        Swap between hidden and flagged.

        Returns:
            False for an open cell, which keeps its state.
        """
        if self.is_revealed:
            return False
        self.state = CellState.HIDDEN if self.is_flagged else CellState.FLAGGED
        return True

    @property
    def position(self) -> Tuple[int, int]:
        return self.row, self.col

    @property
    def is_hidden(self) -> bool:
        return self.state == CellState.HIDDEN

    @property
    def is_revealed(self) -> bool:
        return self.state == CellState.REVEALED

    @property
    def is_flagged(self) -> bool:
        return self.state == CellState.FLAGGED

    def to_observation(self) -> int:
        """
        Encode the cell the way the environment and renderer read it.

        Hidden cells give HIDDEN_CODE and flags give FLAGGED_CODE. An
        open mine (only seen after a loss) gives MINE_CODE; any other
        open cell gives its neighbor count.
        """
        if self.is_hidden:
            return HIDDEN_CODE
        if self.is_flagged:
            return FLAGGED_CODE
        return MINE_CODE if self.is_mine else self.neighbor_mines
