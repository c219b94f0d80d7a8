"""
Board module for the power-up Minesweeper engine.

Implements the board model: difficulty descriptors, the grid of
cells, neighbor lookup and board-wide counts. Boards are plain data;
mine placement and revealing live in their own modules and always
work on a copy.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Tuple

import numpy as np

from .cell import Cell


# ============================================================================
# Errors
# ============================================================================

class OutOfBounds(IndexError):
    """Raised when a coordinate lies outside the board."""

    def __init__(self, row: int, col: int, rows: int, cols: int) -> None:
        super().__init__(
            f"Cell ({row}, {col}) is outside the {rows}x{cols} board"
        )
        self.row = row
        self.col = col


class UnknownDifficulty(LookupError):
    """Raised when a difficulty key does not name a known preset."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Unknown difficulty: {key!r}")
        self.key = key


# ============================================================================
# Difficulty
# ============================================================================

@dataclass(frozen=True)
class Difficulty:
    """
    Immutable description of a board size and mine density.

    Attributes:
        name: Display name.
        rows: Number of rows.
        cols: Number of columns.
        mine_count: Total mines to place.
    """

    name: str
    rows: int
    cols: int
    mine_count: int

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Ensure configuration values are valid."""
        if self.rows < 1 or self.cols < 1:
            raise ValueError("Board dimensions must be positive")
        if self.mine_count < 0:
            raise ValueError("Number of mines cannot be negative")
        max_mines = self.rows * self.cols - 1
        if self.mine_count > max_mines:
            raise ValueError(f"Too many mines (max {max_mines})")

    @property
    def total_cells(self) -> int:
        """Number of cells on the board."""
        return self.rows * self.cols

    @property
    def safe_cells(self) -> int:
        """Number of cells that must be revealed to win."""
        return self.total_cells - self.mine_count


# Preset difficulty levels
EASY = Difficulty("Easy", 9, 9, 10)
MEDIUM = Difficulty("Medium", 16, 16, 40)
HARD = Difficulty("Hard", 16, 30, 99)

DEFAULT_DIFFICULTY_KEY = "easy"

DIFFICULTIES: Dict[str, Difficulty] = {
    "easy": EASY,
    "medium": MEDIUM,
    "hard": HARD,
}


def get_difficulty(key: str) -> Difficulty:
    """
    Resolve a difficulty key to its preset.

    Raises:
        UnknownDifficulty: If the key names no preset.
    """
    try:
        return DIFFICULTIES[key]
    except KeyError:
        raise UnknownDifficulty(key) from None


# ============================================================================
# Board Class
# ============================================================================

@dataclass
class Board:
    """
    Minesweeper grid.

    Owns its cells exclusively: ``copy`` returns a board whose cells are
    new objects, so a board handed to one session snapshot is never
    shared with another.
    """

    difficulty: Difficulty = EASY
    _grid: List[List[Cell]] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        """Initialize the grid after dataclass creation."""
        if not self._grid:
            self._init_grid()

    # ========================================================================
    # Grid Initialization (Low-level)
    # ========================================================================

    def _init_grid(self) -> None:
        """Create empty grid of cells."""
        self._grid = [
            [Cell(row=row, col=col) for col in range(self.cols)]
            for row in range(self.rows)
        ]

    def copy(self) -> "Board":
        """Return a deep copy of this board."""
        grid = [
            [
                Cell(
                    row=cell.row,
                    col=cell.col,
                    is_mine=cell.is_mine,
                    neighbor_mines=cell.neighbor_mines,
                    state=cell.state,
                )
                for cell in row
            ]
            for row in self._grid
        ]
        return Board(self.difficulty, grid)

    # ========================================================================
    # Neighbor Utilities (Low-level)
    # ========================================================================

    @property
    def rows(self) -> int:
        return self.difficulty.rows

    @property
    def cols(self) -> int:
        return self.difficulty.cols

    def is_valid_position(self, row: int, col: int) -> bool:
        """Check if position is within board bounds."""
        return 0 <= row < self.rows and 0 <= col < self.cols

    def check_position(self, row: int, col: int) -> None:
        """Raise OutOfBounds unless (row, col) is on the board."""
        if not self.is_valid_position(row, col):
            raise OutOfBounds(row, col, self.rows, self.cols)

    def neighbors(self, row: int, col: int) -> List[Tuple[int, int]]:
        """
        Get valid neighboring cell positions.

        Args:
            row: Row index of center cell.
            col: Column index of center cell.

        Returns:
            List of (row, col) tuples in the 8-neighborhood, clipped to
            the board.
        """
        neighbors = []
        for delta_row in (-1, 0, 1):
            for delta_col in (-1, 0, 1):
                if delta_row == 0 and delta_col == 0:
                    continue
                new_row = row + delta_row
                new_col = col + delta_col
                if self.is_valid_position(new_row, new_col):
                    neighbors.append((new_row, new_col))
        return neighbors

    def neighbor_cells(self, row: int, col: int) -> List[Cell]:
        """Get the cells around (row, col)."""
        return [self._grid[r][c] for r, c in self.neighbors(row, col)]

    # ========================================================================
    # State Accessors (High-level)
    # ========================================================================

    def get_cell(self, row: int, col: int) -> Cell:
        """
        Get cell at position.

        Raises:
            OutOfBounds: If the position is not on the board.
        """
        self.check_position(row, col)
        return self._grid[row][col]

    def cells(self) -> Iterator[Cell]:
        """Iterate over every cell in row-major order."""
        for row in self._grid:
            yield from row

    def count_revealed(self) -> int:
        return sum(1 for cell in self.cells() if cell.is_revealed)

    def count_flagged(self) -> int:
        return sum(1 for cell in self.cells() if cell.is_flagged)

    def count_mines(self) -> int:
        return sum(1 for cell in self.cells() if cell.is_mine)

    def mine_positions(self) -> List[Tuple[int, int]]:
        """Positions of all mines on the board."""
        return [cell.position for cell in self.cells() if cell.is_mine]

    def get_observation(self) -> np.ndarray:
        """
        Get board state as a numpy array.

        Returns:
            2D int8 array where:
                -1 = hidden
                -2 = flagged
                0-8 = revealed with neighbor count
                9 = revealed mine
        """
        obs = np.zeros((self.rows, self.cols), dtype=np.int8)
        for cell in self.cells():
            obs[cell.row, cell.col] = cell.to_observation()
        return obs

    def get_valid_actions(self) -> List[Tuple[int, int]]:
        """
        Get list of cells that can be revealed.

        Returns:
            List of (row, col) positions that are still hidden.
        """
        return [cell.position for cell in self.cells() if cell.is_hidden]


def create_board(difficulty: Difficulty) -> Board:
    """Create an empty, mine-free board for a difficulty."""
    return Board(difficulty)
