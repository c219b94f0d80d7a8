"""
Mine placement for the power-up Minesweeper engine.

Mines are scattered lazily, on the first reveal, so that the clicked
cell and its whole neighborhood are guaranteed to be safe.
"""
import logging
from typing import Iterable, Optional, Set, Tuple

import numpy as np

from .board import Board, Difficulty

logger = logging.getLogger(__name__)


def safe_zone(board: Board, row: int, col: int) -> Set[Tuple[int, int]]:
    """The 3x3 block centered on (row, col), clipped to the board."""
    return {(row, col), *board.neighbors(row, col)}


def place_mines(
    board: Board,
    difficulty: Difficulty,
    safe_row: int,
    safe_col: int,
    rng: Optional[np.random.Generator] = None,
) -> Board:
    """
    Scatter mines on a copy of the board, keeping the safe zone clear.

    Uses rejection sampling: draw a uniform cell, retry when it is
    already a mine or inside the safe zone.

    Args:
        board: Board to place mines on (left untouched).
        difficulty: Supplies the number of mines.
        safe_row: Row of the first click.
        safe_col: Column of the first click.
        rng: Random generator (default: a fresh numpy generator).

    Returns:
        New board with mines placed and neighbor counts computed.

    Raises:
        OutOfBounds: If the safe anchor is not on the board.
        ValueError: If the safe zone leaves too few cells for the mines.
    """
    board.check_position(safe_row, safe_col)
    rng = rng if rng is not None else np.random.default_rng()

    excluded = safe_zone(board, safe_row, safe_col)
    available = difficulty.total_cells - len(excluded)
    if difficulty.mine_count > available:
        raise ValueError(
            f"Cannot place {difficulty.mine_count} mines outside the safe "
            f"zone ({available} cells available)"
        )

    mines: Set[Tuple[int, int]] = set()
    while len(mines) < difficulty.mine_count:
        row = int(rng.integers(difficulty.rows))
        col = int(rng.integers(difficulty.cols))
        if (row, col) in mines or (row, col) in excluded:
            continue
        mines.add((row, col))

    logger.debug(
        "Placed %d mines around safe anchor (%d, %d)",
        len(mines), safe_row, safe_col,
    )
    return place_mines_at(board, mines)


def place_mines_at(board: Board, positions: Iterable[Tuple[int, int]]) -> Board:
    """
    Return a copy of the board with mines at exactly the given positions.

    Neighbor counts are recomputed for every non-mine cell.
    """
    placed = board.copy()
    for cell in placed.cells():
        cell.is_mine = False
    for row, col in positions:
        placed.get_cell(row, col).is_mine = True
    calculate_neighbor_mines(placed)
    return placed


def calculate_neighbor_mines(board: Board) -> None:
    """Calculate neighbor mine counts for all cells, in place."""
    for cell in board.cells():
        if cell.is_mine:
            cell.neighbor_mines = 0
        else:
            cell.neighbor_mines = count_neighbor_mines(board, cell.row, cell.col)


def count_neighbor_mines(board: Board, row: int, col: int) -> int:
    """Count mines adjacent to a specific cell."""
    return sum(1 for cell in board.neighbor_cells(row, col) if cell.is_mine)
