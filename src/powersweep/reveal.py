"""
Reveal engine for the power-up Minesweeper engine.

Every function here mutates the board it is given. Callers pass a
board they own exclusively (a fresh copy made by the session).
"""
import logging
from typing import List, Set, Tuple

from .board import Board
from .cell import CellState

logger = logging.getLogger(__name__)


def reveal_cell(board: Board, row: int, col: int) -> bool:
    """
    Reveal one cell and handle the consequences.

    A mine uncovers every mine on the board. A zero cell floods its
    connected zero region.

    Args:
        board: Board to mutate.
        row: Row index to reveal.
        col: Column index to reveal.

    Returns:
        True if the revealed cell was a mine.
    """
    cell = board.get_cell(row, col)
    if not cell.reveal():
        return False

    if cell.is_mine:
        reveal_all_mines(board)
        return True

    if cell.neighbor_mines == 0:
        flood_fill(board, row, col)
    return False


def flood_fill(board: Board, row: int, col: int) -> int:
    """
    Reveal the zero region connected to (row, col) and its numbered border.

    Uses an explicit stack and a seen-set so stack depth does not grow
    with the board.

    Returns:
        Number of cells newly revealed.
    """
    to_visit: List[Tuple[int, int]] = [(row, col)]
    seen: Set[Tuple[int, int]] = set()
    revealed = 0

    while to_visit:
        current = to_visit.pop()
        if current in seen:
            continue
        seen.add(current)

        for neighbor in board.neighbor_cells(*current):
            if neighbor.is_mine or not neighbor.reveal():
                continue
            revealed += 1
            if neighbor.neighbor_mines == 0:
                to_visit.append(neighbor.position)

    logger.debug("Flood fill from (%d, %d) revealed %d cells", row, col, revealed)
    return revealed


def reveal_all_mines(board: Board) -> None:
    """Uncover every mine, flagged or not, for the end-of-game display."""
    for cell in board.cells():
        if cell.is_mine:
            cell.state = CellState.REVEALED


def is_won(board: Board) -> bool:
    """Check if all non-mine cells are revealed."""
    return board.count_revealed() == board.difficulty.safe_cells
