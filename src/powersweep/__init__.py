"""
Power-up Minesweeper engine.

Provides board generation, first-click-safe mine placement, flood-fill
revealing, flag bookkeeping, timed power-ups and the session state
machine that sequences them.
"""
from .cell import Cell, CellState
from .board import (
    Board,
    Difficulty,
    OutOfBounds,
    UnknownDifficulty,
    EASY,
    MEDIUM,
    HARD,
    DIFFICULTIES,
    create_board,
    get_difficulty,
)
from .placement import place_mines, place_mines_at
from .powerups import PowerUp, PowerUpId, default_power_ups
from .session import (
    GameSession,
    GameStatus,
    new_session,
    start_session,
    reveal,
    toggle_flag,
    use_power_up,
    tick,
    reset,
    change_difficulty,
)
from .controller import GameController, system_clock
from .environment import MinesweeperEnv

__all__ = [
    "Cell",
    "CellState",
    "Board",
    "Difficulty",
    "OutOfBounds",
    "UnknownDifficulty",
    "EASY",
    "MEDIUM",
    "HARD",
    "DIFFICULTIES",
    "create_board",
    "get_difficulty",
    "place_mines",
    "place_mines_at",
    "PowerUp",
    "PowerUpId",
    "default_power_ups",
    "GameSession",
    "GameStatus",
    "new_session",
    "start_session",
    "reveal",
    "toggle_flag",
    "use_power_up",
    "tick",
    "reset",
    "change_difficulty",
    "GameController",
    "system_clock",
    "MinesweeperEnv",
]
