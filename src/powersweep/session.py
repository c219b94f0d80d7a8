"""
Game session for the power-up Minesweeper engine.

A GameSession is an immutable snapshot. Every operation takes the
current snapshot and returns the next one; a rejected action returns
the very same object. Boards are copied before they are changed, so
a snapshot is never altered after it has been published.
"""
import logging
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Dict, Optional, Tuple, Union

import numpy as np

from .board import (
    Board,
    Difficulty,
    DEFAULT_DIFFICULTY_KEY,
    create_board,
    get_difficulty,
)
from .placement import place_mines
from .powerups import (
    FREEZE_DURATION_MS,
    XRAY_DURATION_MS,
    PowerUp,
    PowerUpId,
    auto_flag,
    default_power_ups,
    parse_power_up_id,
    pick_safe_cell,
)
from .reveal import is_won, reveal_cell

logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

class GameStatus(Enum):
    """Possible states of the game."""

    PLAYING = auto()
    WON = auto()
    LOST = auto()


# ============================================================================
# Session Data Class
# ============================================================================

@dataclass(frozen=True)
class GameSession:
    """
    Root aggregate of one game.

    Attributes:
        board: Grid owned by this snapshot.
        difficulty: Board size and mine count.
        status: Playing, won or lost.
        elapsed_seconds: Timer value driven by ticks.
        flagged_count: Number of flagged cells on the board.
        mine_count: Mines on the board once placed.
        power_ups: Inventory keyed by ability id.
        xray_active: Whether mine positions may be shown.
        xray_ends_at_ms: When the x-ray window closes.
        time_frozen: Whether the timer is paused.
        freeze_ends_at_ms: When the freeze window closes.
        mines_placed: False until the first reveal scatters the mines.
    """

    board: Board
    difficulty: Difficulty
    status: GameStatus = GameStatus.PLAYING
    elapsed_seconds: int = 0
    flagged_count: int = 0
    mine_count: int = 0
    power_ups: Dict[PowerUpId, PowerUp] = field(default_factory=default_power_ups)
    xray_active: bool = False
    xray_ends_at_ms: int = 0
    time_frozen: bool = False
    freeze_ends_at_ms: int = 0
    mines_placed: bool = False

    @property
    def is_playing(self) -> bool:
        return self.status == GameStatus.PLAYING

    @property
    def is_won(self) -> bool:
        return self.status == GameStatus.WON

    @property
    def is_lost(self) -> bool:
        return self.status == GameStatus.LOST

    @property
    def remaining_mines(self) -> int:
        """Mine counter shown to the player; negative when over-flagged."""
        return self.mine_count - self.flagged_count

    def get_power_up(self, power_up_id: Union[PowerUpId, str]) -> Optional[PowerUp]:
        parsed = parse_power_up_id(power_up_id)
        return self.power_ups.get(parsed) if parsed is not None else None


# ============================================================================
# Lifecycle
# ============================================================================

def start_session(
    difficulty: Difficulty,
    power_ups: Optional[Dict[PowerUpId, PowerUp]] = None,
) -> GameSession:
    """Create a fresh session; mines wait for the first reveal."""
    return GameSession(
        board=create_board(difficulty),
        difficulty=difficulty,
        mine_count=difficulty.mine_count,
        power_ups=dict(power_ups) if power_ups is not None else default_power_ups(),
    )


def new_session(difficulty_key: str = DEFAULT_DIFFICULTY_KEY) -> GameSession:
    """
    Start a session for a preset.

    Raises:
        UnknownDifficulty: If the key names no preset.
    """
    return start_session(get_difficulty(difficulty_key))


def reset(
    session: GameSession,
    difficulty: Optional[Difficulty] = None,
) -> GameSession:
    """
    Replace the session wholesale, keeping its power-up catalog.

    Every ability gets its charges back and forgets its cooldown.
    """
    power_ups = {
        power_up_id: replace(
            power_up,
            uses_remaining=power_up.max_uses,
            last_used_at_ms=None,
        )
        for power_up_id, power_up in session.power_ups.items()
    }
    new_difficulty = difficulty or session.difficulty
    logger.debug("Resetting session (%s)", new_difficulty.name)
    return start_session(new_difficulty, power_ups)


def change_difficulty(session: GameSession, difficulty_key: str) -> GameSession:
    """
    Reset into another preset.

    Raises:
        UnknownDifficulty: If the key names no preset.
    """
    return reset(session, get_difficulty(difficulty_key))


# ============================================================================
# Player Actions
# ============================================================================

def reveal(
    session: GameSession,
    row: int,
    col: int,
    now_ms: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> GameSession:
    """
    Reveal a cell.

    The first reveal of a session places the mines around (row, col).
    Later, clicking a hidden mine while a safe-click charge is usable
    spends the charge and reveals a random safe cell instead.

    Args:
        session: Current snapshot.
        row: Row index to reveal.
        col: Column index to reveal.
        now_ms: Clock reading used to gate and stamp safe-click.
        rng: Random generator for placement and safe-click.

    Returns:
        Next snapshot, or ``session`` itself if nothing happened.

    Raises:
        OutOfBounds: If the coordinates are not on the board.
    """
    target = session.board.get_cell(row, col)
    if not session.is_playing or not target.is_hidden:
        logger.debug("Ignoring reveal of (%d, %d)", row, col)
        return session

    power_ups = session.power_ups
    if not session.mines_placed:
        board = place_mines(session.board, session.difficulty, row, col, rng)
    else:
        board = session.board.copy()
        if target.is_mine:
            row, col, power_ups = _redirect_safe_click(
                board, row, col, power_ups, now_ms, rng
            )

    hit_mine = reveal_cell(board, row, col)
    if hit_mine:
        status = GameStatus.LOST
        logger.info("Mine hit at (%d, %d), game lost", row, col)
    elif is_won(board):
        status = GameStatus.WON
        logger.info("All safe cells revealed, game won")
    else:
        status = GameStatus.PLAYING

    return replace(
        session,
        board=board,
        status=status,
        flagged_count=board.count_flagged(),
        mines_placed=True,
        power_ups=power_ups,
    )


def _redirect_safe_click(
    board: Board,
    row: int,
    col: int,
    power_ups: Dict[PowerUpId, PowerUp],
    now_ms: Optional[int],
    rng: Optional[np.random.Generator],
) -> Tuple[int, int, Dict[PowerUpId, PowerUp]]:
    """Swap a mined target for a random safe cell if a charge is usable."""
    charge = power_ups.get(PowerUpId.SAFE_CLICK)
    if charge is None or not charge.is_usable(now_ms):
        return row, col, power_ups

    substitute = pick_safe_cell(board, rng)
    if substitute is None:
        return row, col, power_ups

    logger.info(
        "Safe click redirected (%d, %d) to (%d, %d)", row, col, *substitute
    )
    power_ups = {**power_ups, PowerUpId.SAFE_CLICK: charge.consume(now_ms)}
    return substitute[0], substitute[1], power_ups


def toggle_flag(session: GameSession, row: int, col: int) -> GameSession:
    """
    Toggle the flag on a hidden cell.

    The flag count is informational and may exceed the mine count.

    Raises:
        OutOfBounds: If the coordinates are not on the board.
    """
    target = session.board.get_cell(row, col)
    if not session.is_playing or target.is_revealed:
        logger.debug("Ignoring flag toggle at (%d, %d)", row, col)
        return session

    board = session.board.copy()
    board.get_cell(row, col).toggle_flag()
    return replace(session, board=board, flagged_count=board.count_flagged())


def use_power_up(
    session: GameSession,
    power_up_id: Union[PowerUpId, str],
    now_ms: int,
) -> GameSession:
    """
    Activate an ability.

    Depleted, cooling-down and unknown abilities leave the session
    unchanged, as does any activation once the game is over. Safe-click
    is only checked here; its charge is spent by ``reveal``.

    Args:
        session: Current snapshot.
        power_up_id: Ability to activate.
        now_ms: Current clock reading in milliseconds.

    Returns:
        Next snapshot, or ``session`` itself if nothing happened.
    """
    parsed = parse_power_up_id(power_up_id)
    if parsed is None:
        logger.warning("Unknown power-up %r", power_up_id)
        return session
    if not session.is_playing:
        return session

    power_up = session.power_ups.get(parsed)
    if power_up is None or not power_up.is_usable(now_ms):
        logger.debug("Power-up %s is not usable", parsed.value)
        return session
    if parsed == PowerUpId.SAFE_CLICK:
        return session

    logger.info("Power-up %s activated", parsed.value)
    activated = replace(
        session,
        power_ups={**session.power_ups, parsed: power_up.consume(now_ms)},
    )

    if parsed == PowerUpId.XRAY:
        return replace(
            activated,
            xray_active=True,
            xray_ends_at_ms=now_ms + XRAY_DURATION_MS,
        )
    if parsed == PowerUpId.TIME_FREEZE:
        return replace(
            activated,
            time_frozen=True,
            freeze_ends_at_ms=now_ms + FREEZE_DURATION_MS,
        )
    board = auto_flag(session.board)
    return replace(activated, board=board, flagged_count=board.count_flagged())


# ============================================================================
# Time Progression
# ============================================================================

def tick(session: GameSession, now_ms: int) -> GameSession:
    """
    Advance the session by one second of wall-clock time.

    The timer stands still while a freeze is running; x-ray and freeze
    windows are closed once ``now_ms`` reaches their end.
    """
    if not session.is_playing:
        return session

    time_frozen = session.time_frozen and now_ms < session.freeze_ends_at_ms
    xray_active = session.xray_active and now_ms < session.xray_ends_at_ms
    elapsed = session.elapsed_seconds if time_frozen else session.elapsed_seconds + 1

    if session.xray_active and not xray_active:
        logger.debug("X-ray expired")
    if session.time_frozen and not time_frozen:
        logger.debug("Time freeze expired")

    return replace(
        session,
        elapsed_seconds=elapsed,
        xray_active=xray_active,
        time_frozen=time_frozen,
    )
