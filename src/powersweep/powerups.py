"""
Power-up subsystem for the power-up Minesweeper engine.

Power-ups are limited-use abilities gated by a cooldown. This module
holds the immutable PowerUp records, the default catalog and the
board-level effects; the session applies them to its own state.
"""
import logging
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Optional, Tuple

import numpy as np

from .board import Board

logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

class PowerUpId(str, Enum):
    """Identifiers the presentation layer uses to address abilities."""

    XRAY = "xray"
    SAFE_CLICK = "safeclick"
    AUTO_FLAG = "autoflag"
    TIME_FREEZE = "timefreeze"


XRAY_DURATION_MS = 5000
FREEZE_DURATION_MS = 10000


# ============================================================================
# PowerUp Data Class
# ============================================================================

@dataclass(frozen=True)
class PowerUp:
    """
    A limited-use, cooldown-gated ability.

    Attributes:
        id: Ability identifier.
        name: Display name.
        description: One-line explanation for tooltips.
        icon: Short glyph for compact displays.
        uses_remaining: Charges left.
        max_uses: Charges at the start of a session.
        cooldown_seconds: Minimum time between two uses.
        last_used_at_ms: Time of the last use, None if never used.
    """

    id: PowerUpId
    name: str
    description: str
    icon: str
    uses_remaining: int
    max_uses: int
    cooldown_seconds: int = 0
    last_used_at_ms: Optional[int] = None

    def __post_init__(self) -> None:
        if self.max_uses < 0:
            raise ValueError("max_uses cannot be negative")
        if not 0 <= self.uses_remaining <= self.max_uses:
            raise ValueError(
                f"uses_remaining must be between 0 and {self.max_uses}"
            )
        if self.cooldown_seconds < 0:
            raise ValueError("cooldown_seconds cannot be negative")

    def cooldown_remaining(self, now_ms: Optional[int]) -> float:
        """Seconds left before the ability can be used again."""
        if self.last_used_at_ms is None or now_ms is None:
            return 0.0
        elapsed = (now_ms - self.last_used_at_ms) / 1000
        return max(0.0, self.cooldown_seconds - elapsed)

    def is_on_cooldown(self, now_ms: Optional[int]) -> bool:
        return self.cooldown_remaining(now_ms) > 0

    def is_usable(self, now_ms: Optional[int]) -> bool:
        """
        Check whether a charge can be spent now.

        Without a clock reading only the charge count is checked.
        """
        return self.uses_remaining > 0 and not self.is_on_cooldown(now_ms)

    def consume(self, now_ms: Optional[int]) -> "PowerUp":
        """Return a copy with one charge spent at ``now_ms``."""
        last_used = self.last_used_at_ms if now_ms is None else now_ms
        return replace(
            self,
            uses_remaining=self.uses_remaining - 1,
            last_used_at_ms=last_used,
        )

    def badge(self, now_ms: Optional[int], active: bool = False) -> str:
        """Short status label: ACTIVE, remaining cooldown, USED or empty."""
        if active:
            return "ACTIVE"
        if self.is_on_cooldown(now_ms):
            return f"{math.ceil(self.cooldown_remaining(now_ms))}s"
        if self.uses_remaining == 0:
            return "USED"
        return ""


def _power_up(
    power_up_id: PowerUpId,
    name: str,
    description: str,
    icon: str,
    max_uses: int,
    cooldown_seconds: int,
) -> PowerUp:
    return PowerUp(
        id=power_up_id,
        name=name,
        description=description,
        icon=icon,
        uses_remaining=max_uses,
        max_uses=max_uses,
        cooldown_seconds=cooldown_seconds,
    )


DEFAULT_POWER_UPS: Tuple[PowerUp, ...] = (
    _power_up(
        PowerUpId.XRAY, "X-Ray Vision",
        "See every mine for 5 seconds", "X", 3, 30,
    ),
    _power_up(
        PowerUpId.SAFE_CLICK, "Safe Click",
        "Clicking a mine reveals a random safe cell instead", "S", 3, 0,
    ),
    _power_up(
        PowerUpId.AUTO_FLAG, "Auto Flag",
        "Flag every mine the numbers already prove", "A", 2, 20,
    ),
    _power_up(
        PowerUpId.TIME_FREEZE, "Time Freeze",
        "Stop the timer for 10 seconds", "T", 2, 60,
    ),
)


def default_power_ups() -> Dict[PowerUpId, PowerUp]:
    """Fresh inventory keyed by id."""
    return {power_up.id: power_up for power_up in DEFAULT_POWER_UPS}


def parse_power_up_id(value: str) -> Optional[PowerUpId]:
    """Resolve a raw id string, or None if it names no ability."""
    try:
        return PowerUpId(value)
    except ValueError:
        return None


# ============================================================================
# Board Effects
# ============================================================================

def auto_flag(board: Board) -> Board:
    """
    Flag every neighbor a revealed number proves to be a mine.

    For a revealed cell showing k, when its flagged neighbors plus its
    hidden neighbors add up to k, all the hidden ones are mines. Each
    numbered cell is judged once against the board as it was before the
    scan; flags placed here do not trigger further deductions.

    Returns:
        New board with the deduced flags placed.
    """
    flagged = board.copy()
    to_flag = set()

    for cell in board.cells():
        if not cell.is_revealed or cell.is_mine or cell.neighbor_mines == 0:
            continue
        neighbors = board.neighbor_cells(cell.row, cell.col)
        hidden = [n.position for n in neighbors if n.is_hidden]
        flagged_count = sum(1 for n in neighbors if n.is_flagged)
        if hidden and flagged_count + len(hidden) == cell.neighbor_mines:
            to_flag.update(hidden)

    for row, col in to_flag:
        flagged.get_cell(row, col).toggle_flag()

    logger.debug("Auto-flag placed %d flags", len(to_flag))
    return flagged


def pick_safe_cell(
    board: Board,
    rng: Optional[np.random.Generator] = None,
) -> Optional[Tuple[int, int]]:
    """
    Pick a uniformly random hidden, non-mine cell.

    Returns:
        (row, col) of the chosen cell, or None if there is none.
    """
    candidates = [
        cell.position for cell in board.cells()
        if cell.is_hidden and not cell.is_mine
    ]
    if not candidates:
        return None
    rng = rng if rng is not None else np.random.default_rng()
    return candidates[int(rng.integers(len(candidates)))]
