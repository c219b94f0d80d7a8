"""
Session controller for the power-up Minesweeper engine.

The controller is the single owner of the current GameSession. User
actions and timer ticks both go through it, one at a time, and every
call publishes the snapshot returned by the engine. Wall-clock reads
happen only through the injected clock.
"""
import logging
import time
from typing import Callable, Optional, Union

import numpy as np

from . import session as engine
from .board import DEFAULT_DIFFICULTY_KEY, Difficulty, UnknownDifficulty
from .powerups import PowerUpId
from .session import GameSession

logger = logging.getLogger(__name__)

Clock = Callable[[], int]

TICK_INTERVAL_MS = 1000


def system_clock() -> int:
    """Current wall-clock time in milliseconds."""
    return int(time.time() * 1000)


# ============================================================================
# Controller
# ============================================================================

class GameController:
    """
    Serializes every event onto one session.

    Each session gets a generation number. Replacing the session
    (reset or difficulty change) bumps the generation, and a tick
    issued for an older generation is dropped.
    """

    def __init__(
        self,
        difficulty_key: str = DEFAULT_DIFFICULTY_KEY,
        clock: Optional[Clock] = None,
        seed: Optional[int] = None,
    ) -> None:
        """
        Initialize the controller.

        Args:
            difficulty_key: Preset for the first session.
            clock: Millisecond time source (default: system clock).
            seed: Random seed for reproducible boards.

        Raises:
            UnknownDifficulty: If the key names no preset.
        """
        self.clock = clock or system_clock
        self.rng = np.random.default_rng(seed)
        self._session = engine.new_session(difficulty_key)
        self._generation = 0
        self._last_tick_ms = self.clock()

    @property
    def session(self) -> GameSession:
        return self._session

    @property
    def generation(self) -> int:
        return self._generation

    # ========================================================================
    # Player Actions
    # ========================================================================

    def reveal(self, row: int, col: int) -> GameSession:
        self._session = engine.reveal(
            self._session, row, col, now_ms=self.clock(), rng=self.rng
        )
        return self._session

    def toggle_flag(self, row: int, col: int) -> GameSession:
        self._session = engine.toggle_flag(self._session, row, col)
        return self._session

    def use_power_up(self, power_up_id: Union[PowerUpId, str]) -> GameSession:
        self._session = engine.use_power_up(
            self._session, power_up_id, self.clock()
        )
        return self._session

    # ========================================================================
    # Session Replacement
    # ========================================================================

    def reset(self, difficulty: Optional[Difficulty] = None) -> GameSession:
        """Start over, optionally with another difficulty."""
        return self._replace(engine.reset(self._session, difficulty))

    def change_difficulty(
        self,
        difficulty_key: str,
        fallback: bool = False,
    ) -> GameSession:
        """
        Start over with a preset.

        Args:
            difficulty_key: Preset key.
            fallback: Use the default preset instead of raising when the
                key is unknown.

        Raises:
            UnknownDifficulty: If the key is unknown and ``fallback`` is off.
        """
        try:
            replacement = engine.change_difficulty(self._session, difficulty_key)
        except UnknownDifficulty:
            if not fallback:
                raise
            logger.warning(
                "Unknown difficulty %r, falling back to %r",
                difficulty_key, DEFAULT_DIFFICULTY_KEY,
            )
            replacement = engine.change_difficulty(
                self._session, DEFAULT_DIFFICULTY_KEY
            )
        return self._replace(replacement)

    def _replace(self, replacement: GameSession) -> GameSession:
        self._session = replacement
        self._generation += 1
        self._last_tick_ms = self.clock()
        return self._session

    # ========================================================================
    # Time Progression
    # ========================================================================

    def tick(self, generation: Optional[int] = None) -> GameSession:
        """
        Deliver one timer tick.

        Args:
            generation: Generation the tick was scheduled for; stale
                ticks are ignored.
        """
        if generation is not None and generation != self._generation:
            logger.debug(
                "Dropping tick for generation %d (current %d)",
                generation, self._generation,
            )
            return self._session
        now_ms = self.clock()
        self._last_tick_ms = now_ms
        self._session = engine.tick(self._session, now_ms)
        return self._session

    def advance(self) -> int:
        """
        Deliver every whole-second tick due since the last one.

        Returns:
            Number of ticks delivered.
        """
        now_ms = self.clock()
        ticks = 0
        while now_ms - self._last_tick_ms >= TICK_INTERVAL_MS:
            self._last_tick_ms += TICK_INTERVAL_MS
            self._session = engine.tick(self._session, self._last_tick_ms)
            ticks += 1
        return ticks
