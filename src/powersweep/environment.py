"""
Gymnasium environment wrapper for the power-up Minesweeper engine.

Drives a GameSession headlessly with a virtual clock, for automated
play and engine soak runs.
"""
from typing import Any, Dict, Optional, Tuple, SupportsFloat

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from . import session as engine
from .board import DEFAULT_DIFFICULTY_KEY, get_difficulty
from .cell import FLAGGED_CODE, MINE_CODE
from .controller import TICK_INTERVAL_MS
from .powerups import PowerUpId
from .render import render_session


POWER_UP_ACTIONS = tuple(PowerUpId)


# ============================================================================
# Minesweeper Environment
# ============================================================================

class MinesweeperEnv(gym.Env):
    """
    Gymnasium environment for power-up Minesweeper.

    Observation:
        2D array where:
        - -1 = hidden cell
        - -2 = flagged cell
        - 0-8 = revealed cell with neighbor mine count
        - 9 = revealed mine

    Actions:
        Discrete action space of size rows * cols + 4.
        Action i < rows * cols reveals cell (i // cols, i % cols);
        the last four actions activate x-ray, safe-click, auto-flag and
        time-freeze.

    Rewards:
        - +1 for a step that changes the session without ending it
        - +10 for winning the game
        - -10 for hitting a mine
        - -0.1 for an action that leaves the session unchanged

    Each step advances the virtual clock by one second and ticks the
    session once.
    """

    metadata = {"render_modes": ["human", "ansi"], "render_fps": 4}

    def __init__(
        self,
        difficulty_key: str = DEFAULT_DIFFICULTY_KEY,
        render_mode: Optional[str] = None,
    ) -> None:
        """
        Initialize the environment.

        Args:
            difficulty_key: Preset to play (default: easy).
            render_mode: How to render the environment.

        Raises:
            UnknownDifficulty: If the key names no preset.
        """
        super().__init__()

        self.difficulty = get_difficulty(difficulty_key)
        self.difficulty_key = difficulty_key
        self.session = engine.start_session(self.difficulty)
        self.render_mode = render_mode

        self._num_cells = self.difficulty.rows * self.difficulty.cols

        self.observation_space = spaces.Box(
            low=FLAGGED_CODE,
            high=MINE_CODE,
            shape=(self.difficulty.rows, self.difficulty.cols),
            dtype=np.int8,
        )
        self.action_space = spaces.Discrete(
            self._num_cells + len(POWER_UP_ACTIONS)
        )

        self._steps = 0
        self._now_ms = 0

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[np.ndarray, Dict[str, Any]]:
        """
        Reset the environment for a new episode.

        Args:
            seed: Random seed for reproducibility.
            options: Additional options (unused).

        Returns:
            Tuple of (observation, info dict).
        """
        super().reset(seed=seed)
        self.session = engine.reset(self.session)
        self._steps = 0
        self._now_ms = 0

        return self.session.board.get_observation(), self._get_info()

    def step(
        self, action: int
    ) -> Tuple[np.ndarray, SupportsFloat, bool, bool, Dict[str, Any]]:
        """
        Execute one action in the environment.

        Args:
            action: Cell index to reveal, or a power-up action.

        Returns:
            Tuple of (observation, reward, terminated, truncated, info).
        """
        self._steps += 1
        reward = self._apply_action(int(action))

        self._now_ms += TICK_INTERVAL_MS
        self.session = engine.tick(self.session, self._now_ms)

        observation = self.session.board.get_observation()
        terminated = not self.session.is_playing

        return observation, reward, terminated, False, self._get_info()

    def action_to_position(self, action: int) -> Tuple[int, int]:
        """Convert flat action index to (row, col) position."""
        return divmod(action, self.difficulty.cols)

    def _apply_action(self, action: int) -> float:
        """Run the action against the session and score the result."""
        before = self.session
        if action < self._num_cells:
            row, col = self.action_to_position(action)
            self.session = engine.reveal(
                before, row, col, now_ms=self._now_ms, rng=self.np_random
            )
        else:
            power_up_id = POWER_UP_ACTIONS[action - self._num_cells]
            self.session = engine.use_power_up(before, power_up_id, self._now_ms)

        if self.session is before:
            return -0.1
        if self.session.is_won:
            return 10.0
        if self.session.is_lost:
            return -10.0
        return 1.0

    def _get_info(self) -> Dict[str, Any]:
        """Get info dictionary for current state."""
        return {
            "steps": self._steps,
            "difficulty": self.difficulty_key,
            "revealed": self.session.board.count_revealed(),
            "total_safe": self.difficulty.safe_cells,
            "game_state": self.session.status.name,
            "elapsed_seconds": self.session.elapsed_seconds,
            "flagged": self.session.flagged_count,
        }

    def render(self) -> Optional[str]:
        """Render the current session."""
        if self.render_mode == "ansi":
            return render_session(self.session, self._now_ms)
        if self.render_mode == "human":
            print(render_session(self.session, self._now_ms))
        return None

    def get_action_mask(self) -> np.ndarray:
        """
        Get mask of actions that may change the session.

        Returns:
            Boolean array where True = valid action.
        """
        mask = np.zeros(self.action_space.n, dtype=bool)
        if not self.session.is_playing:
            return mask
        for row, col in self.session.board.get_valid_actions():
            mask[row * self.difficulty.cols + col] = True
        for offset, power_up_id in enumerate(POWER_UP_ACTIONS):
            power_up = self.session.power_ups.get(power_up_id)
            usable = power_up is not None and power_up.is_usable(self._now_ms)
            mask[self._num_cells + offset] = (
                usable and power_up_id != PowerUpId.SAFE_CLICK
            )
        return mask
