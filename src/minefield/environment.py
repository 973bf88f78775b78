"""
Gymnasium environment wrapper for the Minesweeper field.

Provides a standard RL interface on top of the engine. The wrapper
drives the engine only through its commands and learns about the
outcome of an action through the observer interface.
"""
import random
from typing import Any, Dict, Optional, Tuple, SupportsFloat

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from .cell import CellState
from .engine import (
    DEFUSED, DETONATED, MARKED, UNOPENED, FieldConfig, GameState, Minesweeper,
)
from .observer import RecordingObserver


# ============================================================================
# Minesweeper Environment
# ============================================================================

class MinesweeperEnv(gym.Env):
    """
    Gymnasium environment for Minesweeper.

    Observation:
        2D array where:
        - -1 = unopened cell
        - -2 = cell marked as bomb
        - 0-8 = opened cell with adjacent bomb count
        - 9 = detonated bomb
        - 10 = defused bomb

    Actions:
        Discrete action space of size 2 * size * size.
        Action i < size * size opens cell (i // size, i % size).
        Action i >= size * size toggles the bomb mark on cell
        i - size * size.

    Rewards:
        - +1 for every cell opened by the action
        - +10 for winning the game
        - -10 for detonating a bomb
        - 0 for a mark toggle
        - -0.1 for an action that changed nothing
    """

    metadata = {"render_modes": ["human", "ansi"], "render_fps": 4}

    def __init__(
        self,
        config: Optional[FieldConfig] = None,
        render_mode: Optional[str] = None,
    ) -> None:
        """
        Initialize the Minesweeper environment.

        Args:
            config: Field configuration (default: 9x9 with 10 bombs).
            render_mode: How to render the environment.
        """
        super().__init__()

        self.config = config or FieldConfig()
        self.render_mode = render_mode
        self._rng = random.Random()
        self._recorder = RecordingObserver()
        self.engine = Minesweeper(self.config, rng=self._rng)
        self.engine.subscribe(self._recorder)

        self._cells = self.config.size * self.config.size

        self.observation_space = spaces.Box(
            low=MARKED,
            high=DEFUSED,
            shape=(self.config.size, self.config.size),
            dtype=np.int8,
        )

        # Open actions first, then mark actions
        self.action_space = spaces.Discrete(2 * self._cells)

        self._steps = 0

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[np.ndarray, Dict[str, Any]]:
        """
        Reset the environment for a new episode.

        Args:
            seed: Random seed for the bomb layout.
            options: Additional options (unused).

        Returns:
            Tuple of (observation, info dict).
        """
        super().reset(seed=seed)
        if seed is not None:
            self._rng.seed(seed)
        self.engine.restart_game()
        self._recorder.clear()
        self._steps = 0

        return self.engine.get_observation(), self._get_info()

    def step(
        self, action: int
    ) -> Tuple[np.ndarray, SupportsFloat, bool, bool, Dict[str, Any]]:
        """
        Execute one action in the environment.

        Args:
            action: Cell index to open, or cell index plus size * size
                to toggle a mark.

        Returns:
            Tuple of (observation, reward, terminated, truncated, info).
        """
        row, col, mark = self._decode_action(int(action))
        self._steps += 1

        self._recorder.clear()
        if mark:
            self.engine.toggle_cell_bomb_mark(row, col)
        else:
            self.engine.open_cell(row, col)

        reward = self._calculate_reward()
        terminated = self.engine.state in (GameState.WIN, GameState.LOSS)

        return self.engine.get_observation(), reward, terminated, False, self._get_info()

    def _decode_action(self, action: int) -> Tuple[int, int, bool]:
        """Convert flat action index to (row, col, is_mark_action)."""
        mark = action >= self._cells
        index = action - self._cells if mark else action
        return index // self.config.size, index % self.config.size, mark

    def _calculate_reward(self) -> float:
        """Reward the transitions recorded during the last action."""
        if GameState.LOSS in self._recorder.game_states:
            return -10.0

        reward = float(self._recorder.count(CellState.OPENED))
        if GameState.WIN in self._recorder.game_states:
            reward += 10.0
        elif not self._recorder.cell_changes:
            reward = -0.1
        return reward

    def _get_info(self) -> Dict[str, Any]:
        """Get info dictionary for current state."""
        opened = sum(1 for cell in self.engine.cells() if cell.is_opened)

        return {
            "steps": self._steps,
            "opened": opened,
            "bombs": self.engine.placed_bombs,
            "game_state": self.engine.state.name,
            "valid_actions": int(self.get_action_mask().sum()),
        }

    def render(self) -> Optional[str]:
        """Render the current field state."""
        if self.render_mode == "ansi":
            return self._render_ansi()
        if self.render_mode == "human":
            print(self._render_ansi())
        return None

    def _render_ansi(self) -> str:
        """Render field as ASCII string."""
        symbols = {UNOPENED: ".", MARKED: "F", DETONATED: "*", DEFUSED: "+", 0: " "}
        lines = []
        for row in self.engine.get_observation():
            lines.append(" ".join(symbols.get(int(val), str(val)) for val in row))
        return "\n".join(lines)

    def get_action_mask(self) -> np.ndarray:
        """
        Get mask of actions that can change the field.

        Returns:
            Boolean array where True = valid action.
        """
        mask = np.zeros(self.action_space.n, dtype=bool)
        if self.engine.state not in (GameState.READY, GameState.RUNNING):
            return mask
        for index, cell in enumerate(self.engine.cells()):
            if not cell.is_resolved:
                mask[index] = True
                mask[index + self._cells] = True
        return mask


# ============================================================================
# Vectorized Environment Factory
# ============================================================================

def make_vec_env(
    n_envs: int = 4,
    config: Optional[FieldConfig] = None,
    asynchronous: bool = True,
) -> gym.vector.VectorEnv:
    """
    Create vectorized environment for parallel play.

    Args:
        n_envs: Number of parallel environments.
        config: Field configuration.
        asynchronous: Run each environment in its own process.

    Returns:
        Vectorized environment.
    """
    def make_env() -> MinesweeperEnv:
        return MinesweeperEnv(config=config)

    env_fns = [make_env for _ in range(n_envs)]
    if asynchronous:
        return gym.vector.AsyncVectorEnv(env_fns)
    return gym.vector.SyncVectorEnv(env_fns)
