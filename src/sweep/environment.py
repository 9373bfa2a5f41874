"""
Gymnasium environment wrapper for Sweep.

Exposes a game session through the standard RL interface so agents,
including the deduction solver, can be driven step by step.
"""
from typing import Any, Dict, Optional, Tuple, SupportsFloat

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from .board import Board, BoardConfig
from .session import GameSession, GameState, RevealResult
from .tile import Coord, Tile


# ============================================================================
# Rewards
# ============================================================================

REWARD_PROGRESS = 1.0
REWARD_WIN = 10.0
REWARD_LOSS = -10.0
REWARD_NOOP = -0.1


# ============================================================================
# Sweep Environment
# ============================================================================

class SweepEnv(gym.Env):
    """
    Gymnasium environment for Sweep.

    Observation:
        2D array indexed [y, x] where:
        - -1 = covered tile
        - -2 = covered, flagged as a mine
        - -3 = covered, flagged as a maybe-mine
        - 0-8 = revealed tile with mined neighbor count
        - 9 = revealed mine

    Actions:
        Discrete action space of size width * height.
        Action i targets tile (i % width, i // width). A covered tile is
        revealed; a revealed numbered tile is chorded, trusting flags.

    Rewards:
        - +1 for an action that cleared at least one tile
        - +10 for winning the game
        - -10 for triggering a mine
        - -0.1 for an action that changed nothing
    """

    metadata = {"render_modes": ["human", "ansi"], "render_fps": 4}

    def __init__(
        self,
        config: Optional[BoardConfig] = None,
        render_mode: Optional[str] = None,
    ) -> None:
        """
        Initialize the Sweep environment.

        Args:
            config: Board configuration (default: 9x9 with 10 mines).
            render_mode: How to render the environment.
        """
        super().__init__()

        self.config = config or BoardConfig()
        self.board = Board(self.config)
        self.session = GameSession(self.board)
        self.render_mode = render_mode

        self.observation_space = spaces.Box(
            low=-3,
            high=9,
            shape=(self.config.height, self.config.width),
            dtype=np.int8,
        )

        # One action per tile
        self.action_space = spaces.Discrete(self.config.tile_count)

        self._steps = 0

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[np.ndarray, Dict[str, Any]]:
        """
        Reset the environment for a new game.

        Args:
            seed: Random seed for reproducible mine layouts.
            options: ``{"same_board": True}`` replays the current layout.

        Returns:
            Tuple of (observation, info dict).
        """
        super().reset(seed=seed)
        if seed is not None:
            self.board.rng.seed(seed)
        same_board = bool(options and options.get("same_board"))
        self.session.restart(regenerate=not same_board)
        self._steps = 0

        return self.board.get_observation(), self._get_info()

    def step(
        self, action: int
    ) -> Tuple[np.ndarray, SupportsFloat, bool, bool, Dict[str, Any]]:
        """
        Execute one action in the environment.

        Args:
            action: Tile index (y * width + x).

        Returns:
            Tuple of (observation, reward, terminated, truncated, info).
        """
        tile = self.board.tile_at(self.action_to_coord(action))
        self._steps += 1

        before = self.session.statistics.cleared_tile_count
        if tile is not None and tile.is_covered:
            result = self.session.attempt_reveal(tile.coord)
        else:
            result = self.session.attempt_reveal(
                self.action_to_coord(action), assert_trusting_flags=True
            )
        after = self.session.statistics.cleared_tile_count

        reward = self._calculate_reward(result, after - before)
        return (
            self.board.get_observation(),
            reward,
            not self.session.is_playing,
            False,
            self._get_info(),
        )

    def solver_step(self, agent) -> Tuple[np.ndarray, SupportsFloat, bool, bool, Dict[str, Any]]:
        """
        Let a solver agent choose and apply the next move.

        A solver that finds nothing truncates the episode.
        """
        self._steps += 1
        before = self.session.statistics.cleared_tile_count
        solver_result = agent.try_step(self.session)
        if solver_result is None:
            info = self._get_info()
            info["stuck"] = True
            return self.board.get_observation(), 0.0, False, True, info

        result = self.session.perform_actions(solver_result.actions)
        after = self.session.statistics.cleared_tile_count
        reward = self._calculate_reward(result, after - before)
        info = self._get_info()
        info["solver"] = solver_result.solver_name
        return (
            self.board.get_observation(),
            reward,
            not self.session.is_playing,
            False,
            info,
        )

    def action_to_coord(self, action: int) -> Coord:
        """Convert flat action index to a tile coordinate."""
        return Coord(int(action) % self.config.width, int(action) // self.config.width)

    def coord_to_action(self, coord: Tuple[int, int]) -> int:
        x, y = coord
        return y * self.config.width + x

    def _calculate_reward(self, result: RevealResult, cleared: int) -> float:
        if self.session.state == GameState.WON:
            return REWARD_WIN
        if self.session.state == GameState.LOST:
            return REWARD_LOSS
        if result == RevealResult.OK and cleared > 0:
            return REWARD_PROGRESS
        if result == RevealResult.OK:
            return 0.0
        return REWARD_NOOP

    def _get_info(self) -> Dict[str, Any]:
        """Get info dictionary for current state."""
        stats = self.session.statistics
        return {
            "steps": self._steps,
            "cleared": stats.cleared_tile_count,
            "progress": stats.progress,
            "game_state": self.session.state.name,
        }

    def render(self) -> Optional[str]:
        """Render the current board state."""
        text = self.board.render()
        if self.render_mode == "ansi":
            return text
        if self.render_mode == "human":
            print(text)
        return None

    def get_action_mask(self) -> np.ndarray:
        """
        Get mask of actions that can change the board.

        Returns:
            Boolean array where True = covered unflagged tile or a
            revealed numbered tile with covered neighbors.
        """
        mask = np.zeros(self.action_space.n, dtype=bool)
        if not self.session.is_playing:
            return mask
        for tile in self.board.all_tiles:
            mask[self.coord_to_action(tile.coord)] = _is_actionable(tile)
        return mask


def _is_actionable(tile: Tile) -> bool:
    if tile.is_covered:
        return not tile.flag.is_present
    return tile.mined_neighbor_count > 0 and any(
        neighbor.is_covered for neighbor in tile.neighbors
    )
