"""
Unit tests for the Gymnasium environment wrapper.
"""
import numpy as np
import pytest

from sweep import BoardConfig, SweepEnv
from sweep.environment import REWARD_LOSS, REWARD_NOOP, REWARD_PROGRESS, REWARD_WIN
from sweep_solver import SolverAgent


@pytest.fixture
def env() -> SweepEnv:
    environment = SweepEnv(BoardConfig(3, 3, 1), render_mode="ansi")
    environment.reset(seed=0)
    return environment


@pytest.fixture
def corner_env(env: SweepEnv) -> SweepEnv:
    """Environment whose single mine sits at (2, 2)."""
    env.board.place_mines([(2, 2)])
    return env


# ============================================================================
# Space Tests
# ============================================================================

class TestSpaces:
    """Test observation and action spaces."""

    def test_reset_observation(self, env: SweepEnv) -> None:
        obs, info = env.reset(seed=1)
        assert obs.shape == (3, 3)
        assert np.all(obs == -1)
        assert env.observation_space.contains(obs)
        assert info["steps"] == 0
        assert info["game_state"] == "PLAYING"

    def test_action_space_size(self, env: SweepEnv) -> None:
        assert env.action_space.n == 9

    @pytest.mark.parametrize("action, coord", [(0, (0, 0)), (2, (2, 0)), (5, (2, 1)), (7, (1, 2))])
    def test_action_coord_mapping(self, env: SweepEnv, action: int, coord) -> None:
        assert tuple(env.action_to_coord(action)) == coord
        assert env.coord_to_action(coord) == action

    def test_reset_same_board_keeps_layout(self, corner_env: SweepEnv) -> None:
        corner_env.step(corner_env.coord_to_action((1, 1)))
        obs, _ = corner_env.reset(options={"same_board": True})
        assert np.all(obs == -1)
        assert corner_env.board.tile_at((2, 2)).is_mined


# ============================================================================
# Step Tests
# ============================================================================

class TestStep:
    """Test rewards and termination."""

    def test_reveal_number_is_progress(self, corner_env: SweepEnv) -> None:
        obs, reward, terminated, truncated, info = corner_env.step(
            corner_env.coord_to_action((1, 1))
        )
        assert obs[1, 1] == 1
        assert reward == REWARD_PROGRESS
        assert not terminated and not truncated
        assert info["cleared"] == 1

    def test_failed_chord_is_penalized(self, corner_env: SweepEnv) -> None:
        action = corner_env.coord_to_action((1, 1))
        corner_env.step(action)
        _, reward, terminated, _, _ = corner_env.step(action)
        assert reward == REWARD_NOOP
        assert not terminated

    def test_flood_wins(self, corner_env: SweepEnv) -> None:
        _, reward, terminated, _, info = corner_env.step(0)
        assert reward == REWARD_WIN
        assert terminated
        assert info["game_state"] == "WON"

    def test_mine_loses(self, corner_env: SweepEnv) -> None:
        corner_env.step(corner_env.coord_to_action((1, 1)))
        _, reward, terminated, _, info = corner_env.step(
            corner_env.coord_to_action((2, 2))
        )
        assert reward == REWARD_LOSS
        assert terminated
        assert info["game_state"] == "LOST"


# ============================================================================
# Solver Step Tests
# ============================================================================

class TestSolverStep:
    """Test driving the environment with the solver agent."""

    def test_first_solver_step_guesses(self, env: SweepEnv) -> None:
        _, _, _, _, info = env.solver_step(SolverAgent())
        assert info["solver"] == "GuessAtStartSolver"
        assert info["cleared"] >= 1

    def test_stuck_solver_truncates(self, env: SweepEnv) -> None:
        _, reward, terminated, truncated, info = env.solver_step(SolverAgent([]))
        assert truncated and not terminated
        assert info["stuck"] is True
        assert reward == 0.0


# ============================================================================
# Mask and Render Tests
# ============================================================================

class TestMaskAndRender:
    """Test action masking and text rendering."""

    def test_fresh_mask_allows_everything(self, env: SweepEnv) -> None:
        assert env.get_action_mask().all()

    def test_flagged_tile_is_masked(self, corner_env: SweepEnv) -> None:
        corner_env.session.cycle_flag((0, 0))
        mask = corner_env.get_action_mask()
        assert not mask[0]
        assert mask[1]

    def test_revealed_number_with_covered_neighbors_is_actionable(
        self, corner_env: SweepEnv
    ) -> None:
        corner_env.step(corner_env.coord_to_action((1, 1)))
        assert corner_env.get_action_mask()[corner_env.coord_to_action((1, 1))]

    def test_mask_is_empty_when_done(self, corner_env: SweepEnv) -> None:
        corner_env.step(0)
        assert not corner_env.get_action_mask().any()

    def test_ansi_render(self, corner_env: SweepEnv) -> None:
        assert corner_env.render() == ". . .\n. . .\n. . ."
