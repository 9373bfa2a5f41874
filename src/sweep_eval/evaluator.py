"""
Evaluation module for the Sweep solver.

Plays batches of games with a SolverAgent and collects statistics,
with progress logging and JSON export.
"""
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence
import json
import random
import time

import numpy as np

from sweep import Board, GameSession, GameState
from sweep_solver import SolverAgent

from .config import EvaluationConfig


# ============================================================================
# Game Statistics
# ============================================================================

class GameOutcome(Enum):
    """How a single evaluated game ended."""

    WON = auto()
    LOST = auto()
    STUCK = auto()
    TRUNCATED = auto()


@dataclass
class GameStats:
    """Statistics for a single game."""

    outcome: GameOutcome = GameOutcome.TRUNCATED
    steps: int = 0
    cleared_tiles: int = 0
    progress: float = 0.0
    elapsed: float = 0.0
    solver_steps: Dict[str, int] = field(default_factory=dict)

    @property
    def won(self) -> bool:
        return self.outcome == GameOutcome.WON


@dataclass
class EvaluationStats:
    """Accumulated statistics over many games."""

    games: List[GameStats] = field(default_factory=list)

    @property
    def games_played(self) -> int:
        return len(self.games)

    def count(self, outcome: GameOutcome) -> int:
        return sum(1 for game in self.games if game.outcome == outcome)

    def rate(self, outcome: GameOutcome) -> float:
        if not self.games:
            return 0.0
        return self.count(outcome) / len(self.games)

    @property
    def win_rate(self) -> float:
        return self.rate(GameOutcome.WON)

    @property
    def stuck_rate(self) -> float:
        return self.rate(GameOutcome.STUCK)

    @property
    def avg_steps(self) -> float:
        if not self.games:
            return 0.0
        return float(np.mean([game.steps for game in self.games]))

    @property
    def avg_progress(self) -> float:
        if not self.games:
            return 0.0
        return float(np.mean([game.progress for game in self.games]))

    @property
    def solver_steps(self) -> Dict[str, int]:
        totals: Counter = Counter()
        for game in self.games:
            totals.update(game.solver_steps)
        return dict(totals)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "games_played": self.games_played,
            "wins": self.count(GameOutcome.WON),
            "losses": self.count(GameOutcome.LOST),
            "stuck": self.count(GameOutcome.STUCK),
            "truncated": self.count(GameOutcome.TRUNCATED),
            "win_rate": self.win_rate,
            "stuck_rate": self.stuck_rate,
            "avg_steps": self.avg_steps,
            "avg_progress": self.avg_progress,
            "solver_steps": self.solver_steps,
        }


# ============================================================================
# Evaluator
# ============================================================================

class Evaluator:
    """
    Evaluate and compare solver agents.

    Each game starts from a freshly generated board. A game ends when it
    is won or lost, when the agent finds no move (stuck), or when the
    step cap is reached (truncated).
    """

    def __init__(
        self,
        config: Optional[EvaluationConfig] = None,
        callback: Optional[Callable[[EvaluationStats], None]] = None,
    ) -> None:
        """
        Initialize the evaluator.

        Args:
            config: Evaluation configuration.
            callback: Optional callback after every game.
        """
        self.config = config or EvaluationConfig()
        self.callback = callback
        self._rng = random.Random(self.config.seed)

    def evaluate(
        self,
        solver_ids: Optional[Sequence[str]] = None,
    ) -> EvaluationStats:
        """
        Play ``config.num_games`` games with one solver ordering.

        Args:
            solver_ids: Solver ordering (default: the configured one).

        Returns:
            Statistics over all games.
        """
        ids = self.config.solver_ids if solver_ids is None else solver_ids
        board = Board(self.config.board, rng=self._child_rng())
        session = GameSession(board)
        agent = SolverAgent(ids, rng=self._child_rng())
        stats = EvaluationStats()
        start_time = time.time()

        try:
            for game in range(self.config.num_games):
                if game > 0:
                    session.restart()
                agent.reset()
                stats.games.append(self.play_game(session, agent))

                if self.config.log_frequency and (game + 1) % self.config.log_frequency == 0:
                    self._log_progress(stats, start_time)

                if self.callback:
                    self.callback(stats)
        finally:
            session.close()

        if self.config.output_dir:
            self.save_stats(stats)

        return stats

    def play_game(self, session: GameSession, agent: SolverAgent) -> GameStats:
        """Let ``agent`` play ``session`` until the game ends or stalls."""
        stats = GameStats()
        solver_steps: Counter = Counter()

        while session.is_playing and stats.steps < self.config.max_steps_per_game:
            result = agent.try_step(session)
            if result is None:
                stats.outcome = GameOutcome.STUCK
                break
            session.perform_actions(result.actions)
            solver_steps[result.solver_name] += 1
            stats.steps += 1

        if session.state == GameState.WON:
            stats.outcome = GameOutcome.WON
        elif session.state == GameState.LOST:
            stats.outcome = GameOutcome.LOST

        game_stats = session.statistics
        stats.cleared_tiles = game_stats.cleared_tile_count
        stats.progress = game_stats.progress
        stats.elapsed = session.elapsed_time
        stats.solver_steps = dict(solver_steps)
        return stats

    def compare(
        self, orderings: Dict[str, Sequence[str]]
    ) -> Dict[str, Dict[str, Any]]:
        """
        Compare multiple solver orderings.

        Args:
            orderings: Dictionary of name -> solver ids.

        Returns:
            Dictionary of name -> evaluation metrics.
        """
        results = {}
        for name, solver_ids in orderings.items():
            print(f"Evaluating {name}...")
            results[name] = self.evaluate(solver_ids).to_dict()
        return results

    def save_stats(
        self,
        stats: EvaluationStats,
        path: Optional[Path] = None,
    ) -> Path:
        """Save evaluation statistics to JSON."""
        if path is None:
            output_dir = Path(self.config.output_dir or ".")
            output_dir.mkdir(parents=True, exist_ok=True)
            path = output_dir / "evaluation_stats.json"
        data = stats.to_dict()
        data["board"] = {
            "width": self.config.board.width,
            "height": self.config.board.height,
            "mine_count": self.config.board.mine_count,
        }
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
        return Path(path)

    def _child_rng(self) -> random.Random:
        return random.Random(self._rng.getrandbits(64))

    def _log_progress(self, stats: EvaluationStats, start_time: float) -> None:
        """Log evaluation progress."""
        elapsed = time.time() - start_time
        games_per_sec = stats.games_played / elapsed if elapsed > 0 else 0

        print(
            f"Game {stats.games_played}/{self.config.num_games} | "
            f"Win Rate: {stats.win_rate:.1%} | "
            f"Stuck: {stats.stuck_rate:.1%} | "
            f"Avg Progress: {stats.avg_progress:.1%} | "
            f"Speed: {games_per_sec:.1f} games/s"
        )
