"""
Configuration for solver evaluation runs.

Difficulty presets live here rather than in the engine: the engine only
knows about a BoardConfig.
"""
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence

from sweep import BoardConfig
from sweep_solver import DEFAULT_SOLVER_ORDER


# ============================================================================
# Difficulty Presets
# ============================================================================

BEGINNER = BoardConfig(9, 9, 10)
INTERMEDIATE = BoardConfig(16, 16, 40)
EXPERT = BoardConfig(30, 16, 99)

DIFFICULTIES: Dict[str, BoardConfig] = {
    "beginner": BEGINNER,
    "intermediate": INTERMEDIATE,
    "expert": EXPERT,
}


def get_difficulty(name: str) -> BoardConfig:
    """Look up a preset by name."""
    try:
        preset = DIFFICULTIES[name.lower()]
    except KeyError:
        known = ", ".join(sorted(DIFFICULTIES))
        raise ValueError(f"Unknown difficulty {name!r} (expected one of {known})")
    return BoardConfig(preset.width, preset.height, preset.mine_count)


# ============================================================================
# Evaluation Configuration
# ============================================================================

@dataclass
class EvaluationConfig:
    """Configuration for evaluating a solver agent."""

    # Board settings
    board: BoardConfig = field(default_factory=lambda: BoardConfig())

    # Solver settings
    solver_ids: Sequence[str] = DEFAULT_SOLVER_ORDER

    # Evaluation settings
    num_games: int = 100
    max_steps_per_game: int = 1000
    seed: Optional[int] = None

    # Output
    output_dir: Optional[str] = None

    # Logging
    log_frequency: int = 0

    def __post_init__(self) -> None:
        if self.num_games < 1:
            raise ValueError("num_games must be positive")
        if self.max_steps_per_game < 1:
            raise ValueError("max_steps_per_game must be positive")
