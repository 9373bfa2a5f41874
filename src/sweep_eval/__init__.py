"""
Evaluation module for the Sweep solver.
"""
from .config import (
    BEGINNER,
    DIFFICULTIES,
    EXPERT,
    INTERMEDIATE,
    EvaluationConfig,
    get_difficulty,
)
from .evaluator import (
    EvaluationStats,
    Evaluator,
    GameOutcome,
    GameStats,
)

__all__ = [
    "BEGINNER",
    "DIFFICULTIES",
    "EXPERT",
    "INTERMEDIATE",
    "EvaluationConfig",
    "get_difficulty",
    "EvaluationStats",
    "Evaluator",
    "GameOutcome",
    "GameStats",
]
