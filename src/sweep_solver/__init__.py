"""
Sweep deduction solver.

Provides the strategies and the agent that runs them:
- ExactCoveredTileMatchSolver: flag tiles that must be mines
- ClearFullyFlaggedTileSolver: reveal tiles that must be safe
- GuessAtStartSolver: random first move on an untouched board
- ClearHintedTileSolver: reveal the session's hint tile
- ConvolutionPatternSolver: apply fixed local patterns
"""
from .base_solver import SOLVER_TYPES, Solver, SolverResult, register_solver
from .strategies import (
    ClearFullyFlaggedTileSolver,
    ClearHintedTileSolver,
    ConvolutionPatternSolver,
    ExactCoveredTileMatchSolver,
    GuessAtStartSolver,
)
from .patterns import BUILTIN_PATTERNS, ConvolutionPattern
from .agent import DEFAULT_SOLVER_ORDER, SolverAgent, make_ordered_solvers

__all__ = [
    "SOLVER_TYPES",
    "Solver",
    "SolverResult",
    "register_solver",
    "ClearFullyFlaggedTileSolver",
    "ClearHintedTileSolver",
    "ConvolutionPatternSolver",
    "BUILTIN_PATTERNS",
    "ConvolutionPattern",
    "ExactCoveredTileMatchSolver",
    "GuessAtStartSolver",
    "DEFAULT_SOLVER_ORDER",
    "SolverAgent",
    "make_ordered_solvers",
]
