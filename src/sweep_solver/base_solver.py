"""
Base solver interface for the Sweep deduction solver.

Defines the result type every strategy returns and the registry that
maps solver ids to strategy classes.
"""
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Type

from sweep import GameSession, SweepAction, Tile

if TYPE_CHECKING:
    from .agent import SolverAgent


# ============================================================================
# Solver Result
# ============================================================================

@dataclass
class SolverResult:
    """
    Output of one deduction attempt.

    Attributes:
        solver_name: Name of the strategy that produced the result.
        actions: Ordered actions to apply to the session.
        debug_tiles: Tiles the strategy reasoned about, for display only.
    """

    solver_name: str
    actions: List[SweepAction] = field(default_factory=list)
    debug_tiles: List[Tile] = field(default_factory=list)

    @property
    def is_success(self) -> bool:
        """A result is successful iff it carries at least one action."""
        return len(self.actions) > 0

    def __str__(self) -> str:
        described = "; ".join(str(action) for action in self.actions)
        return f"<{self.solver_name} actions:{len(self.actions)}:{described}>"


# ============================================================================
# Base Solver Interface
# ============================================================================

class Solver(ABC):
    """
    Abstract base class for solver strategies.

    A strategy inspects the session and returns a SolverResult, or None
    when it finds nothing to do.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        """
        Initialize the solver.

        Args:
            rng: Random source for strategies that pick among candidates.
        """
        self.rng = rng or random.Random()

    @property
    def name(self) -> str:
        return type(self).__name__

    def __repr__(self) -> str:
        return f"<{self.name}>"

    @abstractmethod
    def try_step(
        self,
        session: GameSession,
        agent: Optional["SolverAgent"] = None,
    ) -> Optional[SolverResult]:
        """
        Look for a move.

        Args:
            session: Session to inspect. Not mutated.
            agent: Orchestrating agent, for strategies that need its state.

        Returns:
            A SolverResult, or None if this strategy found nothing.
        """


# ============================================================================
# Solver Registry
# ============================================================================

SOLVER_TYPES: Dict[str, Type[Solver]] = {}


def register_solver(solver_id: str) -> Callable[[Type[Solver]], Type[Solver]]:
    """Class decorator adding a strategy to SOLVER_TYPES under ``solver_id``."""
    def decorator(cls: Type[Solver]) -> Type[Solver]:
        SOLVER_TYPES[solver_id] = cls
        cls.solver_id = solver_id
        return cls
    return decorator
