"""
Solver agent for Sweep.

Runs the configured strategies in priority order and returns the first
result that carries actions.
"""
import logging
import random
import time
from typing import Iterable, List, Optional

from sweep import GameSession, Tile

from .base_solver import SOLVER_TYPES, Solver, SolverResult
from . import strategies  # noqa: F401  registers the built-in solvers


logger = logging.getLogger(__name__)


# ============================================================================
# Solver Ordering
# ============================================================================

DEFAULT_SOLVER_ORDER = (
    "exact-covered-tile-match",
    "clear-fully-flagged-tile",
    "guess-at-start",
)


def make_ordered_solvers(
    solver_ids: Iterable[str],
    rng: Optional[random.Random] = None,
) -> List[Solver]:
    """
    Instantiate solvers for ``solver_ids`` in order.

    Unknown ids are skipped.
    """
    solvers = []
    for solver_id in solver_ids:
        solver_type = SOLVER_TYPES.get(solver_id)
        if solver_type is None:
            logger.warning("Skipping unknown solver id %r", solver_id)
            continue
        solvers.append(solver_type(rng=rng))
    return solvers


# ============================================================================
# Solver Agent
# ============================================================================

class SolverAgent:
    """
    Orchestrates solver strategies.

    Strategies run in priority order; the first one whose result has
    actions wins. When none does, ``try_step`` returns None: the
    position needs reasoning beyond these rules.
    """

    def __init__(
        self,
        solver_ids: Optional[Iterable[str]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        """
        Initialize the agent.

        Args:
            solver_ids: Ordered solver ids (default: DEFAULT_SOLVER_ORDER).
            rng: Random source shared by all strategies.
        """
        self.rng = rng or random.Random()
        self.solver_ids = list(
            DEFAULT_SOLVER_ORDER if solver_ids is None else solver_ids
        )
        self.solvers = make_ordered_solvers(self.solver_ids, self.rng)
        self.hint_tile: Optional[Tile] = None

    def __repr__(self) -> str:
        names = ", ".join(solver.name for solver in self.solvers)
        return f"<SolverAgent [{names}]>"

    def try_step(self, session: GameSession) -> Optional[SolverResult]:
        """
        Find the next move for ``session``.

        The session is not mutated apart from being marked as not clean;
        applying the returned actions is up to the caller.

        Returns:
            The first successful SolverResult, or None.
        """
        if not self.solvers:
            return None
        self.hint_tile = session.hint_tile
        session.is_clean = False
        start = time.perf_counter()
        result = None
        for solver in self.solvers:
            candidate = solver.try_step(session, self)
            if candidate is not None and candidate.is_success:
                result = candidate
                break
        self.hint_tile = None
        logger.debug(
            "SolverAgent.try_step: %s in %.2fms",
            result if result else "no result",
            (time.perf_counter() - start) * 1000,
        )
        return result

    def reset(self) -> None:
        self.hint_tile = None
