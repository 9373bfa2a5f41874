"""
Deduction and guess strategies.

Each strategy is a declarative query over the board built from the
TileSet pipeline, followed by the actions its conclusion implies.
"""
import logging
import random
from typing import TYPE_CHECKING, Optional, Sequence

from sweep import (
    CollectNeighborsTransform,
    CountInRange,
    CoveredTilesFilter,
    EqualsMinedNeighborCount,
    FlaggedTilesFilter,
    GameSession,
    HasNeighborsFilter,
    MinedNeighborCountRangeFilter,
    RevealBehavior,
    RevealedTilesFilter,
    RevealTileAction,
    SetFlagAction,
    TileFlag,
    TileSet,
)

from .base_solver import Solver, SolverResult, register_solver
from .patterns import BUILTIN_PATTERNS, ConvolutionPattern

if TYPE_CHECKING:
    from .agent import SolverAgent


logger = logging.getLogger(__name__)


# ============================================================================
# Neighbor Sub-pipelines
# ============================================================================

def covered(neighbors: TileSet) -> TileSet:
    return neighbors.applying(CoveredTilesFilter())


def covered_not_asserted(neighbors: TileSet) -> TileSet:
    """Covered neighbors not yet flagged as a certain mine."""
    return covered(neighbors).applying(
        FlaggedTilesFilter([TileFlag.NONE, TileFlag.MAYBE_MINE])
    )


def covered_asserted(neighbors: TileSet) -> TileSet:
    return covered(neighbors).applying(FlaggedTilesFilter([TileFlag.ASSERT_MINE]))


def covered_unflagged(neighbors: TileSet) -> TileSet:
    return covered(neighbors).applying(FlaggedTilesFilter([TileFlag.NONE]))


def revealed_numbered(tiles: TileSet) -> TileSet:
    """Revealed tiles with at least one mined neighbor."""
    return tiles.applying(RevealedTilesFilter()).applying(
        MinedNeighborCountRangeFilter.has_any()
    )


# ============================================================================
# Deduction Strategies
# ============================================================================

@register_solver("exact-covered-tile-match")
class ExactCoveredTileMatchSolver(Solver):
    """
    Flag mines around numbers that have exactly as many covered neighbors.

    If a revealed tile's number equals its count of covered neighbors,
    every one of those neighbors is a mine. All such neighbors across
    the board are flagged in a single result.
    """

    def try_step(
        self,
        session: GameSession,
        agent: Optional["SolverAgent"] = None,
    ) -> Optional[SolverResult]:
        sources = (
            revealed_numbered(TileSet.all_tiles(session.board))
            .applying(HasNeighborsFilter(covered, EqualsMinedNeighborCount()))
            .applying(HasNeighborsFilter(covered_not_asserted, CountInRange(1)))
            .emit_debug_tiles()
        )
        to_flag = sources.applying(CollectNeighborsTransform(covered_not_asserted))

        actions = [
            SetFlagAction(tile, TileFlag.ASSERT_MINE) for tile in to_flag
        ]
        if not actions:
            return None
        return SolverResult(self.name, actions, to_flag.debug_tiles)


@register_solver("clear-fully-flagged-tile")
class ClearFullyFlaggedTileSolver(Solver):
    """
    Reveal a safe neighbor of a number whose mines are all flagged.

    A revealed tile with as many flagged covered neighbors as its
    number has no other mines around it. One of the remaining unflagged
    neighbors, chosen at random across all such tiles, is revealed per
    step. The action is a safe reveal of that neighbor itself rather than
    a trusting-flags chord of the number, so each step clears exactly the
    tile it deduced.
    """

    def try_step(
        self,
        session: GameSession,
        agent: Optional["SolverAgent"] = None,
    ) -> Optional[SolverResult]:
        sources = (
            revealed_numbered(TileSet.all_tiles(session.board))
            .applying(HasNeighborsFilter(covered_asserted, EqualsMinedNeighborCount()))
            .applying(HasNeighborsFilter(
                lambda neighbors: covered_unflagged(neighbors).emit_debug_tiles(),
                CountInRange(1),
            ))
        )
        safe = sources.applying(CollectNeighborsTransform(covered_unflagged))

        tile = safe.random_tile(self.rng)
        if tile is None:
            return None
        action = RevealTileAction(tile, RevealBehavior.SAFE)
        return SolverResult(self.name, [action], sources.debug_tiles)


# ============================================================================
# Non-deductive Strategies
# ============================================================================

@register_solver("guess-at-start")
class GuessAtStartSolver(Solver):
    """Reveal a random tile when nothing has been revealed or flagged yet."""

    def try_step(
        self,
        session: GameSession,
        agent: Optional["SolverAgent"] = None,
    ) -> Optional[SolverResult]:
        all_tiles = TileSet.all_tiles(session.board)
        candidates = all_tiles.applying(CoveredTilesFilter()).applying(
            FlaggedTilesFilter([TileFlag.NONE])
        )
        if len(candidates) != len(all_tiles):
            return None

        tile = candidates.random_tile(self.rng)
        if tile is None:
            return None
        action = RevealTileAction(tile, RevealBehavior.SAFE)
        return SolverResult(self.name, [action])


@register_solver("clear-hinted-tile")
class ClearHintedTileSolver(Solver):
    """Reveal the tile the session last offered as a hint."""

    def try_step(
        self,
        session: GameSession,
        agent: Optional["SolverAgent"] = None,
    ) -> Optional[SolverResult]:
        hint_tile = agent.hint_tile if agent is not None else session.hint_tile
        if hint_tile is None or not hint_tile.is_covered:
            return None
        action = RevealTileAction(hint_tile, RevealBehavior.SAFE)
        return SolverResult(self.name, [action])


# ============================================================================
# Pattern Strategies
# ============================================================================

@register_solver("convolution-pattern")
class ConvolutionPatternSolver(Solver):
    """
    Apply fixed local patterns wherever they match the board.

    Every rotation and mirror image of each pattern is tried. Matches of
    one orientation never overlap; actions are gathered across all of
    them with at most one action per tile.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        patterns: Optional[Sequence[ConvolutionPattern]] = None,
    ) -> None:
        super().__init__(rng)
        self.patterns = []
        for pattern in BUILTIN_PATTERNS if patterns is None else patterns:
            for variant in pattern.all_unique_transforms():
                if variant not in self.patterns:
                    self.patterns.append(variant)

    def try_step(
        self,
        session: GameSession,
        agent: Optional["SolverAgent"] = None,
    ) -> Optional[SolverResult]:
        board = session.board
        actions = []
        targeted = set()
        debug_tiles = []
        for pattern in self.patterns:
            for window in pattern.find_nonoverlapping_matches(board):
                debug_tiles.extend(pattern.window_tiles(board, window))
                for action in pattern.actions(board, window):
                    if id(action.tile) not in targeted:
                        targeted.add(id(action.tile))
                        actions.append(action)

        if not actions:
            logger.debug("No pattern actions among %d patterns", len(self.patterns))
            return None
        return SolverResult(self.name, actions, TileSet(debug_tiles).tiles)
