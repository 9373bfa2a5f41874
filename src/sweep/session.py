"""
Game session module for the Sweep engine.

The session is the only component that mutates tiles after a board is
built. It applies reveal and flag intents, runs flood and chord reveals,
and tracks the win/loss state machine.
"""
import logging
import time
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional

from .board import Board, CoordLike
from .collection import (
    CollectNeighborsTransform,
    CoveredTilesFilter,
    FlaggedTilesFilter,
    MineFilter,
    RevealedTilesFilter,
    TileSet,
)
from .tile import Tile, TileFlag

if TYPE_CHECKING:
    from .actions import SweepAction


logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

class GameState(Enum):
    """Possible states of the game."""

    PLAYING = auto()
    LOST = auto()
    WON = auto()


class RevealBehavior(Enum):
    """How ``attempt_reveal_tile`` treats the target tile."""

    SAFE = 0
    ASSERT_TRUSTING_FLAGS = 1
    ASSERT_FLAG = 2


class RevealResult(Enum):
    """Outcome of a reveal attempt."""

    NOOP = 0
    OK = 1
    MINE_TRIGGERED = 2
    FAILURE = 3


WARNING_MAYBE_FLAGS = "Can't clear neighbors while a neighbor is marked as a maybe-mine."
WARNING_INCORRECT_FLAG_COUNT = "Flag count doesn't match this tile's number."
WARNING_NO_CANDIDATES = "No covered neighbors left to clear."
WARNING_INCORRECT_COVERED_COUNT = "Covered tile count doesn't match this tile's number."
WARNING_ALL_NEIGHBORS_FLAGGED = "All neighbors are already flagged."


@dataclass(frozen=True)
class GameStatistics:
    """Snapshot of board progress."""

    mine_count: int
    total_tile_count: int
    cleared_tile_count: int
    assert_mine_flag_count: int
    points: int

    @property
    def progress(self) -> float:
        """Fraction of tiles either cleared or flagged as mines."""
        if self.total_tile_count <= 0:
            return 0.0
        return (
            self.cleared_tile_count + self.assert_mine_flag_count
        ) / self.total_tile_count


SessionObserver = Callable[["GameSession"], None]


# ============================================================================
# Game Session
# ============================================================================

class GameSession:
    """
    Controller for one playthrough of a board.

    All mutating operations are silent no-ops when they can't apply
    (game over, coordinate out of bounds, tile already revealed).
    Observers are called synchronously after every mutating call.

    Attributes:
        board: The board this session exclusively owns.
        state: Current GameState.
        is_first_move: True until the first flag or reveal.
        start_time: Clock value when play started.
        end_time: Clock value when the game was won or lost.
    """

    def __init__(
        self,
        board: Board,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize a session on ``board``.

        Args:
            board: Board to play. Must not be owned by another session.
            clock: Time source for start and end times.
        """
        board._claim(self)
        self.board = board
        self._clock = clock
        self._observers: List[SessionObserver] = []
        self._start()

    def _start(self) -> None:
        self.state = GameState.PLAYING
        self.is_first_move = True
        self.start_time = self._clock()
        self.end_time: Optional[float] = None
        self.hint_tile: Optional[Tile] = None
        self.most_recent_tile: Optional[Tile] = None
        self.warning_message: Optional[str] = None
        self.is_clean = True

    def close(self) -> None:
        """Give up ownership of the board."""
        self.board._release(self)

    # ========================================================================
    # State Accessors
    # ========================================================================

    @property
    def is_playing(self) -> bool:
        return self.state == GameState.PLAYING

    @property
    def is_won(self) -> bool:
        return self.state == GameState.WON

    @property
    def is_lost(self) -> bool:
        return self.state == GameState.LOST

    @property
    def elapsed_time(self) -> float:
        end = self.end_time if self.end_time is not None else self._clock()
        return end - self.start_time

    @property
    def statistics(self) -> GameStatistics:
        cleared = 0
        flagged = 0
        points = 0
        for tile in self.board.tiles():
            if tile.flag is TileFlag.ASSERT_MINE:
                flagged += 1
            if not tile.is_covered and not tile.is_mined:
                cleared += 1
                points += 2 ** tile.mined_neighbor_count
        return GameStatistics(
            mine_count=self.board.mine_count,
            total_tile_count=self.board.config.tile_count,
            cleared_tile_count=cleared,
            assert_mine_flag_count=flagged,
            points=points,
        )

    # ========================================================================
    # Observers
    # ========================================================================

    def add_observer(self, observer: SessionObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def remove_observer(self, observer: SessionObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def _notify_changed(self) -> None:
        for observer in list(self._observers):
            observer(self)

    def _begin_move(self) -> None:
        self.board.assert_not_iterating()
        self.hint_tile = None
        self.warning_message = None

    # ========================================================================
    # Game Lifecycle
    # ========================================================================

    def reset_board(self) -> None:
        """Play the same mine layout again from the start."""
        if self.state != GameState.PLAYING:
            return
        self.board.assert_not_iterating()
        self.board.reset()
        self._start()
        self._notify_changed()

    def restart(self, regenerate: bool = True) -> None:
        """Start a new game, with a fresh mine layout unless told not to."""
        self.board.assert_not_iterating()
        if regenerate:
            self.board.generate()
        else:
            self.board.reset()
        self._start()
        self._notify_changed()

    # ========================================================================
    # Flagging
    # ========================================================================

    def cycle_flag(self, coord: CoordLike) -> None:
        """Advance the flag on a covered tile one step."""
        if self.state != GameState.PLAYING:
            return
        tile = self.board.tile_at(coord)
        if tile is None:
            return
        self.is_first_move = False
        if not tile.is_covered:
            return
        self._begin_move()
        tile.cycle_flag()
        self.most_recent_tile = tile
        self.check_for_win()
        self._notify_changed()

    def set_flag(self, tile: Optional[Tile], flag: TileFlag) -> bool:
        """
        Set an explicit flag on a covered tile.

        Returns:
            True if the flag was applied.
        """
        if self.state != GameState.PLAYING or tile is None:
            return False
        self.is_first_move = False
        if not tile.is_covered:
            return False
        self._begin_move()
        tile.set_flag(flag)
        self.most_recent_tile = tile
        self.check_for_win()
        self._notify_changed()
        return True

    def flag_all_neighbors(self, coord: CoordLike) -> RevealResult:
        """
        Flag every covered neighbor of a number that must all be mines.

        Applies to a revealed tile whose covered neighbor count equals
        its number. Unflagged and maybe-flagged neighbors become
        AssertMine flags.

        Returns:
            OK when flags were set, FAILURE with a warning when the count
            doesn't match or nothing is left to flag, NOOP otherwise.
        """
        if self.state != GameState.PLAYING:
            return RevealResult.NOOP
        tile = self.board.tile_at(coord)
        if tile is None or tile.is_covered or tile.mined_neighbor_count < 1:
            return RevealResult.NOOP
        self._begin_move()

        neighbors = TileSet([tile]).applying(
            CollectNeighborsTransform(
                lambda collection: collection.applying(CoveredTilesFilter())
            )
        )
        if len(neighbors) != tile.mined_neighbor_count:
            self.warning_message = WARNING_INCORRECT_COVERED_COUNT
            self._notify_changed()
            return RevealResult.FAILURE

        to_flag = neighbors.applying(
            FlaggedTilesFilter([TileFlag.NONE, TileFlag.MAYBE_MINE])
        )
        if to_flag.is_empty:
            self.warning_message = WARNING_ALL_NEIGHBORS_FLAGGED
            self._notify_changed()
            return RevealResult.FAILURE

        for neighbor in to_flag:
            neighbor.set_flag(TileFlag.ASSERT_MINE)
        self.most_recent_tile = tile
        self.check_for_win()
        self._notify_changed()
        return RevealResult.OK

    # ========================================================================
    # Revealing
    # ========================================================================

    def attempt_reveal(
        self,
        coord: CoordLike,
        assert_trusting_flags: bool = False,
    ) -> RevealResult:
        """
        Reveal the tile at ``coord``.

        Args:
            coord: Tile coordinate.
            assert_trusting_flags: Chord an already revealed tile,
                clearing every covered neighbor not flagged as a mine.

        Returns:
            Outcome of the reveal.
        """
        tile = self.board.tile_at(coord)
        if tile is None:
            return RevealResult.NOOP
        if self.state == GameState.PLAYING:
            self._begin_move()
        behavior = (
            RevealBehavior.ASSERT_TRUSTING_FLAGS
            if assert_trusting_flags
            else RevealBehavior.SAFE
        )
        result = self.attempt_reveal_tile(tile, behavior)
        if result != RevealResult.NOOP:
            self.most_recent_tile = tile
        self.check_for_win()
        self._notify_changed()
        return result

    def attempt_reveal_tile(
        self,
        tile: Optional[Tile],
        behavior: RevealBehavior,
    ) -> RevealResult:
        """
        Reveal ``tile`` according to ``behavior``.

        On the first move of a game a mined target causes the whole
        board to be regenerated until the target is safe. Zero-count
        tiles flood-reveal their connected region. ASSERT_TRUSTING_FLAGS
        chords a revealed tile whose AssertMine flags match its number.
        """
        if self.state != GameState.PLAYING or tile is None:
            return RevealResult.NOOP

        attempts = 0
        while self.is_first_move and tile.is_mined:
            attempts += 1
            logger.debug(
                "Clicked a mine on first move at %s, shuffling (attempt %d)",
                tile.coord, attempts,
            )
            self.board.generate()
            tile = self.board.tile_at(tile.coord)
        self.is_first_move = False

        guard = self._check_reveal_guard(tile, behavior)
        if guard is not None:
            return guard

        if tile.is_mined:
            self._mine_triggered(tile)
            return RevealResult.MINE_TRIGGERED

        if tile.mined_neighbor_count == 0:
            for cleared in self._collect_clear_area(tile):
                cleared.set_covered(False)
        else:
            tile.set_covered(False)

        if behavior == RevealBehavior.ASSERT_TRUSTING_FLAGS:
            for neighbor in tile.neighbors:
                self.attempt_reveal_tile(neighbor, RevealBehavior.ASSERT_FLAG)

        if self.state == GameState.LOST:
            return RevealResult.MINE_TRIGGERED
        return RevealResult.OK

    def _check_reveal_guard(
        self,
        tile: Tile,
        behavior: RevealBehavior,
    ) -> Optional[RevealResult]:
        """Return a result to stop with, or None to proceed."""
        if behavior == RevealBehavior.SAFE:
            if not tile.is_covered or tile.flag.is_present:
                return RevealResult.NOOP
        elif behavior == RevealBehavior.ASSERT_FLAG:
            if not tile.is_covered:
                return RevealResult.NOOP
            if tile.is_mined and tile.flag is TileFlag.ASSERT_MINE:
                return RevealResult.NOOP
        elif behavior == RevealBehavior.ASSERT_TRUSTING_FLAGS:
            if tile.is_covered or tile.flag.is_present:
                return RevealResult.NOOP
            assert_flag_count = 0
            any_maybe_flags = False
            candidates = 0
            for neighbor in tile.neighbors:
                if neighbor.flag is TileFlag.MAYBE_MINE:
                    any_maybe_flags = True
                if neighbor.flag is TileFlag.ASSERT_MINE:
                    assert_flag_count += 1
                elif neighbor.is_covered:
                    candidates += 1
            if any_maybe_flags:
                self.warning_message = WARNING_MAYBE_FLAGS
                return RevealResult.FAILURE
            if assert_flag_count != tile.mined_neighbor_count:
                self.warning_message = WARNING_INCORRECT_FLAG_COUNT
                return RevealResult.FAILURE
            if candidates == 0:
                self.warning_message = WARNING_NO_CANDIDATES
                return RevealResult.NOOP
        return None

    def _collect_clear_area(self, origin: Tile) -> List[Tile]:
        """
        Collect the connected zero-count region around ``origin``.

        Includes the ring of numbered tiles bordering the region. Never
        crosses revealed or flagged tiles. Nothing is mutated here.
        """
        region = [origin]
        visited = {id(origin)}
        stack = [origin]
        while stack:
            current = stack.pop()
            for neighbor in current.neighbors:
                if id(neighbor) in visited:
                    continue
                if not neighbor.is_covered or neighbor.flag.is_present:
                    continue
                visited.add(id(neighbor))
                region.append(neighbor)
                if neighbor.mined_neighbor_count == 0:
                    stack.append(neighbor)
        return region

    def _mine_triggered(self, tile: Tile) -> None:
        tile.set_covered(False)
        self._complete(GameState.LOST)

    # ========================================================================
    # Game End
    # ========================================================================

    def check_for_win(self) -> GameState:
        """
        Mark the game won once every non-mine tile is revealed.

        Flags are not required; an unflagged covered mine still counts
        as finished.
        """
        if self.state != GameState.PLAYING:
            return self.state
        unfinished = False

        def visit(tile: Tile) -> bool:
            nonlocal unfinished
            if tile.is_covered and not tile.is_mined:
                unfinished = True
                return False
            return True

        self.board.visit_tiles(None, visit)
        if not unfinished:
            self._complete(GameState.WON)
        return self.state

    def _complete(self, state: GameState) -> None:
        self.state = state
        self.end_time = self._clock()
        logger.debug(
            "Game %s after %.1fs", state.name.lower(), self.end_time - self.start_time
        )

    def reveal_all(self, mines_only: bool = True) -> None:
        """
        Uncover the board for end-of-game display.

        Only acts once the game is won or lost. Correct AssertMine flags
        stay in place, flags on safe tiles are marked incorrect, and
        remaining mines are uncovered. With ``mines_only`` False every
        other covered tile is uncovered too.
        """
        if self.state == GameState.PLAYING:
            return
        self.board.assert_not_iterating()
        for tile in self.board.tiles():
            if not tile.is_covered:
                continue
            if tile.is_mined and tile.flag is TileFlag.ASSERT_MINE:
                continue
            if tile.flag.is_present and not tile.is_mined:
                tile.mark_incorrect_flag()
                continue
            if tile.is_mined or not mines_only:
                tile.set_covered(False)

    # ========================================================================
    # Hints and Actions
    # ========================================================================

    def attempt_hint(self) -> Optional[Tile]:
        """
        Choose a safe covered tile to suggest to the player.

        Prefers tiles next to revealed tiles, closest to the most recent
        move. Using a hint marks the session as not clean.
        """
        if self.state != GameState.PLAYING or self.hint_tile is not None:
            return None
        all_tiles = TileSet.all_tiles(self.board)
        candidates = all_tiles.applying(RevealedTilesFilter()).applying(
            CollectNeighborsTransform(
                lambda neighbors: neighbors.applying(CoveredTilesFilter())
                .applying(MineFilter(False))
            )
        )
        if candidates.is_empty:
            candidates = all_tiles.applying(CoveredTilesFilter()).applying(
                MineFilter(False)
            )
        tile = candidates.random_tile_closest_to(self.most_recent_tile, self.board.rng)
        if tile is None:
            return None
        self.hint_tile = tile
        self.is_clean = False
        self._notify_changed()
        return tile

    def perform_actions(self, actions: Iterable["SweepAction"]) -> RevealResult:
        """
        Apply actions in order until the game stops playing.

        Returns:
            Result of the last action performed.
        """
        result = RevealResult.NOOP
        for action in actions:
            if self.state != GameState.PLAYING:
                break
            result = action.perform(self)
            self.check_for_win()
        return result
