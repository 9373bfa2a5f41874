"""
Actions that can be applied to a game session.

Solvers describe their conclusions as actions; whoever drives the game
applies them through ``perform`` or ``GameSession.perform_actions``.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass

from .session import GameSession, RevealBehavior, RevealResult
from .tile import Tile, TileFlag


class SweepAction(ABC):
    """A single intent to mutate a session."""

    tile: Tile

    @abstractmethod
    def perform(self, session: GameSession) -> RevealResult:
        """Apply this action to ``session``."""


@dataclass(frozen=True)
class RevealTileAction(SweepAction):
    """Reveal ``tile``; ASSERT_TRUSTING_FLAGS chords a revealed tile."""

    tile: Tile
    reveal_behavior: RevealBehavior = RevealBehavior.SAFE

    def perform(self, session: GameSession) -> RevealResult:
        return session.attempt_reveal(
            self.tile.coord,
            assert_trusting_flags=(
                self.reveal_behavior == RevealBehavior.ASSERT_TRUSTING_FLAGS
            ),
        )

    def __str__(self) -> str:
        return f"reveal {self.tile.coord} ({self.reveal_behavior.name.lower()})"


@dataclass(frozen=True)
class SetFlagAction(SweepAction):
    """Set ``flag`` on a covered ``tile``."""

    tile: Tile
    flag: TileFlag = TileFlag.ASSERT_MINE

    def perform(self, session: GameSession) -> RevealResult:
        if session.set_flag(self.tile, self.flag):
            return RevealResult.OK
        return RevealResult.NOOP

    def __str__(self) -> str:
        return f"flag {self.tile.coord} {self.flag.symbol}"


@dataclass(frozen=True)
class FlagAllNeighborsAction(SweepAction):
    """Flag every covered neighbor of the revealed number ``tile``."""

    tile: Tile

    def perform(self, session: GameSession) -> RevealResult:
        return session.flag_all_neighbors(self.tile.coord)

    def __str__(self) -> str:
        return f"flag neighbors of {self.tile.coord}"
