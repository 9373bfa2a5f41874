"""
Tile module for the Sweep engine.

Represents one grid cell with its mine, covered and flag state, plus
the neighbor relationship computed by the owning board.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, NamedTuple


# ============================================================================
# Constants
# ============================================================================

MAX_NEIGHBORS = 8


class Coord(NamedTuple):
    """Integer grid coordinate. y grows upwards, row 0 is the bottom row."""

    x: int
    y: int

    def manhattan_distance(self, other: "Coord") -> int:
        return abs(self.x - other.x) + abs(self.y - other.y)

    def __str__(self) -> str:
        return f"({self.x},{self.y})"


class TileFlag(Enum):
    """Marking a player can put on a covered tile."""

    NONE = 0
    ASSERT_MINE = 1
    MAYBE_MINE = 2

    @property
    def is_present(self) -> bool:
        """True for any flag other than NONE."""
        return self is not TileFlag.NONE

    @property
    def next(self) -> "TileFlag":
        return next_flag(self)

    @property
    def symbol(self) -> str:
        return _FLAG_SYMBOLS[self]


_NEXT_FLAG = {
    TileFlag.NONE: TileFlag.ASSERT_MINE,
    TileFlag.ASSERT_MINE: TileFlag.MAYBE_MINE,
    TileFlag.MAYBE_MINE: TileFlag.NONE,
}

_FLAG_SYMBOLS = {
    TileFlag.NONE: "o",
    TileFlag.ASSERT_MINE: "!",
    TileFlag.MAYBE_MINE: "?",
}


def next_flag(flag: TileFlag) -> TileFlag:
    """Return the flag that follows ``flag`` in the NONE -> ! -> ? cycle."""
    return _NEXT_FLAG[flag]


@dataclass(frozen=True)
class TileSnapshot:
    """Decoded form of a compact-serialized tile."""

    is_mined: bool
    is_covered: bool
    flag: TileFlag
    mined_neighbor_count: int


# ============================================================================
# Tile
# ============================================================================

class Tile:
    """
    A single cell of the board grid.

    Tiles are created once by their Board and mutated in place for the
    life of that board. A tile never references the board itself; the
    board hands it the list of neighbor tiles when the grid is built.

    Attributes:
        coord: Position of the tile within its board.
    """

    def __init__(self, coord: Coord) -> None:
        self.coord = Coord(*coord)
        self._mined = False
        self._mined_neighbor_count = 0
        self._covered = True
        self._flag = TileFlag.NONE
        self._incorrect_flag = False
        self._neighbors: List["Tile"] = []

    def __repr__(self) -> str:
        attrs = "^" if self._covered else "_"
        if self._mined:
            attrs += "M"
        elif self._mined_neighbor_count > 0:
            attrs += str(self._mined_neighbor_count)
        if self._flag.is_present:
            attrs += self._flag.symbol
        return f"<Tile {self.coord}{attrs}>"

    # ========================================================================
    # Read Accessors
    # ========================================================================

    @property
    def is_mined(self) -> bool:
        return self._mined

    @property
    def mined_neighbor_count(self) -> int:
        return self._mined_neighbor_count

    @property
    def is_covered(self) -> bool:
        return self._covered

    @property
    def flag(self) -> TileFlag:
        return self._flag

    @property
    def is_incorrect_flag(self) -> bool:
        """True once an end-of-game reveal found this flag on a safe tile."""
        return self._incorrect_flag

    @property
    def neighbors(self) -> List["Tile"]:
        """Neighbor tiles in board iteration order. Do not mutate."""
        return self._neighbors

    # ========================================================================
    # Mutation
    # ========================================================================

    def set_mined(self, value: bool) -> None:
        """
        Set whether this tile holds a mine.

        Resets the mined neighbor count, which the board recomputes.
        """
        self._mined = bool(value)
        self._mined_neighbor_count = 0

    def set_covered(self, value: bool) -> "Tile":
        """Cover or uncover the tile. Always clears the flag."""
        self._covered = bool(value)
        return self.clear_flag()

    def clear_flag(self) -> "Tile":
        self._flag = TileFlag.NONE
        return self

    def set_flag(self, flag: TileFlag) -> "Tile":
        self._flag = flag
        return self

    def cycle_flag(self) -> "Tile":
        """Advance the flag one step: NONE -> ASSERT_MINE -> MAYBE_MINE."""
        self._flag = next_flag(self._flag)
        return self

    def mark_incorrect_flag(self) -> None:
        self._incorrect_flag = True

    def visit_neighbors(self, block: Callable[["Tile"], object]) -> None:
        """Invoke ``block`` once per neighbor tile."""
        for neighbor in self._neighbors:
            block(neighbor)

    def _attach_neighbors(self, neighbors: List["Tile"]) -> None:
        self._neighbors = list(neighbors)

    def _board_constructed(self) -> None:
        """Recompute derived state and return to covered, unflagged."""
        self._mined_neighbor_count = sum(
            1 for neighbor in self._neighbors if neighbor.is_mined
        )
        self._covered = True
        self._flag = TileFlag.NONE
        self._incorrect_flag = False

    # ========================================================================
    # Serialization
    # ========================================================================

    @property
    def compact_serialized(self) -> int:
        """
        Pack this tile into a single byte.

        Bit layout:
            0: is_mined
            1: is_covered
            2-3: flag value (0-2)
            4-7: mined neighbor count (0-8)
        """
        value = 0x1 if self._mined else 0
        if self._covered:
            value |= 0x1 << 1
        value |= (self._flag.value & 0x3) << 2
        value |= (self._mined_neighbor_count & 0xF) << 4
        return value

    @staticmethod
    def from_compact_serialization(data: int) -> TileSnapshot:
        """Decode a byte produced by ``compact_serialized``."""
        return TileSnapshot(
            is_mined=bool(data & 0x1),
            is_covered=bool(data & (0x1 << 1)),
            flag=TileFlag((data & 0xC) >> 2),
            mined_neighbor_count=(data & 0xF0) >> 4,
        )
