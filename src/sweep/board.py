"""
Board module for the Sweep engine.

Owns the tile grid, mine placement and bounded tile iteration.
"""
import logging
import random
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, List, NamedTuple, Optional, Tuple, Union

import numpy as np

from .tile import Coord, Tile, TileFlag


logger = logging.getLogger(__name__)

CoordLike = Union[Coord, Tuple[int, int]]


# ============================================================================
# Geometry
# ============================================================================

class Rect(NamedTuple):
    """Axis-aligned rectangle of tile coordinates, origin at (x, y)."""

    x: int
    y: int
    width: int
    height: int

    @classmethod
    def around(cls, coord: CoordLike, radius: int = 1) -> "Rect":
        """Square of side ``2 * radius + 1`` centered on ``coord``."""
        x, y = coord
        side = 2 * radius + 1
        return cls(x - radius, y - radius, side, side)

    def intersection(self, other: "Rect") -> "Rect":
        min_x = max(self.x, other.x)
        min_y = max(self.y, other.y)
        max_x = min(self.x + self.width, other.x + other.width)
        max_y = min(self.y + self.height, other.y + other.height)
        return Rect(min_x, min_y, max(0, max_x - min_x), max(0, max_y - min_y))

    def intersects(self, other: "Rect") -> bool:
        overlap = self.intersection(other)
        return overlap.width > 0 and overlap.height > 0

    def contains(self, coord: CoordLike) -> bool:
        x, y = coord
        return (
            self.x <= x < self.x + self.width
            and self.y <= y < self.y + self.height
        )


# ============================================================================
# Configuration
# ============================================================================

@dataclass
class BoardConfig:
    """
    Configuration for a Sweep board.

    Attributes:
        width: Number of columns.
        height: Number of rows.
        mine_count: Total mines to place.
    """

    width: int = 9
    height: int = 9
    mine_count: int = 10

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Ensure configuration values are valid."""
        if self.width < 1 or self.height < 1:
            raise ValueError("Board dimensions must be positive")
        if self.mine_count < 0:
            raise ValueError("Number of mines cannot be negative")
        max_mines = self.width * self.height - 1
        if self.mine_count > max_mines:
            raise ValueError(f"Too many mines (max {max_mines})")

    @property
    def tile_count(self) -> int:
        return self.width * self.height


# ============================================================================
# Board Class
# ============================================================================

@dataclass
class Board:
    """
    Sweep game board.

    A ``width x height`` grid of tiles plus a mine count. Tiles are
    built once and mutated in place; ``generate`` draws a new mine
    layout and ``reset`` re-covers the current one.
    """

    config: BoardConfig = field(default_factory=lambda: BoardConfig())
    rng: random.Random = field(default_factory=random.Random, repr=False)
    _tiles: List[List[Tile]] = field(default_factory=list, repr=False)
    _all_tiles: List[Tile] = field(default_factory=list, repr=False)
    _iteration_depth: int = field(default=0, repr=False)
    _owner: Optional[object] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        """Build the grid and draw the first mine layout."""
        self._init_grid()
        self.generate()

    # ========================================================================
    # Grid Initialization (Low-level)
    # ========================================================================

    def _init_grid(self) -> None:
        """Create tiles and wire up neighbor lists."""
        self._tiles = [
            [Tile(Coord(x, y)) for x in range(self.config.width)]
            for y in range(self.config.height)
        ]
        self._all_tiles = self.tiles()
        for tile in self._all_tiles:
            neighbors = [
                neighbor
                for neighbor in self.tiles(Rect.around(tile.coord))
                if neighbor is not tile
            ]
            tile._attach_neighbors(neighbors)

    def _recompute_tiles(self) -> None:
        for tile in self._all_tiles:
            tile._board_constructed()

    # ========================================================================
    # Dimensions
    # ========================================================================

    @property
    def width(self) -> int:
        return self.config.width

    @property
    def height(self) -> int:
        return self.config.height

    @property
    def mine_count(self) -> int:
        return self.config.mine_count

    @property
    def bounds(self) -> Rect:
        return Rect(0, 0, self.config.width, self.config.height)

    # ========================================================================
    # Queries
    # ========================================================================

    def tile_at(self, coord: CoordLike) -> Optional[Tile]:
        """Get tile at coordinate, or None if out of bounds."""
        if coord is None or not self.bounds.contains(coord):
            return None
        x, y = coord
        return self._tiles[y][x]

    def visit_tiles(
        self,
        rect: Optional[Rect],
        block: Callable[[Tile], Optional[bool]],
    ) -> None:
        """
        Invoke ``block`` for every tile inside ``rect``.

        The rectangle is clipped to the board; None means the whole
        board. Rows are visited from highest y to lowest, columns
        ascending within a row. Returning ``False`` from ``block`` stops
        the iteration early.
        """
        area = rect.intersection(self.bounds) if rect else self.bounds
        with self._iterating():
            for y in range(area.y + area.height - 1, area.y - 1, -1):
                row = self._tiles[y]
                for x in range(area.x, area.x + area.width):
                    if block(row[x]) is False:
                        return

    def tiles(self, rect: Optional[Rect] = None) -> List[Tile]:
        """List of tiles in ``visit_tiles`` order."""
        collected: List[Tile] = []
        self.visit_tiles(rect, collected.append)
        return collected

    @property
    def all_tiles(self) -> List[Tile]:
        return list(self._all_tiles)

    @property
    def is_iterating(self) -> bool:
        return self._iteration_depth > 0

    @contextmanager
    def _iterating(self) -> Iterator[None]:
        self._iteration_depth += 1
        try:
            yield
        finally:
            self._iteration_depth -= 1

    def assert_not_iterating(self) -> None:
        assert not self.is_iterating, "Board mutated during tile iteration"

    # ========================================================================
    # Mine Placement
    # ========================================================================

    def generate(self) -> None:
        """
        Draw a new mine layout and fully reset every tile.

        Mines are drawn uniformly from all tiles. Every tile ends up
        covered, unflagged, with a freshly computed neighbor count.
        """
        self.assert_not_iterating()
        for tile in self._all_tiles:
            tile.set_mined(False)
        for tile in self.rng.sample(self._all_tiles, self.config.mine_count):
            tile.set_mined(True)
        self._recompute_tiles()
        logger.debug(
            "Generated %dx%d board with %d mines",
            self.config.width, self.config.height, self.config.mine_count,
        )

    def place_mines(self, coords: Iterable[CoordLike]) -> None:
        """
        Replace the mine layout with mines at exactly ``coords``.

        Like ``generate`` this fully resets every tile. The configured
        mine count is updated to match.
        """
        self.assert_not_iterating()
        mined = []
        for coord in coords:
            tile = self.tile_at(coord)
            if tile is None:
                raise ValueError(f"Mine coordinate {coord} is out of bounds")
            mined.append(tile)
        self.config = BoardConfig(
            self.config.width, self.config.height, len(set(mined))
        )
        for tile in self._all_tiles:
            tile.set_mined(False)
        for tile in mined:
            tile.set_mined(True)
        self._recompute_tiles()

    def reset(self) -> None:
        """Re-cover and un-flag every tile, keeping the mine layout."""
        self.assert_not_iterating()
        self._recompute_tiles()

    # ========================================================================
    # Ownership
    # ========================================================================

    def _claim(self, owner: object) -> None:
        assert self._owner is None or self._owner is owner, (
            "Board is already owned by another session"
        )
        self._owner = owner

    def _release(self, owner: object) -> None:
        if self._owner is owner:
            self._owner = None

    # ========================================================================
    # Observation
    # ========================================================================

    def get_observation(self) -> np.ndarray:
        """
        Get board state as numpy array, indexed ``[y, x]``.

        Returns:
            2D int8 array where:
                -1 = covered
                -2 = covered, flagged ASSERT_MINE
                -3 = covered, flagged MAYBE_MINE
                0-8 = revealed with mined neighbor count
                9 = revealed mine
        """
        obs = np.zeros((self.config.height, self.config.width), dtype=np.int8)
        for tile in self._all_tiles:
            obs[tile.coord.y, tile.coord.x] = _observation_value(tile)
        return obs

    def render(self, show_mines: bool = False) -> str:
        """Render the board as text, highest row first."""
        lines = []
        for y in range(self.config.height - 1, -1, -1):
            row = self._tiles[y]
            lines.append(" ".join(_render_char(tile, show_mines) for tile in row))
        return "\n".join(lines)

    @property
    def compact_serialized(self) -> List[int]:
        """One byte per tile, in visit order."""
        return [tile.compact_serialized for tile in self.tiles()]


def _observation_value(tile: Tile) -> int:
    if tile.is_covered:
        if tile.flag is TileFlag.ASSERT_MINE:
            return -2
        if tile.flag is TileFlag.MAYBE_MINE:
            return -3
        return -1
    if tile.is_mined:
        return 9
    return tile.mined_neighbor_count


def _render_char(tile: Tile, show_mines: bool) -> str:
    if tile.is_covered:
        if tile.is_incorrect_flag:
            return "x"
        if tile.flag is TileFlag.ASSERT_MINE:
            return "F"
        if tile.flag is TileFlag.MAYBE_MINE:
            return "?"
        if show_mines and tile.is_mined:
            return "*"
        return "."
    if tile.is_mined:
        return "*"
    if tile.mined_neighbor_count == 0:
        return " "
    return str(tile.mined_neighbor_count)
