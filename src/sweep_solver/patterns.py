"""
Convolution patterns for the Sweep solver.

A pattern is a small match matrix slid across the board, plus an action
matrix of the same size naming the tiles to clear or flag wherever the
match succeeds. Matrices are written as text with the highest row
first, the way ``Board.render`` prints the board.

Match codes:
    0-8: revealed tile with that many mined neighbors
    C: any revealed tile
    #: covered tile, flagged or not
    F: covered tile flagged as a mine
    .: any tile

Action codes:
    C: reveal the tile
    F: flag the tile as a mine
    .: nothing (digits and ``#`` also mean nothing)
"""
from typing import Callable, Dict, List, Optional, Sequence, Union

from sweep import (
    Board,
    Coord,
    Rect,
    RevealBehavior,
    RevealTileAction,
    SetFlagAction,
    SweepAction,
    Tile,
    TileFlag,
)


TileMatcher = Callable[[Tile], bool]
TileActionMaker = Callable[[Tile], Optional[SweepAction]]
MatrixText = Union[str, Sequence[str]]


# ============================================================================
# Matrix Items
# ============================================================================

def _count_matcher(count: int) -> TileMatcher:
    def matches(tile: Tile) -> bool:
        return not tile.is_covered and tile.mined_neighbor_count == count
    return matches


_MATCHERS: Dict[str, TileMatcher] = {
    "C": lambda tile: not tile.is_covered,
    "#": lambda tile: tile.is_covered,
    "F": lambda tile: tile.is_covered and tile.flag is TileFlag.ASSERT_MINE,
    ".": lambda tile: True,
}


def _clear(tile: Tile) -> Optional[SweepAction]:
    # A safe reveal of a flagged tile would be ignored.
    if not tile.is_covered or tile.flag.is_present:
        return None
    return RevealTileAction(tile, RevealBehavior.SAFE)


def _assert_mine(tile: Tile) -> Optional[SweepAction]:
    if not tile.is_covered or tile.flag is TileFlag.ASSERT_MINE:
        return None
    return SetFlagAction(tile, TileFlag.ASSERT_MINE)


_ACTIONS: Dict[str, TileActionMaker] = {
    "C": _clear,
    "F": _assert_mine,
    ".": lambda tile: None,
}


def parse_match_code(code: str) -> TileMatcher:
    if code.isdigit() and int(code) <= 8:
        return _count_matcher(int(code))
    try:
        return _MATCHERS[code]
    except KeyError:
        raise ValueError(f"Unknown pattern code {code!r}")


def normalize_action_code(code: str) -> str:
    """Map the match-only codes of an action matrix to ``.``."""
    if code.isdigit() or code == "#":
        return "."
    return code


def parse_action_code(code: str) -> TileActionMaker:
    try:
        return _ACTIONS[code]
    except KeyError:
        raise ValueError(f"Unknown action code {code!r}")


def _rows(text: MatrixText) -> List[str]:
    if isinstance(text, str):
        text = text.strip().splitlines()
    return [row.strip() for row in text if row.strip()]


def _rotate_once(rows: List[str]) -> List[str]:
    """Rotate a text matrix a quarter turn clockwise."""
    height = len(rows)
    return [
        "".join(rows[height - 1 - column][row] for column in range(height))
        for row in range(len(rows[0]))
    ]


# ============================================================================
# Convolution Pattern
# ============================================================================

class ConvolutionPattern:
    """
    A match/action matrix pair.

    Attributes:
        name: Human readable pattern name.
        variation: Description of the transform that produced this copy.
        match_rows: Match matrix rows, highest row first.
        action_rows: Normalized action matrix rows, highest row first.
    """

    def __init__(
        self,
        name: str,
        match: MatrixText,
        action: MatrixText,
        variation: Optional[str] = None,
    ) -> None:
        self.name = name
        self.variation = variation
        self.match_rows = _rows(match)
        self.action_rows = [
            "".join(normalize_action_code(code) for code in row)
            for row in _rows(action)
        ]
        self._validate()

        self.width = len(self.match_rows[0])
        self.height = len(self.match_rows)
        # Row 0 is the bottom row, as on the board.
        self._matchers = [
            [parse_match_code(code) for code in row]
            for row in reversed(self.match_rows)
        ]
        self._actions = [
            [parse_action_code(code) for code in row]
            for row in reversed(self.action_rows)
        ]

    def _validate(self) -> None:
        if not self.match_rows or not self.match_rows[0]:
            raise ValueError("Empty pattern")
        width = len(self.match_rows[0])
        if any(len(row) != width for row in self.match_rows):
            raise ValueError("Non-rectangular pattern")
        if len(self.action_rows) != len(self.match_rows) or any(
            len(row) != width for row in self.action_rows
        ):
            raise ValueError("Action matrix not the same size as match matrix")

    @property
    def full_name(self) -> str:
        if self.variation:
            return f"{self.name} ({self.variation})"
        return self.name

    def __repr__(self) -> str:
        return (
            f"<ConvolutionPattern {self.full_name} "
            f"m:{';'.join(self.match_rows)} a:{';'.join(self.action_rows)}>"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConvolutionPattern):
            return NotImplemented
        return (
            self.match_rows == other.match_rows
            and self.action_rows == other.action_rows
        )

    def __hash__(self) -> int:
        return hash((tuple(self.match_rows), tuple(self.action_rows)))

    # ========================================================================
    # Matching
    # ========================================================================

    def window_tiles(self, board: Board, window: Rect) -> List[Tile]:
        """Tiles under ``window``, bottom row first."""
        return [
            board.tile_at(Coord(window.x + column, window.y + row))
            for row in range(self.height)
            for column in range(self.width)
        ]

    def matches(self, board: Board, window: Rect) -> bool:
        """True only if every tile under ``window`` satisfies its matrix item."""
        for row in range(self.height):
            for column in range(self.width):
                tile = board.tile_at(Coord(window.x + column, window.y + row))
                if tile is None or not self._matchers[row][column](tile):
                    return False
        return True

    def find_nonoverlapping_matches(self, board: Board) -> List[Rect]:
        """
        Windows where the pattern matches, none overlapping another.

        Windows are scanned from the bottom-left corner; a matching
        window that overlaps one already found is skipped.
        """
        found: List[Rect] = []
        for y in range(board.height - self.height + 1):
            for x in range(board.width - self.width + 1):
                window = Rect(x, y, self.width, self.height)
                if any(existing.intersects(window) for existing in found):
                    continue
                if self.matches(board, window):
                    found.append(window)
        return found

    def actions(self, board: Board, window: Rect) -> List[SweepAction]:
        """Actions the pattern implies for a matched ``window``."""
        actions = []
        for row in range(self.height):
            for column in range(self.width):
                tile = board.tile_at(Coord(window.x + column, window.y + row))
                action = self._actions[row][column](tile)
                if action is not None:
                    actions.append(action)
        return actions

    # ========================================================================
    # Transforms
    # ========================================================================

    def rotated(self, turns: int = 1) -> "ConvolutionPattern":
        """Copy turned clockwise by ``turns`` quarter turns."""
        match_rows = list(self.match_rows)
        action_rows = list(self.action_rows)
        for _ in range(turns % 4):
            match_rows = _rotate_once(match_rows)
            action_rows = _rotate_once(action_rows)
        variation = "rotated" + (f" x{turns}" if turns > 1 else "")
        return ConvolutionPattern(self.full_name, match_rows, action_rows, variation)

    def flipped_horizontally(self) -> "ConvolutionPattern":
        return ConvolutionPattern(
            self.full_name,
            [row[::-1] for row in self.match_rows],
            [row[::-1] for row in self.action_rows],
            "flipped-x",
        )

    def flipped_vertically(self) -> "ConvolutionPattern":
        return ConvolutionPattern(
            self.full_name,
            self.match_rows[::-1],
            self.action_rows[::-1],
            "flipped-y",
        )

    def all_unique_transforms(self) -> List["ConvolutionPattern"]:
        """This pattern plus every distinct rotation and mirror image."""
        transforms: List[ConvolutionPattern] = []
        for flip in (self, self.flipped_horizontally(), self.flipped_vertically()):
            for candidate in (flip, flip.rotated(1), flip.rotated(2), flip.rotated(3)):
                if candidate not in transforms:
                    transforms.append(candidate)
        return transforms


# ============================================================================
# Built-in Patterns
# ============================================================================

ONE_TWO_ONE = ConvolutionPattern(
    "1-2-1",
    match="""
        C###C
        C121C
        CCCCC
    """,
    action="""
        .FCF.
        .....
        .....
    """,
)

ONE_ONE = ConvolutionPattern(
    "1-1",
    match="""
        C##.
        C11.
        CCC.
    """,
    action="""
        ...C
        ...C
        ...C
    """,
)

BUILTIN_PATTERNS = (ONE_TWO_ONE, ONE_ONE)
