"""
Tile collections and transforms.

A small composable query language over sets of tiles. ``TileSet.applying``
is the single composition primitive; every transform either filters
tiles (keep or drop) or expands each tile into zero or more tiles.
Deduction rules are written as chains of ``applying`` calls.
"""
import random
from abc import ABC, abstractmethod
from typing import Callable, Iterable, Iterator, List, Optional, Sequence

from .tile import MAX_NEIGHBORS, Tile, TileFlag


# ============================================================================
# Tile Set
# ============================================================================

class TileSet:
    """
    Ordered, duplicate-free collection of tiles.

    Treated as immutable: ``applying`` returns a new set. The
    ``debug_tiles`` list carries tiles that nested sub-pipelines chose to
    highlight; it is diagnostic only and never affects results.
    """

    def __init__(
        self,
        tiles: Iterable[Tile] = (),
        debug_tiles: Iterable[Tile] = (),
    ) -> None:
        self._tiles = _unique(tiles)
        self._debug_tiles = _unique(debug_tiles)

    @classmethod
    def all_tiles(cls, board) -> "TileSet":
        """Every tile of ``board`` in board iteration order."""
        return cls(board.tiles())

    def __repr__(self) -> str:
        return f"<TileSet {len(self._tiles)} tiles>"

    def __len__(self) -> int:
        return len(self._tiles)

    def __iter__(self) -> Iterator[Tile]:
        return iter(self._tiles)

    def __contains__(self, tile: object) -> bool:
        return any(item is tile for item in self._tiles)

    @property
    def tiles(self) -> List[Tile]:
        return list(self._tiles)

    @property
    def debug_tiles(self) -> List[Tile]:
        return list(self._debug_tiles)

    @property
    def is_empty(self) -> bool:
        return not self._tiles

    def applying(self, transform: "TileTransform") -> "TileSet":
        """
        Map every tile through ``transform`` and collect the results.

        Duplicates are dropped, first occurrence wins. Debug tiles from
        this set and from any sub-pipeline run by the transform are
        carried into the result; the transform receives the result set
        under construction so it can append them.
        """
        result = TileSet((), self._debug_tiles)
        applied: List[Tile] = []
        for tile in self._tiles:
            applied.extend(transform.map(tile, result))
        result._tiles = _unique(applied)
        return result

    def emit_debug_tiles(self) -> "TileSet":
        """Return a copy that also marks its own tiles as debug tiles."""
        return TileSet(self._tiles, self._debug_tiles + self._tiles)

    def append_debug_tiles(self, tiles: Iterable[Tile]) -> None:
        for tile in tiles:
            if not any(item is tile for item in self._debug_tiles):
                self._debug_tiles.append(tile)

    def tiles_closest_to(self, origin: Optional[Tile]) -> List[Tile]:
        """Tiles at minimal Manhattan distance from ``origin``."""
        if origin is None or not self._tiles:
            return list(self._tiles)
        distances = [
            (tile, tile.coord.manhattan_distance(origin.coord))
            for tile in self._tiles
        ]
        closest = min(distance for _, distance in distances)
        return [tile for tile, distance in distances if distance == closest]

    def random_tile(self, rng: Optional[random.Random] = None) -> Optional[Tile]:
        if not self._tiles:
            return None
        return (rng or random).choice(self._tiles)

    def random_tile_closest_to(
        self,
        origin: Optional[Tile],
        rng: Optional[random.Random] = None,
    ) -> Optional[Tile]:
        return TileSet(self.tiles_closest_to(origin)).random_tile(rng)


def _unique(tiles: Iterable[Tile]) -> List[Tile]:
    seen = set()
    unique = []
    for tile in tiles:
        if id(tile) not in seen:
            seen.add(id(tile))
            unique.append(tile)
    return unique


SubPipeline = Callable[[TileSet], TileSet]


# ============================================================================
# Transform Interfaces
# ============================================================================

class TileTransform(ABC):
    """Maps one tile of a TileSet to zero or more result tiles."""

    @abstractmethod
    def map(self, tile: Tile, tile_set: TileSet) -> Sequence[Tile]:
        """
        Return the tiles that ``tile`` contributes to the result.

        ``tile_set`` is the result being built; only its debug tiles
        may be touched.
        """


class TileFilter(TileTransform):
    """Transform that keeps or drops each tile."""

    @abstractmethod
    def keep(self, tile: Tile, tile_set: TileSet) -> bool:
        """Return True to keep ``tile``."""

    def map(self, tile: Tile, tile_set: TileSet) -> Sequence[Tile]:
        return [tile] if self.keep(tile, tile_set) else []


class TileExpansion(TileTransform):
    """Transform that replaces each tile with a list of tiles."""

    @abstractmethod
    def expand(self, tile: Tile, tile_set: TileSet) -> Sequence[Tile]:
        """Return the tiles that replace ``tile``."""

    def map(self, tile: Tile, tile_set: TileSet) -> Sequence[Tile]:
        return self.expand(tile, tile_set)


# ============================================================================
# State Filters
# ============================================================================

class CoveredTilesFilter(TileFilter):
    def keep(self, tile: Tile, tile_set: TileSet) -> bool:
        return tile.is_covered


class RevealedTilesFilter(TileFilter):
    def keep(self, tile: Tile, tile_set: TileSet) -> bool:
        return not tile.is_covered


class FlaggedTilesFilter(TileFilter):
    """Keep tiles whose flag is one of ``allowed_flags``."""

    def __init__(self, allowed_flags: Iterable[TileFlag]) -> None:
        self.allowed_flags = frozenset(allowed_flags)

    def keep(self, tile: Tile, tile_set: TileSet) -> bool:
        return tile.flag in self.allowed_flags


class MineFilter(TileFilter):
    """
    Keep tiles whose mine state equals ``is_mined``.

    Reads hidden state, so it is for hints and end-of-game queries,
    never for deduction.
    """

    def __init__(self, is_mined: bool) -> None:
        self.is_mined = is_mined

    def keep(self, tile: Tile, tile_set: TileSet) -> bool:
        return tile.is_mined == self.is_mined


class MinedNeighborCountRangeFilter(TileFilter):
    """Keep tiles with ``minimum <= mined_neighbor_count <= maximum``."""

    def __init__(self, minimum: int, maximum: int) -> None:
        self.minimum = minimum
        self.maximum = maximum

    @classmethod
    def exactly(cls, count: int) -> "MinedNeighborCountRangeFilter":
        return cls(count, count)

    @classmethod
    def has_any(cls) -> "MinedNeighborCountRangeFilter":
        return cls(1, MAX_NEIGHBORS)

    @classmethod
    def zero(cls) -> "MinedNeighborCountRangeFilter":
        return cls.exactly(0)

    def keep(self, tile: Tile, tile_set: TileSet) -> bool:
        return self.minimum <= tile.mined_neighbor_count <= self.maximum


# ============================================================================
# Neighbor Transforms
# ============================================================================

class NeighborCountCondition(ABC):
    """Predicate on the size of a tile's filtered neighbor set."""

    @abstractmethod
    def is_satisfied(self, count: int, tile: Tile) -> bool:
        pass


class EqualsMinedNeighborCount(NeighborCountCondition):
    """Filtered neighbor count equals the tile's mined neighbor count."""

    def is_satisfied(self, count: int, tile: Tile) -> bool:
        return count == tile.mined_neighbor_count


class CountInRange(NeighborCountCondition):
    """Filtered neighbor count lies within ``[minimum, maximum]``."""

    def __init__(self, minimum: int, maximum: int = MAX_NEIGHBORS) -> None:
        self.minimum = minimum
        self.maximum = maximum

    def is_satisfied(self, count: int, tile: Tile) -> bool:
        return self.minimum <= count <= self.maximum


class CollectNeighborsTransform(TileExpansion):
    """Replace each tile with ``sub_pipeline`` applied to its neighbors."""

    def __init__(self, sub_pipeline: SubPipeline) -> None:
        self.sub_pipeline = sub_pipeline

    def expand(self, tile: Tile, tile_set: TileSet) -> Sequence[Tile]:
        filtered = self.sub_pipeline(TileSet(tile.neighbors))
        tile_set.append_debug_tiles(filtered.debug_tiles)
        return filtered.tiles


class HasNeighborsFilter(TileFilter):
    """
    Keep tiles whose filtered neighbor set satisfies ``condition``.

    ``sub_pipeline`` runs over each tile's neighbors; the size of the
    result is tested against ``condition``.
    """

    def __init__(
        self,
        sub_pipeline: SubPipeline,
        condition: NeighborCountCondition,
    ) -> None:
        self.sub_pipeline = sub_pipeline
        self.condition = condition

    def keep(self, tile: Tile, tile_set: TileSet) -> bool:
        filtered = self.sub_pipeline(TileSet(tile.neighbors))
        tile_set.append_debug_tiles(filtered.debug_tiles)
        return self.condition.is_satisfied(len(filtered), tile)
