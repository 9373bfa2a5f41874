"""
Sweep game engine.

Provides tiles, boards, the reveal engine and the tile query pipeline.
"""
from .tile import MAX_NEIGHBORS, Coord, Tile, TileFlag, TileSnapshot, next_flag
from .board import Board, BoardConfig, Rect
from .session import (
    GameSession,
    GameState,
    GameStatistics,
    RevealBehavior,
    RevealResult,
)
from .actions import FlagAllNeighborsAction, RevealTileAction, SetFlagAction, SweepAction
from .collection import (
    CollectNeighborsTransform,
    CountInRange,
    CoveredTilesFilter,
    EqualsMinedNeighborCount,
    FlaggedTilesFilter,
    HasNeighborsFilter,
    MinedNeighborCountRangeFilter,
    MineFilter,
    RevealedTilesFilter,
    TileExpansion,
    TileFilter,
    TileSet,
    TileTransform,
)
from .environment import SweepEnv

__all__ = [
    "MAX_NEIGHBORS",
    "Coord",
    "Tile",
    "TileFlag",
    "TileSnapshot",
    "next_flag",
    "Board",
    "BoardConfig",
    "Rect",
    "GameSession",
    "GameState",
    "GameStatistics",
    "RevealBehavior",
    "RevealResult",
    "FlagAllNeighborsAction",
    "RevealTileAction",
    "SetFlagAction",
    "SweepAction",
    "CollectNeighborsTransform",
    "CountInRange",
    "CoveredTilesFilter",
    "EqualsMinedNeighborCount",
    "FlaggedTilesFilter",
    "HasNeighborsFilter",
    "MinedNeighborCountRangeFilter",
    "MineFilter",
    "RevealedTilesFilter",
    "TileExpansion",
    "TileFilter",
    "TileSet",
    "TileTransform",
    "SweepEnv",
]
