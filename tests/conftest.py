"""
Pytest configuration and shared fixtures.
"""
import random

import pytest
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sweep import Board, BoardConfig, GameSession, Tile


# ============================================================================
# Helpers
# ============================================================================

class FakeClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        self.now += 1.0
        return self.now


def make_board(width: int, height: int, mines, seed: int = 0) -> Board:
    """Board of the given size with mines at exactly ``mines``."""
    board = Board(
        BoardConfig(width, height, len(mines)), rng=random.Random(seed)
    )
    board.place_mines(mines)
    return board


def make_session(width: int, height: int, mines, seed: int = 0) -> GameSession:
    """Session on a hand-placed board, already past the first move."""
    session = GameSession(make_board(width, height, mines, seed), clock=FakeClock())
    session.is_first_move = False
    return session


# ============================================================================
# Board Fixtures
# ============================================================================

@pytest.fixture
def default_board() -> Board:
    """Create a default 9x9 board with 10 mines."""
    return Board(rng=random.Random(1234))


@pytest.fixture
def corner_mine_board() -> Board:
    """3x3 board with a single mine in the corner at (2, 2)."""
    return make_board(3, 3, [(2, 2)])


@pytest.fixture
def empty_board() -> Board:
    """Create a board with no mines for flood testing."""
    return make_board(5, 5, [])


@pytest.fixture
def dense_board() -> Board:
    """Small board that is mostly mines, to exercise first-move safety."""
    return Board(BoardConfig(3, 3, 8), rng=random.Random(7))


# ============================================================================
# Session Fixtures
# ============================================================================

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def default_session(default_board: Board, clock: FakeClock) -> GameSession:
    return GameSession(default_board, clock=clock)


@pytest.fixture
def corner_mine_session(corner_mine_board: Board, clock: FakeClock) -> GameSession:
    return GameSession(corner_mine_board, clock=clock)


# ============================================================================
# Tile Fixtures
# ============================================================================

@pytest.fixture
def lone_tile() -> Tile:
    """A tile with no neighbors."""
    return Tile((0, 0))


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def valid_config() -> BoardConfig:
    """Create a valid board configuration."""
    return BoardConfig(9, 9, 10)


# ============================================================================
# Factory Fixtures
# ============================================================================

@pytest.fixture
def board_factory():
    """Build boards with hand-placed mines: ``board_factory(w, h, mines)``."""
    return make_board


@pytest.fixture
def session_factory():
    """Build sessions past their first move: ``session_factory(w, h, mines)``."""
    return make_session
