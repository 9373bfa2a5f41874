"""
Unit tests for convolution patterns and the pattern solver.

Boards are hand-built so that exactly one orientation of a pattern
matches.
"""
import pytest

from sweep import GameSession, Rect, RevealBehavior, RevealTileAction, SetFlagAction, TileFlag
from sweep_solver import (
    BUILTIN_PATTERNS,
    ConvolutionPattern,
    ConvolutionPatternSolver,
    SolverAgent,
    SolverResult,
)
from sweep_solver.patterns import ONE_ONE, ONE_TWO_ONE


def uncover_all_except(session: GameSession, covered) -> None:
    for tile in session.board.tiles():
        if tuple(tile.coord) not in covered:
            tile.set_covered(False)


def actions_by_kind(result: SolverResult):
    flags = {
        tuple(action.tile.coord) for action in result.actions
        if isinstance(action, SetFlagAction)
    }
    clears = {
        tuple(action.tile.coord) for action in result.actions
        if isinstance(action, RevealTileAction)
    }
    return flags, clears


@pytest.fixture
def one_two_one_session(session_factory) -> GameSession:
    """
    5x3 board, mines over the 1 and the last 1 of a 1-2-1 row::

        1 . . . 1
        1 1 2 1 1
        0 0 0 0 0
    """
    session = session_factory(5, 3, [(1, 2), (3, 2)])
    uncover_all_except(session, {(1, 2), (2, 2), (3, 2)})
    return session


@pytest.fixture
def one_one_session(session_factory) -> GameSession:
    """
    4x3 board with a 1-1 against the wall and a covered column::

        1 . . .
        1 1 1 .
        0 0 0 .
    """
    session = session_factory(4, 3, [(1, 2)])
    uncover_all_except(session, {(1, 2), (2, 2), (3, 0), (3, 1), (3, 2)})
    return session


# ============================================================================
# Pattern Parsing Tests
# ============================================================================

class TestPatternParsing:
    """Test building patterns from text matrices."""

    def test_dimensions(self) -> None:
        assert (ONE_TWO_ONE.width, ONE_TWO_ONE.height) == (5, 3)
        assert (ONE_ONE.width, ONE_ONE.height) == (4, 3)

    def test_rows_accept_sequence(self) -> None:
        pattern = ConvolutionPattern("pair", ["C#", "1C"], ["..", ".."])
        assert pattern.match_rows == ["C#", "1C"]

    def test_action_digits_normalize(self) -> None:
        pattern = ConvolutionPattern("pair", "1#", "2#")
        assert pattern.action_rows == [".."]

    @pytest.mark.parametrize("match,action,message", [
        ("", "", "Empty pattern"),
        (["CC", "C"], ["..", "."], "Non-rectangular"),
        ("CC", ".", "not the same size"),
        ("C9", "..", "Unknown pattern code"),
        ("CX", "..", "Unknown pattern code"),
        ("CC", ".Z", "Unknown action code"),
    ])
    def test_invalid_patterns_raise(self, match, action, message) -> None:
        with pytest.raises(ValueError, match=message):
            ConvolutionPattern("bad", match, action)

    def test_builtin_patterns(self) -> None:
        assert BUILTIN_PATTERNS == (ONE_TWO_ONE, ONE_ONE)


# ============================================================================
# Transform Tests
# ============================================================================

class TestPatternTransforms:
    """Test rotations and mirror images."""

    @pytest.fixture
    def square(self) -> ConvolutionPattern:
        return ConvolutionPattern("square", ["12", "34"], ["F.", ".C"])

    def test_rotate_clockwise(self, square: ConvolutionPattern) -> None:
        rotated = square.rotated()
        assert rotated.match_rows == ["31", "42"]
        assert rotated.action_rows == [".F", "C."]

    def test_four_turns_is_identity(self, square: ConvolutionPattern) -> None:
        assert square.rotated(4) == square
        assert square.rotated(2) == square.rotated().rotated()

    def test_flips(self, square: ConvolutionPattern) -> None:
        assert square.flipped_horizontally().match_rows == ["21", "43"]
        assert square.flipped_vertically().match_rows == ["34", "12"]

    def test_variation_names(self) -> None:
        assert ONE_ONE.rotated().full_name == "1-1 (rotated)"
        assert ONE_ONE.rotated(2).variation == "rotated x2"
        assert ONE_ONE.flipped_horizontally().full_name == "1-1 (flipped-x)"
        assert ONE_ONE.full_name == "1-1"

    def test_rotation_swaps_dimensions(self) -> None:
        rotated = ONE_TWO_ONE.rotated()
        assert (rotated.width, rotated.height) == (3, 5)

    @pytest.mark.parametrize("pattern,expected", [
        (ONE_TWO_ONE, 4),
        (ONE_ONE, 8),
    ])
    def test_unique_transform_count(self, pattern, expected) -> None:
        """A mirror-symmetric pattern has half as many distinct variants."""
        transforms = pattern.all_unique_transforms()
        assert len(transforms) == expected
        assert len(set(transforms)) == expected
        assert transforms[0] == pattern


# ============================================================================
# Matching Tests
# ============================================================================

class TestPatternMatching:
    """Test sliding a pattern over the board."""

    def test_one_two_one_matches_bottom_left(self, one_two_one_session: GameSession) -> None:
        board = one_two_one_session.board
        assert ONE_TWO_ONE.matches(board, Rect(0, 0, 5, 3))
        assert ONE_TWO_ONE.find_nonoverlapping_matches(board) == [Rect(0, 0, 5, 3)]

    def test_upside_down_does_not_match(self, one_two_one_session: GameSession) -> None:
        board = one_two_one_session.board
        assert ONE_TWO_ONE.flipped_vertically().find_nonoverlapping_matches(board) == []

    def test_window_past_edge_does_not_match(self, one_two_one_session: GameSession) -> None:
        assert not ONE_TWO_ONE.matches(one_two_one_session.board, Rect(1, 0, 5, 3))

    def test_flagged_tile_matches_covered(self, one_two_one_session: GameSession) -> None:
        board = one_two_one_session.board
        board.tile_at((1, 2)).set_flag(TileFlag.MAYBE_MINE)
        assert ONE_TWO_ONE.matches(board, Rect(0, 0, 5, 3))

    def test_flag_code_needs_assert_flag(self, board_factory) -> None:
        board = board_factory(2, 1, [(0, 0)])
        board.tile_at((1, 0)).set_covered(False)
        pattern = ConvolutionPattern("flagged one", "F1", "..")

        assert not pattern.matches(board, Rect(0, 0, 2, 1))
        board.tile_at((0, 0)).set_flag(TileFlag.ASSERT_MINE)
        assert pattern.matches(board, Rect(0, 0, 2, 1))

    def test_matches_do_not_overlap(self, board_factory) -> None:
        board = board_factory(5, 1, [])
        for tile in board.tiles():
            tile.set_covered(False)
        pattern = ConvolutionPattern("pair", "CC", "..")

        assert pattern.find_nonoverlapping_matches(board) == [
            Rect(0, 0, 2, 1),
            Rect(2, 0, 2, 1),
        ]

    def test_actions_for_match(self, one_two_one_session: GameSession) -> None:
        board = one_two_one_session.board
        actions = ONE_TWO_ONE.actions(board, Rect(0, 0, 5, 3))

        assert SetFlagAction(board.tile_at((1, 2)), TileFlag.ASSERT_MINE) in actions
        assert SetFlagAction(board.tile_at((3, 2)), TileFlag.ASSERT_MINE) in actions
        assert RevealTileAction(board.tile_at((2, 2)), RevealBehavior.SAFE) in actions
        assert len(actions) == 3

    def test_existing_flags_are_not_repeated(self, one_two_one_session: GameSession) -> None:
        board = one_two_one_session.board
        board.tile_at((1, 2)).set_flag(TileFlag.ASSERT_MINE)

        actions = ONE_TWO_ONE.actions(board, Rect(0, 0, 5, 3))

        assert [action.tile.coord for action in actions] == [(2, 2), (3, 2)]

    def test_flagged_tile_is_not_cleared(self, one_one_session: GameSession) -> None:
        board = one_one_session.board
        board.tile_at((3, 1)).set_flag(TileFlag.MAYBE_MINE)

        actions = ONE_ONE.actions(board, Rect(0, 0, 4, 3))

        assert {tuple(action.tile.coord) for action in actions} == {(3, 0), (3, 2)}


# ============================================================================
# Pattern Solver Tests
# ============================================================================

class TestConvolutionPatternSolver:
    """Test the solver built on the patterns."""

    def test_builtin_variants_loaded(self) -> None:
        assert len(ConvolutionPatternSolver().patterns) == 12

    def test_fresh_board_returns_none(self, default_session: GameSession) -> None:
        assert ConvolutionPatternSolver().try_step(default_session) is None

    def test_one_two_one(self, one_two_one_session: GameSession) -> None:
        result = ConvolutionPatternSolver().try_step(one_two_one_session)

        flags, clears = actions_by_kind(result)
        assert flags == {(1, 2), (3, 2)}
        assert clears == {(2, 2)}
        assert all(
            action.reveal_behavior is RevealBehavior.SAFE
            for action in result.actions if isinstance(action, RevealTileAction)
        )

    def test_rotated_one_two_one(self, session_factory) -> None:
        """The same layout turned on its side is found by a rotated variant."""
        session = session_factory(3, 5, [(2, 1), (2, 3)])
        uncover_all_except(session, {(2, 1), (2, 2), (2, 3)})

        result = ConvolutionPatternSolver(patterns=[ONE_TWO_ONE]).try_step(session)

        flags, clears = actions_by_kind(result)
        assert flags == {(2, 1), (2, 3)}
        assert clears == {(2, 2)}

    def test_one_one_clears_column(self, one_one_session: GameSession) -> None:
        result = ConvolutionPatternSolver().try_step(one_one_session)

        flags, clears = actions_by_kind(result)
        assert flags == set()
        assert clears == {(3, 0), (3, 1), (3, 2)}

    def test_debug_tiles_cover_window(self, one_one_session: GameSession) -> None:
        result = ConvolutionPatternSolver().try_step(one_one_session)
        assert len(result.debug_tiles) == 12

    def test_applying_actions_is_safe(self, one_two_one_session: GameSession) -> None:
        board = one_two_one_session.board
        result = ConvolutionPatternSolver().try_step(one_two_one_session)

        one_two_one_session.perform_actions(result.actions)

        assert one_two_one_session.is_won
        assert board.tile_at((1, 2)).flag is TileFlag.ASSERT_MINE

    def test_session_is_not_mutated(self, one_one_session: GameSession) -> None:
        ConvolutionPatternSolver().try_step(one_one_session)
        assert one_one_session.board.tile_at((3, 0)).is_covered

    def test_agent_runs_pattern_solver(self, one_one_session: GameSession) -> None:
        result = SolverAgent(["convolution-pattern"]).try_step(one_one_session)
        assert result.solver_name == "ConvolutionPatternSolver"
