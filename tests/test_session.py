"""Tests for play sessions under each mode."""
from dataclasses import replace

import pytest
from pressure.core.modes import GameMode, get_mode_hooks
from pressure.core.session import GameSession, SessionStatus
from pressure.core.solver import RotationSolver
from pressure.models.classic import CLASSIC_LEVELS
from pressure.models.grid import Position, TileType


@pytest.fixture
def session(row_level):
    """Classic session on the row level (five moves)."""
    return GameSession(row_level, solver=RotationSolver(time_limit=10.0))


class TestTap:
    """Tests for tapping tiles."""

    def test_tap_rotates_and_counts(self, session, row_level):
        """Test a tap turns the tile and counts a move."""
        assert session.tap(1, 2)
        assert session.moves == 1
        assert session.moves_left == 4
        assert session.grid.tile_at(Position(1, 2)) != row_level.grid.tile_at(Position(1, 2))
        assert row_level.grid.tile_at(Position(1, 2)).can_rotate

    def test_tap_fixed_tile_is_ignored(self, session):
        """Test taps on fixed or missing tiles do nothing."""
        assert not session.tap(0, 2)
        assert not session.tap(2, 0)
        assert not session.tap(9, 9)
        assert session.moves == 0

    def test_win(self, session):
        """Test aligning the row wins and stops further taps."""
        for x in (1, 2, 3):
            session.tap(x, 2)
        assert session.status is SessionStatus.WON
        assert session.win_reason == "All nodes connected!"
        assert session.win_tiles() == {Position(x, 2) for x in range(5)}
        assert not session.tap(1, 2)

    def test_out_of_moves(self, session):
        """Test running out of moves loses."""
        for _ in range(5):
            session.tap(1, 2)
        assert session.status is SessionStatus.LOST
        assert session.loss_reason == "Out of moves"
        assert session.moves_left == 0


class TestUndo:
    """Tests for undo."""

    def test_undo_restores_grid_and_move(self, session, row_level):
        """Test undo restores the grid and gives the move back."""
        session.tap(2, 2)
        assert session.undo()
        assert session.grid == row_level.grid
        assert session.moves == 0
        assert session.moves_left == 5

    def test_undo_steps_back_one_tap_at_a_time(self, session, row_level):
        """Test repeated undo walks back through history."""
        session.tap(1, 2)
        after_first = session.grid
        session.tap(3, 2)
        assert session.undo()
        assert session.grid == after_first
        assert session.moves == 1
        assert session.undo()
        assert session.grid == row_level.grid
        assert session.moves == 0

    def test_undo_without_history(self, session):
        """Test undo with nothing to undo."""
        assert not session.undo()

    def test_blitz_has_no_undo(self, row_level):
        """Test blitz disables undo and the move limit."""
        blitz = GameSession(row_level, GameMode.BLITZ)
        blitz.tap(1, 2)
        assert not blitz.undo()
        assert blitz.moves_left is None


class TestWalls:
    """Tests for wall compression during play."""

    def test_goal_on_border_is_crushed(self, session):
        """Test the first wall step crushes a border goal."""
        result = session.advance_walls()
        assert result.offset == 1
        assert session.status is SessionStatus.LOST
        assert session.loss_reason == "A goal node was crushed"
        assert session.advance_walls() is None

    def test_walls_close_in_steps(self):
        """Test walls advance one ring per step."""
        first = CLASSIC_LEVELS[0]
        session = GameSession(first)
        result = session.advance_walls()
        assert result.crushed == []
        assert session.wall_offset == 1
        assert session.status is SessionStatus.PLAYING
        assert session.grid.tile_at(Position(0, 0)).type is TileType.WALL

        session.advance_walls()
        assert session.wall_offset == 2
        assert session.status is SessionStatus.LOST

    def test_zen_never_compresses(self, row_level):
        """Test zen has no walls and no move limit."""
        zen = GameSession(row_level, GameMode.ZEN)
        assert not zen.compression_active
        assert zen.advance_walls() is None
        assert zen.moves_left is None

    def test_level_can_disable_compression(self, row_level):
        """Test a level can switch compression off."""
        calm = GameSession(replace(row_level, compression_enabled=False))
        assert not calm.compression_active

    def test_blitz_loses_on_crushed_node(self, row_level):
        """Test blitz reports its own loss reason."""
        blitz = GameSession(row_level, GameMode.BLITZ)
        blitz.advance_walls()
        assert blitz.status is SessionStatus.LOST
        assert blitz.loss_reason == "A node was crushed!"


class TestModes:
    """Tests for mode hooks wired through the session."""

    def test_tick(self, row_level):
        """Test ticks reach the mode's state."""
        blitz = GameSession(row_level, GameMode.BLITZ)
        blitz.tick()
        blitz.tick()
        assert blitz.elapsed_seconds == 2
        assert blitz.mode_state == {"elapsed": 2}

        classic = GameSession(row_level)
        classic.tick()
        assert classic.mode_state == {}

    def test_zen_win_message(self, row_level):
        """Test zen uses its own win message."""
        zen = GameSession(row_level, GameMode.ZEN)
        for x in (1, 2, 3):
            zen.tap(x, 2)
        assert zen.win_reason == "Connected!"

    def test_unknown_mode(self):
        """Test unknown modes raise ValueError."""
        with pytest.raises(ValueError):
            get_mode_hooks("arcade")

    def test_hint(self, session):
        """Test the hint is the first minimal move."""
        hint = session.hint()
        assert hint.position == Position(1, 2)
        assert hint.turns == 1

    def test_to_dict(self, session):
        """Test session state serializes."""
        session.tap(1, 2)
        data = session.to_dict()
        assert data["mode"] == "classic"
        assert data["status"] == "playing"
        assert data["moves"] == 1
        assert data["moves_left"] == 4
