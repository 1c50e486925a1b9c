"""Tests for connectivity analysis."""
import random
from dataclasses import replace

from pressure.core.connectivity import (
    connected_component,
    dangling_stubs,
    is_connected,
    linked_neighbor,
    win_tiles,
)
from pressure.models.grid import CLOCKWISE, Grid, Position, Tile, TileType

from conftest import DOWN, LEFT, RIGHT, UP, node, pipe, wall


class TestLinks:
    """A stub is live only when it meets a stub pointing back."""

    def test_mutual_stubs_link(self):
        """Test facing stubs link."""
        grid = Grid.from_tiles(2, 1, [pipe(0, 0, RIGHT), pipe(1, 0, LEFT)])
        assert linked_neighbor(grid, grid.tile_at(Position(0, 0)), RIGHT) == Position(1, 0)

    def test_one_sided_stub_does_not_link(self):
        """Test a stub into a tile without a return stub is dead."""
        grid = Grid.from_tiles(2, 1, [pipe(0, 0, RIGHT), pipe(1, 0, UP, DOWN)])
        assert linked_neighbor(grid, grid.tile_at(Position(0, 0)), RIGHT) is None

    def test_stub_off_grid(self):
        """Test stubs pointing off the grid never link."""
        grid = Grid.from_tiles(1, 1, [pipe(0, 0, UP)])
        assert linked_neighbor(grid, grid.tile_at(Position(0, 0)), UP) is None

    def test_walls_and_crushed_tiles_block(self):
        """Test walls and crushed tiles block flow even with stubs."""
        crushed = Tile(1, 0, TileType.CRUSHED, [LEFT, RIGHT])
        grid = Grid.from_tiles(3, 1, [node(0, 0), crushed, node(2, 0)])
        assert not is_connected(grid, [Position(0, 0), Position(2, 0)])

        walled = Tile(1, 0, TileType.WALL, [LEFT, RIGHT])
        grid = Grid.from_tiles(3, 1, [node(0, 0), walled, node(2, 0)])
        assert not is_connected(grid, [Position(0, 0), Position(2, 0)])

    def test_mutuality_on_random_grids(self):
        """Test linking matches the mutual-stub rule on random grids."""
        rng = random.Random(7)
        types = [TileType.PATH, TileType.PATH, TileType.NODE, TileType.WALL, TileType.CRUSHED, TileType.EMPTY]
        for _ in range(30):
            tiles = [
                Tile(x, y, rng.choice(types), [d for d in CLOCKWISE if rng.random() < 0.5])
                for y in range(4)
                for x in range(4)
            ]
            grid = Grid(4, 4, tuple(tiles))
            for tile in grid:
                for d in CLOCKWISE:
                    neighbor = grid.tile_at(tile.position.step(d))
                    expected = (
                        d in tile.connections
                        and neighbor is not None
                        and not neighbor.type.blocks_flow
                        and d.opposite in neighbor.connections
                    )
                    assert (linked_neighbor(grid, tile, d) is not None) == expected


class TestIsConnected:
    """Tests for goal connectivity."""

    def test_disconnected_row(self, row_grid, row_goals):
        """Test misaligned straights keep the goals apart."""
        assert not is_connected(row_grid, row_goals)

    def test_connected_after_alignment(self, row_grid, row_goals):
        """Test turning each straight once joins the goals."""
        grid = row_grid
        for x in (1, 2, 3):
            grid = grid.rotate(Position(x, 2))
        assert is_connected(grid, row_goals)

    def test_single_goal_is_trivially_connected(self, row_grid):
        """Test zero or one goal counts as connected."""
        assert is_connected(row_grid, [Position(0, 2)])
        assert is_connected(row_grid, [])

    def test_crushed_goal_breaks_connection(self, solved_level):
        """Test a crushed goal drops out of its component."""
        grid = solved_level.grid
        goal = grid.tile_at(Position(3, 2))
        grid = grid.replace_tiles([replace(goal, type=TileType.CRUSHED)])
        assert not is_connected(grid, solved_level.goal_nodes)

    def test_component_of_blocked_start(self):
        """Test a blocked start forms a component of one."""
        grid = Grid.from_tiles(2, 1, [wall(0, 0), pipe(1, 0, LEFT)])
        assert connected_component(grid, Position(0, 0)) == {Position(0, 0)}


class TestWinTilesAndStubs:
    """Tests for highlight and diagnostics helpers."""

    def test_win_tiles_cover_linked_path(self, solved_level):
        """Test win tiles cover goals and the pipe between them."""
        tiles = win_tiles(solved_level.grid, solved_level.goal_nodes)
        assert tiles == {Position(1, 2), Position(2, 2), Position(3, 2)}

    def test_dangling_stubs(self, row_grid):
        """Test stubs with nothing to meet are reported."""
        stubs = dangling_stubs(row_grid)
        assert Position(2, 2) in stubs
        assert Position(0, 2) in stubs
