"""Shared fixtures: small hand-built grids and levels."""
import pytest

from pressure.models.grid import CLOCKWISE, Direction, Grid, Position, Tile, TileType
from pressure.models.level import Level

UP, RIGHT, DOWN, LEFT = Direction.UP, Direction.RIGHT, Direction.DOWN, Direction.LEFT


def node(x, y):
    return Tile(x, y, TileType.NODE, CLOCKWISE, is_goal_node=True)


def pipe(x, y, *connections, can_rotate=True):
    return Tile(x, y, TileType.PATH, connections, can_rotate=can_rotate)


def wall(x, y):
    return Tile(x, y, TileType.WALL)


def make_level(cols, rows, tiles, goals, max_moves=10, **kwargs):
    return Level(
        id=kwargs.pop("id", 1),
        name=kwargs.pop("name", "Test"),
        grid=Grid.from_tiles(cols, rows, tiles),
        goal_nodes=tuple(Position(x, y) for x, y in goals),
        max_moves=max_moves,
        **kwargs,
    )


@pytest.fixture
def row_grid():
    """5x5 grid: goals at (0,2) and (4,2), three vertical straights between them."""
    tiles = [node(0, 2), node(4, 2)] + [pipe(x, 2, UP, DOWN) for x in (1, 2, 3)]
    return Grid.from_tiles(5, 5, tiles)


@pytest.fixture
def row_goals():
    return [Position(0, 2), Position(4, 2)]


@pytest.fixture
def row_level(row_grid, row_goals):
    return Level(id=1, name="Row", grid=row_grid, goal_nodes=tuple(row_goals), max_moves=5)


@pytest.fixture
def solved_level():
    """Goals already linked by a horizontal straight."""
    return make_level(5, 5, [node(1, 2), pipe(2, 2, LEFT, RIGHT), node(3, 2)], [(1, 2), (3, 2)], max_moves=3)


@pytest.fixture
def locked_level():
    """Goals separated by a straight that cannot rotate."""
    return make_level(
        5, 5, [node(1, 2), pipe(2, 2, UP, DOWN, can_rotate=False), node(3, 2)], [(1, 2), (3, 2)], max_moves=3
    )
