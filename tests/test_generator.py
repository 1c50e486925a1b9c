"""Tests for the level generator."""
import random

import pytest
from pressure.core.connectivity import is_connected
from pressure.core.generator import (
    DIFFICULTY_PROFILES,
    LevelGenerator,
    find_shape,
    get_generator,
)
from pressure.core.solver import RotationSolver
from pressure.models.grid import TileType
from pressure.models.level import CompressionDirection, Difficulty, GenerationParams, SolveStatus, total_turns
from pressure.utils.helpers import level_to_json

from conftest import DOWN, LEFT, RIGHT, UP


@pytest.fixture
def generator():
    """Create generator instance with a generous solver budget."""
    return LevelGenerator(solver=RotationSolver(time_limit=10.0))


def successful(results):
    return [r for r in results if not r.generation_failed]


def first_success(generator, seeds=range(10), **kwargs):
    """First successful generation over a range of seeds."""
    for seed in seeds:
        result = generator.generate(GenerationParams(seed=seed, **kwargs))
        if not result.generation_failed:
            return result
    pytest.fail(f"no seed produced a level for {kwargs}")


class TestGenerate:
    """Generated levels are scrambled, certified and winnable."""

    @pytest.mark.parametrize("difficulty", [Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD])
    @pytest.mark.parametrize("cols,rows", [(size, size) for size in range(4, 11)] + [(8, 6)])
    def test_levels_are_certified(self, generator, cols, rows, difficulty):
        """Test generated levels start unsolved and carry a working solution."""
        results = []
        for seed in range(6):
            results.append(generator.generate(
                GenerationParams(grid_cols=cols, grid_rows=rows, difficulty=difficulty, seed=seed)
            ))
            if len(successful(results)) == 2:
                break
        levels = [r.level for r in successful(results)]
        assert levels, [r.failure_reason for r in results]

        for level in levels:
            assert not is_connected(level.grid, level.goal_nodes)
            assert level.solution
            assert total_turns(level.solution) <= level.max_moves
            assert is_connected(level.grid.apply_moves(level.solution), level.goal_nodes)
            assert level.is_generated

    def test_max_moves_is_minimum_plus_padding(self, generator):
        """Test maxMoves is the certified minimum plus padding."""
        result = first_success(generator, grid_cols=6, grid_rows=6)
        assert not result.generation_failed
        padding = DIFFICULTY_PROFILES[Difficulty.MEDIUM].move_padding
        assert result.level.max_moves == result.min_moves + padding

        check = RotationSolver(time_limit=10.0).solve(
            result.level.grid, result.level.goal_nodes, result.level.max_moves
        )
        assert check.status == SolveStatus.SOLVED
        assert check.total_turns == result.min_moves

    def test_border_is_walled(self, generator):
        """Test the outer ring is all walls."""
        result = first_success(generator, grid_cols=6, grid_rows=5)
        grid = result.level.grid
        for tile in grid:
            if tile.x in (0, grid.cols - 1) or tile.y in (0, grid.rows - 1):
                assert tile.type is TileType.WALL

    def test_goals_are_fixed_nodes(self, generator):
        """Test goals are fixed node tiles."""
        result = first_success(generator, grid_cols=7, grid_rows=7, node_count=3)
        assert not result.generation_failed
        assert len(result.level.goal_nodes) == 3
        for goal in result.level.goal_nodes:
            tile = result.level.grid.tile_at(goal)
            assert tile.type is TileType.NODE
            assert tile.is_goal_node
            assert not tile.can_rotate

    def test_requested_direction_and_delay(self, generator):
        """Test direction and delay follow the params."""
        result = first_success(
            generator, grid_cols=6, grid_rows=6, difficulty=Difficulty.HARD,
            compression_direction=CompressionDirection.TOP,
        )
        assert result.level.compression_direction is CompressionDirection.TOP
        assert result.level.compression_delay == DIFFICULTY_PROFILES[Difficulty.HARD].compression_delay

    def test_same_seed_same_level(self, generator):
        """Test generation is deterministic for a seed."""
        for seed in range(10):
            params = GenerationParams(grid_cols=6, grid_rows=6, seed=seed, level_id=9)
            first = generator.generate(params)
            second = generator.generate(params)
            assert first.generation_failed == second.generation_failed
            if not first.generation_failed:
                assert level_to_json(first.level) == level_to_json(second.level)
                return
        pytest.fail("no seed produced a level")

    def test_id_and_name_overrides(self, generator):
        """Test explicit id and name are kept."""
        result = first_success(generator, grid_cols=5, grid_rows=5, level_id=77, name="Custom")
        assert result.level.id == 77
        assert result.level.name == "Custom"

    def test_locked_tiles_never_rotate(self, generator):
        """Test the solution never turns a locked tile."""
        result = first_success(generator, grid_cols=7, grid_rows=7, locked_fraction=0.5)
        locked = {t.position for t in result.level.grid if t.type is TileType.PATH and not t.can_rotate}
        assert not locked & {m.position for m in result.level.solution}


class TestFailures:
    """Rejected generation reports a reason instead of raising."""

    def test_unplaceable_goals(self):
        """Test too many goals fail with a reason."""
        generator = LevelGenerator(max_attempts=2)
        result = generator.generate(GenerationParams(grid_cols=4, grid_rows=4, node_count=5, seed=0))
        assert result.generation_failed
        assert result.level is None
        assert result.attempts == 2
        assert result.failure_reason == "could not place goal nodes"
        assert result.to_dict()["level_json"] is None

    @pytest.mark.parametrize("kwargs", [
        {"grid_cols": 3},
        {"node_count": 1},
        {"locked_fraction": 1.5},
        {"difficulty": "impossible"},
    ])
    def test_invalid_params(self, kwargs):
        """Test invalid params raise ValueError."""
        with pytest.raises(ValueError):
            GenerationParams(**kwargs)


class TestHelpers:
    """Tests for shape and name helpers."""

    def test_find_shape_prefers_smallest(self):
        """Test find_shape picks the smallest shape covering the stubs."""
        assert find_shape({UP}) == frozenset([UP, DOWN])
        assert find_shape({LEFT, RIGHT}) == frozenset([LEFT, RIGHT])
        assert find_shape({UP, LEFT}) == frozenset([UP, LEFT])
        assert find_shape({UP, LEFT, DOWN}) == frozenset([UP, LEFT, DOWN])
        assert len(find_shape({UP, LEFT, DOWN, RIGHT})) == 4

    def test_generate_name(self):
        """Test generated names are two words."""
        name = LevelGenerator.generate_name(Difficulty.HARD, random.Random(1))
        adjective, noun = name.split(" ")
        assert adjective and noun

    def test_generate_world_assigns_ids(self, generator):
        """Test world generation assigns ids, world and names."""
        params = GenerationParams(grid_cols=5, grid_rows=5, difficulty=Difficulty.EASY, seed=100, world=2)
        levels = generator.generate_world(params, 3, start_id=21, names=["A", "B", "C"])
        assert levels
        for level in levels:
            assert 21 <= level.id <= 23
            assert level.world == 2
            assert level.name == "ABC"[level.id - 21]

    def test_singleton(self):
        """Test get_generator returns the same instance."""
        assert get_generator() is get_generator()
