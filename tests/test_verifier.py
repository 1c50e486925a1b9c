"""Tests for level verification and auto-fix."""
from dataclasses import replace

import pytest
from pressure.core.connectivity import is_connected
from pressure.core.generator import LevelGenerator
from pressure.core.modes import GameMode
from pressure.core.solver import RotationSolver
from pressure.core.verifier import LevelVerifier, analyze_node_shape, descriptive_name
from pressure.models.classic import CLASSIC_LEVELS
from pressure.models.grid import Position
from pressure.models.level import Difficulty, FixType, Move, VerifyStatus

from conftest import DOWN, LEFT, make_level, node, pipe


@pytest.fixture
def verifier():
    """Create verifier with its own solver and generator."""
    solver = RotationSolver(time_limit=10.0)
    return LevelVerifier(solver=solver, generator=LevelGenerator(solver=solver))


def positions(*pairs):
    return [Position(x, y) for x, y in pairs]


class TestVerify:
    """Tests for play-through classification."""

    @pytest.mark.parametrize("level", CLASSIC_LEVELS, ids=lambda level: level.name)
    def test_classic_levels_are_won(self, verifier, level):
        """Test every classic level is won in the minimum."""
        report = verifier.verify(level)
        assert report.status == VerifyStatus.WON, report.log
        assert report.passed
        assert 0 < report.moves <= level.max_moves
        assert report.moves == report.min_moves

    def test_already_solved(self, verifier, solved_level):
        """Test a pre-connected level is flagged with a fix hint."""
        report = verifier.verify(solved_level)
        assert report.status == VerifyStatus.ALREADY_SOLVED
        assert report.min_moves == 0
        assert report.fix_suggestion

    def test_impossible_under_move_limit(self, verifier, row_level):
        """Test a tight move limit reports the real minimum."""
        tight = replace(row_level, max_moves=2)
        report = verifier.verify(tight)
        assert report.status == VerifyStatus.IMPOSSIBLE
        assert report.min_moves == 3
        assert "3" in report.fix_suggestion

    def test_zen_ignores_move_limit(self, verifier, row_level):
        """Test zen ignores maxMoves."""
        tight = replace(row_level, max_moves=2)
        report = verifier.verify(tight, GameMode.ZEN)
        assert report.status == VerifyStatus.WON

    def test_no_solution(self, verifier, locked_level):
        """Test an unsolvable level fails."""
        report = verifier.verify(locked_level)
        assert report.status == VerifyStatus.NO_SOLUTION
        assert not report.passed

    def test_timed_out(self, row_level):
        """Test solver limits surface as timed_out."""
        limited = LevelVerifier(solver=RotationSolver(time_limit=10.0, check_interval=2, max_states=1))
        assert limited.verify(row_level).status == VerifyStatus.TIMED_OUT

    def test_report_dict(self, verifier, row_level):
        """Test the report serializes."""
        data = verifier.verify(row_level).to_dict()
        assert data["status"] == "won"
        assert data["min_moves"] == 3
        assert len(data["solution"]) == 3
        assert data["log"]

    def test_verify_all(self, verifier):
        """Test verify_all keeps level order."""
        reports = verifier.verify_all(CLASSIC_LEVELS)
        assert [r.level_id for r in reports] == [level.id for level in CLASSIC_LEVELS]


class TestFix:
    """Tests for automatic repair."""

    def test_scramble_already_solved(self, verifier, solved_level):
        """Test scrambling breaks the start connection."""
        report = verifier.verify(solved_level)
        fix = verifier.fix(solved_level, report, seed=1)
        assert fix.fix_type == FixType.SCRAMBLED
        assert not is_connected(fix.fixed.grid, fix.fixed.goal_nodes)
        assert fix.fixed.id == solved_level.id
        assert verifier.verify(fix.fixed).status == VerifyStatus.WON

    @pytest.mark.parametrize("seed", range(10))
    def test_scramble_replaces_stale_solution(self, verifier, seed):
        """Test the scrambled level carries a solution for its new layout."""
        level = make_level(
            4, 4, [node(1, 1), pipe(2, 1, LEFT, DOWN), node(2, 2)], [(1, 1), (2, 2)],
            solution=(Move(Position(2, 1), 2),),
        )
        fixed = verifier.fix(level, verifier.verify(level), seed=seed).fixed
        assert not is_connected(fixed.grid, fixed.goal_nodes)
        assert fixed.solution
        assert is_connected(fixed.grid.apply_moves(fixed.solution), fixed.goal_nodes)

    def test_raise_max_moves(self, verifier, row_level):
        """Test maxMoves is raised to the minimum plus two."""
        tight = replace(row_level, max_moves=2)
        fix = verifier.fix(tight, verifier.verify(tight))
        assert fix.fix_type == FixType.MAX_MOVES_INCREASED
        assert fix.fixed.max_moves == 5
        assert verifier.verify(fix.fixed).passed

    def test_regenerate_unsolvable(self, verifier, locked_level):
        """Test an unsolvable level is regenerated in place."""
        report = verifier.verify(locked_level)
        fix = None
        for seed in range(5):
            fix = verifier.fix(locked_level, report, seed=seed)
            if fix is not None:
                break
        assert fix is not None
        assert fix.fix_type == FixType.REGENERATED
        assert fix.fixed.id == locked_level.id
        assert fix.fixed.world == locked_level.world
        assert verifier.verify(fix.fixed).passed
        assert fix.to_dict()["level_json"]["id"] == locked_level.id

    def test_won_level_needs_no_fix(self, verifier, row_level):
        """Test a passing level gets no fix."""
        assert verifier.fix(row_level, verifier.verify(row_level)) is None


class TestNaming:
    """Tests for descriptive level names."""

    @pytest.mark.parametrize("nodes,expected", [
        (positions((1, 1), (1, 3)), "Linear"),
        (positions((1, 1), (4, 1), (6, 1)), "Linear"),
        (positions((1, 1), (2, 2)), "Diagonal"),
        (positions((1, 1), (3, 2)), "Corner"),
        (positions((1, 1), (2, 3), (3, 1)), "Compact"),
        (positions((1, 1), (5, 2), (2, 4)), "Spread"),
        (positions((1, 1)), ""),
    ])
    def test_analyze_node_shape(self, nodes, expected):
        """Test goal shapes are classified."""
        assert analyze_node_shape(nodes) == expected

    def test_descriptive_name(self):
        """Test names combine shape, difficulty and size."""
        final = CLASSIC_LEVELS[-1]
        assert descriptive_name(final, Difficulty.HARD) == "Compact Moderate Pentagon"
        assert descriptive_name(final, Difficulty.EASY) == "Compact Pentagon"
