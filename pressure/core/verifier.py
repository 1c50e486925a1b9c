"""Level verification and auto-fix.

Plays each level through with a minimal solver solution under the level's own
rules (move limit, then wall compression) and classifies the outcome. Broken
levels can be repaired: pre-solved layouts are scrambled, tight move budgets
raised, and unsolvable layouts regenerated.
"""
import logging
import random
from dataclasses import replace
from typing import List, Optional, Sequence

from ..models.grid import Position
from ..models.level import (
    Difficulty,
    FixType,
    GenerationParams,
    Level,
    LevelFix,
    LevelVerification,
    SolveStatus,
    VerifyStatus,
)
from .compression import CompressionSystem, get_compression_system
from .connectivity import is_connected
from .generator import LevelGenerator, get_generator
from .modes import GameMode, ModeHooks, get_mode_hooks
from .solver import RotationSolver, get_solver

logger = logging.getLogger(__name__)

# Compression steps tried past the maximum offset before giving up
EXTRA_COMPRESSION_CYCLES = 2
SCRAMBLE_ATTEMPTS = 100


def analyze_node_shape(nodes: Sequence[Position]) -> str:
    """Describe the shape the goal nodes form."""
    if len(nodes) < 2:
        return ""

    if all(n.x == nodes[0].x for n in nodes) or all(n.y == nodes[0].y for n in nodes):
        return "Linear"

    by_x = sorted(nodes, key=lambda n: n.x)
    if all(abs(b.y - a.y) == abs(b.x - a.x) for a, b in zip(by_x, by_x[1:])):
        return "Diagonal"

    if len(nodes) == 2:
        return "Corner"

    x_range = max(n.x for n in nodes) - min(n.x for n in nodes)
    y_range = max(n.y for n in nodes) - min(n.y for n in nodes)
    if x_range > 3 or y_range > 3:
        return "Spread"
    if x_range <= 2 and y_range <= 2:
        return "Compact"
    return "Clustered"


_NODE_COUNT_NAMES = {3: "Triangle", 4: "Square", 5: "Pentagon", 6: "Hexagon"}


def descriptive_name(level: Level, difficulty: Difficulty) -> str:
    """Build a name from node layout, rotatable tile count and node count."""
    rotatable = len(level.grid.rotatable_positions())
    if rotatable <= 3:
        complexity = "Simple"
    elif rotatable <= 6:
        complexity = "Moderate"
    elif rotatable <= 10:
        complexity = "Complex"
    else:
        complexity = "Intricate"

    parts = []
    shape = analyze_node_shape(level.goal_nodes)
    if shape:
        parts.append(shape)
    if difficulty in (Difficulty.MEDIUM, Difficulty.HARD):
        parts.append(complexity)
    node_count = len(level.goal_nodes)
    if node_count > 2:
        parts.append(_NODE_COUNT_NAMES.get(node_count, f"{node_count}-Node"))
    if not parts:
        parts.append("Basic" if level.grid.cols <= 5 else "Extended")
    return " ".join(parts)


class LevelVerifier:
    """Verifies levels by playing them through, and repairs broken ones."""

    def __init__(
        self,
        solver: Optional[RotationSolver] = None,
        compression: Optional[CompressionSystem] = None,
        generator: Optional[LevelGenerator] = None,
    ):
        self.solver = solver or get_solver()
        self.compression = compression or get_compression_system()
        self.generator = generator or get_generator()

    def verify(self, level: Level, mode: GameMode = GameMode.CLASSIC) -> LevelVerification:
        """
        Verify one level.

        Args:
            level: Level to check.
            mode: Game mode whose rules apply during the play-through.

        Returns:
            LevelVerification with status won, lost, already_solved,
            no_solution, timed_out or impossible.
        """
        hooks = get_mode_hooks(mode)
        report = LevelVerification(
            level_id=level.id,
            level_name=level.name,
            status=VerifyStatus.LOST,
            max_moves=level.max_moves,
        )

        if is_connected(level.grid, level.goal_nodes):
            report.status = VerifyStatus.ALREADY_SOLVED
            report.min_moves = 0
            report.fix_suggestion = "Level starts in a won state - scramble the pipes"
            report.log.append("Goals are connected before any move")
            return report

        result = self.solver.solve_level(level)
        report.log.append(
            f"Solver: {result.status.value} after {result.expansions} expansions ({result.elapsed_ms}ms)"
        )
        if result.status == SolveStatus.TIMED_OUT:
            report.status = VerifyStatus.TIMED_OUT
            report.fix_suggestion = "Search was cut short - retry with a longer timeout"
            return report
        if result.status != SolveStatus.SOLVED:
            report.status = VerifyStatus.NO_SOLUTION
            report.fix_suggestion = f"No solution within {max(1, level.max_moves * 2)} quarter-turns - regenerate"
            return report

        report.min_moves = result.total_turns
        report.solution = list(result.moves)
        if hooks.use_move_limit and report.min_moves > level.max_moves:
            report.status = VerifyStatus.IMPOSSIBLE
            report.fix_suggestion = f"Increase maxMoves to at least {report.min_moves}"
            report.log.append(f"Needs {report.min_moves} quarter-turns, maxMoves is {level.max_moves}")
            return report

        self._play(level, hooks, report)
        return report

    def _play(self, level: Level, hooks: ModeHooks, report: LevelVerification) -> None:
        grid = level.grid
        mode_state = hooks.initial_state()

        for move in report.solution:
            for _ in range(move.turns):
                if hooks.use_move_limit and report.moves >= level.max_moves:
                    report.status = VerifyStatus.LOST
                    report.log.append(f"Out of moves ({level.max_moves})")
                    return
                grid = grid.rotate(move.position)
                report.moves += 1
                report.log.append(f"Move {report.moves}: rotate ({move.position.x}, {move.position.y})")
                won, reason = hooks.check_win(grid, level.goal_nodes, report.moves, level.max_moves, mode_state)
                if won:
                    report.status = VerifyStatus.WON
                    report.log.append(reason or "Won")
                    return

        if level.compresses and hooks.compression_enabled(level.compression_enabled):
            for _ in range(grid.max_offset + EXTRA_COMPRESSION_CYCLES):
                step = self.compression.advance_level(
                    level, grid, report.wall_offset, hooks.check_loss, report.moves, mode_state
                )
                grid = step.grid
                report.wall_offset = step.offset
                if step.lost:
                    report.status = VerifyStatus.LOST
                    report.log.append(step.loss_reason or "Lost to compression")
                    return
                if is_connected(grid, level.goal_nodes):
                    report.status = VerifyStatus.WON
                    report.log.append(f"Connected at wall offset {step.offset}")
                    return
                if not step.advanced:
                    break

        report.status = VerifyStatus.LOST
        report.log.append("Solution replay ended without connecting the goals")

    def fix(
        self,
        level: Level,
        verification: LevelVerification,
        seed: Optional[int] = None,
    ) -> Optional[LevelFix]:
        """
        Repair a level that failed verification.

        Returns:
            LevelFix, or None when the status has no automatic fix or
            regeneration failed.
        """
        rng = random.Random(seed)

        if verification.status == VerifyStatus.ALREADY_SOLVED:
            fixed = self.scramble(level, rng)
            return LevelFix(level, fixed, FixType.SCRAMBLED, "Scrambled pipes to break initial connection")

        if verification.status == VerifyStatus.IMPOSSIBLE and verification.min_moves > 0:
            fixed = replace(level, max_moves=verification.min_moves + 2)
            return LevelFix(
                level, fixed, FixType.MAX_MOVES_INCREASED,
                f"Increased maxMoves from {level.max_moves} to {fixed.max_moves}",
            )

        if verification.status == VerifyStatus.NO_SOLUTION:
            difficulty = Difficulty.from_compression_delay(level.compression_delay)
            params = GenerationParams(
                grid_cols=max(4, level.grid.cols),
                grid_rows=max(4, level.grid.rows),
                node_count=max(2, len(level.goal_nodes)),
                difficulty=difficulty,
                seed=seed,
            )
            generated = self.generator.generate(params)
            if generated.level is None:
                logger.warning("Could not regenerate level %s: %s", level.id, generated.failure_reason)
                return None
            name = descriptive_name(generated.level, difficulty)
            fixed = replace(generated.level, id=level.id, world=level.world, name=name)
            return LevelFix(
                level, fixed, FixType.REGENERATED,
                f'Regenerated as "{name}" ({params.grid_cols}x{params.grid_rows}, '
                f"{params.node_count} nodes, {difficulty.value})",
            )

        return None

    def scramble(self, level: Level, rng: Optional[random.Random] = None) -> Level:
        """
        Rotate rotatable tiles randomly until the goals are disconnected.

        The stored solution is recomputed for the scrambled layout, or
        dropped when the solver cannot certify one.
        """
        rng = rng or random.Random()
        grid = level.grid
        positions = grid.rotatable_positions()

        attempts = 0
        while is_connected(grid, level.goal_nodes) and attempts < SCRAMBLE_ATTEMPTS:
            attempts += 1
            grid = grid.replace_tiles(grid.tile_at(p).rotated(rng.randint(1, 3)) for p in positions)

        if is_connected(grid, level.goal_nodes):
            grid = grid.replace_tiles(grid.tile_at(p).rotated(1) for p in positions)

        scrambled = replace(level, grid=grid, solution=None)
        result = self.solver.solve_level(scrambled)
        if result.status == SolveStatus.SOLVED:
            return replace(scrambled, solution=tuple(result.moves))
        logger.debug("No certified solution for scrambled level %s (%s)", level.id, result.status.value)
        return scrambled

    def verify_all(self, levels: List[Level], mode: GameMode = GameMode.CLASSIC) -> List[LevelVerification]:
        return [self.verify(level, mode) for level in levels]
