"""Wall compression system."""
import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence

from ..models.grid import Direction, Grid, Position, TileType
from ..models.level import CompressionDirection, CompressionResult, Level
from .modes import LossCheck

logger = logging.getLogger(__name__)


def edge_distance(x: int, y: int, cols: int, rows: int, edge: Direction) -> int:
    """Number of tiles between (x, y) and the given grid edge."""
    if edge is Direction.UP:
        return y
    if edge is Direction.DOWN:
        return rows - 1 - y
    if edge is Direction.LEFT:
        return x
    return cols - 1 - x


class CompressionSystem:
    """Advances the boundary one step at a time, crushing tiles it passes."""

    def max_offset(self, cols: int, rows: int) -> int:
        """Get the maximum wall offset for a grid."""
        return min(cols, rows) // 2

    def is_inside_wall(
        self,
        x: int,
        y: int,
        cols: int,
        rows: int,
        offset: int,
        direction: CompressionDirection = CompressionDirection.ALL,
    ) -> bool:
        """Check if a position lies inside the boundary at `offset`."""
        return any(
            edge_distance(x, y, cols, rows, edge) < offset
            for edge in direction.active_edges
        )

    def crushed_positions(
        self,
        cols: int,
        rows: int,
        offset: int,
        direction: CompressionDirection = CompressionDirection.ALL,
    ) -> List[Position]:
        """Get all positions inside the boundary at `offset`."""
        return [
            Position(x, y)
            for y in range(rows)
            for x in range(cols)
            if self.is_inside_wall(x, y, cols, rows, offset, direction)
        ]

    def advance(
        self,
        grid: Grid,
        offset: int,
        direction: CompressionDirection = CompressionDirection.ALL,
        goals: Sequence[Position] = (),
        check_loss: Optional[LossCheck] = None,
        moves: int = 0,
        move_budget: int = 0,
        mode_stats: Optional[Dict[str, Any]] = None,
    ) -> CompressionResult:
        """
        Advance the walls by one step.

        Args:
            grid: Current grid. Never modified.
            offset: Current wall offset.
            direction: Which edges compress.
            goals: Goal positions; crushing any of them loses the level.
            check_loss: Optional mode loss predicate, evaluated after the crush pass.
            moves: Moves made so far (passed to check_loss).
            move_budget: Level move budget (passed to check_loss).
            mode_stats: Mode-specific data (passed to check_loss).

        Returns:
            CompressionResult. At the maximum offset the step is a no-op and
            `advanced` is False.
        """
        new_offset = offset + 1
        if new_offset > self.max_offset(grid.cols, grid.rows):
            return CompressionResult(grid=grid, offset=offset, advanced=False)

        edges = direction.active_edges
        updates = []
        for tile in grid:
            if tile.type in (TileType.WALL, TileType.CRUSHED):
                continue
            if any(edge_distance(tile.x, tile.y, grid.cols, grid.rows, e) < new_offset for e in edges):
                updates.append(replace(tile, type=TileType.CRUSHED, connections=frozenset(), can_rotate=False))

        new_grid = grid.replace_tiles(updates) if updates else grid
        crushed = [t.position for t in updates]
        crushed_set = set(crushed)
        crushed_goal = any(g in crushed_set for g in goals)

        result = CompressionResult(
            grid=new_grid,
            offset=new_offset,
            advanced=True,
            crushed=crushed,
            crushed_goal=crushed_goal,
        )

        if check_loss is not None:
            lost, reason = check_loss(new_grid, new_offset, moves, move_budget, mode_stats or {})
            if lost:
                result.lost = True
                result.loss_reason = reason
                return result

        if crushed_goal:
            result.lost = True
            result.loss_reason = "A goal node was crushed"
            logger.debug("Goal crushed at wall offset %d", new_offset)
        return result

    def advance_level(
        self,
        level: Level,
        grid: Grid,
        offset: int,
        check_loss: Optional[LossCheck] = None,
        moves: int = 0,
        mode_stats: Optional[Dict[str, Any]] = None,
    ) -> CompressionResult:
        """Advance using a level's compression direction, goals and move budget."""
        return self.advance(
            grid,
            offset,
            level.compression_direction,
            level.goal_nodes,
            check_loss,
            moves,
            level.max_moves,
            mode_stats,
        )


# Singleton instance
_compression_system = None


def get_compression_system() -> CompressionSystem:
    """Get or create compression system singleton instance."""
    global _compression_system
    if _compression_system is None:
        _compression_system = CompressionSystem()
    return _compression_system
