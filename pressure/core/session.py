"""Play session: one level being played under one mode."""
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from ..models.grid import Grid, Position
from ..models.level import CompressionResult, Level, Move
from .compression import CompressionSystem, get_compression_system
from .modes import GameMode, ModeHooks, get_mode_hooks
from .solver import RotationSolver, get_solver

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    PLAYING = "playing"
    WON = "won"
    LOST = "lost"


class GameSession:
    """
    Runtime state of one level.

    The session owns its grid; the Level it was created from is never
    modified. Callers construct one session per play-through.
    """

    def __init__(
        self,
        level: Level,
        mode: GameMode = GameMode.CLASSIC,
        solver: Optional[RotationSolver] = None,
        compression: Optional[CompressionSystem] = None,
    ):
        self.level = level
        self.hooks: ModeHooks = get_mode_hooks(mode)
        self.solver = solver or get_solver()
        self.compression = compression or get_compression_system()

        self.grid: Grid = level.grid
        self.moves = 0
        self.wall_offset = 0
        self.elapsed_seconds = 0
        self.status = SessionStatus.PLAYING
        self.loss_reason: Optional[str] = None
        self.win_reason: Optional[str] = None
        self.mode_state: Dict[str, Any] = self.hooks.initial_state()
        self.history: List[Grid] = []

    @property
    def compression_active(self) -> bool:
        return self.level.compresses and self.hooks.compression_enabled(self.level.compression_enabled)

    @property
    def moves_left(self) -> Optional[int]:
        if not self.hooks.use_move_limit:
            return None
        return max(0, self.level.max_moves - self.moves)

    def tap(self, x: int, y: int) -> bool:
        """
        Rotate the tile at (x, y) one quarter-turn clockwise.

        Returns:
            True if the tap counted as a move.
        """
        if self.status is not SessionStatus.PLAYING:
            return False
        tile = self.grid.tile_at(Position(x, y))
        if tile is None or not tile.can_rotate or tile.type.blocks_flow:
            return False

        self.history.append(self.grid)
        self.grid = self.grid.rotate(tile.position)
        self.moves += 1
        self._check_end()
        return True

    def undo(self) -> bool:
        """Restore the grid before the last tap and give its move back."""
        if not self.hooks.supports_undo or not self.history or self.status is not SessionStatus.PLAYING:
            return False
        self.grid = self.history.pop()
        self.moves = max(0, self.moves - 1)
        return True

    def advance_walls(self) -> Optional[CompressionResult]:
        """Advance the walls one step, if compression is active."""
        if self.status is not SessionStatus.PLAYING or not self.compression_active:
            return None
        result = self.compression.advance_level(
            self.level,
            self.grid,
            self.wall_offset,
            self.hooks.check_loss,
            self.moves,
            self.mode_state,
        )
        self.grid = result.grid
        self.wall_offset = result.offset
        if result.lost:
            self._lose(result.loss_reason)
        return result

    def tick(self) -> None:
        """Advance the game clock by one second."""
        if self.status is not SessionStatus.PLAYING:
            return
        self.elapsed_seconds += 1
        update = self.hooks.on_tick(self.elapsed_seconds, self.mode_state)
        if update:
            self.mode_state.update(update)

    def hint(self) -> Optional[Move]:
        """First move of a minimal solution from the current grid."""
        if self.status is not SessionStatus.PLAYING:
            return None
        budget = self.level.max_moves * 2
        if self.hooks.use_move_limit:
            budget = self.moves_left
        return self.solver.hint(self.grid, self.level.goal_nodes, max(1, budget))

    def win_tiles(self) -> Set[Position]:
        return self.hooks.get_win_tiles(self.grid, self.level.goal_nodes)

    def _check_end(self) -> None:
        won, reason = self.hooks.check_win(
            self.grid, self.level.goal_nodes, self.moves, self.level.max_moves, self.mode_state
        )
        if won:
            self.status = SessionStatus.WON
            self.win_reason = reason
            logger.debug("Level %s won in %d moves", self.level.id, self.moves)
            return

        lost, reason = self.hooks.check_loss(
            self.grid, self.wall_offset, self.moves, self.level.max_moves, self.mode_state
        )
        if lost:
            self._lose(reason)
        elif self.hooks.use_move_limit and self.moves >= self.level.max_moves:
            self._lose("Out of moves")

    def _lose(self, reason: Optional[str]) -> None:
        self.status = SessionStatus.LOST
        self.loss_reason = reason
        logger.debug("Level %s lost: %s", self.level.id, reason)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "level_id": self.level.id,
            "mode": self.hooks.mode.value,
            "status": self.status.value,
            "moves": self.moves,
            "moves_left": self.moves_left,
            "wall_offset": self.wall_offset,
            "loss_reason": self.loss_reason,
            "mode_state": dict(self.mode_state),
        }
