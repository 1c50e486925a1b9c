"""Game mode hooks.

Modes customize win/loss rules without the core depending on them. Every hook
has a default, so a bare ModeHooks gives connectivity-only win/loss.
"""
from enum import Enum
from typing import Any, Callable, Dict, Optional, Sequence, Set, Tuple

from ..models.grid import Grid, Position, TileType
from .connectivity import is_connected, win_tiles

# (grid, wall_offset, moves, move_budget, mode_stats) -> (lost, reason)
LossCheck = Callable[[Grid, int, int, int, Dict[str, Any]], Tuple[bool, Optional[str]]]


class GameMode(str, Enum):
    """Built-in game modes."""
    CLASSIC = "classic"
    ZEN = "zen"
    BLITZ = "blitz"


class WallCompression(str, Enum):
    """Whether a mode runs the compression hazard."""
    ALWAYS = "always"
    NEVER = "never"
    OPTIONAL = "optional"


class ModeHooks:
    """Base mode: connect all goals, lose when a goal is crushed."""

    mode = GameMode.CLASSIC
    name = "Pressure"
    wall_compression = WallCompression.ALWAYS
    supports_undo = True
    use_move_limit = True

    def initial_state(self) -> Dict[str, Any]:
        return {}

    def check_win(
        self,
        grid: Grid,
        goals: Sequence[Position],
        moves: int,
        move_budget: int,
        mode_state: Dict[str, Any],
    ) -> Tuple[bool, Optional[str]]:
        won = is_connected(grid, goals)
        return won, "All nodes connected!" if won else None

    def check_loss(
        self,
        grid: Grid,
        wall_offset: int,
        moves: int,
        move_budget: int,
        mode_state: Dict[str, Any],
    ) -> Tuple[bool, Optional[str]]:
        return False, None

    def get_win_tiles(self, grid: Grid, goals: Sequence[Position]) -> Set[Position]:
        return win_tiles(grid, goals)

    def on_tick(self, elapsed_seconds: int, mode_state: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Called once per game second. Return a mode_state update or None."""
        return None

    def compression_enabled(self, override: Optional[bool] = None) -> bool:
        if self.wall_compression is WallCompression.ALWAYS:
            return True
        if self.wall_compression is WallCompression.NEVER:
            return False
        return override if override is not None else True


class ClassicMode(ModeHooks):
    """Connect all nodes before the walls close in."""


class ZenMode(ModeHooks):
    """No walls, no move limit."""

    mode = GameMode.ZEN
    name = "Zen"
    wall_compression = WallCompression.NEVER
    use_move_limit = False

    def check_win(self, grid, goals, moves, move_budget, mode_state):
        won = is_connected(grid, goals)
        return won, "Connected!" if won else None


class BlitzMode(ModeHooks):
    """No move limit, no undo. Walls never stop."""

    mode = GameMode.BLITZ
    name = "Blitz"
    supports_undo = False
    use_move_limit = False

    def check_win(self, grid, goals, moves, move_budget, mode_state):
        won = is_connected(grid, goals)
        return won, "Survived!" if won else None

    def check_loss(self, grid, wall_offset, moves, move_budget, mode_state):
        crushed_goal = any(t.is_goal_node and t.type is TileType.CRUSHED for t in grid)
        return crushed_goal, "A node was crushed!" if crushed_goal else None

    def on_tick(self, elapsed_seconds, mode_state):
        return {"elapsed": elapsed_seconds}


MODE_HOOKS: Dict[GameMode, ModeHooks] = {
    GameMode.CLASSIC: ClassicMode(),
    GameMode.ZEN: ZenMode(),
    GameMode.BLITZ: BlitzMode(),
}


def get_mode_hooks(mode: GameMode) -> ModeHooks:
    """Get hooks for a mode. Accepts the enum or its string value."""
    return MODE_HOOKS[GameMode(mode)]
