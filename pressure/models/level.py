"""Level data models and result structures."""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from .grid import Direction, Grid, Position


class CompressionDirection(str, Enum):
    """Which sides the walls compress from.

    The string values are the persisted level-file values and must not change.
    """
    ALL = "all"
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"
    TOP_BOTTOM = "top-bottom"
    LEFT_RIGHT = "left-right"
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"
    TOP_LEFT_RIGHT = "top-left-right"
    BOTTOM_LEFT_RIGHT = "bottom-left-right"
    LEFT_TOP_BOTTOM = "left-top-bottom"
    RIGHT_TOP_BOTTOM = "right-top-bottom"
    NONE = "none"

    @property
    def active_edges(self) -> FrozenSet[Direction]:
        """Grid edges the boundary advances from."""
        if self is CompressionDirection.ALL:
            return frozenset(Direction)
        if self is CompressionDirection.NONE:
            return frozenset()
        return frozenset(_EDGE_NAMES[part] for part in self.value.split("-"))


_EDGE_NAMES = {
    "top": Direction.UP,
    "bottom": Direction.DOWN,
    "left": Direction.LEFT,
    "right": Direction.RIGHT,
}


class Difficulty(str, Enum):
    """Generator difficulty."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"

    @classmethod
    def from_compression_delay(cls, delay_ms: int) -> "Difficulty":
        """Infer difficulty from a hand-authored level's compression delay."""
        if delay_ms >= 10000:
            return cls.EASY
        elif delay_ms >= 5000:
            return cls.MEDIUM
        else:
            return cls.HARD


@dataclass(frozen=True)
class Move:
    """Rotate the tile at `position` clockwise by `turns` quarter-turns."""
    position: Position
    turns: int

    def to_dict(self) -> Dict[str, int]:
        # `rotations` is the persisted field name
        return {"x": self.position.x, "y": self.position.y, "rotations": self.turns}


def total_turns(moves: List[Move]) -> int:
    return sum(m.turns for m in moves)


@dataclass(frozen=True)
class Level:
    """A level definition. Play sessions copy the grid; the level never changes."""
    id: int
    name: str
    grid: Grid
    goal_nodes: Tuple[Position, ...]
    max_moves: int
    world: int = 1
    compression_delay: int = 10000
    compression_enabled: Optional[bool] = None
    compression_direction: CompressionDirection = CompressionDirection.ALL
    solution: Optional[Tuple[Move, ...]] = None
    is_generated: bool = False

    def __post_init__(self):
        object.__setattr__(self, "goal_nodes", tuple(self.goal_nodes))
        if self.solution is not None:
            object.__setattr__(self, "solution", tuple(self.solution))
        if not self.goal_nodes:
            raise ValueError(f"Level {self.id} has no goal nodes")
        for goal in self.goal_nodes:
            if self.grid.tile_at(goal) is None:
                raise ValueError(f"Level {self.id} goal ({goal.x}, {goal.y}) is outside the grid")

    @property
    def compresses(self) -> bool:
        """Whether walls advance during play for this level."""
        if self.compression_enabled is not None:
            return self.compression_enabled
        return self.compression_delay > 0 and self.compression_direction is not CompressionDirection.NONE

    def with_grid(self, grid: Grid) -> "Level":
        return replace(self, grid=grid)


class SolveStatus(str, Enum):
    """Outcome of a solver run."""
    SOLVED = "solved"
    ALREADY_SOLVED = "already_solved"
    NO_SOLUTION = "no_solution"
    TIMED_OUT = "timed_out"


@dataclass
class SolveResult:
    """Result of a rotation search."""
    status: SolveStatus
    moves: List[Move] = field(default_factory=list)
    expansions: int = 0
    states_seen: int = 0
    elapsed_ms: int = 0

    @property
    def solved(self) -> bool:
        return self.status == SolveStatus.SOLVED

    @property
    def total_turns(self) -> int:
        return total_turns(self.moves)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "status": self.status.value,
            "moves": [m.to_dict() for m in self.moves],
            "total_turns": self.total_turns,
            "expansions": self.expansions,
            "states_seen": self.states_seen,
            "elapsed_ms": self.elapsed_ms,
        }


class VerifyStatus(str, Enum):
    """Outcome of playing a level through with its solver solution."""
    WON = "won"
    LOST = "lost"
    ALREADY_SOLVED = "already_solved"
    NO_SOLUTION = "no_solution"
    TIMED_OUT = "timed_out"
    IMPOSSIBLE = "impossible"


@dataclass
class LevelVerification:
    """Verification report for one level."""
    level_id: int
    level_name: str
    status: VerifyStatus
    max_moves: int
    min_moves: int = -1
    moves: int = 0
    wall_offset: int = 0
    solution: List[Move] = field(default_factory=list)
    log: List[str] = field(default_factory=list)
    fix_suggestion: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.status == VerifyStatus.WON

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "level_id": self.level_id,
            "level_name": self.level_name,
            "status": self.status.value,
            "max_moves": self.max_moves,
            "min_moves": self.min_moves,
            "moves": self.moves,
            "wall_offset": self.wall_offset,
            "solution": [m.to_dict() for m in self.solution],
            "log": self.log,
            "fix_suggestion": self.fix_suggestion,
        }


@dataclass
class GenerationParams:
    """Parameters for level generation."""
    grid_cols: int = 7
    grid_rows: int = 7
    node_count: int = 2
    difficulty: Difficulty = Difficulty.MEDIUM
    decoy_count: Optional[int] = None
    compression_direction: Optional[CompressionDirection] = None
    interior_walls: Optional[int] = None
    locked_fraction: float = 0.0
    seed: Optional[int] = None
    level_id: Optional[int] = None
    name: Optional[str] = None
    world: int = 1

    def __post_init__(self):
        self.difficulty = Difficulty(self.difficulty)
        if self.compression_direction is not None:
            self.compression_direction = CompressionDirection(self.compression_direction)
        if self.grid_cols < 4 or self.grid_rows < 4:
            raise ValueError(f"Grid must be at least 4x4, got {self.grid_cols}x{self.grid_rows}")
        if self.node_count < 2:
            raise ValueError(f"node_count must be at least 2, got {self.node_count}")
        if not 0.0 <= self.locked_fraction <= 1.0:
            raise ValueError(f"locked_fraction must be within 0..1, got {self.locked_fraction}")


@dataclass
class GenerationResult:
    """Result of level generation."""
    level: Optional[Level]
    attempts: int
    min_moves: int = -1
    generation_time_ms: int = 0
    failure_reason: Optional[str] = None

    @property
    def generation_failed(self) -> bool:
        return self.level is None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        from ..utils.helpers import level_to_json

        return {
            "level_json": level_to_json(self.level) if self.level else None,
            "generation_failed": self.generation_failed,
            "attempts": self.attempts,
            "min_moves": self.min_moves,
            "generation_time_ms": self.generation_time_ms,
            "failure_reason": self.failure_reason,
        }


@dataclass
class CompressionResult:
    """Result of one wall advance."""
    grid: Grid
    offset: int
    advanced: bool
    crushed: List[Position] = field(default_factory=list)
    crushed_goal: bool = False
    lost: bool = False
    loss_reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "offset": self.offset,
            "advanced": self.advanced,
            "crushed": [p.to_dict() for p in self.crushed],
            "crushed_goal": self.crushed_goal,
            "lost": self.lost,
            "loss_reason": self.loss_reason,
        }


class FixType(str, Enum):
    """How a broken level was repaired."""
    SCRAMBLED = "scrambled"
    MAX_MOVES_INCREASED = "maxmoves_increased"
    REGENERATED = "regenerated"


@dataclass
class LevelFix:
    """A repaired level next to the one it replaces."""
    original: Level
    fixed: Level
    fix_type: FixType
    description: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        from ..utils.helpers import level_to_json

        return {
            "level_id": self.original.id,
            "fix_type": self.fix_type.value,
            "description": self.description,
            "level_json": level_to_json(self.fixed),
        }
