"""Procedural level generator with solver certification.

Builds the solved layout first, then scrambles it:

1. Border walls, then goal nodes inside the zone the walls threaten
2. Winding paths between consecutive goals (randomized backtracking)
3. Interior wall clusters and dead-end decoy branches
4. Every rotatable tile turned 1-3 times away from its solved orientation
5. Reject layouts the scramble left connected
6. Certify with the solver; maxMoves comes from the certified minimum
"""
import logging
import math
import random
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from ..config import get_settings
from ..models.grid import CLOCKWISE, Direction, Grid, Position, Tile, TileType, rotate_connections
from ..models.level import (
    CompressionDirection,
    Difficulty,
    GenerationParams,
    GenerationResult,
    Level,
    Move,
    SolveStatus,
    total_turns,
)
from .connectivity import is_connected
from .solver import RotationSolver

logger = logging.getLogger(__name__)

ConnMap = Dict[Position, Set[Direction]]


@dataclass(frozen=True)
class DifficultyProfile:
    """Per-difficulty generation constants."""
    compression_delay: int
    move_padding: int
    walls_min: int
    walls_max: int
    path_slack: int        # extra cells a segment may wind beyond the Manhattan distance
    max_segment_turns: int  # certified quarter-turns allowed per goal-to-goal segment
    default_decoys: int


DIFFICULTY_PROFILES: Dict[Difficulty, DifficultyProfile] = {
    Difficulty.EASY: DifficultyProfile(12000, 4, 0, 1, 2, 14, 2),
    Difficulty.MEDIUM: DifficultyProfile(8000, 3, 1, 2, 4, 20, 4),
    Difficulty.HARD: DifficultyProfile(5000, 2, 2, 3, 6, 26, 6),
    Difficulty.EXPERT: DifficultyProfile(3500, 1, 2, 4, 8, 32, 8),
}

# Goal placement zone per compression direction, as [min, max] fractions of the
# interior. Goals sit toward the compressing walls so the walls threaten them.
PLACEMENT_ZONES: Dict[CompressionDirection, Tuple[Tuple[float, float], Tuple[float, float]]] = {
    CompressionDirection.TOP: ((0.15, 0.85), (0.15, 0.5)),
    CompressionDirection.BOTTOM: ((0.15, 0.85), (0.5, 0.85)),
    CompressionDirection.LEFT: ((0.15, 0.5), (0.15, 0.85)),
    CompressionDirection.RIGHT: ((0.5, 0.85), (0.15, 0.85)),
    CompressionDirection.TOP_BOTTOM: ((0.15, 0.85), (0.2, 0.8)),
    CompressionDirection.LEFT_RIGHT: ((0.2, 0.8), (0.15, 0.85)),
    CompressionDirection.TOP_LEFT: ((0.15, 0.5), (0.15, 0.5)),
    CompressionDirection.TOP_RIGHT: ((0.5, 0.85), (0.15, 0.5)),
    CompressionDirection.BOTTOM_LEFT: ((0.15, 0.5), (0.5, 0.85)),
    CompressionDirection.BOTTOM_RIGHT: ((0.5, 0.85), (0.5, 0.85)),
    CompressionDirection.ALL: ((0.25, 0.75), (0.25, 0.75)),
}

# Base pipe shapes, smallest first
PIPE_SHAPES: List[Tuple[Direction, ...]] = [
    (Direction.UP, Direction.DOWN),
    (Direction.UP, Direction.RIGHT),
    (Direction.UP, Direction.RIGHT, Direction.DOWN),
    (Direction.UP, Direction.RIGHT, Direction.DOWN, Direction.LEFT),
]

ADJECTIVES = {
    Difficulty.EASY: ["Open", "Gentle", "Flowing", "Clear", "Smooth", "Soft", "Wide", "Loose"],
    Difficulty.MEDIUM: ["Twisted", "Coiled", "Bent", "Winding", "Fractured", "Tangled", "Warped"],
    Difficulty.HARD: ["Brutal", "Dense", "Locked", "Crushing", "Vicious", "Tight", "Savage"],
    Difficulty.EXPERT: ["Merciless", "Extreme", "Critical", "Lethal", "Infernal", "Absolute"],
}
NOUNS = ["Circuit", "Conduit", "Nexus", "Corridor", "Channel", "Lattice", "Mesh", "Duct", "Passage", "Vein"]

# DFS node visits allowed per winding-path search
PATH_SEARCH_BUDGET = 4000


def _js_round(value: float) -> int:
    return int(math.floor(value + 0.5))


def _direction_between(a: Position, b: Position) -> Direction:
    dx, dy = b.x - a.x, b.y - a.y
    for d in CLOCKWISE:
        if d.delta == (dx, dy):
            return d
    raise ValueError(f"({a.x}, {a.y}) and ({b.x}, {b.y}) are not adjacent")


def find_shape(needed: Set[Direction]) -> frozenset:
    """Smallest pipe shape, in solved orientation, covering the needed stubs."""
    for shape in PIPE_SHAPES:
        if len(shape) < len(needed):
            continue
        for turns in range(4):
            rotated = rotate_connections(shape, turns)
            if needed <= rotated:
                return rotated
    return frozenset(PIPE_SHAPES[0])


class LevelGenerator:
    """Generates certified-solvable levels."""

    def __init__(self, solver: Optional[RotationSolver] = None, max_attempts: Optional[int] = None):
        settings = get_settings()
        self.solver = solver or RotationSolver(time_limit=settings.generator_solver_time_limit)
        self.max_attempts = max_attempts or settings.generator_max_attempts

    def generate(self, params: GenerationParams) -> GenerationResult:
        """
        Generate a level.

        Args:
            params: Generation parameters.

        Returns:
            GenerationResult holding the level, or `generation_failed` with the
            last rejection reason when every attempt was rejected.
        """
        start_time = time.time()
        rng = random.Random(params.seed)
        profile = DIFFICULTY_PROFILES[params.difficulty]

        direction = params.compression_direction
        if direction is None:
            direction = rng.choice(list(PLACEMENT_ZONES))
        zone = PLACEMENT_ZONES.get(direction, PLACEMENT_ZONES[CompressionDirection.ALL])

        wall_count = params.interior_walls
        if wall_count is None:
            wall_count = rng.randint(profile.walls_min, profile.walls_max)
        decoy_count = params.decoy_count if params.decoy_count is not None else profile.default_decoys
        turn_cap = profile.max_segment_turns * (params.node_count - 1)

        reason = "no attempts made"
        for attempt in range(1, self.max_attempts + 1):
            level, min_moves, reason = self._attempt(
                params, rng, profile, direction, zone, wall_count, decoy_count, turn_cap, attempt
            )
            if level is not None:
                elapsed_ms = int((time.time() - start_time) * 1000)
                logger.info(
                    "Generated %dx%d %s level in %d attempt(s): %d min moves, maxMoves %d",
                    params.grid_cols, params.grid_rows, params.difficulty.value,
                    attempt, min_moves, level.max_moves,
                )
                return GenerationResult(
                    level=level,
                    attempts=attempt,
                    min_moves=min_moves,
                    generation_time_ms=elapsed_ms,
                )
            logger.debug("Attempt %d rejected: %s", attempt, reason)

        logger.warning(
            "Generation failed for %dx%d %s after %d attempts: %s",
            params.grid_cols, params.grid_rows, params.difficulty.value, self.max_attempts, reason,
        )
        return GenerationResult(
            level=None,
            attempts=self.max_attempts,
            generation_time_ms=int((time.time() - start_time) * 1000),
            failure_reason=reason,
        )

    def _attempt(
        self,
        params: GenerationParams,
        rng: random.Random,
        profile: DifficultyProfile,
        direction: CompressionDirection,
        zone,
        wall_count: int,
        decoy_count: int,
        turn_cap: int,
        attempt: int,
    ) -> Tuple[Optional[Level], int, str]:
        cols, rows = params.grid_cols, params.grid_rows

        # 1. Border walls
        wall_tiles: List[Tile] = []
        occupied: Set[Position] = set()
        for y in range(rows):
            for x in range(cols):
                if x in (0, cols - 1) or y in (0, rows - 1):
                    wall_tiles.append(Tile(x, y, TileType.WALL, id=f"wall-{x}-{y}"))
                    occupied.add(Position(x, y))

        # 2. Goal placement
        goals = self._place_goals(cols, rows, params.node_count, zone, rng)
        if goals is None:
            return None, -1, "could not place goal nodes"
        goal_set = set(goals)
        occupied |= goal_set

        # 3. Winding paths between consecutive goals
        main_conns: ConnMap = {}
        for a, b in zip(goals, goals[1:]):
            blocked = set(occupied) - {b} - set(main_conns)
            max_len = a.manhattan(b) + 1 + profile.path_slack
            path = self._winding_path(a, b, cols, rows, blocked, max_len, rng)
            if path is None or len(path) < 2:
                return None, -1, "no winding path between goals"
            for p, q in zip(path, path[1:]):
                d = _direction_between(p, q)
                main_conns.setdefault(p, set()).add(d)
                main_conns.setdefault(q, set()).add(d.opposite)
                if q not in goal_set:
                    occupied.add(q)

        # 4. Interior wall clusters
        for tile in self._place_room_walls(cols, rows, occupied, wall_count, rng):
            wall_tiles.append(tile)
            occupied.add(tile.position)

        # 5. Dead-end decoy branches
        decoy_conns = self._add_decoys(cols, rows, main_conns, goal_set, occupied, decoy_count, rng)

        # 6. Goal nodes, then path tiles scrambled away from the solved layout
        node_tiles = [
            Tile(g.x, g.y, TileType.NODE, frozenset(CLOCKWISE), is_goal_node=True, id=f"node-{g.x}-{g.y}")
            for g in goals
        ]
        path_tiles, embedded = self._build_path_tiles(
            main_conns, decoy_conns, goal_set, params.locked_fraction, rng
        )
        grid = Grid.from_tiles(cols, rows, wall_tiles + node_tiles + path_tiles)

        # 7. The scramble must leave the goals disconnected, and undoing it must reconnect them
        if is_connected(grid, goals):
            return None, -1, "scramble left the goals connected"
        if not is_connected(grid.apply_moves(embedded), goals):
            return None, -1, "embedded solution does not reconnect the goals"
        embedded_turns = total_turns(embedded)
        if embedded_turns == 0:
            return None, -1, "nothing to rotate"

        # 8. Certification
        budget = 2 * (embedded_turns + profile.move_padding)
        result = self.solver.solve(grid, goals, budget)
        if result.status != SolveStatus.SOLVED:
            return None, -1, f"certification failed: {result.status.value}"
        min_moves = result.total_turns
        if min_moves > turn_cap:
            return None, min_moves, f"needs {min_moves} quarter-turns, {params.difficulty.value} allows {turn_cap}"

        level = Level(
            id=params.level_id if params.level_id is not None else int(time.time() * 1000) + attempt,
            name=params.name or self.generate_name(params.difficulty, rng),
            world=params.world,
            grid=grid,
            goal_nodes=tuple(goals),
            max_moves=min_moves + profile.move_padding,
            compression_delay=profile.compression_delay,
            compression_direction=direction,
            solution=tuple(result.moves),
            is_generated=True,
        )
        return level, min_moves, ""

    def _place_goals(
        self, cols: int, rows: int, count: int, zone, rng: random.Random
    ) -> Optional[List[Position]]:
        (zx0, zx1), (zy0, zy1) = zone
        min_x = max(1, _js_round(zx0 * (cols - 2)))
        max_x = min(cols - 2, _js_round(zx1 * (cols - 2)))
        min_y = max(1, _js_round(zy0 * (rows - 2)))
        max_y = min(rows - 2, _js_round(zy1 * (rows - 2)))

        # Keep solutions non-trivial, but never demand more than the interior allows
        min_dist = max(2, min(cols, rows) // 3)
        min_dist = min(min_dist, (cols - 3) + (rows - 3))

        zone_cells = [Position(x, y) for y in range(min_y, max_y + 1) for x in range(min_x, max_x + 1)]
        interior = [Position(x, y) for y in range(1, rows - 1) for x in range(1, cols - 1)]
        for candidates in (zone_cells, interior):
            candidates = list(candidates)
            rng.shuffle(candidates)
            placed: List[Position] = []
            for pos in candidates:
                if len(placed) >= count:
                    break
                if all(pos.manhattan(g) >= min_dist for g in placed):
                    placed.append(pos)
            if len(placed) >= count:
                return placed
        return None

    def _winding_path(
        self,
        start: Position,
        target: Position,
        cols: int,
        rows: int,
        blocked: Set[Position],
        max_len: int,
        rng: random.Random,
    ) -> Optional[List[Position]]:
        """Randomized backtracking path through the interior."""
        path = [start]
        visited = {start}
        budget = [PATH_SEARCH_BUDGET]

        def dfs(curr: Position) -> bool:
            if curr == target:
                return True
            budget[0] -= 1
            if budget[0] <= 0:
                return False
            directions = list(CLOCKWISE)
            rng.shuffle(directions)
            for d in directions:
                nxt = curr.step(d)
                if not (1 <= nxt.x < cols - 1 and 1 <= nxt.y < rows - 1):
                    continue
                if nxt in blocked or nxt in visited:
                    continue
                if len(path) + nxt.manhattan(target) > max_len:
                    continue
                # Avoid touching the path sideways except close to the target
                if nxt.manhattan(target) > 2:
                    touching = sum(
                        1 for d2 in CLOCKWISE
                        if nxt.step(d2) in visited and nxt.step(d2) != curr
                    )
                    if touching > 0:
                        continue
                visited.add(nxt)
                path.append(nxt)
                if dfs(nxt):
                    return True
                path.pop()
                visited.discard(nxt)
            return False

        return path if dfs(start) else None

    def _dead_end_branch(
        self,
        start: Position,
        cols: int,
        rows: int,
        blocked: Set[Position],
        max_len: int,
        rng: random.Random,
    ) -> List[Position]:
        branch: List[Position] = []
        curr = start
        visited = {start}
        for _ in range(max_len):
            directions = list(CLOCKWISE)
            rng.shuffle(directions)
            for d in directions:
                nxt = curr.step(d)
                if not (1 <= nxt.x < cols - 1 and 1 <= nxt.y < rows - 1):
                    continue
                if nxt in blocked or nxt in visited:
                    continue
                visited.add(nxt)
                branch.append(nxt)
                curr = nxt
                break
            else:
                break
        return branch

    def _add_decoys(
        self,
        cols: int,
        rows: int,
        main_conns: ConnMap,
        goal_set: Set[Position],
        occupied: Set[Position],
        decoy_count: int,
        rng: random.Random,
    ) -> ConnMap:
        """Grow dead-end branches off the main path until `decoy_count` tiles exist."""
        decoy_conns: ConnMap = {}
        roots = [p for p in main_conns if p not in goal_set]
        rng.shuffle(roots)
        remaining = decoy_count

        for root in roots:
            if remaining <= 0:
                break
            branch = self._dead_end_branch(root, cols, rows, set(occupied), min(remaining, rng.randint(1, 3)), rng)
            if not branch:
                continue
            chain = [root] + branch
            for p, q in zip(chain, chain[1:]):
                d = _direction_between(p, q)
                decoy_conns.setdefault(p, set()).add(d)
                decoy_conns.setdefault(q, set()).add(d.opposite)
                occupied.add(q)
            remaining -= len(branch)
        return decoy_conns

    def _place_room_walls(
        self,
        cols: int,
        rows: int,
        occupied: Set[Position],
        count: int,
        rng: random.Random,
    ) -> List[Tile]:
        """Small wall clusters (pairs, lines, L-shapes) in free interior cells."""
        added: List[Tile] = []
        for _ in range(count * 12):
            if len(added) >= count:
                break
            x, y = rng.randint(1, cols - 2), rng.randint(1, rows - 2)
            shape = rng.randint(0, 3)
            cells = [Position(x, y)]
            if shape == 0:
                cells.append(Position(x + 1, y))
            elif shape == 1:
                cells.append(Position(x, y + 1))
            elif shape == 2:
                cells += [Position(x + 1, y), Position(x + 2, y)]
            else:
                cells += [Position(x + 1, y), Position(x + 1, y + 1)]

            if not all(1 <= p.x < cols - 1 and 1 <= p.y < rows - 1 and p not in occupied for p in cells):
                continue
            for p in cells:
                occupied.add(p)
                added.append(Tile(p.x, p.y, TileType.WALL, id=f"iwall-{p.x}-{p.y}"))
        return added

    def _build_path_tiles(
        self,
        main_conns: ConnMap,
        decoy_conns: ConnMap,
        goal_set: Set[Position],
        locked_fraction: float,
        rng: random.Random,
    ) -> Tuple[List[Tile], List[Move]]:
        """Path tiles in scrambled orientation, plus the moves that undo the scramble."""
        tiles: List[Tile] = []
        solution: List[Move] = []

        main_cells = [p for p in main_conns if p not in goal_set]
        locked_count = _js_round(len(main_cells) * locked_fraction)
        shuffled = list(main_cells)
        rng.shuffle(shuffled)
        locked = set(shuffled[:locked_count])

        cells = list(main_conns) + [p for p in decoy_conns if p not in main_conns]
        for pos in cells:
            if pos in goal_set:
                continue
            needed = set(main_conns.get(pos, set())) | decoy_conns.get(pos, set())
            solved = find_shape(needed)
            is_decoy = pos not in main_conns

            if pos in locked:
                tiles.append(Tile(pos.x, pos.y, TileType.PATH, solved, id=f"path-{pos.x}-{pos.y}"))
                continue

            # Only turns that visibly change the tile count as a scramble
            options = [t for t in (1, 2, 3) if rotate_connections(solved, t) != solved]
            scramble = rng.choice(options) if options else 0
            tiles.append(Tile(
                pos.x, pos.y, TileType.PATH,
                rotate_connections(solved, scramble),
                can_rotate=True,
                is_decoy=is_decoy,
                id=f"path-{pos.x}-{pos.y}",
            ))
            unscramble = (4 - scramble) % 4
            if not is_decoy and unscramble:
                solution.append(Move(pos, unscramble))
        return tiles, solution

    @staticmethod
    def generate_name(difficulty: Difficulty, rng: Optional[random.Random] = None) -> str:
        rng = rng or random.Random()
        adjectives = ADJECTIVES.get(difficulty, ADJECTIVES[Difficulty.MEDIUM])
        return f"{rng.choice(adjectives)} {rng.choice(NOUNS)}"

    def generate_world(
        self,
        params: GenerationParams,
        level_count: int,
        start_id: int = 1,
        names: Optional[List[str]] = None,
    ) -> List[Level]:
        """Generate a batch of levels for one world; failed slots are skipped."""
        levels = []
        for i in range(level_count):
            seed = None if params.seed is None else params.seed + i
            result = self.generate(GenerationParams(
                grid_cols=params.grid_cols,
                grid_rows=params.grid_rows,
                node_count=params.node_count,
                difficulty=params.difficulty,
                decoy_count=params.decoy_count,
                compression_direction=params.compression_direction,
                interior_walls=params.interior_walls,
                locked_fraction=params.locked_fraction,
                seed=seed,
                level_id=start_id + i,
                name=names[i] if names and i < len(names) else None,
                world=params.world,
            ))
            if result.level is not None:
                levels.append(result.level)
        return levels


# Singleton instance
_generator = None


def get_generator() -> LevelGenerator:
    """Get or create generator singleton instance."""
    global _generator
    if _generator is None:
        _generator = LevelGenerator()
    return _generator
