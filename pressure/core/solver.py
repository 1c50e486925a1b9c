"""Rotation-state solver.

Breadth-first search over the orientations of a grid's rotatable tiles,
layered by total clockwise quarter-turns, the same unit the move budget is
counted in. The first connecting state popped is therefore minimal in
quarter-turns.

Each search step settles one rotatable tile for good, turning it 1-3
quarter-turns into an orientation that links back to the first goal's
component. Only tiles a component stub points at are settled, plus the first
goal itself when it rotates. A minimal solution only rotates tiles that end
up linked to the first goal, and settling them nearest-first always meets
these conditions, so no minimal solution is lost.
"""
import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Set, Tuple

from ..config import get_settings
from ..models.grid import CLOCKWISE, Direction, Grid, Position
from ..models.level import Level, Move, SolveResult, SolveStatus
from .connectivity import is_connected

logger = logging.getLogger(__name__)

# Direction -> bit. Bits follow clockwise order so a rotation is a 4-bit roll.
DIRECTION_BITS: Dict[Direction, int] = {d: 1 << i for i, d in enumerate(CLOCKWISE)}

# Search state: (orientation offset per rotatable tile, bitmask of settled tiles)
State = Tuple[Tuple[int, ...], int]


def rotate_mask(mask: int, turns: int = 1) -> int:
    """Rotate a 4-bit connection mask clockwise."""
    turns %= 4
    return ((mask << turns) | (mask >> (4 - turns))) & 0xF


def connections_to_mask(connections) -> int:
    mask = 0
    for d in connections:
        mask |= DIRECTION_BITS[d]
    return mask


@dataclass
class _SearchSpace:
    """Flattened view of a grid used by the search loop."""
    cols: int
    static_masks: List[int]               # per cell; 0 for blocking tiles
    blocked: List[bool]                   # per cell
    neighbors: List[Tuple[int, ...]]      # per cell, per direction bit index; -1 off-grid
    rot_cells: List[int]                  # rotatable index -> cell index
    rot_index: List[int]                  # cell index -> rotatable index or -1
    orientations: List[Tuple[int, ...]]   # rotatable index -> mask after 0..3 turns
    choices: List[Tuple[int, ...]]        # rotatable index -> turn counts giving a new mask


class RotationSolver:
    """Finds minimal quarter-turn rotation sequences that connect all goals."""

    def __init__(
        self,
        time_limit: Optional[float] = None,
        check_interval: Optional[int] = None,
        max_states: Optional[int] = None,
    ):
        settings = get_settings()
        self.time_limit = time_limit if time_limit is not None else settings.solver_time_limit
        self.check_interval = check_interval or settings.solver_check_interval
        self.max_states = max_states or settings.solver_max_states

    def solve(
        self,
        grid: Grid,
        goals: Sequence[Position],
        move_budget: int,
        time_limit: Optional[float] = None,
    ) -> SolveResult:
        """
        Search for the cheapest rotation sequence connecting all goals.

        Args:
            grid: Starting grid. Never modified.
            goals: Goal positions that must end up in one component.
            move_budget: Largest total number of quarter-turns to consider.
            time_limit: Wall-clock budget in seconds; defaults to the solver's.

        Returns:
            SolveResult with status SOLVED and the moves, ALREADY_SOLVED when
            the goals start connected, NO_SOLUTION when the budget-bounded
            space is exhausted, or TIMED_OUT when time or state limits cut the
            search short.
        """
        started = time.monotonic()
        limit = self.time_limit if time_limit is None else time_limit
        goals = list(goals)

        if is_connected(grid, goals):
            return SolveResult(status=SolveStatus.ALREADY_SOLVED)

        space = self._build_space(grid)
        if not space.rot_cells:
            logger.debug("No rotatable tiles; goals cannot be connected")
            return SolveResult(status=SolveStatus.NO_SOLUTION)

        goal_cells = [g.y * grid.cols + g.x for g in goals]
        root = goal_cells[0]
        root_j = space.rot_index[root]

        # No state costs more than every tile at its largest turn count
        budget = min(move_budget, sum(max(options) for options in space.choices))

        start: State = (tuple(0 for _ in space.rot_cells), 0)
        best: Dict[State, int] = {start: 0}
        layers: Dict[int, List[State]] = {0: [start]}
        expansions = 0

        for cost in range(budget + 1):
            for key in layers.pop(cost, []):
                if best[key] < cost:
                    continue
                expansions += 1

                if expansions % self.check_interval == 0:
                    if time.monotonic() - started > limit:
                        logger.warning(
                            "Solver timed out after %d expansions (%d states, cost %d)",
                            expansions, len(best), cost,
                        )
                        return self._result(SolveStatus.TIMED_OUT, expansions, best, started)
                    if len(best) > self.max_states:
                        logger.warning("Solver state limit reached (%d states)", len(best))
                        return self._result(SolveStatus.TIMED_OUT, expansions, best, started)

                state, settled = key
                component, pointed = self._component(space, state, root)
                if all(cell in component for cell in goal_cells):
                    moves = self._moves_for(space, state, root)
                    logger.debug("Solved with %d quarter-turns after %d expansions", cost, expansions)
                    return self._result(SolveStatus.SOLVED, expansions, best, started, moves)

                if root_j >= 0 and not settled & (1 << root_j):
                    pointed[root_j] = 0xF

                for j, back in pointed.items():
                    if settled & (1 << j):
                        continue
                    for turns in space.choices[j]:
                        child_cost = cost + turns
                        if child_cost > budget:
                            break
                        if not space.orientations[j][turns] & back:
                            continue
                        child = (state[:j] + (turns,) + state[j + 1:], settled | (1 << j))
                        if best.get(child, child_cost + 1) <= child_cost:
                            continue
                        best[child] = child_cost
                        layers.setdefault(child_cost, []).append(child)

        logger.debug("Search space exhausted after %d expansions", expansions)
        return self._result(SolveStatus.NO_SOLUTION, expansions, best, started)

    def solve_level(
        self,
        level: Level,
        budget_factor: int = 2,
        time_limit: Optional[float] = None,
    ) -> SolveResult:
        """Solve a level with `budget_factor` times its move budget as headroom."""
        budget = max(1, level.max_moves * budget_factor)
        return self.solve(level.grid, level.goal_nodes, budget, time_limit)

    def hint(self, grid: Grid, goals: Sequence[Position], move_budget: int) -> Optional[Move]:
        """First move of a minimal solution, or None."""
        result = self.solve(grid, goals, move_budget)
        if result.solved and result.moves:
            return result.moves[0]
        return None

    def _build_space(self, grid: Grid) -> _SearchSpace:
        cols, rows = grid.cols, grid.rows
        size = cols * rows
        static_masks = [0] * size
        blocked = [False] * size
        rot_index = [-1] * size
        rot_cells: List[int] = []
        orientations: List[Tuple[int, ...]] = []
        choices: List[Tuple[int, ...]] = []

        for tile in grid:
            cell = tile.y * cols + tile.x
            if tile.type.blocks_flow:
                blocked[cell] = True
                continue
            mask = connections_to_mask(tile.connections)
            static_masks[cell] = mask
            if not tile.can_rotate:
                continue
            masks = tuple(rotate_mask(mask, k) for k in range(4))
            # Fewest turns per distinct mask; symmetric tiles have fewer choices
            options = tuple(k for k in range(1, 4) if masks.index(masks[k]) == k)
            if not options:
                continue
            rot_index[cell] = len(rot_cells)
            rot_cells.append(cell)
            orientations.append(masks)
            choices.append(options)

        neighbors = []
        for cell in range(size):
            x, y = cell % cols, cell // cols
            row = []
            for d in CLOCKWISE:
                dx, dy = d.delta
                nx, ny = x + dx, y + dy
                row.append(ny * cols + nx if 0 <= nx < cols and 0 <= ny < rows else -1)
            neighbors.append(tuple(row))

        return _SearchSpace(
            cols=cols,
            static_masks=static_masks,
            blocked=blocked,
            neighbors=neighbors,
            rot_cells=rot_cells,
            rot_index=rot_index,
            orientations=orientations,
            choices=choices,
        )

    @staticmethod
    def _mask(space: _SearchSpace, state: Tuple[int, ...], cell: int) -> int:
        j = space.rot_index[cell]
        if j < 0:
            return space.static_masks[cell]
        return space.orientations[j][state[j]]

    def _component(
        self, space: _SearchSpace, state: Tuple[int, ...], start: int
    ) -> Tuple[Set[int], Dict[int, int]]:
        """
        Cells linked to `start`, and the rotatable tiles a component stub
        points at, each with the direction bits leading back into the component.
        """
        component = {start}
        pointed: Dict[int, int] = {}
        if space.blocked[start]:
            return component, pointed

        stack = [start]
        while stack:
            cell = stack.pop()
            mask = self._mask(space, state, cell)
            for bit in range(4):
                if not mask & (1 << bit):
                    continue
                neighbor = space.neighbors[cell][bit]
                if neighbor < 0 or space.blocked[neighbor]:
                    continue
                back = 1 << ((bit + 2) % 4)
                j = space.rot_index[neighbor]
                if j >= 0:
                    pointed[j] = pointed.get(j, 0) | back
                if neighbor in component:
                    continue
                if self._mask(space, state, neighbor) & back:
                    component.add(neighbor)
                    stack.append(neighbor)
        return component, pointed

    def _moves_for(self, space: _SearchSpace, state: Tuple[int, ...], start: int) -> List[Move]:
        """Moves reaching `state`, ordered nearest-to-first-goal first."""
        order: Dict[int, int] = {start: 0}
        queue = deque([start])
        while queue:
            cell = queue.popleft()
            mask = self._mask(space, state, cell)
            for bit in range(4):
                if not mask & (1 << bit):
                    continue
                neighbor = space.neighbors[cell][bit]
                if neighbor < 0 or neighbor in order or space.blocked[neighbor]:
                    continue
                if self._mask(space, state, neighbor) & (1 << ((bit + 2) % 4)):
                    order[neighbor] = len(order)
                    queue.append(neighbor)

        rotated = [j for j, turns in enumerate(state) if turns]
        rotated.sort(key=lambda j: order.get(space.rot_cells[j], len(order) + j))
        return [
            Move(
                position=Position(space.rot_cells[j] % space.cols, space.rot_cells[j] // space.cols),
                turns=state[j],
            )
            for j in rotated
        ]

    @staticmethod
    def _result(
        status: SolveStatus,
        expansions: int,
        seen: Dict[State, int],
        started: float,
        moves: Optional[List[Move]] = None,
    ) -> SolveResult:
        return SolveResult(
            status=status,
            moves=moves or [],
            expansions=expansions,
            states_seen=len(seen),
            elapsed_ms=int((time.monotonic() - started) * 1000),
        )


def solve(
    grid: Grid,
    goals: Sequence[Position],
    move_budget: int,
    time_limit: Optional[float] = None,
) -> SolveResult:
    """Module-level convenience wrapper around RotationSolver.solve."""
    return get_solver().solve(grid, goals, move_budget, time_limit)


# Singleton instance
_solver = None


def get_solver() -> RotationSolver:
    """Get or create solver singleton instance."""
    global _solver
    if _solver is None:
        _solver = RotationSolver()
    return _solver
