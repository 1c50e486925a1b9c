"""Pipe connectivity analysis."""
from collections import deque
from typing import Iterable, List, Optional, Sequence, Set

from ..models.grid import Direction, Grid, Position, Tile


def linked_neighbor(grid: Grid, tile: Tile, direction: Direction) -> Optional[Position]:
    """Position linked to `tile` through `direction`, or None.

    A stub is a live link only when the neighbor exists, does not block flow,
    and has a stub pointing back.
    """
    if direction not in tile.connections:
        return None
    pos = tile.position.step(direction)
    neighbor = grid.tile_at(pos)
    if neighbor is None or neighbor.type.blocks_flow:
        return None
    if direction.opposite not in neighbor.connections:
        return None
    return pos


def connected_component(grid: Grid, start: Position) -> Set[Position]:
    """All positions reachable from `start` through mutual pipe links."""
    start_tile = grid.tile_at(start)
    if start_tile is None:
        return set()
    if start_tile.type.blocks_flow:
        return {start}

    visited = {start}
    queue = deque([start_tile])
    while queue:
        tile = queue.popleft()
        for direction in tile.connections:
            pos = linked_neighbor(grid, tile, direction)
            if pos is None or pos in visited:
                continue
            visited.add(pos)
            queue.append(grid.tile_at(pos))
    return visited


def is_connected(grid: Grid, goals: Sequence[Position]) -> bool:
    """
    Check whether all goals sit in one pipe-connected component.

    Args:
        grid: Grid snapshot to inspect.
        goals: Goal positions; the search starts from the first one.

    Returns:
        True if every goal is reachable from goals[0]. Fewer than two goals
        are trivially connected.
    """
    if len(goals) < 2:
        return True
    reached = connected_component(grid, goals[0])
    return all(goal in reached for goal in goals)


def win_tiles(grid: Grid, goals: Iterable[Position]) -> Set[Position]:
    """Union of the components containing each goal (win highlight)."""
    tiles: Set[Position] = set()
    for goal in goals:
        if goal not in tiles:
            tiles |= connected_component(grid, goal)
    return tiles


def dangling_stubs(grid: Grid) -> List[Position]:
    """Positions of non-blocking tiles with at least one stub that links nowhere."""
    result = []
    for tile in grid:
        if tile.type.blocks_flow or not tile.connections:
            continue
        if any(linked_neighbor(grid, tile, d) is None for d in tile.connections):
            result.append(tile.position)
    return result
