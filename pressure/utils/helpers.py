"""Utility helper functions."""
from typing import Dict, Any, List, Optional, Tuple
import json

from ..models.grid import Direction, Grid, Position, Tile, TileType, sort_connections
from ..models.level import CompressionDirection, Level, Move

_TILE_TYPES = {t.value for t in TileType}
_DIRECTIONS = {d.value for d in Direction}
_COMPRESSION_DIRECTIONS = {d.value for d in CompressionDirection}


def validate_level_json(level_json: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate level JSON structure.

    Args:
        level_json: Level data to validate.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if not isinstance(level_json, dict):
        return False, "Level must be an object"

    for field in ("id", "tiles", "goalNodes", "maxMoves"):
        if field not in level_json:
            return False, f"Missing '{field}' field"

    cols = level_json.get("gridCols", level_json.get("gridSize"))
    rows = level_json.get("gridRows", level_json.get("gridSize"))
    if not isinstance(cols, int) or not isinstance(rows, int) or cols < 1 or rows < 1:
        return False, "'gridSize' (or 'gridCols'/'gridRows') must be a positive integer"

    if not isinstance(level_json["maxMoves"], int) or level_json["maxMoves"] < 0:
        return False, "'maxMoves' must be a non-negative integer"

    direction = level_json.get("compressionDirection")
    if direction is not None and direction not in _COMPRESSION_DIRECTIONS:
        return False, f"Unknown compressionDirection: '{direction}'"

    tiles = level_json["tiles"]
    if not isinstance(tiles, list):
        return False, "'tiles' must be an array"

    seen = set()
    for i, tile in enumerate(tiles):
        if not isinstance(tile, dict):
            return False, f"Tile {i} must be an object"
        x, y = tile.get("x"), tile.get("y")
        if not isinstance(x, int) or not isinstance(y, int):
            return False, f"Tile {i} needs integer 'x' and 'y'"
        if not (0 <= x < cols and 0 <= y < rows):
            return False, f"Tile at ({x}, {y}) is outside the {cols}x{rows} grid"
        if (x, y) in seen:
            return False, f"Duplicate tile at ({x}, {y})"
        seen.add((x, y))
        if tile.get("type") not in _TILE_TYPES:
            return False, f"Tile at ({x}, {y}) has unknown type '{tile.get('type')}'"
        connections = tile.get("connections", [])
        if not isinstance(connections, list) or any(c not in _DIRECTIONS for c in connections):
            return False, f"Tile at ({x}, {y}) has invalid connections"

    goals = level_json["goalNodes"]
    if not isinstance(goals, list) or not goals:
        return False, "'goalNodes' must be a non-empty array"
    for goal in goals:
        if not isinstance(goal, dict) or not isinstance(goal.get("x"), int) or not isinstance(goal.get("y"), int):
            return False, "Goal nodes need integer 'x' and 'y'"
        if not (0 <= goal["x"] < cols and 0 <= goal["y"] < rows):
            return False, f"Goal ({goal['x']}, {goal['y']}) is outside the grid"

    return True, None


def level_from_json(level_json: Dict[str, Any]) -> Level:
    """
    Build a Level from its persisted JSON form.

    Raises:
        ValueError: If the JSON is not a valid level.
    """
    is_valid, error = validate_level_json(level_json)
    if not is_valid:
        raise ValueError(f"Invalid level JSON: {error}")

    cols = level_json.get("gridCols", level_json.get("gridSize"))
    rows = level_json.get("gridRows", level_json.get("gridSize"))
    tiles = [
        Tile(
            x=t["x"],
            y=t["y"],
            type=TileType(t["type"]),
            connections=frozenset(Direction(c) for c in t.get("connections", [])),
            can_rotate=bool(t.get("canRotate", False)),
            is_goal_node=bool(t.get("isGoalNode", False)),
            is_decoy=bool(t.get("isDecoy", False)),
            id=t.get("id", ""),
        )
        for t in level_json["tiles"]
    ]

    solution = None
    if level_json.get("solution") is not None:
        solution = tuple(
            Move(Position(m["x"], m["y"]), int(m.get("rotations", 1)))
            for m in level_json["solution"]
        )

    direction = level_json.get("compressionDirection")
    return Level(
        id=level_json["id"],
        name=level_json.get("name", f"Level {level_json['id']}"),
        world=level_json.get("world", 1),
        grid=Grid.from_tiles(cols, rows, tiles),
        goal_nodes=tuple(Position(g["x"], g["y"]) for g in level_json["goalNodes"]),
        max_moves=level_json["maxMoves"],
        compression_delay=level_json.get("compressionDelay", 10000),
        compression_enabled=level_json.get("compressionEnabled"),
        compression_direction=CompressionDirection(direction) if direction else CompressionDirection.ALL,
        solution=solution,
        is_generated=bool(level_json.get("isGenerated", False)),
    )


def tile_to_json(tile: Tile) -> Dict[str, Any]:
    data = {
        "id": tile.id,
        "type": tile.type.value,
        "x": tile.x,
        "y": tile.y,
        "connections": [d.value for d in sort_connections(tile.connections)],
        "canRotate": tile.can_rotate,
        "isGoalNode": tile.is_goal_node,
    }
    if tile.is_decoy:
        data["isDecoy"] = True
    return data


def level_to_json(level: Level) -> Dict[str, Any]:
    """Convert a Level to its persisted JSON form. Empty tiles are omitted."""
    grid = level.grid
    data: Dict[str, Any] = {
        "id": level.id,
        "name": level.name,
        "world": level.world,
        "gridSize": grid.cols,
        "gridCols": grid.cols,
        "gridRows": grid.rows,
        "tiles": [tile_to_json(t) for t in grid if t.type is not TileType.EMPTY],
        "goalNodes": [g.to_dict() for g in level.goal_nodes],
        "maxMoves": level.max_moves,
        "compressionDelay": level.compression_delay,
        "compressionDirection": level.compression_direction.value,
    }
    if level.compression_enabled is not None:
        data["compressionEnabled"] = level.compression_enabled
    if level.solution is not None:
        data["solution"] = [m.to_dict() for m in level.solution]
    if level.is_generated:
        data["isGenerated"] = True
    return data


def load_levels(path: str) -> List[Level]:
    """Load levels from a JSON file holding a list or {"levels": [...]}."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("levels", [])
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of levels")
    return [level_from_json(item) for item in data]


def save_levels(path: str, levels: List[Level]) -> None:
    """Write levels to a JSON file as {"levels": [...]}."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump({"levels": [level_to_json(level) for level in levels]}, f, indent=2, ensure_ascii=False)
        f.write("\n")


# Box-drawing character per connection set
PIPE_CHARS = {
    frozenset([Direction.UP, Direction.DOWN]): "│",
    frozenset([Direction.LEFT, Direction.RIGHT]): "─",
    frozenset([Direction.UP, Direction.RIGHT]): "└",
    frozenset([Direction.UP, Direction.LEFT]): "┘",
    frozenset([Direction.DOWN, Direction.RIGHT]): "┌",
    frozenset([Direction.DOWN, Direction.LEFT]): "┐",
    frozenset(Direction): "┼",
    frozenset([Direction.UP, Direction.DOWN, Direction.LEFT]): "┤",
    frozenset([Direction.UP, Direction.DOWN, Direction.RIGHT]): "├",
    frozenset([Direction.UP, Direction.LEFT, Direction.RIGHT]): "┴",
    frozenset([Direction.DOWN, Direction.LEFT, Direction.RIGHT]): "┬",
    frozenset([Direction.UP]): "╵",
    frozenset([Direction.DOWN]): "╷",
    frozenset([Direction.LEFT]): "╴",
    frozenset([Direction.RIGHT]): "╶",
}


def pipe_char(connections) -> str:
    return PIPE_CHARS.get(frozenset(connections), "·")


def render_grid(grid: Grid, wall_offset: int = 0) -> str:
    """
    Format a grid for terminal display, three characters per tile.

    Walls are '███', crushed tiles 'xxx', goal nodes '[┼]'. Rows inside the
    current wall offset are marked with '!' on the right.
    """
    lines = ["┌" + "───" * grid.cols + "┐"]
    for y in range(grid.rows):
        cells = []
        for x in range(grid.cols):
            tile = grid.tile_at(Position(x, y))
            if tile.type is TileType.WALL:
                cells.append("███")
            elif tile.type is TileType.CRUSHED:
                cells.append("xxx")
            elif tile.is_goal_node:
                cells.append(f"[{pipe_char(tile.connections)}]")
            elif tile.type is TileType.NODE:
                cells.append(f"({pipe_char(tile.connections)})")
            elif tile.type is TileType.EMPTY:
                cells.append("   ")
            else:
                cells.append(f" {pipe_char(tile.connections)} ")
        marker = " !" if min(y, grid.rows - 1 - y) < wall_offset else ""
        lines.append("│" + "".join(cells) + "│" + marker)
    lines.append("└" + "───" * grid.cols + "┘")
    return "\n".join(lines)
