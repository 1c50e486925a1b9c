"""Compact level authoring format.

A compact level lists only goals, interior walls and pipe tiles; border walls
are generated with ``"autoWalls": "border"``. Tile connection codes:

    straight  ud lr
    corner    ur rd dl lu
    T-shape   urd rdu dlu lur rdl
    cross     x
"""
from typing import Any, Dict, List

from .grid import CLOCKWISE, Direction, Grid, Position, Tile, TileType
from .level import CompressionDirection, Level

_CODE_LETTERS = {"u": Direction.UP, "r": Direction.RIGHT, "d": Direction.DOWN, "l": Direction.LEFT}

CONNECTION_CODES: Dict[str, frozenset] = {
    code: frozenset(_CODE_LETTERS[c] for c in code)
    for code in ("ud", "lr", "ur", "rd", "dl", "lu", "urd", "rdu", "dlu", "lur", "rdl")
}
CONNECTION_CODES["x"] = frozenset(CLOCKWISE)


def parse_code(code: str) -> frozenset:
    try:
        return CONNECTION_CODES[code]
    except KeyError:
        raise ValueError(f"Unknown connection code: '{code}'") from None


def connections_to_code(connections) -> str:
    connections = frozenset(connections)
    for code, dirs in CONNECTION_CODES.items():
        if dirs == connections:
            return code
    return "".join(d.value[0] for d in CLOCKWISE if d in connections)


def border_positions(cols: int, rows: int) -> List[Position]:
    return [
        Position(x, y)
        for y in range(rows)
        for x in range(cols)
        if x in (0, cols - 1) or y in (0, rows - 1)
    ]


def hydrate_level(compact: Dict[str, Any]) -> Level:
    """
    Build a full Level from its compact form.

    Goal nodes take precedence over tiles listed at the same position. A tile
    entry without a connection code is a wall.

    Raises:
        ValueError: On unknown connection codes or malformed entries.
    """
    cols, rows = compact["grid"]
    goals = [Position(x, y) for x, y in compact["goals"]]
    goal_set = set(goals)
    tiles: Dict[Position, Tile] = {}

    if compact.get("autoWalls") == "border":
        for p in border_positions(cols, rows):
            tiles[p] = Tile(p.x, p.y, TileType.WALL, id=f"wall-{p.x}-{p.y}")

    for x, y in compact.get("interiorWalls", []):
        tiles[Position(x, y)] = Tile(x, y, TileType.WALL, id=f"wall-{x}-{y}")

    for g in goals:
        tiles[g] = Tile(g.x, g.y, TileType.NODE, frozenset(CLOCKWISE), is_goal_node=True, id=f"node-{g.x}-{g.y}")

    for entry in compact.get("tiles", []):
        x, y = entry["p"]
        pos = Position(x, y)
        if pos in goal_set:
            continue
        if entry.get("t") == "wall" or "c" not in entry:
            tiles[pos] = Tile(x, y, TileType.WALL, id=f"wall-{x}-{y}")
            continue
        tiles[pos] = Tile(
            x, y,
            TileType(entry.get("t", "path")),
            parse_code(entry["c"]),
            can_rotate=entry.get("r", True),
            id=f"path-{x}-{y}",
        )

    direction = compact.get("compressionDirection")
    return Level(
        id=compact["id"],
        name=compact["name"],
        world=compact.get("world", 1),
        grid=Grid.from_tiles(cols, rows, tiles.values()),
        goal_nodes=tuple(goals),
        max_moves=compact["maxMoves"],
        compression_delay=compact.get("compressionDelay", 10000),
        compression_enabled=compact.get("compressionEnabled"),
        compression_direction=CompressionDirection(direction) if direction else CompressionDirection.ALL,
        is_generated=compact.get("isGenerated", False),
    )


def dehydrate_level(level: Level, auto_walls: bool = True) -> Dict[str, Any]:
    """Convert a Level back to compact form."""
    grid = level.grid
    goal_set = set(level.goal_nodes)
    border = set(border_positions(grid.cols, grid.rows)) if auto_walls else set()

    interior_walls = []
    tiles = []
    for tile in grid:
        pos = tile.position
        if pos in goal_set or tile.type is TileType.EMPTY:
            continue
        if tile.type is TileType.WALL:
            if pos not in border:
                interior_walls.append([tile.x, tile.y])
            continue
        entry: Dict[str, Any] = {"p": [tile.x, tile.y]}
        if tile.connections:
            entry["c"] = connections_to_code(tile.connections)
        if not tile.can_rotate:
            entry["r"] = False
        if tile.type is not TileType.PATH:
            entry["t"] = tile.type.value
        tiles.append(entry)

    compact: Dict[str, Any] = {
        "id": level.id,
        "name": level.name,
        "world": level.world,
        "grid": [grid.cols, grid.rows],
        "maxMoves": level.max_moves,
        "compressionDelay": level.compression_delay,
        "compressionDirection": level.compression_direction.value,
        "goals": [[g.x, g.y] for g in level.goal_nodes],
        "tiles": tiles,
    }
    if level.compression_enabled is not None:
        compact["compressionEnabled"] = level.compression_enabled
    if auto_walls:
        compact["autoWalls"] = "border"
    if interior_walls:
        compact["interiorWalls"] = interior_walls
    if level.is_generated:
        compact["isGenerated"] = True
    return compact
