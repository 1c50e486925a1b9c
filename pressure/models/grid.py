"""Grid and tile data models."""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple


class Direction(str, Enum):
    """Pipe stub direction, listed in clockwise order."""
    UP = "up"
    RIGHT = "right"
    DOWN = "down"
    LEFT = "left"

    @property
    def opposite(self) -> "Direction":
        return _OPPOSITE[self]

    @property
    def delta(self) -> Tuple[int, int]:
        """(dx, dy) step; y grows downward."""
        return _DELTAS[self]

    def rotated(self, turns: int) -> "Direction":
        """Rotate clockwise by the given number of quarter-turns."""
        return CLOCKWISE[(CLOCKWISE.index(self) + turns) % 4]


CLOCKWISE: Tuple[Direction, ...] = (
    Direction.UP,
    Direction.RIGHT,
    Direction.DOWN,
    Direction.LEFT,
)

_OPPOSITE = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}

_DELTAS = {
    Direction.UP: (0, -1),
    Direction.RIGHT: (1, 0),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
}


class TileType(str, Enum):
    """Tile type enumeration."""
    EMPTY = "empty"
    PATH = "path"
    NODE = "node"
    WALL = "wall"
    CRUSHED = "crushed"

    @property
    def blocks_flow(self) -> bool:
        """Walls and crushed tiles never take part in connectivity."""
        return self in (TileType.WALL, TileType.CRUSHED)


@dataclass(frozen=True, order=True)
class Position:
    """Grid coordinate, 0-indexed from the top-left corner."""
    x: int
    y: int

    def step(self, direction: Direction) -> "Position":
        dx, dy = direction.delta
        return Position(self.x + dx, self.y + dy)

    def manhattan(self, other: "Position") -> int:
        return abs(self.x - other.x) + abs(self.y - other.y)

    def to_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y}


def rotate_connections(connections: Iterable[Direction], turns: int) -> FrozenSet[Direction]:
    """Rotate a connection set clockwise by `turns` quarter-turns."""
    return frozenset(d.rotated(turns) for d in connections)


def sort_connections(connections: Iterable[Direction]) -> List[Direction]:
    """Connections in clockwise order starting from up."""
    return sorted(connections, key=CLOCKWISE.index)


@dataclass(frozen=True)
class Tile:
    """A single grid cell."""
    x: int
    y: int
    type: TileType = TileType.EMPTY
    connections: FrozenSet[Direction] = field(default_factory=frozenset)
    can_rotate: bool = False
    is_goal_node: bool = False
    is_decoy: bool = False
    id: str = ""

    def __post_init__(self):
        # Accept any iterable of directions or direction strings
        conns = self.connections
        if not isinstance(conns, frozenset) or any(not isinstance(d, Direction) for d in conns):
            object.__setattr__(self, "connections", frozenset(Direction(d) for d in conns))
        if not isinstance(self.type, TileType):
            object.__setattr__(self, "type", TileType(self.type))
        if not self.id:
            object.__setattr__(self, "id", f"{self.type.value}-{self.x}-{self.y}")

    @property
    def position(self) -> Position:
        return Position(self.x, self.y)

    def rotated(self, turns: int) -> "Tile":
        """Return a copy with connections rotated clockwise."""
        if turns % 4 == 0:
            return self
        return replace(self, connections=rotate_connections(self.connections, turns))

    def turns_to(self, connections: FrozenSet[Direction]) -> Optional[int]:
        """Fewest clockwise quarter-turns reaching `connections`, or None."""
        for turns in range(4):
            if rotate_connections(self.connections, turns) == connections:
                return turns
        return None


@dataclass(frozen=True)
class Grid:
    """Rectangular grid of tiles. Exactly one tile per in-bounds position."""
    cols: int
    rows: int
    tiles: Tuple[Tile, ...]

    def __post_init__(self):
        if self.cols < 1 or self.rows < 1:
            raise ValueError(f"Grid must be at least 1x1, got {self.cols}x{self.rows}")
        tiles = tuple(self.tiles)
        object.__setattr__(self, "tiles", tiles)

        index: Dict[Position, int] = {}
        for i, tile in enumerate(tiles):
            pos = tile.position
            if not self.in_bounds(pos):
                raise ValueError(f"Tile at ({pos.x}, {pos.y}) is outside the {self.cols}x{self.rows} grid")
            if pos in index:
                raise ValueError(f"Duplicate tile at ({pos.x}, {pos.y})")
            index[pos] = i
        if len(index) != self.cols * self.rows:
            raise ValueError(
                f"Grid {self.cols}x{self.rows} needs {self.cols * self.rows} tiles, got {len(index)}"
            )
        object.__setattr__(self, "_index", index)

    @classmethod
    def from_tiles(cls, cols: int, rows: int, tiles: Iterable[Tile]) -> "Grid":
        """Build a grid, filling positions without a tile with empty tiles."""
        by_pos = {}
        for tile in tiles:
            if tile.position in by_pos:
                raise ValueError(f"Duplicate tile at ({tile.x}, {tile.y})")
            by_pos[tile.position] = tile
        filled = []
        for y in range(rows):
            for x in range(cols):
                filled.append(by_pos.pop(Position(x, y), None) or Tile(x, y))
        if by_pos:
            stray = next(iter(by_pos))
            raise ValueError(f"Tile at ({stray.x}, {stray.y}) is outside the {cols}x{rows} grid")
        return cls(cols, rows, tuple(filled))

    def __iter__(self) -> Iterator[Tile]:
        return iter(self.tiles)

    @property
    def max_offset(self) -> int:
        """Largest wall offset the compression boundary can reach."""
        return min(self.cols, self.rows) // 2

    def in_bounds(self, pos: Position) -> bool:
        return 0 <= pos.x < self.cols and 0 <= pos.y < self.rows

    def tile_at(self, pos: Position) -> Optional[Tile]:
        i = self._index.get(pos)
        return self.tiles[i] if i is not None else None

    def replace_tiles(self, updates: Iterable[Tile]) -> "Grid":
        """Return a new grid with the given tiles swapped in by position."""
        tiles = list(self.tiles)
        for tile in updates:
            i = self._index.get(tile.position)
            if i is None:
                raise ValueError(f"No tile at ({tile.x}, {tile.y}) to replace")
            tiles[i] = tile
        return Grid(self.cols, self.rows, tuple(tiles))

    def rotate(self, pos: Position, turns: int = 1) -> "Grid":
        """Rotate one tile. Raises ValueError if it cannot rotate."""
        tile = self.tile_at(pos)
        if tile is None:
            raise ValueError(f"No tile at ({pos.x}, {pos.y})")
        if not tile.can_rotate:
            raise ValueError(f"Tile at ({pos.x}, {pos.y}) cannot rotate")
        return self.replace_tiles([tile.rotated(turns)])

    def apply_moves(self, moves: Iterable) -> "Grid":
        """Apply (position, turns) moves in order."""
        grid = self
        for move in moves:
            grid = grid.rotate(move.position, move.turns)
        return grid

    def rotatable_positions(self) -> List[Position]:
        return [t.position for t in self.tiles if t.can_rotate]

    def rotation_key(self) -> Tuple[Tuple[int, int, Tuple[str, ...]], ...]:
        """Search key: rotatable tiles' connection sets only, sorted by position."""
        return tuple(
            (t.y, t.x, tuple(d.value for d in sort_connections(t.connections)))
            for t in self.tiles
            if t.can_rotate
        )

    def goal_positions(self) -> List[Position]:
        return [t.position for t in self.tiles if t.is_goal_node]
