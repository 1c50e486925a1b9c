"""Classic mode levels: the hand-crafted 5x5 pipe puzzles."""
from typing import Dict, List

from .compact import hydrate_level
from .level import Level

CLASSIC_COMPACT = [
    # World 1: Breathe
    {
        "id": 1, "name": "First", "world": 1, "grid": [5, 5],
        "maxMoves": 3, "compressionDelay": 10000,
        "goals": [[1, 2], [3, 2]], "autoWalls": "border",
        "tiles": [{"p": [2, 2], "c": "ud"}],
    },
    {
        "id": 2, "name": "Rise", "world": 1, "grid": [5, 5],
        "maxMoves": 3, "compressionDelay": 8000,
        "goals": [[2, 1], [2, 3]], "autoWalls": "border",
        "tiles": [{"p": [2, 2], "c": "lr"}],
    },
    {
        "id": 3, "name": "Corner", "world": 1, "grid": [5, 5],
        "maxMoves": 4, "compressionDelay": 8000,
        "goals": [[1, 1], [2, 2]], "autoWalls": "border",
        "tiles": [{"p": [1, 2], "c": "lu"}],
    },
    {
        "id": 4, "name": "Double", "world": 1, "grid": [5, 5],
        "maxMoves": 5, "compressionDelay": 7000,
        "goals": [[1, 2], [3, 3]], "autoWalls": "border",
        "tiles": [{"p": [2, 2], "c": "ud"}, {"p": [3, 2], "c": "ur"}],
    },
    # World 2: Squeeze
    {
        "id": 5, "name": "Square", "world": 2, "grid": [5, 5],
        "maxMoves": 8, "compressionDelay": 6000,
        "goals": [[1, 1], [3, 1], [1, 3], [3, 3]], "autoWalls": "border",
        "tiles": [
            {"p": [2, 1], "c": "ud"},
            {"p": [2, 3], "c": "ud"},
            {"p": [1, 2], "c": "lr"},
            {"p": [3, 2], "c": "lr"},
        ],
    },
    {
        "id": 6, "name": "Zigzag", "world": 2, "grid": [5, 5],
        "maxMoves": 10, "compressionDelay": 6000,
        "goals": [[1, 1], [1, 3]], "autoWalls": "border",
        "tiles": [
            {"p": [2, 1], "c": "ud"},
            {"p": [3, 1], "c": "lu"},
            {"p": [3, 2], "c": "lr"},
            {"p": [3, 3], "c": "rd"},
            {"p": [2, 3], "c": "ud"},
        ],
    },
    {
        "id": 7, "name": "Triple", "world": 2, "grid": [5, 5],
        "maxMoves": 3, "compressionDelay": 5000,
        "goals": [[1, 2], [3, 2]], "autoWalls": "border",
        "tiles": [{"p": [2, 2], "c": "ud"}, {"p": [2, 3], "c": "lr"}],
    },
    # World 3: Crush
    {
        "id": 8, "name": "Cross", "world": 3, "grid": [5, 5],
        "maxMoves": 6, "compressionDelay": 5000,
        "goals": [[1, 1], [3, 1], [1, 3], [3, 3]], "autoWalls": "border",
        "tiles": [
            {"p": [2, 2], "c": "x", "r": False},
            {"p": [2, 1], "c": "ud"},
            {"p": [2, 3], "c": "ud"},
            {"p": [1, 2], "c": "lr"},
            {"p": [3, 2], "c": "lr"},
        ],
    },
    {
        "id": 9, "name": "Spiral", "world": 3, "grid": [5, 5],
        "maxMoves": 10, "compressionDelay": 4000,
        "goals": [[1, 1], [1, 3]], "autoWalls": "border",
        "tiles": [
            {"p": [2, 1], "c": "ud"},
            {"p": [3, 1], "c": "lu"},
            {"p": [3, 2], "c": "lr"},
            {"p": [3, 3], "c": "ur"},
            {"p": [2, 3], "c": "ud"},
        ],
    },
    {
        "id": 10, "name": "Final", "world": 3, "grid": [5, 5],
        "maxMoves": 8, "compressionDelay": 4000,
        "goals": [[1, 1], [3, 1], [2, 2], [1, 3], [3, 3]], "autoWalls": "border",
        "tiles": [
            {"p": [2, 1], "c": "dlu"},
            {"p": [1, 2], "c": "lur"},
            {"p": [3, 2], "c": "rdl"},
            {"p": [2, 3], "c": "urd"},
        ],
    },
]

CLASSIC_LEVELS: List[Level] = [hydrate_level(c) for c in CLASSIC_COMPACT]

# Level sets available to the batch solver, by mode id
LEVEL_SETS: Dict[str, List[Level]] = {
    "classic": CLASSIC_LEVELS,
}


def get_levels_by_world(world: int) -> List[Level]:
    return [level for level in CLASSIC_LEVELS if level.world == world]
