"""Data models package.

This package contains grid and level models, result structures, the compact
level format and API schemas.
"""
from .grid import (
    Direction,
    TileType,
    Position,
    Tile,
    Grid,
)
from .level import (
    CompressionDirection,
    Difficulty,
    Move,
    Level,
    SolveStatus,
    SolveResult,
    VerifyStatus,
    LevelVerification,
    GenerationParams,
    GenerationResult,
    CompressionResult,
    FixType,
    LevelFix,
)
from .compact import hydrate_level, dehydrate_level

__all__ = [
    # Grid models
    "Direction",
    "TileType",
    "Position",
    "Tile",
    "Grid",
    # Level models
    "CompressionDirection",
    "Difficulty",
    "Move",
    "Level",
    "SolveStatus",
    "SolveResult",
    "VerifyStatus",
    "LevelVerification",
    "GenerationParams",
    "GenerationResult",
    "CompressionResult",
    "FixType",
    "LevelFix",
    # Compact format
    "hydrate_level",
    "dehydrate_level",
]
