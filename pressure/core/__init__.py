"""Core game logic package.

This package contains connectivity analysis, the rotation solver, the level
generator, wall compression, mode hooks, verification and play sessions.
"""
from .connectivity import connected_component, is_connected, win_tiles
from .solver import RotationSolver, get_solver
from .generator import LevelGenerator, get_generator
from .compression import CompressionSystem, get_compression_system
from .modes import GameMode, ModeHooks, get_mode_hooks
from .verifier import LevelVerifier
from .session import GameSession, SessionStatus

__all__ = [
    "connected_component",
    "is_connected",
    "win_tiles",
    "RotationSolver",
    "get_solver",
    "LevelGenerator",
    "get_generator",
    "CompressionSystem",
    "get_compression_system",
    "GameMode",
    "ModeHooks",
    "get_mode_hooks",
    "LevelVerifier",
    "GameSession",
    "SessionStatus",
]
