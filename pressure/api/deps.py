"""API dependencies."""
from ..core.compression import get_compression_system, CompressionSystem
from ..core.generator import get_generator, LevelGenerator
from ..core.solver import get_solver, RotationSolver
from ..core.verifier import LevelVerifier

_verifier = None


def get_rotation_solver() -> RotationSolver:
    """Dependency for the rotation solver."""
    return get_solver()


def get_level_generator() -> LevelGenerator:
    """Dependency for level generator."""
    return get_generator()


def get_compression() -> CompressionSystem:
    """Dependency for the compression system."""
    return get_compression_system()


def get_level_verifier() -> LevelVerifier:
    """Dependency for level verifier."""
    global _verifier
    if _verifier is None:
        _verifier = LevelVerifier()
    return _verifier
