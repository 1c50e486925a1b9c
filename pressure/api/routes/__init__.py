"""API routes package.

This package contains all API route handlers for the application.
"""
from . import solve
from . import generate
from . import compression

__all__ = [
    "solve",
    "generate",
    "compression",
]
