"""Pydantic schemas for API request/response validation."""
from pydantic import BaseModel, Field
from typing import Dict, List, Any, Optional


class ConnectivityRequest(BaseModel):
    """Request schema for a connectivity check."""
    level_json: Dict[str, Any] = Field(..., description="Level JSON to check")


class ConnectivityResponse(BaseModel):
    """Response schema for a connectivity check."""
    connected: bool = Field(..., description="Whether all goal nodes share one component")
    win_tiles: List[Dict[str, int]] = Field(default=[], description="Tiles linked to any goal")
    dangling_stubs: int = Field(default=0, description="Stubs on flowing tiles with no partner")


class SolveRequest(BaseModel):
    """Request schema for solving a level."""
    level_json: Dict[str, Any] = Field(..., description="Level JSON to solve")
    move_budget: Optional[int] = Field(default=None, ge=1, description="Quarter-turn budget (default: 2 x maxMoves)")
    time_limit: Optional[float] = Field(default=None, gt=0, le=60, description="Search time limit in seconds")


class SolveResponse(BaseModel):
    """Response schema for a solver run."""
    status: str = Field(..., description="solved/already_solved/no_solution/timed_out")
    moves: List[Dict[str, int]] = Field(default=[], description="Moves as {x, y, rotations}")
    total_turns: int = Field(default=0, description="Total quarter-turns in the solution")
    expansions: int = Field(default=0, description="States expanded")
    states_seen: int = Field(default=0, description="Distinct states visited")
    elapsed_ms: int = Field(default=0, description="Search time in milliseconds")


class VerifyRequest(BaseModel):
    """Request schema for level verification."""
    level_json: Dict[str, Any] = Field(..., description="Level JSON to verify")
    mode: str = Field(default="classic", description="Game mode (classic/zen/blitz)")
    fix: bool = Field(default=False, description="Attempt an automatic fix when verification fails")
    seed: Optional[int] = Field(default=None, description="Random seed for fixes")


class VerifyResponse(BaseModel):
    """Response schema for level verification."""
    level_id: int
    level_name: str
    status: str = Field(..., description="won/lost/already_solved/no_solution/timed_out/impossible")
    max_moves: int
    min_moves: int = Field(default=-1, description="Minimal quarter-turns, -1 if unknown")
    moves: int = Field(default=0, description="Moves made during the play-through")
    wall_offset: int = Field(default=0, description="Wall offset at the end of the play-through")
    solution: List[Dict[str, int]] = Field(default=[])
    log: List[str] = Field(default=[])
    fix_suggestion: Optional[str] = None
    fix: Optional[Dict[str, Any]] = Field(default=None, description="Applied fix, when requested")


class GenerateRequest(BaseModel):
    """Request schema for level generation."""
    grid_cols: int = Field(default=7, ge=4, le=12, description="Grid columns")
    grid_rows: int = Field(default=7, ge=4, le=12, description="Grid rows")
    node_count: int = Field(default=2, ge=2, le=6, description="Number of goal nodes")
    difficulty: str = Field(default="medium", description="easy/medium/hard/expert")
    decoy_count: Optional[int] = Field(default=None, ge=0, description="Decoy path tiles")
    compression_direction: Optional[str] = Field(default=None, description="Compression direction policy")
    interior_walls: Optional[int] = Field(default=None, ge=0, description="Interior wall clusters")
    locked_fraction: float = Field(default=0.0, ge=0.0, le=1.0, description="Fraction of path tiles locked")
    seed: Optional[int] = Field(default=None, description="Random seed")
    level_id: Optional[int] = Field(default=None, description="Level id to assign")
    name: Optional[str] = Field(default=None, description="Level name to assign")


class GenerateResponse(BaseModel):
    """Response schema for level generation."""
    level_json: Optional[Dict[str, Any]] = Field(default=None, description="Generated level JSON")
    generation_failed: bool = Field(default=False)
    attempts: int = Field(default=0, description="Layouts tried")
    min_moves: int = Field(default=-1, description="Certified minimal quarter-turns")
    generation_time_ms: int = Field(default=0, description="Generation time in milliseconds")
    failure_reason: Optional[str] = None


class CompressionRequest(BaseModel):
    """Request schema for one wall advance."""
    level_json: Dict[str, Any] = Field(..., description="Level JSON holding the current grid")
    wall_offset: int = Field(default=0, ge=0, description="Current wall offset")
    mode: str = Field(default="classic", description="Game mode whose loss rule applies")
    moves: int = Field(default=0, ge=0, description="Moves made so far")


class CompressionResponse(BaseModel):
    """Response schema for one wall advance."""
    offset: int
    advanced: bool
    crushed: List[Dict[str, int]] = Field(default=[])
    crushed_goal: bool = False
    lost: bool = False
    loss_reason: Optional[str] = None
    level_json: Dict[str, Any] = Field(..., description="Level JSON with the compressed grid")


class ErrorResponse(BaseModel):
    """Error response schema."""
    detail: str
