"""Connectivity, solving and verification API routes."""
from fastapi import APIRouter, Depends, HTTPException

from ...models.schemas import (
    ConnectivityRequest,
    ConnectivityResponse,
    SolveRequest,
    SolveResponse,
    VerifyRequest,
    VerifyResponse,
)
from ...core.connectivity import dangling_stubs, is_connected, win_tiles
from ...core.modes import GameMode
from ...core.solver import RotationSolver
from ...core.verifier import LevelVerifier
from ...utils.helpers import level_from_json
from ..deps import get_level_verifier, get_rotation_solver

router = APIRouter(prefix="/api", tags=["solve"])


@router.post("/connectivity", response_model=ConnectivityResponse)
async def check_connectivity(request: ConnectivityRequest) -> ConnectivityResponse:
    """Check whether a level's goal nodes are connected as laid out."""
    try:
        level = level_from_json(request.level_json)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    tiles = sorted(win_tiles(level.grid, level.goal_nodes))
    return ConnectivityResponse(
        connected=is_connected(level.grid, level.goal_nodes),
        win_tiles=[p.to_dict() for p in tiles],
        dangling_stubs=len(dangling_stubs(level.grid)),
    )


@router.post("/solve", response_model=SolveResponse)
async def solve_level(
    request: SolveRequest,
    solver: RotationSolver = Depends(get_rotation_solver),
) -> SolveResponse:
    """
    Find a minimal rotation sequence for a level.

    Args:
        request: SolveRequest with level_json and optional budget.
        solver: RotationSolver dependency.

    Returns:
        SolveResponse with status and moves.
    """
    try:
        level = level_from_json(request.level_json)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    budget = request.move_budget or max(1, level.max_moves * 2)
    result = solver.solve(level.grid, level.goal_nodes, budget, request.time_limit)
    return SolveResponse(**result.to_dict())


@router.post("/verify", response_model=VerifyResponse)
async def verify_level(
    request: VerifyRequest,
    verifier: LevelVerifier = Depends(get_level_verifier),
) -> VerifyResponse:
    """
    Play a level through with its minimal solution and classify the outcome.

    Args:
        request: VerifyRequest with level_json, mode and fix flag.
        verifier: LevelVerifier dependency.

    Returns:
        VerifyResponse with the verification report and, if requested, a fix.
    """
    try:
        level = level_from_json(request.level_json)
        mode = GameMode(request.mode)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    report = verifier.verify(level, mode)
    fix = None
    if request.fix and not report.passed:
        level_fix = verifier.fix(level, report, seed=request.seed)
        if level_fix is not None:
            fix = level_fix.to_dict()
    return VerifyResponse(**report.to_dict(), fix=fix)
