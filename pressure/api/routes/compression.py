"""Wall compression API routes."""
from fastapi import APIRouter, Depends, HTTPException

from ...models.schemas import CompressionRequest, CompressionResponse
from ...core.compression import CompressionSystem
from ...core.modes import get_mode_hooks
from ...utils.helpers import level_from_json, level_to_json
from ..deps import get_compression

router = APIRouter(prefix="/api/compression", tags=["compression"])


@router.post("/advance", response_model=CompressionResponse)
async def advance_walls(
    request: CompressionRequest,
    compression: CompressionSystem = Depends(get_compression),
) -> CompressionResponse:
    """
    Advance a level's walls by one step.

    The level's tiles are taken as the current grid; the response carries the
    compressed grid back as level JSON.
    """
    try:
        level = level_from_json(request.level_json)
        hooks = get_mode_hooks(request.mode)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = compression.advance_level(
        level,
        level.grid,
        request.wall_offset,
        hooks.check_loss,
        request.moves,
        hooks.initial_state(),
    )
    data = result.to_dict()
    data["level_json"] = level_to_json(level.with_grid(result.grid))
    return CompressionResponse(**data)
