"""Level generation API routes."""
from fastapi import APIRouter, Depends, HTTPException

from ...models.schemas import GenerateRequest, GenerateResponse
from ...models.level import GenerationParams
from ...core.generator import LevelGenerator
from ..deps import get_level_generator

router = APIRouter(prefix="/api", tags=["generate"])


@router.post("/generate", response_model=GenerateResponse)
async def generate_level(
    request: GenerateRequest,
    generator: LevelGenerator = Depends(get_level_generator),
) -> GenerateResponse:
    """
    Generate a certified-solvable level.

    Args:
        request: GenerateRequest with generation parameters.
        generator: LevelGenerator dependency.

    Returns:
        GenerateResponse with the level JSON, or generation_failed set when
        every attempt was rejected.
    """
    try:
        params = GenerationParams(
            grid_cols=request.grid_cols,
            grid_rows=request.grid_rows,
            node_count=request.node_count,
            difficulty=request.difficulty,
            decoy_count=request.decoy_count,
            compression_direction=request.compression_direction,
            interior_walls=request.interior_walls,
            locked_fraction=request.locked_fraction,
            seed=request.seed,
            level_id=request.level_id,
            name=request.name,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid generation parameters: {str(e)}")

    result = generator.generate(params)
    return GenerateResponse(**result.to_dict())
