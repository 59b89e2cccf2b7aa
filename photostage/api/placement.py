"""POST /api/placement — initial subject transform for a theme."""

from __future__ import annotations

from fastapi import APIRouter

from photostage.engine.placement import calculate_initial_placement
from photostage.models.requests import PlacementRequest
from photostage.models.responses import PlacementResponse

router = APIRouter()


@router.post("/placement", response_model=PlacementResponse)
async def placement(req: PlacementRequest) -> PlacementResponse:
    transform = calculate_initial_placement(
        req.theme.placement,
        req.stage_width,
        req.stage_height,
        req.subject_width,
        req.subject_height,
    )
    return PlacementResponse(transform=transform)
