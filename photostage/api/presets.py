"""GET /api/presets — named adjustment presets."""

from __future__ import annotations

from fastapi import APIRouter

from photostage.engine.adjustments import list_presets
from photostage.models.responses import PresetListResponse, PresetResponse

router = APIRouter()


@router.get("/presets", response_model=PresetListResponse)
async def presets() -> PresetListResponse:
    return PresetListResponse(
        presets=[
            PresetResponse(id=p.id, name=p.name, values=p.values)
            for p in list_presets()
        ]
    )
