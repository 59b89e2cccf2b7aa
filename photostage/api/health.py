"""Health check + meta endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from photostage.dependencies import get_inference_engine
from photostage.engine.registry import get_registry
from photostage.engine.segmentation import InferenceEngine
from photostage.models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(engine: InferenceEngine = Depends(get_inference_engine)) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version="0.1.0",
        stages_registered=get_registry().count,
        model_loaded=engine.is_ready,
    )
