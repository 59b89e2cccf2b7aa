"""POST /api/segment — background removal."""

from __future__ import annotations

import time

from fastapi import APIRouter, Depends

from photostage.dependencies import get_engine_config, get_inference_engine
from photostage.engine.config import EngineConfig
from photostage.engine.segmentation import InferenceEngine, remove_background
from photostage.models.requests import SegmentRequest
from photostage.models.responses import SegmentResponse
from photostage.utils.imaging import to_data_url

router = APIRouter()


@router.post("/segment", response_model=SegmentResponse)
async def segment(
    req: SegmentRequest,
    engine: InferenceEngine = Depends(get_inference_engine),
    config: EngineConfig = Depends(get_engine_config),
) -> SegmentResponse:
    start = time.perf_counter()
    result = await remove_background(req.image, engine=engine, config=config)
    elapsed = (time.perf_counter() - start) * 1000

    # Failures are part of the normal response; the editor shows the message.
    if not result.success:
        return SegmentResponse(
            success=False,
            error=result.error,
            error_type=result.error_type,
            processing_time_ms=round(elapsed, 1),
        )

    return SegmentResponse(
        success=True,
        image=to_data_url(result.image, fmt="PNG"),
        width=result.image.width,
        height=result.image.height,
        processing_time_ms=round(elapsed, 1),
    )
