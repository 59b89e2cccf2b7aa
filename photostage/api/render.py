"""POST /api/render — preview or export frame."""

from __future__ import annotations

import asyncio
import base64
import logging

from fastapi import APIRouter, Depends, HTTPException

from photostage.config import Settings
from photostage.dependencies import get_engine_config, get_settings
from photostage.engine.adjustments import get_preset
from photostage.engine.compositor import render as render_frame
from photostage.engine.config import EngineConfig
from photostage.engine.context import RenderRequest
from photostage.errors import DecodeError, RenderError
from photostage.models.requests import RenderRequestBody
from photostage.models.responses import RenderResponse
from photostage.utils.imaging import decode_image

logger = logging.getLogger(__name__)

router = APIRouter()

_RETRY_MESSAGE = "Rendering failed, please try again."


@router.post("/render", response_model=RenderResponse)
async def render(
    req: RenderRequestBody,
    config: EngineConfig = Depends(get_engine_config),
    settings: Settings = Depends(get_settings),
) -> RenderResponse:
    try:
        subject = decode_image(req.subject) if req.subject else None
    except DecodeError as e:
        raise HTTPException(status_code=422, detail=f"subject: {e}") from e

    adjustments = req.adjustments
    if req.preset is not None:
        try:
            adjustments = get_preset(req.preset).values
        except KeyError as e:
            raise HTTPException(status_code=422, detail=str(e.args[0])) from e

    request = RenderRequest(
        theme=req.theme,
        subject=subject,
        transform=req.transform,
        adjustments=adjustments,
        strokes=req.strokes,
        mode=req.mode,
        stage_width=req.stage_width,
        stage_height=req.stage_height,
    )

    loop = asyncio.get_running_loop()
    try:
        result = await loop.run_in_executor(
            None, render_frame, request, config, settings.asset_root
        )
    except RenderError as e:
        logger.error("Render failed at %s: %s", e.stage_id, e)
        raise HTTPException(status_code=500, detail=_RETRY_MESSAGE) from e

    encoded = base64.b64encode(result.encoded).decode("ascii")
    return RenderResponse(
        image=f"data:image/jpeg;base64,{encoded}",
        width=result.width,
        height=result.height,
        mode=result.mode,
        skipped_layers=result.skipped_layers,
        processing_time_ms=result.processing_time_ms,
    )
