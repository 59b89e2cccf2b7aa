"""Compositor — one renderer for both the live preview and the final export.

Both modes run the same stage list over the same inputs; they differ only in
output resolution, layer source (export may use high-resolution variants)
and the watermark. Given identical state, an export is the preview redrawn
at a different scale.

Geometry:
  scale  = min(1, cap / max(theme.width, theme.height))
  output = round_half_up(native × scale)
  upscale ratio = output_width / stage_width
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from PIL import Image

from photostage.engine.config import EngineConfig
from photostage.engine.context import RenderContext, RenderRequest
from photostage.engine.pipeline import RenderPipeline
from photostage.engine.stages import load_stages
from photostage.models.editing import RenderMode
from photostage.utils.geometry import round_half_up

logger = logging.getLogger(__name__)

_stages_loaded = False


@dataclass
class RenderResult:
    encoded: bytes
    width: int
    height: int
    mode: RenderMode
    # Unflattened RGBA canvas, before encoding
    frame: Image.Image | None = None
    skipped_layers: list[str] = field(default_factory=list)
    processing_time_ms: float = 0.0


def _ensure_stages() -> None:
    global _stages_loaded
    if not _stages_loaded:
        load_stages()
        _stages_loaded = True


def compute_output_size(
    native_width: int,
    native_height: int,
    mode: RenderMode,
    config: EngineConfig | None = None,
) -> tuple[int, int]:
    """Output pixel size: longest side capped per mode, never upscaled."""
    config = config or EngineConfig()
    cap = (
        config.export_max_dimension
        if mode == RenderMode.EXPORT
        else config.preview_max_dimension
    )
    scale = min(1.0, cap / max(native_width, native_height))
    return (
        max(1, round_half_up(native_width * scale)),
        max(1, round_half_up(native_height * scale)),
    )


def upscale_ratio(output_width: int, stage_width: float | None) -> float:
    """Editing-stage pixels → output pixels. No stage size means the stage is the output."""
    if not stage_width:
        return 1.0
    return output_width / stage_width


def build_context(
    request: RenderRequest,
    config: EngineConfig | None = None,
    asset_root: str | Path = ".",
) -> RenderContext:
    config = config or EngineConfig()
    width, height = compute_output_size(
        request.theme.width, request.theme.height, request.mode, config
    )
    ctx = RenderContext(
        request=request,
        config=config,
        asset_root=Path(asset_root),
        output_width=width,
        output_height=height,
        upscale=upscale_ratio(width, request.stage_width),
    )
    ctx.canvas = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    return ctx


def render(
    request: RenderRequest,
    config: EngineConfig | None = None,
    asset_root: str | Path = ".",
    pipeline: RenderPipeline | None = None,
) -> RenderResult:
    """Produce one encoded frame. Raises RenderError if a critical stage fails."""
    _ensure_stages()
    start = time.perf_counter()

    ctx = build_context(request, config, asset_root)
    pipeline = pipeline or RenderPipeline(config=ctx.config)
    pipeline.run(ctx)

    if ctx.skipped_layers:
        logger.warning(
            "Rendered %s with %d layer(s) omitted", request.mode.value, len(ctx.skipped_layers)
        )

    return RenderResult(
        encoded=ctx.encoded or b"",
        width=ctx.output_width,
        height=ctx.output_height,
        mode=request.mode,
        frame=ctx.canvas,
        skipped_layers=list(ctx.skipped_layers),
        processing_time_ms=round((time.perf_counter() - start) * 1000, 1),
    )
