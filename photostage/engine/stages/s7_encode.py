"""S7 — Encode.

Flattens over black (the canvas has no backdrop of its own) and writes a
JPEG at the configured quality.
"""

from __future__ import annotations

from photostage.engine.context import RenderContext
from photostage.engine.registry import RenderPhase, render_stage
from photostage.utils.imaging import encode_image, flatten


@render_stage(
    id="S7",
    phase=RenderPhase.OUTPUT,
    dependencies=["S5", "S6"],
    description="Flatten and encode the frame as JPEG",
)
def encode_frame(ctx: RenderContext) -> None:
    ctx.encoded = encode_image(flatten(ctx.canvas), fmt="JPEG", quality=ctx.config.jpeg_quality)
