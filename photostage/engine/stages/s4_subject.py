"""S4 — Subject.

The adjusted cut-out under its transform, scaled by the upscale ratio.
"""

from __future__ import annotations

import logging

from photostage.engine.context import RenderContext
from photostage.engine.registry import RenderPhase, render_stage
from photostage.utils.imaging import warp_onto

logger = logging.getLogger(__name__)


@render_stage(
    id="S4",
    phase=RenderPhase.SUBJECT,
    dependencies=["S2", "S3"],
    tags={"subject"},
    description="Draw the subject at its transform",
)
def draw_subject(ctx: RenderContext) -> None:
    t = ctx.scaled_transform
    placed = warp_onto(
        ctx.canvas.size,
        ctx.subject_buffer,
        x=t.x,
        y=t.y,
        rotation=t.rotation,
        scale_x=t.scale_x,
        scale_y=t.scale_y,
    )
    if placed is None:
        logger.debug("Subject has zero scale, nothing drawn")
        return
    ctx.canvas.alpha_composite(placed)
