"""S3 — Drop shadow.

Silhouette of the adjusted subject, placed with the subject transform plus
the shadow offset, blurred and faded on its own buffer, then composited.
Only the offset follows the upscale ratio; blur sigma is in output pixels.
"""

from __future__ import annotations

from photostage.engine.context import RenderContext
from photostage.engine.registry import RenderPhase, render_stage
from photostage.engine.shadow import calculate_shadow_offset, create_silhouette
from photostage.utils.imaging import gaussian_blur, scale_alpha, warp_onto


@render_stage(
    id="S3",
    phase=RenderPhase.SUBJECT,
    dependencies=["S1", "S2"],
    tags={"subject", "shadow"},
    description="Draw the subject's blurred silhouette",
)
def drop_shadow(ctx: RenderContext) -> None:
    offset = calculate_shadow_offset(ctx.theme.shadow)
    t = ctx.scaled_transform
    silhouette = create_silhouette(ctx.subject_buffer)

    placed = warp_onto(
        ctx.canvas.size,
        silhouette,
        x=t.x + offset.offset_x * ctx.upscale,
        y=t.y + offset.offset_y * ctx.upscale,
        rotation=t.rotation,
        scale_x=t.scale_x,
        scale_y=t.scale_y,
    )
    if placed is None:
        return

    shadow = scale_alpha(gaussian_blur(placed, offset.blur), offset.opacity)
    ctx.canvas.alpha_composite(shadow)
