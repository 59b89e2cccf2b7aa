"""S2 — Subject buffer.

Replays the mask strokes onto a fresh copy of the raw cut-out, then runs
the adjustment filter. The result stays in native pixels; S3 and S4 both
draw from it.
"""

from __future__ import annotations

from photostage.engine.adjustments import adjust_image
from photostage.engine.context import RenderContext
from photostage.engine.masking import replay_strokes
from photostage.engine.registry import RenderPhase, render_stage


@render_stage(
    id="S2",
    phase=RenderPhase.SUBJECT,
    tags={"subject"},
    description="Replay mask strokes and apply adjustments",
)
def subject_buffer(ctx: RenderContext) -> None:
    masked = replay_strokes(ctx.request.subject, ctx.request.strokes)
    ctx.subject_buffer = adjust_image(masked, ctx.request.adjustments)
