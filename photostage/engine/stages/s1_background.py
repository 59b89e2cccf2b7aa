"""S1 — Background layers.

Every visible layer below the subject's z-order, stretched to the output
canvas, in ascending z-order.
"""

from __future__ import annotations

from photostage.engine.context import RenderContext
from photostage.engine.layers import draw_layers
from photostage.engine.registry import RenderPhase, render_stage


@render_stage(
    id="S1",
    phase=RenderPhase.BACKGROUND,
    description="Draw theme layers below the subject",
)
def background_layers(ctx: RenderContext) -> None:
    draw_layers(ctx, ctx.theme.layers_below())
