"""S5 — Foreground layers above the subject, ascending z-order."""

from __future__ import annotations

from photostage.engine.context import RenderContext
from photostage.engine.layers import draw_layers
from photostage.engine.registry import RenderPhase, render_stage


@render_stage(
    id="S5",
    phase=RenderPhase.FOREGROUND,
    dependencies=["S1", "S4"],
    description="Draw theme layers above the subject",
)
def foreground_layers(ctx: RenderContext) -> None:
    draw_layers(ctx, ctx.theme.layers_above())
