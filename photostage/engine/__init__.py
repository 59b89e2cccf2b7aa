"""PhotoStage composition and rendering engine."""

from photostage.engine.registry import render_stage, RenderPhase, get_registry
from photostage.engine.context import RenderContext, RenderRequest
from photostage.engine.pipeline import RenderPipeline

__all__ = [
    "render_stage",
    "RenderPhase",
    "get_registry",
    "RenderContext",
    "RenderRequest",
    "RenderPipeline",
]
