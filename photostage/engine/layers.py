"""Theme layer loading for the background and foreground stages."""

from __future__ import annotations

import logging

from PIL import Image

from photostage.engine.context import RenderContext
from photostage.errors import DecodeError, LayerLoadError
from photostage.models.theme import ThemeLayer
from photostage.utils.imaging import load_image_ref

logger = logging.getLogger(__name__)


def _describe(ref: str) -> str:
    # Data URLs are truncated for logging
    return ref if not ref.startswith("data:") else ref[:32] + "..."


def load_layer(ctx: RenderContext, layer: ThemeLayer) -> Image.Image:
    """Load a layer and stretch it to the output canvas."""
    ref = layer.source_for(ctx.is_export)
    try:
        img = load_image_ref(ref, ctx.asset_root)
    except DecodeError as e:
        raise LayerLoadError(_describe(ref), str(e)) from e
    size = (ctx.output_width, ctx.output_height)
    if img.size != size:
        img = img.resize(size, Image.Resampling.LANCZOS)
    return img


def draw_layers(ctx: RenderContext, layers: list[ThemeLayer]) -> int:
    """Composite *layers* in order; failures are recorded and skipped.

    Returns the number of layers drawn.
    """
    drawn = 0
    for layer in layers:
        try:
            img = load_layer(ctx, layer)
        except LayerLoadError as e:
            logger.warning("Skipping layer z=%d (%s): %s", layer.z_index, e.source, e)
            ctx.skipped_layers.append(e.source)
            ctx.errors[f"layer:{layer.z_index}"] = str(e)
            continue
        ctx.canvas.alpha_composite(img)
        drawn += 1
    return drawn
