"""Shadow synthesizer — solid silhouette plus polar offset.

The silhouette is built the way a canvas does it: draw the subject onto a
blank surface, then fill a solid color constrained to what was drawn
(source-in). Alpha edges keep their coverage, so no fringe appears.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from PIL import Image

from photostage.models.theme import ShadowConfig


@dataclass(frozen=True)
class ShadowOffset:
    offset_x: float = 0.0
    offset_y: float = 0.0
    blur: float = 0.0
    opacity: float = 0.0


def calculate_shadow_offset(shadow: ShadowConfig) -> ShadowOffset:
    """offset = (cos θ · distance, sin θ · distance). Disabled → all zero."""
    if not shadow.enabled:
        return ShadowOffset()
    rad = math.radians(shadow.angle)
    return ShadowOffset(
        offset_x=math.cos(rad) * shadow.distance,
        offset_y=math.sin(rad) * shadow.distance,
        blur=shadow.blur,
        opacity=shadow.opacity,
    )


def create_silhouette(
    source: Image.Image,
    color: tuple[int, int, int] = (0, 0, 0),
) -> Image.Image:
    """Same-size RGBA image: *color* wherever *source* is visible, transparent elsewhere."""
    surface = Image.new("RGBA", source.size, (0, 0, 0, 0))
    surface.alpha_composite(source.convert("RGBA"))

    fill = Image.new("RGBA", source.size, color + (255,))
    fill.putalpha(surface.getchannel("A"))
    return fill
