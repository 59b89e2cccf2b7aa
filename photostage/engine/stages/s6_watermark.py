"""S6 — Watermark (export only).

A translucent rounded pill with the label, pinned to the top-right corner.
Padding and font size are fractions of the output width so the mark keeps
its proportions at any resolution.
"""

from __future__ import annotations

from PIL import Image, ImageDraw, ImageFont

from photostage.engine.context import RenderContext
from photostage.engine.registry import RenderPhase, render_stage
from photostage.utils.geometry import round_half_up

# Pill insets around the text, in output pixels
_PILL_PAD_X = 16
_PILL_PAD_Y = 8
_PILL_RADIUS = 8

# Effective alphas: pill 0.35 fill at 0.6 opacity, text 0.9 at 0.9
_PILL_FILL = (0, 0, 0, round_half_up(255 * 0.35 * 0.6))
_TEXT_FILL = (255, 255, 255, round_half_up(255 * 0.9 * 0.9))

_FONT_CANDIDATES = ("DejaVuSans-Bold.ttf", "Arial Bold.ttf", "arialbd.ttf")


def _font(size: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    for name in _FONT_CANDIDATES:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


def draw_watermark(canvas: Image.Image, text: str, padding_pct: float, font_pct: float) -> None:
    width = canvas.width
    padding = width * padding_pct
    font_size = max(1, round_half_up(width * font_pct))
    font = _font(font_size)

    overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    left, _, right, _ = draw.textbbox((0, 0), text, font=font)
    text_w = right - left

    pill_x = width - padding - text_w - _PILL_PAD_X
    pill_y = padding
    draw.rounded_rectangle(
        (pill_x, pill_y, pill_x + text_w + 2 * _PILL_PAD_X, pill_y + font_size + 2 * _PILL_PAD_Y),
        radius=_PILL_RADIUS,
        fill=_PILL_FILL,
    )
    text_right = width - padding - _PILL_PAD_Y
    draw.text((text_right - text_w, padding + _PILL_PAD_Y), text, font=font, fill=_TEXT_FILL)

    canvas.alpha_composite(overlay)


@render_stage(
    id="S6",
    phase=RenderPhase.OVERLAY,
    dependencies=["S5"],
    tags={"export"},
    description="Stamp the export watermark",
)
def watermark(ctx: RenderContext) -> None:
    cfg = ctx.config
    draw_watermark(ctx.canvas, cfg.watermark_text, cfg.watermark_padding_pct, cfg.watermark_font_pct)
