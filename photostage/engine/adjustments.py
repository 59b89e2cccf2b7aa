"""Adjustment filter — brightness, contrast, vibrance, warmth.

Per visible pixel, in this order (the order is part of the output contract):
  1. Brightness: v + brightness·255
  2. Contrast:   ((v/255 − 0.5)·factor + 0.5)·255, factor = max(0, (100+c)/100)
  3. Vibrance:   c + (c − mean(r,g,b))·vibrance
  4. Warmth:     r·(1 + 0.05w), b·(1 − 0.05w)
  5. Clamp to [0, 255], round half up

Fully transparent pixels are never touched.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from PIL import Image

from photostage.models.editing import AdjustmentBundle

# Warmth shifts red/blue by at most 5% at |warmth| = 1.
_WARMTH_GAIN = 0.05


@dataclass(frozen=True)
class FilterPreset:
    id: str
    name: str
    values: AdjustmentBundle


PRESETS: tuple[FilterPreset, ...] = (
    FilterPreset("none", "Original", AdjustmentBundle()),
    FilterPreset(
        "studio_glow",
        "Studio Glow",
        AdjustmentBundle(brightness=0.05, contrast=10, vibrance=0.08, warmth=0.05),
    ),
    FilterPreset(
        "warm_gold",
        "Warm Gold",
        AdjustmentBundle(brightness=0.04, contrast=8, vibrance=0.12, warmth=0.15),
    ),
    FilterPreset(
        "soft_pastel",
        "Soft Pastel",
        AdjustmentBundle(brightness=0.07, contrast=-5, vibrance=-0.05, warmth=0.05),
    ),
    FilterPreset(
        "cool_modern",
        "Cool Modern",
        AdjustmentBundle(brightness=0.03, contrast=12, vibrance=-0.03, warmth=-0.08),
    ),
    FilterPreset(
        "royal_rich",
        "Royal Rich",
        AdjustmentBundle(brightness=-0.02, contrast=18, vibrance=0.15, warmth=0.10),
    ),
)

_PRESETS_BY_ID = {p.id: p for p in PRESETS}


def list_presets() -> list[FilterPreset]:
    return list(PRESETS)


def get_preset(preset_id: str) -> FilterPreset:
    try:
        return _PRESETS_BY_ID[preset_id]
    except KeyError:
        raise KeyError(f"Unknown preset: {preset_id}") from None


def contrast_factor(contrast: float) -> float:
    if contrast == 0:
        return 1.0
    return max(0.0, (100.0 + contrast) / 100.0)


def apply_adjustments(
    pixels: NDArray[np.uint8],
    bundle: AdjustmentBundle,
) -> NDArray[np.uint8]:
    """Apply *bundle* to an H×W×4 RGBA buffer. Returns a new buffer."""
    out = pixels.copy()
    if bundle.is_identity:
        return out

    visible = pixels[..., 3] != 0
    rgb = pixels[visible][:, :3].astype(np.float64)

    rgb += bundle.brightness * 255

    factor = contrast_factor(bundle.contrast)
    if factor != 1.0:
        rgb = ((rgb / 255 - 0.5) * factor + 0.5) * 255

    if bundle.vibrance != 0:
        avg = (rgb[:, 0] + rgb[:, 1] + rgb[:, 2]) / 3
        rgb += (rgb - avg[:, None]) * bundle.vibrance

    if bundle.warmth != 0:
        rgb[:, 0] *= 1 + bundle.warmth * _WARMTH_GAIN
        rgb[:, 2] *= 1 - bundle.warmth * _WARMTH_GAIN

    out[visible, :3] = np.clip(np.floor(rgb + 0.5), 0, 255).astype(np.uint8)
    return out


def adjust_image(img: Image.Image, bundle: AdjustmentBundle) -> Image.Image:
    """Image-level wrapper around apply_adjustments (always returns a new RGBA image)."""
    rgba = img.convert("RGBA")
    if bundle.is_identity:
        return rgba.copy()
    return Image.fromarray(apply_adjustments(np.array(rgba), bundle))
