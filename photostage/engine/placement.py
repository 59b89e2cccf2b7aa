"""Placement calculator — seed transform that fits the subject inside the theme's box.

Runs once per (theme, subject) pair. The box arrives already normalized to
fractions (see models.theme.PlacementBox).
"""

from __future__ import annotations

import logging

from photostage.models.editing import SubjectTransform
from photostage.models.theme import PlacementBox

logger = logging.getLogger(__name__)


def fit_scale(box_w: float, box_h: float, natural_w: float, natural_h: float) -> float:
    """Largest isotropic scale that keeps the whole subject inside the box."""
    return min(box_w / natural_w, box_h / natural_h)


def calculate_initial_placement(
    box: PlacementBox,
    stage_width: float,
    stage_height: float,
    natural_width: float,
    natural_height: float,
) -> SubjectTransform:
    """Initial subject transform in editing-stage pixels."""
    if stage_width <= 0 or stage_height <= 0:
        raise ValueError(f"invalid stage size {stage_width}x{stage_height}")
    if natural_width <= 0 or natural_height <= 0:
        raise ValueError(f"invalid subject size {natural_width}x{natural_height}")

    box_w = box.width * stage_width
    box_h = box.height * stage_height
    center_x = box.x * stage_width + box_w / 2
    center_y = box.y * stage_height + box_h / 2

    scale = fit_scale(box_w, box_h, natural_width, natural_height)
    fit_w = natural_width * scale
    fit_h = natural_height * scale

    x = center_x - fit_w / 2
    if box.anchor == "top":
        y = center_y - box_h / 2
    elif box.anchor == "bottom":
        y = center_y + box_h / 2 - fit_h
    else:
        y = center_y - fit_h / 2

    logger.debug(
        "Placement: box=%.1fx%.1f scale=%.4f anchor=%s -> (%.1f, %.1f)",
        box_w, box_h, scale, box.anchor, x, y,
    )
    return SubjectTransform(x=x, y=y, scale_x=scale, scale_y=scale, rotation=box.rotation)
