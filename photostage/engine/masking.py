"""Mask projector — record strokes in subject-native space, replay them onto pixels.

Strokes are stored untransformed: pointer samples are pulled back through
the subject transform at record time, so later moves, resizes or rotations
never invalidate them. Replay is a pure function of (raw subject, stroke
log); every call starts from a fresh copy of the raw subject.
"""

from __future__ import annotations

import logging

import numpy as np
from numpy.typing import NDArray
from PIL import Image
from shapely.geometry import LineString, Point, Polygon
from shapely.validation import make_valid

from photostage.models.editing import MaskStroke, PaintMode, SubjectTransform
from photostage.utils.geometry import rasterize_geometry, rotate

logger = logging.getLogger(__name__)

# Shapely buffer styles: 1 = round (cap and join).
_ROUND = 1


def stage_to_native(x: float, y: float, transform: SubjectTransform) -> tuple[float, float]:
    """Editing-stage point → subject-native point (inverse of the subject transform)."""
    rx, ry = rotate(x - transform.x, y - transform.y, -transform.rotation)
    return (rx / transform.scale_x, ry / transform.scale_y)


def native_to_stage(x: float, y: float, transform: SubjectTransform) -> tuple[float, float]:
    rx, ry = rotate(x * transform.scale_x, y * transform.scale_y, transform.rotation)
    return (rx + transform.x, ry + transform.y)


class StrokeRecorder:
    """Accumulates one in-progress stroke from live pointer samples."""

    def __init__(
        self,
        transform: SubjectTransform,
        mode: PaintMode,
        brush_radius: float,
    ) -> None:
        if transform.scale_x == 0 or transform.scale_y == 0:
            raise ValueError("cannot record strokes against a zero-scale transform")
        self.transform = transform.model_copy()
        self.mode = mode
        # On-screen size is reconstructible as radius · scale_x
        self.radius = brush_radius / abs(transform.scale_x)
        self.points: list[tuple[float, float]] = []

    def add_point(self, x: float, y: float) -> None:
        self.points.append(stage_to_native(x, y, self.transform))

    def finish(self) -> MaskStroke | None:
        if not self.points or self.radius <= 0:
            return None
        return MaskStroke(points=list(self.points), radius=self.radius, mode=self.mode)


class MaskHistory:
    """Append-only stroke log. Undo pops the tail; there is no redo."""

    def __init__(self) -> None:
        self._strokes: list[MaskStroke] = []

    def append(self, stroke: MaskStroke) -> None:
        self._strokes.append(stroke)

    def undo(self) -> MaskStroke | None:
        if not self._strokes:
            return None
        return self._strokes.pop()

    def clear(self) -> None:
        self._strokes.clear()

    @property
    def strokes(self) -> list[MaskStroke]:
        return list(self._strokes)

    def __len__(self) -> int:
        return len(self._strokes)


def _dedupe(points: list[tuple[float, float]]) -> list[tuple[float, float]]:
    out: list[tuple[float, float]] = []
    for p in points:
        if not out or p != out[-1]:
            out.append(p)
    return out


def stroke_footprint(stroke: MaskStroke, height: int, width: int) -> NDArray[np.bool_]:
    """Pixels a stroke affects in native space.

    erase:   the polyline swept by a round brush of the stored radius
    restore: the region enclosed by the polyline
    """
    pts = _dedupe(stroke.points)
    if stroke.mode == PaintMode.ERASE:
        if len(pts) == 1:
            geom = Point(pts[0]).buffer(stroke.radius)
        else:
            geom = LineString(pts).buffer(
                stroke.radius, cap_style=_ROUND, join_style=_ROUND
            )
    else:
        if len(pts) < 3:
            return np.zeros((height, width), dtype=bool)
        geom = make_valid(Polygon(pts))
    return rasterize_geometry(geom, height, width)


def replay_strokes(subject: Image.Image, strokes: list[MaskStroke]) -> Image.Image:
    """Replay *strokes* in recorded order onto a fresh copy of *subject*.

    Overlaps resolve last-applied-wins: a restore after an erase brings the
    original pixels back, an erase after a restore removes them again.
    """
    original = np.array(subject.convert("RGBA"))
    if not strokes:
        return Image.fromarray(original)

    out = original.copy()
    h, w = original.shape[:2]
    for stroke in strokes:
        region = stroke_footprint(stroke, h, w)
        if stroke.mode == PaintMode.ERASE:
            out[region, 3] = 0
        else:
            out[region] = original[region]
    logger.debug("Replayed %d mask strokes on %dx%d subject", len(strokes), w, h)
    return Image.fromarray(out)
