"""Editing session — the state one editor holds between frames.

Owns the selected theme, the cut-out, its transform, adjustments and mask
history. Renders are snapshots: state is copied at invocation time, so edits
made while a frame is rendering never leak into it. When renders overlap,
only the newest request per mode delivers a result.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from PIL import Image

from photostage.engine.adjustments import get_preset
from photostage.engine.compositor import RenderResult, render
from photostage.engine.config import EngineConfig
from photostage.engine.context import RenderRequest
from photostage.engine.masking import MaskHistory, StrokeRecorder
from photostage.engine.placement import calculate_initial_placement
from photostage.models.editing import (
    AdjustmentBundle,
    MaskStroke,
    PaintMode,
    RenderMode,
    SubjectTransform,
)
from photostage.models.theme import ThemeDescriptor

logger = logging.getLogger(__name__)

# On-screen brush diameter, editing-stage pixels
BRUSH_SIZE_RANGE = (5.0, 80.0)
DEFAULT_BRUSH_SIZE = 20.0


class EditingSession:
    def __init__(
        self,
        config: EngineConfig | None = None,
        asset_root: str | Path = ".",
    ) -> None:
        self.config = config or EngineConfig()
        self.asset_root = Path(asset_root)

        self.theme: ThemeDescriptor | None = None
        self.subject: Image.Image | None = None
        self.transform = SubjectTransform()
        self.adjustments = AdjustmentBundle()
        self.history = MaskHistory()
        self.stage_width: float | None = None
        self.stage_height: float | None = None

        self._placed = False
        self._recorder: StrokeRecorder | None = None
        self._generations: dict[RenderMode, int] = {m: 0 for m in RenderMode}

    # -- theme / subject ---------------------------------------------------

    def select_theme(self, theme: ThemeDescriptor) -> None:
        """Switch theme. Its default adjustments replace the current ones."""
        self.theme = theme
        self.adjustments = theme.default_adjustments.model_copy()
        self._placed = False
        self._seed_placement()

    def set_stage_size(self, width: float, height: float) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"invalid stage size {width}x{height}")
        old_width = self._stage_size()[0] if self.theme is not None else None
        self.stage_width = width
        self.stage_height = height

        # A placed transform is in the old stage's pixels; strokes are native.
        if self._placed and old_width and old_width != width:
            ratio = width / old_width
            t = self.transform
            self.transform = t.model_copy(update={
                "x": t.x * ratio,
                "y": t.y * ratio,
                "scale_x": t.scale_x * ratio,
                "scale_y": t.scale_y * ratio,
            })
            logger.debug("Stage resized %.0f -> %.0f, transform scaled by %.3f", old_width, width, ratio)

    def load_subject(self, image: Image.Image) -> None:
        """Install a new cut-out. Strokes from the previous subject are dropped."""
        self.subject = image
        self.history.clear()
        self._recorder = None
        self._placed = False
        self._seed_placement()

    def clear_subject(self) -> None:
        self.subject = None
        self.transform = SubjectTransform()
        self.adjustments = AdjustmentBundle()
        self.history.clear()
        self._recorder = None
        self._placed = False

    def _stage_size(self) -> tuple[float, float]:
        if self.stage_width and self.stage_height:
            return (self.stage_width, self.stage_height)
        return (float(self.theme.width), float(self.theme.height))

    def _seed_placement(self) -> None:
        # Placement runs once per (theme, subject) pair; later edits are the user's.
        if self._placed or self.theme is None or self.subject is None:
            return
        stage_w, stage_h = self._stage_size()
        self.transform = calculate_initial_placement(
            self.theme.placement,
            stage_w,
            stage_h,
            self.subject.width,
            self.subject.height,
        )
        self._placed = True

    # -- transform ---------------------------------------------------------

    def set_transform(self, **changes: float) -> SubjectTransform:
        self.transform = self.transform.model_copy(update=changes)
        return self.transform

    def reset_transform(self) -> SubjectTransform:
        self._placed = False
        self._seed_placement()
        return self.transform

    # -- adjustments -------------------------------------------------------

    def apply_preset(self, preset_id: str) -> AdjustmentBundle:
        self.adjustments = get_preset(preset_id).values.model_copy()
        return self.adjustments

    def set_adjustments(self, **values: float) -> AdjustmentBundle:
        merged = {**self.adjustments.model_dump(), **values}
        self.adjustments = AdjustmentBundle(**merged)
        return self.adjustments

    # -- mask strokes ------------------------------------------------------

    def begin_stroke(self, mode: PaintMode, brush_size: float = DEFAULT_BRUSH_SIZE) -> None:
        if self.subject is None:
            raise ValueError("no subject loaded")
        lo, hi = BRUSH_SIZE_RANGE
        size = min(hi, max(lo, brush_size))
        self._recorder = StrokeRecorder(self.transform, mode, size / 2)

    def add_stroke_point(self, x: float, y: float) -> None:
        if self._recorder is None:
            raise ValueError("no stroke in progress")
        self._recorder.add_point(x, y)

    def end_stroke(self) -> MaskStroke | None:
        recorder, self._recorder = self._recorder, None
        if recorder is None:
            return None
        stroke = recorder.finish()
        if stroke is not None:
            self.history.append(stroke)
        return stroke

    def undo_stroke(self) -> MaskStroke | None:
        return self.history.undo()

    def clear_strokes(self) -> None:
        self.history.clear()

    # -- rendering ---------------------------------------------------------

    def snapshot(self, mode: RenderMode = RenderMode.PREVIEW) -> RenderRequest:
        if self.theme is None:
            raise ValueError("no theme selected")
        stage_w, stage_h = self._stage_size()
        return RenderRequest(
            theme=self.theme,
            subject=self.subject,
            transform=self.transform.model_copy(),
            adjustments=self.adjustments.model_copy(),
            strokes=self.history.strokes,
            mode=mode,
            stage_width=stage_w,
            stage_height=stage_h,
        )

    def render_now(self, mode: RenderMode = RenderMode.PREVIEW) -> RenderResult:
        return render(self.snapshot(mode), self.config, self.asset_root)

    async def render(self, mode: RenderMode = RenderMode.PREVIEW) -> RenderResult | None:
        """Render off the event loop. Returns None if a newer request superseded this one."""
        self._generations[mode] += 1
        generation = self._generations[mode]
        request = self.snapshot(mode)

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(
            None, render, request, self.config, self.asset_root
        )
        if generation != self._generations[mode]:
            logger.debug("Discarding superseded %s render #%d", mode.value, generation)
            return None
        return result
