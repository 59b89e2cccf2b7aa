"""Editing-session models: transform, adjustments, mask strokes, render requests."""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, Field

# Narrower ranges the editor sliders enforce (nominal ranges are wider).
UI_RANGES: dict[str, tuple[float, float]] = {
    "brightness": (-0.5, 0.5),
    "contrast": (-50.0, 50.0),
    "vibrance": (-0.5, 0.5),
    "warmth": (-0.5, 0.5),
}


class PaintMode(str, enum.Enum):
    ERASE = "erase"
    RESTORE = "restore"


class RenderMode(str, enum.Enum):
    PREVIEW = "preview"
    EXPORT = "export"


class SubjectTransform(BaseModel):
    """Subject placement in editing-stage pixels."""

    x: float = 0.0
    y: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0
    rotation: float = Field(0.0, description="Degrees, clockwise on screen")


class AdjustmentBundle(BaseModel):
    """Four independent photographic adjustments. All zero = identity."""

    brightness: float = Field(0.0, ge=-1.0, le=1.0)
    contrast: float = Field(0.0, ge=-100.0, le=100.0)
    vibrance: float = Field(0.0, ge=-1.0, le=1.0)
    warmth: float = Field(0.0, ge=-1.0, le=1.0)

    @property
    def is_identity(self) -> bool:
        return (
            self.brightness == 0
            and self.contrast == 0
            and self.vibrance == 0
            and self.warmth == 0
        )

    def clamped_to_ui(self) -> AdjustmentBundle:
        values = {}
        for key, (lo, hi) in UI_RANGES.items():
            values[key] = min(hi, max(lo, getattr(self, key)))
        return AdjustmentBundle(**values)


class MaskStroke(BaseModel):
    """One paint stroke, stored in subject-native pixel space."""

    model_config = ConfigDict(frozen=True)

    points: list[tuple[float, float]] = Field(default_factory=list)
    radius: float = Field(..., gt=0)
    mode: PaintMode = PaintMode.ERASE
