"""API request models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from photostage.models.editing import (
    AdjustmentBundle,
    MaskStroke,
    RenderMode,
    SubjectTransform,
)
from photostage.models.theme import ThemeDescriptor


class SegmentRequest(BaseModel):
    image: str = Field(..., description="Photo as a base64 data URL")


class PlacementRequest(BaseModel):
    theme: ThemeDescriptor = Field(..., description="Theme whose placement box is used")
    stage_width: float = Field(..., gt=0, description="Editing stage width in pixels")
    stage_height: float = Field(..., gt=0, description="Editing stage height in pixels")
    subject_width: int = Field(..., gt=0, description="Cut-out natural width")
    subject_height: int = Field(..., gt=0, description="Cut-out natural height")


class RenderRequestBody(BaseModel):
    theme: ThemeDescriptor
    subject: str | None = Field(None, description="Cut-out as a base64 PNG data URL")
    transform: SubjectTransform = Field(default_factory=SubjectTransform)
    adjustments: AdjustmentBundle = Field(default_factory=AdjustmentBundle)
    preset: str | None = Field(
        None, description="Preset id; overrides adjustments when given"
    )
    strokes: list[MaskStroke] = Field(
        default_factory=list, description="Mask strokes in subject-native pixels"
    )
    mode: RenderMode = RenderMode.PREVIEW
    stage_width: float | None = Field(None, gt=0)
    stage_height: float | None = Field(None, gt=0)
