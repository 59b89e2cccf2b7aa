"""API response models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from photostage.models.editing import AdjustmentBundle, RenderMode, SubjectTransform


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    stages_registered: int = 0
    model_loaded: bool = False


class PresetResponse(BaseModel):
    id: str
    name: str
    values: AdjustmentBundle


class PresetListResponse(BaseModel):
    presets: list[PresetResponse] = Field(default_factory=list)


class SegmentResponse(BaseModel):
    success: bool
    image: str | None = Field(None, description="Cut-out as a base64 PNG data URL")
    width: int = 0
    height: int = 0
    error: str | None = None
    error_type: str | None = None
    processing_time_ms: float = 0.0


class PlacementResponse(BaseModel):
    transform: SubjectTransform


class RenderResponse(BaseModel):
    image: str = Field(..., description="JPEG frame as a base64 data URL")
    width: int
    height: int
    mode: RenderMode
    skipped_layers: list[str] = Field(default_factory=list)
    processing_time_ms: float = 0.0
