"""Theme descriptor — the read-only scene template the engine renders into.

Placement boxes are normalized to fractions here, once, at ingestion.
Nothing downstream ever sees the legacy percentage encoding.
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from photostage.models.editing import AdjustmentBundle

logger = logging.getLogger(__name__)


class PlacementBox(BaseModel):
    """Where the subject goes, as fractions of the canvas."""

    x: float = 0.25
    y: float = 0.30
    width: float = 0.5
    height: float = 0.5
    rotation: float = 0.0
    anchor: Literal["top", "center", "bottom"] = "center"

    @model_validator(mode="after")
    def _normalize_legacy_percentages(self) -> PlacementBox:
        # Legacy boxes were stored as 0-100. Any field above 1 marks the whole
        # box as legacy; all four are rescaled together.
        if self.x > 1 or self.y > 1 or self.width > 1 or self.height > 1:
            logger.debug("Normalizing legacy percentage placement box")
            self.x /= 100
            self.y /= 100
            self.width /= 100
            self.height /= 100
        return self


class ShadowConfig(BaseModel):
    enabled: bool = False
    angle: float = Field(120.0, description="Degrees")
    distance: float = Field(20.0, ge=0)
    blur: float = Field(40.0, ge=0, description="Gaussian sigma in output pixels")
    opacity: float = Field(0.28, ge=0.0, le=1.0)


class ThemeLayer(BaseModel):
    source: str = Field(..., description="Data URL or local path")
    export_source: str | None = Field(
        None, description="High-resolution variant used in export mode"
    )
    z_index: int = 0
    visible: bool = True

    def source_for(self, export: bool) -> str:
        if export and self.export_source:
            return self.export_source
        return self.source


class ThemeDescriptor(BaseModel):
    id: str | None = None
    name: str | None = None
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    layers: list[ThemeLayer] = Field(default_factory=list)
    subject_z_index: int = 1
    placement: PlacementBox = Field(default_factory=PlacementBox)
    shadow: ShadowConfig = Field(default_factory=ShadowConfig)
    default_adjustments: AdjustmentBundle = Field(default_factory=AdjustmentBundle)

    @model_validator(mode="after")
    def _check_subject_slot(self) -> ThemeDescriptor:
        if any(layer.z_index == self.subject_z_index for layer in self.layers):
            raise ValueError(
                f"layer z_index {self.subject_z_index} collides with the subject slot"
            )
        return self

    def layers_below(self) -> list[ThemeLayer]:
        below = [
            layer for layer in self.layers
            if layer.visible and layer.z_index < self.subject_z_index
        ]
        return sorted(below, key=lambda layer: layer.z_index)

    def layers_above(self) -> list[ThemeLayer]:
        above = [
            layer for layer in self.layers
            if layer.visible and layer.z_index > self.subject_z_index
        ]
        return sorted(above, key=lambda layer: layer.z_index)
