"""RenderContext — the single mutable state object flowing through all render stages.

RenderRequest is the immutable snapshot a caller hands in; the compositor
derives output geometry from it and stages fill in the buffers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from PIL import Image

from photostage.engine.config import EngineConfig
from photostage.models.editing import (
    AdjustmentBundle,
    MaskStroke,
    RenderMode,
    SubjectTransform,
)
from photostage.models.theme import ThemeDescriptor


@dataclass
class RenderRequest:
    """Everything needed to produce one frame."""

    theme: ThemeDescriptor
    # Raw cut-out in native pixels; strokes are replayed onto a copy
    subject: Image.Image | None
    transform: SubjectTransform = field(default_factory=SubjectTransform)
    adjustments: AdjustmentBundle = field(default_factory=AdjustmentBundle)
    strokes: list[MaskStroke] = field(default_factory=list)
    mode: RenderMode = RenderMode.PREVIEW
    # Size of the editing stage the transform was expressed against.
    # Missing → the output size (upscale ratio 1).
    stage_width: float | None = None
    stage_height: float | None = None

    @property
    def is_export(self) -> bool:
        return self.mode == RenderMode.EXPORT


@dataclass
class RenderContext:
    """Shared state flowing through the render pipeline."""

    request: RenderRequest
    config: EngineConfig = field(default_factory=EngineConfig)
    # Relative layer paths resolve against this directory
    asset_root: Path = field(default_factory=lambda: Path("."))

    # Output geometry
    output_width: int = 0
    output_height: int = 0
    upscale: float = 1.0

    # Buffers
    canvas: Image.Image | None = None
    # Subject after mask replay and adjustment, still in native pixels
    subject_buffer: Image.Image | None = None
    encoded: bytes | None = None

    # Bookkeeping
    skipped_layers: list[str] = field(default_factory=list)
    completed_stages: set[str] = field(default_factory=set)
    errors: dict[str, str] = field(default_factory=dict)
    timings: dict[str, float] = field(default_factory=dict)

    @property
    def theme(self) -> ThemeDescriptor:
        return self.request.theme

    @property
    def is_export(self) -> bool:
        return self.request.is_export

    @property
    def scaled_transform(self) -> SubjectTransform:
        """Subject transform carried from stage pixels into output pixels."""
        t = self.request.transform
        k = self.upscale
        return SubjectTransform(
            x=t.x * k,
            y=t.y * k,
            scale_x=t.scale_x * k,
            scale_y=t.scale_y * k,
            rotation=t.rotation,
        )
