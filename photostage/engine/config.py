"""Engine configuration — numeric constants for segmentation and rendering."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from photostage.config import Settings


@dataclass
class EngineConfig:
    """Controls segmentation working sizes and render output policy."""

    # Segmentation working image: longest side capped here before inference
    max_working_size: int = 1024
    # U2NetP expects a fixed square input
    model_input_size: int = 320

    # Squash probe: first N raw outputs checked against [low, high]
    squash_probe_count: int = 100
    squash_low: float = -0.01
    squash_high: float = 1.01

    # Cut-out crop
    alpha_threshold: int = 5
    crop_padding: int = 5

    # Output resolution caps (longest side)
    preview_max_dimension: int = 1200
    export_max_dimension: int = 2048

    # Lossy encode
    jpeg_quality: int = 92

    # Watermark geometry, as fractions of output width
    watermark_text: str = "PhotoStage"
    watermark_padding_pct: float = 0.04
    watermark_font_pct: float = 0.035

    @classmethod
    def from_settings(cls, settings: Settings) -> EngineConfig:
        return cls(
            preview_max_dimension=settings.preview_max_dimension,
            export_max_dimension=settings.export_max_dimension,
            jpeg_quality=settings.jpeg_quality,
            watermark_text=settings.watermark_text,
        )
