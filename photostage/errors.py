"""Engine exceptions. Segmentation reports these as results; rendering raises them."""

from __future__ import annotations


class PhotoStageError(Exception):
    """Base class for all engine failures."""


class DecodeError(PhotoStageError):
    """A photo could not be decoded into pixels."""


class InferenceInitError(PhotoStageError):
    """The inference runtime or model failed to initialize. Retryable."""


class InferenceRunError(PhotoStageError):
    """A single inference invocation failed."""


class LayerLoadError(PhotoStageError):
    """A theme layer image failed to load during composition."""

    def __init__(self, source: str, message: str):
        super().__init__(message)
        self.source = source


class EncodeError(PhotoStageError):
    """The final frame could not be serialized."""


class RenderError(PhotoStageError):
    """A render was aborted; the caller should offer a retry."""

    def __init__(self, stage_id: str, message: str):
        super().__init__(f"{stage_id}: {message}")
        self.stage_id = stage_id
