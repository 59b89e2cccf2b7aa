"""FastAPI dependency injection."""

from __future__ import annotations

from photostage.config import Settings, settings
from photostage.engine.config import EngineConfig
from photostage.engine.segmentation import InferenceEngine
from photostage.engine.segmentation import get_inference_engine as _get_engine


def get_settings() -> Settings:
    return settings


def get_engine_config() -> EngineConfig:
    return EngineConfig.from_settings(settings)


def get_inference_engine() -> InferenceEngine:
    return _get_engine(settings.model_path)
