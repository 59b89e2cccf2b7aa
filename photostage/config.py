"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    photostage_env: str = "development"
    photostage_log_level: str = "debug"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Segmentation model (U2NetP ONNX export)
    model_path: str = "models/u2netp.onnx"
    # Relative layer paths in theme descriptors resolve against this directory
    asset_root: str = "."

    # Render output
    preview_max_dimension: int = 1200
    export_max_dimension: int = 2048
    jpeg_quality: int = 92
    watermark_text: str = "PhotoStage"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        # model_path would otherwise trip the "model_" namespace guard
        "protected_namespaces": ("settings_",),
    }


settings = Settings()
