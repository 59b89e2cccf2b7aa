"""Subject segmentation — photo in, cropped transparent cut-out out.

Pipeline:
  1. Decode → downscale to ≤ max_working_size (this working image replaces the original)
  2. Resize to model_input_size², RGB / 255, NCHW float32 (no mean/std)
  3. One U2NetP inference pass; first output is the mask
  4. Probe the first values; logistic squash the whole mask if any are out of [0, 1]
  5. Min–max stretch to 0–255, resample bilinearly to the working size
  6. Mask → alpha channel of the working image
  7. Crop to alpha > threshold, pad, clamp to bounds

Failures are reported through SegmentationResult, never raised.

The inference session is one lazily created, process-wide handle. Concurrent
first callers await the same pending initialization; a failed initialization
is dropped so the next call retries from scratch.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray
from PIL import Image
from scipy.special import expit

from photostage.engine.config import EngineConfig
from photostage.errors import InferenceInitError, InferenceRunError, PhotoStageError
from photostage.utils.imaging import decode_image, downscale_to_max

logger = logging.getLogger(__name__)

SessionFactory = Callable[[str], Any]


@dataclass
class SegmentationResult:
    success: bool
    image: Image.Image | None = None
    error: str | None = None
    error_type: str | None = None


# ---------------------------------------------------------------------------
# Inference engine handle
# ---------------------------------------------------------------------------

def create_onnx_session(model_path: str) -> Any:
    """Default session factory: CPU onnxruntime session, full graph optimization."""
    import onnxruntime as ort

    opts = ort.SessionOptions()
    opts.graph_optimization_level = ort.GraphOptimizationLevel.ORT_ENABLE_ALL
    opts.intra_op_num_threads = 1
    return ort.InferenceSession(
        model_path,
        sess_options=opts,
        providers=["CPUExecutionProvider"],
    )


def _run_session(session: Any, tensor: NDArray[np.float32]) -> NDArray[np.float32]:
    input_name = session.get_inputs()[0].name
    outputs = session.run(None, {input_name: tensor})
    return np.asarray(outputs[0], dtype=np.float32)


class InferenceEngine:
    """Lazily initialized inference session with a single pending initialization."""

    def __init__(
        self,
        model_path: str,
        session_factory: SessionFactory | None = None,
    ) -> None:
        self.model_path = model_path
        self._session_factory = session_factory or create_onnx_session
        self._session: Any = None
        self._pending: asyncio.Future | None = None

    @property
    def is_ready(self) -> bool:
        return self._session is not None

    async def ensure_ready(self) -> Any:
        """Return the session, creating it at most once across concurrent callers."""
        if self._session is not None:
            return self._session

        pending = self._pending
        if pending is None:
            logger.info("Initializing inference session from %s", self.model_path)
            loop = asyncio.get_running_loop()
            pending = loop.run_in_executor(None, self._session_factory, self.model_path)
            self._pending = pending

        try:
            session = await asyncio.shield(pending)
        except Exception as e:
            if self._pending is pending:
                self._pending = None
            if isinstance(e, InferenceInitError):
                raise
            raise InferenceInitError(f"inference session init failed: {e}") from e

        # An invalidate() during init leaves the result uncached.
        if self._pending is pending:
            self._pending = None
            self._session = session
        return session

    def invalidate(self) -> None:
        """Drop the cached session; the next call re-initializes."""
        self._session = None
        self._pending = None

    async def run(self, tensor: NDArray[np.float32]) -> NDArray[np.float32]:
        session = await self.ensure_ready()
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, _run_session, session, tensor)
        except Exception as e:
            raise InferenceRunError(f"inference failed: {e}") from e


_engine: InferenceEngine | None = None


def get_inference_engine(model_path: str | None = None) -> InferenceEngine:
    """Process-wide engine handle, created on first use.

    *model_path* only matters on the first call; later calls get the existing
    engine and a differing path is logged and ignored.
    """
    global _engine
    if _engine is None:
        if model_path is None:
            from photostage.config import settings

            model_path = settings.model_path
        _engine = InferenceEngine(model_path)
    elif model_path is not None and model_path != _engine.model_path:
        logger.warning(
            "Inference engine already uses %s; ignoring %s", _engine.model_path, model_path
        )
    return _engine


# ---------------------------------------------------------------------------
# Pipeline steps
# ---------------------------------------------------------------------------

def prepare_working_image(data: bytes | str, max_size: int) -> Image.Image:
    """Decode and downscale. The result is the canonical working image."""
    img = decode_image(data)
    working = downscale_to_max(img, max_size)
    img.close()
    return working


def build_input_tensor(working: Image.Image, size: int) -> NDArray[np.float32]:
    """(1, 3, size, size) float32 in [0, 1]."""
    resized = working.convert("RGB").resize((size, size), Image.Resampling.BILINEAR)
    arr = np.asarray(resized, dtype=np.float32) / 255.0
    return np.ascontiguousarray(arr.transpose(2, 0, 1)[None, ...])


def output_to_mask(raw: NDArray[np.float32]) -> NDArray[np.float32]:
    """First channel of the model output as a 2-D map (last two dims are H, W)."""
    if raw.ndim < 2:
        raise InferenceRunError(f"unexpected output shape {raw.shape}")
    h, w = raw.shape[-2], raw.shape[-1]
    return raw.reshape(-1, h, w)[0]


def squash_if_needed(
    mask: NDArray[np.float32],
    probe: int = 100,
    low: float = -0.01,
    high: float = 1.01,
) -> NDArray[np.float32]:
    """Logistic squash of the whole mask if any probed value is outside [low, high]."""
    head = mask.ravel()[:probe]
    if np.any((head < low) | (head > high)):
        return expit(mask).astype(np.float32)
    return mask


def stretch_to_alpha(mask: NDArray[np.float32], size: tuple[int, int]) -> Image.Image:
    """Min–max stretch to 0–255 and resample to *size* (width, height)."""
    lo, hi = float(mask.min()), float(mask.max())
    span = (hi - lo) or 1.0
    stretched = np.floor((mask - lo) / span * 255 + 0.5)
    alpha = Image.fromarray(np.clip(stretched, 0, 255).astype(np.uint8))
    return alpha.resize(size, Image.Resampling.BILINEAR)


def crop_to_content(img: Image.Image, threshold: int = 5, padding: int = 5) -> Image.Image:
    """Tight crop around alpha > threshold, padded and clamped to the image.

    If no pixel exceeds the threshold the image is returned uncropped.
    """
    alpha = np.asarray(img.getchannel("A"))
    visible = alpha > threshold
    rows = np.flatnonzero(visible.any(axis=1))
    cols = np.flatnonzero(visible.any(axis=0))
    if rows.size == 0:
        return img

    h, w = alpha.shape
    top = max(0, int(rows[0]) - padding)
    bottom = min(h - 1, int(rows[-1]) + padding)
    left = max(0, int(cols[0]) - padding)
    right = min(w - 1, int(cols[-1]) + padding)
    return img.crop((left, top, right + 1, bottom + 1))


def finish_cutout(
    working: Image.Image,
    raw: NDArray[np.float32],
    config: EngineConfig,
) -> Image.Image:
    mask = squash_if_needed(
        output_to_mask(raw),
        probe=config.squash_probe_count,
        low=config.squash_low,
        high=config.squash_high,
    )
    alpha = stretch_to_alpha(mask, working.size)
    cutout = working.convert("RGBA")
    cutout.putalpha(alpha)
    return crop_to_content(cutout, config.alpha_threshold, config.crop_padding)


async def remove_background(
    data: bytes | str,
    engine: InferenceEngine | None = None,
    config: EngineConfig | None = None,
) -> SegmentationResult:
    """Cut the dominant subject out of an encoded photo."""
    engine = engine or get_inference_engine()
    config = config or EngineConfig()
    loop = asyncio.get_running_loop()
    start = time.perf_counter()

    try:
        working = await loop.run_in_executor(
            None, prepare_working_image, data, config.max_working_size
        )
        tensor = await loop.run_in_executor(
            None, build_input_tensor, working, config.model_input_size
        )
        raw = await engine.run(tensor)
        cutout = await loop.run_in_executor(None, finish_cutout, working, raw, config)
    except PhotoStageError as e:
        logger.warning("Background removal failed (%s): %s", type(e).__name__, e)
        return SegmentationResult(success=False, error=str(e), error_type=type(e).__name__)
    except Exception as e:
        logger.exception("Background removal failed unexpectedly")
        return SegmentationResult(
            success=False,
            error=str(e) or "Background removal failed",
            error_type=type(e).__name__,
        )

    logger.info(
        "Background removed: %dx%d cut-out in %.0fms",
        cutout.width, cutout.height, (time.perf_counter() - start) * 1000,
    )
    return SegmentationResult(success=True, image=cutout)
