"""Shared test fixtures."""

from __future__ import annotations

import base64
import io
from types import SimpleNamespace

import numpy as np
import pytest
from PIL import Image

from photostage.models.theme import ThemeDescriptor, ThemeLayer

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)
GREEN = (0, 255, 0, 255)


def png_bytes(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def png_data_url(img: Image.Image) -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes(img)).decode("ascii")


def solid(width: int, height: int, color: tuple[int, int, int, int]) -> Image.Image:
    return Image.new("RGBA", (width, height), color)


def top_strip(width: int, height: int, rows: int, color: tuple[int, int, int, int]) -> Image.Image:
    """Transparent image with an opaque band across the top *rows*."""
    img = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    img.paste(color, (0, 0, width, rows))
    return img


def make_theme(width: int = 400, height: int = 600, **overrides) -> ThemeDescriptor:
    """Blue backdrop below the subject, green band above it."""
    layers = [
        ThemeLayer(source=png_data_url(solid(40, 60, BLUE)), z_index=0),
        ThemeLayer(source=png_data_url(top_strip(40, 60, 6, GREEN)), z_index=2),
    ]
    fields = dict(id="studio", name="Studio", width=width, height=height, layers=layers)
    fields.update(overrides)
    return ThemeDescriptor(**fields)


class FakeSession:
    """Stands in for an onnxruntime session: returns a fixed mask."""

    def __init__(self, mask: np.ndarray) -> None:
        self.mask = mask
        self.calls = 0

    def get_inputs(self):
        return [SimpleNamespace(name="input.1")]

    def run(self, output_names, feeds):
        self.calls += 1
        (tensor,) = feeds.values()
        assert tensor.dtype == np.float32
        return [self.mask]


def centered_square_mask(size: int = 320, margin: int = 80) -> np.ndarray:
    mask = np.zeros((1, 1, size, size), dtype=np.float32)
    mask[..., margin:size - margin, margin:size - margin] = 1.0
    return mask


@pytest.fixture
def theme() -> ThemeDescriptor:
    return make_theme()


@pytest.fixture
def subject() -> Image.Image:
    return solid(100, 50, RED)


@pytest.fixture
def photo_bytes() -> bytes:
    img = Image.new("RGB", (200, 100), (30, 120, 200))
    return png_bytes(img)
