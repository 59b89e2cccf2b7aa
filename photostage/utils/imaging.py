"""Image I/O and drawing helpers — decode, encode, warp, composite. No engine imports."""

from __future__ import annotations

import base64
import io
from pathlib import Path

import numpy as np
from PIL import Image, ImageFilter, ImageOps, UnidentifiedImageError

from photostage.errors import DecodeError, EncodeError
from photostage.utils.geometry import inverse_affine, round_half_up

_DATA_URL_PREFIX = "data:"


def decode_image(data: bytes | str) -> Image.Image:
    """Decode raw bytes or a data URL into an RGBA image.

    EXIF orientation is applied so the pixels match what a viewer shows.
    """
    if isinstance(data, str):
        data = _data_url_payload(data)
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise DecodeError(f"cannot decode image: {e}") from e
    img = ImageOps.exif_transpose(img)
    return img.convert("RGBA")


def load_image_ref(ref: str, root: str | Path = ".") -> Image.Image:
    """Load an image from a data URL or a local path under *root*.

    Relative paths resolve against *root*; any path that ends up outside it,
    absolute or through ``..``, is refused.
    """
    if ref.startswith(_DATA_URL_PREFIX):
        return decode_image(ref)
    base = Path(root).resolve()
    path = (base / ref).resolve()
    if not path.is_relative_to(base):
        raise DecodeError(f"{ref} is outside the asset root")
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise DecodeError(f"cannot read {path}: {e}") from e
    return decode_image(raw)


def _data_url_payload(value: str) -> bytes:
    """Accepts either raw base64 or a data URI (data:image/png;base64,...)."""
    header, _, payload = value.partition(",")
    if payload == "":
        payload = header
    try:
        return base64.b64decode(payload, validate=False)
    except ValueError as e:
        raise DecodeError(f"invalid base64 payload: {e}") from e


def to_data_url(img: Image.Image, fmt: str = "PNG", quality: int | None = None) -> str:
    data = encode_image(img, fmt=fmt, quality=quality)
    mime = "jpeg" if fmt.upper() in ("JPEG", "JPG") else fmt.lower()
    return f"data:image/{mime};base64,{base64.b64encode(data).decode('ascii')}"


def encode_image(img: Image.Image, fmt: str = "PNG", quality: int | None = None) -> bytes:
    buf = io.BytesIO()
    kwargs = {}
    if quality is not None:
        kwargs["quality"] = quality
    try:
        img.save(buf, format=fmt, **kwargs)
    except (OSError, ValueError, KeyError) as e:
        raise EncodeError(f"cannot encode {fmt}: {e}") from e
    return buf.getvalue()


def flatten(img: Image.Image, color: tuple[int, int, int] = (0, 0, 0)) -> Image.Image:
    """Composite RGBA over an opaque background, returning RGB."""
    base = Image.new("RGBA", img.size, color + (255,))
    base.alpha_composite(img.convert("RGBA"))
    return base.convert("RGB")


def downscale_to_max(img: Image.Image, max_dim: int) -> Image.Image:
    """Shrink so neither side exceeds *max_dim*, preserving aspect ratio."""
    w, h = img.size
    longest = max(w, h)
    if longest <= max_dim:
        return img.copy()
    scale = max_dim / longest
    new_size = (max(1, round_half_up(w * scale)), max(1, round_half_up(h * scale)))
    return img.resize(new_size, Image.Resampling.LANCZOS)


def warp_onto(
    size: tuple[int, int],
    source: Image.Image,
    *,
    x: float,
    y: float,
    rotation: float,
    scale_x: float,
    scale_y: float,
) -> Image.Image | None:
    """Render *source* into a transparent frame of *size* at the given affine placement.

    Returns None when the transform is degenerate (zero scale).
    """
    if scale_x == 0 or scale_y == 0:
        return None
    coeffs = inverse_affine(x, y, rotation, scale_x, scale_y)
    return source.convert("RGBA").transform(
        size,
        Image.Transform.AFFINE,
        coeffs,
        resample=Image.Resampling.BICUBIC,
        fillcolor=(0, 0, 0, 0),
    )


def gaussian_blur(img: Image.Image, sigma: float) -> Image.Image:
    """Blur in the image's own pixel space; *sigma* is never rescaled."""
    if sigma <= 0:
        return img
    return img.filter(ImageFilter.GaussianBlur(radius=sigma))


def scale_alpha(img: Image.Image, opacity: float) -> Image.Image:
    """Multiply the alpha channel by *opacity* (0-1)."""
    if opacity >= 1:
        return img
    arr = np.array(img.convert("RGBA"), dtype=np.float32)
    arr[..., 3] *= max(0.0, opacity)
    return Image.fromarray(np.clip(np.rint(arr), 0, 255).astype(np.uint8))
