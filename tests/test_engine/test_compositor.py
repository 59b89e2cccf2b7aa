"""Tests for the compositor: resolution policy, draw order, parity, failures."""

import pytest
from PIL import Image

from photostage.engine.compositor import compute_output_size, render, upscale_ratio
from photostage.engine.context import RenderRequest
from photostage.engine.pipeline import RenderPipeline
from photostage.engine.registry import RenderPhase, StageRegistry, StageSpec
from photostage.errors import RenderError
from photostage.models.editing import (
    AdjustmentBundle,
    MaskStroke,
    PaintMode,
    RenderMode,
    SubjectTransform,
)
from photostage.models.theme import ShadowConfig, ThemeLayer
from tests.conftest import BLUE, GREEN, make_theme, png_bytes, png_data_url, solid

PLACED = SubjectTransform(x=100, y=280, scale_x=2, scale_y=2)


def _request(theme, subject, **kwargs) -> RenderRequest:
    kwargs.setdefault("transform", PLACED)
    return RenderRequest(theme=theme, subject=subject, **kwargs)


def _is_red(px) -> bool:
    return px[0] > 245 and px[1] < 10 and px[2] < 10


def _is_blue(px) -> bool:
    return px[0] < 10 and px[1] < 10 and px[2] > 245


# --- geometry -----------------------------------------------------------------

def test_export_caps_longest_side():
    assert compute_output_size(3000, 4000, RenderMode.EXPORT) == (1536, 2048)


def test_preview_is_proportionally_smaller():
    assert compute_output_size(3000, 4000, RenderMode.PREVIEW) == (900, 1200)


def test_small_theme_never_upscaled():
    assert compute_output_size(400, 600, RenderMode.EXPORT) == (400, 600)
    assert compute_output_size(400, 600, RenderMode.PREVIEW) == (400, 600)


def test_upscale_ratio():
    assert upscale_ratio(1200, 400) == 3
    assert upscale_ratio(1200, None) == 1


# --- draw order -----------------------------------------------------------------

def test_preview_draws_background_subject_foreground(theme, subject):
    result = render(_request(theme, subject))
    frame = result.frame

    assert (result.width, result.height) == (400, 600)
    assert result.encoded[:2] == b"\xff\xd8"
    assert result.skipped_layers == []
    assert _is_blue(frame.getpixel((20, 300)))
    assert _is_red(frame.getpixel((200, 330)))
    # Foreground band is drawn over everything in the top rows
    fg = frame.getpixel((200, 20))
    assert fg[1] > 245 and fg[0] < 10


def test_invisible_layer_not_drawn(subject):
    theme = make_theme()
    theme.layers[1].visible = False
    frame = render(_request(theme, subject)).frame
    assert _is_blue(frame.getpixel((200, 20)))


def test_adjustments_applied_to_subject(theme, subject):
    result = render(_request(theme, subject, adjustments=AdjustmentBundle(brightness=-0.2)))
    r = result.frame.getpixel((200, 330))[0]
    assert 200 <= r <= 206  # 255 − 51


def test_mask_strokes_reveal_background(theme, subject):
    # Erase the left half of the subject (native x < 50)
    stroke = MaskStroke(points=[(0, 25), (25, 25)], radius=30, mode=PaintMode.ERASE)
    frame = render(_request(theme, subject, strokes=[stroke])).frame
    assert _is_blue(frame.getpixel((130, 330)))
    assert _is_red(frame.getpixel((270, 330)))


def test_shadow_drawn_behind_subject(subject):
    theme = make_theme(
        shadow=ShadowConfig(enabled=True, angle=0, distance=20, blur=0, opacity=1.0)
    )
    frame = render(_request(theme, subject)).frame
    # Subject covers x 100..300; the shadow sticks out 20px to the right
    px = frame.getpixel((310, 330))
    assert px[0] < 10 and px[1] < 10 and px[2] < 10
    assert _is_red(frame.getpixel((290, 330)))


def test_shadow_offset_upscaled_but_blur_in_output_pixels(subject):
    # Stage is half the output size: the 20px offset becomes 40px, the blur stays 4px
    staged = SubjectTransform(x=50, y=140, scale_x=1, scale_y=1)

    def frame_for(blur: float):
        theme = make_theme(
            shadow=ShadowConfig(enabled=True, angle=0, distance=20, blur=blur, opacity=1.0)
        )
        request = _request(theme, subject, transform=staged, stage_width=200, stage_height=300)
        return render(request).frame

    sharp = frame_for(0)
    assert sharp.getpixel((330, 330))[2] < 10
    assert _is_blue(sharp.getpixel((350, 330)))

    # Shadow edge at x=340; +-8px is two sigma in output space
    soft = frame_for(4)
    assert soft.getpixel((331, 330))[2] < 25
    assert 90 < soft.getpixel((340, 330))[2] < 170
    assert soft.getpixel((348, 330))[2] > 235
    assert _is_red(soft.getpixel((290, 330)))


def test_disabled_shadow_leaves_background(theme, subject):
    frame = render(_request(theme, subject)).frame
    assert _is_blue(frame.getpixel((310, 330)))


def test_no_subject_renders_layers_only(theme):
    result = render(RenderRequest(theme=theme, subject=None))
    assert _is_blue(result.frame.getpixel((200, 330)))


# --- modes ----------------------------------------------------------------------

def test_export_adds_watermark(theme, subject):
    preview = render(_request(theme, subject, mode=RenderMode.PREVIEW)).frame
    export = render(_request(theme, subject, mode=RenderMode.EXPORT)).frame
    # Pill in the top-right corner darkens the backdrop
    assert export.getpixel((385, 80)) == preview.getpixel((385, 80))
    assert export.getpixel((385, 30))[1] < preview.getpixel((385, 30))[1]


def test_export_uses_high_resolution_source(subject):
    theme = make_theme()
    theme.layers[0].export_source = png_data_url(solid(40, 60, GREEN))
    preview = render(_request(theme, subject, mode=RenderMode.PREVIEW)).frame
    export = render(_request(theme, subject, mode=RenderMode.EXPORT)).frame
    assert _is_blue(preview.getpixel((20, 300)))
    assert export.getpixel((20, 300))[1] > 245


def test_preview_export_parity(subject):
    theme = make_theme(width=2400, height=3200)
    results = {
        mode: render(
            _request(theme, subject, mode=mode, stage_width=400, stage_height=400 * 3200 / 2400)
        )
        for mode in RenderMode
    }
    preview, export = results[RenderMode.PREVIEW], results[RenderMode.EXPORT]
    assert (preview.width, preview.height) == (900, 1200)
    assert (export.width, export.height) == (1536, 2048)

    # The same fractional spot lands inside the subject in both frames
    for res in (preview, export):
        k = res.width / 400
        inside = (round(200 * k), round(330 * k))
        outside = (round(60 * k), round(330 * k))
        assert _is_red(res.frame.getpixel(inside))
        assert _is_blue(res.frame.getpixel(outside))


# --- failures -------------------------------------------------------------------

def test_broken_layer_is_skipped(subject):
    theme = make_theme()
    theme.layers.append(ThemeLayer(source="does/not/exist.png", z_index=5))
    result = render(_request(theme, subject))
    assert result.skipped_layers == ["does/not/exist.png"]
    assert _is_red(result.frame.getpixel((200, 330)))


def test_layer_paths_confined_to_asset_root(tmp_path, subject):
    assets = tmp_path / "assets"
    outside = tmp_path / "outside"
    assets.mkdir()
    outside.mkdir()
    (outside / "secret.png").write_bytes(png_bytes(solid(40, 60, GREEN)))
    (assets / "floor.png").write_bytes(png_bytes(solid(40, 60, BLUE)))

    theme = make_theme(layers=[
        ThemeLayer(source="floor.png", z_index=0),
        ThemeLayer(source=str(outside / "secret.png"), z_index=5),
        ThemeLayer(source="../outside/secret.png", z_index=6),
    ])
    result = render(_request(theme, subject), asset_root=assets)

    assert result.skipped_layers == [str(outside / "secret.png"), "../outside/secret.png"]
    assert _is_blue(result.frame.getpixel((20, 300)))
    assert _is_red(result.frame.getpixel((200, 330)))


def test_oversized_layer_is_skipped(monkeypatch, theme, subject):
    # 40x60 layers exceed twice this limit, which Pillow refuses to open
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
    result = render(_request(theme, subject))
    assert len(result.skipped_layers) == 2
    assert _is_red(result.frame.getpixel((200, 330)))


def test_stage_failure_raises_render_error(theme, subject):
    reg = StageRegistry()

    def explode(ctx) -> None:
        raise MemoryError("canvas too large")

    reg.register(StageSpec(id="S1", phase=RenderPhase.BACKGROUND, fn=explode))
    with pytest.raises(RenderError):
        render(_request(theme, subject), pipeline=RenderPipeline(registry=reg))
