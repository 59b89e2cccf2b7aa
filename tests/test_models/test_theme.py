"""Tests for theme and editing models."""

import pytest
from pydantic import ValidationError

from photostage.models.editing import AdjustmentBundle
from photostage.models.theme import PlacementBox, ThemeDescriptor, ThemeLayer


def test_default_placement_box():
    box = ThemeDescriptor(width=100, height=100).placement
    assert (box.x, box.y, box.width, box.height, box.anchor) == (0.25, 0.30, 0.5, 0.5, "center")


def test_legacy_box_normalized_uniformly():
    box = PlacementBox(x=25, y=30, width=50, height=50)
    assert (box.x, box.y, box.width, box.height) == pytest.approx((0.25, 0.30, 0.5, 0.5))


def test_one_legacy_field_marks_whole_box():
    box = PlacementBox(x=0.5, y=0.5, width=60, height=0.5)
    assert (box.x, box.y, box.width, box.height) == pytest.approx((0.005, 0.005, 0.6, 0.005))


def test_fractional_box_untouched():
    box = PlacementBox(x=1, y=0, width=1, height=1)
    assert (box.x, box.width) == (1, 1)


def test_bad_anchor_rejected():
    with pytest.raises(ValidationError):
        PlacementBox(anchor="left")


def test_layer_on_subject_slot_rejected():
    with pytest.raises(ValidationError):
        ThemeDescriptor(
            width=10, height=10, subject_z_index=1,
            layers=[ThemeLayer(source="a.png", z_index=1)],
        )


def test_layers_split_around_subject():
    theme = ThemeDescriptor(
        width=10,
        height=10,
        subject_z_index=3,
        layers=[
            ThemeLayer(source="top.png", z_index=7),
            ThemeLayer(source="back.png", z_index=0),
            ThemeLayer(source="hidden.png", z_index=5, visible=False),
            ThemeLayer(source="mid.png", z_index=2),
            ThemeLayer(source="front.png", z_index=4),
        ],
    )
    assert [l.source for l in theme.layers_below()] == ["back.png", "mid.png"]
    assert [l.source for l in theme.layers_above()] == ["front.png", "top.png"]


def test_export_source_fallback():
    plain = ThemeLayer(source="low.png")
    hi = ThemeLayer(source="low.png", export_source="high.png")
    assert plain.source_for(export=True) == "low.png"
    assert hi.source_for(export=True) == "high.png"
    assert hi.source_for(export=False) == "low.png"


def test_adjustments_out_of_range_rejected():
    with pytest.raises(ValidationError):
        AdjustmentBundle(brightness=1.5)
    with pytest.raises(ValidationError):
        AdjustmentBundle(contrast=-101)


def test_clamped_to_ui():
    bundle = AdjustmentBundle(brightness=0.9, contrast=-80, vibrance=0.1, warmth=-1)
    clamped = bundle.clamped_to_ui()
    assert clamped == AdjustmentBundle(brightness=0.5, contrast=-50, vibrance=0.1, warmth=-0.5)
