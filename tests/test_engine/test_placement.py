"""Tests for the placement calculator."""

import pytest

from photostage.engine.placement import calculate_initial_placement
from photostage.models.theme import PlacementBox


def test_fit_scale_is_isotropic():
    box = PlacementBox(x=0.25, y=0.30, width=0.5, height=0.5)
    t = calculate_initial_placement(box, 400, 600, 100, 50)
    assert t.x == pytest.approx(100)
    assert t.y == pytest.approx(280)
    assert t.scale_x == pytest.approx(2)
    assert t.scale_y == pytest.approx(2)
    assert t.rotation == 0


def test_legacy_percentages_give_same_transform():
    fractional = PlacementBox(x=0.25, y=0.30, width=0.5, height=0.5)
    legacy = PlacementBox(x=25, y=30, width=50, height=50)
    a = calculate_initial_placement(fractional, 400, 600, 100, 50)
    b = calculate_initial_placement(legacy, 400, 600, 100, 50)
    assert a.model_dump() == pytest.approx(b.model_dump())


@pytest.mark.parametrize("anchor, expected_y", [("top", 180), ("center", 280), ("bottom", 380)])
def test_anchor(anchor, expected_y):
    box = PlacementBox(x=0.25, y=0.30, width=0.5, height=0.5, anchor=anchor)
    t = calculate_initial_placement(box, 400, 600, 100, 50)
    assert t.x == pytest.approx(100)
    assert t.y == pytest.approx(expected_y)


def test_rotation_copied_from_box():
    box = PlacementBox(rotation=-12.5)
    t = calculate_initial_placement(box, 400, 600, 100, 50)
    assert t.rotation == -12.5


def test_tall_subject_limited_by_height():
    box = PlacementBox(x=0, y=0, width=1, height=1)
    t = calculate_initial_placement(box, 100, 100, 50, 200)
    assert t.scale_x == pytest.approx(0.5)
    assert t.x == pytest.approx(37.5)
    assert t.y == pytest.approx(0)


@pytest.mark.parametrize("dims", [(0, 600, 100, 50), (400, 600, 0, 50), (400, 600, 100, -1)])
def test_invalid_dimensions(dims):
    with pytest.raises(ValueError):
        calculate_initial_placement(PlacementBox(), *dims)
