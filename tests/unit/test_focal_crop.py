"""Unit tests for focal-point crop geometry."""

from __future__ import annotations

import pytest

from folio.schemas.images import CropWindow, FocalPoint
from folio.services.focal_crop import compute_crop_window, object_position


def test_square_crop_keeps_focal_point_near_left_edge() -> None:
    window = compute_crop_window(1000, 500, 500, 500, FocalPoint(x=0.05, y=0.5))

    assert window == CropWindow(left=0, top=0, width=500, height=500)
    assert window.left <= 50 <= window.left + window.width


def test_crop_is_centered_on_focus_when_bounds_allow() -> None:
    window = compute_crop_window(2000, 1000, 1000, 1000, FocalPoint(x=0.5, y=0.5))

    assert window == CropWindow(left=500, top=0, width=1000, height=1000)


def test_crop_without_focus_uses_center() -> None:
    assert compute_crop_window(1000, 500, 500, 500) == compute_crop_window(
        1000, 500, 500, 500, FocalPoint(x=0.5, y=0.5)
    )


def test_crop_clamps_to_right_and_bottom_edges() -> None:
    right = compute_crop_window(1000, 500, 500, 500, FocalPoint(x=1.0, y=0.5))
    bottom = compute_crop_window(500, 1000, 500, 500, FocalPoint(x=0.5, y=0.9))

    assert right.left == 500
    assert bottom.top == 500
    assert bottom.contains(250, 900)


def test_half_pixel_offsets_round_toward_centered_window() -> None:
    # 0.25 * 1002 - 250 == 0.5 exactly; centered offset is 251
    toward_center_from_left = compute_crop_window(1002, 500, 500, 500, FocalPoint(x=0.25, y=0.5))
    # 0.75 * 1002 - 250 == 501.5 exactly
    toward_center_from_right = compute_crop_window(1002, 500, 500, 500, FocalPoint(x=0.75, y=0.5))

    assert toward_center_from_left.left == 1
    assert toward_center_from_right.left == 501


def test_crop_matches_target_aspect_ratio() -> None:
    window = compute_crop_window(1600, 1200, 1920, 1080, FocalPoint(x=0.2, y=0.8))

    assert window.width == 1600
    assert window.height == 900
    assert window.top == 300
    assert window.contains(320, 960)


@pytest.mark.parametrize(
    "dimensions",
    [
        (0, 500, 100, 100),
        (500, -1, 100, 100),
        (500, 500, 0, 100),
        (500, 500, True, 100),
        (500.5, 500, 100, 100),
    ],
)
def test_invalid_dimensions_raise_value_error(dimensions: tuple) -> None:
    with pytest.raises(ValueError):
        compute_crop_window(*dimensions)


def test_object_position_formats_percentages() -> None:
    assert object_position(None) == "50% 50%"
    assert object_position(FocalPoint(x=0.05, y=0.5)) == "5% 50%"
    assert object_position(FocalPoint(x=0.125, y=1.0)) == "12.5% 100%"
