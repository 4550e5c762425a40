"""Focal-point crop geometry, independent of any image backend."""

from __future__ import annotations

import math

from folio.schemas.images import CropWindow, FocalPoint

CENTER = FocalPoint(x=0.5, y=0.5)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _place_window(focus_px: float, window: int, extent: int) -> int:
    """Offset of a window of `window` pixels centered on `focus_px` within `extent`.

    The offset is clamped so the window stays inside bounds. An offset exactly
    halfway between two pixels rounds toward the centered window's offset.
    """
    max_offset = extent - window
    clamped = min(max(focus_px - window / 2, 0.0), float(max_offset))

    lower, upper = math.floor(clamped), math.ceil(clamped)
    if lower == upper:
        return int(lower)
    fraction = clamped - lower
    if fraction < 0.5:
        return int(lower)
    if fraction > 0.5:
        return int(upper)

    centered = max_offset / 2
    return int(lower) if abs(lower - centered) <= abs(upper - centered) else int(upper)


def compute_crop_window(
    source_width: int,
    source_height: int,
    target_width: int,
    target_height: int,
    focus: FocalPoint | None = None,
) -> CropWindow:
    """Largest window with the target aspect ratio, biased toward the focal point.

    The window is centered on the focal point and then clamped into the image,
    so the point stays inside whenever the geometry allows it.
    """
    dimensions = (source_width, source_height, target_width, target_height)
    if any(isinstance(value, bool) or not isinstance(value, int) or value <= 0 for value in dimensions):
        raise ValueError(f"crop dimensions must be positive integers: {dimensions}")

    aspect = target_width / target_height
    if source_width / source_height > aspect:
        crop_height = source_height
        crop_width = min(source_width, max(1, _round_half_up(source_height * aspect)))
    else:
        crop_width = source_width
        crop_height = min(source_height, max(1, _round_half_up(source_width / aspect)))

    point = focus or CENTER
    return CropWindow(
        left=_place_window(point.x * source_width, crop_width, source_width),
        top=_place_window(point.y * source_height, crop_height, source_height),
        width=crop_width,
        height=crop_height,
    )


def _percent(value: float) -> str:
    text = f"{value * 100:.2f}".rstrip("0").rstrip(".")
    return f"{text}%"


def object_position(focus: FocalPoint | None) -> str:
    """CSS `object-position` value for client-side cropping."""
    point = focus or CENTER
    return f"{_percent(point.x)} {_percent(point.y)}"
