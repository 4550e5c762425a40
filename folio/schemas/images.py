"""Image reference and resolved image schemas."""

from __future__ import annotations

import math
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

ImageFormat = Literal["auto", "webp", "jpeg", "png"]
ResizeMode = Literal["cover", "contain", "fill"]

IMAGE_FORMATS: frozenset[str] = frozenset({"auto", "webp", "jpeg", "png"})
RESIZE_MODES: frozenset[str] = frozenset({"cover", "contain", "fill"})

_FORMAT_ALIASES = {"jpg": "jpeg", "origin": "auto"}


class FocalPoint(BaseModel):
    """Fractional position of the subject of interest within an image."""

    model_config = ConfigDict(frozen=True)

    x: float = Field(ge=0.0, le=1.0)
    y: float = Field(ge=0.0, le=1.0)


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def coerce_focal_point(value: Any) -> FocalPoint | None:
    """Coerce a stored focal point into fractions, or None when unusable.

    Accepts `{x, y}` mappings, `(x, y)` pairs and FocalPoint instances. The
    editor stores percentages (0-100); any coordinate above 1 switches the
    pair to percentage interpretation.
    """
    if value is None:
        return None
    if isinstance(value, FocalPoint):
        return value
    if isinstance(value, dict):
        raw_x, raw_y = value.get("x"), value.get("y")
    elif isinstance(value, list | tuple) and len(value) == 2:
        raw_x, raw_y = value
    else:
        return None

    x, y = _as_float(raw_x), _as_float(raw_y)
    if x is None or y is None:
        return None
    if x < 0 or y < 0 or x > 100 or y > 100:
        return None
    if x > 1 or y > 1:
        x, y = x / 100.0, y / 100.0
    return FocalPoint(x=x, y=y)


def _positive_int(value: Any) -> int | None:
    number = _as_float(value)
    if number is None or number <= 0 or number != int(number):
        return None
    return int(number)


class ImageSource(BaseModel):
    """Structured image reference as stored in content and cover fields.

    Override values that do not validate are dropped rather than rejected so a
    sloppy payload still yields an image.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    url: str | None = None
    src: str | None = None
    path: str | None = None
    width: int | None = None
    height: int | None = None
    quality: int | None = None
    format: ImageFormat | None = None
    resize_mode: ResizeMode | None = Field(
        default=None,
        validation_alias=AliasChoices("resize_mode", "resizeMode", "resize"),
    )
    focal_point: FocalPoint | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "focal_point", "focalPoint", "focus_point", "focusPoint", "focus"
        ),
    )
    original_width: int | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "original_width", "originalWidth", "natural_width", "naturalWidth"
        ),
    )
    original_height: int | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "original_height", "originalHeight", "natural_height", "naturalHeight"
        ),
    )

    @field_validator("url", "src", "path", mode="before")
    @classmethod
    def _location_string(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None

    @field_validator("width", "height", "original_width", "original_height", mode="before")
    @classmethod
    def _dimension(cls, value: Any) -> int | None:
        return _positive_int(value)

    @field_validator("quality", mode="before")
    @classmethod
    def _quality(cls, value: Any) -> int | None:
        number = _positive_int(value)
        if number is None:
            return None
        return min(number, 100)

    @field_validator("format", mode="before")
    @classmethod
    def _format(cls, value: Any) -> str | None:
        if not isinstance(value, str):
            return None
        normalized = value.strip().lower()
        normalized = _FORMAT_ALIASES.get(normalized, normalized)
        return normalized if normalized in IMAGE_FORMATS else None

    @field_validator("resize_mode", mode="before")
    @classmethod
    def _resize_mode(cls, value: Any) -> str | None:
        if not isinstance(value, str):
            return None
        normalized = value.strip().lower()
        return normalized if normalized in RESIZE_MODES else None

    @field_validator("focal_point", mode="before")
    @classmethod
    def _focal_point(cls, value: Any) -> FocalPoint | None:
        return coerce_focal_point(value)

    def location(self) -> str | None:
        """Return the authoritative location: `url`, then `src`, then `path`."""
        for candidate in (self.url, self.src, self.path):
            if candidate and candidate.strip():
                return candidate.strip()
        return None


ImageReference = str | ImageSource | dict[str, Any]


def coerce_image_source(value: Any) -> ImageSource | None:
    """Turn a bare URL, mapping or ImageSource into an ImageSource with a location."""
    if isinstance(value, ImageSource):
        source = value
    elif isinstance(value, str):
        source = ImageSource(url=value)
    elif isinstance(value, dict):
        source = ImageSource.model_validate(value)
    else:
        return None
    return source if source.location() else None


class ImageTransformOptions(BaseModel):
    """Explicit transform parameters that override preset defaults."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)
    quality: int | None = Field(default=None, ge=1, le=100)
    format: ImageFormat | None = None
    resize_mode: ResizeMode | None = Field(
        default=None,
        validation_alias=AliasChoices("resize_mode", "resizeMode", "resize"),
    )


class CropWindow(BaseModel):
    """Crop rectangle in source pixel coordinates."""

    model_config = ConfigDict(frozen=True)

    left: int
    top: int
    width: int
    height: int

    def as_param(self) -> str:
        return f"{self.left},{self.top},{self.width},{self.height}"

    def contains(self, x: float, y: float) -> bool:
        """Whether a source pixel coordinate lies inside the window (edges included)."""
        return (
            self.left <= x <= self.left + self.width
            and self.top <= y <= self.top + self.height
        )


class ResolvedImage(BaseModel):
    """Concrete delivery URL plus geometry hints for one render pass."""

    model_config = ConfigDict(frozen=True)

    delivery_url: str
    width: int | None = None
    height: int | None = None
    format: ImageFormat = "auto"
    resize_mode: ResizeMode = "contain"
    crop: CropWindow | None = None


class SrcSet(BaseModel):
    """Responsive `srcset`/`sizes` attribute pair."""

    srcset: str
    sizes: str
