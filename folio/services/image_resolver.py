"""Resolve image references into managed-store transform URLs.

The managed store serves originals under a public object prefix and
on-the-fly transforms under a render prefix with query parameters. Anything
not hosted there is passed through untouched, as are object names the render
endpoint is known to reject. Resolution performs no I/O and never raises: a
reference without a location resolves to None, and any step that cannot
produce a confident transform falls back to the original URL.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import Any
from urllib.parse import parse_qsl, unquote, urlencode, urlsplit, urlunsplit

from pydantic import ValidationError

from folio.config import Settings, settings
from folio.schemas.images import (
    CropWindow,
    FocalPoint,
    ImageFormat,
    ImageReference,
    ImageSource,
    ImageTransformOptions,
    ResizeMode,
    ResolvedImage,
    SrcSet,
    coerce_focal_point,
    coerce_image_source,
)
from folio.services.focal_crop import compute_crop_window

logger = logging.getLogger(__name__)

DEFAULT_SRCSET_WIDTHS: tuple[int, ...] = (400, 800, 1200, 1600)
DEFAULT_SRCSET_SIZES = "(max-width: 640px) 100vw, (max-width: 1024px) 50vw, 33vw"

# Query keys that mark a URL as already transformed
_TRANSFORM_MARKERS = frozenset({"width", "resize"})

# Object paths the render endpoint rejects; served untransformed instead
MAX_TRANSFORMABLE_PATH_LENGTH = 200
_TIMESTAMP_SUFFIX = re.compile(r"-\d{10,}\.")
_UNSAFE_PATH = re.compile(r"-{3,}|[^\w\s./-]", re.ASCII)


@dataclass(frozen=True, slots=True)
class ImagePreset:
    """Named bundle of default transform parameters."""

    width: int
    resize_mode: ResizeMode
    height: int | None = None
    quality: int | None = None
    format: ImageFormat | None = None


IMAGE_PRESETS: dict[str, ImagePreset] = {
    "thumbnail": ImagePreset(width=400, resize_mode="cover"),
    "card": ImagePreset(width=900, resize_mode="cover"),
    "hero": ImagePreset(width=1920, resize_mode="contain"),
    "gallery": ImagePreset(width=1600, resize_mode="contain"),
    "full": ImagePreset(width=2400, resize_mode="contain"),
}

PresetArg = str | ImageTransformOptions | Mapping[str, Any]


class _Unresolvable(Exception):
    """Internal signal to fall back to the untransformed URL."""


def _first(*values: Any) -> Any:
    return next((value for value in values if value is not None), None)


class ImageResolver:
    """Build deterministic delivery URLs for managed-store images."""

    def __init__(
        self,
        app_settings: Settings | None = None,
        presets: Mapping[str, ImagePreset] | None = None,
    ) -> None:
        self.settings = app_settings or settings
        self.presets = dict(IMAGE_PRESETS if presets is None else presets)

    def is_managed_url(self, url: str) -> bool:
        """Whether a URL points at the managed object store."""
        parts = urlsplit(url)
        if parts.scheme not in {"http", "https"}:
            return False
        host = (parts.hostname or "").lower()
        suffix = self.settings.managed_storage_host_suffix.lower()
        if not suffix or not host.endswith(suffix):
            return False
        return parts.path.startswith(
            (
                self.settings.managed_storage_object_prefix,
                self.settings.managed_storage_render_prefix,
            )
        )

    def transform_blocker(self, url: str) -> str | None:
        """Why a URL must be served untransformed, or None when it can be resized."""
        if not self.is_managed_url(url):
            return "not a managed-store URL"
        if self._already_transformed(url):
            return "URL already carries transform parameters"

        file_path = self._object_file_path(url)
        if not file_path:
            return "no object path below the bucket"
        if len(file_path) > MAX_TRANSFORMABLE_PATH_LENGTH:
            return "object path too long for the render endpoint"
        if _TIMESTAMP_SUFFIX.search(file_path):
            return "object name has a timestamp suffix"
        if _UNSAFE_PATH.search(file_path):
            return "object path has characters the render endpoint rejects"
        return None

    def resolve(
        self,
        ref: ImageReference | None,
        preset: PresetArg = "full",
        focus: FocalPoint | Mapping[str, Any] | None = None,
    ) -> ResolvedImage | None:
        """Resolve one image reference; None means there is no image to show."""
        source = coerce_image_source(ref)
        if source is None:
            return None
        url = source.location()
        if url is None:
            return None

        try:
            return self._resolve_source(source, url, preset, focus)
        except _Unresolvable as exc:
            logger.debug("Image left untransformed", extra={"url": url, "reason": str(exc)})
        except Exception as exc:
            logger.warning(
                "Image transform failed; using original URL",
                extra={"url": url, "error": str(exc)},
            )
        return self._passthrough(url, source)

    def build_srcset(
        self,
        ref: ImageReference | None,
        widths: Sequence[int] = DEFAULT_SRCSET_WIDTHS,
        preset: str = "gallery",
        focus: FocalPoint | Mapping[str, Any] | None = None,
    ) -> SrcSet | None:
        """Responsive srcset across widths; unmanaged sources yield the bare URL."""
        source = coerce_image_source(ref)
        if source is None:
            return None
        url = source.location() or ""
        base = self.presets.get(preset.strip().lower())
        if base is None or self.transform_blocker(url) is not None:
            return SrcSet(srcset=url, sizes="100vw")

        candidates: list[str] = []
        for width in sorted(set(widths)):
            resolved = self.resolve(
                source,
                ImageTransformOptions(
                    width=width,
                    height=base.height,
                    quality=base.quality,
                    format=base.format,
                    resize_mode=base.resize_mode,
                ),
                focus,
            )
            if resolved is not None:
                candidates.append(f"{resolved.delivery_url} {width}w")
        return SrcSet(srcset=", ".join(candidates), sizes=DEFAULT_SRCSET_SIZES)

    def blur_placeholder(self, ref: ImageReference | None) -> str | None:
        """Tiny low-quality variant used as a loading placeholder."""
        resolved = self.resolve(
            ref,
            ImageTransformOptions(
                width=20,
                height=20,
                quality=20,
                format="jpeg",
                resize_mode="cover",
            ),
        )
        return resolved.delivery_url if resolved else None

    def _resolve_source(
        self,
        source: ImageSource,
        url: str,
        preset: PresetArg,
        focus: FocalPoint | Mapping[str, Any] | None,
    ) -> ResolvedImage:
        blocker = self.transform_blocker(url)
        if blocker is not None:
            raise _Unresolvable(blocker)

        named, custom = self._preset_options(preset)
        width = (
            _first(custom.width, source.width, self.settings.image_default_width)
            if custom is not None
            else _first(source.width, named.width)
        )
        custom = custom or ImageTransformOptions()
        height = _first(custom.height, source.height, named.height if named else None)
        quality = _first(
            custom.quality,
            source.quality,
            named.quality if named else None,
            self.settings.image_default_quality,
        )
        image_format = _first(custom.format, source.format, named.format if named else None, "auto")
        resize_mode = _first(
            custom.resize_mode,
            source.resize_mode,
            named.resize_mode if named else None,
            "contain",
        )

        params: dict[str, str] = {
            "width": str(width),
            "quality": str(quality),
            "resize": resize_mode,
        }
        if height is not None:
            params["height"] = str(height)
        if image_format != "auto":
            params["format"] = image_format

        crop: CropWindow | None = None
        focal = coerce_focal_point(focus) or source.focal_point
        if focal is not None and resize_mode == "cover":
            params["focal"] = f"{focal.x:.4f},{focal.y:.4f}"
            crop = self._crop_window(source, width, height, focal)
            if crop is not None:
                params["crop"] = crop.as_param()

        return ResolvedImage(
            delivery_url=self._build_url(url, params),
            width=width,
            height=height,
            format=image_format,
            resize_mode=resize_mode,
            crop=crop,
        )

    def _preset_options(
        self,
        preset: PresetArg,
    ) -> tuple[ImagePreset | None, ImageTransformOptions | None]:
        if isinstance(preset, ImageTransformOptions):
            return None, preset
        if isinstance(preset, Mapping):
            try:
                return None, ImageTransformOptions.model_validate(dict(preset))
            except ValidationError as exc:
                raise _Unresolvable(f"invalid transform options: {exc.error_count()} errors") from exc
        if isinstance(preset, str):
            named = self.presets.get(preset.strip().lower())
            if named is None:
                raise _Unresolvable(f"unknown preset {preset!r}")
            return named, None
        raise _Unresolvable(f"unsupported preset argument {type(preset).__name__}")

    @staticmethod
    def _crop_window(
        source: ImageSource,
        width: int | None,
        height: int | None,
        focal: FocalPoint,
    ) -> CropWindow | None:
        if not (source.original_width and source.original_height and width and height):
            return None
        try:
            return compute_crop_window(
                source.original_width,
                source.original_height,
                width,
                height,
                focal,
            )
        except ValueError:
            return None

    def _object_file_path(self, url: str) -> str:
        """Object name below the bucket, percent-decoded."""
        path = unquote(urlsplit(url).path)
        for prefix in (
            self.settings.managed_storage_object_prefix,
            self.settings.managed_storage_render_prefix,
        ):
            if path.startswith(prefix):
                _, _, file_path = path[len(prefix):].partition("/")
                return file_path
        return ""

    @staticmethod
    def _already_transformed(url: str) -> bool:
        keys = {key for key, _ in parse_qsl(urlsplit(url).query, keep_blank_values=True)}
        return bool(keys & _TRANSFORM_MARKERS)

    def _build_url(self, url: str, params: Mapping[str, str]) -> str:
        parts = urlsplit(url)
        path = parts.path
        object_prefix = self.settings.managed_storage_object_prefix
        if path.startswith(object_prefix):
            path = self.settings.managed_storage_render_prefix + path[len(object_prefix):]

        merged = dict(parse_qsl(parts.query, keep_blank_values=True))
        merged.update(params)
        query = urlencode(sorted(merged.items()), safe=",")
        return urlunsplit((parts.scheme, parts.netloc, path, query, parts.fragment))

    @staticmethod
    def _passthrough(url: str, source: ImageSource) -> ResolvedImage:
        return ResolvedImage(
            delivery_url=url,
            width=source.width,
            height=source.height,
            format=source.format or "auto",
            resize_mode=source.resize_mode or "contain",
        )


@lru_cache
def get_image_resolver() -> ImageResolver:
    """Resolver bound to the application settings."""
    return ImageResolver()


def resolve_image(
    ref: ImageReference | None,
    preset: PresetArg = "full",
    focus: FocalPoint | Mapping[str, Any] | None = None,
) -> ResolvedImage | None:
    """Module-level shortcut for `ImageResolver.resolve` with application settings."""
    return get_image_resolver().resolve(ref, preset, focus)
