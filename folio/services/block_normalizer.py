"""Normalize raw stored content into the closed ContentBlock union.

Stored content comes in three shapes: a list of block-like objects (flat
`{"kind": ..., "text": ...}` or editor-style `{"id", "type", "content",
"metadata": {...}}`), a legacy plain string, or nothing. Every path returns a
list and never raises; malformed elements become `UnknownBlock` so list length
and order survive for index-based anchors.
"""

from __future__ import annotations

import copy
import logging
import re
from collections.abc import Callable, Iterator
from typing import Any
from urllib.parse import urlsplit

from bs4 import BeautifulSoup
from pydantic import ValidationError

from folio.schemas.blocks import (
    BLOCK_KINDS,
    CodeBlock,
    ContentBlock,
    DividerBlock,
    EmbedBlock,
    GalleryBlock,
    GalleryImage,
    HeadingBlock,
    ImageBlock,
    ListBlock,
    ParagraphBlock,
    QuoteBlock,
    UnknownBlock,
)
from folio.schemas.images import FocalPoint, ImageSource, coerce_focal_point, coerce_image_source

logger = logging.getLogger(__name__)

KIND_ALIASES = {
    "video": "embed",
    "text": "paragraph",
}

_EMBED_PROVIDERS = (
    ("youtube.com", "youtube"),
    ("youtu.be", "youtube"),
    ("vimeo.com", "vimeo"),
    ("sketchfab.com", "sketchfab"),
)

_WHITESPACE_PATTERN = re.compile(r"\s+")


class _MalformedBlock(ValueError):
    """Raised internally when an element does not fit its declared kind."""


def _lookup(element: dict[str, Any], *names: str) -> Any:
    """Return the first non-None value among flat fields, then `metadata` fields."""
    metadata = element.get("metadata")
    scopes = [element, metadata] if isinstance(metadata, dict) else [element]
    for scope in scopes:
        for name in names:
            value = scope.get(name)
            if value is not None:
                return value
    return None


def _text(element: dict[str, Any], *names: str) -> str | None:
    value = _lookup(element, *names)
    return value if isinstance(value, str) else None


def _required_text(element: dict[str, Any], *names: str) -> str:
    value = _text(element, *names)
    if value is None:
        raise _MalformedBlock(f"missing text field (one of {', '.join(names)})")
    return value


def _block_id(element: dict[str, Any]) -> str | None:
    value = element.get("id")
    if isinstance(value, str | int) and not isinstance(value, bool):
        return str(value)
    return None


def _focal(element: dict[str, Any]) -> FocalPoint | None:
    return coerce_focal_point(
        _lookup(element, "focal_point", "focalPoint", "focus_point", "focusPoint")
    )


def _declared_kind(element: dict[str, Any]) -> str | None:
    value = element.get("kind")
    if not isinstance(value, str):
        value = element.get("type")
    if not isinstance(value, str):
        return None
    return value.strip().lower() or None


def strip_inline_html(value: str) -> str:
    """Plain text from rich text: tags removed, entities unescaped, whitespace collapsed."""
    text = value
    if "<" in value or "&" in value:
        text = BeautifulSoup(value, "html.parser").get_text(" ", strip=True)
    return _WHITESPACE_PATTERN.sub(" ", text).strip()


def legacy_string_to_paragraph(text: str) -> list[ContentBlock]:
    """Wrap pre-block plain string content as a single paragraph."""
    if not text.strip():
        return []
    return [ParagraphBlock(text=text)]


def _paragraph(element: dict[str, Any]) -> ParagraphBlock:
    return ParagraphBlock(
        id=_block_id(element),
        text=_required_text(element, "text", "content", "html"),
    )


def _heading(element: dict[str, Any]) -> HeadingBlock:
    level = _lookup(element, "level")
    if isinstance(level, str) and level.strip().lower().startswith("h"):
        level = level.strip()[1:]
    payload: dict[str, Any] = {
        "id": _block_id(element),
        "text": _required_text(element, "text", "content"),
    }
    if level is not None:
        payload["level"] = level
    return HeadingBlock.model_validate(payload)


def _image_source(element: dict[str, Any]) -> ImageSource | None:
    nested = _lookup(element, "image", "source")
    if nested is not None:
        return coerce_image_source(nested)
    source = coerce_image_source(element)
    if source is not None:
        return source
    content = element.get("content")
    return coerce_image_source(content) if isinstance(content, str) else None


def _image(element: dict[str, Any]) -> ImageBlock:
    source = _image_source(element)
    if source is None:
        raise _MalformedBlock("image block without a location")
    return ImageBlock(
        id=_block_id(element),
        image=source,
        alt=_text(element, "alt", "alt_text", "altText") or "",
        caption=_text(element, "caption"),
        focal_point=_focal(element) or source.focal_point,
    )


def _gallery_entry(entry: Any) -> GalleryImage | None:
    if isinstance(entry, str):
        source = coerce_image_source(entry)
        return GalleryImage(image=source) if source else None
    if not isinstance(entry, dict):
        return None
    nested = entry.get("image")
    source = coerce_image_source(nested if nested is not None else entry)
    if source is None:
        return None
    alt = entry.get("alt")
    caption = entry.get("caption")
    return GalleryImage(
        image=source,
        alt=alt if isinstance(alt, str) else "",
        caption=caption if isinstance(caption, str) else None,
        focal_point=_focal(entry) or source.focal_point,
    )


def _gallery(element: dict[str, Any]) -> GalleryBlock:
    entries = _lookup(element, "images", "items")
    if entries is None and isinstance(element.get("content"), list):
        entries = element["content"]
    if not isinstance(entries, list):
        raise _MalformedBlock("gallery block without an image list")

    images = [image for image in (_gallery_entry(entry) for entry in entries) if image]
    dropped = len(entries) - len(images)
    if dropped:
        logger.debug(
            "Dropped gallery entries without a location",
            extra={"dropped": dropped, "kept": len(images)},
        )
    return GalleryBlock(
        id=_block_id(element),
        images=images,
        style=_text(element, "style", "galleryStyle"),
    )


def _code(element: dict[str, Any]) -> CodeBlock:
    language = _text(element, "language", "lang")
    return CodeBlock(
        id=_block_id(element),
        language=language.strip() if language and language.strip() else "plaintext",
        source=_required_text(element, "source", "code", "content"),
    )


def detect_embed_provider(url: str) -> str | None:
    host = (urlsplit(url).hostname or "").lower()
    for suffix, provider in _EMBED_PROVIDERS:
        if host == suffix or host.endswith(f".{suffix}"):
            return provider
    return None


def _embed(element: dict[str, Any]) -> EmbedBlock:
    url = _text(element, "url", "src", "content")
    if url is None or not url.strip():
        raise _MalformedBlock("embed block without a url")
    url = url.strip()
    declared = (_text(element, "provider", "videoType", "video_type") or "").strip().lower()
    provider = declared if declared and declared != "custom" else detect_embed_provider(url)
    return EmbedBlock(
        id=_block_id(element),
        url=url,
        provider=provider or declared or None,
        title=_text(element, "title", "caption"),
    )


def _quote(element: dict[str, Any]) -> QuoteBlock:
    return QuoteBlock(
        id=_block_id(element),
        text=_required_text(element, "text", "content"),
        attribution=_text(element, "attribution", "author", "cite"),
    )


def _list_item(item: Any) -> str | None:
    if isinstance(item, str):
        return item
    if isinstance(item, dict):
        value = item.get("text", item.get("content"))
        return value if isinstance(value, str) else None
    return None


def _list(element: dict[str, Any]) -> ListBlock:
    items = _lookup(element, "items")
    if items is None and isinstance(element.get("content"), str):
        items = [line for line in element["content"].splitlines() if line.strip()]
    if not isinstance(items, list):
        raise _MalformedBlock("list block without items")

    ordered = _lookup(element, "ordered")
    list_type = _text(element, "listType", "list_type")
    return ListBlock(
        id=_block_id(element),
        items=[text for text in (_list_item(item) for item in items) if text is not None],
        ordered=ordered is True or (list_type or "").lower() in {"numbered", "ordered"},
    )


def _divider(element: dict[str, Any]) -> DividerBlock:
    return DividerBlock(id=_block_id(element))


_BUILDERS: dict[str, Callable[[dict[str, Any]], ContentBlock]] = {
    "paragraph": _paragraph,
    "heading": _heading,
    "image": _image,
    "gallery": _gallery,
    "code": _code,
    "embed": _embed,
    "quote": _quote,
    "list": _list,
    "divider": _divider,
}

_BUILT_KINDS = BLOCK_KINDS - {"unknown"}
if set(_BUILDERS) != _BUILT_KINDS:
    raise RuntimeError(
        f"Block builders out of sync with BLOCK_KINDS: {sorted(set(_BUILDERS) ^ _BUILT_KINDS)}"
    )


def _unknown(element: Any, kind: str | None) -> UnknownBlock:
    try:
        raw = copy.deepcopy(element)
    except Exception:
        raw = repr(element)
    block_id = _block_id(element) if isinstance(element, dict) else None
    return UnknownBlock(id=block_id, original_kind=kind, raw=raw)


def normalize_block(element: Any, *, index: int = 0) -> ContentBlock:
    """Classify one stored element; anything that does not fit becomes `unknown`."""
    if not isinstance(element, dict):
        logger.debug("Non-object content block", extra={"index": index})
        return _unknown(element, None)

    declared = _declared_kind(element)
    kind = KIND_ALIASES.get(declared, declared) if declared else None
    builder = _BUILDERS.get(kind) if kind else None
    if builder is None:
        logger.debug("Unrecognized content block kind", extra={"index": index, "kind": declared})
        return _unknown(element, declared)

    try:
        return builder(element)
    except (_MalformedBlock, ValidationError, TypeError, ValueError) as exc:
        logger.debug(
            "Malformed content block",
            extra={"index": index, "kind": declared, "error": str(exc)},
        )
        return _unknown(element, declared)


def normalize_blocks(raw: Any) -> list[ContentBlock]:
    """Normalize a stored `content` value into an ordered block list."""
    if raw is None:
        return []
    if isinstance(raw, str):
        return legacy_string_to_paragraph(raw)
    if isinstance(raw, dict) and isinstance(raw.get("blocks"), list):
        raw = raw["blocks"]
    if not isinstance(raw, list | tuple):
        return []
    return [normalize_block(element, index=index) for index, element in enumerate(raw)]


def first_paragraph_text(blocks: list[ContentBlock]) -> str | None:
    """Plain text of the first paragraph that has any."""
    for block in blocks:
        if isinstance(block, ParagraphBlock):
            text = strip_inline_html(block.text)
            if text:
                return text
    return None


def iter_image_sources(
    blocks: list[ContentBlock],
) -> Iterator[tuple[ImageSource, FocalPoint | None]]:
    """Yield every image reference in document order with its focal point."""
    for block in blocks:
        if isinstance(block, ImageBlock):
            yield block.image, block.focal_point
        elif isinstance(block, GalleryBlock):
            for entry in block.images:
                yield entry.image, entry.focal_point
