"""Deterministic renderer for normalized content blocks."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from html import escape
from typing import Any
from urllib.parse import urlsplit

from folio.schemas.blocks import (
    BLOCK_KINDS,
    CodeBlock,
    ContentBlock,
    DividerBlock,
    EmbedBlock,
    GalleryBlock,
    HeadingBlock,
    ImageBlock,
    ListBlock,
    ParagraphBlock,
    QuoteBlock,
    UnknownBlock,
)
from folio.services.focal_crop import object_position
from folio.services.image_resolver import ImageResolver, get_image_resolver


def _safe_text(value: Any) -> str:
    if value is None:
        return ""
    return escape(str(value), quote=True)


def _anchor(block: ContentBlock) -> str:
    return f' id="{_safe_text(block.id)}"' if block.id else ""


def _is_http_url(url: str) -> bool:
    return urlsplit(url).scheme in {"http", "https"}


def _render_paragraph(block: ParagraphBlock, resolver: ImageResolver) -> str:
    return f"<p{_anchor(block)}>{_safe_text(block.text)}</p>"


def _render_heading(block: HeadingBlock, resolver: ImageResolver) -> str:
    tag = f"h{block.level}"
    return f"<{tag}{_anchor(block)}>{_safe_text(block.text)}</{tag}>"


def _render_image(block: ImageBlock, resolver: ImageResolver) -> str:
    resolved = resolver.resolve(block.image, "full", block.focal_point)
    if resolved is None:
        return ""
    size_attrs = ""
    if resolved.width:
        size_attrs += f' width="{resolved.width}"'
    if resolved.height:
        size_attrs += f' height="{resolved.height}"'
    caption = f"<figcaption>{_safe_text(block.caption)}</figcaption>" if block.caption else ""
    return (
        f'<figure data-block-type="image"{_anchor(block)}>'
        f'<img src="{_safe_text(resolved.delivery_url)}" alt="{_safe_text(block.alt)}"'
        f'{size_attrs} style="object-position: {object_position(block.focal_point)}"'
        f' loading="lazy">{caption}</figure>'
    )


def _render_gallery(block: GalleryBlock, resolver: ImageResolver) -> str:
    items: list[str] = []
    for entry in block.images:
        resolved = resolver.resolve(entry.image, "gallery", entry.focal_point)
        if resolved is None:
            continue
        srcset = resolver.build_srcset(entry.image, focus=entry.focal_point)
        srcset_attrs = (
            f' srcset="{_safe_text(srcset.srcset)}" sizes="{_safe_text(srcset.sizes)}"'
            if srcset and srcset.srcset
            else ""
        )
        caption = f"<figcaption>{_safe_text(entry.caption)}</figcaption>" if entry.caption else ""
        items.append(
            f'<figure><img src="{_safe_text(resolved.delivery_url)}" alt="{_safe_text(entry.alt)}"'
            f'{srcset_attrs} style="object-position: {object_position(entry.focal_point)}"'
            f' loading="lazy">{caption}</figure>'
        )
    style = f' data-style="{_safe_text(block.style)}"' if block.style else ""
    return f'<div class="gallery" data-block-type="gallery"{style}{_anchor(block)}>{"".join(items)}</div>'


def _render_code(block: CodeBlock, resolver: ImageResolver) -> str:
    language = _safe_text(block.language)
    return (
        f'<pre{_anchor(block)}><code class="language-{language}">'
        f"{_safe_text(block.source)}</code></pre>"
    )


def _render_embed(block: EmbedBlock, resolver: ImageResolver) -> str:
    if not _is_http_url(block.url):
        return ""
    provider = f' data-provider="{_safe_text(block.provider)}"' if block.provider else ""
    title = _safe_text(block.title or block.provider or "Embedded content")
    return (
        f'<div class="embed" data-block-type="embed"{provider}{_anchor(block)}>'
        f'<iframe src="{_safe_text(block.url)}" title="{title}" loading="lazy"'
        f' allowfullscreen></iframe></div>'
    )


def _render_quote(block: QuoteBlock, resolver: ImageResolver) -> str:
    footer = f"<footer>{_safe_text(block.attribution)}</footer>" if block.attribution else ""
    return f"<blockquote{_anchor(block)}><p>{_safe_text(block.text)}</p>{footer}</blockquote>"


def _render_list(block: ListBlock, resolver: ImageResolver) -> str:
    tag = "ol" if block.ordered else "ul"
    items = "".join(f"<li>{_safe_text(item)}</li>" for item in block.items)
    return f"<{tag}{_anchor(block)}>{items}</{tag}>"


def _render_divider(block: DividerBlock, resolver: ImageResolver) -> str:
    return "<hr>"


def _render_unknown(block: UnknownBlock, resolver: ImageResolver) -> str:
    return ""


RENDERERS: dict[str, Callable[[Any, ImageResolver], str]] = {
    "paragraph": _render_paragraph,
    "heading": _render_heading,
    "image": _render_image,
    "gallery": _render_gallery,
    "code": _render_code,
    "embed": _render_embed,
    "quote": _render_quote,
    "list": _render_list,
    "divider": _render_divider,
    "unknown": _render_unknown,
}

if set(RENDERERS) != BLOCK_KINDS:
    raise RuntimeError(
        f"Block renderers out of sync with BLOCK_KINDS: {sorted(set(RENDERERS) ^ BLOCK_KINDS)}"
    )


def render_block(block: ContentBlock, resolver: ImageResolver | None = None) -> str:
    return RENDERERS[block.kind](block, resolver or get_image_resolver())


def render_blocks(blocks: Iterable[ContentBlock], resolver: ImageResolver | None = None) -> str:
    """Render semantic article HTML from normalized blocks."""
    active = resolver or get_image_resolver()
    body = "".join(render_block(block, active) for block in blocks)
    return f"<article>{body}</article>"
