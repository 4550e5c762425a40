"""Render PageMetadata as `<head>` markup."""

from __future__ import annotations

from html import escape

from folio.schemas.metadata import PageMetadata


def _attr(value: str) -> str:
    return escape(value, quote=True)


def _meta(attribute: str, key: str, content: str | None) -> str | None:
    if not content:
        return None
    return f'<meta {attribute}="{key}" content="{_attr(content)}">'


def page_title(title: str, site_name: str) -> str:
    """Title suffixed with the site name unless it already mentions it."""
    title = title.strip()
    if not title:
        return site_name
    if not site_name or site_name.lower() in title.lower():
        return title
    return f"{title} | {site_name}"


def render_head_tags(
    metadata: PageMetadata,
    site_name: str,
    *,
    twitter_handle: str | None = None,
) -> str:
    """Title, description, canonical, Open Graph, Twitter and JSON-LD tags."""
    full_title = page_title(metadata.title, site_name)
    image_url = metadata.og_image.delivery_url if metadata.og_image else None

    tags: list[str | None] = [
        f"<title>{escape(full_title)}</title>",
        _meta("name", "description", metadata.description),
        f'<link rel="canonical" href="{_attr(metadata.canonical_url)}">',
    ]
    if metadata.keywords:
        tags.append(_meta("name", "keywords", ", ".join(metadata.keywords)))
    if metadata.noindex:
        tags.append('<meta name="robots" content="noindex,nofollow">')

    tags.extend(
        [
            _meta("property", "og:title", full_title),
            _meta("property", "og:description", metadata.description),
            _meta("property", "og:url", metadata.canonical_url),
            _meta("property", "og:type", metadata.og_type),
            _meta("property", "og:site_name", site_name),
            _meta("property", "og:image", image_url),
            _meta("property", "article:published_time", metadata.published_time),
            _meta("property", "article:modified_time", metadata.modified_time),
            _meta("name", "twitter:card", "summary_large_image" if image_url else "summary"),
            _meta("name", "twitter:title", full_title),
            _meta("name", "twitter:description", metadata.description),
            _meta("name", "twitter:image", image_url),
            _meta("name", "twitter:site", twitter_handle),
        ]
    )

    payload = metadata.structured_data_json()
    if payload:
        tags.append(f'<script type="application/ld+json">{payload}</script>')

    return "\n".join(tag for tag in tags if tag)
