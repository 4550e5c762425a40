"""Schema.org JSON-LD builders for page metadata."""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from typing import Any

SCHEMA_CONTEXT = "https://schema.org"

ARTICLE_TYPES = frozenset({"Article", "NewsArticle", "TechArticle", "BlogPosting"})


def compact_json_ld(value: Any) -> Any:
    """Drop None values and empty containers recursively."""
    if isinstance(value, dict):
        compacted = {key: compact_json_ld(item) for key, item in value.items()}
        return {
            key: item
            for key, item in compacted.items()
            if item is not None and item != {} and item != []
        }
    if isinstance(value, list | tuple):
        compacted_items = [compact_json_ld(item) for item in value]
        return [item for item in compacted_items if item is not None and item != {} and item != []]
    return value


def _person(name: str | None, url: str | None = None) -> dict[str, Any] | None:
    if not name:
        return None
    return {"@type": "Person", "name": name, "url": url}


def _organization(name: str | None, logo_url: str | None = None) -> dict[str, Any] | None:
    if not name:
        return None
    logo = {"@type": "ImageObject", "url": logo_url} if logo_url else None
    return {"@type": "Organization", "name": name, "logo": logo}


def article_schema(
    *,
    headline: str,
    description: str,
    url: str,
    image: str | None = None,
    date_published: str | None = None,
    date_modified: str | None = None,
    author: str | None = None,
    publisher: str | None = None,
    publisher_logo: str | None = None,
    keywords: Sequence[str] = (),
    schema_type: str = "Article",
) -> dict[str, Any]:
    """Article-family object (Article, NewsArticle, TechArticle)."""
    if schema_type not in ARTICLE_TYPES:
        raise ValueError(f"Unsupported article type: {schema_type}")

    return compact_json_ld(
        {
            "@context": SCHEMA_CONTEXT,
            "@type": schema_type,
            "headline": headline,
            "description": description,
            "image": image,
            "datePublished": date_published,
            "dateModified": date_modified or date_published,
            "author": _person(author),
            "publisher": _organization(publisher, publisher_logo),
            "mainEntityOfPage": {"@type": "WebPage", "@id": url},
            "url": url,
            "keywords": ", ".join(keywords) if keywords else None,
        }
    )


def creative_work_schema(
    *,
    name: str,
    description: str,
    url: str,
    image: str | None = None,
    date_created: str | None = None,
    date_modified: str | None = None,
    creator: str | None = None,
    genre: str | None = None,
    keywords: Sequence[str] = (),
) -> dict[str, Any]:
    """CreativeWork object for portfolio projects."""
    return compact_json_ld(
        {
            "@context": SCHEMA_CONTEXT,
            "@type": "CreativeWork",
            "name": name,
            "description": description,
            "image": image,
            "dateCreated": date_created,
            "dateModified": date_modified,
            "creator": _person(creator),
            "url": url,
            "genre": genre,
            "keywords": ", ".join(keywords) if keywords else None,
        }
    )


def breadcrumb_schema(crumbs: Iterable[tuple[str, str]]) -> dict[str, Any]:
    """BreadcrumbList from ordered `(name, absolute_url)` pairs."""
    return {
        "@context": SCHEMA_CONTEXT,
        "@type": "BreadcrumbList",
        "itemListElement": [
            {"@type": "ListItem", "position": position, "name": name, "item": url}
            for position, (name, url) in enumerate(crumbs, start=1)
        ],
    }


def collection_page_schema(
    *,
    name: str,
    description: str,
    url: str,
    items: Iterable[tuple[str, str]],
) -> dict[str, Any]:
    """CollectionPage whose main entity lists `(name, url)` items in order."""
    elements = [
        {"@type": "ListItem", "position": position, "name": item_name, "url": item_url}
        for position, (item_name, item_url) in enumerate(items, start=1)
    ]
    return compact_json_ld(
        {
            "@context": SCHEMA_CONTEXT,
            "@type": "CollectionPage",
            "name": name,
            "description": description,
            "url": url,
            "mainEntity": {
                "@type": "ItemList",
                "numberOfItems": len(elements),
                "itemListElement": elements,
            },
        }
    )


def website_schema(
    *,
    name: str,
    url: str,
    description: str | None = None,
    search_path: str | None = None,
) -> dict[str, Any]:
    """WebSite object; a search path adds a SearchAction."""
    potential_action = None
    if search_path:
        potential_action = {
            "@type": "SearchAction",
            "target": {
                "@type": "EntryPoint",
                "urlTemplate": f"{url}{search_path}?q={{search_term_string}}",
            },
            "query-input": "required name=search_term_string",
        }
    return compact_json_ld(
        {
            "@context": SCHEMA_CONTEXT,
            "@type": "WebSite",
            "name": name,
            "url": url,
            "description": description,
            "potentialAction": potential_action,
        }
    )


def person_schema(
    *,
    name: str,
    url: str,
    job_title: str | None = None,
    description: str | None = None,
    image: str | None = None,
    same_as: Sequence[str] = (),
) -> dict[str, Any]:
    return compact_json_ld(
        {
            "@context": SCHEMA_CONTEXT,
            "@type": "Person",
            "name": name,
            "jobTitle": job_title,
            "description": description,
            "image": image,
            "url": url,
            "sameAs": list(same_as),
        }
    )


def serialize_json_ld(structured_data: Sequence[dict[str, Any]] | dict[str, Any] | None) -> str | None:
    """Serialize for a `<script type="application/ld+json">` element.

    A single object is emitted bare, several as an array. `</` is escaped so the
    payload cannot terminate the surrounding script element.
    """
    if not structured_data:
        return None
    payload: Any = structured_data
    if isinstance(structured_data, list | tuple):
        payload = structured_data[0] if len(structured_data) == 1 else list(structured_data)
    text = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    return text.replace("</", "<\\/")
