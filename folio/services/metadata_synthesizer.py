"""Per-route page metadata and JSON-LD synthesis.

Metadata is derived from the same normalized blocks and resolved images the
page renderer uses, so head tags never disagree with the rendered body. The
content store is the only I/O; every failure degrades to NotFound metadata.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any, Protocol
from urllib.parse import quote, unquote

from pydantic import ValidationError

from folio.config import Settings, settings
from folio.core.exceptions import ContentStoreError
from folio.schemas.blocks import ContentBlock
from folio.schemas.images import (
    FocalPoint,
    ImageSource,
    ResolvedImage,
    coerce_focal_point,
    coerce_image_source,
)
from folio.schemas.metadata import ContentRecord, PageMetadata, RouteDescriptor
from folio.services.block_normalizer import (
    first_paragraph_text,
    iter_image_sources,
    normalize_blocks,
    strip_inline_html,
)
from folio.services.image_resolver import ImageResolver
from folio.services.site_pages import (
    CollectionConfig,
    StaticPage,
    collection_for_item_segment,
    collection_for_listing_segment,
    static_page_for,
)
from folio.services.structured_data import (
    article_schema,
    breadcrumb_schema,
    collection_page_schema,
    creative_work_schema,
    person_schema,
    website_schema,
)

logger = logging.getLogger(__name__)

NOT_FOUND_TITLE = "Not Found"
NOT_FOUND_DESCRIPTION = "The page you are looking for does not exist or is no longer available."
ELLIPSIS = "…"


class ContentStore(Protocol):
    """Read-only document store consulted by the synthesizer."""

    async def get_by_slug(self, collection: str, slug: str) -> Any:
        """Return the record for a slug (or id), or None."""
        ...

    async def list_recent(
        self,
        collection: str,
        limit: int,
        category: str | None = None,
    ) -> Sequence[Any]:
        """Return up to `limit` published records, newest first."""
        ...


def truncate_text(text: str, limit: int) -> str:
    """Shorten to at most `limit` characters, cutting at a word boundary."""
    text = " ".join(text.split())
    if limit <= 0:
        return ""
    if len(text) <= limit:
        return text

    cut = text[: limit - 1]
    boundary = cut.rfind(" ")
    if boundary > limit // 2:
        cut = cut[:boundary]
    return cut.rstrip(" ,;:.-") + ELLIPSIS


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _keywords(record: ContentRecord) -> list[str]:
    keywords: list[str] = []
    for candidate in [*(tag.lower() for tag in record.tags), record.category]:
        if candidate and candidate not in keywords:
            keywords.append(candidate)
    return keywords


class MetadataSynthesizer:
    """Turn a route into PageMetadata in a single pass."""

    def __init__(
        self,
        store: ContentStore,
        app_settings: Settings | None = None,
        resolver: ImageResolver | None = None,
    ) -> None:
        self.store = store
        self.settings = app_settings or settings
        self.resolver = resolver or ImageResolver(self.settings)

    async def synthesize(self, route: RouteDescriptor | str) -> PageMetadata:
        """Metadata for one route; never raises."""
        if isinstance(route, str):
            try:
                route = RouteDescriptor.from_url(route)
            except ValueError as exc:
                logger.warning(
                    "Unparseable route; serving not-found metadata",
                    extra={"route": route, "error": str(exc)},
                )
                return self.not_found("/")
        path = route.normalized_path

        try:
            return await self._dispatch(route, path)
        except ContentStoreError as exc:
            logger.warning(
                "Content store lookup failed; serving not-found metadata",
                extra={"route": path, "error": exc.message, **exc.details},
            )
        except Exception:
            logger.exception("Metadata synthesis failed", extra={"route": path})
        return self.not_found(path)

    def not_found(self, path: str) -> PageMetadata:
        return PageMetadata(
            state="not_found",
            title=NOT_FOUND_TITLE,
            description=NOT_FOUND_DESCRIPTION,
            canonical_url=self.settings.absolute_url(path),
            og_image=None,
            structured_data=None,
            noindex=True,
        )

    async def _dispatch(self, route: RouteDescriptor, path: str) -> PageMetadata:
        static_page = static_page_for(path)
        if static_page is not None:
            return self._static(static_page)

        segments = route.segments
        if len(segments) == 2:
            config = collection_for_item_segment(segments[0])
            if config is not None:
                return await self._item(config, unquote(segments[1]), path)
        elif len(segments) == 1:
            config = collection_for_listing_segment(segments[0])
            if config is not None:
                return await self._listing(config, route)

        logger.debug("No metadata route matched", extra={"route": path})
        return self.not_found(path)

    def _static(self, page: StaticPage) -> PageMetadata:
        canonical_url = self.settings.absolute_url(page.path)
        home_url = self.settings.absolute_url("/")
        if page.path == "/":
            structured_data = [
                website_schema(
                    name=self.settings.site_name,
                    url=self.settings.site_url,
                    description=self.settings.site_description,
                    search_path=self.settings.site_search_path,
                ),
                person_schema(
                    name=self.settings.site_author,
                    url=home_url,
                    job_title=self.settings.site_job_title,
                    description=self.settings.site_description,
                    same_as=self.settings.social_profiles,
                ),
            ]
        else:
            structured_data = [
                breadcrumb_schema([("Home", home_url), (page.breadcrumb, canonical_url)])
            ]

        return PageMetadata(
            title=truncate_text(page.title, self.settings.seo_title_max_length),
            description=truncate_text(page.description, self.settings.seo_description_max_length),
            canonical_url=canonical_url,
            og_image=self._default_og_image(),
            structured_data=structured_data,
            keywords=list(page.keywords),
            noindex=page.noindex,
        )

    async def _item(self, config: CollectionConfig, slug: str, path: str) -> PageMetadata:
        raw = await self.store.get_by_slug(config.collection, slug)
        record = self.coerce_record(raw, path)
        if record is None or not record.published:
            logger.info(
                "Content unavailable for route",
                extra={
                    "route": path,
                    "collection": config.collection,
                    "reason": "missing" if record is None else "unpublished",
                },
            )
            return self.not_found(path)
        return self.item_metadata(config, record)

    def item_metadata(
        self,
        config: CollectionConfig,
        record: ContentRecord,
        blocks: list[ContentBlock] | None = None,
    ) -> PageMetadata:
        """Metadata for a published record already in hand."""
        if blocks is None:
            blocks = normalize_blocks(record.content)
        canonical_url = self.settings.absolute_url(config.item_path(record.slug))
        raw_title = (record.seo_title or record.title or "").strip() or config.label
        summary = strip_inline_html(record.summary) if record.summary else ""
        description = summary or first_paragraph_text(blocks) or config.listing_description
        description = truncate_text(description, self.settings.seo_description_max_length)
        og_image = self._primary_image(record, blocks)
        image_url = og_image.delivery_url if og_image else None
        published_time = _iso(record.published_at or record.created_at)
        modified_time = _iso(record.updated_at) or published_time
        keywords = _keywords(record)

        if config.schema_type == "CreativeWork":
            primary = creative_work_schema(
                name=raw_title,
                description=description,
                url=canonical_url,
                image=image_url,
                date_created=published_time,
                date_modified=modified_time,
                creator=record.author or self.settings.site_author,
                genre=record.category,
                keywords=keywords,
            )
        else:
            primary = article_schema(
                headline=truncate_text(raw_title, 110),
                description=description,
                url=canonical_url,
                image=image_url,
                date_published=published_time,
                date_modified=modified_time,
                author=record.author or self.settings.site_author,
                publisher=self.settings.site_name,
                keywords=keywords,
                schema_type=config.schema_type,
            )

        breadcrumbs = breadcrumb_schema(
            [
                ("Home", self.settings.absolute_url("/")),
                (config.label, self.settings.absolute_url(config.listing_path)),
                (raw_title, canonical_url),
            ]
        )

        return PageMetadata(
            title=truncate_text(raw_title, self.settings.seo_title_max_length),
            description=description,
            canonical_url=canonical_url,
            og_image=og_image,
            structured_data=[primary, breadcrumbs],
            og_type="article",
            keywords=keywords,
            published_time=published_time,
            modified_time=modified_time,
        )

    async def _listing(self, config: CollectionConfig, route: RouteDescriptor) -> PageMetadata:
        limit = self.settings.collection_listing_limit
        category = route.query_value("filter")
        if category is not None:
            category = category.lower()
        variant = config.filters.get(category) if category else None

        canonical_url = self.settings.absolute_url(config.listing_path)
        if category:
            canonical_url = f"{canonical_url}?filter={quote(category, safe='')}"

        raw_records = await self.store.list_recent(config.collection, limit, category=category)
        items: list[tuple[str, str]] = []
        for raw in raw_records:
            record = self.coerce_record(raw, config.listing_path)
            if record is None or not record.published:
                continue
            name = record.title or record.slug
            items.append((name, self.settings.absolute_url(config.item_path(record.slug))))
            if len(items) >= limit:
                break

        title = variant.title if variant else config.listing_title
        description = truncate_text(
            variant.description if variant else config.listing_description,
            self.settings.seo_description_max_length,
        )
        structured_data = [
            collection_page_schema(
                name=title,
                description=description,
                url=canonical_url,
                items=items,
            ),
            breadcrumb_schema(
                [
                    ("Home", self.settings.absolute_url("/")),
                    (config.label, self.settings.absolute_url(config.listing_path)),
                ]
            ),
        ]

        return PageMetadata(
            title=truncate_text(title, self.settings.seo_title_max_length),
            description=description,
            canonical_url=canonical_url,
            og_image=self._default_og_image(),
            structured_data=structured_data,
            keywords=[category] if category else [],
        )

    def coerce_record(self, raw: Any, path: str) -> ContentRecord | None:
        if raw is None or isinstance(raw, ContentRecord):
            return raw
        try:
            if isinstance(raw, Mapping):
                return ContentRecord.model_validate(dict(raw))
            return ContentRecord.model_validate(raw, from_attributes=True)
        except ValidationError as exc:
            logger.warning(
                "Discarding malformed content record",
                extra={"route": path, "errors": exc.error_count()},
            )
            return None

    def _primary_image(
        self,
        record: ContentRecord,
        blocks: list[ContentBlock],
    ) -> ResolvedImage | None:
        candidate: tuple[ImageSource, FocalPoint | None] | None = None
        cover = coerce_image_source(record.cover_image)
        if cover is not None:
            candidate = (cover, coerce_focal_point(record.cover_focal_point))
        else:
            candidate = next(iter_image_sources(blocks), None)

        if candidate is None:
            return self._default_og_image()
        source, focus = candidate
        return self._absolute(self.resolver.resolve(source, "hero", focus))

    def _default_og_image(self) -> ResolvedImage | None:
        if not self.settings.default_og_image:
            return None
        return self._absolute(self.resolver.resolve(self.settings.default_og_image, "hero"))

    def _absolute(self, image: ResolvedImage | None) -> ResolvedImage | None:
        if image is None:
            return None
        absolute = self.settings.absolute_url(image.delivery_url)
        if absolute == image.delivery_url:
            return image
        return image.model_copy(update={"delivery_url": absolute})
