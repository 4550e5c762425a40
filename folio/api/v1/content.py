"""Normalized content API endpoints."""

import logging

from fastapi import APIRouter, HTTPException, status

from folio.api.v1.dependencies import Resolver, Store, Synthesizer
from folio.core.exceptions import ContentNotFoundError, ContentStoreError
from folio.schemas.api import ContentResponse
from folio.schemas.images import coerce_focal_point
from folio.schemas.metadata import ContentRecord
from folio.services.block_normalizer import normalize_blocks
from folio.services.content_renderer import render_blocks
from folio.services.metadata_synthesizer import MetadataSynthesizer
from folio.services.site_pages import find_collection

logger = logging.getLogger(__name__)

router = APIRouter()


async def _load_published(
    store: Store,
    synthesizer: MetadataSynthesizer,
    collection: str,
    slug: str,
) -> ContentRecord:
    raw = await store.get_by_slug(collection, slug)
    record = synthesizer.coerce_record(raw, f"/{collection}/{slug}")
    if record is None or not record.published:
        raise ContentNotFoundError(collection, slug)
    return record


@router.get(
    "/{collection}/{slug}",
    response_model=ContentResponse,
    summary="Get normalized content",
    description="Return normalized blocks, rendered HTML, resolved cover and page metadata.",
)
async def get_content(
    collection: str,
    slug: str,
    store: Store,
    resolver: Resolver,
    synthesizer: Synthesizer,
) -> ContentResponse:
    """Get one published content record by collection and slug (or id)."""
    config = find_collection(collection)
    if config is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown collection: {collection}",
        )

    try:
        record = await _load_published(store, synthesizer, config.collection, slug)
    except ContentNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    except ContentStoreError as exc:
        logger.warning(
            "Content store unavailable",
            extra={"collection": config.collection, "slug": slug, "error": exc.message},
        )
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Content store unavailable",
        ) from exc

    blocks = normalize_blocks(record.content)
    cover = resolver.resolve(record.cover_image, "hero", coerce_focal_point(record.cover_focal_point))
    return ContentResponse(
        collection=config.collection,
        slug=record.slug,
        title=record.title,
        blocks=blocks,
        html=render_blocks(blocks, resolver),
        cover=cover,
        metadata=synthesizer.item_metadata(config, record, blocks),
    )
