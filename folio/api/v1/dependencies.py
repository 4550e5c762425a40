"""Reusable API dependencies shared across v1 routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from folio.repositories.content_repository import SqlContentStore
from folio.services.image_resolver import ImageResolver, get_image_resolver
from folio.services.metadata_synthesizer import ContentStore, MetadataSynthesizer


def get_content_store() -> ContentStore:
    """Content store backed by the application database."""
    return SqlContentStore()


def get_resolver() -> ImageResolver:
    return get_image_resolver()


def get_metadata_synthesizer(
    store: Annotated[ContentStore, Depends(get_content_store)],
    resolver: Annotated[ImageResolver, Depends(get_resolver)],
) -> MetadataSynthesizer:
    return MetadataSynthesizer(store, resolver=resolver)


Store = Annotated[ContentStore, Depends(get_content_store)]
Resolver = Annotated[ImageResolver, Depends(get_resolver)]
Synthesizer = Annotated[MetadataSynthesizer, Depends(get_metadata_synthesizer)]
