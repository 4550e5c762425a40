"""Request and response schemas for the HTTP surface."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from folio.schemas.blocks import ContentBlock
from folio.schemas.images import ImageTransformOptions, ResolvedImage, SrcSet
from folio.schemas.metadata import PageMetadata


class ContentResponse(BaseModel):
    """Normalized blocks plus the HTML and cover rendered from them."""

    collection: str
    slug: str
    title: str
    blocks: list[ContentBlock]
    html: str
    cover: ResolvedImage | None = None
    metadata: PageMetadata


class ImageResolveRequest(BaseModel):
    image: str | dict[str, Any] | None = None
    preset: str = "full"
    options: ImageTransformOptions | None = None
    focus: dict[str, Any] | None = None
    include_srcset: bool = False


class ImageResolveResponse(BaseModel):
    image: ResolvedImage | None = None
    srcset: SrcSet | None = None
    placeholder: str | None = Field(default=None, description="Low-quality blur variant URL")
