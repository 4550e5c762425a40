"""Content block schemas: a closed tagged union discriminated by `kind`."""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from folio.schemas.images import FocalPoint, ImageSource

BlockKind = Literal[
    "paragraph",
    "heading",
    "image",
    "gallery",
    "code",
    "embed",
    "quote",
    "list",
    "divider",
    "unknown",
]

BLOCK_KINDS: frozenset[str] = frozenset(
    {
        "paragraph",
        "heading",
        "image",
        "gallery",
        "code",
        "embed",
        "quote",
        "list",
        "divider",
        "unknown",
    }
)


class _Block(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str | None = None


class ParagraphBlock(_Block):
    """Rich-text paragraph."""

    kind: Literal["paragraph"] = "paragraph"
    text: str


class HeadingBlock(_Block):
    kind: Literal["heading"] = "heading"
    level: int = Field(default=2, ge=1, le=6)
    text: str


class ImageBlock(_Block):
    kind: Literal["image"] = "image"
    image: ImageSource
    alt: str = ""
    caption: str | None = None
    focal_point: FocalPoint | None = None


class GalleryImage(BaseModel):
    """One gallery entry; always carries a resolvable location."""

    model_config = ConfigDict(frozen=True)

    image: ImageSource
    alt: str = ""
    caption: str | None = None
    focal_point: FocalPoint | None = None


class GalleryBlock(_Block):
    kind: Literal["gallery"] = "gallery"
    images: list[GalleryImage] = Field(default_factory=list)
    style: str | None = None


class CodeBlock(_Block):
    kind: Literal["code"] = "code"
    language: str = "plaintext"
    source: str


class EmbedBlock(_Block):
    """Opaque external reference (video, 3D model, ...)."""

    kind: Literal["embed"] = "embed"
    url: str = Field(min_length=1)
    provider: str | None = None
    title: str | None = None


class QuoteBlock(_Block):
    kind: Literal["quote"] = "quote"
    text: str
    attribution: str | None = None


class ListBlock(_Block):
    kind: Literal["list"] = "list"
    items: list[str] = Field(default_factory=list)
    ordered: bool = False


class DividerBlock(_Block):
    kind: Literal["divider"] = "divider"


class UnknownBlock(_Block):
    """Passthrough for unrecognized or malformed blocks; renders as nothing."""

    kind: Literal["unknown"] = "unknown"
    original_kind: str | None = None
    raw: Any = None


ContentBlock = Annotated[
    ParagraphBlock
    | HeadingBlock
    | ImageBlock
    | GalleryBlock
    | CodeBlock
    | EmbedBlock
    | QuoteBlock
    | ListBlock
    | DividerBlock
    | UnknownBlock,
    Field(discriminator="kind"),
]
