"""Route, content record and page metadata schemas."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Literal
from urllib.parse import parse_qs, urlsplit

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from folio.schemas.images import ResolvedImage

MetadataState = Literal["ok", "not_found"]

_REPEATED_SLASHES = re.compile(r"/{2,}")
_TRUTHY_FLAGS = frozenset({"true", "1", "yes"})


class RouteDescriptor(BaseModel):
    """Identity of the page being rendered; never mutated."""

    model_config = ConfigDict(frozen=True)

    path: str
    query_params: dict[str, str | list[str]] = Field(default_factory=dict)

    @classmethod
    def from_url(cls, url: str) -> RouteDescriptor:
        """Build a descriptor from a path or absolute URL with a query string."""
        parts = urlsplit(url)
        query: dict[str, str | list[str]] = {}
        for key, values in parse_qs(parts.query, keep_blank_values=False).items():
            query[key] = values[0] if len(values) == 1 else values
        return cls(path=parts.path or "/", query_params=query)

    @property
    def normalized_path(self) -> str:
        path = self.path.strip().split("?", 1)[0].split("#", 1)[0]
        path = _REPEATED_SLASHES.sub("/", f"/{path}")
        if len(path) > 1:
            path = path.rstrip("/") or "/"
        return path

    @property
    def segments(self) -> list[str]:
        return [segment for segment in self.normalized_path.split("/") if segment]

    def query_value(self, name: str) -> str | None:
        """First non-blank value for a query parameter."""
        value = self.query_params.get(name)
        if isinstance(value, list):
            value = next((item for item in value if isinstance(item, str) and item.strip()), None)
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None


class ContentRecord(BaseModel):
    """Read-only copy of a document-store record.

    Aliases cover the column names used by older storage layouts.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, from_attributes=True)

    id: str
    collection: str
    slug: str
    title: str = ""
    seo_title: str | None = None
    summary: str | None = Field(
        default=None,
        validation_alias=AliasChoices("summary", "seo_description", "excerpt"),
    )
    content: Any = None
    cover_image: Any = Field(
        default=None,
        validation_alias=AliasChoices("cover_image", "coverImage", "card_image"),
    )
    cover_focal_point: Any = Field(
        default=None,
        validation_alias=AliasChoices(
            "cover_focal_point", "cover_image_focal_point", "focus_point"
        ),
    )
    category: str | None = None
    tags: list[str] = Field(default_factory=list)
    author: str | None = None
    # Records without a flag predate publish gating and are live
    published: bool = True
    published_at: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("published_at", "publish_date"),
    )
    updated_at: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("updated_at", "last_modified"),
    )
    created_at: datetime | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        return [tag.strip() for tag in value if isinstance(tag, str) and tag.strip()]

    @field_validator("published", mode="before")
    @classmethod
    def _published(cls, value: Any) -> bool:
        if value is None:
            return True
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return value == 1
        if isinstance(value, str):
            return value.strip().lower() in _TRUTHY_FLAGS
        # Unrecognized flags keep the record hidden
        return False


class PageMetadata(BaseModel):
    """Head metadata and structured data for a single page render."""

    state: MetadataState = "ok"
    title: str
    description: str
    canonical_url: str
    og_image: ResolvedImage | None = None
    structured_data: list[dict[str, Any]] | None = None
    og_type: Literal["website", "article"] = "website"
    keywords: list[str] = Field(default_factory=list)
    noindex: bool = False
    published_time: str | None = None
    modified_time: str | None = None

    @property
    def is_not_found(self) -> bool:
        return self.state == "not_found"

    def structured_data_json(self) -> str | None:
        """JSON-LD payload ready for a script element, or None when absent."""
        from folio.services.structured_data import serialize_json_ld

        return serialize_json_ld(self.structured_data)
