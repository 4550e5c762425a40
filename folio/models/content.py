"""Content entry model (articles, news, tutorials, projects)."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from folio.models.base import Base, IDMixin, JSONColumn, TimestampMixin


class ContentEntry(Base, IDMixin, TimestampMixin):
    """One editorial record; `content` holds the raw block payload as stored."""

    __tablename__ = "content_entries"
    __table_args__ = (
        UniqueConstraint("collection", "slug", name="uq_content_entries_collection_slug"),
        Index(
            "ix_content_entries_collection_published_at",
            "collection",
            "published_at",
        ),
    )

    collection: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)

    title: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    seo_title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    tags: Mapped[list[str] | None] = mapped_column(JSONColumn, nullable=True)
    author: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Raw payloads, normalized on read
    content: Mapped[Any] = mapped_column(JSONColumn, nullable=True)
    cover_image: Mapped[Any] = mapped_column(JSONColumn, nullable=True)
    cover_focal_point: Mapped[dict | None] = mapped_column(JSONColumn, nullable=True)

    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    published_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
