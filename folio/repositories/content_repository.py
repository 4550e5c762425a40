"""SQLAlchemy-backed content store."""

from __future__ import annotations

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from folio.core.database import get_session_context
from folio.core.db_retry import ReadRetryPolicy, read_with_retry
from folio.models.content import ContentEntry
from folio.schemas.metadata import ContentRecord


class SqlContentStore:
    """Read-only lookups over `content_entries` via short-lived sessions."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        *,
        retry_policy: ReadRetryPolicy | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.retry_policy = retry_policy or ReadRetryPolicy.from_settings()

    async def get_by_slug(self, collection: str, slug: str) -> ContentRecord | None:
        """Return the entry whose slug (or id) matches, published or not."""

        async def _get_once() -> ContentRecord | None:
            async with get_session_context(self.session_factory) as session:
                stmt = (
                    select(ContentEntry)
                    .where(ContentEntry.collection == collection)
                    .where(or_(ContentEntry.slug == slug, ContentEntry.id == slug))
                    .order_by((ContentEntry.slug == slug).desc())
                    .limit(1)
                )
                result = await session.execute(stmt)
                entry = result.scalar_one_or_none()
                return ContentRecord.model_validate(entry) if entry is not None else None

        return await read_with_retry(
            _get_once,
            policy=self.retry_policy,
            operation="content_get_by_slug",
            log_context={"collection": collection, "slug": slug},
        )

    async def list_recent(
        self,
        collection: str,
        limit: int,
        category: str | None = None,
    ) -> list[ContentRecord]:
        """Published entries of a collection, newest first."""
        if limit <= 0:
            return []

        async def _list_once() -> list[ContentRecord]:
            async with get_session_context(self.session_factory) as session:
                stmt = (
                    select(ContentEntry)
                    .where(ContentEntry.collection == collection)
                    .where(ContentEntry.published.is_(True))
                )
                if category:
                    stmt = stmt.where(ContentEntry.category == category)
                stmt = stmt.order_by(
                    ContentEntry.published_at.desc().nulls_last(),
                    ContentEntry.created_at.desc(),
                ).limit(limit)
                result = await session.execute(stmt)
                return [ContentRecord.model_validate(entry) for entry in result.scalars().all()]

        return await read_with_retry(
            _list_once,
            policy=self.retry_policy,
            operation="content_list_recent",
            log_context={"collection": collection, "category": category, "limit": limit},
        )

