"""Unit tests for per-route metadata synthesis."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import pytest

from folio.config import Settings
from folio.core.exceptions import ContentStoreUnavailableError
from folio.schemas.metadata import RouteDescriptor
from folio.services.metadata_synthesizer import MetadataSynthesizer, truncate_text

MANAGED = "https://proj.supabase.co/storage/v1/object/public/articles/storm.jpg"
RENDER = "https://proj.supabase.co/storage/v1/render/image/public/articles/storm.jpg"


class _FakeStore:
    def __init__(self, records: list[dict[str, Any]] | None = None, error: Exception | None = None) -> None:
        self.records = records or []
        self.error = error
        self.calls: list[tuple[Any, ...]] = []

    async def get_by_slug(self, collection: str, slug: str) -> dict[str, Any] | None:
        self.calls.append(("get", collection, slug))
        if self.error is not None:
            raise self.error
        for record in self.records:
            if record["collection"] == collection and slug in (record["slug"], record["id"]):
                return record
        return None

    async def list_recent(
        self,
        collection: str,
        limit: int,
        category: str | None = None,
    ) -> list[dict[str, Any]]:
        self.calls.append(("list", collection, limit, category))
        if self.error is not None:
            raise self.error
        # Ignores `limit` on purpose so the synthesizer's own cap is exercised
        return [
            record
            for record in self.records
            if record["collection"] == collection
            and (category is None or record.get("category") == category)
        ]


def _record(**overrides: Any) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": "rec-1",
        "collection": "news",
        "slug": "opening-night",
        "title": "Opening Night",
        "published": True,
        "published_at": datetime(2024, 3, 1, tzinfo=UTC),
        "content": [{"kind": "paragraph", "text": "The curtain rises on a new production."}],
    }
    record.update(overrides)
    return record


def _settings() -> Settings:
    return Settings(
        site_url="https://www.example.com/",
        site_name="Folio",
        site_author="Jo Designer",
        default_og_image="/og-default.jpg",
        collection_listing_limit=10,
        seo_title_max_length=60,
        seo_description_max_length=160,
    )


def _synthesizer(store: _FakeStore) -> MetadataSynthesizer:
    return MetadataSynthesizer(store, _settings())


@pytest.mark.asyncio
async def test_missing_slug_yields_not_found() -> None:
    metadata = await _synthesizer(_FakeStore()).synthesize("/news/missing")

    assert metadata.state == "not_found"
    assert metadata.is_not_found
    assert metadata.title == "Not Found"
    assert metadata.structured_data is None
    assert metadata.og_image is None
    assert metadata.noindex is True
    assert metadata.canonical_url == "https://www.example.com/news/missing"


@pytest.mark.asyncio
@pytest.mark.parametrize("flag", [False, "false", "FALSE", "0", "no", "", "draft", 0])
async def test_unpublished_record_is_indistinguishable_from_missing(flag: object) -> None:
    draft = _record(slug="draft", published=flag)

    unpublished = await _synthesizer(_FakeStore([draft])).synthesize("/news/draft")
    missing = await _synthesizer(_FakeStore()).synthesize("/news/draft")

    assert unpublished.model_dump() == missing.model_dump()


@pytest.mark.asyncio
async def test_store_failure_degrades_to_not_found() -> None:
    store = _FakeStore(error=ContentStoreUnavailableError("content_get_by_slug", "connection refused"))

    metadata = await _synthesizer(store).synthesize("/news/opening-night")

    assert metadata.title == "Not Found"
    assert metadata.structured_data is None


@pytest.mark.asyncio
async def test_unexpected_failure_degrades_to_not_found() -> None:
    metadata = await _synthesizer(_FakeStore(error=RuntimeError("boom"))).synthesize("/news")

    assert metadata.state == "not_found"


@pytest.mark.asyncio
async def test_unparseable_route_string_is_not_found() -> None:
    store = _FakeStore([_record()])

    metadata = await _synthesizer(store).synthesize("http://[bad/news/opening-night")

    assert metadata.state == "not_found"
    assert metadata.canonical_url == "https://www.example.com/"
    assert store.calls == []


@pytest.mark.asyncio
async def test_string_publish_flags_are_parsed() -> None:
    store = _FakeStore([_record(published="true"), _record(id="rec-2", slug="legacy", published=None)])

    live = await _synthesizer(store).synthesize("/news/opening-night")
    legacy = await _synthesizer(store).synthesize("/news/legacy")

    assert live.state == "ok"
    assert legacy.state == "ok"


@pytest.mark.asyncio
async def test_published_article_metadata() -> None:
    record = _record(
        collection="articles",
        slug="lighting-the-storm",
        title="Lighting the Storm",
        summary="<p>How we lit the storm scene.</p>",
        tags=["Lighting", "Opera"],
        category="technique",
        cover_image=MANAGED,
        cover_focal_point={"x": 40, "y": 30},
        author="Sam Writer",
        updated_at=datetime(2024, 3, 5, tzinfo=UTC),
    )
    store = _FakeStore([record])

    metadata = await _synthesizer(store).synthesize(RouteDescriptor(path="/articles/lighting-the-storm/"))

    assert store.calls == [("get", "articles", "lighting-the-storm")]
    assert metadata.state == "ok"
    assert metadata.title == "Lighting the Storm"
    assert metadata.description == "How we lit the storm scene."
    assert metadata.canonical_url == "https://www.example.com/articles/lighting-the-storm"
    assert metadata.og_type == "article"
    assert metadata.keywords == ["lighting", "opera", "technique"]
    assert metadata.published_time == "2024-03-01T00:00:00+00:00"
    assert metadata.modified_time == "2024-03-05T00:00:00+00:00"
    assert metadata.og_image is not None
    assert metadata.og_image.delivery_url == f"{RENDER}?quality=80&resize=contain&width=1920"

    article, breadcrumbs = metadata.structured_data or []
    assert article["@type"] == "Article"
    assert article["headline"] == "Lighting the Storm"
    assert article["image"] == metadata.og_image.delivery_url
    assert article["author"]["name"] == "Sam Writer"
    assert article["publisher"]["name"] == "Folio"
    assert breadcrumbs["@type"] == "BreadcrumbList"
    assert [item["name"] for item in breadcrumbs["itemListElement"]] == [
        "Home",
        "Articles",
        "Lighting the Storm",
    ]


@pytest.mark.asyncio
async def test_lookup_by_id_uses_record_slug_for_canonical() -> None:
    metadata = await _synthesizer(_FakeStore([_record(id="42")])).synthesize("/news/42")

    assert metadata.canonical_url == "https://www.example.com/news/opening-night"
    assert metadata.structured_data is not None
    assert metadata.structured_data[0]["@type"] == "NewsArticle"


@pytest.mark.asyncio
async def test_description_and_image_fall_back_to_blocks() -> None:
    record = _record(
        slug="set-reveal",
        title="The Extraordinarily Long Title of a Production That Keeps Going Past Sixty",
        content=[
            {"kind": "heading", "text": "Intro"},
            {"kind": "paragraph", "text": "<b>First</b> words &amp; more."},
            {"kind": "image", "image": "/uploads/set.jpg"},
        ],
    )

    metadata = await _synthesizer(_FakeStore([record])).synthesize("/news/set-reveal")

    assert metadata.description == "First words & more."
    assert len(metadata.title) <= 60
    assert metadata.title.endswith("…")
    assert metadata.og_image is not None
    assert metadata.og_image.delivery_url == "https://www.example.com/uploads/set.jpg"


@pytest.mark.asyncio
async def test_project_emits_creative_work() -> None:
    record = _record(collection="projects", slug="the-tempest", title="The Tempest", category="scenic")

    metadata = await _synthesizer(_FakeStore([record])).synthesize("/project/the-tempest")

    assert metadata.structured_data is not None
    work = metadata.structured_data[0]
    assert work["@type"] == "CreativeWork"
    assert work["name"] == "The Tempest"
    assert work["genre"] == "scenic"
    assert work["creator"]["name"] == "Jo Designer"


@pytest.mark.asyncio
async def test_tutorial_emits_tech_article() -> None:
    record = _record(collection="tutorials", slug="rigging-basics", title="Rigging Basics")

    metadata = await _synthesizer(_FakeStore([record])).synthesize("/tutorial/rigging-basics")

    assert metadata.structured_data is not None
    assert metadata.structured_data[0]["@type"] == "TechArticle"


@pytest.mark.asyncio
async def test_listing_caps_items_and_skips_unpublished() -> None:
    records = [_record(id="draft", slug="draft", title="Draft", published=False)]
    records += [_record(id=f"n{index}", slug=f"item-{index}", title=f"Item {index}") for index in range(12)]
    store = _FakeStore(records)

    metadata = await _synthesizer(store).synthesize("/news?utm_source=newsletter")

    assert store.calls == [("list", "news", 10, None)]
    assert metadata.canonical_url == "https://www.example.com/news"
    assert metadata.structured_data is not None
    page = metadata.structured_data[0]
    assert page["@type"] == "CollectionPage"
    elements = page["mainEntity"]["itemListElement"]
    assert len(elements) == 10
    assert elements[0]["url"] == "https://www.example.com/news/item-0"
    assert all(element["name"] != "Draft" for element in elements)


@pytest.mark.asyncio
async def test_portfolio_filter_narrows_by_category() -> None:
    records = [
        _record(id="p1", collection="projects", slug="tempest", title="The Tempest", category="scenic"),
        _record(id="p2", collection="projects", slug="pop-up", title="Pop Up", category="experiential"),
    ]
    store = _FakeStore(records)

    metadata = await _synthesizer(store).synthesize("/portfolio?filter=Scenic&utm_source=x")

    assert store.calls == [("list", "projects", 10, "scenic")]
    assert metadata.canonical_url == "https://www.example.com/portfolio?filter=scenic"
    assert metadata.title.startswith("Scenic Design Portfolio")
    assert metadata.structured_data is not None
    names = [item["name"] for item in metadata.structured_data[0]["mainEntity"]["itemListElement"]]
    assert names == ["The Tempest"]


@pytest.mark.asyncio
async def test_home_page_is_static() -> None:
    store = _FakeStore()

    metadata = await _synthesizer(store).synthesize("/")

    assert store.calls == []
    assert metadata.state == "ok"
    assert metadata.canonical_url == "https://www.example.com/"
    assert [item["@type"] for item in metadata.structured_data or []] == ["WebSite", "Person"]
    assert metadata.og_image is not None
    assert metadata.og_image.delivery_url == "https://www.example.com/og-default.jpg"


@pytest.mark.asyncio
async def test_static_pages_normalize_path_and_honor_noindex() -> None:
    synthesizer = _synthesizer(_FakeStore())

    about = await synthesizer.synthesize(RouteDescriptor(path="//about/"))
    search = await synthesizer.synthesize("/search?q=opera")

    assert about.title == "About"
    assert about.structured_data is not None
    assert about.structured_data[0]["@type"] == "BreadcrumbList"
    assert search.noindex is True
    assert search.state == "ok"


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/unknown", "/news/a/b", "/project"])
async def test_unmatched_routes_are_not_found(path: str) -> None:
    metadata = await _synthesizer(_FakeStore()).synthesize(path)

    assert metadata.state == "not_found"


def test_truncate_text_cuts_at_word_boundary() -> None:
    assert truncate_text("short", 60) == "short"
    assert truncate_text("alpha beta gamma delta", 15) == "alpha beta…"
    assert len(truncate_text("x" * 200, 160)) == 160
