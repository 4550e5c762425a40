"""Route tables for static pages and content collections."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class StaticPage:
    """Metadata for a route that never touches the content store."""

    path: str
    title: str
    description: str
    breadcrumb: str
    keywords: tuple[str, ...] = ()
    noindex: bool = False


@dataclass(frozen=True, slots=True)
class ListingFilter:
    """Category-narrowed variant of a collection listing (`?filter=<category>`)."""

    title: str
    description: str


@dataclass(frozen=True, slots=True)
class CollectionConfig:
    """How one content collection maps onto item and listing routes."""

    collection: str
    item_segment: str
    listing_segment: str
    schema_type: str
    label: str
    listing_title: str
    listing_description: str
    filters: dict[str, ListingFilter] = field(default_factory=dict)

    @property
    def listing_path(self) -> str:
        return f"/{self.listing_segment}"

    def item_path(self, slug: str) -> str:
        return f"/{self.item_segment}/{slug}"


STATIC_PAGES: dict[str, StaticPage] = {
    page.path: page
    for page in (
        StaticPage(
            path="/",
            title="Scenic & Experiential Design",
            description=(
                "Scenic and experiential design for theatre, immersive environments "
                "and narrative-driven spaces."
            ),
            breadcrumb="Home",
            keywords=(
                "scenic designer",
                "experiential designer",
                "theatre set design",
                "production design",
            ),
        ),
        StaticPage(
            path="/about",
            title="About",
            description=(
                "Background, credits and approach of a scenic and experiential designer "
                "working across theatre, opera and installations."
            ),
            breadcrumb="About",
            keywords=("scenic designer bio", "theatre designer"),
        ),
        StaticPage(
            path="/faq",
            title="Frequently Asked Questions",
            description="Answers about commissions, process, timelines and collaboration.",
            breadcrumb="FAQ",
        ),
        StaticPage(
            path="/contact",
            title="Contact",
            description="Get in touch about productions, installations and teaching.",
            breadcrumb="Contact",
        ),
        StaticPage(
            path="/privacy-policy",
            title="Privacy Policy",
            description="How this site collects, uses and protects visitor information.",
            breadcrumb="Privacy Policy",
        ),
        StaticPage(
            path="/terms-of-use",
            title="Terms of Use",
            description="Terms governing the use of this site and its downloadable resources.",
            breadcrumb="Terms of Use",
        ),
        StaticPage(
            path="/accessibility",
            title="Accessibility Statement",
            description="Accessibility commitments and how to report barriers on this site.",
            breadcrumb="Accessibility",
        ),
        StaticPage(
            path="/sitemap",
            title="Sitemap",
            description="Every section of the site in one place.",
            breadcrumb="Sitemap",
        ),
        StaticPage(
            path="/search",
            title="Search",
            description="Search projects, articles, news and tutorials.",
            breadcrumb="Search",
            noindex=True,
        ),
    )
}

COLLECTIONS: tuple[CollectionConfig, ...] = (
    CollectionConfig(
        collection="articles",
        item_segment="articles",
        listing_segment="articles",
        schema_type="Article",
        label="Articles",
        listing_title="Articles | Design Philosophy & Tutorials",
        listing_description=(
            "Deep dives into design philosophy, technology and insights from the "
            "theatrical design field."
        ),
    ),
    CollectionConfig(
        collection="news",
        item_segment="news",
        listing_segment="news",
        schema_type="NewsArticle",
        label="News",
        listing_title="News | Latest Updates & Announcements",
        listing_description="Latest news, project announcements and studio updates.",
    ),
    CollectionConfig(
        collection="tutorials",
        item_segment="tutorial",
        listing_segment="tutorial",
        schema_type="TechArticle",
        label="Tutorials",
        listing_title="Tutorials | Scenic Studio",
        listing_description=(
            "Tutorials, guides and workflows for scenic design and visualization tools."
        ),
    ),
    CollectionConfig(
        collection="projects",
        item_segment="project",
        listing_segment="portfolio",
        schema_type="CreativeWork",
        label="Portfolio",
        listing_title="Portfolio | Scenic Design & Experiential Work",
        listing_description=(
            "Scenic design projects spanning theatre, opera, experiential design and "
            "architectural visualization."
        ),
        filters={
            "scenic": ListingFilter(
                title="Scenic Design Portfolio | Theatre & Opera Productions",
                description=(
                    "Scenic design work for theatre and opera productions with renderings, "
                    "drawings and production photos."
                ),
            ),
            "experiential": ListingFilter(
                title="Experiential Design Portfolio | Immersive Environments",
                description=(
                    "Experiential design and immersive environments blending theatrical "
                    "principles with interactive spaces."
                ),
            ),
            "rendering": ListingFilter(
                title="Rendering & Visualization Portfolio | 3D Design Work",
                description="Architectural visualization and 3D rendering work.",
            ),
            "documentation": ListingFilter(
                title="Design Documentation Portfolio | Technical Drawings",
                description=(
                    "Technical design documentation, drafting packages and construction "
                    "drawings for theatrical productions."
                ),
            ),
        },
    ),
)

_BY_ITEM_SEGMENT = {config.item_segment: config for config in COLLECTIONS}
_BY_LISTING_SEGMENT = {config.listing_segment: config for config in COLLECTIONS}


def static_page_for(path: str) -> StaticPage | None:
    return STATIC_PAGES.get(path)


def collection_for_item_segment(segment: str) -> CollectionConfig | None:
    return _BY_ITEM_SEGMENT.get(segment.lower())


def collection_for_listing_segment(segment: str) -> CollectionConfig | None:
    return _BY_LISTING_SEGMENT.get(segment.lower())


def find_collection(name: str) -> CollectionConfig | None:
    """Match a collection by its store name or its item route segment."""
    lowered = name.lower()
    for config in COLLECTIONS:
        if lowered in {config.collection, config.item_segment}:
            return config
    return None
