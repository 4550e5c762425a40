"""Unit tests for stored content block normalization."""

from __future__ import annotations

import pytest

from folio.schemas.blocks import (
    BLOCK_KINDS,
    CodeBlock,
    DividerBlock,
    EmbedBlock,
    GalleryBlock,
    HeadingBlock,
    ImageBlock,
    ListBlock,
    ParagraphBlock,
    QuoteBlock,
    UnknownBlock,
)
from folio.schemas.images import FocalPoint
from folio.services.block_normalizer import (
    first_paragraph_text,
    iter_image_sources,
    legacy_string_to_paragraph,
    normalize_block,
    normalize_blocks,
    strip_inline_html,
)


def test_legacy_string_becomes_single_paragraph() -> None:
    assert normalize_blocks("hello") == [ParagraphBlock(text="hello")]
    assert legacy_string_to_paragraph("hello") == [ParagraphBlock(text="hello")]


def test_blank_string_and_non_list_payloads_yield_empty_list() -> None:
    assert normalize_blocks("   ") == []
    assert normalize_blocks(None) == []
    assert normalize_blocks([]) == []
    assert normalize_blocks(42) == []
    assert normalize_blocks({"title": "not blocks"}) == []


def test_malformed_elements_keep_length_and_order() -> None:
    raw = [
        {"kind": "heading", "level": 2, "text": "Intro"},
        "just a string",
        {"kind": "mystery", "payload": 1},
        {"kind": "paragraph"},
        None,
        {"kind": "divider"},
    ]

    blocks = normalize_blocks(raw)

    assert len(blocks) == len(raw)
    assert [block.kind for block in blocks] == [
        "heading",
        "unknown",
        "unknown",
        "unknown",
        "unknown",
        "divider",
    ]
    assert blocks[2].original_kind == "mystery"
    assert blocks[2].raw == {"kind": "mystery", "payload": 1}


def test_unknown_block_raw_is_a_copy() -> None:
    element = {"type": "carousel", "slides": [{"url": "a"}]}

    block = normalize_block(element)
    assert isinstance(block, UnknownBlock)
    element["slides"].append({"url": "b"})

    assert block.raw == {"type": "carousel", "slides": [{"url": "a"}]}


def test_kind_matching_is_case_insensitive_and_trimmed() -> None:
    blocks = normalize_blocks([{"type": "  Heading ", "content": "Title", "metadata": {"level": 3}}])

    assert blocks == [HeadingBlock(level=3, text="Title")]


def test_heading_defaults_and_invalid_level() -> None:
    default, invalid, named = normalize_blocks(
        [
            {"kind": "heading", "text": "Default"},
            {"kind": "heading", "text": "Too deep", "level": 9},
            {"kind": "heading", "text": "Named", "level": "h4"},
        ]
    )

    assert isinstance(default, HeadingBlock) and default.level == 2
    assert isinstance(invalid, UnknownBlock)
    assert isinstance(named, HeadingBlock) and named.level == 4


def test_stored_editor_shape_uses_content_and_metadata() -> None:
    raw = [
        {
            "id": "b1",
            "type": "image",
            "content": "https://cdn.example.com/a.jpg",
            "metadata": {"alt": "Set model", "caption": "Act one", "focalPoint": {"x": 25, "y": 75}},
        },
        {
            "id": "b2",
            "type": "code",
            "content": "print('hi')",
            "metadata": {"language": "python"},
        },
        {
            "id": "b3",
            "type": "list",
            "content": "",
            "metadata": {"items": ["one", "two"], "listType": "numbered"},
        },
    ]

    image, code, listing = normalize_blocks(raw)

    assert isinstance(image, ImageBlock)
    assert image.id == "b1"
    assert image.image.location() == "https://cdn.example.com/a.jpg"
    assert image.alt == "Set model"
    assert image.caption == "Act one"
    assert image.focal_point == FocalPoint(x=0.25, y=0.75)
    assert code == CodeBlock(id="b2", language="python", source="print('hi')")
    assert listing == ListBlock(id="b3", items=["one", "two"], ordered=True)


def test_code_language_defaults_to_plaintext() -> None:
    [block] = normalize_blocks([{"kind": "code", "source": "x = 1"}])

    assert block == CodeBlock(language="plaintext", source="x = 1")


def test_video_alias_becomes_embed_with_detected_provider() -> None:
    [block] = normalize_blocks(
        [{"type": "video", "content": "https://youtu.be/abc123", "metadata": {"videoType": "custom"}}]
    )

    assert isinstance(block, EmbedBlock)
    assert block.url == "https://youtu.be/abc123"
    assert block.provider == "youtube"


def test_embed_without_url_is_unknown() -> None:
    [block] = normalize_blocks([{"kind": "embed", "url": "   "}])

    assert isinstance(block, UnknownBlock)
    assert block.original_kind == "embed"


def test_gallery_drops_entries_without_location_but_survives() -> None:
    [gallery, empty] = normalize_blocks(
        [
            {
                "kind": "gallery",
                "images": [
                    "https://cdn.example.com/1.jpg",
                    {"src": "  "},
                    {"path": "https://cdn.example.com/2.jpg", "caption": "Detail", "alt": "Paint"},
                    42,
                ],
            },
            {"kind": "gallery", "images": [{"url": ""}]},
        ]
    )

    assert isinstance(gallery, GalleryBlock)
    assert [entry.image.location() for entry in gallery.images] == [
        "https://cdn.example.com/1.jpg",
        "https://cdn.example.com/2.jpg",
    ]
    assert gallery.images[1].caption == "Detail"
    assert isinstance(empty, GalleryBlock)
    assert empty.images == []


def test_every_kind_has_a_builder() -> None:
    minimal = {
        "paragraph": {"text": "p"},
        "heading": {"text": "h"},
        "image": {"image": {"url": "https://cdn.example.com/a.jpg"}},
        "gallery": {"images": []},
        "code": {"source": "x = 1"},
        "embed": {"url": "https://vimeo.com/1"},
        "quote": {"text": "q"},
        "list": {"items": ["a"]},
        "divider": {},
    }

    assert set(minimal) == BLOCK_KINDS - {"unknown"}
    for kind, fields in minimal.items():
        assert normalize_block({"kind": kind, **fields}).kind == kind


def test_quote_and_divider_blocks() -> None:
    quote, divider = normalize_blocks(
        [
            {"kind": "quote", "text": "Design is story.", "attribution": "A. Director"},
            {"type": "divider"},
        ]
    )

    assert quote == QuoteBlock(text="Design is story.", attribution="A. Director")
    assert divider == DividerBlock()


def test_blocks_wrapper_is_unwrapped() -> None:
    blocks = normalize_blocks({"blocks": [{"kind": "paragraph", "text": "Step one"}]})

    assert blocks == [ParagraphBlock(text="Step one")]


def test_first_paragraph_text_strips_markup() -> None:
    blocks = normalize_blocks(
        [
            {"kind": "heading", "text": "Title"},
            {"kind": "paragraph", "text": "   "},
            {"kind": "paragraph", "text": "<p>Light &amp; <strong>shadow</strong></p>"},
        ]
    )

    assert first_paragraph_text(blocks) == "Light & shadow"
    assert strip_inline_html("<em>a</em>\n\n b") == "a b"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("Budget < 50 units and > 10 units per scene", "Budget < 50 units and > 10 units per scene"),
        ("<p>Rake 1:12 &lt; 1:8 <br/>on stage</p>", "Rake 1:12 < 1:8 on stage"),
        ("https://cdn.example.com/plan.pdf", "https://cdn.example.com/plan.pdf"),
        ("  plain\ttext  ", "plain text"),
    ],
)
def test_strip_inline_html_keeps_bare_angle_brackets(value: str, expected: str) -> None:
    assert strip_inline_html(value) == expected


def test_iter_image_sources_walks_images_and_galleries_in_order() -> None:
    blocks = normalize_blocks(
        [
            {"kind": "gallery", "images": ["https://cdn.example.com/g1.jpg"]},
            {"kind": "image", "image": {"url": "https://cdn.example.com/i1.jpg"}},
        ]
    )

    locations = [source.location() for source, _ in iter_image_sources(blocks)]

    assert locations == ["https://cdn.example.com/g1.jpg", "https://cdn.example.com/i1.jpg"]
