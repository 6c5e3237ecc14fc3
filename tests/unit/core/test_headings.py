"""Unit tests for core/headings.py"""

import pytest

from mdcms.core.headings import extract_headings, generate_id, iter_heading_lines, sanitize


@pytest.mark.parametrize("text,expected", [
    ("Getting Started", "getting-started"),
    ("API Reference & Examples", "api-reference-examples"),
    ("What is Acme?", "what-is-acme"),
    ("Multiple   Spaces", "multiple-spaces"),
    ("Hello, World!", "hello-world"),
    ("100% Coverage", "100-coverage"),
    ("Acme.io & Widgets", "acmeio-widgets"),
    ("**Bold** `code` <em>tag</em>", "bold-code-tag"),
    ("--already--hyphenated--", "already-hyphenated"),
])
def test_generate_id(text, expected):
    assert generate_id(text) == expected


def test_generate_id_is_deterministic():
    assert generate_id("Some Heading!") == generate_id("Some Heading!")


@pytest.mark.parametrize("text,expected", [
    ("**Bold** title", "Bold title"),
    ("Use `pip`", "Use pip"),
    ("<span class='x'>Tagged</span> text", "Tagged text"),
    ("  padded  ", "padded"),
])
def test_sanitize(text, expected):
    assert sanitize(text) == expected


def test_extract_headings_levels_and_order(sample_post):
    headings = extract_headings(sample_post)
    assert [(h.level, h.id) for h in headings] == [
        (1, "introduction"),
        (2, "install"),
        (2, "usage"),
        (3, "advanced-usage"),
    ]


def test_extract_headings_skips_fenced_code():
    """A '# comment' inside a fenced block is not a heading."""
    body = "# Real\n\n```bash\n# comment\n```\n\n~~~\n## also code\n~~~\n\n## After"
    assert [h.text for h in extract_headings(body)] == ["Real", "After"]


def test_extract_headings_fence_closes_only_on_matching_marker():
    body = "````\n```\n# inside\n```\n````\n# outside"
    assert [h.text for h in extract_headings(body)] == ["outside"]


def test_extract_headings_excludes_deeper_than_max_depth():
    body = "# One\n## Two\n### Three\n#### Four"
    assert [h.level for h in extract_headings(body, max_depth=2)] == [1, 2]


def test_extract_headings_requires_space_after_hashes():
    body = "#hashtag\n####### seven\n#\tTabbed"
    assert [h.text for h in extract_headings(body)] == ["Tabbed"]


def test_extract_headings_drops_closing_sequence():
    headings = extract_headings("## Title ##\n## C# ##")
    assert [h.text for h in headings] == ["Title", "C#"]


def test_extract_headings_sanitizes_text():
    (heading,) = extract_headings("## The **bold** `move`")
    assert heading.text == "The bold move"
    assert heading.id == "the-bold-move"


def test_extract_headings_dedupes_repeated_ids():
    body = "## Setup\n## Setup\n## Setup\n## Setup 2"
    assert [h.id for h in extract_headings(body)] == ["setup", "setup-2", "setup-3", "setup-2-2"]


def test_extract_headings_without_dedupe_keeps_raw_ids():
    body = "## Setup\n## Setup"
    assert [h.id for h in extract_headings(body, dedupe=False)] == ["setup", "setup"]


def test_extract_headings_empty_id_falls_back():
    (heading,) = extract_headings("## ???")
    assert heading.id == "section"


def test_iter_heading_lines_yields_raw_text():
    assert list(iter_heading_lines("# **A**\ntext\n## B")) == [(1, "**A**"), (2, "B")]
