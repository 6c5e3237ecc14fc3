"""Unit tests for core/corpus.py"""

import asyncio
import threading
from datetime import datetime

import pytest

from mdcms.core.corpus import (
    ALL_CATEGORY, build_listing, category_index, discover_files, load_entry,
    parse_date, read_time, scan_corpus, scan_corpus_async, slug_for, tag_index,
)
from mdcms.core.errors import ScanCancelled
from mdcms.core.models import CorpusEntry


def test_discover_files_sorted_md_and_mdx_only(corpus_dir):
    files = discover_files(corpus_dir)
    assert [slug_for(p, corpus_dir) for p in files] == [
        "broken", "draft", "first", "guides/second", "undated",
    ]


def test_discover_files_accepts_single_file(corpus_dir):
    assert discover_files(corpus_dir / "first.md") == [corpus_dir / "first.md"]
    assert discover_files(corpus_dir / "notes.txt") == []


def test_slug_uses_forward_slashes(corpus_dir):
    assert slug_for(corpus_dir / "guides" / "second.mdx", corpus_dir) == "guides/second"


@pytest.mark.parametrize("words,expected", [(0, 1), (1, 1), (200, 1), (201, 2), (401, 3)])
def test_read_time_rounds_up_with_minimum_one(words, expected):
    assert read_time("word " * words) == expected


def test_read_time_custom_speed():
    assert read_time("word " * 100, words_per_minute=50) == 2


def test_load_entry_parses_document(corpus_dir):
    entry = load_entry(corpus_dir / "first.md", corpus_dir)
    assert entry.slug == "first"
    assert entry.metadata["title"] == "First"
    assert entry.body == "Hello world."
    assert entry.read_time == 1
    assert entry.error is None


def test_load_entry_degrades_to_placeholder(corpus_dir):
    entry = load_entry(corpus_dir / "broken.md", corpus_dir)
    assert entry.error
    assert entry.metadata["title"] == "Error"
    assert entry.metadata["status"] == "error"
    assert entry.body == ""


def test_load_entry_propagates_read_errors(tmp_path):
    path = tmp_path / "binary.md"
    path.write_bytes(b"---\ntitle: \xff\xfe\n---\n")
    with pytest.raises(UnicodeDecodeError):
        load_entry(path, tmp_path)


def test_scan_corpus_returns_every_file(corpus_dir):
    entries = scan_corpus(corpus_dir)
    assert len(entries) == 5
    assert sum(1 for e in entries if e.error) == 1


def test_scan_corpus_single_file_slug(corpus_dir):
    (entry,) = scan_corpus(corpus_dir / "first.md")
    assert entry.slug == "first"


def test_scan_corpus_honours_cancel_event(corpus_dir):
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(ScanCancelled):
        scan_corpus(corpus_dir, cancel=cancel)


def test_scan_corpus_async_matches_sync(corpus_dir):
    entries = asyncio.run(scan_corpus_async(corpus_dir))
    assert [e.slug for e in entries] == [e.slug for e in scan_corpus(corpus_dir)]


def test_build_listing_newest_first_without_drafts(corpus_dir):
    listing = build_listing(scan_corpus(corpus_dir))
    assert [e.slug for e in listing] == ["guides/second", "first", "broken", "undated"]


def test_build_listing_with_drafts(corpus_dir):
    listing = build_listing(scan_corpus(corpus_dir), include_drafts=True)
    assert [e.slug for e in listing][:3] == ["draft", "guides/second", "first"]


def test_category_index(corpus_dir):
    index = category_index(scan_corpus(corpus_dir))
    assert index[ALL_CATEGORY] == ["draft", "first", "guides/second", "undated"]
    assert index["News"] == ["first", "guides/second"]
    assert index["Guides"] == ["guides/second"]
    assert "Error" not in index


def test_tag_index_sorted(corpus_dir):
    index = tag_index(scan_corpus(corpus_dir))
    assert list(index) == ["intro", "python"]
    assert index["intro"] == ["first", "guides/second"]


def _entry(slug, published=None):
    metadata = {'title': slug}
    if published is not None:
        metadata['publishedAt'] = published
    return CorpusEntry(slug=slug, path=f"{slug}.md", metadata=metadata, body='', read_time=1)


@pytest.mark.parametrize("value,expected", [
    ("2024-10-01", datetime(2024, 10, 1)),
    ("2024-9-1", datetime(2024, 9, 1)),
    ("2024-03-01T08:30:00", datetime(2024, 3, 1, 8, 30)),
    ("2024-03-01T08:30:00+02:00", datetime(2024, 3, 1, 6, 30)),
    ("2024-03-01T08:30:00Z", datetime(2024, 3, 1, 8, 30)),
    ("soon", None),
    ("2024-13-40", None),
])
def test_parse_date(value, expected):
    assert parse_date(value) == expected


def test_build_listing_orders_unpadded_dates_by_value():
    """2024-10-01 is newer than 2024-9-01 even though it sorts lower as text."""
    listing = build_listing([_entry("sep", "2024-9-01"), _entry("oct", "2024-10-01")])
    assert [e.slug for e in listing] == ["oct", "sep"]


def test_build_listing_unparsable_dates_go_with_undated():
    listing = build_listing([
        _entry("b-undated"), _entry("a-someday", "someday"), _entry("dated", "2023-1-5"),
    ])
    assert [e.slug for e in listing] == ["dated", "a-someday", "b-undated"]


def test_build_listing_mixes_dates_and_datetimes():
    listing = build_listing([
        _entry("morning", "2024-03-01T08:00:00Z"), _entry("day", "2024-03-02"),
    ])
    assert [e.slug for e in listing] == ["day", "morning"]
