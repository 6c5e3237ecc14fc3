"""Unit tests for core/models.py"""

import pytest
from pydantic import ValidationError

from mdcms.core.models import CorpusEntry, Heading, PostMetadata, TOCNode


@pytest.mark.parametrize("level", [0, 7])
def test_heading_level_bounds(level):
    with pytest.raises(ValidationError):
        Heading(id="x", text="X", level=level)


def test_toc_node_children_default_is_independent():
    a = TOCNode(id="a", text="A", level=1)
    b = TOCNode(id="b", text="B", level=1)
    a.children.append(TOCNode(id="c", text="C", level=2))
    assert b.children == []


def test_post_metadata_reads_camel_case_keys():
    view = PostMetadata.from_metadata({
        "title": "T",
        "publishedAt": "2024-01-01",
        "canonicalUrl": "https://example.com/t",
        "readTime": "5",
    })
    assert view.published_at == "2024-01-01"
    assert view.canonical_url == "https://example.com/t"
    assert view.read_time == "5"


def test_post_metadata_keeps_unknown_keys():
    view = PostMetadata.from_metadata({"title": "T", "mood": "sunny"})
    assert view.model_extra == {"mood": "sunny"}


def test_post_metadata_coerces_scalar_to_list_fields():
    view = PostMetadata.from_metadata({"tags": "solo", "categories": ""})
    assert view.tags == ["solo"]
    assert view.categories == []


def test_post_metadata_joins_list_in_scalar_field():
    view = PostMetadata.from_metadata({"author": ["Ann", "Bo"]})
    assert view.author == "Ann, Bo"


def test_post_metadata_description_prefers_summary():
    assert PostMetadata.from_metadata({"summary": "S", "excerpt": "E"}).description == "S"
    assert PostMetadata.from_metadata({"excerpt": "E"}).description == "E"
    assert PostMetadata.from_metadata({}).description is None


def test_corpus_entry_view():
    entry = CorpusEntry(slug="a", path="a.md", metadata={"title": "A", "tags": ["x"]})
    assert entry.view.title == "A"
    assert entry.view.tags == ["x"]
