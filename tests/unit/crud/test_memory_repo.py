"""Unit tests for crud/memory_repo.py"""

import pytest

from mdcms.core.errors import NotFound
from mdcms.crud.factory import create_page
from mdcms.crud.memory_repo import MemoryRepo


def test_saved_pages_are_copies():
    repo = MemoryRepo()
    page = create_page()
    repo.save_page(page)
    page.title = "Changed after save"
    assert repo.list_pages()[0].title == "New Page"


def test_content_payload_round_trip():
    repo = MemoryRepo()
    page = create_page()
    repo.save_page(page)
    payload = {"blocks": [{"type": "paragraph", "order": 0, "segments": [{"content": "x"}]}]}
    repo.save_page_content(page.id, payload)
    payload["blocks"].clear()
    assert repo.read_page_content(page.id)["blocks"][0]["segments"] == [{"content": "x"}]
    assert repo.list_pages()[0].blocks[0].text == "x"


def test_missing_page_raises_not_found():
    repo = MemoryRepo()
    with pytest.raises(NotFound):
        repo.delete_page("missing")
    with pytest.raises(NotFound):
        repo.save_page_content("missing", {"blocks": []})
    with pytest.raises(NotFound):
        repo.read_page_content("missing")


def test_save_pages_applies_deletions_then_saves():
    repo = MemoryRepo()
    old, new = create_page(), create_page()
    repo.save_page(old)
    repo.save_pages([new], deleted=[old.id, "missing-id"])
    assert [p.id for p in repo.list_pages()] == [new.id]
