"""Persistence boundary for editor pages"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Iterable

from mdcms.crud.models import Page


class PageRepo(ABC):
    """Storage collaborator for PageStore.

    Content payloads have the shape {"blocks": [{...block, "segments": [...]}]}
    with blocks in render order. Implementations own transactional guarantees.
    """

    def init(self) -> None:
        """Prepare storage (create tables, directories, ...). No-op by default."""

    @abstractmethod
    def list_pages(self) -> list[Page]:
        raise NotImplementedError

    @abstractmethod
    def save_page(self, page: Page) -> None:
        """Upsert page fields and replace its block tree."""
        raise NotImplementedError

    @abstractmethod
    def save_pages(self, pages: Iterable[Page], deleted: Iterable[str] = ()) -> None:
        """Delete pages by id (absent ids are ignored), then upsert pages, as one unit.

        Slugs freed by the deletions or by renames in the same batch may be
        reused by any page in the batch.
        """
        raise NotImplementedError

    @abstractmethod
    def delete_page(self, page_id: str) -> None:
        """Remove a page with all blocks and segments; NotFound if absent."""
        raise NotImplementedError

    @abstractmethod
    def save_page_content(self, page_id: str, content: dict[str, Any]) -> None:
        """Replace a stored page's blocks and segments; NotFound if the page is absent."""
        raise NotImplementedError

    @abstractmethod
    def read_page_content(self, page_id: str) -> dict[str, Any]:
        raise NotImplementedError
