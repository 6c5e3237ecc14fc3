import copy
from dataclasses import dataclass, field
from typing import Any, Iterable

from mdcms.core.errors import NotFound
from mdcms.crud.models import Page, blocks_from_content, page_content
from mdcms.crud.repo import PageRepo


@dataclass
class MemoryRepo(PageRepo):
    """Process-local repo; stores JSON-shaped copies so callers never share objects with it."""
    _pages: dict[str, dict[str, Any]] = field(default_factory=dict)
    _content: dict[str, dict[str, Any]] = field(default_factory=dict)

    def list_pages(self) -> list[Page]:
        return [
            Page.model_validate({**header, "blocks": blocks_from_content(self._content.get(pid, {}))})
            for pid, header in self._pages.items()
        ]

    def save_page(self, page: Page) -> None:
        self._pages[page.id] = page.model_dump(mode="json", by_alias=True, exclude={"blocks"})
        self._content[page.id] = page_content(page)

    def save_pages(self, pages: Iterable[Page], deleted: Iterable[str] = ()) -> None:
        for page_id in deleted:
            self._pages.pop(page_id, None)
            self._content.pop(page_id, None)
        for page in pages:
            self.save_page(page)

    def delete_page(self, page_id: str) -> None:
        if page_id not in self._pages:
            raise NotFound("Page", page_id)
        del self._pages[page_id]
        self._content.pop(page_id, None)

    def save_page_content(self, page_id: str, content: dict[str, Any]) -> None:
        if page_id not in self._pages:
            raise NotFound("Page", page_id)
        self._content[page_id] = copy.deepcopy(content)

    def read_page_content(self, page_id: str) -> dict[str, Any]:
        if page_id not in self._pages:
            raise NotFound("Page", page_id)
        return copy.deepcopy(self._content.get(page_id, {"blocks": []}))
