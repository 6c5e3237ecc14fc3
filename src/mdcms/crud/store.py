"""PageStore: the editor's in-process page collection with explicit load/persist lifecycle

A store is constructed once per process or session and passed to whatever
needs it. Mutations of one page are serialised by that page's lock; the
store-level lock guards the page index and slug uniqueness.
"""

import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, Optional

from mdcms.core.convert import headings_from_blocks
from mdcms.core.errors import NotFound, StoreNotLoaded, VersionConflict
from mdcms.core.headings import MAX_LEVEL
from mdcms.core.models import TOCNode
from mdcms.core.toc import build_tree
from mdcms.core.utils.log import get_logger
from mdcms.core.utils.slug import slugify, unique_slug
from mdcms.crud.factory import create_block, create_page, create_segment
from mdcms.crud.memory_repo import MemoryRepo
from mdcms.crud.models import (
    Block, BlockTypeEnum, Page, PagePatch, Segment, SegmentTypeEnum, blocks_from_content,
)
from mdcms.crud.repo import PageRepo


logger = get_logger(__name__)


class PageStore:

    def __init__(self, repo: Optional[PageRepo] = None):
        self.repo = repo if repo is not None else MemoryRepo()
        self._pages: dict[str, Page] = {}
        self._locks: dict[str, threading.RLock] = {}
        self._lock = threading.RLock()
        self._dirty: set[str] = set()
        self._deleted: set[str] = set()
        self._loaded = False

    # --- lifecycle ---

    def init(self) -> None:
        """Prepare the backing repo (e.g. create tables)."""
        self.repo.init()

    def load(self) -> None:
        """Replace in-memory state with the repo's pages; pending changes are discarded."""
        pages = self.repo.list_pages()
        with self._lock:
            self._pages = {p.id: p for p in pages}
            self._locks = {p.id: threading.RLock() for p in pages}
            self._dirty.clear()
            self._deleted.clear()
            self._loaded = True
        logger.info("store_loaded", pages=len(pages))

    def persist(self) -> int:
        """Write pending deletions and changed pages to the repo in one batch. Returns pages written.

        Pending state is cleared only after the repo accepts the batch, so a
        failed persist can simply be retried. Pages edited while the batch is
        being written stay pending for the next persist.
        """
        self._require_loaded()
        with self._lock:
            deleted = set(self._deleted)
            pending = [(pid, self._locks[pid]) for pid in self._dirty if pid in self._pages]

        snapshot: list[Page] = []
        for page_id, lock in pending:
            with lock:
                page = self._pages.get(page_id)
                if page is not None:
                    snapshot.append(page.model_copy(deep=True))

        self.repo.save_pages(snapshot, deleted)

        with self._lock:
            self._deleted -= deleted
            for saved in snapshot:
                current = self._pages.get(saved.id)
                if current is None or current.version == saved.version:
                    self._dirty.discard(saved.id)
        logger.info("store_persisted", saved=len(snapshot), deleted=len(deleted))
        return len(snapshot)

    @property
    def loaded(self) -> bool:
        return self._loaded

    def _require_loaded(self) -> None:
        if not self._loaded:
            raise StoreNotLoaded("PageStore.load() must be called before use")

    @contextmanager
    def _editing(self, page_id: str, expected_version: Optional[int] = None) -> Iterator[Page]:
        """Lock a page for mutation; on success bump its version and updated_at and mark it dirty."""
        self._require_loaded()
        with self._lock:
            if page_id not in self._pages:
                raise NotFound("Page", page_id)
            lock = self._locks[page_id]
        with lock:
            page = self._pages.get(page_id)
            if page is None:
                raise NotFound("Page", page_id)
            if expected_version is not None and expected_version != page.version:
                raise VersionConflict(page_id, expected_version, page.version)
            yield page
            page.version += 1
            page.updated_at = datetime.now()
            with self._lock:
                self._dirty.add(page_id)

    def _taken_slugs(self, exclude: Optional[str] = None) -> set[str]:
        return {p.slug for p in self._pages.values() if p.id != exclude}

    # --- pages ---

    def create_page(self, title: Optional[str] = None) -> Page:
        """New page with a unique slug, derived from title when one is given."""
        self._require_loaded()
        page = create_page()
        if title:
            page.title = title
            page.blocks[0].content[0].content = title
        with self._lock:
            base = slugify(title) if title else page.slug
            page.slug = unique_slug(base, self._taken_slugs())
            self._pages[page.id] = page
            self._locks[page.id] = threading.RLock()
            self._dirty.add(page.id)
        logger.info("page_created", page_id=page.id, slug=page.slug)
        return page

    def add_page(self, page: Page) -> Page:
        """Register an externally built page (e.g. an imported document); its slug is made unique."""
        self._require_loaded()
        with self._lock:
            if page.id in self._pages:
                raise ValueError(f"Page already exists: {page.id}")
            page.slug = unique_slug(slugify(page.slug), self._taken_slugs())
            self._pages[page.id] = page
            self._locks[page.id] = threading.RLock()
            self._dirty.add(page.id)
        logger.info("page_added", page_id=page.id, slug=page.slug)
        return page

    def get_page(self, page_id: str) -> Page:
        self._require_loaded()
        page = self._pages.get(page_id)
        if page is None:
            raise NotFound("Page", page_id)
        return page

    def get_by_slug(self, slug: str) -> Optional[Page]:
        self._require_loaded()
        with self._lock:
            return next((p for p in self._pages.values() if p.slug == slug), None)

    def list_pages(self) -> list[Page]:
        """All pages, oldest first."""
        self._require_loaded()
        with self._lock:
            return sorted(self._pages.values(), key=lambda p: p.created_at)

    def update_page(
        self,
        page_id: str,
        patch: dict[str, Any],
        expected_version: Optional[int] = None,
        ) -> Page:
        """Merge patch into the page; a patched slug is normalised and made unique.

        Raises NotFound, VersionConflict, or pydantic ValidationError for unknown fields.
        """
        changes = PagePatch.model_validate(patch).model_dump(exclude_unset=True)
        with self._editing(page_id, expected_version) as page:
            if changes.get("slug") is not None:
                with self._lock:
                    changes["slug"] = unique_slug(slugify(changes["slug"]), self._taken_slugs(exclude=page_id))
            for name, value in changes.items():
                if value is not None:
                    setattr(page, name, value)
        return page

    def delete_page(self, page_id: str) -> None:
        """Drop a page and all of its blocks and segments."""
        self._require_loaded()
        with self._lock:
            lock = self._locks.get(page_id)
        if lock is None:
            raise NotFound("Page", page_id)
        with lock, self._lock:
            if page_id not in self._pages:
                raise NotFound("Page", page_id)
            del self._pages[page_id]
            del self._locks[page_id]
            self._dirty.discard(page_id)
            self._deleted.add(page_id)
        logger.info("page_deleted", page_id=page_id)

    # --- blocks ---

    def add_block(
        self,
        page_id: str,
        type: BlockTypeEnum | str = BlockTypeEnum.paragraph,
        order: Optional[int] = None,
        ) -> Block:
        """Append a block; without an explicit order it goes after the current last block."""
        with self._editing(page_id) as page:
            if order is None:
                order = max((b.order for b in page.blocks), default=-1) + 1
            block = create_block(type, order)
            page.blocks.append(block)
        return block

    def update_block(
        self,
        page_id: str,
        block_id: str,
        type: BlockTypeEnum | str | None = None,
        order: Optional[int] = None,
        level: Optional[int] = None,
        ) -> Block:
        with self._editing(page_id) as page:
            block = page.find_block(block_id)
            changes = {k: v for k, v in (("type", type), ("order", order), ("level", level)) if v is not None}
            updated = Block.model_validate({**block.model_dump(), **changes})
            page.blocks[page.blocks.index(block)] = updated
        return updated

    def remove_block(self, page_id: str, block_id: str) -> None:
        with self._editing(page_id) as page:
            page.blocks.remove(page.find_block(block_id))

    def move_block(self, page_id: str, block_id: str, index: int) -> list[Block]:
        """Move a block to index in render order and renumber orders 0..n-1."""
        with self._editing(page_id) as page:
            ordered = page.ordered_blocks()
            block = page.find_block(block_id)
            ordered.remove(block)
            index = max(0, min(index, len(ordered)))
            ordered.insert(index, block)
            for position, b in enumerate(ordered):
                b.order = position
            page.blocks = ordered
        return ordered

    # --- segments ---

    def add_segment(
        self,
        page_id: str,
        block_id: str,
        type: SegmentTypeEnum | str = SegmentTypeEnum.text,
        index: Optional[int] = None,
        ) -> Segment:
        """Insert a new segment at index (default: end of block)."""
        with self._editing(page_id) as page:
            block = page.find_block(block_id)
            segment = create_segment(type)
            block.content.insert(len(block.content) if index is None else index, segment)
        return segment

    def update_segment(
        self,
        page_id: str,
        block_id: str,
        segment_id: str,
        content: Optional[str] = None,
        data: Optional[dict[str, Any]] = None,
        type: SegmentTypeEnum | str | None = None,
        ) -> Segment:
        """Edit a segment in place; the result is re-validated so type/data stay consistent."""
        with self._editing(page_id) as page:
            block = page.find_block(block_id)
            segment = block.find_segment(segment_id)
            merged = segment.model_dump(by_alias=True)
            if type is not None:
                merged["type"] = SegmentTypeEnum(type)
                merged["data"] = None
            if content is not None:
                merged["content"] = content
            if data is not None:
                merged["data"] = data
            updated = Segment.model_validate(merged)
            block.content[block.content.index(segment)] = updated
        return updated

    def remove_segment(self, page_id: str, block_id: str, segment_id: str) -> None:
        with self._editing(page_id) as page:
            block = page.find_block(block_id)
            block.content.remove(block.find_segment(segment_id))

    # --- bulk content ---

    def save_page_content(self, page_id: str, content: dict[str, Any]) -> Page:
        """Replace a page's block tree from an editor payload {"blocks": [{..., "segments": [...]}]}."""
        blocks = blocks_from_content(content)
        with self._editing(page_id) as page:
            page.blocks = blocks
        return page

    def page_toc(self, page_id: str, max_depth: int = MAX_LEVEL) -> list[TOCNode]:
        """TOC tree built from the page's heading blocks."""
        page = self.get_page(page_id)
        return build_tree(headings_from_blocks(page.ordered_blocks(), max_depth))
