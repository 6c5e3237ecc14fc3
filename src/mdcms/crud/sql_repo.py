"""SQLModel-backed page repository: page upsert and transactional block/segment replacement"""

from __future__ import annotations
from typing import Any, Iterable

from sqlmodel import Session, select

from mdcms.core.errors import NotFound
from mdcms.core.utils.log import get_logger
from mdcms.crud.database import init_db, session_scope
from mdcms.crud.models import Page, blocks_from_content, page_content
from mdcms.crud.repo import PageRepo
from mdcms.crud.tables import BlockRow, PageRow, SegmentRow


logger = get_logger(__name__)


def _row_to_page(row: PageRow, content: dict[str, Any]) -> Page:
    return Page(
        id=row.id,
        slug=row.slug,
        title=row.title,
        description=row.description,
        is_published=row.is_published,
        version=row.version,
        created_at=row.created_at,
        updated_at=row.updated_at,
        blocks=blocks_from_content(content),
    )


def _page_to_row(page: Page, existing: PageRow | None) -> PageRow:
    row = existing or PageRow(id=page.id, slug=page.slug, title=page.title)
    row.slug = page.slug
    row.title = page.title
    row.description = page.description
    row.is_published = page.is_published
    row.version = page.version
    row.created_at = page.created_at
    row.updated_at = page.updated_at
    return row


def _delete_content(session: Session, page_id: str) -> None:
    """Delete every block and segment belonging to a page."""
    blocks = session.exec(select(BlockRow).where(BlockRow.page_id == page_id)).all()
    for b in blocks:
        for s in session.exec(select(SegmentRow).where(SegmentRow.block_id == b.id)).all():
            session.delete(s)
        session.delete(b)
    session.flush()


def _replace_content(session: Session, page_id: str, content: dict[str, Any]) -> None:
    """Delete existing blocks/segments for a page and insert the payload in order."""
    _delete_content(session, page_id)

    for block in blocks_from_content(content):
        session.add(BlockRow(
            id=block.id,
            page_id=page_id,
            block_type=block.type.value,
            position=block.order,
            level=block.level,
        ))
        session.flush()
        for position, seg in enumerate(block.content):
            session.add(SegmentRow(
                id=seg.id,
                block_id=block.id,
                position=position,
                segment_type=seg.type.value,
                text=seg.content,
                data=seg.data.model_dump(mode="json", by_alias=True) if seg.data is not None else None,
            ))

    session.flush()


def _read_content(session: Session, page_id: str) -> dict[str, Any]:
    blocks = session.exec(
        select(BlockRow).where(BlockRow.page_id == page_id).order_by(BlockRow.position)
    ).all()
    return {
        "blocks": [
            {
                "id": b.id,
                "type": b.block_type,
                "order": b.position,
                "level": b.level,
                "segments": [
                    {"id": s.id, "type": s.segment_type, "content": s.text, "data": s.data}
                    for s in session.exec(
                        select(SegmentRow).where(SegmentRow.block_id == b.id).order_by(SegmentRow.position)
                    ).all()
                ],
            }
            for b in blocks
        ]
    }


def _release_slugs(session: Session, pages: list[Page]) -> None:
    """Move stored rows whose slug is changing onto placeholder slugs.

    Placeholders contain '~', which slugify never emits, so they cannot
    collide with a real slug written later in the same transaction.
    """
    moved = False
    for page in pages:
        row = session.get(PageRow, page.id)
        if row is not None and row.slug != page.slug:
            row.slug = f"~{row.id}"
            session.add(row)
            moved = True
    if moved:
        session.flush()


def _upsert(session: Session, page: Page) -> None:
    row = _page_to_row(page, session.get(PageRow, page.id))
    session.add(row)
    session.flush()
    _replace_content(session, page.id, page_content(page))


class SQLRepo(PageRepo):
    """One session and transaction per call; content saves are all-or-nothing."""

    def __init__(self, engine):
        self.engine = engine

    def init(self) -> None:
        init_db(self.engine)

    def list_pages(self) -> list[Page]:
        with session_scope(self.engine) as session:
            rows = session.exec(select(PageRow).order_by(PageRow.created_at)).all()
            return [_row_to_page(r, _read_content(session, r.id)) for r in rows]

    def save_page(self, page: Page) -> None:
        self.save_pages([page])

    def save_pages(self, pages: Iterable[Page], deleted: Iterable[str] = ()) -> None:
        pages = list(pages)
        with session_scope(self.engine) as session:
            for page_id in deleted:
                row = session.get(PageRow, page_id)
                if row is None:
                    logger.debug("page_delete_skipped", page_id=page_id)
                    continue
                _delete_content(session, page_id)
                session.delete(row)
            session.flush()

            _release_slugs(session, pages)
            for page in pages:
                _upsert(session, page)
            session.commit()
        logger.debug("pages_saved", saved=len(pages))

    def delete_page(self, page_id: str) -> None:
        with session_scope(self.engine) as session:
            row = session.get(PageRow, page_id)
            if row is None:
                raise NotFound("Page", page_id)
            _delete_content(session, page_id)
            session.delete(row)
            session.commit()

    def save_page_content(self, page_id: str, content: dict[str, Any]) -> None:
        with session_scope(self.engine) as session:
            if session.get(PageRow, page_id) is None:
                raise NotFound("Page", page_id)
            _replace_content(session, page_id, content)
            session.commit()

    def read_page_content(self, page_id: str) -> dict[str, Any]:
        with session_scope(self.engine) as session:
            if session.get(PageRow, page_id) is None:
                raise NotFound("Page", page_id)
            return _read_content(session, page_id)
