"""Unit tests for crud/database.py and the table definitions"""

import pytest
from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from mdcms.crud.database import drop_db, init_db, make_engine, session_scope
from mdcms.crud.tables import PageRow


EXPECTED_TABLES = {"pages", "content_blocks", "content_segments"}


def test_make_engine_returns_engine():
    assert isinstance(make_engine("sqlite://"), Engine)


def test_init_and_drop_db(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path}/schema.db")
    init_db(engine)
    assert EXPECTED_TABLES.issubset(inspect(engine).get_table_names())
    drop_db(engine)
    assert not EXPECTED_TABLES & set(inspect(engine).get_table_names())


def test_session_scope_returns_session(engine):
    with session_scope(engine) as session:
        assert isinstance(session, Session)


def test_page_slug_is_unique(engine):
    """Two page rows cannot share a slug."""
    with Session(engine) as session:
        session.add(PageRow(id="a", slug="same", title="A"))
        session.add(PageRow(id="b", slug="same", title="B"))
        with pytest.raises(IntegrityError):
            session.commit()
