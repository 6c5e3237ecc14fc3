"""Shared fixtures for crud unit tests"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from mdcms.crud.memory_repo import MemoryRepo
from mdcms.crud.sql_repo import SQLRepo
from mdcms.crud.store import PageStore


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine shared across sessions, with all tables created."""
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="sql_repo")
def sql_repo_fixture(engine):
    return SQLRepo(engine)


@pytest.fixture(name="store")
def store_fixture():
    """A loaded PageStore over an empty in-memory repo."""
    store = PageStore(MemoryRepo())
    store.init()
    store.load()
    return store
