from __future__ import annotations
from sqlmodel import Session, SQLModel, create_engine

from mdcms.crud import tables  # noqa: F401  registers table metadata


def make_engine(db_url: str):
    connect_args = {"check_same_thread": False} if db_url.startswith("sqlite") else {}
    return create_engine(db_url, echo=False, connect_args=connect_args)


def init_db(engine) -> None:
    SQLModel.metadata.create_all(engine)


def drop_db(engine) -> None:
    SQLModel.metadata.drop_all(engine)


def session_scope(engine) -> Session:
    return Session(engine)
