# etcdtxn/db/session.py
from __future__ import annotations

"""
History store: engine, session factory and the declarative Base.

Runs and their operations are written by HistoryRecorder from whichever
thread completed the operation, and read back by the results browser.
SQLite is the default store; any SQLAlchemy URL works.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from etcdtxn.config import get_settings

Base = declarative_base()


def create_history_engine(url: str) -> Engine:
    """Engine for the history store at url.

    SQLite connections are shared across recorder threads, and an in-memory
    database (`sqlite://`) keeps a single connection so every session sees
    the same tables.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, future=True)
    kwargs = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return create_engine(url, future=True, **kwargs)


engine = create_history_engine(get_settings().database_url)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def get_db():
    """FastAPI dependency yielding a history-store session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
