"""
Pluggable storage: one bundle of stores per process, chosen by STORAGE_BACKEND.

Call sites depend on the AccountStore / SessionStore / ContentStore
contracts only; build_storage resolves the concrete backend once at
start-up and the result is passed down explicitly.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from portal.schemas.content import News, Project
from portal.storage.base import AccountStore, Clock, ContentStore, SessionStore, utc_now
from portal.storage.memory import MemoryAccountStore, MemoryContentStore, MemorySessionStore

if TYPE_CHECKING:
    from portal.core.config import Settings

logger = logging.getLogger(__name__)

__all__ = [
    "AccountStore",
    "ContentStore",
    "SessionStore",
    "Storage",
    "build_storage",
    "database_storage",
    "memory_storage",
]


@dataclass
class Storage:
    """The stores serving one process. engine is set only for the database backend."""

    backend: str
    accounts: AccountStore
    sessions: SessionStore
    news: ContentStore[News]
    projects: ContentStore[Project]
    engine: Engine | None = None

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()


def memory_storage(clock: Clock = utc_now) -> Storage:
    return Storage(
        backend="memory",
        accounts=MemoryAccountStore(clock),
        sessions=MemorySessionStore(clock),
        news=MemoryContentStore(News, clock),
        projects=MemoryContentStore(Project, clock),
    )


def database_storage(engine: Engine, clock: Clock = utc_now) -> Storage:
    from portal.core.database import create_session_factory
    from portal.models import NewsRow, ProjectRow
    from portal.storage.database import (
        DatabaseAccountStore,
        DatabaseContentStore,
        DatabaseSessionStore,
    )

    factory = create_session_factory(engine)
    return Storage(
        backend="database",
        accounts=DatabaseAccountStore(factory, clock),
        sessions=DatabaseSessionStore(factory, clock),
        news=DatabaseContentStore(factory, NewsRow, News, clock),
        projects=DatabaseContentStore(factory, ProjectRow, Project, clock),
        engine=engine,
    )


def build_storage(settings: "Settings") -> Storage:
    """Select the backend named by settings.STORAGE_BACKEND."""
    if settings.STORAGE_BACKEND == "memory":
        logger.info("Using in-memory storage; data is lost on restart.")
        return memory_storage()
    if settings.STORAGE_BACKEND == "database":
        from portal.core.database import create_db_engine, init_schema

        engine = create_db_engine(settings.DATABASE_URL, echo=settings.DEBUG)
        if settings.DATABASE_INIT_SCHEMA:
            try:
                init_schema(engine)
            except SQLAlchemyError:
                # Start anyway; each request will surface StorageError until the DB is back.
                logger.exception("Schema initialization failed; database unavailable at startup")
        logger.info("Using database storage", extra={"dialect": engine.dialect.name})
        return database_storage(engine)
    raise ValueError(f"Unknown STORAGE_BACKEND: {settings.STORAGE_BACKEND!r}")
