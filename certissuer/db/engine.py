"""SQLAlchemy engine and session factory.

When DATABASE_URL is configured, provides:
- an engine for the configured database
- a session factory used by SqlStateStore
- a FastAPI lifespan hook for startup/shutdown

When DATABASE_URL is None, engine and session_factory are None and the
service falls back to InMemoryStateStore.

Lifecycle calls never suspend mid-operation, so the store runs on a
plain synchronous Session; FastAPI executes the sync endpoints in its
thread pool.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from certissuer.core.config import SETTINGS

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all table models."""


# --- Engine and session factory (None when no DATABASE_URL) ---

if SETTINGS.database_url:
    engine = create_engine(
        SETTINGS.database_url,
        echo=SETTINGS.is_dev,  # log SQL in dev only
        pool_pre_ping=True,
    )
    session_factory: sessionmaker[Session] | None = sessionmaker(
        engine,
        expire_on_commit=False,
    )
else:
    engine = None
    session_factory = None


@asynccontextmanager
async def lifespan_db():
    """Startup/shutdown hook for the database engine.

    Call from FastAPI's lifespan context manager.
    """
    if engine is None:
        logger.info("No DATABASE_URL configured, using in-memory state store")
        yield
        return

    logger.info("Database engine created: %s", engine.url)
    yield
    engine.dispose()
    logger.info("Database engine disposed")
