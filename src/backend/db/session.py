"""
Async SQLAlchemy engine and session management.

The engine is created lazily from ``settings.DATABASE_URL`` and shared for the
life of the process. ``init_db`` creates the governance tables when they are
missing; schema changes beyond that are out of scope for this module.
"""

import structlog
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from core.config import settings
from db.base import Base

logger = structlog.get_logger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _engine_kwargs(url: str) -> dict:
    kwargs: dict = {"echo": settings.DATABASE_ECHO}
    if url.startswith("sqlite") and ":memory:" in url:
        # A single shared connection keeps an in-memory database alive across sessions
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs["pool_pre_ping"] = True
    return kwargs


def get_engine(url: str | None = None) -> AsyncEngine:
    """Get or create the process-wide async engine."""
    global _engine
    if _engine is None:
        database_url = url or settings.DATABASE_URL
        _engine = create_async_engine(database_url, **_engine_kwargs(database_url))
        logger.info("database_engine_created", dialect=_engine.dialect.name)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the session factory bound to the shared engine."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


async def init_db() -> None:
    """Create governance tables if they do not exist."""
    import models  # noqa: F401  (registers ORM models on Base.metadata)

    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database_initialized")


async def close_db() -> None:
    """Dispose of the engine and forget the session factory."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.info("database_connections_closed")
    _engine = None
    _session_factory = None
