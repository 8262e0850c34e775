"""Async engine, session factory and lifespan.

One request is one transaction: everything a handler writes, including the
daily sequence counter increment, commits or rolls back together. The
counter row stays locked until that commit, so `lock_timeout` bounds how long
a concurrent request queues behind it.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from quotedesk.config import settings

logger = logging.getLogger(__name__)

# ── Engine ───────────────────────────────────────────────────────────

engine: AsyncEngine = create_async_engine(
    settings.db.database_url,
    echo=settings.log_level == "DEBUG",
    pool_size=settings.db.pool_size,
    max_overflow=settings.db.max_overflow,
    pool_pre_ping=True,
    pool_recycle=3600,
    connect_args={
        "server_settings": {
            "application_name": "quotedesk",
            "lock_timeout": str(settings.db.lock_timeout_ms),
        },
    },
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: commit when the handler returns, roll back when it raises."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# ── Lifespan ─────────────────────────────────────────────────────────


@contextlib.asynccontextmanager
async def db_lifespan() -> AsyncGenerator[None, None]:
    """Check connectivity on startup and dispose the pool on shutdown.

    Outside production, missing tables are created from the ORM metadata;
    production schemas come from Alembic only.
    """
    async with engine.begin() as conn:
        # Registers every model on Base.metadata
        from quotedesk.models import Base

        if not settings.is_production:
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Ensured %d tables exist", len(Base.metadata.tables))
    try:
        yield
    finally:
        await engine.dispose()
