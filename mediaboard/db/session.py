# mediaboard/db/session.py
from __future__ import annotations

"""
Mediaboard — Database Engine & Session Dependency

- One async engine/session factory for the API, Alembic and tests.
- PostgreSQL (asyncpg) in production; SQLite (aiosqlite) works for local runs.
"""

from typing import Any, AsyncGenerator, Dict, Optional
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)

from mediaboard.core.config import settings

logger = logging.getLogger(__name__)

ASYNC_DATABASE_URL: str = settings.ASYNC_DATABASE_URL

# Pool knobs (ignored for SQLite, which uses its own pool classes)
_POOL_PRE_PING = True
_POOL_RECYCLE = 1800
_POOL_TIMEOUT = 30
_POOL_SIZE = 10
_MAX_OVERFLOW = 20


def _engine_kwargs(url: str) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {"echo": settings.DB_ECHO, "pool_pre_ping": _POOL_PRE_PING}
    if not url.startswith("sqlite"):
        kwargs.update(
            pool_recycle=_POOL_RECYCLE,
            pool_size=_POOL_SIZE,
            max_overflow=_MAX_OVERFLOW,
            pool_timeout=_POOL_TIMEOUT,
        )
    return kwargs


# ───────────────────────────────────────────────────────────────
# ⚡ ASYNC ENGINE
# ───────────────────────────────────────────────────────────────

async_engine: AsyncEngine = create_async_engine(ASYNC_DATABASE_URL, **_engine_kwargs(ASYNC_DATABASE_URL))

async_session_maker = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an async SQLAlchemy session."""
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def db_healthcheck(session: Optional[AsyncSession] = None) -> bool:
    """Quick SELECT 1 to verify DB connectivity (used by /readyz)."""
    try:
        if session is not None:
            await session.execute(text("SELECT 1"))
        else:
            async with async_engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("DB healthcheck failed")
        return False


__all__ = [
    "async_engine",
    "async_session_maker",
    "get_async_db",
    "db_healthcheck",
]
