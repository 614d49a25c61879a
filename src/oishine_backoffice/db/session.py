"""
oishine_backoffice.db.session

Async SQLAlchemy engine + session factory helpers.

Responsibilities:
- Create the async engine from settings (once per process).
- Create the async sessionmaker with safe defaults.
- Provide a session scope helper for non-request contexts (WebSocket handlers).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from oishine_backoffice.settings import Settings


def create_engine(settings: Settings) -> AsyncEngine:
    # pool_pre_ping helps detect stale connections in long-lived processes.
    return create_async_engine(settings.database_url, pool_pre_ping=True)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False keeps committed rows readable when shaping responses.
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        autoflush=False,
    )


@asynccontextmanager
async def session_scope(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """
    Short-lived session outside the FastAPI dependency system.
    """

    async with session_factory() as session:
        yield session


# --- Module Notes -----------------------------------------------------------
# The HTTP layer uses `api.deps.db_session`; long-lived WebSocket handlers open a
# scope per lookup instead of holding a session for the connection's lifetime.
