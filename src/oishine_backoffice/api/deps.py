"""
oishine_backoffice.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings, DB sessions and the broadcaster.
- Encapsulate app.state access patterns (settings/sessionmaker/broadcaster).
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from oishine_backoffice.realtime.broadcaster import Broadcaster
from oishine_backoffice.settings import Settings


def settings_dep(request: Request) -> Settings:
    # The settings instance passed to `create_app` is the single source of truth.
    return request.app.state.settings


def broadcaster_dep(request: Request) -> Broadcaster:
    return request.app.state.broadcaster


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    # Created in the app lifespan (`oishine_backoffice.api.app.create_app`).
    return request.app.state.sessionmaker


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Commit is explicit in services/routers; anything
    # uncommitted is rolled back when the session closes.
    async with session_factory() as session:
        yield session


# --- Module Notes -----------------------------------------------------------
# WebSocket handlers cannot use `Request`; they read the same objects from
# `websocket.app.state` directly.
