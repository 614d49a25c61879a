"""
oishine_backoffice.db.init_db

DB initialization helpers (dev/test convenience).
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from oishine_backoffice.db import models  # noqa: F401  # register tables on Base.metadata
from oishine_backoffice.db.base import Base


async def init_db(engine: AsyncEngine) -> None:
    """
    Create missing tables. Production deployments run Alembic migrations instead.
    """

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
