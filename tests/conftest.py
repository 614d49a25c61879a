"""
tests.conftest

Shared fixtures: test settings on a temporary SQLite file, a started app, an
httpx client bound to it, and helpers to seed admins and log in.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from oishine_backoffice.api.app import create_app
from oishine_backoffice.auth.passwords import hash_password
from oishine_backoffice.db.models import Admin, AdminRole
from oishine_backoffice.db.repositories.admins import AdminRepo
from oishine_backoffice.settings import Settings

TEST_SECRET = "test-secret-0123456789abcdef0123456789"


def make_settings(tmp_path: Path, **overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "env": "test",
        "jwt_secret": TEST_SECRET,
        "database_url": f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return make_settings(tmp_path)


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    application = create_app(settings=settings)
    # httpx's ASGITransport does not run the lifespan; drive it explicitly.
    async with application.router.lifespan_context(application):
        yield application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def seed_admin(
    app: FastAPI,
    *,
    email: str = "admin@oishine.com",
    password: str = "admin123",
    name: str = "Admin OISHINE",
    role: AdminRole = AdminRole.super_admin,
    is_active: bool = True,
) -> Admin:
    async with app.state.sessionmaker() as session:
        admin = await AdminRepo(session).create(
            email=email,
            name=name,
            password_hash=hash_password(password, rounds=4),
            role=role,
            is_active=is_active,
        )
        await session.commit()
        return admin


async def set_admin_active(app: FastAPI, admin_id: str, is_active: bool) -> None:
    async with app.state.sessionmaker() as session:
        await AdminRepo(session).set_active(admin_id, is_active)
        await session.commit()


async def login(
    client: httpx.AsyncClient, email: str = "admin@oishine.com", password: str = "admin123"
) -> str:
    r = await client.post("/v1/admin/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    # Tests pass credentials explicitly; keep the cookie jar out of the picture.
    client.cookies.clear()
    return r.json()["token"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
