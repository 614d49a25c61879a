"""
tests.test_admin_auth_api

Login / logout / me / settings endpoints through the real app.
"""

from __future__ import annotations

import httpx
import jwt
import pytest
from fastapi import FastAPI
from sqlalchemy.exc import OperationalError

from oishine_backoffice.db.models import AdminRole
from oishine_backoffice.db.repositories.admins import AdminRepo
from oishine_backoffice.settings import Settings

from conftest import bearer, login, seed_admin, set_admin_active


def _set_cookie(r: httpx.Response) -> str:
    return r.headers["set-cookie"].lower()


@pytest.mark.asyncio
async def test_login_with_bootstrapped_super_admin(
    app: FastAPI, client: httpx.AsyncClient, settings: Settings
) -> None:
    r = await client.post("/v1/setup/admin")
    assert r.status_code == 200
    admin_id = r.json()["id"]

    r = await client.post(
        "/v1/admin/auth/login", json={"email": "admin@oishine.com", "password": "admin123"}
    )
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["user"] == {
        "id": admin_id,
        "email": "admin@oishine.com",
        "name": "Admin OISHINE",
        "role": "SUPER_ADMIN",
    }
    claims = jwt.decode(
        body["token"],
        settings.jwt_secret,
        algorithms=[settings.jwt_alg],
        audience=settings.jwt_audience,
        issuer=settings.jwt_issuer,
    )
    assert claims["sub"] == admin_id
    assert claims["role"] == "SUPER_ADMIN"
    assert claims["exp"] - claims["iat"] == 24 * 3600

    cookie = _set_cookie(r)
    assert cookie.startswith(f"admin-token={body['token'].lower()}")
    assert "httponly" in cookie
    assert "samesite=lax" in cookie
    assert "path=/" in cookie
    assert "max-age=86400" in cookie
    assert "; secure" not in cookie


@pytest.mark.asyncio
async def test_bootstrap_twice_is_rejected(client: httpx.AsyncClient) -> None:
    assert (await client.post("/v1/setup/admin")).status_code == 200
    r = await client.post("/v1/setup/admin")
    assert r.status_code == 400
    assert r.json() == {"error": "Admin user already exists", "status": 400}


@pytest.mark.asyncio
async def test_login_updates_last_login(app: FastAPI, client: httpx.AsyncClient) -> None:
    admin = await seed_admin(app)
    assert admin.last_login is None
    await login(client)

    async with app.state.sessionmaker() as session:
        refreshed = await AdminRepo(session).get(admin.id)
    assert refreshed.last_login is not None


@pytest.mark.asyncio
async def test_wrong_password_and_unknown_email_look_identical(
    app: FastAPI, client: httpx.AsyncClient
) -> None:
    await seed_admin(app)

    wrong_pw = await client.post(
        "/v1/admin/auth/login", json={"email": "admin@oishine.com", "password": "nope"}
    )
    unknown = await client.post(
        "/v1/admin/auth/login", json={"email": "nobody@oishine.com", "password": "admin123"}
    )
    # Email match is exact and case-sensitive.
    wrong_case = await client.post(
        "/v1/admin/auth/login", json={"email": "ADMIN@oishine.com", "password": "admin123"}
    )

    for r in (wrong_pw, unknown, wrong_case):
        assert r.status_code == 401
        assert r.json() == {"error": "Invalid email or password", "status": 401}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [{}, {"email": "admin@oishine.com"}, {"password": "admin123"}, {"email": "", "password": ""}],
)
async def test_login_requires_both_fields(client: httpx.AsyncClient, payload: dict) -> None:
    r = await client.post("/v1/admin/auth/login", json=payload)
    assert r.status_code == 400
    assert r.json()["error"] == "Email and password are required"


@pytest.mark.asyncio
async def test_inactive_admin_cannot_login(app: FastAPI, client: httpx.AsyncClient) -> None:
    await seed_admin(app, is_active=False)
    r = await client.post(
        "/v1/admin/auth/login", json={"email": "admin@oishine.com", "password": "admin123"}
    )
    assert r.status_code == 401
    assert r.json()["error"] == "Admin account is inactive"


@pytest.mark.asyncio
async def test_me_with_header_or_cookie(app: FastAPI, client: httpx.AsyncClient) -> None:
    admin = await seed_admin(app, role=AdminRole.admin)
    token = await login(client)

    r = await client.get("/v1/admin/auth/me", headers=bearer(token))
    assert r.status_code == 200
    assert r.json()["user"] == {
        "id": admin.id,
        "email": admin.email,
        "name": admin.name,
        "role": "ADMIN",
        "is_active": True,
    }

    r = await client.get("/v1/admin/auth/me", headers={"Cookie": f"admin-token={token}"})
    assert r.status_code == 200
    assert r.json()["user"]["id"] == admin.id


@pytest.mark.asyncio
async def test_header_wins_over_cookie(app: FastAPI, client: httpx.AsyncClient) -> None:
    await seed_admin(app)
    token = await login(client)

    r = await client.get(
        "/v1/admin/auth/me",
        headers={**bearer(token), "Cookie": "admin-token=garbage"},
    )
    assert r.status_code == 200

    r = await client.get(
        "/v1/admin/auth/me",
        headers={**bearer("garbage"), "Cookie": f"admin-token={token}"},
    )
    assert r.status_code == 401
    assert r.json() == {"error": "Token format is invalid", "status": 401}


@pytest.mark.asyncio
async def test_protected_route_failures(app: FastAPI, client: httpx.AsyncClient) -> None:
    admin = await seed_admin(app)
    token = await login(client)

    r = await client.get("/v1/admin/auth/me")
    assert r.status_code == 401
    assert r.json() == {"error": "Token not found", "status": 401}

    await set_admin_active(app, admin.id, False)
    r = await client.get("/v1/admin/auth/me", headers=bearer(token))
    assert r.status_code == 401
    assert r.json() == {"error": "Admin account is inactive", "status": 401}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"Authorization": "Bearer not-a-jwt"},
        {"Cookie": "admin-token=expired.or.broken"},
    ],
)
async def test_logout_always_succeeds(client: httpx.AsyncClient, headers: dict) -> None:
    r = await client.post("/v1/admin/auth/logout", headers=headers)
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Logout successful"}
    cookie = _set_cookie(r)
    assert cookie.startswith("admin-token=")
    assert "max-age=0" in cookie
    assert "path=/" in cookie


@pytest.mark.asyncio
async def test_change_password(app: FastAPI, client: httpx.AsyncClient) -> None:
    await seed_admin(app)
    token = await login(client)

    r = await client.put(
        "/v1/admin/settings/password",
        headers=bearer(token),
        json={"current_password": "wrong", "new_password": "newsecret"},
    )
    assert r.status_code == 400
    assert r.json()["error"] == "Current password is incorrect"

    r = await client.put(
        "/v1/admin/settings/password",
        headers=bearer(token),
        json={"current_password": "admin123", "new_password": "short"},
    )
    assert r.status_code == 400
    assert "at least 6 characters" in r.json()["error"]

    r = await client.put(
        "/v1/admin/settings/password",
        headers=bearer(token),
        json={"current_password": "admin123", "new_password": "newsecret"},
    )
    assert r.status_code == 200
    assert r.json()["success"] is True

    old = await client.post(
        "/v1/admin/auth/login", json={"email": "admin@oishine.com", "password": "admin123"}
    )
    assert old.status_code == 401
    await login(client, password="newsecret")


@pytest.mark.asyncio
async def test_change_password_requires_auth(client: httpx.AsyncClient) -> None:
    r = await client.put(
        "/v1/admin/settings/password",
        json={"current_password": "admin123", "new_password": "newsecret"},
    )
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_update_profile(app: FastAPI, client: httpx.AsyncClient) -> None:
    await seed_admin(app)
    await seed_admin(app, email="other@oishine.com", name="Other", role=AdminRole.admin)
    token = await login(client)

    r = await client.put(
        "/v1/admin/settings/profile",
        headers=bearer(token),
        json={"name": "Boss", "email": "other@oishine.com"},
    )
    assert r.status_code == 400
    assert r.json()["error"] == "Email is already taken by another admin"

    r = await client.put("/v1/admin/settings/profile", headers=bearer(token), json={"name": "x"})
    assert r.status_code == 400

    r = await client.put(
        "/v1/admin/settings/profile",
        headers=bearer(token),
        json={"name": "Boss", "email": "boss@oishine.com"},
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["name"] == "Boss"
    assert data["email"] == "boss@oishine.com"
    assert "password_hash" not in data

    # The credential keys on the admin id, so it survives an email change.
    r = await client.get("/v1/admin/auth/me", headers=bearer(token))
    assert r.json()["user"]["email"] == "boss@oishine.com"


@pytest.mark.asyncio
async def test_database_failure_during_verification_is_500(
    app: FastAPI, monkeypatch: pytest.MonkeyPatch
) -> None:
    await seed_admin(app)
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        token = await login(c)

        async def unavailable(self: AdminRepo, admin_id: str) -> None:
            raise OperationalError("SELECT admins", {}, Exception("database is locked"))

        monkeypatch.setattr(AdminRepo, "get", unavailable)
        r = await c.get("/v1/admin/auth/me", headers=bearer(token))

    assert r.status_code == 500
    assert r.json() == {"error": "Internal server error", "status": 500}
