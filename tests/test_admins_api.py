"""
tests.test_admins_api

Admin activation: SUPER_ADMIN-only, and deactivation revokes existing tokens.
"""

from __future__ import annotations

import httpx
import pytest
from fastapi import FastAPI

from oishine_backoffice.db.models import AdminRole

from conftest import bearer, login, seed_admin


@pytest.mark.asyncio
async def test_plain_admin_gets_403(app: FastAPI, client: httpx.AsyncClient) -> None:
    boss = await seed_admin(app)
    await seed_admin(app, email="staff@oishine.com", name="Staff", role=AdminRole.admin)
    staff_token = await login(client, email="staff@oishine.com")

    r = await client.put(
        f"/v1/admin/admins/{boss.id}/active", headers=bearer(staff_token), json={"is_active": False}
    )
    assert r.status_code == 403
    assert r.json() == {"error": "Insufficient role", "status": 403}


@pytest.mark.asyncio
async def test_super_admin_deactivates_and_reactivates(
    app: FastAPI, client: httpx.AsyncClient
) -> None:
    await seed_admin(app)
    staff = await seed_admin(app, email="staff@oishine.com", name="Staff", role=AdminRole.admin)
    boss_token = await login(client)
    staff_token = await login(client, email="staff@oishine.com")

    r = await client.put(
        f"/v1/admin/admins/{staff.id}/active", headers=bearer(boss_token), json={"is_active": False}
    )
    assert r.status_code == 200
    assert r.json()["data"]["is_active"] is False

    # The staff token still has a valid signature but no longer verifies.
    r = await client.get("/v1/admin/auth/me", headers=bearer(staff_token))
    assert r.json() == {"error": "Admin account is inactive", "status": 401}

    r = await client.put(
        f"/v1/admin/admins/{staff.id}/active", headers=bearer(boss_token), json={"is_active": True}
    )
    assert r.status_code == 200
    r = await client.get("/v1/admin/auth/me", headers=bearer(staff_token))
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_activation_errors(app: FastAPI, client: httpx.AsyncClient) -> None:
    boss = await seed_admin(app)
    token = await login(client)

    r = await client.put(
        f"/v1/admin/admins/{boss.id}/active", headers=bearer(token), json={"is_active": False}
    )
    assert r.status_code == 400
    assert r.json()["error"] == "You cannot deactivate your own account"

    r = await client.put(
        "/v1/admin/admins/missing/active", headers=bearer(token), json={"is_active": True}
    )
    assert r.status_code == 404

    r = await client.put("/v1/admin/admins/missing/active", json={"is_active": True})
    assert r.status_code == 401
