"""
oishine_backoffice.api.routers.admin_auth

Admin session endpoints.

Responsibilities:
- Login: credential check, token in the body and as an http-only cookie.
- Logout: unconditional cookie clearing.
- Me: the verified admin's public projection.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_400_BAD_REQUEST

from oishine_backoffice.api.deps import db_session, settings_dep
from oishine_backoffice.auth.deps import get_current_admin
from oishine_backoffice.auth.models import AdminPrincipal
from oishine_backoffice.services.auth_service import AuthService
from oishine_backoffice.settings import Settings

router = APIRouter(prefix="/v1/admin/auth", tags=["admin-auth"])


class LoginRequest(BaseModel):
    # Optional so that missing fields get the same 400 message as empty ones.
    email: str | None = Field(default=None, max_length=320)
    password: str | None = Field(default=None, max_length=256)


class AdminUserOut(BaseModel):
    id: str
    email: str
    name: str
    role: str


class LoginResponse(BaseModel):
    success: bool = True
    token: str
    user: AdminUserOut


def _set_token_cookie(response: Response, settings: Settings, token: str, max_age: int) -> None:
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=max_age,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> LoginResponse:
    if not body.email or not body.password:
        raise HTTPException(
            status_code=HTTP_400_BAD_REQUEST, detail="Email and password are required"
        )

    result = await AuthService(session=session, settings=settings).login(
        email=body.email, password=body.password
    )
    _set_token_cookie(response, settings, result.token, settings.token_ttl_hours * 3600)
    return LoginResponse(
        token=result.token,
        user=AdminUserOut(
            id=result.admin.id,
            email=result.admin.email,
            name=result.admin.name,
            role=result.admin.role.value,
        ),
    )


@router.post("/logout")
async def logout(response: Response, settings: Settings = Depends(settings_dep)) -> dict[str, Any]:
    # No auth dependency: an absent, expired or malformed token must not block logout.
    _set_token_cookie(response, settings, "", 0)
    return {"success": True, "message": "Logout successful"}


@router.get("/me")
async def me(admin: AdminPrincipal = Depends(get_current_admin)) -> dict[str, Any]:
    return {"success": True, "user": admin.public_dict()}


# --- Module Notes -----------------------------------------------------------
# Login failures come back as ServiceError (401) and are rendered by `api.errors`.
