from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_400_BAD_REQUEST

from oishine_backoffice.api.deps import db_session, settings_dep
from oishine_backoffice.auth.deps import get_current_admin
from oishine_backoffice.auth.models import AdminPrincipal
from oishine_backoffice.services.auth_service import AuthService
from oishine_backoffice.settings import Settings

router = APIRouter(prefix="/v1/admin/settings", tags=["admin-settings"])


class ProfileUpdateRequest(BaseModel):
    name: str | None = Field(default=None, max_length=256)
    email: str | None = Field(default=None, max_length=320)


class PasswordChangeRequest(BaseModel):
    current_password: str | None = Field(default=None, max_length=256)
    new_password: str | None = Field(default=None, max_length=256)


@router.put("/profile")
async def update_profile(
    body: ProfileUpdateRequest,
    admin: AdminPrincipal = Depends(get_current_admin),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    name = (body.name or "").strip()
    email = (body.email or "").strip()
    if not name or not email:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Name and email are required")

    updated = await AuthService(session=session, settings=settings).update_profile(
        admin_id=admin.id, name=name, email=email
    )
    return {
        "success": True,
        "message": "Profile updated successfully",
        "data": {
            **AdminPrincipal.from_admin(updated).public_dict(),
            "created_at": updated.created_at.isoformat(),
            "updated_at": updated.updated_at.isoformat(),
        },
    }


@router.put("/password")
async def change_password(
    body: PasswordChangeRequest,
    admin: AdminPrincipal = Depends(get_current_admin),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    if not body.current_password or not body.new_password:
        raise HTTPException(
            status_code=HTTP_400_BAD_REQUEST,
            detail="Current password and new password are required",
        )

    await AuthService(session=session, settings=settings).change_password(
        admin_id=admin.id,
        current_password=body.current_password,
        new_password=body.new_password,
    )
    return {"success": True, "message": "Password updated successfully"}
