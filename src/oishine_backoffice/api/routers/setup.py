from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_404_NOT_FOUND

from oishine_backoffice.api.deps import db_session, settings_dep
from oishine_backoffice.services.auth_service import AuthService
from oishine_backoffice.settings import Settings

router = APIRouter(prefix="/v1/setup", tags=["setup"])


@router.post("/admin")
async def setup_admin(
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    # Provisioning convenience; production admins are created out of band.
    if settings.env == "prod":
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Not found")

    admin = await AuthService(session=session, settings=settings).bootstrap_admin()
    return {"success": True, "message": "Admin user created successfully", "id": admin.id}
