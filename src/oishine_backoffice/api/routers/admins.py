from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from oishine_backoffice.api.deps import db_session, settings_dep
from oishine_backoffice.auth.deps import require_roles
from oishine_backoffice.auth.models import AdminPrincipal
from oishine_backoffice.db.models import AdminRole
from oishine_backoffice.services.auth_service import AuthService
from oishine_backoffice.settings import Settings

router = APIRouter(prefix="/v1/admin/admins", tags=["admins"])


class ActiveUpdateRequest(BaseModel):
    is_active: bool


@router.put("/{admin_id}/active")
async def set_admin_active(
    admin_id: str,
    body: ActiveUpdateRequest,
    actor: AdminPrincipal = Depends(require_roles(AdminRole.super_admin)),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    # Existing credentials of a deactivated admin fail their next verification.
    admin = await AuthService(session=session, settings=settings).set_active(
        actor_id=actor.id, admin_id=admin_id, is_active=body.is_active
    )
    return {"success": True, "data": AdminPrincipal.from_admin(admin).public_dict()}
