"""
oishine_backoffice.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Convert a bearer header or `admin-token` cookie into a typed `AdminPrincipal`.
- Enforce role checks via reusable dependency factories.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_403_FORBIDDEN

from oishine_backoffice.api.deps import db_session, settings_dep
from oishine_backoffice.auth.jwt import JwtConfig
from oishine_backoffice.auth.models import AdminPrincipal
from oishine_backoffice.auth.verifier import AdminVerifier, select_credential
from oishine_backoffice.db.models import AdminRole
from oishine_backoffice.db.repositories.admins import AdminRepo
from oishine_backoffice.observability.logging import get_logger
from oishine_backoffice.settings import Settings

log = get_logger(__name__)

_bearer = HTTPBearer(auto_error=False)


async def get_current_admin(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> AdminPrincipal:
    token = select_credential(
        creds.credentials if creds is not None else None,
        request.cookies.get(settings.auth_cookie_name),
    )
    verifier = AdminVerifier(cfg=JwtConfig.from_settings(settings), admins=AdminRepo(session))
    result = await verifier.verify(token)
    if result.failure is not None:
        log.info(
            "admin_auth_denied",
            kind=result.failure.kind.value,
            expired=result.failure.expired,
        )
        raise HTTPException(status_code=result.failure.status, detail=result.failure.message)
    assert result.admin is not None
    return result.admin


def require_roles(*required: AdminRole):
    required_set = frozenset(required)

    def _dep(admin: AdminPrincipal = Depends(get_current_admin)) -> AdminPrincipal:
        # SUPER_ADMIN passes every role check.
        if admin.is_super_admin:
            return admin
        if admin.role not in required_set:
            raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Insufficient role")
        return admin

    return _dep


# --- Module Notes -----------------------------------------------------------
# `get_current_admin` is cached per request by FastAPI, so routes can use both
# `dependencies=[Depends(require_roles(...))]` and a `get_current_admin` parameter
# without verifying twice.
