"""
oishine_backoffice.services.auth_service

Admin session lifecycle service.

Responsibilities:
- Login: generic failure message for unknown email and wrong password alike,
  `last_login` update, credential minting.
- Password change: verify current password, hash and persist the new one.
- Profile update with email uniqueness across admins.
- Activation/deactivation of other admins.
- Bootstrap of the default SUPER_ADMIN.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_404_NOT_FOUND

from oishine_backoffice.auth.jwt import JwtConfig, issue_token
from oishine_backoffice.auth.models import AdminPrincipal
from oishine_backoffice.auth.passwords import hash_password, verify_password
from oishine_backoffice.db.models import Admin, AdminRole
from oishine_backoffice.db.repositories.admins import AdminRepo
from oishine_backoffice.observability.logging import get_logger
from oishine_backoffice.services.errors import ServiceError
from oishine_backoffice.settings import Settings

log = get_logger(__name__)

MSG_INVALID_LOGIN = "Invalid email or password"
MSG_INACTIVE = "Admin account is inactive"
MIN_PASSWORD_LENGTH = 6


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    # Compared against when the email is unknown so both failures cost one bcrypt check.
    return hash_password("not-a-real-password")


@dataclass(frozen=True, slots=True)
class LoginResult:
    token: str
    admin: AdminPrincipal


class AuthService:
    def __init__(self, *, session: AsyncSession, settings: Settings) -> None:
        self._session = session
        self._settings = settings
        self._admins = AdminRepo(session)

    async def login(self, *, email: str, password: str) -> LoginResult:
        admin = await self._admins.get_by_email(email)
        if admin is None:
            verify_password(password, _dummy_hash())
            log.info("admin_login_failed", reason="unknown_email")
            raise ServiceError(MSG_INVALID_LOGIN, status_code=HTTP_401_UNAUTHORIZED)
        if not verify_password(password, admin.password_hash):
            log.info("admin_login_failed", reason="bad_password", admin_id=admin.id)
            raise ServiceError(MSG_INVALID_LOGIN, status_code=HTTP_401_UNAUTHORIZED)
        if not admin.is_active:
            log.info("admin_login_failed", reason="inactive", admin_id=admin.id)
            raise ServiceError(MSG_INACTIVE, status_code=HTTP_401_UNAUTHORIZED)

        await self._admins.record_login(admin)
        await self._session.commit()

        token = issue_token(
            cfg=JwtConfig.from_settings(self._settings),
            subject=admin.id,
            role=admin.role.value,
            email=admin.email,
            name=admin.name,
            ttl=timedelta(hours=self._settings.token_ttl_hours),
        )
        log.info("admin_login", admin_id=admin.id)
        return LoginResult(token=token, admin=AdminPrincipal.from_admin(admin))

    async def change_password(
        self, *, admin_id: str, current_password: str, new_password: str
    ) -> None:
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ServiceError(
                f"New password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )
        admin = await self._require(admin_id)
        if not verify_password(current_password, admin.password_hash):
            raise ServiceError("Current password is incorrect")
        try:
            new_hash = hash_password(new_password)
        except ValueError as e:
            raise ServiceError(str(e)) from e

        await self._admins.set_password_hash(admin, new_hash)
        await self._session.commit()
        log.info("admin_password_changed", admin_id=admin.id)

    async def update_profile(self, *, admin_id: str, name: str, email: str) -> Admin:
        admin = await self._require(admin_id)
        if await self._admins.email_taken_by_other(email=email, admin_id=admin.id):
            raise ServiceError("Email is already taken by another admin")
        await self._admins.update_profile(admin, name=name, email=email)
        await self._session.commit()
        log.info("admin_profile_updated", admin_id=admin.id)
        return admin

    async def set_active(self, *, actor_id: str, admin_id: str, is_active: bool) -> Admin:
        if admin_id == actor_id and not is_active:
            raise ServiceError("You cannot deactivate your own account")
        admin = await self._admins.set_active(admin_id, is_active)
        if admin is None:
            raise ServiceError("Admin not found", status_code=HTTP_404_NOT_FOUND)
        await self._session.commit()
        log.info("admin_active_changed", admin_id=admin.id, is_active=is_active, by=actor_id)
        return admin

    async def bootstrap_admin(self) -> Admin:
        email = self._settings.bootstrap_admin_email
        if await self._admins.get_by_email(email) is not None:
            raise ServiceError("Admin user already exists")
        admin = await self._admins.create(
            email=email,
            name=self._settings.bootstrap_admin_name,
            password_hash=hash_password(self._settings.bootstrap_admin_password),
            role=AdminRole.super_admin,
        )
        await self._session.commit()
        log.info("admin_bootstrapped", admin_id=admin.id)
        return admin

    async def _require(self, admin_id: str) -> Admin:
        admin = await self._admins.get(admin_id)
        if admin is None:
            raise ServiceError("Admin not found", status_code=HTTP_404_NOT_FOUND)
        return admin


# --- Module Notes -----------------------------------------------------------
# Login and verification share the trust boundary but not the code path: login is
# the only place that writes (`last_login`), verification never does.
