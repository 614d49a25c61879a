"""
oishine_backoffice.db.repositories.admins

Repository for `Admin` entities.

Responsibilities:
- Lookups by id and by (exact, case-sensitive) email.
- Create admins and apply profile/password/login updates.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from oishine_backoffice.db.models import Admin, AdminRole


class AdminRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, admin_id: str) -> Admin | None:
        return await self._session.get(Admin, admin_id)

    async def get_by_email(self, email: str) -> Admin | None:
        stmt = select(Admin).where(Admin.email == email)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def email_taken_by_other(self, *, email: str, admin_id: str) -> bool:
        stmt = select(Admin.id).where(Admin.email == email, Admin.id != admin_id).limit(1)
        return (await self._session.execute(stmt)).scalar_one_or_none() is not None

    async def create(
        self,
        *,
        email: str,
        name: str,
        password_hash: str,
        role: AdminRole = AdminRole.admin,
        is_active: bool = True,
    ) -> Admin:
        admin = Admin(
            email=email,
            name=name,
            password_hash=password_hash,
            role=role,
            is_active=is_active,
        )
        self._session.add(admin)
        await self._session.flush()
        return admin

    async def record_login(self, admin: Admin) -> None:
        admin.last_login = datetime.now(UTC).replace(tzinfo=None)
        await self._session.flush()

    async def update_profile(self, admin: Admin, *, name: str, email: str) -> Admin:
        admin.name = name
        admin.email = email
        await self._session.flush()
        return admin

    async def set_password_hash(self, admin: Admin, password_hash: str) -> None:
        admin.password_hash = password_hash
        await self._session.flush()

    async def set_active(self, admin_id: str, is_active: bool) -> Admin | None:
        admin = await self._session.get(Admin, admin_id, with_for_update=True)
        if admin is None:
            return None
        admin.is_active = is_active
        await self._session.flush()
        return admin


# --- Module Notes -----------------------------------------------------------
# Admins are never hard-deleted; deactivation (`set_active`) is the only way to
# revoke access to existing credentials.
