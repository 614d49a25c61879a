"""
oishine_backoffice.auth.models

Auth domain models.

Responsibilities:
- Define the authenticated identity type (`AdminPrincipal`) injected into endpoints.
- Define the authorization decision (`AuthResult`) and its failure taxonomy.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from starlette.status import HTTP_401_UNAUTHORIZED

from oishine_backoffice.db.models import Admin, AdminRole


class AuthErrorKind(enum.StrEnum):
    missing_credential = "MissingCredential"
    malformed_credential = "MalformedCredential"
    unknown_subject = "UnknownSubject"
    deactivated = "Deactivated"


@dataclass(frozen=True, slots=True)
class AdminPrincipal:
    """
    Public projection of an active administrator. Never carries the password hash.
    """

    id: str
    email: str
    name: str
    role: AdminRole
    is_active: bool

    @classmethod
    def from_admin(cls, admin: Admin) -> AdminPrincipal:
        return cls(
            id=admin.id,
            email=admin.email,
            name=admin.name,
            role=AdminRole(admin.role),
            is_active=admin.is_active,
        )

    @property
    def is_super_admin(self) -> bool:
        return self.role == AdminRole.super_admin

    def public_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
            "is_active": self.is_active,
        }


@dataclass(frozen=True, slots=True)
class AuthFailure:
    kind: AuthErrorKind
    message: str
    # Set only for MalformedCredential caused by `exp` being in the past.
    expired: bool = False
    status: int = HTTP_401_UNAUTHORIZED


@dataclass(frozen=True, slots=True)
class AuthResult:
    admin: AdminPrincipal | None = None
    failure: AuthFailure | None = None

    @property
    def ok(self) -> bool:
        return self.admin is not None

    @classmethod
    def success(cls, admin: AdminPrincipal) -> AuthResult:
        return cls(admin=admin)

    @classmethod
    def deny(cls, kind: AuthErrorKind, message: str, *, expired: bool = False) -> AuthResult:
        return cls(failure=AuthFailure(kind=kind, message=message, expired=expired))


# --- Module Notes -----------------------------------------------------------
# Every failure kind maps to 401; the kind and message exist for logs and the
# admin UI, callers deny access identically for all of them.
