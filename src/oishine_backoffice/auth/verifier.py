"""
oishine_backoffice.auth.verifier

Admin credential verification.

Responsibilities:
- Pick the credential from a request (bearer header first, cookie second).
- Validate signature/expiry, resolve the subject, enforce the active flag.
- Return an `AuthResult` instead of raising, so HTTP and WebSocket callers can
  shape the denial themselves.

The verifier is read-only and holds no mutable state: one instance per request
(or per lookup) is cheap, and concurrent calls never coordinate. Database errors
are not caught here; they propagate as infrastructure failures.
"""

from __future__ import annotations

from typing import Any

from oishine_backoffice.auth.jwt import (
    JwtConfig,
    JwtExpiredError,
    JwtMalformedError,
    JwtValidationError,
    decode_and_validate,
)
from oishine_backoffice.auth.models import AdminPrincipal, AuthErrorKind, AuthResult
from oishine_backoffice.db.repositories.admins import AdminRepo

MSG_MISSING = "Token not found"
MSG_MALFORMED = "Token format is invalid"
MSG_INVALID = "Invalid token"
MSG_EXPIRED = "Token expired, please log in again"
MSG_UNKNOWN = "Admin not found"
MSG_DEACTIVATED = "Admin account is inactive"

_BEARER_PREFIX = "bearer "


def bearer_token(authorization: str | None) -> str | None:
    """
    Extract `<token>` from an `Authorization: Bearer <token>` header value.
    """

    if not authorization or not authorization.lower().startswith(_BEARER_PREFIX):
        return None
    token = authorization[len(_BEARER_PREFIX) :].strip()
    return token or None


def select_credential(bearer: str | None, cookie: str | None) -> str | None:
    # The header wins whenever it carries a token, even if a cookie is also present.
    if bearer:
        return bearer
    return cookie or None


class AdminVerifier:
    def __init__(self, *, cfg: JwtConfig, admins: AdminRepo) -> None:
        self._cfg = cfg
        self._admins = admins

    async def verify(self, token: str | None) -> AuthResult:
        if not token:
            return AuthResult.deny(AuthErrorKind.missing_credential, MSG_MISSING)

        try:
            claims = decode_and_validate(cfg=self._cfg, token=token)
        except JwtExpiredError:
            return AuthResult.deny(
                AuthErrorKind.malformed_credential, MSG_EXPIRED, expired=True
            )
        except JwtMalformedError:
            return AuthResult.deny(AuthErrorKind.malformed_credential, MSG_MALFORMED)
        except JwtValidationError:
            return AuthResult.deny(AuthErrorKind.malformed_credential, MSG_INVALID)

        subject = _subject(claims)
        if subject is None:
            return AuthResult.deny(AuthErrorKind.malformed_credential, MSG_INVALID)

        admin = await self._admins.get(subject)
        if admin is None:
            return AuthResult.deny(AuthErrorKind.unknown_subject, MSG_UNKNOWN)
        if not admin.is_active:
            return AuthResult.deny(AuthErrorKind.deactivated, MSG_DEACTIVATED)

        return AuthResult.success(AdminPrincipal.from_admin(admin))


def _subject(claims: dict[str, Any]) -> str | None:
    sub = claims.get("sub")
    if not isinstance(sub, str) or not sub:
        return None
    return sub


# --- Module Notes -----------------------------------------------------------
# FastAPI routes reach this through `auth.deps.get_current_admin`; the realtime
# router calls it directly when a connection asks for the admin topic.
